"""The Dispatcher classifies lines with the grammar and hands the events to
the registered functions.
"""

import logging

from icsengine.parser import grammar as _grammar

logger = logging.getLogger(__name__)


class Dispatcher(object):
    """Handles one line at a time:
        1. The first recognizer of the grammar matching the line builds the
           event, all functions registered for the event class are called
           with it (in registration order).
        2. If none of them returned True (or nothing matched), the filters
           get the line. If it is filtered it is dropped quietly.
        3. Otherwise the line goes to the text functions, unmodified.

    So a user can always see the text of things they do not care about, but
    can still hide the echoes of commands sent by the code.

    Functions registered:
        o reg_event(event_class, function): function(event) -> True if
           fully handled.
        o reg_text(function): function(line).
    """

    def __init__(self, filters, grammar=_grammar.GRAMMAR):
        self.grammar = grammar
        self.filters = filters
        self._handlers = {}
        self._text = []

    def reg_event(self, kind, function):
        self._handlers.setdefault(kind, []).append(function)

    def unreg_event(self, function):
        """Unregister function from all event classes."""
        for functions in self._handlers.values():
            while function in functions:
                functions.remove(function)

    def reg_text(self, function):
        self._text.append(function)

    def unreg_text(self, function):
        while function in self._text:
            self._text.remove(function)

    def handle(self, line):
        """Process one line. Returns the event it was recognized as or None.
        GrammarError is raised if a recognized line could not be parsed.
        """
        event = None
        recognizer, match = _grammar.recognize(line, self.grammar)
        if recognizer is not None:
            event = recognizer.extract(match)
            if self.fire(event):
                return event

        if self.filters.take_if_present(line):
            logger.debug('Filtered: %r', line)
            return event

        if not self._text:
            logger.debug('Unclaimed line: %r', line)
        # Copy, functions may unregister themselves.
        for function in list(self._text):
            function(line)
        return event

    def fire(self, event):
        """Give the event to its functions, returns True if one of them
        handled it fully.
        """
        handled = False
        for function in list(self._handlers.get(type(event), ())):
            if function(event):
                handled = True
        return handled
