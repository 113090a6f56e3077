"""Parsers for the server output. grammar holds the ordered list of line
recognizers, game_info and seeks parse the structured (<12>, <g1>, <s>, ...)
lines the grammar recognizes.
"""


class GrammarError(ValueError):
    """Raised when a line matched a recognizer but a captured value could not
    be converted. This means the grammar and the server disagree, it is a bug
    and not something to recover from.
    """


def to_int(value, what='value'):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise GrammarError('Bad %s: %r' % (what, value)) from None
