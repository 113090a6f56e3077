"""One shot line filters. Used to hide the echoes of the commands the
engine sends itself (ie. "Style 12 set." after "set style 12").
"""

import collections


class FilterRegistry(object):
    """A multiset of exact lines. Each registration swallows one occurrence
    of the line, registering the same line twice swallows two.

    NOTE: Not thread safe. The connection only touches it from its delivery
        thread.
    """

    def __init__(self):
        self._lines = collections.Counter()

    def register_once(self, line):
        self._lines[line] += 1

    def take_if_present(self, line):
        """Returns True (and forgets one registration) if the line is
        registered, otherwise False.
        """
        if self._lines[line] <= 0:
            return False
        self._lines[line] -= 1
        if not self._lines[line]:
            del self._lines[line]
        return True

    def clear(self):
        self._lines.clear()

    def __contains__(self, line):
        return self._lines[line] > 0

    def __len__(self):
        return sum(self._lines.values())
