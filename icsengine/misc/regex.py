"""Module solely to store some regexes in to help build the grammar. Strings
here are unparsed so they can be glued together into bigger patterns.
"""

import re

HANDLE  = r'[A-Za-z]{3,17}'
TAGS    = r'\([A-Z*()]*\)'
CHANNEL = r'\((\d+)\)'
GAME    = r'\[(\d+)\]'

# The prompt, possibly with the time stamp "set ptime 1" gives.
PROMPT = 'fics% '
PROMPT_re = re.compile(r'(?:(?P<hour>\d\d):(?P<minute>\d\d)_)?' + re.escape(PROMPT))


def build(pattern):
    """Compile a pattern with placeholders:
        o %(H)s a handle
        o %(T)s the title decoration, ie. "(TM)(*)"
        o %(C)s a channel number in parenthesis (one group)
        o %(G)s a game number in brackets (one group)
    """
    return re.compile(pattern % {'H': HANDLE, 'T': TAGS, 'C': CHANNEL, 'G': GAME})
