"""Parsing of the seek information lines ("iset seekinfo 1"):
    <s> 8 w=visar ti=02 rt=2194  t=4 i=0 r=r tp=suicide c=? rr=0-9999 a=t f=f
    <sn> is the same, <sr> 5 17 lists removed seeks, <sc> clears them all.
"""

import re

from icsengine import events
from icsengine.parser import GrammarError, to_int

SEEK_re = re.compile(r'^<(?P<tag>sn?)> (?P<index>\d+)(?P<items>(?: +\S+=\S*)*)\s*$')
_rating_re = re.compile(r'^(\d+)([EP]?)$')
_range_re = re.compile(r'^(\d+)-(\d+)$')


def _titles(value):
    # A hex bit field.
    try:
        return int(value, 16)
    except ValueError:
        raise GrammarError('Bad seek titles: %r' % value) from None


def seek(line):
    matches = SEEK_re.match(line)
    if not matches:
        raise GrammarError('Bad seek line: %r' % line)

    items = {}
    for item in matches.group('items').split():
        key, value = item.split('=', 1)
        items[key] = value

    try:
        rating = _rating_re.match(items['rt'])
        rating_range = _range_re.match(items.get('rr', '0-9999'))
        if not rating or not rating_range:
            raise GrammarError('Bad seek line: %r' % line)

        return events.SeekAdded(
            index=int(matches.group('index')),
            name=items['w'],
            titles=_titles(items.get('ti', '00')),
            rating=int(rating.group(1)),
            rating_type=rating.group(2),
            time=to_int(items['t'], 'seek time'),
            increment=to_int(items['i'], 'seek increment'),
            rated=items['r'] == 'r',
            match_type=items['tp'],
            color=items.get('c', '?'),
            min_rating=int(rating_range.group(1)),
            max_rating=int(rating_range.group(2)),
            automatic=items.get('a', 't') == 't',
            formula_checked=items.get('f', 'f') == 't',
            new=matches.group('tag') == 'sn')
    except KeyError as e:
        raise GrammarError('Seek line without %s: %r' % (e, line)) from None


def seeks_removed(line):
    return events.SeeksRemoved(tuple(to_int(i, 'seek index') for i in line.split()[1:]))
