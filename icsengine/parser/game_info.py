"""Parsing of the structured game lines: style 12 boards (<12>), delta boards
(<d1>, "iset compressmove 1") and game information (<g1>, "iset gameinfo 1").
Each function takes the whole line and returns the corresponding event, or
raises GrammarError if the line does not have the expected shape.
"""

import re

from icsengine import events
from icsengine.parser import GrammarError, to_int

STYLE12_re = re.compile(r'^<12> (?P<ranks>(?:[-A-Za-z]{8} ){7}[-A-Za-z]{8}) (?P<to_move>[BW]) (?P<ep_file>-1|[0-7]) (?P<w_k_castle>[01]) (?P<w_q_castle>[01]) (?P<b_k_castle>[01]) (?P<b_q_castle>[01]) (?P<irr_ply>\d+) (?P<game>\d+) (?P<white>\S+) (?P<black>\S+) (?P<relation>-?\d) (?P<time>\d+) (?P<inc>\d+) (?P<w_material>\d+) (?P<b_material>\d+) (?P<w_time>-?\d+) (?P<b_time>-?\d+) (?P<move_num>\d+) (?P<move_coord>\S+) \((?P<move_time>[\d:.]+)\) (?P<move_san>\S+) (?P<flip>[01])(?: (?P<clock_running>[01]) (?P<lag>\d+))?\s*$')

DELTA_re = re.compile(r'^<d1> (?P<game>\d+) (?P<ply>\d+) (?P<move_coord>\S+) (?P<move_san>\S+) (?P<taken>-?\d+) (?P<remaining>-?\d+)\s*$')

GAMEINFO_re = re.compile(r'^<g1> (?P<game>\d+)(?P<items>(?: +\S+=\S*)*)\s*$')
_rating_re = re.compile(r'^(\d+)([EP]?)$')


def _move_time(string):
    # "(1:02.345)" or "(0:06)", the parts are from minutes down to seconds
    # (hours may be there too).
    spam = string.split(':')[::-1]
    total = 0.0
    try:
        for i in range(len(spam)):
            total += float(spam[i]) * 60**i
    except ValueError:
        raise GrammarError('Bad move time: %r' % string) from None
    return total


def style12(line):
    """Parse a style 12 line.

    All the numbers are converted to integers, flags to booleans and
    "none" moves to None. The time of the last move is converted to seconds,
    which works the same with and without the ms ivar (the engine sets it).
    The clocks are left as the server sent them, see events.BoardSnapshot.
    """
    matches = STYLE12_re.match(line)
    if not matches:
        raise GrammarError('Bad style 12 line: %r' % line)

    d = matches.groupdict()

    try:
        relation = events.GameRelation(int(d['relation']))
    except ValueError:
        raise GrammarError('Unknown game relation: %s' % d['relation']) from None

    move_coord = d['move_coord']
    if move_coord == 'none':
        move_coord = None

    move_san = d['move_san']
    if move_san == 'none':
        move_san = None

    if d['clock_running'] is None:
        # Old servers don't send these two.
        clock_running = True
        lag = 0
    else:
        clock_running = d['clock_running'] == '1'
        lag = int(d['lag'])

    return events.BoardSnapshot(
        ranks=d['ranks'],
        to_move=d['to_move'],
        double_pawn_push=int(d['ep_file']),
        white_can_castle_kingside=d['w_k_castle'] == '1',
        white_can_castle_queenside=d['w_q_castle'] == '1',
        black_can_castle_kingside=d['b_k_castle'] == '1',
        black_can_castle_queenside=d['b_q_castle'] == '1',
        reversible_ply=int(d['irr_ply']),
        game_number=int(d['game']),
        white_name=d['white'],
        black_name=d['black'],
        relation=relation,
        initial_time=int(d['time']),
        increment=int(d['inc']),
        white_material=int(d['w_material']),
        black_material=int(d['b_material']),
        white_time=int(d['w_time']),
        black_time=int(d['b_time']),
        move_number=int(d['move_num']),
        verbose_move=move_coord,
        move_time=_move_time(d['move_time']),
        pretty_move=move_san,
        flipped=d['flip'] == '1',
        clock_running=clock_running,
        lag=lag)


def delta_board(line):
    """Parse a <d1> line (a move in a game, without the whole board)."""
    matches = DELTA_re.match(line)
    if not matches:
        raise GrammarError('Bad delta board line: %r' % line)

    d = matches.groupdict()
    return events.BoardDelta(game_number=int(d['game']),
                             ply=int(d['ply']),
                             verbose_move=d['move_coord'],
                             pretty_move=d['move_san'],
                             time_taken=int(d['taken']),
                             remaining_time=int(d['remaining']))


def _pair(value, what):
    # "5,5" style values, white first.
    split = value.split(',')
    if len(split) != 2:
        raise GrammarError('Bad %s: %r' % (what, value))
    return split


def _rating(value):
    # 1586E -> (1586, 'E'), 0 is used for no rating.
    match = _rating_re.match(value)
    if not match:
        raise GrammarError('Bad rating: %r' % value)
    return int(match.group(1)), match.group(2)


def game_info(line):
    """Parse a <g1> line like:
        <g1> 1 p=0 t=blitz r=1 u=0,0 it=5,5 i=8,8 pt=0 rt=1586E,2100 ts=1,0

    Items the server may add later are ignored, items that are missing get
    neutral defaults (ie. a 0 rating).
    """
    matches = GAMEINFO_re.match(line)
    if not matches:
        raise GrammarError('Bad game info line: %r' % line)

    items = {}
    for item in matches.group('items').split():
        key, value = item.split('=', 1)
        items[key] = value

    unregistered = _pair(items.get('u', '0,0'), 'registration')
    initial = _pair(items.get('it', '0,0'), 'initial time')
    increment = _pair(items.get('i', '0,0'), 'increment')
    ratings = [_rating(r) for r in _pair(items.get('rt', '0,0'), 'ratings')]
    timeseal = _pair(items.get('ts', '0,0'), 'timeseal')

    return events.GameInfo(
        game_number=int(matches.group('game')),
        private=to_int(items.get('p', '0'), 'private flag') == 1,
        game_type=items.get('t', ''),
        rated=to_int(items.get('r', '0'), 'rated flag') == 1,
        white_registered=to_int(unregistered[0], 'registration') == 0,
        black_registered=to_int(unregistered[1], 'registration') == 0,
        white_initial=to_int(initial[0], 'initial time'),
        black_initial=to_int(initial[1], 'initial time'),
        white_increment=to_int(increment[0], 'increment'),
        black_increment=to_int(increment[1], 'increment'),
        partner_game=to_int(items.get('pt', '0'), 'partner game'),
        white_rating=ratings[0][0],
        black_rating=ratings[1][0],
        white_rating_type=ratings[0][1],
        black_rating_type=ratings[1][1],
        white_timeseal=to_int(timeseal[0], 'timeseal flag') == 1,
        black_timeseal=to_int(timeseal[1], 'timeseal flag') == 1)
