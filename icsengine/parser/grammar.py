"""The grammar of the server output, as one ordered table of recognizers.

A Recognizer is (name, pattern, extract). The pattern is matched against the
start of a line, extract gets the match object and returns the event. The
order of GRAMMAR is the priority: a line belongs to the first recognizer that
matches, so more specific patterns must come before the patterns they are
a special case of:
    o Structured lines (<12>, <g1>, ...) first. Nothing in chat starts
       with these tags.
    o Game lifecycle lines.
    o Chat. Channel tells, kibitzes and whispers before the other tells,
       tshouts before qtells (a tshout starts with ":" too).
    o Login confirmation and failure.
    o Offers, takeback specific lines before the generic ones.
"""

import collections

from icsengine import events
from icsengine.events import OfferSubject
from icsengine.misc import regex
from icsengine.parser import GrammarError, game_info, seeks, to_int

Recognizer = collections.namedtuple('Recognizer', 'name pattern extract')


def _game(value):
    # Optional "Game 12: " prefixes.
    if value is None:
        return -1
    return to_int(value, 'game number')


def _subject(game):
    # Lines with a game number are about a game we observe.
    if game is None:
        return OfferSubject.OPPONENT
    return OfferSubject.PLAYER


def _rating(value):
    # Unrated players show as "----".
    if not value.strip('-'):
        return -1
    return to_int(value, 'rating')


### Extract functions. Each gets the match object.

def _game_end(m):
    return events.GameEnded(to_int(m.group(1), 'game number'), m.group(2),
                            m.group(3), m.group(4), m.group(5))


def _illegal_move(m):
    reason = m.group(2).strip() or 'Illegal move.'
    return events.IllegalMoveAttempt(m.group(1), reason)


def _channel_tell(m):
    return events.ChannelTell(m.group(1), m.group(2), to_int(m.group(3), 'channel'), m.group(4))


def _kibitz(cls):
    def extract(m):
        return cls(m.group(1), m.group(2), _rating(m.group(3)),
                   to_int(m.group(4), 'game number'), m.group(5))
    return extract


def _say(m):
    game = m.group(3)
    if game is not None:
        game = to_int(game, 'game number')
    return events.SayTell(m.group(1), m.group(2), game, m.group(4))


def _tell(cls):
    def extract(m):
        return cls(m.group(1), m.group(2), m.group(3))
    return extract


def _pending(subject):
    def extract(m):
        return events.OfferMade(subject, m.group(2), m.group(3), -1,
                                to_int(m.group(1), 'offer index'), m.group(4) or '')
    return extract


def _takeback(cls):
    def extract(m):
        return cls(_subject(m.group(1)), m.group(2), _game(m.group(1)),
                   to_int(m.group(3), 'half moves'))
    return extract


def _takeback_offered(m):
    return events.OfferMade(_subject(m.group(1)), m.group(2), 'takeback',
                            _game(m.group(1)), -1, m.group(3))


def _offered(m):
    return events.OfferMade(_subject(m.group(1)), m.group(2), m.group(3),
                            _game(m.group(1)), -1, '')


def _user_offered(m):
    return events.OfferMade(OfferSubject.USER, m.group(2), m.group(1), -1, -1, '')


def _user_answer(cls):
    # "You decline the draw request from X."
    def extract(m):
        return cls(OfferSubject.USER, m.group(2), m.group(1), -1)
    return extract


def _answer(cls):
    def extract(m):
        return cls(_subject(m.group(1)), m.group(2), m.group(3), _game(m.group(1)))
    return extract


def _structured(parse):
    def extract(m):
        return parse(m.string)
    return extract


b = regex.build

GRAMMAR = (
    # Structured lines.
    Recognizer('game_info', b(r'<g1> '), _structured(game_info.game_info)),
    Recognizer('style12', b(r'<12> '), _structured(game_info.style12)),
    Recognizer('delta_board', b(r'<d1> '), _structured(game_info.delta_board)),
    Recognizer('seeks_cleared', b(r'<sc>\s*$'), lambda m: events.SeeksCleared()),
    Recognizer('seek_added', b(r'<sn?> '), _structured(seeks.seek)),
    Recognizer('seeks_removed', b(r'<sr>(?: |$)'), _structured(seeks.seeks_removed)),

    # Game lifecycle.
    Recognizer('game_end', b(r'\{Game (\d+) \((%(H)s) vs\. (%(H)s)\) ([^}]+)\} (.*)'), _game_end),
    Recognizer('stopped_observing', b(r'Removing game (\d+) from observation list\.$'),
               lambda m: events.StoppedObserving(to_int(m.group(1), 'game number'))),
    Recognizer('stopped_examining', b(r'You are no longer examining game (\d+)\.$'),
               lambda m: events.StoppedExamining(to_int(m.group(1), 'game number'))),
    Recognizer('entered_setup', b(r'Entering setup mode\.$'), lambda m: events.EnteredBoardSetup()),
    Recognizer('exited_setup', b(r'Game is validated - entering examine mode\.$'),
               lambda m: events.ExitedBoardSetup()),
    Recognizer('illegal_move', b(r'Illegal move \((.*)\)\.(.*)'), _illegal_move),
    Recognizer('not_your_move', b(r'It is not your move\.'),
               lambda m: events.IllegalMoveAttempt(None, 'It is not your move.')),

    # Chat.
    Recognizer('channel_tell', b(r'(%(H)s)(%(T)s)?%(C)s: (.*)'), _channel_tell),
    Recognizer('kibitz', b(r'(%(H)s)(%(T)s)?\( *([\-0-9]+)\)%(G)s kibitzes: (.*)'),
               _kibitz(events.Kibitz)),
    Recognizer('whisper', b(r'(%(H)s)(%(T)s)?\( *([\-0-9]+)\)%(G)s whispers: (.*)'),
               _kibitz(events.Whisper)),
    Recognizer('personal_tell', b(r'(%(H)s)(%(T)s)? tells you: (.*)'), _tell(events.PersonalTell)),
    Recognizer('say', b(r'(%(H)s)(%(T)s)?(?:%(G)s)? says: (.*)'), _say),
    Recognizer('partner_tell', b(r'(%(H)s)(%(T)s)? \(your partner\) tells you: (.*)'),
               _tell(events.PartnerTell)),
    Recognizer('shout', b(r'(%(H)s)(%(T)s)? shouts: (.*)'), _tell(events.Shout)),
    Recognizer('ishout', b(r'--> (%(H)s)(%(T)s)? ?(.*)'), _tell(events.IShout)),
    Recognizer('tshout', b(r':(%(H)s)(%(T)s)? t-shouts: (.*)'), _tell(events.TShout)),
    Recognizer('cshout', b(r'(%(H)s)(%(T)s)? c-shouts: (.*)'), _tell(events.CShout)),
    Recognizer('announcement', b(r'    \*\*ANNOUNCEMENT\*\* from (%(H)s): (.*)'),
               lambda m: events.Announcement(m.group(1), m.group(2))),
    Recognizer('qtell', b(r':(.*)'), lambda m: events.QTell(m.group(1))),

    # Login.
    Recognizer('login', b(r'\*\*\*\* Starting FICS session as (%(H)s)(%(T)s)? \*\*\*\*'),
               lambda m: events.LoginSucceeded(m.group(1), m.group(2))),
    Recognizer('invalid_password', b(r'\*\*\*\* Invalid password! \*\*\*\*'),
               lambda m: events.LoginFailed('Invalid password')),
    Recognizer('handle_in_use', b(r'\*\*\* Sorry (%(H)s) is already logged in \*\*\*'),
               lambda m: events.LoginFailed('Handle in use')),
    Recognizer('guests_blocked', b(r'.*[Gg]uest connections have been prevented'),
               lambda m: events.LoginFailed('Guest connections are blocked')),

    # Offers.
    Recognizer('pending_from', b(r'<pf> (\d+) w=(%(H)s) t=(\S+)(?: p=(.*))?'),
               _pending(OfferSubject.OPPONENT)),
    Recognizer('pending_to', b(r'<pt> (\d+) w=(%(H)s) t=(\S+)(?: p=(.*))?'),
               _pending(OfferSubject.USER)),
    Recognizer('pending_removed', b(r'<pr> (\d+)'),
               lambda m: events.OfferRemoved(to_int(m.group(1), 'offer index'))),
    Recognizer('takeback_countered',
               b(r'(?:Game (\d+): )?(%(H)s) proposes a different number \((\d+)\) of half-move\(s\) to take back\.'),
               _takeback(events.TakebackCountered)),
    Recognizer('takeback_updated',
               b(r'(?:Game (\d+): )?(%(H)s) updates the takeback request to (\d+) half move\(s\)\.'),
               _takeback(events.TakebackUpdated)),
    Recognizer('takeback_offered',
               b(r'(?:Game (\d+): )?(%(H)s) (?:would like|requests) to take back (\d+) half move\(s\)\.'),
               _takeback_offered),
    Recognizer('offered',
               b(r'(?:Game (\d+): )?(%(H)s) (?:offers (?:you )?an? |requests to |would like to )(draw|abort|adjourn|pause|unpause)\b'),
               _offered),
    Recognizer('user_offered',
               b(r'(?:Offering an? |Requesting to )(draw|abort|adjourn|pause|unpause)(?: (?:to|with) (%(H)s))?\.'),
               _user_offered),
    Recognizer('user_declined', b(r'You decline the (\w+) request from (%(H)s)\.'),
               _user_answer(events.OfferDeclined)),
    Recognizer('declined', b(r'(?:Game (\d+): )?(%(H)s) declines the (\w+) request\.'),
               _answer(events.OfferDeclined)),
    Recognizer('user_withdrew', b(r'You withdraw the (\w+) request to (%(H)s)\.'),
               _user_answer(events.OfferWithdrawn)),
    Recognizer('withdrew', b(r'(?:Game (\d+): )?(%(H)s) withdraws the (\w+) request\.'),
               _answer(events.OfferWithdrawn)),
)

del b


def recognize(line, grammar=GRAMMAR):
    """Returns (recognizer, match) for the first recognizer matching the line
    or (None, None).
    """
    for recognizer in grammar:
        match = recognizer.pattern.match(line)
        if match:
            return recognizer, match
    return None, None


__all__ = ['Recognizer', 'GRAMMAR', 'GrammarError', 'recognize']
