"""The events the engine hands to registered handlers. Every event is an
immutable record (a namedtuple) with scalar fields only, one class per kind of
server message. Handlers are registered on the class, ie.:

    connection.reg_event(events.PersonalTell, my_function)

The handler gets the event and returns True if it fully handled it. Anything
else means the raw line is passed on (to the filters and the text handlers).

Names and titles: titles is the raw title decoration, ie. "(TM)" or
"(SR)(TD)", or None if the server sent none.
"""

import collections
import enum
import re

__all__ = ['OfferSubject', 'GameRelation', 'GameInfo', 'BoardSnapshot',
           'BoardDelta', 'SeekAdded', 'SeeksRemoved', 'SeeksCleared',
           'GameEnded', 'StoppedObserving', 'StoppedExamining',
           'EnteredBoardSetup', 'ExitedBoardSetup', 'IllegalMoveAttempt',
           'ChannelTell', 'PersonalTell', 'PartnerTell', 'SayTell', 'Shout',
           'IShout', 'TShout', 'CShout', 'Announcement', 'Kibitz', 'Whisper',
           'QTell', 'LoginSucceeded', 'LoginFailed', 'OfferMade',
           'OfferRemoved', 'OfferDeclined', 'OfferWithdrawn',
           'TakebackUpdated', 'TakebackCountered']


class OfferSubject(enum.Enum):
    """Who an offer line is about."""
    USER = 'user'
    OPPONENT = 'opponent'
    # A named player in a game we observe.
    PLAYER = 'player'


class GameRelation(enum.IntEnum):
    """The relation field of a style 12 board."""
    ISOLATED_POSITION = -3
    OBSERVING_EXAMINED = -2
    PLAYING_OPPONENTS_MOVE = -1
    OBSERVING_PLAYED = 0
    PLAYING_MY_MOVE = 1
    EXAMINING = 2


def _record(name, fields, doc):
    cls = collections.namedtuple(name, fields)
    if doc:
        cls.__doc__ = doc
    return cls


### Structured (iset/style) information:

GameInfo = _record('GameInfo',
    'game_number private game_type rated white_registered black_registered '
    'white_initial black_initial white_increment black_increment '
    'partner_game white_rating black_rating white_rating_type '
    'black_rating_type white_timeseal black_timeseal',
    """A <g1> line. Ratings are integers (0 if the player has none),
    rating_type is '' for established, 'E' estimated or 'P' provisional.
    partner_game is 0 unless this is a bughouse game.""")


class BoardSnapshot(collections.namedtuple('BoardSnapshot',
        'ranks to_move double_pawn_push white_can_castle_kingside '
        'white_can_castle_queenside black_can_castle_kingside '
        'black_can_castle_queenside reversible_ply game_number white_name '
        'black_name relation initial_time increment white_material '
        'black_material white_time black_time move_number verbose_move '
        'move_time pretty_move flipped clock_running lag')):
    """A style 12 board (<12> line).

    Some notes:
        o ranks is the eigth ranks from the 8th to the 1st, seperated by
           spaces, exactly as the server sent them ("-" is an empty square).
        o to_move is "W" or "B".
        o double_pawn_push is the file (0-7) of a double pawn push of the
           last move, or -1.
        o white_time and black_time are in milliseconds when the ms ivar
           is set (the engine sets it on login), otherwise in seconds.
        o move_time is in seconds (a float), verbose_move and pretty_move
           are None for the initial position.
        o clock_running is True and lag 0 if the server did not send them.
    """

    __slots__ = ()

    @property
    def fen_position(self):
        """The piece placement field of the position in FEN."""
        fen = []
        for rank in self.ranks.split():
            # Runs of empty squares are counted.
            fen.append(re.sub('-+', lambda m: str(len(m.group())), rank))
        return '/'.join(fen)

    @property
    def fen(self):
        castles = ''
        if self.white_can_castle_kingside:
            castles += 'K'
        if self.white_can_castle_queenside:
            castles += 'Q'
        if self.black_can_castle_kingside:
            castles += 'k'
        if self.black_can_castle_queenside:
            castles += 'q'
        if not castles:
            castles = '-'

        if self.double_pawn_push == -1:
            ep_square = '-'
        else:
            # The pawn that just moved belongs to the side not on move.
            ep_square = 'abcdefgh'[self.double_pawn_push] + ('3' if self.to_move == 'B' else '6')

        return '%s %s %s %s %s %s' % (self.fen_position, self.to_move.lower(), castles,
                                      ep_square, self.reversible_ply, self.move_number)


BoardDelta = _record('BoardDelta',
    'game_number ply verbose_move pretty_move time_taken remaining_time',
    """A <d1> (compressmove) line. Times in milliseconds.""")

SeekAdded = _record('SeekAdded',
    'index name titles rating rating_type time increment rated match_type '
    'color min_rating max_rating automatic formula_checked new',
    """A <s> or <sn> seek line. color is "W", "B" or "?", titles is the
    titles bit field of the seeker. new is True for <sn> lines (a seek
    was posted while we are looking).""")

SeeksRemoved = _record('SeeksRemoved', 'indices',
    """A <sr> line, indices is a tuple of integers.""")

SeeksCleared = _record('SeeksCleared', '',
    """A <sc> line, all seeks should be forgotten.""")


### Game lifecycle:

GameEnded = _record('GameEnded', 'game_number white black reason result',
    """{Game 6 (Strakh vs. Svag) Strakh forfeits on time} 0-1.""")

StoppedObserving = _record('StoppedObserving', 'game_number', None)
StoppedExamining = _record('StoppedExamining', 'game_number', None)
EnteredBoardSetup = _record('EnteredBoardSetup', '', None)
ExitedBoardSetup = _record('ExitedBoardSetup', '', None)

IllegalMoveAttempt = _record('IllegalMoveAttempt', 'move reason',
    """An illegal move (move is the move string we sent) or a move sent when
    it is not our turn (move is None).""")


### Chat:

ChannelTell = _record('ChannelTell', 'username titles channel message', None)
PersonalTell = _record('PersonalTell', 'username titles message', None)
PartnerTell = _record('PartnerTell', 'username titles message', None)
SayTell = _record('SayTell', 'username titles game_number message',
    """game_number is None if the say did not carry one.""")
Shout = _record('Shout', 'username titles message', None)
IShout = _record('IShout', 'username titles message', None)
TShout = _record('TShout', 'username titles message', None)
CShout = _record('CShout', 'username titles message', None)
Announcement = _record('Announcement', 'username message', None)
Kibitz = _record('Kibitz', 'username titles rating game_number message',
    """rating is -1 for unrated players ("----").""")
Whisper = _record('Whisper', 'username titles rating game_number message',
    """rating is -1 for unrated players ("----").""")
QTell = _record('QTell', 'message', None)


### Login:

LoginSucceeded = _record('LoginSucceeded', 'username titles', None)
LoginFailed = _record('LoginFailed', 'reason', None)


### Offers:

OfferMade = _record('OfferMade',
    'subject player offer game_number index params',
    """An offer (draw, abort, adjourn, takeback, match, ...). player is the
    other party for USER/OPPONENT and the offering player for PLAYER.
    game_number and index are -1 when the line did not carry them. For
    takebacks params holds the number of half moves as a string.""")

OfferRemoved = _record('OfferRemoved', 'index', None)

OfferDeclined = _record('OfferDeclined', 'subject player offer game_number',
    """subject is who declined.""")

OfferWithdrawn = _record('OfferWithdrawn', 'subject player offer game_number',
    """subject is who withdrew.""")

TakebackUpdated = _record('TakebackUpdated', 'subject player game_number plies', None)
TakebackCountered = _record('TakebackCountered', 'subject player game_number plies', None)
