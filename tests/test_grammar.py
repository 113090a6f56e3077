import unittest

from icsengine import events
from icsengine.events import OfferSubject
from icsengine.parser import GrammarError
from icsengine.parser.grammar import GRAMMAR, recognize


def parse(line):
    recognizer, match = recognize(line)
    if recognizer is None:
        return None
    return recognizer.extract(match)


class GrammarTableTests(unittest.TestCase):
    def test_names_are_unique(self):
        names = [recognizer.name for recognizer in GRAMMAR]
        self.assertEqual(len(names), len(set(names)))

    def test_unknown_lines_match_nothing(self):
        for line in ['', 'Some random text', 'Style 12 set.', '12345']:
            self.assertEqual(recognize(line), (None, None))

    def test_malformed_structured_line_raises(self):
        with self.assertRaises(GrammarError):
            parse('<12> this is not a board')


class ChatTests(unittest.TestCase):
    def test_personal_tell(self):
        event = parse('BobSmith tells you: hi there')
        self.assertIsInstance(event, events.PersonalTell)
        self.assertEqual(event, events.PersonalTell('BobSmith', None, 'hi there'))

    def test_personal_tell_with_titles(self):
        event = parse('BobSmith(SR)(TD) tells you: hello')
        self.assertEqual(event, events.PersonalTell('BobSmith', '(SR)(TD)', 'hello'))

    def test_kibitz_wins_over_tell(self):
        event = parse('BobSmith(1500)[12] kibitzes: Alice tells you: hi')
        self.assertIsInstance(event, events.Kibitz)
        self.assertEqual(event, events.Kibitz('BobSmith', None, 1500, 12, 'Alice tells you: hi'))

    def test_whisper_unrated(self):
        event = parse('Guest(----)[7] whispers: nice move')
        self.assertIsInstance(event, events.Whisper)
        self.assertEqual(event.rating, -1)
        self.assertEqual(event.game_number, 7)

    def test_titled_kibitz(self):
        event = parse('Carlsen(GM)(2850)[3] kibitzes: hm')
        self.assertEqual(event, events.Kibitz('Carlsen', '(GM)', 2850, 3, 'hm'))

    def test_channel_tell(self):
        event = parse('BobSmith(TM)(50): anyone for a game?')
        self.assertIsInstance(event, events.ChannelTell)
        self.assertEqual(event, events.ChannelTell('BobSmith', '(TM)', 50, 'anyone for a game?'))

    def test_say(self):
        self.assertEqual(parse('BobSmith[12] says: good game'),
                         events.SayTell('BobSmith', None, 12, 'good game'))
        self.assertEqual(parse('BobSmith says: thanks'),
                         events.SayTell('BobSmith', None, None, 'thanks'))

    def test_partner_tell(self):
        event = parse('BobSmith (your partner) tells you: sit')
        self.assertIsInstance(event, events.PartnerTell)
        self.assertEqual(event.message, 'sit')

    def test_shouts(self):
        self.assertIsInstance(parse('BobSmith shouts: hi all'), events.Shout)
        self.assertIsInstance(parse('BobSmith c-shouts: anyone?'), events.CShout)
        self.assertEqual(parse('--> BobSmith is happy'), events.IShout('BobSmith', None, 'is happy'))

    def test_tshout_before_qtell(self):
        event = parse(':Mamer(TD) t-shouts: the tourney starts')
        self.assertIsInstance(event, events.TShout)
        self.assertEqual(event, events.TShout('Mamer', '(TD)', 'the tourney starts'))

        event = parse(':Mamer hello there')
        self.assertIsInstance(event, events.QTell)
        self.assertEqual(event.message, 'Mamer hello there')

    def test_announcement(self):
        event = parse('    **ANNOUNCEMENT** from relay: FICS is relaying a game')
        self.assertEqual(event, events.Announcement('relay', 'FICS is relaying a game'))


class GameLifecycleTests(unittest.TestCase):
    def test_game_end(self):
        event = parse('{Game 6 (Strakh vs. Svag) Strakh forfeits on time} 0-1.')
        self.assertIsInstance(event, events.GameEnded)
        self.assertEqual(event.game_number, 6)
        self.assertEqual(event.white, 'Strakh')
        self.assertEqual(event.black, 'Svag')
        self.assertEqual(event.reason, 'Strakh forfeits on time')
        self.assertEqual(event.result, '0-1.')

    def test_observing_and_examining(self):
        self.assertEqual(parse('Removing game 12 from observation list.'), events.StoppedObserving(12))
        self.assertEqual(parse('You are no longer examining game 3.'), events.StoppedExamining(3))

    def test_board_setup(self):
        self.assertIsInstance(parse('Entering setup mode.'), events.EnteredBoardSetup)
        self.assertIsInstance(parse('Game is validated - entering examine mode.'),
                              events.ExitedBoardSetup)

    def test_illegal_moves(self):
        self.assertEqual(parse('Illegal move (e9).'), events.IllegalMoveAttempt('e9', 'Illegal move.'))
        self.assertEqual(parse('It is not your move.'),
                         events.IllegalMoveAttempt(None, 'It is not your move.'))


class LoginTests(unittest.TestCase):
    def test_login_success(self):
        event = parse('**** Starting FICS session as AlexTheGreat(TM) ****')
        self.assertIsInstance(event, events.LoginSucceeded)
        self.assertEqual(event.username, 'AlexTheGreat')
        self.assertEqual(event.titles, '(TM)')

    def test_login_success_without_titles(self):
        self.assertEqual(parse('**** Starting FICS session as BobSmith ****'),
                         events.LoginSucceeded('BobSmith', None))

    def test_invalid_password(self):
        event = parse('**** Invalid password! ****')
        self.assertIsInstance(event, events.LoginFailed)
        self.assertEqual(event.reason, 'Invalid password')

    def test_handle_in_use(self):
        event = parse('*** Sorry BobSmith is already logged in ***')
        self.assertEqual(event, events.LoginFailed('Handle in use'))

    def test_guests_blocked(self):
        event = parse('Sorry, guest connections have been prevented by the administrator.')
        self.assertEqual(event, events.LoginFailed('Guest connections are blocked'))


class StructuredLineTests(unittest.TestCase):
    def test_seek_lines(self):
        self.assertIsInstance(parse('<sc>'), events.SeeksCleared)
        self.assertEqual(parse('<sr> 5 17'), events.SeeksRemoved((5, 17)))
        event = parse('<sn> 8 w=visar ti=02 rt=2194  t=4 i=0 r=r tp=suicide c=? rr=0-9999 a=t f=f')
        self.assertIsInstance(event, events.SeekAdded)
        self.assertTrue(event.new)

    def test_boards(self):
        self.assertIsInstance(parse('<d1> 7 3 P/e7-e5 e5 1234 118766'), events.BoardDelta)
        self.assertIsInstance(parse('<g1> 1 p=0 t=blitz r=1'), events.GameInfo)


class OfferTests(unittest.TestCase):
    def test_pending_lines(self):
        self.assertEqual(parse('<pf> 3 w=BobSmith t=draw p=#'),
                         events.OfferMade(OfferSubject.OPPONENT, 'BobSmith', 'draw', -1, 3, '#'))
        self.assertEqual(parse('<pt> 4 w=BobSmith t=abort'),
                         events.OfferMade(OfferSubject.USER, 'BobSmith', 'abort', -1, 4, ''))
        self.assertEqual(parse('<pr> 3'), events.OfferRemoved(3))

    def test_opponent_offer(self):
        self.assertEqual(parse('BobSmith offers you a draw.'),
                         events.OfferMade(OfferSubject.OPPONENT, 'BobSmith', 'draw', -1, -1, ''))

    def test_observed_offer(self):
        self.assertEqual(parse('Game 12: BobSmith offers a draw.'),
                         events.OfferMade(OfferSubject.PLAYER, 'BobSmith', 'draw', 12, -1, ''))

    def test_user_offer(self):
        self.assertEqual(parse('Offering a draw to BobSmith.'),
                         events.OfferMade(OfferSubject.USER, 'BobSmith', 'draw', -1, -1, ''))

    def test_takebacks(self):
        self.assertEqual(parse('BobSmith would like to take back 2 half move(s).'),
                         events.OfferMade(OfferSubject.OPPONENT, 'BobSmith', 'takeback', -1, -1, '2'))
        event = parse('BobSmith updates the takeback request to 4 half move(s).')
        self.assertIsInstance(event, events.TakebackUpdated)
        self.assertEqual(event, events.TakebackUpdated(OfferSubject.OPPONENT, 'BobSmith', -1, 4))
        event = parse('Game 5: BobSmith proposes a different number (1) of half-move(s) to take back.')
        self.assertIsInstance(event, events.TakebackCountered)
        self.assertEqual(event, events.TakebackCountered(OfferSubject.PLAYER, 'BobSmith', 5, 1))

    def test_answers(self):
        event = parse('You decline the draw request from BobSmith.')
        self.assertIsInstance(event, events.OfferDeclined)
        self.assertEqual(event, events.OfferDeclined(OfferSubject.USER, 'BobSmith', 'draw', -1))
        self.assertEqual(parse('BobSmith declines the abort request.'),
                         events.OfferDeclined(OfferSubject.OPPONENT, 'BobSmith', 'abort', -1))
        event = parse('BobSmith withdraws the draw request.')
        self.assertIsInstance(event, events.OfferWithdrawn)
        self.assertEqual(parse('You withdraw the draw request to BobSmith.'),
                         events.OfferWithdrawn(OfferSubject.USER, 'BobSmith', 'draw', -1))
