import datetime
import socket
import unittest

import pytz

from icsengine._lines import LineAssembler, read_batches


class LineAssemblerTests(unittest.TestCase):
    def test_prompt_is_stripped_from_the_next_line(self):
        assembler = LineAssembler()
        lines = assembler.feed(b'fics% BobSmith tells you: hi there\n\rfics% ')
        self.assertEqual(lines, ['BobSmith tells you: hi there'])
        self.assertEqual(assembler.flush(), [])

    def test_partial_lines_wait_for_their_end(self):
        assembler = LineAssembler()
        self.assertEqual(assembler.feed(b'Bob'), [])
        self.assertEqual(assembler.feed(b'Smith shouts: x\n\rnext'), ['BobSmith shouts: x'])
        self.assertEqual(assembler.flush(), ['next'])
        self.assertEqual(assembler.flush(), [])

    def test_blank_lines_are_kept_prompt_lines_dropped(self):
        assembler = LineAssembler()
        self.assertEqual(assembler.feed(b'\n\rfics% \n\rfics% fics% a\n\r'), ['', 'a'])

    def test_carriage_returns_are_removed(self):
        assembler = LineAssembler()
        self.assertEqual(assembler.feed(b'one\r\ntwo\n\r'), ['one', 'two'])

    def test_latin1(self):
        assembler = LineAssembler()
        self.assertEqual(assembler.feed('Schäfer\n'.encode('latin-1')), ['Schäfer'])

    def test_ptime_prompt_sets_fics_time(self):
        assembler = LineAssembler()
        self.assertIsNone(assembler.fics_time)
        self.assertEqual(assembler.feed(b'12:34_fics% hello\n'), ['hello'])
        self.assertEqual(assembler.fics_time.hour, 12)
        self.assertEqual(assembler.fics_time.minute, 34)
        self.assertIs(assembler.fics_time.tzinfo, pytz.utc)
        self.assertEqual(assembler.fics_time, datetime.time(12, 34, tzinfo=pytz.utc))


class ReadBatchesTests(unittest.TestCase):
    def setUp(self):
        self.reader, self.writer = socket.socketpair()
        self.addCleanup(self.reader.close)
        self.addCleanup(self.writer.close)

    def test_batches_respect_the_size_and_end_with_the_stream(self):
        self.writer.sendall(b'a\n\rb\n\rc\n\rlast')
        self.writer.close()

        batches = list(read_batches(self.reader, LineAssembler(), batch_size=2))
        self.assertEqual([line for batch in batches for line in batch], ['a', 'b', 'c', 'last'])
        for batch in batches:
            self.assertTrue(1 <= len(batch) <= 2)

    def test_timeout_is_not_the_end(self):
        self.reader.settimeout(0.05)
        batches = read_batches(self.reader, LineAssembler())

        self.writer.sendall(b'first\n\r')
        self.assertEqual(next(batches), ['first'])

        self.writer.sendall(b'fics% second\n\r')
        self.assertEqual(next(batches), ['second'])

        self.writer.close()
        with self.assertRaises(StopIteration):
            next(batches)
