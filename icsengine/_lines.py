"""Turns the raw data from the server into lines, and lines into batches.

FICS sends "\\n\\r" line ends and puts its prompt ("fics% ", or
"12:34_fics% " with "set ptime 1") in front of the next line. The prompt is
stripped, lines that were only prompts are dropped.
"""

import datetime
import select
import socket

import pytz

from icsengine.misc import regex

TZINFO = pytz.timezone('UTC')


class LineAssembler(object):
    """Feed it data, get lines. One instance per connection, since it keeps
    the unfinished line.

    If the prompt carries the time (ptime), fics_time will be the
    datetime.time (UTC) of the last prompt seen, otherwise it stays None.
    """

    ENCODING = 'latin-1'

    def __init__(self):
        self._buffer = bytearray()
        self.fics_time = None

    def feed(self, data):
        """Add data, returns the list of lines completed by it."""
        self._buffer += data.replace(b'\r', b'')
        lines = []
        while True:
            end = self._buffer.find(b'\n')
            if end == -1:
                break
            line = self._strip(self._buffer[:end].decode(self.ENCODING))
            del self._buffer[:end + 1]
            if line is not None:
                lines.append(line)
        return lines

    def flush(self):
        """Returns the unfinished line (if it is more then a prompt) as a list
        and forgets it. Use it at the end of the stream.
        """
        if not self._buffer:
            return []
        line = self._strip(self._buffer.decode(self.ENCODING))
        del self._buffer[:]
        if not line:
            return []
        return [line]

    def _strip(self, line):
        prompted = False
        while True:
            match = regex.PROMPT_re.match(line)
            if not match:
                break
            if match.group('hour'):
                self.fics_time = datetime.time(int(match.group('hour')),
                                               int(match.group('minute')), tzinfo=TZINFO)
            line = line[match.end():]
            prompted = True

        if prompted and not line:
            return None
        return line


def _readable(sock):
    try:
        return bool(select.select([sock], [], [], 0)[0])
    except (OSError, ValueError):
        # Closed under our feet, the next recv will tell.
        return False


def read_batches(sock, assembler, read_size=2048, batch_size=64):
    """Generator reading from sock and giving lists of lines. A list is given
    when it has batch_size lines, or when the socket has nothing more to read
    right now. Ends when the server closes the connection. Socket errors
    are not caught.

    A timeout (or a non blocking socket without data) is not the end, it just
    means the server is quiet.
    """
    batch = []
    while True:
        try:
            data = sock.recv(read_size)
        except (socket.timeout, BlockingIOError, InterruptedError):
            if batch:
                yield batch
                batch = []
            continue

        if not data:
            batch += assembler.flush()
            if batch:
                yield batch
            return

        for line in assembler.feed(data):
            batch.append(line)
            if len(batch) >= batch_size:
                yield batch
                batch = []

        if batch and not _readable(sock):
            yield batch
            batch = []
