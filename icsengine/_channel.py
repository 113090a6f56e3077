"""Writing commands to the server."""

import logging
import socket
import threading

from icsengine.errors import ConnectionClosed

logger = logging.getLogger(__name__)


def shutdown(sock):
    """Shut the socket down (this wakes up a thread blocked reading it) and
    close it.
    """
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        # Already disconnected.
        pass
    sock.close()


class CommandChannel(object):
    """Sends commands, one line each. send can be called from any thread,
    the commands are never mixed up.

    If writing fails, the socket is closed. The reader then sees the end of
    the stream and the connection goes through its normal disconnection, so
    the error is logged but not raised.
    """

    ENCODING = 'latin-1'

    def __init__(self):
        self._lock = threading.Lock()
        self._sock = None

    def attach(self, sock):
        with self._lock:
            self._sock = sock

    @property
    def connected(self):
        return self._sock is not None

    def send(self, command):
        """Send one command, the newline is added. Raises ConnectionClosed
        if there is no connection.
        """
        with self._lock:
            sock = self._sock
            if sock is None:
                raise ConnectionClosed('Not connected.')

            logger.debug('Sending: %s', command)
            try:
                sock.sendall((command + '\n').encode(self.ENCODING, 'replace'))
            except OSError:
                logger.warning('Could not send %r, closing the connection.', command, exc_info=True)
                self._sock = None
                shutdown(sock)

    def close(self):
        """Close the socket, returns False if there was none."""
        with self._lock:
            sock = self._sock
            self._sock = None
        if sock is None:
            return False
        shutdown(sock)
        return True
