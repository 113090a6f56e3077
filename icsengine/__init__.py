#-*- coding: utf-8 -*-
"""Classes defined here (Please look at help(icsengine.IcsConnection)):
    o IcsConnection: The main class, a connection to a FICS like server
        which turns everything the server says into events.

Further modules provided:
    o events: The event records handed to registered functions.
    o dispatch: The Dispatcher, which classifies lines and calls the
        registered functions (and the filters and text functions for the
        rest).
    o errors: ConnectionClosed and GrammarError.
    o parser provides the parsing:
        o grammar: The ordered list of line recognizers. The order is
            the priority.
        o game_info: Parse style 12 (<12>), delta board (<d1>) and
            gameinfo (<g1>) lines.
        o seeks: Parse the seekinfo lines (<s>, <sn>, <sr>).
    o misc.regex: Some regex snipplets (handles, titles, the prompt).
    o Also a fiew invisible ones, that are all used through IcsConnection:
        _lines (bytes to lines), _filter (one shot line filters), _session
        (login state) and _channel (writing commands).

This is made available under the LGPL version 3 -- see
http://www.gnu.org/licenses/lgpl.html.
"""

__version__ = '0.1'
__license__ = 'LGPLv3'

__all__ = ['IcsConnection', 'ConnectionClosed', 'GrammarError', 'LoginResult',
           'SessionState', 'events', 'dispatch', 'errors', 'parser', 'misc']


import concurrent.futures
import logging
import re
import socket
import threading

from icsengine import events
from icsengine._channel import CommandChannel
from icsengine._filter import FilterRegistry
from icsengine._lines import LineAssembler, read_batches
from icsengine._session import LoginResult, Session, SessionState
from icsengine.dispatch import Dispatcher
from icsengine.errors import ConnectionClosed, GrammarError

logger = logging.getLogger(__name__)

# Server lines telling why the connection ends.
_CLOSE_REASONS = ((re.compile(r'^\*\*\*\* You have been kicked out by'), 'Nuked'),
                  (re.compile(r"you can't both be logged in\. \*\*\*\*$"), 'Someone logged in as me.'),
                  (re.compile(r'^Logging you out\.'), 'Closed by us.'))


class IcsConnection(object):
    """This is the class to handle the connection.

    Functions that want to get the server output register with it:
        o reg_event(event_class, function): function(event) is called for
           every line recognized as event_class (see icsengine.events). If
           it returns True the line is considered handled, otherwise it goes
           on to the text functions.
        o reg_text(function): function(line) for every line not handled
           otherwise (and not filtered).
        o reg_disconnect(function): function(reason) once when the
           connection ends.
        o unreg_event, unreg_text, unreg_disconnect(function) to remove them
           again.

    All these functions are called on one delivery thread, in the order the
    lines came from the server. Do not call login() from them (it would wait
    for the thread it is running on).

    Usage:
        connection = IcsConnection(interface='my bot')
        connection.reg_event(events.PersonalTell, answer)
        result = connection.connect('guest')
        if not result.success:
            print(result.reason)
        ...
        connection.close()

    Some other variables:
        o self.READ_SIZE: amount of data the socket tries to read at once.
        o self.BATCH_SIZE: lines handed to the delivery thread at once (at
           most, less when the server pauses).
        o self.TIMEOUT: the timeout of the socket. None by default. A
           timeout does not end the connection, it only means the server
           was quiet.
        o self.CONNECT_TIMEOUT: timeout for opening the connection (None).
        o self.session: The login state (icsengine._session.Session).
        o self.filters: The one shot line filters.
        o self.dispatcher: The dispatcher (you should not need it).
    """

    def __init__(self, interface='icsengine protocol library', style=12, seek_info=False,
                 game_info=True, compress_move=False, pending_info=True, ptime=False):
        """Optional arguments:
            o interface="icsengine protocol library". FICS interface variable,
                set on login.
            o style=12. The board style, anything but 12 will not be parsed
                (the lines will be text).
            o seek_info=False. Get <s>/<sr>/<sc> seek lines.
            o game_info=True. Get <g1> lines.
            o compress_move=False. Get <d1> lines instead of most boards.
            o pending_info=True. Get <pf>/<pt>/<pr> offer lines.
            o ptime=False. Have the server time in the prompt (fics_time).
        """
        self.READ_SIZE = 2048
        self.BATCH_SIZE = 64
        self.TIMEOUT = None
        self.CONNECT_TIMEOUT = None

        self._interface = interface
        self._style = style
        self._seek_info = seek_info
        self._game_info = game_info
        self._compress_move = compress_move
        self._pending_info = pending_info
        self._ptime = ptime

        self.session = Session()
        self.filters = FilterRegistry()
        self.dispatcher = Dispatcher(self.filters)

        self._channel = CommandChannel()
        self._lock = threading.Lock()
        self._send_after = []
        self._handshaken = False
        self._disconnect_functions = []

        self._assembler = None
        self._executor = None
        self._reader = None
        self._close_reason = None
        self._disconnect_fired = False
        self._finished = threading.Event()
        self._finished.set()

        # These go first, so they always see the login lines.
        self.dispatcher.reg_event(events.LoginSucceeded, self._login_succeeded)
        self.dispatcher.reg_event(events.LoginFailed, self._login_failed)


    ### Registering:

    def reg_event(self, kind, function):
        self.dispatcher.reg_event(kind, function)

    def unreg_event(self, function):
        self.dispatcher.unreg_event(function)

    def reg_text(self, function):
        self.dispatcher.reg_text(function)

    def unreg_text(self, function):
        self.dispatcher.unreg_text(function)

    def reg_disconnect(self, function):
        self._disconnect_functions.append(function)

    def unreg_disconnect(self, function):
        while function in self._disconnect_functions:
            self._disconnect_functions.remove(function)


    ### State:

    @property
    def state(self):
        """The SessionState. FAILED does not last: a refused login closes
        the connection, so it turns into DISCONNECTED once the disconnect
        functions ran. session.reason keeps the failure reason.
        """
        return self.session.state

    @property
    def username(self):
        """The name the server gave us, None before login."""
        return self.session.username

    @property
    def titles(self):
        return self.session.titles

    @property
    def is_connected(self):
        return self._channel.connected

    @property
    def is_logged_in(self):
        return self.session.state is SessionState.LOGGED_IN

    @property
    def fics_time(self):
        """Server time of the last prompt (only with ptime=True), a
        datetime.time in UTC, or None.
        """
        if self._assembler is None:
            return None
        return self._assembler.fics_time


    ### Connecting:

    def _create_socket(self, hostname, port):
        """Open the socket, overwrite this to use something else (ie. a
        timeseal wrapper).
        """
        return socket.create_connection((hostname, port), self.CONNECT_TIMEOUT)

    def connect(self, user='guest', password='', ics='freechess.org', port=5000, block=True):
        """Connect to the server and send the user name and password (if the
        password is None, only the user name is sent).

        If block is True (default) this waits for the login and returns
        login(), otherwise it returns None and login() gives the result
        later.

        Raises socket errors if the server cannot be reached and
        RuntimeError if already connected.
        """
        self.session.connecting(user)
        try:
            sock = self._create_socket(ics, port)
        except OSError:
            self.session.disconnected()
            raise
        sock.settimeout(self.TIMEOUT)
        logger.info('Connected to %s:%s', ics, port)

        # Nothing delivers yet, leftovers of an old connection go.
        self.filters.clear()
        self._assembler = LineAssembler()
        self._close_reason = None
        self._disconnect_fired = False
        self._finished = threading.Event()
        with self._lock:
            self._handshaken = False

        executor = concurrent.futures.ThreadPoolExecutor(max_workers=1,
                                                         thread_name_prefix='icsengine-delivery')
        self._executor = executor
        self._channel.attach(sock)
        self.session.credentials_sent()

        self._reader = threading.Thread(target=self._read, args=(sock, self._assembler, executor),
                                        name='icsengine-reader', daemon=True)
        self._reader.start()

        self._channel.send(user)
        if password is not None:
            self._channel.send(password)
        self._post(self.session.awaiting_confirmation)

        if block:
            return self.login()

    def login(self):
        """Wait until the server accepted or refused the login and return
        a LoginResult (success, username, titles, reason). If the connection
        is lost before, reason is 'Disconnected'.

        The delivery thread answers the login confirmation by setting the
        interface variables (their echos are filtered) and sending the
        commands given to send_when_logged_in, even if nobody calls this.

        Can only be called once per connection.
        """
        result = self.session.wait()
        if not result.success:
            logger.warning('Login failed: %s', result.reason)
        return result

    def _handshake_commands(self):
        commands = [('$set style %d' % self._style, 'Style %d set.' % self._style),
                    ('$set interface %s' % self._interface, None),
                    ('$iset nowrap 1', 'nowrap set.'),
                    ('$iset defprompt 1', 'defprompt set.'),
                    ('$iset ms 1', 'ms set.'),
                    ('$set bell 0', 'Bell off.')]
        if self._game_info:
            commands.append(('$iset gameinfo 1', 'gameinfo set.'))
        if self._compress_move:
            commands.append(('$iset compressmove 1', 'compressmove set.'))
        if self._seek_info:
            commands += self._seek_commands(True)
        if self._pending_info:
            commands.append(('$iset pendinfo 1', 'pendinfo set.'))
        if self._ptime:
            commands.append(('$set ptime 1', 'Your prompt will now show the time.'))
        return commands

    def _seek_commands(self, state):
        if state:
            return [('$iset seekinfo 1', 'seekinfo set.'), ('$iset seekremove 1', 'seekremove set.')]
        return [('$iset seekinfo 0', 'seekinfo unset.'), ('$iset seekremove 0', 'seekremove unset.')]


    ### Sending:

    def send(self, command):
        """Send one command (a newline is appended). Raises ConnectionClosed
        if not connected. A failing write closes the connection instead of
        raising.
        """
        self._channel.send(command)

    def send_filtered(self, command, echo=None):
        """Send the command and filter the first line equal to echo (if
        given), so the server answer is not shown as text.
        """
        if echo is not None:
            self.filter_line(echo)
        self.send(command)

    def send_when_logged_in(self, command):
        """Send the command now if logged in, or right after the login
        otherwise.
        """
        with self._lock:
            if not self._handshaken:
                self._send_after.append(command)
                return
        self.send(command)

    def filter_line(self, line):
        """Swallow the next line equal to line (exact match, once). Ignored
        when not connected.
        """
        self._post(self.filters.register_once, line)

    def set_style(self, style):
        """Set the board style. Sent right away if logged in, otherwise on
        login.
        """
        self._style = style
        if self.is_logged_in:
            self.send_filtered('$set style %d' % style, 'Style %d set.' % style)

    def set_seek_info(self, state):
        """Turn seek information (<s>, <sr>, <sc> lines) on or off. Sent right
        away if logged in, otherwise on login.
        """
        if state == self._seek_info:
            return
        self._seek_info = state
        if self.is_logged_in:
            for command, echo in self._seek_commands(state):
                self.send_filtered(command, echo)

    def set_interface(self, interface):
        """Set the interface variable used on login. Only before login."""
        if self.is_logged_in:
            raise RuntimeError('The interface variable is set on login, already logged in.')
        self._interface = interface


    ### Closing:

    def close(self, reason='Closed by us.'):
        """Close the connection. The disconnect functions are called (once)
        from the delivery thread, use wait_closed() to wait for that.
        Returns False if there was no connection.
        """
        if self._close_reason is None:
            self._close_reason = reason
        if self.is_logged_in:
            try:
                self._channel.send('$quit')
            except ConnectionClosed:
                pass
        return self._channel.close()

    disconnect = close

    def wait_closed(self, timeout=None):
        """Wait until the disconnect functions were called. Returns False on
        timeout.
        """
        return self._finished.wait(timeout)


    ### The delivery thread:

    def _post(self, function, *args):
        # Run function on the delivery thread (after everything read so far).
        # Without a connection it is dropped, the delivery state belongs to
        # that thread only.
        executor = self._executor
        if executor is None:
            logger.debug('Not connected, dropped %s%r', function.__name__, args)
            return False
        try:
            future = executor.submit(function, *args)
        except RuntimeError:
            # The connection is over, nothing is delivering anymore.
            logger.debug('Disconnected, dropped %s%r', function.__name__, args)
            return False
        future.add_done_callback(self._check)
        return True

    def _check(self, future):
        error = future.exception()
        if error is None:
            return
        if isinstance(error, GrammarError):
            logger.error('Could not parse server output, closing the connection.', exc_info=error)
            self.close('Grammar error.')
        else:
            logger.error('Error while handling server output, closing the connection.', exc_info=error)
            self.close('Socket closed.')

    def _read(self, sock, assembler, executor):
        try:
            for batch in read_batches(sock, assembler, self.READ_SIZE, self.BATCH_SIZE):
                executor.submit(self._deliver, batch).add_done_callback(self._check)
        except OSError as e:
            if self._close_reason is None:
                logger.warning('Reading from the server failed: %s', e)
        finally:
            self._channel.close()
            executor.submit(self._disconnected).add_done_callback(self._check)
            executor.shutdown(wait=False)

    def _deliver(self, batch):
        for line in batch:
            logger.debug('Received: %r', line)
            if self._close_reason is None:
                for pattern, reason in _CLOSE_REASONS:
                    if pattern.search(line):
                        self._close_reason = reason
            self.dispatcher.handle(line)

    def _login_succeeded(self, event):
        if not self.session.logged_in(event.username, event.titles):
            return False

        logger.info('Logged in as %s%s', event.username, event.titles or '')
        try:
            for command, echo in self._handshake_commands():
                self.send_filtered(command, echo)

            with self._lock:
                self._handshaken = True
                for command in self._send_after:
                    self.send(command)
                self._send_after = []
        except ConnectionClosed:
            # The disconnect functions will hear about it.
            logger.warning('Connection lost during the login handshake.')
        return False

    def _login_failed(self, event):
        if self.session.failed(event.reason):
            self.close('Login failed.')
        return False

    def _disconnected(self):
        if self._disconnect_fired:
            return
        self._disconnect_fired = True

        reason = self._close_reason or 'Socket closed.'
        self.session.disconnected()
        self.filters.clear()
        with self._lock:
            self._handshaken = False
        logger.info('Disconnected: %s', reason)
        try:
            for function in list(self._disconnect_functions):
                function(reason)
        finally:
            self._finished.set()
