"""The login/session state of a connection."""

import collections
import concurrent.futures
import enum
import logging
import threading

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    CREDENTIALS_SENT = 'credentials sent'
    AWAITING_CONFIRMATION = 'awaiting confirmation'
    LOGGED_IN = 'logged in'
    FAILED = 'failed'


LoginResult = collections.namedtuple('LoginResult', 'success username titles reason')
LoginResult.__doc__ = """What login() returns. username and titles are the
ones the server confirmed, reason is None on success."""

# States in which the server can still confirm or refuse the login.
_PENDING = (SessionState.CREDENTIALS_SENT, SessionState.AWAITING_CONFIRMATION)


class Session(object):
    """The session state machine:

        DISCONNECTED -connecting()-> CONNECTING -credentials_sent()->
        CREDENTIALS_SENT -awaiting_confirmation()-> AWAITING_CONFIRMATION
        then logged_in(username, titles) -> LOGGED_IN or failed(reason) ->
        FAILED. Anything -disconnected()-> DISCONNECTED.

    The outcome of the login is a one shot future, resolved by logged_in,
    failed or (if neither happened) disconnected. wait() blocks on it.

    username is the name the server confirmed, it replaces whatever was
    requested. reason is the failure reason of the last login.
    """

    def __init__(self):
        self.state = SessionState.DISCONNECTED
        self.requested_username = None
        self.username = None
        self.titles = None
        self.reason = None
        self._outcome = None
        self._waited = False
        self._wait_lock = threading.Lock()

    def connecting(self, username):
        if self.state is not SessionState.DISCONNECTED:
            raise RuntimeError('Session is %s, not disconnected.' % self.state.value)
        self.state = SessionState.CONNECTING
        self.requested_username = username
        self.username = None
        self.titles = None
        self.reason = None
        with self._wait_lock:
            self._outcome = concurrent.futures.Future()
            self._waited = False

    def credentials_sent(self):
        self._move(SessionState.CONNECTING, SessionState.CREDENTIALS_SENT)

    def awaiting_confirmation(self):
        """Returns False if the server already answered."""
        if self.state is not SessionState.CREDENTIALS_SENT:
            return False
        self.state = SessionState.AWAITING_CONFIRMATION
        return True

    def _move(self, old, new):
        if self.state is not old:
            raise RuntimeError('Session is %s, not %s.' % (self.state.value, old.value))
        self.state = new

    def logged_in(self, username, titles=None):
        """Returns False (and changes nothing) if no login was pending."""
        if self.state not in _PENDING:
            logger.warning('Login confirmation for %s while %s, ignored.', username, self.state.value)
            return False
        self.state = SessionState.LOGGED_IN
        self.username = username
        self.titles = titles
        self._outcome.set_result(LoginResult(True, username, titles, None))
        return True

    def failed(self, reason):
        """Returns False (and changes nothing) if no login was pending."""
        if self.state not in _PENDING:
            logger.warning('Login failure (%s) while %s, ignored.', reason, self.state.value)
            return False
        self.state = SessionState.FAILED
        self.reason = reason
        self._outcome.set_result(LoginResult(False, None, None, reason))
        return True

    def disconnected(self):
        """Returns True if this woke up a pending login."""
        self.state = SessionState.DISCONNECTED
        if self._outcome is not None and not self._outcome.done():
            self.reason = 'Disconnected'
            self._outcome.set_result(LoginResult(False, None, None, 'Disconnected'))
            return True
        return False

    @property
    def decided(self):
        return self._outcome is not None and self._outcome.done()

    def wait(self):
        """Block until the login is decided and return the LoginResult. Only
        once per connection and by one thread, a second caller (even while
        the first one still waits) gets a RuntimeError.
        """
        with self._wait_lock:
            if self._outcome is None:
                raise RuntimeError('Not connected.')
            if self._waited:
                raise RuntimeError('The login was already waited for.')
            self._waited = True
        return self._outcome.result()
