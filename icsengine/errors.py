"""The exceptions of the package."""

from icsengine.parser import GrammarError

__all__ = ['ConnectionClosed', 'GrammarError']


class ConnectionClosed(Exception):
    """Is raised when something needs the connection, but there is none
    (sending while not connected, for example).
    The reasons given to disconnect functions are the same strings:
        o 'Someone logged in as me.'
        o 'Nuked'
        o 'Closed by us.'
        o 'Login failed.'
        o 'Grammar error.'
        o 'Socket closed.' (Fallback)
    """

    def __init__(self, string='Socket closed.'):
        Exception.__init__(self, string)
        self.value = string

    def __str__(self):
        return self.value
