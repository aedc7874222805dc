__all__ = ('DuplexTransport',)


from abc import ABCMeta, abstractmethod

from .notifications import Emitter


class DuplexTransport(Emitter, metaclass=ABCMeta):
    """A byte channel a Wire can be bound to.

    Emits 'data' (one bytes or str argument), 'error' (the exception),
    'end' and 'close' (no arguments).
    """

    _events = ('data', 'error', 'close', 'end')

    @property
    @abstractmethod
    def readable(self):
        """True while data may still arrive."""

    @abstractmethod
    def write(self, data):
        """Send bytes, or str encoded as UTF-8."""

    @abstractmethod
    def destroy(self):
        """Close the channel in both directions; emits 'close'."""

    def read(self):
        """Return and forget data received while nobody listened to 'data'.

        Returns None when there is none.
        """
        return None
