"""streamwire exceptions."""


__all__ = ('WireError', 'TransportUnavailableError',
           'LengthExceededError', 'ReadTimeoutError',
           'StreamClosedError')


class WireError(Exception):
    """Base class for errors raised by a Wire."""


class TransportUnavailableError(WireError, ConnectionError):
    """No readable transport is bound to the wire."""

    def __init__(self, message='Transport is not available'):
        super().__init__(message)


class LengthExceededError(WireError):
    """Reached the buffer limit while looking for a separator.

    Attributes:
    - length: number of buffered characters that were examined
    - max_length: the limit that was exceeded
    """
    def __init__(self, message, length, max_length):
        super().__init__(message)
        self.length = length
        self.max_length = max_length

    def __reduce__(self):
        return type(self), (self.args[0], self.length, self.max_length)


class ReadTimeoutError(WireError, TimeoutError):
    """A read request was not satisfied in time.

    Attributes:
    - timeout: the configured timeout, in seconds
    """
    def __init__(self, timeout):
        super().__init__(f'Read timeout after {timeout!r} seconds')
        self.timeout = timeout

    def __reduce__(self):
        return type(self), (self.timeout,)


class StreamClosedError(WireError, EOFError):
    """The transport closed while the read request was pending."""

    def __init__(self, message='Stream closed'):
        super().__init__(message)
