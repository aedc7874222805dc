__all__ = ('Wire', 'connect')

import codecs
import collections
import functools

from asyncio import events

from . import constants
from . import exceptions
from . import matchers
from .log import logger
from .notifications import Emitter, Notification
from .transports import ProtocolTransport


def _check_options(ending, timeout):
    if not isinstance(ending, str):
        raise TypeError(f'ending must be a str, not {type(ending).__name__}')
    if not ending:
        raise ValueError('ending should be at least one character')
    if timeout is not None and timeout < 0:
        raise ValueError('timeout can not be less than zero')


class _ContextManagerHelper:
    __slots__ = ('_awaitable', '_result')

    def __init__(self, awaitable):
        self._awaitable = awaitable
        self._result = None

    def __await__(self):
        return self._awaitable.__await__()

    async def __aenter__(self):
        ret = await self._awaitable
        result = await ret.__aenter__()
        self._result = result
        return result

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return await self._result.__aexit__(exc_type, exc_val, exc_tb)


def connect(host=None, port=None, *,
            ending=constants.DEFAULT_ENDING,
            auto_resume=constants.DEFAULT_AUTO_RESUME,
            timeout=constants.DEFAULT_TIMEOUT,
            **kwds):
    """Connect to TCP socket on *host* : *port* and wrap it in a `Wire`.

    *ending*, *auto_resume* and *timeout* configure the returned `Wire`.
    The rest of the arguments are passed directly to
    `loop.create_connection()`.

    The result can be awaited, or used as an async context manager that
    closes the connection on exit.
    """
    # Validate now rather than after the connection is established.
    _check_options(ending, timeout)
    return _ContextManagerHelper(_connect(host, port,
                                          ending, auto_resume, timeout,
                                          kwds))


async def _connect(host, port, ending, auto_resume, timeout, kwds):
    loop = events.get_running_loop()
    _, protocol = await loop.create_connection(
        lambda: ProtocolTransport(loop=loop), host, port, **kwds)
    return Wire(protocol,
                ending=ending,
                auto_resume=auto_resume,
                timeout=timeout,
                loop=loop)


class _ReadRequest:
    __slots__ = ('matcher', 'future', 'timer')

    def __init__(self, matcher, future):
        self.matcher = matcher
        self.future = future
        self.timer = None

    def __repr__(self):
        return f'<_ReadRequest matcher={self.matcher!r}>'

    def cancel_timer(self):
        timer = self.timer
        if timer is not None:
            self.timer = None
            timer.cancel()

    def set_result(self, result):
        self.cancel_timer()
        if not self.future.done():
            self.future.set_result(result)

    def set_exception(self, exc):
        self.cancel_timer()
        if not self.future.done():
            self.future.set_exception(exc)


class Wire(Emitter):
    """Buffered, awaitable reads and line-oriented writes over a transport.

    Incoming data is decoded as UTF-8 and accumulated.  read(),
    read_until(), read_line() and wait_for() queue a request and return
    a future; requests complete strictly in the order they were made,
    each consuming its share of the buffer.

    While requests are queued the wire is paused: the 'readable'
    notification is only emitted when nothing is queued, text is
    buffered and the wire is flowing.  With *auto_resume* the wire
    starts flowing again once the queue drains.

    Read requests that are not satisfied within *timeout* seconds fail
    with ReadTimeoutError; a falsy *timeout* disables this.  When the
    transport closes, all queued requests fail with StreamClosedError
    and 'close' is emitted.
    """

    _events = tuple(Notification)

    def __init__(self, transport, *,
                 ending=constants.DEFAULT_ENDING,
                 auto_resume=constants.DEFAULT_AUTO_RESUME,
                 timeout=constants.DEFAULT_TIMEOUT,
                 loop=None):
        _check_options(ending, timeout)
        super().__init__()
        self._ending = ending
        self._auto_resume = bool(auto_resume)
        self._timeout = timeout or None
        self._loop = loop

        self._buffer = ''
        self._decoder = codecs.getincrementaldecoder('utf-8')('replace')
        self._requests = collections.deque()
        self._flowing = True
        self._transport = None
        self._closed = False
        self._close_waiter = None
        self._notify_handle = None

        self.set_transport(transport)

    def __repr__(self):
        info = [self.__class__.__name__]
        if self._buffer:
            info.append(f'{len(self._buffer)} chars')
        if self._requests:
            info.append(f'pending={len(self._requests)}')
        if not self._flowing:
            info.append('paused')
        if self._closed:
            info.append('closed')
        if self._transport is not None:
            info.append(f'transport={self._transport!r}')
        return '<{}>'.format(' '.join(info))

    def _get_loop(self):
        if self._loop is None:
            self._loop = events.get_running_loop()
        return self._loop

    @property
    def transport(self):
        return self._transport

    @property
    def readable(self):
        """True if a transport is bound and still readable."""
        transport = self._transport
        return transport is not None and bool(transport.readable)

    @property
    def flowing(self):
        return self._flowing

    @property
    def ending(self):
        return self._ending

    @property
    def buffered(self):
        """The text received but not consumed yet."""
        return self._buffer

    @property
    def pending(self):
        """Number of queued read requests."""
        return len(self._requests)

    def subscribe(self, event, callback, *, once=False):
        """Call `callback` on 'readable', 'error' or 'close'.

        A 'readable' callback is called right away if the wire would
        emit 'readable' now.
        """
        event = self._event(event)
        catch_up = (event is Notification.READABLE and
                    not self._requests and self._buffer and self._flowing)
        if not (catch_up and once):
            super().subscribe(event, callback, once=once)
        if catch_up:
            callback()

    # Transport binding.

    def set_transport(self, transport):
        """Bind to `transport`, detaching from the current one.

        Data the transport buffered before binding is taken over.
        Binding the transport that is already bound is harmless.
        """
        old = self._transport
        if old is not None:
            self._detach(old)
        if transport is not old:
            if old is not None:
                logger.debug("%r switches from %r to %r",
                             self, old, transport)
            self._transport = transport
            self._closed = False
            # A character split across transports can not be completed.
            self._on_data(self._decoder.decode(b'', True))
            self._decoder.reset()
        if transport.readable:
            self._on_data(transport.read())
        self._attach(transport)

    def _handlers(self):
        return (('error', self._on_error),
                ('data', self._on_data),
                ('close', self._on_close),
                ('end', self._on_close))

    def _attach(self, transport):
        if self._on_data in transport.listeners('data'):
            return
        for event, handler in self._handlers():
            transport.subscribe(event, handler)

    def _detach(self, transport):
        for event, handler in self._handlers():
            transport.unsubscribe(event, handler)

    def _on_data(self, data):
        if not data:
            return
        if isinstance(data, str):
            text = data
        else:
            text = self._decoder.decode(data)
        if not text:
            # Only part of a multi-byte character so far.
            return
        self._buffer += text
        self._run()

    def _on_error(self, exc):
        if not self._emit(Notification.ERROR, exc):
            logger.error("%r: unhandled transport error", self,
                         exc_info=exc)

    def _on_close(self):
        if self._closed:
            return
        self._closed = True
        self._buffer += self._decoder.decode(b'', True)
        self._decoder.reset()

        requests = self._requests
        self._requests = collections.deque()
        if self._transport is not None:
            logger.debug("%r: transport %r closed, failing %d request(s)",
                         self, self._transport, len(requests))
        for request in requests:
            request.set_exception(exceptions.StreamClosedError())
        if requests and self._auto_resume:
            self._flowing = True

        waiter = self._close_waiter
        if waiter is not None:
            self._close_waiter = None
            if not waiter.done():
                waiter.set_result(None)
        self._emit(Notification.CLOSE)

    def close(self):
        """Destroy the bound transport."""
        if self._transport is not None:
            self._transport.destroy()

    async def wait_closed(self):
        """Wait until 'close' has been emitted for the bound transport."""
        if self._closed:
            return
        if self._close_waiter is None:
            self._close_waiter = self._get_loop().create_future()
        await self._close_waiter

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._transport is None:
            return
        self.close()
        await self.wait_closed()

    # Writing.

    def write(self, data):
        """Write str or bytes to the transport as is."""
        transport = self._transport
        if transport is None or not transport.readable:
            raise exceptions.TransportUnavailableError()
        transport.write(data)

    def write_line(self, line):
        """Write `line` followed by the configured ending."""
        self.write(f'{line}{self._ending}')

    def write_lines(self, lines):
        for line in lines:
            self.write_line(line)

    # Flow control.

    def pause(self):
        """Stop emitting 'readable'."""
        if self._flowing:
            self._flowing = False
            logger.debug("%r pauses reading", self)

    def resume(self):
        """Emit 'readable' again, and serve queued requests."""
        if not self._flowing:
            self._flowing = True
            logger.debug("%r resumes reading", self)
        self._run()

    # Reading.

    def read(self, count):
        """Read exactly `count` characters.

        Return a future that resolves once `count` characters are
        buffered.  If count is zero, it resolves to an empty string.
        """
        return self._schedule(matchers.CountMatcher(count))

    def read_until(self, sequence, *, max_length=None):
        """Read text up to `sequence`, or to one of several sequences.

        Return a future that resolves to the text before the sequence;
        that text and the sequence are consumed.  When several sequences
        are given, the first one in argument order that is found in the
        buffer wins.

        If *max_length* is set and the text before the sequence, or the
        whole buffer while no sequence is found, is longer than that,
        the future fails with LengthExceededError and the buffer is left
        untouched.
        """
        return self._schedule(matchers.SequenceMatcher(sequence, max_length))

    def read_line(self, *, max_length=None):
        """Read a line without its ending."""
        return self.read_until(self._ending, max_length=max_length)

    def wait_for(self, predicate):
        """Wait until predicate(buffer) is true.

        Return a future that resolves to the whole buffer.  Nothing is
        consumed.
        """
        return self._schedule(matchers.PredicateMatcher(predicate))

    def _schedule(self, matcher):
        loop = self._get_loop()
        self.pause()
        request = _ReadRequest(matcher, loop.create_future())
        self._requests.append(request)
        if len(self._requests) == 1:
            self._run(notify=False)

        future = request.future
        if future.done():
            return future
        if not self.readable:
            self._discard(request, exceptions.TransportUnavailableError(),
                          notify=False)
            return future
        if self._timeout:
            request.timer = loop.call_later(self._timeout,
                                            self._on_timeout, request)
        future.add_done_callback(
            functools.partial(self._on_request_done, request))
        return future

    def _on_request_done(self, request, fut):
        if fut.cancelled():
            self._discard(request)

    def _on_timeout(self, request):
        request.timer = None
        if request.future.done():
            return
        logger.debug("%r: %r timed out", self, request)
        self._discard(request, exceptions.ReadTimeoutError(self._timeout))

    def _discard(self, request, exc=None, notify=True):
        try:
            index = self._requests.index(request)
        except ValueError:
            return
        del self._requests[index]
        if exc is None:
            request.cancel_timer()
        else:
            request.set_exception(exc)
        if index == 0:
            if not self._requests and self._auto_resume:
                self._flowing = True
            self._run(notify)

    def _run(self, notify=True):
        # Advance the head of the queue for as long as it completes.
        requests = self._requests
        while requests:
            request = requests[0]
            if request.future.done():
                # Cancelled by the caller.
                requests.popleft()
                request.cancel_timer()
            else:
                try:
                    outcome = request.matcher.try_advance(self._buffer)
                except Exception as exc:
                    requests.popleft()
                    request.set_exception(exc)
                else:
                    if outcome is None:
                        return
                    result, consumed = outcome
                    if consumed:
                        self._buffer = self._buffer[consumed:]
                    requests.popleft()
                    request.set_result(result)
            if not requests and self._auto_resume:
                self._flowing = True

        if notify:
            self._notify_readable()
        elif self._buffer and self._flowing and self._notify_handle is None:
            # Called from a read*() method, possibly from a 'readable'
            # callback: notify on the next loop iteration instead.
            self._notify_handle = self._get_loop().call_soon(
                self._deferred_readable)

    def _deferred_readable(self):
        self._notify_handle = None
        self._notify_readable()

    def _notify_readable(self):
        if not self._requests and self._buffer and self._flowing:
            self._emit(Notification.READABLE)
