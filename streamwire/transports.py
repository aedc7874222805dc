__all__ = ('MemoryTransport', 'ProtocolTransport')

from asyncio import protocols

from .abc_streams import DuplexTransport
from .log import logger


def _to_bytes(data):
    if isinstance(data, str):
        return data.encode('utf-8')
    return bytes(data)


class MemoryTransport(DuplexTransport):
    """In-process duplex transport.

    On its own, what is written to it becomes readable from it (a
    pass-through).  Transports created by pair() are cross-connected:
    what is written to one is received by the other.

    Data arriving while nobody listens to 'data' is kept until read().
    """

    def __init__(self):
        super().__init__()
        self._peer = None
        self._pending = bytearray()
        self._ended = False
        self._destroyed = False

    @classmethod
    def pair(cls):
        """Return two connected transports."""
        a = cls()
        b = cls()
        a._peer = b
        b._peer = a
        return a, b

    def __repr__(self):
        info = [self.__class__.__name__]
        if self._pending:
            info.append(f'{len(self._pending)} bytes')
        if self._peer is not None:
            info.append('paired')
        if self._destroyed:
            info.append('destroyed')
        elif self._ended:
            info.append('ended')
        return '<{}>'.format(' '.join(info))

    @property
    def readable(self):
        return not (self._ended or self._destroyed)

    def read(self):
        if not self._pending:
            return None
        data = bytes(self._pending)
        self._pending.clear()
        return data

    def write(self, data):
        if self._destroyed:
            raise RuntimeError('write after destroy')
        if self._peer is None and self._ended:
            raise RuntimeError('write after end')
        target = self if self._peer is None else self._peer
        target._receive(_to_bytes(data))

    def _receive(self, data):
        if not data or not self.readable:
            return
        if self._listeners['data']:
            self._emit('data', data)
        else:
            self._pending.extend(data)

    def end(self):
        """Signal that no more data will be written."""
        if self._peer is None:
            self._finish()
        else:
            self._peer._finish()

    def _finish(self):
        if not self.readable:
            return
        self._ended = True
        self._emit('end')
        self._emit('close')

    def destroy(self, exc=None):
        """Close both directions, optionally reporting `exc` as an error."""
        if self._destroyed:
            return
        self._destroyed = True
        if exc is not None:
            self._emit('error', exc)
        self._emit('close')
        if self._peer is not None:
            self._peer._finish()


class ProtocolTransport(protocols.Protocol, DuplexTransport):
    """Adapts an asyncio transport to the DuplexTransport events.

    Use it as the protocol of loop.create_connection() and friends.
    """

    def __init__(self, *, loop):
        DuplexTransport.__init__(self)
        self._loop = loop
        self._transport = None
        self._pending = bytearray()
        self._eof = False
        self._closed = loop.create_future()

    def __repr__(self):
        info = [self.__class__.__name__]
        if self._pending:
            info.append(f'{len(self._pending)} bytes')
        if self._eof:
            info.append('eof')
        if self._transport is not None:
            info.append(f'transport={self._transport!r}')
        return '<{}>'.format(' '.join(info))

    def connection_made(self, transport):
        self._transport = transport

    def connection_lost(self, exc):
        if exc is not None:
            self._emit('error', exc)
        self._transport = None
        if not self._closed.done():
            self._closed.set_result(None)
        self._emit('close')

    def data_received(self, data):
        if self._listeners['data']:
            self._emit('data', data)
        else:
            self._pending.extend(data)

    def eof_received(self):
        self._eof = True
        self._emit('end')
        # Let the transport close itself.
        return False

    @property
    def readable(self):
        return (self._transport is not None and not self._eof and
                not self._transport.is_closing())

    def read(self):
        if not self._pending:
            return None
        data = bytes(self._pending)
        self._pending.clear()
        return data

    def write(self, data):
        if self._transport is None:
            raise ConnectionResetError('Connection lost')
        self._transport.write(_to_bytes(data))

    def destroy(self):
        transport = self._transport
        if transport is None:
            return
        if self._loop.get_debug():
            logger.debug("%r closes the connection", self)
        transport.close()

    async def wait_closed(self):
        await self._closed

    def get_extra_info(self, name, default=None):
        if self._transport is None:
            return default
        return self._transport.get_extra_info(name, default)
