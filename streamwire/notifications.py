__all__ = ('Notification', 'Emitter')

import enum


class Notification(enum.Enum):
    READABLE = 'readable'
    ERROR = 'error'
    CLOSE = 'close'


class Emitter:
    """Ordered callbacks over a closed set of events.

    Subclasses list the events they emit in `_events`.  Events are given
    as members of an enum whose values are strings, or as those strings.
    """

    _events = ()

    def __init__(self):
        self._listeners = {event: [] for event in self._events}

    def _event(self, event):
        if event in self._listeners:
            return event
        for known in self._events:
            if isinstance(known, enum.Enum) and known.value == event:
                return known
        raise ValueError(f'{self.__class__.__name__} has no '
                         f'event {event!r}')

    def listeners(self, event):
        """Return a copy of the callbacks subscribed to `event`."""
        return [cb for cb, once in self._listeners[self._event(event)]]

    def subscribe(self, event, callback, *, once=False):
        """Call `callback` whenever `event` is emitted.

        With once=True the callback is unsubscribed before its first call.
        """
        if not callable(callback):
            raise TypeError('callback must be callable')
        self._listeners[self._event(event)].append((callback, once))

    def unsubscribe(self, event, callback):
        """Remove the earliest subscription of `callback` to `event`.

        Unknown callbacks are ignored.
        """
        entries = self._listeners[self._event(event)]
        for i, (cb, once) in enumerate(entries):
            if cb == callback:
                del entries[i]
                return

    def _emit(self, event, *args):
        entries = self._listeners[event]
        if not entries:
            return False
        # Callbacks may (un)subscribe while we iterate.
        for entry in list(entries):
            cb, once = entry
            if once:
                try:
                    entries.remove(entry)
                except ValueError:
                    continue
            cb(*args)
        return True
