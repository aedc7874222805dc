from unittest.mock import MagicMock, call

import pytest

from streamwire.notifications import Emitter, Notification


class Events(Emitter):
    _events = ('ping', 'pong')


def test_subscribers_are_called_in_order():
    emitter = Events()
    calls = []
    emitter.subscribe('ping', lambda value: calls.append(('first', value)))
    emitter.subscribe('ping', lambda value: calls.append(('second', value)))

    assert emitter._emit('ping', 1)
    assert calls == [('first', 1), ('second', 1)]


def test_emit_without_subscribers_returns_false():
    assert not Events()._emit('pong')


def test_unsubscribe():
    emitter = Events()
    callback = MagicMock()
    emitter.subscribe('ping', callback)
    emitter.unsubscribe('ping', callback)
    # Unknown callbacks are ignored.
    emitter.unsubscribe('ping', callback)

    emitter._emit('ping')
    callback.assert_not_called()
    assert emitter.listeners('ping') == []


def test_once():
    emitter = Events()
    callback = MagicMock()
    emitter.subscribe('pong', callback, once=True)

    emitter._emit('pong', 'a')
    emitter._emit('pong', 'b')
    assert callback.call_args_list == [call('a')]


def test_unsubscribe_while_emitting():
    emitter = Events()
    second = MagicMock()

    def first():
        emitter.unsubscribe('ping', second)

    emitter.subscribe('ping', first)
    emitter.subscribe('ping', second)
    emitter._emit('ping')
    emitter._emit('ping')
    assert second.call_count == 1


def test_unknown_event():
    emitter = Events()
    with pytest.raises(ValueError):
        emitter.subscribe('data', MagicMock())
    with pytest.raises(ValueError):
        emitter.listeners('data')


def test_callback_must_be_callable():
    with pytest.raises(TypeError):
        Events().subscribe('ping', None)


def test_enum_events_accept_their_values():
    class Notifier(Emitter):
        _events = tuple(Notification)

    emitter = Notifier()
    callback = MagicMock()
    emitter.subscribe('readable', callback)

    emitter._emit(Notification.READABLE)
    callback.assert_called_once_with()
    assert emitter.listeners(Notification.READABLE) == [callback]
