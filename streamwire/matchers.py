"""Resumable matchers over a Wire's text buffer.

A matcher is the state of one pending read.  The scheduler calls
try_advance() with the current buffer whenever the buffer may have
changed while the matcher is at the head of the queue.  It returns None
when the buffer cannot satisfy the read yet, or a (result, consumed)
pair once it can, where `consumed` is the number of leading characters
to drop from the buffer.

Only the head of the queue is ever advanced, and only the head
consumes, so a matcher sees a buffer that grows monotonically between
two calls.  Matchers rely on that to avoid rescanning.
"""

__all__ = ('Matcher', 'CountMatcher', 'SequenceMatcher',
           'PredicateMatcher')

from abc import ABCMeta, abstractmethod

from . import exceptions


class Matcher(metaclass=ABCMeta):
    """Base class of the matchers."""

    __slots__ = ()

    @abstractmethod
    def try_advance(self, buffer):
        """Return (result, consumed), or None if `buffer` is not enough."""

    def __repr__(self):
        return f'<{self.__class__.__name__}>'


class CountMatcher(Matcher):
    """Matches once `count` characters are buffered."""

    __slots__ = ('_count',)

    def __init__(self, count):
        if isinstance(count, bool) or not isinstance(count, int):
            raise TypeError(
                f'count must be an int, not {type(count).__name__}')
        if count < 0:
            raise ValueError('read count can not be less than zero')
        self._count = count

    def __repr__(self):
        return f'<{self.__class__.__name__} count={self._count}>'

    def try_advance(self, buffer):
        n = self._count
        if len(buffer) < n:
            return None
        return buffer[:n], n


class SequenceMatcher(Matcher):
    """Matches text terminated by one of several sequences.

    Sequences are tried in the order given; the first one present in the
    buffer wins even if another one occurs earlier.  The result excludes
    the sequence, but both are consumed.
    """

    __slots__ = ('_sequences', '_offsets', '_max_length')

    def __init__(self, sequences, max_length=None):
        if isinstance(sequences, str):
            sequences = (sequences,)
        else:
            sequences = tuple(sequences)
        if not sequences:
            raise ValueError('At least one sequence is required')
        for seq in sequences:
            if not isinstance(seq, str):
                raise TypeError(
                    f'sequence must be a str, not {type(seq).__name__}')
            if not seq:
                raise ValueError('Sequence should be at least one character')
        if max_length is not None and max_length < 0:
            raise ValueError('max_length can not be less than zero')
        self._sequences = sequences
        # For each sequence, the position before which the buffer is
        # known not to contain it.
        self._offsets = [0] * len(sequences)
        self._max_length = max_length

    def __repr__(self):
        info = [self.__class__.__name__,
                f'sequences={self._sequences!r}']
        if self._max_length is not None:
            info.append(f'max_length={self._max_length}')
        return '<{}>'.format(' '.join(info))

    def try_advance(self, buffer):
        buflen = len(buffer)
        max_length = self._max_length

        for i, seq in enumerate(self._sequences):
            seqlen = len(seq)
            offset = self._offsets[i]
            if buflen - offset < seqlen:
                continue
            isep = buffer.find(seq, offset)
            if isep == -1:
                # The tail may hold the start of `seq`; rescan it next time.
                self._offsets[i] = buflen + 1 - seqlen
                continue
            if max_length is not None and isep > max_length:
                raise exceptions.LengthExceededError(
                    'Sequence is found, but chunk is longer than limit',
                    isep, max_length)
            return buffer[:isep], isep + seqlen

        if max_length is not None and buflen > max_length:
            raise exceptions.LengthExceededError(
                'Sequence is not found, and chunk exceed the limit',
                buflen, max_length)
        return None


class PredicateMatcher(Matcher):
    """Matches once predicate(buffer) is true, without consuming."""

    __slots__ = ('_predicate',)

    def __init__(self, predicate):
        if not callable(predicate):
            raise TypeError('predicate must be callable')
        self._predicate = predicate

    def __repr__(self):
        return f'<{self.__class__.__name__} predicate={self._predicate!r}>'

    def try_advance(self, buffer):
        if self._predicate(buffer):
            return buffer, 0
        return None
