from __future__ import annotations
from typing import Callable, Generic, Optional, TypeVar

from .deferred import Deferred
from .fifo import SizedFIFO, count_size

T = TypeVar("T")


class _Chunk(Generic[T]):
    __slots__ = ("item", "delivered")

    def __init__(self, item: T, delivered: Deferred[None]):
        self.item = item
        self.delivered = delivered


class PFIFO(Generic[T]):
    """Rendezvous queue pairing pushed items with waiting consumers in order.

    ``push`` returns a completion that resolves once that item has been handed
    to a consumer. ``shift`` returns a completion resolved with the next item,
    immediately when one is buffered. The Nth shift receives the Nth push.
    ``size`` and ``is_empty`` describe only unmatched, buffered items.
    """

    def __init__(self, size_of: Optional[Callable[[T], int]] = None, split_limit: int = 16):
        item_size = size_of or count_size
        self._buffer: SizedFIFO[_Chunk[T]] = SizedFIFO(split_limit, size_of=lambda c: item_size(c.item))
        self._consumers: SizedFIFO[Deferred[T]] = SizedFIFO()

    def push(self, item: T, delivered: Optional[Deferred[None]] = None) -> Deferred[None]:
        d: Deferred[None] = delivered if delivered is not None else Deferred()
        self._buffer.push(_Chunk(item, d))
        self._consume()
        return d

    def shift(self) -> Deferred[T]:
        d: Deferred[T] = Deferred()
        self._consumers.push(d)
        self._consume()
        return d

    def _consume(self) -> None:
        while not self._consumers.is_empty() and not self._buffer.is_empty():
            consumer = self._consumers.shift()
            if consumer.done():
                continue  # abandoned
            chunk = self._buffer.shift()
            consumer.succeed(chunk.item)
            chunk.delivered.try_succeed(None)

    def clear(self) -> int:
        """Drop buffered items, releasing their producers. Returns how many."""
        dropped = 0
        while not self._buffer.is_empty():
            self._buffer.shift().delivered.try_succeed(None)
            dropped += 1
        self._buffer.clear()
        return dropped

    def interrupt(self, item: T) -> int:
        """Resolve every waiting consumer with ``item``. Returns how many."""
        n = 0
        while not self._consumers.is_empty():
            if self._consumers.shift().try_succeed(item):
                n += 1
        return n

    def abandon(self, consumer: Deferred[T]) -> bool:
        """Withdraw a pending ``shift`` so it is skipped by later pushes."""
        return consumer.try_succeed(None)  # type: ignore[arg-type]

    def is_empty(self) -> bool:
        return self._buffer.is_empty()

    def __len__(self) -> int:
        return len(self._buffer)

    @property
    def size(self) -> int:
        return self._buffer.size
