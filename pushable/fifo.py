from __future__ import annotations
from typing import Any, Callable, Generic, List, Optional, TypeVar

from .errors import InvalidValueType

T = TypeVar("T")


class _Empty:
    __slots__ = ()

    def __repr__(self) -> str:
        return "EMPTY"

    def __bool__(self) -> bool:
        return False


# Returned by shift()/peek() on an empty buffer; None is a legal item.
EMPTY: Any = _Empty()


def byte_length(value: Any) -> Optional[int]:
    """Byte length of ``value``, or None when it does not expose one.

    bytes-likes report their length, ``memoryview`` its ``nbytes``, array
    objects an integer ``nbytes`` attribute, and lists/tuples of byte-like
    chunks the sum of their chunks.
    """
    if isinstance(value, memoryview):
        return value.nbytes
    if isinstance(value, (bytes, bytearray)):
        return len(value)
    nbytes = getattr(value, "nbytes", None)
    if isinstance(nbytes, int) and not isinstance(nbytes, bool):
        return nbytes
    if isinstance(value, (list, tuple)) and value:
        total = 0
        for chunk in value:
            n = byte_length(chunk)
            if n is None:
                return None
            total += n
        return total
    return None


def object_size(value: Any) -> int:
    n = byte_length(value)
    return 1 if n is None else n


def strict_byte_size(value: Any) -> int:
    n = byte_length(value)
    if n is None:
        raise InvalidValueType(value)
    return n


def count_size(_value: Any) -> int:
    return 1


class _Slot(Generic[T]):
    __slots__ = ("item", "size")

    def __init__(self, item: T, size: int):
        self.item = item
        self.size = size


class FixedFIFO(Generic[T]):
    """Fixed-capacity ring buffer page. Capacity must be a power of two."""

    def __init__(self, capacity: int):
        if capacity <= 0 or (capacity - 1) & capacity:
            raise ValueError("FixedFIFO capacity must be a power of two")
        self.buffer: List[Optional[_Slot[T]]] = [None] * capacity
        self._mask = capacity - 1
        self._top = 0
        self._btm = 0
        self.next: Optional[FixedFIFO[T]] = None

    @property
    def capacity(self) -> int:
        return len(self.buffer)

    def push(self, slot: _Slot[T]) -> bool:
        if self.buffer[self._top] is not None:
            return False
        self.buffer[self._top] = slot
        self._top = (self._top + 1) & self._mask
        return True

    def shift(self) -> Optional[_Slot[T]]:
        slot = self.buffer[self._btm]
        if slot is None:
            return None
        self.buffer[self._btm] = None
        self._btm = (self._btm + 1) & self._mask
        return slot

    def peek(self) -> Optional[_Slot[T]]:
        return self.buffer[self._btm]

    def is_empty(self) -> bool:
        return self.buffer[self._btm] is None


class SizedFIFO(Generic[T]):
    """Growable FIFO of linked ring-buffer pages with a running logical size.

    Writes go to ``head``; when it fills, a page of double capacity is linked
    after it. Reads come from ``tail``; an exhausted tail is dropped in favour
    of its successor. Each item's size is computed once, on insertion, and the
    same amount is subtracted when it leaves.

    Args:
        split_limit: Capacity of the first page (power of two).
        size_of: Logical size of an item. Defaults to 1 per item. May raise
            (e.g. ``InvalidValueType``) to reject an item before it is stored.
    """

    def __init__(self, split_limit: int = 16, size_of: Optional[Callable[[T], int]] = None):
        self._split_limit = split_limit
        self.head: FixedFIFO[T] = FixedFIFO(split_limit)
        self.tail: FixedFIFO[T] = self.head
        self._size_of: Callable[[T], int] = size_of or count_size
        self.size = 0
        self._length = 0

    def __len__(self) -> int:
        return self._length

    def clear(self) -> None:
        self.head = self.tail = FixedFIFO(self._split_limit)
        self.size = 0
        self._length = 0

    def push(self, item: T) -> None:
        slot = _Slot(item, self._size_of(item))
        if not self.head.push(slot):
            page: FixedFIFO[T] = FixedFIFO(2 * self.head.capacity)
            self.head.next = page
            self.head = page
            page.push(slot)
        self.size += slot.size
        self._length += 1

    def _advance(self) -> None:
        if self.tail.is_empty() and self.tail.next is not None:
            nxt = self.tail.next
            self.tail.next = None
            self.tail = nxt

    def shift(self) -> T:
        self._advance()
        slot = self.tail.shift()
        if slot is None:
            return EMPTY
        self.size -= slot.size
        self._length -= 1
        return slot.item

    def peek(self) -> T:
        self._advance()
        slot = self.tail.peek()
        return EMPTY if slot is None else slot.item

    def is_empty(self) -> bool:
        return self._length == 0

    def pages(self) -> int:
        n, page = 0, self.tail
        while page is not None:
            n += 1
            page = page.next
        return n
