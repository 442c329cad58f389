from __future__ import annotations
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class QueueItem(Generic[T]):
    """Tagged buffer entry: a value, the end marker, or an error marker."""
    done: bool
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @staticmethod
    def of(value: T) -> "QueueItem[T]": return QueueItem(False, value)
    @staticmethod
    def end() -> "QueueItem[T]": return QueueItem(True)
    @staticmethod
    def fail(error: BaseException) -> "QueueItem[T]": return QueueItem(True, error=error)

    def is_error(self) -> bool: return self.error is not None


@dataclass(frozen=True)
class Next(Generic[T]):
    """Result of one ``next()`` call."""
    done: bool
    value: Optional[T] = None


DONE: Next = Next(True)
