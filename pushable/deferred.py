from __future__ import annotations
import asyncio
from typing import Any, Generator, Generic, Optional, TypeVar

T = TypeVar("T")


class Deferred(Generic[T]):
    """One-shot completion that can be settled before any event loop runs.

    The backing future is created on first await, so producers may push from
    plain callbacks. Awaiters are shielded: cancelling one waiter leaves the
    completion intact for the others.
    """

    def __init__(self) -> None:
        self._f: Optional[asyncio.Future[T]] = None
        self._settled = False
        self._value: Optional[T] = None

    @staticmethod
    def resolved(value: Any = None) -> "Deferred[Any]":
        d: Deferred[Any] = Deferred()
        d.succeed(value)
        return d

    def done(self) -> bool:
        return self._settled

    def result(self) -> T:
        if not self._settled:
            raise RuntimeError("Deferred not completed")
        return self._value  # type: ignore[return-value]

    def _future(self) -> "asyncio.Future[T]":
        if self._f is None:
            self._f = asyncio.get_running_loop().create_future()
            if self._settled:
                self._f.set_result(self._value)  # type: ignore[arg-type]
        return self._f

    async def await_(self) -> T:
        if self._settled:
            return self._value  # type: ignore[return-value]
        return await asyncio.shield(self._future())

    def __await__(self) -> Generator[Any, None, T]:
        return self.await_().__await__()

    def try_succeed(self, value: T) -> bool:
        if self._settled:
            return False
        self._settled = True
        self._value = value
        if self._f is not None and not self._f.done():
            self._f.set_result(value)
        return True

    def succeed(self, value: T) -> None:
        if not self.try_succeed(value):
            raise RuntimeError("Deferred already completed")
