from __future__ import annotations
import abc
import asyncio
import dataclasses
import enum
import itertools
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Generic, Iterable, List, Optional, TypeVar

from .abort import AbortSignal, race_signal
from .deferred import Deferred
from .errors import AlreadyEnded
from .item import DONE, Next, QueueItem
from .logger import default_logger
from .options import PushableOptions
from .pfifo import PFIFO

T = TypeVar("T")

_ids = itertools.count(1)


class State(enum.Enum):
    ACTIVE = "active"
    ENDING = "ending"        # end() called, buffered values still draining
    ENDED_OK = "ended"
    ENDED_ERROR = "errored"


def _observe(task: "asyncio.Future[Any]") -> None:
    # an abort nobody awaits is still retrieved here, never reported as lost
    if not task.cancelled():
        task.exception()


class _Admission:
    __slots__ = ("item", "done", "until_delivered", "signal")

    def __init__(self, item: QueueItem[Any], until_delivered: bool):
        self.item = item
        self.done: Deferred[None] = Deferred()
        self.until_delivered = until_delivered
        self.signal: Optional[AbortSignal] = None

    def aborted(self) -> bool:
        return not self.item.done and self.signal is not None and self.signal.is_set()


class _PushableBase(abc.ABC, Generic[T]):
    """Shared state machine for the scalar and vectorized queues.

    Producers call ``push``/``end``; one consumer drains with ``next`` (or
    ``async for``) and may stop early with ``aclose``/``athrow``.
    """

    def __init__(self, options: Optional[PushableOptions] = None, **kwargs: Any):
        if options is None:
            options = PushableOptions(**kwargs)
        elif kwargs:
            options = dataclasses.replace(options, **kwargs)
        self.options = options
        self._size_of = self._item_size(options.size_function())
        self._fifo: PFIFO[QueueItem[Any]] = PFIFO(self._size_of, options.split_limit)
        self._hwm = options.high_water_mark
        self._admissions: Deque[_Admission] = deque()
        self._drain_waiters: List[Deferred[None]] = []
        self._carry: Optional[QueueItem[Any]] = None
        self._on_end = options.on_end
        self._state = State.ACTIVE
        self._error: Optional[BaseException] = None
        self._piped = False
        self._end_delivered: Deferred[None] = Deferred.resolved()
        self._log = (options.logger or default_logger).bind(queue=next(_ids))

    def _item_size(self, size: Callable[[Any], int]) -> Callable[[QueueItem[Any]], int]:
        def item_size(item: QueueItem[Any]) -> int:
            return 0 if item.done else size(item.value)
        return item_size

    # -- introspection -------------------------------------------------
    @property
    def readable_length(self) -> int:
        """Buffered logical size: bytes for byte-like values, else items."""
        return self._fifo.size

    @property
    def state(self) -> State:
        return self._state

    @property
    def ended(self) -> bool:
        return self._state is not State.ACTIVE

    def _buffer_empty(self) -> bool:
        return self._fifo.is_empty() and not self._admissions

    # -- producer side -------------------------------------------------
    def _push_item(self, item: QueueItem[Any], signal: Optional[AbortSignal], error_code: Optional[str]) -> Awaitable[None]:
        if self._state is not State.ACTIVE:
            raise AlreadyEnded()
        delivered, entry = self._enqueue(item)
        return self._wait(delivered, entry, signal, error_code, "push")

    def _enqueue(self, item: QueueItem[Any], until_delivered: bool = False):
        if self._hwm is None:
            return self._fifo.push(item), None
        if not self._admissions and (item.done or self._fifo.size < self._hwm):
            delivered = self._fifo.push(item)
            return (delivered if until_delivered else Deferred.resolved()), None
        self._size_of(item)  # reject bad values before they wait
        entry = _Admission(item, until_delivered)
        self._admissions.append(entry)
        return entry.done, entry

    def _wait(self, d: Deferred[None], entry: Optional[_Admission], signal: Optional[AbortSignal],
              error_code: Optional[str], op: str) -> Awaitable[None]:
        if signal is None:
            return d
        if entry is not None:
            entry.signal = signal

        def on_abort() -> None:
            # an aborted push gives up its place in line; an end marker keeps it
            if entry is not None and not entry.item.done and entry in self._admissions:
                self._admissions.remove(entry)
            self._log.debug(f"{op} aborted", code=error_code)

        # started now so the race runs whether or not the caller awaits it
        task = asyncio.ensure_future(race_signal(d, signal, error_code=error_code, on_abort=on_abort))
        task.add_done_callback(_observe)
        return task

    def end(self, err: Optional[BaseException] = None, signal: Optional[AbortSignal] = None,
            error_code: Optional[str] = None) -> Awaitable[None]:
        """End the queue; only the first call has any effect.

        Without ``err`` the queue drains: buffered values are still delivered
        and the returned awaitable resolves once the consumer has taken the
        end marker. With ``err`` buffered values are dropped and the consumer's
        next read raises ``err``.
        """
        if self._state is not State.ACTIVE:
            return self._end_delivered
        if err is not None:
            self._terminate(err)
            return Deferred.resolved()
        self._state = State.ENDING
        self._log.debug("end", buffered=len(self._fifo) + len(self._admissions))
        if not self._piped and self._buffer_empty():
            # nobody is reading and nothing is left to read
            self._state = State.ENDED_OK
            self._finish(None)
            return Deferred.resolved()
        delivered, entry = self._enqueue(QueueItem.end(), until_delivered=True)
        self._end_delivered = delivered
        return self._wait(delivered, entry, signal, error_code, "end")

    def on_empty(self, signal: Optional[AbortSignal] = None, error_code: Optional[str] = None) -> Awaitable[None]:
        """Resolves when the buffer next drains to empty (now, if it is empty)."""
        if self._buffer_empty():
            return Deferred.resolved()
        d: Deferred[None] = Deferred()
        self._drain_waiters.append(d)
        return self._wait(d, None, signal, error_code, "on_empty")

    def _admit(self) -> None:
        while self._admissions:
            entry = self._admissions[0]
            if entry.aborted():
                self._admissions.popleft()
                continue
            if not entry.item.done and self._fifo.size >= self._hwm:  # type: ignore[operator]
                break
            self._admissions.popleft()
            if entry.until_delivered:
                self._fifo.push(entry.item, entry.done)
            else:
                self._fifo.push(entry.item)
                entry.done.try_succeed(None)

    def _after_shift(self) -> None:
        if self._admissions:
            self._admit()
        if self._drain_waiters and self._buffer_empty():
            self._release_drain_waiters()

    def _release_drain_waiters(self) -> None:
        waiters, self._drain_waiters = self._drain_waiters, []
        for d in waiters:
            d.try_succeed(None)

    def _discard(self) -> int:
        dropped = self._fifo.clear()
        while self._admissions:
            self._admissions.popleft().done.try_succeed(None)
            dropped += 1
        self._carry = None
        self._release_drain_waiters()
        return dropped

    def _terminate(self, err: BaseException) -> None:
        self._state = State.ENDED_ERROR
        self._error = err
        dropped = self._discard()
        self._fifo.interrupt(QueueItem.fail(err))
        self._log.debug("ended with error", error=repr(err), dropped=dropped)
        self._finish(err)

    def _finish(self, err: Optional[BaseException]) -> None:
        cb, self._on_end = self._on_end, None
        if cb is not None:
            self._log.debug("on_end", error=repr(err) if err is not None else None)
            cb(err)

    # -- consumer side -------------------------------------------------
    def __aiter__(self) -> "_PushableBase[T]":
        return self

    async def __anext__(self) -> Any:
        r = await self.next()
        if r.done:
            raise StopAsyncIteration
        return r.value

    async def next(self) -> Next[Any]:
        self._piped = True
        if self._state is State.ENDED_ERROR:
            raise self._error.with_traceback(None)  # type: ignore[union-attr]
        if self._state is State.ENDED_OK:
            return self._done()
        if self._state is State.ENDING and self._buffer_empty() and self._carry is None:
            self._state = State.ENDED_OK
            return self._done()
        return await self._read()

    @abc.abstractmethod
    async def _read(self) -> Next[Any]: ...

    async def _take(self) -> QueueItem[Any]:
        if self._carry is not None:
            item, self._carry = self._carry, None
            return item
        d = self._fifo.shift()
        try:
            return await d
        except asyncio.CancelledError:
            # keep an item that was handed over just as the read was cancelled
            if not self._fifo.abandon(d) and d.result() is not None:
                self._carry = d.result()
            raise

    def _settle(self, item: QueueItem[Any]) -> Next[Any]:
        if item.is_error():
            self._finish(item.error)
            raise item.error  # type: ignore[misc]
        if item.done:
            if self._state is State.ENDING:
                self._state = State.ENDED_OK
            return self._done()
        return Next(False, item.value)

    def _done(self) -> Next[Any]:
        self._finish(None)
        return DONE

    async def aclose(self) -> Next[Any]:
        """Stop consuming: drop buffered values and end without error."""
        if self._state in (State.ACTIVE, State.ENDING):
            self._state = State.ENDED_OK
            dropped = self._discard()
            self._fifo.interrupt(QueueItem.end())
            self._log.debug("closed by consumer", dropped=dropped)
            self._finish(None)
        return DONE

    async def athrow(self, err: BaseException) -> Next[Any]:
        """Stop consuming with ``err``: pending and later reads raise it."""
        if self._state in (State.ACTIVE, State.ENDING):
            self._terminate(err)
        return DONE

    def __repr__(self) -> str:
        return f"<{type(self).__name__} state={self._state.value} readable_length={self.readable_length}>"


class Pushable(_PushableBase[T]):
    """Async iterable that values are pushed into, yielding one value per read.

    Example:
        ```python
        source = pushable()
        source.push("hello")
        source.end()
        async for value in source:
            print(value)
        ```

    ``push`` enqueues immediately and returns an awaitable that completes
    when the value has been consumed (or, with ``high_water_mark``, once the
    value fits in the buffer). Not awaiting it simply buffers.
    """

    def push(self, value: T, signal: Optional[AbortSignal] = None, error_code: Optional[str] = None) -> Awaitable[None]:
        return self._push_item(QueueItem.of(value), signal, error_code)

    async def _read(self) -> Next[Any]:
        item = await self._take()
        self._after_shift()
        return self._settle(item)


class PushableV(_PushableBase[T]):
    """Vectorized pushable: each read returns every value buffered so far."""

    def _item_size(self, size: Callable[[Any], int]) -> Callable[[QueueItem[Any]], int]:
        def item_size(item: QueueItem[Any]) -> int:
            return 0 if item.done else sum(size(v) for v in item.value)  # type: ignore[union-attr]
        return item_size

    def push(self, value: T, signal: Optional[AbortSignal] = None, error_code: Optional[str] = None) -> Awaitable[None]:
        return self.push_v([value], signal, error_code)

    def push_v(self, values: Iterable[T], signal: Optional[AbortSignal] = None,
               error_code: Optional[str] = None) -> Awaitable[None]:
        """Push several values as one unit; they stay together and in order."""
        return self._push_item(QueueItem.of(list(values)), signal, error_code)

    async def _read(self) -> Next[Any]:
        batch: List[T] = []
        terminal: Optional[QueueItem[Any]] = None
        while True:
            item = await self._take()
            if item.done:
                terminal = item
                break
            batch.extend(item.value)  # type: ignore[arg-type]
            if self._fifo.is_empty():
                if batch:
                    break
                self._after_shift()
        # values still waiting for room are admitted after the batch is cut
        self._after_shift()
        if terminal is None:
            return Next(False, batch)
        if batch:
            # hand out what was collected; the next read sees the end
            if not terminal.is_error() and self._state is State.ENDING:
                self._state = State.ENDED_OK
            return Next(False, batch)
        return self._settle(terminal)


def pushable(options: Optional[PushableOptions] = None, **kwargs: Any) -> Pushable[Any]:
    return Pushable(options, **kwargs)


def pushable_v(options: Optional[PushableOptions] = None, **kwargs: Any) -> PushableV[Any]:
    return PushableV(options, **kwargs)
