from __future__ import annotations
import asyncio
from typing import Any, Awaitable, Callable, Optional, Protocol, TypeVar, runtime_checkable

from .errors import AbortError

A = TypeVar("A")


@runtime_checkable
class AbortSignal(Protocol):
    """Cancellation token: ``asyncio.Event`` and ``anyio.Event`` both qualify."""
    def is_set(self) -> bool: ...
    def wait(self) -> Awaitable[Any]: ...


async def race_signal(
    awaitable: Awaitable[A],
    signal: Optional[AbortSignal] = None,
    *,
    error_code: Optional[str] = None,
    error_message: str = "The operation was aborted",
    on_abort: Optional[Callable[[], None]] = None,
) -> A:
    """Await ``awaitable`` unless ``signal`` fires first.

    When the signal wins, ``on_abort`` runs, the waiting side is cancelled and
    ``AbortError`` (carrying ``error_code``) is raised. The underlying
    operation is not rolled back.
    """
    if signal is None:
        return await awaitable
    if signal.is_set():
        if on_abort is not None: on_abort()
        if asyncio.iscoroutine(awaitable): awaitable.close()
        raise AbortError(error_message, error_code)

    work = asyncio.ensure_future(awaitable)
    watcher = asyncio.ensure_future(signal.wait())
    try:
        done, _ = await asyncio.wait({work, watcher}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for t in (work, watcher):
            if not t.done(): t.cancel()
        # drain the loser so its cancellation is observed here
        await asyncio.gather(work, watcher, return_exceptions=True)
    if work in done:
        return work.result()
    if on_abort is not None: on_abort()
    raise AbortError(error_message, error_code)
