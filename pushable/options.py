from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .fifo import count_size, object_size, strict_byte_size
from .logger import ConsoleLogger

OnEnd = Callable[[Optional[BaseException]], None]


@dataclass(frozen=True)
class PushableOptions:
    """Construction options for a pushable queue.

    Args:
        object_mode: ``None`` sizes byte-like values by byte length and
            anything else as 1; ``True`` counts items; ``False`` requires a
            byte length on every value.
        high_water_mark: Buffered size at which ``push`` starts waiting.
        on_end: Called once with the terminating error (or None).
        split_limit: First page capacity of the buffer (power of two).
        logger: Lifecycle logger; defaults to the package logger.
    """
    object_mode: Optional[bool] = None
    high_water_mark: Optional[int] = None
    on_end: Optional[OnEnd] = None
    split_limit: int = 16
    logger: Optional[ConsoleLogger] = None

    def __post_init__(self) -> None:
        hwm = self.high_water_mark
        if hwm is not None and (isinstance(hwm, bool) or not isinstance(hwm, int) or hwm <= 0):
            raise ValueError(f"high_water_mark must be a positive integer, got {hwm!r}")
        sl = self.split_limit
        if isinstance(sl, bool) or not isinstance(sl, int) or sl <= 0 or (sl - 1) & sl:
            raise ValueError(f"split_limit must be a power of two, got {sl!r}")
        if self.on_end is not None and not callable(self.on_end):
            raise ValueError("on_end must be callable")

    def size_function(self) -> Callable[[Any], int]:
        if self.object_mode is None:
            return object_size
        return count_size if self.object_mode else strict_byte_size
