from .core import (
    Pushable,
    PushableV,
    State,
    pushable,
    pushable_v,
)
from .options import PushableOptions
from .item import Next, QueueItem, DONE
from .errors import PushableError, AlreadyEnded, InvalidValueType, AbortError
from .abort import AbortSignal, race_signal
from .fifo import FixedFIFO, SizedFIFO, EMPTY, byte_length
from .pfifo import PFIFO
from .deferred import Deferred
from .logger import ConsoleLogger
