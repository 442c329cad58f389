from __future__ import annotations
from typing import Optional


class PushableError(Exception):
    code = "ERR_PUSHABLE"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class AlreadyEnded(PushableError):
    code = "ERR_ALREADY_ENDED"

    def __init__(self, message: str = "pushable has already ended"):
        super().__init__(message)


class InvalidValueType(PushableError, TypeError):
    code = "ERR_INVALID_VALUE_TYPE"

    def __init__(self, value: object):
        super().__init__(f"value of type {type(value).__name__} has no byte length")
        self.value = value


class AbortError(PushableError):
    code = "ABORT_ERR"

    def __init__(self, message: str = "The operation was aborted", code: Optional[str] = None):
        super().__init__(message, code)
