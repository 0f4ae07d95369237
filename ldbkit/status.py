"""Error types that carry a status code and a two-part message."""

from __future__ import annotations

import enum


class Code(enum.IntEnum):
    """Status codes understood by the storage layer."""

    OK = 0
    NOT_FOUND = 1
    CORRUPTION = 2
    NOT_SUPPORTED = 3
    INVALID_ARGUMENT = 4
    IO_ERROR = 5


_PREFIXES = {
    Code.OK: "OK",
    Code.NOT_FOUND: "NotFound: ",
    Code.CORRUPTION: "Corruption: ",
    Code.NOT_SUPPORTED: "NotSupported: ",
    Code.INVALID_ARGUMENT: "InvalidArgument: ",
    Code.IO_ERROR: "IOError: ",
}


def _text(part: str | bytes) -> str:
    if isinstance(part, (bytes, bytearray, memoryview)):
        return bytes(part).decode("utf-8", "backslashreplace")
    return str(part)


class StatusError(Exception):
    """Base class for every failure reported with a status code."""

    code: Code | None = None

    def __init__(self, msg: str | bytes, msg2: str | bytes = "") -> None:
        super().__init__(msg, msg2)
        self.msg = _text(msg)
        self.msg2 = _text(msg2)

    @property
    def message(self) -> str:
        """The message without the code prefix."""
        if self.msg2:
            return f"{self.msg}: {self.msg2}"
        return self.msg

    def __str__(self) -> str:
        if self.code is None:
            return self.message
        prefix = _PREFIXES.get(self.code, f"Unknown code({int(self.code)})")
        return prefix + self.message


class NotFoundError(StatusError):
    """The requested entry or file does not exist."""

    code = Code.NOT_FOUND


class CorruptionError(StatusError):
    """Stored data failed to decode or verify."""

    code = Code.CORRUPTION


class NotSupportedError(StatusError):
    """The operation is not supported here."""

    code = Code.NOT_SUPPORTED


class InvalidArgumentError(StatusError):
    """An argument was rejected."""

    code = Code.INVALID_ARGUMENT


class IOStatusError(StatusError):
    """An input/output operation failed."""

    code = Code.IO_ERROR