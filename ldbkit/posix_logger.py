"""A logger writing timestamped lines to a binary file object."""

from __future__ import annotations

import datetime
import threading
from typing import BinaryIO

from ldbkit.env import Logger

_MAX_THREAD_ID_SIZE = 32


class PosixLogger(Logger):
    """Writes one line per message, prefixed with the time and thread id."""

    def __init__(self, fp: BinaryIO) -> None:
        if fp is None:
            raise ValueError("fp must be an open file")
        self._fp = fp
        self._lock = threading.Lock()

    def logv(self, fmt: str, *args) -> None:
        """Format fmt % args and write it as a single line."""
        now = datetime.datetime.now()
        thread_id = str(threading.get_ident())[:_MAX_THREAD_ID_SIZE]
        header = (
            f"{now.year:04d}/{now.month:02d}/{now.day:02d}-"
            f"{now.hour:02d}:{now.minute:02d}:{now.second:02d}."
            f"{now.microsecond:06d} {thread_id} "
        )
        message = fmt % args if args else fmt
        line = header + message
        if not line.endswith("\n"):
            line += "\n"
        with self._lock:
            self._fp.write(line.encode("utf-8", "backslashreplace"))
            self._fp.flush()

    def close(self) -> None:
        """Close the underlying file."""
        self._fp.close()

    def __enter__(self) -> PosixLogger:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()