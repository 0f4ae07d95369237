"""Abstract file-system and scheduling environment, plus helpers."""

from __future__ import annotations

import abc
import contextlib
from collections.abc import Callable

from ldbkit.status import NotSupportedError, StatusError

_READ_BUFFER_SIZE = 8192


class _Closing:
    def close(self) -> None:
        raise NotImplementedError

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class SequentialFile(_Closing, abc.ABC):
    """A file read from front to back."""

    @abc.abstractmethod
    def read(self, n: int) -> bytes:
        """Read up to n bytes; an empty result means end of file."""

    @abc.abstractmethod
    def skip(self, n: int) -> None:
        """Skip n bytes."""

    @abc.abstractmethod
    def close(self) -> None:
        """Release the file."""


class RandomAccessFile(_Closing, abc.ABC):
    """A file read at arbitrary offsets; safe to share between threads."""

    @abc.abstractmethod
    def read(self, offset: int, n: int) -> bytes:
        """Read up to n bytes starting at offset."""

    @abc.abstractmethod
    def close(self) -> None:
        """Release the file."""


class WritableFile(_Closing, abc.ABC):
    """A buffered file written sequentially."""

    @abc.abstractmethod
    def append(self, data) -> None:
        """Append data to the file."""

    @abc.abstractmethod
    def close(self) -> None:
        """Flush and close the file."""

    @abc.abstractmethod
    def flush(self) -> None:
        """Push buffered data to the operating system."""

    @abc.abstractmethod
    def sync(self) -> None:
        """Flush and force the data onto stable storage."""


class Logger(abc.ABC):
    """Writes informational messages."""

    @abc.abstractmethod
    def logv(self, fmt: str, *args) -> None:
        """Write a message formatted printf-style from fmt and args."""


class FileLock:
    """Token for a lock held on a file; pass it back to Env.unlock_file."""


class Env(abc.ABC):
    """Access to files, threads and clocks."""

    @abc.abstractmethod
    def new_sequential_file(self, fname: str) -> SequentialFile:
        """Open fname for sequential reading."""

    @abc.abstractmethod
    def new_random_access_file(self, fname: str) -> RandomAccessFile:
        """Open fname for random-access reading."""

    @abc.abstractmethod
    def new_writable_file(self, fname: str) -> WritableFile:
        """Create or truncate fname for writing."""

    def new_appendable_file(self, fname: str) -> WritableFile:
        """Open fname for appending, creating it when missing."""
        raise NotSupportedError("NewAppendableFile", fname)

    @abc.abstractmethod
    def file_exists(self, fname: str) -> bool:
        """Return True if fname exists."""

    @abc.abstractmethod
    def get_children(self, dirname: str) -> list[str]:
        """Return the names of the entries in dirname."""

    @abc.abstractmethod
    def remove_file(self, fname: str) -> None:
        """Delete fname."""

    @abc.abstractmethod
    def create_dir(self, dirname: str) -> None:
        """Create dirname."""

    @abc.abstractmethod
    def remove_dir(self, dirname: str) -> None:
        """Delete the empty directory dirname."""

    @abc.abstractmethod
    def get_file_size(self, fname: str) -> int:
        """Return the size of fname in bytes."""

    @abc.abstractmethod
    def rename_file(self, src: str, target: str) -> None:
        """Rename src to target, replacing target."""

    @abc.abstractmethod
    def lock_file(self, fname: str) -> FileLock:
        """Lock fname against concurrent use and return the lock."""

    @abc.abstractmethod
    def unlock_file(self, lock: FileLock) -> None:
        """Release a lock obtained from lock_file."""

    @abc.abstractmethod
    def schedule(self, function: Callable[[], None]) -> None:
        """Run function once in a background thread."""

    @abc.abstractmethod
    def start_thread(self, function: Callable[[], None]) -> None:
        """Run function in a new thread."""

    @abc.abstractmethod
    def get_test_directory(self) -> str:
        """Return a directory usable for temporary test files."""

    @abc.abstractmethod
    def new_logger(self, fname: str) -> Logger:
        """Create a logger that writes to fname."""

    @abc.abstractmethod
    def now_micros(self) -> int:
        """Return a timestamp in microseconds."""

    @abc.abstractmethod
    def sleep_for_microseconds(self, micros: int) -> None:
        """Sleep for at least micros microseconds."""


class EnvWrapper(Env):
    """An Env that forwards every call to another Env."""

    def __init__(self, target: Env) -> None:
        self._target = target

    def target(self) -> Env:
        """The wrapped Env."""
        return self._target

    def new_sequential_file(self, fname):
        return self._target.new_sequential_file(fname)

    def new_random_access_file(self, fname):
        return self._target.new_random_access_file(fname)

    def new_writable_file(self, fname):
        return self._target.new_writable_file(fname)

    def new_appendable_file(self, fname):
        return self._target.new_appendable_file(fname)

    def file_exists(self, fname):
        return self._target.file_exists(fname)

    def get_children(self, dirname):
        return self._target.get_children(dirname)

    def remove_file(self, fname):
        self._target.remove_file(fname)

    def create_dir(self, dirname):
        self._target.create_dir(dirname)

    def remove_dir(self, dirname):
        self._target.remove_dir(dirname)

    def get_file_size(self, fname):
        return self._target.get_file_size(fname)

    def rename_file(self, src, target):
        self._target.rename_file(src, target)

    def lock_file(self, fname):
        return self._target.lock_file(fname)

    def unlock_file(self, lock):
        self._target.unlock_file(lock)

    def schedule(self, function):
        self._target.schedule(function)

    def start_thread(self, function):
        self._target.start_thread(function)

    def get_test_directory(self):
        return self._target.get_test_directory()

    def new_logger(self, fname):
        return self._target.new_logger(fname)

    def now_micros(self):
        return self._target.now_micros()

    def sleep_for_microseconds(self, micros):
        self._target.sleep_for_microseconds(micros)


def log(info_log: Logger | None, fmt: str, *args) -> None:
    """Write a message to info_log when there is one."""
    if info_log is not None:
        info_log.logv(fmt, *args)


def _write_string_to_file(env: Env, data, fname: str, should_sync: bool) -> None:
    file = env.new_writable_file(fname)
    closed = False
    try:
        file.append(data)
        if should_sync:
            file.sync()
        closed = True
        file.close()
    except StatusError:
        if not closed:
            with contextlib.suppress(StatusError):
                file.close()
        with contextlib.suppress(StatusError):
            env.remove_file(fname)
        raise


def write_string_to_file(env: Env, data, fname: str) -> None:
    """Write data to fname, removing the file if writing fails."""
    _write_string_to_file(env, data, fname, False)


def write_string_to_file_sync(env: Env, data, fname: str) -> None:
    """Like write_string_to_file, but syncs the file before closing it."""
    _write_string_to_file(env, data, fname, True)


def read_file_to_string(env: Env, fname: str) -> bytes:
    """Return the whole contents of fname."""
    chunks = []
    with env.new_sequential_file(fname) as file:
        while fragment := file.read(_READ_BUFFER_SIZE):
            chunks.append(fragment)
    return b"".join(chunks)