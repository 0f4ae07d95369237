"""The POSIX implementation of Env: files, locks, threads and clocks."""

from __future__ import annotations

import collections
import errno
import fcntl
import mmap
import os
import resource
import sys
import tempfile
import threading
import time
import traceback
from collections.abc import Callable
from dataclasses import dataclass

from ldbkit.env import (
    Env,
    FileLock,
    RandomAccessFile,
    SequentialFile,
    WritableFile,
)
from ldbkit.posix_logger import PosixLogger
from ldbkit.status import IOStatusError, NotFoundError, StatusError

_WRITABLE_FILE_BUFFER_SIZE = 65536
_DEFAULT_MMAP_LIMIT = 1000 if sys.maxsize > 2**32 else 0
_INT_MAX = 2**31 - 1

_open_read_only_file_limit = -1
_mmap_limit = _DEFAULT_MMAP_LIMIT

_default_env: PosixEnv | None = None
_default_env_lock = threading.Lock()


def _posix_error(context: str, error_number: int | None) -> StatusError:
    if error_number is None:
        error_number = errno.EIO
    message = os.strerror(error_number)
    if error_number == errno.ENOENT:
        return NotFoundError(context, message)
    return IOStatusError(context, message)


class Limiter:
    """Caps how many instances of a resource may be held at once."""

    def __init__(self, max_acquires: int) -> None:
        if max_acquires < 0:
            raise ValueError("max_acquires must not be negative")
        self._max_acquires = max_acquires
        self._allowed = max_acquires
        self._lock = threading.Lock()

    def acquire(self) -> bool:
        """Take one unit of the resource; return False when none is left."""
        with self._lock:
            if self._allowed > 0:
                self._allowed -= 1
                return True
            return False

    def release(self) -> None:
        """Give back a unit obtained from acquire."""
        with self._lock:
            if self._allowed >= self._max_acquires:
                raise RuntimeError("limiter released more often than acquired")
            self._allowed += 1


class PosixSequentialFile(SequentialFile):
    """Sequential reads from an open file descriptor."""

    def __init__(self, filename: str, fd: int) -> None:
        self._filename = filename
        self._fd = fd

    def read(self, n: int) -> bytes:
        try:
            return os.read(self._fd, n)
        except OSError as exc:
            raise _posix_error(self._filename, exc.errno) from exc

    def skip(self, n: int) -> None:
        try:
            os.lseek(self._fd, n, os.SEEK_CUR)
        except OSError as exc:
            raise _posix_error(self._filename, exc.errno) from exc

    def close(self) -> None:
        if self._fd >= 0:
            fd, self._fd = self._fd, -1
            os.close(fd)


class PosixRandomAccessFile(RandomAccessFile):
    """Random reads with pread; reopens the file per read when over the fd limit."""

    def __init__(self, filename: str, fd: int, fd_limiter: Limiter) -> None:
        self._filename = filename
        self._fd_limiter = fd_limiter
        self._has_permanent_fd = fd_limiter.acquire()
        if self._has_permanent_fd:
            self._fd = fd
        else:
            self._fd = -1
            os.close(fd)
        self._closed = False

    @property
    def has_permanent_fd(self) -> bool:
        """Whether the file keeps its descriptor open between reads."""
        return self._has_permanent_fd

    def read(self, offset: int, n: int) -> bytes:
        if self._closed:
            raise _posix_error(self._filename, errno.EBADF)
        fd = self._fd
        if not self._has_permanent_fd:
            try:
                fd = os.open(self._filename, os.O_RDONLY)
            except OSError as exc:
                raise _posix_error(self._filename, exc.errno) from exc
        try:
            return os.pread(fd, n, offset)
        except OSError as exc:
            raise _posix_error(self._filename, exc.errno) from exc
        finally:
            if not self._has_permanent_fd:
                os.close(fd)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._has_permanent_fd:
            os.close(self._fd)
            self._fd = -1
            self._fd_limiter.release()


class PosixMmapReadableFile(RandomAccessFile):
    """Random reads served from a read-only memory map of the whole file."""

    def __init__(self, filename: str, mmap_base: mmap.mmap, mmap_limiter: Limiter) -> None:
        self._filename = filename
        self._mmap = mmap_base
        self._length = len(mmap_base)
        self._mmap_limiter = mmap_limiter
        self._closed = False

    def read(self, offset: int, n: int) -> bytes:
        if self._closed or offset < 0 or offset + n > self._length:
            raise _posix_error(self._filename, errno.EINVAL)
        return self._mmap[offset:offset + n]

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._mmap.close()
        self._mmap_limiter.release()


def _dirname(filename: str) -> str:
    pos = filename.rfind("/")
    if pos < 0:
        return "."
    return filename[:pos]


def _basename(filename: str) -> str:
    return filename[filename.rfind("/") + 1:]


def _sync_fd(fd: int, fd_path: str) -> None:
    try:
        os.fsync(fd)
    except OSError as exc:
        raise _posix_error(fd_path, exc.errno) from exc


class PosixWritableFile(WritableFile):
    """Writes through a 64 KiB buffer; syncs the directory for manifest files."""

    def __init__(self, filename: str, fd: int) -> None:
        self._filename = filename
        self._fd = fd
        self._buf = bytearray()
        self._is_manifest = _basename(filename).startswith("MANIFEST")
        self._dirname = _dirname(filename)

    def append(self, data) -> None:
        view = memoryview(bytes(data))
        room = _WRITABLE_FILE_BUFFER_SIZE - len(self._buf)
        self._buf += view[:room]
        rest = view[room:]
        if not rest:
            return
        self._flush_buffer()
        if len(rest) < _WRITABLE_FILE_BUFFER_SIZE:
            self._buf += rest
            return
        self._write_unbuffered(rest)

    def close(self) -> None:
        if self._fd < 0:
            return
        error: StatusError | None = None
        try:
            self._flush_buffer()
        except StatusError as exc:
            error = exc
        fd, self._fd = self._fd, -1
        try:
            os.close(fd)
        except OSError as exc:
            if error is None:
                error = _posix_error(self._filename, exc.errno)
        if error is not None:
            raise error

    def flush(self) -> None:
        self._flush_buffer()

    def sync(self) -> None:
        self._sync_dir_if_manifest()
        self._flush_buffer()
        _sync_fd(self._fd, self._filename)

    def _flush_buffer(self) -> None:
        pending, self._buf = self._buf, bytearray()
        self._write_unbuffered(memoryview(pending))

    def _write_unbuffered(self, data: memoryview) -> None:
        while data:
            try:
                written = os.write(self._fd, data)
            except OSError as exc:
                raise _posix_error(self._filename, exc.errno) from exc
            data = data[written:]

    def _sync_dir_if_manifest(self) -> None:
        if not self._is_manifest:
            return
        try:
            fd = os.open(self._dirname, os.O_RDONLY)
        except OSError as exc:
            raise _posix_error(self._dirname, exc.errno) from exc
        try:
            _sync_fd(fd, self._dirname)
        finally:
            os.close(fd)

    def __del__(self) -> None:
        if getattr(self, "_fd", -1) >= 0:
            try:
                self.close()
            except Exception:
                pass


@dataclass(frozen=True)
class PosixFileLock(FileLock):
    """A lock held through fcntl on an open descriptor."""

    fd: int
    filename: str


class PosixLockTable:
    """Names of the files this process has locked."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._locked_files: set[str] = set()

    def insert(self, fname: str) -> bool:
        """Record fname; return False when it was already recorded."""
        with self._lock:
            if fname in self._locked_files:
                return False
            self._locked_files.add(fname)
            return True

    def remove(self, fname: str) -> None:
        """Forget fname."""
        with self._lock:
            self._locked_files.discard(fname)


class PosixEnv(Env):
    """Env backed by the operating system's files and threads."""

    def __init__(self) -> None:
        self._work_cv = threading.Condition()
        self._started_background_thread = False
        self._work_queue: collections.deque[Callable[[], None]] = collections.deque()
        self._locks = PosixLockTable()
        self._mmap_limiter = Limiter(max_mmaps())
        self._fd_limiter = Limiter(max_open_files())

    def new_sequential_file(self, fname: str) -> PosixSequentialFile:
        try:
            fd = os.open(fname, os.O_RDONLY)
        except OSError as exc:
            raise _posix_error(fname, exc.errno) from exc
        return PosixSequentialFile(fname, fd)

    def new_random_access_file(self, fname: str) -> RandomAccessFile:
        try:
            fd = os.open(fname, os.O_RDONLY)
        except OSError as exc:
            raise _posix_error(fname, exc.errno) from exc
        if not self._mmap_limiter.acquire():
            return PosixRandomAccessFile(fname, fd, self._fd_limiter)
        try:
            file_size = self.get_file_size(fname)
            try:
                mapped = mmap.mmap(fd, file_size, flags=mmap.MAP_SHARED, prot=mmap.PROT_READ)
            except OSError as exc:
                raise _posix_error(fname, exc.errno) from exc
            except ValueError as exc:
                raise _posix_error(fname, errno.EINVAL) from exc
        except StatusError:
            self._mmap_limiter.release()
            raise
        finally:
            os.close(fd)
        return PosixMmapReadableFile(fname, mapped, self._mmap_limiter)

    def new_writable_file(self, fname: str) -> PosixWritableFile:
        return self._open_writable(fname, os.O_TRUNC | os.O_WRONLY | os.O_CREAT)

    def new_appendable_file(self, fname: str) -> PosixWritableFile:
        return self._open_writable(fname, os.O_APPEND | os.O_WRONLY | os.O_CREAT)

    @staticmethod
    def _open_writable(fname: str, flags: int) -> PosixWritableFile:
        try:
            fd = os.open(fname, flags, 0o644)
        except OSError as exc:
            raise _posix_error(fname, exc.errno) from exc
        return PosixWritableFile(fname, fd)

    def file_exists(self, fname: str) -> bool:
        return os.access(fname, os.F_OK)

    def get_children(self, dirname: str) -> list[str]:
        try:
            names = os.listdir(dirname)
        except OSError as exc:
            raise _posix_error(dirname, exc.errno) from exc
        return [".", "..", *names]

    def remove_file(self, fname: str) -> None:
        try:
            os.unlink(fname)
        except OSError as exc:
            raise _posix_error(fname, exc.errno) from exc

    def create_dir(self, dirname: str) -> None:
        try:
            os.mkdir(dirname, 0o755)
        except OSError as exc:
            raise _posix_error(dirname, exc.errno) from exc

    def remove_dir(self, dirname: str) -> None:
        try:
            os.rmdir(dirname)
        except OSError as exc:
            raise _posix_error(dirname, exc.errno) from exc

    def get_file_size(self, fname: str) -> int:
        try:
            return os.stat(fname).st_size
        except OSError as exc:
            raise _posix_error(fname, exc.errno) from exc

    def rename_file(self, src: str, target: str) -> None:
        try:
            os.rename(src, target)
        except OSError as exc:
            raise _posix_error(src, exc.errno) from exc

    def lock_file(self, fname: str) -> PosixFileLock:
        try:
            fd = os.open(fname, os.O_RDWR | os.O_CREAT, 0o644)
        except OSError as exc:
            raise _posix_error(fname, exc.errno) from exc
        if not self._locks.insert(fname):
            os.close(fd)
            raise IOStatusError("lock " + fname, "already held by process")
        try:
            fcntl.lockf(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as exc:
            os.close(fd)
            self._locks.remove(fname)
            raise _posix_error("lock " + fname, exc.errno) from exc
        return PosixFileLock(fd, fname)

    def unlock_file(self, lock: PosixFileLock) -> None:
        try:
            fcntl.lockf(lock.fd, fcntl.LOCK_UN)
        except OSError as exc:
            raise _posix_error("unlock " + lock.filename, exc.errno) from exc
        self._locks.remove(lock.filename)
        os.close(lock.fd)

    def schedule(self, function: Callable[[], None]) -> None:
        with self._work_cv:
            if not self._started_background_thread:
                self._started_background_thread = True
                threading.Thread(target=self._background_main, daemon=True).start()
            self._work_queue.append(function)
            self._work_cv.notify()

    def _background_main(self) -> None:
        while True:
            with self._work_cv:
                self._work_cv.wait_for(lambda: self._work_queue)
                function = self._work_queue.popleft()
            try:
                function()
            except Exception:
                traceback.print_exc()

    def start_thread(self, function: Callable[[], None]) -> None:
        threading.Thread(target=function, daemon=True).start()

    def get_test_directory(self) -> str:
        path = os.environ.get("TEST_TMPDIR") or os.path.join(
            tempfile.gettempdir(), f"ldbkittest-{os.geteuid()}"
        )
        try:
            self.create_dir(path)
        except StatusError:
            pass  # the directory may already exist
        return path

    def new_logger(self, fname: str) -> PosixLogger:
        try:
            fd = os.open(fname, os.O_APPEND | os.O_WRONLY | os.O_CREAT, 0o644)
        except OSError as exc:
            raise _posix_error(fname, exc.errno) from exc
        try:
            fp = os.fdopen(fd, "ab")
        except OSError as exc:
            os.close(fd)
            raise _posix_error(fname, exc.errno) from exc
        return PosixLogger(fp)

    def now_micros(self) -> int:
        return time.time_ns() // 1000

    def sleep_for_microseconds(self, micros: int) -> None:
        time.sleep(max(micros, 0) / 1_000_000)


def max_mmaps() -> int:
    """Number of read-only files that may be memory mapped at once."""
    return _mmap_limit


def max_open_files() -> int:
    """Number of read-only files that may keep a descriptor open."""
    global _open_read_only_file_limit
    if _open_read_only_file_limit >= 0:
        return _open_read_only_file_limit
    try:
        soft, _ = resource.getrlimit(resource.RLIMIT_NOFILE)
    except (OSError, ValueError):
        _open_read_only_file_limit = 50
    else:
        if soft == resource.RLIM_INFINITY:
            _open_read_only_file_limit = _INT_MAX
        else:
            _open_read_only_file_limit = soft // 5
    return _open_read_only_file_limit


def _assert_env_not_initialized() -> None:
    if _default_env is not None:
        raise RuntimeError("the default environment has already been created")


def set_read_only_fd_limit(limit: int) -> None:
    """Set the open read-only descriptor limit; call before default_env()."""
    global _open_read_only_file_limit
    _assert_env_not_initialized()
    _open_read_only_file_limit = limit


def set_read_only_mmap_limit(limit: int) -> None:
    """Set the memory-mapped file limit; call before default_env()."""
    global _mmap_limit
    _assert_env_not_initialized()
    _mmap_limit = limit


def default_env() -> PosixEnv:
    """Return the process-wide PosixEnv, creating it on first use."""
    global _default_env
    with _default_env_lock:
        if _default_env is None:
            _default_env = PosixEnv()
        return _default_env