"""A sharded LRU cache with reference-counted handles."""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

from ldbkit.hash import hash_bytes

Deleter = Callable[[bytes, Any], None]

_NUM_SHARD_BITS = 4
_NUM_SHARDS = 1 << _NUM_SHARD_BITS


def _as_bytes(key) -> bytes:
    if isinstance(key, str):
        return key.encode("utf-8")
    return bytes(key)


class Handle:
    """An entry of the cache, pinned for as long as a client holds it."""

    __slots__ = ("key", "value", "hash", "charge", "_deleter", "_in_cache", "_refs")

    def __init__(self, key: bytes, hash_value: int, value: Any, charge: int,
                 deleter: Deleter | None) -> None:
        self.key = key
        self.value = value
        self.hash = hash_value
        self.charge = charge
        self._deleter = deleter
        self._in_cache = False
        self._refs = 1

    def __repr__(self) -> str:
        return f"Handle(key={self.key!r}, charge={self.charge})"


class LRUCache:
    """One shard: entries not held by clients are evicted in LRU order."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self._lock = threading.Lock()
        self._usage = 0
        # Entries referenced only by the cache, oldest first.
        self._lru: OrderedDict[Handle, None] = OrderedDict()
        # Entries also referenced by clients.
        self._in_use: set[Handle] = set()
        self._table: dict[tuple[int, bytes], Handle] = {}

    def _list_remove(self, e: Handle) -> None:
        self._lru.pop(e, None)
        self._in_use.discard(e)

    def _ref(self, e: Handle) -> None:
        if e._refs == 1 and e._in_cache:
            self._lru.pop(e, None)
            self._in_use.add(e)
        e._refs += 1

    def _unref(self, e: Handle) -> None:
        if e._refs <= 0:
            raise ValueError("handle released more often than acquired")
        e._refs -= 1
        if e._refs == 0:
            if e._deleter is not None:
                e._deleter(e.key, e.value)
        elif e._in_cache and e._refs == 1:
            self._in_use.discard(e)
            self._lru[e] = None

    def _finish_erase(self, e: Handle | None) -> bool:
        if e is None:
            return False
        self._list_remove(e)
        e._in_cache = False
        self._usage -= e.charge
        self._unref(e)
        return True

    def insert(self, key, hash_value: int, value: Any, charge: int,
               deleter: Deleter | None = None) -> Handle:
        """Insert key -> value and return a handle the caller must release."""
        key = _as_bytes(key)
        with self._lock:
            e = Handle(key, hash_value, value, charge, deleter)
            if self.capacity > 0:
                e._refs += 1
                e._in_cache = True
                self._in_use.add(e)
                self._usage += charge
                slot = (hash_value, key)
                old = self._table.get(slot)
                self._table[slot] = e
                self._finish_erase(old)
            while self._usage > self.capacity and self._lru:
                oldest = next(iter(self._lru))
                self._finish_erase(self._table.pop((oldest.hash, oldest.key), None))
            return e

    def lookup(self, key, hash_value: int) -> Handle | None:
        """Return a handle for key, or None when it is not cached."""
        key = _as_bytes(key)
        with self._lock:
            e = self._table.get((hash_value, key))
            if e is not None:
                self._ref(e)
            return e

    def release(self, handle: Handle) -> None:
        """Drop a reference obtained from insert or lookup."""
        with self._lock:
            self._unref(handle)

    def erase(self, key, hash_value: int) -> None:
        """Remove key from the cache; held handles stay valid."""
        key = _as_bytes(key)
        with self._lock:
            self._finish_erase(self._table.pop((hash_value, key), None))

    def prune(self) -> None:
        """Remove every entry not currently held by a client."""
        with self._lock:
            while self._lru:
                e = next(iter(self._lru))
                self._finish_erase(self._table.pop((e.hash, e.key), None))

    def total_charge(self) -> int:
        """Combined charge of the entries in the cache."""
        with self._lock:
            return self._usage


class ShardedLRUCache:
    """An LRU cache split into 16 shards selected by key hash."""

    def __init__(self, capacity: int) -> None:
        per_shard = (capacity + _NUM_SHARDS - 1) // _NUM_SHARDS
        self._shards = [LRUCache(per_shard) for _ in range(_NUM_SHARDS)]
        self._id_lock = threading.Lock()
        self._last_id = 0

    @staticmethod
    def _hash(key: bytes) -> int:
        return hash_bytes(key, 0)

    @staticmethod
    def _shard(hash_value: int) -> int:
        return hash_value >> (32 - _NUM_SHARD_BITS)

    def insert(self, key, value: Any, charge: int, deleter: Deleter | None = None) -> Handle:
        """Insert key -> value and return a handle the caller must release."""
        key = _as_bytes(key)
        h = self._hash(key)
        return self._shards[self._shard(h)].insert(key, h, value, charge, deleter)

    def lookup(self, key) -> Handle | None:
        """Return a handle for key, or None when it is not cached."""
        key = _as_bytes(key)
        h = self._hash(key)
        return self._shards[self._shard(h)].lookup(key, h)

    def release(self, handle: Handle) -> None:
        """Drop a reference obtained from insert or lookup."""
        self._shards[self._shard(handle.hash)].release(handle)

    def value(self, handle: Handle) -> Any:
        """Return the value held by handle."""
        return handle.value

    def erase(self, key) -> None:
        """Remove key from the cache; held handles stay valid."""
        key = _as_bytes(key)
        h = self._hash(key)
        self._shards[self._shard(h)].erase(key, h)

    def new_id(self) -> int:
        """Return a new id, distinct from every earlier one."""
        with self._id_lock:
            self._last_id += 1
            return self._last_id

    def prune(self) -> None:
        """Remove every entry not currently held by a client."""
        for shard in self._shards:
            shard.prune()

    def total_charge(self) -> int:
        """Combined charge of the entries in all shards."""
        return sum(shard.total_charge() for shard in self._shards)


def new_lru_cache(capacity: int) -> ShardedLRUCache:
    """Return a sharded LRU cache with the given total capacity."""
    return ShardedLRUCache(capacity)