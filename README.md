# ldbkit

The low-level pieces that a log-structured key-value store is built from.
Each one is a small, self-contained Python module:

| Module | What it gives you |
| --- | --- |
| `ldbkit.coding` | Little-endian fixed-width integers, varints and length-prefixed byte strings |
| `ldbkit.crc32c` | CRC32C checksums, with masking for checksums stored alongside data |
| `ldbkit.hash` | `hash_bytes`, the seeded 32-bit hash used by bloom filters and cache sharding |
| `ldbkit.bloom` | `FilterPolicy` and the bloom filter policy (`new_bloom_filter_policy`) |
| `ldbkit.comparator` | `BytewiseComparator`, with separator and successor shortening |
| `ldbkit.cache` | Sharded LRU cache with pinned handles and deleter callbacks |
| `ldbkit.arena` | Block-based arena handing out writable `memoryview`s, with memory-usage accounting |
| `ldbkit.histogram` | Bucketed histogram with percentiles, mean, standard deviation and a text report |
| `ldbkit.rng` | `Random`, a small deterministic generator |
| `ldbkit.strutil` | `number_to_string`, `escape_string`, `consume_decimal_number` |
| `ldbkit.compression` | Raw snappy (pure Python) and Zstandard compression helpers |
| `ldbkit.status` | Exceptions: `StatusError` and its subclasses `NotFoundError`, `CorruptionError`, `NotSupportedError`, `InvalidArgumentError`, `IOStatusError` |
| `ldbkit.env` | Abstract `Env`, file and logger interfaces, `EnvWrapper`, file helpers |
| `ldbkit.env_posix` | `PosixEnv`: files, memory-mapped reads, file locks, background work, clocks |
| `ldbkit.posix_logger` | `PosixLogger`, writing timestamped lines to a binary file |
| `ldbkit.testutil` | Random strings, keys and compressible data for tests and benchmarks |

## Installation

```
pip install ldbkit
```

Python 3.10 or later is required. Zstandard support comes from the
`zstandard` distribution, installed along with the package. `ldbkit.env_posix`
uses `fcntl`, `mmap` and `resource`, so it runs on POSIX systems only.

## Examples

### Varints and length-prefixed data

```python
from ldbkit.coding import (
    decode_length_prefixed,
    decode_varint64,
    encode_length_prefixed,
    encode_varint64,
)

buf = encode_varint64(300) + encode_length_prefixed(b"foo")
value, offset = decode_varint64(buf, 0)
payload, offset = decode_length_prefixed(buf, offset)
assert (value, payload) == (300, b"foo")
```

Decoding functions return the value and the offset just past it. Truncated or
overlong input raises `CorruptionError`.

### Checksums

```python
from ldbkit import crc32c

crc = crc32c.value(b"hello world")
assert crc32c.extend(crc32c.value(b"hello "), b"world") == crc
stored = crc32c.mask(crc)
assert crc32c.unmask(stored) == crc
```

### Bloom filters

```python
from ldbkit.bloom import new_bloom_filter_policy

policy = new_bloom_filter_policy(10)
filter_data = policy.create_filter([b"hello", b"world"])
assert policy.key_may_match(b"hello", filter_data)
```

`key_may_match` returns `False` only for keys that were certainly not added.

### Key ordering

```python
from ldbkit.comparator import bytewise_comparator

cmp = bytewise_comparator()
assert cmp.compare(b"abc", b"abd") < 0
assert cmp.find_shortest_separator(b"abc", b"abz") == b"abd"
assert cmp.find_short_successor(b"abc") == b"b"
```

### LRU cache

```python
from ldbkit.cache import new_lru_cache

cache = new_lru_cache(1000)
handle = cache.insert(b"key", "value", 1, lambda key, value: None)
cache.release(handle)

handle = cache.lookup(b"key")
if handle is not None:
    print(cache.value(handle))
    cache.release(handle)
```

A handle stays pinned until it is released, even if its entry is erased or
replaced in the meantime. The deleter runs once the last reference to an
entry is gone. `prune()` drops every entry not held by a client, and a cache
of capacity 0 caches nothing.

### Histogram

```python
from ldbkit.histogram import Histogram

h = Histogram()
for latency in (1, 2, 3, 10, 250):
    h.add(latency)
print(h.median(), h.percentile(99), h.average())
print(h)  # text report with one line per non-empty bucket
```

### Compression

```python
from ldbkit.compression import snappy_compress, snappy_uncompress, zstd_compress, zstd_uncompress

data = b"abcabcabcabc" * 100
assert snappy_uncompress(snappy_compress(data)) == data
assert zstd_uncompress(zstd_compress(data, 1)) == data
```

Bad input raises `CompressionError` (a `ValueError`).

### File environment

```python
from ldbkit.env import read_file_to_string, write_string_to_file
from ldbkit.env_posix import default_env

env = default_env()
path = env.get_test_directory() + "/example.txt"
write_string_to_file(env, b"hello world!", path)
assert read_file_to_string(env, path) == b"hello world!"
env.remove_file(path)
```

Failures raise subclasses of `StatusError`; a missing file, for example,
raises `NotFoundError`. `write_string_to_file` removes the file again if
writing fails.

Random-access files are memory mapped up to `max_mmaps()` at a time; beyond
that they keep a descriptor open up to `max_open_files()`, and past that they
reopen the file on every read. Both limits can be changed with
`set_read_only_mmap_limit` and `set_read_only_fd_limit`, but only before
`default_env()` is first called; afterwards they raise `RuntimeError`.

`env.schedule(fn)` runs `fn` on a single background thread in the order
scheduled; `env.start_thread(fn)` runs it on a new thread. `env.lock_file`
takes an exclusive `fcntl` lock and returns a `PosixFileLock` to pass to
`env.unlock_file`. `env.new_logger(path)` returns a `PosixLogger`, and
`ldbkit.env.log(logger, fmt, *args)` writes a printf-style line to it.

## What the package does not do

These are building blocks only. There is no database here: no memtable, no
write-ahead log, no table files, no compaction and no `open`/`get`/`put`
interface. There is also no in-memory `Env`; the only concrete environment is
`PosixEnv`.

## Running the tests

```
pip install "ldbkit[test]"
pytest
```