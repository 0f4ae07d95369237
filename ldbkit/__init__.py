"""Building blocks for a log-structured key-value storage engine."""

__version__ = "0.1.0"

__all__ = [
    "arena",
    "bloom",
    "cache",
    "coding",
    "comparator",
    "compression",
    "crc32c",
    "env",
    "env_posix",
    "hash",
    "histogram",
    "posix_logger",
    "rng",
    "status",
    "strutil",
    "testutil",
]