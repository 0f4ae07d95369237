[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ldbkit"
version = "0.1.0"
description = "Storage-engine building blocks: varint coding, CRC32C, bloom filters, LRU cache, arena, histogram, compression and a POSIX file environment"
requires-python = ">=3.10"
dependencies = [
    "zstandard",
]
keywords = [
    "key-value",
    "storage",
    "lsm",
    "bloom-filter",
    "lru-cache",
    "crc32c",
    "varint",
    "snappy",
    "zstd",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["ldbkit"]

[tool.hatch.build.targets.sdist]
include = [
    "ldbkit",
    "tests",
]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
