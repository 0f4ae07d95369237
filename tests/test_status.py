import copy
import pickle

import pytest

from ldbkit.status import (
    Code,
    CorruptionError,
    InvalidArgumentError,
    IOStatusError,
    NotFoundError,
    NotSupportedError,
    StatusError,
)


def test_not_found_message():
    status = NotFoundError("custom NotFound status message")
    assert str(status) == "NotFound: custom NotFound status message"
    assert status.code == Code.NOT_FOUND


def test_copy_keeps_kind_and_message():
    status = NotFoundError("custom NotFound status message")
    moved = copy.copy(status)
    assert isinstance(moved, NotFoundError)
    assert str(moved) == "NotFound: custom NotFound status message"


def test_pickle_round_trip():
    status = IOStatusError("custom IOError status message")
    restored = pickle.loads(pickle.dumps(status))
    assert str(restored) == "IOError: custom IOError status message"


def test_second_message_joined():
    assert str(CorruptionError("a", "b")) == "Corruption: a: b"


def test_empty_second_message_omitted():
    assert str(IOStatusError("x", "")) == "IOError: x"


@pytest.mark.parametrize(
    "cls, prefix",
    [
        (NotFoundError, "NotFound: "),
        (CorruptionError, "Corruption: "),
        (NotSupportedError, "NotSupported: "),
        (InvalidArgumentError, "InvalidArgument: "),
        (IOStatusError, "IOError: "),
    ],
)
def test_prefixes(cls, prefix):
    assert str(cls("m")) == prefix + "m"


def test_caught_as_base():
    err = NotSupportedError("NewAppendableFile", "f")
    assert isinstance(err, StatusError)
    assert err.message == "NewAppendableFile: f"
    assert str(err) == "NotSupported: NewAppendableFile: f"


def test_bytes_message_decoded():
    assert str(NotFoundError(b"key", b"file")) == "NotFound: key: file"