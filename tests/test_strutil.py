import pytest

from ldbkit.strutil import consume_decimal_number, escape_string, number_to_string

MAX = 18446744073709551615


@pytest.mark.parametrize(
    "num, text",
    [
        (0, "0"), (1, "1"), (9, "9"), (10, "10"), (11, "11"), (19, "19"),
        (99, "99"), (100, "100"), (109, "109"), (190, "190"), (123, "123"),
        (12345678, "12345678"),
        (18446744073709551000, "18446744073709551000"),
        (18446744073709551600, "18446744073709551600"),
        (18446744073709551610, "18446744073709551610"),
        (18446744073709551614, "18446744073709551614"),
        (18446744073709551615, "18446744073709551615"),
    ],
)
def test_number_to_string(num, text):
    assert number_to_string(num) == text


def _roundtrip(number, padding=b""):
    decimal = number_to_string(number).encode()
    value, rest = consume_decimal_number(decimal + padding)
    assert value == number
    assert rest == padding


def test_consume_roundtrip():
    for n in (0, 1, 9, 10, 11, 19, 99, 100, 109, 190, 123):
        _roundtrip(n)
    for i in range(100):
        _roundtrip(MAX - i)


def test_consume_roundtrip_with_padding():
    cases = [
        (0, b" "), (1, b"abc"), (9, b"x"), (10, b"_"), (11, b"\0\0\0"),
        (19, b"abc"), (99, b"padding"), (100, b" "),
    ]
    for n, pad in cases:
        _roundtrip(n, pad)
    for i in range(100):
        _roundtrip(MAX - i, b"pad")


@pytest.mark.parametrize(
    "text",
    [
        b"18446744073709551616", b"18446744073709551617", b"18446744073709551618",
        b"18446744073709551619", b"18446744073709551620", b"18446744073709551621",
        b"18446744073709551622", b"18446744073709551623", b"18446744073709551624",
        b"18446744073709551625", b"18446744073709551626", b"18446744073709551700",
        b"99999999999999999999",
    ],
)
def test_consume_overflow(text):
    with pytest.raises(ValueError):
        consume_decimal_number(text)


@pytest.mark.parametrize(
    "text", [b"", b" ", b"a", b" 123", b"a123", b"\000123", b"\177123", b"\377123"]
)
def test_consume_no_digits(text):
    with pytest.raises(ValueError):
        consume_decimal_number(text)


def test_escape_string():
    assert escape_string(b"a\x00\xff~ ") == "a\\x00\\xff~ "