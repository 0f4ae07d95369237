import pytest

from ldbkit import crc32c


def test_standard_results_zeros():
    assert crc32c.value(bytes(32)) == 0x8A9136AA


def test_standard_results_ones():
    assert crc32c.value(b"\xff" * 32) == 0x62A8AB43


def test_standard_results_ascending():
    assert crc32c.value(bytes(range(32))) == 0x46DD794E


def test_standard_results_descending():
    assert crc32c.value(bytes(31 - i for i in range(32))) == 0x113FDB5C


def test_standard_results_iscsi_read_command():
    data = bytes([
        0x01, 0xC0, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00,
        0x00, 0x00, 0x00, 0x00, 0x14, 0x00, 0x00, 0x00, 0x00, 0x00, 0x04, 0x00,
        0x00, 0x00, 0x00, 0x14, 0x00, 0x00, 0x00, 0x18, 0x28, 0x00, 0x00, 0x00,
        0x00, 0x00, 0x00, 0x00, 0x02, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00,
    ])
    assert crc32c.value(data) == 0xD9963A56


def test_known_test_buffer_value():
    assert crc32c.value(b"TestCRCBuffer") == 0xDCBC59FA


def test_values_differ():
    assert crc32c.value(b"a") != crc32c.value(b"foo")


def test_extend():
    assert crc32c.value(b"hello world") == crc32c.extend(
        crc32c.value(b"hello "), b"world"
    )


def test_extend_with_empty_data_keeps_crc():
    crc = crc32c.value(b"foo")
    assert crc32c.extend(crc, b"") == crc


def test_value_of_empty_is_zero():
    assert crc32c.value(b"") == 0


@pytest.mark.parametrize("split", [0, 1, 3, 7, 16, 33, 99])
def test_extend_any_split(split):
    data = bytes((i * 37) & 0xFF for i in range(100))
    assert crc32c.extend(crc32c.value(data[:split]), data[split:]) == crc32c.value(
        data
    )


def test_accepts_bytearray_and_memoryview():
    data = b"hello world"
    expected = crc32c.value(data)
    assert crc32c.value(bytearray(data)) == expected
    assert crc32c.value(memoryview(data)) == expected


def test_mask():
    crc = crc32c.value(b"foo")
    assert crc != crc32c.mask(crc)
    assert crc != crc32c.mask(crc32c.mask(crc))
    assert crc == crc32c.unmask(crc32c.mask(crc))
    assert crc == crc32c.unmask(crc32c.unmask(crc32c.mask(crc32c.mask(crc))))


@pytest.mark.parametrize("crc", [0, 1, 0x7FFFFFFF, 0x80000000, 0xFFFFFFFF, 0xA282EAD8])
def test_mask_round_trip_stays_32_bit(crc):
    masked = crc32c.mask(crc)
    assert 0 <= masked <= 0xFFFFFFFF
    assert crc32c.unmask(masked) == crc