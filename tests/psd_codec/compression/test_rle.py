import pytest

from psd_codec.compression import rle
from psd_codec.errors import FormatError


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"", b""),
        (b"\x05", b"\x00\x05"),
        (b"\x05\x05", b"\xff\x05"),
        (b"\x07" * 5, b"\xfc\x07"),
        (bytes([10, 20, 30]), b"\x02\x0a\x14\x1e"),
        (bytes([1, 2, 2, 3]), b"\x00\x01\xff\x02\x00\x03"),
        (bytes([1, 1, 2]), b"\xff\x01\x00\x02"),
    ],
)
def test_encode(data: bytes, expected: bytes) -> None:
    assert rle.encode(data) == expected
    assert rle.decode(expected, len(data)) == data


def test_encode_long_run() -> None:
    encoded = rle.encode(b"\x07" * 200)
    assert encoded == b"\x81\x07\xb9\x07"
    assert rle.decode(encoded, 200) == b"\x07" * 200


def test_encode_long_literal() -> None:
    data = bytes(range(130))
    encoded = rle.encode(data)
    assert len(encoded) == 132
    assert encoded[0] == 127
    assert encoded[129] == 1
    assert rle.decode(encoded, len(data)) == data


def test_decode_noop_header() -> None:
    assert rle.decode(b"\x80\x00\x05", 1) == b"\x05"


@pytest.mark.parametrize(
    "data, size",
    [
        # b'\x01\x01\x01\x01'
        (b"\xfd\x01", 3),
        (b"\xfd\x01", 5),
        # b'\x01\x02\x03'
        (b"\x02\x01\x02\x03", 2),
        (b"\x02\x01\x02\x03", 4),
        # truncated packets
        (b"\xfd", 4),
        (b"\x02\x01", 3),
    ],
)
def test_malicious(data: bytes, size: int) -> None:
    with pytest.raises(FormatError):
        rle.decode(data, size)
