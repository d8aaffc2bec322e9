import io

import pytest

from psd_codec.errors import FormatError
from psd_codec.psd.bin_utils import (
    pad,
    read_fmt,
    read_int,
    read_length_block,
    read_pascal_string,
    read_unicode_string,
    write_bytes,
    write_int,
    write_length_block,
    write_pascal_string,
    write_unicode_string,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, b"\x00\x00\x00\x00"),
        (-1, b"\xff\xff\xff\xff"),
        (2147483647, b"\x7f\xff\xff\xff"),
        (-2147483648, b"\x80\x00\x00\x00"),
    ],
)
def test_int32(value: int, expected: bytes) -> None:
    with io.BytesIO() as f:
        assert write_int(f, "int32", value) == 4
        assert f.getvalue() == expected
        f.seek(0)
        assert read_int(f, "int32") == value


@pytest.mark.parametrize(
    "kind, value", [("int16", 32768), ("uint16", -1), ("int32", 2147483648)]
)
def test_int_overflow(kind: str, value: int) -> None:
    with io.BytesIO() as f:
        with pytest.raises(FormatError):
            write_int(f, kind, value)


def test_read_fmt_short() -> None:
    with io.BytesIO(b"\x00\x01") as f:
        with pytest.raises(FormatError):
            read_fmt("I", f)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("", b"\x00\x00"),
        ("a", b"\x01a"),
        ("ab", b"\x02ab\x00"),
    ],
)
def test_pascal_string_padding(value: str, expected: bytes) -> None:
    with io.BytesIO() as f:
        assert write_pascal_string(f, value) == len(expected)
        assert f.getvalue() == expected
        f.seek(0)
        assert read_pascal_string(f) == value
        assert f.tell() == len(expected)


def test_pascal_string_255() -> None:
    value = "a" * 255
    with io.BytesIO() as f:
        assert write_pascal_string(f, value) == 256
        f.seek(0)
        assert read_pascal_string(f) == value


def test_pascal_string_truncated() -> None:
    with io.BytesIO() as f:
        write_pascal_string(f, "b" * 256)
        data = f.getvalue()
        f.seek(0)
        assert read_pascal_string(f) == "b" * 255
    assert data[0] == 255
    assert len(data) == 256


def test_pascal_string_padding_4() -> None:
    with io.BytesIO() as f:
        assert write_pascal_string(f, "Layer 1", padding=4) == 8
        f.seek(0)
        assert read_pascal_string(f, padding=4) == "Layer 1"


@pytest.mark.parametrize("value", ["", "Layer", "レイヤー"])
def test_unicode_string(value: str) -> None:
    with io.BytesIO() as f:
        write_unicode_string(f, value)
        data = f.getvalue()
        f.seek(0)
        assert read_unicode_string(f) == value
    assert data[:4] == len(value).to_bytes(4, "big")
    assert data[4:] == value.encode("utf-16-be")


def test_length_block() -> None:
    with io.BytesIO() as f:
        written = write_length_block(
            f, lambda f: write_bytes(f, b"\x01\x02\x03"), padding=2
        )
        assert written == 8
        assert f.getvalue() == b"\x00\x00\x00\x03\x01\x02\x03\x00"
        f.seek(0)
        assert read_length_block(f, padding=2) == b"\x01\x02\x03"
        assert f.tell() == 8


def test_length_block_truncated() -> None:
    with io.BytesIO(b"\x00\x00\x00\x08\x01\x02") as f:
        with pytest.raises(FormatError):
            read_length_block(f)


@pytest.mark.parametrize(
    "number, divisor, expected", [(0, 4, 0), (1, 4, 4), (4, 4, 4), (5, 2, 6)]
)
def test_pad(number: int, divisor: int, expected: int) -> None:
    assert pad(number, divisor) == expected
