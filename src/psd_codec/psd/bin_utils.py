"""
Binary primitives for big-endian PSD/PSB streams.

All formats are interpreted with the ``>`` prefix, so callers pass plain
:py:mod:`struct` codes such as ``"4sH"``. Reads that hit the end of the
stream raise :py:class:`~psd_codec.errors.FormatError`.

Length-prefixed blocks are written by reserving the length field, letting a
writer callback emit the body, then seeking back to patch the real length.
That requires a seekable output.
"""

import array
import logging
import struct
import sys
from typing import Any, BinaryIO, Callable, Union

from psd_codec.errors import FormatError

logger = logging.getLogger(__name__)

MAX_PASCAL_LENGTH = 255

_INT_FORMATS = {
    "int16": "h",
    "uint16": "H",
    "int32": "i",
    "uint32": "I",
    "int64": "q",
    "uint64": "Q",
}


def pack(fmt: str, *args: Any) -> bytes:
    fmt = ">" + fmt
    return struct.pack(fmt, *args)


def read_fmt(fmt: str, fp: BinaryIO) -> tuple:
    """
    Reads data from ``fp`` according to ``fmt``.
    """
    fmt = ">" + fmt
    fmt_size = struct.calcsize(fmt)
    data = fp.read(fmt_size)
    if len(data) != fmt_size:
        raise FormatError(
            "Unexpected end of stream: expected %d bytes, got %d"
            % (fmt_size, len(data))
        )
    return struct.unpack(fmt, data)


def write_fmt(fp: BinaryIO, fmt: str, *args: Any) -> int:
    """
    Writes data to ``fp`` according to ``fmt``.
    """
    fmt = ">" + fmt
    fmt_size = struct.calcsize(fmt)
    written = write_bytes(fp, struct.pack(fmt, *args))
    assert written == fmt_size, "written=%d, expected=%d" % (written, fmt_size)
    return written


def write_bytes(fp: BinaryIO, data: Union[bytes, bytearray, memoryview]) -> int:
    """
    Write bytes to the file object and returns bytes written.

    :return: written byte size
    """
    assert isinstance(data, (bytes, bytearray, memoryview)), type(data)
    written = fp.write(data)
    # Some file-likes return None from write().
    return len(data) if written is None else written


def read_exact(fp: BinaryIO, size: int) -> bytes:
    """
    Reads exactly ``size`` bytes or raises :py:class:`FormatError`.
    """
    data = fp.read(size)
    if len(data) != size:
        raise FormatError(
            "Unexpected end of stream: expected %d bytes, got %d" % (size, len(data))
        )
    return data


def read_int(fp: BinaryIO, kind: str) -> int:
    """
    Reads a big-endian integer, ``kind`` is one of ``int16``, ``uint16``,
    ``int32``, ``uint32``, ``int64`` or ``uint64``.
    """
    return read_fmt(_INT_FORMATS[kind], fp)[0]


def write_int(fp: BinaryIO, kind: str, value: int) -> int:
    """
    Writes a big-endian integer, see :py:func:`read_int` for ``kind``.
    """
    try:
        return write_fmt(fp, _INT_FORMATS[kind], value)
    except struct.error as e:
        raise FormatError("%r does not fit in %s: %s" % (value, kind, e)) from e


def read_length_block(fp: BinaryIO, fmt: str = "I", padding: int = 1) -> bytes:
    """
    Read a block of data with a length marker at the beginning.

    :param fp: file-like
    :param fmt: format of the length marker
    :param padding: divisor for padding not included in length marker
    :return: bytes object
    """
    length = read_fmt(fmt, fp)[0]
    data = read_exact(fp, length)
    read_padding(fp, length, padding)
    return data


def write_length_block(
    fp: BinaryIO,
    writer: Callable[[BinaryIO], int],
    fmt: str = "I",
    padding: int = 1,
    **kwargs: Any,
) -> int:
    """
    Writes a block of data with a length marker at the beginning.

    Example::

        with io.BytesIO() as fp:
            write_length_block(fp, lambda f: f.write(b'\\x00\\x00'))

    :param fp: file-like
    :param writer: function object that takes file-like object as an argument
    :param fmt: format of the length marker
    :param padding: divisor for padding not included in length marker
    :return: written byte size
    """
    length_position = reserve_position(fp, fmt)
    start_position = fp.tell()
    writer(fp, **kwargs)
    size = fp.tell() - start_position
    written = write_position(fp, length_position, size, fmt)
    written += size
    written += write_padding(fp, size, padding)
    return written


def reserve_position(fp: BinaryIO, fmt: str = "I") -> int:
    """
    Reserves the current position for write.

    Use with `write_position`.

    :param fp: file-like object
    :param fmt: format of the reserved position
    :return: the position
    """
    position = fp.tell()
    write_bytes(fp, b"\x00" * struct.calcsize(">" + fmt))
    return position


def write_position(fp: BinaryIO, position: int, value: int, fmt: str = "I") -> int:
    """
    Writes a value to the specified position.

    :param fp: file-like object
    :param position: position of the value marker
    :param value: value to write
    :param fmt: format of the value
    :return: written byte size
    """
    current_position = fp.tell()
    fp.seek(position)
    written = write_bytes(fp, pack(fmt, value))
    fp.seek(current_position)
    return written


def read_padding(fp: BinaryIO, size: int, divisor: int = 2) -> bytes:
    """
    Read padding bytes for the given byte size.

    :param fp: file-like object
    :param divisor: divisor of the byte alignment
    :return: read padding bytes
    """
    remainder = size % divisor
    if remainder:
        return fp.read(divisor - remainder)
    return b""


def write_padding(fp: BinaryIO, size: int, divisor: int = 2) -> int:
    """
    Writes padding bytes given the currently written size.

    :param fp: file-like object
    :param divisor: divisor of the byte alignment
    :return: written byte size
    """
    remainder = size % divisor
    if remainder:
        return write_bytes(fp, b"\x00" * (divisor - remainder))
    return 0


def is_readable(fp: BinaryIO, size: int = 1) -> bool:
    """
    Check if the file-like object is readable.

    :param fp: file-like object
    :param size: byte size
    :return: bool
    """
    read_size = len(fp.read(size))
    fp.seek(-read_size, 1)
    return read_size == size


def pad(number: int, divisor: int) -> int:
    if number % divisor:
        number = (number // divisor + 1) * divisor
    return number


def read_pascal_string(
    fp: BinaryIO, encoding: str = "macroman", padding: int = 2
) -> str:
    """
    Reads a Pascal string: one length byte followed by the characters.

    With the default ``padding=2`` a zero byte follows whenever the character
    count is even, so that the length byte plus characters plus pad always
    add up to an even size.
    """
    length = read_fmt("B", fp)[0]
    data = read_exact(fp, length)
    # -1 accounts for the length byte
    padded_length = pad(length + 1, padding) - 1
    read_exact(fp, padded_length - length)
    return data.decode(encoding, "replace")


def write_pascal_string(
    fp: BinaryIO, value: str, encoding: str = "macroman", padding: int = 2
) -> int:
    """
    Writes a Pascal string, truncating the encoded value to 255 bytes.
    """
    data = value.encode(encoding, "replace")
    if len(data) > MAX_PASCAL_LENGTH:
        logger.debug("truncating pascal string, len=%d" % len(data))
        data = data[:MAX_PASCAL_LENGTH]
    written = write_fmt(fp, "B", len(data))
    written += write_bytes(fp, data)
    written += write_padding(fp, written, padding)
    return written


def read_unicode_string(fp: BinaryIO, padding: int = 1) -> str:
    """
    Reads a UTF-16BE string prefixed by a 4-byte character count.
    """
    num_chars = read_fmt("I", fp)[0]
    data = read_exact(fp, num_chars * 2)
    read_padding(fp, num_chars * 2 + 4, padding)
    return data.decode("utf-16-be", "replace")


def write_unicode_string(fp: BinaryIO, value: str, padding: int = 1) -> int:
    """
    Writes a UTF-16BE string prefixed by a 4-byte character count.

    The count is in UTF-16 code units, so characters outside the basic plane
    count twice.
    """
    data = value.encode("utf-16-be")
    written = write_fmt(fp, "I", len(data) // 2)
    written += write_bytes(fp, data)
    written += write_padding(fp, written, padding)
    return written


def read_be_array(fmt: str, count: int, fp: BinaryIO) -> array.array:
    """
    Reads an array from a file with big-endian data.
    """
    arr = array.array(str(fmt))
    arr.frombytes(read_exact(fp, count * arr.itemsize))
    return fix_byteorder(arr)


def write_be_array(fp: BinaryIO, arr: array.array) -> int:
    """
    Writes an array to a file with big-endian data.
    """
    return write_bytes(fp, be_array_to_bytes(arr))


def fix_byteorder(arr: array.array) -> array.array:
    """
    Fixes the byte order of the array (assuming it was read
    from a Big Endian data).
    """
    if sys.byteorder == "little":
        arr.byteswap()
    return arr


def be_array_to_bytes(arr: array.array) -> bytes:
    """
    Writes an array to bytestring with big-endian data.
    """
    data = fix_byteorder(array.array(arr.typecode, arr))
    return data.tobytes()


def trimmed_repr(data: Any, trim_length: int = 16) -> str:
    if isinstance(data, bytes):
        if len(data) > trim_length:
            return repr(data[:trim_length] + b" ... =" + str(len(data)).encode("ascii"))
    return repr(data)
