"""
Image compression codecs for PSD channel data.

Every codec shares one contract: raw bytes hold ``height`` rows of
:py:func:`bytes_per_row` bytes each. Samples wider than a byte are stored in
little-endian word order in raw bytes, while the file keeps them big-endian,
so Raw and plain ZIP data of 16 and 32-bit channels go through
:py:func:`reverse_endianness`. The prediction variants produce the raw order
while unpacking and skip that step.

Supported compression methods:

- **RAW** (``Compression.RAW``): Uncompressed raw pixel data
- **RLE** (``Compression.RLE``): PackBits, with a table of per-row byte
  counts in front of the row streams
- **ZIP** (``Compression.ZIP``): Deflate behind a fixed 2-byte zlib header
- **ZIP_WITH_PREDICTION** (``Compression.ZIP_WITH_PREDICTION``): ZIP over
  horizontally differenced rows, 16 and 32-bit depths only

Example usage::

    from psd_codec.compression import compress, decompress
    from psd_codec.constants import Compression

    compressed = compress(raw, Compression.RLE, width=100, height=100, depth=8)
    raw = decompress(compressed, Compression.RLE, width=100, height=100, depth=8)
"""

import array
import io
import logging
import zlib
from typing import BinaryIO, Optional, Sequence

import numpy as np

from psd_codec.compression import rle as rle_impl
from psd_codec.constants import ColorMode, Compression
from psd_codec.errors import FormatError, UnsupportedFeatureError
from psd_codec.psd.bin_utils import read_be_array, read_fmt, write_be_array

logger = logging.getLogger(__name__)

# CMF: deflate with a 4K window, FLG: default level, no preset dictionary.
ZLIB_HEADER = b"\x48\x89"
_WINDOW_BITS = 12

_DTYPES = {16: np.uint16, 32: np.uint32}


def bytes_per_row(width: int, depth: int) -> int:
    """Size of one raw row; 1-bit rows are packed to whole bytes."""
    if depth == 1:
        return (width + 7) // 8
    return width * (depth // 8)


def raw_length(width: int, height: int, depth: int) -> int:
    """Size of a raw plane of the given dimensions."""
    return height * bytes_per_row(width, depth)


def read_compression(fp: BinaryIO) -> Compression:
    """Reads a 2-byte compression tag."""
    value = read_fmt("H", fp)[0]
    try:
        return Compression(value)
    except ValueError as e:
        raise FormatError("Unknown compression %d" % value) from e


def check_compression(
    compression: Compression, depth: int, color_mode: Optional[ColorMode] = None
) -> None:
    """
    Rejects depth, compression and color mode combinations that cannot be
    decoded, before any byte is processed.

    :raise UnsupportedFeatureError: for prediction outside 16 and 32-bit
        depths, or 32-bit data in a color mode other than RGB or grayscale.
    """
    compression = Compression(compression)
    if compression == Compression.ZIP_WITH_PREDICTION and depth not in (16, 32):
        raise UnsupportedFeatureError(
            "ZIP with prediction is only available for 16 and 32 bit depths, got %d"
            % depth
        )
    if depth not in (1, 8, 16, 32):
        raise UnsupportedFeatureError("Unsupported bit depth %d" % depth)
    if (
        depth == 32
        and color_mode is not None
        and ColorMode(color_mode) not in (ColorMode.RGB, ColorMode.GRAYSCALE)
    ):
        raise UnsupportedFeatureError(
            "32 bit depth is only supported for RGB and grayscale, got %s"
            % ColorMode(color_mode).name
        )


def compress(
    data: bytes,
    compression: Compression,
    width: int,
    height: int,
    depth: int,
    version: int = 1,
) -> bytes:
    """Compress raw data.

    :param data: raw data bytes to write.
    :param compression: compression type, see :py:class:`.Compression`.
    :param width: width.
    :param height: height.
    :param depth: bit depth of the pixel.
    :param version: psd file version.
    :return: compressed data bytes, including the RLE row-count table.
    """
    check_compression(compression, depth)
    length = raw_length(width, height, depth)
    if len(data) != length:
        raise ValueError("len=%d, expected=%d" % (len(data), length))

    if compression == Compression.RAW:
        result = reverse_endianness(data, depth)
    elif compression == Compression.RLE:
        data = reverse_endianness(data, depth)
        result = encode_rle(data, width, height, depth, version)
    elif compression == Compression.ZIP:
        result = encode_zip(reverse_endianness(data, depth))
    else:
        result = encode_zip(encode_prediction(data, width, height, depth))
    return result


def decompress(
    data: bytes,
    compression: Compression,
    width: int,
    height: int,
    depth: int,
    version: int = 1,
    color_mode: Optional[ColorMode] = None,
) -> bytes:
    """Decompress raw data.

    :param data: compressed data bytes.
    :param compression: compression type,
            see :py:class:`~psd_codec.constants.Compression`.
    :param width: width.
    :param height: height.
    :param depth: bit depth of the pixel.
    :param version: psd file version.
    :param color_mode: color mode of the document, when known.
    :return: decompressed data bytes.
    """
    check_compression(compression, depth, color_mode)
    length = raw_length(width, height, depth)

    if compression == Compression.RAW:
        if len(data) < length:
            raise FormatError(
                "Raw data is too short: len=%d, expected=%d" % (len(data), length)
            )
        result = reverse_endianness(data[:length], depth)
    elif compression == Compression.RLE:
        result = reverse_endianness(
            decode_rle(data, width, height, depth, version), depth
        )
    elif compression == Compression.ZIP:
        result = reverse_endianness(decode_zip(data, length), depth)
    else:
        result = decode_prediction(decode_zip(data, length), width, height, depth)

    assert len(result) == length, "len=%d, expected=%d" % (len(result), length)
    return result


def reverse_endianness(data: bytes, depth: int) -> bytes:
    """Swaps the byte order of every 16 or 32-bit sample."""
    if depth not in _DTYPES or not data:
        return bytes(data)
    return np.frombuffer(data, dtype=_DTYPES[depth]).byteswap().tobytes()


def encode_rle_rows(data: bytes, width: int, height: int, depth: int) -> list[bytes]:
    """Encodes every row of stored-order data separately."""
    row_size = bytes_per_row(width, depth)
    with io.BytesIO(data) as fp:
        return [rle_impl.encode(fp.read(row_size)) for _ in range(height)]


def decode_rle_rows(rows: Sequence[bytes], width: int, depth: int) -> bytes:
    """Decodes rows produced by :py:func:`encode_rle_rows`."""
    row_size = bytes_per_row(width, depth)
    return b"".join(rle_impl.decode(row, row_size) for row in rows)


def row_count_format(version: int) -> str:
    """Row byte-counts are 2 bytes in PSD and 4 bytes in PSB."""
    return ("H", "I")[version - 1]


def encode_rle(data: bytes, width: int, height: int, depth: int, version: int) -> bytes:
    rows = encode_rle_rows(data, width, height, depth)
    bytes_counts = [len(row) for row in rows]
    if version == 1 and any(count > 0xFFFF for count in bytes_counts):
        raise FormatError("RLE row is too long for a PSD row count")

    with io.BytesIO() as fp:
        write_be_array(fp, array.array(row_count_format(version), bytes_counts))
        fp.write(b"".join(rows))
        return fp.getvalue()


def decode_rle(data: bytes, width: int, height: int, depth: int, version: int) -> bytes:
    try:
        with io.BytesIO(data) as fp:
            bytes_counts = read_be_array(row_count_format(version), height, fp)
            rows = [fp.read(count) for count in bytes_counts]
        return decode_rle_rows(rows, width, depth)
    except FormatError as e:
        logger.error("An error occurred during RLE decoding: %s" % e)
        logger.info(
            "Decompression of RLE data failed: width=%d height=%d depth=%d "
            "version=%d size=%d" % (width, height, depth, version, len(data)),
            exc_info=True,
        )
        raise


def encode_zip(data: bytes) -> bytes:
    """
    Deflates ``data`` behind :py:data:`ZLIB_HEADER`. Empty input yields empty
    output, without the header.
    """
    if not data:
        return b""
    compressor = zlib.compressobj(
        zlib.Z_DEFAULT_COMPRESSION, zlib.DEFLATED, -_WINDOW_BITS
    )
    body = compressor.compress(data) + compressor.flush()
    checksum = zlib.adler32(data).to_bytes(4, "big")
    return ZLIB_HEADER + body + checksum


def decode_zip(data: bytes, length: int) -> bytes:
    """
    Skips the 2-byte header and inflates exactly ``length`` bytes.
    """
    if length == 0:
        return b""
    decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
    try:
        result = decompressor.decompress(data[2:], length)
    except zlib.error as e:
        logger.error("An error occurred during ZIP decoding: %s" % e)
        raise FormatError("Invalid ZIP compression: %s" % e) from e
    if len(result) != length:
        raise FormatError(
            "ZIP stream was not fully decompressed: len=%d, expected=%d"
            % (len(result), length)
        )
    return result


def encode_prediction(data: bytes, w: int, h: int, depth: int) -> bytes:
    """
    Differences each row left to right, returning stored-order bytes ready
    for deflate.
    """
    if depth == 16:
        arr = np.frombuffer(data, dtype="<u2").reshape(h, w)
        arr = _delta_encode(arr)
        return arr.astype(">u2").tobytes()
    elif depth == 32:
        # Split the big-endian bytes of every word into 4 planes per row,
        # most significant plane first, then difference the whole row.
        arr = np.frombuffer(data, dtype=np.uint8).reshape(h, w, 4)[:, :, ::-1]
        planes = arr.transpose(0, 2, 1).reshape(h, w * 4)
        return _delta_encode(planes).tobytes()
    else:
        raise UnsupportedFeatureError("Invalid pixel size %d" % (depth))


def decode_prediction(data: bytes, w: int, h: int, depth: int) -> bytes:
    """
    Undoes the row differencing of inflated data and returns raw bytes.
    """
    if depth == 16:
        arr = np.frombuffer(data, dtype=">u2").reshape(h, w)
        arr = _delta_decode(arr.astype(np.uint16))
        return arr.astype("<u2").tobytes()
    elif depth == 32:
        planes = _delta_decode(np.frombuffer(data, dtype=np.uint8).reshape(h, w * 4))
        arr = planes.reshape(h, 4, w).transpose(0, 2, 1)[:, :, ::-1]
        return np.ascontiguousarray(arr).tobytes()
    else:
        raise UnsupportedFeatureError("Invalid pixel size %d" % (depth))


def _delta_encode(arr: np.ndarray) -> np.ndarray:
    result = np.array(arr, copy=True)
    if result.size:
        # Unsigned subtraction wraps around, matching the stored modulo.
        result[:, 1:] = arr[:, 1:] - arr[:, :-1]
    return result


def _delta_decode(arr: np.ndarray) -> np.ndarray:
    if not arr.size:
        return np.array(arr, copy=True)
    return np.cumsum(arr, axis=1, dtype=arr.dtype)
