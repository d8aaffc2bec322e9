import io
import zlib

import numpy as np
import pytest

from psd_codec.compression import (
    ZLIB_HEADER,
    bytes_per_row,
    check_compression,
    compress,
    decode_prediction,
    decompress,
    encode_prediction,
    raw_length,
    read_compression,
)
from psd_codec.constants import ColorMode, Compression
from psd_codec.errors import FormatError, UnsupportedFeatureError

RAW_IMAGE_3x3_8bit = b"\x00\x02\xff\x01\x00\x00\x04\x00\xff"
RAW_IMAGE_2x2_16bit = b"\x00\x02\xff\x01\x00\x00\x04\x00"


def _random_plane(width: int, height: int, depth: int) -> bytes:
    rng = np.random.default_rng(width * 1000 + height * 10 + depth)
    size = raw_length(width, height, depth)
    # Runs and noise, so that both RLE packet kinds show up.
    data = rng.integers(0, 4, size, dtype=np.uint8)
    return data.tobytes()


@pytest.mark.parametrize(
    "width, depth, expected",
    [(10, 1, 2), (8, 1, 1), (10, 8, 10), (10, 16, 20), (10, 32, 40), (0, 8, 0)],
)
def test_bytes_per_row(width: int, depth: int, expected: int) -> None:
    assert bytes_per_row(width, depth) == expected


@pytest.mark.parametrize(
    "compression, depth",
    [
        (Compression.RAW, 1),
        (Compression.RAW, 8),
        (Compression.RAW, 16),
        (Compression.RAW, 32),
        (Compression.RLE, 1),
        (Compression.RLE, 8),
        (Compression.RLE, 16),
        (Compression.RLE, 32),
        (Compression.ZIP, 1),
        (Compression.ZIP, 8),
        (Compression.ZIP, 16),
        (Compression.ZIP, 32),
        (Compression.ZIP_WITH_PREDICTION, 16),
        (Compression.ZIP_WITH_PREDICTION, 32),
    ],
)
def test_compress_decompress(compression: Compression, depth: int) -> None:
    width, height = 13, 7
    data = _random_plane(width, height, depth)
    encoded = compress(data, compression, width, height, depth)
    assert decompress(encoded, compression, width, height, depth) == data


@pytest.mark.parametrize(
    "compression, depth",
    [
        (Compression.RAW, 8),
        (Compression.RLE, 8),
        (Compression.ZIP, 8),
        (Compression.ZIP_WITH_PREDICTION, 16),
        (Compression.ZIP_WITH_PREDICTION, 32),
    ],
)
@pytest.mark.parametrize("width, height", [(0, 0), (0, 3), (3, 0)])
def test_zero_area(
    compression: Compression, depth: int, width: int, height: int
) -> None:
    encoded = compress(b"", compression, width, height, depth)
    assert decompress(encoded, compression, width, height, depth) == b""


@pytest.mark.parametrize("depth", [1, 8])
def test_prediction_unsupported_depth(depth: int) -> None:
    data = bytes(raw_length(4, 4, depth))
    with pytest.raises(UnsupportedFeatureError):
        compress(data, Compression.ZIP_WITH_PREDICTION, 4, 4, depth)
    with pytest.raises(UnsupportedFeatureError):
        decompress(b"", Compression.ZIP_WITH_PREDICTION, 4, 4, depth)


def test_32bit_color_mode() -> None:
    check_compression(Compression.RAW, 32, ColorMode.RGB)
    check_compression(Compression.RAW, 32, ColorMode.GRAYSCALE)
    with pytest.raises(UnsupportedFeatureError):
        decompress(bytes(16), Compression.RAW, 2, 2, 32, color_mode=ColorMode.CMYK)


def test_raw_16bit_is_stored_big_endian() -> None:
    data = np.array([1, 256], dtype="<u2").tobytes()
    assert compress(data, Compression.RAW, 2, 1, 16) == b"\x00\x01\x01\x00"
    assert decompress(b"\x00\x01\x01\x00", Compression.RAW, 2, 1, 16) == data


@pytest.mark.parametrize("version, table", [(1, b"\x00\x02"), (2, b"\x00\x00\x00\x02")])
def test_rle_row_table(version: int, table: bytes) -> None:
    encoded = compress(b"\x07" * 5, Compression.RLE, 5, 1, 8, version)
    assert encoded == table + b"\xfc\x07"


def test_rle_rows_are_independent() -> None:
    encoded = compress(RAW_IMAGE_3x3_8bit, Compression.RLE, 3, 3, 8)
    assert encoded[:6] == b"\x00\x04\x00\x04\x00\x04"
    assert decompress(encoded, Compression.RLE, 3, 3, 8) == RAW_IMAGE_3x3_8bit


def test_zip_stream() -> None:
    encoded = compress(RAW_IMAGE_3x3_8bit, Compression.ZIP, 3, 3, 8)
    assert encoded[:2] == ZLIB_HEADER
    assert zlib.decompress(encoded) == RAW_IMAGE_3x3_8bit


def test_prediction_16bit() -> None:
    data = np.array([1, 2, 3], dtype="<u2").tobytes()
    assert encode_prediction(data, 3, 1, 16) == b"\x00\x01\x00\x01\x00\x01"
    assert decode_prediction(b"\x00\x01\x00\x01\x00\x01", 3, 1, 16) == data


def test_prediction_16bit_wraps() -> None:
    data = np.array([0xFFFF, 0, 1], dtype="<u2").tobytes()
    encoded = encode_prediction(data, 3, 1, 16)
    assert encoded == b"\xff\xff\x00\x01\x00\x01"
    assert decode_prediction(encoded, 3, 1, 16) == data


def test_prediction_32bit() -> None:
    data = np.array([1.0, 1.0], dtype="<f4").tobytes()
    encoded = encode_prediction(data, 2, 1, 32)
    assert encoded == bytes([0x3F, 0x00, 0x41, 0x00, 0x80, 0x00, 0x00, 0x00])
    assert decode_prediction(encoded, 2, 1, 32) == data


def test_prediction_round_trip_2x2() -> None:
    encoded = compress(RAW_IMAGE_2x2_16bit, Compression.ZIP_WITH_PREDICTION, 2, 2, 16)
    assert (
        decompress(encoded, Compression.ZIP_WITH_PREDICTION, 2, 2, 16)
        == RAW_IMAGE_2x2_16bit
    )


def test_compress_length_mismatch() -> None:
    with pytest.raises(ValueError):
        compress(b"\x00" * 3, Compression.RAW, 2, 2, 8)


@pytest.mark.parametrize(
    "data, compression",
    [
        (b"\x00\x05\xfd\x01", Compression.RLE),
        (b"\x00", Compression.RLE),
        (ZLIB_HEADER + b"garbage", Compression.ZIP),
        (b"\x00\x01", Compression.RAW),
    ],
)
def test_malicious(data: bytes, compression: Compression) -> None:
    with pytest.raises(FormatError):
        decompress(data, compression, 3, 1, 8)


def test_read_compression() -> None:
    assert read_compression(io.BytesIO(b"\x00\x03")) == Compression.ZIP_WITH_PREDICTION
    with pytest.raises(FormatError):
        read_compression(io.BytesIO(b"\x00\x07"))
