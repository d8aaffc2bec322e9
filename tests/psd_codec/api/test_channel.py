import numpy as np
import pytest

from psd_codec.api import Channel, Rect
from psd_codec.compression import compress
from psd_codec.constants import Compression


def test_rect() -> None:
    rect = Rect(1, 2, 4, 7)
    assert (rect.width, rect.height) == (5, 3)
    assert not rect.is_empty
    assert Rect(5, 5, 1, 1).is_empty
    assert Rect.from_size(3, 2) == Rect(0, 0, 2, 3)


def test_data_or_compressed() -> None:
    with pytest.raises(ValueError):
        Channel(0, Rect(0, 0, 1, 1), data=b"\x00", compressed=b"\x00")


def test_data_length() -> None:
    channel = Channel(0, Rect(0, 0, 2, 2))
    with pytest.raises(ValueError):
        channel.data = b"\x00" * 3


def test_lazy_decode() -> None:
    rect = Rect(0, 0, 2, 3)
    payload = compress(b"\x07" * 6, Compression.RLE, 3, 2, 8)
    channel = Channel(0, rect, compression=Compression.RLE, compressed=payload)
    assert not channel.is_decoded
    assert channel.length == 2 + len(payload)
    assert channel.data == b"\x07" * 6
    assert channel.is_decoded


def test_encode_drops_data() -> None:
    channel = Channel(0, Rect(0, 0, 2, 3), data=b"\x07" * 6)
    payload = channel.encode(Compression.RLE, 2)
    assert payload[:8] == b"\x00\x00\x00\x02\x00\x00\x00\x02"
    assert not channel.is_decoded
    assert channel.compression == Compression.RLE
    assert channel.version == 2
    assert channel.encode(Compression.RLE, 2) is payload
    assert channel.data == b"\x07" * 6


def test_missing_payload_is_zero() -> None:
    channel = Channel(0, Rect(0, 0, 2, 2), depth=16)
    assert channel.data == b"\x00" * 8


def test_numpy_8bit() -> None:
    channel = Channel(0, Rect(0, 0, 2, 3), data=bytes(range(6)))
    arr = channel.numpy()
    assert arr.dtype == np.uint8
    assert arr.tolist() == [[0, 1, 2], [3, 4, 5]]
    channel.from_numpy(arr[::-1])
    assert channel.data == bytes([3, 4, 5, 0, 1, 2])


def test_numpy_16bit() -> None:
    channel = Channel(0, Rect(0, 0, 1, 2), depth=16)
    channel.from_numpy(np.array([[1, 0x1234]], dtype=np.uint16))
    assert channel.data == b"\x01\x00\x34\x12"
    assert channel.numpy().tolist() == [[1, 0x1234]]


def test_numpy_1bit() -> None:
    channel = Channel(0, Rect(0, 0, 2, 10), depth=1)
    arr = np.zeros((2, 10), dtype=np.uint8)
    arr[0, 0] = 1
    arr[1, 9] = 1
    channel.from_numpy(arr)
    assert channel.data == b"\x80\x00\x00\x40"
    assert (channel.numpy() == arr).all()


def test_from_numpy_shape() -> None:
    channel = Channel(0, Rect(0, 0, 2, 2))
    with pytest.raises(ValueError):
        channel.from_numpy(np.zeros((3, 2), dtype=np.uint8))
