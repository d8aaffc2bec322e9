import pytest

from psd_codec.constants import Compression
from psd_codec.errors import FormatError
from psd_codec.psd.header import FileHeader
from psd_codec.psd.image_data import ImageData

from ..utils import check_read_write

HEADER = FileHeader(channels=2, height=2, width=3)
PLANES = [b"\x01\x02\x03\x04\x05\x06", b"\x07" * 6]


@pytest.mark.parametrize("kind", [Compression.RAW, Compression.RLE])
def test_image_data_split_join(kind: Compression) -> None:
    image_data = ImageData(kind)
    image_data.set_data(PLANES, HEADER)
    assert image_data.get_data(HEADER) == PLANES

    payloads = image_data.split_channels(HEADER)
    assert len(payloads) == 2
    new_image_data = ImageData(kind)
    new_image_data.join_channels(payloads, HEADER)
    assert new_image_data.data == image_data.data


def test_image_data_read_write() -> None:
    check_read_write(ImageData, b"\x00\x01\x00\x02\x00\x02\xfe\x07\xfe\x07")


def test_image_data_unknown_compression() -> None:
    with pytest.raises(FormatError):
        ImageData.frombytes(b"\x00\x07\x00\x00")
