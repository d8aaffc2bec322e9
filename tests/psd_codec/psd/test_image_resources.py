import io

import pytest
from PIL import Image

from psd_codec.constants import Resource
from psd_codec.errors import FormatError
from psd_codec.psd.image_resources import (
    AlphaNamesPascal,
    AlphaNamesUnicode,
    ImageResource,
    ImageResources,
    ResolutionInfo,
    ThumbnailResource,
    ThumbnailResourceV4,
    VersionInfo,
)

from ..utils import check_read_write, check_write_read

UNKNOWN_RESOURCE = b"8BIM\x0f\xa0\x00\x00\x00\x00\x00\x03abc\x00"


def _jpeg(color: tuple) -> bytes:
    with io.BytesIO() as f:
        Image.new("RGB", (4, 2), color).save(f, "JPEG", quality=100)
        return f.getvalue()


def test_image_resources_new() -> None:
    resources = ImageResources.new()
    version_info = resources.get_data(Resource.VERSION_INFO)
    assert isinstance(version_info, VersionInfo)
    assert version_info.has_composite
    assert version_info.writer.startswith("psd-codec")
    check_write_read(resources)


def test_image_resource_unknown() -> None:
    resource = ImageResource.frombytes(UNKNOWN_RESOURCE)
    assert resource.key == 4000
    assert resource.data == b"abc"
    check_read_write(ImageResource, UNKNOWN_RESOURCE)


def test_image_resource_corrupt_payload() -> None:
    # Resolution info needs 16 bytes.
    data = b"8BIM\x03\xed\x00\x00\x00\x00\x00\x03abc\x00"
    resource = ImageResource.frombytes(data)
    assert resource.key == Resource.RESOLUTION_INFO
    assert resource.data == b"abc"
    check_read_write(ImageResource, data)


def test_image_resource_name() -> None:
    resource = ImageResource(key=4000, name="ab", data=b"\x01")
    data = resource.tobytes()
    assert data[6:10] == b"\x02ab\x00"
    assert ImageResource.frombytes(data) == resource


def test_image_resource_invalid_signature() -> None:
    with pytest.raises(FormatError):
        ImageResource.frombytes(b"XXXX" + UNKNOWN_RESOURCE[4:])


def test_image_resources_lookup() -> None:
    resources = ImageResources(
        [
            ImageResource(key=4000, data=b"first"),
            ImageResource(key=4001, data=b"other"),
            ImageResource(key=4000, data=b"second"),
        ]
    )
    assert 4000 in resources
    assert 4002 not in resources
    assert resources.get_data(4000) == b"first"
    assert resources.get_data(4002, b"default") == b"default"

    resources.set(ImageResource(key=4000, data=b"replaced"))
    assert [r.data for r in resources] == [b"replaced", b"other"]

    resources.set(ImageResource(key=4002, data=b"new"))
    assert [r.key for r in resources] == [4000, 4001, 4002]

    assert resources.remove(4001) == 1
    assert resources.remove(4001) == 0
    assert [r.key for r in resources] == [4000, 4002]


def test_image_resources_section() -> None:
    resources = ImageResources(
        [
            ImageResource(key=Resource.RESOLUTION_INFO, data=ResolutionInfo()),
            ImageResource(key=4000, data=b"odd"),
        ]
    )
    data = resources.tobytes()
    assert int.from_bytes(data[:4], "big") == len(data) - 4
    check_read_write(ImageResources, data)
    check_write_read(resources)


def test_resolution_info() -> None:
    info = ResolutionInfo(horizontal=300 << 16, vertical=150 << 16)
    assert info.horizontal_dpi == 300.0
    assert info.vertical_dpi == 150.0
    assert len(info.tobytes()) == 16
    check_write_read(info)


def test_alpha_names() -> None:
    check_write_read(AlphaNamesPascal(["Alpha 1", "Alpha 2"]))
    check_read_write(AlphaNamesPascal, b"\x01a\x02bc")
    check_write_read(AlphaNamesUnicode(["Alpha 1", "アルファ"]))


def test_version_info() -> None:
    check_write_read(VersionInfo(1, True, "writer", "reader", 1))


def test_thumbnail_jpeg() -> None:
    thumbnail = ThumbnailResource(
        fmt=1, width=4, height=2, row=12, total_size=24, data=_jpeg((255, 0, 0))
    )
    check_write_read(thumbnail)
    image = thumbnail.topil()
    assert image.size == (4, 2)
    r, g, b = image.getpixel((0, 0))
    assert r > 200 and b < 50


def test_thumbnail_jpeg_bgr() -> None:
    thumbnail = ThumbnailResourceV4(
        fmt=1, width=4, height=2, row=12, total_size=24, data=_jpeg((255, 0, 0))
    )
    r, g, b = thumbnail.topil().getpixel((0, 0))
    assert b > 200 and r < 50


@pytest.mark.parametrize(
    "kls, expected",
    [(ThumbnailResource, (255, 0, 0)), (ThumbnailResourceV4, (0, 0, 255))],
)
def test_thumbnail_raw(kls: type, expected: tuple) -> None:
    data = bytes([255, 0, 0, 255, 0, 0, 0, 0])
    thumbnail = kls(fmt=0, width=2, height=1, row=8, total_size=8, data=data)
    assert thumbnail.topil().getpixel((0, 0)) == expected


def test_thumbnail_unknown_format() -> None:
    with pytest.raises(FormatError):
        ThumbnailResource(fmt=7).topil()
