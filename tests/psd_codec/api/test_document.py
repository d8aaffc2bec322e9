import io
import logging
import os
from concurrent.futures import CancelledError

import numpy as np
import pytest

from psd_codec import (
    Document,
    FormatError,
    ResourceBudgetError,
    UnsupportedFeatureError,
    load,
    save,
)
from psd_codec.api import Layer, Rect
from psd_codec.constants import BlendMode, ChannelID, ColorMode, Compression


class Unseekable(io.BytesIO):
    writes = 0

    def seekable(self) -> bool:
        return False

    def write(self, data) -> int:  # type: ignore[override]
        self.writes += 1
        return super().write(data)


def _save(document: Document, **kwargs) -> bytes:
    with io.BytesIO() as f:
        save(document, f, **kwargs)
        return f.getvalue()


def test_new_document() -> None:
    document = Document(5, 2)
    assert document.version == 1
    assert [c.id for c in document.channels] == [0, 1, 2]
    assert document.channels[0].data == b"\xff" * 10
    assert document.numpy().shape == (2, 5, 3)


@pytest.mark.parametrize(
    "color_mode, channels, expected",
    [
        (ColorMode.RGB, 4, [0, 1, 2, -1]),
        (ColorMode.RGB, 5, [0, 1, 2, 3, 4]),
        (ColorMode.GRAYSCALE, 2, [0, -1]),
        (ColorMode.CMYK, 5, [0, 1, 2, 3, -1]),
    ],
)
def test_composite_channel_ids(
    color_mode: ColorMode, channels: int, expected: list
) -> None:
    document = Document(2, 2, color_mode=color_mode, channels=channels)
    assert [c.id for c in document.channels] == expected
    new_document = load(io.BytesIO(_save(document)))
    assert [c.id for c in new_document.channels] == expected


def test_save_load(document: Document) -> None:
    data = _save(document)
    assert data[:6] == b"8BPS\x00\x01"

    new_document = load(io.BytesIO(data))
    assert (new_document.width, new_document.height) == (4, 3)
    assert new_document.color_mode == ColorMode.RGB
    assert [c.id for c in new_document.channels] == [0, 1, 2, -1]
    assert new_document.channels[1].data == bytes(range(10, 22))

    background, top = new_document.layers
    assert background.name == "Background"
    assert background.channel(0).data == bytes(range(12))
    assert background.channel(1).data == b"\xff" * 12
    assert top.name == "レイヤー"
    assert top.rect == Rect(1, 1, 3, 3)
    assert top.blend_mode == BlendMode.MULTIPLY.value
    assert top.opacity == 128
    assert top.visible
    assert top.channel(ChannelID.TRANSPARENCY_MASK).data == b"\x80" * 4
    assert top.mask.rect == Rect(0, 0, 2, 2)
    assert top.mask.background_color == 255
    assert top.mask.data == b"\x00\xff\xff\x00"


@pytest.mark.parametrize("decode", [True, False])
def test_save_is_lossless(document: Document, decode: bool) -> None:
    data = _save(document)
    assert _save(load(io.BytesIO(data), decode=decode)) == data


def test_lazy_load(document: Document) -> None:
    new_document = load(io.BytesIO(_save(document)), decode=False)
    channel = new_document.layers[0].channel(0)
    assert not channel.is_decoded
    assert channel.data == bytes(range(12))


def test_load_decodes_everything(document: Document) -> None:
    new_document = load(io.BytesIO(_save(document)))
    channels = [c for layer in new_document.layers for c in layer.channels]
    assert all(c.is_decoded for c in channels + new_document.channels)


def test_psb(document: Document) -> None:
    data = _save(document, version=2)
    assert data[:6] == b"8BPS\x00\x02"
    new_document = load(io.BytesIO(data))
    assert new_document.version == 2
    assert new_document.layers[1].channel(0).data == b"\xff" * 4


def test_psb_is_picked_for_large_canvas() -> None:
    document = Document(30001, 1, color_mode=ColorMode.GRAYSCALE)
    assert document.version == 2
    document.version = 1
    data = _save(document)
    assert data[:6] == b"8BPS\x00\x02"
    assert load(io.BytesIO(data)).width == 30001
    with pytest.raises(FormatError):
        _save(document, version=1)


@pytest.mark.parametrize(
    "compression",
    [Compression.RAW, Compression.RLE, Compression.ZIP],
)
def test_compression_override(document: Document, compression: Compression) -> None:
    new_document = load(io.BytesIO(_save(document, compression=compression)))
    assert new_document.compression == compression
    assert new_document.channels[3].data == bytes(range(30, 42))
    for layer in new_document.layers:
        assert all(c.compression == compression for c in layer.channels)
    assert new_document.layers[1].mask.data == b"\x00\xff\xff\x00"


def test_mixed_compression(document: Document) -> None:
    new_document = load(io.BytesIO(_save(document)))
    top = new_document.layers[1]
    assert top.channel(0).compression == Compression.RLE
    assert top.channel(ChannelID.USER_LAYER_MASK).compression == Compression.RAW


def test_16bit_prediction() -> None:
    document = Document(3, 2, depth=16, compression=Compression.ZIP_WITH_PREDICTION)
    layer = Layer("Layer 1", Rect(0, 0, 2, 3))
    layer.create_missing_channels(
        ColorMode.RGB, 16, compression=Compression.ZIP_WITH_PREDICTION
    )
    plane = np.arange(6, dtype=np.uint16).reshape(2, 3) * 1000
    layer.channel(1).from_numpy(plane)
    document.layers.append(layer)
    document.channels[2].from_numpy(plane)

    new_document = load(io.BytesIO(_save(document)))
    assert new_document.compression == Compression.ZIP_WITH_PREDICTION
    assert (new_document.layers[0].channel(1).numpy() == plane).all()
    assert (new_document.numpy()[:, :, 2] == plane).all()
    assert (new_document.numpy()[:, :, 0] == 0xFFFF).all()


def test_prediction_needs_16bit(document: Document) -> None:
    with pytest.raises(UnsupportedFeatureError):
        _save(document, compression=Compression.ZIP_WITH_PREDICTION)


def test_32bit_cmyk() -> None:
    document = Document(2, 2, depth=32, color_mode=ColorMode.CMYK)
    with pytest.raises(UnsupportedFeatureError):
        _save(document)


def test_1bit_bitmap() -> None:
    document = Document(10, 2, depth=1, color_mode=ColorMode.BITMAP)
    document.channels[0].data = b"\x80\x00\x00\x40"
    new_document = load(io.BytesIO(_save(document)))
    assert new_document.channels[0].data == b"\x80\x00\x00\x40"
    assert new_document.numpy().shape == (2, 10, 1)


def test_absolute_alpha(document: Document) -> None:
    document.absolute_alpha = True
    new_document = load(io.BytesIO(_save(document)))
    assert new_document.absolute_alpha
    assert len(new_document.layers) == 2


def test_no_layers() -> None:
    new_document = load(io.BytesIO(_save(Document(2, 2))))
    assert new_document.layers == []
    assert not new_document.absolute_alpha


def test_missing_composite_channel(document: Document) -> None:
    del document.composite.channels[1:]
    with pytest.raises(FormatError):
        _save(document)


def test_composite_rect_mismatch(document: Document) -> None:
    document.channels[0].rect = Rect(0, 0, 1, 1)
    with pytest.raises(ValueError):
        _save(document)


def test_duplicate_unicode_name(document: Document) -> None:
    layer = document.layers[0]
    layer.to_record()
    layer.tagged_blocks.append(layer.tagged_blocks.get(b"luni"))
    with pytest.raises(FormatError):
        _save(document)


def test_memory_budget(document: Document) -> None:
    data = _save(document)
    assert document.estimate_memory() == 192
    load(io.BytesIO(data), memory_budget=192)
    with pytest.raises(ResourceBudgetError) as excinfo:
        load(io.BytesIO(data), memory_budget=191)
    assert excinfo.value.required == 192


def test_progress(document: Document) -> None:
    calls = []
    data = _save(document, progress=lambda *args: calls.append(args))
    assert calls == [(i, 12) for i in range(1, 13)]

    calls.clear()
    load(io.BytesIO(data), progress=lambda *args: calls.append(args))
    assert calls == [(i, 12) for i in range(1, 13)]


def test_abort(document: Document) -> None:
    data = _save(document)
    with pytest.raises(CancelledError):
        load(io.BytesIO(data), abort=lambda: True)
    with pytest.raises(CancelledError):
        _save(load(io.BytesIO(data)), abort=lambda: True)


def test_unseekable_streams(document: Document) -> None:
    expected = _save(document)
    f = Unseekable()
    save(load(io.BytesIO(expected)), f)
    assert f.writes == 1
    assert f.getvalue() == expected

    new_document = load(Unseekable(expected))
    assert new_document.layers[1].name == "レイヤー"


def test_save_path(document: Document, tmp_path) -> None:
    path = tmp_path / "output.psd"
    save(document, path)
    assert os.listdir(tmp_path) == ["output.psd"]
    assert load(path).layers[0].name == "Background"
    assert load(str(path)).width == 4


def test_failed_save_keeps_target(document: Document, tmp_path) -> None:
    path = tmp_path / "output.psd"
    path.write_bytes(b"original")
    del document.composite.channels[1:]
    with pytest.raises(FormatError):
        save(document, path)
    assert path.read_bytes() == b"original"
    assert os.listdir(tmp_path) == ["output.psd"]


def test_sections(document: Document) -> None:
    annotated = document.sections()
    group = Layer("Layer Group: Folder")
    end = Layer("End Layer Group: Folder")
    document.set_sections([group] + annotated + [end])
    assert [layer.name for layer in document.layers] == [
        "</Layer group>",
        "Background",
        "レイヤー",
        "Folder",
    ]

    new_document = load(io.BytesIO(_save(document)))
    assert [layer.name for layer in new_document.sections()] == [
        "Layer Group: Folder",
        "レイヤー",
        "Background",
        "End Layer Group: Folder",
    ]


def test_low_channel_count_warns(caplog: pytest.LogCaptureFixture) -> None:
    document = Document(2, 2, color_mode=ColorMode.GRAYSCALE)
    data = bytearray(_save(document))
    # Relabel the grayscale file as RGB.
    data[25] = ColorMode.RGB
    with caplog.at_level(logging.WARNING):
        new_document = load(io.BytesIO(bytes(data)))
    assert "expected at least 3" in caplog.text
    assert len(new_document.channels) == 1
