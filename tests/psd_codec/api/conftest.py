import pytest

from psd_codec.api import Channel, Document, Layer, Mask, Rect
from psd_codec.constants import BlendMode, ChannelID, ColorMode, Compression


def make_document() -> Document:
    document = Document(4, 3, channels=4)
    for index, channel in enumerate(document.channels):
        channel.data = bytes([index * 10 + i for i in range(12)])

    background = Layer("Background", Rect(0, 0, 3, 4))
    background.create_missing_channels(ColorMode.RGB)
    background.channel(0).data = bytes(range(12))

    top = Layer(
        "レイヤー",
        Rect(1, 1, 3, 3),
        blend_mode=BlendMode.MULTIPLY,
        opacity=128,
        mask=Mask(Rect(0, 0, 2, 2), background_color=255),
    )
    top.create_missing_channels(ColorMode.RGB)
    top.add_channel(
        Channel(
            ChannelID.TRANSPARENCY_MASK,
            top.rect,
            compression=Compression.RLE,
            data=b"\x80" * 4,
        )
    )
    top.add_channel(
        Channel(ChannelID.USER_LAYER_MASK, Rect(0, 0, 2, 2), data=b"\x00\xff\xff\x00")
    )
    document.layers = [background, top]
    return document


@pytest.fixture
def document() -> Document:
    return make_document()
