"""
psd-codec: reading and writing Adobe Photoshop PSD and PSB files.

The package parses and re-emits the whole container losslessly: header,
color mode data, image resources, layers with their masks and additional-info
records, and channel pixel data under all four compression schemes.

Basic usage::

    import psd_codec

    document = psd_codec.load("example.psd")
    for layer in document.layers:
        print(layer.name, layer.rect)
    psd_codec.save(document, "copy.psd", compression=psd_codec.Compression.ZIP)

Architecture:

- :py:mod:`psd_codec.psd`: low-level binary structure parsing/writing
- :py:mod:`psd_codec.api`: object model, group transform and load/save
- :py:mod:`psd_codec.compression`: channel codecs (RAW, RLE, ZIP, ZIP with
  prediction)
"""

from psd_codec.api import Channel, Document, Layer, Mask, Rect, load, save
from psd_codec.constants import ColorMode, Compression
from psd_codec.errors import (
    FormatError,
    PSDCodecError,
    ResourceBudgetError,
    UnsupportedFeatureError,
)
from psd_codec.version import __version__

__all__ = [
    "Channel",
    "ColorMode",
    "Compression",
    "Document",
    "FormatError",
    "Layer",
    "Mask",
    "PSDCodecError",
    "Rect",
    "ResourceBudgetError",
    "UnsupportedFeatureError",
    "__version__",
    "load",
    "save",
]
