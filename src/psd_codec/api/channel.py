"""
Channel and rectangle types of the object model.

A :py:class:`Channel` owns a single byte plane. It holds either the
compressed payload read from the file or the decoded raw bytes, never both:
decoding drops the compressed copy and encoding drops the raw copy, and each
direction runs lazily the first time the other representation is asked for.
"""

import logging
from typing import Any, Optional

import numpy as np
from attrs import define

from psd_codec.compression import compress, decompress, raw_length
from psd_codec.constants import ColorMode, Compression

logger = logging.getLogger(__name__)

_DTYPES = {8: np.dtype("u1"), 16: np.dtype("<u2"), 32: np.dtype("<f4")}


@define(frozen=True)
class Rect:
    """
    Rectangle in document coordinates. ``bottom`` and ``right`` are
    exclusive.
    """

    top: int = 0
    left: int = 0
    bottom: int = 0
    right: int = 0

    @property
    def width(self) -> int:
        return max(self.right - self.left, 0)

    @property
    def height(self) -> int:
        return max(self.bottom - self.top, 0)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @classmethod
    def from_size(cls, width: int, height: int) -> "Rect":
        return cls(0, 0, height, width)


class Channel:
    """
    Single channel of a layer or of the composite image.

    :param id: signed channel id, see
        :py:class:`~psd_codec.constants.ChannelID`.
    :param rect: bounding rectangle of the plane.
    :param depth: bits per sample.
    :param compression: compression of the stored payload.
    :param data: decoded raw bytes.
    :param compressed: compressed payload, RLE row table included.
    :param version: file version the compressed payload was written for.
    :param color_mode: color mode of the owning document, used to reject
        unsupported 32-bit data before decoding.
    """

    def __init__(
        self,
        id: int,
        rect: Rect = Rect(),
        depth: int = 8,
        compression: Compression = Compression.RAW,
        data: Optional[bytes] = None,
        compressed: Optional[bytes] = None,
        version: int = 1,
        color_mode: Optional[ColorMode] = None,
    ) -> None:
        if data is not None and compressed is not None:
            raise ValueError("Channel takes either data or compressed, not both")
        self.id = int(id)
        self.rect = rect
        self.depth = depth
        self.compression = Compression(compression)
        self.version = version
        self.color_mode = color_mode
        self._compressed = compressed
        self._data: Optional[bytes] = None
        if data is not None:
            self.data = data

    def __repr__(self) -> str:
        return "%s(id=%d, size=%dx%d, compression=%s, decoded=%s)" % (
            self.__class__.__name__,
            self.id,
            self.width,
            self.height,
            self.compression.name,
            self.is_decoded,
        )

    @property
    def width(self) -> int:
        return self.rect.width

    @property
    def height(self) -> int:
        return self.rect.height

    @property
    def is_decoded(self) -> bool:
        """True when the channel currently holds raw bytes."""
        return self._data is not None

    @property
    def data(self) -> bytes:
        """
        Decoded raw bytes: ``height`` rows of packed 1-bit samples, bytes, or
        little-endian 16 or 32-bit words. Decodes on first access.
        """
        if self._data is None:
            self.decode()
        assert self._data is not None
        return self._data

    @data.setter
    def data(self, value: bytes) -> None:
        expected = raw_length(self.width, self.height, self.depth)
        if len(value) != expected:
            raise ValueError("len=%d, expected=%d" % (len(value), expected))
        self._data = bytes(value)
        self._compressed = None

    @property
    def compressed(self) -> bytes:
        """Compressed payload. Encodes with the current settings if needed."""
        if self._compressed is None:
            self.encode()
        assert self._compressed is not None
        return self._compressed

    @property
    def length(self) -> int:
        """Stored length, including the 2-byte compression tag."""
        return 2 + len(self.compressed)

    def decode(self) -> bytes:
        """Decompresses the payload into raw bytes and drops the payload."""
        if self._data is not None:
            return self._data
        if self._compressed is None:
            logger.debug("channel %d has no payload, filling zeros" % self.id)
            self._data = bytes(raw_length(self.width, self.height, self.depth))
            return self._data
        self._data = decompress(
            self._compressed,
            self.compression,
            self.width,
            self.height,
            self.depth,
            self.version,
            color_mode=self.color_mode,
        )
        self._compressed = None
        return self._data

    def encode(
        self, compression: Optional[Compression] = None, version: Optional[int] = None
    ) -> bytes:
        """
        Compresses the raw bytes and drops them. A payload that already
        matches the requested compression and version is kept as is.
        """
        if compression is None:
            compression = self.compression
        compression = Compression(compression)
        if version is None:
            version = self.version
        if (
            self._compressed is not None
            and compression == self.compression
            and version == self.version
        ):
            return self._compressed
        data = self.data
        self._compressed = compress(
            data, compression, self.width, self.height, self.depth, version
        )
        self.compression = compression
        self.version = version
        self._data = None
        return self._compressed

    def numpy(self) -> np.ndarray:
        """
        Returns the decoded plane as a 2-D array of ``uint8``, ``uint16`` or
        ``float32``. 1-bit planes are unpacked to 0 and 1.
        """
        data = self.data
        if self.depth == 1:
            bits = np.unpackbits(np.frombuffer(data, np.uint8))
            row_bits = (self.width + 7) // 8 * 8
            return bits.reshape(self.height, row_bits)[:, : self.width]
        arr = np.frombuffer(data, _DTYPES[self.depth])
        native = _DTYPES[self.depth].newbyteorder("=")
        return arr.reshape(self.height, self.width).astype(native)

    def from_numpy(self, arr: Any) -> None:
        """Stores a 2-D array with the shape of the channel rectangle."""
        arr = np.asarray(arr)
        if arr.shape != (self.height, self.width):
            raise ValueError(
                "Expected shape %r, got %r" % ((self.height, self.width), arr.shape)
            )
        if self.depth == 1:
            self.data = np.packbits(arr.astype(np.uint8) != 0, axis=1).tobytes()
        else:
            self.data = np.ascontiguousarray(arr, dtype=_DTYPES[self.depth]).tobytes()
