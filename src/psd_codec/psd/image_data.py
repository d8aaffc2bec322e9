"""
Image data section structure.

:py:class:`ImageData` corresponds to the last section of the PSD/PSB file
where a composited image is stored. When the file does not contain layers,
this is the only place pixels are saved.

All channels share one compression method. PackBits data starts with the
row-count table of every channel, followed by the rows of every channel, so
that the section reads like a single plane of ``height * channels`` rows.
"""

import io
import logging
from typing import Any, BinaryIO, Sequence, TypeVar, Union

from attrs import define, field

import psd_codec.compression as compression
from psd_codec.constants import Compression
from psd_codec.errors import FormatError
from psd_codec.psd.base import BaseElement
from psd_codec.psd.bin_utils import (
    pack,
    read_be_array,
    read_exact,
    read_fmt,
    write_bytes,
    write_fmt,
)
from psd_codec.psd.header import FileHeader
from psd_codec.validators import in_

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="ImageData")


@define(repr=False)
class ImageData(BaseElement):
    """
    Merged channel image data.

    .. py:attribute:: compression

        See :py:class:`~psd_codec.constants.Compression`.

    .. py:attribute:: data

        `bytes` as compressed in the `compression` flag.
    """

    compression: Compression = field(
        default=Compression.RAW, converter=Compression, validator=in_(Compression)
    )
    data: bytes = b""

    @classmethod
    def read(cls: type[T], fp: BinaryIO, **kwargs: Any) -> T:
        start_pos = fp.tell()
        kind = compression.read_compression(fp)
        data = fp.read()
        logger.debug("  read image data, len=%d" % (fp.tell() - start_pos))
        return cls(kind, data)

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        start_pos = fp.tell()
        written = write_fmt(fp, "H", self.compression.value)
        written += write_bytes(fp, self.data)
        logger.debug("  wrote image data, len=%d" % (fp.tell() - start_pos))
        return written

    def get_data(
        self, header: FileHeader, split: bool = True
    ) -> Union[list[bytes], bytes]:
        """
        Get decompressed data.

        :param header: See :py:class:`~psd_codec.psd.header.FileHeader`.
        :return: `list` of bytes corresponding each channel.
        """
        data = compression.decompress(
            self.data,
            self.compression,
            header.width,
            header.height * header.channels,
            header.depth,
            header.version,
        )
        if split:
            plane_size = len(data) // header.channels
            with io.BytesIO(data) as f:
                return [f.read(plane_size) for _ in range(header.channels)]
        return data

    def set_data(self, data: Sequence[bytes], header: FileHeader) -> int:
        """
        Set raw data and compress.

        :param data: list of raw data bytes corresponding channels.
        :param header: See :py:class:`~psd_codec.psd.header.FileHeader`.
        :return: length of compressed data.
        """
        self.data = compression.compress(
            b"".join(data),
            self.compression,
            header.width,
            header.height * header.channels,
            header.depth,
            header.version,
        )
        return len(self.data)

    def split_channels(self, header: FileHeader) -> list[bytes]:
        """
        Splits the section into per-channel payloads laid out like layer
        channel data: a raw plane, or a row-count table followed by rows.

        ZIP data is a single stream over all channels and cannot be split
        without decompressing it; use :py:meth:`get_data` instead.
        """
        channels, height = header.channels, header.height
        if self.compression == Compression.RAW:
            plane_size = compression.raw_length(header.width, height, header.depth)
            if len(self.data) < plane_size * channels:
                raise FormatError(
                    "Image data is too short: len=%d, expected=%d"
                    % (len(self.data), plane_size * channels)
                )
            return [
                self.data[i * plane_size : (i + 1) * plane_size]
                for i in range(channels)
            ]
        elif self.compression == Compression.RLE:
            fmt = compression.row_count_format(header.version)
            with io.BytesIO(self.data) as f:
                counts = read_be_array(fmt, height * channels, f)
                payloads = []
                for i in range(channels):
                    rows = counts[i * height : (i + 1) * height]
                    table = pack("%d%s" % (height, fmt), *rows)
                    payloads.append(table + read_exact(f, sum(rows)))
            return payloads
        raise ValueError("Cannot split %s image data" % self.compression.name)

    def join_channels(self, payloads: Sequence[bytes], header: FileHeader) -> int:
        """
        Inverse of :py:meth:`split_channels`.

        :return: length of compressed data.
        """
        if self.compression == Compression.RAW:
            self.data = b"".join(payloads)
        elif self.compression == Compression.RLE:
            fmt = compression.row_count_format(header.version)
            table_size = header.height * len(pack(fmt, 0))
            if any(len(payload) < table_size for payload in payloads):
                raise FormatError("RLE payload is shorter than its row table")
            tables = [payload[:table_size] for payload in payloads]
            self.data = b"".join(tables) + b"".join(
                payload[table_size:] for payload in payloads
            )
        else:
            raise ValueError("Cannot join %s image data" % self.compression.name)
        return len(self.data)
