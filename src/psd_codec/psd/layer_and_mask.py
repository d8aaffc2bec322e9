"""
Layer and mask data structure.

The section is laid out as::

    length (4 bytes, 8 in PSB)
        layer info: length, signed layer count, layer records,
                    channel image data of every layer, even padding
        global layer mask info: opaque length block
        tagged blocks: 4-byte aligned additional information

Channel payloads come after all the layer records, in the same order, so
:py:class:`LayerInfo` keeps the per-channel lengths of the records in sync
with the :py:class:`ChannelImageData` on write.
"""

import io
import logging
from typing import Any, BinaryIO, Optional, TypeVar

from attrs import define, field

import psd_codec.compression as compression
from psd_codec.constants import ChannelID, Compression
from psd_codec.psd.base import BaseElement, ListElement, ValueElement
from psd_codec.psd.bin_utils import (
    read_exact,
    read_fmt,
    read_length_block,
    read_pascal_string,
    write_bytes,
    write_fmt,
    write_length_block,
    write_padding,
    write_pascal_string,
)
from psd_codec.psd.tagged_blocks import TaggedBlocks
from psd_codec.validators import in_, length_, range_

logger = logging.getLogger(__name__)

T_LayerAndMaskInformation = TypeVar(
    "T_LayerAndMaskInformation", bound="LayerAndMaskInformation"
)
T_LayerInfo = TypeVar("T_LayerInfo", bound="LayerInfo")
T_LayerRecord = TypeVar("T_LayerRecord", bound="LayerRecord")
T_MaskData = TypeVar("T_MaskData", bound="MaskData")
T_ChannelData = TypeVar("T_ChannelData", bound="ChannelData")


def _length_format(version: int) -> str:
    return ("I", "Q")[version - 1]


def _blend_key(value: Any) -> bytes:
    return getattr(value, "value", value)


@define(repr=False)
class LayerAndMaskInformation(BaseElement):
    """
    Layer and mask information section.

    .. py:attribute:: layer_info

        See :py:class:`.LayerInfo`.

    .. py:attribute:: global_layer_mask_info

        See :py:class:`.GlobalLayerMaskInfo`.

    .. py:attribute:: tagged_blocks

        See :py:class:`~psd_codec.psd.tagged_blocks.TaggedBlocks`.
    """

    layer_info: Optional["LayerInfo"] = None
    global_layer_mask_info: Optional["GlobalLayerMaskInfo"] = None
    tagged_blocks: Optional[TaggedBlocks] = None

    @classmethod
    def read(
        cls: type[T_LayerAndMaskInformation],
        fp: BinaryIO,
        encoding: str = "macroman",
        version: int = 1,
        **kwargs: Any,
    ) -> T_LayerAndMaskInformation:
        start_pos = fp.tell()
        length = read_fmt(_length_format(version), fp)[0]
        end_pos = fp.tell() + length
        logger.debug(
            "reading layer and mask info, len=%d, offset=%d" % (length, start_pos)
        )
        if length == 0:
            self = cls()
        else:
            self = cls._read_body(fp, end_pos, encoding, version)
        if fp.tell() > end_pos:
            logger.warning(
                "LayerAndMaskInformation is broken: current fp=%d, expected=%d"
                % (fp.tell(), end_pos)
            )
        fp.seek(end_pos, 0)
        return self

    @classmethod
    def _read_body(
        cls: type[T_LayerAndMaskInformation],
        fp: BinaryIO,
        end_pos: int,
        encoding: str,
        version: int,
    ) -> T_LayerAndMaskInformation:
        layer_info = LayerInfo.read(fp, encoding, version)

        global_layer_mask_info = None
        if fp.tell() + 4 <= end_pos:
            global_layer_mask_info = GlobalLayerMaskInfo.read(fp)

        tagged_blocks = None
        if fp.tell() + 12 <= end_pos:
            tagged_blocks = TaggedBlocks.read(
                fp, version=version, padding=4, end_pos=end_pos
            )

        return cls(layer_info, global_layer_mask_info, tagged_blocks)

    def write(
        self,
        fp: BinaryIO,
        encoding: str = "macroman",
        version: int = 1,
        **kwargs: Any,
    ) -> int:
        def writer(f: BinaryIO) -> int:
            written = self._write_body(f, encoding, version)
            logger.debug("writing layer and mask info, len=%d" % (written))
            return written

        return write_length_block(fp, writer, fmt=_length_format(version))

    def _write_body(self, fp: BinaryIO, encoding: str, version: int) -> int:
        written = 0
        layer_info = self.layer_info or LayerInfo()
        written += layer_info.write(fp, encoding, version)
        global_layer_mask_info = self.global_layer_mask_info or GlobalLayerMaskInfo()
        written += global_layer_mask_info.write(fp)
        if self.tagged_blocks:
            written += self.tagged_blocks.write(fp, version=version, padding=4)
        return written


@define(repr=False)
class LayerInfo(BaseElement):
    """
    High-level organization of the layer information.

    .. py:attribute:: layer_count

        Layer count. If it is a negative number, its absolute value is the
        number of layers and the first alpha channel contains the transparency
        data for the merged result.

    .. py:attribute:: layer_records

        Information about each layer. See :py:class:`.LayerRecords`.

    .. py:attribute:: channel_image_data

        Channel image data. See :py:class:`.ChannelImageData`.
    """

    layer_count: int = 0
    layer_records: "LayerRecords" = field(factory=lambda: LayerRecords())
    channel_image_data: "ChannelImageData" = field(factory=lambda: ChannelImageData())

    @classmethod
    def read(
        cls: type[T_LayerInfo],
        fp: BinaryIO,
        encoding: str = "macroman",
        version: int = 1,
        **kwargs: Any,
    ) -> T_LayerInfo:
        length = read_fmt(_length_format(version), fp)[0]
        logger.debug("reading layer info, len=%d" % length)
        end_pos = fp.tell() + length
        if length == 0:
            self = cls()
        else:
            self = cls._read_body(fp, encoding, version)
        if fp.tell() > end_pos:
            logger.warning(
                "LayerInfo is broken: current fp=%d, expected=%d"
                % (fp.tell(), end_pos)
            )
        fp.seek(end_pos, 0)
        return self

    @classmethod
    def _read_body(
        cls: type[T_LayerInfo], fp: BinaryIO, encoding: str, version: int
    ) -> T_LayerInfo:
        start_pos = fp.tell()
        layer_count = read_fmt("h", fp)[0]
        layer_records = LayerRecords.read(fp, layer_count, encoding, version)
        logger.debug("  read layer records, len=%d" % (fp.tell() - start_pos))
        channel_image_data = ChannelImageData.read(fp, layer_records)
        return cls(
            layer_count=layer_count,
            layer_records=layer_records,
            channel_image_data=channel_image_data,
        )

    def write(
        self,
        fp: BinaryIO,
        encoding: str = "macroman",
        version: int = 1,
        padding: int = 2,
        **kwargs: Any,
    ) -> int:
        def writer(f: BinaryIO) -> int:
            written = self._write_body(f, encoding, version, padding)
            logger.debug("writing layer info, len=%d" % (written))
            return written

        fmt = _length_format(version)
        if self.layer_count == 0 and not self.layer_records:
            return write_fmt(fp, fmt, 0)
        return write_length_block(fp, writer, fmt=fmt)

    def _write_body(
        self, fp: BinaryIO, encoding: str, version: int, padding: int
    ) -> int:
        start_pos = fp.tell()
        written = write_fmt(fp, "h", self.layer_count)
        if self.layer_records:
            self._update_channel_length()
            written += self.layer_records.write(fp, encoding, version)
        logger.debug("  wrote layer records, len=%d" % (fp.tell() - start_pos))
        if self.channel_image_data:
            written += self.channel_image_data.write(fp)
        written += write_padding(fp, written, padding)
        return written

    def _update_channel_length(self) -> None:
        if not self.layer_records or not self.channel_image_data:
            return

        for layer, lengths in zip(self.layer_records, self.channel_image_data._lengths):
            for channel_info, length in zip(layer.channel_info, lengths):
                channel_info.length = length


@define(repr=False)
class ChannelInfo(BaseElement):
    """
    Channel information.

    .. py:attribute:: id

        Signed channel ID: 0 = red, 1 = green, etc.; -1 = transparency mask;
        -2 = user supplied layer mask, -3 real user supplied layer mask (when
        both a user mask and a vector mask are present). See
        :py:class:`~psd_codec.constants.ChannelID`.

    .. py:attribute:: length

        Length of the corresponding channel data, including the 2-byte
        compression tag.
    """

    id: int = field(default=ChannelID.CHANNEL_0, validator=range_(-32768, 32767))
    length: int = 0

    @classmethod
    def read(cls, fp: BinaryIO, version: int = 1, **kwargs: Any) -> "ChannelInfo":
        values = read_fmt(("hI", "hQ")[version - 1], fp)
        return cls(id=values[0], length=values[1])

    def write(self, fp: BinaryIO, version: int = 1, **kwargs: Any) -> int:
        return write_fmt(fp, ("hI", "hQ")[version - 1], self.id, self.length)


@define(repr=False)
class LayerFlags(BaseElement):
    """
    Layer flags.

    Bit 1 is stored inverted: a set bit means the layer is hidden. The upper
    bits are undocumented and kept as read.

    .. py:attribute:: transparency_protected
    .. py:attribute:: visible
    .. py:attribute:: pixel_data_irrelevant
    """

    transparency_protected: bool = False
    visible: bool = True
    obsolete: bool = field(default=False, repr=False)
    photoshop_v5_later: bool = field(default=True, repr=False)
    pixel_data_irrelevant: bool = False
    undocumented_1: bool = field(default=False, repr=False)
    undocumented_2: bool = field(default=False, repr=False)
    undocumented_3: bool = field(default=False, repr=False)

    @classmethod
    def read(cls, fp: BinaryIO, **kwargs: Any) -> "LayerFlags":
        flags = read_fmt("B", fp)[0]
        return cls(
            bool(flags & 1),
            not bool(flags & 2),
            bool(flags & 4),
            bool(flags & 8),
            bool(flags & 16),
            bool(flags & 32),
            bool(flags & 64),
            bool(flags & 128),
        )

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        flags = (
            (self.transparency_protected * 1)
            | ((not self.visible) * 2)
            | (self.obsolete * 4)
            | (self.photoshop_v5_later * 8)
            | (self.pixel_data_irrelevant * 16)
            | (self.undocumented_1 * 32)
            | (self.undocumented_2 * 64)
            | (self.undocumented_3 * 128)
        )
        return write_fmt(fp, "B", flags)


@define(repr=False, eq=False)
class LayerBlendingRanges(ValueElement):
    """
    Layer blending ranges, kept as the opaque body of the length block.
    """

    value: bytes = b""

    @classmethod
    def read(cls, fp: BinaryIO, **kwargs: Any) -> "LayerBlendingRanges":
        return cls(read_length_block(fp))

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        return write_length_block(fp, lambda f: write_bytes(f, self.value))


class LayerRecords(ListElement):
    """
    List of layer records. See :py:class:`.LayerRecord`.
    """

    @classmethod
    def read(  # type: ignore[override]
        cls,
        fp: BinaryIO,
        layer_count: int,
        encoding: str = "macroman",
        version: int = 1,
        **kwargs: Any,
    ) -> "LayerRecords":
        items = []
        for _ in range(abs(layer_count)):
            items.append(LayerRecord.read(fp, encoding, version))
        return cls(items)


@define(repr=False)
class LayerRecord(BaseElement):
    """
    Layer record.

    .. py:attribute:: top
    .. py:attribute:: left
    .. py:attribute:: bottom
    .. py:attribute:: right
    .. py:attribute:: channel_info

        List of :py:class:`.ChannelInfo`.

    .. py:attribute:: signature

        Blend mode signature ``b'8BIM'``.

    .. py:attribute:: blend_mode

        4-byte blend mode key. See :py:class:`~psd_codec.constants.BlendMode`
        for the known keys; others are kept as they are.

    .. py:attribute:: opacity

        Opacity, 0 = transparent, 255 = opaque.

    .. py:attribute:: clipping

        Clipping, 0 = base, 1 = non-base. See
        :py:class:`~psd_codec.constants.Clipping`.

    .. py:attribute:: flags

        See :py:class:`.LayerFlags`.

    .. py:attribute:: mask_data

        :py:class:`.MaskData` or None.

    .. py:attribute:: blending_ranges

        See :py:class:`.LayerBlendingRanges`.

    .. py:attribute:: name

        Pascal layer name.

    .. py:attribute:: tagged_blocks

        See :py:class:`~psd_codec.psd.tagged_blocks.TaggedBlocks`.
    """

    top: int = 0
    left: int = 0
    bottom: int = 0
    right: int = 0
    channel_info: list[ChannelInfo] = field(factory=list)
    signature: bytes = field(default=b"8BIM", repr=False, validator=in_((b"8BIM",)))
    blend_mode: bytes = field(
        default=b"norm", converter=_blend_key, validator=length_(4)
    )
    opacity: int = field(default=255, validator=range_(0, 255))
    clipping: int = field(default=0, validator=range_(0, 255))
    flags: LayerFlags = field(factory=LayerFlags)
    mask_data: Optional["MaskData"] = None
    blending_ranges: LayerBlendingRanges = field(factory=LayerBlendingRanges)
    name: str = ""
    tagged_blocks: TaggedBlocks = field(factory=TaggedBlocks)

    @classmethod
    def read(
        cls: type[T_LayerRecord],
        fp: BinaryIO,
        encoding: str = "macroman",
        version: int = 1,
        **kwargs: Any,
    ) -> T_LayerRecord:
        start_pos = fp.tell()
        top, left, bottom, right, num_channels = read_fmt("4iH", fp)
        channel_info = [ChannelInfo.read(fp, version) for i in range(num_channels)]
        signature, blend_mode, opacity, clipping = read_fmt("4s4sBB", fp)
        flags = LayerFlags.read(fp)

        data = read_length_block(fp, fmt="xI")
        logger.debug("  read layer record, len=%d" % (fp.tell() - start_pos))
        with io.BytesIO(data) as f:
            mask_data, blending_ranges, name, tagged_blocks = cls._read_extra(
                f, encoding, version
            )
            if len(data) - f.tell() > 1:
                logger.warning(
                    "Skipping %d bytes at the end of layer record %r"
                    % (len(data) - f.tell(), name)
                )
        return cls(
            top=top,
            left=left,
            bottom=bottom,
            right=right,
            channel_info=channel_info,
            signature=signature,
            blend_mode=blend_mode,
            opacity=opacity,
            clipping=clipping,
            flags=flags,
            mask_data=mask_data,
            blending_ranges=blending_ranges,
            name=name,
            tagged_blocks=tagged_blocks,
        )

    @classmethod
    def _read_extra(
        cls, fp: BinaryIO, encoding: str, version: int
    ) -> tuple[Optional["MaskData"], LayerBlendingRanges, str, TaggedBlocks]:
        mask_data = MaskData.read(fp)
        blending_ranges = LayerBlendingRanges.read(fp)
        name = read_pascal_string(fp, encoding, padding=4)
        tagged_blocks = TaggedBlocks.read(fp, version=version, padding=1)
        return mask_data, blending_ranges, name, tagged_blocks

    def write(
        self, fp: BinaryIO, encoding: str = "macroman", version: int = 1, **kwargs: Any
    ) -> int:
        start_pos = fp.tell()
        written = write_fmt(
            fp,
            "4iH",
            self.top,
            self.left,
            self.bottom,
            self.right,
            len(self.channel_info),
        )
        written += sum(c.write(fp, version) for c in self.channel_info)
        written += write_fmt(
            fp,
            "4s4sBB",
            self.signature,
            self.blend_mode,
            self.opacity,
            self.clipping,
        )
        written += self.flags.write(fp)

        def writer(f: BinaryIO) -> int:
            written = self._write_extra(f, encoding, version)
            logger.debug("  wrote layer record, len=%d" % (fp.tell() - start_pos))
            return written

        written += write_length_block(fp, writer, fmt="xI")
        return written

    def _write_extra(self, fp: BinaryIO, encoding: str, version: int) -> int:
        written = 0
        if self.mask_data is not None:
            written += self.mask_data.write(fp)
        else:
            written += write_fmt(fp, "I", 0)

        written += self.blending_ranges.write(fp)
        written += write_pascal_string(fp, self.name, encoding, padding=4)
        written += self.tagged_blocks.write(fp, version, padding=1)
        written += write_padding(fp, written, 2)
        return written

    @property
    def width(self) -> int:
        """Width of the layer."""
        return max(self.right - self.left, 0)

    @property
    def height(self) -> int:
        """Height of the layer."""
        return max(self.bottom - self.top, 0)

    @property
    def channel_sizes(self) -> list[tuple[int, int]]:
        """List of channel sizes: [(width, height)]."""
        sizes = []
        for channel in self.channel_info:
            if channel.id == ChannelID.USER_LAYER_MASK and self.mask_data:
                sizes.append((self.mask_data.width, self.mask_data.height))
            elif channel.id == ChannelID.REAL_USER_LAYER_MASK and self.mask_data:
                sizes.append((self.mask_data.real_width, self.mask_data.real_height))
            else:
                sizes.append((self.width, self.height))
        return sizes


@define(repr=False)
class MaskFlags(BaseElement):
    """
    Mask flags.

    .. py:attribute:: pos_relative_to_layer

        Position relative to layer.

    .. py:attribute:: mask_disabled

        Layer mask disabled.

    .. py:attribute:: invert_mask

        Invert layer mask when blending.

    .. py:attribute:: user_mask_from_render

        The user mask actually came from rendering other data.

    .. py:attribute:: parameters_applied

        The user and/or vector masks have parameters applied to them.
    """

    pos_relative_to_layer: bool = False
    mask_disabled: bool = False
    invert_mask: bool = False
    user_mask_from_render: bool = False
    parameters_applied: bool = False
    undocumented_1: bool = field(default=False, repr=False)
    undocumented_2: bool = field(default=False, repr=False)
    undocumented_3: bool = field(default=False, repr=False)

    @classmethod
    def read(cls, fp: BinaryIO, **kwargs: Any) -> "MaskFlags":
        flags = read_fmt("B", fp)[0]
        return cls(*(bool(flags & (1 << bit)) for bit in range(8)))

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        flags = (
            (self.pos_relative_to_layer * 1)
            | (self.mask_disabled * 2)
            | (self.invert_mask * 4)
            | (self.user_mask_from_render * 8)
            | (self.parameters_applied * 16)
            | (self.undocumented_1 * 32)
            | (self.undocumented_2 * 64)
            | (self.undocumented_3 * 128)
        )
        return write_fmt(fp, "B", flags)


@define(repr=False)
class MaskData(BaseElement):
    """
    Mask data.

    Real user mask is a final composite mask of vector and pixel masks. It
    is only present when the block is at least 36 bytes long. Anything after
    the known fields, such as mask parameters, stays in ``extra``.

    .. py:attribute:: top
    .. py:attribute:: left
    .. py:attribute:: bottom
    .. py:attribute:: right
    .. py:attribute:: background_color

        Default color. 0 or 255.

    .. py:attribute:: flags

        See :py:class:`.MaskFlags`.

    .. py:attribute:: real_flags
    .. py:attribute:: real_background_color
    .. py:attribute:: real_top
    .. py:attribute:: real_left
    .. py:attribute:: real_bottom
    .. py:attribute:: real_right
    .. py:attribute:: extra

        Trailing bytes of the block.
    """

    top: int = 0
    left: int = 0
    bottom: int = 0
    right: int = 0
    background_color: int = 0
    flags: MaskFlags = field(factory=MaskFlags)
    real_flags: Optional[MaskFlags] = None
    real_background_color: Optional[int] = None
    real_top: Optional[int] = None
    real_left: Optional[int] = None
    real_bottom: Optional[int] = None
    real_right: Optional[int] = None
    extra: bytes = field(default=b"", repr=False)

    @classmethod
    def read(  # type: ignore[override]
        cls: type[T_MaskData], fp: BinaryIO, **kwargs: Any
    ) -> Optional[T_MaskData]:
        data = read_length_block(fp)
        if len(data) == 0:
            return None

        with io.BytesIO(data) as f:
            return cls._read_body(f, len(data))

    @classmethod
    def _read_body(cls: type[T_MaskData], fp: BinaryIO, length: int) -> T_MaskData:
        top, left, bottom, right, background_color = read_fmt("4iB", fp)
        flags = MaskFlags.read(fp)

        real_flags, real_background_color = None, None
        real_top, real_left, real_bottom, real_right = None, None, None, None
        if length >= 36:
            real_flags = MaskFlags.read(fp)
            real_background_color = read_fmt("B", fp)[0]
            real_top, real_left, real_bottom, real_right = read_fmt("4i", fp)

        # Zero padding up to 4 bytes is not part of the record.
        padding = -fp.tell() % 4
        extra = fp.read()
        if extra == b"\x00" * padding:
            extra = b""

        return cls(
            top=top,
            left=left,
            bottom=bottom,
            right=right,
            background_color=background_color,
            flags=flags,
            real_flags=real_flags,
            real_background_color=real_background_color,
            real_top=real_top,
            real_left=real_left,
            real_bottom=real_bottom,
            real_right=real_right,
            extra=extra,
        )

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        return write_length_block(fp, lambda f: self._write_body(f))

    def _write_body(self, fp: BinaryIO) -> int:
        written = write_fmt(
            fp,
            "4iB",
            self.top,
            self.left,
            self.bottom,
            self.right,
            self.background_color,
        )
        written += self.flags.write(fp)

        if self.real_flags is not None:
            written += self.real_flags.write(fp)
            written += write_fmt(
                fp,
                "B4i",
                self.real_background_color or 0,
                self.real_top or 0,
                self.real_left or 0,
                self.real_bottom or 0,
                self.real_right or 0,
            )

        written += write_bytes(fp, self.extra)
        written += write_padding(fp, written, 4)
        return written

    @property
    def width(self) -> int:
        """Width of the mask."""
        return max(self.right - self.left, 0)

    @property
    def height(self) -> int:
        """Height of the mask."""
        return max(self.bottom - self.top, 0)

    @property
    def real_width(self) -> int:
        """Width of real user mask."""
        return max((self.real_right or 0) - (self.real_left or 0), 0)

    @property
    def real_height(self) -> int:
        """Height of real user mask."""
        return max((self.real_bottom or 0) - (self.real_top or 0), 0)


class ChannelImageData(ListElement):
    """
    List of channel data list.

    This size of this list corresponds to the size of
    :py:class:`LayerRecords`. Each item corresponds to the channels of each
    layer.

    See :py:class:`.ChannelDataList`.
    """

    @classmethod
    def read(
        cls,
        fp: BinaryIO,
        layer_records: Optional[LayerRecords] = None,
        **kwargs: Any,
    ) -> "ChannelImageData":
        start_pos = fp.tell()
        items = []
        if layer_records:
            for layer in layer_records:
                items.append(ChannelDataList.read(fp, layer.channel_info))
        logger.debug("  read channel image data, len=%d" % (fp.tell() - start_pos))
        return cls(items)

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        start_pos = fp.tell()
        written = sum(item.write(fp) for item in self)
        logger.debug("  wrote channel image data, len=%d" % (fp.tell() - start_pos))
        return written

    @property
    def _lengths(self) -> list[list[int]]:
        """List of layer channel lengths."""
        return [item._lengths for item in self]


class ChannelDataList(ListElement):
    """
    List of channel image data, corresponding to each color or alpha.

    See :py:class:`.ChannelData`.
    """

    @classmethod
    def read(  # type: ignore[override]
        cls,
        fp: BinaryIO,
        channel_info: list[ChannelInfo],
        **kwargs: Any,
    ) -> "ChannelDataList":
        items = []
        for c in channel_info:
            items.append(ChannelData.read(fp, c.length - 2, **kwargs))
        return cls(items)

    @property
    def _lengths(self) -> list[int]:
        """List of channel lengths."""
        return [item._length for item in self]


@define(repr=False)
class ChannelData(BaseElement):
    """
    Channel data.

    .. py:attribute:: compression

        Compression type. See :py:class:`~psd_codec.constants.Compression`.

    .. py:attribute:: data

        Compressed data, including the RLE row-count table.
    """

    compression: Compression = field(
        default=Compression.RAW, converter=Compression, validator=in_(Compression)
    )
    data: bytes = b""

    @classmethod
    def read(
        cls: type[T_ChannelData], fp: BinaryIO, length: int = 0, **kwargs: Any
    ) -> T_ChannelData:
        if length < 0:
            logger.debug("empty channel data without compression tag")
            return cls()
        kind = compression.read_compression(fp)
        data = read_exact(fp, length)
        return cls(compression=kind, data=data)

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        written = write_fmt(fp, "H", self.compression.value)
        written += write_bytes(fp, self.data)
        return written

    def get_data(self, width: int, height: int, depth: int, version: int = 1) -> bytes:
        """Get decompressed channel data.

        :param width: width.
        :param height: height.
        :param depth: bit depth of the pixel.
        :param version: psd file version.
        :rtype: bytes
        """
        return compression.decompress(
            self.data, self.compression, width, height, depth, version
        )

    def set_data(
        self, data: bytes, width: int, height: int, depth: int, version: int = 1
    ) -> int:
        """Set raw channel data and compress to store.

        :param data: raw data bytes to write.
        :param width: width.
        :param height: height.
        :param depth: bit depth of the pixel.
        :param version: psd file version.
        """
        self.data = compression.compress(
            data, self.compression, width, height, depth, version
        )
        return len(self.data)

    @property
    def _length(self) -> int:
        """Length of channel data block."""
        return 2 + len(self.data)


@define(repr=False, eq=False)
class GlobalLayerMaskInfo(ValueElement):
    """
    Global layer mask information, kept as the opaque body of the length
    block.
    """

    value: bytes = b""

    @classmethod
    def read(cls, fp: BinaryIO, **kwargs: Any) -> "GlobalLayerMaskInfo":
        data = read_length_block(fp)
        logger.debug("reading global layer mask info, len=%d" % (len(data)))
        return cls(data)

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        logger.debug("writing global layer mask info, len=%d" % (len(self.value)))
        return write_length_block(fp, lambda f: write_bytes(f, self.value))
