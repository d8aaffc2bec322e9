"""
Layer of the object model.

A :py:class:`Layer` pairs a low-level
:py:class:`~psd_codec.psd.layer_and_mask.LayerRecord` with decoded
:py:class:`~psd_codec.api.channel.Channel` objects. Fields that the object
model does not interpret, such as the blending ranges and unknown tagged
blocks, are carried along unchanged.
"""

import logging
from typing import Iterator, Optional, Union

from psd_codec.api.channel import Channel, Rect
from psd_codec.api.mask import Mask
from psd_codec.compression import raw_length
from psd_codec.constants import (
    BlendMode,
    ChannelID,
    Clipping,
    ColorMode,
    Compression,
    SectionDivider,
    Tag,
)
from psd_codec.errors import FormatError
from psd_codec.psd.layer_and_mask import (
    ChannelData,
    ChannelDataList,
    ChannelInfo,
    LayerBlendingRanges,
    LayerFlags,
    LayerRecord,
)
from psd_codec.psd.tagged_blocks import SectionDividerSetting, TaggedBlocks

logger = logging.getLogger(__name__)

_SECTION_KEYS = (Tag.SECTION_DIVIDER_SETTING, Tag.NESTED_SECTION_DIVIDER_SETTING)


class Layer:
    """
    Single layer.

    Example::

        layer = Layer("Background", Rect(0, 0, 32, 32))
        layer.create_missing_channels(ColorMode.RGB)
        layer.channel(0).data = red_plane

    :param name: layer name.
    :param rect: bounding rectangle in document coordinates.
    :param channels: list of :py:class:`~psd_codec.api.channel.Channel`.
    :param blend_mode: 4-byte blend mode key.
    :param opacity: 0 to 255.
    :param clipping: see :py:class:`~psd_codec.constants.Clipping`.
    :param mask: :py:class:`~psd_codec.api.mask.Mask` or None.
    """

    def __init__(
        self,
        name: str = "",
        rect: Rect = Rect(),
        channels: Optional[list[Channel]] = None,
        blend_mode: Union[BlendMode, bytes] = BlendMode.NORMAL,
        opacity: int = 255,
        clipping: Union[Clipping, int] = Clipping.BASE,
        visible: bool = True,
        transparency_protected: bool = False,
        mask: Optional[Mask] = None,
        tagged_blocks: Optional[TaggedBlocks] = None,
    ) -> None:
        self.name = name
        self._rect = rect
        self.channels: list[Channel] = list(channels or [])
        self.blend_mode = getattr(blend_mode, "value", blend_mode)
        self.opacity = opacity
        self.clipping = int(clipping)
        self.flags = LayerFlags(
            transparency_protected=transparency_protected, visible=visible
        )
        self.mask = mask
        self.blending_ranges = LayerBlendingRanges()
        if tagged_blocks is None:
            tagged_blocks = TaggedBlocks()
        self.tagged_blocks = tagged_blocks
        self._bind_mask()

    def __repr__(self) -> str:
        return "%s(%r, size=%dx%d%s)" % (
            self.__class__.__name__,
            self.name,
            self.width,
            self.height,
            "" if self.visible else ", hidden",
        )

    @property
    def rect(self) -> Rect:
        return self._rect

    @rect.setter
    def rect(self, value: Rect) -> None:
        self._rect = value
        for channel in self.channels:
            if channel.id >= ChannelID.TRANSPARENCY_MASK:
                channel.rect = value

    @property
    def width(self) -> int:
        return self._rect.width

    @property
    def height(self) -> int:
        return self._rect.height

    @property
    def visible(self) -> bool:
        return self.flags.visible

    @visible.setter
    def visible(self, value: bool) -> None:
        self.flags.visible = bool(value)

    @property
    def transparency_protected(self) -> bool:
        return self.flags.transparency_protected

    @transparency_protected.setter
    def transparency_protected(self, value: bool) -> None:
        self.flags.transparency_protected = bool(value)

    @property
    def section(self) -> Optional[SectionDividerSetting]:
        """Group marker of this layer, or None for a regular layer."""
        for key in _SECTION_KEYS:
            data = self.tagged_blocks.get_data(key)
            if isinstance(data, SectionDividerSetting):
                return data
        return None

    def set_section(self, kind: Optional[SectionDivider]) -> None:
        """
        Sets the group marker kind, or removes markers when ``kind`` is None.
        An existing record keeps its key and blend mode.
        """
        blocks = [b for b in self.tagged_blocks if b.key in _SECTION_KEYS]
        if kind is None:
            for block in blocks:
                self.tagged_blocks.remove(block)
            return
        for block in blocks:
            if isinstance(block.data, SectionDividerSetting):
                block.data.kind = SectionDivider(kind)
                return
        self.tagged_blocks.set_data(Tag.SECTION_DIVIDER_SETTING, kind)

    def channel(self, id: int) -> Optional[Channel]:
        """Returns the channel with the given id, or None."""
        for channel in self.channels:
            if channel.id == id:
                return channel
        return None

    def __iter__(self) -> Iterator[Channel]:
        return iter(self.channels)

    def add_channel(self, channel: Channel) -> None:
        if self.channel(channel.id) is not None:
            raise ValueError("Channel %d already exists" % channel.id)
        self.channels.append(channel)
        self._bind_mask()

    def remove_channel(self, id: int) -> Channel:
        channel = self.channel(id)
        if channel is None:
            raise KeyError(id)
        self.channels.remove(channel)
        self._bind_mask()
        return channel

    def create_missing_channels(
        self,
        color_mode: ColorMode,
        depth: int = 8,
        compression: Compression = Compression.RLE,
    ) -> list[Channel]:
        """
        Adds the color channels of ``color_mode`` that the layer lacks,
        filled with 255.

        :return: list of created channels.
        """
        created = []
        length = raw_length(self.width, self.height, depth)
        for index in range(ColorMode.channels(color_mode)):
            if self.channel(index) is None:
                channel = Channel(
                    index,
                    self._rect,
                    depth,
                    compression,
                    data=b"\xff" * length,
                    color_mode=color_mode,
                )
                self.channels.append(channel)
                created.append(channel)
        if created:
            logger.debug(
                "created %d missing channels of layer %r" % (len(created), self.name)
            )
        return created

    def _bind_mask(self) -> None:
        if self.mask is not None:
            self.mask.channel = self.channel(ChannelID.USER_LAYER_MASK)

    def _channel_rect(self, id: int) -> Rect:
        if id == ChannelID.USER_LAYER_MASK and self.mask is not None:
            return self.mask.rect
        if id == ChannelID.REAL_USER_LAYER_MASK and self.mask is not None:
            return self.mask.real_rect or Rect()
        return self._rect

    @classmethod
    def from_record(
        cls,
        record: LayerRecord,
        channel_data: ChannelDataList,
        depth: int = 8,
        version: int = 1,
        color_mode: Optional[ColorMode] = None,
    ) -> "Layer":
        """
        Builds a layer from its record and compressed channel payloads. A
        unicode name record takes precedence over the Pascal name.
        """
        self = cls(
            name=record.name,
            rect=Rect(record.top, record.left, record.bottom, record.right),
            blend_mode=record.blend_mode,
            opacity=record.opacity,
            clipping=record.clipping,
            mask=Mask.from_record(record.mask_data) if record.mask_data else None,
            tagged_blocks=record.tagged_blocks,
        )
        self.flags = record.flags
        self.blending_ranges = record.blending_ranges

        unicode_name = record.tagged_blocks.get_data(Tag.UNICODE_LAYER_NAME)
        if isinstance(unicode_name, str):
            self.name = unicode_name

        for info, data in zip(record.channel_info, channel_data):
            self.channels.append(
                Channel(
                    info.id,
                    self._channel_rect(info.id),
                    depth,
                    data.compression,
                    compressed=data.data,
                    version=version,
                    color_mode=color_mode,
                )
            )
        self._bind_mask()
        return self

    def to_record(self) -> tuple[LayerRecord, ChannelDataList]:
        """
        Builds the layer record and channel payloads. Channels are encoded
        with their own settings when they are not already.

        :raise FormatError: when the layer carries more than one unicode
            name record.
        """
        names = self.tagged_blocks.get_all(Tag.UNICODE_LAYER_NAME)
        if len(names) > 1:
            raise FormatError(
                "Layer %r has %d unicode name records" % (self.name, len(names))
            )
        self.tagged_blocks.set_data(Tag.UNICODE_LAYER_NAME, self.name)

        for channel in self.channels:
            expected = self._channel_rect(channel.id)
            if channel.rect != expected:
                raise ValueError(
                    "Channel %d of layer %r has rect %r, expected %r"
                    % (channel.id, self.name, channel.rect, expected)
                )

        channel_data = ChannelDataList(
            [ChannelData(c.compression, c.compressed) for c in self.channels]
        )
        record = LayerRecord(
            top=self._rect.top,
            left=self._rect.left,
            bottom=self._rect.bottom,
            right=self._rect.right,
            channel_info=[
                ChannelInfo(channel.id, data._length)
                for channel, data in zip(self.channels, channel_data)
            ],
            blend_mode=self.blend_mode,
            opacity=self.opacity,
            clipping=self.clipping,
            flags=self.flags,
            mask_data=self.mask.to_record() if self.mask is not None else None,
            blending_ranges=self.blending_ranges,
            name=self.name,
            tagged_blocks=self.tagged_blocks,
        )
        return record, channel_data
