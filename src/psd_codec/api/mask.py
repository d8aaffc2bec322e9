"""
Layer mask of the object model.
"""

import logging
from typing import Optional

from psd_codec.api.channel import Channel, Rect
from psd_codec.psd.layer_and_mask import MaskData, MaskFlags

logger = logging.getLogger(__name__)


class Mask:
    """
    User layer mask.

    The pixels live in the owning layer's ``-2`` channel, which uses
    :py:attr:`rect` rather than the layer rectangle. The real-user-mask
    fields and any trailing bytes of the record are kept as read.

    :param rect: mask rectangle.
    :param background_color: fill color outside of the rectangle, 0 or 255.
    """

    def __init__(
        self,
        rect: Rect = Rect(),
        background_color: int = 0,
        relative: bool = False,
        disabled: bool = False,
        invert: bool = False,
    ) -> None:
        self.rect = rect
        self.background_color = background_color
        self.relative = relative
        self.disabled = disabled
        self.invert = invert
        self.channel: Optional[Channel] = None
        self._record = MaskData()

    def __repr__(self) -> str:
        return "%s(size=%dx%d, background_color=%d, disabled=%s)" % (
            self.__class__.__name__,
            self.rect.width,
            self.rect.height,
            self.background_color,
            self.disabled,
        )

    @property
    def data(self) -> Optional[bytes]:
        """Decoded mask plane, or None when the layer has no mask channel."""
        if self.channel is None:
            return None
        return self.channel.data

    @property
    def real_rect(self) -> Optional[Rect]:
        """Rectangle of the real user mask, used by the ``-3`` channel."""
        record = self._record
        if record.real_flags is None:
            return None
        return Rect(
            record.real_top or 0,
            record.real_left or 0,
            record.real_bottom or 0,
            record.real_right or 0,
        )

    @classmethod
    def from_record(cls, record: MaskData) -> "Mask":
        self = cls(
            Rect(record.top, record.left, record.bottom, record.right),
            record.background_color,
            record.flags.pos_relative_to_layer,
            record.flags.mask_disabled,
            record.flags.invert_mask,
        )
        self._record = record
        return self

    def to_record(self) -> MaskData:
        record = self._record
        flags = MaskFlags(
            pos_relative_to_layer=self.relative,
            mask_disabled=self.disabled,
            invert_mask=self.invert,
            user_mask_from_render=record.flags.user_mask_from_render,
            parameters_applied=record.flags.parameters_applied,
            undocumented_1=record.flags.undocumented_1,
            undocumented_2=record.flags.undocumented_2,
            undocumented_3=record.flags.undocumented_3,
        )
        return MaskData(
            top=self.rect.top,
            left=self.rect.left,
            bottom=self.rect.bottom,
            right=self.rect.right,
            background_color=self.background_color,
            flags=flags,
            real_flags=record.real_flags,
            real_background_color=record.real_background_color,
            real_top=record.real_top,
            real_left=record.real_left,
            real_bottom=record.real_bottom,
            real_right=record.real_right,
            extra=record.extra,
        )
