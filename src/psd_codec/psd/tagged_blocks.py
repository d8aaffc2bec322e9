"""
Tagged block data structure, also known as additional layer information.

Only the unicode layer name and the section divider settings are
interpreted. Every other key keeps its payload as raw bytes so that it is
written back byte for byte.

Records appear in two places. At the end of a layer record the declared
length is trusted as is. At the end of the layer and mask information
section Photoshop aligns every record to 4 bytes even when the declared
length says otherwise, so that level is read and written with
``padding=4``.
"""

import logging
from typing import Any, BinaryIO, Optional, TypeVar, Union

from attrs import define, field

from psd_codec.constants import SectionDivider, Tag
from psd_codec.errors import FormatError
from psd_codec.psd.base import BaseElement, ListElement, ValueElement
from psd_codec.psd.bin_utils import (
    is_readable,
    read_fmt,
    read_length_block,
    read_unicode_string,
    trimmed_repr,
    write_bytes,
    write_fmt,
    write_length_block,
    write_padding,
    write_unicode_string,
)
from psd_codec.registry import new_registry
from psd_codec.validators import in_, length_

logger = logging.getLogger(__name__)

T_TaggedBlocks = TypeVar("T_TaggedBlocks", bound="TaggedBlocks")
T_TaggedBlock = TypeVar("T_TaggedBlock", bound="TaggedBlock")

TYPES, register = new_registry()


def _key_bytes(key: Any) -> bytes:
    return getattr(key, "value", key)


def _key_converter(key: Any) -> Union[Tag, bytes]:
    key = _key_bytes(key)
    try:
        return Tag(key)
    except ValueError:
        return key


@define(repr=False)
class TaggedBlocks(ListElement):
    """
    Ordered list of tagged block items.

    See :py:class:`~psd_codec.constants.Tag` for the named keys. Keys may
    repeat, and lookups return the first match.

    Example::

        from psd_codec.constants import Tag

        name = tagged_blocks.get_data(Tag.UNICODE_LAYER_NAME)
    """

    def get(self, key: Any) -> Optional["TaggedBlock"]:
        key = _key_bytes(key)
        for block in self:
            if _key_bytes(block.key) == key:
                return block
        return None

    def get_all(self, key: Any) -> list:
        key = _key_bytes(key)
        return [block for block in self if _key_bytes(block.key) == key]

    def get_data(self, key: Any, default: Any = None) -> Any:
        """
        Get data from the tagged blocks.

        Shortcut for the following::

            block = tagged_blocks.get(key)
            value = block.data if block else default
        """
        block = self.get(key)
        if block is None:
            return default
        value = block.data
        if isinstance(value, ValueElement):
            return value.value
        return value

    def set_data(self, key: Any, *args: Any, **kwargs: Any) -> None:
        """
        Set data for the given key. The first block with the key is replaced
        in place, otherwise a new block is appended.

        Shortcut for the following::

            kls = TYPES.get(key)
            tagged_blocks.append(TaggedBlock(key=key, data=kls(value)))
        """
        key = _key_converter(key)
        kls = TYPES.get(key)
        if kls is None:
            raise KeyError("No record type for key %r" % (key,))
        block = TaggedBlock(key=key, data=kls(*args, **kwargs))
        for index, item in enumerate(self):
            if _key_bytes(item.key) == _key_bytes(key):
                self[index] = block
                return
        self.append(block)

    def __contains__(self, key: Any) -> bool:
        return self.get(key) is not None

    @classmethod
    def read(
        cls: type[T_TaggedBlocks],
        fp: BinaryIO,
        version: int = 1,
        padding: int = 1,
        end_pos: Optional[int] = None,
        **kwargs: Any,
    ) -> T_TaggedBlocks:
        items = []
        while is_readable(fp, 8):  # len(signature) + len(key) = 8
            if end_pos is not None and fp.tell() >= end_pos:
                break
            start_pos = fp.tell()
            try:
                block = TaggedBlock.read(fp, version, padding)
            except FormatError as e:
                logger.warning(
                    "Skipping corrupt tagged block at %d: %s" % (start_pos, e)
                )
                if end_pos is None:
                    fp.seek(0, 2)
                else:
                    fp.seek(end_pos)
                break
            if block is None:
                break
            items.append(block)
        return cls(items)

    def write(
        self, fp: BinaryIO, version: int = 1, padding: int = 1, **kwargs: Any
    ) -> int:
        return sum(block.write(fp, version, padding) for block in self)


@define(repr=False)
class TaggedBlock(BaseElement):
    """
    Layer tagged block with extra info.

    .. py:attribute:: key

        4-character code. See :py:class:`~psd_codec.constants.Tag`; unknown
        codes stay as bytes.

    .. py:attribute:: data

        Parsed record, or raw bytes.
    """

    _SIGNATURES = (b"8BIM", b"8B64")
    _BIG_KEYS = {
        Tag.USER_MASK,
        Tag.LAYER_16,
        Tag.LAYER_32,
        Tag.LAYER,
        Tag.SAVING_MERGED_TRANSPARENCY,
        Tag.SAVING_MERGED_TRANSPARENCY16,
        Tag.SAVING_MERGED_TRANSPARENCY32,
        Tag.ALPHA,
        Tag.FILTER_MASK,
        Tag.LINKED_LAYER2,
        Tag.LINKED_LAYER3,
        Tag.LINKED_LAYER_EXTERNAL,
        Tag.FILTER_EFFECTS1,
        Tag.FILTER_EFFECTS2,
        Tag.FILTER_EFFECTS3,
        Tag.PIXEL_SOURCE_DATA2,
        Tag.UNICODE_PATH_NAME,
        Tag.EXPORT_SETTING1,
        Tag.EXPORT_SETTING2,
        Tag.COMPOSITOR_INFO,
        Tag.ARTBOARD_DATA2,
    }

    signature: bytes = field(default=b"8BIM", repr=False, validator=in_(_SIGNATURES))
    key: Union[Tag, bytes] = field(default=b"", converter=_key_converter)
    data: Any = field(default=b"", repr=True)

    @classmethod
    def read(
        cls: type[T_TaggedBlock],
        fp: BinaryIO,
        version: int = 1,
        padding: int = 1,
        **kwargs: Any,
    ) -> Optional[T_TaggedBlock]:
        signature = read_fmt("4s", fp)[0]
        if signature not in cls._SIGNATURES:
            logger.warning("Invalid signature (%r)" % (signature))
            fp.seek(-4, 1)
            return None

        key = _key_converter(read_fmt("4s", fp)[0])
        fmt = cls._length_format(key, version)
        # Consuming the whole block leaves the stream at the computed end
        # offset even when the payload turns out to be corrupt.
        raw_data = read_length_block(fp, fmt=fmt, padding=padding)
        kls = TYPES.get(key)
        data: Any = raw_data
        if kls is not None:
            try:
                data = kls.frombytes(raw_data, version=version)
            except (FormatError, ValueError) as e:
                logger.error(
                    "Failed to read tagged block %r, keeping raw data: %s" % (key, e)
                )
                data = raw_data
        else:
            logger.info("Unknown tagged block: %r, %s" % (key, trimmed_repr(raw_data)))
        return cls(signature, key, data)

    def write(
        self, fp: BinaryIO, version: int = 1, padding: int = 1, **kwargs: Any
    ) -> int:
        written = write_fmt(fp, "4s4s", self.signature, _key_bytes(self.key))

        def writer(f: BinaryIO) -> int:
            if hasattr(self.data, "write"):
                return self.data.write(f, version=version)
            return write_bytes(f, self.data)

        fmt = self._length_format(self.key, version)
        written += write_length_block(fp, writer, fmt=fmt, padding=padding)
        return written

    @classmethod
    def _length_format(cls, key: Any, version: int) -> str:
        return ("I", "Q")[int(version == 2 and key in cls._BIG_KEYS)]


@register(Tag.UNICODE_LAYER_NAME)
@define(repr=False, eq=False)
class UnicodeLayerName(ValueElement):
    """
    Unicode layer name. The string is zero padded to 4 bytes inside the
    record.
    """

    value: str = ""

    @classmethod
    def read(cls, fp: BinaryIO, **kwargs: Any) -> "UnicodeLayerName":
        return cls(read_unicode_string(fp))

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        written = write_unicode_string(fp, self.value)
        written += write_padding(fp, written, 4)
        return written


@register(Tag.SECTION_DIVIDER_SETTING)
@register(Tag.NESTED_SECTION_DIVIDER_SETTING)
@define(repr=False)
class SectionDividerSetting(BaseElement):
    """
    SectionDividerSetting structure.

    .. py:attribute:: kind

        See :py:class:`~psd_codec.constants.SectionDivider`.

    .. py:attribute:: blend_mode

        Optional 4-byte blend mode key of the group.

    .. py:attribute:: sub_type
    """

    kind: SectionDivider = field(
        default=SectionDivider.OTHER,
        converter=SectionDivider,
        validator=in_(SectionDivider),
    )
    signature: Optional[bytes] = field(default=None, repr=False)
    blend_mode: Optional[bytes] = field(default=None)
    sub_type: Optional[int] = None

    @blend_mode.validator
    def _validate_blend_mode(self, attribute: Any, value: Any) -> None:
        if value is not None:
            length_(4)(self, attribute, _key_bytes(value))

    @classmethod
    def read(cls, fp: BinaryIO, **kwargs: Any) -> "SectionDividerSetting":
        kind = SectionDivider(read_fmt("I", fp)[0])
        signature, blend_mode = None, None
        if is_readable(fp, 8):
            signature = read_fmt("4s", fp)[0]
            if signature != b"8BIM":
                raise FormatError("Invalid signature %r" % signature)
            blend_mode = read_fmt("4s", fp)[0]
        sub_type = None
        if is_readable(fp, 4):
            sub_type = read_fmt("I", fp)[0]
        return cls(kind, signature=signature, blend_mode=blend_mode, sub_type=sub_type)

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        written = write_fmt(fp, "I", self.kind.value)
        if self.blend_mode:
            if self.signature is None:
                logger.debug(
                    "Signature is missing in SectionDividerSetting, overriding"
                )
                self.signature = b"8BIM"
            written += write_fmt(
                fp, "4s4s", self.signature, _key_bytes(self.blend_mode)
            )
            if self.sub_type is not None:
                written += write_fmt(fp, "I", self.sub_type)
        elif self.sub_type is not None:
            logger.debug(
                "Blend mode is missing in SectionDividerSetting, ignoring sub_type"
            )
        return written

    @property
    def is_group_start(self) -> bool:
        return self.kind in (SectionDivider.OPEN_FOLDER, SectionDivider.CLOSED_FOLDER)

    @property
    def is_group_end(self) -> bool:
        return self.kind == SectionDivider.BOUNDING_SECTION_DIVIDER

