"""
Image resources section structure. Image resources are used to store non-pixel
data associated with images, such as resolution, thumbnails or channel names.

See :py:class:`~psd_codec.constants.Resource` for named ids. The following
resources are parsed into records; everything else stays as raw bytes and is
written back unchanged::

    Resource.RESOLUTION_INFO: 1005
    Resource.ALPHA_NAMES_PASCAL: 1006
    Resource.THUMBNAIL_RESOURCE_PS4: 1033
    Resource.THUMBNAIL_RESOURCE: 1036
    Resource.ALPHA_NAMES_UNICODE: 1045
    Resource.VERSION_INFO: 1057

Example::

    from psd_codec.constants import Resource

    version_info = psd.image_resources.get_data(Resource.VERSION_INFO)
"""

import io
import logging
from typing import Any, BinaryIO, Optional, TypeVar

from attrs import astuple, define, field
from PIL import Image

from psd_codec.constants import Resource
from psd_codec.errors import FormatError
from psd_codec.psd.base import BaseElement, ListElement
from psd_codec.psd.bin_utils import (
    is_readable,
    read_exact,
    read_fmt,
    read_length_block,
    read_pascal_string,
    read_unicode_string,
    trimmed_repr,
    write_bytes,
    write_fmt,
    write_length_block,
    write_pascal_string,
    write_unicode_string,
)
from psd_codec.registry import new_registry
from psd_codec.validators import in_
from psd_codec.version import __version__

logger = logging.getLogger(__name__)

T_ImageResources = TypeVar("T_ImageResources", bound="ImageResources")
T_ImageResource = TypeVar("T_ImageResource", bound="ImageResource")

TYPES, register = new_registry()


def _key_value(key: Any) -> int:
    return int(getattr(key, "value", key))


@define(repr=False)
class ImageResources(ListElement):
    """
    Image resources section of the PSD file. Ordered list of
    :py:class:`.ImageResource`; the same id may appear more than once.
    """

    def get(self, key: Any) -> Optional["ImageResource"]:
        """Returns the first resource with the given id, or None."""
        key = _key_value(key)
        for item in self:
            if item.key == key:
                return item
        return None

    def get_data(self, key: Any, default: Any = None) -> Any:
        """
        Get data from the image resources.

        Shortcut for the following::

            resource = image_resources.get(key)
            value = resource.data if resource else default
        """
        item = self.get(key)
        if item is None:
            return default
        return item.data

    def set(self, resource: "ImageResource") -> None:
        """
        Replaces the first resource with the same id in place and drops any
        later duplicates. Appends when the id is not present yet.
        """
        indices = [i for i, item in enumerate(self) if item.key == resource.key]
        if not indices:
            self.append(resource)
            return
        self[indices[0]] = resource
        for index in reversed(indices[1:]):
            del self[index]

    def remove(self, key: Any) -> int:  # type: ignore[override]
        """Removes every resource with the given id, returns the count."""
        key = _key_value(key)
        kept = [item for item in self if item.key != key]
        removed = len(self) - len(kept)
        self._items = kept
        return removed

    def __contains__(self, key: Any) -> bool:
        return self.get(key) is not None

    @classmethod
    def new(cls: type[T_ImageResources], **kwargs: Any) -> T_ImageResources:
        """
        Create a new default image resources list.

        :return: ImageResources
        """
        return cls(
            [
                ImageResource(
                    key=Resource.VERSION_INFO,
                    data=VersionInfo(
                        has_composite=True,
                        writer="psd-codec %s" % __version__,
                        reader="psd-codec %s" % __version__,
                    ),
                )
            ]
        )

    @classmethod
    def read(
        cls: type[T_ImageResources],
        fp: BinaryIO,
        encoding: str = "macroman",
        **kwargs: Any,
    ) -> T_ImageResources:
        data = read_length_block(fp)
        logger.debug("reading image resources, len=%d" % (len(data)))
        with io.BytesIO(data) as f:
            return cls._read_body(f, encoding=encoding)

    @classmethod
    def _read_body(
        cls: type[T_ImageResources], fp: BinaryIO, *args: Any, **kwargs: Any
    ) -> T_ImageResources:
        items = []
        while is_readable(fp, 4):
            items.append(ImageResource.read(fp, *args, **kwargs))
        return cls(items)

    def write(self, fp: BinaryIO, encoding: str = "macroman", **kwargs: Any) -> int:
        def writer(f: BinaryIO) -> int:
            written = sum(item.write(f, encoding) for item in self)
            logger.debug("writing image resources, len=%d" % (written))
            return written

        return write_length_block(fp, writer)


@define(repr=False)
class ImageResource(BaseElement):
    """
    Image resource block.

    .. py:attribute:: signature

        Binary signature, usually ``b'8BIM'``.

    .. py:attribute:: key

        Unique identifier for the resource. See
        :py:class:`~psd_codec.constants.Resource`.

    .. py:attribute:: name

    .. py:attribute:: data

        The resource data, a record for known ids or raw bytes.
    """

    signature: bytes = field(
        default=b"8BIM",
        repr=False,
        validator=in_({b"8BIM", b"MeSa", b"AgHg", b"PHUT", b"DCSR"}),
    )
    key: int = field(default=1000, converter=_key_value)
    name: str = ""
    data: Any = field(default=b"", repr=False)

    @classmethod
    def read(
        cls: type[T_ImageResource],
        fp: BinaryIO,
        encoding: str = "macroman",
        **kwargs: Any,
    ) -> T_ImageResource:
        signature, key = read_fmt("4sH", fp)
        try:
            logger.debug("reading image resource %s" % Resource(key).name)
        except ValueError:
            if Resource.is_path_info(key):
                logger.debug("Undefined PATH_INFO found: %d" % (key))
            elif Resource.is_plugin_resource(key):
                logger.debug("Undefined PLUGIN_RESOURCE found: %d" % (key))
            else:
                logger.info("Unknown image resource %d" % (key))
        name = read_pascal_string(fp, encoding, padding=2)
        raw_data = read_length_block(fp, padding=2)
        data: Any = raw_data
        kls = TYPES.get(key)
        if kls is not None:
            try:
                data = kls.frombytes(raw_data)
            except (FormatError, ValueError) as e:
                logger.error(
                    "Failed to read image resource %d, keeping raw data: %s" % (key, e)
                )
                data = raw_data
        return cls(signature, key, name, data)

    def write(self, fp: BinaryIO, encoding: str = "macroman", **kwargs: Any) -> int:
        written = write_fmt(fp, "4sH", self.signature, self.key)
        written += write_pascal_string(fp, self.name, encoding, padding=2)

        def writer(f: BinaryIO) -> int:
            if hasattr(self.data, "write"):
                return self.data.write(f)
            return write_bytes(f, self.data)

        written += write_length_block(fp, writer, padding=2)
        return written

    def __repr__(self) -> str:
        try:
            key = Resource(self.key).name
        except ValueError:
            key = str(self.key)
        if isinstance(self.data, bytes):
            return "ImageResource(%s, %s)" % (key, trimmed_repr(self.data))
        return "ImageResource(%s, %r)" % (key, self.data)


@register(Resource.RESOLUTION_INFO)
@define(repr=False)
class ResolutionInfo(BaseElement):
    """
    Resolution info structure.

    Resolutions are 16.16 fixed-point pixels per inch. Units are 1 for pixels
    per inch and 2 for pixels per centimeter; display units are 1 = inches,
    2 = cm, 3 = points, 4 = picas, 5 = columns.

    .. py:attribute:: horizontal
    .. py:attribute:: horizontal_unit
    .. py:attribute:: width_unit
    .. py:attribute:: vertical
    .. py:attribute:: vertical_unit
    .. py:attribute:: height_unit
    """

    horizontal: int = 72 << 16
    horizontal_unit: int = 1
    width_unit: int = 1
    vertical: int = 72 << 16
    vertical_unit: int = 1
    height_unit: int = 1

    @classmethod
    def read(cls, fp: BinaryIO, **kwargs: Any) -> "ResolutionInfo":
        return cls(*read_fmt("I2hI2h", fp))

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        return write_fmt(fp, "I2hI2h", *astuple(self))

    @property
    def horizontal_dpi(self) -> float:
        return self.horizontal / 65536.0

    @property
    def vertical_dpi(self) -> float:
        return self.vertical / 65536.0


@register(Resource.ALPHA_NAMES_PASCAL)
class AlphaNamesPascal(ListElement):
    """
    List of alpha channel names, stored as unpadded Pascal strings.
    """

    @classmethod
    def read(cls, fp: BinaryIO, **kwargs: Any) -> "AlphaNamesPascal":
        items = []
        while is_readable(fp):
            items.append(read_pascal_string(fp, "macroman", padding=1))
        return cls(items)

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        return sum(write_pascal_string(fp, item, padding=1) for item in self)


@register(Resource.ALPHA_NAMES_UNICODE)
class AlphaNamesUnicode(ListElement):
    """
    List of alpha channel names in UTF-16.
    """

    @classmethod
    def read(cls, fp: BinaryIO, **kwargs: Any) -> "AlphaNamesUnicode":
        items = []
        while is_readable(fp, 4):
            items.append(read_unicode_string(fp))
        return cls(items)

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        return sum(write_unicode_string(fp, item) for item in self)


@register(Resource.THUMBNAIL_RESOURCE)
@define(repr=False)
class ThumbnailResource(BaseElement):
    """
    Thumbnail resource structure.

    .. py:attribute:: fmt

        1 = JPEG data, 0 = raw RGB.

    .. py:attribute:: width
    .. py:attribute:: height
    .. py:attribute:: row

        Padded row bytes.

    .. py:attribute:: total_size
    .. py:attribute:: bits
    .. py:attribute:: planes
    .. py:attribute:: data
    """

    _RAW_MODE = "RGB"

    fmt: int = 1
    width: int = 0
    height: int = 0
    row: int = 0
    total_size: int = 0
    bits: int = 24
    planes: int = 1
    data: bytes = b""

    @classmethod
    def read(cls, fp: BinaryIO, **kwargs: Any) -> "ThumbnailResource":
        fmt, width, height, row, total_size, size, bits, planes = read_fmt("6I2H", fp)
        data = read_exact(fp, size)
        return cls(fmt, width, height, row, total_size, bits, planes, data)

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        written = write_fmt(
            fp,
            "6I2H",
            self.fmt,
            self.width,
            self.height,
            self.row,
            self.total_size,
            len(self.data),
            self.bits,
            self.planes,
        )
        written += write_bytes(fp, self.data)
        return written

    def topil(self) -> Image.Image:
        """
        Decodes the thumbnail to a PIL Image.
        """
        if self.fmt == 0:
            size = (self.width, self.height)
            return Image.frombytes(
                "RGB", size, self.data, "raw", self._RAW_MODE, self.row
            )
        elif self.fmt == 1:
            image = Image.open(io.BytesIO(self.data))
            image.load()
            if self._RAW_MODE == "BGR" and image.mode == "RGB":
                b, g, r = image.split()
                image = Image.merge("RGB", (r, g, b))
            return image
        raise FormatError("Unknown thumbnail format %d" % (self.fmt))


@register(Resource.THUMBNAIL_RESOURCE_PS4)
class ThumbnailResourceV4(ThumbnailResource):
    _RAW_MODE = "BGR"


@register(Resource.VERSION_INFO)
@define(repr=False)
class VersionInfo(BaseElement):
    """
    Version info structure.

    .. py:attribute:: version
    .. py:attribute:: has_composite
    .. py:attribute:: writer
    .. py:attribute:: reader
    .. py:attribute:: file_version
    """

    version: int = 1
    has_composite: bool = False
    writer: str = ""
    reader: str = ""
    file_version: int = 1

    @classmethod
    def read(cls, fp: BinaryIO, **kwargs: Any) -> "VersionInfo":
        version, has_composite = read_fmt("I?", fp)
        writer = read_unicode_string(fp)
        reader = read_unicode_string(fp)
        file_version = read_fmt("I", fp)[0]
        return cls(version, has_composite, writer, reader, file_version)

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        written = write_fmt(fp, "I?", self.version, self.has_composite)
        written += write_unicode_string(fp, self.writer)
        written += write_unicode_string(fp, self.reader)
        written += write_fmt(fp, "I", self.file_version)
        return written
