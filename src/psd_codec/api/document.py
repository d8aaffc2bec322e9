"""
Document of the object model, and the :py:func:`load`/:py:func:`save` entry
points.

Loading parses the container sequentially, then decodes every channel on a
thread pool. Saving encodes every channel on a thread pool, then serializes
the container in file order. Example::

    import psd_codec

    document = psd_codec.load("input.psd")
    for layer in document.layers:
        print(layer.name, layer.rect)
    psd_codec.save(document, "output.psd")
"""

import functools
import io
import logging
import os
import tempfile
from typing import Any, BinaryIO, Callable, Iterable, Optional, Union

import numpy as np

from psd_codec.api.channel import Channel, Rect
from psd_codec.api.layers import Layer
from psd_codec.api.sections import export_sections, import_sections
from psd_codec.api.tasks import run_tasks
from psd_codec.compression import check_compression, raw_length
from psd_codec.constants import ChannelID, ColorMode, Compression
from psd_codec.errors import FormatError, ResourceBudgetError
from psd_codec.psd import PSD
from psd_codec.psd.color_mode_data import ColorModeData
from psd_codec.psd.header import MAX_DIMENSIONS, FileHeader
from psd_codec.psd.image_data import ImageData
from psd_codec.psd.image_resources import ImageResources
from psd_codec.psd.layer_and_mask import (
    ChannelImageData,
    GlobalLayerMaskInfo,
    LayerAndMaskInformation,
    LayerInfo,
    LayerRecords,
)
from psd_codec.psd.tagged_blocks import TaggedBlocks

logger = logging.getLogger(__name__)

PathOrFile = Union[BinaryIO, str, bytes, os.PathLike]
ProgressCallback = Optional[Callable[[int, int], Any]]
AbortCallback = Optional[Callable[[], bool]]


def _composite_ids(color_mode: ColorMode, count: int) -> list[int]:
    intrinsic = ColorMode.channels(color_mode)
    if count == intrinsic + 1:
        return list(range(intrinsic)) + [ChannelID.TRANSPARENCY_MASK]
    return list(range(count))


def _bytes_per_sample(depth: int) -> int:
    return max(depth, 8) // 8


class Document:
    """
    Layered raster document.

    Example::

        from psd_codec import Document, save

        document = Document(64, 64, channels=4)
        save(document, "blank.psd")

    :param width: canvas width.
    :param height: canvas height.
    :param depth: bits per sample, one of 1, 8, 16 and 32.
    :param color_mode: see :py:class:`~psd_codec.constants.ColorMode`.
    :param channels: number of composite channels, defaults to the color
        mode's own count. One extra channel becomes the transparency channel.
    :param compression: compression of the composite image.

    .. py:attribute:: layers

        Layers in file order, bottom to top.

    .. py:attribute:: composite

        Base :py:class:`~psd_codec.api.layers.Layer` holding the merged image
        channels.

    .. py:attribute:: absolute_alpha

        True when the first alpha channel holds the transparency of the merged
        result, which is stored as a negative layer count.
    """

    def __init__(
        self,
        width: int = 64,
        height: int = 64,
        depth: int = 8,
        color_mode: ColorMode = ColorMode.RGB,
        channels: Optional[int] = None,
        compression: Compression = Compression.RLE,
    ) -> None:
        self.width = width
        self.height = height
        self.depth = depth
        self.color_mode = ColorMode(color_mode)
        self.version = 2 if max(width, height) > MAX_DIMENSIONS[1] else 1
        self.compression = Compression(compression)
        self.color_mode_data = b""
        self.image_resources = ImageResources.new()
        self.layers: list[Layer] = []
        self.global_layer_mask: Optional[GlobalLayerMaskInfo] = None
        self.tagged_blocks = TaggedBlocks()
        self.absolute_alpha = False

        count = ColorMode.channels(self.color_mode) if channels is None else channels
        rect = Rect.from_size(width, height)
        fill = b"\xff" * raw_length(width, height, depth)
        self.composite = Layer(
            "",
            rect,
            [
                Channel(
                    id, rect, depth, self.compression, data=fill, color_mode=color_mode
                )
                for id in _composite_ids(self.color_mode, count)
            ],
        )

    def __repr__(self) -> str:
        return "%s(size=%dx%d, mode=%s, depth=%d, layers=%d)" % (
            self.__class__.__name__,
            self.width,
            self.height,
            self.color_mode.name,
            self.depth,
            len(self.layers),
        )

    @property
    def rect(self) -> Rect:
        return Rect.from_size(self.width, self.height)

    @property
    def channels(self) -> list[Channel]:
        """Composite channels."""
        return self.composite.channels

    def sections(self) -> list[Layer]:
        """
        Layers top to bottom with groups expanded into bracketing layers.
        See :py:func:`~psd_codec.api.sections.import_sections`.
        """
        return import_sections(self.layers)

    def set_sections(self, layers: Iterable[Layer]) -> None:
        """
        Replaces :py:attr:`layers` from a top-to-bottom annotated list.
        See :py:func:`~psd_codec.api.sections.export_sections`.
        """
        self.layers = export_sections(layers)

    def numpy(self) -> np.ndarray:
        """Composite image as an array of shape ``(height, width, channels)``."""
        return np.stack([channel.numpy() for channel in self.channels], axis=2)

    def estimate_memory(self) -> int:
        """
        Worst-case decoded size in bytes, counting every layer as promoted to
        the full canvas.
        """
        count = len(self.layers) + 2 + (0 if self.layers else 1)
        return (
            count * 4 * self.width * self.height * _bytes_per_sample(self.depth)
        )

    @classmethod
    def _from_psd(
        cls,
        psd: PSD,
        memory_budget: Optional[int] = None,
        max_workers: Optional[int] = None,
        progress: ProgressCallback = None,
        abort: AbortCallback = None,
        decode: bool = True,
    ) -> "Document":
        header = psd.header
        self = cls.__new__(cls)
        self.width = header.width
        self.height = header.height
        self.depth = header.depth
        self.color_mode = header.color_mode
        self.version = header.version
        self.compression = psd.image_data.compression
        self.color_mode_data = psd.color_mode_data.value
        self.image_resources = psd.image_resources

        info = psd.layer_and_mask_information
        self.global_layer_mask = info.global_layer_mask_info
        self.tagged_blocks = (
            info.tagged_blocks if info.tagged_blocks is not None else TaggedBlocks()
        )
        self.absolute_alpha = (
            info.layer_info is not None and info.layer_info.layer_count < 0
        )
        self.layers = [
            Layer.from_record(
                record, channel_data, header.depth, header.version, header.color_mode
            )
            for record, channel_data in psd._iter_layers()
        ]
        logger.debug("read %d layers" % len(self.layers))

        intrinsic = ColorMode.channels(header.color_mode)
        if header.channels < intrinsic:
            logger.warning(
                "%s document has %d channels, expected at least %d"
                % (header.color_mode.name, header.channels, intrinsic)
            )

        if memory_budget is not None:
            required = self.estimate_memory()
            if required > memory_budget:
                raise ResourceBudgetError(required, memory_budget)

        composite_tasks = self._read_composite(psd.image_data, header)
        tasks: list[Callable[[], Any]] = []
        if decode:
            tasks = [
                channel.decode for layer in self.layers for channel in layer.channels
            ]
            if not composite_tasks:
                tasks += [channel.decode for channel in self.channels]
        run_tasks(tasks + composite_tasks, max_workers, progress, abort)
        return self

    def _read_composite(self, image_data: ImageData, header: FileHeader) -> list:
        check_compression(image_data.compression, header.depth, header.color_mode)
        rect = self.rect
        ids = _composite_ids(header.color_mode, header.channels)
        if image_data.compression in (Compression.RAW, Compression.RLE):
            payloads = image_data.split_channels(header)
            self.composite = Layer(
                "",
                rect,
                [
                    Channel(
                        id,
                        rect,
                        header.depth,
                        image_data.compression,
                        compressed=payload,
                        version=header.version,
                        color_mode=header.color_mode,
                    )
                    for id, payload in zip(ids, payloads)
                ],
            )
            return []

        # A ZIP stream spans all channels, so it is decoded in a single task.
        self.composite = Layer(
            "",
            rect,
            [
                Channel(
                    id,
                    rect,
                    header.depth,
                    image_data.compression,
                    version=header.version,
                    color_mode=header.color_mode,
                )
                for id in ids
            ],
        )

        def decode_all() -> None:
            planes = image_data.get_data(header, split=True)
            for channel, plane in zip(self.channels, planes):
                channel.data = plane

        return [decode_all]

    def _to_psd(
        self,
        compression: Optional[Compression] = None,
        version: Optional[int] = None,
        max_workers: Optional[int] = None,
        progress: ProgressCallback = None,
        abort: AbortCallback = None,
    ) -> PSD:
        if version is None:
            version = (
                2 if max(self.width, self.height) > MAX_DIMENSIONS[1] else self.version
            )
        if compression is not None:
            compression = Compression(compression)
        composite_compression = (
            self.compression if compression is None else compression
        )
        check_compression(composite_compression, self.depth, self.color_mode)

        intrinsic = ColorMode.channels(self.color_mode)
        if len(self.channels) < intrinsic:
            raise FormatError(
                "%s document needs at least %d composite channels, got %d"
                % (self.color_mode.name, intrinsic, len(self.channels))
            )
        for channel in self.channels:
            if channel.rect != self.rect:
                raise ValueError(
                    "Composite channel %d has rect %r, expected %r"
                    % (channel.id, channel.rect, self.rect)
                )

        header = FileHeader(
            version=version,
            channels=len(self.channels),
            height=self.height,
            width=self.width,
            depth=self.depth,
            color_mode=self.color_mode,
        )
        image_data = ImageData(compression=composite_compression)

        tasks: list[Callable[[], Any]] = [
            functools.partial(channel.encode, compression, version)
            for layer in self.layers
            for channel in layer.channels
        ]
        split = composite_compression in (Compression.RAW, Compression.RLE)
        if split:
            tasks += [
                functools.partial(channel.encode, composite_compression, version)
                for channel in self.channels
            ]
        else:
            tasks.append(
                lambda: image_data.set_data(
                    [channel.data for channel in self.channels], header
                )
            )
        run_tasks(tasks, max_workers, progress, abort)
        if split:
            image_data.join_channels(
                [channel.compressed for channel in self.channels], header
            )

        records, channel_image_data = LayerRecords(), ChannelImageData()
        for layer in self.layers:
            record, channel_data = layer.to_record()
            records.append(record)
            channel_image_data.append(channel_data)
        layer_count = -len(records) if self.absolute_alpha else len(records)
        logger.debug("writing %d layers" % len(records))

        return PSD(
            header,
            ColorModeData(self.color_mode_data),
            self.image_resources,
            LayerAndMaskInformation(
                LayerInfo(layer_count, records, channel_image_data),
                self.global_layer_mask,
                self.tagged_blocks or None,
            ),
            image_data,
        )


def load(
    fp: PathOrFile,
    encoding: str = "macroman",
    memory_budget: Optional[int] = None,
    max_workers: Optional[int] = None,
    progress: ProgressCallback = None,
    abort: AbortCallback = None,
    decode: bool = True,
) -> Document:
    """
    Reads a PSD or PSB document.

    :param fp: filename or file-like object. Streams that cannot seek are
        read into memory first.
    :param encoding: charset of the Pascal strings within the file.
    :param memory_budget: maximum number of bytes decoding may need, see
        :py:meth:`Document.estimate_memory`.
    :param max_workers: size of the decoding thread pool.
    :param progress: called as ``progress(done, total)`` per decoded channel.
    :param abort: checked before each channel task.
    :param decode: decode channels now. When false, channels decode lazily
        on first access.
    :return: :py:class:`Document`.
    :raise FormatError: on a malformed file.
    :raise UnsupportedFeatureError: on a depth, compression and color mode
        combination the codec does not implement.
    :raise ResourceBudgetError: when ``memory_budget`` is too small.
    """
    if isinstance(fp, (str, bytes, os.PathLike)):
        with open(fp, "rb") as f:
            psd = PSD.read(f, encoding)
    elif not fp.seekable():
        with io.BytesIO(fp.read()) as f:
            psd = PSD.read(f, encoding)
    else:
        psd = PSD.read(fp, encoding)
    return Document._from_psd(psd, memory_budget, max_workers, progress, abort, decode)


def save(
    document: Document,
    fp: PathOrFile,
    encoding: str = "macroman",
    compression: Optional[Compression] = None,
    version: Optional[int] = None,
    max_workers: Optional[int] = None,
    progress: ProgressCallback = None,
    abort: AbortCallback = None,
) -> None:
    """
    Writes a document.

    A filename is written through a temporary file in the same directory that
    replaces the target once complete. A stream that cannot seek receives the
    whole file in a single write.

    :param document: :py:class:`Document` to write.
    :param fp: filename or file-like object.
    :param encoding: charset of the Pascal strings within the file.
    :param compression: scheme applied to every channel. None keeps each
        channel's own scheme and the document's composite scheme.
    :param version: 1 for PSD, 2 for PSB. None picks PSB when a dimension
        exceeds the PSD limit.
    :param max_workers: size of the encoding thread pool.
    :param progress: called as ``progress(done, total)`` per encoded channel.
    :param abort: checked before each channel task.
    """
    psd = document._to_psd(compression, version, max_workers, progress, abort)
    if isinstance(fp, (str, bytes, os.PathLike)):
        path = os.path.abspath(os.fsdecode(fp))
        fd, temp_path = tempfile.mkstemp(
            prefix=".%s." % os.path.basename(path), dir=os.path.dirname(path)
        )
        try:
            with os.fdopen(fd, "wb") as f:
                written = psd.write(f, encoding)
            os.replace(temp_path, path)
        except BaseException:
            os.unlink(temp_path)
            raise
    elif fp.seekable():
        written = psd.write(fp, encoding)
    else:
        with io.BytesIO() as f:
            written = psd.write(f, encoding)
            fp.write(f.getvalue())
    logger.debug("wrote %d bytes" % written)
