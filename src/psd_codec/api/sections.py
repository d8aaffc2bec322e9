"""
Layer group transform.

Files store groups inside the flat, bottom-to-top layer list: the top of a
group is a layer with an open or closed folder marker and the bottom is a
layer with a section divider marker. Hosts that only know flat layer lists
see the groups as bracketing layers whose names carry
:py:data:`GROUP_START_PREFIX` and :py:data:`GROUP_END_PREFIX`.

:py:func:`import_sections` turns the file list into that top-to-bottom
annotated list, and :py:func:`export_sections` goes back. Example::

    annotated = import_sections(document.layers)
    # ... edit, reorder, rename ...
    document.layers = export_sections(annotated)
"""

import copy
import logging
from typing import Iterable, Optional

from psd_codec.api.channel import Channel, Rect
from psd_codec.api.layers import Layer
from psd_codec.constants import BlendMode, ChannelID, SectionDivider

logger = logging.getLogger(__name__)

GROUP_START_PREFIX = "Layer Group:"
GROUP_END_PREFIX = "End Layer Group:"


def _wrap(prefix: str, name: str) -> str:
    return "%s %s" % (prefix, name)


def _unwrap(prefix: str, name: str) -> str:
    return name[len(prefix) :].lstrip(" ")


def is_group_start(layer: Layer) -> bool:
    return layer.name.startswith(GROUP_START_PREFIX)


def is_group_end(layer: Layer) -> bool:
    return layer.name.startswith(GROUP_END_PREFIX)


def import_sections(layers: Iterable[Layer]) -> list[Layer]:
    """
    Converts the bottom-to-top file list into a top-to-bottom annotated list.

    Members of a hidden group are made invisible whatever their own flag
    says, down to the divider that closes that group. The returned layers
    are shallow copies sharing channels with the input.
    """
    result = []
    stack: list[str] = []
    hidden_depth: Optional[int] = None

    for source in reversed(list(layers)):
        layer = _copy_layer(source)

        if hidden_depth is not None and len(stack) > hidden_depth:
            layer.visible = False

        section = layer.section
        if section is not None and section.is_group_start:
            if hidden_depth is None and not layer.visible:
                hidden_depth = len(stack)
            stack.append(layer.name)
            layer.name = _wrap(GROUP_START_PREFIX, layer.name)
        elif section is not None and section.is_group_end:
            if not stack:
                logger.warning(
                    "Section divider %r has no open group, keeping it as a layer"
                    % layer.name
                )
            else:
                name = stack.pop()
                layer.name = _wrap(GROUP_END_PREFIX, name)
                if hidden_depth is not None and len(stack) == hidden_depth:
                    hidden_depth = None
        result.append(layer)

    if stack:
        logger.warning("%d groups are not closed" % len(stack))
    return result


def export_sections(layers: Iterable[Layer]) -> list[Layer]:
    """
    Converts a top-to-bottom annotated list back into the bottom-to-top file
    list.

    Group ends without a matching start become regular layers. Groups left
    open at the end of the list are closed with empty divider layers. The
    returned layers are shallow copies, the input is left untouched.
    """
    result = []
    stack: list[str] = []

    for source in layers:
        layer = _copy_layer(source)
        if is_group_start(layer):
            name = _unwrap(GROUP_START_PREFIX, layer.name)
            kind = (
                SectionDivider.OPEN_FOLDER
                if layer.visible
                else SectionDivider.CLOSED_FOLDER
            )
            layer.name = name
            layer.set_section(kind)
            layer.visible = True
            stack.append(name)
        elif is_group_end(layer):
            if not stack:
                logger.warning(
                    "Group end %r has no matching group start, saving it as a layer"
                    % layer.name
                )
                layer.name = _unwrap(GROUP_END_PREFIX, layer.name)
                layer.set_section(None)
            else:
                stack.pop()
                _make_divider(layer)
        else:
            section = layer.section
            if section is not None and section.kind != SectionDivider.OTHER:
                layer.set_section(None)
        result.append(layer)

    while stack:
        name = stack.pop()
        logger.warning("Closing unterminated group %r" % name)
        divider = Layer(_wrap(GROUP_END_PREFIX, name))
        _make_divider(divider)
        result.append(divider)

    result.reverse()
    return result


def _copy_layer(source: Layer) -> Layer:
    layer = copy.copy(source)
    layer.flags = copy.copy(source.flags)
    layer.channels = list(source.channels)
    layer.tagged_blocks = copy.deepcopy(source.tagged_blocks)
    return layer


def _make_divider(layer: Layer) -> None:
    layer.name = "</Layer group>"
    layer.set_section(SectionDivider.BOUNDING_SECTION_DIVIDER)
    layer.opacity = 255
    layer.blend_mode = BlendMode.PASS_THROUGH.value
    layer.mask = None
    layer.channels = [
        Channel(c.id, Rect(), c.depth, c.compression, data=b"", color_mode=c.color_mode)
        for c in layer.channels
        if c.id >= ChannelID.TRANSPARENCY_MASK
    ]
    layer.rect = Rect()
