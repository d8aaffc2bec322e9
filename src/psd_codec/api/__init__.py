"""
Object model for PSD/PSB documents.

This subpackage wraps the low-level :py:mod:`psd_codec.psd` records with
documents, layers and channels whose pixel data is decoded on a thread pool.

Key modules:

- :py:mod:`psd_codec.api.document`: :py:class:`Document`, :py:func:`load` and
  :py:func:`save`
- :py:mod:`psd_codec.api.layers`: :py:class:`Layer`
- :py:mod:`psd_codec.api.channel`: :py:class:`Channel` and :py:class:`Rect`
- :py:mod:`psd_codec.api.mask`: :py:class:`Mask`
- :py:mod:`psd_codec.api.sections`: layer group transform
- :py:mod:`psd_codec.api.tasks`: parallel task runner

Example usage::

    from psd_codec.api import load, save

    document = load("document.psd")
    layer = document.layers[0]
    layer.name = "New Name"
    layer.opacity = 128
    save(document, "modified.psd")
"""

from .channel import Channel as Channel, Rect as Rect
from .document import Document as Document, load as load, save as save
from .layers import Layer as Layer
from .mask import Mask as Mask
from .sections import (
    export_sections as export_sections,
    import_sections as import_sections,
)
from .tasks import ProgressCounter as ProgressCounter, run_tasks as run_tasks

__all__ = [
    "Channel",
    "Document",
    "Layer",
    "Mask",
    "ProgressCounter",
    "Rect",
    "export_sections",
    "import_sections",
    "load",
    "run_tasks",
    "save",
]
