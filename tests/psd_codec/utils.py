import logging
import tempfile
from typing import Any, Type, TypeVar

from psd_codec.psd.base import BaseElement
from psd_codec.psd.bin_utils import trimmed_repr

T = TypeVar("T", bound=BaseElement)

logging.basicConfig(level=logging.DEBUG)


def check_write_read(element: T, *args: Any, **kwargs: Any) -> None:
    with tempfile.TemporaryFile() as f:
        element.write(f, *args, **kwargs)
        f.flush()
        f.seek(0)
        new_element = element.read(f, *args, **kwargs)
    assert element == new_element, "%s vs %s" % (element, new_element)


def check_read_write(cls: Type[T], data: bytes, *args: Any, **kwargs: Any) -> None:
    element = cls.frombytes(data, *args, **kwargs)
    new_data = element.tobytes(*args, **kwargs)
    assert data == new_data, "%s vs %s" % (trimmed_repr(data), trimmed_repr(new_data))
