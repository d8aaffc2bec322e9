"""
Base data structures intended for inheritance.

All the records in :py:mod:`psd_codec.psd` inherit from
:py:class:`BaseElement` and implement its ``read``/``write`` pair. A record's
``write`` returns the number of bytes it emitted, so that callers can compute
padding without asking the stream.

Records get attrs_ decoration to declare their fields.

.. _attrs: https://www.attrs.org/en/stable/index.html
"""

import io
import logging
from enum import Enum
from typing import Any, BinaryIO, TypeVar

from attrs import define, field, fields, validate

from psd_codec.psd.bin_utils import trimmed_repr, write_bytes

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="BaseElement")


class BaseElement:
    """
    Base element of various PSD file structs.

    .. py:classmethod:: read(cls, fp)

        Read the element from a file-like object.

    .. py:method:: write(self, fp)

        Write the element to a file-like object.

    .. py:classmethod:: frombytes(self, data, *args, **kwargs)

        Read the element from bytes.

    .. py:method:: tobytes(self, *args, **kwargs)

        Write the element to bytes.
    """

    @classmethod
    def read(cls: type[T], fp: BinaryIO, **kwargs: Any) -> T:
        raise NotImplementedError()

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        raise NotImplementedError()

    @classmethod
    def frombytes(cls: type[T], data: bytes, *args: Any, **kwargs: Any) -> T:
        with io.BytesIO(data) as f:
            return cls.read(f, *args, **kwargs)

    def tobytes(self, *args: Any, **kwargs: Any) -> bytes:
        with io.BytesIO() as f:
            self.write(f, *args, **kwargs)
            return f.getvalue()

    def validate(self) -> None:
        return validate(self)  # type: ignore[arg-type]

    def __repr__(self) -> str:
        items = []
        for item in fields(self.__class__):  # type: ignore[arg-type]
            if not item.repr:
                continue
            value = getattr(self, item.name)
            if isinstance(value, bytes):
                text = trimmed_repr(value)
            elif isinstance(value, Enum):
                text = value.name
            else:
                text = repr(value)
            items.append("%s=%s" % (item.name, text))
        return "%s(%s)" % (self.__class__.__name__, ", ".join(items))


@define(repr=False, eq=False, order=False)
class ValueElement(BaseElement):
    """
    Single value wrapper that has a `value` attribute.

    Inherit with `@define(repr=False)` decorator to keep the value-like
    comparison and repr.

    .. py:attribute:: value

        Internal value.
    """

    value: object = None

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, ValueElement):
            return type(self) is type(other) and self.value == other.value
        return self.value == other

    def __ne__(self, other: Any) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return hash(self.value)

    def __bool__(self) -> bool:
        return bool(self.value)

    def __len__(self) -> int:
        return len(self.value)  # type: ignore[arg-type]

    def __repr__(self) -> str:
        if isinstance(self.value, bytes):
            return "%s(%s)" % (self.__class__.__name__, trimmed_repr(self.value))
        return "%s(%r)" % (self.__class__.__name__, self.value)


@define(repr=False)
class ListElement(BaseElement):
    """
    List-like element that has `items` list.
    """

    _items: list = field(factory=list, converter=list)

    def append(self, x: Any) -> None:
        return self._items.append(x)

    def extend(self, L: Any) -> None:
        return self._items.extend(L)

    def insert(self, i: int, x: Any) -> None:
        return self._items.insert(i, x)

    def remove(self, x: Any) -> None:
        return self._items.remove(x)

    def pop(self, *args: Any) -> Any:
        return self._items.pop(*args)

    def index(self, x: Any) -> int:
        return self._items.index(x)

    def count(self, x: Any) -> int:
        return self._items.count(x)

    def __len__(self) -> int:
        return self._items.__len__()

    def __iter__(self) -> Any:
        return self._items.__iter__()

    def __getitem__(self, key: Any) -> Any:
        return self._items.__getitem__(key)

    def __setitem__(self, key: Any, value: Any) -> None:
        return self._items.__setitem__(key, value)

    def __delitem__(self, key: Any) -> None:
        return self._items.__delitem__(key)

    def __repr__(self) -> str:
        return "%s(%r)" % (self.__class__.__name__, self._items)

    def write(self, fp: BinaryIO, *args: Any, **kwargs: Any) -> int:
        written = 0
        for item in self:
            if hasattr(item, "write"):
                written += item.write(fp, *args, **kwargs)
            elif isinstance(item, bytes):
                written += write_bytes(fp, item)
        return written
