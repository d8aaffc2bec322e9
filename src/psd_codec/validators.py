"""
Validation functions for attrs.

Both validators raise :py:class:`~psd_codec.errors.FormatError` so that a
malformed fixed-size field aborts parsing with the documented error type.
"""

from typing import Any, Container

from attrs import define

from psd_codec.errors import FormatError

__all__ = ["in_", "range_", "length_"]


@define(repr=False, frozen=True)
class _InValidator:
    options: Container

    def __call__(self, inst: Any, attr: Any, value: Any) -> None:
        try:
            in_options = value in self.options
        except TypeError:
            in_options = False

        if not in_options:
            raise FormatError(
                "'{name}' must be in {options!r} (got {value!r})".format(
                    name=attr.name, options=self.options, value=value
                )
            )

    def __repr__(self) -> str:
        return "<in_ validator with options {options!r}>".format(options=self.options)


@define(repr=False, frozen=True)
class _RangeValidator:
    minimum: Any
    maximum: Any

    def __call__(self, inst: Any, attr: Any, value: Any) -> None:
        try:
            in_range = self.minimum <= value and value <= self.maximum
        except TypeError:
            in_range = False

        if not in_range:
            raise FormatError(
                "'{name}' must be in range [{minimum!r}, {maximum!r}] (got {value!r})".format(
                    name=attr.name,
                    minimum=self.minimum,
                    maximum=self.maximum,
                    value=value,
                )
            )

    def __repr__(self) -> str:
        return "<range_ validator with [{minimum!r}, {maximum!r}]>".format(
            minimum=self.minimum, maximum=self.maximum
        )


@define(repr=False, frozen=True)
class _LengthValidator:
    length: int

    def __call__(self, inst: Any, attr: Any, value: Any) -> None:
        if len(value) != self.length:
            raise FormatError(
                "'{name}' must be exactly {length} bytes (got {value!r})".format(
                    name=attr.name, length=self.length, value=value
                )
            )


def in_(options: Container) -> _InValidator:
    """
    A validator that raises a :exc:`FormatError` if the initializer is called
    with a value that does not belong in the options provided.
    """
    return _InValidator(options)


def range_(minimum: Any, maximum: Any) -> _RangeValidator:
    """
    A validator that raises a :exc:`FormatError` if the initializer is called
    with a value that does not belong in the [minimum, maximum] range. The
    check is performed using ``minimum <= value and value <= maximum``
    """
    return _RangeValidator(minimum, maximum)


def length_(length: int) -> _LengthValidator:
    """
    A validator that raises a :exc:`FormatError` unless the value has exactly
    `length` items.
    """
    return _LengthValidator(length)
