"""
Exception types raised by psd-codec.

Fatal conditions are split into three categories so that callers can tell an
unusable document apart from a feature the codec refuses to handle:

- :py:class:`FormatError`: the byte stream does not follow the file structure.
- :py:class:`UnsupportedFeatureError`: a depth, compression or color mode
  combination the codec does not implement.
- :py:class:`ResourceBudgetError`: decoding would exceed the memory budget
  given by the caller.

Recoverable conditions, such as unknown resources or additional-info keys,
are never raised; they are kept as opaque payloads and logged.
"""


class PSDCodecError(Exception):
    """Base class of all psd-codec errors."""


class FormatError(PSDCodecError, ValueError):
    """Malformed or truncated PSD/PSB structure."""


class UnsupportedFeatureError(PSDCodecError, NotImplementedError):
    """Disallowed depth, compression or color mode combination."""


class ResourceBudgetError(PSDCodecError, MemoryError):
    """Estimated decoded footprint exceeds the caller supplied budget."""

    def __init__(self, required: int, budget: int) -> None:
        super().__init__(
            "Decoding requires about %d bytes, budget is %d bytes" % (required, budget)
        )
        self.required = required
        self.budget = budget
