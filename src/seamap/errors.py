"""
Exception types raised by the seamap rendering pipeline.

Fatal errors abort a render before any output is written. DomainError is the
one recoverable condition: offending cells are normally healed to no-data and
the error is only raised when a transform runs in strict mode.
"""


class SeaMapError(Exception):
    """Base class for all seamap errors."""

    pass


class InputNotFoundError(SeaMapError, FileNotFoundError):
    """Raised when a required input file does not exist."""

    pass


class VariableNotFoundError(SeaMapError, KeyError):
    """Raised when a named variable/sub-dataset is absent from a raster file."""

    def __str__(self):
        # KeyError quotes its message; keep it readable
        return str(self.args[0]) if self.args else ""


class EmptyResultError(SeaMapError):
    """Raised when an operation leaves no data to work with (e.g. disjoint crop)."""

    pass


class DomainError(SeaMapError, ArithmeticError):
    """Raised when a numeric transform produces non-finite values (strict mode only)."""

    pass


class UnsupportedCRSError(SeaMapError):
    """Raised when a coordinate reference system cannot be resolved."""

    pass
