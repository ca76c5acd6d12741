# netquality_dash/errors.py
from __future__ import annotations


class NetQualityError(Exception):
    """Base class for every error raised by the dashboard core."""


class DataLoadError(NetQualityError, ValueError):
    """Raw dataset is absent or is not a sequence of record objects."""


class StoreNotLoadedError(NetQualityError, RuntimeError):
    """A RecordStore was read before any dataset was loaded into it."""

    def __init__(self, message: str = "Record store has not been loaded"):
        super().__init__(message)


class InvalidFilterDimensionError(NetQualityError, KeyError):
    """Filter references a dimension the store does not know."""

    def __init__(self, dimension: str, known=()):
        self.dimension = dimension
        self.known = tuple(known)
        msg = f"Unknown filter dimension {dimension!r}"
        if self.known:
            msg += f" (expected one of: {', '.join(self.known)})"
        super().__init__(msg)

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class InvalidSortColumnError(NetQualityError, ValueError):
    """Table sort requested on a column that is not sortable."""
