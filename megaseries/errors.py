"""Exception taxonomy for chart operations.

All errors raised by ``megaseries`` derive from :class:`MegaSeriesError` and
from the builtin a caller would naturally catch for the same situation, so
``except ValueError`` keeps working for code that does not know this package.

Degenerate geometry (zero-width panels, empty charts, zero-length windows) is
clamped instead of raised; see :mod:`megaseries.window` and
:mod:`megaseries.scales`.
"""

from __future__ import annotations


class MegaSeriesError(Exception):
    """Base class for all chart errors."""


class PreconditionError(MegaSeriesError, ValueError):
    """An operation was rejected before it mutated any state."""


class SeriesLimitError(PreconditionError):
    """Too many series were added without an explicit stroke colour."""

    def __init__(self, limit: int) -> None:
        self.limit = int(limit)
        super().__init__(
            f"Can't add more than {self.limit} series with the default color scheme; "
            "pass style=SeriesStyle(stroke_color=...) to add more."
        )


class AnnotationOrderError(PreconditionError):
    """Annotations were attached to a series that has no points yet."""


class MalformedSeriesError(MegaSeriesError, ValueError):
    """Point data is unsorted, non-numeric or has the wrong shape."""


__all__ = [
    "AnnotationOrderError",
    "MalformedSeriesError",
    "MegaSeriesError",
    "PreconditionError",
    "SeriesLimitError",
]
