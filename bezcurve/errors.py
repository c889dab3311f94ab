class CurveError(Exception):
    """Base class for errors raised by curve operations."""

class InvalidIndexError(CurveError, IndexError):
    """A point index outside [0, point_count)."""

class DegenerateSelectionError(CurveError, ValueError):
    """A selection of points that an operation cannot be applied to: too few
    points, non-adjacent points where adjacency is required, or an empty curve."""

class StaleReferenceError(CurveError, LookupError):
    """A CurvePoint that is not (or is no longer) part of the curve."""

class MissingPointError(CurveError):
    """The curve's point list contains empty entries; call
    Curve.clean_up_null_points() before editing it."""
