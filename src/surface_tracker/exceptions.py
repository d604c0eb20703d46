"""
Custom exceptions for the surface tracker.

These exceptions separate malformed sensor input (rejected at the
ingestion boundary) from arithmetic edge cases in derived statistics.
"""


class SurfaceTrackerError(Exception):
    """Base class for all surface tracker errors."""
    pass


class ShapeMismatchError(SurfaceTrackerError, ValueError):
    """
    Raised when a matrix does not match the configured grid shape.

    Also raised when two readings with different dimensions are
    combined (averaged, differenced or compared).
    """
    pass


class InvalidWeightError(SurfaceTrackerError, ValueError):
    """
    Raised when a reading's total weight is not a finite number.

    This covers non-numeric cells as well as NaN or infinite values.
    """
    pass


class UndefinedCentroidError(SurfaceTrackerError, ArithmeticError):
    """
    Raised when the centroid of a zero-weight object is requested.

    The object itself remains valid and trackable; only its spatial
    statistics are undefined.
    """
    pass
