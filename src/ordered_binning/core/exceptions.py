"""
Domain-specific exceptions for the ordered binning library.

This module defines a small hierarchy of custom exceptions so callers can
tell configuration mistakes apart from values that fall outside the binned
domain.
"""

# =============================================================================
# BASE
# =============================================================================


class BinningError(Exception):
    """Base class for every error raised by this package."""

    pass


# =============================================================================
# CONSTRUCTION ERRORS
# =============================================================================


class ConfigurationError(BinningError, ValueError):
    """
    Raised when a bin configuration cannot be built.

    Covers invalid edge policies, negative halos, boundary sequences that are
    too short or not strictly increasing, and malformed configuration files.
    """

    pass


class DataValidationError(BinningError):
    """Raised when tabular input lacks the columns needed for binning."""

    pass


# =============================================================================
# CLASSIFICATION ERRORS
# =============================================================================


class OutOfRangeError(BinningError, ValueError):
    """
    Raised when a value falls outside the boundaries extended by the halo.

    Attributes:
        value: The offending value.
        limit: The outermost accepted value on that side (boundary +/- halo).
    """

    side = "outside"

    def __init__(self, value, limit) -> None:
        self.value = value
        self.limit = limit
        super().__init__(f"{value!r} is {self.side} the accepted limit {limit!r}")


class BelowRangeError(OutOfRangeError):
    """Raised for values below the lowest boundary minus the lower halo."""

    side = "below"


class AboveRangeError(OutOfRangeError):
    """Raised for values above the highest boundary plus the upper halo."""

    side = "above"
