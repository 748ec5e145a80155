"""
Ordered bin classification.

This module defines `OrderedBins`, an immutable configuration that maps a
real-valued input to the 0-based index of the bin it falls into. Bins are the
intervals between consecutive, strictly increasing boundaries. A tolerance
("halo") on each side of the domain folds nearly-in-range values into the
first/last bin, and values further out either raise or map to a configurable
sentinel index.
"""

import logging
import numbers
from bisect import bisect_left, bisect_right
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Iterable, TypeVar

import numpy as np
from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from ordered_binning.core.exceptions import (
    AboveRangeError,
    BelowRangeError,
    ConfigurationError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

Number = int | float


def _check_real(v: Any) -> Any:
    """Accept real numbers as given, so exact types stay exact."""
    if isinstance(v, np.generic):
        v = v.item()
    if isinstance(v, bool) or not isinstance(v, (numbers.Real, Decimal)):
        raise ValueError(f"Expected a real number, got {v!r}.")
    if v != v:
        raise ValueError("Expected a real number, got NaN.")
    return v


def _check_halo(v: Any) -> Any:
    v = _check_real(v)
    if v < 0:
        raise ValueError(f"Halo must be a non-negative number, got {v!r}.")
    return v


Boundary = Annotated[Any, AfterValidator(_check_real)]
Halo = Annotated[Any, AfterValidator(_check_halo)]

FIRST_BIN = 0

# Boundary lists longer than this are abbreviated by `describe`.
_DESCRIBE_MAX_BOUNDARIES = 8


class EdgePolicy(str, Enum):
    """
    Tie-breaking rule for values exactly equal to an interior boundary.

    RIGHT puts the value in the bin whose lower edge is that boundary, LEFT in
    the bin whose upper edge is that boundary.
    """

    LEFT = "left"
    RIGHT = "right"


# =============================================================================
# AUXILIARY FUNCTIONS
# =============================================================================


def default_halo(span: Any) -> Number:
    """
    Compute the default halo for a domain of the given width.

    Floating point spans get `sqrt(spacing(|span|))`, a tiny fraction of the
    representable precision at that magnitude, which absorbs rounding noise at
    the edges of the domain. Exact spans (integers, fractions) need no
    tolerance and get 0, as do a missing span and an infinite one.

    Args:
        span (Any): Difference between the highest and lowest boundary, or None.

    Returns:
        Number: A non-negative tolerance.
    """
    if span is None:
        return 0
    if not np.issubdtype(np.asarray(span).dtype, np.floating):
        return 0
    if not np.isfinite(span):
        return 0
    return np.sqrt(np.spacing(np.abs(span))).item()


def make_increasing(values: Iterable[T]) -> list[T]:
    """
    Keep the strictly increasing subsequence of `values`, first occurrence wins.

    Elements are scanned left to right and kept only when greater than the last
    kept element. The input is not sorted, so unsorted input should be sorted
    first if the result is meant to serve as bin boundaries.

    Args:
        values (Iterable[T]): Any iterable of mutually comparable values.

    Returns:
        list[T]: A new list; the input is never modified.
    """
    result: list[T] = []
    for value in values:
        if not result or value > result[-1]:  # type: ignore[operator]
            result.append(value)
    return result


def _as_boundary_list(values: Any) -> list:
    """Flatten arrays, Series, ranges and iterables into plain Python numbers."""
    if hasattr(values, "tolist"):
        values = values.tolist()
    return [v.item() if isinstance(v, np.generic) else v for v in values]


def _span(boundaries: Any, values: list) -> Any:
    """Span of the boundaries, in the input's own dtype for arrays and Series."""
    if not values:
        return None
    try:
        if hasattr(boundaries, "dtype"):
            ends = np.asarray(boundaries).ravel()
            return ends[-1] - ends[0]
        return values[-1] - values[0]
    except TypeError:
        # non-numeric boundaries are rejected by model validation
        return None


# =============================================================================
# CONFIGURATION
# =============================================================================


class OrderedBins(BaseModel):
    """
    Immutable bin configuration over a strictly increasing boundary sequence.

    N boundaries define N - 1 bins numbered 0 .. N - 2. Let `mi` and `ma` be
    the first and last boundary and `i` the index returned by `classify(x)`:

    - if `mi <= x <= ma`, then `boundaries[i] <= x <= boundaries[i + 1]`; the
      upper inequality is strict when `x < ma` under the RIGHT edge policy, the
      lower one strict when `x > mi` under LEFT.
    - if `mi - halo_below <= x < mi`, `i == 0`; if `ma < x <= ma + halo_above`,
      `i == N - 2`.
    - beyond that, `BelowRangeError` / `AboveRangeError` is raised when the
      side's error flag is set, otherwise `bin_below` / `bin_above` is returned.

    Build instances with `ordered_bins`, which fills in the defaults that
    depend on the boundaries and reports every problem as ConfigurationError.

    Examples:
        >>> ob = ordered_bins([0, 1, 2, 3], halo_above=0.5)
        >>> ob.classify(0), ob.classify(1), ob.classify(3.5)
        (0, 1, 2)
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    boundaries: tuple[Boundary, ...] = Field(
        description="Strictly increasing bin boundaries, at least two."
    )
    edge: EdgePolicy = Field(
        default=EdgePolicy.RIGHT,
        description="Which bin owns a value equal to an interior boundary.",
    )
    halo_below: Halo = Field(description="Tolerance below the lowest boundary.")
    halo_above: Halo = Field(description="Tolerance above the highest boundary.")
    error_below: bool = Field(
        default=True, description="Raise for values below the lower halo."
    )
    error_above: bool = Field(
        default=True, description="Raise for values above the upper halo."
    )
    bin_below: int = Field(
        description="Index returned below the lower halo when not raising."
    )
    bin_above: int = Field(
        description="Index returned above the upper halo when not raising."
    )

    @field_validator("edge", mode="before")
    @classmethod
    def normalize_edge(cls, v: Any) -> Any:
        """Accept edge policy names case-insensitively."""
        if isinstance(v, str) and not isinstance(v, EdgePolicy):
            return v.lower()
        return v

    @field_validator("boundaries", mode="before")
    @classmethod
    def coerce_boundaries(cls, v: Any) -> Any:
        """Convert numpy arrays, pandas Series and ranges to plain numbers."""
        if isinstance(v, (str, bytes)):
            return v
        try:
            return _as_boundary_list(v)
        except TypeError:
            return v

    @model_validator(mode="after")
    def check_strictly_increasing(self) -> "OrderedBins":
        """
        Verify the boundary sequence is long enough and strictly increasing.

        Raises:
            ValueError: If there are fewer than two boundaries or any adjacent
                pair is out of order or repeated, or a halo cannot be combined
                with the boundary type.
        """
        boundaries = self.boundaries
        if len(boundaries) < 2:
            raise ValueError(
                f"At least two boundaries are required, got {len(boundaries)}."
            )
        for i in range(len(boundaries) - 1):
            lower, upper = boundaries[i], boundaries[i + 1]
            if not lower < upper:
                raise ValueError(
                    f"Boundaries must be strictly increasing, but "
                    f"boundaries[{i}] = {lower!r} is not less than "
                    f"boundaries[{i + 1}] = {upper!r}. Sort the values and "
                    f"filter them with make_increasing() first."
                )
        try:
            self.lower_limit, self.upper_limit
        except TypeError as e:
            raise ValueError(
                f"Halos {self.halo_below!r}/{self.halo_above!r} cannot be combined "
                f"with boundaries of type {type(boundaries[0]).__name__}."
            ) from e
        return self

    @classmethod
    def symmetric(
        cls, boundaries: Any, *, strict: bool = True, tolerance: Number = 0
    ) -> "OrderedBins":
        """
        Build bins with one error flag and one tolerance for both sides.

        Sentinels stay at their defaults, one step outside the valid bins.

        Args:
            boundaries (Any): Strictly increasing boundary values.
            strict (bool): Raise for out-of-range values on either side.
            tolerance (Number): Halo applied below and above.

        Returns:
            OrderedBins: The validated configuration.
        """
        return ordered_bins(
            boundaries,
            halo_below=tolerance,
            halo_above=tolerance,
            error_below=strict,
            error_above=strict,
        )

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def first_bin(self) -> int:
        return FIRST_BIN

    @property
    def last_bin(self) -> int:
        return len(self.boundaries) - 2

    @property
    def n_bins(self) -> int:
        return len(self.boundaries) - 1

    @property
    def lower_limit(self) -> Number:
        """Lowest value that classifies into a valid bin."""
        return self.boundaries[0] - self.halo_below

    @property
    def upper_limit(self) -> Number:
        """Highest value that classifies into a valid bin."""
        return self.boundaries[-1] + self.halo_above

    def bin_range(self) -> tuple[int, int]:
        """Inclusive (low, high) range of indices `classify` can return."""
        low = self.first_bin if self.error_below else min(self.first_bin, self.bin_below)
        high = self.last_bin if self.error_above else max(self.last_bin, self.bin_above)
        return low, high

    def bin_edges(self, index: int) -> tuple[Number, Number]:
        """
        Return the (lower, upper) boundaries of a valid bin.

        Raises:
            IndexError: If `index` is a sentinel or otherwise not a bin.
        """
        if not self.first_bin <= index <= self.last_bin:
            raise IndexError(
                f"Bin index {index} is outside {self.first_bin}..{self.last_bin}."
            )
        return self.boundaries[index], self.boundaries[index + 1]

    # -------------------------------------------------------------------------
    # Classification
    # -------------------------------------------------------------------------

    def classify(self, x: Any) -> int:
        """
        Return the index of the bin containing `x`.

        Args:
            x (Any): A value comparable with the boundaries.

        Raises:
            BelowRangeError: If `x` is below the lower limit and `error_below`.
            AboveRangeError: If `x` is above the upper limit and `error_above`.
            ValueError: If `x` is NaN.

        Returns:
            int: A bin index, or a sentinel for out-of-range values.
        """
        if x != x:
            raise ValueError("Cannot classify NaN: it is not an ordered value.")

        boundaries = self.boundaries
        mi, ma = boundaries[0], boundaries[-1]

        if x <= mi:
            if x >= mi - self.halo_below:
                return self.first_bin
            if self.error_below:
                raise BelowRangeError(x, self.lower_limit)
            return self.bin_below

        if x >= ma:
            if x <= ma + self.halo_above:
                return self.last_bin
            if self.error_above:
                raise AboveRangeError(x, self.upper_limit)
            return self.bin_above

        if self.edge is EdgePolicy.RIGHT:
            return bisect_right(boundaries, x) - 1
        return bisect_left(boundaries, x) - 1

    def classify_many(self, values: Any) -> np.ndarray:
        """
        Vectorised `classify` over an array-like of values.

        Comparisons are carried out in float64. When several values are out of
        range on an erroring side, the error reports the first of them, with
        the lower side checked before the upper one.

        Args:
            values (Any): Array-like of numbers, any shape.

        Raises:
            BelowRangeError: If any value is below the lower limit and
                `error_below`.
            AboveRangeError: If any value is above the upper limit and
                `error_above`.
            ValueError: If any value is NaN.

        Returns:
            np.ndarray: int64 bin indices with the shape of `values`.
        """
        x = np.asarray(values, dtype=np.float64)
        if np.isnan(x).any():
            raise ValueError("Cannot classify NaN: it is not an ordered value.")

        boundaries = np.asarray(self.boundaries, dtype=np.float64)
        mi, ma = boundaries[0], boundaries[-1]
        lower_limit = float(self.lower_limit)
        upper_limit = float(self.upper_limit)

        too_low = x < lower_limit
        too_high = x > upper_limit
        if self.error_below and too_low.any():
            raise BelowRangeError(x[too_low].flat[0].item(), self.lower_limit)
        if self.error_above and too_high.any():
            raise AboveRangeError(x[too_high].flat[0].item(), self.upper_limit)

        side = "right" if self.edge is EdgePolicy.RIGHT else "left"
        result = np.searchsorted(boundaries, x, side=side).astype(np.int64) - 1
        result = np.where(x <= mi, self.first_bin, result)
        result = np.where(x >= ma, self.last_bin, result)
        result = np.where(too_low, self.bin_below, result)
        result = np.where(too_high, self.bin_above, result)
        return result.astype(np.int64)

    def __str__(self) -> str:
        return describe(self)


# =============================================================================
# FACTORY & FREE FUNCTIONS
# =============================================================================


def ordered_bins(
    boundaries: Any,
    edge: EdgePolicy | str = EdgePolicy.RIGHT,
    *,
    halo_below: Number | None = None,
    halo_above: Number | None = None,
    error_below: bool = True,
    error_above: bool = True,
    bin_below: int | None = None,
    bin_above: int | None = None,
) -> OrderedBins:
    """
    Validate a bin configuration and build an `OrderedBins`.

    Args:
        boundaries (Any): Strictly increasing values (list, tuple, range,
            numpy array, pandas Series, ...). At least two are required.
        edge (EdgePolicy | str): Tie-breaking rule, "right" by default.
        halo_below (Number | None): Tolerance below the lowest boundary.
            Defaults to `default_halo` of the boundary span.
        halo_above (Number | None): Tolerance above the highest boundary.
            Defaults to `halo_below`.
        error_below (bool): Raise for values below the lower halo.
        error_above (bool): Raise for values above the upper halo.
        bin_below (int | None): Sentinel for low values when not raising.
            Defaults to one below the first bin.
        bin_above (int | None): Sentinel for high values when not raising.
            Defaults to one above the last bin.

    Raises:
        ConfigurationError: If the edge policy is unknown, a halo is negative,
            or the boundaries are too few or not strictly increasing.

    Returns:
        OrderedBins: The validated, immutable configuration.
    """
    if isinstance(boundaries, (str, bytes)):
        raise ConfigurationError("Boundaries must be a sequence of numbers, got a string.")
    try:
        values = _as_boundary_list(boundaries)
    except TypeError as e:
        raise ConfigurationError(
            f"Boundaries must be a sequence of numbers, got {type(boundaries).__name__}."
        ) from e

    if halo_below is None:
        halo_below = default_halo(_span(boundaries, values))
    if halo_above is None:
        halo_above = halo_below
    if bin_below is None:
        bin_below = FIRST_BIN - 1
    if bin_above is None:
        bin_above = len(values) - 1

    try:
        bins = OrderedBins(
            boundaries=values,
            edge=edge,
            halo_below=halo_below,
            halo_above=halo_above,
            error_below=error_below,
            error_above=error_above,
            bin_below=bin_below,
            bin_above=bin_above,
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid bin configuration: {e}") from e

    logger.debug(
        "Built %d bins over [%r, %r] (edge=%s, halo=%r/%r)",
        bins.n_bins,
        bins.boundaries[0],
        bins.boundaries[-1],
        bins.edge.value,
        bins.halo_below,
        bins.halo_above,
    )
    return bins


def bin_range(bins: OrderedBins) -> tuple[int, int]:
    """
    Inclusive range of indices that `bins.classify` can return.

    An erroring side contributes only its valid bin, a non-erroring side also
    its sentinel.

    Args:
        bins (OrderedBins): The configuration to inspect.

    Returns:
        tuple[int, int]: (low, high), both inclusive.
    """
    return bins.bin_range()


def bin_edges(bins: OrderedBins, index: int) -> tuple[Number, Number]:
    """Return the (lower, upper) boundaries of bin `index`."""
    return bins.bin_edges(index)


def _describe_side(name: str, halo: Number, error: bool, sentinel: int, limit: Number) -> str:
    outcome = "error" if error else f"bin {sentinel}"
    return f"  {name}: halo {halo!r}, {outcome} beyond {limit!r}"


def describe(bins: OrderedBins) -> str:
    """
    Render a configuration as deterministic, human-readable text.

    Args:
        bins (OrderedBins): The configuration to render.

    Returns:
        str: Multi-line description of boundaries, edge policy and both sides.
    """
    boundaries = [str(b) for b in bins.boundaries]
    if len(boundaries) > _DESCRIBE_MAX_BOUNDARIES:
        boundaries = boundaries[:3] + ["..."] + boundaries[-3:]

    return "\n".join(
        [
            f"OrderedBins: {bins.n_bins} bins, {bins.edge.value} edge",
            f"  boundaries: {', '.join(boundaries)}",
            _describe_side(
                "below", bins.halo_below, bins.error_below, bins.bin_below, bins.lower_limit
            ),
            _describe_side(
                "above", bins.halo_above, bins.error_above, bins.bin_above, bins.upper_limit
            ),
        ]
    )
