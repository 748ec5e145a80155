"""
Pydantic model definitions for bin configuration files.

This module provides strict type-validation and 'fail-fast' checks for YAML
bin definitions, so that a malformed file is rejected before any value is
classified.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ordered_binning.core.ordered_bins import (
    EdgePolicy,
    OrderedBins,
    make_increasing as filter_increasing,
    ordered_bins,
)

# =============================================================================
# 1. SHARED LEAVES
# =============================================================================


class RangeSide(BaseModel):
    """Behaviour on one side of the binned domain."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    halo: None | Annotated[float, Field(ge=0)] = Field(
        default=None,
        description="Tolerance beyond the outermost boundary. None selects the default halo.",
    )
    error: bool = Field(
        default=True, description="Raise for values beyond the halo."
    )
    bin: None | int = Field(
        default=None,
        description="Sentinel index returned beyond the halo when not raising.",
    )


# =============================================================================
# 2. THE ROOT SCHEMA
# =============================================================================


class BinsConfigSchema(BaseModel):
    """The root schema of a bins configuration file."""

    model_config = ConfigDict(extra="forbid")

    boundaries: list[int | float] = Field(
        min_length=2, description="Bin boundaries, strictly increasing."
    )
    edge: EdgePolicy = Field(
        default=EdgePolicy.RIGHT,
        description="Which bin owns a value equal to an interior boundary.",
    )
    make_increasing: bool = Field(
        default=False,
        description="Drop values that do not increase before building the bins.",
    )
    below: RangeSide = Field(default_factory=RangeSide)
    above: RangeSide = Field(default_factory=RangeSide)

    @field_validator("edge", mode="before")
    @classmethod
    def normalize_edge(cls, v):
        if isinstance(v, str) and not isinstance(v, EdgePolicy):
            return v.lower()
        return v

    def to_ordered_bins(self) -> OrderedBins:
        """
        Build the validated bins this schema describes.

        An unset upper halo follows the lower one, as in `ordered_bins`.

        Raises:
            ConfigurationError: If the boundaries are not strictly increasing
                (after optional filtering) or any other invariant is violated.

        Returns:
            OrderedBins: The immutable bin configuration.
        """
        boundaries = self.boundaries
        if self.make_increasing:
            boundaries = filter_increasing(boundaries)

        return ordered_bins(
            boundaries,
            self.edge,
            halo_below=self.below.halo,
            halo_above=self.above.halo,
            error_below=self.below.error,
            error_above=self.above.error,
            bin_below=self.below.bin,
            bin_above=self.above.bin,
        )
