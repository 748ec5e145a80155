"""
Utilities for binning tabular data.

This module applies an `OrderedBins` configuration to a DataFrame column,
producing integer bin labels aligned with the source rows.
"""

import logging

import pandas as pd

from ordered_binning.core.exceptions import DataValidationError
from ordered_binning.core.ordered_bins import OrderedBins

logger = logging.getLogger(__name__)


def assign_bins(
    df: pd.DataFrame, col_name: str, bins: OrderedBins, new_col: str | None = None
) -> pd.Series:
    """
    Classify a numerical column into ordered bins.

    Args:
        df (pd.DataFrame): The source DataFrame.
        col_name (str): The numerical column to bin.
        bins (OrderedBins): The bin configuration to apply.
        new_col (str | None): Name of the returned Series. Defaults to
            "<col_name>_bin".

    Raises:
        DataValidationError: If the column is missing.
        BelowRangeError: If a value is below range and the lower side errors.
        AboveRangeError: If a value is above range and the upper side errors.

    Returns:
        pd.Series: int64 bin indices, indexed like `df`.
    """
    if col_name not in df.columns:
        raise DataValidationError(f"Missing required column: '{col_name}'")

    indices = bins.classify_many(df[col_name].to_numpy(dtype="float64"))
    logger.debug("Assigned %d rows of '%s' to bins", len(indices), col_name)
    return pd.Series(indices, index=df.index, name=new_col or f"{col_name}_bin")
