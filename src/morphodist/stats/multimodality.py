"""Multimodality testing with Hartigan's dip test."""

from __future__ import annotations

import logging
from typing import List, Tuple

import diptest
import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def dip_test_safe(x: np.ndarray, min_n: int = 4) -> Tuple[float, float, int]:
    """Perform Hartigan's dip test with safe handling.

    Args:
        x: Array of values
        min_n: Fewest finite values the test is run on

    Returns:
        Tuple of (dip_statistic, p_value, n_valid)

    Notes:
        - Non-finite values are dropped before testing
        - Returns (nan, nan, n) if n < min_n or the values are constant
    """
    x = np.asarray(x, dtype=float)
    x = x[np.isfinite(x)]
    n = len(x)

    if n < min_n:
        return np.nan, np.nan, n

    # A single repeated value has no distribution shape to test
    if np.ptp(x) == 0:
        return np.nan, np.nan, n

    dip, p = diptest.diptest(x)
    return float(dip), float(p), int(n)


def dip_test_all_features(
    df: pd.DataFrame, features: List[str], min_n: int = 4
) -> pd.DataFrame:
    """Run the dip test on every feature column.

    Args:
        df: Feature table
        features: Feature column names
        min_n: Fewest finite values the test is run on

    Returns:
        DataFrame with columns: feature, n, dip, p_value
        Degenerate features carry NaN dip and p_value.
    """
    rows = []
    for feat in features:
        dip, p, n = dip_test_safe(df[feat].to_numpy(), min_n=min_n)
        if np.isnan(p):
            logger.debug(f"Dip test skipped for degenerate feature {feat} (n={n})")
        rows.append({"feature": feat, "n": n, "dip": dip, "p_value": p})

    return pd.DataFrame(rows, columns=["feature", "n", "dip", "p_value"])
