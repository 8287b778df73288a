"""Sample skewness."""

from __future__ import annotations

from typing import List

import numpy as np
import pandas as pd
from scipy import stats


def skewness_safe(x: np.ndarray) -> float:
    """Bias-adjusted Fisher-Pearson skewness of the finite values.

    Returns NaN for fewer than 3 finite values or constant values.
    """
    x = np.asarray(x, dtype=float)
    x = x[np.isfinite(x)]

    if len(x) < 3 or np.ptp(x) == 0:
        return np.nan

    return float(stats.skew(x, bias=False))


def skewness_all_features(df: pd.DataFrame, features: List[str]) -> pd.DataFrame:
    """Skewness per feature column; columns: feature, skewness."""
    rows = [{"feature": feat, "skewness": skewness_safe(df[feat].to_numpy())} for feat in features]
    return pd.DataFrame(rows, columns=["feature", "skewness"])
