"""Multiple-testing correction and feature classification."""

from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd
from statsmodels.stats.multitest import multipletests

# Column order of the feature statistics table
STATS_COLUMNS = ["feature", "p_value", "p_adj", "skewness", "is_multimodal", "is_skewed"]

MULTIMODAL = "multimodal"
SKEWED = "skewed"
SYMMETRIC = "symmetric"
DEGENERATE = "degenerate"
CLASS_LABELS = [MULTIMODAL, SKEWED, SYMMETRIC, DEGENERATE]


def adjust_pvalues(pvals, method: str = "fdr_bh") -> np.ndarray:
    """Adjust p-values for multiple comparisons.

    Only finite p-values enter the correction, so NaN entries (degenerate
    features) neither count as tests nor receive an adjusted value.

    Args:
        pvals: Raw p-values
        method: statsmodels multipletests method (default: fdr_bh)

    Returns:
        Adjusted p-values aligned with the input, NaN where the input was NaN
    """
    pvals = np.asarray(pvals, dtype=float)
    mask = np.isfinite(pvals)
    p_adj = np.full_like(pvals, np.nan)

    if mask.sum() > 0:
        _, p_adj_subset, _, _ = multipletests(pvals[mask], method=method)
        p_adj[mask] = p_adj_subset

    return p_adj


def classify_features(
    table: pd.DataFrame, alpha: float = 0.05, skew_threshold: float = 2.0
) -> pd.DataFrame:
    """Add is_multimodal and is_skewed flags.

    Args:
        table: DataFrame with p_adj and skewness columns
        alpha: Adjusted p-value threshold for multimodality
        skew_threshold: Raw skewness above which a unimodal feature is skewed

    Returns:
        Copy of table with:
            is_multimodal: bool, p_adj < alpha (False when p_adj is NaN)
            is_skewed: nullable boolean, NA when multimodal, False when p_adj
                is NaN, otherwise skewness > skew_threshold (False when
                skewness is NaN)
    """
    out = table.copy()
    is_multimodal = (out["p_adj"] < alpha).fillna(False).astype(bool)
    skewed = (out["skewness"] > skew_threshold).fillna(False).astype("boolean")
    skewed[out["p_adj"].isna().to_numpy()] = False
    skewed[is_multimodal.to_numpy()] = pd.NA

    out["is_multimodal"] = is_multimodal
    out["is_skewed"] = skewed
    return out


def classification_label(
    p_adj: float, is_multimodal: bool, is_skewed: Optional[bool]
) -> str:
    """Single-word class of one feature row."""
    if pd.isna(p_adj):
        return DEGENERATE
    if is_multimodal:
        return MULTIMODAL
    if not pd.isna(is_skewed) and bool(is_skewed):
        return SKEWED
    return SYMMETRIC


def classification_labels(table: pd.DataFrame) -> pd.Series:
    """Class label for every row of a classified table, indexed like the table."""
    labels = [
        classification_label(p, m, s)
        for p, m, s in zip(table["p_adj"], table["is_multimodal"], table["is_skewed"])
    ]
    return pd.Series(labels, index=table.index, name="classification")
