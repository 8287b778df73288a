"""Summary tables over the feature statistics table."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from datetime import datetime

import pandas as pd

from morphodist.stats.classify import CLASS_LABELS, classification_labels


def summarize_classes(table: pd.DataFrame) -> pd.DataFrame:
    """Count features per classification.

    Returns:
        DataFrame with columns: classification, n_features
        Every class is listed, including those with zero features.
    """
    labels = classification_labels(table)
    counts = labels.value_counts().reindex(CLASS_LABELS, fill_value=0)
    return pd.DataFrame(
        {"classification": counts.index, "n_features": counts.to_numpy(dtype=int)}
    )


def top_multimodal(table: pd.DataFrame, report_alpha: float = 0.25) -> pd.DataFrame:
    """Features with p_adj < report_alpha, most significant first."""
    hits = table.loc[table["p_adj"] < report_alpha]
    return hits.sort_values(["p_adj", "feature"], kind="mergesort").reset_index(drop=True)


def top_skewed(table: pd.DataFrame, skew_threshold: float = 2.0) -> pd.DataFrame:
    """Features with |skewness| > skew_threshold, largest magnitude first.

    The ranking uses absolute skewness, so strongly left-tailed features are
    listed here even though classification only flags right tails. Degenerate
    features are left out.
    """
    magnitude = table["skewness"].abs()
    keep = (magnitude > skew_threshold) & table["p_adj"].notna()
    hits = table.loc[keep].assign(abs_skewness=magnitude)
    hits = hits.sort_values(["abs_skewness", "feature"], ascending=[False, True], kind="mergesort")
    return hits.drop(columns="abs_skewness").reset_index(drop=True)


def degenerate_features(table: pd.DataFrame) -> List[str]:
    """Features whose dip test was skipped."""
    return table.loc[table["p_value"].isna(), "feature"].tolist()


def build_run_manifest(
    batch_id: str,
    plate_id: str,
    seed: int,
    images_per_well: int,
    frac_cells_per_image: float,
    alpha: float,
    skew_threshold: float,
    report_alpha: float,
    n_images: int,
    n_objects: int,
    n_features: int,
    extra: Optional[Dict[str, Any]] = None,
) -> pd.DataFrame:
    """Build run manifest table.

    Returns:
        DataFrame with metadata about the analysis run
    """
    from morphodist import __version__

    rows = [
        {"parameter": "batch_id", "value": batch_id},
        {"parameter": "plate_id", "value": plate_id},
        {"parameter": "timestamp", "value": datetime.now().strftime("%Y-%m-%d %H:%M:%S")},
        {"parameter": "seed", "value": seed},
        {"parameter": "images_per_well", "value": images_per_well},
        {"parameter": "frac_cells_per_image", "value": frac_cells_per_image},
        {"parameter": "alpha", "value": alpha},
        {"parameter": "skew_threshold", "value": skew_threshold},
        {"parameter": "report_alpha", "value": report_alpha},
        {"parameter": "n_images", "value": n_images},
        {"parameter": "n_objects", "value": n_objects},
        {"parameter": "n_features", "value": n_features},
        {"parameter": "package_version", "value": __version__},
    ]

    for key, value in (extra or {}).items():
        rows.append({"parameter": key, "value": value})

    return pd.DataFrame(rows, columns=["parameter", "value"])
