"""Per-feature histograms."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List
import warnings

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from morphodist.errors import ExportError
from morphodist.stats.config import VizConfig

logger = logging.getLogger(__name__)

# Suppress seaborn/pandas FutureWarnings
warnings.filterwarnings("ignore", category=FutureWarning, module="seaborn")
warnings.filterwarnings("ignore", category=FutureWarning, module="pandas")


def histogram_filename(feature: str) -> str:
    """PNG file name for a feature; path separators are replaced."""
    return feature.replace("/", "_").replace("\\", "_") + ".png"


def plot_feature_histogram(values: np.ndarray, feature: str, path: Path, config: VizConfig) -> Path:
    """Render one histogram of a feature's sampled values.

    Args:
        values: Finite feature values
        feature: Feature name, used as title and x label
        path: Output PNG path
        config: VizConfig object

    Returns:
        The written path
    """
    fig, ax = plt.subplots(figsize=config.figsize, dpi=config.fig_dpi)
    try:
        sns.histplot(x=values, bins=config.bins, ax=ax, color="steelblue", edgecolor="white")
        ax.set_title(feature, fontsize=8)
        ax.set_xlabel(feature, fontsize=8)
        ax.set_ylabel("Cells")
        ax.grid(axis="y", alpha=0.2)
        fig.tight_layout()
        fig.savefig(path)
    finally:
        plt.close(fig)
    return path


def plot_feature_histograms(
    df: pd.DataFrame, features: List[str], outdir: Path, config: VizConfig
) -> Dict[str, Path]:
    """Create one histogram PNG per feature.

    Args:
        df: Feature table
        features: Feature column names
        outdir: Histogram directory, created if absent
        config: VizConfig object

    Returns:
        Dictionary mapping feature -> PNG path; features without any finite
        value are skipped

    Raises:
        ExportError: If the directory or an image cannot be written
    """
    outdir = Path(outdir)
    try:
        outdir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExportError(f"Could not create histogram directory {outdir}: {e}", path=str(outdir)) from e

    outputs = {}
    for feat in features:
        values = pd.to_numeric(df[feat], errors="coerce").to_numpy(dtype=float)
        values = values[np.isfinite(values)]
        if len(values) == 0:
            logger.warning(f"No finite values for {feat}; histogram skipped")
            continue

        path = outdir / histogram_filename(feat)
        try:
            outputs[feat] = plot_feature_histogram(values, feat, path, config)
        except OSError as e:
            raise ExportError(f"Could not write histogram {path}: {e}", path=str(path)) from e

    logger.info(f"Wrote {len(outputs)} histogram(s) to {outdir}")
    return outputs
