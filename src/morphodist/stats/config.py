"""Configuration dataclasses for the statistics and plotting stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass
class StatsConfig:
    """Configuration for per-feature distribution statistics.

    Attributes:
        alpha: Adjusted p-value threshold below which a feature is multimodal (default: 0.05)
        skew_threshold: Skewness above which a unimodal feature is skewed (default: 2.0)
            Compared against raw (signed) skewness, so only right tails qualify.
        report_alpha: Adjusted p-value threshold for the multimodal report table (default: 0.25)
        fdr_method: Multiple-testing correction passed to statsmodels (default: fdr_bh)
        min_n: Fewest finite values the dip test is run on (default: 4)
    """

    alpha: float = 0.05
    skew_threshold: float = 2.0
    report_alpha: float = 0.25
    fdr_method: str = "fdr_bh"
    min_n: int = 4

    def __post_init__(self):
        """Validate configuration."""
        if self.alpha <= 0 or self.alpha >= 1:
            raise ValueError(f"alpha must be in (0, 1), got {self.alpha}")

        if self.report_alpha <= 0 or self.report_alpha >= 1:
            raise ValueError(f"report_alpha must be in (0, 1), got {self.report_alpha}")

        if self.min_n < 4:
            raise ValueError(f"min_n must be >= 4, got {self.min_n}")

        valid_methods = ["fdr_bh", "fdr_by", "bonferroni", "holm"]
        if self.fdr_method not in valid_methods:
            raise ValueError(f"fdr_method must be one of {valid_methods}, got {self.fdr_method}")


@dataclass
class VizConfig:
    """Configuration for per-feature histograms.

    Attributes:
        bins: Number of histogram bins (default: 50)
        figsize: Figure size in inches (default: 5 x 5)
        fig_dpi: Figure DPI (default: 100)
        histogram_dirname: Directory under the output directory for PNGs
        enabled: Whether histograms are rendered at all
    """

    bins: int = 50
    figsize: Tuple[float, float] = (5.0, 5.0)
    fig_dpi: int = 100
    histogram_dirname: str = "feature_histograms"
    enabled: bool = True

    def __post_init__(self):
        """Validate configuration."""
        self.figsize = tuple(float(v) for v in self.figsize)

        if self.bins < 1:
            raise ValueError(f"bins must be >= 1, got {self.bins}")

        if len(self.figsize) != 2 or min(self.figsize) <= 0:
            raise ValueError(f"figsize must be two positive numbers, got {self.figsize}")
