"""Statistics subsystem for feature distribution profiling.

This module provides:

- Multimodality testing (Hartigan's dip test)
- Bias-adjusted sample skewness
- Benjamini-Hochberg correction and feature classification
- Summary tables, a statistics CSV and per-feature histograms

Public API:
-----------
from morphodist.stats.api import run_analysis, compute_feature_statistics
"""

from morphodist.stats.config import StatsConfig, VizConfig
from morphodist.stats.classify import adjust_pvalues, classify_features, STATS_COLUMNS

__all__ = ["StatsConfig", "VizConfig", "adjust_pvalues", "classify_features", "STATS_COLUMNS"]
