"""
morphodist: distribution profiling for single-cell morphological features.

This package provides:
- Metadata loading from barcode/platemap annotation files into the backing store
- Stratified sampling of control-vehicle images and cells
- Feature table assembly from per-object measurement tables
- Dip-test multimodality and skewness classification per feature
- Summary tables, a statistics CSV and per-feature histograms
"""

__version__ = "0.1.0"

from morphodist.config import AnalysisConfig, SamplingConfig
from morphodist.stats.config import StatsConfig, VizConfig
from morphodist.stats.api import run_analysis, export_results, compute_feature_statistics

__all__ = [
    "__version__",
    "AnalysisConfig",
    "SamplingConfig",
    "StatsConfig",
    "VizConfig",
    "run_analysis",
    "export_results",
    "compute_feature_statistics",
]
