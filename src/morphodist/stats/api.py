"""Public API for the feature distribution analysis."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from morphodist.config import AnalysisConfig
from morphodist.data.metadata import load_metadata
from morphodist.errors import ExportError, InputMissingError
from morphodist.features import FeatureSchema, build_feature_table
from morphodist.sampling import SampleResult, StratifiedSampler
from morphodist.stats import reports
from morphodist.stats.classify import STATS_COLUMNS, adjust_pvalues, classify_features
from morphodist.stats.config import StatsConfig
from morphodist.stats.export import write_feature_statistics, write_run_manifest
from morphodist.stats.multimodality import dip_test_all_features
from morphodist.stats.skewness import skewness_all_features
from morphodist.stats.viz import plot_feature_histograms
from morphodist.store import IMAGE_TABLE, MEASUREMENT_TABLES, SQLiteTableRepository, TableRepository

logger = logging.getLogger(__name__)


@dataclass
class FeatureStatistics:
    """Per-feature statistics of one run.

    Attributes:
        table: One row per feature, columns in STATS_COLUMNS order
        detail: table plus n (finite values tested) and dip statistic
        degenerate: Features whose dip test was skipped
    """

    table: pd.DataFrame
    detail: pd.DataFrame
    degenerate: List[str] = field(default_factory=list)

    @property
    def n_features(self) -> int:
        return len(self.table)


@dataclass
class AnalysisResult:
    """Everything a run computed, kept in memory so export can be retried."""

    statistics: FeatureStatistics
    features: pd.DataFrame
    schema: FeatureSchema
    sample: SampleResult
    metadata: pd.DataFrame
    manifest: pd.DataFrame
    outputs: Dict[str, Any] = field(default_factory=dict)


def compute_feature_statistics(
    df: pd.DataFrame, features: Sequence[str], config: Optional[StatsConfig] = None
) -> FeatureStatistics:
    """Test, correct and classify every feature column.

    Args:
        df: Feature table
        features: Feature column names
        config: StatsConfig object (defaults if None)

    Returns:
        FeatureStatistics

    Notes:
        - Degenerate features (constant, or fewer than min_n finite values)
          get NaN p_value and p_adj, are left out of the FDR correction and
          are classified neither multimodal nor skewed.
    """
    config = config or StatsConfig()
    features = list(features)
    if not features:
        raise ValueError("No feature columns to analyse")

    dips = dip_test_all_features(df, features, min_n=config.min_n)
    skews = skewness_all_features(df, features)

    detail = dips.merge(skews, on="feature", how="left")
    detail["p_adj"] = adjust_pvalues(detail["p_value"].to_numpy(), method=config.fdr_method)
    detail = classify_features(detail, alpha=config.alpha, skew_threshold=config.skew_threshold)

    degenerate = reports.degenerate_features(detail)
    if degenerate:
        logger.warning(
            f"{len(degenerate)} degenerate feature(s) skipped by the dip test: "
            f"{', '.join(degenerate[:10])}{' ...' if len(degenerate) > 10 else ''}"
        )

    n_multimodal = int(detail["is_multimodal"].sum())
    logger.info(
        f"Tested {len(features) - len(degenerate)} feature(s); {n_multimodal} multimodal "
        f"at adjusted p < {config.alpha}"
    )

    table = detail[STATS_COLUMNS].reset_index(drop=True)
    detail = detail[STATS_COLUMNS + ["n", "dip"]].reset_index(drop=True)
    return FeatureStatistics(table=table, detail=detail, degenerate=degenerate)


def export_results(result: AnalysisResult, config: AnalysisConfig) -> Dict[str, Any]:
    """Write the statistics CSV, the run manifest and, if enabled, the histograms.

    Can be called again on the same result after an ExportError.

    Returns:
        Dictionary with output paths
    """
    outputs: Dict[str, Any] = {}
    outputs["stats_csv"] = write_feature_statistics(result.statistics.table, config.stats_csv_path)
    outputs["manifest_csv"] = write_run_manifest(result.manifest, config.manifest_csv_path)

    if config.viz.enabled:
        outputs["histograms"] = plot_feature_histograms(
            result.features,
            list(result.schema.feature_columns),
            config.histogram_dir,
            config.viz,
        )
        outputs["histogram_dir"] = config.histogram_dir
    else:
        outputs["histograms"] = {}
        outputs["histogram_dir"] = None

    result.outputs = outputs
    return outputs


def _analyse(repo: TableRepository, config: AnalysisConfig) -> AnalysisResult:
    # Fail on absent inputs before anything is written
    repo.require_tables([IMAGE_TABLE, *MEASUREMENT_TABLES])

    logger.info("[1/5] Loading plate metadata...")
    metadata = load_metadata(repo, config)

    logger.info(
        f"[2/5] Sampling {config.sampling.images_per_well} image(s) per control well and "
        f"{config.sampling.frac_cells_per_image:g} of cells per image (seed {config.sampling.seed})..."
    )
    sample = StratifiedSampler(repo, config.sampling).run()

    logger.info("[3/5] Building feature table...")
    features_df, schema = build_feature_table(repo, config.feature_prefixes)

    logger.info(f"[4/5] Computing statistics for {schema.n_features} feature(s)...")
    statistics = compute_feature_statistics(
        features_df, list(schema.feature_columns), config.stats
    )

    manifest = reports.build_run_manifest(
        config.batch_id,
        config.plate_id,
        config.sampling.seed,
        config.sampling.images_per_well,
        config.sampling.frac_cells_per_image,
        config.stats.alpha,
        config.stats.skew_threshold,
        config.stats.report_alpha,
        sample.n_images,
        len(features_df),
        schema.n_features,
        extra={"n_degenerate": len(statistics.degenerate)},
    )

    return AnalysisResult(
        statistics=statistics,
        features=features_df,
        schema=schema,
        sample=sample,
        metadata=metadata,
        manifest=manifest,
    )


def run_analysis(
    config: AnalysisConfig,
    repo: Optional[TableRepository] = None,
    export: bool = True,
) -> AnalysisResult:
    """Run the complete pipeline.

    load metadata -> sample -> build feature table -> statistics -> export

    Args:
        config: AnalysisConfig object
        repo: Open repository to use; if None the SQLite backend named by
            the config is opened and closed around the run
        export: Whether to write the CSV and histograms

    Returns:
        AnalysisResult

    Raises:
        InputMissingError, JoinMismatchError, InsufficientDataError: Abort the run
        ExportError: Raised after statistics are computed; the computed
            AnalysisResult is attached as ``result`` so export_results() can be
            retried on it

    Example:
        >>> from morphodist import AnalysisConfig, run_analysis
        >>> config = AnalysisConfig(workspace="workspace", batch_id="2016_04_01", plate_id="SQ00015116")
        >>> result = run_analysis(config)
        >>> result.statistics.table.head()
    """
    if not config.barcode_platemap_path.exists():
        raise InputMissingError(
            f"Barcode platemap not found: {config.barcode_platemap_path}",
            missing=[str(config.barcode_platemap_path)],
        )

    if repo is None:
        with SQLiteTableRepository(config.resolved_backend_path) as owned:
            result = _analyse(owned, config)
    else:
        result = _analyse(repo, config)

    if export:
        logger.info(f"[5/5] Writing outputs to {config.outdir}...")
        try:
            export_results(result, config)
        except ExportError as e:
            e.result = result
            raise

    return result
