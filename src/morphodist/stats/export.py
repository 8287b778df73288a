"""Reading and writing the feature statistics CSV."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from morphodist.errors import ExportError, InputMissingError
from morphodist.stats.classify import STATS_COLUMNS

logger = logging.getLogger(__name__)

_BOOL_TEXT = {"true": True, "false": False}


def _parse_bool(value):
    if pd.isna(value):
        return None
    if isinstance(value, bool):
        return value
    return _BOOL_TEXT.get(str(value).strip().lower())


def write_feature_statistics(table: pd.DataFrame, path: Path) -> Path:
    """Write the statistics table as CSV with a fixed column order.

    Args:
        table: Classified statistics table
        path: Output CSV path; parent directories are created

    Returns:
        The written path

    Raises:
        ExportError: If the file cannot be written
    """
    path = Path(path)
    missing = [c for c in STATS_COLUMNS if c not in table.columns]
    if missing:
        raise ValueError(f"Statistics table lacks column(s): {missing}")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        table[STATS_COLUMNS].to_csv(path, index=False)
    except OSError as e:
        raise ExportError(f"Could not write statistics to {path}: {e}", path=str(path)) from e

    logger.info(f"Wrote {len(table)} feature statistic(s) to {path}")
    return path


def read_feature_statistics(path: Path) -> pd.DataFrame:
    """Read a statistics CSV written by write_feature_statistics().

    Flags come back as is_multimodal (bool) and is_skewed (nullable boolean),
    so classification labels match the table that was written.
    """
    path = Path(path)
    if not path.exists():
        raise InputMissingError(f"Statistics file not found: {path}", missing=[str(path)])

    df = pd.read_csv(path)
    missing = [c for c in STATS_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{path} is not a feature statistics file; missing {missing}")

    df["feature"] = df["feature"].astype(str)
    df["is_multimodal"] = [bool(_parse_bool(v)) for v in df["is_multimodal"]]
    df["is_skewed"] = pd.array([_parse_bool(v) for v in df["is_skewed"]], dtype="boolean")
    return df[STATS_COLUMNS]


def write_run_manifest(manifest: pd.DataFrame, path: Path) -> Path:
    """Write the parameter/value run manifest as CSV.

    Raises:
        ExportError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        manifest.to_csv(path, index=False)
    except OSError as e:
        raise ExportError(f"Could not write run manifest to {path}: {e}", path=str(path)) from e

    logger.debug(f"Wrote run manifest to {path}")
    return path
