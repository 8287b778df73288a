"""Plate metadata loading.

Joins the barcode-to-platemap table with the per-platemap well annotations and
writes the result to the backing store as the ``metadata`` table. Every output
column carries the ``Metadata_`` prefix so it cannot collide with measurement
columns downstream.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, List

import pandas as pd

from morphodist.config import AnalysisConfig
from morphodist.data import columns as C
from morphodist.errors import InputMissingError, JoinMismatchError
from morphodist.store import METADATA_TABLE, TableRepository

logger = logging.getLogger(__name__)


def read_barcode_platemap(path: Path) -> pd.DataFrame:
    """
    Read the barcode-to-platemap CSV.

    Parameters
    ----------
    path : Path
        CSV with at least Assay_Plate_Barcode and Plate_Map_Name columns

    Returns
    -------
    pd.DataFrame
        Barcode table with string-typed columns

    Raises
    ------
    InputMissingError
        If the file does not exist
    ValueError
        If a required column is absent
    """
    path = Path(path)
    if not path.exists():
        raise InputMissingError(f"Barcode platemap not found: {path}", missing=[str(path)])

    df = pd.read_csv(path, dtype=str)
    missing = [c for c in (C.BARCODE, C.PLATE_MAP_NAME) if c not in df.columns]
    if missing:
        raise ValueError(f"Barcode platemap {path} lacks column(s): {missing}")

    logger.info(
        f"Read {len(df)} plate barcode(s) across "
        f"{df[C.PLATE_MAP_NAME].nunique()} platemap(s) from {path}"
    )
    return df


def read_platemaps(path_for: Callable[[str], Path], names: Iterable[str]) -> pd.DataFrame:
    """
    Read and union one tab-separated annotation file per platemap.

    Parameters
    ----------
    path_for : callable
        Maps a platemap name to its annotation file path
    names : iterable of str
        Platemap names; duplicates are read once

    Returns
    -------
    pd.DataFrame
        All annotation rows; a plate_map_name column is added from the file's
        platemap name when the file does not carry one

    Raises
    ------
    InputMissingError
        If any annotation file is missing (all missing files are listed)
    """
    unique_names = list(dict.fromkeys(names))
    paths = {name: Path(path_for(name)) for name in unique_names}

    missing = [str(p) for p in paths.values() if not p.exists()]
    if missing:
        raise InputMissingError(
            f"Platemap annotation file(s) not found: {', '.join(missing)}", missing=missing
        )

    frames: List[pd.DataFrame] = []
    for name, path in paths.items():
        df = pd.read_csv(path, sep="\t", dtype=str)
        if C.RAW_WELL_POSITION not in df.columns:
            raise ValueError(f"Annotation file {path} lacks column '{C.RAW_WELL_POSITION}'")
        if C.RAW_PLATE_MAP_NAME not in df.columns:
            df[C.RAW_PLATE_MAP_NAME] = name
        logger.debug(f"  • {name}: {len(df)} well(s)")
        frames.append(df)

    if not frames:
        raise InputMissingError("No platemap annotation files to read")

    return pd.concat(frames, ignore_index=True, sort=False)


def build_metadata(
    barcodes: pd.DataFrame, platemaps: pd.DataFrame, control_sample: str = "DMSO"
) -> pd.DataFrame:
    """
    Join annotations to plate barcodes and namespace the result.

    Rows whose platemap name appears on only one side are dropped by the
    inner join; the unmatched names are logged so the drop is visible.

    Parameters
    ----------
    barcodes : pd.DataFrame
        Output of read_barcode_platemap()
    platemaps : pd.DataFrame
        Output of read_platemaps()
    control_sample : str
        Label that replaces a missing sample identifier

    Returns
    -------
    pd.DataFrame
        One row per (plate, well) with Metadata_-prefixed columns, including
        Metadata_Plate, Metadata_Well, Metadata_Plate_Map_Name and
        Metadata_broad_sample

    Raises
    ------
    JoinMismatchError
        If no annotation row matches any barcode
    """
    annotations = platemaps.rename(
        columns={C.RAW_WELL_POSITION: "Well", C.RAW_PLATE_MAP_NAME: C.PLATE_MAP_NAME}
    )

    barcode_maps = set(barcodes[C.PLATE_MAP_NAME].dropna())
    annotation_maps = set(annotations[C.PLATE_MAP_NAME].dropna())
    only_barcodes = sorted(barcode_maps - annotation_maps)
    only_annotations = sorted(annotation_maps - barcode_maps)
    if only_barcodes:
        logger.warning(f"Platemap(s) in barcode file without annotations, dropped: {only_barcodes}")
    if only_annotations:
        logger.warning(f"Annotated platemap(s) without a plate barcode, dropped: {only_annotations}")

    # Annotation columns that clash with barcode columns keep the barcode value
    overlap = [
        c for c in barcodes.columns if c in annotations.columns and c != C.PLATE_MAP_NAME
    ]
    if overlap:
        annotations = annotations.drop(columns=overlap)

    merged = annotations.merge(barcodes, on=C.PLATE_MAP_NAME, how="inner")
    if merged.empty:
        raise JoinMismatchError(
            "No annotation rows matched any plate barcode on Plate_Map_Name",
            stage="metadata",
        )

    merged["Plate"] = merged[C.BARCODE]
    if C.SAMPLE not in merged.columns:
        merged[C.SAMPLE] = pd.NA
    merged[C.SAMPLE] = merged[C.SAMPLE].fillna(control_sample)

    # Plate and Well lead so the metadata table reads naturally
    lead = ["Plate", "Well", C.PLATE_MAP_NAME, C.SAMPLE]
    ordered = lead + [c for c in merged.columns if c not in lead]
    merged = merged[ordered]
    merged.columns = [C.METADATA_PREFIX + c for c in merged.columns]

    n_control = int((merged[C.METADATA_SAMPLE] == control_sample).sum())
    logger.info(
        f"Built metadata: {len(merged)} well(s) on {merged[C.METADATA_PLATE].nunique()} "
        f"plate(s), {n_control} {control_sample} well(s)"
    )
    return merged.reset_index(drop=True)


def load_metadata(repo: TableRepository, config: AnalysisConfig) -> pd.DataFrame:
    """
    Read annotation files for a batch and persist them as the metadata table.

    Parameters
    ----------
    repo : TableRepository
        Open backing store
    config : AnalysisConfig
        Supplies the workspace/batch paths and the control label

    Returns
    -------
    pd.DataFrame
        The metadata table as written
    """
    barcodes = read_barcode_platemap(config.barcode_platemap_path)
    platemaps = read_platemaps(config.platemap_path, barcodes[C.PLATE_MAP_NAME].dropna())
    metadata = build_metadata(barcodes, platemaps, config.sampling.control_sample)
    repo.replace_table(METADATA_TABLE, metadata)
    return metadata
