"""Pytest configuration and fixtures."""

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from morphodist.config import AnalysisConfig
from morphodist.store import SQLiteTableRepository

BATCH_ID = "2016_04_01_a549"
PLATE_ID = "SQ00015116"

# Plate barcode -> platemap
BARCODES = {
    "SQ00015116": "C-7161-01-LM6-001",
    "SQ00015117": "C-7161-01-LM6-001",
    "SQ00015118": "C-7161-01-LM6-002",
    "SQ00015119": "C-7161-01-LM6-002",
}

# Platemap -> {well: sample}; None marks a control (DMSO) well
PLATEMAPS = {
    "C-7161-01-LM6-001": {"A01": None, "A02": None, "A03": "BRD-K18895904"},
    "C-7161-01-LM6-002": {"A01": None, "A02": "BRD-K50691590", "A03": None},
}

N_DMSO_WELLS = 8  # two control wells per platemap, two plates per platemap


def write_metadata_files(workspace: Path) -> None:
    """Write barcode_platemap.csv and one annotation file per platemap."""
    meta_dir = workspace / "metadata" / BATCH_ID
    (meta_dir / "platemap").mkdir(parents=True, exist_ok=True)

    pd.DataFrame(
        {"Assay_Plate_Barcode": list(BARCODES), "Plate_Map_Name": list(BARCODES.values())}
    ).to_csv(meta_dir / "barcode_platemap.csv", index=False)

    for name, wells in PLATEMAPS.items():
        pd.DataFrame(
            {
                "plate_map_name": name,
                "well_position": list(wells),
                "broad_sample": list(wells.values()),
                "mmoles_per_liter": [0.0 if s is None else 10.0 for s in wells.values()],
            }
        ).to_csv(meta_dir / "platemap" / f"{name}.txt", sep="\t", index=False)


def make_measurement_tables(images: pd.DataFrame, cells_per_image: int, seed: int = 0):
    """Build Cells, Cytoplasm and Nuclei tables for every image."""
    rng = np.random.default_rng(seed)
    n_images = len(images)
    n = n_images * cells_per_image

    keys = pd.DataFrame(
        {
            "TableNumber": np.repeat(images["TableNumber"].to_numpy(), cells_per_image),
            "ImageNumber": np.repeat(images["ImageNumber"].to_numpy(), cells_per_image),
            "ObjectNumber": np.tile(np.arange(1, cells_per_image + 1), n_images),
        }
    )

    cells = keys.assign(
        Cells_AreaShape_Area=np.where(
            rng.random(n) < 0.5, rng.normal(100, 8, n), rng.normal(300, 8, n)
        ),
        Cells_Intensity_MeanIntensity_DNA=rng.lognormal(0.0, 1.0, n),
    )
    cytoplasm = keys.assign(
        Cytoplasm_AreaShape_Zernike_0_0=np.ones(n),
        Cytoplasm_Intensity_MeanIntensity_RNA=rng.normal(0.5, 0.1, n),
    )
    nuclei = keys.assign(
        Nuclei_AreaShape_Eccentricity=rng.normal(0.6, 0.05, n),
        Nuclei_Location_Center_X=rng.uniform(0, 1000, n),
    )
    return cells, cytoplasm, nuclei


def build_backend(path: Path, images_per_well: int = 8, cells_per_image: int = 10) -> None:
    """Write Image and measurement tables for every plate/well of the fixture."""
    rows = []
    image_number = 1
    for plate in BARCODES:
        for well in ("A01", "A02", "A03"):
            for _ in range(images_per_well):
                rows.append(
                    {
                        "TableNumber": 1,
                        "ImageNumber": image_number,
                        "Image_Metadata_Plate": plate,
                        "Image_Metadata_Well": well,
                        "Image_Count_Cells": cells_per_image,
                    }
                )
                image_number += 1
    images = pd.DataFrame(rows)
    cells, cytoplasm, nuclei = make_measurement_tables(images, cells_per_image)

    with SQLiteTableRepository(path, create=True) as repo:
        repo.replace_table("Image", images)
        repo.replace_table("Cells", cells)
        repo.replace_table("Cytoplasm", cytoplasm)
        repo.replace_table("Nuclei", nuclei)


@pytest.fixture
def workspace(tmp_path):
    """Workspace with metadata files and a populated SQLite backend."""
    root = tmp_path / "workspace"
    write_metadata_files(root)
    build_backend(root / "backend" / BATCH_ID / PLATE_ID / f"{PLATE_ID}.sqlite")
    return root


@pytest.fixture
def analysis_config(workspace, tmp_path):
    """AnalysisConfig pointing at the fixture workspace."""
    return AnalysisConfig(
        workspace=workspace,
        batch_id=BATCH_ID,
        plate_id=PLATE_ID,
        outdir=tmp_path / "out",
    )


@pytest.fixture
def repo(analysis_config):
    """Open repository on the fixture backend."""
    with SQLiteTableRepository(analysis_config.resolved_backend_path) as r:
        yield r


@pytest.fixture
def memory_repo():
    """Empty in-memory repository."""
    with SQLiteTableRepository(":memory:") as r:
        yield r
