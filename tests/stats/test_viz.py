"""Tests for per-feature histograms."""

import numpy as np
import pandas as pd
import pytest
from PIL import Image

from morphodist.errors import ExportError
from morphodist.stats.config import VizConfig
from morphodist.stats.viz import histogram_filename, plot_feature_histograms


def test_histograms_written_per_feature(tmp_path):
    rng = np.random.default_rng(0)
    df = pd.DataFrame(
        {
            "Cells_AreaShape_Area": rng.normal(100, 10, 200),
            "Cytoplasm_Constant": np.ones(200),
        }
    )
    outdir = tmp_path / "feature_histograms"

    outputs = plot_feature_histograms(df, list(df.columns), outdir, VizConfig())

    assert outdir.is_dir()
    assert set(outputs) == {"Cells_AreaShape_Area", "Cytoplasm_Constant"}
    assert (outdir / "Cells_AreaShape_Area.png").exists()
    with Image.open(outdir / "Cells_AreaShape_Area.png") as img:
        assert img.size == (500, 500)


def test_histograms_skip_all_nan_feature(tmp_path):
    df = pd.DataFrame({"Cells_Empty": [np.nan] * 5, "Cells_Ok": [1.0, 2.0, 3.0, 4.0, 5.0]})

    outputs = plot_feature_histograms(df, list(df.columns), tmp_path / "h", VizConfig())

    assert list(outputs) == ["Cells_Ok"]


def test_histogram_directory_failure(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    df = pd.DataFrame({"Cells_Ok": [1.0, 2.0, 3.0]})

    with pytest.raises(ExportError):
        plot_feature_histograms(df, ["Cells_Ok"], blocker / "h", VizConfig())


def test_histogram_filename_replaces_separators():
    assert histogram_filename("Cells_A/B") == "Cells_A_B.png"


def test_viz_config_validation():
    with pytest.raises(ValueError):
        VizConfig(bins=0)
    with pytest.raises(ValueError):
        VizConfig(figsize=(5, 0))
