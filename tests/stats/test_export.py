"""Tests for the statistics CSV."""

import numpy as np
import pandas as pd
import pytest

from morphodist.errors import ExportError, InputMissingError
from morphodist.stats.classify import STATS_COLUMNS, classification_labels, classify_features
from morphodist.stats.export import read_feature_statistics, write_feature_statistics, write_run_manifest


def _classified():
    table = pd.DataFrame(
        {
            "feature": ["Cells_A", "Cells_B", "Nuclei_C", "Cytoplasm_D"],
            "p_value": [0.001, 0.4, 0.5, np.nan],
            "p_adj": [0.003, 0.6, 0.6, np.nan],
            "skewness": [5.0, 3.5, 0.2, np.nan],
        }
    )
    return classify_features(table)[STATS_COLUMNS]


def test_write_uses_fixed_column_order(tmp_path):
    path = write_feature_statistics(_classified(), tmp_path / "feature_statistics.csv")

    header = path.read_text().splitlines()[0]
    assert header == "feature,p_value,p_adj,skewness,is_multimodal,is_skewed"


def test_roundtrip_preserves_classification(tmp_path):
    table = _classified()
    path = write_feature_statistics(table, tmp_path / "feature_statistics.csv")

    loaded = read_feature_statistics(path)

    before = dict(zip(table["feature"], classification_labels(table)))
    after = dict(zip(loaded["feature"], classification_labels(loaded)))
    assert before == after
    assert pd.isna(loaded.loc[0, "is_skewed"])
    assert loaded["is_multimodal"].dtype == bool


def test_write_unwritable_path_raises_export_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")

    with pytest.raises(ExportError) as exc_info:
        write_feature_statistics(_classified(), blocker / "feature_statistics.csv")

    assert "blocker" in str(exc_info.value)


def test_write_rejects_incomplete_table(tmp_path):
    with pytest.raises(ValueError):
        write_feature_statistics(pd.DataFrame({"feature": ["a"]}), tmp_path / "x.csv")


def test_read_missing_file(tmp_path):
    with pytest.raises(InputMissingError):
        read_feature_statistics(tmp_path / "absent.csv")


def test_write_run_manifest(tmp_path):
    manifest = pd.DataFrame({"parameter": ["seed", "n_images"], "value": [42, 48]})

    path = write_run_manifest(manifest, tmp_path / "nested" / "run_manifest.csv")

    loaded = pd.read_csv(path)
    assert loaded["parameter"].tolist() == ["seed", "n_images"]
    assert loaded["value"].tolist() == [42, 48]


def test_write_run_manifest_unwritable(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    manifest = pd.DataFrame({"parameter": ["seed"], "value": [42]})

    with pytest.raises(ExportError):
        write_run_manifest(manifest, blocker / "run_manifest.csv")
