"""Tests for dip-test multimodality."""

import numpy as np
import pandas as pd
from scipy import stats

from morphodist.stats.multimodality import dip_test_safe, dip_test_all_features

QUANTILES = np.linspace(0.001, 0.999, 1000)


def test_dip_test_safe_unimodal():
    """Exact normal quantiles are not multimodal."""
    x = stats.norm.ppf(QUANTILES)

    dip, p, n = dip_test_safe(x)

    assert n == 1000
    assert 0 <= dip <= 0.25
    assert p > 0.05


def test_dip_test_safe_bimodal():
    """Two well-separated modes give a small p-value."""
    x = np.concatenate([stats.norm.ppf(QUANTILES), stats.norm.ppf(QUANTILES) + 8])

    dip, p, n = dip_test_safe(x)

    assert n == 2000
    assert p < 0.01


def test_dip_test_safe_constant_data():
    """Zero-variance input is degenerate, not an error."""
    dip, p, n = dip_test_safe(np.array([1.0, 1.0, 1.0, 1.0, 1.0]))

    assert n == 5
    assert np.isnan(dip)
    assert np.isnan(p)


def test_dip_test_safe_insufficient_data():
    dip, p, n = dip_test_safe(np.array([1.0, 2.0, 3.0]))

    assert n == 3
    assert np.isnan(p)


def test_dip_test_safe_handles_nan():
    x = np.concatenate([stats.norm.ppf(QUANTILES), [np.nan, np.inf]])

    _, _, n = dip_test_safe(x)

    assert n == 1000


def test_dip_test_all_features():
    df = pd.DataFrame(
        {
            "Cells_A": stats.norm.ppf(QUANTILES),
            "Cells_B": np.ones(1000),
        }
    )

    result = dip_test_all_features(df, ["Cells_A", "Cells_B"])

    assert list(result.columns) == ["feature", "n", "dip", "p_value"]
    assert result["feature"].tolist() == ["Cells_A", "Cells_B"]
    assert np.isfinite(result.loc[0, "p_value"])
    assert np.isnan(result.loc[1, "p_value"])
