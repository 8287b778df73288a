"""Tests for sample skewness."""

import numpy as np
import pandas as pd
from scipy import stats

from morphodist.stats.skewness import skewness_safe, skewness_all_features


def test_skewness_symmetric_is_near_zero():
    x = stats.norm.ppf(np.linspace(0.001, 0.999, 999))

    assert abs(skewness_safe(x)) < 1e-8


def test_skewness_matches_bias_adjusted_estimator():
    """Uses the bias-adjusted Fisher-Pearson coefficient."""
    x = np.array([1.0, 2.0, 2.0, 3.0, 10.0, 4.0])

    assert np.isclose(skewness_safe(x), stats.skew(x, bias=False))
    assert not np.isclose(skewness_safe(x), stats.skew(x, bias=True))


def test_skewness_right_tail_is_positive():
    x = np.exp(stats.norm.ppf(np.linspace(0.001, 0.999, 999)))

    assert skewness_safe(x) > 2


def test_skewness_degenerate_is_nan():
    assert np.isnan(skewness_safe(np.array([1.0, 1.0, 1.0, 1.0, 1.0])))
    assert np.isnan(skewness_safe(np.array([1.0, 2.0])))


def test_skewness_all_features():
    df = pd.DataFrame({"a": [1.0, 2.0, 3.0, 4.0], "b": [1.0, 1.0, 1.0, 1.0]})

    result = skewness_all_features(df, ["a", "b"])

    assert result["feature"].tolist() == ["a", "b"]
    assert np.isclose(result.loc[0, "skewness"], 0.0)
    assert np.isnan(result.loc[1, "skewness"])
