import numpy as np
import pandas as pd
import pytest

from mcbayes.stats_helpers import (
    bootstrap_ci, coefficient_table, descriptive_stats, normality_test, ols_fit, qq_points, regression_metrics,
)
from conftest import TRUE_INTERCEPT, TRUE_SLOPE


def test_descriptive_stats_basic():
    s = pd.Series([1.0, 2.0, 3.0, 4.0, 5.0])
    d = descriptive_stats(s)
    assert d["count"] == 5
    assert d["mean"] == 3.0
    assert d["median"] == 3.0
    assert d["iqr"] == pytest.approx(2.0)


def test_bootstrap_ci_brackets_the_mean():
    data = np.random.default_rng(3).normal(10, 1, size=300)
    lower, upper, boot = bootstrap_ci(data, n_boot=400, seed=1)
    assert lower < data.mean() < upper
    assert len(boot) == 400


def test_bootstrap_ci_resamples_paired_rows(regression_data):
    x, y = regression_data
    lower, upper, _ = bootstrap_ci(
        np.column_stack([x, y]), stat_func=lambda xy: np.polyfit(xy[:, 0], xy[:, 1], 1)[0], n_boot=300,
    )
    assert lower < np.polyfit(x, y, 1)[0] < upper
    assert upper - lower < 0.5


def test_bootstrap_ci_rejects_bad_level():
    with pytest.raises(ValueError, match="level"):
        bootstrap_ci([1.0, 2.0, 3.0], level=95)


def test_normality_test_on_normal_data():
    data = np.random.default_rng(5).normal(size=500)
    stat, p = normality_test(data)
    assert 0 < stat <= 1
    assert p > 0.01


def test_normality_test_drops_missing_and_needs_three_values():
    with pytest.raises(ValueError, match="at least 3"):
        normality_test([1.0, np.nan, 2.0])


def test_ols_centred_recovers_line(regression_data):
    x, y = regression_data
    fit = ols_fit(x, y, center=True)
    assert fit["intercept"] == pytest.approx(y.mean())
    assert fit["slope"] == pytest.approx(TRUE_SLOPE, abs=0.2)
    assert fit["ci_slope"][0] < fit["slope"] < fit["ci_slope"][1]
    assert fit["intercept"] == pytest.approx(TRUE_INTERCEPT, abs=1.5)


def test_ols_centring_changes_intercept_not_slope(regression_data):
    x, y = regression_data
    raw = ols_fit(x, y)
    centred = ols_fit(x, y, center=True)
    assert raw["slope"] == pytest.approx(centred["slope"])
    assert raw["intercept"] == pytest.approx(centred["intercept"] - centred["slope"] * x.mean())


def test_ols_narrower_interval_at_lower_confidence(regression_data):
    x, y = regression_data
    wide = ols_fit(x, y, alpha=0.01)["ci_slope"]
    narrow = ols_fit(x, y, alpha=0.2)["ci_slope"]
    assert narrow[1] - narrow[0] < wide[1] - wide[0]


def test_ols_validates_inputs():
    with pytest.raises(ValueError):
        ols_fit([1.0, 2.0, 3.0], [1.0, 2.0])
    with pytest.raises(ValueError):
        ols_fit([1.0, 2.0], [1.0, 2.0])


def test_coefficient_table_layout(regression_data):
    table = coefficient_table(ols_fit(*regression_data))
    assert list(table.columns) == ["Term", "Estimate", "Std. Error", "CI lower", "CI upper"]
    assert list(table["Term"]) == ["Intercept", "Slope"]
    assert (table["CI lower"] < table["CI upper"]).all()


def test_qq_points_straight_for_normal_residuals():
    qq = qq_points(np.random.default_rng(2).normal(size=300))
    assert len(qq["theoretical"]) == len(qq["sample"]) == 300
    assert qq["r"] > 0.98


def test_regression_metrics_perfect_fit():
    y = np.array([1.0, 2.0, 3.0, 4.0])
    m = regression_metrics(y, y)
    assert m["mse"] == 0
    assert m["mae"] == 0
    assert m["r2"] == 1.0
