import numpy as np
import pytest

from mcbayes.inference import (
    flat_draws, intercept_at_zero, interval, mean_response, posterior_table, predictive_draws, probability,
)
from mcbayes.samplers import to_inference_data


@pytest.fixture
def idata():
    rng = np.random.default_rng(0)
    x = np.linspace(30, 60, 50)
    y = 155 + 0.9 * (x - x.mean())
    shape = (2, 500)
    draws = {
        "beta0": rng.normal(155, 0.5, size=shape),
        "beta1": rng.normal(0.9, 0.05, size=shape),
        "tau": np.full(shape, 1 / 25.0),
    }
    return to_inference_data(draws, x, y)


def test_flat_draws(idata):
    draws = flat_draws(idata)
    assert list(draws.columns) == ["beta0", "beta1", "sigma"]
    assert len(draws) == 1000
    assert np.allclose(draws["sigma"], 5.0)


def test_probability():
    assert probability(np.array([1.0, 2.0, 3.0, 4.0]), lambda d: d > 2) == 0.5


def test_equal_tailed_interval():
    draws = np.arange(1, 101, dtype=float)
    lo, hi = interval(draws, 0.9)
    assert lo == pytest.approx(np.percentile(draws, 5))
    assert hi == pytest.approx(np.percentile(draws, 95))


def test_hdi_narrower_for_skewed_draws():
    draws = np.random.default_rng(1).exponential(size=20_000)
    eq_lo, eq_hi = interval(draws, 0.9, "equal")
    hdi_lo, hdi_hi = interval(draws, 0.9, "hdi")
    assert hdi_lo <= hdi_hi
    assert hdi_hi - hdi_lo < eq_hi - eq_lo
    assert hdi_lo < eq_lo


@pytest.mark.parametrize("level, kind", [(0.0, "equal"), (1.0, "hdi"), (0.9, "central")])
def test_interval_validation(level, kind):
    with pytest.raises(ValueError):
        interval(np.arange(10.0), level, kind)


def test_mean_response_at_mean_x_is_beta0(idata):
    xbar = idata.constant_data["x"].values.mean()
    mu = mean_response(idata, [xbar, xbar + 10])
    assert mu.shape == (1000, 2)
    np.testing.assert_allclose(mu[:, 0], flat_draws(idata)["beta0"])
    assert mu[:, 1].mean() == pytest.approx(155 + 9, abs=0.2)


def test_predictive_draws_wider_than_mean_response(idata):
    mu = mean_response(idata, [45.0])[:, 0]
    pred = predictive_draws(idata, [45.0], seed=2)[:, 0]
    assert pred.std() > 3 * mu.std()
    assert pred.std() == pytest.approx(np.hypot(5.0, mu.std()), rel=0.1)


def test_intercept_at_zero(idata):
    xbar = idata.constant_data["x"].values.mean()
    b0 = intercept_at_zero(idata)
    draws = flat_draws(idata)
    np.testing.assert_allclose(b0, draws["beta0"] - draws["beta1"] * xbar)


def test_posterior_table(idata):
    table = posterior_table(idata, level=0.95)
    assert list(table.columns) == ["Parameter", "Mean", "SD", "Median", "Lower", "Upper"]
    assert list(table["Parameter"]) == ["beta0", "beta1", "sigma"]
    assert (table["Lower"] <= table["Upper"]).all()
    row = table.set_index("Parameter").loc["beta1"]
    assert row["Lower"] < 0.9 < row["Upper"]
