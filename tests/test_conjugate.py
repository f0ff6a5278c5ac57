import numpy as np
import pytest
from scipy import stats

from mcbayes.conjugate import (
    credible_interval, normal_gamma_marginal_mu, normal_gamma_marginal_sigma_mean, normal_gamma_update,
    normal_known_variance_update, sample_normal_gamma, sequential_updates,
)


@pytest.fixture
def heights():
    return np.random.default_rng(11).normal(155.0, 7.0, size=150)


def test_normal_update_is_precision_weighted(heights):
    post = normal_known_variance_update(heights, prior_mean=170.0, prior_sd=20.0, sigma=7.0)
    prior_prec = 1 / 20.0**2
    data_prec = len(heights) / 7.0**2
    expected = (170.0 * prior_prec + heights.mean() * data_prec) / (prior_prec + data_prec)
    assert post["post_mean"] == pytest.approx(expected)
    assert post["post_sd"] == pytest.approx((prior_prec + data_prec) ** -0.5)
    assert post["data_weight"] + post["prior_weight"] == pytest.approx(1.0)
    assert min(heights.mean(), 170.0) < post["post_mean"] < max(heights.mean(), 170.0)


def test_normal_update_without_data_returns_prior():
    post = normal_known_variance_update([], prior_mean=170.0, prior_sd=20.0, sigma=7.0)
    assert post["post_mean"] == pytest.approx(170.0)
    assert post["post_sd"] == pytest.approx(20.0)
    assert post["data_weight"] == 0


@pytest.mark.parametrize("kwargs", [dict(prior_sd=0.0, sigma=1.0), dict(prior_sd=1.0, sigma=-2.0)])
def test_normal_update_rejects_bad_scales(kwargs):
    with pytest.raises(ValueError):
        normal_known_variance_update([1.0, 2.0], prior_mean=0.0, **kwargs)


def test_sequential_matches_batch(heights):
    seq = sequential_updates(heights[:40], 170.0, 20.0, 7.0)
    batch = normal_known_variance_update(heights[:40], 170.0, 20.0, 7.0)
    assert list(seq.columns) == ["step", "observation", "posterior_mean", "posterior_sd"]
    assert len(seq) == 40
    assert seq["posterior_mean"].iloc[-1] == pytest.approx(batch["post_mean"])
    assert seq["posterior_sd"].iloc[-1] == pytest.approx(batch["post_sd"])
    assert seq["posterior_sd"].is_monotonic_decreasing


def test_normal_gamma_update_values():
    data = np.array([1.0, 2.0, 3.0, 4.0])
    post = normal_gamma_update(data, mu0=0.0, kappa0=1.0, shape0=2.0, rate0=3.0)
    assert post["kappa"] == 5.0
    assert post["mu"] == pytest.approx(10.0 / 5.0)
    assert post["shape"] == 4.0
    # ss = 5, kappa0 * n * (xbar - mu0)^2 / (2 kappa_n) = 4 * 6.25 / 10
    assert post["rate"] == pytest.approx(3.0 + 2.5 + 2.5)
    assert post["n"] == 4


def test_normal_gamma_empty_data_is_prior():
    post = normal_gamma_update([], mu0=1.0, kappa0=2.0, shape0=3.0, rate0=4.0)
    assert (post["mu"], post["kappa"], post["shape"], post["rate"]) == (1.0, 2.0, 3.0, 4.0)


def test_normal_gamma_rejects_bad_hyperparameters():
    with pytest.raises(ValueError, match="rate0"):
        normal_gamma_update([1.0], mu0=0.0, kappa0=1.0, shape0=1.0, rate0=0.0)


def test_marginal_mu_is_student_t(heights):
    post = normal_gamma_update(heights, mu0=150.0, kappa0=0.01, shape0=0.01, rate0=0.01)
    dist = normal_gamma_marginal_mu(post)
    assert dist.mean() == pytest.approx(post["mu"])
    assert dist.kwds["df"] == pytest.approx(2 * post["shape"])
    # with vague priors the t marginal is close to the classical one
    classical = stats.t(len(heights) - 1, heights.mean(), heights.std(ddof=1) / np.sqrt(len(heights)))
    assert dist.std() == pytest.approx(classical.std(), rel=0.05)


def test_exact_draws_agree_with_closed_forms(heights):
    post = normal_gamma_update(heights, mu0=150.0, kappa0=1.0, shape0=1.0, rate0=10.0)
    draws = sample_normal_gamma(post, 40_000, seed=3)
    assert list(draws.columns) == ["mu", "sigma", "tau"]
    np.testing.assert_allclose(draws["sigma"], 1 / np.sqrt(draws["tau"]))
    assert draws["mu"].mean() == pytest.approx(post["mu"], abs=0.05)
    assert draws["sigma"].mean() == pytest.approx(normal_gamma_marginal_sigma_mean(post), rel=0.01)


def test_sample_normal_gamma_reproducible(heights):
    post = normal_gamma_update(heights, mu0=150.0, kappa0=1.0, shape0=1.0, rate0=10.0)
    a = sample_normal_gamma(post, 100, seed=9)
    b = sample_normal_gamma(post, 100, seed=9)
    assert a.equals(b)


def test_credible_interval():
    lo, hi = credible_interval(stats.norm(0, 1), 0.95)
    assert lo == pytest.approx(-1.959964, abs=1e-5)
    assert hi == pytest.approx(1.959964, abs=1e-5)
    with pytest.raises(ValueError):
        credible_interval(stats.norm(0, 1), 1.0)
