import arviz as az
import numpy as np
import pytest

from mcbayes.diagnostics import (
    autocorrelation, chain_array, convergence_summary, discard_burn_in, ess, geweke_z, lag_pairs, rhat, thin,
)


def _ar1(n, phi, rng):
    out = np.empty(n)
    out[0] = rng.normal()
    for t in range(1, n):
        out[t] = phi * out[t - 1] + rng.normal()
    return out


@pytest.fixture
def good_idata():
    rng = np.random.default_rng(0)
    shape = (4, 1000)
    return az.from_dict(posterior={
        "beta0": rng.normal(155, 0.4, size=shape),
        "beta1": rng.normal(0.9, 0.05, size=shape),
        "sigma": rng.normal(5, 0.2, size=shape),
    })


@pytest.fixture
def stuck_idata():
    rng = np.random.default_rng(1)
    # every chain centred somewhere different
    offsets = np.array([0.0, 3.0, -3.0, 6.0])[:, None]
    return az.from_dict(posterior={
        "beta0": rng.normal(0, 0.5, size=(4, 500)) + offsets,
        "beta1": rng.normal(0, 1, size=(4, 500)),
        "sigma": rng.normal(5, 0.2, size=(4, 500)),
    })


def test_autocorrelation_of_ar1():
    chain = _ar1(5000, 0.8, np.random.default_rng(2))
    rho = autocorrelation(chain, max_lag=5)
    assert len(rho) == 6
    assert rho[0] == pytest.approx(1.0)
    assert rho[1] == pytest.approx(0.8, abs=0.05)
    assert rho[2] == pytest.approx(0.64, abs=0.06)


def test_autocorrelation_caps_lag():
    assert len(autocorrelation(np.arange(10.0), max_lag=50)) == 10


def test_lag_pairs():
    chain = np.arange(10.0)
    current, following, corr = lag_pairs(chain, lag=2)
    np.testing.assert_array_equal(current, np.arange(8.0))
    np.testing.assert_array_equal(following, np.arange(2.0, 10.0))
    assert corr == pytest.approx(1.0)
    with pytest.raises(ValueError):
        lag_pairs(chain, lag=10)
    with pytest.raises(ValueError):
        lag_pairs(chain, lag=0)


def test_rhat_flags_disagreeing_chains(good_idata, stuck_idata):
    good = rhat(good_idata)
    assert set(good) == {"beta0", "beta1", "sigma"}
    assert all(v < 1.01 for v in good.values())
    assert rhat(stuck_idata, ["beta0"])["beta0"] > 1.5


def test_ess_of_independent_draws_near_total(good_idata):
    values = ess(good_idata)
    assert values["beta1"] > 2500
    assert ess(good_idata, method="tail")["beta1"] > 1500


def test_convergence_summary_verdicts(good_idata, stuck_idata):
    good = convergence_summary(good_idata)
    assert good["converged"].all()
    assert {"mean", "sd", "r_hat", "ess_bulk"} <= set(good.columns)
    stuck = convergence_summary(stuck_idata)
    assert not stuck.loc["beta0", "converged"]
    assert stuck.loc["sigma", "converged"]


def test_convergence_summary_thresholds_are_configurable(good_idata):
    strict = convergence_summary(good_idata, min_ess_per_chain=10_000)
    assert not strict["converged"].any()


def test_discard_burn_in_and_thin(good_idata):
    burned = discard_burn_in(good_idata, 200)
    assert burned.posterior.sizes["draw"] == 800
    np.testing.assert_array_equal(chain_array(burned, "beta0"), chain_array(good_idata, "beta0")[:, 200:])
    thinned = thin(burned, 3)
    assert thinned.posterior.sizes["draw"] == 267
    with pytest.raises(ValueError):
        discard_burn_in(good_idata, 1000)
    with pytest.raises(ValueError):
        discard_burn_in(good_idata, -1)
    with pytest.raises(ValueError):
        thin(good_idata, 0)


def test_geweke_z_small_for_stationary_chain():
    chain = _ar1(4000, 0.5, np.random.default_rng(3))
    assert abs(geweke_z(chain)) < 3.5


def test_geweke_z_large_for_drifting_start():
    # still drifting when the early window ends
    rng = np.random.default_rng(4)
    chain = rng.normal(size=2000)
    chain[:1000] += np.linspace(20, 0, 1000)
    assert abs(geweke_z(chain)) > 3


def test_geweke_z_detects_shifted_start():
    rng = np.random.default_rng(5)
    chain = _ar1(2000, 0.5, rng)
    chain[:200] += 5
    assert geweke_z(chain) > 3


def test_geweke_z_needs_four_draws_per_segment():
    with pytest.raises(ValueError, match="too short"):
        geweke_z(np.random.default_rng(6).normal(size=30))


def test_geweke_z_validates_fractions():
    with pytest.raises(ValueError):
        geweke_z(np.arange(100.0), first=0.6, last=0.5)
    with pytest.raises(ValueError):
        geweke_z(np.arange(10.0), first=0.1, last=0.5)
