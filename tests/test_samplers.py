import logging

import numpy as np
import pytest

from mcbayes.samplers import (
    acceptance_rates, check_inputs, gibbs_linear_regression, initial_values, log_posterior,
    metropolis_linear_regression, proposal_sds, resolve_priors,
)
from mcbayes.stats_helpers import ols_fit

RUN = dict(n_draws=600, burn_in=200, n_chains=2, seed=7)


@pytest.fixture(scope="module")
def data():
    rng = np.random.default_rng(0)
    x = rng.normal(45.0, 6.0, size=150)
    y = 155.0 + 0.9 * (x - x.mean()) + rng.normal(0, 5.0, size=150)
    return x, y


@pytest.fixture(scope="module")
def gibbs(data):
    return gibbs_linear_regression(*data, **RUN)


@pytest.fixture(scope="module")
def metropolis(data):
    return metropolis_linear_regression(*data, **RUN)


def test_resolve_priors_fills_defaults():
    p = resolve_priors({"beta1_sd": 2.0})
    assert p["beta1_sd"] == 2.0
    assert p["beta0_sd"] == 100.0
    with pytest.raises(ValueError, match="tau_rate"):
        resolve_priors({"tau_rate": 0})


@pytest.mark.parametrize("kwargs", [
    dict(n_draws=0, burn_in=0, n_chains=1, thin=1),
    dict(n_draws=10, burn_in=-1, n_chains=1, thin=1),
    dict(n_draws=10, burn_in=0, n_chains=0, thin=1),
    dict(n_draws=10, burn_in=0, n_chains=1, thin=0),
])
def test_check_inputs_rejects_bad_sizes(data, kwargs):
    with pytest.raises(ValueError):
        check_inputs(*data, **kwargs)


def test_check_inputs_rejects_bad_data():
    with pytest.raises(ValueError):
        check_inputs([1.0, 2.0, 3.0], [1.0, 2.0], 10, 0, 1, 1)
    with pytest.raises(ValueError):
        check_inputs([1.0, 2.0], [1.0, 2.0], 10, 0, 1, 1)


def test_initial_values_are_dispersed(data):
    inits = initial_values(*data, n_chains=4, seed=1)
    assert len(inits) == 4
    assert len({round(i["beta0"], 6) for i in inits}) == 4
    assert all(i["tau"] > 0 for i in inits)


@pytest.mark.parametrize("name", ["gibbs", "metropolis"])
def test_inference_data_layout(request, name):
    idata = request.getfixturevalue(name)
    for v in ("beta0", "beta1", "tau", "sigma"):
        assert idata.posterior[v].shape == (RUN["n_chains"], RUN["n_draws"])
    assert idata.observed_data["y"].shape == (150,)
    assert idata.constant_data["x"].shape == (150,)
    np.testing.assert_allclose(idata.posterior["sigma"].values, 1 / np.sqrt(idata.posterior["tau"].values))


@pytest.mark.parametrize("name", ["gibbs", "metropolis"])
def test_posterior_agrees_with_ols(request, data, name):
    idata = request.getfixturevalue(name)
    ols = ols_fit(*data, center=True)
    post = idata.posterior
    assert float(post["beta0"].mean()) == pytest.approx(ols["intercept"], abs=4 * ols["se_intercept"])
    assert float(post["beta1"].mean()) == pytest.approx(ols["slope"], abs=4 * ols["se_slope"])
    assert float(post["sigma"].mean()) == pytest.approx(ols["sigma"], rel=0.1)


def test_gibbs_is_reproducible(data):
    a = gibbs_linear_regression(*data, n_draws=50, burn_in=10, n_chains=2, seed=3)
    b = gibbs_linear_regression(*data, n_draws=50, burn_in=10, n_chains=2, seed=3)
    c = gibbs_linear_regression(*data, n_draws=50, burn_in=10, n_chains=2, seed=4)
    np.testing.assert_array_equal(a.posterior["beta1"].values, b.posterior["beta1"].values)
    assert not np.array_equal(a.posterior["beta1"].values, c.posterior["beta1"].values)


def test_metropolis_is_reproducible(data):
    a = metropolis_linear_regression(*data, n_draws=50, burn_in=10, n_chains=2, seed=3)
    b = metropolis_linear_regression(*data, n_draws=50, burn_in=10, n_chains=2, seed=3)
    np.testing.assert_array_equal(a.posterior["beta0"].values, b.posterior["beta0"].values)


def test_thinning_keeps_ceil_of_draws(data):
    idata = gibbs_linear_regression(*data, n_draws=101, burn_in=0, n_chains=1, thin=10, seed=1)
    assert idata.posterior.sizes["draw"] == 11


def test_acceptance_rates_respond_to_scale(data, metropolis):
    rates = acceptance_rates(metropolis)
    assert rates.shape == (RUN["n_chains"],)
    assert np.all((rates > 0.05) & (rates < 0.95))
    tiny = metropolis_linear_regression(*data, n_draws=300, burn_in=50, n_chains=1, proposal_scale=0.05, seed=2)
    huge = metropolis_linear_regression(*data, n_draws=300, burn_in=50, n_chains=1, proposal_scale=20.0, seed=2)
    assert acceptance_rates(tiny)[0] > acceptance_rates(huge)[0]


def test_acceptance_rates_need_metropolis(gibbs):
    with pytest.raises(ValueError):
        acceptance_rates(gibbs)


def test_metropolis_rejects_bad_scale(data):
    with pytest.raises(ValueError):
        metropolis_linear_regression(*data, n_draws=10, proposal_scale=0)


def test_log_posterior_peaks_near_ols(data):
    x, y = data
    xc = x - x.mean()
    ols = ols_fit(x, y, center=True)
    p = resolve_priors()
    best = log_posterior((ols["intercept"], ols["slope"], np.log(ols["sigma"])), xc, y, p)
    worse = log_posterior((ols["intercept"] + 3, ols["slope"], np.log(ols["sigma"])), xc, y, p)
    assert best > worse


def test_proposal_sds_scale_linearly(regression_data):
    base = proposal_sds(*regression_data)
    assert base.shape == (3,)
    assert np.all(base > 0)
    np.testing.assert_allclose(proposal_sds(*regression_data, proposal_scale=2.5), 2.5 * base)


def test_acceptance_rates_count_every_iteration_when_thinned(data, caplog):
    kwargs = dict(n_draws=120, burn_in=30, n_chains=1, proposal_scale=1.5, seed=11)
    full = metropolis_linear_regression(*data, **kwargs)
    with caplog.at_level(logging.INFO, logger="mcbayes.samplers"):
        thinned = metropolis_linear_regression(*data, thin=7, **kwargs)
    assert thinned.posterior.sizes["draw"] == 18
    assert int(thinned.sample_stats["proposals"].sum()) == 120
    rate = acceptance_rates(thinned)[0]
    assert rate == pytest.approx(acceptance_rates(full)[0])
    assert f"{rate:.1%}" in caplog.text
