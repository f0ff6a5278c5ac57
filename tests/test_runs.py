import numpy as np
import pytest

from mcbayes import runs


def test_builtin_sources_always_available():
    sources = runs.available_sources()
    assert sources[:2] == ["gibbs", "metropolis"]
    assert set(sources) <= set(runs.SOURCES)


@pytest.mark.parametrize("source", ["gibbs", "metropolis"])
def test_fit_dispatches_to_builtin_samplers(regression_data, source):
    idata = runs.fit(source, *regression_data, n_draws=100, burn_in=50, n_chains=2, seed=1)
    assert idata.posterior["beta1"].shape == (2, 100)
    has_acceptance = "sample_stats" in idata.groups() and "accepted" in idata.sample_stats
    assert has_acceptance == (source == "metropolis")


def test_fit_unknown_source(regression_data):
    with pytest.raises(ValueError, match="unknown sample source"):
        runs.fit("pymc", *regression_data)


def test_fit_is_cached(regression_data):
    a = runs.fit("gibbs", *regression_data, n_draws=60, burn_in=10, n_chains=1, seed=2)
    b = runs.fit("gibbs", *regression_data, n_draws=60, burn_in=10, n_chains=1, seed=2)
    assert a is b
    np.testing.assert_array_equal(a.posterior["beta0"].values, b.posterior["beta0"].values)
