import numpy as np
import pytest

from mcbayes import engines
from mcbayes.engines import (
    JAGS_MODEL, MONITORED, STAN_MODEL, EngineUnavailableError, engine_available, jags_inits, model_data,
    write_stan_file,
)

requires_jags = pytest.mark.skipif(not engine_available("jags"), reason="JAGS / pyjags not installed")
requires_stan = pytest.mark.skipif(not engine_available("stan"), reason="CmdStan not installed")

RUN = dict(n_draws=500, burn_in=300, n_chains=2, seed=5)


def test_model_data_uses_precisions(regression_data):
    x, y = regression_data
    data = model_data(x, y, {"beta0_sd": 10.0})
    assert data["N"] == len(y)
    assert data["xbar"] == pytest.approx(x.mean())
    assert data["beta0_prec"] == pytest.approx(0.01)
    assert data["beta1_prec"] == pytest.approx(0.01)
    assert data["tau_shape"] == 0.01
    np.testing.assert_array_equal(data["y"], y)


def test_model_data_rejects_bad_priors(regression_data):
    with pytest.raises(ValueError):
        model_data(*regression_data, {"beta1_sd": -1.0})


def test_model_texts_name_every_data_field(regression_data):
    for name in model_data(*regression_data):
        assert name in STAN_MODEL
        assert name in JAGS_MODEL
    for node in MONITORED:
        assert node in JAGS_MODEL


def test_jags_inits_have_rng_streams(regression_data):
    inits = jags_inits(*regression_data, n_chains=3, seed=10)
    assert [i[".RNG.seed"] for i in inits] == [10, 11, 12]
    assert all(i[".RNG.name"] == "base::Mersenne-Twister" for i in inits)
    assert all({"beta0", "beta1", "tau"} <= set(i) for i in inits)


def test_engine_available_unknown_name():
    with pytest.raises(ValueError):
        engine_available("bugs")


def test_missing_engine_raises(monkeypatch, regression_data):
    monkeypatch.setattr(engines, "engine_available", lambda name: False)
    with pytest.raises(EngineUnavailableError, match="jags"):
        engines.run_jags(*regression_data, **RUN)
    with pytest.raises(EngineUnavailableError, match="stan"):
        engines.compile_stan_model()


def test_run_validates_before_engine_lookup(regression_data):
    x, y = regression_data
    with pytest.raises(ValueError):
        engines.run_jags(x, y[:-1], **RUN)


def test_write_stan_file_is_idempotent(tmp_path):
    path = write_stan_file(tmp_path)
    mtime = (tmp_path / "linear_regression.stan").stat().st_mtime_ns
    assert write_stan_file(tmp_path) == path
    assert (tmp_path / "linear_regression.stan").stat().st_mtime_ns == mtime
    with open(path) as f:
        assert f.read() == STAN_MODEL


def _check_fit(idata, x, y):
    post = idata.posterior
    assert post["beta0"].shape == (RUN["n_chains"], RUN["n_draws"])
    np.testing.assert_allclose(post["sigma"].values, 1 / np.sqrt(post["tau"].values), rtol=1e-4)
    assert float(post["beta0"].mean()) == pytest.approx(y.mean(), abs=1.0)
    assert float(post["beta1"].mean()) == pytest.approx(0.9, abs=0.2)


@requires_jags
def test_run_jags(regression_data):
    idata = engines.run_jags(*regression_data, **RUN)
    _check_fit(idata, *regression_data)


@requires_stan
def test_run_stan(tmp_path, regression_data):
    model = engines.compile_stan_model(tmp_path)
    idata = engines.run_stan(*regression_data, model=model, **RUN)
    _check_fit(idata, *regression_data)
    np.testing.assert_array_equal(idata.constant_data["x"].values, regression_data[0])
