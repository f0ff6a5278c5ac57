"""Posterior predictive checks: simulate data from the fit and compare to what we saw."""
import numpy as np
import pandas as pd
from scipy import stats


def _sd(a, axis=-1):
    return np.std(a, ddof=1, axis=axis)


TEST_STATISTICS = {
    "mean": np.mean,
    "sd": _sd,
    "min": np.min,
    "max": np.max,
    "skewness": stats.skew,
}


def posterior_flat(idata, var_names=("beta0", "beta1", "sigma")):
    """Stack all chains of the named variables into 1-D arrays."""
    return {v: idata.posterior[v].values.ravel() for v in var_names}


def _pick_draws(n_total, n_rep, rng):
    return rng.choice(n_total, size=n_rep, replace=n_rep > n_total)


def posterior_predictive(idata, n_rep=100, seed=42, x=None):
    """Replicated datasets, shape (n_rep, n_obs), each from one random posterior draw.

    ``x`` defaults to the observed predictor; passing new values gives
    predictions. The model is centred at the *observed* mean of x either way.
    """
    if n_rep < 1:
        raise ValueError(f"n_rep must be at least 1, got {n_rep}")
    rng = np.random.default_rng(seed)
    x_obs = idata.constant_data["x"].values
    x = x_obs if x is None else np.atleast_1d(np.asarray(x, dtype=float))
    post = posterior_flat(idata)
    idx = _pick_draws(len(post["beta0"]), n_rep, rng)
    mu = post["beta0"][idx, None] + post["beta1"][idx, None] * (x - x_obs.mean())[None, :]
    return rng.normal(mu, post["sigma"][idx, None])


def ppc_pvalues(y, y_rep, statistics=None):
    """Bayesian p-values P(T(y_rep) >= T(y)) for each test statistic.

    Values near 0 or 1 flag a feature of the data the model cannot
    reproduce; values near 0.5 are what a well-calibrated model gives.
    """
    statistics = statistics or TEST_STATISTICS
    y = np.asarray(y, dtype=float)
    y_rep = np.asarray(y_rep, dtype=float)
    rows = []
    for name, func in statistics.items():
        observed = func(y)
        replicated = func(y_rep, axis=1)
        rows.append({
            "statistic": name,
            "observed": observed,
            "replicated_mean": replicated.mean(),
            "p_value": np.mean(replicated >= observed),
        })
    return pd.DataFrame(rows, columns=["statistic", "observed", "replicated_mean", "p_value"])


def replicated_statistic(y_rep, name):
    """Values of one named test statistic across the replicated datasets."""
    return TEST_STATISTICS[name](np.asarray(y_rep, dtype=float), axis=1)


def residual_draws(idata, n_rep=100, seed=42):
    """Standardised residuals (y - mu) / sigma under random posterior draws."""
    rng = np.random.default_rng(seed)
    x = idata.constant_data["x"].values
    y = idata.observed_data["y"].values
    post = posterior_flat(idata)
    idx = _pick_draws(len(post["beta0"]), n_rep, rng)
    mu = post["beta0"][idx, None] + post["beta1"][idx, None] * (x - x.mean())[None, :]
    return (y[None, :] - mu) / post["sigma"][idx, None]
