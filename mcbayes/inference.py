"""Answering questions with posterior draws.

Once the sampler has done its job every question about the parameters is a
Monte Carlo average over draws: probabilities are proportions, intervals are
quantiles, predictions push each draw through the model.
"""
import arviz as az
import numpy as np
import pandas as pd

from mcbayes.constants import PARAMS


def flat_draws(idata, var_names=None):
    """All chains stacked into one DataFrame, one column per parameter."""
    var_names = var_names or PARAMS
    return pd.DataFrame({v: idata.posterior[v].values.ravel() for v in var_names})


def probability(draws, predicate):
    """Posterior probability of the event ``predicate(theta)``."""
    return float(np.mean(predicate(np.asarray(draws))))


def interval(draws, level=0.95, kind="equal"):
    """Credible interval: ``"equal"`` tailed quantiles or the ``"hdi"``."""
    if not 0 < level < 1:
        raise ValueError(f"level must be in (0, 1), got {level}")
    draws = np.asarray(draws, dtype=float)
    if kind == "equal":
        tail = 100 * (1 - level) / 2
        lower, upper = np.percentile(draws, [tail, 100 - tail])
    elif kind == "hdi":
        lower, upper = az.hdi(draws, hdi_prob=level)
    else:
        raise ValueError(f"unknown interval kind {kind!r}; use 'equal' or 'hdi'")
    return float(lower), float(upper)


def _xbar(idata):
    return float(idata.constant_data["x"].values.mean())


def mean_response(idata, x_new):
    """Draws of E[y | x] at each new x, shape (n_draws, len(x_new))."""
    x_new = np.atleast_1d(np.asarray(x_new, dtype=float))
    draws = flat_draws(idata, ["beta0", "beta1"])
    return draws["beta0"].values[:, None] + draws["beta1"].values[:, None] * (x_new - _xbar(idata))[None, :]


def predictive_draws(idata, x_new, seed=42):
    """Posterior predictive draws of a new observation at each x.

    Adds observation noise on top of :func:`mean_response`, so the spread
    covers both parameter uncertainty and person-to-person variation.
    """
    rng = np.random.default_rng(seed)
    mu = mean_response(idata, x_new)
    sigma = idata.posterior["sigma"].values.ravel()
    return rng.normal(mu, sigma[:, None])


def intercept_at_zero(idata):
    """Draws of the un-centred intercept, the expected response at x = 0."""
    draws = flat_draws(idata, ["beta0", "beta1"])
    return draws["beta0"].values - draws["beta1"].values * _xbar(idata)


def posterior_table(idata, var_names=None, level=0.95, kind="equal"):
    """Mean, sd, median and credible interval per parameter."""
    var_names = var_names or PARAMS
    draws = flat_draws(idata, var_names)
    rows = []
    for v in var_names:
        lower, upper = interval(draws[v], level, kind)
        rows.append({
            "Parameter": v,
            "Mean": draws[v].mean(),
            "SD": draws[v].std(),
            "Median": draws[v].median(),
            "Lower": lower,
            "Upper": upper,
        })
    return pd.DataFrame(rows)
