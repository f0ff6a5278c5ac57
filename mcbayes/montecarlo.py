"""Plain Monte Carlo: estimate expectations by averaging over draws."""
import numpy as np
import pandas as pd


def mc_estimate(draws, func=None):
    """Monte Carlo estimate of E[func(theta)] with its standard error.

    The standard error assumes independent draws. For MCMC output use the
    effective sample size instead of ``len(draws)``.
    """
    values = np.asarray(draws, dtype=float)
    if func is not None:
        values = np.asarray(func(values), dtype=float)
    n = len(values)
    if n < 2:
        raise ValueError("need at least 2 draws for a Monte Carlo standard error")
    return {
        "estimate": values.mean(),
        "se": values.std(ddof=1) / np.sqrt(n),
        "n": n,
    }


def running_mean(draws):
    """Cumulative average of the draws."""
    values = np.asarray(draws, dtype=float)
    return np.cumsum(values) / np.arange(1, len(values) + 1)


def mc_error_curve(sampler, sizes, func=None, seed=42):
    """Estimate and standard error for a sequence of Monte Carlo sample sizes.

    ``sampler(n, rng)`` must return ``n`` independent draws.
    """
    rng = np.random.default_rng(seed)
    rows = []
    for n in sizes:
        est = mc_estimate(sampler(n, rng), func)
        rows.append({"n": n, "estimate": est["estimate"], "se": est["se"]})
    return pd.DataFrame(rows, columns=["n", "estimate", "se"])
