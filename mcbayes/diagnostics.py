"""MCMC convergence diagnostics.

Autocorrelation comes from statsmodels; Rhat, effective sample size and the
summary table come from ArviZ (rank-normalised split-Rhat, Vehtari et al.
2021). The helpers here mostly reshape their output for the deck.
"""
import arviz as az
import numpy as np
from statsmodels.tsa.stattools import acf

from mcbayes.constants import MIN_ESS_PER_CHAIN, PARAMS, RHAT_THRESHOLD


def chain_array(idata, var):
    """Posterior draws of one variable as a (chain, draw) numpy array."""
    return idata.posterior[var].values


def autocorrelation(chain, max_lag=50):
    """Sample autocorrelation of a single chain for lags 0..max_lag."""
    chain = np.asarray(chain, dtype=float)
    if len(chain) < 2:
        raise ValueError("autocorrelation needs at least 2 draws")
    max_lag = min(max_lag, len(chain) - 1)
    return acf(chain, nlags=max_lag, fft=True)


def lag_pairs(chain, lag=1):
    """Pairs (theta_t, theta_{t+lag}) and their correlation, for lag scatter plots."""
    chain = np.asarray(chain, dtype=float)
    if not 1 <= lag < len(chain):
        raise ValueError(f"lag must be between 1 and {len(chain) - 1}, got {lag}")
    current, following = chain[:-lag], chain[lag:]
    return current, following, np.corrcoef(current, following)[0, 1]


def rhat(idata, var_names=None):
    """Rank-normalised split-Rhat per parameter."""
    var_names = var_names or PARAMS
    ds = az.rhat(idata, var_names=var_names)
    return {v: float(ds[v].values) for v in var_names}


def ess(idata, var_names=None, method="bulk"):
    """Effective sample size per parameter (``bulk`` or ``tail``)."""
    var_names = var_names or PARAMS
    ds = az.ess(idata, var_names=var_names, method=method)
    return {v: float(ds[v].values) for v in var_names}


def convergence_summary(idata, var_names=None, hdi_prob=0.95,
                        rhat_threshold=RHAT_THRESHOLD, min_ess_per_chain=MIN_ESS_PER_CHAIN):
    """ArviZ summary table with a ``converged`` verdict per parameter."""
    var_names = var_names or PARAMS
    summary = az.summary(idata, var_names=var_names, hdi_prob=hdi_prob)
    n_chains = idata.posterior.sizes["chain"]
    summary["converged"] = (
        (summary["r_hat"] < rhat_threshold)
        & (summary["ess_bulk"] >= min_ess_per_chain * n_chains)
    )
    return summary


def discard_burn_in(idata, n):
    """Drop the first ``n`` draws of every chain."""
    n_draws = idata.posterior.sizes["draw"]
    if not 0 <= n < n_draws:
        raise ValueError(f"burn-in must be between 0 and {n_draws - 1}, got {n}")
    return idata.isel(draw=slice(n, None))


def thin(idata, k):
    """Keep every ``k``-th draw of every chain."""
    if k < 1:
        raise ValueError(f"thinning interval must be at least 1, got {k}")
    return idata.isel(draw=slice(None, None, k))


def _spectral_variance(segment):
    # variance of the segment mean times its length, n / ESS inflating the raw variance
    return np.var(segment, ddof=1) * len(segment) / az.ess(segment, method="mean")


def geweke_z(chain, first=0.1, last=0.5):
    """Geweke z-score comparing the mean of the early and late parts of a chain.

    |z| much larger than 2 suggests the start of the chain was not yet
    drawn from the stationary distribution.
    """
    chain = np.asarray(chain, dtype=float)
    if first <= 0 or last <= 0 or first + last > 1:
        raise ValueError("first and last must be positive fractions that sum to at most 1")
    n = len(chain)
    a = chain[:int(first * n)]
    b = chain[n - int(last * n):]
    if len(a) < 4 or len(b) < 4:
        raise ValueError("chain too short for a Geweke comparison")
    se = np.sqrt(_spectral_variance(a) / len(a) + _spectral_variance(b) / len(b))
    return (a.mean() - b.mean()) / se
