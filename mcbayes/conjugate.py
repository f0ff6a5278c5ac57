"""Closed-form conjugate updates for normal data.

Two models are covered:

* Normal-Normal: unknown mean, known standard deviation ``sigma``.
* Normal-Gamma: unknown mean *and* precision. The prior is
  ``mu | tau ~ N(mu0, 1 / (kappa0 * tau))`` and ``tau ~ Gamma(shape0, rate0)``.

Everything is returned as plain dicts so the pages can drop values straight
into metrics and tables.
"""
import numpy as np
import pandas as pd
from scipy import stats
from scipy.special import gammaln


def _check_positive(**values):
    for name, value in values.items():
        if not value > 0:
            raise ValueError(f"{name} must be positive, got {value}")


def normal_known_variance_update(data, prior_mean, prior_sd, sigma):
    """Posterior for a normal mean when the data standard deviation is known."""
    _check_positive(prior_sd=prior_sd, sigma=sigma)
    data = np.asarray(data, dtype=float)
    n = len(data)
    prior_prec = 1.0 / prior_sd**2
    data_prec = n / sigma**2
    post_prec = prior_prec + data_prec
    sample_mean = data.mean() if n else 0.0
    post_mean = (prior_mean * prior_prec + sample_mean * data_prec) / post_prec
    return {
        "n": n,
        "sample_mean": sample_mean,
        "post_mean": post_mean,
        "post_sd": np.sqrt(1.0 / post_prec),
        "data_weight": data_prec / post_prec,
        "prior_weight": prior_prec / post_prec,
    }


def sequential_updates(data, prior_mean, prior_sd, sigma):
    """Apply the Normal-Normal update one observation at a time.

    Yesterday's posterior is today's prior, so the final row matches the
    batch result of :func:`normal_known_variance_update`.
    """
    _check_positive(prior_sd=prior_sd, sigma=sigma)
    rows = []
    curr_mean, curr_sd = prior_mean, prior_sd
    for i, obs in enumerate(np.asarray(data, dtype=float)):
        step = normal_known_variance_update([obs], curr_mean, curr_sd, sigma)
        curr_mean, curr_sd = step["post_mean"], step["post_sd"]
        rows.append({
            "step": i + 1,
            "observation": obs,
            "posterior_mean": curr_mean,
            "posterior_sd": curr_sd,
        })
    return pd.DataFrame(rows, columns=["step", "observation", "posterior_mean", "posterior_sd"])


def normal_gamma_update(data, mu0, kappa0, shape0, rate0):
    """Update Normal-Gamma hyperparameters with observed data."""
    _check_positive(kappa0=kappa0, shape0=shape0, rate0=rate0)
    data = np.asarray(data, dtype=float)
    n = len(data)
    if n == 0:
        return {"mu": mu0, "kappa": kappa0, "shape": shape0, "rate": rate0, "n": 0}
    xbar = data.mean()
    ss = np.sum((data - xbar) ** 2)
    kappa_n = kappa0 + n
    return {
        "mu": (kappa0 * mu0 + n * xbar) / kappa_n,
        "kappa": kappa_n,
        "shape": shape0 + n / 2.0,
        "rate": rate0 + 0.5 * ss + kappa0 * n * (xbar - mu0) ** 2 / (2.0 * kappa_n),
        "n": n,
    }


def normal_gamma_marginal_mu(post):
    """Student-t marginal posterior of the mean (a frozen scipy distribution)."""
    scale = np.sqrt(post["rate"] / (post["shape"] * post["kappa"]))
    return stats.t(df=2.0 * post["shape"], loc=post["mu"], scale=scale)


def normal_gamma_marginal_sigma_mean(post):
    """Posterior mean of sigma, E[tau^-1/2], for a Gamma(shape, rate) precision."""
    shape, rate = post["shape"], post["rate"]
    if shape <= 0.5:
        return np.inf
    return np.sqrt(rate) * np.exp(gammaln(shape - 0.5) - gammaln(shape))


def sample_normal_gamma(post, n, seed=42):
    """Exact Monte Carlo draws of (mu, sigma) from a Normal-Gamma posterior."""
    rng = np.random.default_rng(seed)
    tau = rng.gamma(post["shape"], 1.0 / post["rate"], size=n)
    mu = rng.normal(post["mu"], 1.0 / np.sqrt(post["kappa"] * tau))
    return pd.DataFrame({"mu": mu, "sigma": 1.0 / np.sqrt(tau), "tau": tau})


def credible_interval(dist, level=0.95):
    """Equal-tailed credible interval of a frozen scipy distribution."""
    if not 0 < level < 1:
        raise ValueError(f"level must be in (0, 1), got {level}")
    alpha = 1 - level
    return dist.ppf(alpha / 2), dist.ppf(1 - alpha / 2)
