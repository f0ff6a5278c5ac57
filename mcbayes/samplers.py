"""Hand-written MCMC samplers for simple linear regression.

Both samplers target the same model, with the predictor centred at its mean::

    y_i   ~ N(beta0 + beta1 * (x_i - xbar), 1 / tau)
    beta0 ~ N(beta0_mean, beta0_sd^2)
    beta1 ~ N(beta1_mean, beta1_sd^2)
    tau   ~ Gamma(tau_shape, tau_rate)
    sigma = 1 / sqrt(tau)

which is exactly the model handed to JAGS and Stan in :mod:`mcbayes.engines`,
so their output can be compared draw for draw. Results are ArviZ
``InferenceData`` objects with ``(chain, draw)`` shaped posterior variables.
"""
import logging

import arviz as az
import numpy as np
from scipy import stats

from mcbayes.constants import DEFAULT_PRIORS

_log = logging.getLogger(__name__)


def resolve_priors(priors=None):
    """Fill in missing prior hyperparameters from the defaults and check them."""
    merged = dict(DEFAULT_PRIORS)
    merged.update(priors or {})
    for key in ("beta0_sd", "beta1_sd", "tau_shape", "tau_rate"):
        if not merged[key] > 0:
            raise ValueError(f"prior {key} must be positive, got {merged[key]}")
    return merged


def check_inputs(x, y, n_draws, burn_in, n_chains, thin):
    """Validate data and run lengths shared by every sampler; return float arrays."""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.ndim != 1 or x.shape != y.shape:
        raise ValueError(f"x and y must be 1-D arrays of equal length, got {x.shape} and {y.shape}")
    if len(x) < 3:
        raise ValueError("need at least 3 observations to fit a regression")
    if n_draws < 1:
        raise ValueError(f"n_draws must be at least 1, got {n_draws}")
    if burn_in < 0:
        raise ValueError(f"burn_in cannot be negative, got {burn_in}")
    if n_chains < 1:
        raise ValueError(f"n_chains must be at least 1, got {n_chains}")
    if thin < 1:
        raise ValueError(f"thin must be at least 1, got {thin}")
    return x, y


def _least_squares(xc, y):
    sxx = np.sum(xc**2)
    slope = np.sum(xc * (y - y.mean())) / sxx if sxx > 0 else 0.0
    resid_sd = max(np.std(y - y.mean() - slope * xc), 1e-3)
    return y.mean(), slope, resid_sd, sxx


def initial_values(x, y, n_chains, seed=None):
    """Over-dispersed starting points scattered around the least-squares fit.

    Starting chains far apart is what gives Rhat something to detect.
    """
    rng = np.random.default_rng(seed)
    xc = np.asarray(x, dtype=float) - np.mean(x)
    intercept, slope, resid_sd, _ = _least_squares(xc, np.asarray(y, dtype=float))
    inits = []
    for _ in range(n_chains):
        inits.append({
            "beta0": intercept + rng.normal(0, 2 * resid_sd),
            "beta1": slope + rng.normal(0, max(abs(slope), 1.0)),
            "tau": 1.0 / (resid_sd**2 * rng.uniform(0.25, 4.0)),
        })
    return inits


def _chain_rngs(seed, n_chains):
    children = np.random.SeedSequence(seed).spawn(n_chains + 1)
    init_seed = int(children[0].generate_state(1)[0])
    return init_seed, [np.random.default_rng(c) for c in children[1:]]


def _n_kept(n_draws, thin):
    return -(-n_draws // thin)


def to_inference_data(draws, x, y, sample_stats=None):
    """Package ``{name: (chain, draw) array}`` plus the data as InferenceData."""
    posterior = dict(draws)
    if "tau" in posterior and "sigma" not in posterior:
        posterior["sigma"] = 1.0 / np.sqrt(posterior["tau"])
    return az.from_dict(
        posterior=posterior,
        sample_stats=sample_stats,
        observed_data={"y": np.asarray(y, dtype=float)},
        constant_data={"x": np.asarray(x, dtype=float)},
    )


def _gibbs_chain(xc, y, p, init, n_draws, burn_in, thin, rng):
    n = len(y)
    sxx = np.sum(xc**2)
    prec0 = 1.0 / p["beta0_sd"] ** 2
    prec1 = 1.0 / p["beta1_sd"] ** 2
    shape_n = p["tau_shape"] + n / 2.0

    beta0, beta1, tau = init["beta0"], init["beta1"], init["tau"]
    out = np.empty((_n_kept(n_draws, thin), 3))
    k = 0
    for i in range(burn_in + n_draws):
        # beta0 | beta1, tau, y
        var = 1.0 / (prec0 + n * tau)
        mean = var * (prec0 * p["beta0_mean"] + tau * np.sum(y - beta1 * xc))
        beta0 = rng.normal(mean, np.sqrt(var))
        # beta1 | beta0, tau, y
        var = 1.0 / (prec1 + tau * sxx)
        mean = var * (prec1 * p["beta1_mean"] + tau * np.sum(xc * (y - beta0)))
        beta1 = rng.normal(mean, np.sqrt(var))
        # tau | beta0, beta1, y
        resid = y - beta0 - beta1 * xc
        tau = rng.gamma(shape_n, 1.0 / (p["tau_rate"] + 0.5 * resid @ resid))

        j = i - burn_in
        if j >= 0 and j % thin == 0:
            out[k] = beta0, beta1, tau
            k += 1
    return out


def gibbs_linear_regression(x, y, priors=None, n_draws=2000, burn_in=500, n_chains=4, thin=1, seed=42):
    """Systematic-scan Gibbs sampler using the closed-form full conditionals.

    Every parameter has a standard full conditional under this model
    (normal for the coefficients, gamma for the precision), so each update
    is an exact draw and nothing is ever rejected.
    """
    x, y = check_inputs(x, y, n_draws, burn_in, n_chains, thin)
    p = resolve_priors(priors)
    xc = x - x.mean()
    init_seed, rngs = _chain_rngs(seed, n_chains)
    inits = initial_values(x, y, n_chains, init_seed)

    _log.info("Gibbs: %d chains x %d draws (burn-in %d, thin %d)", n_chains, n_draws, burn_in, thin)
    chains = np.stack([
        _gibbs_chain(xc, y, p, inits[c], n_draws, burn_in, thin, rngs[c])
        for c in range(n_chains)
    ])
    draws = {"beta0": chains[:, :, 0], "beta1": chains[:, :, 1], "tau": chains[:, :, 2]}
    return to_inference_data(draws, x, y)


def log_posterior(theta, xc, y, priors):
    """Unnormalised log posterior of ``(beta0, beta1, log sigma)``.

    ``xc`` is the centred predictor. The Gamma prior is stated on the
    precision, so moving to log sigma adds the Jacobian ``log(2 * tau)``.
    """
    beta0, beta1, log_sigma = theta
    tau = np.exp(-2.0 * log_sigma)
    lp = stats.norm.logpdf(beta0, priors["beta0_mean"], priors["beta0_sd"])
    lp += stats.norm.logpdf(beta1, priors["beta1_mean"], priors["beta1_sd"])
    lp += stats.gamma.logpdf(tau, priors["tau_shape"], scale=1.0 / priors["tau_rate"])
    lp += np.log(2.0 * tau)
    resid = y - beta0 - beta1 * xc
    lp += -len(y) * log_sigma - 0.5 * tau * (resid @ resid)
    return lp


def proposal_sds(x, y, proposal_scale=1.0):
    """Random-walk step sizes scaled to the rough posterior sd of each parameter."""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    xc = x - x.mean()
    _, _, resid_sd, sxx = _least_squares(xc, y)
    n = len(y)
    return proposal_scale * np.array([
        resid_sd / np.sqrt(n),
        resid_sd / np.sqrt(max(sxx, 1e-12)),
        1.0 / np.sqrt(2.0 * n),
    ])


def _metropolis_chain(xc, y, p, init, steps, n_draws, burn_in, thin, rng):
    current = np.array([init["beta0"], init["beta1"], -0.5 * np.log(init["tau"])])
    current_lp = log_posterior(current, xc, y, p)
    out = np.empty((_n_kept(n_draws, thin), 3))
    accepted = np.zeros(_n_kept(n_draws, thin), dtype=int)
    proposals = np.zeros(_n_kept(n_draws, thin), dtype=int)
    n_accept = 0
    k = 0
    for i in range(burn_in + n_draws):
        proposal = current + rng.normal(size=3) * steps
        prop_lp = log_posterior(proposal, xc, y, p)
        accept = np.log(rng.uniform()) < prop_lp - current_lp
        if accept:
            current, current_lp = proposal, prop_lp

        j = i - burn_in
        if j >= 0:
            n_accept += accept
            # block j // thin holds every iteration up to the next kept draw
            accepted[j // thin] += accept
            proposals[j // thin] += 1
            if j % thin == 0:
                out[k] = current
                k += 1
    return out, accepted, proposals, n_accept / n_draws


def metropolis_linear_regression(x, y, priors=None, n_draws=2000, burn_in=500, n_chains=4,
                                 proposal_scale=1.0, thin=1, seed=42):
    """Random-walk Metropolis-Hastings on ``(beta0, beta1, log sigma)``.

    ``proposal_scale`` multiplies step sizes matched to the approximate
    posterior sd of each parameter. Around 1-2 gives acceptance rates in the
    usual 20-50% band; small values accept almost everything but crawl,
    large values barely move.
    """
    x, y = check_inputs(x, y, n_draws, burn_in, n_chains, thin)
    if not proposal_scale > 0:
        raise ValueError(f"proposal_scale must be positive, got {proposal_scale}")
    p = resolve_priors(priors)
    xc = x - x.mean()
    steps = proposal_sds(x, y, proposal_scale)
    init_seed, rngs = _chain_rngs(seed, n_chains)
    inits = initial_values(x, y, n_chains, init_seed)

    results = [
        _metropolis_chain(xc, y, p, inits[c], steps, n_draws, burn_in, thin, rngs[c])
        for c in range(n_chains)
    ]
    chains = np.stack([r[0] for r in results])
    accepted = np.stack([r[1] for r in results])
    proposals = np.stack([r[2] for r in results])
    rates = [r[3] for r in results]
    _log.info("Metropolis-Hastings acceptance rates: %s", ", ".join(f"{r:.1%}" for r in rates))

    draws = {
        "beta0": chains[:, :, 0],
        "beta1": chains[:, :, 1],
        "tau": np.exp(-2.0 * chains[:, :, 2]),
    }
    return to_inference_data(draws, x, y, sample_stats={"accepted": accepted, "proposals": proposals})


def acceptance_rates(idata):
    """Per-chain share of accepted proposals over every post-burn-in iteration.

    Each retained draw carries the counts for its whole thinning block, so
    the rate does not depend on ``thin``.
    """
    if "sample_stats" not in idata.groups() or "accepted" not in idata.sample_stats:
        raise ValueError("InferenceData has no acceptance record; only Metropolis runs store one")
    record = idata.sample_stats
    return (record["accepted"].sum(dim="draw") / record["proposals"].sum(dim="draw")).values
