"""Bridges to the two external probabilistic-programming engines.

JAGS reads a model in the BUGS dialect and builds its own Gibbs /
slice-sampling scheme; Stan compiles a program to C++ and samples it with
Hamiltonian Monte Carlo (NUTS). Both are given the same regression model
and priors as the hand-written samplers in :mod:`mcbayes.samplers`, and
both results are converted to ArviZ ``InferenceData``.

Neither engine is a pure-Python install: pyjags needs the JAGS library and
cmdstanpy needs a CmdStan toolchain (``python -m cmdstanpy.install_cmdstan``).
"""
import logging
import os
import tempfile

import arviz as az
import numpy as np

from mcbayes.samplers import check_inputs, initial_values, resolve_priors, to_inference_data

_log = logging.getLogger(__name__)

ENGINES = ("jags", "stan")

JAGS_MODEL = """
model {
    for (i in 1:N) {
        mu[i] <- beta0 + beta1 * (x[i] - xbar)
        y[i] ~ dnorm(mu[i], tau)
    }
    beta0 ~ dnorm(beta0_mean, beta0_prec)
    beta1 ~ dnorm(beta1_mean, beta1_prec)
    tau ~ dgamma(tau_shape, tau_rate)
    sigma <- 1 / sqrt(tau)
}
"""

STAN_MODEL = """
data {
  int<lower=3> N;
  vector[N] x;
  vector[N] y;
  real xbar;
  real beta0_mean;
  real<lower=0> beta0_prec;
  real beta1_mean;
  real<lower=0> beta1_prec;
  real<lower=0> tau_shape;
  real<lower=0> tau_rate;
}
parameters {
  real beta0;
  real beta1;
  real<lower=0> tau;
}
transformed parameters {
  real<lower=0> sigma = inv_sqrt(tau);
}
model {
  beta0 ~ normal(beta0_mean, inv_sqrt(beta0_prec));
  beta1 ~ normal(beta1_mean, inv_sqrt(beta1_prec));
  tau ~ gamma(tau_shape, tau_rate);
  y ~ normal(beta0 + beta1 * (x - xbar), sigma);
}
"""

MONITORED = ["beta0", "beta1", "tau", "sigma"]


class EngineUnavailableError(RuntimeError):
    """The requested engine is not installed or cannot find its toolchain."""


def model_data(x, y, priors=None):
    """Data block shared by the JAGS and Stan programs.

    Both dialects parameterise the normal prior here by precision, the BUGS
    convention; the Stan program converts back with ``inv_sqrt``.
    """
    p = resolve_priors(priors)
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    return {
        "N": int(len(y)),
        "x": x,
        "y": y,
        "xbar": float(x.mean()),
        "beta0_mean": float(p["beta0_mean"]),
        "beta0_prec": 1.0 / p["beta0_sd"] ** 2,
        "beta1_mean": float(p["beta1_mean"]),
        "beta1_prec": 1.0 / p["beta1_sd"] ** 2,
        "tau_shape": float(p["tau_shape"]),
        "tau_rate": float(p["tau_rate"]),
    }


def jags_inits(x, y, n_chains, seed=42):
    """Dispersed starting values with a reproducible RNG stream for every chain."""
    inits = initial_values(x, y, n_chains, seed)
    for c, init in enumerate(inits):
        init[".RNG.name"] = "base::Mersenne-Twister"
        init[".RNG.seed"] = int(seed) + c
    return inits


def engine_available(name):
    """Whether the named engine can actually run in this environment."""
    if name == "jags":
        try:
            import pyjags  # noqa: F401
        except (ImportError, OSError):
            return False
        return True
    if name == "stan":
        try:
            import cmdstanpy
        except ImportError:
            return False
        try:
            cmdstanpy.cmdstan_path()
        except ValueError:
            return False
        return True
    raise ValueError(f"unknown engine {name!r}; expected one of {ENGINES}")


def _require(name):
    if not engine_available(name):
        hint = {
            "jags": "install JAGS and then `pip install pyjags`",
            "stan": "run `python -m cmdstanpy.install_cmdstan`",
        }[name]
        raise EngineUnavailableError(f"{name} is not available: {hint}")


def run_jags(x, y, priors=None, n_draws=2000, burn_in=500, n_chains=4, thin=1, seed=42, adapt=500):
    """Compile the BUGS model in JAGS, burn in, and sample every chain."""
    x, y = check_inputs(x, y, n_draws, burn_in, n_chains, thin)
    _require("jags")
    import pyjags

    _log.info("JAGS: %d chains, adapt %d, burn-in %d, %d draws", n_chains, adapt, burn_in, n_draws)
    model = pyjags.Model(
        code=JAGS_MODEL,
        data=model_data(x, y, priors),
        init=jags_inits(x, y, n_chains, seed),
        chains=n_chains,
        adapt=adapt,
        progress_bar=False,
    )
    samples = model.sample(burn_in + n_draws, vars=MONITORED)
    # pyjags returns (node dimension, iteration, chain); every monitored node is scalar
    draws = {
        name: np.asarray(samples[name])[0].T[:, burn_in::thin]
        for name in MONITORED
    }
    return to_inference_data(draws, x, y)


def write_stan_file(directory=None):
    """Write the Stan program to disk, leaving an unchanged file untouched."""
    directory = directory or os.path.join(tempfile.gettempdir(), "mcbayes_stan")
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, "linear_regression.stan")
    if os.path.exists(path):
        with open(path) as f:
            if f.read() == STAN_MODEL:
                return path
    with open(path, "w") as f:
        f.write(STAN_MODEL)
    return path


def compile_stan_model(directory=None):
    """Compile (or reuse) the Stan executable for the regression program."""
    _require("stan")
    import cmdstanpy

    path = write_stan_file(directory)
    _log.info("Compiling Stan model %s", path)
    return cmdstanpy.CmdStanModel(stan_file=path)


def run_stan(x, y, priors=None, n_draws=2000, burn_in=500, n_chains=4, thin=1, seed=42, model=None):
    """Sample the Stan program with NUTS; warm-up iterations play the role of burn-in."""
    x, y = check_inputs(x, y, n_draws, burn_in, n_chains, thin)
    model = model or compile_stan_model()

    _log.info("Stan: %d chains, %d warm-up, %d draws", n_chains, burn_in, n_draws)
    fit = model.sample(
        data=model_data(x, y, priors),
        chains=n_chains,
        iter_warmup=burn_in,
        iter_sampling=n_draws,
        thin=thin,
        seed=seed,
        adapt_engaged=burn_in > 0,
        show_progress=False,
    )
    return az.from_cmdstanpy(
        posterior=fit,
        observed_data={"y": y},
        constant_data={"x": x},
    )
