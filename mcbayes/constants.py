"""Shared constants: colors, labels, priors, sampler defaults."""
import os

DATA_URL = "https://raw.githubusercontent.com/rmcelreath/rethinking/master/data/Howell1.csv"
DEFAULT_DATA_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), "Howell1.csv")


def data_path():
    """Location of the case dataset; MCBAYES_DATA overrides the repo default."""
    return os.environ.get("MCBAYES_DATA", DEFAULT_DATA_PATH)


REQUIRED_COLS = ["height", "weight", "age", "male"]

SEX_COLORS = {
    "Female": "#E63946",
    "Male": "#2A9D8F",
}

SEX_LIST = list(SEX_COLORS.keys())

ADULT_AGE = 18

FEATURE_COLS = ["height", "weight", "age"]

FEATURE_LABELS = {
    "height": "Height (cm)",
    "weight": "Weight (kg)",
    "age": "Age (years)",
    "male": "Male (0/1)",
}

# Regression studied throughout the deck
X_COL = "weight"
Y_COL = "height"

PARAMS = ["beta0", "beta1", "sigma"]

PARAM_LABELS = {
    "beta0": "beta0 (height at mean weight)",
    "beta1": "beta1 (cm per kg)",
    "sigma": "sigma (residual sd)",
    "tau": "tau (precision)",
}

PARAM_COLORS = {
    "beta0": "#E63946",
    "beta1": "#2A9D8F",
    "sigma": "#7209B7",
    "tau": "#F4A261",
}

CHAIN_COLORS = ["#E63946", "#2A9D8F", "#264653", "#F4A261", "#7209B7", "#FB8500"]

# Vague priors in BUGS style: normal on the coefficients, gamma on the precision.
DEFAULT_PRIORS = {
    "beta0_mean": 0.0,
    "beta0_sd": 100.0,
    "beta1_mean": 0.0,
    "beta1_sd": 10.0,
    "tau_shape": 0.01,
    "tau_rate": 0.01,
}

DEFAULT_SAMPLER_SETTINGS = {
    "n_chains": 4,
    "n_draws": 2000,
    "burn_in": 500,
    "thin": 1,
    "seed": 42,
}

SOURCE_LABELS = {
    "gibbs": "Gibbs (hand-written)",
    "metropolis": "Metropolis-Hastings (hand-written)",
    "jags": "JAGS (BUGS dialect)",
    "stan": "Stan (HMC / NUTS)",
}

SOURCE_COLORS = {
    "gibbs": "#264653",
    "metropolis": "#F4A261",
    "jags": "#2A9D8F",
    "stan": "#E63946",
}

# Convergence rules of thumb
RHAT_THRESHOLD = 1.01
MIN_ESS_PER_CHAIN = 100

PART_TITLES = {
    "I": "Data & Classical Regression",
    "II": "Bayesian Foundations",
    "III": "Markov Chain Monte Carlo",
    "IV": "Checking the Model",
    "V": "Using the Posterior",
}
