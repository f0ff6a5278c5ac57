"""Cached sampler runs shared by the later sections of the deck."""
import streamlit as st

from mcbayes.constants import DEFAULT_SAMPLER_SETTINGS, SOURCE_LABELS
from mcbayes.engines import compile_stan_model, engine_available, run_jags, run_stan
from mcbayes.samplers import gibbs_linear_regression, metropolis_linear_regression

SOURCES = ["gibbs", "metropolis", "jags", "stan"]
BUILTIN_SOURCES = ["gibbs", "metropolis"]


def available_sources():
    """Sample sources that can run here; the hand-written samplers always can."""
    return [s for s in SOURCES if s in BUILTIN_SOURCES or engine_available(s)]


@st.cache_resource(show_spinner="Compiling the Stan program...")
def stan_model():
    """Compile the Stan program once per server process."""
    return compile_stan_model()


@st.cache_resource(show_spinner="Running the sampler...")
def fit(source, x, y, priors=None, n_draws=2000, burn_in=500, n_chains=4, thin=1, seed=42,
        proposal_scale=1.0):
    """Run one of the four samplers on (x, y) and return its InferenceData."""
    common = dict(priors=priors, n_draws=n_draws, burn_in=burn_in, n_chains=n_chains, thin=thin, seed=seed)
    if source == "gibbs":
        return gibbs_linear_regression(x, y, **common)
    if source == "metropolis":
        return metropolis_linear_regression(x, y, proposal_scale=proposal_scale, **common)
    if source == "jags":
        return run_jags(x, y, **common)
    if source == "stan":
        return run_stan(x, y, model=stan_model(), **common)
    raise ValueError(f"unknown sample source {source!r}; expected one of {SOURCES}")


def sampler_sidebar(key, sources=None):
    """Sidebar widgets for choosing a sampler and its run length."""
    defaults = DEFAULT_SAMPLER_SETTINGS
    sources = sources or available_sources()
    st.sidebar.header("Sampler")
    source = st.sidebar.selectbox(
        "Sample source", sources,
        format_func=lambda s: SOURCE_LABELS.get(s, s),
        key=f"{key}_source",
    )
    n_chains = st.sidebar.slider("Chains", 1, 6, defaults["n_chains"], key=f"{key}_chains")
    n_draws = st.sidebar.slider("Draws per chain", 200, 5000, defaults["n_draws"], 100, key=f"{key}_draws")
    burn_in = st.sidebar.slider("Burn-in / warm-up", 0, 2000, defaults["burn_in"], 50, key=f"{key}_burn")
    thin = st.sidebar.slider("Thinning interval", 1, 10, defaults["thin"], key=f"{key}_thin")
    seed = st.sidebar.number_input("Random seed", 0, 10_000, defaults["seed"], key=f"{key}_seed")
    return {
        "source": source,
        "n_chains": n_chains,
        "n_draws": n_draws,
        "burn_in": burn_in,
        "thin": thin,
        "seed": int(seed),
    }
