"""Section 6: BUGS with JAGS -- describe the model, let the engine build the sampler."""
import streamlit as st
import pandas as pd

from mcbayes.data_loader import load_data, sidebar_filters, regression_arrays
from mcbayes.plotting import posterior_histograms, trace_plot
from mcbayes.runs import fit
from mcbayes.engines import JAGS_MODEL, EngineUnavailableError, engine_available, jags_inits, model_data
from mcbayes.diagnostics import convergence_summary
from mcbayes.constants import DEFAULT_SAMPLER_SETTINGS, PARAMS, X_COL, Y_COL
from mcbayes.ui_components import (
    section_header, concept_box, insight_box, warning_box, code_example, model_listing,
    pros_cons, engine_missing_box, quiz, takeaways, navigation,
)

# ---------------------------------------------------------------------------
df = load_data()
fdf = sidebar_filters(df)

section_header(6, "BUGS with JAGS", part="III")

x, y = regression_arrays(fdf, X_COL, Y_COL)
if len(x) < 3:
    st.warning("Not enough data for a regression. Adjust sidebar filters.")
    st.stop()

# ---------------------------------------------------------------------------
# 1. Theory
# ---------------------------------------------------------------------------
concept_box(
    "Write the Model, Not the Sampler",
    "Section 5 derived full conditionals by hand. That is fine for three parameters and "
    "miserable for thirty. The BUGS language (Bayesian inference Using Gibbs Sampling) lets you "
    "write the model as a list of distributional statements and hands the derivations to an "
    "engine. JAGS (Just Another Gibbs Sampler) reads BUGS code, works out the graph of "
    "dependencies, and picks a sampler for each node: conjugate updates where it can find them, "
    "slice sampling where it cannot.",
)

model_listing(
    JAGS_MODEL, "BUGS",
    caption="Two BUGS conventions to notice: dnorm takes a precision, not a standard deviation, "
            "and '<-' defines a deterministic node (sigma is computed from tau, never sampled).",
)

warning_box(
    "Writing dnorm(0, 100) in BUGS and meaning 'sd 100'. That is a precision of 100, i.e. an sd "
    "of 0.1: a very strong prior. The vague version is dnorm(0, 1.0E-4)."
)

st.divider()

# ---------------------------------------------------------------------------
# 2. Data and initial values
# ---------------------------------------------------------------------------
st.subheader("What JAGS Receives")

data = model_data(x, y)
inits = jags_inits(x, y, DEFAULT_SAMPLER_SETTINGS["n_chains"], seed=DEFAULT_SAMPLER_SETTINGS["seed"])

data_col, init_col = st.columns(2)
with data_col:
    st.markdown("**Data list**")
    scalars = {k: v for k, v in data.items() if k not in ("x", "y")}
    st.dataframe(pd.Series(scalars, name="value").to_frame(), use_container_width=True)
    st.caption(f"Plus the vectors x and y, {data['N']} values each.")
with init_col:
    st.markdown("**Initial values, one set per chain**")
    st.dataframe(pd.DataFrame(inits), use_container_width=True)
    st.caption(
        "Starting points are deliberately scattered around the least-squares fit so that chains "
        "which forget where they started can be told apart from chains that have not."
    )

st.divider()

# ---------------------------------------------------------------------------
# 3. Run it
# ---------------------------------------------------------------------------
st.subheader("Sampling")

code_example("""
import pyjags

model = pyjags.Model(code=JAGS_MODEL, data=data, init=inits, chains=4, adapt=500)
samples = model.sample(2500, vars=["beta0", "beta1", "tau", "sigma"])
# each entry has shape (1, iterations, chains); drop the first 500 as burn-in
beta1 = samples["beta1"][0, 500:, :]
""")

if not engine_available("jags"):
    engine_missing_box(
        "JAGS could not be loaded (install the JAGS library, then `pip install pyjags`)"
    )

settings = DEFAULT_SAMPLER_SETTINGS
try:
    jags = fit("jags", x, y, n_draws=settings["n_draws"], burn_in=settings["burn_in"],
               n_chains=settings["n_chains"])
except EngineUnavailableError as e:
    engine_missing_box(e)

st.plotly_chart(trace_plot(jags, PARAMS), use_container_width=True)

st.markdown("**Summary**")
st.dataframe(convergence_summary(jags, PARAMS).round(4), use_container_width=True)

gibbs = fit("gibbs", x, y, n_draws=settings["n_draws"], burn_in=settings["burn_in"],
            n_chains=settings["n_chains"])
st.markdown("**JAGS against our own Gibbs sampler**")
st.plotly_chart(posterior_histograms({"gibbs": gibbs, "jags": jags}, PARAMS), use_container_width=True)

insight_box(
    "The two histograms lie on top of each other. That is expected: for this model JAGS spots "
    "the same conjugate structure we exploited by hand and ends up running essentially the same "
    "Gibbs sampler, only one we never had to write."
)

st.divider()

pros_cons(
    pros=[
        "The model code reads like the maths",
        "No derivations: JAGS finds conjugacy itself and falls back to slice sampling",
        "Decades of textbooks and examples use BUGS syntax",
    ],
    cons=[
        "Still Gibbs underneath, so strongly correlated posteriors mix slowly",
        "Precision parameterisation trips up almost everyone once",
        "Needs the JAGS C++ library installed outside Python",
    ],
)

st.divider()

quiz(
    "In the BUGS model, why is sigma written with '<-' instead of '~'?",
    [
        "Because sigma has a flat prior",
        "Because sigma is a deterministic function of tau, not a separate random quantity",
        "Because JAGS cannot sample sigma",
        "Because sigma is data",
    ],
    correct_idx=1,
    explanation="'<-' defines a logical node. JAGS samples tau and computes sigma = 1/sqrt(tau) for "
                "every draw, so monitoring sigma costs nothing extra.",
    key="sec6_quiz1",
)

st.divider()

takeaways([
    "BUGS separates the model from the algorithm: you write distributions, JAGS builds the sampler.",
    "dnorm in BUGS uses a precision, 1 / variance.",
    "Deterministic nodes ('<-') let you monitor derived quantities like sigma for free.",
    "JAGS results on this model match the hand-written Gibbs sampler.",
])

navigation(
    prev_label="Sec 5: Gibbs and Metropolis-Hastings",
    prev_page="05_Gibbs_and_Metropolis.py",
    next_label="Sec 7: Stan and HMC",
    next_page="07_Stan_and_HMC.py",
)
