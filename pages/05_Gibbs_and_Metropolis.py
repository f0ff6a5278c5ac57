"""Section 5: Gibbs and Metropolis-Hastings -- two samplers written by hand."""
import streamlit as st
import numpy as np
import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from mcbayes.data_loader import load_data, sidebar_filters, regression_arrays
from mcbayes.plotting import apply_common_layout
from mcbayes.runs import fit
from mcbayes.samplers import acceptance_rates
from mcbayes.inference import posterior_table
from mcbayes.stats_helpers import ols_fit
from mcbayes.constants import CHAIN_COLORS, PARAMS, SOURCE_COLORS, SOURCE_LABELS, X_COL, Y_COL
from mcbayes.ui_components import (
    section_header, concept_box, formula_box, insight_box, warning_box,
    code_example, pros_cons, quiz, takeaways, navigation,
)

# ---------------------------------------------------------------------------
df = load_data()
fdf = sidebar_filters(df)

section_header(5, "Gibbs and Metropolis-Hastings", part="III")

x, y = regression_arrays(fdf, X_COL, Y_COL)
if len(x) < 3:
    st.warning("Not enough data for a regression. Adjust sidebar filters.")
    st.stop()

# ---------------------------------------------------------------------------
# 1. The model
# ---------------------------------------------------------------------------
concept_box(
    "One Model, Two Ways to Walk Around Its Posterior",
    "The model is the regression from Section 2 with priors attached: a wide normal on the "
    "intercept, a wide normal on the slope, and a vague Gamma on the precision tau = 1/sigma^2. "
    "The joint posterior has no name. We cannot draw from it directly, but we can build a "
    "Markov chain whose long-run distribution <em>is</em> the posterior, and then treat the "
    "chain's states as (correlated) posterior draws.",
)

formula_box(
    "Bayesian Linear Regression",
    r"y_i \sim \mathcal{N}\!\left(\beta_0 + \beta_1 (x_i - \bar x),\, 1/\tau\right),\quad "
    r"\beta_0 \sim \mathcal{N}(0, 100^2),\; \beta_1 \sim \mathcal{N}(0, 10^2),\; \tau \sim \mathrm{Gamma}(0.01, 0.01)",
)

st.divider()

# ---------------------------------------------------------------------------
# 2. Gibbs
# ---------------------------------------------------------------------------
st.subheader("Gibbs Sampling: One Parameter at a Time")

st.markdown(
    "Freeze everything but one parameter and its posterior is a textbook distribution. Gibbs "
    "exploits that: cycle through the parameters, drawing each from its *full conditional* given "
    "the current values of the others. No tuning, no rejections."
)

formula_box(
    "Full Conditionals",
    r"\beta_0 \mid \cdot \sim \mathcal{N},\quad \beta_1 \mid \cdot \sim \mathcal{N},\quad "
    r"\tau \mid \cdot \sim \mathrm{Gamma}\!\left(a + \tfrac{n}{2},\; b + \tfrac12 \textstyle\sum_i r_i^2\right)",
    "r_i are the residuals under the current beta0 and beta1.",
)

set_col1, set_col2, set_col3 = st.columns(3)
with set_col1:
    n_draws = st.slider("Draws per chain", 200, 5000, 2000, 100, key="s5_draws")
with set_col2:
    burn_in = st.slider("Burn-in", 0, 2000, 500, 50, key="s5_burn")
with set_col3:
    n_chains = st.slider("Chains", 1, 6, 4, key="s5_chains")

gibbs = fit("gibbs", x, y, n_draws=n_draws, burn_in=burn_in, n_chains=n_chains)

n_path = st.slider("Show the first k moves of chain 1", 5, 200, 40, key="s5_path")
fig_path = make_subplots(rows=1, cols=2, subplot_titles=["Gibbs path (beta0, beta1)", "Metropolis path (beta0, beta1)"])
g_b0 = gibbs.posterior["beta0"].values[0, :n_path]
g_b1 = gibbs.posterior["beta1"].values[0, :n_path]
# Gibbs moves one coordinate at a time, so draw the path as a staircase
stair_x = np.repeat(g_b0, 2)[1:]
stair_y = np.repeat(g_b1, 2)[:-1]
fig_path.add_trace(go.Scatter(
    x=stair_x, y=stair_y, mode="lines+markers",
    line=dict(color=SOURCE_COLORS["gibbs"], width=1), marker=dict(size=4), showlegend=False,
), row=1, col=1)

st.divider()

# ---------------------------------------------------------------------------
# 3. Metropolis-Hastings
# ---------------------------------------------------------------------------
st.subheader("Metropolis-Hastings: Propose, Then Accept or Reject")

st.markdown(
    "Metropolis-Hastings needs only the *unnormalised* posterior: prior times likelihood, which "
    "we can always evaluate. From the current point, propose a random step. If the posterior is "
    "higher there, go. If it is lower, go with probability equal to the ratio. Otherwise stay put, "
    "and record the current point again."
)

formula_box(
    "Acceptance Probability (symmetric random walk)",
    r"\alpha = \min\left(1,\; \frac{p(\theta^\ast \mid y)}{p(\theta^{(t)} \mid y)}\right)",
    "The unknown normalising constant cancels in the ratio. That cancellation is the whole trick.",
)

scale = st.slider(
    "Proposal scale (multiplies step sizes matched to each parameter)", 0.05, 10.0, 1.0, 0.05,
    key="s5_scale",
)
metro = fit("metropolis", x, y, n_draws=n_draws, burn_in=burn_in, n_chains=n_chains, proposal_scale=scale)
rates = acceptance_rates(metro)

m_b0 = metro.posterior["beta0"].values[0, :n_path]
m_b1 = metro.posterior["beta1"].values[0, :n_path]
fig_path.add_trace(go.Scatter(
    x=m_b0, y=m_b1, mode="lines+markers",
    line=dict(color=SOURCE_COLORS["metropolis"], width=1), marker=dict(size=4), showlegend=False,
), row=1, col=2)
fig_path.update_xaxes(title_text="beta0")
fig_path.update_yaxes(title_text="beta1")
fig_path.update_layout(template="plotly_white", height=430, margin=dict(t=60, b=40))
st.plotly_chart(fig_path, use_container_width=True)

r1, r2, r3 = st.columns(3)
r1.metric("Mean acceptance rate", f"{rates.mean():.1%}")
r2.metric("Lowest chain", f"{rates.min():.1%}")
r3.metric("Highest chain", f"{rates.max():.1%}")

if rates.mean() > 0.7:
    st.info("Very high acceptance: the steps are tiny and the chain crawls. Try a larger scale.")
elif rates.mean() < 0.1:
    st.info("Very low acceptance: almost every proposal overshoots and the chain sits still. Try a smaller scale.")

fig_tr = go.Figure()
for c in range(metro.posterior.sizes["chain"]):
    fig_tr.add_trace(go.Scatter(
        y=metro.posterior["beta1"].values[c], mode="lines",
        line=dict(color=CHAIN_COLORS[c % len(CHAIN_COLORS)], width=0.7), name=f"chain {c + 1}",
    ))
fig_tr.update_xaxes(title_text="Iteration (after burn-in)")
fig_tr.update_yaxes(title_text="beta1")
apply_common_layout(fig_tr, title=f"Metropolis trace of beta1 at scale {scale:.2f}", height=380)
st.plotly_chart(fig_tr, use_container_width=True)

warning_box(
    "Chasing a 100% acceptance rate. A sampler that accepts everything is taking steps so small "
    "it barely moves. For random-walk Metropolis in a few dimensions, something like 20-50% is the "
    "usual target."
)

st.divider()

# ---------------------------------------------------------------------------
# 4. Do they agree?
# ---------------------------------------------------------------------------
st.subheader("Do They Agree?")

ols = ols_fit(x, y, center=True)
g_tab = posterior_table(gibbs, PARAMS).set_index("Parameter")
m_tab = posterior_table(metro, PARAMS).set_index("Parameter")
compare = pd.DataFrame({
    "OLS": [ols["intercept"], ols["slope"], ols["sigma"]],
    f"{SOURCE_LABELS['gibbs']} mean": g_tab["Mean"].values,
    f"{SOURCE_LABELS['metropolis']} mean": m_tab["Mean"].values,
    "Gibbs sd": g_tab["SD"].values,
    "Metropolis sd": m_tab["SD"].values,
}, index=PARAMS).round(4)
st.dataframe(compare, use_container_width=True)

insight_box(
    "With vague priors both samplers land on the OLS estimates, and their posterior sds match the "
    "classical standard errors closely. Two completely different algorithms, the same target. "
    "When the scale slider is pushed to an extreme the Metropolis column starts to drift: that is "
    "what Section 8's diagnostics are for."
)

st.divider()

# ---------------------------------------------------------------------------
# 5. Trade-offs
# ---------------------------------------------------------------------------
st.subheader("Hand-written Samplers: Trade-offs")

pros_cons(
    pros=[
        "Every line is visible, so nothing is magic",
        "Gibbs needs no tuning and never rejects",
        "Metropolis needs only the unnormalised posterior, so it works for any model you can write down",
        "Cheap per iteration for small models",
    ],
    cons=[
        "Gibbs needs conditionals you can sample, which means re-deriving maths for every new model",
        "Metropolis needs tuning, and a badly tuned chain can look fine while exploring nothing",
        "Both slow down badly when parameters are strongly correlated",
        "Easy to get subtly wrong: a missing Jacobian still produces plausible-looking numbers",
    ],
)

code_example("""
import numpy as np

def log_post(theta, xc, y):
    b0, b1, log_sigma = theta
    tau = np.exp(-2 * log_sigma)
    lp = -0.5 * (b0 / 100) ** 2 - 0.5 * (b1 / 10) ** 2          # normal priors
    lp += (0.01 - 1) * np.log(tau) - 0.01 * tau + np.log(2 * tau)  # Gamma prior + Jacobian
    r = y - b0 - b1 * xc
    return lp - len(y) * log_sigma - 0.5 * tau * r @ r

theta = np.array([y.mean(), 0.0, np.log(y.std())])
lp = log_post(theta, xc, y)
for t in range(5000):
    prop = theta + rng.normal(size=3) * step
    lp_prop = log_post(prop, xc, y)
    if np.log(rng.uniform()) < lp_prop - lp:
        theta, lp = prop, lp_prop
    draws[t] = theta
""")

st.divider()

quiz(
    "Why does Metropolis-Hastings not need the normalising constant p(y)?",
    [
        "Because the prior is flat",
        "Because it only ever uses ratios of posterior densities, in which p(y) cancels",
        "Because the samples are thinned",
        "Because it uses the full conditionals",
    ],
    correct_idx=1,
    explanation="The acceptance probability compares the posterior at two points. p(y) appears in both "
                "the numerator and the denominator and cancels.",
    key="sec5_quiz1",
)

st.divider()

takeaways([
    "Gibbs cycles through full conditionals; every draw is accepted and no tuning is needed.",
    "Metropolis-Hastings proposes and accepts with a density ratio, so it only needs the unnormalised posterior.",
    "The proposal scale controls the acceptance rate; too high or too low both mean slow exploration.",
    "With vague priors both samplers reproduce the OLS answer, which is a sanity check, not a coincidence.",
])

navigation(
    prev_label="Sec 4: Monte Carlo Integration",
    prev_page="04_Monte_Carlo_Integration.py",
    next_label="Sec 6: BUGS with JAGS",
    next_page="06_BUGS_with_JAGS.py",
)
