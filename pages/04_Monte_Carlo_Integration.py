"""Section 4: Monte Carlo Integration -- replacing integrals with averages."""
import streamlit as st
import numpy as np
import pandas as pd
import plotly.graph_objects as go

from mcbayes.data_loader import load_data, sidebar_filters
from mcbayes.plotting import apply_common_layout
from mcbayes.conjugate import (
    normal_gamma_marginal_mu, normal_gamma_marginal_sigma_mean, normal_gamma_update, sample_normal_gamma,
)
from mcbayes.montecarlo import mc_error_curve, mc_estimate, running_mean
from mcbayes.constants import Y_COL
from mcbayes.ui_components import (
    section_header, concept_box, formula_box, insight_box, warning_box,
    code_example, quiz, takeaways, navigation,
)

# ---------------------------------------------------------------------------
df = load_data()
fdf = sidebar_filters(df)

section_header(4, "Monte Carlo Integration", part="II")

heights = fdf[Y_COL].dropna().values
if len(heights) < 3:
    st.warning("Not enough data for the current filters.")
    st.stop()

# ---------------------------------------------------------------------------
# 1. Theory
# ---------------------------------------------------------------------------
concept_box(
    "Every Posterior Question Is an Integral",
    "The posterior mean is an integral. So is the probability that a parameter exceeds some "
    "value, and so is a credible interval endpoint (well, the inverse of one). In general we want "
    "E[g(theta) | y] for some function g.<br><br>"
    "The Monte Carlo idea: if you can <b>draw</b> theta from the posterior, you never have to "
    "<b>integrate</b>. Average g over the draws and the law of large numbers does the rest. "
    "The price is noise, and that noise shrinks like 1/sqrt(n) regardless of how many "
    "parameters the model has. That dimension-free rate is why the whole field runs on sampling.",
)

col1, col2 = st.columns(2)
with col1:
    formula_box(
        "Monte Carlo Estimate",
        r"E[g(\theta)\mid y] \approx \hat g_n = \frac{1}{n}\sum_{s=1}^{n} g(\theta^{(s)})",
        "theta^(s) are draws from the posterior.",
    )
with col2:
    formula_box(
        "Monte Carlo Standard Error",
        r"\mathrm{SE}(\hat g_n) = \frac{\mathrm{sd}\,[g(\theta)]}{\sqrt{n}}",
        "Valid for independent draws. Markov chains need the effective sample size instead.",
    )

st.divider()

# ---------------------------------------------------------------------------
# 2. A posterior we can check against
# ---------------------------------------------------------------------------
st.subheader("A Posterior Where We Know the Answer")

st.markdown(
    "We reuse the Normal-Gamma posterior for mean adult height from Section 3, with vague prior "
    "settings. Its answers are available in closed form, so every Monte Carlo estimate below can "
    "be graded against the truth."
)

post = normal_gamma_update(heights, mu0=150.0, kappa0=0.01, shape0=0.01, rate0=0.01)
mu_dist = normal_gamma_marginal_mu(post)

ctrl_col, res_col = st.columns([1, 2])
with ctrl_col:
    n_draws = st.select_slider(
        "Number of Monte Carlo draws",
        options=[10, 30, 100, 300, 1000, 3000, 10000, 30000],
        value=1000, key="mc_n",
    )
    threshold = st.slider(
        "Threshold for P(mu > c)", float(np.floor(heights.mean() - 3)), float(np.ceil(heights.mean() + 3)),
        float(np.round(heights.mean(), 1)), 0.1, key="mc_threshold",
    )
    mc_seed = st.number_input("Seed", 0, 10_000, 7, key="mc_seed")

draws = sample_normal_gamma(post, n_draws, seed=int(mc_seed))

queries = [
    ("E[mu | y]", None, post["mu"]),
    ("E[sigma | y]", "sigma", normal_gamma_marginal_sigma_mean(post)),
    (f"P(mu > {threshold:.1f} | y)", "prob", 1 - mu_dist.cdf(threshold)),
]
rows = []
for label, kind, exact in queries:
    if kind is None:
        est = mc_estimate(draws["mu"])
    elif kind == "sigma":
        est = mc_estimate(draws["sigma"])
    else:
        est = mc_estimate(draws["mu"], func=lambda m: m > threshold)
    rows.append({
        "Quantity": label,
        "Monte Carlo": round(est["estimate"], 4),
        "MC std. error": round(est["se"], 4),
        "Exact": round(float(exact), 4),
        "Error / SE": round((est["estimate"] - exact) / est["se"], 2) if est["se"] > 0 else np.nan,
    })

with res_col:
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
    st.caption(
        "The last column should mostly sit between -2 and 2. If it does, the standard error "
        "is doing its job: it tells you how far off the estimate probably is without knowing the answer."
    )

st.divider()

# ---------------------------------------------------------------------------
# 3. Running mean
# ---------------------------------------------------------------------------
st.subheader("Watching the Estimate Settle Down")

rm = running_mean(draws["mu"])
fig_rm = go.Figure()
fig_rm.add_trace(go.Scatter(
    x=np.arange(1, len(rm) + 1), y=rm, mode="lines",
    line=dict(color="#E63946", width=2), name="Running mean of mu",
))
fig_rm.add_hline(y=post["mu"], line_dash="dash", line_color="#264653",
                 annotation_text="exact posterior mean")
fig_rm.update_xaxes(type="log", title_text="Number of draws")
fig_rm.update_yaxes(title_text="Estimate of E[mu | y] (cm)")
apply_common_layout(fig_rm, title="Running Monte Carlo Estimate", height=420)
st.plotly_chart(fig_rm, use_container_width=True)

insight_box(
    "Early on the estimate lurches around; after a few hundred draws it is pinned down to a "
    "fraction of a millimetre. Change the seed and the wiggles change, but the destination does not."
)

st.divider()

# ---------------------------------------------------------------------------
# 4. Error versus n
# ---------------------------------------------------------------------------
st.subheader("The 1/sqrt(n) Law")

sizes = [10, 30, 100, 300, 1000, 3000, 10000]
curve = mc_error_curve(
    lambda n, rng: sample_normal_gamma(post, n, seed=rng)["sigma"].values,
    sizes, seed=int(mc_seed),
)
ref = curve["se"].iloc[0] * np.sqrt(sizes[0] / np.asarray(sizes, dtype=float))

fig_err = go.Figure()
fig_err.add_trace(go.Scatter(
    x=curve["n"], y=curve["se"], mode="lines+markers",
    line=dict(color="#2A9D8F", width=2), name="MC standard error of E[sigma]",
))
fig_err.add_trace(go.Scatter(
    x=sizes, y=ref, mode="lines", line=dict(color="#264653", dash="dash"),
    name="1/sqrt(n) reference",
))
fig_err.update_xaxes(type="log", title_text="n")
fig_err.update_yaxes(type="log", title_text="Standard error")
apply_common_layout(fig_err, title="Monte Carlo Error Shrinks Like 1/sqrt(n)", height=420)
st.plotly_chart(fig_err, use_container_width=True)

st.markdown(
    "A slope of -1/2 on log-log axes. Ten times the draws buys you roughly three times the "
    "precision, and the number of parameters never enters the formula."
)

warning_box(
    "Reporting a Monte Carlo estimate to six decimals from a thousand draws. The Monte Carlo "
    "standard error tells you how many digits are real. Anything past it is sampling noise."
)

st.divider()

# ---------------------------------------------------------------------------
# 5. The catch
# ---------------------------------------------------------------------------
concept_box(
    "The Catch: Getting the Draws",
    "Everything above leaned on <code>sample_normal_gamma</code>, which draws exactly and "
    "independently because the conjugate posterior is a known distribution. For the regression "
    "model with independent priors we cannot do that. Markov chain Monte Carlo gives up "
    "independence to get draws at all: each draw depends on the previous one, the averages "
    "still converge, but more slowly. Part III builds those chains.",
)

code_example("""
import numpy as np

rng = np.random.default_rng(7)
tau = rng.gamma(post_shape, 1 / post_rate, size=10_000)
mu = rng.normal(post_mu, 1 / np.sqrt(post_kappa * tau))
sigma = 1 / np.sqrt(tau)

print(mu.mean(), mu.std(ddof=1) / np.sqrt(len(mu)))   # estimate, MC standard error
print(np.mean(mu > 155))                               # P(mu > 155 | y)
print(np.percentile(sigma, [2.5, 97.5]))               # 95% interval for sigma
""")

st.divider()

quiz(
    "You quadruple the number of independent Monte Carlo draws. What happens to the Monte Carlo standard error?",
    [
        "It drops to a quarter",
        "It halves",
        "It stays the same",
        "It depends on the number of parameters",
    ],
    correct_idx=1,
    explanation="The standard error scales with 1/sqrt(n), so 4x the draws gives 1/sqrt(4) = 1/2 the error.",
    key="sec4_quiz1",
)

st.divider()

takeaways([
    "Posterior means, probabilities and quantiles are all integrals, and all can be approximated by averaging over draws.",
    "The Monte Carlo standard error is sd / sqrt(n) for independent draws.",
    "Error shrinks like 1/sqrt(n) whatever the dimension of the parameter.",
    "The hard part is producing posterior draws at all, which is the job of MCMC.",
])

navigation(
    prev_label="Sec 3: Conjugate Updating",
    prev_page="03_Conjugate_Updating.py",
    next_label="Sec 5: Gibbs and Metropolis-Hastings",
    next_page="05_Gibbs_and_Metropolis.py",
)
