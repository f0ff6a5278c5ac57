"""Section 10: Posterior Inference -- asking the posterior real questions."""
import streamlit as st
import numpy as np
import pandas as pd
import plotly.graph_objects as go

from mcbayes.data_loader import load_data, sidebar_filters, regression_arrays
from mcbayes.plotting import apply_common_layout, regression_band_chart
from mcbayes.runs import fit, sampler_sidebar
from mcbayes.engines import EngineUnavailableError
from mcbayes.inference import (
    flat_draws, intercept_at_zero, interval, mean_response, posterior_table, predictive_draws, probability,
)
from mcbayes.stats_helpers import bootstrap_ci, ols_fit, regression_metrics
from mcbayes.constants import FEATURE_LABELS, PARAMS, X_COL, Y_COL
from mcbayes.ui_components import (
    section_header, concept_box, insight_box, warning_box,
    code_example, engine_missing_box, quiz, takeaways, navigation,
)

# ---------------------------------------------------------------------------
df = load_data()
fdf = sidebar_filters(df)
settings = sampler_sidebar("s10")

section_header(10, "Posterior Inference", part="V")

x, y = regression_arrays(fdf, X_COL, Y_COL)
if len(x) < 3:
    st.warning("Not enough data for a regression. Adjust sidebar filters.")
    st.stop()

concept_box(
    "The Payoff",
    "Nine sections of work produce one thing: a big table of posterior draws. Now it pays off. "
    "Every question about the parameters, or about people we have not measured, becomes "
    "arithmetic on that table. A probability is the share of draws where something is true. An "
    "interval is a pair of quantiles. A prediction pushes each draw through the model.",
)

source = settings.pop("source")
try:
    idata = fit(source, x, y, **settings)
except EngineUnavailableError as e:
    engine_missing_box(e)

draws = flat_draws(idata)
st.caption(f"{len(draws):,} posterior draws pooled across chains.")

st.divider()

# ---------------------------------------------------------------------------
# 1. Summaries and intervals
# ---------------------------------------------------------------------------
st.subheader("1. Posterior Summaries and Credible Intervals")

int_col1, int_col2 = st.columns(2)
with int_col1:
    level = st.slider("Credible level (%)", 50, 99, 95, key="s10_level") / 100
with int_col2:
    kind = st.radio("Interval type", ["equal", "hdi"], horizontal=True, key="s10_kind",
                    format_func=lambda k: "Equal-tailed" if k == "equal" else "Highest density (HDI)")

st.dataframe(posterior_table(idata, PARAMS, level=level, kind=kind).round(4),
             use_container_width=True, hide_index=True)

b1_lo, b1_hi = interval(draws["beta1"], level, kind)
st.markdown(
    f"Given the model, the data and the priors, there is a **{level:.0%} probability** that each extra "
    f"kilogram is associated with between **{b1_lo:.3f}** and **{b1_hi:.3f} cm** of extra height. "
    "That sentence is exactly the one people want to say about a confidence interval and are not allowed to."
)

b0_zero = intercept_at_zero(idata)
z_lo, z_hi = interval(b0_zero, level, kind)
st.caption(
    f"The un-centred intercept (expected height at 0 kg) is {b0_zero.mean():.1f} cm, "
    f"interval {z_lo:.1f} to {z_hi:.1f}. A number nobody should interpret, which is why we centred."
)

st.divider()

# ---------------------------------------------------------------------------
# 2. Probabilities of events
# ---------------------------------------------------------------------------
st.subheader("2. Probabilities of Events")

ev_col1, ev_col2 = st.columns(2)
with ev_col1:
    slope_c = st.number_input("Threshold c for P(beta1 > c)", value=0.9, step=0.05, key="s10_c")
    p_slope = probability(draws["beta1"], lambda b: b > slope_c)
    st.metric(f"P(beta1 > {slope_c:g} | y)", f"{p_slope:.3f}")
with ev_col2:
    sigma_c = st.number_input("Threshold s for P(sigma < s)", value=5.0, step=0.1, key="s10_s")
    p_sigma = probability(draws["sigma"], lambda s: s < sigma_c)
    st.metric(f"P(sigma < {sigma_c:g} | y)", f"{p_sigma:.3f}")

fig_b1 = go.Figure(go.Histogram(x=draws["beta1"], nbinsx=60, marker_color="#8ECAE6", showlegend=False))
fig_b1.add_vline(x=slope_c, line_color="#E63946", line_width=3, annotation_text=f"c = {slope_c:g}")
fig_b1.add_vrect(x0=b1_lo, x1=b1_hi, fillcolor="rgba(42,157,143,0.12)", line_width=0,
                 annotation_text=f"{level:.0%} interval", annotation_position="top left")
fig_b1.update_xaxes(title_text="beta1 (cm per kg)")
apply_common_layout(fig_b1, title="Posterior of the slope", height=380)
st.plotly_chart(fig_b1, use_container_width=True)

warning_box(
    "Reporting P(beta1 > 0) = 1.000 as 'certain'. It means none of the draws fell below 0. With "
    "8,000 draws the honest statement is 'greater than about 0.9999', and it is conditional on "
    "the model being right."
)

st.divider()

# ---------------------------------------------------------------------------
# 3. Mean response and predictions
# ---------------------------------------------------------------------------
st.subheader("3. The Regression Line With Its Uncertainty")

x_grid = np.linspace(x.min(), x.max(), 60)
mu_grid = mean_response(idata, x_grid)
pred_grid = predictive_draws(idata, x_grid, seed=settings["seed"])
st.plotly_chart(
    regression_band_chart(x, y, x_grid, mu_grid, pred_grid, level=level,
                          x_label=FEATURE_LABELS[X_COL], y_label=FEATURE_LABELS[Y_COL]),
    use_container_width=True,
)

insight_box(
    "The narrow red band is uncertainty about the <em>average</em> height at each weight; it shrinks "
    "as data accumulate. The wide blue band is where an <em>individual</em> would fall; it can never "
    "be narrower than sigma, however much data you collect."
)

st.markdown("**Predict a new person**")
new_w = st.slider("Weight of the new adult (kg)", float(np.floor(x.min())), float(np.ceil(x.max())),
                  float(np.round(np.median(x))), 0.5, key="s10_new_w")
mu_new = mean_response(idata, [new_w])[:, 0]
y_new = predictive_draws(idata, [new_w], seed=settings["seed"])[:, 0]
mu_lo, mu_hi = interval(mu_new, level, kind)
y_lo, y_hi = interval(y_new, level, kind)

p1, p2, p3 = st.columns(3)
p1.metric("Expected height", f"{mu_new.mean():.1f} cm")
p2.metric(f"{level:.0%} interval for the mean", f"{mu_lo:.1f} to {mu_hi:.1f}")
p3.metric(f"{level:.0%} prediction interval", f"{y_lo:.1f} to {y_hi:.1f}")

tall = st.number_input("P(new person taller than ... cm)", value=160.0, step=1.0, key="s10_tall")
st.markdown(f"P(height > {tall:g} cm | weight = {new_w:g} kg, data) = **{probability(y_new, lambda h: h > tall):.3f}**")

st.divider()

# ---------------------------------------------------------------------------
# 4. Back to OLS
# ---------------------------------------------------------------------------
st.subheader("4. Full Circle: Bayesian Against Frequentist")

ols = ols_fit(x, y, alpha=1 - level, center=True)
boot_lo, boot_hi, _ = bootstrap_ci(
    np.column_stack([x, y]), stat_func=lambda xy: np.polyfit(xy[:, 0], xy[:, 1], 1)[0],
    n_boot=500, level=level,
)
comparison = pd.DataFrame([
    {"Method": "OLS confidence interval", "Slope": ols["slope"],
     "Lower": ols["ci_slope"][0], "Upper": ols["ci_slope"][1]},
    {"Method": "Bootstrap percentile interval", "Slope": ols["slope"],
     "Lower": boot_lo, "Upper": boot_hi},
    {"Method": f"Posterior {'HDI' if kind == 'hdi' else 'credible interval'}", "Slope": draws["beta1"].mean(),
     "Lower": b1_lo, "Upper": b1_hi},
]).round(4)
st.dataframe(comparison, use_container_width=True, hide_index=True)

fitted_bayes = mean_response(idata, x).mean(axis=0)
metrics = pd.DataFrame({
    "OLS": regression_metrics(y, np.asarray(ols["fitted"])),
    "Posterior mean line": regression_metrics(y, fitted_bayes),
}).round(4)
st.dataframe(metrics, use_container_width=True)

st.markdown(
    "With vague priors and a few hundred observations, three very different philosophies give "
    "practically the same numbers. The Bayesian version is the one that also hands you "
    "probabilities of events and predictive distributions for free."
)

code_example("""
import numpy as np

b0 = idata.posterior["beta0"].values.ravel()
b1 = idata.posterior["beta1"].values.ravel()
sigma = idata.posterior["sigma"].values.ravel()

np.mean(b1 > 0.9)                                  # P(beta1 > 0.9 | y)
np.percentile(b1, [2.5, 97.5])                     # 95% credible interval

mu_50 = b0 + b1 * (50 - x.mean())                  # E[height | weight = 50]
y_50 = rng.normal(mu_50, sigma)                    # a new person at 50 kg
np.percentile(y_50, [2.5, 97.5])                   # 95% prediction interval
""")

st.divider()

quiz(
    "Why is the prediction interval for a new person wider than the interval for the mean height at the same weight?",
    [
        "Because it uses fewer posterior draws",
        "Because it adds person-to-person variation (sigma) on top of uncertainty about the line",
        "Because HDIs are always wider than equal-tailed intervals",
        "Because the prior is vague",
    ],
    correct_idx=1,
    explanation="The mean-response interval only reflects uncertainty in beta0 and beta1. A new person "
                "also deviates from the line by noise with sd sigma.",
    key="sec10_quiz1",
)

st.divider()

takeaways([
    "Posterior draws turn every question into arithmetic: proportions, quantiles, transformations.",
    "Credible intervals are direct probability statements about parameters, given model and data.",
    "Equal-tailed intervals and HDIs agree for symmetric posteriors and differ for skewed ones like sigma.",
    "Predictive intervals include observation noise and stay wide no matter how much data there is.",
    "With vague priors the posterior matches OLS; the Bayesian bonus is the richer set of answers.",
])

navigation(
    prev_label="Sec 9: Posterior Predictive Checks",
    prev_page="09_Posterior_Predictive_Checks.py",
)
