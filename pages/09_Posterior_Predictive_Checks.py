"""Section 9: Posterior Predictive Checks -- can the fitted model fake the data?"""
import streamlit as st
import numpy as np
import plotly.graph_objects as go

from mcbayes.data_loader import load_data, sidebar_filters, regression_arrays
from mcbayes.plotting import apply_common_layout, ppc_density_overlay, ppc_statistic_chart, qq_chart
from mcbayes.runs import fit, sampler_sidebar
from mcbayes.engines import EngineUnavailableError
from mcbayes.ppc import TEST_STATISTICS, posterior_predictive, ppc_pvalues, replicated_statistic, residual_draws
from mcbayes.stats_helpers import qq_points
from mcbayes.constants import ADULT_AGE, X_COL, Y_COL
from mcbayes.ui_components import (
    section_header, concept_box, formula_box, insight_box, warning_box,
    code_example, engine_missing_box, quiz, takeaways, navigation,
)

# ---------------------------------------------------------------------------
df = load_data()
fdf = sidebar_filters(df)
settings = sampler_sidebar("s9")

section_header(9, "Posterior Predictive Checks", part="IV")

x, y = regression_arrays(fdf, X_COL, Y_COL)
if len(x) < 3:
    st.warning("Not enough data for a regression. Adjust sidebar filters.")
    st.stop()

concept_box(
    "Converged Is Not the Same as Correct",
    "Section 8 asked whether the sampler found the posterior. This section asks whether the "
    "<em>model</em> deserves to be believed. The idea is simple: if the model is any good, data "
    "simulated from it should look like the data we actually have. Take a posterior draw, "
    "simulate a fake dataset of the same size at the same weights, repeat a few hundred times, "
    "and compare.",
)

formula_box(
    "Posterior Predictive Distribution",
    r"p(y^{\mathrm{rep}} \mid y) = \int p(y^{\mathrm{rep}} \mid \theta)\, p(\theta \mid y)\, d\theta",
    "In practice: one replicated dataset per posterior draw. Monte Carlo again.",
)

source = settings.pop("source")
try:
    idata = fit(source, x, y, **settings)
except EngineUnavailableError as e:
    engine_missing_box(e)

n_rep = st.slider("Replicated datasets", 20, 1000, 200, 20, key="s9_nrep")
y_rep = posterior_predictive(idata, n_rep=n_rep, seed=settings["seed"])

st.divider()

# ---------------------------------------------------------------------------
# 1. Visual check
# ---------------------------------------------------------------------------
st.subheader("1. Observed Heights Against Replicated Heights")
n_show = st.slider("Replicated densities to draw", 5, min(100, n_rep), min(40, n_rep), key="s9_nshow")
st.plotly_chart(ppc_density_overlay(y, y_rep, n_show=n_show), use_container_width=True)

if fdf["age"].min() < ADULT_AGE:
    st.info(
        "Children are included. Watch the observed density grow a shoulder that no straight-line "
        "replicate can produce: that is a model failure the diagnostics in Section 8 would never catch."
    )

st.divider()

# ---------------------------------------------------------------------------
# 2. Test statistics
# ---------------------------------------------------------------------------
st.subheader("2. Test Statistics and Bayesian p-values")

st.markdown(
    "Pick a summary T of a dataset: its mean, spread, minimum, maximum, skewness. Compute it for "
    "the real data and for every replicate. The Bayesian p-value is the share of replicates whose "
    "T is at least as large as the observed one."
)

pvals = ppc_pvalues(y, y_rep)
st.dataframe(pvals.round(3), use_container_width=True, hide_index=True)

stat_name = st.selectbox("Statistic to plot", list(TEST_STATISTICS), key="s9_stat")
row = pvals.set_index("statistic").loc[stat_name]
st.plotly_chart(
    ppc_statistic_chart(replicated_statistic(y_rep, stat_name), row["observed"], stat_name, row["p_value"]),
    use_container_width=True,
)

extreme = pvals[(pvals["p_value"] < 0.05) | (pvals["p_value"] > 0.95)]
if extreme.empty:
    st.success("No test statistic is extreme: the model reproduces these features of the data.")
else:
    st.warning(f"Extreme p-values for: {', '.join(extreme['statistic'])}. The model misses something here.")

insight_box(
    "The mean always passes. The model was fitted to it, so of course replicates reproduce it. "
    "Informative statistics are the ones the model was not directly tuned to, such as the "
    "extremes and skewness."
)

warning_box(
    "Reading a Bayesian p-value like a classical one. It is not a test with a 5% error rate; it is "
    "a calibration check. Values near 0.5 are good, values near 0 or 1 point at a feature of the "
    "data the model cannot reproduce."
)

st.divider()

# ---------------------------------------------------------------------------
# 3. Residuals
# ---------------------------------------------------------------------------
st.subheader("3. Posterior Residuals")

resid = residual_draws(idata, n_rep=200, seed=settings["seed"])
mean_resid = resid.mean(axis=0)

res_col1, res_col2 = st.columns(2)
with res_col1:
    fig_res = go.Figure(go.Scatter(
        x=x, y=mean_resid, mode="markers",
        marker=dict(color="#2A9D8F", size=5, opacity=0.5), showlegend=False,
    ))
    fig_res.add_hline(y=0, line_dash="dash", line_color="#E63946")
    for bound in (-2, 2):
        fig_res.add_hline(y=bound, line_dash="dot", line_color="#264653")
    fig_res.update_xaxes(title_text="Weight (kg)")
    fig_res.update_yaxes(title_text="Standardised residual")
    apply_common_layout(fig_res, title="Posterior-mean standardised residuals", height=400)
    st.plotly_chart(fig_res, use_container_width=True)
with res_col2:
    st.plotly_chart(qq_chart(qq_points(mean_resid), title="QQ plot of standardised residuals"),
                    use_container_width=True)

share_out = np.mean(np.abs(mean_resid) > 2)
st.markdown(
    f"**{share_out:.1%}** of people have |standardised residual| > 2; a normal model expects "
    "about 5%."
)

code_example("""
import numpy as np

rng = np.random.default_rng(42)
b0 = idata.posterior["beta0"].values.ravel()
b1 = idata.posterior["beta1"].values.ravel()
sigma = idata.posterior["sigma"].values.ravel()

idx = rng.choice(len(b0), size=200)
mu = b0[idx, None] + b1[idx, None] * (x - x.mean())[None, :]
y_rep = rng.normal(mu, sigma[idx, None])              # (200, n)

p_value = np.mean(y_rep.max(axis=1) >= y.max())       # Bayesian p-value for the maximum
""")

st.divider()

quiz(
    "A posterior predictive p-value for the sample minimum is 0.998. What does that suggest?",
    [
        "The model fits extremely well",
        "Nearly every replicate has a larger minimum than the data: the model cannot produce values as low as observed",
        "The sampler has not converged",
        "The prior was too vague",
    ],
    correct_idx=1,
    explanation="P(T(y_rep) >= T(y)) near 1 means the observed minimum sits in the far lower tail of "
                "what the model produces. Something in the data (children, perhaps) is lower than "
                "the model can explain.",
    key="sec9_quiz1",
)

st.divider()

takeaways([
    "Posterior predictive checks compare the data with data simulated from the fitted model.",
    "Bayesian p-values near 0 or 1 flag features the model cannot reproduce.",
    "Statistics the model was fitted to (like the mean) always pass; look at extremes and shape.",
    "Standardised posterior residuals extend the classical residual checks to the Bayesian fit.",
])

navigation(
    prev_label="Sec 8: Convergence Diagnostics",
    prev_page="08_Convergence_Diagnostics.py",
    next_label="Sec 10: Posterior Inference",
    next_page="10_Posterior_Inference.py",
)
