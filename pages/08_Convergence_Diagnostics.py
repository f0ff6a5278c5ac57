"""Section 8: Convergence Diagnostics -- is the chain telling us about the posterior yet?"""
import streamlit as st
import numpy as np
import pandas as pd

from mcbayes.data_loader import load_data, sidebar_filters, regression_arrays
from mcbayes.plotting import acf_chart, lag_scatter, rhat_bar_chart, trace_plot
from mcbayes.runs import fit, sampler_sidebar
from mcbayes.engines import EngineUnavailableError
from mcbayes.diagnostics import (
    autocorrelation, chain_array, convergence_summary, discard_burn_in, ess, geweke_z, lag_pairs, rhat, thin,
)
from mcbayes.constants import PARAM_LABELS, PARAMS, RHAT_THRESHOLD, SOURCE_LABELS, X_COL, Y_COL
from mcbayes.ui_components import (
    section_header, concept_box, formula_box, insight_box, warning_box,
    code_example, engine_missing_box, quiz, takeaways, navigation,
)

# ---------------------------------------------------------------------------
df = load_data()
fdf = sidebar_filters(df)
settings = sampler_sidebar("s8")

section_header(8, "Convergence Diagnostics", part="IV")

x, y = regression_arrays(fdf, X_COL, Y_COL)
if len(x) < 3:
    st.warning("Not enough data for a regression. Adjust sidebar filters.")
    st.stop()

concept_box(
    "Trust, but Verify",
    "An MCMC sampler always returns numbers. Whether those numbers describe the posterior "
    "depends on two things: has every chain forgotten its starting point (convergence), and has "
    "it wandered around enough to cover the posterior (mixing)? Neither can be proven from the "
    "output. Both can be <em>disproven</em>, and that is what diagnostics do. Pick a sampler and "
    "settings in the sidebar; start with Metropolis, one chain, no burn-in, and work your way up.",
)

source = settings.pop("source")
proposal_scale = 1.0
if source == "metropolis":
    proposal_scale = st.sidebar.slider("Proposal scale", 0.05, 10.0, 1.0, 0.05, key="s8_scale")

try:
    idata = fit(source, x, y, proposal_scale=proposal_scale, **settings)
except EngineUnavailableError as e:
    engine_missing_box(e)

st.caption(
    f"{SOURCE_LABELS[source]}: {settings['n_chains']} chain(s), {settings['n_draws']} draws, "
    f"burn-in {settings['burn_in']}, thinning {settings['thin']}."
)

st.divider()

# ---------------------------------------------------------------------------
# 1. Trace plots
# ---------------------------------------------------------------------------
st.subheader("1. Trace Plots")
st.markdown(
    "Draw value against iteration, one colour per chain. A converged, well-mixing chain looks like "
    "a fuzzy caterpillar: no trend, no long flat stretches, and all chains overlapping."
)
st.plotly_chart(trace_plot(idata, PARAMS), use_container_width=True)

st.divider()

# ---------------------------------------------------------------------------
# 2. Autocorrelation
# ---------------------------------------------------------------------------
st.subheader("2. Lag Scatter and Autocorrelation")

param = st.selectbox("Parameter", PARAMS, format_func=lambda p: PARAM_LABELS.get(p, p), key="s8_param")
chains = chain_array(idata, param)
chain0 = chains[0]

lag_col, acf_col = st.columns(2)
with lag_col:
    lag = st.slider("Lag", 1, 20, 1, key="s8_lag")
    if len(chain0) <= lag:
        st.warning("Too few draws for this lag.")
    else:
        current, following, corr = lag_pairs(chain0, lag)
        st.plotly_chart(lag_scatter(current, following, corr, param, lag), use_container_width=True)
with acf_col:
    if len(chain0) < 2:
        st.warning("Need at least 2 draws for an autocorrelation plot.")
    else:
        acf_vals = autocorrelation(chain0, max_lag=40)
        st.plotly_chart(acf_chart(acf_vals, len(chain0), param), use_container_width=True)

formula_box(
    "Effective Sample Size",
    r"\mathrm{ESS} = \frac{m\,n}{1 + 2\sum_{k \ge 1} \rho_k}",
    "m chains of n draws, rho_k the lag-k autocorrelation. Strong autocorrelation means fewer "
    "effectively independent draws.",
)

st.divider()

# ---------------------------------------------------------------------------
# 3. Rhat and ESS
# ---------------------------------------------------------------------------
st.subheader("3. Rhat and Effective Sample Size")

if settings["n_chains"] < 2:
    st.info("Rhat compares chains with each other. With one chain ArviZ falls back to split halves "
            "of that chain, which catches trends but not chains stuck in different places.")

rhat_vals = rhat(idata, PARAMS)
bulk = ess(idata, PARAMS)
tail = ess(idata, PARAMS, method="tail")

rh_col, ess_col = st.columns([3, 2])
with rh_col:
    st.plotly_chart(rhat_bar_chart(rhat_vals, RHAT_THRESHOLD), use_container_width=True)
with ess_col:
    n_total = idata.posterior.sizes["chain"] * idata.posterior.sizes["draw"]
    st.dataframe(pd.DataFrame({
        "Rhat": rhat_vals,
        "Bulk ESS": bulk,
        "Tail ESS": tail,
        "ESS / draws": {p: bulk[p] / n_total for p in PARAMS},
    }).round(3), use_container_width=True)

summary = convergence_summary(idata, PARAMS)
if summary["converged"].all():
    st.success("Every parameter passes: Rhat below threshold and bulk ESS at least 100 per chain.")
else:
    failing = ", ".join(summary.index[~summary["converged"]])
    st.error(f"Not yet trustworthy: {failing}. Run longer, add burn-in, or fix the sampler.")

with st.expander("Full ArviZ summary"):
    st.dataframe(summary.round(4), use_container_width=True)

warning_box(
    "Checking Rhat on a single chain and declaring victory. Several chains from dispersed starting "
    "points are what make Rhat informative: if they all end up in the same place, it is hard to "
    "argue they were all fooled in the same way."
)

st.divider()

# ---------------------------------------------------------------------------
# 4. Burn-in, thinning and Geweke
# ---------------------------------------------------------------------------
st.subheader("4. Burn-in, Thinning and the Geweke Test")

n_kept = idata.posterior.sizes["draw"]
bt_col1, bt_col2 = st.columns(2)
with bt_col1:
    extra_burn = st.slider("Discard a further n draws", 0, max(n_kept // 2, 1), 0, key="s8_extra_burn")
with bt_col2:
    extra_thin = st.slider("Then keep every k-th draw", 1, 20, 1, key="s8_extra_thin")

trimmed = thin(discard_burn_in(idata, min(extra_burn, n_kept - 1)), extra_thin)
trimmed_draws = trimmed.posterior.sizes["draw"]

if trimmed_draws < 10:
    st.warning("Fewer than 10 draws left per chain. Reduce the burn-in or thinning.")
else:
    trimmed_ess = ess(trimmed, PARAMS)
    geweke = {
        p: [geweke_z(c) for c in chain_array(trimmed, p)] if trimmed_draws >= 40 else [np.nan]
        for p in PARAMS
    }
    st.dataframe(pd.DataFrame({
        "Draws kept (all chains)": {p: trimmed_draws * trimmed.posterior.sizes["chain"] for p in PARAMS},
        "Bulk ESS before": bulk,
        "Bulk ESS after": trimmed_ess,
        "Worst |Geweke z|": {p: np.nanmax(np.abs(geweke[p])) for p in PARAMS},
    }).round(2), use_container_width=True)

    st.caption(
        "Geweke compares the mean of the first 10% of each chain with the mean of the last 50%, "
        "scaled by their autocorrelation-adjusted standard error. |z| well beyond 2 says the start "
        "of the chain does not look like the end."
    )

insight_box(
    "Burn-in removes the part of each chain that still remembers its starting point, and usually "
    "helps. Thinning throws away draws: it reduces autocorrelation between the draws you keep but "
    "almost never increases the effective sample size. Thin to save memory, not to gain accuracy."
)

code_example("""
import arviz as az

az.plot_trace(idata, var_names=["beta0", "beta1", "sigma"])
az.rhat(idata)                       # rank-normalised split-Rhat
az.ess(idata, method="bulk")         # effective sample size
az.summary(idata, hdi_prob=0.95)     # everything in one table

idata = idata.isel(draw=slice(500, None))      # extra burn-in
idata = idata.isel(draw=slice(None, None, 5))  # thin by 5
""")

st.divider()

quiz(
    "Four chains give Rhat = 1.25 for beta1. What is the most sensible response?",
    [
        "Report the posterior mean; Rhat only matters for sigma",
        "Thin the chains by 10 and recompute",
        "Do not trust the draws yet: run longer, add burn-in, or improve the sampler",
        "Drop the chains that disagree with the others",
    ],
    correct_idx=2,
    explanation="Rhat well above 1.01 means the chains have not converged to a common distribution. "
                "Thinning does not fix that, and dropping inconvenient chains just hides the evidence.",
    key="sec8_quiz1",
)

st.divider()

takeaways([
    "Trace plots should look like overlapping fuzzy caterpillars.",
    "Autocorrelation and lag plots show how slowly a chain forgets; high autocorrelation means low ESS.",
    "Rhat below about 1.01 across several dispersed chains and a healthy bulk ESS are the standard checks.",
    "Burn-in discards the transient start; thinning saves memory but rarely improves ESS.",
    "Geweke z-scores flag chains whose beginning and end disagree.",
])

navigation(
    prev_label="Sec 7: Stan and HMC",
    prev_page="07_Stan_and_HMC.py",
    next_label="Sec 9: Posterior Predictive Checks",
    next_page="09_Posterior_Predictive_Checks.py",
)
