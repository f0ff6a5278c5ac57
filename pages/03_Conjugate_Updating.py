"""Section 3: Conjugate Updating -- Normal-Normal, sequential learning, Normal-Gamma."""
import streamlit as st
import numpy as np
import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots
from scipy import stats

from mcbayes.data_loader import load_data, sidebar_filters
from mcbayes.plotting import apply_common_layout
from mcbayes.conjugate import (
    credible_interval, normal_gamma_marginal_mu, normal_gamma_marginal_sigma_mean,
    normal_gamma_update, normal_known_variance_update, sample_normal_gamma, sequential_updates,
)
from mcbayes.constants import Y_COL
from mcbayes.ui_components import (
    section_header, concept_box, formula_box, insight_box, warning_box,
    code_example, quiz, takeaways, navigation,
)

# ---------------------------------------------------------------------------
df = load_data()
fdf = sidebar_filters(df)

section_header(3, "Conjugate Updating", part="II")

heights = fdf[Y_COL].dropna().values
if len(heights) < 3:
    st.warning("Not enough data for the current filters.")
    st.stop()

# ---------------------------------------------------------------------------
# 1. Theory
# ---------------------------------------------------------------------------
concept_box(
    "Posterior = Prior x Likelihood (Normalised)",
    "Bayes' theorem for a parameter theta reads p(theta | y) = p(y | theta) p(theta) / p(y). The "
    "numerator is easy. The denominator p(y) is an integral of the numerator over every possible "
    "theta, and that integral is the reason the rest of this deck exists.<br><br>"
    "For a handful of prior/likelihood pairs the integral can be done in closed form because the "
    "posterior lands in the same family as the prior. These are <b>conjugate</b> pairs. They are "
    "the one case where you do not need Monte Carlo at all, which makes them the perfect yardstick "
    "for checking Monte Carlo later.",
)

formula_box(
    "Normal-Normal Update (known sigma)",
    r"\mu \mid y \sim \mathcal{N}\left(\frac{\mu_0/s_0^2 + n\bar y/\sigma^2}{1/s_0^2 + n/\sigma^2},\;"
    r"\frac{1}{1/s_0^2 + n/\sigma^2}\right)",
    "Precisions (one over variances) add. The posterior mean is a precision-weighted average of "
    "the prior mean and the sample mean.",
)

st.divider()

# ---------------------------------------------------------------------------
# 2. Interactive Normal-Normal
# ---------------------------------------------------------------------------
st.subheader("Interactive: The Mean Adult Height")

col_ctrl, col_viz = st.columns([1, 2])
with col_ctrl:
    prior_mean = st.slider("Prior mean (cm)", 100.0, 200.0, 170.0, 0.5, key="cj_prior_mean")
    prior_sd = st.slider("Prior sd (cm)", 0.5, 40.0, 20.0, 0.5, key="cj_prior_sd")
    n_obs = st.slider("People observed", 1, len(heights), min(20, len(heights)), key="cj_n")
    cred_level = st.slider("Credible level (%)", 80, 99, 95, key="cj_level")

rng = np.random.default_rng(42)
shuffled = rng.permutation(heights)
sample = shuffled[:n_obs]
sigma_known = heights.std(ddof=1)

post = normal_known_variance_update(sample, prior_mean, prior_sd, sigma_known)
post_dist = stats.norm(post["post_mean"], post["post_sd"])
lo, hi = credible_interval(post_dist, cred_level / 100)

with col_viz:
    lik_sd = sigma_known / np.sqrt(n_obs)
    grid = np.linspace(
        min(prior_mean - 3 * prior_sd, post["sample_mean"] - 4 * lik_sd),
        max(prior_mean + 3 * prior_sd, post["sample_mean"] + 4 * lik_sd),
        600,
    )
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=grid, y=stats.norm.pdf(grid, prior_mean, prior_sd), name="Prior",
        line=dict(color="#F4A261", width=2, dash="dash"),
    ))
    fig.add_trace(go.Scatter(
        x=grid, y=stats.norm.pdf(grid, post["sample_mean"], lik_sd), name="Likelihood (normalised)",
        line=dict(color="#2A9D8F", width=2, dash="dot"),
    ))
    fig.add_trace(go.Scatter(
        x=grid, y=post_dist.pdf(grid), name="Posterior",
        line=dict(color="#E63946", width=3), fill="tozeroy", fillcolor="rgba(230,57,70,0.15)",
    ))
    fig.add_vrect(x0=lo, x1=hi, fillcolor="rgba(230,57,70,0.08)", line_width=0,
                  annotation_text=f"{cred_level}% credible interval")
    fig.update_layout(xaxis_title="Mean height (cm)", yaxis_title="Density")
    apply_common_layout(fig, title="Prior, Likelihood and Posterior", height=480)
    st.plotly_chart(fig, use_container_width=True)

m1, m2, m3, m4 = st.columns(4)
m1.metric("Sample mean", f"{post['sample_mean']:.2f} cm")
m2.metric("Posterior mean", f"{post['post_mean']:.2f} cm")
m3.metric("Posterior sd", f"{post['post_sd']:.3f} cm")
m4.metric("Weight on data", f"{post['data_weight']:.1%}")

st.markdown(f"**{cred_level}% credible interval:** {lo:.2f} to {hi:.2f} cm.")

insight_box(
    f"With {n_obs} people the data carries {post['data_weight']:.1%} of the weight. Push the prior "
    "sd down to 1 cm and centre it somewhere silly: a confident, wrong prior needs a lot of data "
    "to overturn. A vague prior gets out of the way almost immediately."
)

st.divider()

# ---------------------------------------------------------------------------
# 3. Sequential updating
# ---------------------------------------------------------------------------
st.subheader("Sequential Updating: Yesterday's Posterior Is Today's Prior")

n_seq = st.slider("Observations to process one by one", 5, min(100, len(heights)),
                  min(30, len(heights)), key="cj_seq")
seq = sequential_updates(shuffled[:n_seq], prior_mean, prior_sd, sigma_known)
batch = normal_known_variance_update(shuffled[:n_seq], prior_mean, prior_sd, sigma_known)

fig_seq = make_subplots(rows=1, cols=2, subplot_titles=["Posterior mean", "Posterior sd"])
fig_seq.add_trace(go.Scatter(
    x=seq["step"], y=seq["posterior_mean"], mode="lines+markers",
    line=dict(color="#E63946"), showlegend=False,
), row=1, col=1)
fig_seq.add_hline(y=heights.mean(), line_dash="dash", line_color="#264653", row=1, col=1)
fig_seq.add_trace(go.Scatter(
    x=seq["step"], y=seq["posterior_sd"], mode="lines+markers",
    line=dict(color="#2A9D8F"), showlegend=False,
), row=1, col=2)
fig_seq.update_xaxes(title_text="Observation #")
fig_seq.update_layout(template="plotly_white", height=380, margin=dict(t=60, b=40))
st.plotly_chart(fig_seq, use_container_width=True)

st.markdown(
    f"After {n_seq} one-at-a-time updates the posterior mean is **{seq['posterior_mean'].iloc[-1]:.3f}**; "
    f"updating on all {n_seq} at once gives **{batch['post_mean']:.3f}**. Same answer, as it must be: "
    "Bayesian updating does not care whether the data arrive in one batch or a trickle."
)

st.divider()

# ---------------------------------------------------------------------------
# 4. Prior sensitivity
# ---------------------------------------------------------------------------
st.subheader("Prior Sensitivity")

priors = pd.DataFrame({
    "Prior": ["Vague", "Sensible", "Confident and wrong", "Very confident and wrong"],
    "Prior mean": [150.0, 155.0, 180.0, 180.0],
    "Prior sd": [50.0, 10.0, 5.0, 0.5],
})
rows = []
for _, p in priors.iterrows():
    res = normal_known_variance_update(heights, p["Prior mean"], p["Prior sd"], sigma_known)
    rows.append({
        "Prior": p["Prior"],
        "Prior mean": p["Prior mean"],
        "Prior sd": p["Prior sd"],
        "Posterior mean": round(res["post_mean"], 2),
        "Posterior sd": round(res["post_sd"], 3),
        "Weight on data": f"{res['data_weight']:.1%}",
    })
st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

warning_box(
    "Thinking 'the prior does not matter with enough data' means any prior is fine. It is true "
    "for most priors. It is not true for a prior with almost no spread, which is a claim to "
    "already know the answer."
)

st.divider()

# ---------------------------------------------------------------------------
# 5. Normal-Gamma: unknown mean and precision
# ---------------------------------------------------------------------------
st.subheader("Both Unknown: the Normal-Gamma Model")

concept_box(
    "Dropping the Known-Sigma Fiction",
    "Nobody actually knows sigma. Put a Gamma prior on the precision tau = 1/sigma^2 and a "
    "normal prior on mu whose spread scales with 1/tau, and the posterior is again Normal-Gamma. "
    "The marginal posterior for mu becomes a Student-t: fatter tails, because not knowing sigma "
    "is one more source of uncertainty. We can also draw (mu, sigma) pairs exactly, which is "
    "Monte Carlo with perfectly independent draws.",
)

formula_box(
    "Normal-Gamma Posterior",
    r"\kappa_n = \kappa_0 + n,\; \mu_n = \frac{\kappa_0\mu_0 + n\bar y}{\kappa_n},\; "
    r"a_n = a_0 + \tfrac{n}{2},\; b_n = b_0 + \tfrac12\sum(y_i-\bar y)^2 + \frac{\kappa_0 n(\bar y-\mu_0)^2}{2\kappa_n}",
)

ng_col1, ng_col2 = st.columns([1, 2])
with ng_col1:
    kappa0 = st.slider("kappa0 (prior sample size for mu)", 0.01, 20.0, 1.0, 0.01, key="ng_kappa")
    shape0 = st.slider("a0 (Gamma shape)", 0.01, 10.0, 1.0, 0.01, key="ng_shape")
    rate0 = st.slider("b0 (Gamma rate)", 0.01, 200.0, 10.0, 0.01, key="ng_rate")

ng_post = normal_gamma_update(sample, prior_mean, kappa0, shape0, rate0)
mu_marg = normal_gamma_marginal_mu(ng_post)
mu_lo, mu_hi = credible_interval(mu_marg, cred_level / 100)
ng_draws = sample_normal_gamma(ng_post, 5000, seed=1)

with ng_col2:
    fig_ng = make_subplots(rows=1, cols=2, subplot_titles=["mu (Student-t marginal)", "sigma (exact draws)"])
    mu_grid = np.linspace(mu_marg.ppf(0.001), mu_marg.ppf(0.999), 400)
    fig_ng.add_trace(go.Histogram(
        x=ng_draws["mu"], histnorm="probability density", nbinsx=60,
        marker_color="#8ECAE6", opacity=0.7, showlegend=False,
    ), row=1, col=1)
    fig_ng.add_trace(go.Scatter(
        x=mu_grid, y=mu_marg.pdf(mu_grid), line=dict(color="#E63946", width=2), showlegend=False,
    ), row=1, col=1)
    fig_ng.add_trace(go.Histogram(
        x=ng_draws["sigma"], nbinsx=60, marker_color="#7209B7", opacity=0.7, showlegend=False,
    ), row=1, col=2)
    fig_ng.update_layout(template="plotly_white", height=380, margin=dict(t=60, b=40))
    st.plotly_chart(fig_ng, use_container_width=True)

st.markdown(
    f"Using the same {n_obs} people: the {cred_level}% interval for mu is **{mu_lo:.2f} to {mu_hi:.2f} cm** "
    f"and E[sigma | y] = **{normal_gamma_marginal_sigma_mean(ng_post):.2f} cm** "
    f"(Monte Carlo estimate from the draws: {ng_draws['sigma'].mean():.2f})."
)

insight_box(
    "Now try to extend this to the regression: normal priors on beta0 and beta1 chosen "
    "independently of sigma, and a Gamma prior on the precision. Each parameter's conditional "
    "posterior is still a named distribution, but the joint posterior is not. That small gap is "
    "exactly what the Gibbs sampler in Section 5 is built to cross."
)

st.divider()

code_example("""
import numpy as np
from scipy import stats

def normal_update(data, prior_mean, prior_sd, sigma):
    prior_prec = 1 / prior_sd**2
    data_prec = len(data) / sigma**2
    post_prec = prior_prec + data_prec
    post_mean = (prior_mean * prior_prec + np.mean(data) * data_prec) / post_prec
    return post_mean, np.sqrt(1 / post_prec)

post_mean, post_sd = normal_update(heights[:20], 170, 20, heights.std())
stats.norm(post_mean, post_sd).interval(0.95)
""")

st.divider()

quiz(
    "In the Normal-Normal model, what happens to the posterior sd as n grows?",
    [
        "It stays equal to the prior sd",
        "It shrinks roughly like sigma / sqrt(n)",
        "It grows, because more data means more variation",
        "It converges to sigma",
    ],
    correct_idx=1,
    explanation="The data precision n / sigma^2 grows linearly in n and quickly dominates the prior "
                "precision, so the posterior sd behaves like sigma / sqrt(n).",
    key="sec3_quiz1",
)

st.divider()

takeaways([
    "Conjugate priors give posteriors in closed form, which makes them the benchmark for any sampler.",
    "Precisions add; the posterior mean is a precision-weighted compromise between prior and data.",
    "Sequential and batch updating give the same posterior.",
    "With sigma unknown, the Normal-Gamma model gives a Student-t marginal for the mean.",
    "Independent priors on regression coefficients and the noise break full conjugacy, which is where MCMC comes in.",
])

navigation(
    prev_label="Sec 2: Frequentist Regression",
    prev_page="02_Frequentist_Regression.py",
    next_label="Sec 4: Monte Carlo Integration",
    next_page="04_Monte_Carlo_Integration.py",
)
