"""Section 2: Frequentist Regression -- OLS, confidence intervals, residual diagnostics."""
import streamlit as st
import numpy as np
import plotly.graph_objects as go

from mcbayes.data_loader import load_data, sidebar_filters, regression_arrays
from mcbayes.plotting import apply_common_layout, qq_chart
from mcbayes.stats_helpers import coefficient_table, ols_fit, qq_points
from mcbayes.constants import FEATURE_LABELS, X_COL, Y_COL
from mcbayes.ui_components import (
    section_header, concept_box, formula_box, insight_box, warning_box,
    code_example, quiz, takeaways, navigation,
)

# ---------------------------------------------------------------------------
df = load_data()
fdf = sidebar_filters(df)

section_header(2, "Frequentist Regression", part="I")

# ---------------------------------------------------------------------------
# 1. Theory
# ---------------------------------------------------------------------------
concept_box(
    "The Model We Will Keep Coming Back To",
    "Before going Bayesian, we fit the same model the classical way, because it gives us a "
    "benchmark. If the Bayesian answer with vague priors disagreed wildly with ordinary least "
    "squares, that would be a bug, not a philosophical insight.<br><br>"
    "The model says each adult's height is a straight-line function of their weight plus "
    "independent normal noise. We centre weight at its mean, so the intercept is the expected "
    "height of a person of <em>average</em> weight rather than of a person weighing 0 kg, who does "
    "not exist.",
)

col1, col2 = st.columns(2)
with col1:
    formula_box(
        "Linear Regression (centred predictor)",
        r"y_i = \beta_0 + \beta_1 (x_i - \bar{x}) + \varepsilon_i, \quad \varepsilon_i \sim \mathcal{N}(0, \sigma^2)",
        "y is height in cm, x is weight in kg. beta_1 is centimetres per extra kilogram.",
    )
with col2:
    formula_box(
        "Least-squares Estimates",
        r"\hat\beta_1 = \frac{\sum (x_i - \bar x)(y_i - \bar y)}{\sum (x_i - \bar x)^2}, \quad \hat\beta_0 = \bar y",
        "With a centred predictor the intercept estimate is just the mean height. Centring buys "
        "that simplicity, and it will make the samplers behave better too.",
    )

st.divider()

# ---------------------------------------------------------------------------
# 2. Fit
# ---------------------------------------------------------------------------
st.subheader("Fit: Height on Weight")

x, y = regression_arrays(fdf, X_COL, Y_COL)
if len(x) < 3:
    st.warning("Not enough data for a regression. Adjust sidebar filters.")
    st.stop()

ctrl_col, plot_col = st.columns([1, 2])
with ctrl_col:
    conf_level = st.slider("Confidence level (%)", 80, 99, 95, key="ols_conf")
    centre = st.checkbox("Centre weight at its mean", value=True, key="ols_centre")

fit = ols_fit(x, y, alpha=1 - conf_level / 100, center=centre)
slope, intercept = fit["slope"], fit["intercept"]
x_line = np.linspace(x.min(), x.max(), 100)
y_line = intercept + slope * ((x_line - x.mean()) if centre else x_line)

with plot_col:
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=x, y=y, mode="markers", name="Adults",
        marker=dict(color="#264653", size=5, opacity=0.5),
    ))
    fig.add_trace(go.Scatter(
        x=x_line, y=y_line, mode="lines",
        name=f"OLS: slope {slope:.3f} cm/kg",
        line=dict(color="#E63946", width=3),
    ))
    fig.update_xaxes(title_text=FEATURE_LABELS[X_COL])
    fig.update_yaxes(title_text=FEATURE_LABELS[Y_COL])
    apply_common_layout(fig, title="Ordinary Least Squares Fit")
    st.plotly_chart(fig, use_container_width=True)

m1, m2, m3, m4 = st.columns(4)
m1.metric("Slope (beta_1)", f"{slope:.3f}")
m2.metric("Intercept (beta_0)", f"{intercept:.2f}")
m3.metric("Residual SD (sigma)", f"{fit['sigma']:.2f}")
m4.metric("R-squared", f"{fit['r2']:.3f}")

st.markdown(f"**Coefficient table ({conf_level}% confidence intervals)**")
st.dataframe(coefficient_table(fit).round(4), use_container_width=True, hide_index=True)

st.markdown(
    f"In plain English: each extra kilogram goes with about **{slope:.2f} cm** more height, and "
    f"the {conf_level}% confidence interval runs from {fit['ci_slope'][0]:.3f} to "
    f"{fit['ci_slope'][1]:.3f}. Untick the centring box and watch the intercept jump to the height "
    "of a weightless adult, while the slope does not move at all."
)

warning_box(
    "Reading a 95% confidence interval as '95% probability that beta_1 is in here'. The "
    "frequentist interval is a statement about the procedure over repeated samples. The Bayesian "
    "credible interval we build later is the one that actually means what people want it to mean."
)

st.divider()

# ---------------------------------------------------------------------------
# 3. Residual diagnostics
# ---------------------------------------------------------------------------
st.subheader("Residual Diagnostics")

st.markdown(
    "Every later section assumes this model is roughly right: straight line, constant spread, "
    "normal noise. The residuals are where that assumption gets tested."
)

residuals = np.asarray(fit["residuals"])
fitted = np.asarray(fit["fitted"])

diag_col1, diag_col2 = st.columns(2)
with diag_col1:
    fig_resid = go.Figure()
    fig_resid.add_trace(go.Scatter(
        x=fitted, y=residuals, mode="markers",
        marker=dict(color="#2A9D8F", size=5, opacity=0.5), showlegend=False,
    ))
    fig_resid.add_hline(y=0, line_dash="dash", line_color="#E63946")
    apply_common_layout(fig_resid, title="Residuals vs Fitted", height=400)
    fig_resid.update_xaxes(title_text="Fitted height (cm)")
    fig_resid.update_yaxes(title_text="Residual (cm)")
    st.plotly_chart(fig_resid, use_container_width=True)

with diag_col2:
    st.plotly_chart(qq_chart(qq_points(residuals)), use_container_width=True)

insight_box(
    "A shapeless cloud around zero and points hugging the QQ line: the normal linear model is a "
    "fair description of adult heights. That matters for everything that follows. MCMC will "
    "faithfully sample the posterior of whatever model you hand it, including a bad one."
)

st.divider()

code_example("""
import numpy as np
import statsmodels.api as sm

x = adults["weight"].to_numpy()
y = adults["height"].to_numpy()
xc = x - x.mean()

results = sm.OLS(y, sm.add_constant(xc)).fit()
print(results.summary())
print(results.conf_int(0.05))      # 95% confidence intervals
print(np.sqrt(results.scale))      # residual standard error (sigma)
""")

st.divider()

quiz(
    "After centring weight at its mean, what does the OLS intercept estimate?",
    [
        "The height of someone weighing 0 kg",
        "The average height of someone of average weight",
        "The slope of the regression line",
        "The residual standard deviation",
    ],
    correct_idx=1,
    explanation="With x - xbar as the predictor, the line passes through (xbar, ybar), so the "
                "intercept is the expected height at the mean weight.",
    key="sec2_quiz1",
)

st.divider()

takeaways([
    "The deck's model is y = beta0 + beta1 (x - xbar) + noise, with normal noise of sd sigma.",
    "Centring the predictor makes the intercept interpretable and decorrelates it from the slope.",
    "OLS gives point estimates and confidence intervals; these are the benchmark the Bayesian fits should match under vague priors.",
    "Residual plots check the model's assumptions. No sampler can rescue a wrong model.",
])

navigation(
    prev_label="Sec 1: Exploring the Data",
    prev_page="01_Exploring_the_Data.py",
    next_label="Sec 3: Conjugate Updating",
    next_page="03_Conjugate_Updating.py",
)
