"""Section 1: Exploring the Data -- the census, its columns, and why we keep only adults."""
import streamlit as st
import numpy as np
import pandas as pd
import plotly.express as px

from mcbayes.data_loader import load_data, sidebar_filters
from mcbayes.plotting import (
    apply_common_layout, box_chart, heatmap_chart, histogram_chart, scatter_chart,
)
from mcbayes.stats_helpers import correlation_matrix, descriptive_stats, normality_test
from mcbayes.constants import FEATURE_COLS, FEATURE_LABELS
from mcbayes.ui_components import (
    section_header, concept_box, insight_box, warning_box,
    code_example, quiz, takeaways, navigation,
)

# ── Header ───────────────────────────────────────────────────────────────────
section_header(1, "Exploring the Data", part="I")
st.markdown(
    "Every Bayesian analysis starts exactly where every other analysis starts: by looking at the "
    "data. Priors, likelihoods and Markov chains are all downstream of a few boring questions. "
    "How many rows? What types? Anything missing? Anything weird? Skipping them is how people "
    "end up with a beautifully converged posterior for a model that makes no sense."
)

# ── Load data ────────────────────────────────────────────────────────────────
df = load_data()
fdf = sidebar_filters(df)

if len(fdf) < 3:
    st.warning("Fewer than 3 people match the sidebar filters. Relax them to continue.")
    st.stop()

# ── 1.1 Preview ──────────────────────────────────────────────────────────────
st.header("1.1  The Howell1 Census")
concept_box(
    "What Is in the Table?",
    "Each row is one person. <b>height</b> is in centimetres, <b>weight</b> in kilograms, "
    "<b>age</b> in years, and <b>male</b> is 1 for men and 0 for women. We add two convenience "
    "columns: <b>sex</b> (a readable version of <i>male</i>) and <b>adult</b> (age 18 or over). "
    "That is it. Four measured variables, a few hundred people, and enough structure to teach "
    "almost all of applied Bayesian regression."
)
n_rows = st.slider("Rows to preview", 5, 50, 10, key="head_slider")
st.dataframe(fdf.head(n_rows), use_container_width=True)

col1, col2 = st.columns(2)
with col1:
    st.subheader("Shape")
    st.write(f"Rows: **{fdf.shape[0]:,}**  |  Columns: **{fdf.shape[1]}**")
with col2:
    st.subheader("Data Types")
    dtype_df = pd.DataFrame({
        "Column": fdf.dtypes.index,
        "Dtype": fdf.dtypes.astype(str).values,
    })
    st.dataframe(dtype_df, use_container_width=True, hide_index=True)

code_example(
    """import pandas as pd

df = pd.read_csv("Howell1.csv", sep=";")
df["sex"] = df["male"].map({0: "Female", 1: "Male"})
df.head(10)
df.dtypes
"""
)

# ── 1.2 Summary statistics ───────────────────────────────────────────────────
st.header("1.2  Summary Statistics")
desc = fdf[FEATURE_COLS].describe().T.rename(index=FEATURE_LABELS).round(2)
st.dataframe(desc, use_container_width=True)

per_sex = fdf.groupby("sex")[FEATURE_COLS].mean().round(2).rename(columns=FEATURE_LABELS)
st.markdown("**Means by sex**")
st.dataframe(per_sex, use_container_width=True)

missing = fdf[FEATURE_COLS + ["male"]].isnull().sum()
if missing.sum() == 0:
    st.success("No missing values. Census data this clean is a gift; do not get used to it.")
else:
    st.warning(f"Missing cells by column: {missing[missing > 0].to_dict()}")

# ── 1.3 Distributions ────────────────────────────────────────────────────────
st.header("1.3  Distributions")
feature = st.selectbox(
    "Variable", FEATURE_COLS,
    format_func=lambda c: FEATURE_LABELS.get(c, c),
    key="dist_feature",
)
fig_hist = histogram_chart(fdf, x=feature, title=f"Distribution of {FEATURE_LABELS[feature]}",
                           marginal="box", height=450)
st.plotly_chart(fig_hist, use_container_width=True)

stats_row = descriptive_stats(fdf[feature])
m1, m2, m3, m4 = st.columns(4)
m1.metric("Mean", f"{stats_row['mean']:.2f}")
m2.metric("Std", f"{stats_row['std']:.2f}")
m3.metric("Skewness", f"{stats_row['skewness']:.2f}")
m4.metric("IQR", f"{stats_row['iqr']:.2f}")

w_stat, w_p = normality_test(fdf[feature].values)
st.caption(
    f"Shapiro-Wilk W = {w_stat:.3f}, p = {w_p:.3g}. "
    "Nobody needs the raw variables to be normal; the regression model only asks that the "
    "*residuals* are. We will check those in Section 2."
)

fig_box = box_chart(fdf, x="sex", y=feature, title=f"{FEATURE_LABELS[feature]} by Sex", height=400)
st.plotly_chart(fig_box, use_container_width=True)

# ── 1.4 Height vs weight ─────────────────────────────────────────────────────
st.header("1.4  Height Against Weight")
st.markdown(
    "Here is the relationship the rest of the deck is about. Set the minimum age in the sidebar "
    "to 0 and look at what the children do to the picture, then put it back to 18."
)

fig_scatter = scatter_chart(
    fdf, x="weight", y="height", title="Height vs Weight",
    height=500,
)
st.plotly_chart(fig_scatter, use_container_width=True)

all_ages = df[df["sex"].isin(fdf["sex"].unique())].copy()
all_ages["group"] = np.where(all_ages["adult"], "Adult (18+)", "Under 18")
fig_age = px.scatter(
    all_ages, x="weight", y="height", color="group",
    color_discrete_map={"Adult (18+)": "#264653", "Under 18": "#F4A261"},
    labels={**FEATURE_LABELS, "group": "Age group"},
    opacity=0.6,
)
apply_common_layout(fig_age, title="Everyone, Children Included", height=450)
st.plotly_chart(fig_age, use_container_width=True)

insight_box(
    "Across all ages the relationship is clearly curved: children gain height fast per kilogram, "
    "adults barely at all. Among adults alone it is close to a straight line. A straight-line "
    "model is wrong for the whole population and perfectly reasonable for adults, which is why we "
    "filter at 18 rather than reach for something fancier."
)

# ── 1.5 Correlation ──────────────────────────────────────────────────────────
st.header("1.5  Correlations")
corr = correlation_matrix(fdf[FEATURE_COLS + ["male"]]).rename(index=FEATURE_LABELS, columns=FEATURE_LABELS)
st.plotly_chart(heatmap_chart(corr, title="Pearson Correlation (filtered data)"), use_container_width=True)

r = np.corrcoef(fdf["weight"], fdf["height"])[0, 1]
st.markdown(
    f"Weight and height correlate at **r = {r:.2f}** in the current selection. Sex is tangled up "
    "with both: men are taller and heavier on average. We will keep the model to one predictor "
    "to keep the samplers readable, but notice it."
)

warning_box(
    "Treating a correlation as the answer. A correlation of 0.75 does not tell you how many "
    "centimetres a kilogram is worth, nor how sure you should be about that number. That is what "
    "the regression, and later the posterior, is for."
)

# ── Quiz ─────────────────────────────────────────────────────────────────────
st.divider()
quiz(
    "Why does the deck restrict the regression to adults?",
    [
        "Children have missing weights",
        "The height-weight relationship is roughly linear for adults but strongly curved across all ages",
        "MCMC cannot handle more than 400 rows",
        "Adults have normally distributed heights and children do not",
    ],
    correct_idx=1,
    explanation="Look at the all-ages scatter: the growth curve bends sharply. A straight line fitted "
                "through everybody would be systematically wrong at both ends.",
    key="sec1_quiz1",
)

# ── Takeaways ────────────────────────────────────────────────────────────────
st.divider()
takeaways([
    "Look at shape, dtypes, summaries and missing values before fitting anything, Bayesian or not.",
    "The Howell1 census has height, weight, age and sex for 544 people; about 350 are adults.",
    "Height against weight is curved across all ages and close to linear among adults.",
    "Weight and height are strongly correlated, and sex is associated with both.",
])

st.divider()
navigation(
    prev_label="Welcome",
    prev_page="app.py",
    next_label="Sec 2: Frequentist Regression",
    next_page="02_Frequentist_Regression.py",
)
