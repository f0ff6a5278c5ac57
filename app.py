"""Monte Carlo Methods for Bayesian Inference -- Main Entry Point."""
import streamlit as st

st.set_page_config(
    page_title="Monte Carlo Methods for Bayesian Inference",
    page_icon="🎲",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.title("Monte Carlo Methods for Bayesian Inference")
st.subheader("From a scatter plot to a posterior you can actually ask questions of")

st.markdown("""
Bayesian inference has a dirty secret: the posterior distribution is usually impossible to
write down. Bayes' theorem gives you a formula, sure, but the normalising constant in the
denominator is an integral over every parameter at once, and for anything beyond a textbook
example nobody can do that integral. So we cheat. Instead of *computing* the posterior, we
*sample* from it, and then every question we want to ask becomes an average over samples.
That is the whole trick, and it is called Monte Carlo.

This deck walks through the trick end to end on one small, honest dataset.

### The Case Study

We use the **Howell1** partial census of the !Kung San, collected by the anthropologist Nancy
Howell: **544 people**, with height (cm), weight (kg), age (years) and sex. The question we keep
coming back to is deliberately simple -- *how does adult height change with weight?* -- because
a simple question lets you see every moving part of the machinery.

### How to Use This Deck

1. **Navigate** through the sections in the sidebar. They build on each other: the samplers in
   Part III reuse the model from Part I, and Parts IV-V reuse the samplers.
2. **Filter** the data (minimum age, sex) in the sidebar. Every figure refits.
3. **Fiddle** with priors, chain counts, burn-in and step sizes. Breaking a sampler on purpose
   is the fastest way to learn what a broken sampler looks like.
4. **Answer the quizzes.** They are short, and they are there for a reason.

### Deck Outline
""")

parts = {
    "Part I: Data & Classical Regression (Sec 1-2)": "Exploratory analysis, ordinary least squares, residual checks",
    "Part II: Bayesian Foundations (Sec 3-4)": "Conjugate updating, Monte Carlo integration",
    "Part III: Markov Chain Monte Carlo (Sec 5-7)": "Hand-written Gibbs and Metropolis-Hastings, JAGS, Stan",
    "Part IV: Checking the Model (Sec 8-9)": "Trace plots, autocorrelation, Rhat, ESS, posterior predictive checks",
    "Part V: Using the Posterior (Sec 10)": "Probabilities, credible intervals, predictions",
}

for part, desc in parts.items():
    st.markdown(f"**{part}** -- {desc}")

st.divider()
st.markdown("**Pick a section from the sidebar. The posterior is not going to sample itself.**")

st.subheader("Dataset Preview")
from mcbayes.data_loader import load_data
df = load_data()
st.dataframe(df.head(20), use_container_width=True)

col1, col2, col3, col4 = st.columns(4)
col1.metric("People", f"{len(df):,}")
col2.metric("Adults (18+)", f"{int(df['adult'].sum()):,}")
col3.metric("Age Range", f"{df['age'].min():.0f} to {df['age'].max():.0f}")
col4.metric("Variables", "4")
