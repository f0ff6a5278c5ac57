"""Cached data loading and filtering utilities."""
import streamlit as st
import pandas as pd
import numpy as np

from mcbayes.constants import ADULT_AGE, REQUIRED_COLS, SEX_LIST, data_path


def read_howell(path):
    """Read the Howell1 census CSV and add the derived `sex` and `adult` columns."""
    df = pd.read_csv(path, sep=";")
    missing = [c for c in REQUIRED_COLS if c not in df.columns]
    if missing:
        raise ValueError(f"{path} is missing required columns: {', '.join(missing)}")
    df["sex"] = df["male"].map({0: "Female", 1: "Male"})
    df["adult"] = df["age"] >= ADULT_AGE
    return df


@st.cache_data
def load_data():
    """Load the full case dataset."""
    return read_howell(data_path())


def sidebar_filters(df):
    """Render sidebar age and sex filters; return filtered DataFrame."""
    st.sidebar.header("Filters")
    max_age = int(np.ceil(df["age"].max()))
    min_age = st.sidebar.slider(
        "Minimum age (years)", 0, max_age, ADULT_AGE,
        help="The regression is linear for adults; children bend the curve.",
        key="age_filter",
    )
    if "selected_sexes" not in st.session_state:
        st.session_state.selected_sexes = SEX_LIST.copy()
    selected = st.sidebar.multiselect(
        "Sex", SEX_LIST,
        default=st.session_state.selected_sexes,
        key="sex_filter",
    )
    st.session_state.selected_sexes = selected

    mask = (df["age"] >= min_age) & df["sex"].isin(selected)
    return df[mask].copy()


def regression_arrays(df, x, y):
    """Drop incomplete rows and return the predictor and response as float arrays."""
    clean = df[[x, y]].dropna()
    return clean[x].to_numpy(dtype=float), clean[y].to_numpy(dtype=float)
