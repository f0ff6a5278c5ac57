import numpy as np
import pandas as pd
import pytest

from mcbayes.constants import DEFAULT_DATA_PATH, data_path
from mcbayes.data_loader import read_howell, regression_arrays


def test_read_howell_adds_derived_columns(howell_csv):
    df = read_howell(howell_csv)
    assert {"height", "weight", "age", "male", "sex", "adult"} <= set(df.columns)
    assert set(df["sex"].unique()) <= {"Female", "Male"}
    assert (df.loc[df["male"] == 1, "sex"] == "Male").all()
    assert (df["adult"] == (df["age"] >= 18)).all()


def test_read_howell_rejects_missing_columns(tmp_path):
    path = tmp_path / "bad.csv"
    pd.DataFrame({"height": [150.0], "weight": [40.0]}).to_csv(path, sep=";", index=False)
    with pytest.raises(ValueError, match="age, male"):
        read_howell(path)


def test_read_howell_needs_semicolons(tmp_path, howell_frame):
    path = tmp_path / "comma.csv"
    howell_frame.to_csv(path, index=False)
    with pytest.raises(ValueError):
        read_howell(path)


def test_regression_arrays_drops_incomplete_rows():
    df = pd.DataFrame({"weight": [40.0, np.nan, 50.0, 55.0], "height": [150.0, 160.0, None, 165.0]})
    x, y = regression_arrays(df, "weight", "height")
    np.testing.assert_array_equal(x, [40.0, 55.0])
    np.testing.assert_array_equal(y, [150.0, 165.0])
    assert x.dtype == float


def test_data_path_env_override(monkeypatch, tmp_path):
    monkeypatch.delenv("MCBAYES_DATA", raising=False)
    assert data_path() == DEFAULT_DATA_PATH
    monkeypatch.setenv("MCBAYES_DATA", str(tmp_path / "other.csv"))
    assert data_path() == str(tmp_path / "other.csv")
