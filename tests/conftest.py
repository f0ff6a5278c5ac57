import numpy as np
import pandas as pd
import pytest

TRUE_INTERCEPT = 155.0
TRUE_SLOPE = 0.9
TRUE_SIGMA = 5.0


@pytest.fixture
def regression_data():
    """Adult-like height/weight data with a known line and noise level."""
    rng = np.random.default_rng(0)
    x = rng.normal(45.0, 6.0, size=200)
    y = TRUE_INTERCEPT + TRUE_SLOPE * (x - x.mean()) + rng.normal(0, TRUE_SIGMA, size=200)
    return x, y


@pytest.fixture
def howell_frame():
    rng = np.random.default_rng(1)
    n = 60
    age = np.concatenate([rng.uniform(1, 17, size=20), rng.uniform(18, 80, size=n - 20)])
    weight = np.where(age < 18, 5 + 2 * age, rng.normal(45, 6, size=n))
    height = np.where(age < 18, 60 + 5 * age, 155 + 0.9 * (weight - 45) + rng.normal(0, 5, size=n))
    male = rng.integers(0, 2, size=n)
    return pd.DataFrame({"height": height, "weight": weight, "age": age, "male": male})


@pytest.fixture
def howell_csv(tmp_path, howell_frame):
    path = tmp_path / "Howell1.csv"
    howell_frame.to_csv(path, sep=";", index=False)
    return path
