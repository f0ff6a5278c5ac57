"""Exploratory statistics and classical (frequentist) regression helpers."""
import numpy as np
import pandas as pd
import statsmodels.api as sm
from scipy import stats
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score


def descriptive_stats(series):
    """Summary of one numeric column, as shown beside its histogram."""
    q25, median, q75 = series.quantile([0.25, 0.5, 0.75])
    return {
        "count": int(series.count()),
        "mean": series.mean(),
        "std": series.std(),
        "median": median,
        "iqr": q75 - q25,
        "min": series.min(),
        "max": series.max(),
        "skewness": series.skew(),
    }


def bootstrap_ci(data, stat_func=np.mean, n_boot=1000, level=0.95, seed=42):
    """Percentile bootstrap interval for ``stat_func``.

    Rows of ``data`` are resampled, so paired observations can be passed as a
    2-D array with one row per person. Returns (lower, upper, replicates).
    """
    if not 0 < level < 1:
        raise ValueError(f"level must lie in (0, 1), got {level}")
    data = np.asarray(data)
    n = len(data)
    rng = np.random.default_rng(seed)
    replicates = np.array([stat_func(data[rng.integers(0, n, size=n)]) for _ in range(n_boot)])
    tail = 50 * (1 - level)
    lower, upper = np.percentile(replicates, [tail, 100 - tail])
    return lower, upper, replicates


def normality_test(data):
    """Shapiro-Wilk W and p-value, ignoring missing values."""
    data = np.asarray(data, dtype=float)
    data = data[~np.isnan(data)]
    if len(data) < 3:
        raise ValueError("Shapiro-Wilk needs at least 3 values")
    result = stats.shapiro(data)
    return result.statistic, result.pvalue


def correlation_matrix(df, method="pearson"):
    """Pairwise correlations between numeric (including 0/1 indicator) columns."""
    return df.corr(method=method, numeric_only=True)


def ols_fit(x, y, alpha=0.05, center=False):
    """Fit y = b0 + b1 * x by ordinary least squares.

    With ``center=True`` the predictor is centred first, so the intercept is
    the expected response at the mean of x (the parameterisation the
    samplers use).
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.shape != y.shape:
        raise ValueError(f"x and y must have the same shape, got {x.shape} and {y.shape}")
    if len(x) < 3:
        raise ValueError("ordinary least squares needs at least 3 observations")
    xc = x - x.mean() if center else x
    results = sm.OLS(y, sm.add_constant(xc, has_constant="add")).fit()
    ci = results.conf_int(alpha)
    return {
        "intercept": results.params[0],
        "slope": results.params[1],
        "se_intercept": results.bse[0],
        "se_slope": results.bse[1],
        "ci_intercept": (ci[0, 0], ci[0, 1]),
        "ci_slope": (ci[1, 0], ci[1, 1]),
        "pvalue_slope": results.pvalues[1],
        "r2": results.rsquared,
        "sigma": np.sqrt(results.scale),
        "fitted": results.fittedvalues,
        "residuals": results.resid,
        "results": results,
    }


def coefficient_table(fit):
    """Tabulate an :func:`ols_fit` result the way regression output is usually read."""
    return pd.DataFrame({
        "Term": ["Intercept", "Slope"],
        "Estimate": [fit["intercept"], fit["slope"]],
        "Std. Error": [fit["se_intercept"], fit["se_slope"]],
        "CI lower": [fit["ci_intercept"][0], fit["ci_slope"][0]],
        "CI upper": [fit["ci_intercept"][1], fit["ci_slope"][1]],
    })


def qq_points(residuals):
    """Theoretical vs sample normal quantiles plus the least-squares reference line."""
    (theoretical, sample), (slope, intercept, r) = stats.probplot(np.asarray(residuals), dist="norm")
    return {
        "theoretical": theoretical,
        "sample": sample,
        "slope": slope,
        "intercept": intercept,
        "r": r,
    }


def regression_metrics(y_true, y_pred):
    """Error and fit metrics for a set of predictions (MSE, RMSE, MAE, R^2)."""
    return {
        "mse": mean_squared_error(y_true, y_pred),
        "rmse": np.sqrt(mean_squared_error(y_true, y_pred)),
        "mae": mean_absolute_error(y_true, y_pred),
        "r2": r2_score(y_true, y_pred),
    }
