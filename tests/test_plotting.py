import numpy as np
import pandas as pd
import plotly.graph_objects as go
import pytest

from mcbayes.plotting import (
    acf_chart, heatmap_chart, lag_scatter, posterior_histograms, ppc_density_overlay, ppc_statistic_chart,
    qq_chart, regression_band_chart, rhat_bar_chart, scatter_chart, trace_plot,
)
from mcbayes.samplers import to_inference_data
from mcbayes.stats_helpers import qq_points


@pytest.fixture
def idata():
    rng = np.random.default_rng(0)
    x = rng.normal(45, 6, size=30)
    y = 155 + 0.9 * (x - x.mean()) + rng.normal(0, 5, size=30)
    shape = (3, 100)
    return to_inference_data({
        "beta0": rng.normal(155, 1, size=shape),
        "beta1": rng.normal(0.9, 0.1, size=shape),
        "tau": np.full(shape, 0.04),
    }, x, y)


def test_scatter_chart_colours_by_sex():
    df = pd.DataFrame({"weight": [40, 50, 60], "height": [150, 160, 170], "sex": ["Female", "Male", "Male"]})
    fig = scatter_chart(df, "weight", "height", title="t")
    assert isinstance(fig, go.Figure)
    assert {t.name for t in fig.data} == {"Female", "Male"}
    assert fig.layout.height == 500


def test_heatmap_chart_annotates_values():
    corr = pd.DataFrame([[1.0, 0.5], [0.5, 1.0]], index=["a", "b"], columns=["a", "b"])
    fig = heatmap_chart(corr)
    assert fig.data[0].zmin == -1 and fig.data[0].zmax == 1


def test_trace_plot_has_trace_and_histogram_per_chain(idata):
    fig = trace_plot(idata, ["beta0", "beta1"])
    # two parameters x three chains x (trace + histogram)
    assert len(fig.data) == 12
    assert sum(bool(t.showlegend) for t in fig.data) == 3


def test_posterior_histograms_one_trace_per_source_and_param(idata):
    fig = posterior_histograms({"gibbs": idata, "metropolis": idata}, ["beta0", "beta1", "sigma"])
    assert len(fig.data) == 6
    assert {t.legendgroup for t in fig.data} == {"gibbs", "metropolis"}


def test_diagnostic_charts():
    assert len(lag_scatter(np.arange(5), np.arange(1, 6), 0.9, "beta1").data) == 1
    fig = acf_chart(np.array([1.0, 0.5, 0.2]), 100, "beta1")
    assert list(fig.data[0].y) == [1.0, 0.5, 0.2]
    fig = rhat_bar_chart({"beta0": 1.001, "beta1": 1.2}, 1.01)
    assert list(fig.data[0].marker.color) == ["#2A9D8F", "#E63946"]


def test_qq_chart_from_points():
    fig = qq_chart(qq_points(np.random.default_rng(1).normal(size=50)))
    assert len(fig.data) == 2


def test_ppc_charts():
    rng = np.random.default_rng(2)
    y = rng.normal(size=40)
    y_rep = rng.normal(size=(30, 40))
    fig = ppc_density_overlay(y, y_rep, n_show=10)
    assert len(fig.data) == 11
    assert fig.data[-1].name == "observed"
    fig = ppc_statistic_chart(y_rep.mean(axis=1), y.mean(), "mean", 0.4)
    assert len(fig.data) == 1


def test_regression_band_chart():
    rng = np.random.default_rng(3)
    x_grid = np.linspace(30, 60, 20)
    mean_draws = 155 + 0.9 * (x_grid - 45) + rng.normal(0, 0.5, size=(200, 1))
    pred_draws = mean_draws + rng.normal(0, 5, size=(200, 20))
    fig = regression_band_chart(rng.normal(45, 6, 30), rng.normal(155, 5, 30), x_grid, mean_draws, pred_draws)
    assert [t.name for t in fig.data] == [
        "95% prediction band", "95% band for the mean", "Data", "Posterior mean",
    ]
