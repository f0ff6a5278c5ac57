"""Shared Plotly plotting helpers."""
import numpy as np
import plotly.express as px
import plotly.graph_objects as go
from plotly.subplots import make_subplots
from scipy.stats import gaussian_kde

from mcbayes.constants import (
    CHAIN_COLORS, FEATURE_LABELS, PARAM_COLORS, PARAM_LABELS, SEX_COLORS, SOURCE_COLORS, SOURCE_LABELS,
)


def apply_common_layout(fig, title=None, height=500):
    """Apply common layout settings to a Plotly figure."""
    fig.update_layout(
        template="plotly_white",
        height=height,
        title=title,
        title_x=0.5,
        margin=dict(t=60, b=40, l=60, r=40),
    )
    return fig


def _labels(labels):
    lab = {**(labels or {})}
    for k, v in FEATURE_LABELS.items():
        lab.setdefault(k, v)
    return lab


def scatter_chart(df, x, y, color="sex", title=None, labels=None, height=500, opacity=0.6):
    """Create a scatter plot colored by sex."""
    fig = px.scatter(df, x=x, y=y, color=color, color_discrete_map=SEX_COLORS,
                     labels=_labels(labels), title=title, opacity=opacity)
    return apply_common_layout(fig, title, height)


def histogram_chart(df, x, color="sex", title=None, nbins=40, labels=None, height=500, marginal=None):
    """Create an overlaid histogram colored by sex."""
    fig = px.histogram(df, x=x, color=color, color_discrete_map=SEX_COLORS,
                       nbins=nbins, labels=_labels(labels), title=title, barmode="overlay",
                       opacity=0.7, marginal=marginal)
    return apply_common_layout(fig, title, height)


def box_chart(df, x, y, color=None, title=None, labels=None, height=500):
    """Create a box plot."""
    fig = px.box(df, x=x, y=y, color=color or x,
                 color_discrete_map=SEX_COLORS, labels=_labels(labels), title=title)
    return apply_common_layout(fig, title, height)


def heatmap_chart(data, title=None, height=450, color_scale="RdBu_r"):
    """Annotated heatmap of a correlation matrix DataFrame."""
    fig = go.Figure(data=go.Heatmap(
        z=data.values, x=data.columns.tolist(), y=data.index.tolist(),
        colorscale=color_scale, zmin=-1, zmax=1,
        text=np.round(data.values, 2), texttemplate="%{text}",
    ))
    return apply_common_layout(fig, title, height)


def qq_chart(qq, title="Normal QQ Plot of Residuals", height=400, color="#2A9D8F"):
    """QQ plot from :func:`mcbayes.stats_helpers.qq_points`."""
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=qq["theoretical"], y=qq["sample"], mode="markers",
        marker=dict(color=color, size=5, opacity=0.6), name="Residuals",
    ))
    ends = np.array([qq["theoretical"].min(), qq["theoretical"].max()])
    fig.add_trace(go.Scatter(
        x=ends, y=qq["intercept"] + qq["slope"] * ends, mode="lines",
        line=dict(color="#E63946", dash="dash"), name="Reference line",
    ))
    fig.update_layout(xaxis_title="Theoretical Quantiles", yaxis_title="Sample Quantiles")
    return apply_common_layout(fig, title, height)


# ---------------------------------------------------------------------------
# MCMC output
# ---------------------------------------------------------------------------
def trace_plot(idata, var_names, height_per_param=230):
    """Trace (left) and per-chain posterior histogram (right) for each parameter."""
    titles = []
    for v in var_names:
        titles += [f"{v} trace", f"{v} posterior"]
    fig = make_subplots(rows=len(var_names), cols=2, subplot_titles=titles,
                        column_widths=[0.65, 0.35])
    for row, v in enumerate(var_names, start=1):
        values = idata.posterior[v].values
        for c, chain in enumerate(values):
            color = CHAIN_COLORS[c % len(CHAIN_COLORS)]
            fig.add_trace(go.Scatter(
                y=chain, mode="lines", line=dict(color=color, width=0.7),
                name=f"chain {c + 1}", legendgroup=f"chain{c}", showlegend=row == 1,
            ), row=row, col=1)
            fig.add_trace(go.Histogram(
                x=chain, nbinsx=40, marker_color=color, opacity=0.45,
                legendgroup=f"chain{c}", showlegend=False,
            ), row=row, col=2)
    fig.update_layout(barmode="overlay")
    fig.update_xaxes(title_text="Iteration", row=len(var_names), col=1)
    return apply_common_layout(fig, None, height_per_param * len(var_names) + 80)


def posterior_histograms(fits, var_names, height=380):
    """Overlaid posterior histograms of each parameter, one colour per sample source.

    ``fits`` maps a source name to its InferenceData.
    """
    fig = make_subplots(rows=1, cols=len(var_names),
                        subplot_titles=[PARAM_LABELS.get(v, v) for v in var_names])
    for i, (source, idata) in enumerate(fits.items()):
        color = SOURCE_COLORS.get(source, CHAIN_COLORS[i % len(CHAIN_COLORS)])
        for col, v in enumerate(var_names, start=1):
            fig.add_trace(go.Histogram(
                x=idata.posterior[v].values.ravel(), nbinsx=50, histnorm="probability density",
                marker_color=color, opacity=0.5, name=SOURCE_LABELS.get(source, source),
                legendgroup=source, showlegend=col == 1,
            ), row=1, col=col)
    fig.update_layout(barmode="overlay")
    return apply_common_layout(fig, None, height)


def lag_scatter(current, following, corr, param, lag=1, height=400):
    """Scatter of each draw against the draw ``lag`` steps later."""
    fig = go.Figure(go.Scatter(
        x=current, y=following, mode="markers",
        marker=dict(color=PARAM_COLORS.get(param, "#264653"), size=3, opacity=0.4),
        showlegend=False,
    ))
    fig.update_layout(xaxis_title=f"{param} at t", yaxis_title=f"{param} at t+{lag}")
    return apply_common_layout(fig, f"Lag-{lag} scatter of {param} (r = {corr:.2f})", height)


def acf_chart(acf_vals, n_draws, param, height=350):
    """Bar chart of autocorrelations with the white-noise 95% band."""
    ci = 1.96 / np.sqrt(n_draws)
    fig = go.Figure(go.Bar(
        x=np.arange(len(acf_vals)), y=acf_vals,
        marker_color=PARAM_COLORS.get(param, "#2E86C1"), showlegend=False,
    ))
    fig.add_hline(y=ci, line_dash="dash", line_color="red")
    fig.add_hline(y=-ci, line_dash="dash", line_color="red")
    fig.update_layout(xaxis_title="Lag", yaxis_title="Autocorrelation")
    return apply_common_layout(fig, f"ACF: {PARAM_LABELS.get(param, param)}", height)


def rhat_bar_chart(rhat_values, threshold, height=350):
    """Horizontal bars of Rhat per parameter with the convergence threshold."""
    names = list(rhat_values)
    vals = [rhat_values[n] for n in names]
    colors = ["#2A9D8F" if v < threshold else "#E63946" for v in vals]
    fig = go.Figure(go.Bar(x=vals, y=names, orientation="h", marker_color=colors,
                           text=[f"{v:.3f}" for v in vals], textposition="outside"))
    fig.add_vline(x=threshold, line_dash="dash", line_color="#264653",
                  annotation_text=f"threshold {threshold}")
    fig.update_xaxes(range=[min(0.99, min(vals) - 0.005), max(threshold + 0.02, max(vals) + 0.02)])
    fig.update_layout(xaxis_title="Rhat")
    return apply_common_layout(fig, "Rhat by parameter", height)


def ppc_density_overlay(y, y_rep, n_show=50, title="Observed vs replicated data", height=450):
    """Kernel densities of replicated datasets (thin) under the observed data (bold)."""
    y = np.asarray(y, dtype=float)
    lo = min(y.min(), np.min(y_rep[:n_show]))
    hi = max(y.max(), np.max(y_rep[:n_show]))
    grid = np.linspace(lo, hi, 300)
    fig = go.Figure()
    for i, rep in enumerate(y_rep[:n_show]):
        fig.add_trace(go.Scatter(
            x=grid, y=gaussian_kde(rep)(grid), mode="lines",
            line=dict(color="#8ECAE6", width=1), opacity=0.4,
            name="replicated", legendgroup="rep", showlegend=i == 0,
        ))
    fig.add_trace(go.Scatter(
        x=grid, y=gaussian_kde(y)(grid), mode="lines",
        line=dict(color="#264653", width=3), name="observed",
    ))
    fig.update_layout(yaxis_title="Density")
    return apply_common_layout(fig, title, height)


def ppc_statistic_chart(replicated, observed, name, p_value, height=350):
    """Histogram of a test statistic over replicated data, observed value marked."""
    fig = go.Figure(go.Histogram(x=replicated, nbinsx=40, marker_color="#8ECAE6", showlegend=False))
    fig.add_vline(x=observed, line_color="#E63946", line_width=3,
                  annotation_text=f"observed (p = {p_value:.2f})")
    fig.update_layout(xaxis_title=f"T(y_rep) = {name}", yaxis_title="Count")
    return apply_common_layout(fig, f"Test statistic: {name}", height)


def regression_band_chart(x, y, x_grid, mean_draws, pred_draws, level=0.95,
                          x_label="Weight (kg)", y_label="Height (cm)", height=500):
    """Data with posterior mean line, credible band for the mean, and prediction band."""
    tail = 100 * (1 - level) / 2
    mean_lo, mean_hi = np.percentile(mean_draws, [tail, 100 - tail], axis=0)
    pred_lo, pred_hi = np.percentile(pred_draws, [tail, 100 - tail], axis=0)
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=np.concatenate([x_grid, x_grid[::-1]]), y=np.concatenate([pred_hi, pred_lo[::-1]]),
        fill="toself", fillcolor="rgba(142,202,230,0.3)", line=dict(width=0),
        name=f"{level:.0%} prediction band",
    ))
    fig.add_trace(go.Scatter(
        x=np.concatenate([x_grid, x_grid[::-1]]), y=np.concatenate([mean_hi, mean_lo[::-1]]),
        fill="toself", fillcolor="rgba(230,57,70,0.35)", line=dict(width=0),
        name=f"{level:.0%} band for the mean",
    ))
    fig.add_trace(go.Scatter(
        x=x, y=y, mode="markers", marker=dict(color="#264653", size=4, opacity=0.5), name="Data",
    ))
    fig.add_trace(go.Scatter(
        x=x_grid, y=mean_draws.mean(axis=0), mode="lines",
        line=dict(color="#E63946", width=3), name="Posterior mean",
    ))
    fig.update_layout(xaxis_title=x_label, yaxis_title=y_label)
    return apply_common_layout(fig, "Posterior regression line with uncertainty", height)
