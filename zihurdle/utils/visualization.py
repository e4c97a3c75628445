"""
Visualization utilities for zero-inflation and hurdle simulations.

This module provides the diagnostic plots of simulated observation tables
and fitted hurdle predictions.
"""

import numpy as np
import pandas as pd

__all__ = []


def _import_pyplot():
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError("matplotlib required for plotting: pip install matplotlib") from None
    return plt


def _count_bars(ax, response: np.ndarray, mask: np.ndarray, labels, colors):
    """Stacked bar chart of response counts split by a ground-truth flag."""
    max_count = int(response.max()) if response.size else 0
    bins = np.arange(max_count + 1)
    first = np.bincount(response[mask], minlength=max_count + 1)
    second = np.bincount(response[~mask], minlength=max_count + 1)

    ax.bar(bins, second, color=colors[1], label=labels[1], width=0.9)
    ax.bar(bins, first, bottom=second, color=colors[0], label=labels[0], width=0.9)
    ax.set_xlabel("Response", fontsize=12)
    ax.set_ylabel("Observations", fontsize=12)
    ax.legend(loc="upper right")


def _create_zero_inflation_plot(table: pd.DataFrame, title: str = "Zero-inflated Poisson data"):
    """Scatter of response against ``x`` and a count histogram, split by excess zeros.

    Args:
        table: Observation table with ``x``, ``response`` and
            ``is_excess_zero`` columns.
        title: Figure title.

    Returns:
        The matplotlib figure.

    Raises:
        ImportError: If ``matplotlib`` is not installed.
    """
    plt = _import_pyplot()

    response = table["response"].to_numpy()
    excess = table["is_excess_zero"].to_numpy(dtype=bool)
    colors = ("#d62728", "#1f77b4")

    fig, (ax_scatter, ax_hist) = plt.subplots(1, 2, figsize=(12, 5))

    ax_scatter.scatter(table["x"][~excess], response[~excess], s=12, alpha=0.6, color=colors[1], label="Poisson draw")
    ax_scatter.scatter(table["x"][excess], response[excess], s=12, alpha=0.6, color=colors[0], label="Excess zero")
    ax_scatter.set_xlabel("x", fontsize=12)
    ax_scatter.set_ylabel("Response", fontsize=12)
    ax_scatter.grid(True, alpha=0.3)
    ax_scatter.legend(loc="upper left")

    _count_bars(ax_hist, response, excess, ("Excess zero", "Poisson draw"), colors)

    fig.suptitle(title, fontsize=14, fontweight="bold")
    plt.tight_layout()
    plt.show()
    return fig


def _create_hurdle_plot(table: pd.DataFrame, title: str = "Hurdle data"):
    """Response and presence diagnostics for hurdle data.

    Left panel: response against ``x`` split by ``is_present``, with the
    combined ``prediction`` overlaid when the column exists. Right panel:
    observed presence (jittered) and, when available, the true
    ``presence_probability`` against ``x``.

    Returns:
        The matplotlib figure.

    Raises:
        ImportError: If ``matplotlib`` is not installed.
    """
    plt = _import_pyplot()

    x = table["x"].to_numpy()
    response = table["response"].to_numpy()
    present = table["is_present"].to_numpy(dtype=bool) if "is_present" in table.columns else response > 0
    order = np.argsort(x)

    fig, (ax_resp, ax_pres) = plt.subplots(1, 2, figsize=(12, 5))

    ax_resp.scatter(x[present], response[present], s=12, alpha=0.6, color="#1f77b4", label="Present")
    ax_resp.scatter(x[~present], response[~present], s=12, alpha=0.6, color="#7f7f7f", label="Absent")
    if "prediction" in table.columns:
        ax_resp.plot(x[order], table["prediction"].to_numpy()[order], ".", color="#d62728", markersize=3, label="Hurdle prediction")
    ax_resp.set_xlabel("x", fontsize=12)
    ax_resp.set_ylabel("Response", fontsize=12)
    ax_resp.grid(True, alpha=0.3)
    ax_resp.legend(loc="upper left")

    jitter = np.linspace(-0.03, 0.03, len(x)) if len(x) else np.empty(0)
    ax_pres.scatter(x, present.astype(float) + jitter, s=8, alpha=0.4, color="#7f7f7f", label="Observed presence")
    if "presence_probability" in table.columns:
        ax_pres.plot(x[order], table["presence_probability"].to_numpy()[order], ".", color="#2ca02c", markersize=3, label="P(present)")
    ax_pres.set_xlabel("x", fontsize=12)
    ax_pres.set_ylabel("Presence", fontsize=12)
    ax_pres.set_ylim(-0.1, 1.1)
    ax_pres.grid(True, alpha=0.3)
    ax_pres.legend(loc="center right")

    fig.suptitle(title, fontsize=14, fontweight="bold")
    plt.tight_layout()
    plt.show()
    return fig


def _create_selection_plot(win_rates: pd.Series, title: str = "AIC model selection"):
    """Bar chart of the share of replicates each model wins on AIC."""
    plt = _import_pyplot()

    fig, ax = plt.subplots(figsize=(8, 5))
    colors = plt.get_cmap("Set1")(np.linspace(0, 1, max(len(win_rates), 1)))
    ax.bar(list(win_rates.index), win_rates.to_numpy() * 100, color=colors[: len(win_rates)])
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.set_ylabel("Replicates won (%)", fontsize=12)
    ax.set_ylim(0, 105)
    ax.grid(True, axis="y", alpha=0.3)
    plt.tight_layout()
    plt.show()
    return fig
