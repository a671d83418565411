"""
Visualization module using Plotly for separation runs.

Figures are returned, never shown, so callers decide whether to display,
save or log them.
"""

import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots
from typing import Dict, Optional, Sequence

from .scoring import match_sources


def plot_cost_trace(cost: np.ndarray, title: str = 'Natural Gradient ICA Convergence') -> go.Figure:
    """
    Plot the cost function value against the iteration number.
    """
    iterations = list(range(len(cost)))

    fig = go.Figure()

    fig.add_trace(
        go.Scatter(
            x=iterations,
            y=np.asarray(cost, dtype=float),
            mode='lines',
            line=dict(color='#1f77b4', width=2),
            name='Cost',
        )
    )

    fig.update_layout(
        title=title,
        xaxis_title='Number of iterations',
        yaxis_title='Value of cost function',
        height=400,
    )

    return fig


def plot_cost_comparison(traces: Dict[str, np.ndarray]) -> go.Figure:
    """Overlay several cost traces, e.g. one per step size or score function."""
    fig = go.Figure()
    for label, cost in traces.items():
        fig.add_trace(go.Scatter(x=list(range(len(cost))), y=np.asarray(cost, dtype=float),
                                 mode='lines', name=label))
    fig.update_layout(
        title='Cost Function Comparison',
        xaxis_title='Number of iterations',
        yaxis_title='Value of cost function',
        height=400,
    )
    return fig


def plot_separation_comparison(
    sources: np.ndarray,
    estimated: np.ndarray,
    observed: Optional[np.ndarray] = None,
    n_points: int = 2000,
    labels: Optional[Sequence[str]] = None,
) -> go.Figure:
    """
    Show true sources next to their matched estimates (and optionally the mixture).

    Estimates are matched to sources by absolute correlation and sign-aligned
    so the waveforms overlay.

    Args:
        sources: True sources (n_sources, n_samples)
        estimated: Estimated sources (n_sources, n_samples)
        observed: Observed mixture (n_channels, n_samples)
        n_points: Number of leading samples to draw
        labels: Optional source names
    """
    n_sources = sources.shape[0]
    perm, correlations = match_sources(estimated, sources)
    labels = list(labels) if labels is not None else [f'Source {i + 1}' for i in range(n_sources)]

    n_cols = 3 if observed is not None else 2
    titles = []
    for i in range(n_sources):
        if observed is not None:
            titles.append(f'Observed ch {i + 1}')
        titles.extend([labels[i], f'Estimate (|r|={correlations[i]:.3f})'])

    fig = make_subplots(rows=n_sources, cols=n_cols, subplot_titles=titles, shared_xaxes=True)
    t = np.arange(min(n_points, sources.shape[1]))

    for i in range(n_sources):
        col = 1
        if observed is not None:
            fig.add_trace(
                go.Scatter(x=t, y=observed[i, :len(t)], mode='lines',
                           line=dict(color='#7f7f7f', width=1), showlegend=False),
                row=i + 1, col=col,
            )
            col += 1

        s = sources[i, :len(t)]
        y = estimated[perm[i], :len(t)]
        # Flip sign and match scale for display
        y = y * np.sign(np.dot(s, y)) * (np.std(s) / (np.std(y) + 1e-12))

        fig.add_trace(
            go.Scatter(x=t, y=s, mode='lines', line=dict(color='#2ca02c', width=1), showlegend=False),
            row=i + 1, col=col,
        )
        fig.add_trace(
            go.Scatter(x=t, y=y, mode='lines', line=dict(color='#d62728', width=1), showlegend=False),
            row=i + 1, col=col + 1,
        )

    fig.update_layout(
        title='Sources vs. Estimates',
        height=250 * n_sources,
    )

    return fig
