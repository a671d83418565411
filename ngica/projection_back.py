"""
Scale resolution for ICA outputs.

Natural gradient ICA fixes neither the sign nor the magnitude of each
recovered source. Two ways to pin the scale down:

- back-projection onto a reference channel: each source is scaled by its
  least-squares contribution to that observed channel, so the estimates sum
  to the best linear reconstruction of the channel;
- normalization: every estimate is divided by the global peak magnitude.

Permutation is left unresolved in both cases.
"""

from typing import Tuple

import numpy as np

from .config import check_ref_channel
from .errors import ConfigurationError, DivergenceError


def projection_matrix(X: np.ndarray, Y: np.ndarray) -> np.ndarray:
    """
    Closed-form solution of min_D ||X - D Y||^2.

    D = (X Y^T)(Y Y^T)^-1, computed with a linear solve instead of an
    explicit inverse.

    Args:
        X: Observed signals (n_channels, n_samples)
        Y: Estimated signals (n_sources, n_samples)

    Returns:
        D of shape (n_channels, n_sources)
    """
    XY = X @ Y.T
    YY = Y @ Y.T
    try:
        # D YY = XY  <=>  YY^T D^T = XY^T, and YY is symmetric
        return np.linalg.solve(YY, XY.T).T
    except np.linalg.LinAlgError as e:
        raise DivergenceError(
            "Estimated sources are linearly dependent; back-projection is undefined"
        ) from e


def back_project(
    X: np.ndarray,
    Y: np.ndarray,
    W: np.ndarray,
    ref_channel: int,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Rescale estimates to their contribution at a reference channel.

    Args:
        X: Observed signals (n_channels, n_samples)
        Y: Estimated signals W @ X (n_channels, n_samples)
        W: Demixing matrix (n_channels, n_channels)
        ref_channel: 1-based reference channel

    Returns:
        Tuple of (Y_scaled, W_scaled) with W_scaled @ X == Y_scaled
    """
    n_channels = X.shape[0]
    check_ref_channel(ref_channel, n_channels)
    if ref_channel == 0:
        raise ConfigurationError("ref_channel=0 selects normalization, use normalize()")

    D = projection_matrix(X, Y)
    scale = D[ref_channel - 1, :]

    return scale[:, None] * Y, np.diag(scale) @ W


def normalize(Y: np.ndarray, W: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Divide all estimates by their global peak magnitude.

    Returns:
        Tuple of (Y / peak, W / peak)
    """
    peak = np.max(np.abs(Y))
    if not np.isfinite(peak) or peak == 0:
        raise DivergenceError(f"Cannot normalize estimates with peak magnitude {peak}")
    return Y / peak, W / peak


def resolve_scale(
    X: np.ndarray,
    Y: np.ndarray,
    W: np.ndarray,
    ref_channel: int,
) -> Tuple[np.ndarray, np.ndarray]:
    """Back-project onto ref_channel, or normalize when ref_channel is 0."""
    check_ref_channel(ref_channel, X.shape[0])
    if ref_channel == 0:
        return normalize(Y, W)
    return back_project(X, Y, W, ref_channel)
