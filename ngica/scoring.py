"""
Separation quality metrics against a known ground truth.

ICA recovers sources only up to permutation and scale, so every metric here
first matches estimates to true sources:

- match_sources: Hungarian assignment on absolute Pearson correlations
- off_diagonal_ratio: how far P = W A is from a scaled permutation
- amari_index: permutation- and scale-invariant distance of P from identity
  (0 = perfect separation)
"""

import numpy as np
from scipy.optimize import linear_sum_assignment
from typing import Dict, Optional, Tuple


def correlation_matrix(estimated: np.ndarray, sources: np.ndarray) -> np.ndarray:
    """
    Pearson correlations between every estimate and every source.

    Args:
        estimated: (n_estimates, n_samples)
        sources: (n_sources, n_samples)

    Returns:
        (n_estimates, n_sources) correlation matrix
    """
    n = estimated.shape[0]
    C = np.corrcoef(estimated, sources)
    return C[:n, n:]


def match_sources(estimated: np.ndarray, sources: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Align estimates to sources.

    Returns:
        Tuple of (perm, correlations) where estimated[perm[i]] is matched to
        sources[i] and correlations[i] is their absolute Pearson correlation
    """
    C = np.abs(correlation_matrix(estimated, sources))
    rows, cols = linear_sum_assignment(-C)
    perm = np.empty(sources.shape[0], dtype=int)
    perm[cols] = rows
    return perm, C[perm, np.arange(sources.shape[0])]


def _assignment(P: np.ndarray) -> np.ndarray:
    """Column matched to each row of P by maximum total magnitude."""
    rows, cols = linear_sum_assignment(-np.abs(P))
    match = np.empty(P.shape[0], dtype=int)
    match[rows] = cols
    return match


def off_diagonal_ratio(W: np.ndarray, A: np.ndarray) -> float:
    """
    Largest off-assignment magnitude of P = W A relative to its row's match.

    For a scaled permutation matrix the ratio is 0.
    """
    P = np.abs(W @ A)
    match = _assignment(P)
    n = P.shape[0]

    ratios = []
    for i in range(n):
        main = P[i, match[i]]
        others = np.delete(P[i], match[i])
        ratios.append(np.max(others) / main if main > 0 else np.inf)
    return float(np.max(ratios))


def amari_index(W: np.ndarray, A: np.ndarray) -> float:
    """
    Normalized Amari performance index of P = W A, in [0, 1].
    """
    P = np.abs(W @ A)
    n = P.shape[0]
    row_term = np.sum(np.sum(P, axis=1) / np.max(P, axis=1) - 1)
    col_term = np.sum(np.sum(P, axis=0) / np.max(P, axis=0) - 1)
    return float((row_term + col_term) / (2 * n * (n - 1)))


def compute_separation_score(
    estimated: np.ndarray,
    sources: np.ndarray,
    W: Optional[np.ndarray] = None,
    A: Optional[np.ndarray] = None,
    cost: Optional[np.ndarray] = None,
) -> Dict[str, float]:
    """
    Aggregate separation metrics for one run.

    Args:
        estimated: Estimated sources (n_sources, n_samples)
        sources: True sources (n_sources, n_samples)
        W: Demixing matrix (optional, with A)
        A: True mixing matrix (optional, with W)
        cost: Cost trace (optional)

    Returns:
        Dict with correlation statistics and, when available, matrix metrics
        and cost values
    """
    _, correlations = match_sources(estimated, sources)
    metrics = {
        'corr_mean': float(np.mean(correlations)),
        'corr_min': float(np.min(correlations)),
    }

    if W is not None and A is not None:
        metrics['off_diagonal_ratio'] = off_diagonal_ratio(W, A)
        metrics['amari_index'] = amari_index(W, A)

    if cost is not None and len(cost) > 0:
        metrics['cost_initial'] = float(cost[0])
        metrics['cost_final'] = float(cost[-1])

    return metrics
