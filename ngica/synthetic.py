"""
Synthetic independent sources and instantaneous mixtures.

Each score function assumes a source density; `sample_sources` can draw from
each of them so separation can be checked against a known ground truth.
"""

from typing import Optional

import numpy as np


# Mixing matrix of the three-instrument demo mixture
DEFAULT_MIXING_MATRIX = np.array([
    [0.3, 0.6, -0.8],
    [-0.2, 0.5, 0.9],
    [-0.3, 0.6, -0.7],
])

SOURCE_TYPES = ('laplace', 'sech', 'cosh', 'uniform', 'gaussian')


def sample_sources(
    n_sources: int,
    n_samples: int,
    source_type: str = 'laplace',
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    Draw independent sources.

    Source types:
        laplace:  p(s) = 0.5 * exp(-|s|)
        sech:     p(s) = sech(s) / pi, sampled by inverse CDF log(tan(pi u / 2))
        cosh:     p(s) proportional to exp(-s^2 / 2) * cosh(s), i.e. +-1 plus N(0, 1)
        uniform:  uniform on [-sqrt(3), sqrt(3)] (unit variance, strongly sub-Gaussian)
        gaussian: N(0, 1); not separable, useful as a negative control

    Returns:
        Array of shape (n_sources, n_samples)
    """
    rng = np.random.default_rng(rng)
    shape = (n_sources, n_samples)

    if source_type == 'laplace':
        return rng.laplace(0.0, 1.0, shape)
    elif source_type == 'sech':
        u = rng.uniform(0.0, 1.0, shape)
        # Keep u strictly inside (0, 1) so tan() stays finite and positive
        u = np.clip(u, 1e-12, 1 - 1e-12)
        return np.log(np.tan(np.pi * u / 2))
    elif source_type == 'cosh':
        signs = rng.choice([-1.0, 1.0], size=shape)
        return signs + rng.standard_normal(shape)
    elif source_type == 'uniform':
        return rng.uniform(-np.sqrt(3), np.sqrt(3), shape)
    elif source_type == 'gaussian':
        return rng.standard_normal(shape)
    else:
        raise ValueError(f"Unknown source_type={source_type!r}; choose one of {SOURCE_TYPES}")


def mix_sources(sources: np.ndarray, mixing_matrix: np.ndarray) -> np.ndarray:
    """
    Instantaneous mixture X = A S.

    Args:
        sources: (n_sources, n_samples)
        mixing_matrix: (n_channels, n_sources)

    Returns:
        Observed signals (n_channels, n_samples)
    """
    A = np.asarray(mixing_matrix, dtype=float)
    S = np.asarray(sources, dtype=float)
    if A.shape[1] != S.shape[0]:
        raise ValueError(f"Mixing matrix {A.shape} does not match sources {S.shape}")
    return A @ S


def random_mixing_matrix(
    n_channels: int,
    rng: Optional[np.random.Generator] = None,
    max_condition: float = 10.0,
) -> np.ndarray:
    """Draw a standard-normal square mixing matrix with bounded condition number."""
    rng = np.random.default_rng(rng)
    while True:
        A = rng.standard_normal((n_channels, n_channels))
        if np.linalg.cond(A) <= max_condition:
            return A
