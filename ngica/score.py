"""
Score functions and the ICA cost function.

Each score kind assumes a source density p(y). The score is the derivative
of -log p(y) and drives the natural gradient update:

    laplace:  p(y) = 0.5 * exp(-|y|)           score = sign(y)       (super-Gaussian)
    sech:     p(y) = sech(y) / pi              score = tanh(y)       (super-Gaussian)
    cosh:     p(y) = exp(-y^2 / 2) * cosh(y)   score = y - tanh(y)   (sub-Gaussian)

The cost is the negative log-likelihood of the demixed signal:

    cost = -log|det W| - (1/T) * sum(log p(y_ij))
"""

import warnings
from enum import Enum
from typing import Union

import numpy as np

from .errors import UnsupportedScoreType


LOG_2 = np.log(2.0)
LOG_PI = np.log(np.pi)


class ScoreFunction(str, Enum):
    """Assumed source density."""
    LAPLACE = 'laplace'
    SECH = 'sech'
    COSH = 'cosh'

    @classmethod
    def parse(cls, kind: Union[str, 'ScoreFunction']) -> 'ScoreFunction':
        """
        Resolve a score kind from an enum member or a name.

        Names are case-insensitive; the short forms 'LAP', 'SEC' and 'COS'
        are accepted as well.
        """
        if isinstance(kind, cls):
            return kind
        if isinstance(kind, str):
            key = kind.strip().lower()
            key = _ALIASES.get(key, key)
            for member in cls:
                if member.value == key:
                    return member
        raise UnsupportedScoreType(
            f"Score function {kind!r} is not supported; "
            f"choose one of {[m.value for m in cls]}"
        )


_ALIASES = {
    'lap': 'laplace',
    'sec': 'sech',
    'cos': 'cosh',
}


def score_function(Y: np.ndarray, kind: Union[str, ScoreFunction]) -> np.ndarray:
    """
    Evaluate the score function elementwise.

    Args:
        Y: Estimated signals (any shape)
        kind: Score function kind

    Returns:
        Array of the same shape as Y. For laplace, exact zeros map to 0.
    """
    kind = ScoreFunction.parse(kind)
    Y = np.asarray(Y, dtype=float)

    if kind is ScoreFunction.LAPLACE:
        return np.sign(Y)
    if kind is ScoreFunction.SECH:
        return np.tanh(Y)
    return Y - np.tanh(Y)


def _log_cosh(Y: np.ndarray) -> np.ndarray:
    """log(cosh(y)) without overflow for large |y|."""
    return np.logaddexp(Y, -Y) - LOG_2


def log_density(Y: np.ndarray, kind: Union[str, ScoreFunction]) -> np.ndarray:
    """
    Elementwise log p(y) for the density assumed by the score kind.

    Evaluated in the log domain so p(y) is never rounded to zero.
    """
    kind = ScoreFunction.parse(kind)
    Y = np.asarray(Y, dtype=float)

    if kind is ScoreFunction.LAPLACE:
        return -LOG_2 - np.abs(Y)
    if kind is ScoreFunction.SECH:
        return -_log_cosh(Y) - LOG_PI
    return -0.5 * Y ** 2 + _log_cosh(Y)


def compute_cost(
    W: np.ndarray,
    Y: np.ndarray,
    n_samples: int,
    kind: Union[str, ScoreFunction],
) -> float:
    """
    Compute the ICA cost (negative log-likelihood) for a demixing matrix.

    Args:
        W: Demixing matrix (n_channels, n_channels)
        Y: Estimated signals W @ X (n_channels, n_samples)
        n_samples: Number of time samples T
        kind: Score function kind selecting the source density

    Returns:
        Cost value. +inf when W is exactly singular.
    """
    sign, logabsdet = np.linalg.slogdet(W)
    if sign == 0:
        warnings.warn("Demixing matrix is singular; cost is +inf", RuntimeWarning)
        return float('inf')

    return float(-logabsdet - np.sum(log_density(Y, kind)) / n_samples)
