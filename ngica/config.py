"""
Separation settings, input validation and demixing-matrix initialization.
"""

import numbers
from dataclasses import dataclass, fields, asdict
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .errors import (
    BackProjectionChannelOutOfRange,
    ConfigurationError,
    InputShapeError,
    InputValueError,
)
from .score import ScoreFunction


# Defaults
DEFAULT_STEP_SIZE = 0.1
DEFAULT_N_ITER = 100
DEFAULT_SCORE = ScoreFunction.LAPLACE.value
DEFAULT_REF_CHANNEL = 1  # 0 = normalize, 1..n = back-projection reference


@dataclass
class ICAConfig:
    """Settings for natural gradient ICA."""
    step_size: float = DEFAULT_STEP_SIZE
    n_iter: int = DEFAULT_N_ITER
    score: str = DEFAULT_SCORE
    ref_channel: int = DEFAULT_REF_CHANNEL
    track_cost: bool = True
    seed: Optional[int] = None
    verbose: bool = False
    print_every: int = 10

    @classmethod
    def from_dict(cls, config: Optional[Dict[str, Any]]) -> 'ICAConfig':
        """Build a config from a mapping, e.g. the 'ica' section of a YAML file."""
        config = dict(config or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            raise ConfigurationError(f"Unknown ICA config keys: {unknown}")
        return cls(**config)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def validate(self, n_channels: Optional[int] = None) -> 'ICAConfig':
        """
        Check every setting before any iteration runs.

        Args:
            n_channels: Channel count of the observed signal. When given, the
                back-projection reference channel is checked against it.

        Returns:
            self, with `score` normalized to its canonical name
        """
        if (isinstance(self.step_size, bool)
                or not isinstance(self.step_size, numbers.Real)
                or not np.isfinite(self.step_size) or self.step_size <= 0):
            raise ConfigurationError(f"step_size must be a positive finite number, got {self.step_size!r}")

        if (isinstance(self.n_iter, bool) or not isinstance(self.n_iter, numbers.Integral)
                or self.n_iter < 1):
            raise ConfigurationError(f"n_iter must be a positive integer, got {self.n_iter!r}")

        if (isinstance(self.print_every, bool) or not isinstance(self.print_every, numbers.Integral)
                or self.print_every < 1):
            raise ConfigurationError(f"print_every must be a positive integer, got {self.print_every!r}")

        if isinstance(self.ref_channel, bool) or not isinstance(self.ref_channel, numbers.Integral):
            raise ConfigurationError(f"ref_channel must be an integer, got {self.ref_channel!r}")

        if n_channels is not None:
            check_ref_channel(self.ref_channel, n_channels)
        elif self.ref_channel < 0:
            raise ConfigurationError(f"ref_channel must be >= 0, got {self.ref_channel}")

        self.score = ScoreFunction.parse(self.score).value
        return self


def check_ref_channel(ref_channel: int, n_channels: int) -> None:
    """Raise unless ref_channel is 0 (normalize) or a 1-based channel index."""
    if ref_channel < 0 or ref_channel > n_channels:
        raise BackProjectionChannelOutOfRange(ref_channel, n_channels)


def validate_observed(x: np.ndarray) -> Tuple[np.ndarray, bool]:
    """
    Check an observed mixture and orient it as (n_channels, n_samples).

    A signal with more rows than columns is taken to be (n_samples, n_channels)
    and is transposed.

    Returns:
        Tuple of (X, transposed) where X is a float copy in channel-major order
    """
    X = np.array(x, dtype=float)

    if X.ndim != 2:
        raise InputShapeError(
            f"Observed signal must be a 2-D (channels, samples) array, got shape {X.shape}"
        )

    transposed = X.shape[0] > X.shape[1]
    if transposed:
        X = X.T

    n_channels = X.shape[0]
    if n_channels < 2:
        raise InputShapeError(
            f"Observed signal must have at least 2 channels, got {n_channels}"
        )

    if not np.all(np.isfinite(X)):
        raise InputValueError("Observed signal contains NaN or infinite values")

    if not np.any(X):
        raise InputValueError("Observed signal is identically zero")

    return X, transposed


def init_demixing_matrix(
    n_channels: int,
    initial_W: Optional[np.ndarray] = None,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    Create the starting demixing matrix.

    Args:
        n_channels: Number of channels n
        initial_W: Optional caller-supplied (n, n) matrix. It is copied.
        rng: Random generator for the default standard-normal initialization

    Returns:
        (n, n) float array owned by the caller of this function
    """
    if initial_W is None:
        rng = np.random.default_rng(rng)
        return rng.standard_normal((n_channels, n_channels))

    W = np.array(initial_W, dtype=float)
    if W.shape != (n_channels, n_channels):
        raise InputShapeError(
            f"Initial demixing matrix must have shape ({n_channels}, {n_channels}), "
            f"got {W.shape}"
        )
    if not np.all(np.isfinite(W)):
        raise InputValueError("Initial demixing matrix contains NaN or infinite values")
    return W
