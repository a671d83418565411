"""
Blind source separation with ICA optimized by the natural gradient.

Reference: S. Amari, "Natural gradient works efficiently in learning,"
Neural Computation, vol. 10, no. 2, pp. 251-276, 1998.

Update rule, with Y = W X and T samples:

    E = score(Y) Y^T / T
    W <- W - mu * (E - I) W

The natural gradient needs no matrix inversion and is invariant to the
conditioning of W. The loop runs a fixed number of iterations.
"""

from dataclasses import dataclass, replace
from typing import Callable, Iterator, Optional, Tuple, Union

import numpy as np

from .config import (
    DEFAULT_N_ITER,
    DEFAULT_REF_CHANNEL,
    DEFAULT_SCORE,
    DEFAULT_STEP_SIZE,
    ICAConfig,
    init_demixing_matrix,
    validate_observed,
)
from .errors import DivergenceError
from .projection_back import resolve_scale
from .score import ScoreFunction, compute_cost, score_function


# callback(iteration, W, cost); cost is None when tracking is disabled
IterationCallback = Callable[[int, np.ndarray, Optional[float]], None]


@dataclass
class ICAResult:
    """Result of a separation run."""
    estimated: np.ndarray  # Same orientation as the observed signal
    demixing: np.ndarray   # (n_channels, n_channels)
    cost: np.ndarray       # (n_iter + 1,) or empty when tracking is disabled
    score: str
    ref_channel: int
    n_iter: int

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter((self.estimated, self.demixing, self.cost))


def natural_gradient_updates(
    X: np.ndarray,
    W: np.ndarray,
    step_size: float,
    n_iter: int,
    kind: Union[str, ScoreFunction],
    track_cost: bool = True,
    callback: Optional[IterationCallback] = None,
    verbose: bool = False,
    print_every: int = 10,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Run the natural gradient loop on an already normalized signal.

    Args:
        X: Observed signals (n_channels, n_samples)
        W: Initial demixing matrix; updated in place
        step_size: Step size mu
        n_iter: Number of iterations
        kind: Score function kind
        track_cost: Record the cost before the first and after every iteration
        callback: Optional observer called after every iteration
        verbose: Print progress
        print_every: Progress interval in iterations

    Returns:
        Tuple of (Y, W, cost)
    """
    kind = ScoreFunction.parse(kind)
    n_channels, n_samples = X.shape
    I = np.eye(n_channels)

    Y = W @ X
    cost = np.empty(n_iter + 1) if track_cost else np.empty(0)
    if track_cost:
        cost[0] = compute_cost(W, Y, n_samples, kind)

    for it in range(1, n_iter + 1):
        SY = score_function(Y, kind)
        E = (SY @ Y.T) / n_samples
        W -= step_size * (E - I) @ W

        if not np.all(np.isfinite(W)):
            raise DivergenceError(
                f"Demixing matrix became non-finite at iteration {it}",
                step_size=step_size, iteration=it,
            )

        Y = W @ X
        current = None
        if track_cost:
            cost[it] = current = compute_cost(W, Y, n_samples, kind)

        if callback is not None:
            callback(it, W, current)

        if verbose and (it % print_every == 0 or it == n_iter):
            msg = f"  Iteration {it:4d}/{n_iter}"
            if track_cost:
                msg += f"  cost={current:.6f}"
            print(msg)

    return Y, W, cost


def signal_rms(X: np.ndarray) -> float:
    """Global RMS of X, computed relative to its peak so extreme scales stay finite."""
    peak = np.max(np.abs(X))
    return peak * np.sqrt(np.mean((X / peak) ** 2))


class NaturalGradientICA:
    """
    Natural gradient ICA for square instantaneous mixtures.

    The observed signal is scaled to unit RMS before iterating; the demixing
    matrix is mapped back afterwards so that it applies to the signal as
    given. The output scale is then fixed by back-projection or
    normalization.

    Example:
        ica = NaturalGradientICA(ICAConfig(step_size=0.1, n_iter=100, seed=0))
        result = ica.separate(x)
        y, W, cost = result
    """

    def __init__(self, config: Optional[ICAConfig] = None):
        self.config = config or ICAConfig()

    def separate(
        self,
        x: np.ndarray,
        initial_W: Optional[np.ndarray] = None,
        rng: Optional[np.random.Generator] = None,
        callback: Optional[IterationCallback] = None,
    ) -> ICAResult:
        """
        Estimate the sources of an observed mixture.

        Args:
            x: Observed mixture, (n_channels, n_samples) or (n_samples, n_channels)
            initial_W: Optional initial demixing matrix (n_channels, n_channels)
            rng: Random generator for initialization; defaults to one seeded
                with config.seed
            callback: Optional observer called as callback(iteration, W, cost)

        Returns:
            ICAResult with estimates in the orientation of x
        """
        # Validate a copy so the caller's config keeps its values as given
        config = replace(self.config)
        X, transposed = validate_observed(x)
        n_channels, n_samples = X.shape
        config.validate(n_channels)

        if rng is None:
            rng = np.random.default_rng(config.seed)
        W = init_demixing_matrix(n_channels, initial_W, rng)

        if config.verbose:
            print(f"Natural gradient ICA: {n_channels} channels x {n_samples} samples, "
                  f"score={config.score}, step_size={config.step_size}, n_iter={config.n_iter}")

        # Unit-RMS normalization keeps the initial estimate near the score
        # function's fixed-point scale
        rms = signal_rms(X)
        Y, W, cost = natural_gradient_updates(
            X / rms, W,
            step_size=config.step_size,
            n_iter=config.n_iter,
            kind=config.score,
            track_cost=config.track_cost,
            callback=callback,
            verbose=config.verbose,
            print_every=config.print_every,
        )

        if not np.all(np.isfinite(Y)):
            raise DivergenceError("Estimated signal contains non-finite values",
                                  step_size=config.step_size, iteration=config.n_iter)

        # Denormalize: (W / rms) @ X == W @ (X / rms)
        W = W / rms
        Y, W = resolve_scale(X, Y, W, config.ref_channel)

        if not (np.all(np.isfinite(Y)) and np.all(np.isfinite(W))):
            raise DivergenceError("Scale resolution produced non-finite values",
                                  step_size=config.step_size, iteration=config.n_iter)

        if config.verbose:
            mode = 'normalization' if config.ref_channel == 0 else f'back-projection onto channel {config.ref_channel}'
            print(f"Natural gradient ICA done ({mode}).")

        return ICAResult(
            estimated=Y.T if transposed else Y,
            demixing=W,
            cost=cost,
            score=config.score,
            ref_channel=config.ref_channel,
            n_iter=config.n_iter,
        )


def natural_gradient_ica(
    x: np.ndarray,
    step_size: float = DEFAULT_STEP_SIZE,
    n_iter: int = DEFAULT_N_ITER,
    score: Union[str, ScoreFunction] = DEFAULT_SCORE,
    ref_channel: int = DEFAULT_REF_CHANNEL,
    track_cost: bool = True,
    initial_W: Optional[np.ndarray] = None,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
    verbose: bool = False,
    callback: Optional[IterationCallback] = None,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Separate an observed mixture with natural gradient ICA.

    Args:
        x: Observed mixture, (n_channels, n_samples) or (n_samples, n_channels)
        step_size: Step size mu
        n_iter: Number of iterations
        score: 'laplace', 'sech' or 'cosh'
        ref_channel: 0 to normalize, or a 1-based back-projection reference channel
        track_cost: Record the cost function trace
        initial_W: Optional initial demixing matrix
        seed: Seed for the random initial demixing matrix
        rng: Random generator; takes precedence over seed
        verbose: Print progress
        callback: Optional observer called as callback(iteration, W, cost)

    Returns:
        Tuple of (estimated signals, demixing matrix, cost trace)
    """
    score = ScoreFunction.parse(score).value
    config = ICAConfig(
        step_size=step_size,
        n_iter=n_iter,
        score=score,
        ref_channel=ref_channel,
        track_cost=track_cost,
        seed=seed,
        verbose=verbose,
    )
    result = NaturalGradientICA(config).separate(x, initial_W=initial_W, rng=rng, callback=callback)
    return result.estimated, result.demixing, result.cost
