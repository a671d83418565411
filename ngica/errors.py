"""
Error taxonomy for natural gradient ICA.

Every failure is terminal for the current call: nothing is retried or
recovered internally. All errors derive from ICAError, and also from the
builtin exception that best describes them so callers can catch either.
"""

from typing import Optional


class ICAError(Exception):
    """Base class for all separation errors."""


class InputShapeError(ICAError, ValueError):
    """Observed signal or initial demixing matrix has an unusable shape."""


class InputValueError(ICAError, ValueError):
    """Observed signal or initial demixing matrix has unusable values."""


class ConfigurationError(ICAError, ValueError):
    """Step size, iteration count or a config key is invalid."""


class UnsupportedScoreType(ICAError, ValueError):
    """Score function kind is not one of laplace, sech, cosh."""


class BackProjectionChannelOutOfRange(ICAError, ValueError):
    """Reference channel for back-projection exceeds the channel count."""

    def __init__(self, ref_channel: int, n_channels: int):
        self.ref_channel = ref_channel
        self.n_channels = n_channels
        super().__init__(
            f"ref_channel={ref_channel} is out of range: use 0 for normalization "
            f"or a channel in [1, {n_channels}]"
        )


class DivergenceError(ICAError, RuntimeError):
    """
    The estimate became non-finite or degenerate.

    Raised with the step size in use so callers can retry with a smaller one.
    """

    def __init__(self, message: str, step_size: Optional[float] = None,
                 iteration: Optional[int] = None):
        self.step_size = step_size
        self.iteration = iteration
        if step_size is not None:
            message = f"{message} (step_size={step_size}; try a smaller step size)"
        super().__init__(message)
