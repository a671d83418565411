# Natural Gradient ICA package
from .errors import (
    ICAError,
    InputShapeError,
    InputValueError,
    ConfigurationError,
    UnsupportedScoreType,
    BackProjectionChannelOutOfRange,
    DivergenceError,
)
from .score import ScoreFunction, score_function, log_density, compute_cost
from .config import ICAConfig, validate_observed, init_demixing_matrix
from .projection_back import projection_matrix, back_project, normalize, resolve_scale
from .natural_gradient import (
    ICAResult,
    NaturalGradientICA,
    natural_gradient_ica,
    natural_gradient_updates,
)
from .synthetic import DEFAULT_MIXING_MATRIX, sample_sources, mix_sources, random_mixing_matrix
from .scoring import (
    match_sources,
    off_diagonal_ratio,
    amari_index,
    compute_separation_score,
)
from .visualize import (
    plot_cost_trace,
    plot_cost_comparison,
    plot_separation_comparison,
)
