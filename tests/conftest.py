import numpy as np
import pytest

from ngica.synthetic import DEFAULT_MIXING_MATRIX, mix_sources, sample_sources


@pytest.fixture
def laplace_mixture():
    """Three Laplace sources through the demo mixing matrix: (sources, A, observed)."""
    rng = np.random.default_rng(0)
    sources = sample_sources(3, 10_000, 'laplace', rng)
    A = DEFAULT_MIXING_MATRIX.copy()
    return sources, A, mix_sources(sources, A)


@pytest.fixture
def small_mixture():
    """Short two-channel mixture for validation and bookkeeping tests."""
    rng = np.random.default_rng(1)
    sources = sample_sources(2, 2_000, 'laplace', rng)
    A = np.array([[1.0, 0.5], [0.3, 1.0]])
    return sources, A, mix_sources(sources, A)
