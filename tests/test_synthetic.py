import numpy as np
import pytest

from ngica.synthetic import (
    DEFAULT_MIXING_MATRIX,
    SOURCE_TYPES,
    mix_sources,
    random_mixing_matrix,
    sample_sources,
)


@pytest.mark.parametrize("source_type", SOURCE_TYPES)
def test_sample_sources_shape_and_finiteness(source_type):
    S = sample_sources(3, 1000, source_type, np.random.default_rng(0))
    assert S.shape == (3, 1000)
    assert np.all(np.isfinite(S))


def test_source_kurtosis_signs():
    rng = np.random.default_rng(0)

    def excess_kurtosis(x):
        x = x - x.mean()
        return np.mean(x ** 4) / np.mean(x ** 2) ** 2 - 3

    assert excess_kurtosis(sample_sources(1, 200_000, 'laplace', rng)[0]) > 2
    assert excess_kurtosis(sample_sources(1, 200_000, 'sech', rng)[0]) > 1
    assert excess_kurtosis(sample_sources(1, 200_000, 'cosh', rng)[0]) < -0.3
    assert excess_kurtosis(sample_sources(1, 200_000, 'uniform', rng)[0]) < -1


def test_sech_sources_have_expected_variance():
    S = sample_sources(1, 200_000, 'sech', np.random.default_rng(1))
    assert np.var(S) == pytest.approx(np.pi ** 2 / 4, rel=0.05)


def test_unknown_source_type():
    with pytest.raises(ValueError):
        sample_sources(2, 10, 'cauchy')


def test_mix_sources():
    S = np.arange(6, dtype=float).reshape(3, 2)
    np.testing.assert_allclose(mix_sources(S, DEFAULT_MIXING_MATRIX), DEFAULT_MIXING_MATRIX @ S)
    with pytest.raises(ValueError):
        mix_sources(S, np.eye(2))


def test_random_mixing_matrix_is_well_conditioned():
    A = random_mixing_matrix(4, np.random.default_rng(3), max_condition=20.0)
    assert A.shape == (4, 4)
    assert np.linalg.cond(A) <= 20.0
