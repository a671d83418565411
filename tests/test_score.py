import numpy as np
import pytest

from ngica.errors import UnsupportedScoreType
from ngica.score import ScoreFunction, compute_cost, log_density, score_function


@pytest.mark.parametrize("kind", list(ScoreFunction))
@pytest.mark.parametrize("shape", [(3, 50), (2, 1), (4,), (2, 3, 5)])
def test_score_shape_matches_input(kind, shape):
    Y = np.random.default_rng(0).standard_normal(shape)
    assert score_function(Y, kind).shape == shape


def test_laplace_score_is_sign_with_zero_mapped_to_zero():
    Y = np.array([[-2.0, 0.0, 3.5], [0.0, -0.1, 1e-300]])
    np.testing.assert_array_equal(
        score_function(Y, 'laplace'),
        [[-1.0, 0.0, 1.0], [0.0, -1.0, 1.0]],
    )


def test_sech_and_cosh_scores():
    Y = np.linspace(-4, 4, 9)
    np.testing.assert_allclose(score_function(Y, 'sech'), np.tanh(Y))
    np.testing.assert_allclose(score_function(Y, 'cosh'), Y - np.tanh(Y))


@pytest.mark.parametrize("name, expected", [
    ('laplace', ScoreFunction.LAPLACE),
    ('LAP', ScoreFunction.LAPLACE),
    ('Sech', ScoreFunction.SECH),
    ('SEC', ScoreFunction.SECH),
    ('cosh', ScoreFunction.COSH),
    ('COS', ScoreFunction.COSH),
    (ScoreFunction.COSH, ScoreFunction.COSH),
])
def test_parse_accepts_names_and_aliases(name, expected):
    assert ScoreFunction.parse(name) is expected


@pytest.mark.parametrize("kind", ['gauss', '', None, 3])
def test_unsupported_score_type(kind):
    with pytest.raises(UnsupportedScoreType):
        score_function(np.zeros((2, 2)), kind)


def test_log_density_matches_closed_forms():
    Y = np.linspace(-3, 3, 13)
    np.testing.assert_allclose(np.exp(log_density(Y, 'laplace')), 0.5 * np.exp(-np.abs(Y)))
    np.testing.assert_allclose(np.exp(log_density(Y, 'sech')), 1 / np.cosh(Y) / np.pi)
    np.testing.assert_allclose(np.exp(log_density(Y, 'cosh')), np.exp(-Y ** 2 / 2) * np.cosh(Y))


@pytest.mark.parametrize("kind", list(ScoreFunction))
def test_log_density_is_finite_for_extreme_values(kind):
    Y = np.array([-1e3, -800.0, 0.0, 800.0, 1e3])
    assert np.all(np.isfinite(log_density(Y, kind)))


def test_compute_cost_matches_definition():
    rng = np.random.default_rng(3)
    W = rng.standard_normal((3, 3))
    X = rng.standard_normal((3, 500))
    Y = W @ X
    expected = -np.log(abs(np.linalg.det(W))) - np.sum(np.log(0.5 * np.exp(-np.abs(Y)))) / 500
    assert compute_cost(W, Y, 500, 'laplace') == pytest.approx(expected)


def test_compute_cost_singular_matrix_is_inf():
    W = np.array([[1.0, 2.0], [2.0, 4.0]])
    Y = W @ np.ones((2, 10))
    with pytest.warns(RuntimeWarning):
        assert compute_cost(W, Y, 10, 'sech') == float('inf')
