import numpy as np

from ngica.visualize import plot_cost_comparison, plot_cost_trace, plot_separation_comparison


def test_plot_cost_trace():
    fig = plot_cost_trace(np.array([3.0, 2.5, 2.2]))
    assert len(fig.data) == 1
    assert list(fig.data[0].x) == [0, 1, 2]


def test_plot_cost_comparison():
    fig = plot_cost_comparison({'mu=0.1': np.ones(5), 'mu=0.5': np.zeros(5)})
    assert [trace.name for trace in fig.data] == ['mu=0.1', 'mu=0.5']


def test_plot_separation_comparison():
    rng = np.random.default_rng(0)
    sources = rng.laplace(size=(3, 500))
    estimated = -2.0 * sources[[1, 2, 0]]
    fig = plot_separation_comparison(sources, estimated, observed=sources, n_points=100)
    # observed, source and estimate per row
    assert len(fig.data) == 9
    np.testing.assert_allclose(fig.data[2].y, sources[0, :100], rtol=1e-6)
