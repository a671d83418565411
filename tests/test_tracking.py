from pathlib import Path

import mlflow
import numpy as np
import pytest
import yaml

from ngica import ICAConfig
from tracking import ExperimentTracker, flatten_dict, load_config, merge_configs

PROJECT_ROOT = Path(__file__).parent.parent


def test_default_config_builds_ica_config():
    config = load_config(str(PROJECT_ROOT / "configs" / "default.yaml"))
    ica_config = ICAConfig.from_dict(config["ica"]).validate(3)
    assert ica_config.step_size == 0.1
    assert ica_config.n_iter == 100
    assert ica_config.score == 'laplace'
    assert np.array(config["data"]["mixing_matrix"]).shape == (3, 3)


@pytest.mark.parametrize("experiment", ["synthetic_mixture", "step_size_sweep"])
def test_experiment_configs_merge_into_valid_ica_config(experiment):
    base = load_config(str(PROJECT_ROOT / "configs" / "default.yaml"))
    override = load_config(str(PROJECT_ROOT / "experiments" / experiment / "config.yaml"))
    config = merge_configs(base, override)
    ICAConfig.from_dict(config["ica"]).validate(3)
    assert config["mlflow"] == base["mlflow"]


def test_merge_configs_is_recursive_and_non_destructive():
    base = {'ica': {'step_size': 0.1, 'n_iter': 100}, 'data': {'n_samples': 10}}
    override = {'ica': {'n_iter': 5}, 'extra': 1}
    merged = merge_configs(base, override)
    assert merged == {'ica': {'step_size': 0.1, 'n_iter': 5}, 'data': {'n_samples': 10}, 'extra': 1}
    assert base['ica']['n_iter'] == 100


def test_flatten_dict():
    assert flatten_dict({'a': {'b': 1, 'c': {'d': 2}}, 'e': 3}) == {'a.b': 1, 'a.c.d': 2, 'e': 3}
    assert flatten_dict({'a': 1}, prefix='p') == {'p.a': 1}


@pytest.fixture
def tracker_config(tmp_path, monkeypatch):
    # Default artifact root is ./mlruns relative to the working directory
    monkeypatch.chdir(tmp_path)
    config_path = tmp_path / "config.yaml"
    with open(config_path, 'w') as f:
        yaml.safe_dump({'mlflow': {'tracking_uri': f"sqlite:///{tmp_path / 'mlflow.db'}",
                                   'experiment_name': 'ngica-tests'}}, f)
    return str(config_path)


def test_tracker_logs_cost_trace_and_status(tracker_config):
    with ExperimentTracker("unit", config_path=tracker_config) as tracker:
        tracker.log_params({'ica': {'step_size': 0.1}})
        tracker.log_cost_trace(np.array([3.0, 2.0, np.inf, 1.5]))
        tracker.log_separation_score({'corr_min': 0.95, 'amari_index': np.nan})
        run_id = tracker.run_id

    client = mlflow.tracking.MlflowClient()
    run = client.get_run(run_id)
    assert run.data.tags['status'] == 'completed'
    assert run.data.params['ica.step_size'] == '0.1'
    assert run.data.metrics['corr_min'] == pytest.approx(0.95)
    assert 'amari_index' not in run.data.metrics
    history = client.get_metric_history(run_id, 'cost')
    assert sorted((m.step, m.value) for m in history) == [(0, 3.0), (1, 2.0), (3, 1.5)]


def test_tracker_marks_failed_runs(tracker_config):
    with pytest.raises(RuntimeError):
        with ExperimentTracker("unit", config_path=tracker_config) as tracker:
            run_id = tracker.run_id
            raise RuntimeError("boom")

    run = mlflow.tracking.MlflowClient().get_run(run_id)
    assert run.data.tags['status'] == 'failed'
    assert 'boom' in run.data.tags['error']


def test_tracker_logs_results_under_given_filename(tracker_config, tmp_path):
    summary = [{'score': 'laplace', 'step_size': 0.1, 'diverged': 0}]
    with ExperimentTracker("unit", config_path=tracker_config) as tracker:
        tracker.log_results(summary, "sweep.yaml")
        run_id = tracker.run_id

    client = mlflow.tracking.MlflowClient()
    assert [a.path for a in client.list_artifacts(run_id, "results")] == ["results/sweep.yaml"]
    local = mlflow.artifacts.download_artifacts(
        run_id=run_id, artifact_path="results/sweep.yaml", dst_path=str(tmp_path / "downloads"))
    with open(local) as f:
        assert yaml.safe_load(f) == summary
