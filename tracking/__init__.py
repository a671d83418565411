"""
MLflow tracking utilities for natural gradient ICA experiments.

Usage:
    from tracking import ExperimentTracker

    with ExperimentTracker("synthetic_mixture") as tracker:
        tracker.log_params({"ica": {"step_size": 0.1, "n_iter": 100}})
        tracker.log_cost_trace(cost)
        tracker.log_separation_score(metrics)
"""

import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import mlflow
import numpy as np
import yaml


DEFAULT_CONFIG_PATH = "configs/default.yaml"
DEFAULT_EXPERIMENT = "natural-gradient-ica"


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """Load configuration from YAML file."""
    with open(config_path, 'r') as f:
        return yaml.safe_load(f) or {}


def merge_configs(base: Dict, override: Dict) -> Dict:
    """Recursively merge override config into base config."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value
    return result


def flatten_dict(d: Dict, prefix: str = "") -> Dict[str, Any]:
    """Flatten nested dictionary with dot notation."""
    items = {}
    for k, v in d.items():
        key = f"{prefix}.{k}" if prefix else k
        if isinstance(v, dict):
            items.update(flatten_dict(v, key))
        else:
            items[key] = v
    return items


class ExperimentTracker:
    """
    Context manager for MLflow experiment tracking.

    Example:
        with ExperimentTracker("step_size_sweep") as tracker:
            tracker.log_params(config)
            # ... run experiment ...
            tracker.log_metric("corr_min", 0.98)
    """

    def __init__(
        self,
        experiment_name: str,
        run_name: Optional[str] = None,
        config_path: str = DEFAULT_CONFIG_PATH,
        tags: Optional[Dict[str, str]] = None,
    ):
        self.experiment_name = experiment_name
        self.run_name = run_name or f"{experiment_name}_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
        self.config = load_config(config_path)
        self.tags = tags or {}
        self.run = None

        # Set up MLflow
        tracking_uri = self.config.get('mlflow', {}).get('tracking_uri', 'sqlite:///mlflow.db')
        mlflow.set_tracking_uri(tracking_uri)

    def __enter__(self):
        """Start MLflow run."""
        mlflow.set_experiment(self.config.get('mlflow', {}).get('experiment_name', DEFAULT_EXPERIMENT))
        self.run = mlflow.start_run(run_name=self.run_name)

        # Log default tags
        mlflow.set_tags({
            "experiment_type": self.experiment_name,
            **self.tags
        })

        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """End MLflow run."""
        if exc_type is not None:
            mlflow.set_tag("status", "failed")
            mlflow.set_tag("error", f"{exc_type.__name__}: {exc_val}")
        else:
            mlflow.set_tag("status", "completed")
        mlflow.end_run()
        return False

    def log_params(self, params: Dict[str, Any], prefix: str = ""):
        """Log parameters (flattens nested dicts)."""
        mlflow.log_params(flatten_dict(params, prefix))

    def log_metric(self, key: str, value: float, step: Optional[int] = None):
        """Log a single metric."""
        mlflow.log_metric(key, value, step=step)

    def log_metrics(self, metrics: Dict[str, float], step: Optional[int] = None):
        """Log multiple metrics."""
        mlflow.log_metrics(metrics, step=step)

    def log_artifact(self, local_path: str, artifact_path: Optional[str] = None):
        """Log a file as an artifact."""
        mlflow.log_artifact(local_path, artifact_path)

    def log_figure(self, figure, filename: str):
        """Log a plotly figure."""
        mlflow.log_figure(figure, filename)

    def log_cost_trace(self, cost: np.ndarray, key: str = "cost"):
        """Log a cost trace as a stepped metric (step 0 = initial cost)."""
        for step, value in enumerate(np.asarray(cost, dtype=float)):
            # MLflow rejects non-finite metric values
            if np.isfinite(value):
                mlflow.log_metric(key, float(value), step=step)

    def log_separation_score(self, metrics: Dict[str, float], prefix: str = ""):
        """Log separation metrics from ngica.scoring.compute_separation_score."""
        self.log_metrics({f"{prefix}{k}": float(v) for k, v in metrics.items() if np.isfinite(v)})

    def log_results(self, results: List[Dict], filename: str = "results.yaml"):
        """Log per-run results as a YAML artifact under results/<filename>."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / filename
            with open(path, 'w') as f:
                yaml.safe_dump(results, f)
            mlflow.log_artifact(str(path), "results")

    @property
    def run_id(self) -> Optional[str]:
        """Get current run ID."""
        return self.run.info.run_id if self.run else None

