#!/usr/bin/env python
"""
Run an experiment with MLflow tracking.

Usage:
    python scripts/run_experiment.py --experiment synthetic_mixture
    python scripts/run_experiment.py --experiment synthetic_mixture --config configs/custom.yaml
    python scripts/run_experiment.py --experiment step_size_sweep --tags owner=me

This script:
1. Loads the experiment module from experiments/<name>/train.py
2. Merges configs/default.yaml with experiments/<name>/config.yaml
3. Runs the experiment with MLflow tracking and logs the summary metrics
"""

import argparse
import importlib.util
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tracking import ExperimentTracker, load_config, merge_configs


def load_experiment_module(experiment_name: str):
    """Dynamically load an experiment module."""
    experiment_path = project_root / "experiments" / experiment_name / "train.py"

    if not experiment_path.exists():
        raise FileNotFoundError(f"Experiment not found: {experiment_path}")

    spec = importlib.util.spec_from_file_location("experiment", experiment_path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def parse_tags(tags):
    """Parse key=value tag strings into a dict (malformed entries are skipped)."""
    parsed = {}
    for tag in tags:
        if "=" in tag:
            key, value = tag.split("=", 1)
            parsed[key] = value
    return parsed


def main():
    parser = argparse.ArgumentParser(description="Run an experiment with MLflow tracking")
    parser.add_argument("--experiment", "-e", required=True, help="Experiment name (folder in experiments/)")
    parser.add_argument("--config", "-c", default="configs/default.yaml", help="Config file path")
    parser.add_argument("--run-name", "-r", default=None, help="Custom run name")
    parser.add_argument("--tags", "-t", nargs="*", default=[], help="Tags in key=value format")
    args = parser.parse_args()

    tags = parse_tags(args.tags)

    # Load configs
    base_config = load_config(args.config)
    experiment_config_path = project_root / "experiments" / args.experiment / "config.yaml"

    if experiment_config_path.exists():
        experiment_config = load_config(str(experiment_config_path))
        config = merge_configs(base_config, experiment_config)
    else:
        config = base_config

    # Load experiment module
    print(f"Loading experiment: {args.experiment}")
    experiment = load_experiment_module(args.experiment)

    # Run with tracking
    print("Starting MLflow run...")
    with ExperimentTracker(
        experiment_name=args.experiment,
        run_name=args.run_name,
        config_path=args.config,
        tags=tags,
    ) as tracker:
        tracker.log_params(config)

        results = experiment.run(config, tracker)

        if results:
            tracker.log_separation_score(results)
            print(f"\n{'='*50}")
            for key, value in results.items():
                print(f"  {key:<22s} {value:.4f}")
            print(f"{'='*50}")

        print(f"\nRun completed! Run ID: {tracker.run_id}")
        print("View results: mlflow ui --port 5000")

    return results


if __name__ == "__main__":
    main()
