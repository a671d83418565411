#!/usr/bin/env python
"""
Step size sweep for natural gradient ICA.

For every (score function, step size) pair, separates several independently
drawn mixtures and records separation quality and how often the run
diverged. Large step sizes make W blow up; the sweep shows where that starts.

Run with:
    python scripts/run_experiment.py --experiment step_size_sweep
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

import numpy as np
from joblib import Parallel, delayed
from ngica import (
    DivergenceError,
    ICAConfig,
    NaturalGradientICA,
    compute_separation_score,
    mix_sources,
    sample_sources,
)
from ngica.visualize import plot_cost_comparison


def run_single_trial(ica_params: dict, data_config: dict, trial: int) -> dict:
    """Separate one freshly drawn mixture - for parallel execution."""
    A = np.array(data_config["mixing_matrix"], dtype=float)
    rng = np.random.default_rng([data_config.get("seed", 0), trial])

    sources = sample_sources(A.shape[1], data_config["n_samples"], data_config["source_type"], rng)
    observed = mix_sources(sources, A)

    ica_config = ICAConfig.from_dict({**ica_params, "seed": trial})
    try:
        result = NaturalGradientICA(ica_config).separate(observed)
    except DivergenceError as e:
        return {'trial': trial, 'diverged': True, 'iteration': e.iteration}

    metrics = compute_separation_score(result.estimated, sources, result.demixing, A, result.cost)
    return {'trial': trial, 'diverged': False, 'cost': result.cost, **metrics}


def run(config: dict, tracker) -> dict:
    """
    Run the sweep.

    Args:
        config: Configuration dictionary
        tracker: ExperimentTracker instance for logging

    Returns:
        Dictionary with summary metrics of the best setting
    """
    sweep = config["sweep"]
    data_config = config["data"]
    n_trials = sweep.get("n_trials", 5)
    n_jobs = sweep.get("n_jobs", -1)

    best = None
    summary = []
    first_traces = {}

    for score in sweep["scores"]:
        for step_size in sweep["step_sizes"]:
            ica_params = {**config["ica"], "score": score, "step_size": step_size, "verbose": False}

            print(f"  score={score:<8s} step_size={step_size:<6g}", end="", flush=True)
            trials = Parallel(n_jobs=n_jobs)(
                delayed(run_single_trial)(ica_params, data_config, trial)
                for trial in range(n_trials)
            )

            converged = [t for t in trials if not t['diverged']]
            n_diverged = n_trials - len(converged)
            key = f"{score}_mu{step_size:g}"
            tracker.log_metric(f"{key}_diverged", n_diverged)

            row = {'score': score, 'step_size': float(step_size), 'n_diverged': n_diverged}
            if converged:
                amari = [t['amari_index'] for t in converged]
                corr_min = [t['corr_min'] for t in converged]
                row.update({
                    'amari_mean': float(np.mean(amari)),
                    'corr_min_mean': float(np.mean(corr_min)),
                })
                tracker.log_metric(f"{key}_amari_mean", row['amari_mean'])
                tracker.log_metric(f"{key}_corr_min_mean", row['corr_min_mean'])
                if len(converged[0]['cost']) > 0:
                    first_traces[key] = converged[0]['cost']

                if best is None or row['amari_mean'] < best['amari_mean']:
                    best = row

            summary.append(row)
            print(f" -> diverged={n_diverged}/{n_trials}"
                  + (f", amari={row['amari_mean']:.4f}" if converged else ""))

    tracker.log_results(summary, "sweep.yaml")
    if first_traces:
        tracker.log_figure(plot_cost_comparison(first_traces), "cost_comparison.html")

    if best is None:
        return {}

    print(f"\nBest: score={best['score']} step_size={best['step_size']}")
    return {
        "best_step_size": best['step_size'],
        "best_amari_mean": best['amari_mean'],
        "best_corr_min_mean": best['corr_min_mean'],
    }
