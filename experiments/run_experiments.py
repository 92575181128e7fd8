#!/usr/bin/env python3
"""
Maze Search Experiment Runner
=============================
Runs every enabled strategy over the same seeded games and compares scores.
Reads config from experiments/config.yaml. Saves results incrementally.

Time-bounded strategies are run once per entry of their time_thresholds_ms
list, so the same games are replayed with growing budgets.

Usage:
    python experiments/run_experiments.py                  # full run from config
    python experiments/run_experiments.py --games 10       # quick test override
    python experiments/run_experiments.py --config my.yaml
    python experiments/run_experiments.py --only greedy,beam

Results saved to: experiments/results/<timestamp>/
"""

import os
import sys
import copy
import json
import time
import argparse
import datetime

# Ensure project root is on path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

import yaml

from maze_search.maze_state import MazeConfig
from maze_search.benchmark import (
    ACTION_STRATEGIES, LOCAL_STRATEGIES, compute_metrics, make_action_strategy,
    make_local_strategy, print_table, run_action_games, run_local_games,
)


# ---------------------------------------------------------------------------
# Defaults (used if config.yaml missing or incomplete)
# ---------------------------------------------------------------------------
DEFAULTS = {
    'output_dir': 'experiments/results',
    'save_incremental': True,
    'games': 100,
    'seed': 0,
    'maze': {'height': 30, 'width': 30, 'end_turn': 100},
    'auto_move_maze': {'height': 5, 'width': 5, 'end_turn': 5, 'character_n': 3},
    'strategies': {
        'random': {'enabled': True},
        'greedy': {'enabled': True},
        'beam': {'enabled': True, 'beam_width': 2, 'beam_depth': 100},
        'beam_time': {'enabled': True, 'beam_width': 5, 'time_thresholds_ms': [1, 10]},
        'chokudai': {'enabled': True, 'beam_width': 1, 'beam_depth': 100, 'beam_number': 2},
        'chokudai_time': {'enabled': True, 'beam_width': 5, 'beam_depth': 100,
                          'time_thresholds_ms': [1, 10]},
        'random_placement': {'enabled': True},
        'hill_climb': {'enabled': True, 'iterations': 10000},
        'simulated_annealing': {'enabled': True, 'iterations': 10000,
                                'start_temp': 500.0, 'end_temp': 10.0},
    },
}


def with_defaults(value, default):
    """
    Fill the keys missing from a config section with their defaults.

    A section left empty in YAML loads as None and takes the defaults whole.
    Non-dict defaults are replaced by value as given.
    """
    if value is None:
        return copy.deepcopy(default)
    if isinstance(default, dict):
        merged = copy.deepcopy(default)
        merged.update(value)
        return merged
    return value


def load_config(config_path):
    """Load YAML config, falling back to defaults for missing or null sections."""
    if os.path.exists(config_path):
        with open(config_path, 'r') as f:
            raw = yaml.safe_load(f) or {}
    else:
        print(f"[WARN] Config not found at {config_path}, using defaults.")
        raw = {}

    strategies = raw.get('strategies') or {}
    unknown = set(strategies) - set(ACTION_STRATEGIES) - set(LOCAL_STRATEGIES)
    if unknown:
        raise ValueError(f"Unknown strategies in config: {sorted(unknown)}")

    cfg = dict(raw)
    for key, default in DEFAULTS.items():
        cfg[key] = with_defaults(raw.get(key), default)
    cfg['strategies'] = {
        name: with_defaults(strategies.get(name), strategy_defaults)
        for name, strategy_defaults in DEFAULTS['strategies'].items()
    }
    return cfg


def fmt_time(seconds):
    """Format seconds as human-readable string."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        return f"{seconds/60:.1f}m"
    else:
        return f"{seconds/3600:.1f}h"


def expand_runs(cfg):
    """
    Turn the strategies section into a list of concrete runs.

    Returns a list of (run_key, display_name, strategy, params) in config
    order. Time-bounded strategies yield one run per threshold.
    """
    runs = []
    for name, strategy_cfg in cfg['strategies'].items():
        if not strategy_cfg.get('enabled', False):
            continue
        params = {k: v for k, v in strategy_cfg.items()
                  if k not in ('enabled', 'time_thresholds_ms')}
        if 'time_thresholds_ms' in strategy_cfg:
            for threshold in strategy_cfg['time_thresholds_ms']:
                run_params = dict(params, time_threshold_ms=threshold)
                runs.append((f'{name}_{threshold}ms', f'{name} ({threshold}ms)',
                             name, run_params))
        else:
            label = ', '.join(f'{k}={v}' for k, v in params.items())
            display = f'{name} ({label})' if label else name
            runs.append((name, display, name, params))
    return runs


# ---------------------------------------------------------------------------
# Save
# ---------------------------------------------------------------------------

def save_results(output_dir, all_metrics, all_details, config):
    """Save metrics and per-game details."""
    os.makedirs(output_dir, exist_ok=True)

    summary = {
        'timestamp': datetime.datetime.now().isoformat(),
        'config': {k: v for k, v in config.items() if k != 'strategies'},
        'strategies_config': config['strategies'],
        'metrics': all_metrics,
    }
    summary_path = os.path.join(output_dir, 'results.json')
    with open(summary_path, 'w') as f:
        json.dump(summary, f, indent=2)

    for run_key, details in all_details.items():
        detail_path = os.path.join(output_dir, f'{run_key}_details.json')
        with open(detail_path, 'w') as f:
            json.dump(details, f, indent=2)

    return summary_path


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main():
    parser = argparse.ArgumentParser(
        description='Maze Search Experiment Runner: compare strategies on seeded games'
    )
    parser.add_argument('--config', type=str,
                        default=os.path.join(PROJECT_ROOT, 'experiments', 'config.yaml'),
                        help='Path to config YAML')
    parser.add_argument('--games', type=int, default=None,
                        help='Override number of games for ALL strategies (quick test)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Override base seed')
    parser.add_argument('--only', type=str, default=None,
                        help='Comma-separated strategies to run (others disabled)')
    parser.add_argument('--output-dir', type=str, default=None,
                        help='Write results here instead of a timestamped directory')
    args = parser.parse_args()

    cfg = load_config(args.config)

    # Apply CLI overrides
    if args.games is not None:
        print(f"[CLI override] games = {args.games}")
        cfg['games'] = args.games
    if args.seed is not None:
        print(f"[CLI override] seed = {args.seed}")
        cfg['seed'] = args.seed
    if args.only is not None:
        only = {s.strip() for s in args.only.split(',') if s.strip()}
        print(f"[CLI override] only = {sorted(only)}")
        for name, strategy_cfg in cfg['strategies'].items():
            strategy_cfg['enabled'] = name in only

    timestamp = datetime.datetime.now().strftime('%Y-%m-%d_%H-%M-%S')
    if args.output_dir:
        output_dir = args.output_dir
    else:
        output_dir = os.path.join(PROJECT_ROOT, cfg['output_dir'], timestamp)
    os.makedirs(output_dir, exist_ok=True)

    with open(os.path.join(output_dir, 'config_used.yaml'), 'w') as f:
        yaml.dump(cfg, f, default_flow_style=False)

    maze_config = MazeConfig(**cfg['maze'])
    auto_move_config = MazeConfig(**cfg['auto_move_maze'])
    runs = expand_runs(cfg)

    print()
    print("=" * 60)
    print("  Maze Search Experiment Runner")
    print("=" * 60)
    print(f"  Config:     {args.config}")
    print(f"  Output:     {output_dir}")
    print(f"  Games:      {cfg['games']}")
    print(f"  Seed:       {cfg['seed']}")
    print(f"  Runs:       {len(runs)}")
    print(f"  Started:    {timestamp}")
    print("=" * 60)

    all_metrics = {}
    all_details = {}
    experiment_start = time.time()

    for i, (run_key, display_name, name, params) in enumerate(runs):
        print(f"\n{'='*60}")
        print(f"  [{i+1}/{len(runs)}] {display_name}")
        print(f"{'='*60}")
        progress_path = os.path.join(output_dir, f'{run_key}_progress.jsonl')
        with open(progress_path, 'w') as pfh:
            if name in LOCAL_STRATEGIES:
                results = run_local_games(
                    display_name, make_local_strategy(name, params), cfg['games'],
                    auto_move_config, cfg['seed'], progress_fh=pfh,
                )
            else:
                results = run_action_games(
                    display_name, make_action_strategy(name, params), cfg['games'],
                    maze_config, cfg['seed'], progress_fh=pfh,
                )
        metrics = compute_metrics(results)
        all_metrics[display_name] = metrics
        all_details[run_key] = results
        print(f"  => Mean score: {metrics['mean_score']:.2f} "
              f"in {fmt_time(metrics['total_time'])}")
        if cfg['save_incremental']:
            save_results(output_dir, all_metrics, all_details, cfg)
            print("  [saved incrementally]")

    total_time = time.time() - experiment_start
    print(f"\n\nAll experiments completed in {fmt_time(total_time)}.")

    print_table(all_metrics)

    save_results(output_dir, all_metrics, all_details, cfg)
    print(f"\nResults saved to: {output_dir}/")
    print("  results.json        - summary metrics")
    print("  *_details.json      - per-game results")
    print("  *_progress.jsonl    - per-game streaming progress")
    print("  config_used.yaml    - config snapshot")


if __name__ == '__main__':
    main()
