"""
Benchmarking harness for comparing maze strategies.

Plays many seeded games per strategy, then prints a comparison table of the
final scores. Action strategies play the single-character maze turn by turn;
local strategies optimise the placement of the auto-move maze.
"""

import os
import json
import time
import argparse
import numpy as np
from tqdm import tqdm

from maze_search.maze_state import (
    ACTION_NAMES, DEFAULT_AUTO_MOVE_CONFIG, DEFAULT_MAZE_CONFIG, MazeConfig, MazeState,
)
from maze_search.auto_move_state import AutoMoveMazeState
from maze_search.action_search import (
    random_action, greedy_action, beam_search_action,
    beam_search_with_time_threshold_action, chokudai_search_action,
    chokudai_search_with_time_threshold_action,
)
from maze_search.local_search import random_placement, hill_climb, simulated_annealing


ACTION_STRATEGIES = ('random', 'greedy', 'beam', 'beam_time', 'chokudai', 'chokudai_time')
LOCAL_STRATEGIES = ('random_placement', 'hill_climb', 'simulated_annealing')


def make_rng(seed=None):
    """Explicit random source threaded through every randomized call."""
    return np.random.RandomState(seed)


def write_jsonl_line(fh, record):
    """Write a single JSON record to a .jsonl file handle and flush."""
    fh.write(json.dumps(record) + '\n')
    fh.flush()


# ---------------------------------------------------------------------------
# Strategy factories
# ---------------------------------------------------------------------------

def make_action_strategy(name, params=None):
    """
    Build a callable (state, rng) -> action for an action strategy.

    Parameters:
        name: one of ACTION_STRATEGIES
        params: dict with beam_width, beam_depth, beam_number and
                time_threshold_ms as needed by the strategy
    """
    params = params or {}
    if name == 'random':
        return lambda state, rng: random_action(state, rng)
    if name == 'greedy':
        return lambda state, rng: greedy_action(state)
    if name == 'beam':
        return lambda state, rng: beam_search_action(
            state, params.get('beam_width', 2), params.get('beam_depth', state.config.end_turn),
        )
    if name == 'beam_time':
        return lambda state, rng: beam_search_with_time_threshold_action(
            state, params.get('beam_width', 5), params.get('time_threshold_ms', 10),
        )
    if name == 'chokudai':
        return lambda state, rng: chokudai_search_action(
            state, params.get('beam_width', 1), params.get('beam_depth', state.config.end_turn),
            params.get('beam_number', 2),
        )
    if name == 'chokudai_time':
        return lambda state, rng: chokudai_search_with_time_threshold_action(
            state, params.get('beam_width', 5), params.get('beam_depth', state.config.end_turn),
            params.get('time_threshold_ms', 1),
        )
    raise ValueError(f"Unknown action strategy: {name}")


def make_local_strategy(name, params=None):
    """
    Build a callable (state, rng) -> placed state for a local strategy.

    Parameters:
        name: one of LOCAL_STRATEGIES
        params: dict with iterations, start_temp and end_temp as needed
    """
    params = params or {}
    if name == 'random_placement':
        return lambda state, rng: random_placement(state, rng)
    if name == 'hill_climb':
        return lambda state, rng: hill_climb(state, params.get('iterations', 10000), rng)
    if name == 'simulated_annealing':
        return lambda state, rng: simulated_annealing(
            state, params.get('iterations', 10000),
            params.get('start_temp', 500.0), params.get('end_temp', 10.0), rng,
        )
    raise ValueError(f"Unknown local strategy: {name}")


# ---------------------------------------------------------------------------
# Episode driver
# ---------------------------------------------------------------------------

def play_episode(state, choose_action, rng=None, verbose=False):
    """
    Play state to the end of the episode, one chosen action per turn.

    state is advanced in place and returned. An action of None means the
    search found nothing to play, which is unrecoverable.
    """
    if verbose:
        print(state)
    while not state.is_done():
        action = choose_action(state, rng)
        if action is None:
            raise RuntimeError(f"strategy returned no action at turn {state.turn}")
        state.advance(action)
        if verbose:
            print(f"action:\t{ACTION_NAMES[action]}")
            print(state)
    return state


def run_action_games(name, choose_action, game_number=100, config=DEFAULT_MAZE_CONFIG,
                     seed=0, show_progress=True, progress_fh=None):
    """Play game_number seeded games with an action strategy."""
    results = []
    for game in tqdm(range(game_number), desc=name, disable=not show_progress):
        rng = make_rng(seed + game)
        state = MazeState.random(rng, config)
        t0 = time.time()
        play_episode(state, choose_action, rng)
        elapsed = time.time() - t0
        result = {'game': game, 'score': state.game_score, 'time': elapsed}
        results.append(result)
        if progress_fh:
            write_jsonl_line(progress_fh, result)
    return results


def run_local_games(name, optimize, game_number=100, config=DEFAULT_AUTO_MOVE_CONFIG,
                    seed=0, show_progress=True, progress_fh=None):
    """Optimise game_number seeded auto-move mazes with a local strategy."""
    results = []
    for game in tqdm(range(game_number), desc=name, disable=not show_progress):
        rng = make_rng(seed + game)
        state = AutoMoveMazeState.random(rng, config)
        t0 = time.time()
        placed = optimize(state, rng)
        score = placed.rollout()
        elapsed = time.time() - t0
        result = {'game': game, 'score': score, 'time': elapsed}
        results.append(result)
        if progress_fh:
            write_jsonl_line(progress_fh, result)
    return results


# ---------------------------------------------------------------------------
# Metrics & display
# ---------------------------------------------------------------------------

def compute_metrics(results):
    """Compute aggregate metrics from per-game results."""
    scores = [r['score'] for r in results]
    times = [r['time'] for r in results]
    return {
        'games': len(results),
        'mean_score': float(np.mean(scores)) if scores else 0.0,
        'median_score': float(np.median(scores)) if scores else 0.0,
        'std_score': float(np.std(scores)) if scores else 0.0,
        'min_score': int(min(scores)) if scores else 0,
        'max_score': int(max(scores)) if scores else 0,
        'avg_time': float(np.mean(times)) if times else 0.0,
        'total_time': float(sum(times)),
    }


def print_table(all_metrics):
    """Print formatted comparison table."""
    print(f"\n{'='*85}")
    print(f"{'Strategy':<30} | {'Games':>6} | {'Mean':>8} | {'Median':>8} | "
          f"{'Max':>6} | {'Time':>10}")
    print(f"{'-'*30}-+{'-'*8}+{'-'*10}+{'-'*10}+{'-'*8}+{'-'*12}")

    for name, metrics in all_metrics.items():
        print(f"{name:<30} | {metrics['games']:>6} | "
              f"{metrics['mean_score']:>8.2f} | "
              f"{metrics['median_score']:>8.1f} | "
              f"{metrics['max_score']:>6} | "
              f"{metrics['total_time']:>9.1f}s")

    print(f"{'='*85}")


def play_game(strategy='chokudai_time', params=None, config=None, seed=None):
    """Play and print a single game, for watching a strategy move."""
    rng = make_rng(seed)
    if strategy in LOCAL_STRATEGIES:
        state = AutoMoveMazeState.random(rng, config or DEFAULT_AUTO_MOVE_CONFIG)
        placed = make_local_strategy(strategy, params)(state, rng)
        print(placed)
        score = placed.rollout(render=True)
        print(f"Score of {strategy}: {score}")
        return score
    state = MazeState.random(rng, config or DEFAULT_MAZE_CONFIG)
    play_episode(state, make_action_strategy(strategy, params), rng, verbose=True)
    print(f"Score of {strategy}: {state.game_score}")
    return state.game_score


def main():
    parser = argparse.ArgumentParser(description='Benchmark maze search strategies')
    parser.add_argument('--strategies', type=str,
                        default='random,greedy,beam,beam_time,chokudai,chokudai_time',
                        help='Comma-separated strategy names')
    parser.add_argument('--games', type=int, default=100)
    parser.add_argument('--seed', type=int, default=0)
    parser.add_argument('--height', type=int, default=None)
    parser.add_argument('--width', type=int, default=None)
    parser.add_argument('--end-turn', type=int, default=None)
    parser.add_argument('--characters', type=int, default=None,
                        help='Character count for local strategies')
    parser.add_argument('--beam-width', type=int, default=None)
    parser.add_argument('--beam-depth', type=int, default=None)
    parser.add_argument('--beam-number', type=int, default=None)
    parser.add_argument('--time-threshold-ms', type=float, default=None)
    parser.add_argument('--iterations', type=int, default=None)
    parser.add_argument('--start-temp', type=float, default=None)
    parser.add_argument('--end-temp', type=float, default=None)
    parser.add_argument('--output-dir', type=str, default=None,
                        help='Write benchmark_results.json here')
    args = parser.parse_args()

    params = {
        'beam_width': args.beam_width,
        'beam_depth': args.beam_depth,
        'beam_number': args.beam_number,
        'time_threshold_ms': args.time_threshold_ms,
        'iterations': args.iterations,
        'start_temp': args.start_temp,
        'end_temp': args.end_temp,
    }
    params = {k: v for k, v in params.items() if v is not None}

    def _config(defaults):
        return MazeConfig(
            height=args.height or defaults.height,
            width=args.width or defaults.width,
            end_turn=args.end_turn or defaults.end_turn,
            character_n=args.characters or defaults.character_n,
        )

    maze_config = _config(DEFAULT_MAZE_CONFIG)
    auto_move_config = _config(DEFAULT_AUTO_MOVE_CONFIG)

    strategies = [s.strip() for s in args.strategies.split(',') if s.strip()]
    all_metrics = {}
    for name in strategies:
        print(f"\n--- Running: {name} ---")
        if name in LOCAL_STRATEGIES:
            results = run_local_games(
                name, make_local_strategy(name, params), args.games, auto_move_config, args.seed,
            )
        else:
            results = run_action_games(
                name, make_action_strategy(name, params), args.games, maze_config, args.seed,
            )
        metrics = compute_metrics(results)
        all_metrics[name] = metrics
        print(f"  Mean score: {metrics['mean_score']:.2f}")

    print_table(all_metrics)

    if args.output_dir:
        os.makedirs(args.output_dir, exist_ok=True)
        output_path = os.path.join(args.output_dir, 'benchmark_results.json')
        with open(output_path, 'w') as f:
            json.dump({'metrics': all_metrics, 'config': {
                'games': args.games, 'seed': args.seed, 'params': params,
            }}, f, indent=2)
        print(f"\nResults saved to {output_path}")


if __name__ == '__main__':
    main()
