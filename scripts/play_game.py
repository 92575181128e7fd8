#!/usr/bin/env python3
"""
Watch a single maze game played by one strategy.

Usage:
    python scripts/play_game.py                               # chokudai search, 10ms per turn
    python scripts/play_game.py --strategy greedy --seed 3
    python scripts/play_game.py --strategy hill_climb --iterations 1000
"""

import os
import sys
import argparse

# Ensure project root is on path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from maze_search.benchmark import ACTION_STRATEGIES, LOCAL_STRATEGIES, play_game


def main():
    parser = argparse.ArgumentParser(description='Play and print one maze game')
    parser.add_argument('--strategy', type=str, default='chokudai_time',
                        choices=list(ACTION_STRATEGIES) + list(LOCAL_STRATEGIES))
    parser.add_argument('--seed', type=int, default=None)
    parser.add_argument('--beam-width', type=int, default=5)
    parser.add_argument('--time-threshold-ms', type=float, default=10)
    parser.add_argument('--iterations', type=int, default=10000)
    args = parser.parse_args()

    params = {
        'beam_width': args.beam_width,
        'time_threshold_ms': args.time_threshold_ms,
        'iterations': args.iterations,
    }
    play_game(args.strategy, params, seed=args.seed)


if __name__ == '__main__':
    main()
