"""
Local search over character placements of the auto-move maze.

Implements:
  - random_placement: score of a single random placement (baseline)
  - hill_climb: accept a perturbation only when it strictly improves
  - simulated_annealing: Metropolis acceptance under a linear temperature schedule

A placement is scored by AutoMoveMazeState.rollout(), which plays the
fully determined remainder of the episode.
"""

import math


def random_placement(state, rng):
    """Return a copy of state with every character placed at random."""
    placed = state.copy()
    placed.initial_placement(rng)
    return placed


def hill_climb(state, number, rng, trace=None, verbose=False):
    """
    Hill climbing from a random placement.

    Parameters:
        state: AutoMoveMazeState (not modified)
        number: number of perturbations to try
        rng: numpy RandomState
        trace: optional list, receives the accepted score after each iteration
        verbose: print every improvement

    Returns:
        the last accepted placement. Its score never decreases over the run.
    """
    now_state = random_placement(state, rng)
    best_score = now_state.rollout()
    for i in range(number):
        next_state = now_state.copy()
        next_state.perturb(rng)
        next_score = next_state.rollout()
        if best_score < next_score:
            best_score = next_score
            now_state = next_state
            if verbose:
                print(f"  Hill climb iter {i}: score={best_score}")
        if trace is not None:
            trace.append(best_score)
    now_state.evaluated_score = best_score
    return now_state


def temperature_at(i, number, start_temp, end_temp):
    """Linear interpolation from start_temp (i=0) towards end_temp (i=number)."""
    return start_temp + (end_temp - start_temp) * (i / number)


def acceptance_probability(next_score, now_score, temperature):
    """
    Metropolis acceptance probability exp((next - now) / T).

    Improving candidates are always accepted. temperature must be > 0.
    """
    if next_score > now_score:
        return 1.0
    return math.exp((next_score - now_score) / temperature)


def simulated_annealing(state, number, start_temp, end_temp, rng, trace=None,
                        verbose=False):
    """
    Simulated annealing from a random placement.

    Parameters:
        state: AutoMoveMazeState (not modified)
        number: number of perturbations to try
        start_temp, end_temp: temperature schedule endpoints, both > 0
        rng: numpy RandomState
        trace: optional list, receives one dict per iteration with keys
            'temperature', 'now_score', 'next_score', 'probability', 'accepted'
        verbose: print every new best

    Returns:
        the best placement seen, which may differ from where the walk ended.
    """
    now_state = random_placement(state, rng)
    best_score = now_state.rollout()
    now_score = best_score
    best_state = now_state
    for i in range(number):
        next_state = now_state.copy()
        next_state.perturb(rng)
        next_score = next_state.rollout()
        temperature = temperature_at(i, number, start_temp, end_temp)
        probability = acceptance_probability(next_score, now_score, temperature)
        accepted = next_score > now_score or probability > rng.random_sample()
        if trace is not None:
            trace.append({
                'temperature': temperature,
                'now_score': now_score,
                'next_score': next_score,
                'probability': probability,
                'accepted': accepted,
            })
        if accepted:
            now_score = next_score
            now_state = next_state
        if best_score < next_score:
            best_score = next_score
            best_state = next_state
            if verbose:
                print(f"  Annealing iter {i}: best={best_score}, T={temperature:.2f}")
    best_state.evaluated_score = best_score
    return best_state
