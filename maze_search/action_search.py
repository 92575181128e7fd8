"""
Action-based search algorithms for the single-character maze.

Implements:
  - random_action / greedy_action: one-step baselines
  - beam_search_action: fixed width and depth beam search
  - beam_search_with_time_threshold_action: beam search bounded by wall time
  - chokudai_search_action: depth-interleaved beam search, fixed pass count
  - chokudai_search_with_time_threshold_action: chokudai search bounded by wall time

Every search expands nodes the same way: copy the parent, apply one action,
evaluate, push. Each returns the action to play now, recovered from the
first_action recorded on depth-1 nodes.
"""

import heapq
import itertools

from maze_search.maze_state import INF
from maze_search.time_keeper import TimeKeeper


# ---------------------------------------------------------------------------
# Frontier helpers
# ---------------------------------------------------------------------------

# Frontier entries are (-evaluated_score, node_id, state): heapq is a
# min-heap, and node_id keeps ties in insertion order.

def _push(beam, state, node_ids):
    heapq.heappush(beam, (-state.evaluated_score, next(node_ids), state))


def _pop(beam):
    return heapq.heappop(beam)[2]


def _peek(beam):
    return beam[0][2]


def _expand(now_state, tag_first_action):
    """Yield every evaluated child of now_state."""
    for action in now_state.legal_actions():
        next_state = now_state.copy()
        next_state.advance(action)
        next_state.evaluate_score()
        if tag_first_action:
            next_state.first_action = action
        yield next_state


def _first_action_of(best_state):
    if best_state is None or best_state.first_action is None:
        raise RuntimeError("search finished without recovering a first action")
    return best_state.first_action


# ---------------------------------------------------------------------------
# Baselines
# ---------------------------------------------------------------------------

def random_action(state, rng):
    """Uniformly sample one legal action."""
    legal_actions = state.legal_actions()
    return legal_actions[rng.randint(0, len(legal_actions))]


def greedy_action(state):
    """
    One-step lookahead: play the action with the highest evaluated score.

    Ties keep the first action in legal_actions() order.
    """
    best_score = -INF
    best_action = None
    for action in state.legal_actions():
        now_state = state.copy()
        now_state.advance(action)
        now_state.evaluate_score()
        if best_score < now_state.evaluated_score:
            best_score = now_state.evaluated_score
            best_action = action
    if best_action is None:
        raise RuntimeError(f"no legal action at turn {state.turn}")
    return best_action


# ---------------------------------------------------------------------------
# Beam search
# ---------------------------------------------------------------------------

def beam_search_action(state, beam_width, beam_depth, stats=None, verbose=False):
    """
    Beam search: pop up to beam_width nodes per depth, expand all, repeat.

    Parameters:
        state: MazeState to search from (not modified)
        beam_width: number of parents popped per depth
        beam_depth: maximum number of depths to expand
        stats: optional dict, receives 'nodes_expanded' and 'depth'
        verbose: print progress per depth

    Returns:
        the first action of the best node at the last expanded depth.
        The search stops early once the best node is terminal.
    """
    node_ids = itertools.count()
    now_beam = []
    _push(now_beam, state, node_ids)
    best_state = None
    nodes_expanded = 0
    completed_depths = 0

    for depth in range(beam_depth):
        next_beam = []
        for _ in range(beam_width):
            if not now_beam:
                break
            now_state = _pop(now_beam)
            nodes_expanded += 1
            for next_state in _expand(now_state, depth == 0):
                _push(next_beam, next_state, node_ids)
        now_beam = next_beam
        if not now_beam:
            raise RuntimeError(f"beam emptied at depth {depth}")
        best_state = _peek(now_beam)
        completed_depths += 1
        if verbose:
            print(f"  Beam depth {depth}: size={len(now_beam)}, "
                  f"best={best_state.evaluated_score}")
        if best_state.is_done():
            break

    if stats is not None:
        stats['nodes_expanded'] = nodes_expanded
        stats['depth'] = completed_depths
    return _first_action_of(best_state)


def beam_search_with_time_threshold_action(state, beam_width, time_threshold_ms,
                                           stats=None, verbose=False):
    """
    Beam search without a depth limit, stopped by a wall-clock budget.

    The deadline is checked before every pop. On expiry the best node of the
    last fully completed depth is used, so the answer never regresses to an
    earlier depth. If the budget runs out before the first depth completes,
    RuntimeError is raised.

    Parameters:
        state: MazeState to search from (not modified)
        beam_width: number of parents popped per depth
        time_threshold_ms: wall-clock budget for the whole call
        stats: optional dict, receives 'nodes_expanded', 'depth' and 'timed_out'
        verbose: print progress per depth
    """
    time_keeper = TimeKeeper(time_threshold_ms)
    node_ids = itertools.count()
    now_beam = []
    _push(now_beam, state, node_ids)
    best_state = None
    nodes_expanded = 0
    completed_depths = 0
    timed_out = False

    for depth in itertools.count():
        next_beam = []
        for _ in range(beam_width):
            if time_keeper.is_time_over():
                timed_out = True
                break
            if not now_beam:
                break
            now_state = _pop(now_beam)
            nodes_expanded += 1
            for next_state in _expand(now_state, depth == 0):
                _push(next_beam, next_state, node_ids)
        if timed_out:
            if best_state is None:
                raise RuntimeError(
                    f"time budget of {time_threshold_ms}ms expired before "
                    f"the first beam depth completed"
                )
            break
        now_beam = next_beam
        if not now_beam:
            raise RuntimeError(f"beam emptied at depth {depth}")
        best_state = _peek(now_beam)
        completed_depths += 1
        if verbose:
            print(f"  Beam depth {depth}: size={len(now_beam)}, "
                  f"best={best_state.evaluated_score}, "
                  f"elapsed={time_keeper.elapsed_ms():.1f}ms")
        if best_state.is_done():
            break

    if stats is not None:
        stats['nodes_expanded'] = nodes_expanded
        stats['depth'] = completed_depths
        stats['timed_out'] = timed_out
    return _first_action_of(best_state)


# ---------------------------------------------------------------------------
# Chokudai search
# ---------------------------------------------------------------------------

def _chokudai_pass(beam, beam_width, beam_depth, node_ids):
    """
    Advance every depth by one partial round, shallowest first.

    Terminal nodes stop the round at their depth and stay in the frontier.
    Returns the number of nodes expanded.
    """
    nodes_expanded = 0
    for t in range(beam_depth):
        for _ in range(beam_width):
            if not beam[t]:
                break
            if _peek(beam[t]).is_done():
                break
            now_state = _pop(beam[t])
            nodes_expanded += 1
            for next_state in _expand(now_state, t == 0):
                _push(beam[t + 1], next_state, node_ids)
    return nodes_expanded


def _deepest_best_action(beam):
    """First action of the best node at the deepest non-empty depth."""
    for t in reversed(range(len(beam))):
        if beam[t]:
            return _peek(beam[t]).first_action
    return None


def chokudai_search_action(state, beam_width, beam_depth, beam_number,
                           stats=None, verbose=False):
    """
    Chokudai search: beam_number passes over beam_depth + 1 frontiers.

    Parameters:
        state: MazeState to search from (not modified)
        beam_width: nodes popped per depth per pass
        beam_depth: number of depths below the root
        beam_number: number of passes
        stats: optional dict, receives 'nodes_expanded' and 'passes'
        verbose: print progress per pass

    Returns:
        the first action of the best node at the deepest reached depth, or
        None when no depth below the root was reached.
    """
    node_ids = itertools.count()
    beam = [[] for _ in range(beam_depth + 1)]
    _push(beam[0], state, node_ids)
    nodes_expanded = 0

    for pass_index in range(beam_number):
        nodes_expanded += _chokudai_pass(beam, beam_width, beam_depth, node_ids)
        if verbose:
            sizes = [len(b) for b in beam]
            print(f"  Chokudai pass {pass_index}: nodes={nodes_expanded}, sizes={sizes}")

    if stats is not None:
        stats['nodes_expanded'] = nodes_expanded
        stats['passes'] = beam_number
    return _deepest_best_action(beam)


def chokudai_search_with_time_threshold_action(state, beam_width, beam_depth,
                                               time_threshold_ms, stats=None,
                                               verbose=False):
    """
    Chokudai search repeated until the wall-clock budget runs out.

    The deadline is checked once after every full pass, so at least one pass
    always completes even with an exhausted budget.

    Parameters:
        state: MazeState to search from (not modified)
        beam_width: nodes popped per depth per pass
        beam_depth: number of depths below the root
        time_threshold_ms: wall-clock budget for the whole call
        stats: optional dict, receives 'nodes_expanded' and 'passes'
        verbose: print progress per pass
    """
    time_keeper = TimeKeeper(time_threshold_ms)
    node_ids = itertools.count()
    beam = [[] for _ in range(beam_depth + 1)]
    _push(beam[0], state, node_ids)
    nodes_expanded = 0
    passes = 0

    while True:
        nodes_expanded += _chokudai_pass(beam, beam_width, beam_depth, node_ids)
        passes += 1
        if verbose and passes % 100 == 0:
            print(f"  Chokudai pass {passes}: nodes={nodes_expanded}, "
                  f"elapsed={time_keeper.elapsed_ms():.1f}ms")
        if time_keeper.is_time_over():
            break

    if stats is not None:
        stats['nodes_expanded'] = nodes_expanded
        stats['passes'] = passes
    return _deepest_best_action(beam)
