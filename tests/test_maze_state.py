"""
Unit tests for the single-character maze state.

Checks movement, collection, legality and rendering on hand-built grids,
then the episode invariants on seeded random grids.
"""

import os
import sys
import pytest
import numpy as np

# Ensure project root is on path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from maze_search.maze_state import MAX_POINT, Coord, MazeConfig, MazeState
from maze_search.action_search import random_action


def make_3x3_state(y=0, x=0, end_turn=2):
    points = np.array([[0, 1, 2], [3, 4, 5], [6, 7, 8]], dtype=np.int64)
    return MazeState(points=points, character=Coord(y, x),
                     config=MazeConfig(height=3, width=3, end_turn=end_turn))


class TestLegalActions:
    def test_corner_has_two_actions(self):
        assert make_3x3_state(0, 0).legal_actions() == [0, 2]

    def test_opposite_corner(self):
        assert make_3x3_state(2, 2).legal_actions() == [1, 3]

    def test_center_has_all_actions_in_order(self):
        assert make_3x3_state(1, 1).legal_actions() == [0, 1, 2, 3]

    def test_single_cell_grid_has_no_actions(self):
        state = MazeState(points=np.zeros((1, 1), dtype=np.int64), character=Coord(0, 0),
                          config=MazeConfig(height=1, width=1, end_turn=1))
        assert state.legal_actions() == []

    @pytest.mark.parametrize("seed", range(5))
    def test_legal_actions_stay_in_bounds(self, seed):
        """Every legal action keeps the character inside the grid."""
        rng = np.random.RandomState(seed)
        config = MazeConfig(height=4, width=6, end_turn=30)
        state = MazeState.random(rng, config)
        while not state.is_done():
            for action in state.legal_actions():
                child = state.copy()
                child.advance(action)
                assert 0 <= child.character.y < config.height
                assert 0 <= child.character.x < config.width
            state.advance(random_action(state, rng))


class TestAdvance:
    def test_collects_destination(self):
        state = make_3x3_state()
        state.advance(2)
        assert state.character == Coord(1, 0)
        assert state.game_score == 3
        assert state.points[1, 0] == 0
        assert state.turn == 1

    def test_cell_pays_out_once(self):
        state = make_3x3_state(end_turn=3)
        state.advance(0)  # (0, 1) worth 1
        state.advance(1)  # back to (0, 0), empty
        state.advance(0)  # (0, 1) again, already collected
        assert state.game_score == 1

    def test_done_at_end_turn(self):
        state = make_3x3_state(end_turn=2)
        assert not state.is_done()
        state.advance(0)
        assert not state.is_done()
        state.advance(2)
        assert state.is_done()

    def test_copy_is_independent(self):
        state = make_3x3_state()
        child = state.copy()
        child.advance(2)
        assert state.points[1, 0] == 3
        assert state.game_score == 0
        assert state.character == Coord(0, 0)
        assert state.turn == 0


class TestEvaluation:
    def test_evaluate_copies_game_score(self):
        state = make_3x3_state()
        state.advance(2)
        assert state.evaluated_score == 0
        state.evaluate_score()
        assert state.evaluated_score == 3

    def test_ordering_uses_evaluated_score(self):
        low, high = make_3x3_state(), make_3x3_state()
        low.evaluated_score = 1
        high.evaluated_score = 5
        assert low < high
        assert not high < low
        assert max([low, high]) is high

    def test_full_order_by_evaluated_score(self):
        low, high, tied = make_3x3_state(), make_3x3_state(), make_3x3_state()
        low.evaluated_score = 1
        high.evaluated_score = 5
        tied.evaluated_score = 5
        assert low <= high and high >= low
        assert high > low and not low > high
        assert high <= tied and high >= tied
        assert not high < tied and not high > tied
        assert sorted([high, low, tied]) == [low, high, tied]


class TestRandomState:
    def test_same_seed_same_grid(self):
        a = MazeState.random(np.random.RandomState(7))
        b = MazeState.random(np.random.RandomState(7))
        assert np.array_equal(a.points, b.points)
        assert a.character == b.character

    def test_values_and_start_cell(self):
        config = MazeConfig(height=8, width=5, end_turn=10)
        state = MazeState.random(np.random.RandomState(3), config)
        assert state.points.shape == (8, 5)
        assert state.points.min() >= 0
        assert state.points.max() <= MAX_POINT
        assert state.points[state.character.y, state.character.x] == 0
        assert state.turn == 0 and state.game_score == 0
        assert state.first_action is None

    @pytest.mark.parametrize("seed", range(5))
    def test_episode_score_invariants(self, seed):
        """Score equals the value removed from the grid and stays within bounds."""
        rng = np.random.RandomState(seed)
        config = MazeConfig(height=5, width=5, end_turn=40)
        state = MazeState.random(rng, config)
        initial_total = int(state.points.sum())
        previous_score = 0
        while not state.is_done():
            state.advance(random_action(state, rng))
            assert state.game_score >= previous_score
            previous_score = state.game_score
        assert initial_total - int(state.points.sum()) == state.game_score
        assert 0 <= state.game_score <= config.height * config.width * MAX_POINT


class TestMazeConfig:
    @pytest.mark.parametrize("kwargs", [
        {"height": 0}, {"width": -1}, {"end_turn": 0}, {"character_n": 0},
    ])
    def test_invalid_values_raise(self, kwargs):
        with pytest.raises(ValueError):
            MazeConfig(**kwargs)


class TestRender:
    def test_render_3x3(self):
        state = make_3x3_state()
        assert str(state) == "turn:\t0\nscore:\t0\n@12\n345\n678\n"

    def test_render_marks_collected_cells(self):
        state = make_3x3_state()
        state.advance(2)
        assert str(state) == "turn:\t1\nscore:\t3\n.12\n@45\n678\n"


if __name__ == "__main__":
    pytest.main([__file__, "-v", "-s"])
