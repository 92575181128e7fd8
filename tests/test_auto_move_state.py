"""
Tests for the auto-move maze: greedy character movement, simultaneous
collection and the rollout used to score a placement.
"""

import os
import sys
import pytest
import numpy as np

# Ensure project root is on path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from maze_search.maze_state import MAX_POINT, Coord, MazeConfig
from maze_search.auto_move_state import AutoMoveMazeState


def make_3x3_state(end_turn=2, character_n=1):
    points = np.array([[0, 1, 2], [3, 4, 5], [6, 7, 8]], dtype=np.int64)
    config = MazeConfig(height=3, width=3, end_turn=end_turn, character_n=character_n)
    return AutoMoveMazeState(points=points, config=config)


class TestConstruction:
    def test_characters_default_to_origin(self):
        state = make_3x3_state(character_n=3)
        assert state.characters == [Coord(0, 0)] * 3

    def test_random_fills_every_cell(self):
        config = MazeConfig(height=6, width=4, end_turn=5, character_n=2)
        state = AutoMoveMazeState.random(np.random.RandomState(0), config)
        assert state.points.shape == (6, 4)
        assert state.points.min() >= 0
        assert state.points.max() <= MAX_POINT
        assert len(state.characters) == 2

    def test_copy_is_independent(self):
        state = make_3x3_state()
        child = state.copy()
        child.set_character(0, 2, 2)
        child.points[1, 1] = 0
        assert state.characters[0] == Coord(0, 0)
        assert state.points[1, 1] == 4


class TestPlacement:
    @pytest.mark.parametrize("seed", range(5))
    def test_initial_placement_in_bounds(self, seed):
        state = make_3x3_state(character_n=4)
        state.initial_placement(np.random.RandomState(seed))
        assert len(state.characters) == 4
        for c in state.characters:
            assert 0 <= c.y < 3 and 0 <= c.x < 3

    @pytest.mark.parametrize("seed", range(5))
    def test_perturb_moves_at_most_one_character(self, seed):
        rng = np.random.RandomState(seed)
        state = make_3x3_state(character_n=3)
        state.initial_placement(rng)
        before = list(state.characters)
        state.perturb(rng)
        changed = sum(1 for a, b in zip(before, state.characters) if a != b)
        assert changed <= 1
        for c in state.characters:
            assert 0 <= c.y < 3 and 0 <= c.x < 3

    def test_same_seed_same_placement(self):
        a, b = make_3x3_state(character_n=3), make_3x3_state(character_n=3)
        a.initial_placement(np.random.RandomState(11))
        b.initial_placement(np.random.RandomState(11))
        assert a.characters == b.characters


class TestMovement:
    def test_moves_to_best_neighbour(self):
        state = make_3x3_state()
        state.move_player(0)
        assert state.characters[0] == Coord(1, 0)

    def test_ties_keep_first_action(self):
        state = AutoMoveMazeState(points=np.zeros((3, 3), dtype=np.int64),
                                  config=MazeConfig(3, 3, 1, 1))
        state.set_character(0, 1, 1)
        state.move_player(0)
        # all neighbours are zero, +x comes first
        assert state.characters[0] == Coord(1, 2)

    def test_single_cell_grid_has_no_move(self):
        state = AutoMoveMazeState(points=np.array([[5]], dtype=np.int64),
                                  config=MazeConfig(1, 1, 1, 1))
        with pytest.raises(RuntimeError):
            state.move_player(0)
        with pytest.raises(RuntimeError):
            state.rollout()

    def test_shared_cell_pays_out_once(self):
        state = make_3x3_state(end_turn=1, character_n=2)
        state.advance()
        assert state.characters == [Coord(1, 0), Coord(1, 0)]
        assert state.game_score == 3
        assert state.turn == 1


class TestRollout:
    def test_hand_computed_score(self):
        # (0,0) -> (1,0) worth 3 -> (2,0) worth 6
        assert make_3x3_state(end_turn=2).rollout() == 9

    def test_start_cell_is_cleared_without_scoring(self):
        state = make_3x3_state(end_turn=1)
        state.set_character(0, 1, 1)
        # (1,1) is emptied first, then the character steps to (2,1)
        assert state.rollout() == 7

    def test_rollout_does_not_modify_receiver(self):
        state = make_3x3_state(end_turn=2)
        points_before = state.points.copy()
        state.rollout()
        assert np.array_equal(state.points, points_before)
        assert state.characters == [Coord(0, 0)]
        assert state.turn == 0 and state.game_score == 0

    @pytest.mark.parametrize("seed", range(5))
    def test_rollout_is_deterministic_and_bounded(self, seed):
        rng = np.random.RandomState(seed)
        state = AutoMoveMazeState.random(rng)
        state.initial_placement(rng)
        score = state.rollout()
        assert state.rollout() == score
        assert 0 <= score <= int(state.points.sum())

    def test_render_prints_each_turn(self, capsys):
        make_3x3_state(end_turn=2).rollout(render=True)
        out = capsys.readouterr().out
        assert "turn:\t1\nscore:\t3\n" in out
        assert "turn:\t2\nscore:\t9\n" in out


class TestRender:
    def test_marks_every_character(self):
        state = make_3x3_state(character_n=2)
        state.set_character(1, 2, 2)
        assert str(state) == "turn:\t0\nscore:\t0\n@12\n345\n67@\n"


if __name__ == "__main__":
    pytest.main([__file__, "-v", "-s"])
