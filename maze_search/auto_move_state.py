"""
Multi-character maze state whose playout is fully determined by placement.

After the characters are placed, every turn each character greedily steps to
its best-valued neighbouring cell and all characters then collect. The only
decision is the initial placement, which local search perturbs.
"""

from dataclasses import dataclass, field, replace

import numpy as np

from maze_search.maze_state import (
    DEFAULT_AUTO_MOVE_CONFIG, DX, DY, INF, MAX_POINT, Coord, MazeConfig, render_grid,
)


@dataclass(eq=False)
class AutoMoveMazeState:
    points: np.ndarray
    config: MazeConfig = DEFAULT_AUTO_MOVE_CONFIG
    characters: list = field(default_factory=list)
    turn: int = 0
    game_score: int = 0
    evaluated_score: int = 0

    def __post_init__(self):
        if not self.characters:
            self.characters = [Coord() for _ in range(self.config.character_n)]

    @classmethod
    def random(cls, rng, config=DEFAULT_AUTO_MOVE_CONFIG):
        """Fill every cell with a value in [0, MAX_POINT]; characters are unplaced."""
        points = rng.randint(0, MAX_POINT + 1, size=(config.height, config.width)).astype(np.int64)
        return cls(points=points, config=config)

    def copy(self):
        return replace(self, points=self.points.copy(), characters=list(self.characters))

    def is_done(self):
        return self.turn == self.config.end_turn

    def initial_placement(self, rng):
        """Overwrite every character with an independent uniform coordinate."""
        for character_id in range(self.config.character_n):
            self.set_character(
                character_id,
                int(rng.randint(0, self.config.height)),
                int(rng.randint(0, self.config.width)),
            )

    def perturb(self, rng):
        """Move one uniformly chosen character to a uniform coordinate."""
        character_id = int(rng.randint(0, self.config.character_n))
        self.set_character(
            character_id,
            int(rng.randint(0, self.config.height)),
            int(rng.randint(0, self.config.width)),
        )

    def set_character(self, character_id, y, x):
        self.characters[character_id] = Coord(y=y, x=x)

    def move_player(self, character_id):
        """Step one character to its best neighbour; ties keep the first action."""
        character = self.characters[character_id]
        best_point = -INF
        best_action = None
        for action in range(4):
            ty = character.y + DY[action]
            tx = character.x + DX[action]
            if 0 <= ty < self.config.height and 0 <= tx < self.config.width:
                point = int(self.points[ty, tx])
                if best_point < point:
                    best_point = point
                    best_action = action
        if best_action is None:
            raise RuntimeError(f"character {character_id} has no neighbour inside the grid")
        self.characters[character_id] = Coord(
            y=character.y + DY[best_action],
            x=character.x + DX[best_action],
        )

    def advance(self):
        """Move every character, then collect under each of them."""
        for character_id in range(self.config.character_n):
            self.move_player(character_id)
        for character in self.characters:
            self.game_score += int(self.points[character.y, character.x])
            self.points[character.y, character.x] = 0
        self.turn += 1

    def rollout(self, render=False):
        """
        Play the placement out to the end of the episode and return its score.

        Cells under the starting placement are cleared without scoring. The
        receiver is never modified.
        """
        state = self.copy()
        for character in state.characters:
            state.points[character.y, character.x] = 0
        while not state.is_done():
            state.advance()
            if render:
                print(state)
        return state.game_score

    def __str__(self):
        occupied = {(c.y, c.x) for c in self.characters}
        return render_grid(self.points, occupied, self.turn, self.game_score)
