"""
Single-character maze state for action-based search.

The character moves one cell per turn on an H x W grid and collects the
point value of every cell it enters (each cell pays out at most once).
"""

from dataclasses import dataclass, replace
from typing import Optional

import numpy as np


INF = 1_000_000_000
MAX_POINT = 9

# Action i moves by (DY[i], DX[i]): +x, -x, +y, -y
DX = (1, -1, 0, 0)
DY = (0, 0, 1, -1)
ACTION_NAMES = ('RIGHT', 'LEFT', 'DOWN', 'UP')


@dataclass(frozen=True)
class MazeConfig:
    """Grid size, episode length and number of characters."""
    height: int = 30
    width: int = 30
    end_turn: int = 100
    character_n: int = 1

    def __post_init__(self):
        if self.height < 1 or self.width < 1:
            raise ValueError("grid dimensions must be >= 1")
        if self.end_turn < 1:
            raise ValueError("end_turn must be >= 1")
        if self.character_n < 1:
            raise ValueError("character_n must be >= 1")


DEFAULT_MAZE_CONFIG = MazeConfig()
DEFAULT_AUTO_MOVE_CONFIG = MazeConfig(height=5, width=5, end_turn=5, character_n=3)


@dataclass(frozen=True)
class Coord:
    y: int = 0
    x: int = 0


def render_grid(points, occupied, turn, game_score):
    """Render a grid: '@' for characters, digits for points, '.' for empty cells."""
    lines = [f"turn:\t{turn}", f"score:\t{game_score}"]
    height, width = points.shape
    for y in range(height):
        row = []
        for x in range(width):
            if (y, x) in occupied:
                row.append('@')
            elif points[y, x] > 0:
                row.append(str(int(points[y, x])))
            else:
                row.append('.')
        lines.append(''.join(row))
    return '\n'.join(lines) + '\n'


@dataclass(eq=False)
class MazeState:
    """
    One node of the action-search tree.

    evaluated_score is the priority key used by every frontier. It is only
    updated by evaluate_score(), so a heuristic may diverge from game_score.
    first_action records the root move that led to this node.
    """
    points: np.ndarray
    character: Coord
    config: MazeConfig = DEFAULT_MAZE_CONFIG
    turn: int = 0
    game_score: int = 0
    evaluated_score: int = 0
    first_action: Optional[int] = None

    @classmethod
    def random(cls, rng, config=DEFAULT_MAZE_CONFIG):
        """Draw a character position and point values in [0, MAX_POINT]."""
        character = Coord(
            y=int(rng.randint(0, config.height)),
            x=int(rng.randint(0, config.width)),
        )
        points = rng.randint(0, MAX_POINT + 1, size=(config.height, config.width)).astype(np.int64)
        points[character.y, character.x] = 0
        return cls(points=points, character=character, config=config)

    def copy(self):
        return replace(self, points=self.points.copy())

    def is_done(self):
        return self.turn == self.config.end_turn

    def advance(self, action):
        """Move the character, collect the destination cell and end the turn."""
        y = min(max(self.character.y + DY[action], 0), self.config.height - 1)
        x = min(max(self.character.x + DX[action], 0), self.config.width - 1)
        self.character = Coord(y=y, x=x)
        point = int(self.points[y, x])
        if point > 0:
            self.game_score += point
            self.points[y, x] = 0
        self.turn += 1

    def legal_actions(self):
        """Actions whose destination lies inside the grid, in action order."""
        actions = []
        for action in range(4):
            ty = self.character.y + DY[action]
            tx = self.character.x + DX[action]
            if 0 <= ty < self.config.height and 0 <= tx < self.config.width:
                actions.append(action)
        return actions

    def evaluate_score(self):
        self.evaluated_score = self.game_score

    # Ordered by evaluated_score only; identity stays the default equality.
    def __lt__(self, other):
        return self.evaluated_score < other.evaluated_score

    def __le__(self, other):
        return self.evaluated_score <= other.evaluated_score

    def __gt__(self, other):
        return self.evaluated_score > other.evaluated_score

    def __ge__(self, other):
        return self.evaluated_score >= other.evaluated_score

    def __str__(self):
        occupied = {(self.character.y, self.character.x)}
        return render_grid(self.points, occupied, self.turn, self.game_score)
