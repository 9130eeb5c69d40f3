"""Grid model and transition function for the lizard world."""

from typing import Tuple
from .types import (
    Coord, Action, MoveResult, ACTION_DELTAS, GRID_SIZE, REWARDS, TERMINAL_CELLS
)


class GridModel:
    """Static 3x3 world: rewards per cell, terminal cells and bounds."""

    def __init__(self):
        self.size = GRID_SIZE
        self.rewards: Tuple[Tuple[float, ...], ...] = REWARDS
        self.terminal_cells = frozenset(TERMINAL_CELLS)

    def in_bounds(self, pos: Coord) -> bool:
        """Check if coordinate is within grid bounds."""
        x, y = pos
        return 0 <= x < self.size and 0 <= y < self.size

    def reward_at(self, pos: Coord) -> float:
        """Reward for landing on a cell."""
        x, y = pos
        return self.rewards[y][x]

    def is_terminal(self, pos: Coord) -> bool:
        return pos in self.terminal_cells

    def state_index(self, pos: Coord) -> int:
        """Row-major state index, y * 3 + x."""
        if not self.in_bounds(pos):
            raise ValueError(f"Position {pos} is outside the {self.size}x{self.size} grid")
        x, y = pos
        return y * self.size + x

    def attempt_move(self, pos: Coord, action: Action) -> MoveResult:
        """
        Apply an action to a position.

        Moves that would leave the grid are rejected: the position is unchanged,
        no reward is generated and ``moved`` is False.

        Raises:
            ValueError: If ``pos`` itself is outside the grid
        """
        if not self.in_bounds(pos):
            raise ValueError(f"Cannot move from out-of-bounds position {pos}")

        dx, dy = ACTION_DELTAS[Action(action)]
        candidate = (pos[0] + dx, pos[1] + dy)

        if not self.in_bounds(candidate):
            return MoveResult(position=pos, reward=0.0, moved=False)

        return MoveResult(position=candidate, reward=self.reward_at(candidate), moved=True)


# Shared default instance, the world never changes
default_grid = GridModel()
