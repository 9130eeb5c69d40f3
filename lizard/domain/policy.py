"""Epsilon-greedy action selection with linear exploration decay."""

from typing import Optional
from .qtable import QTable
from .types import Action, NUM_ACTIONS, EXPLORATION_DECREMENT, EXPLORATION_FLOOR
from ..utils.rng import SeededRNG, default_rng


class EpsilonGreedyPolicy:
    """Chooses between a random action and the best known one."""

    def __init__(self, rng: Optional[SeededRNG] = None,
                 decrement: float = EXPLORATION_DECREMENT,
                 floor: float = EXPLORATION_FLOOR):
        self.rng = rng if rng is not None else default_rng
        self.decrement = decrement
        self.floor = floor

    def should_explore(self, exploration_rate: float) -> bool:
        """Draw r in [0, 1); explore when r <= exploration_rate."""
        return self.rng.random() <= exploration_rate

    def select_action(self, q_table: QTable, state: int, exploration_rate: float) -> Action:
        """Select an action for ``state`` using the epsilon-greedy rule."""
        if self.should_explore(exploration_rate):
            return Action(self.rng.randint(0, NUM_ACTIONS - 1))
        return q_table.best_action(state)

    def decay(self, exploration_rate: float) -> float:
        """Decrease the rate by one step, never going below the floor."""
        if exploration_rate > self.floor:
            return max(exploration_rate - self.decrement, self.floor)
        return exploration_rate
