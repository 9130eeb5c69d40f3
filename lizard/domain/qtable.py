"""Q-value table for the lizard world."""

import numpy as np
from typing import List, Optional
from .types import Action, NUM_ACTIONS, NUM_STATES, LEARNING_RATE, DISCOUNT_RATE


class QTable:
    """
    Mapping from (state index, action) to a learned value.

    Always holds exactly 9 states x 4 actions, initialised to zero.
    """

    def __init__(self, learning_rate: float = LEARNING_RATE,
                 discount_rate: float = DISCOUNT_RATE,
                 values: Optional[np.ndarray] = None):
        self.learning_rate = learning_rate
        self.discount_rate = discount_rate
        self._values = np.zeros((NUM_STATES, NUM_ACTIONS), dtype=np.float64)
        if values is not None:
            self.from_array(values)

    def _check_state(self, state: int) -> None:
        if not 0 <= state < NUM_STATES:
            raise ValueError(f"State index must be in 0..{NUM_STATES - 1}, got {state}")

    def value_of(self, state: int, action: Action) -> float:
        """Get Q-value for state-action pair."""
        self._check_state(state)
        return float(self._values[state, int(action)])

    def set_value(self, state: int, action: Action, value: float) -> None:
        """Set Q-value for state-action pair."""
        self._check_state(state)
        self._values[state, int(action)] = value

    def best_action(self, state: int) -> Action:
        """Action with the highest value; ties go to the lowest index."""
        self._check_state(state)
        # np.argmax returns the first occurrence of the maximum
        return Action(int(np.argmax(self._values[state])))

    def max_value(self, state: int) -> float:
        """Get the maximum Q-value at a state."""
        self._check_state(state)
        return float(np.max(self._values[state]))

    def update(self, prev_state: int, action: Action, cumulative_reward: float,
               new_state: int) -> float:
        """
        Blend the old value with the bootstrapped target and store it.

        Unlike textbook Q-learning the target is built from the reward accumulated
        so far in the episode, not the immediate step reward:

            Q[s][a] = (1 - lr) * Q[s][a] + lr * (cumulative_reward + gamma * max Q[s'])

        Returns:
            The new Q-value
        """
        current_q = self.value_of(prev_state, action)
        target = cumulative_reward + self.discount_rate * self.max_value(new_state)
        new_q = (1 - self.learning_rate) * current_q + self.learning_rate * target
        self.set_value(prev_state, action, new_q)
        return new_q

    def penalize(self, state: int, action: Action, penalty: float) -> float:
        """Add a (negative) penalty to a single entry."""
        new_q = self.value_of(state, action) + penalty
        self.set_value(state, action, new_q)
        return new_q

    def reset(self) -> None:
        """Reset all Q-values to zero."""
        self._values.fill(0.0)

    def as_array(self) -> np.ndarray:
        """Return a copy of the values as a 9x4 numpy array."""
        return self._values.copy()

    def from_array(self, values) -> None:
        """Set all values from a 9x4 array-like."""
        array = np.asarray(values, dtype=np.float64)
        if array.shape != (NUM_STATES, NUM_ACTIONS):
            raise ValueError(
                f"Q-table must have shape ({NUM_STATES}, {NUM_ACTIONS}), got {array.shape}"
            )
        self._values = array.copy()

    def to_list(self) -> List[List[float]]:
        return self._values.tolist()

    def __len__(self) -> int:
        return NUM_STATES
