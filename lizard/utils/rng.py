"""Source of the exploration draws used by the epsilon-greedy policy."""

import random
from typing import Optional


class SeededRNG:
    """
    Wraps a private ``random.Random`` so each training session can be replayed.

    The policy only needs two draws: a float compared against the exploration
    rate, and an action index when it explores. Tests substitute any object
    with the same two methods.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._random = random.Random(seed)

    def random(self) -> float:
        """Draw a float in [0, 1)."""
        return self._random.random()

    def randint(self, a: int, b: int) -> int:
        """Draw an integer in [a, b], both ends included."""
        return self._random.randint(a, b)


# Shared unseeded instance for policies built without one
default_rng = SeededRNG()
