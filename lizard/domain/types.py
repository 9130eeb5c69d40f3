"""Core type definitions for the lizard Q-learning simulation."""

from dataclasses import dataclass, field
from enum import Enum, IntEnum, auto
from typing import Awaitable, Callable, Dict, List, Optional, Tuple
import numpy as np

# Coordinate type for grid positions: (x, y)
Coord = Tuple[int, int]

GRID_SIZE = 3
NUM_STATES = GRID_SIZE * GRID_SIZE

START_POSITION: Coord = (0, 2)
BIRD_CELL: Coord = (1, 1)
CRICKETS_CELL: Coord = (2, 2)

# Fixed reward table, row-major: REWARDS[y][x]
REWARDS: Tuple[Tuple[float, ...], ...] = (
    (1.0, -1.0, -1.0),
    (-1.0, -10.0, -1.0),
    (-1.0, -1.0, 10.0),
)

# Landing on either cell ends the episode
TERMINAL_CELLS: Tuple[Coord, ...] = (BIRD_CELL, CRICKETS_CELL)

LEARNING_RATE = 0.7
DISCOUNT_RATE = 0.99
MAX_STEPS = 100
EPISODES = 100
EXPLORATION_START = 1.0
EXPLORATION_DECREMENT = 0.005
EXPLORATION_FLOOR = 0.2
BOUNDARY_PENALTY = -100.0


class Action(IntEnum):
    """Actions the lizard can take. Order matters: ties resolve to the lowest index."""
    LEFT = 0
    RIGHT = 1
    UP = 2
    DOWN = 3


NUM_ACTIONS = len(Action)

ACTION_DELTAS: Dict[Action, Coord] = {
    Action.LEFT: (-1, 0),
    Action.RIGHT: (1, 0),
    Action.UP: (0, -1),
    Action.DOWN: (0, 1),
}


class EpisodeState(Enum):
    """States of the per-episode state machine."""
    RUNNING = auto()
    TERMINATED_BY_GOAL = auto()
    TERMINATED_BY_STEP_LIMIT = auto()
    # Stopped through a cancellation token, not a normal termination
    CANCELLED = auto()


@dataclass
class LizardConfig:
    """Configuration for a training session."""
    learning_rate: float = LEARNING_RATE
    discount_rate: float = DISCOUNT_RATE
    episodes: int = EPISODES
    max_steps: int = MAX_STEPS
    exploration_start: float = EXPLORATION_START
    exploration_decrement: float = EXPLORATION_DECREMENT
    exploration_floor: float = EXPLORATION_FLOOR
    boundary_penalty: float = BOUNDARY_PENALTY
    # Greedy playback has no natural end for a poor policy
    playback_max_steps: int = MAX_STEPS
    # Pacing for observers
    step_delay_ms: int = 5
    playback_delay_ms: int = 500
    seed: Optional[int] = None
    verbose: bool = True
    progress_interval: int = 10


@dataclass(frozen=True)
class MoveResult:
    """Outcome of attempting a move from one cell."""
    position: Coord
    reward: float
    moved: bool


@dataclass(frozen=True)
class Snapshot:
    """State handed to the rendering collaborator after every step."""
    position: Coord
    q_table: np.ndarray
    step_count: int = 0
    cumulative_reward: float = 0.0
    exploration_rate: float = 0.0
    episode: int = 0


@dataclass
class Episode:
    """Represents a single training episode."""
    number: int
    steps: int
    total_reward: float
    outcome: EpisodeState
    final_position: Coord
    epsilon_used: float
    elapsed_time: float = 0.0

    @property
    def reached_goal(self) -> bool:
        """Whether the lizard ended on the five-crickets cell."""
        return self.final_position == CRICKETS_CELL


@dataclass
class TrainingResult:
    """Result of a training run."""
    episodes: List[Episode]
    total_episodes: int
    successful_episodes: int
    average_reward: float
    final_epsilon: float
    cancelled: bool = False
    stopping_reason: str = ""

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        return self.successful_episodes / self.total_episodes if self.total_episodes > 0 else 0.0


@dataclass
class PlaybackResult:
    """Result of following the greedy policy after training."""
    path: List[Coord] = field(default_factory=list)
    steps_taken: int = 0
    total_reward: float = 0.0
    penalties_applied: int = 0
    reached_terminal: bool = False
    final_position: Coord = START_POSITION
    stopping_reason: str = ""

    @property
    def success(self) -> bool:
        """Whether playback ended on the five-crickets cell."""
        return self.reached_terminal and self.final_position == CRICKETS_CELL


class CancellationToken:
    """Cooperative stop flag checked by runners at step boundaries."""

    def __init__(self):
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    def reset(self):
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled


# Rendering collaborator and pacing hook
SnapshotSink = Callable[[Snapshot], None]
Pacer = Callable[[], Awaitable[None]]
