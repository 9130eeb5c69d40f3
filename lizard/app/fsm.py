"""Finite State Machine for training and playback runs."""

from enum import Enum, auto
from typing import Dict, Callable, Optional


class AppState(Enum):
    """States for the host-facing run lifecycle."""
    IDLE = auto()
    TRAINING = auto()
    TRAINED = auto()
    PLAYBACK = auto()
    ERROR = auto()


class AppStateMachine:
    """State machine for managing training and playback runs."""

    def __init__(self):
        self.current_state = AppState.IDLE
        self._enter_callbacks: Dict[AppState, Callable[[Optional[Dict]], None]] = {}
        self._exit_callbacks: Dict[AppState, Callable[[Optional[Dict]], None]] = {}
        self._transition_callbacks: Dict[tuple, Callable[[AppState, AppState, Optional[Dict]], None]] = {}

        # Define valid state transitions
        self._valid_transitions = {
            AppState.IDLE: {AppState.TRAINING},
            AppState.TRAINING: {AppState.TRAINED, AppState.IDLE, AppState.ERROR},
            AppState.TRAINED: {AppState.TRAINING, AppState.PLAYBACK, AppState.IDLE},
            AppState.PLAYBACK: {AppState.TRAINED, AppState.ERROR},
            AppState.ERROR: {AppState.IDLE},
        }

    def on_state_enter(self, state: AppState, callback: Callable[[Optional[Dict]], None]):
        """Register callback for state entry."""
        self._enter_callbacks[state] = callback

    def on_state_exit(self, state: AppState, callback: Callable[[Optional[Dict]], None]):
        """Register callback for state exit."""
        self._exit_callbacks[state] = callback

    def on_transition(self, from_state: AppState, to_state: AppState,
                      callback: Callable[[AppState, AppState, Optional[Dict]], None]):
        """Register callback for state transition."""
        self._transition_callbacks[(from_state, to_state)] = callback

    def can_transition(self, to_state: AppState) -> bool:
        """Check if transition to target state is valid."""
        return to_state in self._valid_transitions.get(self.current_state, set())

    def transition(self, to_state: AppState, context: Optional[Dict] = None) -> bool:
        """Attempt to transition to target state."""
        if not self.can_transition(to_state):
            return False

        from_state = self.current_state

        if from_state in self._exit_callbacks:
            self._exit_callbacks[from_state](context)

        transition_key = (from_state, to_state)
        if transition_key in self._transition_callbacks:
            self._transition_callbacks[transition_key](from_state, to_state, context)

        self.current_state = to_state

        if to_state in self._enter_callbacks:
            self._enter_callbacks[to_state](context)

        return True

    # Convenience methods for common transitions

    def start_training(self, context: Optional[Dict] = None) -> bool:
        return self.transition(AppState.TRAINING, context)

    def finish_training(self, context: Optional[Dict] = None) -> bool:
        return self.transition(AppState.TRAINED, context)

    def start_playback(self, context: Optional[Dict] = None) -> bool:
        return self.transition(AppState.PLAYBACK, context)

    def finish_playback(self, context: Optional[Dict] = None) -> bool:
        if self.current_state == AppState.PLAYBACK:
            return self.transition(AppState.TRAINED, context)
        return False

    def reset_to_idle(self, context: Optional[Dict] = None) -> bool:
        return self.transition(AppState.IDLE, context)

    def fail_error(self, context: Optional[Dict] = None) -> bool:
        return self.transition(AppState.ERROR, context)

    # State checking methods

    def is_idle(self) -> bool:
        return self.current_state == AppState.IDLE

    def is_training(self) -> bool:
        return self.current_state == AppState.TRAINING

    def is_trained(self) -> bool:
        return self.current_state == AppState.TRAINED

    def is_playing(self) -> bool:
        return self.current_state == AppState.PLAYBACK

    def is_error(self) -> bool:
        return self.current_state == AppState.ERROR

    def is_active(self) -> bool:
        """Check if a run is in progress."""
        return self.current_state in {AppState.TRAINING, AppState.PLAYBACK}

    def can_train(self) -> bool:
        return self.current_state in {AppState.IDLE, AppState.TRAINED}

    def can_play(self) -> bool:
        return self.current_state == AppState.TRAINED

    def get_state_description(self) -> str:
        """Get human-readable state description."""
        descriptions = {
            AppState.IDLE: "Ready - start training to teach the lizard",
            AppState.TRAINING: "Training lizard with Q-Learning",
            AppState.TRAINED: "Training finished - show the learned route",
            AppState.PLAYBACK: "Following the greedy policy",
            AppState.ERROR: "Error occurred during execution",
        }
        return descriptions.get(self.current_state, "Unknown state")
