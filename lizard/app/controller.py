"""Application controller connecting a Qt host to the lizard training session."""

import asyncio
from typing import Callable, Optional
from PySide6.QtCore import QObject, QThread, Signal

from ..domain.qlearning import TrainingSession
from ..domain.types import Episode, LizardConfig, Pacer, Snapshot
from ..utils.pacing import fixed_delay
from ..utils.rng import SeededRNG
from .fsm import AppStateMachine, AppState


class SessionWorker(QObject):
    """Worker that runs one training or playback coroutine off the UI thread."""

    snapshot_ready = Signal(object)  # Snapshot
    episode_completed = Signal(object)  # Episode
    run_finished = Signal(object)  # TrainingResult or PlaybackResult
    error_occurred = Signal(str)

    def __init__(self, session: TrainingSession, label: str, pacer: Pacer,
                 runner: Callable):
        super().__init__()
        self.session = session
        self.label = label
        self.pacer = pacer
        self.runner = runner
        self.should_stop = False

    def stop(self):
        """Stop the run at the next step boundary."""
        self.should_stop = True
        self.session.stop()

    async def _pace(self):
        # runners clear the token on entry; re-apply a stop that came earlier
        if self.should_stop:
            self.session.stop()
        await self.pacer()

    def run(self):
        """Drive the run on a private event loop inside the worker thread."""
        try:
            result = asyncio.run(self.runner(self.snapshot_ready.emit, self._pace,
                                             self.episode_completed.emit))
            self.run_finished.emit(result)
        except Exception as e:
            self.error_occurred.emit(f"{self.label} error: {str(e)}")


class LizardController(QObject):
    """
    Controller that runs the training session and re-emits its progress as Qt signals.

    Training and playback run in a background ``QThread`` so the host's event
    loop keeps repainting and delivering input. Every signal below is emitted
    on the thread that owns the controller. :meth:`stop` may be called at any
    time and ends the run at the next step boundary.

    Signals:
        state_changed: Emitted when the run state changes
        snapshot_updated: Emitted after every step with the current Snapshot
        episode_completed: Emitted when a training episode is completed
        training_progress: Emitted with (completed episodes, total episodes)
        training_completed: Emitted when training finishes
        playback_completed: Emitted when greedy playback finishes
        error_occurred: Emitted when an error occurs
    """

    state_changed = Signal(object)  # AppState
    snapshot_updated = Signal(object)  # Snapshot
    episode_completed = Signal(object)  # Episode
    training_progress = Signal(int, int)
    training_completed = Signal(object)  # TrainingResult
    playback_completed = Signal(object)  # PlaybackResult
    error_occurred = Signal(str)

    def __init__(self, config: Optional[LizardConfig] = None, rng: Optional[SeededRNG] = None):
        super().__init__()
        self._config = config or LizardConfig()
        self._session = TrainingSession(self._config, rng=rng)
        self._state_machine = AppStateMachine()
        self._episode_target = 0
        self._episodes_done = 0

        self._worker_thread: Optional[QThread] = None
        self._worker: Optional[SessionWorker] = None

        self._setup_state_callbacks()

    def _setup_state_callbacks(self):
        for state in AppState:
            self._state_machine.on_state_enter(state, self._make_enter_callback(state))

    def _make_enter_callback(self, state: AppState):
        def on_enter(context):
            self.state_changed.emit(state)
        return on_enter

    # Properties

    @property
    def session(self) -> TrainingSession:
        return self._session

    @property
    def config(self) -> LizardConfig:
        return self._config

    @property
    def current_state(self) -> AppState:
        return self._state_machine.current_state

    def is_running(self) -> bool:
        return self._worker_thread is not None

    # Run control

    def start_training(self, episodes: Optional[int] = None) -> bool:
        """Start training for ``episodes`` episodes (config default when None)."""
        if not self._state_machine.can_train() or self.is_running():
            self.error_occurred.emit(
                f"Cannot start training while {self.current_state.name.lower()}"
            )
            return False

        self._episode_target = self._config.episodes if episodes is None else episodes
        self._episodes_done = 0

        def runner(sink, pacer, episode_callback):
            return self._session.run_training(episodes, sink, pacer, episode_callback)

        self._state_machine.start_training()
        return self._start_worker("Training", runner, self._config.step_delay_ms,
                                  self._on_training_finished)

    def show_result(self, max_steps: Optional[int] = None) -> bool:
        """Start replaying the learned greedy policy from the start cell."""
        if not self._state_machine.can_play() or self.is_running():
            self.error_occurred.emit("No training completed yet. Train the lizard before showing the result.")
            return False

        def runner(sink, pacer, episode_callback):
            return self._session.run_greedy_playback(sink, pacer, max_steps)

        self._state_machine.start_playback()
        return self._start_worker("Playback", runner, self._config.playback_delay_ms,
                                  self._on_playback_finished)

    def _start_worker(self, label: str, runner: Callable, delay_ms: int,
                      on_finished: Callable) -> bool:
        try:
            self._worker_thread = QThread()
            self._worker_thread.setObjectName(f"Lizard-{label}Thread")

            self._worker = SessionWorker(self._session, label, fixed_delay(delay_ms), runner)
            self._worker.moveToThread(self._worker_thread)

            self._worker.snapshot_ready.connect(self._on_snapshot)
            self._worker.episode_completed.connect(self._on_episode_completed)
            self._worker.run_finished.connect(on_finished)
            self._worker.error_occurred.connect(self._on_worker_error)
            self._worker_thread.started.connect(self._worker.run)

            self._worker_thread.start()
            return True

        except Exception as e:
            self._cleanup_worker_thread()
            self._state_machine.fail_error()
            self.error_occurred.emit(f"Failed to start {label.lower()}: {str(e)}")
            return False

    def stop(self):
        """Stop the current run at the next step boundary."""
        if self._worker is not None:
            self._worker.stop()
        else:
            self._session.stop()

    def reset_session(self) -> bool:
        """Discard everything learned so far."""
        if self._state_machine.is_active() or self.is_running():
            return False

        self._session.reset()
        if not self._state_machine.is_idle():
            self._state_machine.reset_to_idle()
        self.snapshot_updated.emit(self._session.snapshot())
        return True

    # Worker callbacks

    def _on_snapshot(self, snapshot: Snapshot):
        self.snapshot_updated.emit(snapshot)

    def _on_episode_completed(self, episode: Episode):
        self.episode_completed.emit(episode)
        self._episodes_done += 1
        self.training_progress.emit(self._episodes_done, self._episode_target)

    def _on_training_finished(self, result):
        self._cleanup_worker_thread()
        if result.cancelled:
            self._state_machine.reset_to_idle()
        else:
            self._state_machine.finish_training()
        self.training_completed.emit(result)

    def _on_playback_finished(self, result):
        self._cleanup_worker_thread()
        self._state_machine.finish_playback()
        self.playback_completed.emit(result)

    def _on_worker_error(self, message: str):
        self._cleanup_worker_thread()
        self._state_machine.fail_error()
        self.error_occurred.emit(message)

    def _cleanup_worker_thread(self):
        """Join the worker thread once its run has returned."""
        if self._worker_thread is not None:
            self._worker_thread.quit()
            if not self._worker_thread.wait(1000):
                print("Warning: worker thread did not finish in time")
        self._worker_thread = None
        self._worker = None

    # Utility methods

    def get_statistics(self) -> dict:
        """Get current training statistics."""
        history = self._session.training_history
        successful = sum(1 for ep in history if ep.reached_goal)
        return {
            "episodes_completed": self._session.episodes_completed,
            "current_epsilon": self._session.exploration_rate,
            "successful_episodes": successful,
            "success_rate": successful / len(history) if history else 0.0,
            "current_state": self._state_machine.current_state.name,
            "state_description": self._state_machine.get_state_description(),
        }
