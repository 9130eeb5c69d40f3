"""Q-learning training session: episode runner and greedy playback."""

import asyncio
import time
from typing import Callable, Dict, List, Optional
from .environment import GridModel, default_grid
from .policy import EpsilonGreedyPolicy
from .qtable import QTable
from .types import (
    Action, CancellationToken, Coord, Episode, EpisodeState, LizardConfig, Pacer,
    PlaybackResult, Snapshot, SnapshotSink, TrainingResult, START_POSITION
)
from ..utils.pacing import no_delay
from ..utils.rng import SeededRNG


class TrainingSession:
    """
    Owns everything that persists across a training run.

    The Q-table and the exploration rate live for the whole run; the position,
    step counter and cumulative reward are reset whenever an episode ends.
    Rendering is never called from here directly: runners hand each snapshot
    to an optional sink supplied by the host.
    """

    def __init__(self, config: Optional[LizardConfig] = None,
                 grid: Optional[GridModel] = None,
                 policy: Optional[EpsilonGreedyPolicy] = None,
                 rng: Optional[SeededRNG] = None):
        self.config = config or LizardConfig()
        self.grid = grid or default_grid
        self.rng = rng if rng is not None else SeededRNG(self.config.seed)
        self.policy = policy or EpsilonGreedyPolicy(
            self.rng,
            decrement=self.config.exploration_decrement,
            floor=self.config.exploration_floor,
        )
        self.q_table = QTable(self.config.learning_rate, self.config.discount_rate)
        self.exploration_rate = self.config.exploration_start
        self.cancel_token = CancellationToken()

        self.position: Coord = START_POSITION
        self.step_count = 0
        self.cumulative_reward = 0.0
        self.last_action: Optional[Action] = None

        self.episodes_completed = 0
        self.training_history: List[Episode] = []

    def reset(self):
        """Start over with a fresh Q-table and exploration rate."""
        self.q_table.reset()
        self.exploration_rate = self.config.exploration_start
        self.episodes_completed = 0
        self.training_history.clear()
        self.cancel_token.reset()
        self._reset_episode()

    @property
    def state(self) -> int:
        """State index of the current position."""
        return self.grid.state_index(self.position)

    def snapshot(self) -> Snapshot:
        return Snapshot(
            position=self.position,
            q_table=self.q_table.as_array(),
            step_count=self.step_count,
            cumulative_reward=self.cumulative_reward,
            exploration_rate=self.exploration_rate,
            episode=self.episodes_completed,
        )

    def stop(self):
        """Ask a running training or playback to stop at the next step boundary."""
        self.cancel_token.cancel()

    # Episode state machine

    def check_termination(self) -> EpisodeState:
        """Evaluated before every step."""
        if self.grid.is_terminal(self.position):
            return EpisodeState.TERMINATED_BY_GOAL
        if self.step_count >= self.config.max_steps:
            return EpisodeState.TERMINATED_BY_STEP_LIMIT
        return EpisodeState.RUNNING

    def step(self) -> Snapshot:
        """
        Execute one training step and return the resulting snapshot.

        A move blocked by the grid edge leaves the position alone but still
        counts as a step and still updates the Q-table for the unchanged state.
        """
        prev_state = self.state
        action = self.policy.select_action(self.q_table, prev_state, self.exploration_rate)

        move = self.grid.attempt_move(self.position, action)
        if move.moved:
            self.position = move.position
            self.cumulative_reward += move.reward

        self.q_table.update(prev_state, action, self.cumulative_reward, self.state)

        self.step_count += 1
        self.exploration_rate = self.policy.decay(self.exploration_rate)
        self.last_action = action
        return self.snapshot()

    def _reset_episode(self):
        self.position = START_POSITION
        self.step_count = 0
        self.cumulative_reward = 0.0
        self.last_action = None

    def reset_position(self, sink: Optional[SnapshotSink] = None):
        """Put the lizard back on the start cell and clear per-episode counters."""
        self._reset_episode()
        self._emit(sink, self.snapshot())

    @staticmethod
    def _emit(sink: Optional[SnapshotSink], snapshot: Snapshot):
        if sink is not None:
            sink(snapshot)

    async def run_episode(self, sink: Optional[SnapshotSink] = None,
                          pacer: Optional[Pacer] = None) -> Episode:
        """Run one episode until it terminates, then reset for the next one."""
        pacer = pacer or no_delay
        episode_start_time = time.time()
        epsilon_used = self.exploration_rate
        number = self.episodes_completed

        while True:
            outcome = self.check_termination()
            if outcome is not EpisodeState.RUNNING:
                break
            if self.cancel_token.cancelled:
                outcome = EpisodeState.CANCELLED
                break

            await pacer()
            self._emit(sink, self.step())

        episode = Episode(
            number=number,
            steps=self.step_count,
            total_reward=self.cumulative_reward,
            outcome=outcome,
            final_position=self.position,
            epsilon_used=epsilon_used,
            elapsed_time=time.time() - episode_start_time,
        )

        if outcome is not EpisodeState.CANCELLED:
            self.training_history.append(episode)
            self.episodes_completed += 1

        self.reset_position(sink)
        return episode

    async def run_training(self, episodes: Optional[int] = None,
                           sink: Optional[SnapshotSink] = None,
                           pacer: Optional[Pacer] = None,
                           episode_callback: Optional[Callable[[Episode], None]] = None
                           ) -> TrainingResult:
        """Run episodes strictly one after another on the shared Q-table."""
        max_episodes = self.config.episodes if episodes is None else episodes
        self.cancel_token.reset()
        self._reset_episode()

        if self.config.verbose:
            print(f"Starting training for {max_episodes} episodes "
                  f"(epsilon {self.exploration_rate:.3f})...")

        episodes_list: List[Episode] = []
        cancelled = False
        stopping_reason = "Completed normally"

        for episode_num in range(max_episodes):
            if self.cancel_token.cancelled:
                cancelled = True
                break

            episode = await self.run_episode(sink, pacer)
            if episode.outcome is EpisodeState.CANCELLED:
                cancelled = True
                break

            episodes_list.append(episode)
            if episode_callback is not None:
                episode_callback(episode)

            interval = self.config.progress_interval
            if self.config.verbose and interval > 0 and (episode_num + 1) % interval == 0:
                recent = episodes_list[-interval:]
                recent_success = sum(1 for ep in recent if ep.reached_goal)
                print(f"Episode {episode_num + 1}: Crickets reached: {recent_success}/{len(recent)}, "
                      f"Epsilon: {self.exploration_rate:.3f}")

        if cancelled:
            stopping_reason = "Training stopped by user"

        successful_episodes = sum(1 for ep in episodes_list if ep.reached_goal)
        total_reward = sum(ep.total_reward for ep in episodes_list)
        average_reward = total_reward / len(episodes_list) if episodes_list else 0.0

        if self.config.verbose:
            print(f"Training finished after {len(episodes_list)} episodes: {stopping_reason}")

        return TrainingResult(
            episodes=episodes_list,
            total_episodes=len(episodes_list),
            successful_episodes=successful_episodes,
            average_reward=average_reward,
            final_epsilon=self.exploration_rate,
            cancelled=cancelled,
            stopping_reason=stopping_reason,
        )

    # Greedy playback

    async def run_greedy_playback(self, sink: Optional[SnapshotSink] = None,
                                  pacer: Optional[Pacer] = None,
                                  max_steps: Optional[int] = None) -> PlaybackResult:
        """
        Follow the best known action from the start cell until a terminal cell.

        An action that would leave the grid gets ``boundary_penalty`` added to its
        Q-value and the lizard stays put, so the next iteration picks something
        else. Exceeding ``max_steps`` is reported in the result rather than raised.
        """
        pacer = pacer or no_delay
        step_cap = self.config.playback_max_steps if max_steps is None else max_steps
        self.cancel_token.reset()
        self.reset_position(sink)

        result = PlaybackResult(path=[self.position], final_position=self.position)

        while True:
            if self.grid.is_terminal(self.position):
                result.reached_terminal = True
                result.stopping_reason = f"Reached terminal cell {self.position}"
                break
            if result.steps_taken >= step_cap:
                result.stopping_reason = (
                    f"No terminal cell reached within {step_cap} steps, policy looks undertrained"
                )
                print(f"Warning: {result.stopping_reason}")
                break
            if self.cancel_token.cancelled:
                result.stopping_reason = "Playback stopped by user"
                break

            await pacer()

            state = self.state
            action = self.q_table.best_action(state)
            move = self.grid.attempt_move(self.position, action)
            if move.moved:
                self.position = move.position
                self.cumulative_reward += move.reward
                result.total_reward += move.reward
                result.path.append(self.position)
            else:
                self.q_table.penalize(state, action, self.config.boundary_penalty)
                result.penalties_applied += 1

            self.step_count += 1
            self.last_action = action
            result.steps_taken += 1
            self._emit(sink, self.snapshot())

        result.final_position = self.position
        if self.config.verbose:
            print(f"Playback finished after {result.steps_taken} steps: {result.stopping_reason}")
        return result

    # Synchronous entry points for hosts without an event loop

    def train(self, episodes: Optional[int] = None, sink: Optional[SnapshotSink] = None,
              pacer: Optional[Pacer] = None,
              episode_callback: Optional[Callable[[Episode], None]] = None) -> TrainingResult:
        return asyncio.run(self.run_training(episodes, sink, pacer, episode_callback))

    def play_greedy(self, sink: Optional[SnapshotSink] = None, pacer: Optional[Pacer] = None,
                    max_steps: Optional[int] = None) -> PlaybackResult:
        return asyncio.run(self.run_greedy_playback(sink, pacer, max_steps))

    # Checkpoint support

    def get_state(self) -> Dict:
        """Get current session state for checkpointing."""
        return {
            "exploration_rate": self.exploration_rate,
            "episodes_completed": self.episodes_completed,
            "q_table": self.q_table.to_list(),
            "training_history": [
                {
                    "number": ep.number,
                    "steps": ep.steps,
                    "total_reward": ep.total_reward,
                    "outcome": ep.outcome.name,
                    "final_position": list(ep.final_position),
                    "epsilon_used": ep.epsilon_used,
                    "elapsed_time": ep.elapsed_time,
                }
                for ep in self.training_history
            ],
        }

    def load_state(self, state: Dict):
        """
        Load session state from a checkpoint.

        Everything is parsed and validated before the session is touched, so a
        malformed state raises and leaves the session as it was.
        """
        exploration_rate = float(state.get("exploration_rate", self.config.exploration_start))
        episodes_completed = int(state.get("episodes_completed", 0))
        staged = QTable(self.config.learning_rate, self.config.discount_rate)
        if "q_table" in state:
            staged.from_array(state["q_table"])

        history = []
        for ep_data in state.get("training_history", []):
            history.append(Episode(
                number=ep_data.get("number", 0),
                steps=ep_data.get("steps", 0),
                total_reward=ep_data.get("total_reward", 0.0),
                outcome=EpisodeState[ep_data.get("outcome", "TERMINATED_BY_STEP_LIMIT")],
                final_position=tuple(ep_data.get("final_position", START_POSITION)),
                epsilon_used=ep_data.get("epsilon_used", 0.0),
                elapsed_time=ep_data.get("elapsed_time", 0.0),
            ))

        self.q_table.from_array(staged.as_array())
        self.exploration_rate = exploration_rate
        self.episodes_completed = episodes_completed
        self.training_history = history
        self._reset_episode()
