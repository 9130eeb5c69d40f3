"""Training checkpoint management for the lizard simulation."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from ..domain.qlearning import TrainingSession
from ..domain.types import CRICKETS_CELL


@dataclass
class TrainingCheckpoint:
    """Saved state of a training session."""
    checkpoint_id: str
    timestamp: str
    episodes_completed: int
    exploration_rate: float
    success_rate: float
    session_state: Dict = field(default_factory=dict)


class CheckpointManager:
    """Saves and restores session state as JSON files."""

    def __init__(self, checkpoints_dir: str = "training_checkpoints"):
        self.checkpoints_dir = Path(checkpoints_dir)

    def _checkpoint_file(self, checkpoint_id: str) -> Path:
        return self.checkpoints_dir / f"{checkpoint_id}.json"

    def create_checkpoint(self, checkpoint_id: str, session: TrainingSession) -> str:
        """Write the session's Q-table, exploration rate and history to disk."""
        self.checkpoints_dir.mkdir(parents=True, exist_ok=True)

        session_state = session.get_state()
        history = session_state["training_history"]
        successful = sum(1 for ep in history if tuple(ep["final_position"]) == CRICKETS_CELL)
        success_rate = successful / len(history) if history else 0.0

        checkpoint_dict = {
            "checkpoint_id": checkpoint_id,
            "timestamp": datetime.now().isoformat(),
            "episodes_completed": session_state["episodes_completed"],
            "exploration_rate": session_state["exploration_rate"],
            "success_rate": success_rate,
            "session_state": session_state,
        }

        checkpoint_file = self._checkpoint_file(checkpoint_id)
        with open(checkpoint_file, 'w') as f:
            json.dump(checkpoint_dict, f, indent=2)

        return str(checkpoint_file)

    def load_checkpoint(self, checkpoint_id: str) -> Optional[TrainingCheckpoint]:
        """Load a training checkpoint, or None if it is missing or unreadable."""
        checkpoint_file = self._checkpoint_file(checkpoint_id)

        if not checkpoint_file.exists():
            return None

        try:
            with open(checkpoint_file, 'r') as f:
                data = json.load(f)

            return TrainingCheckpoint(
                checkpoint_id=data["checkpoint_id"],
                timestamp=data["timestamp"],
                episodes_completed=data["episodes_completed"],
                exploration_rate=data["exploration_rate"],
                success_rate=data.get("success_rate", 0.0),
                session_state=data["session_state"],
            )

        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            print(f"Error loading checkpoint {checkpoint_id}: {e}")
            return None

    def apply_checkpoint(self, checkpoint: TrainingCheckpoint, session: TrainingSession) -> bool:
        """Restore a checkpoint into an existing session."""
        try:
            session.load_state(checkpoint.session_state)
            return True
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            print(f"Error applying checkpoint {checkpoint.checkpoint_id}: {e}")
            return False

    def list_checkpoints(self) -> List[str]:
        """Checkpoint ids on disk, oldest first."""
        if not self.checkpoints_dir.exists():
            return []
        files = sorted(self.checkpoints_dir.glob("*.json"), key=lambda p: p.stat().st_mtime)
        return [p.stem for p in files]
