import numpy as np

from lizard.domain.qlearning import TrainingSession
from lizard.domain.types import EpisodeState
from lizard.utils.checkpoint_manager import CheckpointManager


def test_save_and_restore_session(tmp_path, goal_session, quiet_config):
    goal_session.train(episodes=3)
    manager = CheckpointManager(str(tmp_path / "checkpoints"))

    path = manager.create_checkpoint("lizard_ep3", goal_session)
    assert (tmp_path / "checkpoints" / "lizard_ep3.json").exists()
    assert path.endswith("lizard_ep3.json")

    checkpoint = manager.load_checkpoint("lizard_ep3")
    assert checkpoint.episodes_completed == 3
    assert checkpoint.success_rate == 1.0

    restored = TrainingSession(quiet_config)
    assert manager.apply_checkpoint(checkpoint, restored)
    np.testing.assert_allclose(restored.q_table.as_array(), goal_session.q_table.as_array())
    assert restored.exploration_rate == goal_session.exploration_rate
    assert [ep.outcome for ep in restored.training_history] == [EpisodeState.TERMINATED_BY_GOAL] * 3


def test_missing_checkpoint(tmp_path):
    manager = CheckpointManager(str(tmp_path))
    assert manager.load_checkpoint("nope") is None
    assert manager.list_checkpoints() == []


def test_corrupt_checkpoint(tmp_path, capsys):
    (tmp_path / "broken.json").write_text("{not json")
    manager = CheckpointManager(str(tmp_path))
    assert manager.load_checkpoint("broken") is None
    assert "Error loading checkpoint broken" in capsys.readouterr().out


def test_bad_q_table_is_not_applied(tmp_path, goal_session, quiet_config):
    goal_session.train(episodes=3)
    manager = CheckpointManager(str(tmp_path))
    manager.create_checkpoint("bad", goal_session)
    checkpoint = manager.load_checkpoint("bad")
    checkpoint.session_state["q_table"] = [[0.0, 0.0]]

    target = TrainingSession(quiet_config)
    assert not manager.apply_checkpoint(checkpoint, target)

    # nothing from the rejected checkpoint leaks into the session
    assert target.exploration_rate == 1.0
    assert target.episodes_completed == 0
    assert target.training_history == []
    assert not target.q_table.as_array().any()


def test_bad_history_entry_is_not_applied(tmp_path, goal_session, quiet_config, capsys):
    goal_session.train(episodes=2)
    manager = CheckpointManager(str(tmp_path))
    manager.create_checkpoint("bad_history", goal_session)
    checkpoint = manager.load_checkpoint("bad_history")
    checkpoint.session_state["training_history"][1]["final_position"] = 5

    target = TrainingSession(quiet_config)
    assert not manager.apply_checkpoint(checkpoint, target)
    assert "Error applying checkpoint bad_history" in capsys.readouterr().out
    assert target.episodes_completed == 0
    assert not target.q_table.as_array().any()


def test_checkpoint_that_is_not_an_object(tmp_path, capsys):
    (tmp_path / "listed.json").write_text("[1, 2, 3]")
    manager = CheckpointManager(str(tmp_path))
    assert manager.load_checkpoint("listed") is None
    assert "Error loading checkpoint listed" in capsys.readouterr().out


def test_list_checkpoints(tmp_path, goal_session):
    manager = CheckpointManager(str(tmp_path))
    manager.create_checkpoint("first", goal_session)
    assert manager.list_checkpoints() == ["first"]
