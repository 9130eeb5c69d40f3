"""Shared fixtures for the lizard tests."""

import pytest

from lizard.domain.qlearning import TrainingSession
from lizard.domain.types import LizardConfig


class ScriptedRNG:
    """RNG double that replays fixed draws and action picks in a cycle."""

    def __init__(self, draws=(0.5,), actions=(0,)):
        self.draws = list(draws)
        self.actions = list(actions)
        self._draw_idx = 0
        self._action_idx = 0

    def random(self) -> float:
        value = self.draws[self._draw_idx % len(self.draws)]
        self._draw_idx += 1
        return value

    def randint(self, a: int, b: int) -> int:
        value = self.actions[self._action_idx % len(self.actions)]
        self._action_idx += 1
        assert a <= value <= b
        return value


@pytest.fixture
def quiet_config():
    return LizardConfig(verbose=False, step_delay_ms=0, playback_delay_ms=0)


@pytest.fixture
def goal_rng():
    """Always explores and always picks RIGHT: (0,2) -> (1,2) -> (2,2)."""
    return ScriptedRNG(draws=[0.0], actions=[1])


@pytest.fixture
def exploit_rng():
    """Draws above any rate below 0.99, so the policy exploits."""
    return ScriptedRNG(draws=[0.99], actions=[0])


@pytest.fixture
def goal_session(quiet_config, goal_rng):
    return TrainingSession(quiet_config, rng=goal_rng)


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtCore import QCoreApplication
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


def wait_for(signal, timeout_ms=10000):
    """Spin a local Qt event loop until ``signal`` fires; return its arguments."""
    from PySide6.QtCore import QEventLoop, QTimer

    loop = QEventLoop()
    received = []

    def on_emit(*args):
        received.append(args)
        loop.quit()

    signal.connect(on_emit)
    QTimer.singleShot(timeout_ms, loop.quit)
    loop.exec()
    signal.disconnect(on_emit)
    assert received, "signal was not emitted in time"
    return received[0]
