import numpy as np
import pytest

from lizard.domain.qtable import QTable
from lizard.domain.types import Action


def test_starts_as_nine_by_four_zeros():
    table = QTable()
    values = table.as_array()
    assert values.shape == (9, 4)
    assert not values.any()


def test_best_action_ties_go_to_left():
    table = QTable()
    for state in range(9):
        assert table.best_action(state) is Action.LEFT


def test_best_action_ties_go_to_lowest_index():
    table = QTable()
    table.from_array(np.array([[0.0, 5.0, 5.0, 1.0]] + [[0.0] * 4] * 8))
    assert table.best_action(0) is Action.RIGHT
    assert table.max_value(0) == 5.0


def test_update_uses_reward_passed_and_discounted_max():
    table = QTable()
    assert table.update(6, Action.RIGHT, -1.0, 7) == pytest.approx(-0.7)

    table.set_value(7, Action.LEFT, 2.0)
    # 0.3 * -0.7 + 0.7 * (-2 + 0.99 * 2)
    assert table.update(6, Action.RIGHT, -2.0, 7) == pytest.approx(-0.224)
    assert table.value_of(6, Action.RIGHT) == pytest.approx(-0.224)


def test_update_with_same_state_pair():
    table = QTable()
    table.set_value(6, Action.LEFT, 1.0)
    # 0.3 * 1 + 0.7 * (0 + 0.99 * 1)
    assert table.update(6, Action.LEFT, 0.0, 6) == pytest.approx(0.993)


def test_values_may_exceed_reward_magnitudes():
    table = QTable()
    for _ in range(50):
        table.update(7, Action.RIGHT, 9.0, 7)
    assert table.value_of(7, Action.RIGHT) > 10.0


def test_penalize():
    table = QTable()
    assert table.penalize(3, Action.UP, -100.0) == -100.0
    assert table.best_action(3) is Action.LEFT


def test_as_array_is_a_copy():
    table = QTable()
    values = table.as_array()
    values[0, 0] = 42.0
    assert table.value_of(0, Action.LEFT) == 0.0


def test_rejects_bad_shapes_and_states():
    table = QTable()
    with pytest.raises(ValueError):
        table.from_array(np.zeros((3, 3)))
    with pytest.raises(ValueError):
        table.value_of(9, Action.LEFT)


def test_reset():
    table = QTable()
    table.set_value(4, Action.DOWN, 3.0)
    table.reset()
    assert table.value_of(4, Action.DOWN) == 0.0
