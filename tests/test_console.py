import numpy as np

from lizard.domain.types import Snapshot
from lizard.ui.console import describe_cell, render_board, render_q_table, render_snapshot


def make_snapshot(position=(0, 2)):
    q_table = np.zeros((9, 4))
    q_table[6, 1] = 1.234
    return Snapshot(position=position, q_table=q_table, step_count=3,
                    cumulative_reward=-2.0, exploration_rate=0.5, episode=4)


def test_board_marks_lizard():
    assert render_board(make_snapshot()).splitlines() == [
        "c . .",
        ". B .",
        "L . C",
    ]


def test_q_table_has_two_decimals():
    lines = render_q_table(make_snapshot()).splitlines()
    assert len(lines) == 10
    assert "LEFT" in lines[0] and "DOWN" in lines[0]
    assert "1.23" in lines[7]


def test_snapshot_header():
    text = render_snapshot(make_snapshot(), show_q_table=False)
    assert text.splitlines()[0] == "episode 4 step 3 reward -2 epsilon 0.500"
    assert len(text.splitlines()) == 4


def test_describe_cell():
    assert describe_cell(1, 1) == "bird"
    assert describe_cell(2, 2) == "five crickets"
    assert describe_cell(0, 0) == "one cricket"
    assert describe_cell(1, 0) == "empty"
