"""Plain-text rendering of simulation snapshots."""

from typing import List
from ..domain.types import Action, Snapshot, REWARDS, BIRD_CELL, CRICKETS_CELL, GRID_SIZE

# Cell labels by reward
CELL_LABELS = {
    1.0: "c",    # one cricket
    -1.0: ".",   # empty
    -10.0: "B",  # bird
    10.0: "C",   # five crickets
}

LIZARD_LABEL = "L"


def render_board(snapshot: Snapshot) -> str:
    """Draw the 3x3 board with the lizard on its current cell."""
    rows: List[str] = []
    for y in range(GRID_SIZE):
        cells = []
        for x in range(GRID_SIZE):
            if (x, y) == snapshot.position:
                cells.append(LIZARD_LABEL)
            else:
                cells.append(CELL_LABELS.get(REWARDS[y][x], "?"))
        rows.append(" ".join(cells))
    return "\n".join(rows)


def render_q_table(snapshot: Snapshot) -> str:
    """Q-values with two decimals, one row per state."""
    header = "state " + " ".join(f"{action.name:>8}" for action in Action)
    lines = [header]
    for state, values in enumerate(snapshot.q_table):
        cells = " ".join(f"{float(value):8.2f}" for value in values)
        lines.append(f"{state:>5} {cells}")
    return "\n".join(lines)


def render_snapshot(snapshot: Snapshot, show_q_table: bool = True) -> str:
    status = (f"episode {snapshot.episode} step {snapshot.step_count} "
              f"reward {snapshot.cumulative_reward:+.0f} epsilon {snapshot.exploration_rate:.3f}")
    parts = [status, render_board(snapshot)]
    if show_q_table:
        parts.append(render_q_table(snapshot))
    return "\n".join(parts)


def describe_cell(x: int, y: int) -> str:
    if (x, y) == BIRD_CELL:
        return "bird"
    if (x, y) == CRICKETS_CELL:
        return "five crickets"
    return "one cricket" if REWARDS[y][x] > 0 else "empty"
