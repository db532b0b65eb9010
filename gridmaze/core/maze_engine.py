"""
Grid Maze Engine

Core maze logic including:
- Cell and direction codes
- In-memory grid snapshots with a cached marker position
- Single-step marker moves with bounds and wall checks

Grid Format (list of rows of integer cell codes):
    0 = Open path
    1 = Wall (impassable)
    2 = Marker (the player, exactly one per maze)
    3 = Exit

Direction codes:
    0 = left, 1 = up, 2 = right, 3 = down
"""

import copy
from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class CellType(IntEnum):
    """Types of cells in the maze."""
    OPEN = 0
    WALL = 1
    MARKER = 2
    EXIT = 3

    @classmethod
    def is_valid(cls, value: Any) -> bool:
        """Check whether a raw value is a cell code."""
        # bool is an int subclass, but True/False are not cell codes
        if isinstance(value, bool) or not isinstance(value, int):
            return False
        return value in cls._value2member_map_


class Direction(IntEnum):
    """Movement directions.

    The order matters: the solver checks neighbours in exactly this order.
    """
    LEFT = 0
    UP = 1
    RIGHT = 2
    DOWN = 3

    @property
    def delta(self) -> tuple[int, int]:
        """Get (row_delta, col_delta) for this direction."""
        return DIRECTION_DELTAS[self.value]

    @classmethod
    def from_code(cls, code: Any) -> "Direction":
        """
        Convert a raw direction code to a Direction.

        Raises:
            InvalidDirectionError: If code is not one of 0, 1, 2, 3.
        """
        if isinstance(code, bool) or not isinstance(code, int):
            raise InvalidDirectionError(code)
        try:
            return cls(code)
        except ValueError:
            raise InvalidDirectionError(code) from None


# Indexed by direction code
DIRECTION_DELTAS: tuple[tuple[int, int], ...] = (
    (0, -1),  # left
    (-1, 0),  # up
    (0, 1),   # right
    (1, 0),   # down
)


class MoveError(Exception):
    """Base exception for rejected moves."""

    code = "invalid_move"


class InvalidDirectionError(MoveError):
    """Raised when a direction code is not 0-3."""

    code = "invalid_direction"

    def __init__(self, direction: Any):
        self.direction = direction
        super().__init__(
            f"Invalid move: direction must be one of 0 (left), 1 (up), "
            f"2 (right), 3 (down), got {direction!r}."
        )


class OutOfBoundsError(MoveError):
    """Raised when a move would leave the grid."""

    code = "out_of_bounds"

    def __init__(self, row: int, col: int):
        self.row = row
        self.col = col
        super().__init__(f"Invalid move: ({row}, {col}) is out of bounds.")


class WallCollisionError(MoveError):
    """Raised when a move would walk into a wall."""

    code = "wall_collision"

    def __init__(self, row: int, col: int):
        self.row = row
        self.col = col
        super().__init__(f"Invalid move: hit a wall at ({row}, {col}).")


@dataclass
class MazeGrid:
    """
    One snapshot of a maze: the cell grid plus cached marker coordinates.

    The cache and the grid must never diverge. Only apply_move() relocates
    the marker, and it updates both in the same step.
    """
    cells: list[list[int]]
    marker_row: int
    marker_col: int

    @classmethod
    def from_level(cls, level: Any) -> "MazeGrid":
        """Build a snapshot from a persisted level, copying its grid."""
        return cls(
            cells=copy.deepcopy(level.grid),
            marker_row=level.marker_row,
            marker_col=level.marker_col,
        )

    @property
    def row_count(self) -> int:
        return len(self.cells)

    def col_count(self, row: int) -> int:
        return len(self.cells[row])

    def in_bounds(self, row: int, col: int) -> bool:
        """True iff (row, col) lies inside the grid."""
        return 0 <= row < self.row_count and 0 <= col < self.col_count(row)

    def cell_at(self, row: int, col: int) -> int:
        """Get the cell code at (row, col). Callers must bounds-check first."""
        return self.cells[row][col]

    @property
    def marker(self) -> tuple[int, int]:
        return self.marker_row, self.marker_col

    def copy(self) -> "MazeGrid":
        return MazeGrid(
            cells=[list(row) for row in self.cells],
            marker_row=self.marker_row,
            marker_col=self.marker_col,
        )

    def to_rows(self) -> list[list[int]]:
        """Plain nested lists, safe to hand to the persistence layer."""
        return [list(row) for row in self.cells]

    def visualize(self) -> str:
        """ASCII rendering used in debug logs."""
        symbols = {
            CellType.OPEN: ".",
            CellType.WALL: "X",
            CellType.MARKER: "@",
            CellType.EXIT: "E",
        }
        return "\n".join(
            "".join(symbols.get(cell, "?") for cell in row) for row in self.cells
        )


def apply_move(grid: MazeGrid, direction: Any) -> MazeGrid:
    """
    Move the marker one step. Mutates the snapshot in place.

    Walking onto an exit is allowed and simply relocates the marker there.

    Args:
        grid: Snapshot to mutate.
        direction: Direction code (0 left, 1 up, 2 right, 3 down).

    Returns:
        The same, mutated snapshot.

    Raises:
        InvalidDirectionError: If direction is not a valid code.
        OutOfBoundsError: If the target cell is outside the grid.
        WallCollisionError: If the target cell is a wall.
    """
    d_row, d_col = Direction.from_code(direction).delta
    new_row = grid.marker_row + d_row
    new_col = grid.marker_col + d_col

    if not grid.in_bounds(new_row, new_col):
        raise OutOfBoundsError(new_row, new_col)

    if grid.cell_at(new_row, new_col) == CellType.WALL:
        raise WallCollisionError(new_row, new_col)

    grid.cells[new_row][new_col] = CellType.MARKER.value
    grid.cells[grid.marker_row][grid.marker_col] = CellType.OPEN.value
    grid.marker_row = new_row
    grid.marker_col = new_col
    return grid


# Sample level used by the docs and tests
TUTORIAL_LEVEL = [
    [1, 1, 1, 3, 1],
    [1, 0, 0, 0, 1],
    [1, 2, 1, 0, 1],
    [1, 0, 0, 0, 1],
    [1, 1, 1, 1, 1],
]
