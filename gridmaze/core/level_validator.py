"""
Level Validator for Grid Maze.

Checks a submitted grid before it becomes a level. Checks run in order and
the first failure wins:

    1. Grid is present and non-empty
    2. At most max_rows rows, each at most max_cols long
    3. Every row is as long as the first (rectangular)
    4. Every cell is 0, 1, 2 or 3
    5. There is a marker cell
    6. There is only one marker cell (unless allow_multiple_markers)
"""

from dataclasses import dataclass
from typing import Any, Optional

from gridmaze.core.maze_engine import CellType

MAX_ROWS = 100
MAX_COLS = 100


class LevelValidationError(Exception):
    """Exception raised when a submitted grid is rejected."""

    pass


@dataclass
class ParsedLevel:
    """Validated level data ready for storage."""

    grid: list[list[int]]
    rows: int
    cols: int
    marker_row: int
    marker_col: int


def find_marker(grid: list[list[int]]) -> Optional[tuple[int, int]]:
    """
    Locate the marker by scanning rows top-to-bottom, columns left-to-right.

    The last marker in scan order wins, so on a grid with several marker
    cells this returns the bottom-right-most one.

    Returns:
        (row, col) of the marker, or None if there is none.
    """
    position = None
    for row, cells in enumerate(grid):
        for col, cell in enumerate(cells):
            if cell == CellType.MARKER:
                position = (row, col)
    return position


def count_markers(grid: list[list[int]]) -> int:
    return sum(1 for cells in grid for cell in cells if cell == CellType.MARKER)


def validate_level_grid(
    grid: Any,
    max_rows: int = MAX_ROWS,
    max_cols: int = MAX_COLS,
    allow_multiple_markers: bool = False,
) -> None:
    """
    Validate a submitted grid.

    Args:
        grid: Grid as a list of rows of cell codes.
        max_rows: Maximum number of rows.
        max_cols: Maximum number of columns.
        allow_multiple_markers: Accept grids with more than one marker cell
            (the last one in scan order becomes the marker).

    Raises:
        LevelValidationError: With the message of the first violated rule.
    """
    if grid is None or len(grid) == 0:
        raise LevelValidationError("Missing grid: a level needs at least one row.")

    if len(grid) > max_rows:
        raise LevelValidationError(f"Levels cannot have more than {max_rows} rows.")

    if any(len(row) > max_cols for row in grid):
        raise LevelValidationError(f"Levels cannot have more than {max_cols} columns.")

    first_row_length = len(grid[0])
    if any(len(row) != first_row_length for row in grid):
        raise LevelValidationError("Levels must be rectangular in size.")

    if not all(CellType.is_valid(cell) for row in grid for cell in row):
        raise LevelValidationError("Levels can only have the following values: 0,1,2,3")

    markers = count_markers(grid)
    if markers == 0:
        raise LevelValidationError("Levels must have a marker (2) start position.")

    if markers > 1 and not allow_multiple_markers:
        raise LevelValidationError(
            f"Levels must have exactly one marker (2), found {markers}."
        )


def parse_level_grid(
    grid: Any,
    max_rows: int = MAX_ROWS,
    max_cols: int = MAX_COLS,
    allow_multiple_markers: bool = False,
) -> ParsedLevel:
    """
    Validate a grid and derive its dimensions and marker position.

    Raises:
        LevelValidationError: If the grid is invalid.
    """
    validate_level_grid(
        grid,
        max_rows=max_rows,
        max_cols=max_cols,
        allow_multiple_markers=allow_multiple_markers,
    )

    cells = [list(row) for row in grid]
    marker_row, marker_col = find_marker(cells)

    if allow_multiple_markers:
        # Only the winning marker stays a marker so the grid keeps its invariant
        for r, row in enumerate(cells):
            for c, cell in enumerate(row):
                if cell == CellType.MARKER and (r, c) != (marker_row, marker_col):
                    cells[r][c] = CellType.OPEN.value

    return ParsedLevel(
        grid=cells,
        rows=len(cells),
        cols=len(cells[0]),
        marker_row=marker_row,
        marker_col=marker_col,
    )
