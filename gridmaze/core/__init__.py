# Core module
from .maze_engine import (
    CellType,
    Direction,
    MazeGrid,
    MoveError,
    InvalidDirectionError,
    OutOfBoundsError,
    WallCollisionError,
    apply_move,
)
from .level_validator import (
    LevelValidationError,
    ParsedLevel,
    find_marker,
    validate_level_grid,
    parse_level_grid,
)
from .path_solver import SearchNode, find_shortest_path

__all__ = [
    "CellType",
    "Direction",
    "MazeGrid",
    "MoveError",
    "InvalidDirectionError",
    "OutOfBoundsError",
    "WallCollisionError",
    "apply_move",
    "LevelValidationError",
    "ParsedLevel",
    "find_marker",
    "validate_level_grid",
    "parse_level_grid",
    "SearchNode",
    "find_shortest_path",
]
