"""
Breadth-first shortest path from the marker to the nearest exit.

Neighbours are checked in direction-code order (left, up, right, down) and
the frontier is FIFO, so among equally short paths the solver always returns
the same one. The first exit discovered in that order wins, even if another
exit is just as close.
"""

from collections import deque
from dataclasses import dataclass
from typing import Optional

from gridmaze.core.maze_engine import DIRECTION_DELTAS, CellType, MazeGrid

Coordinate = tuple[int, int]


@dataclass(frozen=True)
class SearchNode:
    """A discovered cell and how the search reached it."""
    row: int
    col: int
    previous: Optional[Coordinate] = None
    direction: Optional[int] = None

    @property
    def key(self) -> Coordinate:
        return self.row, self.col


def find_shortest_path(grid: MazeGrid) -> list[int]:
    """
    Find the shortest move sequence from the marker to an exit.

    Args:
        grid: Snapshot to search. It is never modified.

    Returns:
        Direction codes from the marker to the exit, or an empty list if no
        exit is reachable.
    """
    start = SearchNode(grid.marker_row, grid.marker_col)
    queue = deque([start])
    # Doubles as the node arena for path reconstruction
    visited: dict[Coordinate, SearchNode] = {start.key: start}

    while queue:
        node = queue.popleft()

        for direction, (d_row, d_col) in enumerate(DIRECTION_DELTAS):
            row = node.row + d_row
            col = node.col + d_col

            if not grid.in_bounds(row, col):
                continue

            cell = grid.cell_at(row, col)
            if cell == CellType.WALL:
                continue

            if cell == CellType.EXIT:
                exit_node = SearchNode(row, col, node.key, direction)
                return _reconstruct_path(visited, exit_node)

            if cell == CellType.OPEN and (row, col) not in visited:
                neighbour = SearchNode(row, col, node.key, direction)
                visited[neighbour.key] = neighbour
                queue.append(neighbour)

    return []


def _reconstruct_path(visited: dict[Coordinate, SearchNode], end: SearchNode) -> list[int]:
    """Follow predecessor keys back to the start and return forward moves."""
    path = []
    node = end
    while node.previous is not None:
        path.append(node.direction)
        node = visited[node.previous]
    path.reverse()
    return path
