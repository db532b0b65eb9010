"""Level service: submission, guarded moves and shortest-path queries."""

import logging
from typing import Any, Optional

from sqlalchemy import func, select, text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from gridmaze.config import get_settings
from gridmaze.core.level_validator import parse_level_grid
from gridmaze.core.maze_engine import MazeGrid, MoveError, apply_move
from gridmaze.core.path_solver import find_shortest_path
from gridmaze.models.level import Level
from gridmaze.services.level_locks import LevelBusyError, LevelLockRegistry

logger = logging.getLogger(__name__)

# PostgreSQL lock_not_available, raised when lock_timeout expires
LOCK_NOT_AVAILABLE = "55P03"


class LevelNotFoundError(Exception):
    """Raised when a level id does not exist."""

    def __init__(self, level_id: int):
        self.level_id = level_id
        super().__init__(f"Level not found: {level_id}")


class LevelService:
    """Service for managing levels."""

    def __init__(self, locks: Optional[LevelLockRegistry] = None):
        self.settings = get_settings()
        self.locks = locks or LevelLockRegistry()

    async def create_level(self, db: AsyncSession, grid: Any) -> Level:
        """
        Validate a grid and persist it as a new level.

        The marker position is derived from the grid, never supplied.

        Raises:
            LevelValidationError: If the grid is rejected. Nothing is stored.
        """
        parsed = parse_level_grid(
            grid,
            max_rows=self.settings.max_grid_rows,
            max_cols=self.settings.max_grid_cols,
            allow_multiple_markers=self.settings.allow_multiple_markers,
        )

        level = Level(
            grid=parsed.grid,
            rows=parsed.rows,
            cols=parsed.cols,
            marker_row=parsed.marker_row,
            marker_col=parsed.marker_col,
        )
        db.add(level)
        await db.commit()
        await db.refresh(level)

        logger.info(
            f"Created level {level.id} ({level.rows}x{level.cols}), "
            f"marker at ({level.marker_row}, {level.marker_col})"
        )
        return level

    async def get_level(self, db: AsyncSession, level_id: int) -> Optional[Level]:
        """Get level by ID."""
        query = select(Level).where(Level.id == level_id)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def list_levels(
        self,
        db: AsyncSession,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Level], int]:
        """List levels ordered by id, with the total count."""
        total = await db.scalar(select(func.count()).select_from(Level))
        query = select(Level).order_by(Level.id).limit(limit).offset(offset)
        result = await db.execute(query)
        return list(result.scalars().all()), total or 0

    async def move_marker(self, db: AsyncSession, level_id: int, direction: Any) -> MazeGrid:
        """
        Move the level's marker one step, atomically per level.

        The level is loaded, moved and saved while holding exclusive access to
        it: an in-process lock keyed by level id plus a row lock in the
        database. Both waits are bounded by move_lock_timeout_seconds, the
        row lock through PostgreSQL's lock_timeout. A caller that had to wait
        sees the state left by the previous mover. Any failure rolls back,
        leaving the stored level as it was.

        Args:
            db: Database session
            level_id: Level to move in
            direction: Direction code (0 left, 1 up, 2 right, 3 down)

        Returns:
            The moved snapshot

        Raises:
            LevelNotFoundError: If the level does not exist.
            MoveError: If the move is rejected.
            LevelBusyError: If the level stayed locked past the timeout.
        """
        timeout = self.settings.move_lock_timeout_seconds
        async with self.locks.hold(level_id, timeout=timeout):
            try:
                if db.get_bind().dialect.name == "postgresql":
                    await db.execute(
                        text(f"SET LOCAL lock_timeout = '{int(timeout * 1000)}ms'")
                    )

                query = (
                    select(Level)
                    .where(Level.id == level_id)
                    .with_for_update()
                    .execution_options(populate_existing=True)
                )
                result = await db.execute(query)
                level = result.scalar_one_or_none()

                if level is None:
                    raise LevelNotFoundError(level_id)

                snapshot = apply_move(MazeGrid.from_level(level), direction)

                level.grid = snapshot.to_rows()
                level.marker_row = snapshot.marker_row
                level.marker_col = snapshot.marker_col
                await db.commit()
            except MoveError as e:
                await db.rollback()
                logger.info(f"Rejected move {direction!r} on level {level_id}: {e}")
                raise
            except DBAPIError as e:
                await db.rollback()
                if getattr(e.orig, "sqlstate", None) == LOCK_NOT_AVAILABLE:
                    logger.warning(f"Row lock on level {level_id} not granted within {timeout}s")
                    raise LevelBusyError(level_id, timeout) from e
                raise
            except Exception:
                await db.rollback()
                raise

        logger.debug(
            f"Level {level_id}: moved {direction} to {snapshot.marker}\n{snapshot.visualize()}"
        )
        return snapshot

    async def find_shortest_solution(self, db: AsyncSession, level_id: int) -> list[int]:
        """
        Shortest move sequence from the level's current marker to an exit.

        Reads the latest stored state without taking the move lock.

        Raises:
            LevelNotFoundError: If the level does not exist.
        """
        level = await self.get_level(db, level_id)
        if level is None:
            raise LevelNotFoundError(level_id)

        moves = find_shortest_path(MazeGrid.from_level(level))
        logger.debug(f"Level {level_id}: shortest solution has {len(moves)} moves")
        return moves


# Global service instance
_level_service: Optional[LevelService] = None


def get_level_service() -> LevelService:
    """Get singleton level service."""
    global _level_service
    if _level_service is None:
        _level_service = LevelService()
    return _level_service
