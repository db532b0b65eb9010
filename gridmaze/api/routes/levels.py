"""Level routes for submitting, moving in and solving levels."""

from fastapi import APIRouter, HTTPException, Query, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from gridmaze.api.deps import DbSession, Levels
from gridmaze.config import get_settings
from gridmaze.core.level_validator import LevelValidationError
from gridmaze.schemas.level import (
    LevelDetail,
    LevelListItem,
    LevelListResponse,
    LevelSubmitRequest,
    MarkerPosition,
    MoveRequest,
    MoveResponse,
    SolutionResponse,
)
from gridmaze.services.level_locks import LevelBusyError
from gridmaze.services.level_service import LevelNotFoundError

settings = get_settings()
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

router = APIRouter(prefix="/levels", tags=["Levels"])


def _not_found(level_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Level not found: {level_id}",
    )


@router.get(
    "",
    response_model=LevelListResponse,
)
async def list_levels(
    db: DbSession,
    levels: Levels,
    limit: int = Query(50, ge=1, le=500, description="Maximum levels to return"),
    offset: int = Query(0, ge=0, description="Offset for pagination"),
) -> LevelListResponse:
    """List stored levels, oldest first.

    Grid data is not included - use GET /v1/levels/{id} for full details.
    """
    items, total = await levels.list_levels(db, limit=limit, offset=offset)
    return LevelListResponse(
        levels=[LevelListItem.model_validate(level) for level in items],
        total=total,
    )


@router.post(
    "/submit",
    response_model=LevelDetail,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(f"{settings.rate_limit_submissions}/minute")
async def submit_level(
    request: Request,
    level_data: LevelSubmitRequest,
    db: DbSession,
    levels: Levels,
) -> LevelDetail:
    """Submit a new level.

    The grid is validated and the marker start position is derived from it.
    """
    try:
        level = await levels.create_level(db, level_data.grid)
    except LevelValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    return LevelDetail.model_validate(level)


@router.get(
    "/{level_id}",
    response_model=LevelDetail,
)
async def get_level(
    level_id: int,
    db: DbSession,
    levels: Levels,
) -> LevelDetail:
    """Get a level with its current grid and marker position."""
    level = await levels.get_level(db, level_id)
    if not level:
        raise _not_found(level_id)

    return LevelDetail.model_validate(level)


@router.post(
    "/{level_id}/move",
    response_model=MoveResponse,
)
@limiter.limit(f"{settings.rate_limit_requests}/minute")
async def move(
    request: Request,
    level_id: int,
    move_data: MoveRequest,
    db: DbSession,
    levels: Levels,
) -> MoveResponse:
    """Move the marker one step.

    Moves on the same level are applied one at a time. Rejected moves
    (invalid direction, out of bounds, wall) leave the level unchanged.
    """
    try:
        snapshot = await levels.move_marker(db, level_id, move_data.direction)
    except LevelNotFoundError:
        raise _not_found(level_id)
    except LevelBusyError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )

    return MoveResponse(
        level_id=level_id,
        grid=snapshot.to_rows(),
        marker=MarkerPosition(row=snapshot.marker_row, col=snapshot.marker_col),
    )


@router.get(
    "/{level_id}/solution",
    response_model=SolutionResponse,
)
async def get_solution(
    level_id: int,
    db: DbSession,
    levels: Levels,
) -> SolutionResponse:
    """Get the shortest move sequence from the marker to an exit.

    An empty list means no exit is reachable. Read-only.
    """
    try:
        moves = await levels.find_shortest_solution(db, level_id)
    except LevelNotFoundError:
        raise _not_found(level_id)

    return SolutionResponse(level_id=level_id, moves=moves, length=len(moves))
