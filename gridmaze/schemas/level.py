"""Level schemas for request/response validation."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class LevelSubmitRequest(BaseModel):
    """Schema for submitting a new level.

    Structural rules (size, rectangularity, cell codes) are enforced by the
    level validator so the caller gets its specific message. Cells are taken as
    sent, so booleans and numeric strings are rejected there rather than coerced.
    """

    grid: Optional[list[list[Any]]] = None


class MarkerPosition(BaseModel):
    """Schema for the marker position."""

    row: int
    col: int


class LevelDetail(BaseModel):
    """Schema for detailed level response with grid data."""

    id: int
    grid: list[list[int]]
    rows: int
    cols: int
    marker_row: int
    marker_col: int
    created_at: datetime

    class Config:
        from_attributes = True


class LevelListItem(BaseModel):
    """Schema for level list item (without grid data)."""

    id: int
    rows: int
    cols: int
    marker_row: int
    marker_col: int
    created_at: datetime

    class Config:
        from_attributes = True


class LevelListResponse(BaseModel):
    """Schema for level list response."""

    levels: list[LevelListItem]
    total: int


class MoveRequest(BaseModel):
    """Schema for move request.

    Taken as sent. The engine reports any value other than the integers 0-3
    as invalid_direction, booleans and numeric strings included.
    """

    direction: Any = Field(..., description="0 left, 1 up, 2 right, 3 down")


class MoveResponse(BaseModel):
    """Schema for move response."""

    level_id: int
    grid: list[list[int]]
    marker: MarkerPosition


class SolutionResponse(BaseModel):
    """Schema for shortest solution response."""

    level_id: int
    moves: list[int]
    length: int
