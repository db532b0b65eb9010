"""Level model."""

from datetime import datetime

from sqlalchemy import JSON, Integer, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from gridmaze.db.database import Base


class Level(Base):
    """A persisted maze: the cell grid plus the cached marker position.

    grid and marker_row/marker_col are only ever written together, in the
    same transaction.
    """

    __tablename__ = "levels"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    grid: Mapped[list[list[int]]] = mapped_column(
        JSON,
        nullable=False,
    )
    rows: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    cols: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    marker_row: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    marker_col: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Level {self.id} {self.rows}x{self.cols} marker=({self.marker_row}, {self.marker_col})>"
