"""API dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gridmaze.db.database import get_db
from gridmaze.services.level_service import LevelService, get_level_service

# Type aliases for cleaner route signatures
DbSession = Annotated[AsyncSession, Depends(get_db)]
Levels = Annotated[LevelService, Depends(get_level_service)]
