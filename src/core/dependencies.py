"""
FastAPI dependency injection functions.
The database manager is owned by the app; each request gets its own session,
repository and service.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.infra.database import get_async_session
from src.infra.repository.user_repository import UserRepository
from src.core.service.user.user_service import UserService


async def get_user_repository(session: AsyncSession = Depends(get_async_session)) -> UserRepository:
    """Get user repository with SQLAlchemy session dependency."""
    return UserRepository(session)


async def get_user_service(user_repository: UserRepository = Depends(get_user_repository)) -> UserService:
    """Get user service with repository dependency."""
    return UserService(user_repository)
