"""
User Repository

Customer statistics and the admin profile edited from the settings form.
"""

from uuid import UUID

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.database.models import Profile, ProfileRole
from src.schemas.orders import AdminProfile, CountStats, ProfileUpdate
from .exceptions import ProfileNotFoundError, RepositoryError

logger = structlog.get_logger(__name__)


class UserRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_stats(self) -> CountStats:
        """Number of customer accounts"""
        query = select(func.count(Profile.id)).where(Profile.role == ProfileRole.CUSTOMER.value)
        try:
            async with self._session_factory() as session:
                total = (await session.execute(query)).scalar()
        except SQLAlchemyError as e:
            logger.error("Failed to count customers", error=str(e))
            raise RepositoryError("Could not load user statistics") from e
        return CountStats(total=total or 0)

    async def get_profile(self, profile_id: UUID) -> AdminProfile:
        try:
            async with self._session_factory() as session:
                row = await session.get(Profile, profile_id)
        except SQLAlchemyError as e:
            logger.error("Failed to load profile", profile_id=str(profile_id), error=str(e))
            raise RepositoryError("Could not load profile") from e

        if row is None:
            raise ProfileNotFoundError(profile_id)
        return AdminProfile.model_validate(row)

    async def update_profile(self, profile_id: UUID, data: ProfileUpdate) -> AdminProfile:
        try:
            async with self._session_factory() as session, session.begin():
                row = await session.get(Profile, profile_id)
                if row is None:
                    raise ProfileNotFoundError(profile_id)
                for field, value in data.model_dump().items():
                    setattr(row, field, value)
                await session.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to update profile", profile_id=str(profile_id), error=str(e))
            raise RepositoryError("Could not update profile") from e

        logger.info("Profile updated", profile_id=str(profile_id))
        return AdminProfile.model_validate(row)
