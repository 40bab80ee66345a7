from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from chat_service.database import dialect_insert
from chat_service.errors import NotFoundError
from chat_service.models.api.users import UpsertUserRequest, UserResponse
from chat_service.models.db._utils import utcnow
from chat_service.models.db.user_model import UserModel
from chat_service.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[UserModel, UserResponse]):
    """Repository for user operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, UserModel)

    async def get_many(self, ids: List[UUID]) -> List[UserResponse]:
        """Get the users with the given IDs; unknown IDs are skipped."""
        if not ids:
            return []
        query = select(self.model_class).where(self.model_class.id.in_(ids))
        result = await self.db.execute(query)
        return [self._to_pydantic(db_model) for db_model in result.scalars().all()]

    async def upsert(self, user_id: UUID, profile: UpsertUserRequest) -> UserResponse:
        """Insert the user, or refresh their profile fields if they already exist."""
        now = utcnow()
        values = profile.model_dump()
        statement = dialect_insert(self.db, UserModel.__table__).values(
            id=user_id, created_at=now, updated_at=now, is_online=False, **values
        )
        statement = statement.on_conflict_do_update(
            index_elements=["id"], set_={**values, "updated_at": now}
        )
        async with self.transaction():
            await self.db.execute(statement)

        user = await self.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")
        return user

    async def update_online_status(
        self, user_id: UUID, is_online: bool
    ) -> Optional[UserResponse]:
        """Record presence; returns None when the user does not exist."""
        now = utcnow()
        statement = (
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(is_online=is_online, last_seen=now, updated_at=now)
        )
        async with self.transaction():
            result = await self.db.execute(statement)

        if result.rowcount == 0:
            return None
        return await self.get_by_id(user_id)

    def _to_pydantic(self, db_model: Any) -> UserResponse:
        """Convert SQLAlchemy UserModel to Pydantic UserResponse."""
        return UserResponse(
            id=db_model.id,
            email=db_model.email,
            first_name=db_model.first_name,
            last_name=db_model.last_name,
            profile_image_url=db_model.profile_image_url,
            is_online=db_model.is_online,
            last_seen=db_model.last_seen,
            created_at=db_model.created_at,
            updated_at=db_model.updated_at,
        )
