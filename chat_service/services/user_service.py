import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from chat_service.errors import NotFoundError, ValidationError
from chat_service.models.api.users import UpsertUserRequest, UserResponse
from chat_service.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    """Service for the authenticated user's profile and presence."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)

    async def get_user(self, user_id: UUID) -> UserResponse:
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"User with ID {user_id} not found")
        return user

    async def sync_user(self, user_id: UUID, profile: UpsertUserRequest) -> UserResponse:
        """Create or refresh the user record from identity-provider claims."""
        try:
            return await self.user_repo.upsert(user_id, profile)
        except IntegrityError as e:
            # The only unique column besides the key is email
            raise ValidationError("Email is already in use") from e

    async def update_status(self, user_id: UUID, is_online: bool) -> UserResponse:
        """Record the user as online or offline and stamp last_seen."""
        user = await self.user_repo.update_online_status(user_id, is_online)
        if not user:
            raise NotFoundError(f"User with ID {user_id} not found")
        logger.debug("User %s is now %s", user_id, "online" if is_online else "offline")
        return user
