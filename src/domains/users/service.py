"""User directory operations."""
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.users.models import User, UserRole

logger = logging.getLogger(__name__)


class UserService:
    """Service for user lookups and trainer association."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_id(self, user_id: uuid.UUID) -> User | None:
        """Get a user by ID.

        Args:
            user_id: The user's UUID

        Returns:
            The User object if found, None otherwise
        """
        result = await self.db.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def is_client_of_trainer(
        self,
        trainer_id: uuid.UUID,
        client_id: uuid.UUID,
    ) -> bool:
        """Check whether the client is associated with the trainer."""
        result = await self.db.execute(
            select(User.id).where(
                User.id == client_id,
                User.role == UserRole.CLIENT,
                User.trainer_id == trainer_id,
            )
        )
        return result.scalar_one_or_none() is not None

    def assign_trainer(self, client: User, trainer_id: uuid.UUID) -> None:
        """Associate a client with a trainer.

        The change is staged on the session only; the caller commits it
        together with whatever write triggered the assignment.
        """
        client.trainer_id = trainer_id
        self.db.add(client)
        logger.info("Assigned trainer %s to client %s", trainer_id, client.id)
