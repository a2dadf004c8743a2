"""Friend list repository implementation."""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from adventure_api.domain.adventure.models import Friend
from adventure_api.domain.adventure.repositories import FriendRepository
from adventure_api.infra.db.models.friend import FriendModel


class FriendRepositoryImpl(FriendRepository):
    """Friend list repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_by_user(self, user_id: str) -> list[Friend]:
        """List friends of a user, oldest connection first."""
        result = await self.session.execute(
            select(FriendModel)
            .where(FriendModel.user_id == user_id)
            .order_by(FriendModel.connected_at, FriendModel.id)
        )
        return [model.to_entity() for model in result.scalars().all()]
