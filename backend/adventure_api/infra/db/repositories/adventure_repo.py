"""Adventure store on async SQLAlchemy."""
import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from adventure_api.domain.adventure.models import (
    Adventure,
    AdventurePhoto,
    AdventureReaction,
    AdventureStatus,
    Participant,
)
from adventure_api.domain.adventure.services import AdventureStore
from adventure_api.domain.common.errors import ConflictError
from adventure_api.domain.common.types import utcnow
from adventure_api.infra.db.models.adventure import (
    AdventureModel,
    AdventureParticipantModel,
    AdventurePhotoModel,
    AdventureReactionModel,
    AdventureStatusEnum,
)

logger = logging.getLogger(__name__)


class SqlAdventureStore(AdventureStore):
    """Adventure store implementation. Each mutation commits once."""

    def __init__(self, session: AsyncSession, now: Callable[[], datetime] = utcnow):
        self.session = session
        self.now = now

    async def _get_model(self, adventure_id: str) -> Optional[AdventureModel]:
        result = await self.session.execute(
            select(AdventureModel)
            .where(AdventureModel.id == adventure_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _exists(self, adventure_id: str) -> bool:
        result = await self.session.execute(
            select(AdventureModel.id).where(AdventureModel.id == adventure_id)
        )
        return result.scalar_one_or_none() is not None

    async def create_adventure(self, adventure: Adventure, participants: list[Participant]) -> Adventure:
        """Insert the adventure and its membership rows in one transaction."""
        model = AdventureModel.from_entity(adventure)
        model.participants = [
            AdventureParticipantModel(user_id=p.id, position=position, joined_at=adventure.created_at)
            for position, p in enumerate(participants)
        ]
        self.session.add(model)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning("Adventure insert rejected by constraint: %s", e.orig)
            raise ConflictError("Adventure could not be created; share token already in use") from e
        return await self.find_by_id(adventure.id)

    async def update_adventure(self, adventure: Adventure) -> Optional[Adventure]:
        model = await self._get_model(adventure.id)
        if model is None:
            return None
        model.title = adventure.title
        model.description = adventure.description
        model.status = AdventureStatusEnum(adventure.status.value)
        model.summary = adventure.summary
        model.starts_at = adventure.starts_at
        model.updated_at = adventure.updated_at
        await self.session.commit()
        return model.to_entity()

    async def find_by_id(self, adventure_id: str) -> Optional[Adventure]:
        model = await self._get_model(adventure_id)
        return model.to_entity() if model else None

    async def find_by_share_token(self, token: str) -> Optional[Adventure]:
        result = await self.session.execute(
            select(AdventureModel)
            .where(AdventureModel.share_token == token)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def list_by_status(self, user_id: str, status: AdventureStatus) -> list[Adventure]:
        result = await self.session.execute(
            select(AdventureModel)
            .join(AdventureParticipantModel, AdventureParticipantModel.adventure_id == AdventureModel.id)
            .where(
                AdventureParticipantModel.user_id == user_id,
                AdventureModel.status == AdventureStatusEnum(status.value),
            )
            .order_by(AdventureModel.created_at.desc(), AdventureModel.id)
            .execution_options(populate_existing=True)
        )
        return [model.to_entity() for model in result.scalars().unique().all()]

    async def list_participants(self, adventure_id: str) -> Optional[list[Participant]]:
        model = await self._get_model(adventure_id)
        if model is None:
            return None
        return [p.to_participant() for p in model.participants]

    async def add_participant(self, adventure_id: str, participant: Participant) -> Optional[Adventure]:
        model = await self._get_model(adventure_id)
        if model is None:
            return None
        if any(p.user_id == participant.id for p in model.participants):
            return model.to_entity()

        now = self.now()
        model.participants.append(
            AdventureParticipantModel(
                user_id=participant.id,
                position=max((p.position for p in model.participants), default=-1) + 1,
                joined_at=now,
            )
        )
        model.updated_at = now
        try:
            await self.session.commit()
        except IntegrityError:
            # Concurrent join of the same user; the other insert won.
            await self.session.rollback()
        return await self.find_by_id(adventure_id)

    async def create_photo(self, photo: AdventurePhoto) -> Optional[AdventurePhoto]:
        if not await self._exists(photo.adventure_id):
            return None
        model = AdventurePhotoModel.from_entity(photo)
        self.session.add(model)
        await self.session.commit()
        return photo.model_copy(deep=True)

    async def list_photos(self, adventure_id: str) -> Optional[list[AdventurePhoto]]:
        if not await self._exists(adventure_id):
            return None
        result = await self.session.execute(
            select(AdventurePhotoModel)
            .where(AdventurePhotoModel.adventure_id == adventure_id)
            .order_by(AdventurePhotoModel.created_at, AdventurePhotoModel.id)
        )
        return [model.to_entity() for model in result.scalars().all()]

    async def delete_photo(self, adventure_id: str, photo_id: str) -> bool:
        result = await self.session.execute(
            delete(AdventurePhotoModel).where(
                AdventurePhotoModel.adventure_id == adventure_id,
                AdventurePhotoModel.id == photo_id,
            )
        )
        await self.session.commit()
        return (result.rowcount or 0) > 0

    async def add_reaction(self, reaction: AdventureReaction) -> Optional[AdventureReaction]:
        """Delete the user's previous reaction and insert the new one in one commit."""
        if not await self._exists(reaction.adventure_id):
            return None
        await self.session.execute(
            delete(AdventureReactionModel).where(
                AdventureReactionModel.adventure_id == reaction.adventure_id,
                AdventureReactionModel.user_id == reaction.user_id,
            )
        )
        model = AdventureReactionModel.from_entity(reaction)
        self.session.add(model)
        await self.session.commit()
        return model.to_entity()

    async def remove_reaction(self, adventure_id: str, user_id: str, emoji: str) -> bool:
        result = await self.session.execute(
            delete(AdventureReactionModel).where(
                AdventureReactionModel.adventure_id == adventure_id,
                AdventureReactionModel.user_id == user_id,
                AdventureReactionModel.emoji == emoji,
            )
        )
        await self.session.commit()
        return (result.rowcount or 0) > 0

    async def list_reactions(self, adventure_id: str) -> Optional[list[AdventureReaction]]:
        if not await self._exists(adventure_id):
            return None
        result = await self.session.execute(
            select(AdventureReactionModel)
            .where(AdventureReactionModel.adventure_id == adventure_id)
            .order_by(AdventureReactionModel.created_at, AdventureReactionModel.id)
        )
        return [model.to_entity() for model in result.scalars().all()]
