"""In-process adventure store.

Holds everything in instance dicts, so every instance is isolated. Values
are copied on the way in and out; callers never share state with the store.
"""
import logging
from datetime import datetime
from typing import Callable, Optional

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

logger = logging.getLogger(__name__)


class InMemoryAdventureStore(AdventureStore):
    """Adventure store backed by dicts keyed on adventure id."""

    def __init__(self, now: Callable[[], datetime] = utcnow):
        self.now = now
        self._adventures: dict[str, Adventure] = {}
        self._photos: dict[str, list[AdventurePhoto]] = {}
        self._reactions: dict[str, list[AdventureReaction]] = {}

    async def create_adventure(self, adventure: Adventure, participants: list[Participant]) -> Adventure:
        if any(a.share_token == adventure.share_token for a in self._adventures.values()):
            raise ConflictError("Adventure could not be created; share token already in use")
        stored = adventure.model_copy(update={"participants": list(participants)}, deep=True)
        self._adventures[stored.id] = stored
        self._photos[stored.id] = []
        self._reactions[stored.id] = []
        return stored.model_copy(deep=True)

    async def update_adventure(self, adventure: Adventure) -> Optional[Adventure]:
        current = self._adventures.get(adventure.id)
        if current is None:
            return None
        # Membership changes go through add_participant only.
        stored = adventure.model_copy(update={"participants": current.participants}, deep=True)
        self._adventures[stored.id] = stored
        return stored.model_copy(deep=True)

    async def find_by_id(self, adventure_id: str) -> Optional[Adventure]:
        adventure = self._adventures.get(adventure_id)
        return adventure.model_copy(deep=True) if adventure else None

    async def find_by_share_token(self, token: str) -> Optional[Adventure]:
        for adventure in self._adventures.values():
            if adventure.share_token == token:
                return adventure.model_copy(deep=True)
        return None

    async def list_by_status(self, user_id: str, status: AdventureStatus) -> list[Adventure]:
        matches = [
            a for a in self._adventures.values()
            if a.status is status and a.has_participant(user_id)
        ]
        matches.sort(key=lambda a: a.created_at, reverse=True)
        return [a.model_copy(deep=True) for a in matches]

    async def list_participants(self, adventure_id: str) -> Optional[list[Participant]]:
        adventure = self._adventures.get(adventure_id)
        if adventure is None:
            return None
        return [p.model_copy() for p in adventure.participants]

    async def add_participant(self, adventure_id: str, participant: Participant) -> Optional[Adventure]:
        adventure = self._adventures.get(adventure_id)
        if adventure is None:
            return None
        if not adventure.has_participant(participant.id):
            adventure.participants.append(participant.model_copy())
            adventure.updated_at = self.now()
        return adventure.model_copy(deep=True)

    async def create_photo(self, photo: AdventurePhoto) -> Optional[AdventurePhoto]:
        if photo.adventure_id not in self._adventures:
            return None
        self._photos[photo.adventure_id].append(photo.model_copy(deep=True))
        return photo.model_copy(deep=True)

    async def list_photos(self, adventure_id: str) -> Optional[list[AdventurePhoto]]:
        if adventure_id not in self._adventures:
            return None
        return [p.model_copy(deep=True) for p in self._photos[adventure_id]]

    async def delete_photo(self, adventure_id: str, photo_id: str) -> bool:
        photos = self._photos.get(adventure_id)
        if not photos:
            return False
        remaining = [p for p in photos if p.id != photo_id]
        if len(remaining) == len(photos):
            return False
        self._photos[adventure_id] = remaining
        return True

    async def add_reaction(self, reaction: AdventureReaction) -> Optional[AdventureReaction]:
        if reaction.adventure_id not in self._adventures:
            return None
        others = [r for r in self._reactions[reaction.adventure_id] if r.user_id != reaction.user_id]
        self._reactions[reaction.adventure_id] = [*others, reaction.model_copy()]
        return reaction.model_copy()

    async def remove_reaction(self, adventure_id: str, user_id: str, emoji: str) -> bool:
        reactions = self._reactions.get(adventure_id)
        if not reactions:
            return False
        remaining = [r for r in reactions if not (r.user_id == user_id and r.emoji == emoji)]
        if len(remaining) == len(reactions):
            return False
        self._reactions[adventure_id] = remaining
        return True

    async def list_reactions(self, adventure_id: str) -> Optional[list[AdventureReaction]]:
        if adventure_id not in self._adventures:
            return None
        return [r.model_copy() for r in self._reactions[adventure_id]]
