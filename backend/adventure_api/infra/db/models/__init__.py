"""Database models."""
from adventure_api.infra.db.models.user import UserModel
from adventure_api.infra.db.models.friend import FriendModel
from adventure_api.infra.db.models.adventure import (
    AdventureModel,
    AdventureParticipantModel,
    AdventurePhotoModel,
    AdventureReactionModel,
    AdventureStatusEnum,
)

__all__ = [
    "UserModel",
    "FriendModel",
    "AdventureModel",
    "AdventureParticipantModel",
    "AdventurePhotoModel",
    "AdventureReactionModel",
    "AdventureStatusEnum",
]
