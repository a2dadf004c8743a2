"""Adventure API request/response models (camelCase on the wire)."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from adventure_api.domain.adventure.models import AdventureStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Responses
class ParticipantResponse(CamelModel):
    id: str
    username: str
    avatar_url: Optional[str] = None


class AdventureResponse(CamelModel):
    """Adventure response."""
    id: str
    creator_id: str
    title: str
    description: str
    status: AdventureStatus
    summary: Optional[str] = None
    share_token: str
    participants: List[ParticipantResponse]
    starts_at: datetime
    created_at: datetime
    updated_at: datetime


class PhotoResponse(CamelModel):
    id: str
    adventure_id: str
    url: str
    uploader: ParticipantResponse
    caption: Optional[str] = None
    created_at: datetime


class ReactionResponse(CamelModel):
    id: str
    adventure_id: str
    user_id: str
    emoji: str
    created_at: datetime


class AdventureWithMediaResponse(AdventureResponse):
    """Adventure with photos and reactions."""
    photos: List[PhotoResponse] = []
    reactions: List[ReactionResponse] = []


class AdventureListResponse(CamelModel):
    adventures: List[AdventureWithMediaResponse]


class AdventureDetailResponse(CamelModel):
    adventure: AdventureWithMediaResponse


class FriendsResponse(CamelModel):
    friends: List[ParticipantResponse]


class ParticipantsResponse(CamelModel):
    participants: List[ParticipantResponse]


class PhotosResponse(CamelModel):
    photos: List[PhotoResponse]


class ReactionsResponse(CamelModel):
    reactions: List[ReactionResponse]


class ShareTokenResponse(CamelModel):
    token: str
    url: str


class SignedUploadResponse(CamelModel):
    upload_url: str
    photo_url: str
    expires_in: int
    key: str


class SignedViewResponse(CamelModel):
    url: str
    expires_in: int
    key: str


# Requests
class CreateAdventureRequest(CamelModel):
    """Create adventure request."""
    title: str = Field(min_length=1, max_length=140)
    starts_at: Optional[datetime] = None
    friend_ids: List[str] = []


class UpdateAdventureRequest(CamelModel):
    """Partial update; omitted fields are left unchanged."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=140)
    description: Optional[str] = Field(default=None, max_length=512)
    status: Optional[AdventureStatus] = None
    summary: Optional[str] = Field(default=None, max_length=512)
    starts_at: Optional[datetime] = None


class AddParticipantRequest(CamelModel):
    user_id: str = Field(min_length=1)


class CreatePhotoRequest(CamelModel):
    """Attach a photo by URL (already uploaded via a signed URL) or a placeholder."""
    photo_url: Optional[str] = None
    caption: Optional[str] = Field(default=None, max_length=160)
    content_type: Optional[str] = None


class SignPhotoRequest(CamelModel):
    filename: str = Field(min_length=1, max_length=255)


class AddReactionRequest(CamelModel):
    emoji: str = Field(min_length=1, max_length=8)
