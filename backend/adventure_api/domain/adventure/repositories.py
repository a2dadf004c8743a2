"""Adventure domain collaborator protocols."""
from typing import Any, Optional, Protocol

from adventure_api.domain.adventure.models import (
    Friend,
    Participant,
    SignedGetUrl,
    SignedPutUrl,
    User,
)


class UserDirectory(Protocol):
    """User lookup."""

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        ...


class FriendRepository(Protocol):
    """Friend list provider."""

    async def list_by_user(self, user_id: str) -> list[Friend]:
        """List friends of a user."""
        ...


class CacheClient(Protocol):
    """Key-value cache. A TTL of None keeps the entry; 0 or less expires it at once."""

    async def get(self, key: str) -> Optional[Any]:
        ...

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...


class AdventureWriter(Protocol):
    """Generates adventure copy (AI or templates)."""

    async def generate_adventure_description(
        self, title: str, participants: list[Participant]
    ) -> str:
        ...

    async def generate_adventure_summary(
        self, title: str, participants: list[Participant], description: str
    ) -> str:
        ...


class StorageSigner(Protocol):
    """Object storage URL signer."""

    async def sign_put_url(self, key: str, content_type: Optional[str] = None) -> SignedPutUrl:
        ...

    async def sign_get_url(self, key: str) -> SignedGetUrl:
        ...

    def key_for_url(self, url: str) -> Optional[str]:
        """Object key for a URL served from this storage, else None."""
        ...


class PhotoTransfer(Protocol):
    """Moves raw photo bytes to a signed upload URL."""

    async def put(self, upload_url: str, data: bytes, content_type: Optional[str] = None) -> None:
        """Upload; raises on any transport or HTTP failure."""
        ...
