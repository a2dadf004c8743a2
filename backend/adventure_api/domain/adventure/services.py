"""Adventure domain services."""
import logging
from datetime import datetime
from typing import Any, Callable, Optional, Protocol

from pydantic import ValidationError as PydanticValidationError

from adventure_api.domain.adventure.models import (
    Adventure,
    AdventureCreate,
    AdventurePhoto,
    AdventureReaction,
    AdventureStatus,
    AdventureUpdate,
    AdventureWithMedia,
    Participant,
    ShareLink,
    SignedGetUrl,
    SignedPutUrl,
    fallback_username,
)
from adventure_api.domain.adventure.repositories import (
    AdventureWriter,
    CacheClient,
    FriendRepository,
    PhotoTransfer,
    StorageSigner,
    UserDirectory,
)
from adventure_api.domain.adventure.share_token import build_share_token
from adventure_api.domain.adventure.texts import (
    content_type_from_filename,
    template_description,
    template_summary,
)
from adventure_api.domain.common.types import generate_id, utcnow

logger = logging.getLogger(__name__)

LIST_CACHE_TTL_SECONDS = 30


def list_cache_key(status: AdventureStatus, user_id: str) -> str:
    """Cache key of a user's adventure list for one status bucket."""
    return f"adv:{status.value}:{user_id}"


def photo_object_key(adventure_id: str, filename: str) -> str:
    """Fresh object key under the adventure's namespace."""
    name = filename.replace("\\", "/").rsplit("/", 1)[-1] or "photo"
    return f"adventures/{adventure_id}/{generate_id()}/{name}"


def placeholder_photo_url(adventure_id: str) -> str:
    return f"https://placehold.co/800x600?text={adventure_id[:6]}"


class AdventureStore(Protocol):
    """Adventure persistence.

    Lookups that reference a missing adventure return None (lists included,
    so "not found" differs from "empty"); deletions return whether a row
    was removed.
    """

    async def create_adventure(self, adventure: Adventure, participants: list[Participant]) -> Adventure:
        """Insert adventure and membership rows atomically."""
        ...

    async def update_adventure(self, adventure: Adventure) -> Optional[Adventure]:
        """Full-row update by id; None if the id does not exist."""
        ...

    async def find_by_id(self, adventure_id: str) -> Optional[Adventure]:
        ...

    async def find_by_share_token(self, token: str) -> Optional[Adventure]:
        ...

    async def list_by_status(self, user_id: str, status: AdventureStatus) -> list[Adventure]:
        """Adventures with ``status`` where ``user_id`` is a participant."""
        ...

    async def list_participants(self, adventure_id: str) -> Optional[list[Participant]]:
        ...

    async def add_participant(self, adventure_id: str, participant: Participant) -> Optional[Adventure]:
        """Idempotent; re-adding a member returns the current adventure."""
        ...

    async def create_photo(self, photo: AdventurePhoto) -> Optional[AdventurePhoto]:
        ...

    async def list_photos(self, adventure_id: str) -> Optional[list[AdventurePhoto]]:
        ...

    async def delete_photo(self, adventure_id: str, photo_id: str) -> bool:
        ...

    async def add_reaction(self, reaction: AdventureReaction) -> Optional[AdventureReaction]:
        """Replace the user's previous reaction on the adventure atomically."""
        ...

    async def remove_reaction(self, adventure_id: str, user_id: str, emoji: str) -> bool:
        ...

    async def list_reactions(self, adventure_id: str) -> Optional[list[AdventureReaction]]:
        ...


class ParticipantResolver:
    """Maps user ids to participants via the user directory."""

    def __init__(self, users: UserDirectory):
        self.users = users

    async def resolve(self, user_id: str) -> Participant:
        user = await self.users.get_by_id(user_id)
        if user is None:
            return Participant(id=user_id, username=fallback_username(user_id))
        return Participant(id=user.id, username=user.username, avatar_url=user.avatar_url)

    async def resolve_many(self, user_ids: list[str]) -> list[Participant]:
        # Sequential: SQL directories share one session per request.
        return [await self.resolve(user_id) for user_id in user_ids]


class TemplateAdventureWriter:
    """Deterministic copy; default writer when no AI client is configured."""

    async def generate_adventure_description(self, title: str, participants: list[Participant]) -> str:
        return template_description(title, participants)

    async def generate_adventure_summary(
        self, title: str, participants: list[Participant], description: str
    ) -> str:
        return template_summary(title, participants, description)


class AdventureService:
    """Adventure lifecycle, membership, photos and reactions.

    Not-found and not-allowed outcomes are returned as None/False. AI and
    cache failures degrade to template copy and cache misses respectively.
    """

    def __init__(
        self,
        store: AdventureStore,
        users: UserDirectory,
        cache: CacheClient,
        signer: StorageSigner,
        transfer: Optional[PhotoTransfer] = None,
        writer: Optional[AdventureWriter] = None,
        friends: Optional[FriendRepository] = None,
        share_base_url: str = "http://localhost:3000",
        list_cache_ttl_seconds: int = LIST_CACHE_TTL_SECONDS,
        now: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.participants = ParticipantResolver(users)
        self.cache = cache
        self.signer = signer
        self.transfer = transfer
        self.writer: AdventureWriter = writer or TemplateAdventureWriter()
        self.friends = friends
        self.share_base_url = share_base_url.rstrip("/")
        self.list_cache_ttl_seconds = list_cache_ttl_seconds
        self.now = now

    # ---- lifecycle ----

    async def create_adventure(self, creator_id: str, data: AdventureCreate) -> Adventure:
        """Create an upcoming adventure with the creator first among participants."""
        creator = await self.participants.resolve(creator_id)
        friend_ids = [fid for fid in dict.fromkeys(data.friend_ids) if fid != creator_id]
        crew = [creator, *await self.participants.resolve_many(friend_ids)]

        adventure = Adventure.create(
            creator=creator,
            title=data.title,
            description=await self._describe(data.title, crew),
            share_token=build_share_token(),
            participants=crew,
            starts_at=data.starts_at,
            now=self.now(),
        )
        saved = await self.store.create_adventure(adventure, crew)
        await self._invalidate(saved)
        logger.info("Adventure %s created by %s with %d participants", saved.id, creator_id, len(crew))
        return saved

    async def list_by_status(self, user_id: str, status: AdventureStatus) -> list[Adventure]:
        """Read-through cached list; empty results are cached too."""
        key = list_cache_key(status, user_id)
        cached = await self._cache_get(key)
        if cached is not None:
            try:
                return [Adventure.model_validate(item) for item in cached]
            except (PydanticValidationError, TypeError) as e:
                logger.warning("Discarding malformed cache entry %s: %s", key, e)

        items = await self.store.list_by_status(user_id, status)
        await self._cache_set(key, [item.model_dump(mode="json") for item in items])
        return items

    async def get_by_id(self, adventure_id: str) -> Optional[Adventure]:
        return await self.store.find_by_id(adventure_id)

    async def get_with_media(self, adventure_id: str) -> Optional[AdventureWithMedia]:
        adventure = await self.store.find_by_id(adventure_id)
        if adventure is None:
            return None
        return await self._with_media(adventure)

    async def enrich_with_media(self, adventures: list[Adventure]) -> list[AdventureWithMedia]:
        return [await self._with_media(adventure) for adventure in adventures]

    async def update_adventure(self, adventure_id: str, patch: AdventureUpdate) -> Optional[Adventure]:
        """Merge set fields onto the current row.

        Status is not patchable: adventures are completed through
        ``complete_adventure`` only, and a summary is kept only once completed.
        """
        current = await self.store.find_by_id(adventure_id)
        if current is None:
            return None

        changes = {
            field: value
            for field, value in patch.model_dump(exclude_unset=True).items()
            if value is not None or field == "summary"
        }
        status = changes.pop("status", None)
        if status is not None and status is not current.status:
            logger.info("Ignoring status change of adventure %s to %s", adventure_id, status.value)
        if current.status is AdventureStatus.UPCOMING and changes.pop("summary", None) is not None:
            logger.info("Ignoring summary on upcoming adventure %s", adventure_id)

        return await self._save(current, changes)

    async def complete_adventure(
        self, adventure_id: str, requester_id: Optional[str] = None
    ) -> Optional[Adventure]:
        """Mark completed with an AI recap. Only the creator may complete when a requester is given."""
        adventure = await self.store.find_by_id(adventure_id)
        if adventure is None:
            return None
        if requester_id is not None and requester_id != adventure.creator_id:
            logger.info("User %s is not the creator of adventure %s; completion refused", requester_id, adventure_id)
            return None

        summary = await self._summarize(adventure)
        return await self._save(adventure, {"status": AdventureStatus.COMPLETED, "summary": summary})

    # ---- sharing and membership ----

    async def join_by_token(self, user_id: str, token: str) -> Optional[Adventure]:
        adventure = await self.store.find_by_share_token(token)
        if adventure is None:
            return None
        if adventure.has_participant(user_id):
            return adventure

        participant = await self.participants.resolve(user_id)
        updated = await self.store.add_participant(adventure.id, participant)
        if updated is not None:
            await self._invalidate(updated)
            logger.info("User %s joined adventure %s by share token", user_id, adventure.id)
        return updated

    async def get_share_token(self, adventure_id: str) -> Optional[ShareLink]:
        adventure = await self.store.find_by_id(adventure_id)
        if adventure is None:
            return None
        return ShareLink(
            token=adventure.share_token,
            url=f"{self.share_base_url}/join/{adventure.share_token}",
        )

    async def list_participants(self, adventure_id: str) -> Optional[list[Participant]]:
        return await self.store.list_participants(adventure_id)

    async def add_participant(self, adventure_id: str, user_id: str) -> Optional[list[Participant]]:
        participant = await self.participants.resolve(user_id)
        updated = await self.store.add_participant(adventure_id, participant)
        if updated is None:
            return None
        await self._invalidate(updated)
        return updated.participants

    async def list_friends(self, user_id: str) -> list[Participant]:
        """Friends as participants; empty when no friend provider is configured."""
        if self.friends is None:
            return []
        try:
            friends = await self.friends.list_by_user(user_id)
        except Exception as e:
            logger.warning("Friend list lookup failed for user %s: %s", user_id, e)
            return []
        return [Participant(id=f.id, username=f.name, avatar_url=f.avatar_url) for f in friends]

    # ---- photos ----

    async def upload_photo(
        self,
        adventure_id: str,
        uploader_id: str,
        caption: Optional[str] = None,
        photo_url: Optional[str] = None,
        content_type: Optional[str] = None,
        file: Optional[bytes] = None,
        filename: Optional[str] = None,
    ) -> Optional[AdventurePhoto]:
        """Attach a photo. Raw bytes go to storage first; a failed transfer persists nothing."""
        adventure = await self.store.find_by_id(adventure_id)
        if adventure is None:
            return None
        uploader = next((p for p in adventure.participants if p.id == uploader_id), None)
        if uploader is None:
            logger.info("User %s is not a participant of %s; upload refused", uploader_id, adventure_id)
            return None

        if file is not None:
            photo_url = await self._store_file(adventure_id, file, filename, content_type)
            if photo_url is None:
                return None

        photo = AdventurePhoto(
            id=generate_id(),
            adventure_id=adventure_id,
            url=photo_url or placeholder_photo_url(adventure_id),
            uploader=uploader,
            caption=caption,
            created_at=self.now(),
        )
        return await self.store.create_photo(photo)

    async def list_photos(self, adventure_id: str) -> Optional[list[AdventurePhoto]]:
        return await self.store.list_photos(adventure_id)

    async def delete_photo(
        self, adventure_id: str, photo_id: str, requester_id: Optional[str] = None
    ) -> bool:
        if requester_id is not None and not await self._is_participant(adventure_id, requester_id):
            return False
        return await self.store.delete_photo(adventure_id, photo_id)

    async def sign_photo_upload(
        self, adventure_id: str, filename: str, requester_id: Optional[str] = None
    ) -> Optional[SignedPutUrl]:
        adventure = await self.store.find_by_id(adventure_id)
        if adventure is None:
            return None
        if requester_id is not None and not adventure.has_participant(requester_id):
            return None
        key = photo_object_key(adventure_id, filename)
        try:
            return await self.signer.sign_put_url(key, content_type_from_filename(filename))
        except Exception as e:
            logger.warning("Signing upload URL for %s failed: %s", key, e)
            return None

    async def sign_photo_view(
        self, adventure_id: str, photo_id: str, requester_id: str
    ) -> Optional[SignedGetUrl]:
        """View URL for participants only; anything else looks like a missing photo."""
        if not await self._is_participant(adventure_id, requester_id):
            return None
        photos = await self.store.list_photos(adventure_id) or []
        photo = next((p for p in photos if p.id == photo_id), None)
        if photo is None:
            return None
        key = self.signer.key_for_url(photo.url)
        if key is None:
            return None
        try:
            return await self.signer.sign_get_url(key)
        except Exception as e:
            logger.warning("Signing view URL for %s failed: %s", key, e)
            return None

    # ---- reactions ----

    async def add_reaction(self, adventure_id: str, user_id: str, emoji: str) -> Optional[AdventureReaction]:
        if not await self._is_participant(adventure_id, user_id):
            return None
        reaction = AdventureReaction(
            id=generate_id(),
            adventure_id=adventure_id,
            user_id=user_id,
            emoji=emoji,
            created_at=self.now(),
        )
        return await self.store.add_reaction(reaction)

    async def remove_reaction(self, adventure_id: str, user_id: str, emoji: str) -> bool:
        if not await self._is_participant(adventure_id, user_id):
            return False
        return await self.store.remove_reaction(adventure_id, user_id, emoji)

    async def list_reactions(self, adventure_id: str) -> Optional[list[AdventureReaction]]:
        return await self.store.list_reactions(adventure_id)

    # ---- helpers ----

    async def _is_participant(self, adventure_id: str, user_id: str) -> bool:
        adventure = await self.store.find_by_id(adventure_id)
        return adventure is not None and adventure.has_participant(user_id)

    async def _save(self, current: Adventure, changes: dict[str, Any]) -> Optional[Adventure]:
        updated = current.model_copy(update={**changes, "updated_at": self.now()})
        persisted = await self.store.update_adventure(updated)
        if persisted is not None:
            await self._invalidate(persisted)
        return persisted

    async def _with_media(self, adventure: Adventure) -> AdventureWithMedia:
        photos = await self.store.list_photos(adventure.id) or []
        reactions = await self.store.list_reactions(adventure.id) or []
        return AdventureWithMedia(**adventure.model_dump(), photos=photos, reactions=reactions)

    async def _describe(self, title: str, participants: list[Participant]) -> str:
        try:
            text = await self.writer.generate_adventure_description(title, participants)
        except Exception as e:
            logger.warning("Description generation failed, using template: %s", e)
            text = None
        return (text or "").strip() or template_description(title, participants)

    async def _summarize(self, adventure: Adventure) -> str:
        try:
            text = await self.writer.generate_adventure_summary(
                adventure.title, adventure.participants, adventure.description
            )
        except Exception as e:
            logger.warning("Summary generation failed, using template: %s", e)
            text = None
        return (text or "").strip() or template_summary(
            adventure.title, adventure.participants, adventure.description
        )

    async def _store_file(
        self,
        adventure_id: str,
        data: bytes,
        filename: Optional[str],
        content_type: Optional[str],
    ) -> Optional[str]:
        """Upload bytes to a freshly signed key; returns the public URL or None."""
        if self.transfer is None:
            logger.warning("No photo transfer configured; rejecting raw upload for %s", adventure_id)
            return None
        key = photo_object_key(adventure_id, filename or "photo")
        content_type = content_type or content_type_from_filename(filename)
        try:
            signed = await self.signer.sign_put_url(key, content_type)
            await self.transfer.put(signed.upload_url, data, content_type)
        except Exception as e:
            logger.warning("Photo upload for adventure %s failed: %s", adventure_id, e)
            return None
        return signed.photo_url

    async def _invalidate(self, adventure: Adventure) -> None:
        """Drop both status lists of every participant."""
        for participant in adventure.participants:
            for status in AdventureStatus:
                await self._cache_delete(list_cache_key(status, participant.id))

    async def _cache_get(self, key: str) -> Optional[Any]:
        try:
            return await self.cache.get(key)
        except Exception as e:
            logger.warning("Cache get %s failed: %s", key, e)
            return None

    async def _cache_set(self, key: str, value: Any) -> None:
        try:
            await self.cache.set(key, value, self.list_cache_ttl_seconds)
        except Exception as e:
            logger.warning("Cache set %s failed: %s", key, e)

    async def _cache_delete(self, key: str) -> None:
        try:
            await self.cache.delete(key)
        except Exception as e:
            logger.warning("Cache delete %s failed: %s", key, e)
