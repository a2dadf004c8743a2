"""API dependencies."""
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Cookie, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from adventure_api.domain.adventure.models import User
from adventure_api.domain.adventure.repositories import CacheClient, UserDirectory
from adventure_api.domain.adventure.services import AdventureService
from adventure_api.infra.cache import build_cache
from adventure_api.infra.db.repositories.adventure_repo import SqlAdventureStore
from adventure_api.infra.db.repositories.friend_repo import FriendRepositoryImpl
from adventure_api.infra.db.repositories.user_repo import UserRepositoryImpl
from adventure_api.infra.db.session import get_db
from adventure_api.infra.memory.adventure_store import InMemoryAdventureStore
from adventure_api.infra.memory.users import InMemoryFriendRepository, InMemoryUserDirectory
from adventure_api.infra.security.jwt import decode_token
from adventure_api.infra.storage.s3_signer import S3Signer
from adventure_api.infra.storage.transfer import HttpPhotoTransfer
from adventure_api.infra.vendors.llm import build_adventure_writer
from adventure_api.settings import settings

__all__ = [
    "MemoryBackends",
    "get_adventure_service",
    "get_current_user",
    "get_db",
    "get_user_directory",
]

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/v1/auth/login", auto_error=False)


@dataclass
class MemoryBackends:
    """Process-local store and directories used when store_backend=memory."""

    store: InMemoryAdventureStore = field(default_factory=InMemoryAdventureStore)
    users: InMemoryUserDirectory = field(default_factory=InMemoryUserDirectory)
    friends: InMemoryFriendRepository = field(default_factory=InMemoryFriendRepository)


def get_memory_backends(request: Request) -> MemoryBackends:
    state = request.app.state
    if getattr(state, "memory", None) is None:
        state.memory = MemoryBackends()
    return state.memory


def get_cache(request: Request) -> CacheClient:
    """One cache per app, created on first use when the lifespan did not set it."""
    state = request.app.state
    if getattr(state, "cache", None) is None:
        state.cache = build_cache(settings)
    return state.cache


def _get_signer(request: Request) -> S3Signer:
    state = request.app.state
    if getattr(state, "signer", None) is None:
        state.signer = S3Signer.from_settings(settings)
    return state.signer


def _get_writer(request: Request):
    state = request.app.state
    if not hasattr(state, "writer"):
        state.writer = build_adventure_writer(settings)
    return state.writer


def _require_session(db: Optional[AsyncSession]) -> AsyncSession:
    if db is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database is not configured",
        )
    return db


async def get_user_directory(
    request: Request,
    db: Optional[AsyncSession] = Depends(get_db),
) -> UserDirectory:
    if settings.uses_memory_store:
        return get_memory_backends(request).users
    return UserRepositoryImpl(_require_session(db))


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    auth: Optional[str] = Cookie(default=None),
    users: UserDirectory = Depends(get_user_directory),
) -> User:
    """Get current authenticated user from the bearer header or the ``auth`` cookie."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    raw = token or auth
    if not raw:
        raise credentials_exception

    payload = decode_token(raw)
    if payload is None:
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception

    user = await users.get_by_id(user_id)
    if user is None:
        raise credentials_exception

    return user


async def get_adventure_service(
    request: Request,
    db: Optional[AsyncSession] = Depends(get_db),
    users: UserDirectory = Depends(get_user_directory),
) -> AdventureService:
    """Service wired to the configured store backend."""
    if settings.uses_memory_store:
        memory = get_memory_backends(request)
        store, friends = memory.store, memory.friends
    else:
        session = _require_session(db)
        store, friends = SqlAdventureStore(session), FriendRepositoryImpl(session)

    return AdventureService(
        store=store,
        users=users,
        cache=get_cache(request),
        signer=_get_signer(request),
        transfer=HttpPhotoTransfer(timeout=settings.photo_upload_timeout_seconds),
        writer=_get_writer(request),
        friends=friends,
        share_base_url=settings.app_public_url,
        list_cache_ttl_seconds=settings.adventure_list_cache_ttl_seconds,
    )
