"""Request-scoped database sessions."""
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from adventure_api.infra.db import base


async def get_db() -> AsyncIterator[Optional[AsyncSession]]:
    """Yield a session, or None when no engine is configured (tests, memory store)."""
    if base.AsyncSessionLocal is None:
        yield None
        return
    async with base.AsyncSessionLocal() as session:
        yield session
