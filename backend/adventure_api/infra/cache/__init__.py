"""Cache backends."""
from adventure_api.domain.adventure.repositories import CacheClient
from adventure_api.infra.cache.memory import MemoryCache
from adventure_api.infra.cache.redis_cache import RedisCache


def build_cache(settings) -> CacheClient:
    """Cache selected by ``cache_backend`` ("memory" or "redis")."""
    if settings.cache_backend.strip().lower() == "redis":
        return RedisCache(settings.redis_url)
    return MemoryCache()


__all__ = ["CacheClient", "MemoryCache", "RedisCache", "build_cache"]
