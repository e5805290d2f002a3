import json
from typing import Awaitable, Callable, Iterable, List, Optional

import redis.asyncio as redis
from clinic_scheduler.core.config import settings
from clinic_scheduler.core.logger import logger

RoleLoader = Callable[[str], Awaitable[List[str]]]


async def load_static_role_permissions(role: str) -> List[str]:
    return list(settings.ROLE_PERMISSIONS.get(role, []))


class PermissionCache:
    """Role -> permission lookups cached in Redis.

    Owned by the application (``app.state``) and injected where needed.
    Callers that change role definitions must call ``invalidate_role`` or
    ``invalidate_all``.
    """

    prefix = "perms:"

    def __init__(self, client, loader: RoleLoader = load_static_role_permissions, ttl: Optional[int] = None):
        self.redis = client
        self.loader = loader
        self.ttl = ttl if ttl is not None else settings.PERMISSION_CACHE_TTL_SECONDS

    @classmethod
    def from_url(cls, url: str = settings.REDIS_URL, **kwargs) -> "PermissionCache":
        client = redis.from_url(url, encoding="utf-8", decode_responses=True)
        return cls(client, **kwargs)

    async def get_role_permissions(self, role: str) -> List[str]:
        cached = await self.redis.get(f"{self.prefix}{role}")
        if cached is not None:
            return json.loads(cached)

        permissions = await self.loader(role)
        await self.redis.set(f"{self.prefix}{role}", json.dumps(permissions), ex=self.ttl)
        return permissions

    async def resolve(self, roles: Iterable[str]) -> frozenset:
        permissions = set()
        for role in roles:
            permissions.update(await self.get_role_permissions(role))
        return frozenset(permissions)

    async def invalidate_role(self, role: str):
        await self.redis.delete(f"{self.prefix}{role}")

    async def invalidate_all(self):
        keys = [key async for key in self.redis.scan_iter(match=f"{self.prefix}*")]
        if keys:
            await self.redis.delete(*keys)
        logger.info(f"Permission cache cleared ({len(keys)} roles)")

    async def close(self):
        await self.redis.close()
