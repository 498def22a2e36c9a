"""
Profile reads and writes.
"""

from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from shared.logging import get_logger
from shared.errors import NotFoundError
from ..adapters import DataStore
from ..caching import QueryCache
from ..models import UserProfile, UserProfileUpdate
from .invalidation import invalidate_user


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProfileRepository:
    """Cached access to the ``profiles`` table for the signed-in user."""

    TABLE = "profiles"

    def __init__(self, store: DataStore, cache: QueryCache, ttl: Optional[float] = None):
        self.store = store
        self.cache = cache
        self.logger = get_logger("portal.repositories.profiles")

        self.get_user_profile = cache.cached(self.get_user_profile, ttl=ttl)

    async def get_user_profile(self, user_id: str) -> Optional[UserProfile]:
        """Fetch a full profile; ``None`` when the user has no profile row."""
        row = await self.store.select(self.TABLE, {"id": user_id}, single=True)
        if row is None:
            return None
        return UserProfile.model_validate(row)

    async def update_user_profile(
        self,
        user_id: str,
        updates: Union[UserProfileUpdate, Mapping[str, Any]],
    ) -> UserProfile:
        """Apply ``updates`` and drop cached copies of the profile.

        Invalidation happens only after the write succeeds; a failed write
        leaves the cache untouched.
        """
        if isinstance(updates, UserProfileUpdate):
            values = updates.model_dump(exclude_unset=True)
        else:
            values = dict(updates)
        values["updated_at"] = _utcnow()

        row = await self.store.update(self.TABLE, {"id": user_id}, values)
        if row is None:
            raise NotFoundError("Profile", user_id)

        invalidate_user(self.cache, user_id)
        self.logger.info("Profile updated", user_id=user_id, fields=sorted(values))
        return UserProfile.model_validate(row)

    async def update_last_login(self, user_id: str) -> None:
        row = await self.store.update(self.TABLE, {"id": user_id}, {"last_login": _utcnow()})
        if row is None:
            raise NotFoundError("Profile", user_id)
        invalidate_user(self.cache, user_id)
