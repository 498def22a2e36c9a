"""
Admin CRUD over news, trainings and users.
"""

from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel

from shared.logging import get_logger
from shared.errors import NotFoundError
from ..adapters import DataStore, Order
from ..caching import QueryCache
from ..models import (
    News, NewsCreate, NewsUpdate,
    Training, TrainingCreate, TrainingUpdate,
    UserProfile, UserRole,
)
from .invalidation import invalidate_news, invalidate_training, invalidate_user


def _values(payload: Union[BaseModel, Mapping[str, Any]], partial: bool = False) -> dict:
    if isinstance(payload, BaseModel):
        return payload.model_dump(exclude_unset=partial)
    return dict(payload)


class AdminRepository:
    """Data access behind the admin screens.

    Listing and by-id reads are cached; every write goes straight to the
    store and invalidates afterwards.
    """

    NEWS_TABLE = "news"
    TRAININGS_TABLE = "trainings"
    USERS_TABLE = "profiles"

    def __init__(self, store: DataStore, cache: QueryCache, ttl: Optional[float] = None):
        self.store = store
        self.cache = cache
        self.logger = get_logger("portal.repositories.admin")

        self.get_news = cache.cached(self.get_news, ttl=ttl)
        self.get_news_by_id = cache.cached(self.get_news_by_id, ttl=ttl)
        self.get_trainings = cache.cached(self.get_trainings, ttl=ttl)
        self.get_training_by_id = cache.cached(self.get_training_by_id, ttl=ttl)
        self.get_users = cache.cached(self.get_users, ttl=ttl)
        self.get_user_by_id = cache.cached(self.get_user_by_id, ttl=ttl)

    # News

    async def get_news(self) -> List[News]:
        rows = await self.store.select(self.NEWS_TABLE, order=Order("date", ascending=False))
        return [News.model_validate(row) for row in rows]

    async def get_news_by_id(self, news_id: str) -> Optional[News]:
        row = await self.store.select(self.NEWS_TABLE, {"id": news_id}, single=True)
        return News.model_validate(row) if row is not None else None

    async def create_news(self, news: Union[NewsCreate, Mapping[str, Any]]) -> News:
        row = await self.store.insert(self.NEWS_TABLE, _values(news))
        invalidate_news(self.cache)
        self.logger.info("News created", news_id=row.get("id"))
        return News.model_validate(row)

    async def update_news(self, news_id: str, news: Union[NewsUpdate, Mapping[str, Any]]) -> News:
        row = await self.store.update(self.NEWS_TABLE, {"id": news_id}, _values(news, partial=True))
        if row is None:
            raise NotFoundError("News", news_id)
        invalidate_news(self.cache, news_id)
        self.logger.info("News updated", news_id=news_id)
        return News.model_validate(row)

    async def delete_news(self, news_id: str) -> None:
        await self.store.delete(self.NEWS_TABLE, {"id": news_id})
        invalidate_news(self.cache, news_id)
        self.logger.info("News deleted", news_id=news_id)

    # Trainings

    async def get_trainings(self) -> List[Training]:
        rows = await self.store.select(self.TRAININGS_TABLE, order=Order("date", ascending=True))
        return [Training.model_validate(row) for row in rows]

    async def get_training_by_id(self, training_id: str) -> Optional[Training]:
        row = await self.store.select(self.TRAININGS_TABLE, {"id": training_id}, single=True)
        return Training.model_validate(row) if row is not None else None

    async def create_training(self, training: Union[TrainingCreate, Mapping[str, Any]]) -> Training:
        row = await self.store.insert(self.TRAININGS_TABLE, _values(training))
        invalidate_training(self.cache)
        self.logger.info("Training created", training_id=row.get("id"))
        return Training.model_validate(row)

    async def update_training(
        self,
        training_id: str,
        training: Union[TrainingUpdate, Mapping[str, Any]],
    ) -> Training:
        row = await self.store.update(self.TRAININGS_TABLE, {"id": training_id}, _values(training, partial=True))
        if row is None:
            raise NotFoundError("Training", training_id)
        invalidate_training(self.cache, training_id)
        self.logger.info("Training updated", training_id=training_id)
        return Training.model_validate(row)

    async def delete_training(self, training_id: str) -> None:
        await self.store.delete(self.TRAININGS_TABLE, {"id": training_id})
        invalidate_training(self.cache, training_id)
        self.logger.info("Training deleted", training_id=training_id)

    # Users

    async def get_users(self) -> List[UserProfile]:
        rows = await self.store.select(self.USERS_TABLE, order=Order("created_at", ascending=False))
        return [UserProfile.model_validate(row) for row in rows]

    async def get_user_by_id(self, user_id: str) -> Optional[UserProfile]:
        row = await self.store.select(self.USERS_TABLE, {"id": user_id}, single=True)
        return UserProfile.model_validate(row) if row is not None else None

    async def update_user_role(self, user_id: str, role: Union[UserRole, str]) -> UserProfile:
        role = UserRole(role)
        row = await self.store.update(self.USERS_TABLE, {"id": user_id}, {"role": role.value})
        if row is None:
            raise NotFoundError("User", user_id)
        invalidate_user(self.cache, user_id)
        self.logger.info("User role updated", user_id=user_id, role=role.value)
        return UserProfile.model_validate(row)
