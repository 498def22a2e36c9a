"""
Portal service for the Finlogic website.

Serves profile and admin content reads through the shared query cache and
routes writes straight to the data store, invalidating afterwards.
"""

import re
from typing import Dict, List, Optional

from fastapi import Body, Response

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import NotFoundError, ValidationError
from shared.logging import set_user_context

from .adapters import DataStore, SupabaseDataStore
from .caching import QueryCache
from .models import (
    InvalidateRequest,
    News, NewsCreate, NewsUpdate,
    RoleUpdateRequest,
    Training, TrainingCreate, TrainingUpdate,
    UserProfile, UserProfileUpdate,
)
from .repositories import AdminRepository, ProfileRepository


class PortalService(BaseService):
    """Portal data service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        data_store: Optional[DataStore] = None,
        cache: Optional[QueryCache] = None,
    ):
        super().__init__("portal", 8020, config=config)

        self.data_store = data_store or SupabaseDataStore(
            self.config.supabase_url,
            self.config.supabase_anon_key,
            schema=self.config.supabase_schema,
            timeout=self.config.data_store_timeout_seconds,
        )
        self.cache = cache or QueryCache(
            self.config.cache_default_ttl_seconds,
            metrics=self.metrics if self.config.enable_metrics else None,
        )
        self.profiles = ProfileRepository(
            self.data_store, self.cache, ttl=self.config.profile_cache_ttl_seconds
        )
        self.admin = AdminRepository(
            self.data_store, self.cache, ttl=self.config.content_cache_ttl_seconds
        )

        @self.app.on_event("startup")
        async def _startup():
            await self.start()

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.stop()

        self._setup_portal_routes()
        self._setup_profile_routes()
        self._setup_admin_routes()
        self._setup_cache_routes()

    def _setup_portal_routes(self):
        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "portal",
                "message": "Finlogic Portal - Portal Service",
                "version": "1.0.0",
                "capabilities": ["profiles", "admin", "query_cache"]
            }

    def _setup_profile_routes(self):
        @self.app.get("/profiles/{user_id}", response_model=UserProfile)
        async def get_profile(user_id: str):
            set_user_context(user_id)
            profile = await self.profiles.get_user_profile(user_id)
            if profile is None:
                raise NotFoundError("Profile", user_id)
            return profile

        @self.app.patch("/profiles/{user_id}", response_model=UserProfile)
        async def update_profile(user_id: str, updates: UserProfileUpdate):
            set_user_context(user_id)
            return await self.profiles.update_user_profile(user_id, updates)

        @self.app.post("/profiles/{user_id}/last-login", status_code=204)
        async def record_login(user_id: str):
            set_user_context(user_id)
            await self.profiles.update_last_login(user_id)
            return Response(status_code=204)

    def _setup_admin_routes(self):
        # News

        @self.app.get("/admin/news", response_model=List[News])
        async def list_news():
            return await self.admin.get_news()

        @self.app.post("/admin/news", response_model=News, status_code=201)
        async def create_news(news: NewsCreate):
            return await self.admin.create_news(news)

        @self.app.get("/admin/news/{news_id}", response_model=News)
        async def get_news(news_id: str):
            news = await self.admin.get_news_by_id(news_id)
            if news is None:
                raise NotFoundError("News", news_id)
            return news

        @self.app.put("/admin/news/{news_id}", response_model=News)
        async def update_news(news_id: str, news: NewsUpdate):
            return await self.admin.update_news(news_id, news)

        @self.app.delete("/admin/news/{news_id}", status_code=204)
        async def delete_news(news_id: str):
            await self.admin.delete_news(news_id)
            return Response(status_code=204)

        # Trainings

        @self.app.get("/admin/trainings", response_model=List[Training])
        async def list_trainings():
            return await self.admin.get_trainings()

        @self.app.post("/admin/trainings", response_model=Training, status_code=201)
        async def create_training(training: TrainingCreate):
            return await self.admin.create_training(training)

        @self.app.get("/admin/trainings/{training_id}", response_model=Training)
        async def get_training(training_id: str):
            training = await self.admin.get_training_by_id(training_id)
            if training is None:
                raise NotFoundError("Training", training_id)
            return training

        @self.app.put("/admin/trainings/{training_id}", response_model=Training)
        async def update_training(training_id: str, training: TrainingUpdate):
            return await self.admin.update_training(training_id, training)

        @self.app.delete("/admin/trainings/{training_id}", status_code=204)
        async def delete_training(training_id: str):
            await self.admin.delete_training(training_id)
            return Response(status_code=204)

        # Users

        @self.app.get("/admin/users", response_model=List[UserProfile])
        async def list_users():
            return await self.admin.get_users()

        @self.app.get("/admin/users/{user_id}", response_model=UserProfile)
        async def get_user(user_id: str):
            user = await self.admin.get_user_by_id(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return user

        @self.app.put("/admin/users/{user_id}/role", response_model=UserProfile)
        async def update_user_role(user_id: str, request: RoleUpdateRequest):
            return await self.admin.update_user_role(user_id, request.role)

    def _setup_cache_routes(self):
        @self.app.get("/cache/stats")
        async def cache_stats():
            """Query cache statistics."""
            stats = self.cache.stats().to_dict()
            stats["pending_reads"] = self.cache.pending_reads
            stats["default_ttl_seconds"] = self.cache.store.default_ttl
            return stats

        @self.app.delete("/cache")
        async def clear_cache():
            removed = self.cache.clear()
            return {"cleared": removed}

        @self.app.post("/cache/invalidate")
        async def invalidate_cache(request: InvalidateRequest = Body(...)):
            try:
                removed = self.cache.invalidate_pattern(request.pattern)
            except re.error as exc:
                raise ValidationError(
                    "Invalid cache key pattern",
                    details={"pattern": request.pattern, "error": str(exc)},
                )
            return {"pattern": request.pattern, "invalidated": removed}

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check portal service dependencies."""
        try:
            healthy = await self.data_store.health_check()
        except Exception:
            healthy = False
        return {"data_store": "ok" if healthy else "error"}

    async def start(self):
        await self.data_store.start()
        self.logger.info("Portal service started", cache_default_ttl=self.cache.store.default_ttl)

    async def stop(self):
        await self.data_store.stop()
        self.logger.info("Portal service stopped")


def create_app():
    """Create portal service application."""
    service = PortalService()
    return service.app


if __name__ == "__main__":
    service = PortalService()
    service.run()
