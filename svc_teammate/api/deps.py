from __future__ import annotations

from fastapi import Depends, Request

from svc_teammate.config import Settings, get_settings
from svc_teammate.db import peek_pool
from svc_teammate.repos.analytics_repo import AnalyticsRepo
from svc_teammate.repos.generated_images_repo import GeneratedImagesRepo
from svc_teammate.repos.generation_history_repo import GenerationHistoryRepo
from svc_teammate.repos.teammates_repo import TeammatesRepo
from svc_teammate.services.analytics_service import AnalyticsService
from svc_teammate.services.generation_orchestrator import GenerationOrchestrator
from svc_teammate.services.providers.registry import ProviderRegistry


def get_registry(request: Request) -> ProviderRegistry:
    registry = getattr(request.app.state, "providers", None)
    if registry is None:
        raise RuntimeError("Provider registry not initialized")
    return registry


# Repos get whatever pool exists; with no DATABASE_URL they fail on first use,
# after the orchestrator has already reported the missing configuration.
def get_images_repo() -> GeneratedImagesRepo:
    return GeneratedImagesRepo(peek_pool())


def get_history_repo() -> GenerationHistoryRepo:
    return GenerationHistoryRepo(peek_pool())


def get_teammates_repo() -> TeammatesRepo:
    return TeammatesRepo(peek_pool())


def get_analytics_repo() -> AnalyticsRepo:
    return AnalyticsRepo(peek_pool())


def get_orchestrator(
    settings: Settings = Depends(get_settings),
    registry: ProviderRegistry = Depends(get_registry),
    images_repo: GeneratedImagesRepo = Depends(get_images_repo),
    history_repo: GenerationHistoryRepo = Depends(get_history_repo),
    teammates_repo: TeammatesRepo = Depends(get_teammates_repo),
) -> GenerationOrchestrator:
    return GenerationOrchestrator(settings, registry, images_repo, history_repo, teammates_repo)


def get_analytics_service(
    settings: Settings = Depends(get_settings),
    repo: AnalyticsRepo = Depends(get_analytics_repo),
) -> AnalyticsService:
    return AnalyticsService(settings, repo)
