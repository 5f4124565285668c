from __future__ import annotations
from fastapi import APIRouter


def build_router() -> APIRouter:
    router = APIRouter()

    from svc_teammate.api.health import router as health_router
    from svc_teammate.api.routes.images import router as images_router
    from svc_teammate.api.routes.teammates import router as teammates_router
    from svc_teammate.api.routes.analytics import router as analytics_router
    from svc_teammate.api.routes.categories import router as categories_router

    router.include_router(health_router)
    router.include_router(images_router)
    router.include_router(teammates_router)
    router.include_router(analytics_router)
    router.include_router(categories_router)

    return router
