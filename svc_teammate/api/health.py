from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request

from svc_teammate.config import PROVIDER_REQUIRED_VARS, Settings, get_settings

router = APIRouter(prefix="/api/health", tags=["health"])

_STARTED_AT = time.time()


def _default_provider(settings: Settings) -> str:
    for name in settings.PROVIDER_PRECEDENCE:
        if settings.provider_configured(name):
            return name
    return settings.PROVIDER_PRECEDENCE[0]


@router.get("")
@router.get("/")
async def health(request: Request, settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    """Configuration readiness per provider and database; never touches the network."""
    default_provider = _default_provider(settings)
    missing: List[str] = settings.missing_vars(default_provider)
    is_valid = not missing

    services: Dict[str, bool] = {"database": settings.database_configured}
    for name in PROVIDER_REQUIRED_VARS:
        services[name] = settings.provider_configured(name)

    # Adapters exist only after startup; report them when they do.
    registry = getattr(request.app.state, "providers", None)

    return {
        "status": "healthy" if is_valid else "degraded",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime_s": round(time.time() - _STARTED_AT, 3),
        "defaultProvider": default_provider,
        "services": services,
        "providers": registry.health() if registry is not None else {},
        "configuration": {
            "isValid": is_valid,
            "missingVars": missing,
            "message": (
                "All required environment variables are configured"
                if is_valid
                else f"Missing required environment variables: {', '.join(missing)}"
            ),
        },
    }
