from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from svc_teammate.api.deps import get_orchestrator
from svc_teammate.api.routes.images import config_error_response, fetch_error_response
from svc_teammate.domain.models import TeammateCreateRequest
from svc_teammate.services.generation_orchestrator import (
    ConfigurationError,
    GenerationOrchestrator,
    TeammatePersistenceError,
)

router = APIRouter(prefix="/api/teammates", tags=["teammates"])

logger = logging.getLogger("api.teammates")


@router.post("/generate")
async def create_teammate(
    req: TeammateCreateRequest,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    try:
        teammate = await orchestrator.create_teammate(req)
    except ConfigurationError as e:
        return config_error_response(e)
    except TeammatePersistenceError as e:
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to store teammate data", "details": str(e)},
        )

    return {
        "success": True,
        "data": teammate.model_dump(by_alias=True, mode="json"),
        "message": "Teammate generated successfully",
    }


@router.get("/generate")
async def list_teammates(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    category: Optional[str] = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    try:
        teammates = await orchestrator.list_teammates(
            user_id=user_id or None, category=category, limit=limit
        )
    except Exception:
        logger.exception("Error fetching teammates")
        return fetch_error_response("Failed to fetch teammates")
    return {"success": True, "data": [t.model_dump(by_alias=True, mode="json") for t in teammates]}
