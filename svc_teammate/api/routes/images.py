from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from svc_teammate.api.deps import get_orchestrator
from svc_teammate.domain.models import DiversePartnerRequest, GenerationRequest, HumanFaceRequest
from svc_teammate.services.generation_orchestrator import (
    ConfigurationError,
    GenerationOrchestrator,
    GenerationOutcome,
    GenerationServiceError,
)

router = APIRouter(prefix="/api/images", tags=["images"])

logger = logging.getLogger("api.images")


# ------------------------------------------------------------------------------
# Response helpers
# ------------------------------------------------------------------------------
def config_error_response(e: ConfigurationError) -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={
            "success": False,
            "error": "Service not properly configured",
            "details": str(e),
            "missingVars": e.missing_vars,
        },
    )


def service_error_response(error: str, e: GenerationServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": error, "provider": e.provider, "details": e.details},
    )


def fetch_error_response(error: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"success": False, "error": error})


def _envelope(outcome: GenerationOutcome, ok_message: str, fail_message: str) -> Dict[str, Any]:
    ok = outcome.result.ok
    return {
        "success": ok,
        "data": outcome.result.model_dump(by_alias=True, mode="json"),
        "provider": outcome.provider.value,
        "message": ok_message if ok else fail_message,
    }


# ------------------------------------------------------------------------------
# Generic image generation
# ------------------------------------------------------------------------------
@router.post("/generate")
async def generate_image(
    req: GenerationRequest,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    try:
        outcome = await orchestrator.generate_image(req)
    except ConfigurationError as e:
        return config_error_response(e)
    except GenerationServiceError as e:
        return service_error_response("Failed to generate image", e)

    return _envelope(outcome, "Image generated successfully", "Image generation failed")


@router.get("/generate")
async def list_images(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    teammate_id: Optional[str] = Query(default=None, alias="teammateId"),
    limit: int = Query(default=10, ge=1, le=100),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    try:
        images = await orchestrator.list_images(user_id=user_id, teammate_id=teammate_id, limit=limit)
    except Exception:
        logger.exception("Error fetching images")
        return fetch_error_response("Failed to fetch images")
    return {"success": True, "data": [i.model_dump(by_alias=True, mode="json") for i in images]}


# ------------------------------------------------------------------------------
# Realistic human face
# ------------------------------------------------------------------------------
@router.post("/human-face")
async def generate_human_face(
    req: HumanFaceRequest,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    try:
        outcome = await orchestrator.generate_human_face(req)
    except ConfigurationError as e:
        return config_error_response(e)
    except GenerationServiceError as e:
        return service_error_response("Failed to generate human face", e)

    body = _envelope(
        outcome,
        "Realistic human face generated successfully",
        "Human face generation failed",
    )
    body["generatedPrompt"] = outcome.generated_prompt
    body["parameters"] = req.model_dump(
        by_alias=True, mode="json", exclude={"user_id", "teammate_id", "provider"}, exclude_none=True
    )
    return body


@router.get("/human-face")
async def list_human_faces(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    limit: int = Query(default=10, ge=1, le=100),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    try:
        images = await orchestrator.list_images(user_id=user_id, image_type="human-face", limit=limit)
    except Exception:
        logger.exception("Error fetching human faces")
        return fetch_error_response("Failed to fetch human faces")
    return {"success": True, "data": [i.model_dump(by_alias=True, mode="json") for i in images]}


# ------------------------------------------------------------------------------
# Diverse AI partner
# ------------------------------------------------------------------------------
@router.post("/diverse-partner")
async def generate_diverse_partner(
    req: DiversePartnerRequest,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    try:
        outcome = await orchestrator.generate_diverse_partner(req)
    except ConfigurationError as e:
        return config_error_response(e)
    except GenerationServiceError as e:
        return service_error_response("Failed to generate diverse AI partner", e)

    body = _envelope(
        outcome,
        "Diverse AI partner generated successfully",
        "AI partner generation failed",
    )
    body["generatedPrompt"] = outcome.generated_prompt
    return body


@router.get("/diverse-partner")
async def list_diverse_partners(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    limit: int = Query(default=10, ge=1, le=100),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    try:
        images = await orchestrator.list_images(user_id=user_id, image_type="diverse-partner", limit=limit)
    except Exception:
        logger.exception("Error fetching diverse AI partners")
        return fetch_error_response("Failed to fetch diverse AI partners")
    return {"success": True, "data": [i.model_dump(by_alias=True, mode="json") for i in images]}
