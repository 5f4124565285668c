from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from svc_teammate.api.deps import get_analytics_service
from svc_teammate.domain.models import AnalyticsActionRequest, TrackVisitRequest
from svc_teammate.services.analytics_service import AnalyticsService, client_ip

router = APIRouter(prefix="/api/analytics", tags=["analytics"])

logger = logging.getLogger("api.analytics")


@router.get("/stats")
async def stats(service: AnalyticsService = Depends(get_analytics_service)):
    # Read, then sweep idle sessions; mock numbers if the DB is down.
    return await service.stats_payload()


@router.post("/stats")
async def stats_action(
    req: AnalyticsActionRequest,
    service: AnalyticsService = Depends(get_analytics_service),
):
    if req.action != "cleanup":
        return JSONResponse(status_code=400, content={"success": False, "error": "Unknown action"})

    try:
        n = await service.cleanup_stale_sessions()
    except Exception:
        logger.exception("Analytics cleanup failed")
        return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})
    return {"success": True, "message": "Analytics cleanup completed", "deactivated": n}


@router.post("/track")
async def track(
    req: TrackVisitRequest,
    request: Request,
    service: AnalyticsService = Depends(get_analytics_service),
):
    try:
        await service.track_visit(req, ip_address=client_ip(request.headers))
    except Exception:
        logger.exception("Error tracking visitor", extra={"visitor_id": req.visitor_id})
        return JSONResponse(status_code=500, content={"success": False, "error": "Failed to track visitor"})
    return {"success": True, "message": "Visit tracked successfully"}


@router.get("/track")
async def recent_visits(
    days: int = Query(default=30, ge=1, le=365),
    service: AnalyticsService = Depends(get_analytics_service),
):
    try:
        visits = await service.recent_visits(days=days)
    except Exception:
        logger.exception("Error fetching tracking data")
        return JSONResponse(status_code=500, content={"success": False, "error": "Failed to fetch tracking data"})
    return {
        "success": True,
        "data": [v.model_dump(by_alias=True, mode="json") for v in visits],
        "count": len(visits),
    }
