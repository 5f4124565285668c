from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional

from svc_teammate.config import Settings
from svc_teammate.domain.models import AnalyticsStats, TrackVisitRequest, VisitRecord
from svc_teammate.repos.analytics_repo import AnalyticsRepo

logger = logging.getLogger(__name__)

# Served when the database is unreachable so the visitor counter still renders.
MOCK_STATS: Dict[str, Any] = {
    "totalVisitors": 12847,
    "todayVisitors": 234,
    "activeUsers": 7,
    "totalTeammatesGenerated": 3456,
    "totalImagesGenerated": 8923,
}
MOCK_STATS_NOTE = "Using mock data - database unavailable"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def day_bounds(dt: datetime) -> tuple:
    """[start, end) of the UTC calendar day containing dt."""
    start = _as_utc(dt).replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def client_ip(headers: Mapping[str, str]) -> str:
    forwarded = (headers.get("x-forwarded-for") or "").split(",")[0].strip()
    if forwarded:
        return forwarded
    real_ip = (headers.get("x-real-ip") or "").strip()
    return real_ip or "unknown"


class AnalyticsService:
    def __init__(self, settings: Settings, repo: AnalyticsRepo, clock=utcnow):
        self.settings = settings
        self.repo = repo
        self.clock = clock

    def active_cutoff(self) -> datetime:
        return self.clock() - timedelta(seconds=self.settings.SESSION_ACTIVE_WINDOW_SECONDS)

    async def track_visit(self, req: TrackVisitRequest, *, ip_address: str) -> bool:
        """
        Record a page view.

        Inserts a visitor row only for the first visit of that visitor on the
        visit's UTC calendar day, then upserts the session. Returns True when
        a new visitor row was written.
        """
        visit_time = _as_utc(req.timestamp)
        start, end = day_bounds(visit_time)

        inserted = False
        if not await self.repo.has_visit_between(req.visitor_id, start, end):
            await self.repo.insert_visit(
                visitor_id=req.visitor_id,
                session_id=req.session_id,
                page=req.page,
                visit_time=visit_time,
                ip_address=ip_address,
                user_agent=req.user_agent or None,
                referrer=req.referrer or None,
            )
            inserted = True

        await self.repo.upsert_session(
            session_id=req.session_id,
            visitor_id=req.visitor_id,
            at=visit_time,
            ip_address=ip_address,
            user_agent=req.user_agent or None,
        )
        logger.info("Visit tracked", extra={"visitor_id": req.visitor_id, "new_visitor_row": inserted})
        return inserted

    async def read_stats(self) -> AnalyticsStats:
        now = self.clock()
        today_start, _ = day_bounds(now)
        counts = await self.repo.read_counts(today_start=today_start, active_since=self.active_cutoff())
        return AnalyticsStats(
            total_visitors=counts.get("total_visitors", 0),
            today_visitors=counts.get("today_visitors", 0),
            active_users=counts.get("active_users", 0),
            total_teammates_generated=counts.get("total_teammates_generated", 0),
            total_images_generated=counts.get("total_images_generated", 0),
            last_updated=now,
        )

    async def sweep_inactive_sessions(self, cutoff: Optional[datetime] = None) -> int:
        """Flip active sessions idle since before cutoff (default: the 5-minute window) to inactive."""
        return await self.repo.deactivate_sessions_before(cutoff or self.active_cutoff(), only_active=True)

    async def cleanup_stale_sessions(self) -> int:
        cutoff = self.clock() - timedelta(seconds=self.settings.SESSION_STALE_CLEANUP_SECONDS)
        return await self.repo.deactivate_sessions_before(cutoff, only_active=False)

    async def stats_payload(self) -> Dict[str, Any]:
        """
        Stats for the visitor counter, followed by a session sweep.

        Falls back to MOCK_STATS when the database call throws.
        """
        try:
            stats = await self.read_stats()
            await self.sweep_inactive_sessions()
        except Exception as e:
            logger.error("Analytics stats unavailable, serving mock data", extra={"error": str(e)})
            payload = dict(MOCK_STATS)
            payload["lastUpdated"] = self.clock().isoformat()
            payload["error"] = MOCK_STATS_NOTE
            return payload
        return stats.model_dump(by_alias=True, mode="json")

    async def recent_visits(self, *, days: int = 30, limit: int = 100) -> List[VisitRecord]:
        since = self.clock() - timedelta(days=days)
        return await self.repo.recent_visits(since=since, limit=limit)
