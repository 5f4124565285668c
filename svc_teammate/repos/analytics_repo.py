from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional

from svc_teammate.domain.models import VisitRecord
from svc_teammate.repos.base_repo import BaseRepository

logger = logging.getLogger(__name__)


class AnalyticsRepo(BaseRepository):
    """visitor_tracking + user_sessions, plus the aggregate counters."""

    async def has_visit_between(self, visitor_id: str, start: datetime, end: datetime) -> bool:
        q = """
        SELECT 1 FROM visitor_tracking
        WHERE visitor_id = $1 AND visit_time >= $2 AND visit_time < $3
        LIMIT 1
        """
        return bool(await self.fetch_scalar(q, visitor_id, start, end))

    async def insert_visit(
        self,
        *,
        visitor_id: str,
        session_id: str,
        page: str,
        visit_time: datetime,
        ip_address: Optional[str],
        user_agent: Optional[str],
        referrer: Optional[str],
    ) -> str:
        q = """
        INSERT INTO visitor_tracking (
            visitor_id, session_id, ip_address, user_agent, referrer, page, visit_time
        )
        VALUES ($1, $2, $3, $4, $5, $6, $7)
        RETURNING id::text
        """
        return await self.fetch_scalar(q, visitor_id, session_id, ip_address, user_agent, referrer, page, visit_time)

    async def upsert_session(
        self,
        *,
        session_id: str,
        visitor_id: str,
        at: datetime,
        ip_address: Optional[str],
        user_agent: Optional[str],
    ) -> None:
        q = """
        INSERT INTO user_sessions (
            session_id, visitor_id, start_time, last_activity, ip_address, user_agent, is_active
        )
        VALUES ($1, $2, $3, $3, $4, $5, true)
        ON CONFLICT (session_id) DO UPDATE
        SET last_activity = EXCLUDED.last_activity,
            is_active = true
        """
        await self.execute_command(q, session_id, visitor_id, at, ip_address, user_agent)

    async def read_counts(self, *, today_start: datetime, active_since: datetime) -> Dict[str, int]:
        q = """
        SELECT
            (SELECT count(DISTINCT visitor_id) FROM visitor_tracking) AS total_visitors,
            (SELECT count(DISTINCT visitor_id) FROM visitor_tracking WHERE visit_time >= $1) AS today_visitors,
            (SELECT count(DISTINCT session_id) FROM user_sessions
                WHERE is_active = true AND last_activity >= $2) AS active_users,
            (SELECT count(*) FROM image_generation_history WHERE success = true) AS total_teammates_generated,
            (SELECT count(*) FROM generated_images WHERE status = 'completed') AS total_images_generated
        """
        row = await self.execute_query(q, today_start, active_since)
        data = dict(row) if row else {}
        return {k: int(v or 0) for k, v in data.items()}

    async def deactivate_sessions_before(self, cutoff: datetime, *, only_active: bool = True) -> int:
        q = "UPDATE user_sessions SET is_active = false WHERE last_activity < $1"
        if only_active:
            q += " AND is_active = true"
        status = await self.execute_command(q, cutoff)
        n = self.command_count(status)
        if n:
            logger.info("Sessions deactivated", extra={"count": n, "cutoff": cutoff.isoformat()})
        return n

    async def recent_visits(self, *, since: datetime, limit: int = 100) -> List[VisitRecord]:
        q = """
        SELECT * FROM visitor_tracking
        WHERE visit_time >= $1
        ORDER BY visit_time DESC
        LIMIT $2
        """
        rows = await self.execute_queries(q, since, limit)
        return [VisitRecord(**self.convert_db_row(row)) for row in rows]
