from __future__ import annotations

import logging
from typing import Optional

from svc_teammate.repos.base_repo import BaseRepository

logger = logging.getLogger(__name__)


class GenerationHistoryRepo(BaseRepository):
    """image_generation_history: append-only, one row per attempt."""

    async def record_attempt(
        self,
        *,
        prompt: str,
        style: str,
        success: bool,
        generation_time_seconds: int,
        user_id: Optional[str] = None,
        category: Optional[str] = None,
        provider: Optional[str] = None,
        error_type: Optional[str] = None,
    ) -> str:
        q = """
        INSERT INTO image_generation_history (
            user_id, prompt, category, style, provider,
            generation_time, success, error_type, created_at
        )
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, now())
        RETURNING id::text
        """
        new_id = await self.fetch_scalar(
            q,
            self.prepare_id_param(user_id),
            prompt,
            category,
            style,
            provider,
            int(generation_time_seconds),
            bool(success),
            error_type,
        )
        logger.info(
            "Generation attempt recorded",
            extra={"history_id": new_id, "success": success, "error_type": error_type},
        )
        return new_id
