from __future__ import annotations

import logging
from typing import Any, List, Optional

from svc_teammate.domain.models import TeammateRecord
from svc_teammate.repos.base_repo import BaseRepository

logger = logging.getLogger(__name__)


class TeammatesRepo(BaseRepository):
    async def create_teammate(
        self,
        *,
        name: str,
        bio: str,
        category: str,
        skills: List[str],
        interests: List[str],
        user_id: Optional[str] = None,
        age: Optional[int] = None,
        location: Optional[str] = None,
        image_url: Optional[str] = None,
        image_prompt: Optional[str] = None,
    ) -> TeammateRecord:
        # compatibility_score stays NULL: no matching algorithm computes it.
        q = """
        INSERT INTO teammates (
            user_id, name, age, location, bio, skills, interests,
            category, image_url, image_prompt, compatibility_score,
            created_at, updated_at
        )
        VALUES (
            $1, $2, $3, $4, $5, $6::jsonb, $7::jsonb,
            $8, $9, $10, NULL,
            now(), now()
        )
        RETURNING *
        """
        row = await self.execute_query(
            q,
            self.prepare_id_param(user_id),
            name,
            age,
            location,
            bio,
            self.prepare_jsonb_param(list(skills)),
            self.prepare_jsonb_param(list(interests)),
            category,
            image_url,
            image_prompt,
        )
        teammate = TeammateRecord(**self.convert_db_row(row))
        logger.info("Teammate created", extra={"teammate_id": teammate.id, "has_image": bool(image_url)})
        return teammate

    async def list_teammates(
        self,
        *,
        user_id: Optional[str] = None,
        category: Optional[str] = None,
        limit: int = 20,
    ) -> List[TeammateRecord]:
        query = "SELECT * FROM teammates WHERE 1=1"
        params: List[Any] = []

        if user_id:
            params.append(user_id)
            query += f" AND user_id = ${len(params)}"
        if category:
            params.append(category)
            query += f" AND category = ${len(params)}"

        params.append(limit)
        query += f" ORDER BY created_at DESC LIMIT ${len(params)}"

        rows = await self.execute_queries(query, *params)
        return [TeammateRecord(**self.convert_db_row(row)) for row in rows]
