from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from svc_teammate.domain.models import StoredImageRecord
from svc_teammate.repos.base_repo import BaseRepository

logger = logging.getLogger(__name__)


class GeneratedImagesRepo(BaseRepository):
    """generated_images: one immutable row per completed generation."""

    async def create_image(
        self,
        *,
        prompt: str,
        image_url: str,
        model: str,
        provider: Optional[str],
        provider_id: Optional[str],
        parameters: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None,
        teammate_id: Optional[str] = None,
        image_id: Optional[str] = None,
    ) -> str:
        q = """
        INSERT INTO generated_images (
            id, user_id, teammate_id, prompt, image_url, provider_id,
            model, provider, parameters, status, created_at, updated_at
        )
        VALUES (
            COALESCE($1, gen_random_uuid()::text), $2, $3, $4, $5, $6,
            $7, $8, $9::jsonb, 'completed', now(), now()
        )
        RETURNING id::text
        """
        new_id = await self.fetch_scalar(
            q,
            image_id,
            self.prepare_id_param(user_id),
            self.prepare_id_param(teammate_id),
            prompt,
            image_url,
            provider_id,
            model,
            provider,
            self.prepare_jsonb_param(parameters or {}),
        )
        logger.info("Generated image stored", extra={"image_id": new_id, "provider": provider})
        return new_id

    async def list_images(
        self,
        *,
        user_id: Optional[str] = None,
        teammate_id: Optional[str] = None,
        image_type: Optional[str] = None,
        limit: int = 10,
    ) -> List[StoredImageRecord]:
        query = "SELECT * FROM generated_images WHERE 1=1"
        params: List[Any] = []

        if user_id:
            params.append(user_id)
            query += f" AND user_id = ${len(params)}"
        if teammate_id:
            params.append(teammate_id)
            query += f" AND teammate_id = ${len(params)}"
        if image_type:
            params.append(image_type)
            query += f" AND parameters->>'type' = ${len(params)}"

        params.append(limit)
        query += f" ORDER BY created_at DESC LIMIT ${len(params)}"

        rows = await self.execute_queries(query, *params)
        return [StoredImageRecord(**self.convert_db_row(row)) for row in rows]
