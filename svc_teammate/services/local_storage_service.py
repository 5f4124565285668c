from __future__ import annotations

import asyncio
import base64
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

GENERATED_SUBDIR = "generated"


def ext_for_content_type(content_type: Optional[str]) -> str:
    ct = (content_type or "").lower().split(";")[0].strip()
    if ct == "image/jpeg" or ct == "image/jpg":
        return "jpg"
    if ct == "image/webp":
        return "webp"
    # default safe
    return "png"


class LocalImageStorage:
    """
    Writes provider image bytes under <public_dir>/generated and returns the
    public relative URL (/generated/<file>).

    Writes are plain file writes; a crash mid-write can leave a partial file.
    """

    def __init__(self, public_dir: str):
        self.root = Path(public_dir) / GENERATED_SUBDIR

    def _write(self, filename: str, data: bytes) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.root / filename
        path.write_bytes(data)
        return path

    async def save_bytes(
        self,
        *,
        provider: str,
        image_id: str,
        data: bytes,
        content_type: Optional[str] = "image/png",
    ) -> str:
        if not data:
            raise RuntimeError("empty_image_bytes")
        filename = f"{provider}-{image_id}.{ext_for_content_type(content_type)}"
        path = await asyncio.to_thread(self._write, filename, data)
        logger.info("Image saved locally", extra={"path": str(path), "bytes": len(data)})
        return f"/{GENERATED_SUBDIR}/{filename}"

    async def save_base64(
        self,
        *,
        provider: str,
        image_id: str,
        b64: str,
        content_type: Optional[str] = "image/png",
    ) -> str:
        return await self.save_bytes(
            provider=provider,
            image_id=image_id,
            data=base64.b64decode(b64),
            content_type=content_type,
        )
