from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from svc_teammate.config import Settings
from svc_teammate.domain.enums import AspectRatio, ImageStyle, ProviderName
from svc_teammate.domain.models import ImageGenerationOptions
from svc_teammate.services import characteristics
from svc_teammate.services.local_storage_service import LocalImageStorage
from svc_teammate.services.prompt_composer import StyleOptions, characteristic_enrichment, compose_prompt
from svc_teammate.services.providers.base import (
    BaseImageProvider,
    ProviderApiError,
    ProviderCall,
    raise_for_status_with_body,
    safe_json,
)

logger = logging.getLogger(__name__)


def _extract_inline_image(data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    for cand in data.get("candidates") or []:
        parts = ((cand or {}).get("content") or {}).get("parts") or []
        for part in parts:
            inline = (part or {}).get("inlineData") or (part or {}).get("inline_data")
            if isinstance(inline, dict) and inline.get("data"):
                return inline
    return None


def _block_reason(data: Dict[str, Any]) -> Optional[str]:
    feedback = data.get("promptFeedback") or {}
    return feedback.get("blockReason")


class GeminiProvider(BaseImageProvider):
    """
    Gemini native image generation (`:generateContent`).

    Every prompt is enriched with freshly sampled characteristics so repeated
    requests do not converge on the same face.
    """

    provider_name = ProviderName.gemini

    def __init__(self, settings: Settings, http: httpx.AsyncClient, storage: LocalImageStorage):
        self.settings = settings
        self.http = http
        self.storage = storage
        self.model = settings.GEMINI_IMAGE_MODEL
        self.base = settings.GOOGLE_GENAI_BASE_URL.rstrip("/")

    def _headers(self) -> Dict[str, str]:
        key = self._require("GEMINI_API_KEY", self.settings.GEMINI_API_KEY)
        return {"x-goog-api-key": key, "Content-Type": "application/json"}

    async def _generate(self, options: ImageGenerationOptions, image_id: str) -> ProviderCall:
        chars = characteristics.generate()
        prompt = characteristic_enrichment(options.prompt, chars)
        seed = options.seed if options.seed is not None else chars.seed
        aspect_ratio = AspectRatio(options.aspect_ratio).value
        model = options.model or self.model

        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseModalities": ["IMAGE"],
                "seed": seed,
                "imageConfig": {"aspectRatio": aspect_ratio},
            },
        }

        logger.info("Generating image with Gemini", extra={"model": model, "seed": seed})

        r = await self.http.post(f"{self.base}/models/{model}:generateContent", headers=self._headers(), json=body)
        raise_for_status_with_body(r, "Gemini")
        data = safe_json(r)

        inline = _extract_inline_image(data)
        if not inline:
            reason = _block_reason(data)
            raise ProviderApiError(f"No image generated by Gemini{f' (blocked: {reason})' if reason else ''}")

        image_url = await self.storage.save_base64(
            provider=self.provider_name.value,
            image_id=image_id,
            b64=inline["data"],
            content_type=inline.get("mimeType") or inline.get("mime_type") or "image/png",
        )
        return ProviderCall(
            image_url=image_url,
            prompt=prompt,
            parameters={
                "aspect_ratio": aspect_ratio,
                "seed": seed,
                "characteristics": chars.to_dict(),
            },
            provider_id=data.get("responseId"),
        )

    def teammate_prompt(self, name: str, category: str, description: str, style: ImageStyle) -> ImageGenerationOptions:
        chars = characteristics.generate()
        return ImageGenerationOptions(
            prompt=compose_prompt(description, StyleOptions(style=style, category=category, characteristics=chars)),
            aspect_ratio=AspectRatio.square,
        )

    def health_check(self) -> bool:
        return bool(self.settings.GEMINI_API_KEY)
