from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Optional

import httpx

from svc_teammate.config import Settings
from svc_teammate.domain.enums import AspectRatio, ImageStyle, ProviderName
from svc_teammate.domain.models import ImageGenerationOptions
from svc_teammate.services.providers.base import (
    BaseImageProvider,
    ProviderApiError,
    ProviderCall,
    raise_for_status_with_body,
    safe_json,
)

logger = logging.getLogger(__name__)

GENERATION_PATH = "/services/aigc/multimodal-generation/generation"

# DashScope output sizes (width*height)
_SIZES: Dict[AspectRatio, str] = {
    AspectRatio.square: "1328*1328",
    AspectRatio.wide_16_9: "1664*928",
    AspectRatio.tall_9_16: "928*1664",
    AspectRatio.wide_16_10: "1664*1040",
    AspectRatio.tall_10_16: "1040*1664",
    AspectRatio.landscape_3_2: "1584*1056",
    AspectRatio.portrait_2_3: "1056*1584",
}

TEAMMATE_STYLE_PROMPTS: Dict[ImageStyle, str] = {
    ImageStyle.realistic: "highly detailed, photorealistic, professional headshot",
    ImageStyle.artistic: "artistic style, creative, unique portrait",
    ImageStyle.professional: "professional business portrait, clean background",
    ImageStyle.casual: "casual friendly portrait, natural setting",
}


def _extract_url(data: Dict[str, Any]) -> Optional[str]:
    output = data.get("output") or {}
    results: List[Any] = output.get("results") or []
    if results and isinstance(results[0], dict) and results[0].get("url"):
        return results[0]["url"]
    for choice in output.get("choices") or []:
        content = ((choice or {}).get("message") or {}).get("content") or []
        for item in content:
            if isinstance(item, dict) and item.get("image"):
                return item["image"]
    return None


class QwenProvider(BaseImageProvider):
    """Qwen image generation through the DashScope multimodal endpoint."""

    provider_name = ProviderName.qwen

    def __init__(self, settings: Settings, http: httpx.AsyncClient):
        self.settings = settings
        self.http = http
        self.model = settings.QWEN_MODEL
        self.url = settings.DASHSCOPE_BASE_URL.rstrip("/") + GENERATION_PATH

    def _headers(self) -> Dict[str, str]:
        key = self._require("DASHSCOPE_API_KEY", self.settings.DASHSCOPE_API_KEY)
        return {"Authorization": f"Bearer {key}", "Content-Type": "application/json"}

    def _build_payload(self, options: ImageGenerationOptions) -> Dict[str, Any]:
        content: List[Dict[str, Any]] = []
        if options.extra.get("image"):
            content.append({"image": options.extra["image"]})
        content.append({"text": options.prompt})

        parameters: Dict[str, Any] = {
            "negative_prompt": options.negative_prompt or "",
            "watermark": bool(options.extra.get("watermark", False)),
            "seed": self.resolve_seed(options),
            "size": _SIZES[AspectRatio(options.aspect_ratio)],
        }
        for key in ("guidance_scale", "num_inference_steps", "prompt_extend"):
            if key in options.extra:
                parameters[key] = options.extra[key]

        return {
            "model": options.model or self.model,
            "input": {"messages": [{"role": "user", "content": content}]},
            "parameters": parameters,
        }

    async def _generate(self, options: ImageGenerationOptions, image_id: str) -> ProviderCall:
        payload = self._build_payload(options)
        logger.info("Generating image with DashScope", extra={"model": payload["model"]})

        r = await self.http.post(self.url, headers=self._headers(), json=payload)
        raise_for_status_with_body(r, "DashScope")
        data = safe_json(r)

        code = data.get("code")
        if code and str(code) != "200":
            raise ProviderApiError(f"DashScope API error: {code} - {data.get('message') or 'Unknown error'}")

        image_url = _extract_url(data)
        if not image_url:
            raise ProviderApiError("No image URL returned from DashScope API")

        return ProviderCall(
            image_url=image_url,
            prompt=options.prompt,
            parameters=payload["parameters"],
            provider_id=data.get("request_id"),
        )

    def teammate_prompt(self, name: str, category: str, description: str, style: ImageStyle) -> ImageGenerationOptions:
        style = ImageStyle(style)
        return ImageGenerationOptions(
            prompt=f"{name}, {category} professional, {description}, {TEAMMATE_STYLE_PROMPTS[style]}",
            aspect_ratio=AspectRatio.square,
            seed=random.randrange(1000),
            extra={"guidance_scale": 1.5, "num_inference_steps": 20, "prompt_extend": True},
        )

    def health_check(self) -> bool:
        return bool(self.settings.DASHSCOPE_API_KEY)
