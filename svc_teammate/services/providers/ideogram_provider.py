from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, Optional

import httpx

from svc_teammate.config import Settings
from svc_teammate.domain.enums import AspectRatio, ImageStyle, ProviderName
from svc_teammate.domain.models import ImageGenerationOptions
from svc_teammate.services.prompt_composer import StyleOptions, compose_prompt
from svc_teammate.services.providers.base import (
    BaseImageProvider,
    ProviderApiError,
    ProviderCall,
    raise_for_status_with_body,
    safe_json,
)

logger = logging.getLogger(__name__)

_TERMINAL = ("succeeded", "failed", "canceled")


def _extract_output_url(output: Any) -> Optional[str]:
    if isinstance(output, str):
        return output
    if isinstance(output, list) and output:
        first = output[0]
        return first if isinstance(first, str) else None
    return None


class IdeogramProvider(BaseImageProvider):
    """Ideogram v3 Turbo through the Replicate predictions API."""

    provider_name = ProviderName.ideogram

    DEFAULT_INPUT: Dict[str, Any] = {
        "aspect_ratio": AspectRatio.square.value,
        "model": "V_3_TURBO",
        "magic_prompt_option": "Auto",
    }

    def __init__(self, settings: Settings, http: httpx.AsyncClient):
        self.settings = settings
        self.http = http
        self.model = settings.IDEOGRAM_MODEL
        self.base = settings.REPLICATE_BASE_URL.rstrip("/")

    def _headers(self, *, wait: bool = False) -> Dict[str, str]:
        token = self._require("REPLICATE_API_TOKEN", self.settings.REPLICATE_API_TOKEN)
        h = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        if wait:
            h["Prefer"] = "wait"
        return h

    def _build_input(self, options: ImageGenerationOptions) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.DEFAULT_INPUT)
        data["prompt"] = options.prompt
        data["aspect_ratio"] = AspectRatio(options.aspect_ratio).value
        data["seed"] = self.resolve_seed(options)
        for key in ("model", "magic_prompt_option", "style_type", "color_palette"):
            if options.extra.get(key):
                data[key] = options.extra[key]
        return data

    async def _poll(self, prediction: Dict[str, Any]) -> Dict[str, Any]:
        prediction_id = prediction.get("id")
        get_url = (prediction.get("urls") or {}).get("get") or f"{self.base}/predictions/{prediction_id}"
        deadline = time.monotonic() + self.settings.REPLICATE_MAX_POLL_SECONDS

        while prediction.get("status") not in _TERMINAL:
            if time.monotonic() > deadline:
                raise ProviderApiError(f"Replicate prediction {prediction_id} timed out")
            await asyncio.sleep(self.settings.REPLICATE_POLL_INTERVAL_SECONDS)
            r = await self.http.get(get_url, headers=self._headers())
            raise_for_status_with_body(r, "Replicate")
            prediction = safe_json(r)
        return prediction

    async def _generate(self, options: ImageGenerationOptions, image_id: str) -> ProviderCall:
        data = self._build_input(options)
        url = f"{self.base}/models/{self.model}/predictions"

        logger.info("Generating image with Ideogram", extra={"model": self.model, "aspect_ratio": data["aspect_ratio"]})

        r = await self.http.post(url, headers=self._headers(wait=True), json={"input": data})
        raise_for_status_with_body(r, "Replicate")
        prediction = await self._poll(safe_json(r))

        if prediction.get("status") != "succeeded":
            raise ProviderApiError(
                f"Replicate prediction {prediction.get('status')}: {prediction.get('error') or 'no error detail'}"
            )

        image_url = _extract_output_url(prediction.get("output"))
        if not image_url:
            raise ProviderApiError("No image URL returned from Ideogram API")

        return ProviderCall(
            image_url=image_url,
            prompt=options.prompt,
            parameters=data,
            provider_id=prediction.get("id"),
        )

    def teammate_prompt(self, name: str, category: str, description: str, style: ImageStyle) -> ImageGenerationOptions:
        return ImageGenerationOptions(
            prompt=compose_prompt(description, StyleOptions(style=style, category=category)),
            aspect_ratio=AspectRatio.square,
            extra={"style_type": "Realistic", "magic_prompt_option": "On"},
        )

    def health_check(self) -> bool:
        return bool(self.settings.REPLICATE_API_TOKEN)
