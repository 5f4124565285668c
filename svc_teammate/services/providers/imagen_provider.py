from __future__ import annotations

import logging
from typing import Any, Dict, List

import httpx

from svc_teammate.config import Settings
from svc_teammate.domain.enums import AspectRatio, ImageStyle, ProviderName
from svc_teammate.domain.models import ImageGenerationOptions
from svc_teammate.services.local_storage_service import LocalImageStorage
from svc_teammate.services.providers.base import (
    BaseImageProvider,
    ProviderApiError,
    ProviderCall,
    raise_for_status_with_body,
    safe_json,
)

logger = logging.getLogger(__name__)

# Imagen accepts 1:1, 3:4, 4:3, 9:16, 16:9 only.
_ASPECT_RATIOS: Dict[AspectRatio, str] = {
    AspectRatio.square: "1:1",
    AspectRatio.wide_16_9: "16:9",
    AspectRatio.tall_9_16: "9:16",
    AspectRatio.wide_16_10: "16:9",
    AspectRatio.tall_10_16: "9:16",
    AspectRatio.landscape_3_2: "4:3",
    AspectRatio.portrait_2_3: "3:4",
}


def _first_prediction(data: Dict[str, Any]) -> Dict[str, Any]:
    preds: List[Any] = data.get("predictions") or []
    for p in preds:
        if isinstance(p, dict) and p.get("bytesBase64Encoded"):
            return p
    return {}


class ImagenProvider(BaseImageProvider):
    """Imagen 4 via the Gemini API `:predict` endpoint; bytes are stored locally."""

    provider_name = ProviderName.imagen

    DEFAULT_PARAMETERS: Dict[str, Any] = {
        "sampleCount": 1,
        "personGeneration": "allow_all",
        "imageSize": "1K",
    }

    def __init__(self, settings: Settings, http: httpx.AsyncClient, storage: LocalImageStorage):
        self.settings = settings
        self.http = http
        self.storage = storage
        self.model = settings.IMAGEN_MODEL
        self.base = settings.GOOGLE_GENAI_BASE_URL.rstrip("/")

    def _headers(self) -> Dict[str, str]:
        key = self._require("GEMINI_API_KEY", self.settings.GEMINI_API_KEY)
        return {"x-goog-api-key": key, "Content-Type": "application/json"}

    def _build_parameters(self, options: ImageGenerationOptions) -> Dict[str, Any]:
        params: Dict[str, Any] = dict(self.DEFAULT_PARAMETERS)
        params["aspectRatio"] = _ASPECT_RATIOS[AspectRatio(options.aspect_ratio)]
        if options.negative_prompt:
            params["negativePrompt"] = options.negative_prompt
        for key in ("personGeneration", "imageSize"):
            if options.extra.get(key):
                params[key] = options.extra[key]
        return params

    async def _generate(self, options: ImageGenerationOptions, image_id: str) -> ProviderCall:
        model = options.model or self.model
        params = self._build_parameters(options)
        url = f"{self.base}/models/{model}:predict"

        logger.info("Generating image with Imagen", extra={"model": model, "aspect_ratio": params["aspectRatio"]})

        r = await self.http.post(
            url,
            headers=self._headers(),
            json={"instances": [{"prompt": options.prompt}], "parameters": params},
        )
        raise_for_status_with_body(r, "Imagen")
        pred = _first_prediction(safe_json(r))
        if not pred:
            raise ProviderApiError("No images generated by Imagen")

        image_url = await self.storage.save_base64(
            provider=self.provider_name.value,
            image_id=image_id,
            b64=pred["bytesBase64Encoded"],
            content_type=pred.get("mimeType") or "image/png",
        )

        # Imagen has no seed input; the resolved seed is recorded for traceability.
        recorded = dict(params)
        recorded["seed"] = self.resolve_seed(options)
        recorded["requestedAspectRatio"] = AspectRatio(options.aspect_ratio).value
        return ProviderCall(image_url=image_url, prompt=options.prompt, parameters=recorded)

    def teammate_prompt(self, name: str, category: str, description: str, style: ImageStyle) -> ImageGenerationOptions:
        style = ImageStyle(style)
        prompt = (
            f"Professional portrait of {name}, a {category} specialist. {description}. "
            f"High quality headshot, {style.value} style, clean background, professional lighting."
        )
        return ImageGenerationOptions(prompt=prompt, aspect_ratio=AspectRatio.square)

    def health_check(self) -> bool:
        return bool(self.settings.GEMINI_API_KEY)
