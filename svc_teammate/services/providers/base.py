from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import httpx

from svc_teammate.domain.enums import ImageStyle, ProviderName
from svc_teammate.domain.models import GeneratedImageResult, ImageGenerationOptions
from svc_teammate.services.characteristics import random_seed

logger = logging.getLogger(__name__)


class ProviderApiError(RuntimeError):
    pass


class ProviderConfigError(RuntimeError):
    pass


@dataclass
class ProviderCall:
    """What one adapter invocation produced before it is wrapped as a result."""

    image_url: str
    prompt: str
    parameters: Dict[str, Any]
    provider_id: Optional[str] = None


class ImageProvider(Protocol):
    provider_name: ProviderName
    model: str

    async def generate_image(self, options: ImageGenerationOptions) -> GeneratedImageResult:
        ...

    def teammate_prompt(self, name: str, category: str, description: str, style: ImageStyle) -> ImageGenerationOptions:
        ...

    def health_check(self) -> bool:
        ...


def safe_json(resp: httpx.Response) -> Dict[str, Any]:
    text = (resp.text or "").strip()
    if not text:
        raise ProviderApiError(f"HTTP {resp.status_code} but EMPTY_BODY")
    try:
        obj = resp.json()
    except json.JSONDecodeError as e:
        raise ProviderApiError(f"INVALID_JSON: {str(e)} body={text[:200]}") from e
    if not isinstance(obj, dict):
        raise ProviderApiError(f"UNEXPECTED_JSON_TYPE: {type(obj)}")
    return obj


def raise_for_status_with_body(resp: httpx.Response, label: str) -> None:
    if resp.status_code < 400:
        return
    raise ProviderApiError(f"{label} API error: {resp.status_code} - {(resp.text or '')[:1000]}")


class BaseImageProvider:
    """
    Uniform adapter contract.

    Subclasses implement `_generate` and may raise anything; `generate_image`
    converts every exception into a failed result and never propagates.
    """

    provider_name: ProviderName
    model: str = ""

    def _require(self, name: str, value: Optional[str]) -> str:
        v = (value or "").strip()
        if not v:
            raise ProviderConfigError(f"{name} is not configured")
        return v

    @staticmethod
    def resolve_seed(options: ImageGenerationOptions) -> int:
        # Caller-supplied seed wins over a freshly drawn one.
        return options.seed if options.seed is not None else random_seed()

    async def _generate(self, options: ImageGenerationOptions, image_id: str) -> ProviderCall:
        raise NotImplementedError

    async def generate_image(self, options: ImageGenerationOptions) -> GeneratedImageResult:
        image_id = str(uuid.uuid4())
        try:
            call = await self._generate(options, image_id)
            if not call.image_url:
                raise ProviderApiError(f"No image URL returned from {self.provider_name.value}")
            return GeneratedImageResult.completed(
                id=image_id,
                image_url=call.image_url,
                prompt=call.prompt,
                parameters=call.parameters,
                provider_id=call.provider_id or image_id,
                provider=self.provider_name,
                model=options.model or self.model,
            )
        except Exception as e:
            logger.warning(
                "Image generation failed",
                extra={"provider": self.provider_name.value, "error": str(e)},
            )
            return GeneratedImageResult.failed(
                id=image_id,
                prompt=options.prompt,
                error=str(e) or type(e).__name__,
                parameters=options.model_dump(mode="json", exclude_none=True),
                provider_id=image_id,
                provider=self.provider_name,
                model=options.model or self.model,
            )

    def health_check(self) -> bool:
        return True
