from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from svc_teammate.config import Settings
from svc_teammate.domain.enums import AspectRatio, ImageStyle, ProviderName
from svc_teammate.domain.models import ImageGenerationOptions
from svc_teammate.services.prompt_composer import teammate_face_prompt
from svc_teammate.services.providers.base import (
    BaseImageProvider,
    ProviderApiError,
    ProviderCall,
    ProviderConfigError,
)

logger = logging.getLogger(__name__)

# fal image_size presets / explicit sizes per aspect ratio
_IMAGE_SIZES: Dict[AspectRatio, Any] = {
    AspectRatio.square: "square_hd",
    AspectRatio.wide_16_9: "landscape_16_9",
    AspectRatio.tall_9_16: "portrait_16_9",
    AspectRatio.wide_16_10: {"width": 1280, "height": 800},
    AspectRatio.tall_10_16: {"width": 800, "height": 1280},
    AspectRatio.landscape_3_2: {"width": 1216, "height": 832},
    AspectRatio.portrait_2_3: {"width": 832, "height": 1216},
}


def _extract_first_image(result: Dict[str, Any]) -> Dict[str, Any]:
    images = result.get("images")
    if isinstance(images, list) and images and isinstance(images[0], dict):
        return images[0]
    img = result.get("image")
    if isinstance(img, dict):
        return img
    return {}


class FluxProvider(BaseImageProvider):
    """
    Flux dev text-to-image through fal.ai.

    The fal client is built once at startup and injected; a missing FAL_KEY
    leaves it as None and every call reports a configuration failure.
    """

    provider_name = ProviderName.flux

    DEFAULT_ARGS: Dict[str, Any] = {
        "num_inference_steps": 20,
        "guidance_scale": 3.5,
        "num_images": 1,
        "enable_safety_checker": True,
    }

    def __init__(self, settings: Settings, fal: Optional[Any]):
        self.settings = settings
        self.fal = fal
        self.model = settings.FLUX_MODEL

    def _build_args(self, options: ImageGenerationOptions) -> Dict[str, Any]:
        args: Dict[str, Any] = dict(self.DEFAULT_ARGS)
        args["prompt"] = options.prompt
        args["image_size"] = _IMAGE_SIZES[AspectRatio(options.aspect_ratio)]
        args["seed"] = self.resolve_seed(options)
        if options.negative_prompt:
            args["negative_prompt"] = options.negative_prompt
        for key in ("num_inference_steps", "guidance_scale", "enable_safety_checker"):
            if key in options.extra:
                args[key] = options.extra[key]
        return args

    async def _generate(self, options: ImageGenerationOptions, image_id: str) -> ProviderCall:
        if self.fal is None:
            raise ProviderConfigError("FAL_KEY is not configured")

        args = self._build_args(options)
        model = options.model or self.model
        logger.info("Generating image with Flux", extra={"model": model, "seed": args["seed"]})

        try:
            result = await self.fal.run(model, arguments=args)
        except Exception as e:
            raise ProviderApiError(f"fal_t2i_failed: {e}") from e

        if not isinstance(result, dict) or not result:
            raise ProviderApiError("fal_no_image_returned")
        img0 = _extract_first_image(result)
        url = img0.get("url") or img0.get("image_url")
        if not url:
            raise ProviderApiError(f"fal_no_image_returned: keys={list(result.keys())}")

        params = dict(args)
        params["aspect_ratio"] = AspectRatio(options.aspect_ratio).value
        return ProviderCall(
            image_url=str(url),
            prompt=options.prompt,
            parameters=params,
            provider_id=result.get("request_id"),
        )

    def teammate_prompt(self, name: str, category: str, description: str, style: ImageStyle) -> ImageGenerationOptions:
        enhanced = teammate_face_prompt(name, category, description, style)
        return ImageGenerationOptions(
            prompt=enhanced.prompt,
            aspect_ratio=AspectRatio.square,
            extra={"num_inference_steps": 20, "guidance_scale": 3.5},
        )

    def health_check(self) -> bool:
        return self.fal is not None
