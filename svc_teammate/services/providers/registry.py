from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import fal_client
import httpx

from svc_teammate.config import Settings
from svc_teammate.domain.enums import ProviderName
from svc_teammate.services.local_storage_service import LocalImageStorage
from svc_teammate.services.providers.base import ImageProvider
from svc_teammate.services.providers.flux_provider import FluxProvider
from svc_teammate.services.providers.gemini_provider import GeminiProvider
from svc_teammate.services.providers.ideogram_provider import IdeogramProvider
from svc_teammate.services.providers.imagen_provider import ImagenProvider
from svc_teammate.services.providers.qwen_provider import QwenProvider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """
    One switchpoint for image providers.

    Built once at startup with the shared network clients; adapters never
    construct their own clients.
    """

    def __init__(self, providers: Dict[ProviderName, ImageProvider], http: Optional[httpx.AsyncClient] = None):
        self._providers = dict(providers)
        self._http = http

    @classmethod
    def build(
        cls,
        settings: Settings,
        *,
        http: Optional[httpx.AsyncClient] = None,
        fal: Optional[Any] = None,
    ) -> "ProviderRegistry":
        http = http or httpx.AsyncClient(timeout=settings.PROVIDER_HTTP_TIMEOUT_SECONDS, follow_redirects=True)
        if fal is None and settings.FAL_KEY:
            fal = fal_client.AsyncClient(key=settings.FAL_KEY, default_timeout=settings.PROVIDER_HTTP_TIMEOUT_SECONDS)

        storage = LocalImageStorage(settings.PUBLIC_DIR)
        providers: Dict[ProviderName, ImageProvider] = {
            ProviderName.flux: FluxProvider(settings, fal),
            ProviderName.ideogram: IdeogramProvider(settings, http),
            ProviderName.imagen: ImagenProvider(settings, http, storage),
            ProviderName.gemini: GeminiProvider(settings, http, storage),
            ProviderName.qwen: QwenProvider(settings, http),
        }
        logger.info(
            "Provider registry built",
            extra={"providers": [p.value for p in providers], "fal_configured": fal is not None},
        )
        return cls(providers, http=http)

    def get(self, name: ProviderName) -> ImageProvider:
        try:
            return self._providers[ProviderName(name)]
        except KeyError:
            raise KeyError(f"unknown_provider: {name}")

    def names(self) -> List[ProviderName]:
        return list(self._providers)

    def health(self) -> Dict[str, bool]:
        return {name.value: bool(p.health_check()) for name, p in self._providers.items()}

    def first_available(self, order: Iterable[str], settings: Settings) -> Optional[ProviderName]:
        for raw in order:
            try:
                name = ProviderName(raw)
            except ValueError:
                logger.warning("Unknown provider in precedence list", extra={"provider": raw})
                continue
            if name in self._providers and settings.provider_configured(name.value):
                return name
        return None

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
