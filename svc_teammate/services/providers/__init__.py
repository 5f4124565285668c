from svc_teammate.services.providers.base import BaseImageProvider, ImageProvider, ProviderApiError, ProviderConfigError
from svc_teammate.services.providers.registry import ProviderRegistry

__all__ = [
    "BaseImageProvider",
    "ImageProvider",
    "ProviderApiError",
    "ProviderConfigError",
    "ProviderRegistry",
]
