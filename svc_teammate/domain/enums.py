from __future__ import annotations

from enum import Enum
from typing import Any


class ImageStyle(str, Enum):
    realistic = "realistic"
    artistic = "artistic"
    professional = "professional"
    casual = "casual"


class AspectRatio(str, Enum):
    square = "1:1"
    wide_16_10 = "16:10"
    tall_10_16 = "10:16"
    wide_16_9 = "16:9"
    tall_9_16 = "9:16"
    landscape_3_2 = "3:2"
    portrait_2_3 = "2:3"


class ProviderName(str, Enum):
    flux = "flux"
    ideogram = "ideogram"
    imagen = "imagen"
    gemini = "gemini"
    qwen = "qwen"


class GenerationStatus(str, Enum):
    completed = "completed"
    failed = "failed"


class PortraitCategory(str, Enum):
    """Closed set of categories with dedicated clothing/context phrasing."""

    business = "business"
    academic = "academic"
    technology = "technology"
    creative = "creative"
    healthcare = "healthcare"
    education = "education"
    finance = "finance"
    marketing = "marketing"
    consulting = "consulting"
    travel = "travel"
    life = "life"
    default = "default"

    @classmethod
    def parse(cls, raw: Any) -> "PortraitCategory":
        if isinstance(raw, cls):
            return raw
        key = str(raw or "").strip().lower()
        try:
            return cls(key)
        except ValueError:
            return cls.default


class FaceFraming(str, Enum):
    headshot = "headshot"
    portrait = "portrait"
    environmental = "environmental"


class FaceLighting(str, Enum):
    natural = "natural"
    studio = "studio"
    dramatic = "dramatic"
    golden_hour = "golden-hour"


class PartnerGender(str, Enum):
    male = "male"
    female = "female"
    non_binary = "non-binary"
    any = "any"


# Face-enhancer vocabulary
class FaceMood(str, Enum):
    neutral = "neutral"
    confident = "confident"
    friendly = "friendly"
    thoughtful = "thoughtful"
    professional = "professional"


class EnhancerLighting(str, Enum):
    studio = "studio"
    natural = "natural"
    dramatic = "dramatic"
    soft = "soft"


class EnhancerBackground(str, Enum):
    clean = "clean"
    office = "office"
    outdoor = "outdoor"
    gradient = "gradient"
