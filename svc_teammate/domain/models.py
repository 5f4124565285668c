from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from svc_teammate.domain.enums import (
    AspectRatio,
    FaceFraming,
    FaceLighting,
    GenerationStatus,
    ImageStyle,
    PartnerGender,
    ProviderName,
)


class CamelModel(BaseModel):
    """Wire models: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(extra="ignore", alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Provider results
# ============================================================================
class GeneratedImageResult(CamelModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    image_url: str = ""
    prompt: str
    status: GenerationStatus
    error: Optional[str] = None
    parameters: Dict[str, Any] = Field(default_factory=dict)
    provider_id: Optional[str] = None
    provider: Optional[ProviderName] = None
    model: Optional[str] = None

    @model_validator(mode="after")
    def _check_status_payload(self) -> "GeneratedImageResult":
        if self.status == GenerationStatus.completed and not self.image_url:
            raise ValueError("completed result requires a non-empty image_url")
        if self.status == GenerationStatus.failed and not self.error:
            raise ValueError("failed result requires a non-empty error")
        return self

    @classmethod
    def completed(cls, *, image_url: str, prompt: str, **kwargs: Any) -> "GeneratedImageResult":
        return cls(image_url=image_url, prompt=prompt, status=GenerationStatus.completed, **kwargs)

    @classmethod
    def failed(cls, *, prompt: str, error: Optional[str], **kwargs: Any) -> "GeneratedImageResult":
        return cls(
            image_url="",
            prompt=prompt,
            status=GenerationStatus.failed,
            error=error or "Unknown error occurred",
            **kwargs,
        )

    @property
    def ok(self) -> bool:
        return self.status == GenerationStatus.completed


class ImageGenerationOptions(BaseModel):
    """Provider-agnostic options handed to an adapter."""

    model_config = ConfigDict(extra="ignore")

    prompt: str
    aspect_ratio: AspectRatio = AspectRatio.square
    seed: Optional[int] = Field(default=None, ge=0)
    negative_prompt: Optional[str] = None
    model: Optional[str] = None
    extra: Dict[str, Any] = Field(default_factory=dict)


# ============================================================================
# Requests
# ============================================================================
class GenerationRequest(CamelModel):
    prompt: str = Field(..., min_length=1, max_length=1000)
    style: ImageStyle = ImageStyle.realistic
    aspect_ratio: AspectRatio = AspectRatio.square
    category: Optional[str] = None
    user_id: Optional[str] = None
    teammate_id: Optional[str] = None
    provider: Optional[ProviderName] = None
    seed: Optional[int] = Field(default=None, ge=0)


class HumanFaceRequest(CamelModel):
    user_id: Optional[str] = None
    teammate_id: Optional[str] = None
    age: str = "adult"
    gender: str = "person"
    ethnicity: str = ""
    expression: str = "natural confident smile"
    profession: str = "professional"
    style: FaceFraming = FaceFraming.headshot
    lighting: FaceLighting = FaceLighting.natural
    custom_prompt: Optional[str] = Field(default=None, max_length=1000)
    provider: ProviderName = ProviderName.ideogram
    seed: Optional[int] = Field(default=None, ge=0)


class DiversePartnerRequest(CamelModel):
    category: str = "business"
    description: str = "professional and approachable"
    style: ImageStyle = ImageStyle.realistic
    gender: PartnerGender = PartnerGender.any
    user_id: Optional[str] = None
    teammate_id: Optional[str] = None
    provider: ProviderName = ProviderName.imagen
    seed: Optional[int] = Field(default=None, ge=0)


class TeammateCreateRequest(CamelModel):
    user_id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=100)
    category: str = Field(..., min_length=1)
    bio: str = Field(..., min_length=1, max_length=500)
    skills: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)
    age: Optional[int] = Field(default=None, ge=18, le=100)
    location: Optional[str] = Field(default=None, max_length=100)
    generate_image: bool = True
    image_style: ImageStyle = ImageStyle.realistic
    image_prompt: Optional[str] = None
    provider: ProviderName = ProviderName.flux


class TrackVisitRequest(CamelModel):
    visitor_id: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1)
    page: str = Field(..., min_length=1)
    timestamp: datetime
    user_agent: Optional[str] = None
    referrer: Optional[str] = None


class AnalyticsActionRequest(CamelModel):
    action: str


# ============================================================================
# Persisted rows (views)
# ============================================================================
class StoredImageRecord(CamelModel):
    id: str
    user_id: Optional[str] = None
    teammate_id: Optional[str] = None
    prompt: str
    image_url: str
    provider_id: Optional[str] = None
    provider: Optional[str] = None
    model: str
    parameters: Dict[str, Any] = Field(default_factory=dict)
    status: str = GenerationStatus.completed.value
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TeammateRecord(CamelModel):
    id: str
    user_id: Optional[str] = None
    name: str
    age: Optional[int] = None
    location: Optional[str] = None
    bio: str
    skills: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)
    category: str
    image_url: Optional[str] = None
    image_prompt: Optional[str] = None
    # Reserved; no matching algorithm populates it.
    compatibility_score: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VisitRecord(CamelModel):
    id: str
    visitor_id: str
    session_id: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    referrer: Optional[str] = None
    page: str
    visit_time: datetime


class AnalyticsStats(CamelModel):
    total_visitors: int
    today_visitors: int
    active_users: int
    total_teammates_generated: int
    total_images_generated: int
    last_updated: datetime
