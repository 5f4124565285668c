from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from svc_teammate.config import Settings
from svc_teammate.domain.enums import AspectRatio, ProviderName
from svc_teammate.domain.models import (
    DiversePartnerRequest,
    GeneratedImageResult,
    GenerationRequest,
    HumanFaceRequest,
    ImageGenerationOptions,
    StoredImageRecord,
    TeammateCreateRequest,
    TeammateRecord,
)
from svc_teammate.repos.generated_images_repo import GeneratedImagesRepo
from svc_teammate.repos.generation_history_repo import GenerationHistoryRepo
from svc_teammate.repos.teammates_repo import TeammatesRepo
from svc_teammate.services import characteristics
from svc_teammate.services.prompt_composer import (
    StyleOptions,
    compose_custom_face_prompt,
    compose_diverse_partner_prompt,
    compose_human_face_prompt,
    compose_prompt,
)
from svc_teammate.services.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)

SERVICE_ERROR = "service_error"


class ConfigurationError(RuntimeError):
    """Selected provider (or the database) is missing required settings."""

    def __init__(self, provider: str, missing_vars: List[str]):
        self.provider = provider
        self.missing_vars = list(missing_vars)
        super().__init__(f"Missing environment variables: {', '.join(self.missing_vars)}")


class GenerationServiceError(RuntimeError):
    """An adapter raised instead of returning a failed result."""

    def __init__(self, provider: str, details: str):
        self.provider = provider
        self.details = details
        super().__init__(details)


class TeammatePersistenceError(RuntimeError):
    pass


@dataclass
class GenerationOutcome:
    provider: ProviderName
    result: GeneratedImageResult
    generated_prompt: str


@dataclass
class _Attempt:
    """Bookkeeping shared by every generation entry point."""

    provider: ProviderName
    options: ImageGenerationOptions
    style: str
    category: Optional[str] = None
    user_id: Optional[str] = None
    teammate_id: Optional[str] = None
    record_params: Optional[Dict[str, Any]] = None
    fallback_prompt: Optional[str] = None


class GenerationOrchestrator:
    """
    received -> validated -> provider selection -> generating -> persisting -> responded

    Validation happens in the request models. Persistence is best-effort: the
    image record and the history record are independent inserts and a failure
    in either is logged and swallowed.
    """

    def __init__(
        self,
        settings: Settings,
        registry: ProviderRegistry,
        images_repo: GeneratedImagesRepo,
        history_repo: GenerationHistoryRepo,
        teammates_repo: TeammatesRepo,
    ):
        self.settings = settings
        self.registry = registry
        self.images_repo = images_repo
        self.history_repo = history_repo
        self.teammates_repo = teammates_repo

    # ---------------------------------------------------------------------
    # Provider selection / config
    # ---------------------------------------------------------------------
    def select_provider(self, explicit: Optional[ProviderName] = None) -> ProviderName:
        if explicit is not None:
            name = ProviderName(explicit)
        else:
            name = self.registry.first_available(self.settings.PROVIDER_PRECEDENCE, self.settings)
            if name is None:
                # Nothing configured: report what the preferred provider is missing.
                name = ProviderName(self.settings.PROVIDER_PRECEDENCE[0])

        missing = self.settings.missing_vars(name.value)
        if missing:
            logger.warning("Provider not configured", extra={"provider": name.value, "missing_vars": missing})
            raise ConfigurationError(name.value, missing)
        return name

    # ---------------------------------------------------------------------
    # Best-effort persistence
    # ---------------------------------------------------------------------
    async def _store_image(self, attempt: _Attempt, result: GeneratedImageResult) -> Optional[str]:
        params = dict(result.parameters)
        params.update(attempt.record_params or {})
        try:
            return await self.images_repo.create_image(
                prompt=result.prompt,
                image_url=result.image_url,
                model=result.model or "unknown",
                provider=attempt.provider.value,
                provider_id=result.provider_id,
                parameters=params,
                user_id=attempt.user_id,
                teammate_id=attempt.teammate_id,
                image_id=result.id,
            )
        except Exception:
            logger.exception("Failed to store generated image", extra={"image_id": result.id})
            return None

    async def _record_history(
        self,
        attempt: _Attempt,
        *,
        prompt: str,
        success: bool,
        error_type: Optional[str],
        started: float,
    ) -> None:
        try:
            await self.history_repo.record_attempt(
                prompt=prompt,
                style=attempt.style,
                success=success,
                generation_time_seconds=round(time.monotonic() - started),
                user_id=attempt.user_id,
                category=attempt.category,
                provider=attempt.provider.value,
                error_type=error_type,
            )
        except Exception:
            logger.exception("Failed to record generation history", extra={"provider": attempt.provider.value})

    async def _run(self, attempt: _Attempt) -> GeneratedImageResult:
        adapter = self.registry.get(attempt.provider)
        started = time.monotonic()

        logger.info(
            "Starting image generation",
            extra={"provider": attempt.provider.value, "style": attempt.style, "category": attempt.category},
        )

        try:
            result = await adapter.generate_image(attempt.options)
        except Exception as e:
            logger.exception("Provider raised during generation", extra={"provider": attempt.provider.value})
            await self._record_history(
                attempt,
                prompt=attempt.fallback_prompt or attempt.options.prompt,
                success=False,
                error_type=SERVICE_ERROR,
                started=started,
            )
            raise GenerationServiceError(attempt.provider.value, str(e) or type(e).__name__) from e

        if result.ok:
            await self._store_image(attempt, result)
        await self._record_history(
            attempt,
            prompt=result.prompt,
            success=result.ok,
            error_type=None if result.ok else (result.error or "Unknown generation error"),
            started=started,
        )
        return result

    # ---------------------------------------------------------------------
    # Public operations
    # ---------------------------------------------------------------------
    async def generate_image(self, req: GenerationRequest) -> GenerationOutcome:
        provider = self.select_provider(req.provider)
        prompt = compose_prompt(req.prompt, StyleOptions(style=req.style, category=req.category))
        attempt = _Attempt(
            provider=provider,
            options=ImageGenerationOptions(prompt=prompt, aspect_ratio=req.aspect_ratio, seed=req.seed),
            style=req.style.value,
            category=req.category,
            user_id=req.user_id,
            teammate_id=req.teammate_id,
            record_params={"type": "image", "style": req.style.value, "category": req.category},
        )
        result = await self._run(attempt)
        return GenerationOutcome(provider=provider, result=result, generated_prompt=prompt)

    async def generate_human_face(self, req: HumanFaceRequest) -> GenerationOutcome:
        provider = self.select_provider(req.provider)
        if req.custom_prompt and req.custom_prompt.strip():
            prompt = compose_custom_face_prompt(req.custom_prompt)
        else:
            prompt = compose_human_face_prompt(
                age=req.age,
                gender=req.gender,
                ethnicity=req.ethnicity,
                expression=req.expression,
                profession=req.profession,
                framing=req.style,
                lighting=req.lighting,
            )

        face_params: Dict[str, Any] = {
            "type": "human-face",
            "age": req.age,
            "gender": req.gender,
            "ethnicity": req.ethnicity,
            "expression": req.expression,
            "profession": req.profession,
            "style": req.style.value,
            "lighting": req.lighting.value,
        }
        if req.custom_prompt:
            face_params["customPrompt"] = req.custom_prompt

        attempt = _Attempt(
            provider=provider,
            options=ImageGenerationOptions(
                prompt=prompt,
                aspect_ratio=AspectRatio.landscape_3_2,
                seed=req.seed,
                extra={"style_type": "Realistic", "magic_prompt_option": "On"},
            ),
            style=req.style.value,
            category="human-face",
            user_id=req.user_id,
            teammate_id=req.teammate_id,
            record_params=face_params,
            fallback_prompt=req.custom_prompt or f"Realistic {req.profession} headshot",
        )
        result = await self._run(attempt)
        return GenerationOutcome(provider=provider, result=result, generated_prompt=prompt)

    async def generate_diverse_partner(self, req: DiversePartnerRequest) -> GenerationOutcome:
        provider = self.select_provider(req.provider)
        chars = characteristics.generate()
        prompt = compose_diverse_partner_prompt(req.description, req.gender, chars)

        attempt = _Attempt(
            provider=provider,
            options=ImageGenerationOptions(
                prompt=prompt,
                aspect_ratio=AspectRatio.square,
                seed=req.seed if req.seed is not None else chars.seed,
                extra={"personGeneration": "allow_all", "style_type": "Realistic"},
            ),
            style=req.style.value,
            category=req.category,
            user_id=req.user_id,
            teammate_id=req.teammate_id,
            record_params={
                "type": "diverse-partner",
                "category": req.category,
                "description": req.description,
                "style": req.style.value,
                "gender": req.gender.value,
                "characteristics": chars.to_dict(),
            },
            fallback_prompt=f"Diverse {req.category} AI partner",
        )
        result = await self._run(attempt)
        return GenerationOutcome(provider=provider, result=result, generated_prompt=prompt)

    async def create_teammate(self, req: TeammateCreateRequest) -> TeammateRecord:
        """
        Create a teammate row, optionally with a generated portrait.

        An image failure never blocks creation; a failed insert raises
        TeammatePersistenceError.
        """
        provider: Optional[ProviderName] = None
        if req.generate_image:
            provider = self.select_provider(req.provider)
        elif not self.settings.database_configured:
            raise ConfigurationError("database", ["DATABASE_URL"])

        result: Optional[GeneratedImageResult] = None
        attempt: Optional[_Attempt] = None
        started = time.monotonic()

        if provider is not None:
            description = req.image_prompt or f"{req.bio}, professional in {req.category}"
            adapter = self.registry.get(provider)
            attempt = _Attempt(
                provider=provider,
                options=adapter.teammate_prompt(req.name, req.category, description, req.image_style),
                style=req.image_style.value,
                category=req.category,
                user_id=req.user_id,
                record_params={"type": "teammate", "style": req.image_style.value, "category": req.category},
            )
            try:
                result = await adapter.generate_image(attempt.options)
            except Exception:
                logger.exception("Teammate image generation raised", extra={"provider": provider.value})
                result = None

            if result is not None and not result.ok:
                logger.warning("Teammate image generation failed", extra={"error": result.error})

        image_ok = result is not None and result.ok
        try:
            teammate = await self.teammates_repo.create_teammate(
                name=req.name,
                bio=req.bio,
                category=req.category,
                skills=req.skills,
                interests=req.interests,
                user_id=req.user_id,
                age=req.age,
                location=req.location,
                image_url=result.image_url if image_ok else None,
                image_prompt=result.prompt if image_ok else None,
            )
        except Exception as e:
            logger.exception("Failed to store teammate", extra={"teammate_name": req.name})
            raise TeammatePersistenceError(str(e) or "Unknown database error") from e

        if attempt is not None:
            attempt.teammate_id = teammate.id
            if image_ok:
                await self._store_image(attempt, result)
            await self._record_history(
                attempt,
                prompt=result.prompt if result is not None else attempt.options.prompt,
                success=image_ok,
                error_type=None if image_ok else (result.error if result is not None else SERVICE_ERROR),
                started=started,
            )

        return teammate

    async def list_images(
        self,
        *,
        user_id: Optional[str] = None,
        teammate_id: Optional[str] = None,
        image_type: Optional[str] = None,
        limit: int = 10,
    ) -> List[StoredImageRecord]:
        return await self.images_repo.list_images(
            user_id=user_id, teammate_id=teammate_id, image_type=image_type, limit=limit
        )

    async def list_teammates(
        self,
        *,
        user_id: Optional[str] = None,
        category: Optional[str] = None,
        limit: int = 20,
    ) -> List[TeammateRecord]:
        return await self.teammates_repo.list_teammates(user_id=user_id, category=category, limit=limit)
