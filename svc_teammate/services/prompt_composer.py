from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from svc_teammate.domain.enums import (
    EnhancerBackground,
    EnhancerLighting,
    FaceFraming,
    FaceLighting,
    FaceMood,
    ImageStyle,
    PartnerGender,
    PortraitCategory,
)
from svc_teammate.services.characteristics import Characteristics

# ---------------------------------------------------------------------------
# Portrait vocabulary
# ---------------------------------------------------------------------------
PHOTO_QUALITY = (
    "professional headshot photography, shallow depth of field, bokeh background, "
    "natural skin texture, detailed facial features, high resolution, 85mm lens, "
    "perfect focus on eyes, natural eye catchlight, professional retouching quality"
)

GENERIC_HUMAN_DESCRIPTORS = (
    "authentic human face, genuine expression, natural smile, confident posture, "
    "looking at camera, professional appearance"
)

STYLE_LIGHTING: Dict[ImageStyle, str] = {
    ImageStyle.realistic: "soft natural lighting, window light, gentle shadows, warm color temperature",
    ImageStyle.artistic: "dramatic lighting, rim light, creative shadows, artistic mood",
    ImageStyle.professional: "studio lighting, key light with fill, corporate headshot lighting, clean and bright",
    ImageStyle.casual: "natural daylight, outdoor lighting, relaxed atmosphere, golden hour warmth",
}

STYLE_BACKGROUND: Dict[ImageStyle, str] = {
    ImageStyle.realistic: "neutral blurred background, clean and simple",
    ImageStyle.artistic: "creative blurred background, artistic bokeh",
    ImageStyle.professional: "office environment background blur, professional setting",
    ImageStyle.casual: "natural outdoor background blur, relaxed setting",
}

CLOSING_BOILERPLATE = "no text, no watermark, no logo"


def category_clothing(category: PortraitCategory) -> str:
    """Clothing/context phrase; total over PortraitCategory."""
    if category == PortraitCategory.business:
        return "business attire, suit or professional blazer, corporate professional"
    if category == PortraitCategory.academic:
        return "smart casual attire, academic professional, scholarly appearance"
    if category == PortraitCategory.technology:
        return "modern casual professional, tech industry style, contemporary look"
    if category == PortraitCategory.creative:
        return "creative professional attire, artistic style, expressive fashion"
    if category == PortraitCategory.healthcare:
        return "professional medical attire, clean and trustworthy appearance"
    if category == PortraitCategory.education:
        return "educator professional attire, approachable and knowledgeable"
    if category == PortraitCategory.finance:
        return "formal business attire, finance professional, conservative style"
    if category == PortraitCategory.marketing:
        return "trendy professional attire, modern marketing professional"
    if category == PortraitCategory.consulting:
        return "high-end professional attire, consultant appearance, polished look"
    if category == PortraitCategory.travel:
        return "smart casual travel attire, adventure-ready professional, global mindset"
    if category == PortraitCategory.life:
        return "wellness-focused professional attire, balanced lifestyle appearance, positive energy"
    return "professional attire, clean and modern appearance"


def _as_text(x: Any) -> str:
    if x is None:
        return ""
    return str(x).strip()


def _join(parts: List[Any]) -> str:
    cleaned = [_as_text(p) for p in parts]
    return ", ".join(p for p in cleaned if p)


@dataclass(frozen=True)
class StyleOptions:
    style: ImageStyle = ImageStyle.realistic
    category: Any = PortraitCategory.default
    characteristics: Optional[Characteristics] = None


def compose_prompt(base: Optional[str], options: StyleOptions) -> str:
    """
    Build a portrait prompt from the base description and style options.

    Deterministic: characteristics are passed in, never sampled here.
    Raises ValueError for a style outside ImageStyle.
    """
    style = ImageStyle(options.style)
    category = PortraitCategory.parse(options.category)
    chars = options.characteristics

    parts: List[Any] = [PHOTO_QUALITY]
    if chars is not None:
        parts.append(f"{chars.age} {chars.ethnicity} person")
        parts.append(
            _join(
                [
                    "authentic human face",
                    chars.expression,
                    "confident posture",
                    "looking at camera",
                    "professional appearance",
                    chars.facial_features,
                    chars.eye_color,
                    chars.hair_style,
                    chars.hair_color,
                ]
            )
        )
    else:
        parts.append(GENERIC_HUMAN_DESCRIPTORS)

    parts.extend([category_clothing(category), STYLE_LIGHTING[style], STYLE_BACKGROUND[style]])

    base_text = _as_text(base)
    if base_text:
        parts.append(f"personality: {base_text}")

    parts.append("photorealistic, highly detailed, sharp focus")
    parts.append("professional photography, portrait photography")
    if chars is not None:
        parts.append("unique individual, distinct facial features")
    parts.append(CLOSING_BOILERPLATE)
    return _join(parts)


def characteristic_enrichment(prompt: str, chars: Characteristics) -> str:
    """Diversity suffix appended unconditionally by the Gemini adapter."""
    return _join(
        [
            prompt,
            f"diverse {chars.ethnicity} person",
            chars.age,
            *chars.descriptors(),
            "photorealistic, professional photography",
            "unique individual, authentic human appearance",
        ]
    )


# ---------------------------------------------------------------------------
# Face enhancer
# ---------------------------------------------------------------------------
ENHANCER_STYLE: Dict[ImageStyle, str] = {
    ImageStyle.realistic: "photorealistic portrait, professional headshot",
    ImageStyle.artistic: "artistic portrait, creative lighting, stylized",
    ImageStyle.professional: "professional business portrait, corporate headshot",
    ImageStyle.casual: "casual friendly portrait, approachable",
}

ENHANCER_LIGHTING: Dict[EnhancerLighting, str] = {
    EnhancerLighting.studio: "soft studio lighting, professional photography setup",
    EnhancerLighting.natural: "natural window lighting, soft and even illumination",
    EnhancerLighting.dramatic: "dramatic side lighting, professional portrait lighting",
    EnhancerLighting.soft: "soft diffused lighting, flattering portrait lighting",
}

ENHANCER_BACKGROUND: Dict[EnhancerBackground, str] = {
    EnhancerBackground.clean: "clean simple background, professional backdrop",
    EnhancerBackground.office: "modern office environment, professional setting",
    EnhancerBackground.outdoor: "outdoor natural setting, blurred background",
    EnhancerBackground.gradient: "gradient background, studio portrait setup",
}

ENHANCER_MOOD: Dict[FaceMood, str] = {
    FaceMood.neutral: "neutral expression, direct eye contact with camera",
    FaceMood.confident: "confident expression, slight smile, strong eye contact",
    FaceMood.friendly: "warm friendly smile, approachable expression",
    FaceMood.thoughtful: "thoughtful expression, intelligent gaze",
    FaceMood.professional: "professional demeanor, confident and approachable",
}

CAMERA_SETTINGS = "85mm portrait lens, f/2.8 aperture, shallow depth of field, sharp focus on face"

FACIAL_DETAILS = (
    "detailed facial features, realistic skin texture, natural pores and fine details, "
    "high resolution facial anatomy, realistic proportions, anatomically correct features"
)

REALISM_SUFFIX = (
    "ultra high resolution, photorealistic, detailed, professional portrait photography, "
    "natural lighting, realistic anatomy, high detail, sharp focus"
)

_AGE_PATTERN = re.compile(r"(\d+)\s*years?\s*old", re.IGNORECASE)


@dataclass(frozen=True)
class EnhancedPrompt:
    prompt: str
    style_type: str
    enhancements: List[str]


def _age_enhancement(age: Optional[int]) -> Optional[tuple]:
    if not age:
        return None
    if age < 25:
        return ("young adult, fresh-faced, youthful appearance", "youthful features")
    if age < 35:
        return ("young professional, vibrant and energetic", "young professional")
    if age < 50:
        return ("experienced professional, mature and confident", "mature professional")
    return ("seasoned expert, distinguished appearance", "experienced veteran")


def enhance_face_prompt(
    base_description: str,
    *,
    style: ImageStyle = ImageStyle.realistic,
    age: Optional[int] = None,
    gender: str = "neutral",
    ethnicity: Optional[str] = None,
    mood: FaceMood = FaceMood.professional,
    lighting: EnhancerLighting = EnhancerLighting.studio,
    background: EnhancerBackground = EnhancerBackground.clean,
    camera_settings: bool = True,
    facial_details: bool = True,
) -> EnhancedPrompt:
    style = ImageStyle(style)
    mood = FaceMood(mood)
    lighting = EnhancerLighting(lighting)
    background = EnhancerBackground(background)

    demographic = ""
    if gender and gender != "neutral":
        demographic += f"{gender}, "
    if ethnicity:
        demographic += f"{ethnicity} ethnicity, "

    prompt = f"{ENHANCER_STYLE[style]}, {demographic}{base_description}"

    age_bits = _age_enhancement(age)
    if age_bits:
        prompt += f", {age_bits[0]}"

    prompt += f", {ENHANCER_MOOD[mood]}, {ENHANCER_LIGHTING[lighting]}, {ENHANCER_BACKGROUND[background]}"
    if facial_details:
        prompt += f", {FACIAL_DETAILS}"
    if camera_settings:
        prompt += f", {CAMERA_SETTINGS}"
    prompt += f", {REALISM_SUFFIX}"

    enhancements = [style.value, mood.value, lighting.value, background.value]
    if age_bits:
        enhancements.append(age_bits[0])
    enhancements.extend(["photorealistic", "high detail"])

    return EnhancedPrompt(
        prompt=prompt,
        style_type="Realistic" if style == ImageStyle.realistic else "General",
        enhancements=enhancements,
    )


def extract_age(text: str) -> Optional[int]:
    """Pull "<n> years old" out of free text."""
    m = _AGE_PATTERN.search(text or "")
    return int(m.group(1)) if m else None


def teammate_face_prompt(name: str, category: str, description: str, style: ImageStyle) -> EnhancedPrompt:
    """Face-enhanced teammate prompt: mood/lighting/background follow the style."""
    style = ImageStyle(style)
    return enhance_face_prompt(
        f"{name}, {category} professional, {description}",
        style=style,
        age=extract_age(description),
        mood=FaceMood.friendly if style == ImageStyle.casual else FaceMood.professional,
        lighting=EnhancerLighting.dramatic if style == ImageStyle.artistic else EnhancerLighting.studio,
        background=EnhancerBackground.office if style == ImageStyle.professional else EnhancerBackground.clean,
    )


# ---------------------------------------------------------------------------
# Realistic human face
# ---------------------------------------------------------------------------
FACE_FRAMING: Dict[FaceFraming, str] = {
    FaceFraming.headshot: "tight headshot framing, shoulders visible, corporate headshot style",
    FaceFraming.portrait: "portrait framing, chest up, classic portrait composition",
    FaceFraming.environmental: "environmental portrait, person in professional setting, context visible",
}

FACE_LIGHTING: Dict[FaceLighting, str] = {
    FaceLighting.natural: "soft natural window light, gentle shadows, warm color temperature, flattering illumination",
    FaceLighting.studio: "professional studio lighting, key light with fill light, hair light, clean bright lighting",
    FaceLighting.dramatic: "dramatic portrait lighting, strong directional light, artistic shadows, moody atmosphere",
    FaceLighting.golden_hour: "golden hour natural light, warm sunset glow, soft rim lighting, beautiful skin tones",
}

FACE_PHOTOGRAPHY_BASE = (
    "professional headshot photography",
    "85mm lens",
    "shallow depth of field",
    "bokeh background",
    "sharp focus on eyes",
    "natural skin texture",
    "detailed facial features",
    "high resolution portrait",
)

FACE_TECHNICAL = (
    "photorealistic",
    "highly detailed",
    "professional quality",
    "commercial photography",
    "clean composition",
    "perfect exposure",
    "no artifacts",
    "no text, no watermark",
)

CUSTOM_FACE_SUFFIX = (
    "professional headshot photography, 85mm lens, shallow depth of field, bokeh background, "
    "sharp focus on eyes, natural skin texture, detailed facial features, photorealistic, "
    "highly detailed, authentic human face, genuine expression, no text, no watermark"
)


def compose_human_face_prompt(
    *,
    age: str = "adult",
    gender: str = "person",
    ethnicity: str = "",
    expression: str = "natural confident smile",
    profession: str = "professional",
    framing: FaceFraming = FaceFraming.headshot,
    lighting: FaceLighting = FaceLighting.natural,
) -> str:
    framing = FaceFraming(framing)
    lighting = FaceLighting(lighting)

    human = [
        f"{age} {gender}",
        ethnicity,
        expression,
        "authentic human face",
        "genuine expression",
        "natural realistic skin",
        "detailed eyes",
        "realistic facial proportions",
    ]
    look = [
        f"{profession} appearance",
        "professional attire",
        "well-groomed",
        "confident posture",
        "approachable demeanor",
    ]
    return _join(
        [
            _join(list(FACE_PHOTOGRAPHY_BASE)),
            _join(human),
            _join(look),
            FACE_FRAMING[framing],
            FACE_LIGHTING[lighting],
            _join(list(FACE_TECHNICAL)),
        ]
    )


def compose_custom_face_prompt(custom_prompt: str) -> str:
    return f"{_as_text(custom_prompt)}, {CUSTOM_FACE_SUFFIX}"


# ---------------------------------------------------------------------------
# Diverse partner
# ---------------------------------------------------------------------------
def partner_gender_term(gender: PartnerGender) -> str:
    gender = PartnerGender(gender)
    if gender in (PartnerGender.any, PartnerGender.non_binary):
        return "person"
    return gender.value


def compose_diverse_partner_prompt(
    description: str,
    gender: PartnerGender,
    chars: Characteristics,
) -> str:
    return _join(
        [
            "professional headshot photography, 85mm lens, shallow depth of field",
            f"{chars.age} {chars.ethnicity} {partner_gender_term(gender)}",
            *chars.descriptors(),
            "confident and approachable demeanor",
            "professional business attire",
            "looking directly at camera",
            "studio lighting, clean background",
            "photorealistic, highly detailed",
            "unique individual, distinct facial features",
            "authentic human appearance",
            description,
            "no text, no watermark, professional quality",
        ]
    )
