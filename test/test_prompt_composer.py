import random

import pytest

from svc_teammate.domain.enums import (
    FaceFraming,
    FaceLighting,
    ImageStyle,
    PartnerGender,
    PortraitCategory,
)
from svc_teammate.services import characteristics
from svc_teammate.services.prompt_composer import (
    CLOSING_BOILERPLATE,
    CUSTOM_FACE_SUFFIX,
    StyleOptions,
    category_clothing,
    characteristic_enrichment,
    compose_custom_face_prompt,
    compose_diverse_partner_prompt,
    compose_human_face_prompt,
    compose_prompt,
    enhance_face_prompt,
    extract_age,
    teammate_face_prompt,
)


@pytest.mark.parametrize("style", list(ImageStyle))
@pytest.mark.parametrize("category", ["business", "technology", "life", None, "underwater-basket-weaving"])
def test_every_prompt_ends_with_boilerplate(style, category):
    prompt = compose_prompt("curious and kind", StyleOptions(style=style, category=category))
    assert prompt.endswith(CLOSING_BOILERPLATE)


def test_unknown_category_uses_default_clothing():
    prompt = compose_prompt("x", StyleOptions(category="underwater-basket-weaving"))
    assert category_clothing(PortraitCategory.default) in prompt


def test_category_is_case_insensitive():
    assert PortraitCategory.parse("Finance") == PortraitCategory.finance
    assert category_clothing(PortraitCategory.finance) in compose_prompt("x", StyleOptions(category="FINANCE"))


def test_clothing_is_defined_for_every_category():
    phrases = {category_clothing(c) for c in PortraitCategory}
    assert len(phrases) == len(PortraitCategory)


def test_compose_is_deterministic_with_fixed_characteristics():
    chars = characteristics.generate(random.Random(3))
    opts = StyleOptions(style=ImageStyle.casual, category="creative", characteristics=chars)
    assert compose_prompt("bold", opts) == compose_prompt("bold", opts)
    assert f"{chars.age} {chars.ethnicity} person" in compose_prompt("bold", opts)


def test_empty_base_omits_personality():
    assert "personality:" not in compose_prompt("  ", StyleOptions())
    assert "personality: warm" in compose_prompt("warm", StyleOptions())


def test_unknown_style_raises():
    with pytest.raises(ValueError):
        compose_prompt("x", StyleOptions(style="cubist"))


def test_characteristic_enrichment_appends_descriptors():
    chars = characteristics.generate(random.Random(11))
    out = characteristic_enrichment("base prompt", chars)
    assert out.startswith("base prompt, ")
    assert f"diverse {chars.ethnicity} person" in out
    for d in chars.descriptors():
        assert d in out


@pytest.mark.parametrize(
    "age,phrase",
    [
        (22, "young adult, fresh-faced"),
        (30, "young professional"),
        (45, "experienced professional"),
        (60, "seasoned expert"),
    ],
)
def test_enhancer_age_brackets(age, phrase):
    assert phrase in enhance_face_prompt("a designer", age=age).prompt


def test_enhancer_without_age_or_camera():
    enhanced = enhance_face_prompt("a designer", camera_settings=False, style=ImageStyle.artistic)
    assert "85mm portrait lens" not in enhanced.prompt
    assert enhanced.style_type == "General"
    assert enhanced.prompt.startswith("artistic portrait")


def test_extract_age():
    assert extract_age("A 42 years old chef") == 42
    assert extract_age("1 year old") == 1
    assert extract_age("ageless") is None


def test_teammate_face_prompt_picks_up_age():
    enhanced = teammate_face_prompt("Ana", "finance", "a 52 years old analyst", ImageStyle.professional)
    assert "seasoned expert" in enhanced.prompt
    assert "modern office environment" in enhanced.prompt
    assert enhanced.prompt.startswith("professional business portrait")


def test_human_face_prompt_structure():
    prompt = compose_human_face_prompt(
        age="young",
        gender="man",
        ethnicity="Korean",
        profession="chef",
        framing=FaceFraming.environmental,
        lighting=FaceLighting.dramatic,
    )
    assert prompt.startswith("professional headshot photography, 85mm lens")
    assert "young man, Korean" in prompt
    assert "chef appearance" in prompt
    assert "environmental portrait" in prompt
    assert "dramatic portrait lighting" in prompt
    assert prompt.endswith("no text, no watermark")


def test_human_face_prompt_skips_empty_ethnicity():
    assert ", ," not in compose_human_face_prompt(ethnicity="")


def test_custom_face_prompt():
    assert compose_custom_face_prompt(" a pilot ") == f"a pilot, {CUSTOM_FACE_SUFFIX}"


@pytest.mark.parametrize(
    "gender,term",
    [(PartnerGender.male, "male"), (PartnerGender.female, "female"),
     (PartnerGender.any, "person"), (PartnerGender.non_binary, "person")],
)
def test_diverse_partner_gender_term(gender, term):
    chars = characteristics.generate(random.Random(5))
    prompt = compose_diverse_partner_prompt("approachable", gender, chars)
    assert f"{chars.age} {chars.ethnicity} {term}" in prompt
    assert prompt.endswith("no text, no watermark, professional quality")
