from __future__ import annotations

import random
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

SEED_UPPER_BOUND = 1_000_000

ETHNICITIES = (
    "Caucasian",
    "African American",
    "Hispanic",
    "Asian",
    "Middle Eastern",
    "Native American",
    "Pacific Islander",
    "Mixed ethnicity",
    "South Asian",
    "European",
    "Mediterranean",
    "Scandinavian",
    "Latin American",
)

AGE_BRACKETS = (
    "young adult (25-30)",
    "adult (30-40)",
    "mature adult (40-50)",
    "middle-aged (35-45)",
    "experienced professional (45-55)",
)

FACIAL_FEATURES = (
    "oval face",
    "round face",
    "square face",
    "heart-shaped face",
    "angular features",
    "soft features",
    "defined cheekbones",
    "gentle features",
    "strong jawline",
    "delicate features",
)

EYE_COLORS = (
    "brown eyes",
    "blue eyes",
    "green eyes",
    "hazel eyes",
    "amber eyes",
    "gray eyes",
    "dark brown eyes",
)

HAIR_STYLES = (
    "short professional haircut",
    "medium length hair",
    "shoulder length hair",
    "neat business cut",
    "modern styled hair",
    "classic hairstyle",
    "contemporary cut",
    "professional styling",
)

HAIR_COLORS = (
    "dark brown hair",
    "black hair",
    "blonde hair",
    "light brown hair",
    "auburn hair",
    "gray hair",
    "salt and pepper hair",
    "chestnut hair",
)

EXPRESSIONS = (
    "warm smile",
    "confident expression",
    "friendly demeanor",
    "professional smile",
    "approachable look",
    "genuine smile",
    "calm expression",
    "engaging smile",
    "trustworthy appearance",
)


@dataclass(frozen=True)
class Characteristics:
    ethnicity: str
    age: str
    facial_features: str
    eye_color: str
    hair_style: str
    hair_color: str
    expression: str
    seed: int

    def descriptors(self) -> List[str]:
        """Visual descriptors in prompt order (demographics excluded)."""
        return [self.facial_features, self.eye_color, self.hair_style, self.hair_color, self.expression]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def random_seed(rng: Optional[random.Random] = None) -> int:
    r = rng or random
    return r.randrange(SEED_UPPER_BOUND)


def generate(rng: Optional[random.Random] = None) -> Characteristics:
    """
    Sample one value from each option list plus a seed in [0, 1_000_000).

    Every call is independent; pass a seeded ``random.Random`` for reproducible draws.
    """
    r = rng or random
    return Characteristics(
        ethnicity=r.choice(ETHNICITIES),
        age=r.choice(AGE_BRACKETS),
        facial_features=r.choice(FACIAL_FEATURES),
        eye_color=r.choice(EYE_COLORS),
        hair_style=r.choice(HAIR_STYLES),
        hair_color=r.choice(HAIR_COLORS),
        expression=r.choice(EXPRESSIONS),
        seed=random_seed(r),
    )
