"""Typed inputs and results for brand identity generation.

Field names on the wire are camelCase (that is what the model is asked to
produce and what the browser consumes); Python code uses snake_case.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from errors import InvalidInputError


class Tone(str, Enum):
    PROFESSIONAL = "Professional"
    PLAYFUL = "Playful"
    MINIMALIST = "Minimalist"
    LUXURY = "Luxury"
    INNOVATIVE = "Innovative"
    FRIENDLY = "Friendly"


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

_REQUIRED_INPUTS = ("business_description", "industry", "target_audience")


class BrandInputs(_Model):
    """What the user tells us about the business.

    Text fields may be blank while the form is being edited; call
    :meth:`require_complete` before submitting.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, validate_assignment=True)

    business_description: str = ""
    industry: str = ""
    target_audience: str = ""
    tone: Tone = Tone.PROFESSIONAL
    personality_summary: Optional[str] = None

    def missing_fields(self) -> List[str]:
        return [to_camel(name) for name in _REQUIRED_INPUTS if not getattr(self, name).strip()]

    def require_complete(self) -> "BrandInputs":
        missing = self.missing_fields()
        if missing:
            raise InvalidInputError(f"Missing required fields: {', '.join(missing)}", missing)
        return self


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

class BrandName(_Model):
    name: str
    meaning: str


class PersonalityProfile(_Model):
    archetype: str
    emotional_response: str


class CustomerPersona(_Model):
    name: str
    age_range: str
    lifestyle: str
    goals: List[str]
    pain_points: List[str]
    discovery_channels: List[str]


class BrandVoice(_Model):
    style: str
    words_to_use: List[str]
    words_to_avoid: List[str]
    rules: List[str]


class ColorInfo(_Model):
    name: str
    hex: str = Field(pattern=r"^#(?:[0-9A-Fa-f]{3}|[0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$")
    emotion: str


class SocialBio(_Model):
    instagram: str
    twitter: str
    linkedin: str


class SocialPost(_Model):
    platform: str
    type: str
    content: str
    caption: str


class SocialStarterKit(_Model):
    launch_post: SocialPost
    engagement_post: SocialPost
    hashtags: List[str]


class BrandResult(_Model):
    """The complete brand identity; every field is required."""

    brand_names: List[BrandName]
    taglines: List[str]
    description: str
    mission: str
    vision: str
    positioning_statement: str
    justification: str
    personality_profile: PersonalityProfile
    customer_persona: CustomerPersona
    brand_voice: BrandVoice
    color_palette: List[ColorInfo]
    visual_mood: str
    social_bio: SocialBio
    social_starter_kit: SocialStarterKit

    def names(self) -> List[str]:
        return [bn.name for bn in self.brand_names]


# ---------------------------------------------------------------------------
# Structured-output schema sent upstream
# ---------------------------------------------------------------------------

def _string() -> Dict[str, Any]:
    return {"type": "string"}


def _strings() -> Dict[str, Any]:
    return {"type": "array", "items": _string()}


def _object(**properties: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties),
        "additionalProperties": False,
    }


def _post() -> Dict[str, Any]:
    return _object(platform=_string(), type=_string(), content=_string(), caption=_string())


BRAND_RESULT_SCHEMA: Dict[str, Any] = _object(
    brandNames={"type": "array", "items": _object(name=_string(), meaning=_string())},
    taglines=_strings(),
    description=_string(),
    mission=_string(),
    vision=_string(),
    positioningStatement=_string(),
    justification=_string(),
    personalityProfile=_object(archetype=_string(), emotionalResponse=_string()),
    customerPersona=_object(
        name=_string(),
        ageRange=_string(),
        lifestyle=_string(),
        goals=_strings(),
        painPoints=_strings(),
        discoveryChannels=_strings(),
    ),
    brandVoice=_object(
        style=_string(),
        wordsToUse=_strings(),
        wordsToAvoid=_strings(),
        rules=_strings(),
    ),
    colorPalette={
        "type": "array",
        "items": _object(name=_string(), hex=_string(), emotion=_string()),
    },
    visualMood=_string(),
    socialBio=_object(instagram=_string(), twitter=_string(), linkedin=_string()),
    socialStarterKit=_object(
        launchPost=_post(),
        engagementPost=_post(),
        hashtags=_strings(),
    ),
)
