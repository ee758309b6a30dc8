"""Outreach schemas — generation request, context records, and model output.

The request mirrors the outreach form: type, segment, tone, channel, levers,
proof assets, CTA and the optional buyer-motivation signals. Context records
(business profile, contact card, touchpoint activities, web research) are
supplied alongside the request by the caller.

All models accept camelCase or snake_case keys; API responses are dumped
with camelCase aliases.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _as_utc(value: datetime | None) -> datetime | None:
    """Naive timestamps are taken as UTC so mixed inputs stay comparable."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class OutreachType(str, Enum):
    COLD = "cold"
    WARM = "warm"
    FOLLOW_UP = "follow_up"


class Tone(str, Enum):
    PROFESSIONAL = "professional"
    CASUAL = "casual"
    URGENT = "urgent"
    FRIENDLY = "friendly"


class Channel(str, Enum):
    EMAIL = "email"
    LINKEDIN = "linkedin"
    SOCIAL = "social"


class MessageLength(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


# Contact categories → labels shown to the model. Unknown segments pass through.
SEGMENT_LABELS: dict[str, str] = {
    "corporate_planner": "Corporate Planner",
    "wedding_planner": "Wedding Planner",
    "caterer": "Caterer",
    "dj": "DJ/Entertainment",
    "photographer": "Photographer",
    "hr": "HR/People Ops",
    "venue": "Venue",
    "hoa_leasing": "HOA/Property Manager",
    "creator": "Content Creator",
    "other": "Other",
}

CALL_TO_ACTION_LABELS: dict[str, str] = {
    "schedule_call": "Schedule a call",
    "book_consultation": "Book a consultation",
    "request_quote": "Request a quote",
    "view_portfolio": "View our portfolio",
    "schedule_tasting": "Schedule a tasting",
    "connect_linkedin": "Connect on LinkedIn",
    "reply_email": "Reply to this email",
    "visit_website": "Visit our website",
    "follow_up": "Let's follow up soon",
    "custom": "Custom (adapt to the situation)",
}

AI_CHOOSE_CTA = "ai_choose"


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------

class OutreachRequest(_CamelModel):
    """Parameters for one outreach generation."""
    outreach_type: OutreachType = OutreachType.COLD
    segment: str = "other"
    goals: str = ""
    tone: Tone = Tone.PROFESSIONAL
    psychological_levers: list[str] = Field(default_factory=list)
    channel: Channel = Channel.EMAIL
    sequence_step: int = Field(1, ge=1)
    length: MessageLength = MessageLength.MEDIUM
    holiday_edition: bool = False
    proof_assets: list[str] = Field(default_factory=list)
    personalization_tokens: str = ""
    contact_id: Optional[str] = None
    contact_name: Optional[str] = None
    offer_incentive: Optional[str] = None
    call_to_action: Optional[str] = None
    contact_specific_goal: Optional[str] = None
    # Free strings on purpose: unknown values carry no signal instead of failing.
    core_desire: Optional[str] = None
    core_fear: Optional[str] = None

    @property
    def segment_label(self) -> str:
        return SEGMENT_LABELS.get(self.segment, self.segment)


# ---------------------------------------------------------------------------
# Context records
# ---------------------------------------------------------------------------

class BusinessProfile(_CamelModel):
    business_name: str
    value_proposition: Optional[str] = None
    industry: Optional[str] = None
    target_market: Optional[str] = None
    key_differentiators: Optional[str] = None


class ContactProfile(_CamelModel):
    name: str
    company: Optional[str] = None
    position: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    linkedin_url: Optional[str] = None
    website_url: Optional[str] = None
    status: Optional[str] = None
    relationship_type: Optional[str] = None
    category: Optional[str] = None
    notes: Optional[str] = None
    last_contact_date: Optional[datetime] = None
    total_touchpoints: int = 0

    @field_validator("last_contact_date")
    @classmethod
    def last_contact_as_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class TouchpointActivity(_CamelModel):
    """One logged interaction with a contact.

    description may use the structured form
    "INTERNAL_NOTES: ... | CONTACT_STATEMENTS: ..."; only the contact
    statements are ever shown to the model.
    """
    type: str
    title: str
    description: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None
    response_received: bool = False

    @field_validator("created_at", "completed_at")
    @classmethod
    def timestamps_as_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class ResearchSource(_CamelModel):
    url: str
    content: str = ""
    fetched_at: Optional[datetime] = None

    @field_validator("fetched_at")
    @classmethod
    def fetched_at_as_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class ContactResearch(_CamelModel):
    """Networking insights about a contact."""
    bio: str = Field("", description="Professional background in 2-3 sentences")
    key_facts: list[str] = Field(
        default_factory=list, description="3-5 specific, verifiable facts"
    )
    icebreakers: list[str] = Field(
        default_factory=list, description="3-4 conversation starters"
    )
    outreach_angles: list[str] = Field(
        default_factory=list, description="3-4 professional approaches"
    )
    sources: list[ResearchSource] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

class OutreachContent(_CamelModel):
    """Generated outreach bundle, one field per channel."""
    subject_line: str = ""
    email_body: str = ""
    linkedin_message: str = ""
    social_media_post: str = ""
    call_script: str = ""
    follow_up_suggestion: str = ""
    key_angle: str = ""
    proof_points: list[str] = Field(default_factory=list)
    call_to_action: str = ""


class OutreachResult(_CamelModel):
    """What a generation run hands back to callers."""
    content: OutreachContent
    archetype: str
    parsed: bool = Field(
        True, description="False when the model reply was not JSON and fallback content was used"
    )
    provider: str = ""
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0


# ---------------------------------------------------------------------------
# API bodies
# ---------------------------------------------------------------------------

class GenerateOutreachBody(_CamelModel):
    """Everything one generation needs: the form plus caller-supplied context."""
    request: OutreachRequest
    business_profile: Optional[BusinessProfile] = None
    contact: Optional[ContactProfile] = None
    activities: list[TouchpointActivity] = Field(default_factory=list)
    research: Optional[ContactResearch] = None
    provider: Optional[str] = None
    model: Optional[str] = None


class ResearchContactBody(_CamelModel):
    contact_id: str
    contact: ContactProfile
    provider: Optional[str] = None
    model: Optional[str] = None
    refresh: bool = Field(False, description="Research again even when completed research exists")


class InstructionUpdate(_CamelModel):
    content: str
    is_active: bool = True
