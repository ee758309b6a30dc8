"""Buyer motivation schema — desire/fear signals and the archetype they resolve to.

Two optional categorical signals about the recipient (what they want most,
what worries them) are scored onto four buyer archetypes. The resolved
archetype picks the emphasis block that is spliced into the outreach prompt.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class CoreDesire(str, Enum):
    BREAKTHROUGH = "breakthrough"
    RELATIONSHIPS = "relationships"
    INFORMED_DECISIONS = "informed_decisions"
    ACHIEVE_GOALS = "achieve_goals"
    NOT_SURE = "not_sure"


class CoreFear(str, Enum):
    PLATEAUING = "plateauing"
    MISSING_CONNECTIONS = "missing_connections"
    WRONG_CHOICE = "wrong_choice"
    WASTING_TIME = "wasting_time"
    NOT_SURE = "not_sure"


class Archetype(str, Enum):
    # Declaration order is the tie-break order used by the resolver.
    DREAMER = "dreamer"
    LOVER = "lover"
    SCHOLAR = "scholar"
    BOSS = "boss"
    BALANCED = "balanced"


# The four archetypes that can receive points, in tie-break order.
SCORED_ARCHETYPES: tuple[Archetype, ...] = (
    Archetype.DREAMER,
    Archetype.LOVER,
    Archetype.SCHOLAR,
    Archetype.BOSS,
)

ScoreTable = dict[Archetype, int]


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

class ArchetypeProfile(BaseModel):
    """Fixed prose attached to one archetype."""
    description: str = Field(
        ..., description="One sentence on the recipient's presumed psychology"
    )
    instructions: str = Field(
        ..., description="Emphasis directives for the downstream writer"
    )


class MotivationProfile(BaseModel):
    """Result of classifying one desire/fear pair."""
    archetype: Archetype
    scores: dict[str, int] = Field(
        default_factory=dict,
        description="Points per scored archetype, in tie-break order",
    )
    description: str
    instructions: str


class MotivationQuery(BaseModel):
    """Raw desire/fear pair as submitted by a client. Unknown values are kept
    as plain strings and simply carry no signal."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    core_desire: str | None = None
    core_fear: str | None = None
