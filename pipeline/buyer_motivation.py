"""Buyer motivation classification — score → resolve → describe.

Maps the two optional recipient signals (core desire, core fear) onto one of
four buyer archetypes and returns the emphasis block the outreach writer
receives. Pure functions, no state between calls.

Scoring:
  - Each recognised signal adds 2 points to exactly one archetype.
  - Missing, "not_sure" or unrecognised signals add nothing.

Resolution:
  - No points anywhere → balanced.
  - Otherwise the first archetype in declaration order (dreamer, lover,
    scholar, boss) holding the top score wins, so a dreamer/lover tie
    resolves to dreamer.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TypeVar

from prompts.buyer_motivation import (
    BALANCED_DESCRIPTION,
    BALANCED_INSTRUCTIONS,
    BOSS_DESCRIPTION,
    BOSS_INSTRUCTIONS,
    DREAMER_DESCRIPTION,
    DREAMER_INSTRUCTIONS,
    LOVER_DESCRIPTION,
    LOVER_INSTRUCTIONS,
    SCHOLAR_DESCRIPTION,
    SCHOLAR_INSTRUCTIONS,
)
from schemas.buyer_motivation import (
    SCORED_ARCHETYPES,
    Archetype,
    ArchetypeProfile,
    CoreDesire,
    CoreFear,
    MotivationProfile,
    ScoreTable,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

SIGNAL_POINTS = 2

DESIRE_ARCHETYPE: dict[CoreDesire, Archetype] = {
    CoreDesire.BREAKTHROUGH: Archetype.DREAMER,
    CoreDesire.RELATIONSHIPS: Archetype.LOVER,
    CoreDesire.INFORMED_DECISIONS: Archetype.SCHOLAR,
    CoreDesire.ACHIEVE_GOALS: Archetype.BOSS,
}

FEAR_ARCHETYPE: dict[CoreFear, Archetype] = {
    CoreFear.PLATEAUING: Archetype.DREAMER,
    CoreFear.MISSING_CONNECTIONS: Archetype.LOVER,
    CoreFear.WRONG_CHOICE: Archetype.SCHOLAR,
    CoreFear.WASTING_TIME: Archetype.BOSS,
}

ARCHETYPE_PROFILES: dict[Archetype, ArchetypeProfile] = {
    Archetype.DREAMER: ArchetypeProfile(
        description=DREAMER_DESCRIPTION, instructions=DREAMER_INSTRUCTIONS
    ),
    Archetype.LOVER: ArchetypeProfile(
        description=LOVER_DESCRIPTION, instructions=LOVER_INSTRUCTIONS
    ),
    Archetype.SCHOLAR: ArchetypeProfile(
        description=SCHOLAR_DESCRIPTION, instructions=SCHOLAR_INSTRUCTIONS
    ),
    Archetype.BOSS: ArchetypeProfile(
        description=BOSS_DESCRIPTION, instructions=BOSS_INSTRUCTIONS
    ),
    Archetype.BALANCED: ArchetypeProfile(
        description=BALANCED_DESCRIPTION, instructions=BALANCED_INSTRUCTIONS
    ),
}

# Every archetype needs a profile; checked once at import.
assert set(ARCHETYPE_PROFILES) == set(Archetype), "archetype profile table is incomplete"


def _coerce(value: E | str | None, enum_cls: type[E]) -> E | None:
    """Return the enum member for value, or None when it carries no signal."""
    if value is None:
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        logger.debug("Ignoring unrecognised %s value: %r", enum_cls.__name__, value)
        return None


def score(
    core_desire: CoreDesire | str | None = None,
    core_fear: CoreFear | str | None = None,
) -> ScoreTable:
    """Return points per scored archetype for one desire/fear pair."""
    scores: ScoreTable = {archetype: 0 for archetype in SCORED_ARCHETYPES}

    desire = _coerce(core_desire, CoreDesire)
    if desire is not None and desire in DESIRE_ARCHETYPE:
        scores[DESIRE_ARCHETYPE[desire]] += SIGNAL_POINTS

    fear = _coerce(core_fear, CoreFear)
    if fear is not None and fear in FEAR_ARCHETYPE:
        scores[FEAR_ARCHETYPE[fear]] += SIGNAL_POINTS

    return scores


def resolve(scores: ScoreTable) -> Archetype:
    """Pick the top-scoring archetype; first in declaration order wins ties."""
    best = max(SCORED_ARCHETYPES, key=lambda archetype: scores.get(archetype, 0))
    if scores.get(best, 0) <= 0:
        return Archetype.BALANCED
    return best


def describe(archetype: Archetype) -> ArchetypeProfile:
    """Return the description + emphasis instructions for an archetype.

    Raises ValueError for anything outside the Archetype enum.
    """
    return ARCHETYPE_PROFILES[Archetype(archetype)]


def classify(
    core_desire: CoreDesire | str | None = None,
    core_fear: CoreFear | str | None = None,
) -> MotivationProfile:
    """Run the full score → resolve → describe pipeline."""
    scores = score(core_desire, core_fear)
    archetype = resolve(scores)
    profile = describe(archetype)
    logger.debug(
        "Buyer motivation: desire=%r fear=%r → %s %s",
        core_desire, core_fear, archetype.value,
        {a.value: s for a, s in scores.items()},
    )
    return MotivationProfile(
        archetype=archetype,
        scores={a.value: s for a, s in scores.items()},
        description=profile.description,
        instructions=profile.instructions,
    )


def build_motivation_block(profile: MotivationProfile) -> str:
    """Format a classified profile as the BUYER MOTIVATION PROFILE prompt section."""
    return (
        "BUYER MOTIVATION PROFILE:\n"
        f"Archetype: {profile.archetype.value.title()}\n"
        f"{profile.description}\n\n"
        f"{profile.instructions}"
    )
