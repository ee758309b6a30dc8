"""Contact context — turns business profile, touchpoints and research into prompt text.

Three blocks feed the outreach system prompt:
  - BUSINESS CONTEXT: the sender's profile, or the business_context section.
  - RECENT TOUCHPOINT HISTORY: contact card + last activities, or a
    new-contact notice when nothing has been logged yet.
  - WEB RESEARCH INSIGHTS: bio, facts, icebreakers and angles from research.

Internal notes on activities never leave this module; only what the contact
said or asked is shown to the model.
"""

from __future__ import annotations

import logging
from datetime import datetime

import config
from schemas.outreach import (
    BusinessProfile,
    ContactProfile,
    ContactResearch,
    TouchpointActivity,
)

logger = logging.getLogger(__name__)

INTERNAL_NOTES_PREFIX = "INTERNAL_NOTES:"
CONTACT_STATEMENTS_PREFIX = "CONTACT_STATEMENTS:"

NEW_CONTACT_NOTICE = (
    "CONTACT STATUS: This appears to be a new contact with no previous touchpoint "
    "history. Focus on making a strong first impression."
)


def _format_date(value: datetime) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def parse_activity_description(description: str | None) -> tuple[str, str]:
    """Split an activity description into (internal_notes, contact_statements).

    Descriptions without a CONTACT_STATEMENTS part are the legacy format and
    are treated entirely as internal notes.
    """
    if not description:
        return "", ""
    if CONTACT_STATEMENTS_PREFIX not in description:
        return description, ""

    internal_notes = ""
    contact_statements = ""
    for part in description.split(" | "):
        if part.startswith(INTERNAL_NOTES_PREFIX):
            internal_notes = part[len(INTERNAL_NOTES_PREFIX):].strip()
        elif part.startswith(CONTACT_STATEMENTS_PREFIX):
            contact_statements = part[len(CONTACT_STATEMENTS_PREFIX):].strip()
    return internal_notes, contact_statements


def _contact_summary(contact: ContactProfile) -> str:
    last_contact = _format_date(contact.last_contact_date) if contact.last_contact_date else "Never"
    return (
        "CONTACT PROFILE:\n"
        f"- Name: {contact.name}\n"
        f"- Company: {contact.company or 'N/A'}\n"
        f"- Status: {contact.status or 'N/A'}\n"
        f"- Relationship: {contact.relationship_type or 'N/A'}\n"
        f"- Category: {contact.category or 'N/A'}\n"
        f"- Total touchpoints: {contact.total_touchpoints or 0}\n"
        f"- Last contact: {last_contact}\n"
        f"- Notes: {contact.notes or 'None'}"
    )


def _activity_line(index: int, activity: TouchpointActivity) -> str:
    when = _format_date(activity.completed_at or activity.created_at)
    response = " (Response received)" if activity.response_received else " (No response)"
    line = f"{index}. {activity.type}: {activity.title}{response} - {when}"
    _notes, statements = parse_activity_description(activity.description)
    if statements:
        line += f'\n   Contact said/asked: "{statements}"'
    return line


def recent_activities(
    activities: list[TouchpointActivity],
    limit: int = config.TOUCHPOINT_HISTORY_LIMIT,
) -> list[TouchpointActivity]:
    """Newest first by creation time, capped at limit."""
    return sorted(activities, key=lambda a: a.created_at, reverse=True)[:limit]


def build_touchpoint_context(
    contact: ContactProfile | None,
    activities: list[TouchpointActivity] | None,
) -> str:
    """Return the touchpoint history block ('' when there is no contact)."""
    if contact is None:
        return ""

    recent = recent_activities(activities or [])
    if not recent:
        return NEW_CONTACT_NOTICE

    history = "\n".join(
        _activity_line(i, activity) for i, activity in enumerate(recent, start=1)
    )
    logger.info("Touchpoint context: %s with %d activities", contact.name, len(recent))
    return (
        "RECENT TOUCHPOINT HISTORY:\n"
        f"{_contact_summary(contact)}\n\n"
        "RECENT ACTIVITIES:\n"
        f"{history}\n\n"
        "Based on this history, personalize the outreach to acknowledge previous "
        "interactions and build on the existing relationship context."
    )


def _numbered(items: list[str]) -> str:
    if not items:
        return "None available"
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, start=1))


def build_research_context(research: ContactResearch | None) -> str:
    """Return the WEB RESEARCH INSIGHTS block ('' when there is no research)."""
    if research is None:
        return ""

    sections = ["WEB RESEARCH INSIGHTS:"]
    if research.bio:
        sections.append(f"Professional Background: {research.bio}")
    sections.append(f"\nKey Facts:\n{_numbered(research.key_facts)}")
    sections.append(f"\nConversation Starters:\n{_numbered(research.icebreakers)}")
    sections.append(f"\nOutreach Angles:\n{_numbered(research.outreach_angles)}")
    if research.sources:
        sections.append(f"\nData Sources: {len(research.sources)} web sources analyzed")
    sections.append(
        "\nCRITICAL: Use these insights heavily in the generated content. Include at "
        "least 2-3 specific facts from the research in your outreach, and base at "
        "least one conversation starter on the icebreakers provided. Make the "
        "research integration obvious and valuable."
    )
    return "\n".join(sections)


def build_business_context(profile: BusinessProfile | None, fallback: str) -> str:
    """Describe the sender's business, or return the fallback section text."""
    if profile is None:
        return fallback
    return (
        f"Business Name: {profile.business_name}\n"
        f"Value Proposition: {profile.value_proposition or 'Premium mobile bar services'}\n"
        f"Industry: {profile.industry or 'Mobile Bar/Event Services'}\n"
        f"Target Market: {profile.target_market or 'Event planners, venues, corporate clients'}\n"
        f"Key Differentiators: {profile.key_differentiators or 'Professional, insured, turn-key service'}"
    )
