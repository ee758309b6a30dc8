"""Contact Researcher — networking insights for one contact.

Inputs:
  - contact: ContactProfile (or its dict form)

Fetches the contact's website and LinkedIn pages, then asks the LLM for a
short bio, key facts, icebreakers and outreach angles. When the LLM is
unavailable or returns nothing useful, falls back to research built from
the contact card alone. Fetched sources are kept either way.

Output: ContactResearch
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel

import config
from pipeline.base_agent import BaseAgent
from pipeline.llm import LLMError
from pipeline.scraper import fetch_page_text, normalize_url
from prompts.contact_research_system import SYSTEM_PROMPT
from schemas.outreach import ContactProfile, ContactResearch, ResearchSource

FALLBACK_ICEBREAKERS = [
    "Hope you're doing well!",
    "I came across your profile and was impressed by your work.",
    "I'd love to catch up and hear about what you're working on.",
    "Thought you might be interested in this opportunity.",
]

FALLBACK_ANGLES = [
    "Mutual connection introduction",
    "Industry insights sharing",
    "Collaboration opportunity",
    "Professional development discussion",
]


def _contact(inputs: dict[str, Any]) -> ContactProfile:
    contact = inputs["contact"]
    if isinstance(contact, ContactProfile):
        return contact
    return ContactProfile.model_validate(contact)


def candidate_urls(contact: ContactProfile) -> list[str]:
    """URLs worth fetching for this contact, capped at RESEARCH_MAX_URLS."""
    urls = [normalize_url(u) for u in (contact.website_url, contact.linkedin_url) if u and u.strip()]
    return urls[: config.RESEARCH_MAX_URLS]


def fallback_research(contact: ContactProfile, sources: list[ResearchSource] | None = None) -> ContactResearch:
    """Research built from the contact card alone."""
    role = f"works as {contact.position}" if contact.position else "is a professional"
    where = f"at {contact.company}" if contact.company else "in their field"
    return ContactResearch(
        bio=f"{contact.name} {role} {where}.",
        key_facts=[
            f"Works at {contact.company}" if contact.company else "Company information not available",
            f"Position: {contact.position}" if contact.position else "Position not specified",
            f"Category: {contact.category}" if contact.category else "General contact",
            f"Relationship: {contact.relationship_type}" if contact.relationship_type else "Professional relationship",
        ],
        icebreakers=list(FALLBACK_ICEBREAKERS),
        outreach_angles=list(FALLBACK_ANGLES),
        sources=sources or [],
    )


class ContactResearcher(BaseAgent):
    name = "Contact Researcher"
    slug = "contact_researcher"
    description = (
        "Fetches a contact's public pages and condenses them into a bio, "
        "key facts, icebreakers and outreach angles."
    )

    @property
    def output_schema(self) -> type[BaseModel]:
        return ContactResearch

    def build_system_prompt(self, inputs: dict[str, Any]) -> str:
        return SYSTEM_PROMPT

    def build_user_prompt(self, inputs: dict[str, Any]) -> str:
        contact = _contact(inputs)
        sources: list[ResearchSource] = inputs.get("sources") or []
        web_content = "\n\n".join(s.content for s in sources)[: config.RESEARCH_WEB_CONTEXT_MAX_CHARS]

        return f"""Based on the following contact information and any available web research, provide professional networking insights:

CONTACT INFO:
Name: {contact.name}
Company: {contact.company or 'N/A'}
Position: {contact.position or 'N/A'}
Email: {contact.email or 'N/A'}
Phone: {contact.phone or 'N/A'}
LinkedIn: {contact.linkedin_url or 'N/A'}
Website: {contact.website_url or 'N/A'}
Notes: {contact.notes or 'N/A'}
Category: {contact.category or 'N/A'}
Status: {contact.status or 'N/A'}
Relationship: {contact.relationship_type or 'N/A'}

WEB RESEARCH:
{web_content or 'No web research available'}

Focus on professional, warm networking approaches. Be specific and actionable."""

    def fetch_sources(self, contact: ContactProfile) -> list[ResearchSource]:
        """Fetch each candidate URL; failures are logged and skipped."""
        sources = []
        for url in candidate_urls(contact):
            try:
                text = fetch_page_text(url, max_chars=config.RESEARCH_SOURCE_MAX_CHARS)
            except ValueError as e:
                self.logger.warning("Skipping source: %s", e)
                continue
            if text:
                sources.append(
                    ResearchSource(url=url, content=text, fetched_at=datetime.now(timezone.utc))
                )
        self.logger.info("Fetched %d/%d sources for %s", len(sources), len(candidate_urls(contact)), contact.name)
        return sources

    def run(self, inputs: dict[str, Any]) -> ContactResearch:
        """Fetch sources → LLM insights (or fallback) → attach sources → save."""
        contact = _contact(inputs)
        sources = self.fetch_sources(contact)

        try:
            research = super().run({**inputs, "contact": contact, "sources": sources})
        except LLMError as e:
            self.logger.warning("LLM research failed for %s, using contact card: %s", contact.name, e)
            research = None

        if research is None or (not research.bio and not research.key_facts):
            research = fallback_research(contact, sources)
        else:
            research = research.model_copy(update={"sources": sources})

        self._save_output(research)
        return research
