"""Shared text filters for generated outreach copy."""

from __future__ import annotations

import re

from schemas.outreach import OutreachContent

_DASHES = re.compile("[\u2014\u2013]")
_DOUBLE_HYPHEN = re.compile(r"--")
_DOUBLE_COMMA = re.compile(r",\s+,")
_TRAILING_COMMA = re.compile(r",\s*$")


def sanitize_text(text: str | None) -> str | None:
    """Replace em/en dashes and double hyphens with commas.

    Empty or None input is returned unchanged.
    """
    if not text:
        return text
    cleaned = _DASHES.sub(", ", text)
    cleaned = _DOUBLE_HYPHEN.sub(", ", cleaned)
    cleaned = _DOUBLE_COMMA.sub(",", cleaned)
    cleaned = _TRAILING_COMMA.sub("", cleaned)
    return cleaned.strip()


def sanitize_content(content: OutreachContent) -> OutreachContent:
    """Sanitize every text field; DM and call script fall back to the LinkedIn copy."""
    return OutreachContent(
        subject_line=sanitize_text(content.subject_line) or "",
        email_body=sanitize_text(content.email_body) or "",
        linkedin_message=sanitize_text(content.linkedin_message) or "",
        social_media_post=sanitize_text(content.social_media_post or content.linkedin_message) or "",
        call_script=sanitize_text(content.call_script or content.linkedin_message) or "",
        follow_up_suggestion=sanitize_text(content.follow_up_suggestion) or "",
        key_angle=sanitize_text(content.key_angle) or "",
        proof_points=[sanitize_text(point) or "" for point in content.proof_points],
        call_to_action=sanitize_text(content.call_to_action) or "",
    )
