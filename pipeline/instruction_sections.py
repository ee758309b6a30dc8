"""Instruction sections — default prompt text merged with admin overrides."""

from __future__ import annotations

import logging
import sqlite3

from pipeline import storage
from prompts.outreach_system import DEFAULT_SECTIONS

logger = logging.getLogger(__name__)

SECTION_KEYS: tuple[str, ...] = tuple(DEFAULT_SECTIONS)


def validate_section_key(section_key: str) -> str:
    """Return the key unchanged, or raise ValueError for an unknown section."""
    if section_key not in DEFAULT_SECTIONS:
        raise ValueError(
            f"Unknown instruction section '{section_key}'. Available: {list(SECTION_KEYS)}"
        )
    return section_key


def load_overrides() -> dict[str, str]:
    """Active overrides from storage; an unreadable database means no overrides."""
    try:
        overrides = storage.get_active_instruction_overrides()
    except sqlite3.Error as exc:
        logger.error("Could not load instruction overrides, using defaults: %s", exc)
        return {}
    unknown = set(overrides) - set(DEFAULT_SECTIONS)
    if unknown:
        logger.warning("Ignoring overrides for unknown sections: %s", sorted(unknown))
    return {k: v for k, v in overrides.items() if k in DEFAULT_SECTIONS}


def resolve_sections(overrides: dict[str, str] | None = None) -> dict[str, str]:
    """Return every section's effective text (override if present, else default)."""
    overrides = overrides or {}
    return {key: overrides.get(key) or default for key, default in DEFAULT_SECTIONS.items()}


def describe_sections(overrides: dict[str, str] | None = None) -> list[dict]:
    """Effective text plus where it came from, for the admin listing."""
    overrides = overrides or {}
    return [
        {
            "section_key": key,
            "source": "override" if overrides.get(key) else "default",
            "content": overrides.get(key) or default,
        }
        for key, default in DEFAULT_SECTIONS.items()
    ]
