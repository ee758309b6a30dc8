"""Outreach engine configuration — LLM providers, per-agent model assignments, paths."""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
ROOT_DIR = Path(__file__).parent
OUTPUT_DIR = ROOT_DIR / os.getenv("OUTPUT_DIR", "outputs")
DB_PATH = Path(os.getenv("OUTREACH_DB_PATH", str(ROOT_DIR / "outreach_engine.db")))

# ---------------------------------------------------------------------------
# LLM Provider API Keys
# ---------------------------------------------------------------------------
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "")
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "")

# ---------------------------------------------------------------------------
# Model names (centralized so they're easy to update)
# ---------------------------------------------------------------------------
OPENAI_WRITER = "gpt-4.1-2025-04-14"
OPENAI_MINI = "gpt-4o-mini"
GOOGLE_DEFAULT = "gemini-2.5-flash"
ANTHROPIC_DEFAULT = "claude-sonnet-4-20250514"

DEFAULT_PROVIDER = os.getenv("DEFAULT_PROVIDER", "openai")
DEFAULT_MODEL = os.getenv("DEFAULT_MODEL", OPENAI_WRITER)

# ---------------------------------------------------------------------------
# Per-Agent Model Assignments
#
# Override any agent via env: OUTREACH_WRITER_PROVIDER=anthropic
#                             OUTREACH_WRITER_MODEL=claude-sonnet-4-20250514
# ---------------------------------------------------------------------------

AGENT_LLM_CONFIG: dict[str, dict] = {
    # Writes the email / LinkedIn / DM / call-script bundle in one JSON reply
    "outreach_writer": {
        "provider": os.getenv("OUTREACH_WRITER_PROVIDER", DEFAULT_PROVIDER),
        "model": os.getenv("OUTREACH_WRITER_MODEL", OPENAI_WRITER),
        "temperature": float(os.getenv("OUTREACH_WRITER_TEMPERATURE", "0.7")),
        "max_tokens": int(os.getenv("OUTREACH_WRITER_MAX_TOKENS", "1500")),
    },
    # Condenses a contact card + scraped pages into networking insights
    "contact_researcher": {
        "provider": os.getenv("CONTACT_RESEARCHER_PROVIDER", DEFAULT_PROVIDER),
        "model": os.getenv("CONTACT_RESEARCHER_MODEL", OPENAI_MINI),
        "temperature": 0.7,
        "max_tokens": 2_000,
    },
}


def get_agent_llm_config(agent_slug: str) -> dict:
    """Return the LLM config for a specific agent, with defaults."""
    defaults = {
        "provider": DEFAULT_PROVIDER,
        "model": DEFAULT_MODEL,
        "temperature": 0.7,
        "max_tokens": 1_500,
    }
    agent_conf = AGENT_LLM_CONFIG.get(agent_slug, {})
    return {**defaults, **agent_conf}


# ---------------------------------------------------------------------------
# Contact research
# ---------------------------------------------------------------------------
RESEARCH_MAX_URLS = int(os.getenv("RESEARCH_MAX_URLS", "2"))
RESEARCH_SOURCE_MAX_CHARS = 2_000
RESEARCH_WEB_CONTEXT_MAX_CHARS = 3_000
RESEARCH_FETCH_TIMEOUT = float(os.getenv("RESEARCH_FETCH_TIMEOUT", "10"))

# Most recent activities included in the touchpoint history block
TOUCHPOINT_HISTORY_LIMIT = 5

# ---------------------------------------------------------------------------
# Logging / server
# ---------------------------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
SERVER_HOST = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT = int(os.getenv("SERVER_PORT", "8000"))

# Ensure output dir exists
OUTPUT_DIR.mkdir(exist_ok=True)
