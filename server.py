"""Outreach Engine web server.

FastAPI backend exposing outreach generation, buyer-motivation
classification, contact research, instruction-section admin and
generation history (SQLite-backed).

Usage:
    python server.py
    # Then POST to http://localhost:8000/api/outreach/generate
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse

import config
from pipeline import storage
from pipeline.buyer_motivation import classify
from pipeline.instruction_sections import (
    describe_sections,
    load_overrides,
    validate_section_key,
)
from pipeline.llm import LLMError, get_usage_summary
from pipeline.orchestrator import generate_outreach, research_contact
from schemas.buyer_motivation import MotivationQuery
from schemas.outreach import (
    GenerateOutreachBody,
    InstructionUpdate,
    ResearchContactBody,
)

logging.basicConfig(level=getattr(logging, config.LOG_LEVEL), format="%(asctime)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)


def _provider_keys() -> dict[str, bool]:
    return {
        "openai": bool(config.OPENAI_API_KEY),
        "anthropic": bool(config.ANTHROPIC_API_KEY),
        "google": bool(config.GOOGLE_API_KEY),
    }


def _check_api_keys() -> list[str]:
    """Human-readable problems with the configured provider keys (empty when all set)."""
    keys = _provider_keys()
    problems = [f"{name.upper()}_API_KEY is missing" for name, present in keys.items() if not present]
    default = config.DEFAULT_PROVIDER
    if not keys.get(default):
        problems.insert(0, f"{default.upper()}_API_KEY is required by DEFAULT_PROVIDER={default}; outreach generation will fail")
    return problems


@asynccontextmanager
async def lifespan(app: FastAPI):
    storage.init_db()
    problems = _check_api_keys()
    for problem in problems:
        logger.warning("Key check: %s", problem)
    if problems:
        logger.warning("Fill in .env (see .env.example) and restart")
    else:
        logger.info("Key check: openai, anthropic and google keys present")

    yield

    storage.close_db()


app = FastAPI(title="Outreach Engine", version="1.0.0", lifespan=lifespan)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


# ---------------------------------------------------------------------------
# Outreach generation
# ---------------------------------------------------------------------------

@app.post("/api/outreach/generate")
async def api_generate_outreach(body: GenerateOutreachBody):
    """Generate an outreach bundle for one request."""
    loop = asyncio.get_running_loop()
    try:
        result = await loop.run_in_executor(None, generate_outreach, body)
    except LLMError as e:
        logger.error("Outreach generation failed: %s", e)
        return _error(str(e), 502)
    except ValueError as e:
        return _error(str(e), 400)

    return {
        **result.content.model_dump(mode="json", by_alias=True),
        "archetype": result.archetype,
        "parsed": result.parsed,
        "usage": {
            "provider": result.provider,
            "model": result.model,
            "inputTokens": result.input_tokens,
            "outputTokens": result.output_tokens,
        },
    }


@app.post("/api/buyer-motivation")
async def api_buyer_motivation(query: MotivationQuery):
    """Classify a desire/fear pair into a buyer archetype."""
    profile = classify(query.core_desire, query.core_fear)
    return profile.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Contact research
# ---------------------------------------------------------------------------

@app.post("/api/contacts/research")
async def api_research_contact(body: ResearchContactBody):
    """Research a contact's public pages and store the insights."""
    loop = asyncio.get_running_loop()
    try:
        research = await loop.run_in_executor(
            None, research_contact, body.contact_id, body.contact, body.provider, body.model, body.refresh,
        )
    except ValueError as e:
        return _error(str(e), 400)

    return {
        "contactId": body.contact_id,
        "status": "completed",
        "researchData": research.model_dump(mode="json", by_alias=True),
    }


@app.get("/api/contacts/{contact_id}/research")
async def api_get_research(contact_id: str):
    """Latest completed research for a contact."""
    research = storage.get_latest_research(contact_id)
    if research is None:
        return _error(f"No research found for contact {contact_id}", 404)
    return {"contactId": contact_id, "status": "completed", "researchData": research}


# ---------------------------------------------------------------------------
# Instruction sections (admin)
# ---------------------------------------------------------------------------

@app.get("/api/instructions")
async def api_list_instructions():
    """Every section with its effective content and whether it's overridden."""
    return describe_sections(load_overrides())


@app.put("/api/instructions/{section_key}")
async def api_set_instruction(section_key: str, update: InstructionUpdate):
    try:
        validate_section_key(section_key)
    except ValueError as e:
        return _error(str(e), 400)
    storage.set_instruction_section(section_key, update.content, update.is_active)
    return {"sectionKey": section_key, "isActive": update.is_active, "saved": True}


@app.delete("/api/instructions/{section_key}")
async def api_reset_instruction(section_key: str):
    """Drop an override so the default text applies again."""
    try:
        validate_section_key(section_key)
    except ValueError as e:
        return _error(str(e), 400)
    return {"sectionKey": section_key, "deleted": storage.delete_instruction_section(section_key)}


# ---------------------------------------------------------------------------
# History / usage / health
# ---------------------------------------------------------------------------

@app.get("/api/history")
async def api_history(limit: Annotated[int, Query(ge=1, le=500)] = 50):
    """Recent generation attempts, newest first."""
    return storage.list_outreach_requests(limit=limit)


@app.get("/api/history/{request_id}")
async def api_history_item(request_id: int):
    record = storage.get_outreach_request(request_id)
    if not record:
        return _error(f"Request #{request_id} not found", 404)
    return record


@app.get("/api/usage")
async def api_usage():
    """Token and cost totals since the server started."""
    return get_usage_summary()


@app.get("/api/health")
async def api_health():
    """Whether the default provider can be called, plus which keys are present."""
    keys = _provider_keys()
    return {
        "ok": keys.get(config.DEFAULT_PROVIDER, False),
        "defaultProvider": config.DEFAULT_PROVIDER,
        "defaultModel": config.DEFAULT_MODEL,
        "providers": keys,
        "warnings": _check_api_keys(),
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn
    print("\n  Outreach Engine API")
    print(f"  http://localhost:{config.SERVER_PORT}/docs\n")
    uvicorn.run(app, host=config.SERVER_HOST, port=config.SERVER_PORT, log_level="info")
