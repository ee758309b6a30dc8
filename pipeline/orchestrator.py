"""Pipeline orchestrator — research → generate, with request logging.

generate_outreach() and research_contact() are the entry points shared by
the API server and the CLI. Pipeline wraps them for interactive CLI runs
with rich progress panels and a summary table.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from pydantic import BaseModel
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from agents.contact_researcher import ContactResearcher
from agents.outreach_writer import OutreachWriter
from pipeline import storage
from pipeline.base_agent import BaseAgent
from pipeline.instruction_sections import load_overrides
from pipeline.llm import LLMError
from schemas.outreach import (
    ContactProfile,
    ContactResearch,
    GenerateOutreachBody,
    OutreachResult,
)

logger = logging.getLogger(__name__)
console = Console()


def _lookup_research(body: GenerateOutreachBody) -> ContactResearch | None:
    """Explicit research wins; otherwise the contact's latest stored research."""
    if body.research is not None:
        return body.research
    contact_id = body.request.contact_id
    if not contact_id:
        return None
    stored = storage.get_latest_research(contact_id)
    if not stored:
        return None
    logger.info("Using stored research for contact %s", contact_id)
    return ContactResearch.model_validate(stored)


def generate_outreach(body: GenerateOutreachBody) -> OutreachResult:
    """Run the outreach writer and log the attempt (success or failure).

    Any error propagates after the failure is logged; the server maps
    LLMError and ValueError to 502 and 400.
    """
    request = body.request
    writer = OutreachWriter(provider=body.provider, model=body.model)
    request_payload = request.model_dump(mode="json", by_alias=True)

    start = time.time()
    try:
        result = writer.run({
            "request": request,
            "business_profile": body.business_profile,
            "contact": body.contact,
            "activities": body.activities,
            "research": _lookup_research(body),
            "instruction_overrides": load_overrides(),
        })
    except Exception as e:
        storage.log_outreach_request(
            request_payload,
            success=False,
            contact_id=request.contact_id,
            provider=writer.provider,
            model=writer.model,
            elapsed_ms=int((time.time() - start) * 1000),
            error_message=str(e) or type(e).__name__,
        )
        raise

    storage.log_outreach_request(
        request_payload,
        success=True,
        contact_id=request.contact_id,
        archetype=result.archetype,
        provider=result.provider,
        model=result.model,
        input_tokens=result.input_tokens,
        output_tokens=result.output_tokens,
        elapsed_ms=int((time.time() - start) * 1000),
        output=result.content.model_dump(mode="json", by_alias=True),
    )
    return result


def research_contact(
    contact_id: str,
    contact: ContactProfile,
    provider: str | None = None,
    model: str | None = None,
    refresh: bool = False,
) -> ContactResearch:
    """Research a contact and store the result as completed.

    Completed research already on file is returned as-is unless refresh is set.
    """
    if not refresh:
        stored = storage.get_latest_research(contact_id)
        if stored:
            logger.info("Research for contact %s already on file, skipping", contact_id)
            return ContactResearch.model_validate(stored)

    researcher = ContactResearcher(provider=provider, model=model)
    research = researcher.run({"contact": contact})
    storage.save_contact_research(contact_id, research.model_dump(mode="json", by_alias=True))
    return research


class PipelineResult:
    """Collects all step outputs from a pipeline run."""

    def __init__(self):
        self.outputs: dict[str, BaseModel] = {}
        self.timings: dict[str, float] = {}
        self.errors: dict[str, str] = {}

    def add(self, slug: str, output: BaseModel, elapsed: float):
        self.outputs[slug] = output
        self.timings[slug] = elapsed

    def add_error(self, slug: str, error: str, elapsed: float):
        self.errors[slug] = error
        self.timings[slug] = elapsed

    def get(self, slug: str) -> BaseModel | None:
        return self.outputs.get(slug)


class Pipeline:
    """Runs the CLI flow: optional contact research, then outreach generation."""

    STEPS = (ContactResearcher, OutreachWriter)

    def __init__(self):
        self.result = PipelineResult()

    def _step(self, agent_cls: type[BaseAgent], fn, *args: Any) -> BaseModel | None:
        console.print(
            Panel(
                f"[bold]{agent_cls.name}[/bold]\n{agent_cls.description}",
                title=f"Running {agent_cls.slug}",
                border_style="cyan",
            )
        )

        start = time.time()
        try:
            output = fn(*args)
        except (LLMError, ValueError) as e:
            elapsed = time.time() - start
            self.result.add_error(agent_cls.slug, str(e), elapsed)
            console.print(f"  [red]Failed: {e}[/red]")
            logger.error("%s failed: %s", agent_cls.slug, e)
            return None

        elapsed = time.time() - start
        self.result.add(agent_cls.slug, output, elapsed)
        console.print(f"  [green]Completed in {elapsed:.1f}s[/green]")
        return output

    def run(self, body: GenerateOutreachBody, research_first: bool = False) -> OutreachResult | None:
        """Optionally research the contact, then generate outreach."""
        if research_first:
            if body.contact is None or not body.request.contact_id:
                raise ValueError("--research needs both a contact and request.contactId in the input")
            research = self._step(
                ContactResearcher, research_contact,
                body.request.contact_id, body.contact, body.provider, body.model,
            )
            if research is not None:
                body = body.model_copy(update={"research": research})

        return self._step(OutreachWriter, generate_outreach, body)

    def print_summary(self):
        """Pretty-print the pipeline result."""
        table = Table(title="Pipeline Results")
        table.add_column("Step", style="cyan")
        table.add_column("Time", style="green")
        table.add_column("Status", style="bold")

        for agent_cls in self.STEPS:
            slug = agent_cls.slug
            elapsed = self.result.timings.get(slug)
            if elapsed is not None:
                time_str = f"{elapsed:.1f}s"
                if slug in self.result.errors:
                    status = f"[red]FAILED: {self.result.errors[slug][:50]}[/red]"
                else:
                    status = "[green]OK[/green]"
            else:
                time_str = "-"
                status = "[dim]skipped[/dim]"
            table.add_row(slug, time_str, status)

        console.print(table)
