"""Outreach Engine — Entry Point.

Usage:
    # Generate outreach from a JSON file (request + optional context)
    python main.py generate --input sample_request.json

    # Research the contact first, then generate
    python main.py generate --input sample_request.json --research

    # Classify a buyer-motivation pair
    python main.py classify --desire achieve_goals --fear wasting_time

    # Research a contact (contact card JSON)
    python main.py research --contact-id c-42 --input contact.json

    # Manage instruction sections
    python main.py instructions list
    python main.py instructions set writing_style --file style.txt
    python main.py instructions reset writing_style

    # Recent generation history
    python main.py history --limit 20
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

import config
from pipeline import storage
from pipeline.buyer_motivation import classify
from pipeline.instruction_sections import (
    describe_sections,
    load_overrides,
    validate_section_key,
)
from pipeline.llm import get_usage_log, get_usage_summary
from pipeline.orchestrator import Pipeline, research_contact
from schemas.outreach import ContactProfile, GenerateOutreachBody, OutreachResult

console = Console()


def setup_logging():
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL),
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def load_json(path_str: str) -> dict:
    path = Path(path_str)
    if not path.exists():
        console.print(f"[red]Input file not found: {path}[/red]")
        sys.exit(1)
    return json.loads(path.read_text(encoding="utf-8"))


def load_body(args: argparse.Namespace) -> GenerateOutreachBody:
    """Build the generation body from the JSON file plus CLI overrides.

    The file may hold the full body ({"request": {...}, "contact": {...}})
    or just the request fields.
    """
    data = load_json(args.input)
    if "request" not in data:
        data = {"request": data}
    if args.provider:
        data["provider"] = args.provider
    if args.model:
        data["model"] = args.model
    try:
        return GenerateOutreachBody.model_validate(data)
    except ValidationError as e:
        console.print(f"[red]Invalid input:[/red]\n{e}")
        sys.exit(1)


def print_outreach(result: OutreachResult):
    content = result.content
    console.print(
        Panel(
            f"[bold]Subject:[/bold] {content.subject_line}\n\n{content.email_body}",
            title=f"Email  [dim]({result.archetype})[/dim]",
            border_style="green",
        )
    )
    console.print(Panel(content.linkedin_message, title="LinkedIn", border_style="blue"))
    console.print(Panel(content.social_media_post, title="Social DM", border_style="magenta"))
    console.print(Panel(content.call_script, title="Call Script", border_style="yellow"))

    table = Table(show_header=False, box=None)
    table.add_row("[cyan]Key angle[/cyan]", content.key_angle)
    table.add_row("[cyan]Call to action[/cyan]", content.call_to_action)
    table.add_row("[cyan]Follow up[/cyan]", content.follow_up_suggestion)
    table.add_row("[cyan]Proof points[/cyan]", ", ".join(content.proof_points))
    console.print(table)
    if not result.parsed:
        console.print("[yellow]Model reply was not valid JSON — fallback content shown.[/yellow]")


def run_generate(args: argparse.Namespace):
    body = load_body(args)
    pipeline = Pipeline()
    try:
        result = pipeline.run(body, research_first=args.research)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    pipeline.print_summary()
    if result is None:
        sys.exit(1)
    print_outreach(result)


def run_classify(args: argparse.Namespace):
    profile = classify(args.desire, args.fear)
    scores = "  ".join(f"{name}={points}" for name, points in profile.scores.items())
    console.print(
        Panel(
            f"[bold]{profile.description}[/bold]\n\n{profile.instructions}",
            title=f"Archetype: {profile.archetype.value}  [dim]{scores}[/dim]",
            border_style="cyan",
        )
    )


def run_research(args: argparse.Namespace):
    data = load_json(args.input)
    try:
        contact = ContactProfile.model_validate(data.get("contact", data))
    except ValidationError as e:
        console.print(f"[red]Invalid contact:[/red]\n{e}")
        sys.exit(1)

    research = research_contact(args.contact_id, contact, args.provider, args.model, refresh=args.refresh)
    facts = "\n".join(f"  • {f}" for f in research.key_facts)
    icebreakers = "\n".join(f"  • {i}" for i in research.icebreakers)
    angles = "\n".join(f"  • {a}" for a in research.outreach_angles)
    console.print(
        Panel(
            f"{research.bio}\n\n[bold]Key facts[/bold]\n{facts}\n\n"
            f"[bold]Icebreakers[/bold]\n{icebreakers}\n\n[bold]Outreach angles[/bold]\n{angles}\n\n"
            f"[dim]{len(research.sources)} web source(s)[/dim]",
            title=f"Research: {contact.name}",
            border_style="cyan",
        )
    )


def run_instructions(args: argparse.Namespace):
    if args.action == "list":
        table = Table(title="Instruction Sections")
        table.add_column("Section", style="cyan")
        table.add_column("Source", style="bold")
        table.add_column("Content")
        for section in describe_sections(load_overrides()):
            source = "[green]override[/green]" if section["source"] == "override" else "[dim]default[/dim]"
            preview = section["content"].strip().splitlines()[0][:70] if section["content"].strip() else ""
            table.add_row(section["section_key"], source, preview)
        console.print(table)
        return

    try:
        key = validate_section_key(args.section)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    if args.action == "set":
        if args.file:
            content = Path(args.file).read_text(encoding="utf-8")
        elif args.content:
            content = args.content
        else:
            console.print("[red]Provide --content or --file[/red]")
            sys.exit(1)
        storage.set_instruction_section(key, content, is_active=not args.inactive)
        console.print(f"[green]Saved override for {key}[/green]")
    else:
        if storage.delete_instruction_section(key):
            console.print(f"[green]Reset {key} to default[/green]")
        else:
            console.print(f"[dim]{key} had no override[/dim]")


def run_history(args: argparse.Namespace):
    table = Table(title="Outreach History")
    table.add_column("#", style="dim")
    table.add_column("When")
    table.add_column("Contact", style="cyan")
    table.add_column("Archetype")
    table.add_column("Model")
    table.add_column("Tokens", justify="right")
    table.add_column("Status", style="bold")
    for row in storage.list_outreach_requests(limit=args.limit):
        status = "[green]OK[/green]" if row["success"] else f"[red]FAILED: {(row['error_message'] or '')[:40]}[/red]"
        table.add_row(
            str(row["id"]),
            row["created_at"],
            row["contact_id"] or "-",
            row["archetype"] or "-",
            row["model"] or "-",
            str(row["input_tokens"] + row["output_tokens"]),
            status,
        )
    console.print(table)


def _add_llm_args(parser: argparse.ArgumentParser):
    parser.add_argument("--provider", choices=["openai", "anthropic", "google"], help="Override LLM provider")
    parser.add_argument("--model", help="Override LLM model")


def main():
    parser = argparse.ArgumentParser(
        description="Outreach Engine — personalized outreach generation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    gen = subparsers.add_parser("generate", help="Generate an outreach bundle")
    gen.add_argument("--input", "-i", required=True, help="Path to JSON request file")
    gen.add_argument("--research", action="store_true", help="Research the contact before generating")
    _add_llm_args(gen)

    cls = subparsers.add_parser("classify", help="Classify a buyer-motivation pair")
    cls.add_argument("--desire", help="Core desire (e.g. achieve_goals)")
    cls.add_argument("--fear", help="Core fear (e.g. wasting_time)")

    res = subparsers.add_parser("research", help="Research a contact")
    res.add_argument("--contact-id", required=True, help="Contact identifier to store research under")
    res.add_argument("--input", "-i", required=True, help="Path to contact card JSON")
    res.add_argument("--refresh", action="store_true", help="Research again even if results are on file")
    _add_llm_args(res)

    ins = subparsers.add_parser("instructions", help="Manage instruction sections")
    ins.add_argument("action", choices=["list", "set", "reset"])
    ins.add_argument("section", nargs="?", help="Section key (for set/reset)")
    ins.add_argument("--content", help="Override text")
    ins.add_argument("--file", help="Read override text from a file")
    ins.add_argument("--inactive", action="store_true", help="Store the override but keep it disabled")

    hist = subparsers.add_parser("history", help="Show recent generations")
    hist.add_argument("--limit", type=int, default=20)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging()
    storage.init_db()

    if args.command == "generate":
        run_generate(args)
    elif args.command == "classify":
        run_classify(args)
    elif args.command == "research":
        run_research(args)
    elif args.command == "instructions":
        if args.action != "list" and not args.section:
            console.print("[red]A section key is required for set/reset[/red]")
            sys.exit(1)
        run_instructions(args)
    elif args.command == "history":
        run_history(args)

    usage = get_usage_summary()
    if usage["calls"] > 1:
        calls = Table(title="LLM Calls", show_lines=False)
        for column in ("Provider", "Model", "In", "Out", "Cost"):
            calls.add_column(column)
        for entry in get_usage_log():
            calls.add_row(
                entry["provider"], entry["model"], str(entry["input_tokens"]),
                str(entry["output_tokens"]), f"${entry['cost']:.4f}",
            )
        console.print(calls)
    if usage["calls"]:
        console.print(
            f"[dim]LLM usage: {usage['calls']} call(s), {usage['total_tokens']} tokens, "
            f"${usage['total_cost']:.4f}[/dim]"
        )


if __name__ == "__main__":
    main()
