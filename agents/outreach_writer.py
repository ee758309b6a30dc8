"""Outreach Writer — generates the email / LinkedIn / DM / call-script bundle.

Inputs:
  - request: OutreachRequest (or its dict form)
  - business_profile: optional BusinessProfile
  - contact: optional ContactProfile
  - activities: optional list of TouchpointActivity
  - research: optional ContactResearch
  - instruction_overrides: optional {section_key: content}

Output: OutreachResult with sanitized OutreachContent and the buyer archetype
that shaped it.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel

from pipeline.base_agent import BaseAgent
from pipeline.buyer_motivation import build_motivation_block, classify
from pipeline.contact_context import (
    build_business_context,
    build_research_context,
    build_touchpoint_context,
)
from pipeline.instruction_sections import resolve_sections
from pipeline.llm import safe_json_loads, usage_mark, usage_since
from pipeline.text_filters import sanitize_content
from prompts.outreach_system import (
    DEFAULT_SECTIONS,
    TASK_LIST,
    TOUCHPOINT_STYLE_RULE,
    TOUCHPOINT_TASK,
)
from schemas.outreach import (
    AI_CHOOSE_CTA,
    CALL_TO_ACTION_LABELS,
    BusinessProfile,
    ContactProfile,
    ContactResearch,
    OutreachContent,
    OutreachRequest,
    OutreachResult,
    TouchpointActivity,
)

CHOOSE_CTA_TEXT = "Choose the most effective CTA for this situation"
PARSE_FAILED_TEXT = "Generated content parsing failed"


def fallback_content(raw: str) -> OutreachContent:
    """Content used when the model reply isn't JSON: the raw reply in every body field."""
    body = raw or PARSE_FAILED_TEXT
    return OutreachContent(
        subject_line="Quick question about your upcoming events",
        email_body=body,
        linkedin_message=body,
        social_media_post=body,
        call_script=body,
        follow_up_suggestion="Follow up in 3-5 business days",
        key_angle="Partnership opportunity",
        proof_points=["Professional service", "Insured and licensed"],
        call_to_action="Let's schedule a quick call",
    )


def parse_content(raw: str) -> OutreachContent | None:
    """Parse a model reply into OutreachContent, or None when it isn't usable JSON."""
    try:
        data = safe_json_loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    # Models sometimes return null for fields they skipped
    cleaned = {k: v for k, v in data.items() if v is not None}
    if isinstance(cleaned.get("proofPoints"), str):
        cleaned["proofPoints"] = [cleaned["proofPoints"]]
    try:
        return OutreachContent.model_validate(cleaned)
    except ValueError:
        return None


def _coerce(value: Any, model: type[BaseModel]) -> Any:
    if value is None or isinstance(value, model):
        return value
    return model.model_validate(value)


class OutreachWriter(BaseAgent):
    name = "Outreach Writer"
    slug = "outreach_writer"
    description = (
        "Writes a personalized outreach bundle (email, LinkedIn message, "
        "social DM, call script) shaped by touchpoint history, contact "
        "research and the buyer-motivation archetype."
    )

    @property
    def output_schema(self) -> type[BaseModel]:
        return OutreachContent

    # ------------------------------------------------------------------
    # Input normalisation
    # ------------------------------------------------------------------

    @staticmethod
    def _request(inputs: dict[str, Any]) -> OutreachRequest:
        return _coerce(inputs["request"], OutreachRequest)

    @staticmethod
    def _activities(inputs: dict[str, Any]) -> list[TouchpointActivity]:
        return [_coerce(a, TouchpointActivity) for a in inputs.get("activities") or []]

    def _touchpoint_context(self, inputs: dict[str, Any]) -> str:
        contact = _coerce(inputs.get("contact"), ContactProfile)
        return build_touchpoint_context(contact, self._activities(inputs))

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    def build_system_prompt(self, inputs: dict[str, Any]) -> str:
        request = self._request(inputs)
        overrides = inputs.get("instruction_overrides") or {}
        sections = resolve_sections(overrides)

        touchpoint_context = self._touchpoint_context(inputs)
        research_context = build_research_context(_coerce(inputs.get("research"), ContactResearch))
        business_context = build_business_context(
            _coerce(inputs.get("business_profile"), BusinessProfile),
            sections["business_context"],
        )
        motivation = classify(request.core_desire, request.core_fear)

        tasks = list(TASK_LIST)
        if touchpoint_context:
            tasks.append(TOUCHPOINT_TASK)
        task_block = "Your job is to generate structured outreach content that:\n" + "\n".join(
            f"{i}. {task}" for i, task in enumerate(tasks, start=1)
        )

        writing_style = sections["writing_style"]
        if touchpoint_context and not overrides.get("writing_style"):
            writing_style = f"{DEFAULT_SECTIONS['writing_style']}\n{TOUCHPOINT_STYLE_RULE}"

        parts = [
            sections["system_prompt"],
            f"BUSINESS CONTEXT:\n{business_context}",
            touchpoint_context,
            research_context,
            sections["relationship_strategy"],
            sections["target_segments"],
            sections["psychology_levers"],
            build_motivation_block(motivation),
            sections["content_formatting"],
            task_block,
            writing_style,
            sections["output_format"],
        ]
        return "\n\n".join(part for part in parts if part)

    def build_user_prompt(self, inputs: dict[str, Any]) -> str:
        request = self._request(inputs)

        if not request.call_to_action or request.call_to_action == AI_CHOOSE_CTA:
            cta = CHOOSE_CTA_TEXT
        else:
            cta = CALL_TO_ACTION_LABELS.get(request.call_to_action, request.call_to_action)

        lines = [
            "Generate outreach content with these parameters:",
            f"- Outreach Type: {request.outreach_type.value}",
            f"- Target Segment: {request.segment_label}",
            f"- Goals: {request.goals}",
            f"- Tone: {request.tone.value}",
            f"- Psychological Levers: {', '.join(request.psychological_levers)}",
            f"- Channel: {request.channel.value}",
            f"- Sequence Step: {request.sequence_step}",
            f"- Length: {request.length.value}",
            f"- Holiday Edition: {'Yes' if request.holiday_edition else 'No'}",
            f"- Proof Assets Available: {', '.join(request.proof_assets)}",
            f"- Personalization: {request.personalization_tokens}",
            f"- Offer/Incentive: {request.offer_incentive or 'None specified'}",
            f"- Preferred Call to Action: {cta}",
        ]
        if request.contact_name:
            lines.append(f"- Contact Name: {request.contact_name}")
        if request.contact_specific_goal:
            lines.append(f"- Contact-Specific Goal: {request.contact_specific_goal}")
        lines.append("")
        lines.append("Generate compelling outreach content that gets responses.")
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self, inputs: dict[str, Any]) -> OutreachResult:
        """Generate, parse (with fallback), sanitize, save and return."""
        request = self._request(inputs)
        archetype = classify(request.core_desire, request.core_fear).archetype.value

        mark = usage_mark()
        raw = self.run_text(inputs, json_mode=True)
        usage = usage_since(mark)

        content = parse_content(raw)
        parsed = content is not None
        if not parsed:
            self.logger.warning("Model reply was not valid JSON (%d chars); using fallback content", len(raw or ""))
            content = fallback_content(raw)

        result = OutreachResult(
            content=sanitize_content(content),
            archetype=archetype,
            parsed=parsed,
            provider=self.provider,
            model=self.model,
            input_tokens=usage["input_tokens"],
            output_tokens=usage["output_tokens"],
        )
        self.logger.info(
            "Outreach generated: archetype=%s, parsed=%s, subject=%r",
            archetype, parsed, result.content.subject_line[:60],
        )
        self._save_output(result)
        return result
