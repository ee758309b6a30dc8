from __future__ import annotations

import json
import unittest
from datetime import datetime
from unittest.mock import patch

from agents.outreach_writer import OutreachWriter, fallback_content, parse_content
from prompts.outreach_system import DEFAULT_SECTIONS, TOUCHPOINT_STYLE_RULE, TOUCHPOINT_TASK

MODEL_REPLY = json.dumps(
    {
        "subjectLine": "Your rooftop season—ready?",
        "emailBody": "Hi Dana--quick idea for your fall events.",
        "linkedinMessage": "Hi Dana, loved the rooftop reopening.",
        "socialMediaPost": "",
        "callScript": None,
        "followUpSuggestion": "Follow up Tuesday",
        "keyAngle": "Venue partnership",
        "proofPoints": ["200+ events—insured"],
        "callToAction": "Book a tasting",
    }
)


def make_inputs(**request_overrides) -> dict:
    request = {
        "outreachType": "warm",
        "segment": "venue",
        "goals": "Become a preferred vendor",
        "tone": "friendly",
        "psychologicalLevers": ["reciprocity", "social_proof"],
        "channel": "email",
        "sequenceStep": 2,
        "length": "short",
        "proofAssets": ["portfolio", "reviews"],
        "personalizationTokens": "rooftop reopening",
        "callToAction": "ai_choose",
    }
    request.update(request_overrides)
    return {"request": request}


class OutreachWriterPromptTests(unittest.TestCase):
    def setUp(self):
        self.agent = OutreachWriter(provider="openai", model="gpt-4o-mini")

    def test_user_prompt_lists_parameters(self):
        prompt = self.agent.build_user_prompt(make_inputs())
        self.assertIn("- Outreach Type: warm", prompt)
        self.assertIn("- Target Segment: Venue", prompt)
        self.assertIn("- Psychological Levers: reciprocity, social_proof", prompt)
        self.assertIn("- Holiday Edition: No", prompt)
        self.assertIn("- Offer/Incentive: None specified", prompt)
        self.assertIn("- Preferred Call to Action: Choose the most effective CTA for this situation", prompt)
        self.assertNotIn("Contact Name", prompt)

    def test_user_prompt_maps_cta_and_optional_lines(self):
        prompt = self.agent.build_user_prompt(
            make_inputs(
                callToAction="schedule_tasting",
                contactName="Dana",
                contactSpecificGoal="Get on the fall vendor list",
                segment="florist",
            )
        )
        self.assertIn("- Preferred Call to Action: Schedule a tasting", prompt)
        self.assertIn("- Contact Name: Dana", prompt)
        self.assertIn("- Contact-Specific Goal: Get on the fall vendor list", prompt)
        self.assertIn("- Target Segment: florist", prompt)

    def test_system_prompt_section_order(self):
        prompt = self.agent.build_system_prompt(make_inputs(coreDesire="achieve_goals", coreFear="wasting_time"))
        order = [
            DEFAULT_SECTIONS["system_prompt"],
            "BUSINESS CONTEXT:",
            DEFAULT_SECTIONS["psychology_levers"],
            "BUYER MOTIVATION PROFILE:\nArchetype: Boss",
            DEFAULT_SECTIONS["content_formatting"],
            "Your job is to generate structured outreach content that:",
            DEFAULT_SECTIONS["writing_style"],
            DEFAULT_SECTIONS["output_format"],
        ]
        positions = [prompt.index(part) for part in order]
        self.assertEqual(positions, sorted(positions))
        self.assertIn("specific, measurable outcomes", prompt)

    def test_balanced_profile_without_signals(self):
        prompt = self.agent.build_system_prompt(make_inputs())
        self.assertIn("Archetype: Balanced", prompt)

    def test_touchpoint_history_adds_task_and_style_rule(self):
        inputs = make_inputs()
        inputs["contact"] = {"name": "Dana Reyes", "company": "Skyline Venues"}
        inputs["activities"] = [
            {"type": "call", "title": "Intro call", "createdAt": datetime(2024, 6, 1).isoformat()}
        ]
        prompt = self.agent.build_system_prompt(inputs)
        self.assertIn("RECENT TOUCHPOINT HISTORY:", prompt)
        self.assertIn(f"6. {TOUCHPOINT_TASK}", prompt)
        self.assertIn(TOUCHPOINT_STYLE_RULE, prompt)

    def test_no_contact_means_five_tasks(self):
        prompt = self.agent.build_system_prompt(make_inputs())
        self.assertIn("5. Gets responses and forwards", prompt)
        self.assertNotIn(TOUCHPOINT_TASK, prompt)
        self.assertNotIn(TOUCHPOINT_STYLE_RULE, prompt)

    def test_overrides_replace_sections(self):
        inputs = make_inputs()
        inputs["contact"] = {"name": "Dana Reyes"}
        inputs["instruction_overrides"] = {"writing_style": "CUSTOM STYLE", "business_context": "CUSTOM BIZ"}
        prompt = self.agent.build_system_prompt(inputs)
        self.assertIn("CUSTOM STYLE", prompt)
        self.assertIn("BUSINESS CONTEXT:\nCUSTOM BIZ", prompt)
        self.assertNotIn(TOUCHPOINT_STYLE_RULE, prompt)

    def test_business_profile_beats_business_section(self):
        inputs = make_inputs()
        inputs["business_profile"] = {"businessName": "Pour Decisions"}
        prompt = self.agent.build_system_prompt(inputs)
        self.assertIn("Business Name: Pour Decisions", prompt)
        self.assertNotIn(DEFAULT_SECTIONS["business_context"], prompt)

    def test_research_block_included(self):
        inputs = make_inputs()
        inputs["research"] = {"bio": "Dana runs events at Skyline.", "keyFacts": ["Hosts 40 weddings a year"]}
        prompt = self.agent.build_system_prompt(inputs)
        self.assertIn("WEB RESEARCH INSIGHTS:", prompt)
        self.assertIn("1. Hosts 40 weddings a year", prompt)


class OutreachWriterRunTests(unittest.TestCase):
    def setUp(self):
        self.agent = OutreachWriter(provider="openai", model="gpt-4o-mini")

    def test_run_parses_and_sanitizes(self):
        with patch("pipeline.base_agent.call_llm", return_value=MODEL_REPLY) as fake_llm, patch.object(
            self.agent, "_save_output", return_value=None
        ):
            result = self.agent.run(make_inputs(coreDesire="breakthrough"))

        self.assertTrue(fake_llm.call_args.kwargs["json_mode"])
        self.assertTrue(result.parsed)
        self.assertEqual(result.archetype, "dreamer")
        content = result.content
        self.assertEqual(content.subject_line, "Your rooftop season, ready?")
        self.assertEqual(content.email_body, "Hi Dana, quick idea for your fall events.")
        self.assertEqual(content.social_media_post, content.linkedin_message)
        self.assertEqual(content.call_script, content.linkedin_message)
        self.assertEqual(content.proof_points, ["200+ events, insured"])

    def test_non_json_reply_uses_fallback(self):
        with patch("pipeline.base_agent.call_llm", return_value="Hello Dana, plain text reply"), patch.object(
            self.agent, "_save_output", return_value=None
        ):
            result = self.agent.run(make_inputs())

        self.assertFalse(result.parsed)
        self.assertEqual(result.archetype, "balanced")
        self.assertEqual(result.content.subject_line, "Quick question about your upcoming events")
        self.assertEqual(result.content.email_body, "Hello Dana, plain text reply")
        self.assertEqual(result.content.proof_points, ["Professional service", "Insured and licensed"])


class ParseContentTests(unittest.TestCase):
    def test_empty_reply_fallback_text(self):
        self.assertIsNone(parse_content(""))
        self.assertEqual(fallback_content("").email_body, "Generated content parsing failed")

    def test_json_array_is_not_content(self):
        self.assertIsNone(parse_content("[1, 2, 3]"))

    def test_single_proof_point_string(self):
        content = parse_content('{"subjectLine": "Hi", "proofPoints": "Insured"}')
        self.assertEqual(content.proof_points, ["Insured"])


if __name__ == "__main__":
    unittest.main()
