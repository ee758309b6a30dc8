from __future__ import annotations

import asyncio
import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from fastapi.testclient import TestClient

import server
from pipeline import storage
from pipeline.llm import LLMError
from schemas.buyer_motivation import MotivationQuery
from schemas.outreach import (
    ContactResearch,
    GenerateOutreachBody,
    InstructionUpdate,
    ResearchContactBody,
)

MODEL_REPLY = json.dumps({"subjectLine": "Hi Dana", "emailBody": "Body", "linkedinMessage": "LinkedIn"})


def make_body(**extra) -> GenerateOutreachBody:
    data = {"request": {"segment": "venue", "goals": "Preferred vendor", "contactId": "c-1"}}
    data.update(extra)
    return GenerateOutreachBody.model_validate(data)


class ServerApiTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self._patches = [
            patch.object(storage, "DB_PATH", Path(self._tmp.name) / "test.db"),
            patch("agents.outreach_writer.OutreachWriter._save_output", return_value=None),
            patch("agents.contact_researcher.ContactResearcher._save_output", return_value=None),
        ]
        for p in self._patches:
            p.start()
        storage.init_db()

    def tearDown(self):
        storage.close_db()
        for p in reversed(self._patches):
            p.stop()
        self._tmp.cleanup()

    def test_buyer_motivation_endpoint(self):
        resp = asyncio.run(
            server.api_buyer_motivation(MotivationQuery.model_validate({"coreDesire": "achieve_goals", "coreFear": "wasting_time"}))
        )
        self.assertEqual(resp["archetype"], "boss")
        self.assertEqual(resp["scores"]["boss"], 4)
        self.assertIn("achievement and results", resp["description"])

    def test_buyer_motivation_unknown_values_are_balanced(self):
        resp = asyncio.run(server.api_buyer_motivation(MotivationQuery(core_desire="money", core_fear=None)))
        self.assertEqual(resp["archetype"], "balanced")

    def test_generate_success_is_logged(self):
        with patch("pipeline.base_agent.call_llm", return_value=MODEL_REPLY):
            resp = asyncio.run(server.api_generate_outreach(make_body()))

        self.assertEqual(resp["subjectLine"], "Hi Dana")
        self.assertEqual(resp["socialMediaPost"], "LinkedIn")
        self.assertEqual(resp["archetype"], "balanced")
        self.assertTrue(resp["parsed"])

        history = asyncio.run(server.api_history())
        self.assertEqual(len(history), 1)
        self.assertTrue(history[0]["success"])
        self.assertEqual(history[0]["contact_id"], "c-1")

    def test_generate_llm_failure_returns_502_and_is_logged(self):
        with patch("pipeline.base_agent.call_llm", side_effect=LLMError("[openai/gpt] Bad request: nope")):
            resp = asyncio.run(server.api_generate_outreach(make_body()))

        self.assertEqual(resp.status_code, 502)
        self.assertIn("Bad request", json.loads(resp.body)["error"])
        history = storage.list_outreach_requests()
        self.assertFalse(history[0]["success"])

    def test_generate_uses_stored_research(self):
        storage.save_contact_research("c-1", {"bio": "Stored bio for Dana", "keyFacts": ["Rooftop"]})
        with patch("pipeline.base_agent.call_llm", return_value=MODEL_REPLY) as fake_llm:
            asyncio.run(server.api_generate_outreach(make_body()))
        self.assertIn("Stored bio for Dana", fake_llm.call_args.kwargs["system_prompt"])

    def test_explicit_research_wins_over_stored(self):
        storage.save_contact_research("c-1", {"bio": "Stored bio"})
        body = make_body(research={"bio": "Fresh bio"})
        with patch("pipeline.base_agent.call_llm", return_value=MODEL_REPLY) as fake_llm:
            asyncio.run(server.api_generate_outreach(body))
        system_prompt = fake_llm.call_args.kwargs["system_prompt"]
        self.assertIn("Fresh bio", system_prompt)
        self.assertNotIn("Stored bio", system_prompt)

    def test_instruction_override_flows_into_prompt(self):
        asyncio.run(server.api_set_instruction("writing_style", InstructionUpdate(content="WRITE LIKE A POET")))
        with patch("pipeline.base_agent.call_llm", return_value=MODEL_REPLY) as fake_llm:
            asyncio.run(server.api_generate_outreach(make_body()))
        self.assertIn("WRITE LIKE A POET", fake_llm.call_args.kwargs["system_prompt"])

        listing = {s["section_key"]: s for s in asyncio.run(server.api_list_instructions())}
        self.assertEqual(listing["writing_style"]["source"], "override")

        resp = asyncio.run(server.api_reset_instruction("writing_style"))
        self.assertTrue(resp["deleted"])

    def test_unknown_instruction_key_is_400(self):
        resp = asyncio.run(server.api_set_instruction("jokes", InstructionUpdate(content="x")))
        self.assertEqual(resp.status_code, 400)
        resp = asyncio.run(server.api_reset_instruction("jokes"))
        self.assertEqual(resp.status_code, 400)

    def test_research_endpoint_stores_result(self):
        body = ResearchContactBody.model_validate({"contactId": "c-9", "contact": {"name": "Sam"}})
        with patch(
            "pipeline.base_agent.call_llm_structured",
            return_value=ContactResearch(bio="Sam plans corporate retreats.", key_facts=["HR lead"]),
        ):
            resp = asyncio.run(server.api_research_contact(body))

        self.assertEqual(resp["researchData"]["bio"], "Sam plans corporate retreats.")
        stored = asyncio.run(server.api_get_research("c-9"))
        self.assertEqual(stored["researchData"]["keyFacts"], ["HR lead"])

    def test_missing_research_is_404(self):
        resp = asyncio.run(server.api_get_research("nobody"))
        self.assertEqual(resp.status_code, 404)

    def test_generate_with_mixed_timezone_activities(self):
        body = make_body(
            contact={"name": "Dana"},
            activities=[
                {"type": "email", "title": "Intro email", "createdAt": "2024-05-01T10:00:00Z"},
                {"type": "call", "title": "Rooftop tour call", "createdAt": "2024-05-02T10:00:00"},
            ],
        )
        with patch("pipeline.base_agent.call_llm", return_value=MODEL_REPLY) as fake_llm:
            resp = asyncio.run(server.api_generate_outreach(body))

        self.assertEqual(resp["subjectLine"], "Hi Dana")
        system_prompt = fake_llm.call_args.kwargs["system_prompt"]
        self.assertLess(system_prompt.index("Rooftop tour call"), system_prompt.index("Intro email"))
        self.assertTrue(storage.list_outreach_requests()[0]["success"])

    def test_unexpected_error_is_logged_before_propagating(self):
        with patch("pipeline.base_agent.call_llm", side_effect=RuntimeError("socket closed")):
            with self.assertRaises(RuntimeError):
                asyncio.run(server.api_generate_outreach(make_body()))

        history = storage.list_outreach_requests()
        self.assertEqual(len(history), 1)
        self.assertFalse(history[0]["success"])
        self.assertEqual(storage.get_outreach_request(history[0]["id"])["error_message"], "socket closed")

    def test_existing_research_is_reused(self):
        storage.save_contact_research("c-9", {"bio": "Already researched"})
        body = ResearchContactBody.model_validate({"contactId": "c-9", "contact": {"name": "Sam"}})
        with patch("agents.contact_researcher.fetch_page_text") as fake_fetch, patch(
            "pipeline.base_agent.call_llm_structured"
        ) as fake_llm:
            resp = asyncio.run(server.api_research_contact(body))

        self.assertEqual(resp["researchData"]["bio"], "Already researched")
        fake_fetch.assert_not_called()
        fake_llm.assert_not_called()
        count = storage._get_conn().execute(
            "SELECT COUNT(*) FROM contact_research WHERE contact_id='c-9'"
        ).fetchone()[0]
        self.assertEqual(count, 1)

    def test_refresh_runs_research_again(self):
        storage.save_contact_research("c-9", {"bio": "Stale bio"})
        body = ResearchContactBody.model_validate({"contactId": "c-9", "contact": {"name": "Sam"}, "refresh": True})
        with patch(
            "pipeline.base_agent.call_llm_structured",
            return_value=ContactResearch(bio="Fresh bio", key_facts=["New role"]),
        ) as fake_llm:
            resp = asyncio.run(server.api_research_contact(body))

        fake_llm.assert_called_once()
        self.assertEqual(resp["researchData"]["bio"], "Fresh bio")
        self.assertEqual(storage.get_latest_research("c-9")["bio"], "Fresh bio")

    def test_history_limit_is_bounded(self):
        client = TestClient(server.app)
        self.assertEqual(client.get("/api/history", params={"limit": -1}).status_code, 422)
        self.assertEqual(client.get("/api/history", params={"limit": 501}).status_code, 422)
        self.assertEqual(client.get("/api/history", params={"limit": 1}).status_code, 200)

    def test_health_reports_providers(self):
        resp = asyncio.run(server.api_health())
        self.assertEqual(set(resp["providers"]), {"openai", "anthropic", "google"})


if __name__ == "__main__":
    unittest.main()
