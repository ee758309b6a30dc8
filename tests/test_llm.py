from __future__ import annotations

import json
import unittest
from unittest.mock import Mock, patch

import httpx
import openai
from pydantic import BaseModel
from tenacity import wait_none

from pipeline import llm


class Reply(BaseModel):
    subject: str
    points: list[str] = []


class SafeJsonLoadsTests(unittest.TestCase):
    def test_plain_json(self):
        self.assertEqual(llm.safe_json_loads('{"a": 1}'), {"a": 1})

    def test_fenced_json(self):
        self.assertEqual(llm.safe_json_loads('```json\n{"a": 1}\n```'), {"a": 1})

    def test_trailing_commas(self):
        self.assertEqual(llm.safe_json_loads('{"a": [1, 2,], "b": 3,}'), {"a": [1, 2], "b": 3})

    def test_object_inside_prose(self):
        raw = 'Sure! Here it is:\n{"subject": "Hi"}\nLet me know.'
        self.assertEqual(llm.safe_json_loads(raw), {"subject": "Hi"})

    def test_garbage_raises(self):
        with self.assertRaises(json.JSONDecodeError):
            llm.safe_json_loads("not json at all")


class UsageTrackingTests(unittest.TestCase):
    def setUp(self):
        llm.reset_usage()

    def tearDown(self):
        llm.reset_usage()

    def test_longest_prefix_pricing(self):
        self.assertEqual(llm.get_model_pricing("gpt-4o-mini-2024-07-18"), (0.15, 0.60))
        self.assertEqual(llm.get_model_pricing("gpt-4o-2024-08-06"), (2.50, 10.00))

    def test_usage_since_mark(self):
        llm._record_usage("openai", "gpt-4o-mini", 100, 50)
        mark = llm.usage_mark()
        llm._record_usage("openai", "gpt-4o-mini", 1_000, 200)
        self.assertEqual(llm.usage_since(mark), {"input_tokens": 1_000, "output_tokens": 200})

        summary = llm.get_usage_summary()
        self.assertEqual(summary["calls"], 2)
        self.assertEqual(summary["total_tokens"], 1_350)
        self.assertEqual([e["input_tokens"] for e in llm.get_usage_log()], [100, 1_000])


class CallLlmTests(unittest.TestCase):
    def test_unknown_provider(self):
        with self.assertRaises(llm.LLMError):
            llm.call_llm("sys", "user", provider="carrier_pigeon", model="x")

    def test_structured_call_parses_reply(self):
        with patch.object(llm, "call_llm", return_value='```json\n{"subject": "Hi", "points": ["a",],}\n```') as fake:
            result = llm.call_llm_structured("sys", "user", Reply, provider="openai", model="gpt-4o-mini")
        self.assertEqual(result, Reply(subject="Hi", points=["a"]))
        system_prompt = fake.call_args.args[0]
        self.assertIn('"subject"', system_prompt)
        self.assertTrue(fake.call_args.kwargs["json_mode"])

    def test_structured_call_schema_mismatch_raises_llm_error(self):
        with patch.object(llm, "call_llm", return_value='{"points": []}'):
            with self.assertRaises(llm.LLMError):
                llm.call_llm_structured("sys", "user", Reply, provider="openai", model="gpt-4o-mini")

    def test_missing_api_key(self):
        with patch.object(llm.config, "OPENAI_API_KEY", ""), patch.dict(llm._clients, clear=True):
            with self.assertRaises(llm.LLMError) as ctx:
                llm.call_llm("sys", "user", provider="openai", model="gpt-4o-mini")
        self.assertIn("OPENAI_API_KEY", str(ctx.exception))


class RetryPolicyTests(unittest.TestCase):
    def setUp(self):
        llm.reset_usage()
        wait_patch = patch.object(llm._complete_with_retry.retry, "wait", wait_none())
        wait_patch.start()
        self.addCleanup(wait_patch.stop)
        self.addCleanup(llm.reset_usage)

    def _fake_provider(self, *outcomes):
        fake = Mock(side_effect=list(outcomes))
        patcher = patch.dict(llm._PROVIDERS, {"openai": fake})
        patcher.start()
        self.addCleanup(patcher.stop)
        return fake

    def test_transient_errors_are_retried(self):
        fake = self._fake_provider(
            TimeoutError("read timed out"),
            openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions")),
            llm._Completion(text="hello", input_tokens=10, output_tokens=2),
        )
        reply = llm.call_llm("sys", "user", provider="openai", model="gpt-4o-mini")
        self.assertEqual(reply, "hello")
        self.assertEqual(fake.call_count, 3)
        self.assertEqual(llm.get_usage_summary()["calls"], 1)

    def test_gives_up_after_three_attempts(self):
        fake = self._fake_provider(*[ConnectionError("reset by peer")] * 5)
        with self.assertRaises(llm.LLMError) as ctx:
            llm.call_llm("sys", "user", provider="openai", model="gpt-4o-mini")
        self.assertEqual(fake.call_count, llm.RETRY_ATTEMPTS)
        self.assertIn("gave up after 3 attempts", str(ctx.exception))
        self.assertIsInstance(ctx.exception.cause, ConnectionError)

    def test_bad_request_is_not_retried(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        bad_request = openai.BadRequestError(
            "Error code: 400",
            response=httpx.Response(400, request=request),
            body={"error": {"message": "max_tokens is too large"}},
        )
        fake = self._fake_provider(bad_request, llm._Completion(text="never reached"))
        with self.assertRaises(llm.LLMError) as ctx:
            llm.call_llm("sys", "user", provider="openai", model="gpt-4o-mini")
        self.assertEqual(fake.call_count, 1)
        self.assertEqual(str(ctx.exception), "[openai/gpt-4o-mini] Bad request: max_tokens is too large")

    def test_retryable_classification(self):
        self.assertTrue(llm._is_retryable(TimeoutError()))
        self.assertTrue(llm._is_retryable(ConnectionError()))
        self.assertFalse(llm._is_retryable(ValueError("bad")))
        self.assertFalse(llm._is_retryable(llm.LLMError("nope")))


if __name__ == "__main__":
    unittest.main()
