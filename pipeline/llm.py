"""LLM client for outreach generation and contact research.

One entry point per output style:
  - call_llm(): raw text (optionally JSON mode) from openai, anthropic or google.
  - call_llm_structured(): same call, parsed into a Pydantic model.

Provider/model pairs come from config.AGENT_LLM_CONFIG. Outreach replies are
short, so every call is a single request/response.

Failures:
  - Rate limits, 5xx, connection drops and timeouts are retried (3 attempts,
    exponential backoff between 2 and 30 seconds).
  - Everything else (bad request, auth, unknown model, schema mismatch) is
    raised at once as LLMError carrying a readable message.

Token usage and estimated cost are recorded for every successful call; see
usage_mark()/usage_since() for per-run deltas and get_usage_summary() for totals.
"""

from __future__ import annotations

import json
import logging
import re
import socket
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from pydantic import BaseModel, ValidationError
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

import config

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


# ---------------------------------------------------------------------------
# Cost tracking
# ---------------------------------------------------------------------------

# USD per 1M tokens as (input, output); a model matches its longest prefix.
MODEL_PRICING: dict[str, tuple[float, float]] = {
    "gpt-4o-mini": (0.15, 0.60),
    "gpt-4o": (2.50, 10.00),
    "gpt-4.1-nano": (0.10, 0.40),
    "gpt-4.1-mini": (0.40, 1.60),
    "gpt-4.1": (2.00, 8.00),
    "claude-3-5-haiku": (0.80, 4.00),
    "claude-sonnet-4": (3.00, 15.00),
    "claude-opus-4": (15.00, 75.00),
    "gemini-2.0-flash": (0.10, 0.40),
    "gemini-2.5-flash": (0.30, 2.50),
    "gemini-2.5-pro": (1.25, 10.00),
}

# Unknown models are billed at gpt-4o rates
DEFAULT_PRICING = (2.50, 10.00)


def get_model_pricing(model: str) -> tuple[float, float]:
    """(input, output) USD per 1M tokens for a model name."""
    matches = [prefix for prefix in MODEL_PRICING if model.startswith(prefix)]
    if not matches:
        logger.warning("Model '%s' has no pricing entry, estimating at $%.2f/$%.2f per 1M", model, *DEFAULT_PRICING)
        return DEFAULT_PRICING
    return MODEL_PRICING[max(matches, key=len)]


class UsageTracker:
    """Thread-safe, append-only log of token usage per call."""

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: list[dict[str, Any]] = []

    def record(self, provider: str, model: str, input_tokens: int, output_tokens: int) -> dict[str, Any]:
        in_price, out_price = get_model_pricing(model)
        entry = {
            "provider": provider,
            "model": model,
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "cost": (input_tokens * in_price + output_tokens * out_price) / 1_000_000,
            "timestamp": time.time(),
        }
        with self._lock:
            self._entries.append(entry)
        return entry

    def reset(self):
        with self._lock:
            self._entries.clear()

    def entries(self, start: int = 0) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._entries[start:])

    def mark(self) -> int:
        with self._lock:
            return len(self._entries)


_usage = UsageTracker()


def _record_usage(provider: str, model: str, input_tokens: int, output_tokens: int):
    entry = _usage.record(provider, model, input_tokens, output_tokens)
    logger.info(
        "Usage %s/%s: %d in, %d out, ~$%.4f",
        provider, model, input_tokens, output_tokens, entry["cost"],
    )


def reset_usage():
    _usage.reset()


def get_usage_log() -> list[dict[str, Any]]:
    """Every recorded call, oldest first."""
    return _usage.entries()


def usage_mark() -> int:
    """Position in the usage log; pass to usage_since() after a call."""
    return _usage.mark()


def usage_since(mark: int) -> dict[str, int]:
    """Token totals recorded after mark (the tokens of one agent run)."""
    entries = _usage.entries(mark)
    return {
        "input_tokens": sum(e["input_tokens"] for e in entries),
        "output_tokens": sum(e["output_tokens"] for e in entries),
    }


def get_usage_summary() -> dict[str, Any]:
    """Totals across every recorded call."""
    entries = _usage.entries()
    input_tokens = sum(e["input_tokens"] for e in entries)
    output_tokens = sum(e["output_tokens"] for e in entries)
    return {
        "calls": len(entries),
        "total_input_tokens": input_tokens,
        "total_output_tokens": output_tokens,
        "total_tokens": input_tokens + output_tokens,
        "total_cost": round(sum(e["cost"] for e in entries), 4),
    }


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class LLMError(Exception):
    """A failed LLM call, with a message fit to show an operator."""

    def __init__(self, message: str, provider: str = "", model: str = "", cause: Exception | None = None):
        super().__init__(message)
        self.provider = provider
        self.model = model
        self.cause = cause


def _is_retryable(exc: BaseException) -> bool:
    """True for transient failures: 429, 5xx, connection drops, timeouts."""
    import anthropic
    import openai
    from google.genai import errors as google_errors

    transient = (
        openai.RateLimitError,
        openai.InternalServerError,
        openai.APIConnectionError,
        anthropic.RateLimitError,
        anthropic.InternalServerError,
        anthropic.APIConnectionError,
        google_errors.ServerError,
        ConnectionError,
        TimeoutError,
        socket.timeout,
    )
    if isinstance(exc, transient):
        return True
    return isinstance(exc, google_errors.ClientError) and getattr(exc, "code", None) == 429


def _extract_error_message(exc: Exception, provider: str, model: str) -> str:
    """Turn an SDK exception into a one-line message."""
    import anthropic
    import openai

    tag = f"[{provider}/{model}]"
    if isinstance(exc, (openai.AuthenticationError, anthropic.AuthenticationError)):
        return f"[{provider}] Authentication failed, check {provider.upper()}_API_KEY."
    if isinstance(exc, (openai.PermissionDeniedError, anthropic.PermissionDeniedError)):
        return f"[{provider}] This API key has no access to model '{model}'."
    if isinstance(exc, (openai.NotFoundError, anthropic.NotFoundError)):
        return f"[{provider}] Unknown model '{model}'. Check config.py or your .env overrides."
    if isinstance(exc, (openai.BadRequestError, anthropic.BadRequestError)):
        body = getattr(exc, "body", None)
        detail = body.get("error", body) if isinstance(body, dict) else None
        if isinstance(detail, dict) and detail.get("message"):
            return f"{tag} Bad request: {detail['message']}"
        return f"{tag} Bad request: {exc}"
    if isinstance(exc, ValidationError):
        count = exc.error_count()
        return f"{tag} Reply did not match the expected schema ({count} error{'' if count == 1 else 's'})."

    text = str(exc)
    return f"{tag} {text[:300] + '...' if len(text) > 300 else text}"


# ---------------------------------------------------------------------------
# Provider clients, created on first use
# ---------------------------------------------------------------------------

_clients: dict[str, Any] = {}


def _make_openai():
    from openai import OpenAI
    return OpenAI(api_key=config.OPENAI_API_KEY)


def _make_anthropic():
    import anthropic
    return anthropic.Anthropic(api_key=config.ANTHROPIC_API_KEY)


def _make_google():
    from google import genai
    return genai.Client(api_key=config.GOOGLE_API_KEY)


_CLIENT_FACTORIES: dict[str, tuple[str, Callable[[], Any]]] = {
    "openai": ("OPENAI_API_KEY", _make_openai),
    "anthropic": ("ANTHROPIC_API_KEY", _make_anthropic),
    "google": ("GOOGLE_API_KEY", _make_google),
}


def _client(provider: str):
    if provider not in _clients:
        key_name, factory = _CLIENT_FACTORIES[provider]
        if not getattr(config, key_name):
            raise LLMError(f"{key_name} is not set. Add it to your .env file.", provider=provider)
        _clients[provider] = factory()
    return _clients[provider]


# ---------------------------------------------------------------------------
# Provider calls
# ---------------------------------------------------------------------------

@dataclass
class _Completion:
    text: str
    input_tokens: int = 0
    output_tokens: int = 0


# Model families that only accept max_completion_tokens
_COMPLETION_TOKENS_PREFIXES = ("gpt-4o", "gpt-4.1", "gpt-5", "o1", "o3", "o4")

_JSON_ONLY_SUFFIX = (
    "\n\nReply with a single JSON object and nothing else: no markdown "
    "fences, no commentary. Begin with '{'."
)


def _openai_complete(system_prompt, user_prompt, model, temperature, max_tokens, json_mode) -> _Completion:
    token_param = (
        "max_completion_tokens" if model.startswith(_COMPLETION_TOKENS_PREFIXES) else "max_tokens"
    )
    extra = {"response_format": {"type": "json_object"}} if json_mode else {}
    response = _client("openai").chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        temperature=temperature,
        **{token_param: max_tokens},
        **extra,
    )
    if not response.choices or response.choices[0].message is None:
        raise LLMError(f"[openai/{model}] Response contained no choices", provider="openai", model=model)

    usage = response.usage
    return _Completion(
        text=response.choices[0].message.content or "",
        input_tokens=(usage.prompt_tokens or 0) if usage else 0,
        output_tokens=(usage.completion_tokens or 0) if usage else 0,
    )


def _anthropic_complete(system_prompt, user_prompt, model, temperature, max_tokens, json_mode) -> _Completion:
    response = _client("anthropic").messages.create(
        model=model,
        system=system_prompt + _JSON_ONLY_SUFFIX if json_mode else system_prompt,
        messages=[{"role": "user", "content": user_prompt}],
        temperature=temperature,
        max_tokens=max_tokens,
    )
    logger.debug("Anthropic stop_reason=%s", response.stop_reason)
    return _Completion(
        text="".join(getattr(block, "text", "") for block in response.content),
        input_tokens=response.usage.input_tokens or 0,
        output_tokens=response.usage.output_tokens or 0,
    )


def _google_complete(system_prompt, user_prompt, model, temperature, max_tokens, json_mode) -> _Completion:
    from google.genai import types

    response = _client("google").models.generate_content(
        model=model,
        contents=user_prompt,
        config=types.GenerateContentConfig(
            system_instruction=system_prompt,
            temperature=temperature,
            max_output_tokens=max_tokens,
            response_mime_type="application/json" if json_mode else None,
        ),
    )
    meta = getattr(response, "usage_metadata", None)
    return _Completion(
        text=response.text or "",
        input_tokens=(getattr(meta, "prompt_token_count", 0) or 0) if meta else 0,
        output_tokens=(getattr(meta, "candidates_token_count", 0) or 0) if meta else 0,
    )


_PROVIDERS: dict[str, Callable[..., _Completion]] = {
    "openai": _openai_complete,
    "anthropic": _anthropic_complete,
    "google": _google_complete,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

RETRY_ATTEMPTS = 3


@retry(
    retry=retry_if_exception(_is_retryable),
    stop=stop_after_attempt(RETRY_ATTEMPTS),
    wait=wait_exponential(multiplier=1, min=2, max=30),
    reraise=True,
)
def _complete_with_retry(complete, provider, system_prompt, user_prompt, model, temperature, max_tokens, json_mode) -> _Completion:
    try:
        return complete(system_prompt, user_prompt, model, temperature, max_tokens, json_mode)
    except LLMError:
        raise
    except Exception as exc:
        if _is_retryable(exc):
            logger.warning("Transient %s error, will retry: %s", provider, exc)
            raise
        message = _extract_error_message(exc, provider, model)
        logger.error("LLM call failed: %s", message)
        raise LLMError(message, provider=provider, model=model, cause=exc) from exc


def call_llm(
    system_prompt: str,
    user_prompt: str,
    provider: str = "openai",
    model: str | None = None,
    temperature: float = 0.7,
    max_tokens: int = 1_500,
    json_mode: bool = False,
) -> str:
    """Send one system + user prompt pair and return the reply text.

    Transient errors are retried up to RETRY_ATTEMPTS times; every failure
    that reaches the caller is an LLMError.
    """
    model = model or config.DEFAULT_MODEL
    complete = _PROVIDERS.get(provider)
    if complete is None:
        raise LLMError(
            f"Unknown provider '{provider}'. Choose one of: {', '.join(_PROVIDERS)}",
            provider=provider,
            model=model,
        )

    logger.info("LLM call → %s/%s (temp=%.1f, json=%s)", provider, model, temperature, json_mode)
    try:
        completion = _complete_with_retry(
            complete, provider, system_prompt, user_prompt, model, temperature, max_tokens, json_mode,
        )
    except LLMError:
        raise
    except Exception as exc:
        message = f"{_extract_error_message(exc, provider, model)} (gave up after {RETRY_ATTEMPTS} attempts)"
        logger.error("LLM call failed: %s", message)
        raise LLMError(message, provider=provider, model=model, cause=exc) from exc

    _record_usage(provider, model, completion.input_tokens, completion.output_tokens)
    logger.info("LLM reply ← %s/%s: %d chars", provider, model, len(completion.text))
    return completion.text


def call_llm_structured(
    system_prompt: str,
    user_prompt: str,
    response_model: type[ModelT],
    provider: str = "openai",
    model: str | None = None,
    temperature: float = 0.7,
    max_tokens: int = 1_500,
) -> ModelT:
    """call_llm() in JSON mode, validated into response_model.

    The model's JSON schema is appended to the system prompt so providers
    without native structured output still see the exact shape.
    """
    model = model or config.DEFAULT_MODEL
    schema_hint = (
        "\n\nYour reply must be JSON matching this schema:\n"
        f"```json\n{json.dumps(response_model.model_json_schema(), indent=2)}\n```"
    )
    raw = call_llm(
        system_prompt + schema_hint,
        user_prompt,
        provider=provider,
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        json_mode=True,
    )

    try:
        return response_model.model_validate(safe_json_loads(raw))
    except json.JSONDecodeError as exc:
        logger.debug("Unparseable reply: %s", (raw or "(empty)")[:500])
        message = f"[{provider}/{model}] Reply was not valid JSON: {exc.msg}"
        raise LLMError(message, provider=provider, model=model, cause=exc) from exc
    except ValidationError as exc:
        for err in exc.errors():
            logger.error(
                "%s.%s: %s (%s)",
                response_model.__name__, ".".join(str(p) for p in err["loc"]), err["msg"], err["type"],
            )
        message = _extract_error_message(exc, provider, model)
        raise LLMError(message, provider=provider, model=model, cause=exc) from exc


# ---------------------------------------------------------------------------
# JSON helpers
# ---------------------------------------------------------------------------

_FENCE_OPEN = re.compile(r"^```[a-zA-Z]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```\s*$")
_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def strip_fences(raw: str) -> str:
    """Drop a ```json ... ``` wrapper if the model added one."""
    text = (raw or "").strip()
    if text.startswith("```"):
        text = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text))
    return text.strip()


def safe_json_loads(raw: str) -> Any:
    """json.loads that tolerates fences, trailing commas and chatter around the object.

    Raises json.JSONDecodeError when no candidate parses.
    """
    text = strip_fences(raw)
    candidates = [text, _TRAILING_COMMA.sub(r"\1", text)]
    embedded = _OBJECT.search(text)
    if embedded:
        candidates.append(_TRAILING_COMMA.sub(r"\1", embedded.group(0)))

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue
    return json.loads(text)
