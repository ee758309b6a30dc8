"""Shared agent plumbing for the outreach writer and contact researcher.

An agent's slug picks its provider, model, temperature and token limit out of
config.AGENT_LLM_CONFIG; constructor arguments win over the config.
"""

from __future__ import annotations

import logging
import os
import tempfile
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from pydantic import BaseModel

import config
from pipeline.llm import call_llm, call_llm_structured

logger = logging.getLogger(__name__)


class BaseAgent(ABC):
    """One LLM-backed step.

    Subclasses set name, slug and description, and implement:
      - build_system_prompt(inputs): prompts here depend on the contact, so
        the system prompt is built per run rather than fixed per class
      - build_user_prompt(inputs)
      - output_schema: the Pydantic model run() parses into
    """

    name: str = "BaseAgent"
    slug: str = "base"
    description: str = ""

    def __init__(
        self,
        provider: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ):
        defaults = config.get_agent_llm_config(self.slug)
        self.provider = provider or defaults["provider"]
        self.model = model or defaults["model"]
        self.temperature = defaults["temperature"] if temperature is None else temperature
        self.max_tokens = defaults["max_tokens"] if max_tokens is None else max_tokens
        self.logger = logging.getLogger(f"agent.{self.slug}")
        self.logger.debug(
            "%s → %s/%s temp=%.2f max_tokens=%d",
            self.slug, self.provider, self.model, self.temperature, self.max_tokens,
        )

    @abstractmethod
    def build_system_prompt(self, inputs: dict[str, Any]) -> str:
        ...

    @abstractmethod
    def build_user_prompt(self, inputs: dict[str, Any]) -> str:
        ...

    @property
    @abstractmethod
    def output_schema(self) -> type[BaseModel]:
        ...

    def _llm_settings(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    def run(self, inputs: dict[str, Any]) -> BaseModel:
        """Prompt the LLM, parse into output_schema, save and return."""
        system_prompt = self.build_system_prompt(inputs)
        user_prompt = self.build_user_prompt(inputs)
        self.logger.info(
            "%s: %s/%s, prompts %d + %d chars",
            self.name, self.provider, self.model, len(system_prompt), len(user_prompt),
        )

        started = time.time()
        result = call_llm_structured(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            response_model=self.output_schema,
            **self._llm_settings(),
        )
        self.logger.info("%s done in %.1fs", self.name, time.time() - started)

        self._save_output(result)
        return result

    def run_text(self, inputs: dict[str, Any], json_mode: bool = False) -> str:
        """Prompt the LLM and return its raw reply; the caller parses it."""
        system_prompt = self.build_system_prompt(inputs)
        user_prompt = self.build_user_prompt(inputs)
        self.logger.info(
            "%s (raw%s): %s/%s, prompts %d + %d chars",
            self.name, ", json" if json_mode else "", self.provider, self.model,
            len(system_prompt), len(user_prompt),
        )

        started = time.time()
        reply = call_llm(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            json_mode=json_mode,
            **self._llm_settings(),
        )
        self.logger.info("%s done in %.1fs", self.name, time.time() - started)
        return reply

    def _save_output(self, result: BaseModel) -> Path:
        """Write the latest result to OUTPUT_DIR/<slug>_output.json (camelCase keys).

        Written to a private temp file and renamed over the target, so
        concurrent runs never leave a half-written file.
        """
        path = config.OUTPUT_DIR / f"{self.slug}_output.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{self.slug}_", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(result.model_dump_json(indent=2, by_alias=True))
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        self.logger.info("Saved %s", path)
        return path
