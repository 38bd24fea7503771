# pipeline.py
# Generation Pipeline: named inputs in, one completion string out.
#
# Stateless between calls: the planner's scratchpad is the only continuity.
# Provider errors propagate unchanged; nothing here retries.

import os
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from dotenv import load_dotenv
from openai import OpenAI

from agent_loop.context import RunContext
from agent_loop.prompts import PromptTemplate

load_dotenv()

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"

StreamCallback = Callable[[str], None]


class GenerationPipeline(ABC):
    """Opaque single-shot text function used by planners."""

    @property
    @abstractmethod
    def input_keys(self) -> list[str]:
        """Variables the pipeline's prompt expects."""

    @abstractmethod
    def generate(
        self,
        inputs: dict[str, Any],
        stop: Optional[list[str]] = None,
        stream: Optional[StreamCallback] = None,
        ctx: Optional[RunContext] = None,
    ) -> str:
        """Produce one completion. `stream` receives text deltas when given."""


class OpenAIPipeline(GenerationPipeline):
    """
    Renders a PromptTemplate and sends it as a single user message through
    an OpenAI-compatible chat completions endpoint (OpenRouter by default).

    Example:
        pipeline = OpenAIPipeline(
            model="anthropic/claude-3.5-haiku",
            prompt=create_mrkl_prompt(DEFAULT_CAPABILITIES),
        )
    """

    def __init__(
        self,
        model: str,
        prompt: PromptTemplate,
        client: Optional[OpenAI] = None,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
    ) -> None:
        self._model = model
        self._prompt = prompt
        self._client = client or OpenAI(
            base_url=base_url or os.getenv("AGENT_LOOP_BASE_URL", DEFAULT_BASE_URL),
            api_key=api_key or os.getenv("OPENROUTER_API_KEY"),
        )

    @property
    def model(self) -> str:
        return self._model

    @property
    def prompt(self) -> PromptTemplate:
        return self._prompt

    @property
    def input_keys(self) -> list[str]:
        return list(self._prompt.input_variables)

    def generate(
        self,
        inputs: dict[str, Any],
        stop: Optional[list[str]] = None,
        stream: Optional[StreamCallback] = None,
        ctx: Optional[RunContext] = None,
    ) -> str:
        if ctx is not None:
            ctx.raise_if_done()

        messages = [{"role": "user", "content": self._prompt.format(inputs)}]
        if stream is None:
            return self._complete(messages, stop)
        return self._complete_streaming(messages, stop, stream, ctx)

    # ------------------------------------------------------------------
    # Low-level model calls
    # ------------------------------------------------------------------

    def _complete(self, messages: list[dict], stop: Optional[list[str]]) -> str:
        response = self._client.chat.completions.create(
            model=self._model,
            messages=messages,
            stop=stop or None,
        )
        return response.choices[0].message.content or ""

    def _complete_streaming(
        self,
        messages: list[dict],
        stop: Optional[list[str]],
        stream: StreamCallback,
        ctx: Optional[RunContext],
    ) -> str:
        chunks = self._client.chat.completions.create(
            model=self._model,
            messages=messages,
            stop=stop or None,
            stream=True,
        )
        parts: list[str] = []
        # Leaving the block closes the HTTP response, cancelled or not.
        with chunks:
            for chunk in chunks:
                if ctx is not None:
                    ctx.raise_if_done()
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if not delta:
                    continue
                parts.append(delta)
                stream(delta)
        return "".join(parts)
