# planner.py
# Planners decide the next move: rebuild the scratchpad from every prior
# step, ask the generation pipeline for a completion, interpret it.
#
# The pipeline has no memory between calls. The scratchpad is rebuilt in full
# every round and its layout must match the prompt suffix of the same style.
#
# Two styles, no shared mutable state:
#   ZeroShotPlanner       : single-shot tool user ("Final Answer:")
#   ConversationalPlanner : chat-style assistant ("AI:")

import datetime
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

from agent_loop.context import RunContext
from agent_loop.hooks import AgentHooks, notify
from agent_loop.interpreter import (
    Decision,
    OutputInterpreter,
    conversational_interpreter,
    mrkl_interpreter,
)
from agent_loop.models import AgentStep
from agent_loop.pipeline import GenerationPipeline, OpenAIPipeline, StreamCallback
from agent_loop.prompts import (
    CONVERSATIONAL_FORMAT_INSTRUCTIONS,
    CONVERSATIONAL_PREFIX,
    CONVERSATIONAL_SUFFIX,
    MRKL_FORMAT_INSTRUCTIONS,
    MRKL_PREFIX,
    MRKL_SUFFIX,
    create_conversational_prompt,
    create_mrkl_prompt,
)
from agent_loop.tools import Capability

SCRATCHPAD_KEY = "agent_scratchpad"
TODAY_KEY = "today"

# Without these the model can write its own "Observation:" and hallucinate
# a tool result.
STOP_MARKERS = ["\nObservation:", "\n\tObservation:"]

OBSERVATION_PREFIX = "\nObservation: "


# ---------------------------------------------------------------------------
# Scratchpads
# ---------------------------------------------------------------------------


def construct_mrkl_scratchpad(steps: list[AgentStep]) -> str:
    """Each step framed by newlines; no trailing cue."""
    scratchpad = ""
    for step in steps:
        scratchpad += "\n" + step.action.log
        scratchpad += OBSERVATION_PREFIX + step.observation + "\n"
    return scratchpad


def construct_conversational_scratchpad(steps: list[AgentStep]) -> str:
    """Steps back to back, then a trailing "Thought:" cue once any exist."""
    scratchpad = ""
    for step in steps:
        scratchpad += step.action.log
        scratchpad += OBSERVATION_PREFIX + step.observation
    if steps:
        scratchpad += "\nThought:"
    return scratchpad


# ---------------------------------------------------------------------------
# Planner base
# ---------------------------------------------------------------------------


class Planner(ABC):
    """
    Decides what to do next given the step history and caller inputs.

    Subclasses supply the scratchpad layout and any derived inputs; the base
    class owns the pipeline call and interpretation.
    """

    # Inputs the planner fills in itself; never asked of the caller.
    planner_keys: tuple[str, ...] = (SCRATCHPAD_KEY,)

    def __init__(
        self,
        pipeline: GenerationPipeline,
        capabilities: Iterable[Capability],
        interpreter: OutputInterpreter,
        hooks: Optional[AgentHooks] = None,
    ) -> None:
        self._pipeline = pipeline
        self._capabilities = list(capabilities)
        self._interpreter = interpreter
        self._hooks = hooks

    @property
    def capabilities(self) -> list[Capability]:
        return list(self._capabilities)

    @property
    def input_keys(self) -> list[str]:
        return [k for k in self._pipeline.input_keys if k not in self.planner_keys]

    @property
    def output_keys(self) -> list[str]:
        return [self._interpreter.output_key]

    @abstractmethod
    def construct_scratchpad(self, steps: list[AgentStep]) -> str: ...

    def derived_inputs(self) -> dict[str, Any]:
        """Contextual values the prompt needs beyond the caller's inputs."""
        return {}

    def plan(
        self,
        steps: list[AgentStep],
        inputs: dict[str, str],
        ctx: Optional[RunContext] = None,
    ) -> Decision:
        """
        One round of model prompting.

        Returns an AgentFinish or a list of AgentAction. Raises
        OutputParseError on unparseable output; pipeline errors propagate.
        """
        full_inputs: dict[str, Any] = dict(inputs)
        full_inputs.update(self.derived_inputs())
        full_inputs[SCRATCHPAD_KEY] = self.construct_scratchpad(steps)

        output = self._pipeline.generate(
            full_inputs,
            stop=list(STOP_MARKERS),
            stream=self._stream_callback(ctx),
            ctx=ctx,
        )
        return self._interpreter.parse(output)

    def _stream_callback(self, ctx: Optional[RunContext]) -> Optional[StreamCallback]:
        if self._hooks is None:
            return None
        hooks = self._hooks

        def forward(chunk: str) -> None:
            notify(hooks, "streaming_chunk", ctx, chunk)

        return forward


# ---------------------------------------------------------------------------
# Styles
# ---------------------------------------------------------------------------


class ZeroShotPlanner(Planner):
    """Single-shot tool user. Finishes on "Final Answer:"."""

    planner_keys = (SCRATCHPAD_KEY, TODAY_KEY)

    def __init__(
        self,
        pipeline: GenerationPipeline,
        capabilities: Iterable[Capability],
        output_key: str = "output",
        hooks: Optional[AgentHooks] = None,
    ) -> None:
        super().__init__(pipeline, capabilities, mrkl_interpreter(output_key), hooks)

    @classmethod
    def from_model(
        cls,
        model: str,
        capabilities: Iterable[Capability],
        output_key: str = "output",
        hooks: Optional[AgentHooks] = None,
        prefix: str = MRKL_PREFIX,
        instructions: str = MRKL_FORMAT_INSTRUCTIONS,
        suffix: str = MRKL_SUFFIX,
        **pipeline_kwargs: Any,
    ) -> "ZeroShotPlanner":
        capabilities = list(capabilities)
        prompt = create_mrkl_prompt(capabilities, prefix, instructions, suffix)
        pipeline = OpenAIPipeline(model, prompt, **pipeline_kwargs)
        return cls(pipeline, capabilities, output_key, hooks)

    def construct_scratchpad(self, steps: list[AgentStep]) -> str:
        return construct_mrkl_scratchpad(steps)

    def derived_inputs(self) -> dict[str, Any]:
        return {TODAY_KEY: datetime.date.today().strftime("%B %d, %Y")}


class ConversationalPlanner(Planner):
    """Chat-style assistant. Finishes on "AI:"."""

    def __init__(
        self,
        pipeline: GenerationPipeline,
        capabilities: Iterable[Capability],
        output_key: str = "output",
        hooks: Optional[AgentHooks] = None,
    ) -> None:
        super().__init__(pipeline, capabilities, conversational_interpreter(output_key), hooks)

    @classmethod
    def from_model(
        cls,
        model: str,
        capabilities: Iterable[Capability],
        output_key: str = "output",
        hooks: Optional[AgentHooks] = None,
        prefix: str = CONVERSATIONAL_PREFIX,
        instructions: str = CONVERSATIONAL_FORMAT_INSTRUCTIONS,
        suffix: str = CONVERSATIONAL_SUFFIX,
        **pipeline_kwargs: Any,
    ) -> "ConversationalPlanner":
        capabilities = list(capabilities)
        prompt = create_conversational_prompt(capabilities, prefix, instructions, suffix)
        pipeline = OpenAIPipeline(model, prompt, **pipeline_kwargs)
        return cls(pipeline, capabilities, output_key, hooks)

    def construct_scratchpad(self, steps: list[AgentStep]) -> str:
        return construct_conversational_scratchpad(steps)
