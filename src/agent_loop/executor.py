# executor.py
# The Executor owns the plan → act → observe loop.
#
# Planners and capabilities are passive. This class owns all control flow,
# the step history and the iteration budget. Nothing it holds on `self`
# changes during a call, so one Executor may serve concurrent invocations.
#
# Per round:
#   planner.plan(steps) → parse error?  → recover (handler) or raise
#                       → finish?       → return
#                       → actions       → dispatch each, record observation
# Budget spent without a finish → NotFinishedError.

from typing import Any, Optional

from agent_loop.context import RunContext
from agent_loop.errors import (
    AgentError,
    AgentNoReturnError,
    CapabilityError,
    InputNotStringError,
    NotFinishedError,
    OutputParseError,
)
from agent_loop.hooks import AgentHooks, notify
from agent_loop.models import AgentAction, AgentFinish, AgentStep, ExecutorConfig
from agent_loop.planner import Planner
from agent_loop.tools import Capability

INTERMEDIATE_STEPS_KEY = "intermediate_steps"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _inputs_to_string(input_values: dict[str, Any]) -> dict[str, str]:
    inputs: dict[str, str] = {}
    for key, value in input_values.items():
        if not isinstance(value, str):
            raise InputNotStringError(key)
        inputs[key] = value
    return inputs


def _name_to_capability(capabilities: list[Capability]) -> dict[str, Capability]:
    """Upper-cased lookup table. A repeated name replaces the earlier entry."""
    return {c.name.upper(): c for c in capabilities}


def unknown_capability_observation(name: str) -> str:
    return f"{name} is not a valid tool, try another one"


# ---------------------------------------------------------------------------
# Executor
# ---------------------------------------------------------------------------


class Executor:
    """
    Runs a Planner until it finishes or the iteration budget is spent.

    Example:
        planner = ZeroShotPlanner.from_model("anthropic/claude-3.5-haiku", DEFAULT_CAPABILITIES)
        executor = Executor(planner, ExecutorConfig(max_iterations=8))
        result = executor.call({"input": "What is the capital of France?"})
        result["output"]
    """

    def __init__(
        self,
        planner: Planner,
        config: Optional[ExecutorConfig] = None,
        hooks: Optional[AgentHooks] = None,
    ) -> None:
        # The planner's interpreter keys the finish; the config must agree.
        output_key = planner.output_keys[0]
        if config is None:
            config = ExecutorConfig(output_key=output_key)
        elif config.output_key != output_key:
            raise ValueError(
                f"config output_key {config.output_key!r} does not match "
                f"planner output key {output_key!r}"
            )
        self._planner = planner
        self._config = config
        self._hooks = hooks

    @property
    def config(self) -> ExecutorConfig:
        return self._config

    @property
    def input_keys(self) -> list[str]:
        return self._planner.input_keys

    @property
    def output_keys(self) -> list[str]:
        return self._planner.output_keys

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def call(self, input_values: dict[str, Any], ctx: Optional[RunContext] = None) -> dict[str, Any]:
        """
        Drive the loop to completion.

        Returns the finish's return values, plus the step history under
        "intermediate_steps" when configured. Raises an AgentError subclass on
        every failure; NotFinishedError carries the partial result.
        """
        inputs = _inputs_to_string(input_values)
        name_to_capability = _name_to_capability(self._planner.capabilities)
        steps: list[AgentStep] = []

        for _ in range(self._config.max_iterations):
            finish = self._do_iteration(ctx, steps, name_to_capability, inputs)
            if finish is not None:
                return self._get_return(finish, steps)

        notify(
            self._hooks,
            "agent_finish",
            ctx,
            AgentFinish(return_values={self._config.output_key: NotFinishedError.MESSAGE}),
        )
        raise NotFinishedError(self._get_return(AgentFinish(), steps))

    def run(self, text: str, ctx: Optional[RunContext] = None) -> str:
        """Single-input, single-output convenience over call()."""
        input_keys = self.input_keys
        if len(input_keys) != 1:
            raise AgentError(
                f"run needs exactly one input key, executor expects {input_keys}"
            )
        result = self.call({input_keys[0]: text}, ctx)
        return str(result[self.output_keys[0]])

    # ------------------------------------------------------------------
    # Loop internals
    # ------------------------------------------------------------------

    def _do_iteration(
        self,
        ctx: Optional[RunContext],
        steps: list[AgentStep],
        name_to_capability: dict[str, Capability],
        inputs: dict[str, str],
    ) -> Optional[AgentFinish]:
        handler = self._config.parser_error_handler
        try:
            decision = self._planner.plan(list(steps), inputs, ctx)
        except OutputParseError as exc:
            if handler is None:
                raise
            # The model sees its own malformed output as the observation.
            steps.append(AgentStep(observation=handler.format(str(exc))))
            return None

        if isinstance(decision, AgentFinish):
            notify(self._hooks, "agent_finish", ctx, decision)
            return decision

        if not decision:
            raise AgentNoReturnError()

        for action in decision:
            steps.append(self._do_action(ctx, name_to_capability, action))
        return None

    def _do_action(
        self,
        ctx: Optional[RunContext],
        name_to_capability: dict[str, Capability],
        action: AgentAction,
    ) -> AgentStep:
        notify(self._hooks, "agent_action", ctx, action)

        capability = name_to_capability.get(action.tool.upper())
        if capability is None:
            return AgentStep(action=action, observation=unknown_capability_observation(action.tool))

        notify(self._hooks, "tool_start", ctx, action.tool_input)
        try:
            observation = capability.call(ctx, action.tool_input)
        except AgentError:
            raise
        except Exception as exc:
            raise CapabilityError(action.tool, action.tool_input, exc) from exc
        notify(self._hooks, "tool_end", ctx, observation)

        return AgentStep(action=action, observation=observation)

    def _get_return(self, finish: AgentFinish, steps: list[AgentStep]) -> dict[str, Any]:
        result = dict(finish.return_values)
        if self._config.return_intermediate_steps:
            result[INTERMEDIATE_STEPS_KEY] = list(steps)
        return result
