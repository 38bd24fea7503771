# run.py
# Entry point. Config and wiring only, no logic lives here.
#
# Swap the model string for any OpenRouter-supported model, or point
# AGENT_LOOP_BASE_URL at another OpenAI-compatible endpoint.
# https://openrouter.ai/models

import os

from agent_loop import display
from agent_loop.errors import AgentError, NotFinishedError
from agent_loop.executor import INTERMEDIATE_STEPS_KEY, Executor
from agent_loop.hooks import ConsoleHooks
from agent_loop.models import ExecutorConfig, ParserErrorHandler
from agent_loop.planner import ZeroShotPlanner
from agent_loop.tools import DEFAULT_CAPABILITIES

MODEL = os.getenv("AGENT_LOOP_MODEL", "anthropic/claude-3.5-haiku")

CONFIG = ExecutorConfig(
    max_iterations=6,
    return_intermediate_steps=True,
    parser_error_handler=ParserErrorHandler(
        formatter=lambda err: (
            f"{err}\nReply with either an Action / Action Input pair "
            "or a Final Answer."
        ),
    ),
)

# Test prompts: one needing several tool calls, one answered directly.
PROMPTS = [
    "Search for the current population of Lisbon and tell me how it compares to Porto's.",
    "What is 17 multiplied by 23? Answer directly without using any tools.",
]


def main() -> None:
    hooks = ConsoleHooks(output_key=CONFIG.output_key, stream=True)
    planner = ZeroShotPlanner.from_model(
        MODEL, DEFAULT_CAPABILITIES, output_key=CONFIG.output_key, hooks=hooks
    )
    executor = Executor(planner, CONFIG, hooks=hooks)
    display.banner(MODEL, [c.name for c in DEFAULT_CAPABILITIES], CONFIG.max_iterations)

    for prompt in PROMPTS:
        display.prompt_received(prompt)
        try:
            result = executor.call({"input": prompt})
        except NotFinishedError as exc:
            display.halt(str(exc))
            result = exc.result
        except AgentError as exc:
            display.halt(str(exc))
            continue

        steps = result.get(INTERMEDIATE_STEPS_KEY, [])
        display.execution_summary(steps)
        display.step_tree(steps)


if __name__ == "__main__":
    main()
