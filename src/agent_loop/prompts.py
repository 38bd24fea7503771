# prompts.py
# Prompt templates for the two agent styles.
#
# The scratchpad each planner builds must line up with the suffix here:
# the zero-shot suffix places the scratchpad right after the question, the
# conversational suffix places it after a "Thought:" cue.

from typing import Any, Iterable

from pydantic import BaseModel, Field

from agent_loop.errors import MissingInputError
from agent_loop.tools import Capability, capability_descriptions, capability_names


class PromptTemplate(BaseModel):
    """A `str.format` template with pre-filled partial variables."""

    template: str
    input_variables: list[str] = Field(default_factory=list)
    partial_variables: dict[str, Any] = Field(default_factory=dict)

    def format(self, values: dict[str, Any]) -> str:
        merged = {**self.partial_variables, **values}
        for key in self.input_variables:
            if key not in merged:
                raise MissingInputError(key)
        try:
            return self.template.format(**merged)
        except KeyError as exc:
            raise MissingInputError(str(exc.args[0])) from exc


# ---------------------------------------------------------------------------
# Zero-shot (MRKL)
# ---------------------------------------------------------------------------

MRKL_PREFIX = """\
Today is {today}.
Answer the following questions as best you can. You have access to the following tools:

{tool_descriptions}\
"""

MRKL_FORMAT_INSTRUCTIONS = """\
Use the following format:

Question: the input question you must answer
Thought: you should always think about what to do
Action: the action to take, should be one of [ {tool_names} ]
Action Input: the input to the action
Observation: the result of the action
... (this Thought/Action/Action Input/Observation can repeat N times)
Thought: I now know the final answer
Final Answer: the final answer to the original input question\
"""

MRKL_SUFFIX = """\
Begin!

Question: {input}
{agent_scratchpad}\
"""


# ---------------------------------------------------------------------------
# Conversational
# ---------------------------------------------------------------------------

CONVERSATIONAL_PREFIX = """\
Assistant is a large language model built to help with a wide range of tasks, \
from answering simple questions to providing in-depth explanations and discussion. \
Assistant holds natural conversations and can look things up with tools when needed.

TOOLS:
------

Assistant has access to the following tools:

{tool_descriptions}\
"""

CONVERSATIONAL_FORMAT_INSTRUCTIONS = """\
To use a tool, please use the following format:

Thought: Do I need to use a tool? Yes
Action: the action to take, should be one of [ {tool_names} ]
Action Input: the input to the action
Observation: the result of the action

When you have a response to say to the Human, or if you do not need to use a tool, \
you MUST use the format:

Thought: Do I need to use a tool? No
AI: [your response here]\
"""

CONVERSATIONAL_SUFFIX = """\
Begin!

Previous conversation history:
{history}

New input: {input}

Thought:{agent_scratchpad}\
"""


def _join(prefix: str, instructions: str, suffix: str) -> str:
    return "\n\n".join([prefix, instructions, suffix])


def create_mrkl_prompt(
    capabilities: Iterable[Capability],
    prefix: str = MRKL_PREFIX,
    instructions: str = MRKL_FORMAT_INSTRUCTIONS,
    suffix: str = MRKL_SUFFIX,
) -> PromptTemplate:
    capabilities = list(capabilities)
    return PromptTemplate(
        template=_join(prefix, instructions, suffix),
        input_variables=["input", "agent_scratchpad", "today"],
        partial_variables={
            "tool_names": capability_names(capabilities),
            "tool_descriptions": capability_descriptions(capabilities),
        },
    )


def create_conversational_prompt(
    capabilities: Iterable[Capability],
    prefix: str = CONVERSATIONAL_PREFIX,
    instructions: str = CONVERSATIONAL_FORMAT_INSTRUCTIONS,
    suffix: str = CONVERSATIONAL_SUFFIX,
) -> PromptTemplate:
    capabilities = list(capabilities)
    return PromptTemplate(
        template=_join(prefix, instructions, suffix),
        input_variables=["input", "agent_scratchpad"],
        partial_variables={
            "tool_names": capability_names(capabilities),
            "tool_descriptions": capability_descriptions(capabilities),
            "history": "",
        },
    )
