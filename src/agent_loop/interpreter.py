# interpreter.py
# Output Interpreter: raw completion text → Finish | [Action] | parse failure.
#
# Pure functions only. Same text in, same classification out.
#
# Priority:
#   1. Finish marker anywhere in the text → split on the LAST occurrence,
#      answer is everything after it, untrimmed.
#   2. Action regex → (name, argument), both trimmed, argument runs to the
#      end of the text and may span lines.
#   3. Otherwise → OutputParseError.
#
# Known ambiguity: an action argument that itself contains the finish marker
# is classified as a finish. Kept as-is; changing it changes observable output.

import re
from typing import Union

from agent_loop.errors import OutputParseError
from agent_loop.models import AgentAction, AgentFinish

MRKL_FINISH_MARKER = "Final Answer:"
MRKL_ACTION_PATTERN = r"Action:\s*(.+)\s*Action Input:\s*(?s:(.+))"

CONVERSATIONAL_FINISH_MARKER = "AI:"
CONVERSATIONAL_ACTION_PATTERN = r"Action: (.*?)[\n]*Action Input: (?s:(.*))"

Decision = Union[list[AgentAction], AgentFinish]


class OutputInterpreter:
    """Classifies completion text for one agent style."""

    def __init__(self, finish_marker: str, action_pattern: str, output_key: str = "output") -> None:
        if not finish_marker:
            raise ValueError("finish_marker must be non-empty.")
        self._finish_marker = finish_marker
        self._action_re = re.compile(action_pattern)
        self._output_key = output_key

    @property
    def finish_marker(self) -> str:
        return self._finish_marker

    @property
    def output_key(self) -> str:
        return self._output_key

    def parse(self, text: str) -> Decision:
        """
        Return an AgentFinish or a non-empty list of AgentAction.

        Raises OutputParseError carrying `text` when neither shape is found.
        """
        if self._finish_marker in text:
            answer = text.split(self._finish_marker)[-1]
            return AgentFinish(return_values={self._output_key: answer}, log=text)

        match = self._action_re.search(text)
        if match is None:
            raise OutputParseError(text)

        return [
            AgentAction(
                tool=match.group(1).strip(),
                tool_input=match.group(2).strip(),
                log=text,
            )
        ]


def mrkl_interpreter(output_key: str = "output") -> OutputInterpreter:
    return OutputInterpreter(MRKL_FINISH_MARKER, MRKL_ACTION_PATTERN, output_key)


def conversational_interpreter(output_key: str = "output") -> OutputInterpreter:
    return OutputInterpreter(CONVERSATIONAL_FINISH_MARKER, CONVERSATIONAL_ACTION_PATTERN, output_key)
