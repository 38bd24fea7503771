# errors.py
# Error taxonomy for the agent loop.
#
# Every failure is a subclass of AgentError and carries the offending data
# as attributes, so callers match on the class rather than on message text.
# Unknown capability names are deliberately absent: they become observations.

from typing import Any, Optional


class AgentError(Exception):
    """Base class for every error the loop raises."""

    def __init__(self, message: str, result: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.result: dict[str, Any] = result if result is not None else {}


class InputNotStringError(AgentError):
    """Raised when a caller input value is not a string. Always fatal."""

    def __init__(self, key: str) -> None:
        super().__init__(f"input to executor not string: {key}")
        self.key = key


class OutputParseError(AgentError):
    """Raised when model output is neither a finish nor an action."""

    PREFIX = "unable to parse agent output"

    def __init__(self, text: str) -> None:
        super().__init__(f"{self.PREFIX}: {text}")
        self.text = text


class AgentNoReturnError(AgentError):
    """Raised when a planner returns neither actions nor a finish."""

    def __init__(self) -> None:
        super().__init__("agent returned without any actions or finish")


class CapabilityError(AgentError):
    """Raised when a capability call fails. Never retried."""

    def __init__(self, tool: str, tool_input: str, cause: BaseException) -> None:
        super().__init__(f"capability {tool!r} failed: {cause}")
        self.tool = tool
        self.tool_input = tool_input


class NotFinishedError(AgentError):
    """Raised when the iteration budget runs out before a finish."""

    MESSAGE = "agent not finished before max iterations"

    def __init__(self, result: Optional[dict[str, Any]] = None) -> None:
        super().__init__(self.MESSAGE, result)


class MissingInputError(AgentError):
    """Raised when a prompt is rendered without one of its variables."""

    def __init__(self, key: str) -> None:
        super().__init__(f"missing key in input values: {key}")
        self.key = key


class ContextCancelledError(AgentError):
    """Raised when work observes a cancelled RunContext."""

    def __init__(self) -> None:
        super().__init__("context canceled")


class DeadlineExceededError(AgentError):
    """Raised when work observes a RunContext past its deadline."""

    def __init__(self) -> None:
        super().__init__("context deadline exceeded")
