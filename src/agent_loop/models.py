# models.py
# Data contracts for the agent execution loop.
# No business logic lives here, pure schema and validation.

from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt


class AgentAction(BaseModel):
    """A capability invocation requested by the model."""

    model_config = ConfigDict(frozen=True)

    tool: str = Field(default="", description="Capability name, matched case-insensitively.")
    tool_input: str = Field(default="", description="Argument text passed to the capability.")
    log: str = Field(default="", description="Raw model text the action was parsed from.")
    tool_id: str = Field(default="", description="Optional correlation identifier.")


class AgentStep(BaseModel):
    """Immutable record of one completed round: the action and what it yielded."""

    model_config = ConfigDict(frozen=True)

    action: AgentAction = Field(default_factory=AgentAction)
    observation: str = ""


class AgentFinish(BaseModel):
    """Terminal signal carrying the final answer."""

    model_config = ConfigDict(frozen=True)

    return_values: dict[str, Any] = Field(default_factory=dict)
    log: str = ""


class ParserErrorHandler(BaseModel):
    """
    Recovery policy for unparseable model output.

    When set on an executor, a parse failure is fed back to the model as an
    observation instead of aborting. The optional formatter rewrites the
    error text first.
    """

    model_config = ConfigDict(frozen=True)

    formatter: Optional[Callable[[str], str]] = None

    def format(self, text: str) -> str:
        if self.formatter is None:
            return text
        return self.formatter(text)


class ExecutorConfig(BaseModel):
    """Loop settings. Fixed at executor construction."""

    model_config = ConfigDict(frozen=True)

    max_iterations: PositiveInt = 5
    output_key: str = Field(default="output", min_length=1)
    return_intermediate_steps: bool = False
    parser_error_handler: Optional[ParserErrorHandler] = None
