# hooks.py
# Observability side-channel for the agent loop.
#
# Hooks are told what happened; they never decide what happens next. The loop
# delivers every event through notify(), so a failing hook is reported and
# otherwise ignored.

from typing import IO, Any, Iterable, Optional

from agent_loop import display
from agent_loop.context import RunContext
from agent_loop.models import AgentAction, AgentFinish


class AgentHooks:
    """No-op base. Override the events you care about."""

    def agent_action(self, ctx: Optional[RunContext], action: AgentAction) -> None:
        pass

    def agent_finish(self, ctx: Optional[RunContext], finish: AgentFinish) -> None:
        pass

    def streaming_chunk(self, ctx: Optional[RunContext], chunk: str) -> None:
        pass

    def tool_start(self, ctx: Optional[RunContext], text: str) -> None:
        pass

    def tool_end(self, ctx: Optional[RunContext], text: str) -> None:
        pass


def notify(hooks: Optional[AgentHooks], event: str, *args: Any) -> None:
    """Deliver one event best-effort. Hook failures never reach the caller."""
    if hooks is None:
        return
    try:
        getattr(hooks, event)(*args)
    except Exception as exc:
        display.hook_failed(type(hooks).__name__, event, exc)


class MultiHooks(AgentHooks):
    """Fans every event out to a list of hooks, in order."""

    def __init__(self, hooks: Iterable[AgentHooks]) -> None:
        self._hooks = list(hooks)

    def agent_action(self, ctx, action):
        for h in self._hooks:
            notify(h, "agent_action", ctx, action)

    def agent_finish(self, ctx, finish):
        for h in self._hooks:
            notify(h, "agent_finish", ctx, finish)

    def streaming_chunk(self, ctx, chunk):
        for h in self._hooks:
            notify(h, "streaming_chunk", ctx, chunk)

    def tool_start(self, ctx, text):
        for h in self._hooks:
            notify(h, "tool_start", ctx, text)

    def tool_end(self, ctx, text):
        for h in self._hooks:
            notify(h, "tool_end", ctx, text)


class StreamWriterHooks(AgentHooks):
    """Writes streamed chunks to a text stream as they arrive."""

    def __init__(self, writer: IO[str]) -> None:
        self._writer = writer

    def streaming_chunk(self, ctx, chunk):
        self._writer.write(chunk)
        self._writer.flush()


class ConsoleHooks(AgentHooks):
    """Renders loop events to the terminal through display.py."""

    def __init__(self, output_key: str = "output", stream: bool = False) -> None:
        self._output_key = output_key
        self._stream = stream

    def agent_action(self, ctx, action):
        display.react_action(action)

    def agent_finish(self, ctx, finish):
        display.final_result(str(finish.return_values.get(self._output_key, "")))

    def streaming_chunk(self, ctx, chunk):
        if self._stream:
            display.stream_chunk(chunk)

    def tool_start(self, ctx, text):
        display.tool_start(text)

    def tool_end(self, ctx, text):
        display.react_observation(text)
