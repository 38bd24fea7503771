import io
from unittest.mock import MagicMock, patch

from agent_loop.hooks import AgentHooks, ConsoleHooks, MultiHooks, StreamWriterHooks, notify
from agent_loop.models import AgentAction, AgentFinish


def test_notify_ignores_missing_hooks():
    notify(None, "agent_action", None, AgentAction())

@patch("agent_loop.hooks.display")
def test_notify_reports_hook_failure(mock_display):
    class Broken(AgentHooks):
        def tool_end(self, ctx, text):
            raise ValueError("bad hook")

    notify(Broken(), "tool_end", None, "out")

    hook, event, exc = mock_display.hook_failed.call_args.args
    assert (hook, event) == ("Broken", "tool_end")
    assert isinstance(exc, ValueError)

def test_multi_hooks_fan_out_past_a_failure(recording_hooks):
    broken = MagicMock(spec=AgentHooks)
    broken.agent_action.side_effect = RuntimeError("boom")
    multi = MultiHooks([broken, recording_hooks])
    action = AgentAction(tool="search")

    multi.agent_action(None, action)

    broken.agent_action.assert_called_once_with(None, action)
    assert recording_hooks.events == [("action", action)]

def test_stream_writer_hooks():
    buffer = io.StringIO()
    hooks = StreamWriterHooks(buffer)
    hooks.streaming_chunk(None, "Final ")
    hooks.streaming_chunk(None, "Answer")
    assert buffer.getvalue() == "Final Answer"

@patch("agent_loop.hooks.display")
def test_console_hooks_render_events(mock_display):
    hooks = ConsoleHooks(output_key="answer")
    action = AgentAction(tool="search", tool_input="q")

    hooks.agent_action(None, action)
    hooks.tool_start(None, "q")
    hooks.tool_end(None, "result")
    hooks.agent_finish(None, AgentFinish(return_values={"answer": " 42"}))
    hooks.streaming_chunk(None, "ignored")

    mock_display.react_action.assert_called_once_with(action)
    mock_display.tool_start.assert_called_once_with("q")
    mock_display.react_observation.assert_called_once_with("result")
    mock_display.final_result.assert_called_once_with(" 42")
    mock_display.stream_chunk.assert_not_called()
