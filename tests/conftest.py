import pytest

from agent_loop.hooks import AgentHooks
from agent_loop.pipeline import GenerationPipeline
from agent_loop.tools import Capability


class ScriptedPipeline(GenerationPipeline):
    """Replays canned completions in order and records every request."""

    def __init__(self, responses, input_keys=("input", "agent_scratchpad", "today"), chunks=None):
        self._responses = list(responses)
        self._input_keys = list(input_keys)
        self._chunks = chunks or {}
        self.calls = []

    @property
    def input_keys(self):
        return list(self._input_keys)

    def generate(self, inputs, stop=None, stream=None, ctx=None):
        index = len(self.calls)
        self.calls.append({"inputs": dict(inputs), "stop": stop, "stream": stream, "ctx": ctx})
        if stream is not None:
            for chunk in self._chunks.get(index, []):
                stream(chunk)
        # Repeat the last response once the script runs out.
        response = self._responses[min(index, len(self._responses) - 1)]
        if isinstance(response, BaseException):
            raise response
        return response


class RecordingCapability(Capability):
    def __init__(self, name, result="ok", error=None):
        self._name = name
        self._result = result
        self._error = error
        self.inputs = []

    @property
    def name(self):
        return self._name

    @property
    def description(self):
        return f"{self._name} for tests"

    def call(self, ctx, text):
        self.inputs.append(text)
        if self._error is not None:
            raise self._error
        return self._result


class RecordingHooks(AgentHooks):
    def __init__(self):
        self.events = []

    def agent_action(self, ctx, action):
        self.events.append(("action", action))

    def agent_finish(self, ctx, finish):
        self.events.append(("finish", finish))

    def streaming_chunk(self, ctx, chunk):
        self.events.append(("chunk", chunk))

    def tool_start(self, ctx, text):
        self.events.append(("tool_start", text))

    def tool_end(self, ctx, text):
        self.events.append(("tool_end", text))


@pytest.fixture
def scripted():
    return ScriptedPipeline


@pytest.fixture
def capability():
    return RecordingCapability


@pytest.fixture
def recording_hooks():
    return RecordingHooks()
