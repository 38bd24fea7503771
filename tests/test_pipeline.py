from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from agent_loop.context import RunContext
from agent_loop.errors import ContextCancelledError, MissingInputError
from agent_loop.pipeline import OpenAIPipeline
from agent_loop.prompts import PromptTemplate


def _prompt():
    return PromptTemplate(
        template="{greeting}, answer {input}\n{agent_scratchpad}",
        input_variables=["input", "agent_scratchpad"],
        partial_variables={"greeting": "Hello"},
    )


def _completion(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


def _chunk(text):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])


class _Stream:
    """Iterable chunk stream that records being closed, like openai's Stream."""

    def __init__(self, chunks, on_chunk=None):
        self._chunks = chunks
        self._on_chunk = on_chunk
        self.closed = False

    def __iter__(self):
        for chunk in self._chunks:
            yield chunk
            if self._on_chunk is not None:
                self._on_chunk()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        self.closed = True

# ---------------------------------------------------------------------------
# Prompt rendering
# ---------------------------------------------------------------------------

def test_prompt_merges_partials():
    assert _prompt().format({"input": "q", "agent_scratchpad": ""}) == "Hello, answer q\n"

def test_prompt_missing_variable():
    with pytest.raises(MissingInputError) as info:
        _prompt().format({"input": "q"})
    assert info.value.key == "agent_scratchpad"

# ---------------------------------------------------------------------------
# Model calls
# ---------------------------------------------------------------------------

def test_generate_sends_rendered_prompt_and_stop():
    client = MagicMock()
    client.chat.completions.create.return_value = _completion("Final Answer: 1")
    pipeline = OpenAIPipeline("test/model", _prompt(), client=client)

    out = pipeline.generate({"input": "q", "agent_scratchpad": ""}, stop=["\nObservation:"])

    assert out == "Final Answer: 1"
    client.chat.completions.create.assert_called_once_with(
        model="test/model",
        messages=[{"role": "user", "content": "Hello, answer q\n"}],
        stop=["\nObservation:"],
    )

def test_generate_handles_empty_content():
    client = MagicMock()
    client.chat.completions.create.return_value = _completion(None)
    pipeline = OpenAIPipeline("m", _prompt(), client=client)
    assert pipeline.generate({"input": "q", "agent_scratchpad": ""}) == ""

def test_generate_streams_deltas():
    client = MagicMock()
    chunks = _Stream(
        [_chunk("Final "), _chunk(None), SimpleNamespace(choices=[]), _chunk("Answer: 2")]
    )
    client.chat.completions.create.return_value = chunks
    pipeline = OpenAIPipeline("m", _prompt(), client=client)
    seen = []

    out = pipeline.generate({"input": "q", "agent_scratchpad": ""}, stream=seen.append)

    assert out == "Final Answer: 2"
    assert seen == ["Final ", "Answer: 2"]
    assert client.chat.completions.create.call_args.kwargs["stream"] is True
    assert chunks.closed

def test_stream_closed_when_cancelled_mid_stream():
    ctx = RunContext()
    chunks = _Stream([_chunk("Thought: "), _chunk("never seen")], on_chunk=ctx.cancel)
    client = MagicMock()
    client.chat.completions.create.return_value = chunks
    pipeline = OpenAIPipeline("m", _prompt(), client=client)
    seen = []

    with pytest.raises(ContextCancelledError):
        pipeline.generate({"input": "q", "agent_scratchpad": ""}, stream=seen.append, ctx=ctx)

    assert seen == ["Thought: "]
    assert chunks.closed

def test_generate_observes_cancelled_context():
    client = MagicMock()
    pipeline = OpenAIPipeline("m", _prompt(), client=client)
    ctx = RunContext()
    ctx.cancel()

    with pytest.raises(ContextCancelledError):
        pipeline.generate({"input": "q", "agent_scratchpad": ""}, ctx=ctx)
    client.chat.completions.create.assert_not_called()

def test_provider_error_propagates():
    client = MagicMock()
    client.chat.completions.create.side_effect = TimeoutError("slow provider")
    pipeline = OpenAIPipeline("m", _prompt(), client=client)
    with pytest.raises(TimeoutError):
        pipeline.generate({"input": "q", "agent_scratchpad": ""})

def test_input_keys_from_prompt():
    assert OpenAIPipeline("m", _prompt(), client=MagicMock()).input_keys == ["input", "agent_scratchpad"]
