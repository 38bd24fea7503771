from unittest.mock import MagicMock, patch

import pytest

from agent_loop.context import RunContext
from agent_loop.errors import ContextCancelledError
from agent_loop.tools import (
    DEFAULT_CAPABILITIES,
    FunctionCapability,
    _tool_fetch,
    _tool_search,
    _tool_summarize,
    capability_descriptions,
    capability_names,
)

# ---------------------------------------------------------------------------
# Generator/API Handling Tests
# ---------------------------------------------------------------------------

@patch("ddgs.DDGS")
def test_tool_search_success(mock_ddgs_cls):
    mock_instance = mock_ddgs_cls.return_value
    mock_instance.text.return_value = [
        {"title": "Result 1", "body": "Body 1", "href": "http://1.com"}
    ]

    result = _tool_search("test")
    assert "Result 1" in result
    assert "Body 1" in result
    assert "http://1.com" in result
    mock_instance.text.assert_called_once_with("test", max_results=4)

@patch("ddgs.DDGS")
def test_tool_search_empty_query(mock_ddgs_cls):
    result = _tool_search("   ")
    assert "Error: no query provided" in result
    mock_ddgs_cls.assert_not_called()

@patch("ddgs.DDGS")
def test_tool_search_no_results(mock_ddgs_cls):
    mock_ddgs_cls.return_value.text.return_value = []
    assert "No results found" in _tool_search("ghost")

@patch("ddgs.DDGS")
def test_tool_search_exception_propagates(mock_ddgs_cls):
    mock_ddgs_cls.return_value.text.side_effect = Exception("Network timeout")
    with pytest.raises(Exception, match="Network timeout"):
        _tool_search("crash")

@patch("httpx.get")
def test_tool_fetch_truncates_body(mock_get):
    mock_get.return_value = MagicMock(status_code=200, text="x" * 5000)
    result = _tool_fetch(" https://example.com ")
    mock_get.assert_called_once_with("https://example.com", timeout=10, follow_redirects=True)
    assert result.startswith("GET https://example.com → 200\n")
    assert result.endswith("…")

def test_tool_fetch_requires_url():
    assert _tool_fetch("") == "Error: no URL provided."

@patch("httpx.get")
def test_tool_fetch_rejects_url_without_scheme(mock_get):
    assert _tool_fetch("example.com") == "Error: 'example.com' is not an absolute http(s) URL."
    mock_get.assert_not_called()

def test_tool_summarize_truncation():
    assert len(_tool_summarize("a" * 5000)) == 4000

def test_tool_summarize_empty():
    assert _tool_summarize("  ") == "Error: no text provided."

# ---------------------------------------------------------------------------
# Capability wrapper
# ---------------------------------------------------------------------------

def test_function_capability_calls_function():
    cap = FunctionCapability("upper", "Upper-cases text.", str.upper)
    assert cap.name == "upper"
    assert cap.call(None, "abc") == "ABC"

def test_function_capability_observes_cancelled_context():
    func = MagicMock(return_value="never")
    cap = FunctionCapability("slow", "Slow.", func)
    ctx = RunContext()
    ctx.cancel()

    with pytest.raises(ContextCancelledError):
        cap.call(ctx, "x")
    func.assert_not_called()

def test_default_capabilities_echo():
    echo = next(c for c in DEFAULT_CAPABILITIES if c.name == "echo")
    assert echo.call(RunContext(), "same") == "same"

def test_prompt_helpers():
    caps = [FunctionCapability("a", "first", str), FunctionCapability("b", "second", str)]
    assert capability_names(caps) == "a, b"
    assert capability_descriptions(caps) == "- a: first\n- b: second"
