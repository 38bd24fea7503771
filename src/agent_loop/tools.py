# tools.py
# Capability registry: the named, side-effecting units the agent can call.
# The executor resolves capabilities by upper-cased name and never inspects
# their internals.
#
# A capability returns text the model will read as its Observation. Bad input
# is reported back as text so the model can correct itself; anything raised
# is fatal to the whole invocation.

from abc import ABC, abstractmethod
from typing import Callable, Iterable, Optional

from agent_loop.context import RunContext


class Capability(ABC):
    """A named, synchronously callable unit of behaviour."""

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def description(self) -> str: ...

    @abstractmethod
    def call(self, ctx: Optional[RunContext], text: str) -> str:
        """Run the capability on `text`. Must observe `ctx` when given."""


class FunctionCapability(Capability):
    """Adapts a plain `str -> str` function into a Capability."""

    def __init__(self, name: str, description: str, func: Callable[[str], str]) -> None:
        self._name = name
        self._description = description
        self._func = func

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    def call(self, ctx: Optional[RunContext], text: str) -> str:
        if ctx is not None:
            ctx.raise_if_done()
        return self._func(text)

    def __repr__(self) -> str:
        return f"FunctionCapability(name={self._name!r})"


# ---------------------------------------------------------------------------
# Built-in capabilities
# ---------------------------------------------------------------------------

SUMMARY_LIMIT = 4000
FETCH_LIMIT = 2000


def _tool_echo(text: str) -> str:
    return text


def _tool_search(text: str) -> str:
    from ddgs import DDGS
    query = text.strip()
    if not query:
        return "Error: no query provided."

    # Coerce the generator to a list to ensure actual execution
    results = list(DDGS().text(query, max_results=4))

    if not results:
        return "No results found."

    lines = []
    for r in results:
        lines.append(f"[{r.get('title', 'No Title')}]\n{r.get('body', '')}\nSource: {r.get('href', '')}")
    return "\n\n".join(lines)


def _tool_summarize(text: str) -> str:
    text = text.strip()
    if not text:
        return "Error: no text provided."
    return text[:SUMMARY_LIMIT] if len(text) > SUMMARY_LIMIT else text


def _tool_fetch(text: str) -> str:
    import httpx
    url = text.strip()
    if not url:
        return "Error: no URL provided."
    if not url.startswith(("http://", "https://")):
        return f"Error: {url!r} is not an absolute http(s) URL."
    response = httpx.get(url, timeout=10, follow_redirects=True)
    body = response.text
    if len(body) > FETCH_LIMIT:
        body = body[:FETCH_LIMIT] + "…"
    return f"GET {url} → {response.status_code}\n{body}"


DEFAULT_CAPABILITIES: list[Capability] = [
    FunctionCapability(
        "echo",
        "Returns its input unchanged. Useful for restating a value.",
        _tool_echo,
    ),
    FunctionCapability(
        "search",
        "Searches the web. Input is a search query.",
        _tool_search,
    ),
    FunctionCapability(
        "summarize",
        f"Trims a long text to its first {SUMMARY_LIMIT} characters. Input is the text.",
        _tool_summarize,
    ),
    FunctionCapability(
        "fetch",
        "Downloads a web page. Input is an absolute http(s) URL.",
        _tool_fetch,
    ),
]


def capability_names(capabilities: Iterable[Capability]) -> str:
    """Comma-separated names, as shown to the model in the format instructions."""
    return ", ".join(c.name for c in capabilities)


def capability_descriptions(capabilities: Iterable[Capability]) -> str:
    """One `- name: description` line per capability."""
    return "\n".join(f"- {c.name}: {c.description}" for c in capabilities)
