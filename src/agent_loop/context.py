# context.py
# Caller-supplied cancellation and deadline carrier.
#
# The executor and planners never impose timeouts of their own. They pass the
# context through; pipelines and capabilities observe it.

import threading
import time
from typing import Optional

from agent_loop.errors import AgentError, ContextCancelledError, DeadlineExceededError


class RunContext:
    """
    Cancellation signal plus an optional deadline.

    Safe to share between threads: cancel() may be called from any thread and
    every observer sees it on its next check.

    Example:
        ctx = RunContext(timeout=30)
        executor.call({"input": "..."}, ctx)
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self._cancelled = threading.Event()
        self._deadline: Optional[float] = None
        if timeout is not None:
            self._deadline = time.monotonic() + timeout

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def deadline(self) -> Optional[float]:
        """Monotonic timestamp after which the context is done, if any."""
        return self._deadline

    @property
    def done(self) -> bool:
        return self.error() is not None

    def error(self) -> Optional[AgentError]:
        """Return the reason the context is done, or None while it is live."""
        if self._cancelled.is_set():
            return ContextCancelledError()
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return DeadlineExceededError()
        return None

    def raise_if_done(self) -> None:
        err = self.error()
        if err is not None:
            raise err

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the context is done or `timeout` elapses.

        Returns True if the context is done.
        """
        if self._deadline is not None:
            remaining = max(self._deadline - time.monotonic(), 0.0)
            timeout = remaining if timeout is None else min(timeout, remaining)
        self._cancelled.wait(timeout)
        return self.done


def background() -> RunContext:
    """A context that is never cancelled and has no deadline."""
    return RunContext()
