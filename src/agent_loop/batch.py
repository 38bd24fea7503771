# batch.py
# Fan-out of independent executor invocations over a fixed worker pool.
#
# Unrelated to the loop's own ordering: each job is a full, sequential
# Executor.call. Results come back ordered by input index.
#
# Workers stop taking jobs once the context is done. The collector raises the
# first job error it sees, or the context error if the context ends before
# every result has arrived.

import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, NamedTuple, Optional

from agent_loop.context import RunContext, background
from agent_loop.executor import Executor

DEFAULT_MAX_WORKERS = 5

# How often the collector re-checks the context while waiting.
POLL_INTERVAL = 0.05


class _Job(NamedTuple):
    index: int
    inputs: dict[str, Any]


class _Result(NamedTuple):
    index: int
    value: Optional[dict[str, Any]]
    error: Optional[BaseException]


def apply(
    executor: Executor,
    input_values: list[dict[str, Any]],
    max_workers: int = DEFAULT_MAX_WORKERS,
    ctx: Optional[RunContext] = None,
) -> list[dict[str, Any]]:
    """
    Run `executor.call` once per input, at most `max_workers` at a time.

    Returns results in input order. Raises the first error any job raised,
    or the context error if `ctx` ends before all results arrive.
    """
    ctx = ctx or background()
    if max_workers <= 0:
        max_workers = DEFAULT_MAX_WORKERS

    jobs: "queue.Queue[_Job]" = queue.Queue()
    for index, inputs in enumerate(input_values):
        jobs.put(_Job(index, inputs))

    results: "queue.Queue[_Result]" = queue.Queue()
    stop = threading.Event()

    def worker() -> None:
        while not ctx.done and not stop.is_set():
            try:
                job = jobs.get_nowait()
            except queue.Empty:
                return
            try:
                value = executor.call(job.inputs, ctx)
            except Exception as exc:
                results.put(_Result(job.index, None, exc))
            else:
                results.put(_Result(job.index, value, None))

    pool = ThreadPoolExecutor(max_workers=max_workers)
    try:
        for _ in range(max_workers):
            pool.submit(worker)
        return _collect(results, len(input_values), ctx)
    finally:
        # Queued jobs stay unclaimed from here on; running ones finish on
        # their own.
        stop.set()
        pool.shutdown(wait=False, cancel_futures=True)


def _collect(
    results: "queue.Queue[_Result]",
    total: int,
    ctx: RunContext,
) -> list[dict[str, Any]]:
    ordered: list[Optional[dict[str, Any]]] = [None] * total
    received = 0
    while received < total:
        err = ctx.error()
        if err is not None:
            raise err
        try:
            result = results.get(timeout=POLL_INTERVAL)
        except queue.Empty:
            continue
        if result.error is not None:
            raise result.error
        ordered[result.index] = result.value
        received += 1
    return [r for r in ordered if r is not None]
