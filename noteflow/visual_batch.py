"""Visual Batch

Runs diagram and flowchart generation concurrently on a thread pool.
Results come back in input order, one per job, whatever finished first.
Each item gets its own timeout, counted from the moment a worker picks it
up, so items waiting in the queue are never charged for slow neighbours.
Failures and items that overrun become failed results; nothing here
raises for a single bad visual.
"""
import logging
import math
import threading
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from typing import Callable, Dict, List, Optional, Sequence

from .config import DEFAULT_MAX_WORKERS, DEFAULT_VISUAL_TIMEOUT
from .exceptions import VisualTimeoutError
from .processing_result import VisualResult

logger = logging.getLogger(__name__)

VisualJob = Callable[[], bytes]


def run_visual_batch(
    jobs: Sequence[Optional[VisualJob]],
    max_workers: int = DEFAULT_MAX_WORKERS,
    timeout: float = DEFAULT_VISUAL_TIMEOUT,
    names: Optional[Sequence[Optional[str]]] = None,
    logger: Optional[logging.Logger] = None,
) -> List[VisualResult]:
    """
    Run visual jobs concurrently and collect index-aligned results.

    Args:
        jobs: Zero-argument callables returning image bytes. None marks an
            item with nothing to generate (empty prompt).
        max_workers: Thread pool size
        timeout: Seconds one item may run once it has started
        names: Optional names attached to each result
        logger: Logger for per-item failures

    Returns:
        One VisualResult per job, result[i].concept_index == i
    """
    log = logger or globals()["logger"]
    names = list(names or [])

    def name_of(index: int) -> Optional[str]:
        return names[index] if index < len(names) else None

    results: List[Optional[VisualResult]] = [None] * len(jobs)
    for index, job in enumerate(jobs):
        if job is None:
            results[index] = VisualResult.failed(index, "empty prompt", name_of(index))

    def timed_out(index: int) -> None:
        error = VisualTimeoutError(index, timeout)
        log.warning(str(error))
        results[index] = VisualResult.failed(index, str(error), name_of(index))

    pending = [index for index, job in enumerate(jobs) if job is not None]
    if pending:
        workers = max(1, min(max_workers, len(pending)))
        started: Dict[int, float] = {}
        lock = threading.Lock()

        def run(index: int) -> bytes:
            with lock:
                started[index] = time.monotonic()
            return jobs[index]()

        # Upper bound for the degenerate case of every worker stuck on a
        # hung job, which leaves queued items unable to start at all
        hard_stop = time.monotonic() + timeout * (math.ceil(len(pending) / workers) + 1)

        executor = ThreadPoolExecutor(max_workers=workers)
        try:
            futures = {executor.submit(run, index): index for index in pending}
            remaining = set(futures)
            while remaining:
                now = time.monotonic()
                with lock:
                    deadlines = [started[futures[f]] + timeout for f in remaining if futures[f] in started]
                next_deadline = min(deadlines + [hard_stop, now + timeout])
                done, _ = wait(remaining, timeout=max(0.0, next_deadline - now), return_when=FIRST_COMPLETED)

                for future in done:
                    remaining.discard(future)
                    index = futures[future]
                    try:
                        image_bytes = future.result()
                    except Exception as e:
                        log.warning("Visual %d failed: %s", index, e)
                        results[index] = VisualResult.failed(index, str(e) or type(e).__name__, name_of(index))
                        continue
                    if image_bytes:
                        results[index] = VisualResult.ready(index, image_bytes, name_of(index))
                    else:
                        results[index] = VisualResult.failed(index, "no image data returned", name_of(index))

                now = time.monotonic()
                with lock:
                    expired = [
                        f for f in remaining
                        if not f.done() and (
                            now >= hard_stop or (futures[f] in started and now >= started[futures[f]] + timeout)
                        )
                    ]
                for future in expired:
                    remaining.discard(future)
                    future.cancel()
                    timed_out(futures[future])
        finally:
            # Overrunning workers are abandoned, not joined
            executor.shutdown(wait=False, cancel_futures=True)

    ready = sum(1 for result in results if result is not None and result.is_ready)
    log.info("Visual batch finished: %d/%d ready", ready, len(results))
    return results


def generate_all_diagrams(
    prompts: Sequence[str],
    client,
    max_workers: int = DEFAULT_MAX_WORKERS,
    timeout: float = DEFAULT_VISUAL_TIMEOUT,
    logger: Optional[logging.Logger] = None,
) -> List[VisualResult]:
    """
    Generate one diagram image per prompt.

    Args:
        prompts: Diagram prompts, index-aligned with the concept names
        client: Object with generate(prompt) -> bytes (DiagramImageClient)
    """
    jobs = [
        (lambda prompt=prompt: client.generate(prompt)) if prompt and prompt.strip() else None
        for prompt in prompts
    ]
    return run_visual_batch(jobs, max_workers=max_workers, timeout=timeout, logger=logger)


def generate_all_flowcharts(
    codes: Sequence[str],
    names: Optional[Sequence[str]],
    renderer,
    max_workers: int = DEFAULT_MAX_WORKERS,
    timeout: float = DEFAULT_VISUAL_TIMEOUT,
    logger: Optional[logging.Logger] = None,
) -> List[VisualResult]:
    """
    Rasterize one flowchart per mermaid source.

    Args:
        codes: Mermaid sources
        names: Flowchart names; blank names are rendered as "Flowchart N"
        renderer: Object with render(code, name) -> bytes (FlowchartRenderer)
    """
    names = list(names or [])
    given = [
        (names[index] or "").strip() or None if index < len(names) else None
        for index in range(len(codes))
    ]
    resolved = [name or f"Flowchart {index + 1}" for index, name in enumerate(given)]
    jobs = [
        (lambda code=code, name=name: renderer.render(code, name)) if code and code.strip() else None
        for code, name in zip(codes, resolved)
    ]
    return run_visual_batch(jobs, max_workers=max_workers, timeout=timeout, names=given, logger=logger)
