"""
Running generation off the caller's thread.

Requests and results are plain immutable values. A GenerationWorker keeps
only the id of the latest request: every submit supersedes the previous one,
and results of superseded requests are dropped when they arrive. In-flight
work is never cancelled.

render_batch covers the other use: many independent artworks (e.g. a sheet
of seeds) spread over processes with joblib.
"""
import os
import functools
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from time import perf_counter
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from joblib import Parallel, delayed
from tqdm import tqdm

from .core import Segment
from .errors import SlopesError
from .params import ParameterSet
from .pipeline import generate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationRequest:
    """A snapshot of everything one generation pass needs."""
    request_id: int
    seed: int
    params: ParameterSet
    width: float
    height: float
    enable_occlusion: Optional[bool] = None
    samples_per_row: Optional[int] = None


@dataclass(frozen=True)
class GenerationResult:
    """
    The answer to one request. On failure `lines` is empty and `error` holds
    the exception: a SlopesError for rejected input, anything else for a crash.
    """
    request_id: int
    seed: int
    lines: Tuple[Segment, ...]
    elapsed: float
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_request(request: GenerationRequest, config: Optional[Dict[str, Any]] = None) -> GenerationResult:
    """Executes one request synchronously. Library errors are returned, not raised."""
    start = perf_counter()
    try:
        lines = generate(
            request.seed,
            request.params,
            request.width,
            request.height,
            enable_occlusion=request.enable_occlusion,
            samples_per_row=request.samples_per_row,
            config=config,
        )
    except SlopesError as exc:
        logger.warning(f"Request {request.request_id} failed: {exc}")
        return GenerationResult(request.request_id, request.seed, (), perf_counter() - start, error=exc)

    return GenerationResult(request.request_id, request.seed, tuple(lines), perf_counter() - start)


class GenerationWorker:
    """
    Background generator for interactive use.

    Args:
        on_result: Called (on a worker thread) with every result that is
                   still current when it arrives.
        config: Optional configuration dict passed to every run.
        max_workers: Threads in the pool.
    """

    def __init__(
        self,
        on_result: Callable[[GenerationResult], None],
        config: Optional[Dict[str, Any]] = None,
        max_workers: int = 1,
    ):
        self.on_result = on_result
        self.config = config
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="slopes-worker")
        self._lock = threading.Lock()
        self._next_id = 0
        self._latest_id: Optional[int] = None
        self.discarded = 0

    @property
    def latest_request_id(self) -> Optional[int]:
        with self._lock:
            return self._latest_id

    def submit(
        self,
        seed: int,
        params: ParameterSet,
        width: float,
        height: float,
        enable_occlusion: Optional[bool] = None,
        samples_per_row: Optional[int] = None,
    ) -> GenerationRequest:
        """Queues a new generation, superseding every earlier one."""
        with self._lock:
            self._next_id += 1
            request = GenerationRequest(
                request_id=self._next_id,
                seed=seed,
                params=params,
                width=width,
                height=height,
                enable_occlusion=enable_occlusion,
                samples_per_row=samples_per_row,
            )
            self._latest_id = request.request_id

        future = self._executor.submit(run_request, request, self.config)
        future.add_done_callback(functools.partial(self._deliver, request))
        logger.debug(f"Submitted request {request.request_id} (seed {seed}).")
        return request

    def _deliver(self, request: GenerationRequest, future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            # Unexpected failures still answer the request
            logger.error(f"Generation for request {request.request_id} crashed: {exc!r}")
            result = GenerationResult(request.request_id, request.seed, (), 0.0, error=exc)
        else:
            result = future.result()

        with self._lock:
            stale = result.request_id != self._latest_id
            if stale:
                self.discarded += 1

        if stale:
            logger.debug(f"Discarding stale result {result.request_id} (latest is {self._latest_id}).")
            return

        self.on_result(result)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "GenerationWorker":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)


def render_batch(
    requests: Sequence[GenerationRequest],
    config: Optional[Dict[str, Any]] = None,
    n_jobs: Optional[int] = None,
) -> List[GenerationResult]:
    """
    Runs independent requests in parallel and returns results in request order.

    Args:
        requests: The jobs.
        config: Optional configuration dict.
        n_jobs: Worker processes. Defaults to all CPUs but one. 1 runs inline.

    Returns:
        List[GenerationResult]
    """
    if n_jobs is None:
        n_jobs = max(1, (os.cpu_count() or 2) - 1)

    logger.info(f"Rendering batch of {len(requests)} artworks on {n_jobs} worker(s)...")
    start = perf_counter()

    # backend='loky' uses processes; the pipeline holds no shared state.
    results = Parallel(n_jobs=n_jobs, backend="loky")(
        delayed(run_request)(request, config)
        for request in tqdm(requests, desc="Batch", leave=False)
    )

    failed = sum(1 for result in results if not result.ok)
    logger.info(f"  > Batch finished in {perf_counter() - start:.2f}s ({failed} failed).")
    return list(results)
