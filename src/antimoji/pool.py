"""Bounded worker pool — OS threads draining a shared job queue.

Both queues hold at most ``2 × size`` items, so a producer that outruns the
workers blocks in ``submit`` (backpressure) and in-flight work stays bounded.

Usage:
    pool = WorkerPool(4, handler=lambda job: do_work(job.data))
    pool.start()
    # submit from another thread, drain here
    threading.Thread(target=feed, args=(pool,)).start()
    for result in pool.results():
        ...

``run_pool`` wraps all of that, with a sequential fallback for small batches.
"""

from __future__ import annotations
import logging
import os
import queue
import threading
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

MAX_WORKERS = 64
# How often blocked workers re-check for cancellation (seconds)
_POLL_INTERVAL = 0.05

T = TypeVar("T")
R = TypeVar("R")


class PoolStateError(RuntimeError):
    """Invalid lifecycle call, e.g. starting a pool twice."""


class PoolState(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass(frozen=True, slots=True)
class Job:
    id: str
    data: Any = None


@dataclass(frozen=True, slots=True)
class JobResult:
    job_id: str
    success: bool
    data: Any = None
    error: BaseException | None = None


class AtomicCounter:
    """Integer counter safe to update and read from any thread."""

    __slots__ = ("_value", "_lock")

    def __init__(self, value: int = 0) -> None:
        self._value = value
        self._lock = threading.Lock()

    def add(self, delta: int = 1) -> int:
        with self._lock:
            self._value += delta
            return self._value

    def set(self, value: int) -> None:
        with self._lock:
            self._value = value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


def resolve_worker_count(size: int) -> int:
    """0 → CPU count, negative → 1, capped at MAX_WORKERS."""
    if size < 0:
        size = 1
    elif size == 0:
        size = os.cpu_count() or 1
    return min(size, MAX_WORKERS)


# Ends the result stream
_DONE = object()


class WorkerPool:
    """Fixed set of worker threads applying ``handler`` to submitted jobs."""

    def __init__(self, size: int, handler: Callable[[Job], Any]) -> None:
        self._size = resolve_worker_count(size)
        self._handler = handler
        self._jobs: queue.Queue = queue.Queue(maxsize=self._size * 2)
        self._results: queue.Queue = queue.Queue(maxsize=self._size * 2)
        self._state = PoolState.CREATED
        self._lock = threading.Lock()
        self._cancel = threading.Event()
        self._quit = threading.Event()
        self._all_exited = threading.Event()
        self._closed = threading.Event()
        self._threads: list[threading.Thread] = []
        self._active = AtomicCounter()
        self._processed = AtomicCounter()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, cancel: threading.Event | None = None) -> None:
        """Spawn the workers and the result collector.

        ``cancel``, when set, stops every worker at its next check; jobs in
        flight may be dropped without a result.
        """
        with self._lock:
            if self._state is PoolState.RUNNING:
                raise PoolStateError("worker pool is already running")
            if self._state is PoolState.STOPPED:
                raise PoolStateError("worker pool has been stopped")

            if cancel is not None:
                self._cancel = cancel
            self._active.set(self._size)
            for i in range(self._size):
                t = threading.Thread(
                    target=self._work, name=f"antimoji-worker-{i}", daemon=True,
                )
                self._threads.append(t)
                try:
                    t.start()
                except RuntimeError:
                    # workers already started will exit once _quit is set
                    self._active.add(-(self._size - i))
                    self._quit.set()
                    self._state = PoolState.STOPPED
                    raise
            threading.Thread(
                target=self._collect, name="antimoji-collector", daemon=True,
            ).start()
            self._state = PoolState.RUNNING
        logger.debug("worker pool started with %d workers", self._size)

    def stop(self) -> None:
        """Signal every worker to quit.  Idempotent."""
        with self._lock:
            if self._state is not PoolState.RUNNING:
                return
            self._quit.set()
            self._state = PoolState.STOPPED

    def submit(self, job: Job) -> bool:
        """Queue a job, blocking while the queue is full.

        Returns False if the pool was cancelled or stopped before the job
        could be queued.
        """
        if self._closed.is_set():
            raise PoolStateError("job queue is closed")
        while not self._halted():
            try:
                self._jobs.put(job, timeout=_POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def close_jobs(self) -> None:
        """No more jobs will be submitted; workers exit once the queue drains."""
        self._closed.set()

    def results(self) -> Iterator[JobResult]:
        """Yield results in completion order until every worker has exited."""
        while True:
            item = self._results.get()
            if item is _DONE:
                return
            yield item

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    @property
    def size(self) -> int:
        return self._size

    @property
    def state(self) -> PoolState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is PoolState.RUNNING

    @property
    def active_workers(self) -> int:
        return self._active.value

    @property
    def processed_jobs(self) -> int:
        return self._processed.value

    @property
    def queue_depth(self) -> int:
        return self._jobs.qsize()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _halted(self) -> bool:
        return self._cancel.is_set() or self._quit.is_set()

    def _work(self) -> None:
        try:
            while not self._halted():
                # sampled before get: once closed, an empty queue stays empty
                closed = self._closed.is_set()
                try:
                    job = self._jobs.get(timeout=_POLL_INTERVAL)
                except queue.Empty:
                    if closed:
                        return
                    continue

                result = self._run(job)
                self._processed.add()
                if not self._emit(result):
                    return
        finally:
            if self._active.add(-1) == 0:
                self._all_exited.set()

    def _run(self, job: Job) -> JobResult:
        try:
            data = self._handler(job)
        except Exception as exc:
            logger.debug("job %s failed: %s", job.id, exc)
            return JobResult(job_id=job.id, success=False, error=exc)
        return JobResult(job_id=job.id, success=True, data=data)

    def _emit(self, result: JobResult) -> bool:
        while not self._halted():
            try:
                self._results.put(result, timeout=_POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def _collect(self) -> None:
        while not self._all_exited.wait(_POLL_INTERVAL):
            if self._cancel.is_set():
                break
        with self._lock:
            self._state = PoolState.STOPPED
        self._results.put(_DONE)
        logger.debug("worker pool drained, %d jobs processed", self.processed_jobs)


def run_pool(
    items: Sequence[T],
    handler: Callable[[T], R],
    *,
    workers: int = 0,
    key: Callable[[T], str] = str,
    on_error: Callable[[T, BaseException], R],
    cancel: threading.Event | None = None,
) -> list[R]:
    """Apply ``handler`` to every item, concurrently when worthwhile.

    Results come back in completion order.  A handler exception turns into
    ``on_error(item, exc)`` for that item only.  Runs sequentially on the
    calling thread when there are fewer items than workers or the pool
    cannot start.
    """
    workers = resolve_worker_count(workers)
    if len(items) < workers:
        return run_sequential(items, handler, on_error=on_error)

    by_id: dict[str, T] = {}
    jobs: list[Job] = []
    for idx, item in enumerate(items):
        job = Job(id=f"{idx}:{key(item)}", data=item)
        by_id[job.id] = item
        jobs.append(job)

    pool = WorkerPool(workers, lambda job: handler(job.data))
    try:
        pool.start(cancel)
    except (PoolStateError, RuntimeError) as exc:
        logger.warning("worker pool failed to start, running sequentially: %s", exc)
        return run_sequential(items, handler, on_error=on_error)

    def feed() -> None:
        try:
            for job in jobs:
                if not pool.submit(job):
                    break
        finally:
            pool.close_jobs()

    threading.Thread(target=feed, name="antimoji-submitter", daemon=True).start()

    out: list[R] = []
    try:
        for result in pool.results():
            if result.success:
                out.append(result.data)
            else:
                out.append(on_error(by_id[result.job_id], result.error))
    finally:
        pool.stop()
    return out


def run_sequential(
    items: Sequence[T],
    handler: Callable[[T], R],
    *,
    on_error: Callable[[T, BaseException], R],
) -> list[R]:
    out: list[R] = []
    for item in items:
        try:
            out.append(handler(item))
        except Exception as exc:
            out.append(on_error(item, exc))
    return out
