"""
In-process deferred task queue: a channel (queue.Queue) drained by a pool of
daemon worker threads.

Jobs are referenced by dotted path and resolved at run time, so callers can
schedule work without importing the job module. A job key (job_ref + args)
that is already queued or running is not enqueued again.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from queue import Empty, Queue
from typing import Any

from django.conf import settings
from django.db import close_old_connections
from django.utils.module_loading import import_string

from libs.logging.context import context_ids

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Job:
    """A scheduled call of ``job_ref(*args)``."""

    job_ref: str
    args: tuple[Any, ...] = field(default_factory=tuple)

    @property
    def key(self) -> tuple[str, tuple[str, ...]]:
        return (self.job_ref, tuple(str(a) for a in self.args))


class TaskQueue:
    """Simple in-memory task queue with a fixed worker pool."""

    def __init__(self, *, workers: int = 4, eager: bool = False):
        self.queue: Queue[Job] = Queue()
        self.workers = max(1, workers)
        self.eager = eager
        self.pending: set[tuple] = set()  # queued, waiting for a timer, or running
        self.worker_threads: list[threading.Thread] = []
        self.timers: set[threading.Timer] = set()
        self.running = False
        self._lock = threading.Lock()

    def run_after(self, delay_ms: int, job_ref: str, *args: Any) -> bool:
        """
        Schedule ``job_ref(*args)`` to run after ``delay_ms`` milliseconds.

        Fire-and-forget: the caller never sees the job's result or errors.

        Returns:
            False if an identical job is already pending, True otherwise
        """
        job = Job(job_ref=job_ref, args=tuple(args))

        if self.eager:
            self._execute(job)
            return True

        with self._lock:
            if job.key in self.pending:
                logger.debug(f"Job {job_ref} already pending", extra={"job_args": list(job.key[1])})
                return False
            self.pending.add(job.key)

        self.start_workers()
        if delay_ms > 0:
            timer = threading.Timer(delay_ms / 1000.0, self._enqueue_from_timer, args=(job,))
            timer.daemon = True
            with self._lock:
                self.timers.add(timer)
            timer.start()
        else:
            self.queue.put(job)
        logger.debug(f"Scheduled job {job_ref}", extra={"delay_ms": delay_ms})
        return True

    def _enqueue_from_timer(self, job: Job) -> None:
        with self._lock:
            self.timers = {t for t in self.timers if t.is_alive() and t is not threading.current_thread()}
        self.queue.put(job)

    def start_workers(self) -> None:
        """Start the worker threads (idempotent)."""
        with self._lock:
            if self.running:
                return
            self.running = True
            for index in range(self.workers):
                thread = threading.Thread(
                    target=self._worker,
                    name=f"task-queue-{index}",
                    daemon=True,
                )
                self.worker_threads.append(thread)
                thread.start()
        logger.info(f"Task queue started with {self.workers} workers")

    def _worker(self) -> None:
        while self.running:
            try:
                job = self.queue.get(timeout=1.0)
            except Empty:
                continue
            try:
                close_old_connections()
                self._execute(job)
            finally:
                close_old_connections()
                with self._lock:
                    self.pending.discard(job.key)
                self.queue.task_done()

    def _execute(self, job: Job) -> None:
        node_id = str(job.args[0]) if job.args else None
        with context_ids(job=job.job_ref, node_id=node_id):
            try:
                func = import_string(job.job_ref)
                func(*job.args)
            except Exception as e:
                # Jobs own their failure handling; anything escaping is logged only
                logger.error(f"Job {job.job_ref} raised: {e}", exc_info=True)

    def join(self) -> None:
        """Block until every queued job has been processed."""
        self.queue.join()

    def shutdown(self, timeout: float = 5.0) -> None:
        """Stop the worker threads and cancel timers that have not fired."""
        with self._lock:
            for timer in self.timers:
                timer.cancel()
            self.timers.clear()
            self.running = False
        for thread in self.worker_threads:
            thread.join(timeout=timeout)
        self.worker_threads.clear()
        logger.info("Task queue stopped")


_task_queue: TaskQueue | None = None
_task_queue_lock = threading.Lock()


def get_task_queue() -> TaskQueue:
    """Get or create the process-wide task queue."""
    global _task_queue  # noqa: PLW0603
    with _task_queue_lock:
        if _task_queue is None:
            _task_queue = TaskQueue(
                workers=getattr(settings, "TASK_QUEUE_WORKERS", 4),
                eager=getattr(settings, "TASK_QUEUE_ALWAYS_EAGER", False),
            )
        return _task_queue


def reset_task_queue() -> None:
    """Shut down and drop the global queue (tests, settings changes)."""
    global _task_queue  # noqa: PLW0603
    with _task_queue_lock:
        if _task_queue is not None:
            _task_queue.shutdown()
        _task_queue = None


def run_after(delay_ms: int, job_ref: str, *args: Any) -> bool:
    """Schedule a job on the global queue."""
    return get_task_queue().run_after(delay_ms, job_ref, *args)
