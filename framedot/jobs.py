"""Job system: a small thread pool with two priority lanes, plus task groups."""

from __future__ import annotations

import abc
import enum
import os
import threading
from collections import deque
from typing import Any, Callable, Deque, Dict, Generic, List, Optional, TypeVar

__all__ = [
    "ENABLE_SMP",
    "MAX_WORKER_THREADS",
    "DEFAULT_WORKER_THREADS",
    "JobLane",
    "JobSystem",
    "ThreadPoolJobSystem",
    "create_default_jobsystem",
    "TaskGroup",
    "TaskValue",
    "run_value",
]

ENABLE_SMP = True
MAX_WORKER_THREADS = 8
DEFAULT_WORKER_THREADS = 0

Job = Callable[[], Any]
T = TypeVar("T")


class JobLane(enum.IntEnum):
    """Job priority lane. Engine jobs are served before user jobs."""

    ENGINE = 0
    USER = 1


class JobSystem(abc.ABC):
    """Interface for running jobs on worker threads."""

    @abc.abstractmethod
    def worker_count(self) -> int:
        """Number of worker threads."""

    @abc.abstractmethod
    def enqueue(self, job: Optional[Job], lane: JobLane = JobLane.ENGINE) -> None:
        """Submit a job on the given lane."""

    @abc.abstractmethod
    def wait_idle(self) -> None:
        """Block until every job submitted so far has finished."""


class ThreadPoolJobSystem(JobSystem):
    """Thread pool consuming the engine lane before the user lane.

    An exception raised by a job is stored and re-raised by the next
    :meth:`wait_idle` call.
    """

    def __init__(self, worker_threads: int = DEFAULT_WORKER_THREADS) -> None:
        if worker_threads < 0:
            raise ValueError("worker_threads must not be negative")
        if not ENABLE_SMP:
            worker_threads = 0
        if worker_threads == 0:
            hc = os.cpu_count() or 0
            # Leave one core for the main thread, but keep at least one worker.
            worker_threads = hc - 1 if hc > 1 else 1
        worker_threads = min(worker_threads, MAX_WORKER_THREADS)

        self._lock = threading.Lock()
        self._work = threading.Condition(self._lock)
        self._idle = threading.Condition(self._lock)
        self._queues: Dict[JobLane, Deque[Job]] = {
            JobLane.ENGINE: deque(),
            JobLane.USER: deque(),
        }
        self._inflight = 0
        self._stop = False
        self._errors: List[BaseException] = []
        self._workers = [
            threading.Thread(target=self._worker_loop, name=f"framedot-worker-{i}", daemon=True)
            for i in range(worker_threads)
        ]
        for worker in self._workers:
            worker.start()

    def worker_count(self) -> int:
        return len(self._workers)

    def enqueue(self, job: Optional[Job], lane: JobLane = JobLane.ENGINE) -> None:
        if job is None:
            return
        if not self._workers:
            job()
            return
        target = JobLane.ENGINE if lane == JobLane.ENGINE else JobLane.USER
        with self._lock:
            if self._stop:
                raise RuntimeError("job system is closed")
            self._queues[target].append(job)
            self._inflight += 1
            self._work.notify()

    def wait_idle(self) -> None:
        with self._lock:
            self._idle.wait_for(lambda: self._inflight == 0)
            if self._errors:
                error = self._errors[0]
                self._errors.clear()
                raise error

    def close(self) -> None:
        """Stop the workers after draining the queues and join them."""
        with self._lock:
            self._stop = True
            self._work.notify_all()
        for worker in self._workers:
            if worker.is_alive() and worker is not threading.current_thread():
                worker.join()

    def __enter__(self) -> "ThreadPoolJobSystem":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _has_work(self) -> bool:
        return bool(self._queues[JobLane.ENGINE] or self._queues[JobLane.USER])

    def _worker_loop(self) -> None:
        while True:
            with self._lock:
                self._work.wait_for(lambda: self._stop or self._has_work())
                if self._stop and not self._has_work():
                    return
                engine = self._queues[JobLane.ENGINE]
                job = engine.popleft() if engine else self._queues[JobLane.USER].popleft()

            error: Optional[BaseException] = None
            try:
                job()
            except Exception as exc:
                error = exc
            finally:
                with self._lock:
                    if error is not None:
                        self._errors.append(error)
                    self._inflight -= 1
                    if self._inflight == 0:
                        self._idle.notify_all()


def create_default_jobsystem(worker_threads: int = DEFAULT_WORKER_THREADS) -> ThreadPoolJobSystem:
    """Create the default thread-pool job system."""
    return ThreadPoolJobSystem(worker_threads)


class TaskGroup:
    """Group of tasks that can be waited on together.

    Without a job system with workers, tasks run immediately on the caller's
    thread. Leaving a ``with`` block waits for the group. Exceptions raised by
    tasks on workers are re-raised by :meth:`wait`.
    """

    def __init__(self, jobs: Optional[JobSystem] = None, lane: JobLane = JobLane.USER) -> None:
        self._jobs = jobs
        self._lane = lane
        self._inflight = 0
        self._cond = threading.Condition()
        self._errors: List[BaseException] = []

    def parallel_ok(self) -> bool:
        """Whether tasks will be handed to worker threads."""
        return self._jobs is not None and self._jobs.worker_count() > 0

    def run(self, fn: Optional[Job]) -> None:
        """Run ``fn`` as part of this group."""
        if fn is None:
            return
        if not self.parallel_ok():
            fn()
            return

        with self._cond:
            self._inflight += 1

        def task() -> None:
            error: Optional[BaseException] = None
            try:
                fn()
            except Exception as exc:
                error = exc
            finally:
                self._done_one(error)

        try:
            assert self._jobs is not None
            self._jobs.enqueue(task, self._lane)
        except BaseException:
            self._done_one(None)
            raise

    def wait(self) -> None:
        """Block until every task of this group has finished."""
        if self._jobs is None:
            return
        with self._cond:
            self._cond.wait_for(lambda: self._inflight == 0)
            if self._errors:
                error = self._errors[0]
                self._errors.clear()
                raise error

    def __enter__(self) -> "TaskGroup":
        return self

    def __exit__(self, *args: object) -> None:
        self.wait()

    def _done_one(self, error: Optional[BaseException]) -> None:
        with self._cond:
            if error is not None:
                self._errors.append(error)
            self._inflight -= 1
            if self._inflight == 0:
                self._cond.notify_all()


class TaskValue(Generic[T]):
    """Slot receiving the result of a task."""

    def __init__(self) -> None:
        self._ready = threading.Event()
        self._value: Optional[T] = None

    def ready(self) -> bool:
        """Whether a result has been set."""
        return self._ready.is_set()

    def get(self) -> Optional[T]:
        """Return the result; raises LookupError if it is not set yet."""
        if not self._ready.is_set():
            raise LookupError("task value is not ready")
        return self._value

    def set(self, value: Optional[T] = None) -> None:
        """Store the result and mark it ready."""
        self._value = value
        self._ready.set()


def run_value(group: TaskGroup, out: TaskValue[T], fn: Callable[[], T]) -> None:
    """Run ``fn`` in ``group`` and store its return value in ``out``."""
    group.run(lambda: out.set(fn()))