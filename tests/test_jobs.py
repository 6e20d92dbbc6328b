import threading

import pytest

from framedot.jobs import (
    MAX_WORKER_THREADS,
    JobLane,
    JobSystem,
    TaskGroup,
    TaskValue,
    ThreadPoolJobSystem,
    create_default_jobsystem,
    run_value,
)


class RecordingJobs(JobSystem):
    def __init__(self):
        self.lanes = []

    def worker_count(self):
        return 1

    def enqueue(self, job, lane=JobLane.ENGINE):
        self.lanes.append(lane)
        job()

    def wait_idle(self):
        pass


def test_auto_worker_count_is_bounded():
    with ThreadPoolJobSystem(0) as jobs:
        assert 1 <= jobs.worker_count() <= MAX_WORKER_THREADS


def test_worker_count_is_clamped():
    with ThreadPoolJobSystem(MAX_WORKER_THREADS + 50) as jobs:
        assert jobs.worker_count() == MAX_WORKER_THREADS


def test_explicit_worker_count():
    with ThreadPoolJobSystem(2) as jobs:
        assert jobs.worker_count() == 2


def test_negative_worker_count_rejected():
    with pytest.raises(ValueError):
        ThreadPoolJobSystem(-1)


def test_create_default_jobsystem():
    jobs = create_default_jobsystem(3)
    try:
        assert jobs.worker_count() == 3
    finally:
        jobs.close()


def test_all_jobs_run_before_wait_idle_returns():
    counter = [0]
    lock = threading.Lock()

    def bump():
        with lock:
            counter[0] += 1

    with ThreadPoolJobSystem(4) as jobs:
        assert jobs.worker_count() == 4
        for i in range(100):
            jobs.enqueue(bump, JobLane.USER if i % 2 else JobLane.ENGINE)
        jobs.wait_idle()
        assert counter[0] == 100
        value = TaskValue()
        run_value(TaskGroup(jobs), value, lambda: counter[0])
        jobs.wait_idle()
        assert value.get() == 100


def test_none_job_is_ignored():
    with ThreadPoolJobSystem(1) as jobs:
        jobs.enqueue(None)
        jobs.wait_idle()
        ran = []
        jobs.enqueue(lambda: ran.append(1))
        jobs.wait_idle()
        assert ran == [1]


def test_engine_lane_is_served_before_user_lane():
    order = []
    started = threading.Event()
    release = threading.Event()

    def blocker():
        started.set()
        release.wait(5)

    with ThreadPoolJobSystem(1) as jobs:
        jobs.enqueue(blocker, JobLane.USER)
        assert started.wait(5)
        jobs.enqueue(lambda: order.append("user"), JobLane.USER)
        jobs.enqueue(lambda: order.append("engine"), JobLane.ENGINE)
        release.set()
        jobs.wait_idle()
    assert order == ["engine", "user"]


def test_job_error_is_reraised_by_wait_idle():
    def boom():
        raise ValueError("bad job")

    with ThreadPoolJobSystem(1) as jobs:
        jobs.enqueue(boom)
        with pytest.raises(ValueError):
            jobs.wait_idle()


def test_enqueue_after_close_fails():
    jobs = ThreadPoolJobSystem(1)
    jobs.close()
    with pytest.raises(RuntimeError):
        jobs.enqueue(lambda: None)


def test_task_group_without_jobs_runs_inline():
    ran = []
    group = TaskGroup(None)
    assert group.parallel_ok() is False
    group.run(lambda: ran.append("x"))
    assert ran == ["x"]


def test_task_group_default_lane_is_user():
    rec = RecordingJobs()
    group = TaskGroup(rec)
    group.run(lambda: None)
    group.wait()
    assert rec.lanes == [JobLane.USER]


def test_task_group_engine_lane():
    rec = RecordingJobs()
    group = TaskGroup(rec, JobLane.ENGINE)
    group.run(lambda: None)
    group.wait()
    assert rec.lanes == [JobLane.ENGINE]


def test_task_group_context_waits_for_all():
    results = []
    lock = threading.Lock()

    def work(i):
        with lock:
            results.append(i)

    with ThreadPoolJobSystem(3) as jobs:
        with TaskGroup(jobs) as group:
            assert group.parallel_ok() is True
            for i in range(20):
                group.run(lambda i=i: work(i))
        assert sorted(results) == list(range(20))


def test_task_group_reraises_task_error():
    def boom():
        raise KeyError("missing")

    with ThreadPoolJobSystem(2) as jobs:
        group = TaskGroup(jobs)
        group.run(boom)
        with pytest.raises(KeyError):
            group.wait()


def test_task_value_not_ready_raises():
    value = TaskValue()
    assert value.ready() is False
    with pytest.raises(LookupError):
        value.get()


def test_run_value_stores_result():
    with ThreadPoolJobSystem(2) as jobs:
        group = TaskGroup(jobs)
        first = TaskValue()
        second = TaskValue()
        run_value(group, first, lambda: sum(range(10)))
        run_value(group, second, lambda: "done")
        group.wait()
    assert first.ready() and second.ready()
    assert first.get() == 45
    assert second.get() == "done"


def test_run_value_void_marks_ready():
    ran = []
    value = TaskValue()
    run_value(TaskGroup(None), value, lambda: ran.append(1))
    assert value.ready() is True
    assert value.get() is None
    assert ran == [1]