"""Smoke-test application exercising the world, task groups and the run loop."""

from __future__ import annotations

import argparse
import math
from typing import List, Optional

from framedot.context import FrameContext, Surface
from framedot.input import Key
from framedot.jobs import JobLane, TaskGroup, TaskValue, run_value
from framedot.pixels import PixelCanvas, PixelFrame, rgba
from framedot.render_queue import RenderQueue
from framedot.run_loop import Client, RunLoopConfig, run
from framedot.world import Phase, Registry, World

__all__ = ["NullSurface", "SmokeClient", "main"]


class NullSurface(Surface):
    """Surface that discards frames and only counts them."""

    def __init__(self) -> None:
        self.presented = 0

    def present(self, frame: PixelFrame) -> None:
        self.presented += 1


def _sine_sum(n: int, step: float) -> float:
    acc = 0.0
    for i in range(n):
        acc += math.sin(i * step)
    return acc


def _growth(n: int, factor: float) -> float:
    acc = 1.0
    for _ in range(1, n):
        acc *= factor
    return acc


class SmokeClient(Client):
    """Client that burns CPU in systems and user tasks and reports progress."""

    def __init__(self, read_iterations: int = 200_000, task_iterations: int = 250_000) -> None:
        self._task_iterations = task_iterations
        self._world = World()
        self._world.add_read_system(
            Phase.UPDATE, lambda ctx, reg: _sine_sum(read_iterations, 0.001)
        )
        self._world.add_read_system(
            Phase.UPDATE, lambda ctx, reg: _growth(read_iterations, 1.0000001)
        )
        self._world.add_write_system(Phase.UPDATE, self._noop_write)

    @staticmethod
    def _noop_write(ctx: FrameContext, reg: Registry) -> None:
        return None

    def update(self, ctx: FrameContext) -> bool:
        if ctx.input_state is not None and ctx.input_state.key_just_pressed(Key.ESCAPE):
            return False

        self._world.tick(ctx)
        report = ctx.frame_index % 60 == 0
        jobs = ctx.jobs

        if jobs is not None and jobs.worker_count() > 0:
            v0: TaskValue[float] = TaskValue()
            v1: TaskValue[float] = TaskValue()
            n = self._task_iterations
            with TaskGroup(jobs, JobLane.USER) as group:
                run_value(group, v0, lambda: _sine_sum(n, 0.002))
                run_value(group, v1, lambda: _growth(n, 1.00000001))
            if report:
                print(
                    f"[smoke] workers={jobs.worker_count()} "
                    f"user_tasks=({v0.get():g}, {v1.get():g})"
                )
        elif report:
            print("[smoke] no workers (single-thread path)")
        return True

    def render_prep(self, ctx: FrameContext, queue: RenderQueue) -> None:
        queue.clear(rgba(0, 0, 0, 255))
        queue.put_pixel(1, 1, rgba(255, 255, 255, 255))


def main(argv: Optional[List[str]] = None) -> int:
    """Run the smoke application headless for a fixed number of frames."""
    parser = argparse.ArgumentParser(prog="framedot-smoke")
    parser.add_argument("--frames", type=int, default=256)
    parser.add_argument("--workers", type=int, default=0)
    parser.add_argument("--read-iterations", type=int, default=200_000)
    parser.add_argument("--task-iterations", type=int, default=250_000)
    args = parser.parse_args(argv)

    canvas = PixelCanvas(64, 32)
    surface = NullSurface()
    client = SmokeClient(args.read_iterations, args.task_iterations)
    cfg = RunLoopConfig(
        fixed_timestep=True,
        fixed_dt=1.0 / 60.0,
        max_frames=args.frames,
        worker_threads=args.workers,
    )
    print("framedot smoke running...")
    return run(client, canvas, surface, cfg)