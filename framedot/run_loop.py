"""Frame loop: input, update, render prep, rasterisation and present."""

from __future__ import annotations

import abc
import time
from dataclasses import dataclass
from typing import Optional

from framedot.context import FrameContext, Surface
from framedot.input import InputCollector, InputQueue, InputSource, InputState
from framedot.jobs import create_default_jobsystem
from framedot.pixels import PixelCanvas
from framedot.render_queue import RenderQueue
from framedot.renderer import SoftwareRenderer

__all__ = ["Client", "RunLoopConfig", "run"]


class Client(abc.ABC):
    """Application driven by :func:`run`."""

    def on_input(self, ctx: FrameContext) -> None:
        """Hook called before :meth:`update`; does nothing by default."""

    @abc.abstractmethod
    def update(self, ctx: FrameContext) -> bool:
        """Advance the application; return False to stop the loop."""

    @abc.abstractmethod
    def render_prep(self, ctx: FrameContext, queue: RenderQueue) -> None:
        """Record what to draw into ``queue``; never write pixels directly."""


@dataclass(frozen=True)
class RunLoopConfig:
    """Settings of the frame loop.

    With ``fixed_timestep`` the loop is a deterministic stepper: every frame
    uses ``fixed_dt``. Otherwise the measured frame time is used, clamped to
    ``max_dt``. A ``max_frames`` of 0 runs until the client stops the loop;
    a ``worker_threads`` of 0 picks the worker count automatically.
    """

    fixed_timestep: bool = False
    fixed_dt: float = 1.0 / 60.0
    max_dt: float = 0.1
    max_frames: int = 0
    worker_threads: int = 0


def run(
    client: Client,
    canvas: PixelCanvas,
    surface: Surface,
    config: Optional[RunLoopConfig] = None,
    input_source: Optional[InputSource] = None,
) -> int:
    """Run the frame loop until the client stops or ``max_frames`` is reached.

    Returns 0 on a normal stop.
    """
    cfg = config if config is not None else RunLoopConfig()

    input_state = InputState()
    input_queue = InputQueue()
    collector = InputCollector(input_state, input_queue)
    render_queue = RenderQueue()
    renderer = SoftwareRenderer()

    with create_default_jobsystem(cfg.worker_threads) as jobs:
        ctx = FrameContext(jobs=jobs)
        tick = 0
        time_sec = 0.0
        prev = time.monotonic()

        while not (cfg.max_frames != 0 and tick >= cfg.max_frames):
            if cfg.fixed_timestep:
                dt = cfg.fixed_dt
            else:
                now = time.monotonic()
                dt = min(now - prev, cfg.max_dt)
                prev = now
                time_sec += dt

            ctx.frame_index = tick
            ctx.dt_seconds = dt
            ctx.time_seconds = time_sec

            input_state.begin_frame()
            input_queue.clear()
            if input_source is not None:
                input_source.pump(collector)
            ctx.input_state = input_state
            ctx.input_events = input_queue

            client.on_input(ctx)

            keep_running = client.update(ctx)
            jobs.wait_idle()
            if not keep_running:
                break

            render_queue.begin_frame()
            ctx.render_queue = render_queue
            client.render_prep(ctx, render_queue)
            jobs.wait_idle()

            renderer.execute(render_queue, canvas)
            surface.present(canvas.frame())

            tick += 1
            if cfg.fixed_timestep:
                time_sec += cfg.fixed_dt

    return 0