from typing import List

import pytest

from framedot.context import FrameContext, Surface
from framedot.input import Event, EventType, InputSource, Key, KeyAction, KeyEvent
from framedot.pixels import PixelCanvas, PixelFrame, pack, rgba
from framedot.run_loop import Client, RunLoopConfig, run

WHITE = rgba(255, 255, 255)


class RecordingSurface(Surface):
    def __init__(self) -> None:
        self.frames: List[PixelFrame] = []

    def present(self, frame: PixelFrame) -> None:
        self.frames.append(frame)


class RecordingClient(Client):
    def __init__(self, stop_at: int = -1) -> None:
        self.stop_at = stop_at
        self.indices: List[int] = []
        self.dts: List[float] = []
        self.times: List[float] = []
        self.inputs = 0
        self.preps = 0
        self.escape: List[bool] = []
        self.queue_lengths: List[int] = []
        self.workers: List[int] = []

    def on_input(self, ctx: FrameContext) -> None:
        self.inputs += 1
        self.escape.append(ctx.input_state.key_just_pressed(Key.ESCAPE))
        self.queue_lengths.append(len(ctx.input_events))

    def update(self, ctx: FrameContext) -> bool:
        self.indices.append(ctx.frame_index)
        self.dts.append(ctx.dt_seconds)
        self.times.append(ctx.time_seconds)
        self.workers.append(ctx.jobs.worker_count())
        return ctx.frame_index != self.stop_at

    def render_prep(self, ctx: FrameContext, queue) -> None:
        self.preps += 1
        queue.put_pixel(ctx.frame_index, 0, WHITE)


class OnceEscape(InputSource):
    def __init__(self) -> None:
        self.sent = False

    def pump(self, collector) -> None:
        if not self.sent:
            self.sent = True
            collector.push(Event(EventType.KEY, KeyEvent(Key.ESCAPE, KeyAction.PRESS)))


def fixed(frames: int) -> RunLoopConfig:
    return RunLoopConfig(fixed_timestep=True, max_frames=frames, worker_threads=1)


def test_client_is_abstract():
    with pytest.raises(TypeError):
        Client()


def test_fixed_timestep_runs_max_frames():
    client = RecordingClient()
    surface = RecordingSurface()
    cfg = fixed(5)
    assert run(client, PixelCanvas(8, 2), surface, cfg) == 0
    assert len(surface.frames) == cfg.max_frames
    assert client.indices == list(range(cfg.max_frames))
    assert all(dt == cfg.fixed_dt for dt in client.dts)


def test_fixed_timestep_time_accumulates():
    client = RecordingClient()
    cfg = fixed(4)
    run(client, PixelCanvas(4, 1), RecordingSurface(), cfg)
    assert client.times[0] == 0.0
    for earlier, later in zip(client.times, client.times[1:]):
        assert later - earlier == pytest.approx(cfg.fixed_dt)


def test_update_false_stops_before_render():
    client = RecordingClient(stop_at=2)
    surface = RecordingSurface()
    run(client, PixelCanvas(4, 1), surface, fixed(10))
    assert len(surface.frames) == 2
    assert client.preps == 2
    assert client.inputs == 3


def test_input_source_is_pumped_each_frame():
    client = RecordingClient()
    run(client, PixelCanvas(4, 1), RecordingSurface(), fixed(3), OnceEscape())
    assert client.escape == [True, False, False]
    assert client.queue_lengths == [1, 0, 0]


def test_rendered_pixels_reach_surface():
    surface = RecordingSurface()
    run(RecordingClient(), PixelCanvas(4, 1), surface, fixed(3))
    last = surface.frames[-1]
    assert [last.pixels[x] == pack(WHITE) for x in range(4)] == [True, True, True, False]


def test_jobs_have_configured_workers():
    client = RecordingClient()
    cfg = fixed(2)
    run(client, PixelCanvas(2, 2), RecordingSurface(), cfg)
    assert client.workers == [cfg.worker_threads] * cfg.max_frames


def test_variable_timestep_clamps_and_accumulates():
    client = RecordingClient()
    cfg = RunLoopConfig(max_frames=3, max_dt=0.5, worker_threads=1)
    run(client, PixelCanvas(2, 2), RecordingSurface(), cfg)
    assert len(client.dts) == cfg.max_frames
    assert all(0.0 <= dt <= cfg.max_dt for dt in client.dts)
    for i, t in enumerate(client.times):
        assert t == pytest.approx(sum(client.dts[: i + 1]))


def test_update_error_propagates():
    class Failing(RecordingClient):
        def update(self, ctx):
            raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        run(Failing(), PixelCanvas(2, 2), RecordingSurface(), fixed(3))