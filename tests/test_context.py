import pytest

from framedot.context import FrameContext, Surface
from framedot.input import InputQueue, InputState
from framedot.jobs import TaskGroup, create_default_jobsystem
from framedot.pixels import PixelCanvas, rgba, pack
from framedot.render_queue import RenderQueue


class RecordingSurface(Surface):
    def __init__(self):
        self.frames = []

    def present(self, frame):
        self.frames.append(frame)


def test_frame_context_starts_empty():
    ctx = FrameContext()
    assert ctx.frame_index == 0
    assert ctx.dt_seconds == 0.0
    assert ctx.time_seconds == 0.0
    assert ctx.input_state is None
    assert ctx.input_events is None
    assert ctx.jobs is None
    assert ctx.render_queue is None


def test_frame_context_carries_frame_objects():
    state = InputState()
    events = InputQueue()
    queue = RenderQueue()
    ctx = FrameContext(frame_index=3, dt_seconds=0.5, time_seconds=1.5,
                       input_state=state, input_events=events, render_queue=queue)
    assert ctx.frame_index == 3
    assert ctx.dt_seconds == 0.5
    assert ctx.time_seconds == 1.5
    assert ctx.input_state is state
    assert ctx.input_events is events
    assert ctx.render_queue is queue


def test_frame_context_fields_can_be_updated_between_frames():
    ctx = FrameContext()
    ctx.frame_index += 1
    ctx.time_seconds += 0.25
    assert ctx.frame_index == 1
    assert ctx.time_seconds == 0.25


def test_frame_context_jobs_usable_by_task_group():
    results = []
    with create_default_jobsystem(2) as jobs:
        ctx = FrameContext(jobs=jobs)
        with TaskGroup(ctx.jobs) as group:
            for i in range(5):
                group.run(lambda i=i: results.append(i))
    assert sorted(results) == [0, 1, 2, 3, 4]


def test_surface_is_abstract():
    with pytest.raises(TypeError):
        Surface()


def test_surface_receives_canvas_frame():
    canvas = PixelCanvas(3, 2)
    colour = rgba(10, 20, 30)
    canvas.clear(colour)
    surface = RecordingSurface()
    surface.present(canvas.frame())
    assert len(surface.frames) == 1
    frame = surface.frames[0]
    assert frame.width == 3
    assert frame.height == 2
    assert set(frame.pixels) == {pack(colour)}