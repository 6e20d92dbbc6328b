# framedot

framedot is a small engine for programs that draw frame by frame into a
pixel buffer. `framedot.run_loop.run` drives each frame through the same
fixed sequence of stages:

1. **input** – an `InputSource` (if one is given) pushes `Event`s into an
   `InputCollector`, which updates an `InputState` (key down / just pressed /
   just released) and records the events in a bounded `InputQueue`;
2. **update** – `Client.on_input` and then `Client.update` run; returning
   `False` from `update` stops the loop;
3. **render prep** – `Client.render_prep` records drawing commands in a
   `RenderQueue` (it never writes pixels itself);
4. **raster** – a `SoftwareRenderer` draws the commands, in ascending sort
   key, into a `PixelCanvas`;
5. **present** – the canvas is handed to a `Surface` as an immutable
   `PixelFrame`.

After the update and render-prep stages the loop waits until the job system
is idle, so work submitted there is finished before the next stage.

## Installation

```
pip install framedot
```

The package needs nothing beyond the Python standard library (3.10 or
later). The terminal adapter in `framedot.terminal` uses the standard
`curses` module, so it is only available where Python ships `curses`.

## A first program

```python
from framedot.context import Surface
from framedot.pixels import PixelCanvas, rgba
from framedot.run_loop import Client, RunLoopConfig, run


class Printer(Surface):
    def present(self, frame):
        data = frame.serialize_rgba8888()
        print(f"{frame.width}x{frame.height}, {len(data)} bytes")


class Box(Client):
    def update(self, ctx):
        return ctx.frame_index < 3

    def render_prep(self, ctx, queue):
        queue.clear(rgba(0, 0, 0, 255))
        queue.fill_rect(4, 4, 8, 8, rgba(255, 0, 0, 255))
        queue.circle(20, 10, 5, rgba(0, 255, 0, 255))


config = RunLoopConfig(fixed_timestep=True, fixed_dt=1 / 60, max_frames=10)
run(Box(), PixelCanvas(32, 16), Printer(), config)
```

`RunLoopConfig` fields:

- `fixed_timestep` – when true the loop is a deterministic stepper: every
  frame uses `fixed_dt`; otherwise the measured frame time is used, clamped
  to `max_dt`;
- `max_frames` – stop after this many frames; 0 means no limit;
- `worker_threads` – size of the thread pool the loop creates; 0 picks one
  fewer than the number of CPUs (at least one, at most eight).

`run` returns 0 when the loop ends.

## Pixels

`framedot.pixels` holds `ColorRGBA8` (channels checked to lie in 0..255),
`rgba`, and `pack` / `unpack`, which convert between colours and pixels
packed as `0xRRGGBBAA`. `PixelCanvas` owns a row-major buffer with `clear`,
`put_pixel` (coordinates outside the canvas are ignored), `resize` and
`frame`, which returns a `PixelFrame` snapshot. `PixelFrame.valid` and
`PixelFrame.serialize_rgba8888` (raw R, G, B, A bytes) are there for
surfaces.

## Drawing commands

`framedot.render_queue.RenderQueue` accepts `clear`, `put_pixel`,
`fill_rect`, `blend_rect`, `rect_outline`, `line`, `hline`, `vline`,
`circle`, `fill_circle`, `blit_sprite` (0xRRGGBBAA pixels multiplied by a
tint; the pixel sequence is referenced, not copied) and `text` (debug text
drawn as one 4×6 block per byte, scaled by `scale`, with spaces left blank
and newlines starting a new line). It is safe to record from several
threads. It holds at most `MAX_COMMANDS` commands and `TEXT_ARENA_BYTES` of
text per frame; anything beyond that is dropped, counted by `dropped()`, and
the recording method returns `False`. `begin_frame` empties it.

Build sort keys from an 8-bit layer, a 12-bit order and a 12-bit
tie-breaker with `make_sort_key`, and take them apart with `sort_layer`,
`sort_order` and `sort_tie`.

`framedot.renderer.SoftwareRenderer.execute(queue, canvas, ctx=None)` draws
the commands. When `ctx` is a `FrameContext` whose job system has workers
and the canvas spans at least two 32×32 tiles, the tiles are drawn in
parallel. The helpers `blend_over`, `modulate` and `raster_line` (a
Bresenham point generator) are public too.

## Input

`framedot.input` defines `Key`, `KeyAction`, `EventType`, `Event` with
`KeyEvent`, `MouseMoveEvent` and `MouseButtonEvent` payloads, `InputState`,
`InputQueue` and `InputCollector`. `InputQueue` takes a capacity (default
`MAX_INPUT_EVENTS`, 256) and an `OverflowPolicy`: `DROP_OLDEST` (the
default) or `DROP_NEWEST`; `COALESCE_MOUSE_MOVE` currently behaves like
`DROP_NEWEST`. The state is updated even when the queue drops an event.

## Jobs and tasks

`framedot.jobs.ThreadPoolJobSystem` (also made by
`create_default_jobsystem`) runs jobs on worker threads, serving the
`JobLane.ENGINE` lane before `JobLane.USER`. With no workers a job runs at
once on the caller's thread. It is a context manager; `close` drains the
queues and joins the workers. An exception raised by a job is re-raised by
the next `wait_idle`.

`TaskGroup` collects tasks that can be waited on together; leaving a `with`
block waits for them and re-raises the first task exception. `run_value`
runs a function in a group and stores its result in a `TaskValue`, whose
`get` raises `LookupError` until the value is set.

## Entities and components

`framedot.world` provides a `Registry` (`create`, `destroy`, `valid`,
`add`, `get`, `try_get`, `remove`, `view`) and a `World` that runs systems
phase by phase (`Phase.PRE_UPDATE`, `UPDATE`, `POST_UPDATE`,
`RENDER_PREP`). In each phase the read systems run first – in parallel when
the context's job system has workers – and then the write systems in
registration order. Before the `RENDER_PREP` phase the world calls
`begin_frame` on the context's render queue.

The components in `framedot.components` (`Transform2D`, `Velocity2D`,
`RenderOrder2D`, `Rect2D`, `Sprite2D`, `Text2D`) are turned into drawing
commands by the system that
`framedot.render_prep.install_render_prep_2d(world)` registers: rects become
`fill_rect` or, with `outline_px` above zero, `rect_outline`; sprites become
`blit_sprite`; non-empty texts become `text`. Nothing in the package moves
entities by their `Velocity2D`; that is left to your own systems.

## Terminal output

`framedot.terminal.TerminalSurface` shows frames in a terminal through
curses, one cell per pixel: as coloured cells mapped to the eight basic
colours (`quantize_color`) when the terminal has colours, otherwise as
brightness characters (`luminance_char`). Only cells whose pixel changed
are redrawn. Without a `screen` argument it initialises the terminal and
restores it on `close` (or when its `with` block ends). `TerminalInput`
turns pending key codes into key-press events via `map_key`; the terminal
reports presses only, never releases.

## Commands

```
framedot-smoke [--frames N] [--workers N] [--read-iterations N] [--task-iterations N]
```

runs a headless smoke test: by default 256 fixed-step frames on a 64×32
canvas with CPU-heavy parallel systems and tasks, printing a status line
every 60 frames.

```
framedot-term-demo [--frames N]
```

draws an animated scene in the terminal through curses until `q` is
pressed (or until N frames have been drawn).

## What it does not do

- Text is drawn only as debug blocks; there is no font loading, glyph
  shaping or glyph rasterisation.
- The only output adapter is the curses terminal surface; there is no
  window, GPU or image-file output (a `Surface` of your own can use
  `PixelFrame.serialize_rgba8888` for that).
- Mouse events can be queued, but `InputState` tracks keys only, and the
  terminal input reads the keyboard only.
- The run loop always draws on the calling thread; tiled parallel drawing
  happens only when you call `SoftwareRenderer.execute` with a context
  yourself.