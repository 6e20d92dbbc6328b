"""Curses terminal output surface, keyboard input and a small demo."""

from __future__ import annotations

import argparse
import curses
import time
from typing import Any, Dict, List, Optional

from framedot.context import Surface
from framedot.input import Event, EventType, InputCollector, InputSource, Key, KeyAction, KeyEvent
from framedot.pixels import PixelCanvas, PixelFrame, rgba
from framedot.render_queue import RenderQueue
from framedot.renderer import SoftwareRenderer

__all__ = [
    "quantize_color",
    "luminance_char",
    "map_key",
    "TerminalSurface",
    "TerminalInput",
    "main",
]

_PAIR_COLORS = (
    curses.COLOR_BLACK,
    curses.COLOR_RED,
    curses.COLOR_GREEN,
    curses.COLOR_YELLOW,
    curses.COLOR_BLUE,
    curses.COLOR_MAGENTA,
    curses.COLOR_CYAN,
    curses.COLOR_WHITE,
)


def _channels(pixel: int):
    return (pixel >> 24) & 0xFF, (pixel >> 16) & 0xFF, (pixel >> 8) & 0xFF, pixel & 0xFF


def _luminance(r: int, g: int, b: int) -> int:
    return (r * 30 + g * 59 + b * 11) // 100


def quantize_color(pixel: int) -> int:
    """Map a 0xRRGGBBAA pixel to one of the eight basic curses colours."""
    r, g, b, a = _channels(pixel)
    if a == 0:
        return curses.COLOR_BLACK
    maxc = max(r, g, b)
    minc = min(r, g, b)
    if maxc < 40:
        return curses.COLOR_BLACK
    if minc > 215:
        return curses.COLOR_WHITE
    if maxc - minc < 25:
        return curses.COLOR_WHITE if _luminance(r, g, b) > 128 else curses.COLOR_BLACK

    r_hi, g_hi, b_hi = r > 150, g > 150, b > 150
    if r_hi and g_hi and not b_hi:
        return curses.COLOR_YELLOW
    if g_hi and b_hi and not r_hi:
        return curses.COLOR_CYAN
    if r_hi and b_hi and not g_hi:
        return curses.COLOR_MAGENTA
    if r >= g and r >= b:
        return curses.COLOR_RED
    if g >= r and g >= b:
        return curses.COLOR_GREEN
    return curses.COLOR_BLUE


def luminance_char(pixel: int) -> str:
    """Character standing for a pixel's brightness on monochrome terminals."""
    r, g, b, _ = _channels(pixel)
    lum = _luminance(r, g, b)
    for threshold, ch in ((220, "@"), (180, "#"), (140, "*"), (100, "+"), (60, ".")):
        if lum > threshold:
            return ch
    return " "


_KEYMAP: Dict[int, Key] = {
    curses.KEY_LEFT: Key.LEFT,
    curses.KEY_RIGHT: Key.RIGHT,
    curses.KEY_UP: Key.UP,
    curses.KEY_DOWN: Key.DOWN,
    27: Key.ESCAPE,
    10: Key.ENTER,
    curses.KEY_ENTER: Key.ENTER,
    ord(" "): Key.SPACE,
}
for _letter, _key in (("q", Key.Q), ("w", Key.W), ("a", Key.A), ("s", Key.S), ("d", Key.D)):
    _KEYMAP[ord(_letter)] = _key
    _KEYMAP[ord(_letter.upper())] = _key


def map_key(ch: int) -> Key:
    """Translate a curses key code into an engine key."""
    return _KEYMAP.get(ch, Key.UNKNOWN)


class TerminalSurface(Surface):
    """Draws frames as coloured cells (or brightness characters) in a terminal.

    Without a ``screen`` the terminal is initialised here and restored by
    :meth:`close`; a given screen is only configured, never torn down.
    Only cells whose pixel changed since the last present are redrawn.
    """

    def __init__(self, screen: Optional[Any] = None) -> None:
        self._owns_screen = screen is None
        if screen is None:
            screen = curses.initscr()
            curses.cbreak()
            curses.noecho()
        self._screen = screen
        screen.keypad(True)
        screen.nodelay(True)
        try:
            curses.curs_set(0)
        except curses.error:
            pass

        self._color_attrs: Dict[int, int] = {}
        self._init_colors()

        self._prev: List[Optional[int]] = []
        self._rows, self._cols = screen.getmaxyx()
        self._ensure_backbuffer(self._rows, self._cols)
        screen.erase()
        screen.refresh()

    def _init_colors(self) -> None:
        try:
            if not curses.has_colors():
                return
            curses.start_color()
        except curses.error:
            return
        try:
            curses.use_default_colors()
        except curses.error:
            pass
        for pair, color in enumerate(_PAIR_COLORS, start=1):
            curses.init_pair(pair, curses.COLOR_BLACK, color)
            self._color_attrs[color] = curses.color_pair(pair)

    def _ensure_backbuffer(self, rows: int, cols: int) -> None:
        if rows <= 0 or cols <= 0:
            return
        n = rows * cols
        if len(self._prev) != n:
            self._prev = [None] * n

    def _full_redraw(self) -> None:
        self._prev = [None] * len(self._prev)

    def close(self) -> None:
        """Restore the terminal if this surface initialised it."""
        if self._owns_screen:
            curses.endwin()
            self._owns_screen = False

    def __enter__(self) -> "TerminalSurface":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def poll_key(self) -> int:
        """Read one key without blocking; -1 when none is pending."""
        ch = self._screen.getch()
        return -1 if ch == curses.ERR or ch < 0 else ch

    def _put(self, y: int, x: int, ch: str, attr: int) -> None:
        try:
            self._screen.addch(y, x, ch, attr)
        except curses.error:
            # Writing the bottom-right cell fails once the cursor cannot advance.
            pass

    def present(self, frame: PixelFrame) -> None:
        rows, cols = self._screen.getmaxyx()
        if (rows, cols) != (self._rows, self._cols):
            self._rows, self._cols = rows, cols
            self._ensure_backbuffer(rows, cols)
            self._screen.erase()
            self._full_redraw()

        if not frame.valid():
            self._screen.refresh()
            return

        draw_w = max(0, min(cols, frame.width))
        draw_h = max(0, min(rows, frame.height))
        pixels = frame.pixels
        stride = frame.stride_pixels
        black = self._color_attrs.get(curses.COLOR_BLACK, 0)

        for y in range(draw_h):
            src_row = y * stride
            dst_row = y * cols
            for x in range(draw_w):
                p = pixels[src_row + x]
                di = dst_row + x
                if self._prev[di] == p:
                    continue
                self._prev[di] = p
                if self._color_attrs:
                    attr = self._color_attrs.get(quantize_color(p), black)
                    self._put(y, x, " ", attr)
                else:
                    self._put(y, x, luminance_char(p), 0)

        self._screen.refresh()


class TerminalInput(InputSource):
    """Keyboard input read through a terminal surface's screen."""

    def __init__(self, surface: TerminalSurface) -> None:
        self._surface = surface

    def pump(self, collector: InputCollector) -> None:
        """Push a key press for every pending, known key."""
        while True:
            ch = self._surface.poll_key()
            if ch < 0:
                return
            key = map_key(ch)
            if key == Key.UNKNOWN:
                continue
            collector.push(Event(EventType.KEY, KeyEvent(key, KeyAction.PRESS)))


def _demo_frame(queue: RenderQueue, t: int) -> None:
    queue.begin_frame()
    queue.clear(rgba(0, 0, 0))
    queue.hline(0, 119, 30, rgba(0, 255, 0))
    queue.fill_rect((t // 2) % 100, 10 + t % 10, 20, 8, rgba(255, 0, 0))
    queue.hline(0, 119, 2, rgba(255, 255, 0))
    queue.hline(0, 119, 3, rgba(0, 255, 255))
    queue.hline(0, 119, 4, rgba(255, 0, 255))


def main(argv: Optional[List[str]] = None) -> int:
    """Animate a box in the terminal until 'q' is pressed."""
    parser = argparse.ArgumentParser(prog="framedot-term-demo")
    parser.add_argument("--frames", type=int, default=0, help="stop after N frames (0 = until q)")
    args = parser.parse_args(argv)

    canvas = PixelCanvas(120, 40)
    queue = RenderQueue()
    renderer = SoftwareRenderer()

    with TerminalSurface() as surface:
        t = 0
        while not (args.frames and t >= args.frames):
            if surface.poll_key() in (ord("q"), ord("Q")):
                break
            _demo_frame(queue, t)
            renderer.execute(queue, canvas)
            surface.present(canvas.frame())
            t += 1
            time.sleep(0.016)
    return 0