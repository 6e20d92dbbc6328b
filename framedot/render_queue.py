"""Fixed-capacity command queue recording what to draw in a frame."""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Union

from framedot.pixels import ColorRGBA8

__all__ = [
    "MAX_COMMANDS",
    "TEXT_ARENA_BYTES",
    "Op",
    "Cmd",
    "RenderQueue",
    "make_sort_key",
    "sort_layer",
    "sort_order",
    "sort_tie",
]

MAX_COMMANDS = 8192
TEXT_ARENA_BYTES = 16 * 1024

_BLACK = ColorRGBA8(0, 0, 0, 255)


class Op(enum.IntEnum):
    """Drawing operation of a command."""

    CLEAR = 0
    PUT_PIXEL = 1
    FILL_RECT = 2
    RECT_OUTLINE = 3
    LINE = 4
    HLINE = 5
    VLINE = 6
    BLEND_RECT = 7
    FILL_CIRCLE = 8
    CIRCLE = 9
    BLIT_SPRITE = 10
    TEXT = 11


@dataclass(frozen=True)
class Cmd:
    """One recorded drawing command.

    Coordinate meaning depends on ``op``:
    rect ``(x0, y0, w=x1, h=y1)``; line ``(x0, y0)-(x1, y1)``;
    circle centre ``(x0, y0)`` with radius ``x1``; text at ``(x0, y0)`` with
    arena offset ``x1`` and byte length ``y1``; sprite ``(x0, y0, w=x1, h=y1)``
    with stride ``u0``.
    """

    op: Op
    color: ColorRGBA8 = _BLACK
    sort_key: int = 0
    x0: int = 0
    y0: int = 0
    x1: int = 0
    y1: int = 0
    u0: int = 0
    u1: int = 0


def _check_range(name: str, value: int, upper: int) -> int:
    if not 0 <= value <= upper:
        raise ValueError(f"{name} out of range 0..{upper}: {value}")
    return value


class RenderQueue:
    """Thread-safe, bounded list of drawing commands for one frame.

    Commands beyond :data:`MAX_COMMANDS` and text beyond the per-frame text
    arena are dropped and counted; the recording methods then return False.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cmds: List[Cmd] = []
        self._payloads: List[Optional[object]] = []
        self._text = bytearray(TEXT_ARENA_BYTES)
        self._text_ofs = 0
        self._dropped = 0

    def begin_frame(self) -> None:
        """Forget every recorded command and reset the counters."""
        with self._lock:
            self._cmds.clear()
            self._payloads.clear()
            self._text_ofs = 0
            self._dropped = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._cmds)

    def __iter__(self) -> Iterator[Cmd]:
        with self._lock:
            snapshot = list(self._cmds)
        return iter(snapshot)

    def dropped(self) -> int:
        """Number of commands dropped in this frame."""
        with self._lock:
            return self._dropped

    def payload(self, index: int) -> Optional[object]:
        """External data attached to command ``index`` (sprite pixels)."""
        with self._lock:
            return self._payloads[index]

    def text_data(self, offset: int, length: int) -> bytes:
        """Bytes of the text arena; empty when ``offset`` lies outside it."""
        if offset < 0 or offset >= TEXT_ARENA_BYTES:
            return b""
        with self._lock:
            return bytes(self._text[offset:offset + max(length, 0)])

    def _push(self, cmd: Cmd, payload: Optional[object] = None) -> bool:
        with self._lock:
            if len(self._cmds) >= MAX_COMMANDS:
                self._dropped += 1
                return False
            self._cmds.append(cmd)
            self._payloads.append(payload)
            return True

    def clear(self, color: ColorRGBA8, sort_key: int = 0) -> bool:
        """Fill the whole target with ``color``."""
        return self._push(Cmd(Op.CLEAR, color, _check_range("sort_key", sort_key, 0xFFFFFFFF)))

    def put_pixel(self, x: int, y: int, color: ColorRGBA8, sort_key: int = 0) -> bool:
        """Set a single pixel."""
        return self._push(Cmd(Op.PUT_PIXEL, color, _check_range("sort_key", sort_key, 0xFFFFFFFF), x, y))

    def fill_rect(self, x: int, y: int, w: int, h: int, color: ColorRGBA8, sort_key: int = 0) -> bool:
        """Fill a ``w`` by ``h`` rectangle at ``(x, y)``."""
        return self._push(
            Cmd(Op.FILL_RECT, color, _check_range("sort_key", sort_key, 0xFFFFFFFF), x, y, w, h)
        )

    def rect_outline(
        self, x: int, y: int, w: int, h: int, thickness: int, color: ColorRGBA8, sort_key: int = 0
    ) -> bool:
        """Outline a rectangle with a border ``thickness`` pixels wide."""
        return self._push(
            Cmd(
                Op.RECT_OUTLINE,
                color,
                _check_range("sort_key", sort_key, 0xFFFFFFFF),
                x,
                y,
                w,
                h,
                u0=_check_range("thickness", thickness, 0xFFFF),
            )
        )

    def line(self, x0: int, y0: int, x1: int, y1: int, color: ColorRGBA8, sort_key: int = 0) -> bool:
        """Draw a line from ``(x0, y0)`` to ``(x1, y1)``."""
        return self._push(
            Cmd(Op.LINE, color, _check_range("sort_key", sort_key, 0xFFFFFFFF), x0, y0, x1, y1)
        )

    def blend_rect(self, x: int, y: int, w: int, h: int, color: ColorRGBA8, sort_key: int = 0) -> bool:
        """Alpha-blend a rectangle over the target."""
        return self._push(
            Cmd(Op.BLEND_RECT, color, _check_range("sort_key", sort_key, 0xFFFFFFFF), x, y, w, h)
        )

    def fill_circle(self, cx: int, cy: int, radius: int, color: ColorRGBA8, sort_key: int = 0) -> bool:
        """Draw a filled circle."""
        return self._push(
            Cmd(Op.FILL_CIRCLE, color, _check_range("sort_key", sort_key, 0xFFFFFFFF), cx, cy, radius)
        )

    def circle(self, cx: int, cy: int, radius: int, color: ColorRGBA8, sort_key: int = 0) -> bool:
        """Draw a circle outline."""
        return self._push(
            Cmd(Op.CIRCLE, color, _check_range("sort_key", sort_key, 0xFFFFFFFF), cx, cy, radius)
        )

    def hline(self, x0: int, x1: int, y: int, color: ColorRGBA8, sort_key: int = 0) -> bool:
        """Draw a horizontal line between ``x0`` and ``x1`` inclusive."""
        return self._push(
            Cmd(Op.HLINE, color, _check_range("sort_key", sort_key, 0xFFFFFFFF), x0, y, x1)
        )

    def vline(self, x: int, y0: int, y1: int, color: ColorRGBA8, sort_key: int = 0) -> bool:
        """Draw a vertical line between ``y0`` and ``y1`` inclusive."""
        return self._push(
            Cmd(Op.VLINE, color, _check_range("sort_key", sort_key, 0xFFFFFFFF), x, y0, y1=y1)
        )

    def blit_sprite(
        self,
        x: int,
        y: int,
        pixels: Sequence[int],
        w: int,
        h: int,
        stride: int,
        tint: ColorRGBA8,
        sort_key: int = 0,
    ) -> bool:
        """Copy a ``w`` by ``h`` block of 0xRRGGBBAA pixels, multiplied by ``tint``.

        The pixel sequence is referenced, not copied.
        """
        if not pixels or w <= 0 or h <= 0:
            return False
        cmd = Cmd(
            Op.BLIT_SPRITE,
            tint,
            _check_range("sort_key", sort_key, 0xFFFFFFFF),
            x,
            y,
            w,
            h,
            u0=_check_range("stride", stride, 0xFFFF),
        )
        return self._push(cmd, pixels)

    def text(
        self,
        x: int,
        y: int,
        utf8: Union[str, bytes],
        color: ColorRGBA8,
        sort_key: int = 0,
        scale: int = 1,
    ) -> bool:
        """Record debug text; the bytes are copied into the frame's text arena."""
        _check_range("sort_key", sort_key, 0xFFFFFFFF)
        _check_range("scale", scale, 0xFF)
        data = utf8.encode("utf-8") if isinstance(utf8, str) else bytes(utf8)
        if not data:
            return True
        size = len(data)
        with self._lock:
            offset = self._text_ofs
            self._text_ofs += size + 1
            if offset + size + 1 > TEXT_ARENA_BYTES:
                self._dropped += 1
                return False
            self._text[offset:offset + size] = data
            self._text[offset + size] = 0
        return self._push(
            Cmd(Op.TEXT, color, sort_key, x, y, offset, size, u0=scale if scale else 1)
        )


def make_sort_key(layer: int, order: int, tie: int = 0) -> int:
    """Compose a sort key: 8-bit layer, 12-bit order, 12-bit tie-breaker."""
    return ((layer & 0xFF) << 24) | ((order & 0x0FFF) << 12) | (tie & 0x0FFF)


def sort_layer(key: int) -> int:
    """Layer part of a sort key."""
    return (key >> 24) & 0xFF


def sort_order(key: int) -> int:
    """Order part of a sort key."""
    return (key >> 12) & 0x0FFF


def sort_tie(key: int) -> int:
    """Tie-breaker part of a sort key."""
    return key & 0x0FFF