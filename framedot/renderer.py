"""Software rasteriser turning render-queue commands into canvas pixels."""

from __future__ import annotations

from array import array
from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Optional, Sequence, Tuple

from framedot.context import FrameContext
from framedot.jobs import JobLane, TaskGroup
from framedot.pixels import ColorRGBA8, PixelCanvas, pack
from framedot.render_queue import Cmd, Op, RenderQueue

__all__ = ["TILE_SIZE", "blend_over", "modulate", "raster_line", "SoftwareRenderer"]

TILE_SIZE = 32


def blend_over(dst: int, src: ColorRGBA8) -> int:
    """Composite ``src`` over the packed 0xRRGGBBAA pixel ``dst``."""
    sa = src.a
    if sa == 255:
        return pack(src)
    if sa == 0:
        return dst
    inv = 255 - sa
    dr = (dst >> 24) & 0xFF
    dg = (dst >> 16) & 0xFF
    db = (dst >> 8) & 0xFF
    da = dst & 0xFF
    r = ((src.r * sa + dr * inv) // 255) & 0xFF
    g = ((src.g * sa + dg * inv) // 255) & 0xFF
    b = ((src.b * sa + db * inv) // 255) & 0xFF
    a = (sa + (da * inv) // 255) & 0xFF
    return (r << 24) | (g << 16) | (b << 8) | a


def modulate(src: ColorRGBA8, tint: ColorRGBA8) -> ColorRGBA8:
    """Multiply two colours channel by channel."""
    return ColorRGBA8(
        src.r * tint.r // 255,
        src.g * tint.g // 255,
        src.b * tint.b // 255,
        src.a * tint.a // 255,
    )


def raster_line(x0: int, y0: int, x1: int, y1: int) -> Iterator[Tuple[int, int]]:
    """Yield the points of a Bresenham line, both endpoints included."""
    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    while True:
        yield x0, y0
        if x0 == x1 and y0 == y1:
            return
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


class _Tile(NamedTuple):
    x0: int
    y0: int
    x1: int
    y1: int


@dataclass(frozen=True)
class _Item:
    cmd: Cmd
    sprite: Optional[Sequence[int]] = None
    text: bytes = b""


def _execute_tile(items: Sequence[_Item], canvas: PixelCanvas, tile: _Tile) -> None:
    width = canvas.width
    height = canvas.height
    pix = canvas.pixels
    cx0 = max(tile.x0, 0)
    cy0 = max(tile.y0, 0)
    cx1 = min(tile.x1, width)
    cy1 = min(tile.y1, height)

    def write_px(x: int, y: int, color: ColorRGBA8) -> None:
        if not (cx0 <= x < cx1 and cy0 <= y < cy1):
            return
        idx = y * width + x
        if color.a == 255:
            pix[idx] = pack(color)
        elif color.a != 0:
            pix[idx] = blend_over(pix[idx], color)

    def hspan(y: int, xa: int, xb: int, color: ColorRGBA8) -> None:
        if xa > xb:
            xa, xb = xb, xa
        for x in range(xa, xb + 1):
            write_px(x, y, color)

    for item in items:
        c = item.cmd
        color = c.color
        op = c.op

        if op == Op.CLEAR:
            if cx1 > cx0:
                fill = array("I", [pack(color)]) * (cx1 - cx0)
                for y in range(cy0, cy1):
                    row = y * width
                    pix[row + cx0:row + cx1] = fill

        elif op == Op.PUT_PIXEL:
            write_px(c.x0, c.y0, color)

        elif op in (Op.FILL_RECT, Op.BLEND_RECT):
            sx0 = max(c.x0, cx0)
            sy0 = max(c.y0, cy0)
            sx1 = min(c.x0 + c.x1, cx1)
            sy1 = min(c.y0 + c.y1, cy1)
            if sx1 <= sx0 or color.a == 0:
                continue
            if color.a == 255:
                fill = array("I", [pack(color)]) * (sx1 - sx0)
                for y in range(sy0, sy1):
                    row = y * width
                    pix[row + sx0:row + sx1] = fill
            else:
                for y in range(sy0, sy1):
                    for x in range(sx0, sx1):
                        write_px(x, y, color)

        elif op == Op.RECT_OUTLINE:
            thickness = c.u0
            if thickness <= 0:
                continue
            x, y, w, h = c.x0, c.y0, c.x1, c.y1
            for i in range(thickness):
                for xx in range(x, x + w):
                    write_px(xx, y + i, color)
                    write_px(xx, y + h - 1 - i, color)
                for yy in range(y, y + h):
                    write_px(x + i, yy, color)
                    write_px(x + w - 1 - i, yy, color)

        elif op == Op.LINE:
            for x, y in raster_line(c.x0, c.y0, c.x1, c.y1):
                write_px(x, y, color)

        elif op == Op.HLINE:
            hspan(c.y0, c.x0, c.x1, color)

        elif op == Op.VLINE:
            ya, yb = c.y0, c.y1
            if ya > yb:
                ya, yb = yb, ya
            for y in range(ya, yb + 1):
                write_px(c.x0, y, color)

        elif op in (Op.FILL_CIRCLE, Op.CIRCLE):
            ccx, ccy, r = c.x0, c.y0, c.x1
            if r <= 0:
                continue
            x, y, err = r, 0, 0
            while x >= y:
                if op == Op.CIRCLE:
                    for px, py in (
                        (ccx + x, ccy + y), (ccx + y, ccy + x),
                        (ccx - y, ccy + x), (ccx - x, ccy + y),
                        (ccx - x, ccy - y), (ccx - y, ccy - x),
                        (ccx + y, ccy - x), (ccx + x, ccy - y),
                    ):
                        write_px(px, py, color)
                else:
                    hspan(ccy + y, ccx - x, ccx + x, color)
                    hspan(ccy - y, ccx - x, ccx + x, color)
                    hspan(ccy + x, ccx - y, ccx + y, color)
                    hspan(ccy - x, ccx - y, ccx + y, color)
                if err <= 0:
                    y += 1
                    err += 2 * y + 1
                if err > 0:
                    x -= 1
                    err -= 2 * x + 1

        elif op == Op.BLIT_SPRITE:
            src = item.sprite
            w, h, stride = c.x1, c.y1, c.u0
            if not src or w <= 0 or h <= 0 or stride <= 0:
                continue
            dx0, dy0 = c.x0, c.y0
            sx0 = max(dx0, cx0)
            sy0 = max(dy0, cy0)
            sx1 = min(dx0 + w, cx1)
            sy1 = min(dy0 + h, cy1)
            for y in range(sy0, sy1):
                row = (y - dy0) * stride - dx0
                for x in range(sx0, sx1):
                    sp = src[row + x]
                    sc = ColorRGBA8((sp >> 24) & 0xFF, (sp >> 16) & 0xFF, (sp >> 8) & 0xFF, sp & 0xFF)
                    write_px(x, y, modulate(sc, color))

        elif op == Op.TEXT:
            scale = c.u0 or 1
            penx, peny = c.x0, c.y0
            bw, bh = 4 * scale, 6 * scale
            for ch in item.text:
                if ch == 0x0A:
                    penx = c.x0
                    peny += 8 * scale
                    continue
                if ch != 0x20:
                    for yy in range(bh):
                        for xx in range(bw):
                            write_px(penx + xx, peny + yy, color)
                penx += bw + 1


class SoftwareRenderer:
    """Rasterises a render queue into a pixel canvas."""

    def execute(
        self,
        queue: RenderQueue,
        canvas: PixelCanvas,
        ctx: Optional[FrameContext] = None,
    ) -> None:
        """Draw the queued commands in ascending sort-key order.

        With a job system that has workers, the canvas is split into tiles
        drawn in parallel.
        """
        cmds = list(queue)
        if not cmds:
            return
        order = sorted(range(len(cmds)), key=lambda i: cmds[i].sort_key)
        items = [self._prepare(queue, i, cmds[i]) for i in order]

        width, height = canvas.width, canvas.height
        tiles_x = (width + TILE_SIZE - 1) // TILE_SIZE
        tiles_y = (height + TILE_SIZE - 1) // TILE_SIZE
        jobs = ctx.jobs if ctx is not None else None

        if jobs is None or jobs.worker_count() <= 0 or tiles_x * tiles_y < 2:
            _execute_tile(items, canvas, _Tile(0, 0, width, height))
            return

        with TaskGroup(jobs, JobLane.ENGINE) as group:
            for tile in self._tiles(width, height, tiles_x, tiles_y):
                group.run(lambda t=tile: _execute_tile(items, canvas, t))

    @staticmethod
    def _tiles(width: int, height: int, tiles_x: int, tiles_y: int) -> List[_Tile]:
        return [
            _Tile(
                tx * TILE_SIZE,
                ty * TILE_SIZE,
                min(tx * TILE_SIZE + TILE_SIZE, width),
                min(ty * TILE_SIZE + TILE_SIZE, height),
            )
            for ty in range(tiles_y)
            for tx in range(tiles_x)
        ]

    @staticmethod
    def _prepare(queue: RenderQueue, index: int, cmd: Cmd) -> _Item:
        if cmd.op == Op.BLIT_SPRITE:
            pixels = queue.payload(index)
            w, h, stride = cmd.x1, cmd.y1, cmd.u0
            if pixels and w > 0 and h > 0 and stride > 0 and len(pixels) < (h - 1) * stride + w:
                raise ValueError("sprite pixel data is shorter than its size and stride describe")
            return _Item(cmd, sprite=pixels)
        if cmd.op == Op.TEXT:
            return _Item(cmd, text=queue.text_data(cmd.x1, cmd.y1))
        return _Item(cmd)