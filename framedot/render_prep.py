"""Render-prep system turning 2D components into render-queue commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Sequence, TypeVar

from framedot.components import Rect2D, RenderOrder2D, Sprite2D, Text2D, Transform2D
from framedot.context import FrameContext
from framedot.jobs import JobLane, TaskGroup
from framedot.pixels import ColorRGBA8
from framedot.render_queue import MAX_COMMANDS, RenderQueue
from framedot.world import Phase, Registry, World

__all__ = ["RectItem", "SpriteItem", "TextItem", "install_render_prep_2d"]

T = TypeVar("T")


@dataclass(frozen=True)
class RectItem:
    x: int
    y: int
    w: int
    h: int
    color: ColorRGBA8
    sort_key: int
    outline_px: int

    @property
    def outline(self) -> bool:
        return self.outline_px > 0


@dataclass(frozen=True)
class SpriteItem:
    x: int
    y: int
    pixels: Sequence[int]
    w: int
    h: int
    stride: int
    tint: ColorRGBA8
    sort_key: int


@dataclass(frozen=True)
class TextItem:
    x: int
    y: int
    text: bytes
    color: ColorRGBA8
    scale: int
    sort_key: int


def _sort_key(reg: Registry, entity: int) -> int:
    order = reg.try_get(entity, RenderOrder2D)
    return order.sort_key if order is not None else 0


def _gather_rects(reg: Registry) -> List[RectItem]:
    items: List[RectItem] = []
    for entity, t, r in reg.view(Transform2D, Rect2D):
        if len(items) >= MAX_COMMANDS:
            break
        items.append(RectItem(
            x=int(t.position.x),
            y=int(t.position.y),
            w=int(r.size.x),
            h=int(r.size.y),
            color=r.color,
            sort_key=_sort_key(reg, entity),
            outline_px=r.outline_px,
        ))
    return items


def _gather_sprites(reg: Registry) -> List[SpriteItem]:
    items: List[SpriteItem] = []
    for entity, t, s in reg.view(Transform2D, Sprite2D):
        if len(items) >= MAX_COMMANDS:
            break
        if not s.pixels or s.width <= 0 or s.height <= 0:
            continue
        items.append(SpriteItem(
            x=int(t.position.x),
            y=int(t.position.y),
            pixels=s.pixels,
            w=s.width,
            h=s.height,
            stride=s.stride_pixels if s.stride_pixels != 0 else s.width,
            tint=s.tint,
            sort_key=_sort_key(reg, entity),
        ))
    return items


def _gather_texts(reg: Registry) -> List[TextItem]:
    items: List[TextItem] = []
    for entity, t, tx in reg.view(Transform2D, Text2D):
        if len(items) >= MAX_COMMANDS:
            break
        data = tx.data
        if not data:
            continue
        items.append(TextItem(
            x=int(t.position.x),
            y=int(t.position.y),
            text=data,
            color=tx.color,
            scale=tx.scale if tx.scale != 0 else 1,
            sort_key=_sort_key(reg, entity),
        ))
    return items


def _emit_all(ctx: FrameContext, items: List[T], emit: Callable[[T], object]) -> None:
    if not items:
        return
    jobs = ctx.jobs
    if jobs is None or jobs.worker_count() <= 0:
        for item in items:
            emit(item)
        return

    chunks = jobs.worker_count()
    size = -(-len(items) // chunks)

    def run_chunk(chunk: List[T]) -> None:
        for item in chunk:
            emit(item)

    with TaskGroup(jobs, JobLane.ENGINE) as group:
        for start in range(0, len(items), size):
            chunk = items[start:start + size]
            group.run(lambda chunk=chunk: run_chunk(chunk))


def _emit_rect(rq: RenderQueue, it: RectItem) -> None:
    if it.outline:
        rq.rect_outline(it.x, it.y, it.w, it.h, it.outline_px, it.color, it.sort_key)
    else:
        rq.fill_rect(it.x, it.y, it.w, it.h, it.color, it.sort_key)


def _render_prep_2d(ctx: FrameContext, reg: Registry) -> None:
    rq = ctx.render_queue
    if rq is None:
        return

    rects = _gather_rects(reg)
    sprites = _gather_sprites(reg)
    texts = _gather_texts(reg)
    if not (rects or sprites or texts):
        return

    _emit_all(ctx, rects, lambda it: _emit_rect(rq, it))
    _emit_all(ctx, sprites, lambda it: rq.blit_sprite(
        it.x, it.y, it.pixels, it.w, it.h, it.stride, it.tint, it.sort_key))
    _emit_all(ctx, texts, lambda it: rq.text(
        it.x, it.y, it.text, it.color, it.sort_key, it.scale))


def install_render_prep_2d(world: World) -> None:
    """Register the system that records rects, sprites and texts in the render phase."""
    world.add_read_system(Phase.RENDER_PREP, _render_prep_2d)