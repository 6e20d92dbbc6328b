from framedot.components import Rect2D, RenderOrder2D, Sprite2D, Text2D, Transform2D
from framedot.context import FrameContext
from framedot.jobs import ThreadPoolJobSystem
from framedot.pixels import PixelCanvas, pack, rgba
from framedot.render_queue import Op, RenderQueue, make_sort_key
from framedot.renderer import SoftwareRenderer
from framedot.vecmath import Vec2f
from framedot.world import World


def _world():
    from framedot.render_prep import install_render_prep_2d

    world = World()
    install_render_prep_2d(world)
    return world


def _spawn(world, *components):
    reg = world.registry
    e = reg.create()
    for c in components:
        reg.add(e, c)
    return e


def test_fill_rect_command():
    world = _world()
    red = rgba(255, 0, 0)
    _spawn(world, Transform2D(position=Vec2f(2.7, 3.0)), Rect2D(size=Vec2f(4.0, 5.0), color=red))
    rq = RenderQueue()
    world.tick(FrameContext(render_queue=rq))
    cmds = list(rq)
    assert len(cmds) == 1
    c = cmds[0]
    assert c.op == Op.FILL_RECT
    assert (c.x0, c.y0, c.x1, c.y1) == (2, 3, 4, 5)
    assert c.color == red


def test_outline_rect_command():
    world = _world()
    _spawn(world, Transform2D(), Rect2D(outline_px=2))
    rq = RenderQueue()
    world.tick(FrameContext(render_queue=rq))
    (c,) = list(rq)
    assert c.op == Op.RECT_OUTLINE
    assert c.u0 == 2


def test_sort_key_from_render_order():
    world = _world()
    key = make_sort_key(1, 2, 3)
    _spawn(world, Transform2D(), Rect2D(), RenderOrder2D(key))
    rq = RenderQueue()
    world.tick(FrameContext(render_queue=rq))
    assert [c.sort_key for c in rq] == [key]


def test_rect_without_transform_is_ignored():
    world = _world()
    _spawn(world, Rect2D())
    rq = RenderQueue()
    world.tick(FrameContext(render_queue=rq))
    assert len(rq) == 0


def test_sprite_zero_stride_uses_width():
    world = _world()
    pixels = [0xFF0000FF] * 6
    _spawn(world, Transform2D(), Sprite2D(pixels=pixels, width=3, height=2))
    rq = RenderQueue()
    world.tick(FrameContext(render_queue=rq))
    (c,) = list(rq)
    assert c.op == Op.BLIT_SPRITE
    assert c.u0 == 3
    assert rq.payload(0) is pixels


def test_sprite_without_pixels_is_skipped():
    world = _world()
    _spawn(world, Transform2D(), Sprite2D(width=3, height=2))
    _spawn(world, Transform2D(), Sprite2D(pixels=[1], width=0, height=2))
    rq = RenderQueue()
    world.tick(FrameContext(render_queue=rq))
    assert len(rq) == 0


def test_text_command_and_scale_zero():
    world = _world()
    _spawn(world, Transform2D(position=Vec2f(1.0, 2.0)), Text2D("hi", scale=0))
    rq = RenderQueue()
    world.tick(FrameContext(render_queue=rq))
    (c,) = list(rq)
    assert c.op == Op.TEXT
    assert c.u0 == 1
    assert rq.text_data(c.x1, c.y1) == b"hi"


def test_empty_text_is_skipped():
    world = _world()
    _spawn(world, Transform2D(), Text2D(""))
    rq = RenderQueue()
    world.tick(FrameContext(render_queue=rq))
    assert len(rq) == 0


def test_no_render_queue_is_harmless():
    world = _world()
    _spawn(world, Transform2D(), Rect2D())
    ctx = FrameContext()
    world.tick(ctx)
    assert ctx.render_queue is None


def test_previous_frame_commands_are_replaced():
    world = _world()
    _spawn(world, Transform2D(), Rect2D())
    rq = RenderQueue()
    world.tick(FrameContext(render_queue=rq))
    world.tick(FrameContext(render_queue=rq))
    assert len(rq) == 1


def test_parallel_emit_keeps_every_command():
    world = _world()
    for i in range(20):
        _spawn(world, Transform2D(position=Vec2f(float(i), 0.0)), Rect2D())
    rq = RenderQueue()
    with ThreadPoolJobSystem(2) as jobs:
        world.tick(FrameContext(jobs=jobs, render_queue=rq))
    assert sorted(c.x0 for c in rq) == list(range(20))


def test_rendered_pixels():
    world = _world()
    red = rgba(255, 0, 0)
    _spawn(world, Transform2D(position=Vec2f(1.0, 1.0)), Rect2D(size=Vec2f(2.0, 2.0), color=red))
    rq = RenderQueue()
    world.tick(FrameContext(render_queue=rq))
    canvas = PixelCanvas(8, 8)
    SoftwareRenderer().execute(rq, canvas)
    assert canvas.pixels[1 * 8 + 1] == pack(red)
    assert canvas.pixels[2 * 8 + 2] == pack(red)
    assert canvas.pixels[0] == 0
    assert canvas.pixels[3 * 8 + 3] == 0