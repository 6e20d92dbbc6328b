import pytest

from framedot.components import (
    TEXT_MAX,
    Rect2D,
    RenderOrder2D,
    Sprite2D,
    Text2D,
    Transform2D,
    Velocity2D,
)
from framedot.pixels import ColorRGBA8
from framedot.vecmath import Vec2f


def test_transform_defaults():
    t = Transform2D()
    assert t.position == Vec2f()
    assert t.scale == Vec2f(1.0, 1.0)
    assert t.rotation_rad == 0.0


def test_transform_is_mutable():
    t = Transform2D()
    t.position = Vec2f(3.0, 4.0)
    assert t.position == Vec2f(3.0, 4.0)


def test_transform_defaults_are_not_shared():
    a = Transform2D()
    b = Transform2D()
    a.position = Vec2f(1.0, 1.0)
    assert b.position == Vec2f()


def test_velocity_and_order_defaults():
    assert Velocity2D().v == Vec2f()
    assert RenderOrder2D().sort_key == 0


def test_rect_defaults():
    r = Rect2D()
    assert r.size == Vec2f(8.0, 8.0)
    assert r.color == ColorRGBA8(255, 255, 255, 255)
    assert r.outline_px == 0


def test_sprite_defaults():
    s = Sprite2D()
    assert s.pixels is None
    assert (s.width, s.height, s.stride_pixels) == (0, 0, 0)
    assert s.tint == ColorRGBA8(255, 255, 255, 255)


def test_text_data_round_trip():
    t = Text2D("héllo")
    assert t.data == "héllo".encode("utf-8")
    assert t.length == len("héllo".encode("utf-8"))


def test_text_at_limit_is_accepted():
    t = Text2D("x" * TEXT_MAX)
    assert t.length == TEXT_MAX


def test_text_too_long_raises():
    with pytest.raises(ValueError):
        Text2D("x" * (TEXT_MAX + 1))


def test_text_bad_scale_raises():
    with pytest.raises(ValueError):
        Text2D("a", scale=256)


def test_text_defaults():
    t = Text2D()
    assert t.length == 0
    assert t.scale == 1