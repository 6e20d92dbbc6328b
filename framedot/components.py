"""Basic 2D components attached to entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from framedot.pixels import ColorRGBA8
from framedot.vecmath import Vec2f

__all__ = [
    "TEXT_MAX",
    "Transform2D",
    "Velocity2D",
    "RenderOrder2D",
    "Rect2D",
    "Sprite2D",
    "Text2D",
]

TEXT_MAX = 96

_WHITE = ColorRGBA8(255, 255, 255, 255)


@dataclass
class Transform2D:
    """Local 2D transform; rotation is counter-clockwise in radians."""

    position: Vec2f = field(default_factory=Vec2f)
    scale: Vec2f = field(default_factory=lambda: Vec2f(1.0, 1.0))
    rotation_rad: float = 0.0


@dataclass
class Velocity2D:
    """Simple linear velocity."""

    v: Vec2f = field(default_factory=Vec2f)


@dataclass
class RenderOrder2D:
    """Draw order: smaller keys are drawn first."""

    sort_key: int = 0


@dataclass
class Rect2D:
    """Rectangle shape; ``outline_px`` of 0 fills, otherwise the border width."""

    size: Vec2f = field(default_factory=lambda: Vec2f(8.0, 8.0))
    color: ColorRGBA8 = _WHITE
    outline_px: int = 0


@dataclass
class Sprite2D:
    """Sprite referencing external 0xRRGGBBAA pixels.

    A ``stride_pixels`` of 0 means the stride equals the width.
    """

    pixels: Optional[Sequence[int]] = None
    width: int = 0
    height: int = 0
    stride_pixels: int = 0
    tint: ColorRGBA8 = _WHITE


@dataclass
class Text2D:
    """Short per-entity debug text of at most :data:`TEXT_MAX` UTF-8 bytes."""

    text: str = ""
    color: ColorRGBA8 = _WHITE
    scale: int = 1

    def __post_init__(self) -> None:
        if not 0 <= self.scale <= 0xFF:
            raise ValueError(f"scale out of range 0..255: {self.scale}")
        _ = self.data

    @property
    def data(self) -> bytes:
        """The text encoded as UTF-8; raises ValueError when it is too long."""
        encoded = self.text.encode("utf-8")
        if len(encoded) > TEXT_MAX:
            raise ValueError(f"text longer than {TEXT_MAX} bytes")
        return encoded

    @property
    def length(self) -> int:
        """Length of the text in UTF-8 bytes."""
        return len(self.data)