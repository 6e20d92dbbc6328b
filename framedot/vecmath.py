"""Small vector and matrix types with basic operations."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple, Union

__all__ = [
    "Vec2f",
    "Vec3f",
    "Vec4f",
    "Mat3f",
    "Mat4f",
    "dot",
    "length",
    "normalize",
    "cross_z",
    "cross",
    "make_trs_2d",
]


@dataclass(frozen=True)
class Vec2f:
    """2D vector."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: object) -> "Vec2f":
        if not isinstance(other, Vec2f):
            return NotImplemented
        return Vec2f(self.x + other.x, self.y + other.y)

    def __sub__(self, other: object) -> "Vec2f":
        if not isinstance(other, Vec2f):
            return NotImplemented
        return Vec2f(self.x - other.x, self.y - other.y)

    def __mul__(self, s: float) -> "Vec2f":
        if not isinstance(s, (int, float)):
            return NotImplemented
        return Vec2f(self.x * s, self.y * s)

    __rmul__ = __mul__


@dataclass(frozen=True)
class Vec3f:
    """3D vector."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: object) -> "Vec3f":
        if not isinstance(other, Vec3f):
            return NotImplemented
        return Vec3f(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: object) -> "Vec3f":
        if not isinstance(other, Vec3f):
            return NotImplemented
        return Vec3f(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, s: float) -> "Vec3f":
        if not isinstance(s, (int, float)):
            return NotImplemented
        return Vec3f(self.x * s, self.y * s, self.z * s)

    __rmul__ = __mul__


@dataclass(frozen=True)
class Vec4f:
    """4D vector."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 0.0


_IDENTITY3 = (1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0)
_IDENTITY4 = (
    1.0, 0.0, 0.0, 0.0,
    0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0,
    0.0, 0.0, 0.0, 1.0,
)


@dataclass(frozen=True)
class Mat3f:
    """3x3 matrix stored as a flat column-major tuple; identity by default."""

    m: Tuple[float, ...] = _IDENTITY3

    def __post_init__(self) -> None:
        if len(self.m) != 9:
            raise ValueError("Mat3f needs exactly 9 elements")


@dataclass(frozen=True)
class Mat4f:
    """4x4 matrix stored as a flat column-major tuple; identity by default."""

    m: Tuple[float, ...] = _IDENTITY4

    def __post_init__(self) -> None:
        if len(self.m) != 16:
            raise ValueError("Mat4f needs exactly 16 elements")


Vector = Union[Vec2f, Vec3f]


def dot(a: Vector, b: Vector) -> float:
    """Dot product of two 2D or two 3D vectors."""
    if isinstance(a, Vec2f) and isinstance(b, Vec2f):
        return a.x * b.x + a.y * b.y
    if isinstance(a, Vec3f) and isinstance(b, Vec3f):
        return a.x * b.x + a.y * b.y + a.z * b.z
    raise TypeError("dot needs two Vec2f or two Vec3f")


def length(v: Vector) -> float:
    """Euclidean length."""
    return math.sqrt(dot(v, v))


def normalize(v: Vector) -> Vector:
    """Unit vector in the direction of ``v``; the zero vector stays zero."""
    n = length(v)
    if isinstance(v, Vec2f):
        return Vec2f() if n <= 0.0 else Vec2f(v.x / n, v.y / n)
    return Vec3f() if n <= 0.0 else Vec3f(v.x / n, v.y / n, v.z / n)


def cross_z(a: Vec2f, b: Vec2f) -> float:
    """Z component of the cross product of two 2D vectors."""
    return a.x * b.y - a.y * b.x


def cross(a: Vec3f, b: Vec3f) -> Vec3f:
    """3D cross product."""
    return Vec3f(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


def make_trs_2d(pos: Vec2f, rot_rad: float, scale: Vec2f) -> Mat4f:
    """Translate * rotate(about Z) * scale as a column-major 4x4 matrix."""
    c = math.cos(rot_rad)
    s = math.sin(rot_rad)
    return Mat4f((
        c * scale.x, s * scale.x, 0.0, 0.0,
        -s * scale.y, c * scale.y, 0.0, 0.0,
        0.0, 0.0, 1.0, 0.0,
        pos.x, pos.y, 0.0, 1.0,
    ))