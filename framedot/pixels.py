"""Colours, immutable pixel frames and the owned pixel canvas."""

from __future__ import annotations

import enum
import struct
from array import array
from dataclasses import dataclass
from typing import Sequence

__all__ = [
    "ColorRGBA8",
    "rgba",
    "pack",
    "unpack",
    "PixelFormat",
    "PixelFrame",
    "PixelCanvas",
]


@dataclass(frozen=True)
class ColorRGBA8:
    """8-bit-per-channel RGBA colour."""

    r: int
    g: int
    b: int
    a: int = 255

    def __post_init__(self) -> None:
        for name, value in (("r", self.r), ("g", self.g), ("b", self.b), ("a", self.a)):
            if not 0 <= value <= 255:
                raise ValueError(f"channel {name} out of range 0..255: {value}")


def rgba(r: int, g: int, b: int, a: int = 255) -> ColorRGBA8:
    """Build a colour; alpha defaults to opaque."""
    return ColorRGBA8(r, g, b, a)


def pack(color: ColorRGBA8) -> int:
    """Pack a colour as 0xRRGGBBAA."""
    return (color.r << 24) | (color.g << 16) | (color.b << 8) | color.a


def unpack(pixel: int) -> ColorRGBA8:
    """Split a 0xRRGGBBAA pixel into its channels."""
    if not 0 <= pixel <= 0xFFFFFFFF:
        raise ValueError(f"pixel out of 32-bit range: {pixel}")
    return ColorRGBA8((pixel >> 24) & 0xFF, (pixel >> 16) & 0xFF, (pixel >> 8) & 0xFF, pixel & 0xFF)


class PixelFormat(enum.IntEnum):
    """Pixel layouts understood by frames."""

    RGBA8888 = 0


@dataclass(frozen=True)
class PixelFrame:
    """Immutable frame of 0xRRGGBBAA pixels handed to output surfaces."""

    width: int = 0
    height: int = 0
    stride_pixels: int = 0
    format: PixelFormat = PixelFormat.RGBA8888
    pixels: Sequence[int] = ()

    def valid(self) -> bool:
        """Whether the frame has a size, a sane stride and pixel data."""
        return (
            self.width > 0
            and self.height > 0
            and self.stride_pixels >= self.width
            and len(self.pixels) > 0
        )

    def serialize_rgba8888(self) -> bytes:
        """Dump the visible pixels as raw R, G, B, A bytes, row by row."""
        if not self.valid():
            return b""
        row_format = struct.Struct(f">{self.width}I")
        out = bytearray()
        for y in range(self.height):
            start = y * self.stride_pixels
            row = self.pixels[start:start + self.width]
            if len(row) != self.width:
                raise ValueError("pixel data is shorter than the frame describes")
            out += row_format.pack(*row)
        return bytes(out)


class PixelCanvas:
    """Owned software pixel buffer in 0xRRGGBBAA format."""

    def __init__(self, width: int = 0, height: int = 0) -> None:
        self._width = 0
        self._height = 0
        self._pixels = array("I")
        self.resize(width, height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def pixels(self) -> array:
        """The mutable row-major pixel buffer."""
        return self._pixels

    def resize(self, width: int, height: int) -> None:
        """Resize the canvas; all pixels become zero."""
        if width < 0 or height < 0:
            raise ValueError("canvas size must not be negative")
        self._width = width
        self._height = height
        self._pixels = array("I", [0]) * (width * height)

    def clear(self, color: ColorRGBA8) -> None:
        """Fill every pixel with ``color``."""
        self._pixels[:] = array("I", [pack(color)]) * len(self._pixels)

    def put_pixel(self, x: int, y: int, color: ColorRGBA8) -> None:
        """Set one pixel; coordinates outside the canvas are ignored."""
        if 0 <= x < self._width and 0 <= y < self._height:
            self._pixels[y * self._width + x] = pack(color)

    def frame(self) -> PixelFrame:
        """Return an immutable snapshot of the current pixels."""
        return PixelFrame(
            width=self._width,
            height=self._height,
            stride_pixels=self._width,
            format=PixelFormat.RGBA8888,
            pixels=tuple(self._pixels),
        )