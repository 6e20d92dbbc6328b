"""Library version information."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Version", "version", "version_string"]


@dataclass(frozen=True, order=True)
class Version:
    """Semantic version triple."""

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


_VERSION = Version(0, 1, 0)


def version() -> Version:
    """Return the library version."""
    return _VERSION


def version_string() -> str:
    """Return the short human-readable library name used in banners."""
    return "framedot "