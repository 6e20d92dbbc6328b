"""Per-frame context handed to clients and systems, and the output surface interface."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Optional

from framedot.input import InputQueue, InputState
from framedot.jobs import JobSystem
from framedot.pixels import PixelFrame
from framedot.render_queue import RenderQueue

__all__ = ["FrameContext", "Surface"]


@dataclass
class FrameContext:
    """Snapshot of one frame: timing, input, job system and render target.

    Consumers treat it as read-only for the duration of a frame; the run loop
    fills it in before each frame.
    """

    frame_index: int = 0
    dt_seconds: float = 0.0
    time_seconds: float = 0.0
    input_state: Optional[InputState] = None
    input_events: Optional[InputQueue] = None
    jobs: Optional[JobSystem] = None
    render_queue: Optional[RenderQueue] = None


class Surface(abc.ABC):
    """Platform output adapter that shows finished frames."""

    @abc.abstractmethod
    def present(self, frame: PixelFrame) -> None:
        """Show ``frame``."""