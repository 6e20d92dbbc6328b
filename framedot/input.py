"""Keys, input events, per-frame input state and the bounded event queue."""

from __future__ import annotations

import abc
import enum
from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional, Set, Tuple, Union

__all__ = [
    "MAX_INPUT_EVENTS",
    "Key",
    "KeyAction",
    "EventType",
    "OverflowPolicy",
    "KeyEvent",
    "MouseMoveEvent",
    "MouseButtonEvent",
    "Event",
    "InputState",
    "InputQueue",
    "InputCollector",
    "InputSource",
]

MAX_INPUT_EVENTS = 256


class Key(enum.IntEnum):
    """Key identifiers."""

    UNKNOWN = 0
    LEFT = 1
    RIGHT = 2
    UP = 3
    DOWN = 4
    SPACE = 5
    ENTER = 6
    ESCAPE = 7
    Q = 8
    W = 9
    A = 10
    S = 11
    D = 12


class KeyAction(enum.IntEnum):
    """What happened to a key."""

    PRESS = 0
    RELEASE = 1
    REPEAT = 2


class EventType(enum.IntEnum):
    """Kind of input event."""

    NONE = 0
    KEY = 1
    MOUSE_MOVE = 2
    MOUSE_BUTTON = 3
    MOUSE_WHEEL = 4
    TEXT = 5


class OverflowPolicy(enum.IntEnum):
    """What an input queue does when it is full.

    COALESCE_MOUSE_MOVE is reserved and currently behaves like DROP_NEWEST.
    """

    DROP_NEWEST = 0
    DROP_OLDEST = 1
    COALESCE_MOUSE_MOVE = 2


@dataclass(frozen=True)
class KeyEvent:
    key: Key
    action: KeyAction


@dataclass(frozen=True)
class MouseMoveEvent:
    x: int
    y: int


@dataclass(frozen=True)
class MouseButtonEvent:
    button: int
    down: bool


EventData = Union[KeyEvent, MouseMoveEvent, MouseButtonEvent, None]

_PAYLOAD_TYPES = {
    EventType.KEY: KeyEvent,
    EventType.MOUSE_MOVE: MouseMoveEvent,
    EventType.MOUSE_BUTTON: MouseButtonEvent,
}


@dataclass(frozen=True)
class Event:
    """An input event; ``data`` must match ``type`` for key and mouse events."""

    type: EventType
    data: EventData = None

    def __post_init__(self) -> None:
        expected = _PAYLOAD_TYPES.get(self.type)
        if expected is not None and not isinstance(self.data, expected):
            raise TypeError(f"{self.type.name} event needs {expected.__name__} data")


class InputState:
    """Key state for the current frame, kept up to date even when events are dropped."""

    def __init__(self) -> None:
        self._down: Set[Key] = set()
        self._just_pressed: Set[Key] = set()
        self._just_released: Set[Key] = set()
        self._any_input = False

    def begin_frame(self) -> None:
        """Reset the per-frame edge flags; held keys stay held."""
        self._just_pressed.clear()
        self._just_released.clear()
        self._any_input = False

    def apply(self, event: Event) -> None:
        """Fold an event into the state."""
        self._any_input = True
        if event.type == EventType.KEY and isinstance(event.data, KeyEvent):
            self._apply_key(event.data)

    def _apply_key(self, kev: KeyEvent) -> None:
        key = kev.key
        if kev.action == KeyAction.PRESS:
            if key not in self._down:
                self._down.add(key)
                self._just_pressed.add(key)
        elif kev.action == KeyAction.RELEASE:
            if key in self._down:
                self._down.discard(key)
                self._just_released.add(key)
        elif kev.action == KeyAction.REPEAT:
            self._down.add(key)

    def key_down(self, key: Key) -> bool:
        """Whether ``key`` is currently held."""
        return key in self._down

    def key_just_pressed(self, key: Key) -> bool:
        """Whether ``key`` went down during this frame."""
        return key in self._just_pressed

    def key_just_released(self, key: Key) -> bool:
        """Whether ``key`` went up during this frame."""
        return key in self._just_released

    def any_input(self) -> bool:
        """Whether any event arrived during this frame."""
        return self._any_input


class InputQueue:
    """Bounded per-frame record of input events."""

    def __init__(
        self,
        capacity: int = MAX_INPUT_EVENTS,
        policy: OverflowPolicy = OverflowPolicy.DROP_OLDEST,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._policy = OverflowPolicy(policy)
        self._events: Deque[Event] = deque()
        self._dropped = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def policy(self) -> OverflowPolicy:
        return self._policy

    def clear(self) -> None:
        """Flush the queue at the start of a frame."""
        self._events.clear()
        self._dropped = 0

    def push(self, event: Event) -> bool:
        """Record an event; returns False when the policy discarded it."""
        if len(self._events) < self._capacity:
            self._events.append(event)
            return True
        self._dropped += 1
        if self._policy == OverflowPolicy.DROP_OLDEST:
            self._events.popleft()
            self._events.append(event)
            return True
        return False

    def __len__(self) -> int:
        return len(self._events)

    def events(self) -> Tuple[Event, ...]:
        """The recorded events, oldest first."""
        return tuple(self._events)

    def dropped(self) -> int:
        """Number of events dropped during this frame."""
        return self._dropped


class InputCollector:
    """Feeds events into both the input state and the event queue."""

    def __init__(self, state: InputState, queue: InputQueue) -> None:
        self._state = state
        self._queue = queue

    @property
    def state(self) -> InputState:
        return self._state

    @property
    def queue(self) -> InputQueue:
        return self._queue

    def push(self, event: Event) -> bool:
        """Apply the event to the state and record it; returns whether it was recorded."""
        self._state.apply(event)
        return self._queue.push(event)


class InputSource(abc.ABC):
    """A device or platform that delivers input events."""

    @abc.abstractmethod
    def pump(self, collector: InputCollector) -> None:
        """Read every pending event and push it into ``collector``."""