"""Entity registry and a world that runs systems phase by phase."""

from __future__ import annotations

import enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Type, TypeVar

from framedot.context import FrameContext
from framedot.jobs import JobLane, TaskGroup

__all__ = [
    "Phase",
    "Entity",
    "NULL_ENTITY",
    "Registry",
    "World",
    "ReadSystem",
    "WriteSystem",
]

C = TypeVar("C")

Entity = int
NULL_ENTITY: Entity = -1


class Phase(enum.IntEnum):
    """Update phases, run in this order every tick."""

    PRE_UPDATE = 0
    UPDATE = 1
    POST_UPDATE = 2
    RENDER_PREP = 3


class Registry:
    """Stores entities and their components, one component per type per entity."""

    def __init__(self) -> None:
        self._next = 0
        self._alive: Dict[Entity, None] = {}
        self._stores: Dict[type, Dict[Entity, Any]] = {}

    def create(self) -> Entity:
        """Create a new entity and return its id."""
        entity = self._next
        self._next += 1
        self._alive[entity] = None
        return entity

    def destroy(self, entity: Entity) -> None:
        """Destroy an entity and all of its components."""
        self._require(entity)
        del self._alive[entity]
        for store in self._stores.values():
            store.pop(entity, None)

    def valid(self, entity: Entity) -> bool:
        """Whether ``entity`` exists."""
        return entity in self._alive

    def add(self, entity: Entity, component: C) -> C:
        """Attach ``component`` to ``entity``, replacing one of the same type."""
        self._require(entity)
        self._stores.setdefault(type(component), {})[entity] = component
        return component

    def get(self, entity: Entity, component_type: Type[C]) -> C:
        """Return the component of ``component_type``; raises KeyError if absent."""
        try:
            return self._stores[component_type][entity]
        except KeyError:
            raise KeyError(f"entity {entity} has no {component_type.__name__}") from None

    def try_get(self, entity: Entity, component_type: Type[C]) -> Optional[C]:
        """Return the component of ``component_type`` or None."""
        return self._stores.get(component_type, {}).get(entity)

    def remove(self, entity: Entity, component_type: type) -> bool:
        """Detach a component; returns whether one was removed."""
        store = self._stores.get(component_type)
        if store is None or entity not in store:
            return False
        del store[entity]
        return True

    def view(self, *component_types: type) -> Iterator[Tuple[Any, ...]]:
        """Iterate ``(entity, component, ...)`` for entities having every given type."""
        if not component_types:
            raise TypeError("view needs at least one component type")
        stores = [self._stores.get(t, {}) for t in component_types]
        base, rest = stores[0], stores[1:]
        snapshot = [
            (entity, *(store[entity] for store in stores))
            for entity in base
            if all(entity in store for store in rest)
        ]
        return iter(snapshot)

    def _require(self, entity: Entity) -> None:
        if entity not in self._alive:
            raise KeyError(f"invalid entity {entity}")


ReadSystem = Callable[[FrameContext, Registry], None]
WriteSystem = Callable[[FrameContext, Registry], None]


class World:
    """Owns a registry and runs registered systems phase by phase.

    Within a phase, read-only systems run first (in parallel when a job
    system with workers is available), then write systems run in order.
    """

    def __init__(self) -> None:
        self._registry = Registry()
        self._read: Dict[Phase, List[ReadSystem]] = {p: [] for p in Phase}
        self._write: Dict[Phase, List[WriteSystem]] = {p: [] for p in Phase}

    @property
    def registry(self) -> Registry:
        return self._registry

    def add_read_system(self, phase: Phase, fn: Optional[ReadSystem]) -> None:
        """Register a system that only reads the registry; None is ignored."""
        if fn is None:
            return
        self._read[Phase(phase)].append(fn)

    def add_write_system(self, phase: Phase, fn: Optional[WriteSystem]) -> None:
        """Register a system that may change the registry; None is ignored."""
        if fn is None:
            return
        self._write[Phase(phase)].append(fn)

    def tick(self, ctx: FrameContext) -> None:
        """Run every phase once for the frame described by ``ctx``."""
        jobs = ctx.jobs
        reg = self._registry
        for phase in Phase:
            if phase == Phase.RENDER_PREP and ctx.render_queue is not None:
                ctx.render_queue.begin_frame()

            reads = list(self._read[phase])
            if reads:
                if jobs is not None and jobs.worker_count() > 0:
                    with TaskGroup(jobs, JobLane.ENGINE) as group:
                        for fn in reads:
                            group.run(lambda fn=fn: fn(ctx, reg))
                else:
                    for fn in reads:
                        fn(ctx, reg)

            for fn in list(self._write[phase]):
                fn(ctx, reg)