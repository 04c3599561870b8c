"""
Entity-Component-System Core
=============================
Entity catalog for one session: integer entity IDs and one component
dictionary per component type.
"""

from typing import Dict, Set, Type, TypeVar, Optional, Iterator, Tuple, Any


C = TypeVar('C')


class World:
    """
    Every entity of a session and its components.

    Removal is two-phase. destroy_entity() only marks an id; marked
    entities are invisible to queries straight away but keep their
    components until process_dead_entities() runs at the end of a tick,
    so a system can mark while it iterates.
    """

    def __init__(self):
        self._next_id = 0
        self._alive: Set[int] = set()
        self._marked: Set[int] = set()
        self._stores: Dict[Type, Dict[int, Any]] = {}

    def create_entity(self) -> int:
        entity_id = self._next_id
        self._next_id += 1
        self._alive.add(entity_id)
        return entity_id

    def destroy_entity(self, entity_id: int) -> None:
        self._marked.add(entity_id)

    def destroy_all(self, *component_types: Type) -> int:
        """Mark every entity carrying any of the given components. Returns how many were newly marked."""
        before = len(self._marked)
        for component_type in component_types:
            self._marked.update(self._stores.get(component_type, ()))
        return len(self._marked) - before

    def process_dead_entities(self) -> None:
        """Drop marked entities and their components."""
        doomed = self._marked & self._alive
        for store in self._stores.values():
            for entity_id in doomed.intersection(store):
                del store[entity_id]
        self._alive -= doomed
        self._marked.clear()

    def add_component(self, entity_id: int, component: Any) -> None:
        """Attach a component; an existing one of the same type is replaced."""
        self._stores.setdefault(type(component), {})[entity_id] = component

    def get_component(self, entity_id: int, component_type: Type[C]) -> Optional[C]:
        return self._stores.get(component_type, {}).get(entity_id)

    def query(self, *component_types: Type) -> Iterator[Tuple[int, ...]]:
        """
        Yield (entity_id, component, ...) for unmarked entities that
        carry every requested type, oldest entity first.

        The candidate ids are fixed when iteration starts: entities
        created mid-query are not visited.
        """
        stores = [self._stores.get(t) for t in component_types]
        if not stores or not all(stores):
            return

        driver = min(stores, key=len)
        for entity_id in sorted(driver):
            if entity_id in self._marked:
                continue
            if all(entity_id in store for store in stores):
                yield (entity_id,) + tuple(store[entity_id] for store in stores)

    def first(self, *component_types: Type) -> Optional[Tuple[int, ...]]:
        return next(self.query(*component_types), None)

    def count(self, *component_types: Type) -> int:
        return sum(1 for _ in self.query(*component_types))

    def entity_count(self) -> int:
        """Entities alive and not marked."""
        return len(self._alive - self._marked)

    def is_alive(self, entity_id: int) -> bool:
        return entity_id in self._alive and entity_id not in self._marked
