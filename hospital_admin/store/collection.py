"""Generic in-memory entity collection with add/update/delete semantics."""

import dataclasses
import logging
from typing import Callable, Generic, Iterator, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _default_key(entity) -> str:
    return entity.id


class EntityCollection(Generic[T]):
    """Ordered collection of dataclass entities.

    Updates replace the stored object instead of mutating it, so snapshots
    taken through ``items`` stay unchanged.
    """

    def __init__(
        self,
        name: str,
        entities: list[T] | None = None,
        key: Callable[[T], str] = _default_key,
        normalize: Callable[[T], T] | None = None,
    ):
        self.name = name
        self._key = key
        self._normalize = normalize
        self._items: list[T] = [self._prepare(e) for e in (entities or [])]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    @property
    def items(self) -> list[T]:
        """Snapshot of the current entities."""
        return list(self._items)

    def get(self, entity_id: str) -> T | None:
        for entity in self._items:
            if self._key(entity) == entity_id:
                return entity
        return None

    def add(self, entity: T) -> T:
        """Append an entity. Id uniqueness is the caller's responsibility."""
        entity = self._prepare(entity)
        self._items = [*self._items, entity]
        logger.debug("Added %s %s (%d total)", self.name, self._key(entity), len(self._items))
        return entity

    def update(self, entity_id: str, changes: dict) -> T | None:
        """Merge changes into the entity with the given id.

        Unknown ids are a silent no-op returning None. Unknown fields and
        the id itself are ignored.
        """
        for index, entity in enumerate(self._items):
            if self._key(entity) != entity_id:
                continue

            known = {f.name for f in dataclasses.fields(entity)}
            valid = {k: v for k, v in changes.items() if k in known and k != "id"}
            ignored = set(changes) - set(valid)
            if ignored:
                logger.debug("Ignoring fields %s on %s %s", sorted(ignored), self.name, entity_id)

            updated = self._prepare(dataclasses.replace(entity, **valid))
            self._items = [*self._items[:index], updated, *self._items[index + 1:]]
            logger.debug("Updated %s %s", self.name, entity_id)
            return updated

        logger.debug("No %s with id %s, update skipped", self.name, entity_id)
        return None

    def delete(self, entity_id: str) -> bool:
        """Remove the entity with the given id. Unknown ids are a no-op."""
        remaining = [e for e in self._items if self._key(e) != entity_id]
        if len(remaining) == len(self._items):
            logger.debug("No %s with id %s, delete skipped", self.name, entity_id)
            return False
        self._items = remaining
        logger.debug("Deleted %s %s (%d total)", self.name, entity_id, len(self._items))
        return True

    def find(self, predicate: Callable[[T], bool]) -> list[T]:
        return [e for e in self._items if predicate(e)]

    def _prepare(self, entity: T) -> T:
        return self._normalize(entity) if self._normalize else entity
