"""Undo/redo for an editing session as a linear history of graph snapshots."""

import logging
from collections.abc import Callable
from typing import TypeVar

from kintree.config import settings
from kintree.models import Person, RelationshipEdge, RelationshipType
from kintree.store import RelationshipStore, Snapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EditSession:
    """
    Wrap a RelationshipStore so every successful mutation can be undone.

    A snapshot is pushed onto ``past`` only after the mutation succeeds, so a
    rejected edit leaves both the graph and the history untouched. Any new edit
    clears the redo stack.
    """

    def __init__(self, store: RelationshipStore | None = None, limit: int | None = None):
        self.store = store or RelationshipStore()
        self.limit = limit or settings.history_limit
        self.past: list[Snapshot] = []
        self.future: list[Snapshot] = []

    @property
    def can_undo(self) -> bool:
        return bool(self.past)

    @property
    def can_redo(self) -> bool:
        return bool(self.future)

    def _apply(self, mutation: Callable[[], T]) -> T:
        before = self.store.snapshot()
        result = mutation()
        self._record(before)
        return result

    def _record(self, before: Snapshot) -> None:
        self.past.append(before)
        if len(self.past) > self.limit:
            self.past.pop(0)
        self.future.clear()

    def add_person(self, person: Person) -> str:
        return self._apply(lambda: self.store.add_person(person))

    def update_person(self, person_id: str, **changes) -> Person:
        return self._apply(lambda: self.store.update_person(person_id, **changes))

    def remove_person(self, person_id: str, cascade: bool = False) -> list[RelationshipEdge]:
        return self._apply(lambda: self.store.remove_person(person_id, cascade=cascade))

    def add_relationship(
        self, from_id: str, to_id: str, type_: RelationshipType | str
    ) -> RelationshipEdge:
        return self._apply(lambda: self.store.add_relationship(from_id, to_id, type_))

    def remove_relationship(
        self, from_id: str, to_id: str, type_: RelationshipType | str
    ) -> bool:
        before = self.store.snapshot()
        # absent edges are a no-op and must not leave an empty undo step
        if not self.store.remove_relationship(from_id, to_id, type_):
            return False
        self._record(before)
        return True

    def undo(self) -> bool:
        if not self.past:
            return False
        self.future.insert(0, self.store.snapshot())
        self.store.restore(self.past.pop())
        logger.debug("Undo, %d steps left", len(self.past))
        return True

    def redo(self) -> bool:
        if not self.future:
            return False
        self.past.append(self.store.snapshot())
        self.store.restore(self.future.pop(0))
        logger.debug("Redo, %d steps left", len(self.future))
        return True
