"""Relationship store: the validated, mutable family graph."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import asdict, replace

import networkx as nx

from kintree import graph
from kintree.errors import (
    DuplicateRelationship,
    InvalidRelationship,
    OrphanWouldResult,
    PersonNotFound,
    ValidationError,
)
from kintree.models import Gender, Person, RelationshipEdge, RelationshipType

logger = logging.getLogger(__name__)

MAX_PARENTS = 2

Snapshot = tuple[dict[str, Person], list[RelationshipEdge]]


def validate_person(person: Person) -> None:
    """Raise ValidationError if the person's fields are malformed."""
    if not isinstance(person.id, str) or not person.id.strip():
        raise ValidationError("Person id must be a non-empty string")
    if not isinstance(person.birth_year, int) or isinstance(person.birth_year, bool):
        raise ValidationError(f"Person {person.id} is missing a birth year", person.id)
    if person.death_year is not None:
        if not isinstance(person.death_year, int) or isinstance(person.death_year, bool):
            raise ValidationError(f"Person {person.id} has an invalid death year", person.id)
        if person.death_year < person.birth_year:
            raise ValidationError(f"Person {person.id} died before being born", person.id)
    try:
        Gender(person.gender)
    except ValueError:
        raise ValidationError(
            f"Person {person.id} has unknown gender {person.gender!r}", person.id
        ) from None


def _normalized(person: Person) -> Person:
    if isinstance(person.gender, Gender):
        return person
    return replace(person, gender=Gender(person.gender))


def _as_type(type_: RelationshipType | str) -> RelationshipType:
    try:
        return RelationshipType(type_)
    except ValueError:
        raise InvalidRelationship(f"Unknown relationship type {type_!r}") from None


class RelationshipStore:
    """
    Canonical set of people and relationship edges.

    Every mutation validates fully before changing anything, so a raised error
    leaves the graph as it was. ``version`` increases with each successful
    mutation and can key caches of derived layouts.

    Usage:
        store = RelationshipStore()
        store.add_person(Person("a", "Ana", Gender.FEMALE, 1950))
        store.add_person(Person("b", "Ben", Gender.MALE, 1975))
        store.add_relationship("a", "b", "parent")
        store.siblings_of("b")
    """

    def __init__(self):
        self._graph = nx.MultiDiGraph()
        self.version = 0

    @classmethod
    def from_data(
        cls, people: Mapping[str, Person], edges: Iterable[RelationshipEdge]
    ) -> "RelationshipStore":
        """Build a store, validating every person and edge as if added one by one."""
        store = cls()
        for pid in sorted(people):
            if people[pid].id != pid:
                raise ValidationError(f"Person keyed {pid} has id {people[pid].id}", pid)
            store.add_person(people[pid])
        for edge in edges:
            store.add_relationship(edge.from_id, edge.to_id, edge.type)
        return store

    # ─────────────────────────────────────────
    # Read access
    # ─────────────────────────────────────────

    def __contains__(self, person_id: str) -> bool:
        return person_id in self._graph

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    @property
    def graph(self) -> nx.MultiDiGraph:
        """Read-only view of the underlying graph."""
        return self._graph.copy(as_view=True)

    @property
    def people(self) -> dict[str, Person]:
        return graph.people_of(self._graph)

    @property
    def edges(self) -> list[RelationshipEdge]:
        return graph.edges_of(self._graph)

    def get_person(self, person_id: str) -> Person:
        self._require(person_id)
        return graph.person(self._graph, person_id)

    def parents_of(self, person_id: str) -> list[str]:
        self._require(person_id)
        return graph.parents_of(self._graph, person_id)

    def children_of(self, person_id: str) -> list[str]:
        self._require(person_id)
        return graph.children_of(self._graph, person_id)

    def spouses_of(self, person_id: str) -> list[str]:
        self._require(person_id)
        return graph.spouses_of(self._graph, person_id)

    def siblings_of(self, person_id: str) -> list[str]:
        self._require(person_id)
        return graph.siblings_of(self._graph, person_id)

    # ─────────────────────────────────────────
    # People
    # ─────────────────────────────────────────

    def add_person(self, person: Person) -> str:
        validate_person(person)
        person = _normalized(person)
        if person.id in self._graph:
            raise ValidationError(f"Person {person.id} already exists", person.id)
        self._graph.add_node(person.id, person=person)
        self._bump()
        logger.debug("Added person %s", person.id)
        return person.id

    def update_person(self, person_id: str, **changes) -> Person:
        """Replace fields of an existing person; the id cannot change."""
        current = self.get_person(person_id)
        if "id" in changes and changes["id"] != person_id:
            raise ValidationError("Person id cannot be changed", person_id)
        try:
            updated = replace(current, **changes)
        except TypeError:
            unknown = ", ".join(sorted(set(changes) - set(asdict(current))))
            raise ValidationError(
                f"Person {person_id} has no field(s) {unknown}", person_id
            ) from None
        validate_person(updated)
        updated = _normalized(updated)
        self._graph.nodes[person_id]["person"] = updated
        self._bump()
        return updated

    def remove_person(self, person_id: str, cascade: bool = False) -> list[RelationshipEdge]:
        """
        Remove a person and every edge touching them.

        Args:
            person_id: The person to remove
            cascade: Must be True when the person still has children. Children
                are kept; only their edge to this person goes away.

        Returns:
            The removed edges.
        """
        self._require(person_id)
        children = graph.children_of(self._graph, person_id)
        if children and not cascade:
            raise OrphanWouldResult(
                f"Person {person_id} has {len(children)} children; pass cascade=True",
                person_id,
                *children,
            )

        removed = [e for e in self.edges if e.involves(person_id)]
        self._graph.remove_node(person_id)
        self._bump()
        logger.info("Removed person %s with %d edges", person_id, len(removed))
        return removed

    # ─────────────────────────────────────────
    # Relationships
    # ─────────────────────────────────────────

    def add_relationship(
        self, from_id: str, to_id: str, type_: RelationshipType | str
    ) -> RelationshipEdge:
        """
        Add a relationship after checking every graph invariant.

        A ``parent`` edge means ``from_id`` is a parent of ``to_id``. Spouse and
        sibling edges are undirected and stored once per pair.
        """
        rel = _as_type(type_)
        self._require(from_id)
        self._require(to_id)
        if from_id == to_id:
            raise InvalidRelationship(f"{from_id} cannot be related to themself", from_id)

        edge = RelationshipEdge(from_id, to_id, rel, bidirectional=rel.symmetric)
        if self._find(edge) is not None:
            raise DuplicateRelationship(
                f"{rel.value} relationship between {from_id} and {to_id} already exists",
                from_id,
                to_id,
            )

        if rel is RelationshipType.PARENT:
            parents = graph.parents_of(self._graph, to_id)
            if len(parents) >= MAX_PARENTS:
                raise InvalidRelationship(
                    f"{to_id} already has {MAX_PARENTS} parents", to_id, *parents
                )
            # the new child must not already be an ancestor of the parent
            if to_id in graph.ancestors_of(self._graph, from_id):
                raise InvalidRelationship(
                    f"{from_id} -> {to_id} would make {to_id} their own ancestor",
                    from_id,
                    to_id,
                )

        self._graph.add_edge(from_id, to_id, key=rel.value, edge=edge)
        self._bump()
        logger.debug("Added %s edge %s -> %s", rel.value, from_id, to_id)
        return edge

    def remove_relationship(
        self, from_id: str, to_id: str, type_: RelationshipType | str
    ) -> bool:
        """Remove an edge if present. Returns False when there was nothing to remove."""
        rel = _as_type(type_)
        stored = self._find(RelationshipEdge(from_id, to_id, rel))
        if stored is None:
            return False
        self._graph.remove_edge(stored.from_id, stored.to_id, key=rel.value)
        self._bump()
        logger.debug("Removed %s edge %s -> %s", rel.value, from_id, to_id)
        return True

    # ─────────────────────────────────────────
    # Snapshots
    # ─────────────────────────────────────────

    def snapshot(self) -> Snapshot:
        return (self.people, self.edges)

    def restore(self, snapshot: Snapshot) -> None:
        """Replace the graph with a snapshot taken earlier from a valid store."""
        people, edges = snapshot
        self._graph = graph.build_graph(people, edges)
        self._bump()

    def copy(self) -> "RelationshipStore":
        clone = RelationshipStore()
        clone._graph = self._graph.copy()
        clone.version = self.version
        return clone

    # ─────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────

    def _require(self, person_id: str) -> None:
        if person_id not in self._graph:
            raise PersonNotFound(f"Person {person_id} not found", person_id)

    def _find(self, edge: RelationshipEdge) -> RelationshipEdge | None:
        key = edge.type.value
        candidates = [(edge.from_id, edge.to_id)]
        if edge.type.symmetric:
            candidates.append((edge.to_id, edge.from_id))
        for u, v in candidates:
            if self._graph.has_edge(u, v, key=key):
                return self._graph.edges[u, v, key]["edge"]
        return None

    def _bump(self) -> None:
        self.version += 1
