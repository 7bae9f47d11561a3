"""NetworkX graph building and relationship queries."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import networkx as nx

from kintree.models import Person, RelationshipEdge, RelationshipType

PARENT = RelationshipType.PARENT.value
SPOUSE = RelationshipType.SPOUSE.value
SIBLING = RelationshipType.SIBLING.value


def sort_key(person: Person) -> tuple[int, str]:
    """Ordering used wherever people are listed: oldest first, ties by id."""
    return (person.birth_year, person.id)


def build_graph(
    people: Mapping[str, Person], edges: Iterable[RelationshipEdge]
) -> nx.MultiDiGraph:
    """
    Build a NetworkX multigraph from a person map and an edge list.

    Nodes carry the ``person`` attribute; edges are keyed by relationship type so
    a pair can be related in more than one way without the edges colliding.
    Spouse and sibling edges are stored once, in the direction they were given.
    Edges referencing unknown people are skipped.
    """
    G = nx.MultiDiGraph()
    for pid in sorted(people):
        G.add_node(pid, person=people[pid])

    for edge in edges:
        if edge.from_id not in G or edge.to_id not in G:
            continue
        if edge.type.symmetric and G.has_edge(edge.to_id, edge.from_id, key=edge.type.value):
            continue
        G.add_edge(edge.from_id, edge.to_id, key=edge.type.value, edge=edge)

    return G


def person(G: nx.MultiDiGraph, person_id: str) -> Person:
    return G.nodes[person_id]["person"]


def people_of(G: nx.MultiDiGraph) -> dict[str, Person]:
    return {pid: data["person"] for pid, data in G.nodes(data=True)}


def edges_of(G: nx.MultiDiGraph) -> list[RelationshipEdge]:
    """All stored edges in a stable order (type, from, to)."""
    edges = [data["edge"] for _, _, data in G.edges(data=True)]
    return sorted(edges, key=lambda e: (e.type.value, e.from_id, e.to_id))


def _ordered(G: nx.MultiDiGraph, ids: Iterable[str]) -> list[str]:
    return sorted(set(ids), key=lambda pid: sort_key(person(G, pid)))


def parents_of(G: nx.MultiDiGraph, person_id: str) -> list[str]:
    # PARENT edges go from parent -> child, so parents are predecessors
    return _ordered(
        G, (p for p in G.predecessors(person_id) if G.has_edge(p, person_id, key=PARENT))
    )


def children_of(G: nx.MultiDiGraph, person_id: str) -> list[str]:
    return _ordered(
        G, (c for c in G.successors(person_id) if G.has_edge(person_id, c, key=PARENT))
    )


def _symmetric_neighbors(G: nx.MultiDiGraph, person_id: str, key: str) -> list[str]:
    found = [n for n in G.successors(person_id) if G.has_edge(person_id, n, key=key)]
    found += [n for n in G.predecessors(person_id) if G.has_edge(n, person_id, key=key)]
    return _ordered(G, found)


def spouses_of(G: nx.MultiDiGraph, person_id: str) -> list[str]:
    return _symmetric_neighbors(G, person_id, SPOUSE)


def explicit_siblings_of(G: nx.MultiDiGraph, person_id: str) -> list[str]:
    return _symmetric_neighbors(G, person_id, SIBLING)


def siblings_of(G: nx.MultiDiGraph, person_id: str) -> list[str]:
    """Children of any parent of ``person_id`` plus explicit siblings, minus self."""
    derived = {c for p in parents_of(G, person_id) for c in children_of(G, p)}
    derived.update(explicit_siblings_of(G, person_id))
    derived.discard(person_id)
    return _ordered(G, derived)


def shares_parent(G: nx.MultiDiGraph, a: str, b: str) -> bool:
    return bool(set(parents_of(G, a)) & set(parents_of(G, b)))


def parent_graph(G: nx.MultiDiGraph) -> nx.DiGraph:
    """Directed graph with only the PARENT edges (parent -> child)."""
    P = nx.DiGraph()
    P.add_nodes_from(G.nodes)
    P.add_edges_from((u, v) for u, v, k in G.edges(keys=True) if k == PARENT)
    return P


def ancestors_of(G: nx.MultiDiGraph, person_id: str) -> set[str]:
    return nx.ancestors(parent_graph(G), person_id)


@dataclass(frozen=True)
class FamilyUnit:
    """Children grouped under the exact set of parents they share."""

    parents: tuple[str, ...]
    children: tuple[str, ...]


def family_units(G: nx.MultiDiGraph) -> list[FamilyUnit]:
    """
    Group children by their parent set, the union-node model of a family.

    Every child with at least one parent belongs to exactly one unit, so
    siblings with the same two parents hang from one family and half-siblings
    land in separate ones.

    Returns:
        Units sorted by their parent ids, children oldest first.
    """
    by_parents: dict[tuple[str, ...], list[str]] = {}
    for child in G.nodes:
        parents = tuple(sorted(parents_of(G, child)))
        if parents:
            by_parents.setdefault(parents, []).append(child)

    return [
        FamilyUnit(parents=parents, children=tuple(_ordered(G, children)))
        for parents, children in sorted(by_parents.items())
    ]
