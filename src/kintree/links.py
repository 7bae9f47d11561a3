"""Connecting-line geometry between positioned people."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from kintree import graph
from kintree.config import Direction, LayoutSettings, settings as default_settings
from kintree.models import (
    LinkGeometry,
    LinkKind,
    Point,
    PositionedNode,
    RelationshipEdge,
    RelationshipType,
)

logger = logging.getLogger(__name__)

# Parent links whose anchors are closer than this along the generation axis
# are drawn as a single straight segment.
STRAIGHT_THRESHOLD = 40.0
# Where an elbow turns, as a fraction of the run between generations.
ELBOW_RATIO = 0.7


def link_id(kind: str, *person_ids: str) -> str:
    return ":".join((kind, *person_ids))


@dataclass(frozen=True)
class _Axes:
    """Projects points onto the generation axis ("along") and the sibling axis."""

    vertical: bool
    sign: int  # +1 when generations advance towards larger coordinates
    half_depth: float
    half_breadth: float

    @classmethod
    def from_settings(cls, layout: LayoutSettings) -> "_Axes":
        sign = -1 if layout.direction in (Direction.BOTTOM_TO_TOP, Direction.RIGHT_TO_LEFT) else 1
        return cls(layout.vertical, sign, layout.depth / 2, layout.breadth / 2)

    def along(self, p: Point) -> float:
        return p.y if self.vertical else p.x

    def across(self, p: Point) -> float:
        return p.x if self.vertical else p.y

    def point(self, along: float, across: float) -> Point:
        return Point(across, along) if self.vertical else Point(along, across)

    def towards_children(self, node: PositionedNode) -> Point:
        """Centre of the card edge facing the next generation."""
        return self.point(self.along(node.point) + self.sign * self.half_depth, self.across(node.point))

    def towards_parents(self, node: PositionedNode) -> Point:
        return self.point(self.along(node.point) - self.sign * self.half_depth, self.across(node.point))

    def facing_sides(self, a: PositionedNode, b: PositionedNode) -> tuple[Point, Point]:
        """Side centres of two cards that face each other across the sibling axis."""
        pa, pb = a.point, b.point
        side = 1 if self.across(pa) <= self.across(pb) else -1
        return (
            self.point(self.along(pa), self.across(pa) + side * self.half_breadth),
            self.point(self.along(pb), self.across(pb) - side * self.half_breadth),
        )


def elbow_path(source: Point, target: Point, axes: _Axes) -> tuple[tuple[Point, ...], LinkKind]:
    """
    Path from a parent anchor to a child anchor.

    Runs along the generation axis, turns at 70% of the run, crosses to the
    child's column and finishes with a final run into the child. Anchors that
    are nearly level, or already in the same column, get a straight segment.
    """
    run = axes.along(target) - axes.along(source)
    if abs(run) < STRAIGHT_THRESHOLD or axes.across(source) == axes.across(target):
        return (source, target), LinkKind.STRAIGHT

    turn = axes.along(source) + ELBOW_RATIO * run
    return (
        source,
        axes.point(turn, axes.across(source)),
        axes.point(turn, axes.across(target)),
        target,
    ), LinkKind.ELBOW


def _family_links(
    parents: tuple[PositionedNode, PositionedNode],
    children: Sequence[PositionedNode],
    axes: _Axes,
) -> list[LinkGeometry]:
    """One stem, one bus when there are several children, one connector per child."""
    p1, p2 = parents
    ids = (p1.id, p2.id)
    a1, a2 = axes.towards_children(p1), axes.towards_children(p2)
    mid = (axes.across(a1) + axes.across(a2)) / 2
    # start below whichever parent is closer to the children
    start = max(axes.along(a1) * axes.sign, axes.along(a2) * axes.sign) * axes.sign

    targets = [axes.towards_parents(c) for c in children]
    nearest = min((axes.along(t) - start) * axes.sign for t in targets)
    junction = start + axes.sign * nearest / 2

    links = [
        LinkGeometry(
            id=link_id("stem", *ids),
            path=(axes.point(start, mid), axes.point(junction, mid)),
            relationship_type=RelationshipType.PARENT,
            person_ids=ids,
            kind=LinkKind.STEM,
        )
    ]

    if len(children) > 1:
        span = [axes.across(t) for t in targets] + [mid]
        links.append(
            LinkGeometry(
                id=link_id("bus", *ids),
                path=(axes.point(junction, min(span)), axes.point(junction, max(span))),
                relationship_type=RelationshipType.PARENT,
                person_ids=ids,
                kind=LinkKind.BUS,
            )
        )

    for child, target in zip(children, targets):
        drop = axes.point(junction, axes.across(target))
        # a lone child has no bus, so its connector carries the sideways run
        path = (drop, target) if len(children) > 1 else (axes.point(junction, mid), drop, target)
        links.append(
            LinkGeometry(
                id=link_id("connector", *ids, child.id),
                path=path,
                relationship_type=RelationshipType.PARENT,
                person_ids=(*ids, child.id),
                kind=LinkKind.CONNECTOR,
            )
        )
    return links


def compute_links(
    nodes: Sequence[PositionedNode],
    edges: Iterable[RelationshipEdge],
    settings: LayoutSettings | None = None,
) -> list[LinkGeometry]:
    """
    Derive the lines between related, positioned people.

    Children sharing two positioned parents hang from a single family stem and
    bus; a child with one positioned parent gets a direct elbow. Spouse and
    explicit sibling edges become straight side-to-side segments. Explicit
    sibling edges between people who already share a parent are implied by the
    family lines and are not drawn. Edges touching unpositioned people are
    skipped.

    Returns:
        Links in a stable order: families first, then spouse and sibling lines.
    """
    layout = settings or default_settings.layout
    axes = _Axes.from_settings(layout)
    by_id = {n.id: n for n in nodes}
    G = graph.build_graph({n.id: n.person for n in nodes}, edges)

    links: list[LinkGeometry] = []
    seen: set[str] = set()

    def add(link: LinkGeometry) -> None:
        if link.id in seen:
            return
        seen.add(link.id)
        links.append(link)

    for family in graph.family_units(G):
        children = [by_id[c] for c in family.children]
        if len(family.parents) == 2:
            p1, p2 = (by_id[p] for p in family.parents)
            for link in _family_links((p1, p2), children, axes):
                add(link)
            continue

        parent = by_id[family.parents[0]]
        for child in children:
            path, kind = elbow_path(axes.towards_children(parent), axes.towards_parents(child), axes)
            add(
                LinkGeometry(
                    id=link_id(RelationshipType.PARENT.value, *sorted((parent.id, child.id))),
                    path=path,
                    relationship_type=RelationshipType.PARENT,
                    person_ids=(parent.id, child.id),
                    kind=kind,
                )
            )

    for edge in graph.edges_of(G):
        if edge.type is RelationshipType.PARENT:
            continue
        if edge.type is RelationshipType.SIBLING and graph.shares_parent(G, edge.from_id, edge.to_id):
            continue
        a, b = sorted((edge.from_id, edge.to_id))
        pa, pb = axes.facing_sides(by_id[a], by_id[b])
        add(
            LinkGeometry(
                id=link_id(edge.type.value, a, b),
                path=(pa, pb),
                relationship_type=edge.type,
                person_ids=(a, b),
                kind=LinkKind.STRAIGHT,
            )
        )

    logger.debug("Derived %d links for %d nodes", len(links), len(nodes))
    return links
