"""Placeholder slots offered around a focused person for adding relatives."""

import logging
import math
from collections.abc import Iterable, Mapping, Sequence

from kintree import graph
from kintree.config import LayoutSettings, settings as default_settings
from kintree.models import (
    Person,
    PlaceholderSlot,
    Point,
    PositionedNode,
    RelationshipEdge,
    SlotType,
)
from kintree.store import MAX_PARENTS

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 10
CLEARANCE = 0.8  # fraction of the spacing unit that must stay free around a slot


def _resolve(
    candidate: Point, step: Point, obstacles: Sequence[Point], spacing: float
) -> tuple[Point, bool]:
    """
    Shift ``candidate`` by ``step`` until nothing sits within the clearance.

    Gives up after MAX_ATTEMPTS and returns the last position tried, flagged as
    unresolved; dense trees can still overlap.
    """
    limit = spacing * CLEARANCE

    def clear(p: Point) -> bool:
        return all(math.dist((p.x, p.y), (o.x, o.y)) >= limit for o in obstacles)

    for _ in range(MAX_ATTEMPTS - 1):
        if clear(candidate):
            return candidate, True
        candidate = Point(candidate.x + step.x, candidate.y + step.y)
    return candidate, clear(candidate)


def compute_placeholders(
    focus_id: str,
    people: Mapping[str, Person],
    edges: Iterable[RelationshipEdge],
    nodes: Sequence[PositionedNode],
    settings: LayoutSettings | None = None,
) -> list[PlaceholderSlot]:
    """
    Offer the relationship slots still open for ``focus_id`` with screen positions.

    - parent: while fewer than two parents exist, one generation step up
    - spouse: while no spouse exists, one spacing unit to the left
    - child: always; right of the rightmost child, or one step down
    - sibling: when the person has a parent; opposite the spouse, else right

    Args:
        focus_id: The selected person
        people: Person map keyed by id
        edges: Relationship edges
        nodes: Output of compute_layout for the same graph
        settings: Layout settings used for that layout

    Returns:
        Slots in parent, spouse, child, sibling order. Empty when the focus
        person has no position.
    """
    layout = settings or default_settings.layout
    by_id = {n.id: n for n in nodes}
    if focus_id not in people or focus_id not in by_id:
        logger.debug("No placeholders: %s is not positioned", focus_id)
        return []

    G = graph.build_graph(people, edges)
    focus = by_id[focus_id]
    spacing = layout.sibling_separation
    vertical = layout.vertical
    down_x, down_y = layout.descent
    level_step = layout.level_step

    def shifted(origin: Point, across: float = 0.0, along: float = 0.0) -> Point:
        # across runs left/right (or top/bottom when horizontal); along follows descent
        if vertical:
            return Point(origin.x + across, origin.y + along * down_y)
        return Point(origin.x + along * down_x, origin.y + across)

    parents = graph.parents_of(G, focus_id)
    spouses = graph.spouses_of(G, focus_id)
    children = [by_id[c] for c in graph.children_of(G, focus_id) if c in by_id]

    candidates: list[tuple[SlotType, Point, int]] = []
    if len(parents) < MAX_PARENTS:
        candidates.append((SlotType.PARENT, shifted(focus.point, along=-level_step), 1))
    if not spouses:
        candidates.append((SlotType.SPOUSE, shifted(focus.point, across=-spacing), -1))

    if children:
        def across_of(n: PositionedNode) -> float:
            return n.x if vertical else n.y

        rightmost = max(children, key=lambda n: (across_of(n), n.id))
        candidates.append((SlotType.CHILD, shifted(rightmost.point, across=spacing), 1))
    else:
        candidates.append((SlotType.CHILD, shifted(focus.point, along=level_step), 1))

    if parents:
        side = 1
        spouse_nodes = [by_id[s] for s in spouses if s in by_id]
        if spouse_nodes:
            spouse = spouse_nodes[0]
            offset = (spouse.x - focus.x) if vertical else (spouse.y - focus.y)
            # a spouse sitting on the right pushes the sibling slot left
            if offset > 0:
                side = -1
        candidates.append((SlotType.SIBLING, shifted(focus.point, across=side * spacing), side))

    obstacles = [n.point for n in nodes if n.id != focus_id]
    slots = []
    for slot, candidate, side in candidates:
        step = shifted(Point(0.0, 0.0), across=side * spacing)
        position, resolved = _resolve(candidate, step, obstacles, spacing)
        obstacles.append(position)
        slots.append(PlaceholderSlot(focus_id, slot, position.x, position.y, resolved))
    return slots
