"""Tidy-tree layout of the family graph."""

import logging
from collections import deque
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

import networkx as nx

from kintree import graph
from kintree.config import Direction, LayoutSettings, settings as default_settings
from kintree.models import Person, PositionedNode, RelationshipEdge

logger = logging.getLogger(__name__)


# ============================================================================
# Contours
# ============================================================================


class Contour(dict):
    """Per-level (left edge, right edge) extent of a group of cards."""

    def shifted(self, dx: float) -> "Contour":
        return Contour({level: (l + dx, r + dx) for level, (l, r) in self.items()})

    def merged(self, other: "Contour") -> "Contour":
        out = Contour(self)
        for level, (l, r) in other.items():
            if level in out:
                ol, orr = out[level]
                out[level] = (min(l, ol), max(r, orr))
            else:
                out[level] = (l, r)
        return out

    def shift_for(self, other: "Contour", gap: Callable[[int], float]) -> float:
        """Smallest shift that puts ``other`` to the right of this contour."""
        common = sorted(self.keys() & other.keys())
        if not common:
            right = max(r for _, r in self.values())
            left = min(l for l, _ in other.values())
            return right + gap(-1) - left
        return max(self[level][1] + gap(level) - other[level][0] for level in common)


# ============================================================================
# Layout units
# ============================================================================


@dataclass
class _Unit:
    """A person plus the spouses placed beside them; one node of the layout tree."""

    members: list[str]
    level: int
    children: list["_Unit"] = field(default_factory=list)
    offset: float = 0.0  # relative to the parent unit's first member


@dataclass(frozen=True)
class _Gaps:
    breadth: float
    sibling: float  # centre to centre
    cousin: float

    @classmethod
    def from_settings(cls, layout: LayoutSettings) -> "_Gaps":
        return cls(layout.breadth, layout.sibling_separation, layout.cousin_separation)

    def edge_gap(self, separation: float) -> float:
        return separation - self.breadth

    def unit_width(self, unit: _Unit) -> float:
        return (len(unit.members) - 1) * self.sibling


def _make_unit(G: nx.MultiDiGraph, person_id: str, level: int, visited: set[str]) -> _Unit:
    visited.add(person_id)
    members = [person_id]
    for spouse in graph.spouses_of(G, person_id):
        if spouse not in visited:
            visited.add(spouse)
            members.append(spouse)
    return _Unit(members=members, level=level)


def _grow_tree(G: nx.MultiDiGraph, top: str, level: int, visited: set[str]) -> _Unit:
    """
    Build a layout tree downward from ``top`` along parent edges.

    Units are expanded breadth-first, so a child with two parents in the tree is
    attached under whichever parent's unit is reached first.
    """
    root = _make_unit(G, top, level, visited)
    queue = deque([root])
    while queue:
        unit = queue.popleft()
        kids = {c for m in unit.members for c in graph.children_of(G, m)}
        for kid in sorted(kids, key=lambda pid: graph.sort_key(graph.person(G, pid))):
            if kid in visited:
                continue
            child = _make_unit(G, kid, unit.level + 1, visited)
            unit.children.append(child)
            queue.append(child)
    return root


def _topmost(G: nx.MultiDiGraph, start: str, visited: set[str]) -> str:
    """Climb from ``start`` through the first unplaced parent until none is left."""
    current = start
    seen = {current}
    while True:
        parents = [p for p in graph.parents_of(G, current) if p not in visited and p not in seen]
        if not parents:
            return current
        current = parents[0]
        seen.add(current)


def _generations(G: nx.MultiDiGraph, start: str) -> dict[str, int]:
    """Breadth-first generation numbers: children +1, spouses and siblings level."""
    gen = {start: 0}
    queue = deque([start])
    while queue:
        pid = queue.popleft()
        steps = [(p, -1) for p in graph.parents_of(G, pid)]
        steps += [(c, 1) for c in graph.children_of(G, pid)]
        steps += [(s, 0) for s in graph.spouses_of(G, pid)]
        steps += [(s, 0) for s in graph.explicit_siblings_of(G, pid)]
        for other, delta in steps:
            if other not in gen:
                gen[other] = gen[pid] + delta
                queue.append(other)
    return gen


def _build_forest(G: nx.MultiDiGraph, component: list[str], start: str) -> list[_Unit]:
    """Cover one connected component with layout trees, first tree from ``start``."""
    gen = _generations(G, start)
    visited: set[str] = set()
    trees = []
    while True:
        top = _topmost(G, start, visited)
        trees.append(_grow_tree(G, top, gen[top], visited))
        remaining = [pid for pid in component if pid not in visited]
        if not remaining:
            return trees
        start = min(remaining, key=lambda pid: (gen[pid], graph.sort_key(graph.person(G, pid))))


# ============================================================================
# Placement
# ============================================================================


def _place(unit: _Unit, gaps: _Gaps) -> Contour:
    """
    Position the subtrees under ``unit`` and return its contour.

    Coordinates are relative to the unit's first member. Adjacent children keep
    the sibling separation; deeper levels, where neighbours have different
    parents, keep the cousin separation.
    """
    width = gaps.unit_width(unit)
    half = gaps.breadth / 2
    own = Contour({unit.level: (-half, width + half)})
    if not unit.children:
        return own

    child_level = unit.level + 1

    def gap(level: int) -> float:
        if level == child_level:
            return gaps.edge_gap(gaps.sibling)
        return gaps.edge_gap(gaps.cousin)

    merged: Contour | None = None
    positions = []
    for child in unit.children:
        contour = _place(child, gaps)
        shift = 0.0 if merged is None else merged.shift_for(contour, gap)
        merged = contour.shifted(shift) if merged is None else merged.merged(contour.shifted(shift))
        positions.append(shift)

    first = unit.children[0]
    last = unit.children[-1]
    first_centre = positions[0] + gaps.unit_width(first) / 2
    last_centre = positions[-1] + gaps.unit_width(last) / 2
    # centre the couple over its children
    origin = (first_centre + last_centre) / 2 - width / 2

    for child, pos in zip(unit.children, positions):
        child.offset = pos - origin
    return own.merged(merged.shifted(-origin))


def _collect(
    unit: _Unit, origin: float, gaps: _Gaps, out: list[tuple[str, float, int, bool]]
) -> None:
    for index, member in enumerate(unit.members):
        out.append((member, origin + index * gaps.sibling, unit.level, index > 0))
    for child in unit.children:
        _collect(child, origin + child.offset, gaps, out)


def _pack(
    groups: Iterable[tuple[Contour, list[tuple[str, float, int, bool]]]], gap: float
) -> list[tuple[str, float, int, bool]]:
    """Pack groups left to right so their contours keep ``gap`` between card edges."""
    placed: list[tuple[str, float, int, bool]] = []
    merged: Contour | None = None
    for contour, nodes in groups:
        shift = 0.0 if merged is None else merged.shift_for(contour, lambda _: gap)
        merged = contour.shifted(shift) if merged is None else merged.merged(contour.shifted(shift))
        placed.extend((pid, b + shift, level, spouse) for pid, b, level, spouse in nodes)
    return placed


def _layout_component(
    G: nx.MultiDiGraph, component: list[str], start: str, gaps: _Gaps
) -> tuple[Contour, list[tuple[str, float, int, bool]]]:
    groups = []
    for tree in _build_forest(G, component, start):
        contour = _place(tree, gaps)
        nodes: list[tuple[str, float, int, bool]] = []
        _collect(tree, 0.0, gaps, nodes)
        groups.append((contour, nodes))

    nodes = _pack(groups, gaps.edge_gap(gaps.cousin))
    # every component starts at generation 0
    top = min(level for _, _, level, _ in nodes)
    nodes = [(pid, b, level - top, spouse) for pid, b, level, spouse in nodes]
    contour = Contour()
    for _, b, level, _ in nodes:
        contour = contour.merged(Contour({level: (b - gaps.breadth / 2, b + gaps.breadth / 2)}))
    return contour, nodes


def _components(G: nx.MultiDiGraph, root_id: str | None) -> list[tuple[list[str], str]]:
    """Connected components with their start person, the root's component first."""
    comps = []
    for members in nx.connected_components(G.to_undirected(as_view=True)):
        ordered = sorted(members)
        if root_id in members:
            start = root_id
        else:
            start = min(ordered, key=lambda pid: graph.sort_key(graph.person(G, pid)))
        comps.append((ordered, start))
    comps.sort(key=lambda c: (root_id not in c[0], c[0][0]))
    return comps


# ============================================================================
# Public API
# ============================================================================


def _to_screen(
    breadth: float, level: int, layout: LayoutSettings
) -> tuple[float, float]:
    depth = level * layout.level_step
    x, y = (breadth, depth) if layout.vertical else (depth, breadth)
    if layout.direction is Direction.BOTTOM_TO_TOP:
        y = -y
    elif layout.direction is Direction.RIGHT_TO_LEFT:
        x = -x
    return x, y


def compute_layout(
    people: Mapping[str, Person],
    edges: Iterable[RelationshipEdge],
    settings: LayoutSettings | None = None,
    root_id: str | None = None,
) -> list[PositionedNode]:
    """
    Assign a position to every person.

    Parent edges form the tree backbone; spouses sit beside their partner and
    disconnected families are laid out as further trees to the right.

    Args:
        people: Person map keyed by id
        edges: Relationship edges; edges to unknown ids are ignored
        settings: Layout settings (defaults to the process settings)
        root_id: Person whose family is laid out first

    Returns:
        Nodes sorted by generation, then position across the generation axis.
        Coordinates are card centres, offset so the top-left card edge is at
        (margin, margin).
    """
    layout = settings or default_settings.layout
    G = graph.build_graph(people, edges)
    if G.number_of_nodes() == 0:
        return []

    gaps = _Gaps.from_settings(layout)
    groups = [_layout_component(G, comp, start, gaps) for comp, start in _components(G, root_id)]
    # keep unrelated families visibly apart
    raw = _pack(groups, gaps.edge_gap(2 * gaps.cousin))
    raw.sort(key=lambda n: (n[2], n[1], n[0]))

    screen = [(pid, *_to_screen(b, level, layout), level, spouse) for pid, b, level, spouse in raw]
    min_x = min(x for _, x, _, _, _ in screen)
    min_y = min(y for _, _, y, _, _ in screen)
    dx = layout.margin + layout.card_width / 2 - min_x
    dy = layout.margin + layout.card_height / 2 - min_y

    nodes = [
        PositionedNode(
            id=pid,
            x=x + dx,
            y=y + dy,
            person=graph.person(G, pid),
            generation=level,
            is_spouse=spouse,
        )
        for pid, x, y, level, spouse in screen
    ]
    logger.debug("Laid out %d people in %d components", len(nodes), len(groups))
    return nodes
