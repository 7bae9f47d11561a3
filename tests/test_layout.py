"""Tests for the tidy-tree layout."""

import pytest

from kintree.config import LayoutSettings
from kintree.layout import compute_layout
from kintree.models import RelationshipEdge, RelationshipType

from conftest import make_person


def by_id(nodes):
    return {n.id: n for n in nodes}


class TestCoupleWithChildren:
    """A couple with three children under default settings."""

    def test_positions(self, family, layout_settings):
        nodes = by_id(compute_layout(family.people, family.edges, layout_settings))

        # children 200 apart, parents centred over them
        assert [nodes[c].x for c in ("B", "C", "E")] == [120, 320, 520]
        assert nodes["D"].x == 220
        assert nodes["A"].x == 420
        assert (nodes["A"].x + nodes["D"].x) / 2 == nodes["C"].x

        assert nodes["A"].y == nodes["D"].y == 85
        assert all(nodes[c].y == 247 for c in ("B", "C", "E"))

    def test_generations_and_spouse_flags(self, family, layout_settings):
        nodes = by_id(compute_layout(family.people, family.edges, layout_settings))
        assert nodes["D"].generation == 0
        assert nodes["B"].generation == 1
        assert nodes["A"].is_spouse is True
        assert nodes["D"].is_spouse is False

    def test_margin(self, family, layout_settings):
        nodes = compute_layout(family.people, family.edges, layout_settings)
        assert min(n.x for n in nodes) - layout_settings.card_width / 2 == layout_settings.margin
        assert min(n.y for n in nodes) - layout_settings.card_height / 2 == layout_settings.margin

    def test_everyone_placed_once(self, family, layout_settings):
        nodes = compute_layout(family.people, family.edges, layout_settings)
        assert sorted(n.id for n in nodes) == sorted(family.people)

    def test_cards_do_not_overlap(self, family, layout_settings):
        nodes = compute_layout(family.people, family.edges, layout_settings)
        for a in nodes:
            for b in nodes:
                if a.id < b.id and a.y == b.y:
                    assert abs(a.x - b.x) >= layout_settings.sibling_separation


class TestSpacingRules:
    @pytest.fixture
    def cousins(self, store):
        """Grandparent G with sons P1 and P2, each with one child C1 and C2."""
        for pid, year in (("G", 1920), ("P1", 1945), ("P2", 1948), ("C1", 1970), ("C2", 1972)):
            store.add_person(make_person(pid, year))
        store.add_relationship("G", "P1", "parent")
        store.add_relationship("G", "P2", "parent")
        store.add_relationship("P1", "C1", "parent")
        store.add_relationship("P2", "C2", "parent")
        return store

    def test_cousins_get_the_wider_separation(self, cousins, layout_settings):
        nodes = by_id(compute_layout(cousins.people, cousins.edges, layout_settings))
        assert layout_settings.cousin_separation > layout_settings.sibling_separation
        assert nodes["C2"].x - nodes["C1"].x >= layout_settings.cousin_separation
        assert nodes["C1"].generation == nodes["C2"].generation == 2

    def test_siblings_keep_at_least_sibling_separation(self, cousins, layout_settings):
        nodes = by_id(compute_layout(cousins.people, cousins.edges, layout_settings))
        assert nodes["P2"].x - nodes["P1"].x >= layout_settings.sibling_separation
        assert nodes["G"].x == (nodes["P1"].x + nodes["P2"].x) / 2

    def test_vertical_spacing_wins_when_wider(self, cousins):
        layout = LayoutSettings(horizontal_spacing=1.1, vertical_spacing=2.0)
        nodes = by_id(compute_layout(cousins.people, cousins.edges, layout))
        assert nodes["C2"].x - nodes["C1"].x >= 2.0 * layout.card_width


class TestDeterminism:
    def test_same_input_same_output(self, family, layout_settings):
        first = compute_layout(family.people, family.edges, layout_settings)
        second = compute_layout(family.people, family.edges, layout_settings)
        assert first == second

    def test_input_order_does_not_matter(self, family, layout_settings):
        people = dict(reversed(list(family.people.items())))
        edges = list(reversed(family.edges))
        expected = compute_layout(family.people, family.edges, layout_settings)
        assert compute_layout(people, edges, layout_settings) == expected


class TestForest:
    def test_disconnected_family_to_the_right(self, family, layout_settings):
        family.add_person(make_person("X", 1990))
        nodes = by_id(compute_layout(family.people, family.edges, layout_settings))
        assert nodes["X"].generation == 0
        assert nodes["X"].x > max(n.x for pid, n in nodes.items() if pid != "X")
        assert nodes["X"].x - nodes["A"].x > layout_settings.cousin_separation

    def test_root_family_first(self, family, layout_settings):
        family.add_person(make_person("X", 1990))
        nodes = by_id(compute_layout(family.people, family.edges, layout_settings, root_id="X"))
        assert nodes["X"].x < min(n.x for pid, n in nodes.items() if pid != "X")

    def test_empty(self, layout_settings):
        assert compute_layout({}, [], layout_settings) == []

    def test_edges_to_unknown_people_ignored(self, layout_settings):
        people = {"A": make_person("A", 1950)}
        edges = [RelationshipEdge("A", "ghost", RelationshipType.PARENT)]
        nodes = compute_layout(people, edges, layout_settings)
        assert [n.id for n in nodes] == ["A"]

    def test_child_of_two_unmarried_parents_placed_once(self, store, layout_settings):
        for pid, year in (("M", 1950), ("N", 1952), ("K", 1980)):
            store.add_person(make_person(pid, year))
        store.add_relationship("M", "K", "parent")
        store.add_relationship("N", "K", "parent")
        nodes = compute_layout(store.people, store.edges, layout_settings)
        assert [n.id for n in nodes].count("K") == 1
        assert by_id(nodes)["K"].generation == 1


class TestOrientation:
    def test_bottom_to_top(self, family):
        layout = LayoutSettings(direction="bottom-to-top")
        nodes = by_id(compute_layout(family.people, family.edges, layout))
        assert nodes["B"].y < nodes["A"].y
        assert nodes["B"].y == 85

    def test_left_to_right(self, family):
        layout = LayoutSettings(orientation="horizontal", direction="left-to-right")
        nodes = by_id(compute_layout(family.people, family.edges, layout))
        assert nodes["B"].x - nodes["A"].x == pytest.approx(layout.level_step)
        assert nodes["B"].y != nodes["C"].y
        assert nodes["A"].x == layout.margin + layout.card_width / 2

    def test_right_to_left(self, family):
        layout = LayoutSettings(orientation="horizontal", direction="right-to-left")
        nodes = by_id(compute_layout(family.people, family.edges, layout))
        assert nodes["B"].x < nodes["A"].x
