"""Tests for connecting-line derivation."""

from collections import Counter

import pytest

from kintree.config import LayoutSettings
from kintree.layout import compute_layout
from kintree.links import compute_links
from kintree.models import LinkKind, Point, RelationshipType

from conftest import make_person


def derive(store, layout):
    nodes = compute_layout(store.people, store.edges, layout)
    return nodes, compute_links(nodes, store.edges, layout)


def by_id(links):
    return {link.id: link for link in links}


class TestFamilyLines:
    """A couple with three children: one stem, one bus, a connector each."""

    def test_kinds(self, family, layout_settings):
        _, links = derive(family, layout_settings)
        counts = Counter(link.kind for link in links)
        assert counts == {
            LinkKind.STEM: 1,
            LinkKind.BUS: 1,
            LinkKind.CONNECTOR: 3,
            LinkKind.STRAIGHT: 1,
        }
        spouse_lines = [l for l in links if l.relationship_type is RelationshipType.SPOUSE]
        assert len(spouse_lines) == 1

    def test_ids(self, family, layout_settings):
        _, links = derive(family, layout_settings)
        assert set(by_id(links)) == {
            "stem:A:D",
            "bus:A:D",
            "connector:A:D:B",
            "connector:A:D:C",
            "connector:A:D:E",
            "spouse:A:D",
        }

    def test_geometry(self, family, layout_settings):
        _, links = derive(family, layout_settings)
        links = by_id(links)
        # parents' bottom edges at y=130, children's top edges at y=202
        assert links["stem:A:D"].path == (Point(320, 130), Point(320, 166))
        assert links["bus:A:D"].path == (Point(120, 166), Point(520, 166))
        assert links["connector:A:D:B"].path == (Point(120, 166), Point(120, 202))
        assert links["connector:A:D:E"].person_ids == ("A", "D", "E")

    def test_spouse_line_between_facing_sides(self, family, layout_settings):
        _, links = derive(family, layout_settings)
        spouse = by_id(links)["spouse:A:D"]
        assert spouse.path == (Point(340, 85), Point(300, 85))
        assert spouse.person_ids == ("A", "D")

    def test_single_child_has_no_bus(self, store, layout_settings):
        store.add_person(make_person("A", 1950, "female"))
        store.add_person(make_person("D", 1948))
        store.add_person(make_person("B", 1975))
        store.add_relationship("A", "D", "spouse")
        store.add_relationship("A", "B", "parent")
        store.add_relationship("D", "B", "parent")
        _, links = derive(store, layout_settings)
        kinds = sorted(link.kind.value for link in links)
        assert kinds == ["connector", "stem", "straight"]

    def test_idempotent(self, family, layout_settings):
        nodes, links = derive(family, layout_settings)
        assert compute_links(nodes, family.edges, layout_settings) == links


class TestSingleParent:
    @pytest.fixture
    def single_parent(self, store):
        store.add_person(make_person("P", 1950))
        store.add_person(make_person("Q1", 1975))
        store.add_person(make_person("Q2", 1978))
        store.add_relationship("P", "Q1", "parent")
        store.add_relationship("P", "Q2", "parent")
        return store

    def test_elbow(self, single_parent, layout_settings):
        _, links = derive(single_parent, layout_settings)
        link = by_id(links)["parent:P:Q1"]
        assert link.kind is LinkKind.ELBOW
        assert link.person_ids == ("P", "Q1")
        start, turn_a, turn_b, end = link.path
        assert start == Point(220, 130)
        assert end == Point(120, 202)
        # turns at 70% of the 72-unit run
        assert turn_a.y == pytest.approx(130 + 0.7 * 72)
        assert (turn_a.x, turn_b.x) == (220, 120)
        assert turn_a.y == turn_b.y

    def test_short_run_is_straight(self, single_parent):
        layout = LayoutSettings(vertical_spacing=1.0)
        _, links = derive(single_parent, layout)
        link = by_id(links)["parent:P:Q1"]
        assert link.kind is LinkKind.STRAIGHT
        assert len(link.path) == 2

    def test_horizontal_elbow_runs_along_x(self, single_parent):
        layout = LayoutSettings(orientation="horizontal", direction="left-to-right")
        _, links = derive(single_parent, layout)
        start, turn_a, turn_b, end = by_id(links)["parent:P:Q1"].path
        assert start.x < turn_a.x < end.x
        assert turn_a.x == turn_b.x


class TestSiblingsAndSkips:
    def test_explicit_sibling_sharing_parent_not_drawn(self, family, layout_settings):
        family.add_relationship("B", "C", "sibling")
        _, links = derive(family, layout_settings)
        assert not [l for l in links if l.relationship_type is RelationshipType.SIBLING]

    def test_explicit_half_sibling_drawn(self, family, layout_settings):
        family.add_person(make_person("H", 1976))
        family.add_relationship("B", "H", "sibling")
        _, links = derive(family, layout_settings)
        sibling = by_id(links)["sibling:B:H"]
        assert sibling.kind is LinkKind.STRAIGHT
        assert sibling.person_ids == ("B", "H")

    def test_unpositioned_people_skipped(self, family, layout_settings):
        nodes = compute_layout(family.people, family.edges, layout_settings)
        partial = [n for n in nodes if n.id != "E"]
        links = compute_links(partial, family.edges, layout_settings)
        assert "connector:A:D:E" not in by_id(links)
        assert all("E" not in link.person_ids for link in links)

    def test_no_nodes(self, family, layout_settings):
        assert compute_links([], family.edges, layout_settings) == []
