"""Tests for undo/redo edit sessions."""

import pytest

from kintree.errors import InvalidRelationship, OrphanWouldResult
from kintree.history import EditSession

from conftest import make_person


@pytest.fixture
def session(family):
    return EditSession(family)


class TestUndoRedo:
    """Tests for snapshot history."""

    def test_undo_restores_previous_graph(self, session):
        edges = session.store.edges
        session.remove_person("A", cascade=True)
        assert "A" not in session.store

        assert session.undo() is True
        assert "A" in session.store
        assert session.store.edges == edges

    def test_redo_reapplies(self, session):
        session.add_person(make_person("F", 2000))
        session.add_relationship("B", "F", "parent")
        session.undo()
        assert session.store.children_of("B") == []

        assert session.redo() is True
        assert session.store.children_of("B") == ["F"]
        assert session.can_redo is False

    def test_new_edit_clears_redo(self, session):
        session.update_person("B", occupation="Baker")
        session.undo()
        assert session.can_redo
        session.update_person("C", occupation="Potter")
        assert not session.can_redo
        assert session.redo() is False

    def test_nothing_to_undo(self):
        session = EditSession()
        assert session.can_undo is False
        assert session.undo() is False


class TestRejectedEdits:
    """Failed mutations must not leave history entries."""

    def test_invalid_relationship_not_recorded(self, session):
        with pytest.raises(InvalidRelationship):
            session.add_relationship("B", "A", "parent")
        assert session.past == []

    def test_orphaning_removal_not_recorded(self, session):
        with pytest.raises(OrphanWouldResult):
            session.remove_person("D")
        assert not session.can_undo

    def test_removing_absent_edge_not_recorded(self, session):
        assert session.remove_relationship("B", "C", "spouse") is False
        assert not session.can_undo
        assert session.remove_relationship("A", "D", "spouse") is True
        assert session.can_undo


class TestLimit:
    def test_oldest_entries_dropped(self, store):
        session = EditSession(store, limit=3)
        for i in range(5):
            session.add_person(make_person(f"P{i}", 1900 + i))
        assert len(session.past) == 3

        while session.undo():
            pass
        # the first two additions fell off the history
        assert sorted(session.store.people) == ["P0", "P1"]
