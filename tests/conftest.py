"""Pytest fixtures for family tree tests."""

import pytest

from kintree.config import LayoutSettings
from kintree.models import Gender, Person
from kintree.store import RelationshipStore


def make_person(pid: str, birth_year: int, gender: str = "male", **kwargs) -> Person:
    return Person(id=pid, name=kwargs.pop("name", f"Person {pid}"), gender=Gender(gender),
                  birth_year=birth_year, **kwargs)


@pytest.fixture
def layout_settings():
    """Default card geometry: 160x90 cards, siblings 200 apart, levels 162 apart."""
    return LayoutSettings()


@pytest.fixture
def store():
    return RelationshipStore()


@pytest.fixture
def family(store):
    """
    A (1950, f) married to D (1948, m) with three children B, C and E.
    """
    store.add_person(make_person("A", 1950, "female"))
    store.add_person(make_person("D", 1948))
    store.add_person(make_person("B", 1975))
    store.add_person(make_person("C", 1978, "female"))
    store.add_person(make_person("E", 1980))
    store.add_relationship("A", "D", "spouse")
    for child in ("B", "C", "E"):
        store.add_relationship("A", child, "parent")
        store.add_relationship("D", child, "parent")
    return store
