"""JSON import/export of family tree data."""

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import Any

from kintree.errors import ValidationError
from kintree.models import (
    Gender,
    LinkGeometry,
    Person,
    PlaceholderSlot,
    PositionedNode,
    RelationshipEdge,
    RelationshipType,
    Suggestion,
)
from kintree.store import RelationshipStore

logger = logging.getLogger(__name__)

# Accepted spellings for person fields -> Person attribute
FIELD_ALIASES = {
    "id": "id",
    "name": "name",
    "gender": "gender",
    "birth_year": "birth_year",
    "birthYear": "birth_year",
    "death_year": "death_year",
    "deathYear": "death_year",
    "occupation": "occupation",
    "birthplace": "birthplace",
    "notes": "notes",
    "image": "image_ref",
    "imageUrl": "image_ref",
    "image_ref": "image_ref",
    "imageRef": "image_ref",
}


def _year(value: Any, field: str, person_id: str) -> int | None:
    """Parse a year that may arrive as an int or a numeric string."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Person {person_id} has invalid {field}: {value!r}", person_id)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValidationError(
            f"Person {person_id} has invalid {field}: {value!r}", person_id
        ) from None


def parse_person(person_id: str, record: Mapping[str, Any]) -> Person:
    """Build a Person from a JSON record, accepting snake_case or camelCase keys."""
    fields: dict[str, Any] = {}
    for key, value in record.items():
        attr = FIELD_ALIASES.get(key)
        if attr and attr not in fields:
            fields[attr] = value

    if fields.setdefault("id", person_id) != person_id:
        raise ValidationError(f"Record keyed {person_id} has id {fields['id']}", person_id)
    if not fields.get("name"):
        raise ValidationError(f"Person {person_id} is missing a name", person_id)
    try:
        fields["gender"] = Gender(str(fields.get("gender", "")).lower())
    except ValueError:
        raise ValidationError(
            f"Person {person_id} has unknown gender {fields.get('gender')!r}", person_id
        ) from None

    birth_year = _year(fields.get("birth_year"), "birth year", person_id)
    if birth_year is None:
        raise ValidationError(f"Person {person_id} is missing a birth year", person_id)
    fields["birth_year"] = birth_year
    fields["death_year"] = _year(fields.get("death_year"), "death year", person_id)
    return Person(**fields)


def _edge(from_id: str, to_id: str, type_: RelationshipType) -> RelationshipEdge:
    return RelationshipEdge(from_id, to_id, type_, bidirectional=type_.symmetric)


def normalize_data(document: Mapping[str, Any]) -> tuple[dict[str, Person], list[RelationshipEdge]]:
    """
    Normalize a tree document into a person map and a deduplicated edge list.

    Two shapes are accepted:
    - ``{"people": {id: {...}}, "relationships": [{"from", "to", "type"}]}``
    - member-embedded records, where each person lists ``parents``, ``spouses``
      and ``children`` ids (either under ``people`` or as the whole document)

    Symmetric pairs listed from both sides collapse into one edge, and a
    parent/child pair listed on both the parent and the child is kept once.
    """
    if "people" in document:
        records = document["people"]
    else:
        records = {k: v for k, v in document.items() if k != "relationships"}
    if not isinstance(records, Mapping):
        raise ValidationError("Tree document must map person ids to records")

    people: dict[str, Person] = {}
    edges: list[RelationshipEdge] = []
    seen: set[tuple[str, str, str]] = set()

    def add(edge: RelationshipEdge) -> None:
        key = edge.key if edge.type.symmetric else (edge.type.value, edge.from_id, edge.to_id)
        if key not in seen:
            seen.add(key)
            edges.append(edge)

    # First pass: people
    for person_id, record in records.items():
        if not isinstance(record, Mapping):
            raise ValidationError(f"Record for {person_id} is not an object", str(person_id))
        people[str(person_id)] = parse_person(str(person_id), record)

    # Second pass: relationships embedded in member records
    for person_id, record in records.items():
        pid = str(person_id)
        for parent_id in record.get("parents") or []:
            add(_edge(str(parent_id), pid, RelationshipType.PARENT))
        for child_id in record.get("children") or []:
            add(_edge(pid, str(child_id), RelationshipType.PARENT))
        for spouse_id in record.get("spouses") or []:
            add(_edge(pid, str(spouse_id), RelationshipType.SPOUSE))
        for sibling_id in record.get("siblings") or []:
            add(_edge(pid, str(sibling_id), RelationshipType.SIBLING))

    # Explicit edge list
    for item in document.get("relationships") or []:
        try:
            type_ = RelationshipType(item["type"])
            from_id = str(item.get("from", item.get("fromId")))
            to_id = str(item.get("to", item.get("toId")))
        except (KeyError, ValueError, TypeError):
            raise ValidationError(f"Malformed relationship record: {item!r}") from None
        add(_edge(from_id, to_id, type_))

    return people, edges


def parse_tree(document: Mapping[str, Any]) -> RelationshipStore:
    """Normalize a document and load it into a validated store."""
    people, edges = normalize_data(document)
    store = RelationshipStore.from_data(people, edges)
    logger.info("Loaded %d people and %d relationships", len(people), len(store.edges))
    return store


def load_tree(path: Path) -> RelationshipStore:
    with open(path, encoding="utf-8") as f:
        return parse_tree(json.load(f))


def _plain(value: Any) -> Any:
    """Dataclass output -> JSON-ready structures (enums become their values)."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items() if k != "person"}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def dump_tree(store: RelationshipStore) -> dict[str, Any]:
    """Serialize a store to the ``people`` + ``relationships`` document."""
    return {
        "people": {pid: _plain(asdict(p)) for pid, p in sorted(store.people.items())},
        "relationships": [
            {"from": e.from_id, "to": e.to_id, "type": e.type.value} for e in store.edges
        ],
    }


def save_tree(store: RelationshipStore, path: Path) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(dump_tree(store), f, indent=2)


def dump_derived(
    nodes: Iterable[PositionedNode],
    links: Iterable[LinkGeometry],
    suggestions: Iterable[Suggestion] = (),
    placeholders: Iterable[PlaceholderSlot] = (),
) -> dict[str, Any]:
    """Derived structures in the shape a renderer consumes."""
    return {
        "nodes": [_plain(asdict(n)) for n in nodes],
        "links": [_plain(asdict(link)) for link in links],
        "placeholders": [_plain(asdict(p)) for p in placeholders],
        "suggestions": [_plain(asdict(s)) for s in suggestions],
    }
