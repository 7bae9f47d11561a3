"""Data classes for family tree entities."""

from dataclasses import dataclass, field
from enum import Enum


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class RelationshipType(str, Enum):
    """Types of stored relationship edges."""

    PARENT = "parent"  # from_id is parent of to_id
    SPOUSE = "spouse"
    SIBLING = "sibling"

    @property
    def symmetric(self) -> bool:
        return self is not RelationshipType.PARENT


class SuggestionKind(str, Enum):
    MISSING_PARENT = "missingParent"
    AGE_ANOMALY = "ageAnomaly"
    POSSIBLE_DUPLICATE = "possibleDuplicate"
    UNLINKED_CO_PARENTS = "unlinkedCoParents"
    POSSIBLE_SPOUSE = "possibleSpouse"
    POSSIBLE_PARENT = "possibleParent"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"high": 0, "medium": 1, "low": 2}[self.value]


class SlotType(str, Enum):
    """Relationship slots a placeholder can offer."""

    PARENT = "parent"
    SPOUSE = "spouse"
    CHILD = "child"
    SIBLING = "sibling"


class LinkKind(str, Enum):
    STRAIGHT = "straight"
    ELBOW = "elbow"
    STEM = "stem"  # shared vertical run from a couple's midpoint
    BUS = "bus"  # horizontal run spanning a family's children
    CONNECTOR = "connector"  # bus to one child


@dataclass(frozen=True)
class Person:
    """One family member. Immutable; edits go through RelationshipStore.update_person."""

    id: str
    name: str
    gender: Gender
    birth_year: int
    death_year: int | None = None
    occupation: str | None = None
    birthplace: str | None = None
    notes: str | None = None
    image_ref: str | None = None


@dataclass(frozen=True)
class RelationshipEdge:
    from_id: str
    to_id: str
    type: RelationshipType
    bidirectional: bool = False

    @property
    def key(self) -> tuple[str, str, str]:
        """Undirected identity: type plus the sorted endpoint pair."""
        a, b = sorted((self.from_id, self.to_id))
        return (self.type.value, a, b)

    def involves(self, person_id: str) -> bool:
        return person_id in (self.from_id, self.to_id)

    def other(self, person_id: str) -> str:
        return self.to_id if person_id == self.from_id else self.from_id


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass
class PositionedNode:
    id: str
    x: float
    y: float
    person: Person = field(repr=False)
    generation: int = 0
    is_spouse: bool = False

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)


@dataclass(frozen=True)
class LinkGeometry:
    id: str
    path: tuple[Point, ...]
    relationship_type: RelationshipType
    person_ids: tuple[str, ...]  # parents first, child last for parent links
    kind: LinkKind


@dataclass(frozen=True)
class PlaceholderSlot:
    target_id: str
    slot: SlotType
    x: float
    y: float
    resolved: bool = True  # False when collision avoidance gave up


@dataclass(frozen=True)
class Suggestion:
    person_id: str
    kind: SuggestionKind
    priority: Priority
    message: str
    related_ids: tuple[str, ...] = ()
