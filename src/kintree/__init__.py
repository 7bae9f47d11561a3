"""Family tree relationship graph, layout and link derivation."""

from kintree.errors import (
    DuplicateRelationship,
    FamilyTreeError,
    InvalidRelationship,
    OrphanWouldResult,
    PersonNotFound,
    ValidationError,
)
from kintree.history import EditSession
from kintree.layout import compute_layout
from kintree.links import compute_links
from kintree.models import (
    Gender,
    LinkGeometry,
    LinkKind,
    Person,
    PlaceholderSlot,
    Point,
    PositionedNode,
    Priority,
    RelationshipEdge,
    RelationshipType,
    SlotType,
    Suggestion,
    SuggestionKind,
)
from kintree.placeholders import compute_placeholders
from kintree.store import RelationshipStore
from kintree.suggestions import compute_suggestions

__all__ = [
    "DuplicateRelationship",
    "EditSession",
    "FamilyTreeError",
    "Gender",
    "InvalidRelationship",
    "LinkGeometry",
    "LinkKind",
    "OrphanWouldResult",
    "Person",
    "PersonNotFound",
    "PlaceholderSlot",
    "Point",
    "PositionedNode",
    "Priority",
    "RelationshipEdge",
    "RelationshipStore",
    "RelationshipType",
    "SlotType",
    "Suggestion",
    "SuggestionKind",
    "ValidationError",
    "compute_layout",
    "compute_links",
    "compute_placeholders",
    "compute_suggestions",
]
