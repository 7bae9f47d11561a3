"""Errors raised by family graph mutations."""


class FamilyTreeError(Exception):
    """Base class for rejected graph mutations.

    Each error carries a stable ``kind`` for callers that surface notifications
    and the ids of the people involved.
    """

    kind = "familyTreeError"

    def __init__(self, message: str, *person_ids: str):
        super().__init__(message)
        self.person_ids = tuple(person_ids)


class ValidationError(FamilyTreeError):
    """A person record has malformed fields."""

    kind = "validationError"


class PersonNotFound(FamilyTreeError, KeyError):
    kind = "personNotFound"

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class InvalidRelationship(FamilyTreeError):
    """Self-edge, third parent, or parent cycle."""

    kind = "invalidRelationship"


class DuplicateRelationship(FamilyTreeError):
    kind = "duplicateRelationship"


class OrphanWouldResult(FamilyTreeError):
    """Removing the person would detach their children without a cascade."""

    kind = "orphanWouldResult"
