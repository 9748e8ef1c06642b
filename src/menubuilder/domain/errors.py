"""Shared domain error messages and error types."""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class PosFormatError(DomainError):
    """Structural error in a POS interchange stream; the whole import aborts."""


class RuleStateError(DomainError):
    """Super Editor operation requested in the wrong editing state."""


class ValidationErrorKind(Enum):
    """Validation failure categories, in tie-break order groups."""

    INVALID_ID = "Invalid ID"
    DUPLICATE_ID = "Duplicate ID"
    EMPTY_NAME = "Empty name"
    NAME_TOO_LONG = "Name too long"
    INVALID_RANGE = "Invalid range"
    RANGE_OVERLAP = "Range overlap"
    INVALID_VALUE = "Invalid value"
    INVALID_RATE = "Invalid rate"
    INVALID_PRICE = "Invalid price"
    INVALID_REFERENCE = "Invalid reference"
    MISSING_ITEM_GROUP = "Missing item group"
    MISSING_REVENUE_CATEGORY = "Missing revenue category"


@dataclass(frozen=True)
class EntityValidationError:
    """A single validation failure, returned as a value."""

    kind: ValidationErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class InvalidEntityError(ValidationError):
    """Raised when an entity is rejected at the catalog boundary."""

    def __init__(self, error: EntityValidationError):
        super().__init__(str(error))
        self.error = error


class InvariantViolation(ValidationError):
    """Commit aborted because the result would break catalog invariants."""

    def __init__(self, errors: Sequence[tuple[int, EntityValidationError]]):
        self.errors = list(errors)
        details = "; ".join(f"item {item_id}: {error}" for item_id, error in self.errors)
        super().__init__(f"Commit aborted, {len(self.errors)} invariant violation(s): {details}")


def entity_not_found(kind_label: str, entity_id: int) -> str:
    """Return message for a missing entity."""
    return f"{kind_label} {entity_id} not found"


def duplicate_entity_id(kind_label: str, entity_id: int) -> str:
    """Return message for an identifier that is already taken."""
    return f"{kind_label} with ID {entity_id} already exists"


def entity_delete_blocked(kind_label: str, entity_id: int, item_count: int) -> str:
    """Return message when items still reference an entity."""
    return (
        f"Cannot delete {kind_label} {entity_id}: it is referenced by "
        f"{item_count} item{'s' if item_count != 1 else ''}. "
        "Please reassign or delete them first."
    )
