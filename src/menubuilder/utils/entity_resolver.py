"""Utility for resolving entity kinds and entity names to IDs."""

from menubuilder.domain.catalog import Catalog
from menubuilder.domain.entities import REFERENCE_KINDS, EntityKind


def parse_kind(kind: str) -> EntityKind:
    """Resolve a kind name such as ``tax-group`` or ``"Tax Group"``.

    Args:
        kind: Kind name; case, spaces, hyphens and underscores are interchangeable

    Returns:
        EntityKind

    Raises:
        ValueError: If the name is not a reference kind
    """
    normalized = kind.strip().lower().replace("-", "_").replace(" ", "_")
    for candidate in REFERENCE_KINDS:
        if candidate.value == normalized:
            return candidate
    choices = ", ".join(k.value.replace("_", "-") for k in REFERENCE_KINDS)
    raise ValueError(f"Unknown entity kind '{kind}' (choose from {choices})")


def resolve_entity(catalog: Catalog, kind: EntityKind, entity: str | int) -> int:
    """Resolve an entity name or ID to its ID.

    Args:
        catalog: Catalog to search
        kind: Entity kind
        entity: Entity name (str) or ID (int or string representation of int)

    Returns:
        Entity ID

    Raises:
        ValueError: If no entity matches, or the name matches several
    """
    if isinstance(entity, str):
        try:
            entity_id = int(entity)
        except ValueError:
            return _resolve_name(catalog, kind, entity)
    else:
        entity_id = entity

    if not catalog.contains(kind, entity_id):
        raise ValueError(f"{kind.label} ID {entity_id} not found")
    return entity_id


def _resolve_name(catalog: Catalog, kind: EntityKind, name: str) -> int:
    folded = name.casefold()
    matches = [e.id for e in catalog.iter(kind) if e.name.casefold() == folded]
    if not matches:
        raise ValueError(f"{kind.label} '{name}' not found")
    if len(matches) > 1:
        ids = ", ".join(str(m) for m in matches)
        raise ValueError(f"{kind.label} name '{name}' is ambiguous (IDs {ids})")
    return matches[0]
