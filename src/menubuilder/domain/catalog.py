"""In-memory catalog of every entity kind, keyed by identifier."""

from typing import Iterable, Iterator, Optional

from menubuilder.domain.entities import (
    Entity,
    EntityKind,
    EntityRef,
    Item,
    ItemGroup,
    item_references,
)
from menubuilder.domain.errors import (
    InvalidEntityError,
    InvariantViolation,
    NotFoundError,
    entity_not_found,
)
from menubuilder.domain.validation import collect_errors, validate_entity
from menubuilder.utils.money import format_money


class Catalog:
    """Process-wide collections of entities, one mapping per kind.

    The catalog has a single writer. Entities are immutable, so copies of the
    catalog share entity objects and only duplicate the mappings.
    """

    def __init__(self) -> None:
        self._entities: dict[EntityKind, dict[int, Entity]] = {kind: {} for kind in EntityKind}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Catalog):
            return NotImplemented
        return self._entities == other._entities

    def __repr__(self) -> str:
        counts = ", ".join(
            f"{kind.value}={len(entities)}" for kind, entities in self._entities.items() if entities
        )
        return f"Catalog({counts})"

    def copy(self) -> "Catalog":
        """Return an independent copy of the catalog."""
        clone = Catalog()
        clone._entities = {kind: dict(entities) for kind, entities in self._entities.items()}
        return clone

    def clear(self) -> None:
        """Remove every entity of every kind."""
        for entities in self._entities.values():
            entities.clear()

    def insert(self, entity: Entity) -> None:
        """Insert an entity, replacing any entry of the same kind and ID.

        Only rules that concern the entity alone are checked here; cross-entity
        invariants are enforced by ``commit_items`` and the editing service.

        Raises:
            InvalidEntityError: If the entity is a draft or structurally invalid
        """
        error = validate_entity(entity, catalog=None, strict=False)
        if error is not None:
            raise InvalidEntityError(error)
        self._entities[entity.kind][entity.id] = entity

    def remove(self, kind: EntityKind, entity_id: int) -> Entity:
        """Remove and return an entity.

        Raises:
            NotFoundError: If no such entity exists
        """
        try:
            return self._entities[kind].pop(entity_id)
        except KeyError:
            raise NotFoundError(entity_not_found(kind.label, entity_id)) from None

    def get(self, kind: EntityKind, entity_id: int) -> Optional[Entity]:
        """Get an entity by kind and ID."""
        return self._entities[kind].get(entity_id)

    def contains(self, kind: EntityKind, entity_id: int) -> bool:
        """Return True if an entity of the kind exists with the ID."""
        return entity_id in self._entities[kind]

    def resolve_name(self, kind: EntityKind, entity_id: int) -> Optional[str]:
        """Return the name of a referenced entity, or None if unresolved."""
        entity = self.get(kind, entity_id)
        return entity.name if entity is not None else None

    def iter(self, kind: EntityKind) -> Iterator[Entity]:
        """Iterate over entities of a kind in ascending ID order."""
        entities = self._entities[kind]
        for entity_id in sorted(entities):
            yield entities[entity_id]

    def ids(self, kind: EntityKind) -> list[int]:
        """Return the sorted identifiers of a kind."""
        return sorted(self._entities[kind])

    def count(self, kind: EntityKind) -> int:
        """Return the number of entities of a kind."""
        return len(self._entities[kind])

    @property
    def items(self) -> list[Item]:
        """All items in ascending ID order."""
        return list(self.iter(EntityKind.ITEM))

    def group_map(self) -> dict[int, ItemGroup]:
        """Return item groups keyed by ID, as used for grouped export."""
        return {group.id: group for group in self.iter(EntityKind.ITEM_GROUP)}

    def unresolved_references(self, item: Item) -> list[EntityRef]:
        """Return the references of an item that do not resolve in the catalog."""
        return [ref for ref in item_references(item) if not self.contains(ref.kind, ref.id)]

    def referencing_items(self, ref: EntityRef) -> list[Item]:
        """Return the items that reference an entity."""
        if ref.kind is EntityKind.ITEM:
            return []
        return [item for item in self.iter(EntityKind.ITEM) if ref in item_references(item)]

    def commit_items(self, items: Iterable[Item]) -> list[int]:
        """Write modified items atomically.

        Every item is validated against the catalog as it would look after the
        write. If any item would break an invariant, nothing is written.

        Args:
            items: Modified item copies

        Returns:
            Sorted IDs of the written items

        Raises:
            InvariantViolation: If any item fails validation
        """
        candidate = self.copy()
        written = []
        for item in items:
            candidate._entities[EntityKind.ITEM][item.id] = item
            written.append(item.id)

        violations = []
        for item_id in sorted(written):
            item = candidate._entities[EntityKind.ITEM][item_id]
            for error in collect_errors(item, candidate, strict=False):
                violations.append((item_id, error))
        if violations:
            raise InvariantViolation(violations)

        self._entities = candidate._entities
        return sorted(written)

    def describe_prices(self, item: Item) -> str:
        """Render an item's prices with price level names."""
        parts = []
        if item.default_price is not None:
            parts.append(f"Default: ${format_money(item.default_price)}")
        for entry in item.item_prices:
            name = self.resolve_name(EntityKind.PRICE_LEVEL, entry.price_level_id)
            label = name or f"Level {entry.price_level_id}"
            parts.append(f"{label}: ${format_money(entry.price)}")
        return ", ".join(parts)

    def describe_choice_groups(self, item: Item) -> str:
        """Render an item's choice groups with names and sequence numbers."""
        return ", ".join(
            f"{self.resolve_name(EntityKind.CHOICE_GROUP, entry.group_id) or entry.group_id}"
            f" (#{entry.sequence})"
            for entry in item.choice_groups
        )

    def describe_printers(self, item: Item) -> str:
        """Render an item's printer logicals, marking the primary one."""
        return ", ".join(
            f"{self.resolve_name(EntityKind.PRINTER_LOGICAL, entry.printer_id) or entry.printer_id}"
            f"{' *' if entry.primary else ''}"
            for entry in item.printer_logicals
        )
