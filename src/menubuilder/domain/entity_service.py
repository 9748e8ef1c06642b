"""Single-entity editing domain service."""

import dataclasses
from typing import Optional

from menubuilder.domain.catalog import Catalog
from menubuilder.domain.entities import (
    Entity,
    EntityKind,
    EntityRef,
    Item,
    ItemGroup,
    is_draft,
)
from menubuilder.domain.errors import (
    DependencyError,
    EntityValidationError,
    InvalidEntityError,
    NotFoundError,
    ValidationError,
    ValidationErrorKind,
    duplicate_entity_id,
    entity_delete_blocked,
    entity_not_found,
)
from menubuilder.domain.validation import validate_entity


class EntityService:
    """Service for creating, editing and deleting catalog entities.

    Saves made here enforce every rule, including the display name limit.
    """

    def __init__(self, catalog: Catalog):
        """Initialize entity service.

        Args:
            catalog: Catalog to edit
        """
        self.catalog = catalog

    def create(self, entity: Entity) -> int:
        """Save a new entity.

        A draft entity is given the next free identifier for its kind (for
        items, the next free ID inside the item's group range).

        Args:
            entity: Entity to save, draft or with a chosen identifier

        Returns:
            Identifier of the saved entity

        Raises:
            InvalidEntityError: If the identifier is taken or the entity is invalid
            NotFoundError: If a draft item names a missing item group
        """
        kind = entity.kind
        if is_draft(entity.id):
            entity = dataclasses.replace(entity, id=self._next_id(entity))
        elif self.catalog.contains(kind, entity.id):
            raise InvalidEntityError(
                EntityValidationError(
                    ValidationErrorKind.DUPLICATE_ID, duplicate_entity_id(kind.label, entity.id)
                )
            )

        self._validate(entity)
        self.catalog.insert(entity)
        return entity.id

    def update(self, entity: Entity) -> None:
        """Replace an existing entity.

        Raises:
            NotFoundError: If the entity doesn't exist
            InvalidEntityError: If the new version is invalid
        """
        if not self.catalog.contains(entity.kind, entity.id):
            raise NotFoundError(entity_not_found(entity.kind.label, entity.id))

        self._validate(entity)
        if isinstance(entity, ItemGroup):
            self._check_group_members(entity)
        self.catalog.insert(entity)

    def rename(self, kind: EntityKind, entity_id: int, name: str) -> None:
        """Change the name of an entity.

        Raises:
            NotFoundError: If the entity doesn't exist
            InvalidEntityError: If the name is invalid
        """
        entity = self.get(kind, entity_id)
        if entity is None:
            raise NotFoundError(entity_not_found(kind.label, entity_id))
        self.update(dataclasses.replace(entity, name=name))

    def delete(self, kind: EntityKind, entity_id: int) -> None:
        """Delete an entity.

        Raises:
            NotFoundError: If the entity doesn't exist
            DependencyError: If items still reference the entity
        """
        if not self.catalog.contains(kind, entity_id):
            raise NotFoundError(entity_not_found(kind.label, entity_id))

        item_count = len(self.catalog.referencing_items(EntityRef(kind, entity_id)))
        if item_count > 0:
            raise DependencyError(entity_delete_blocked(kind.label, entity_id, item_count))

        self.catalog.remove(kind, entity_id)

    def get(self, kind: EntityKind, entity_id: int) -> Optional[Entity]:
        """Get an entity by kind and ID.

        Returns:
            Entity or None if not found
        """
        return self.catalog.get(kind, entity_id)

    def list_entities(self, kind: EntityKind) -> list[Entity]:
        """List entities of a kind in ascending ID order."""
        return list(self.catalog.iter(kind))

    def next_item_id(self, item_group_id: int) -> int:
        """Return the lowest unused item ID inside an item group's range.

        Raises:
            NotFoundError: If the item group doesn't exist
            ValidationError: If every ID in the range is taken
        """
        group = self.catalog.get(EntityKind.ITEM_GROUP, item_group_id)
        if group is None:
            raise NotFoundError(entity_not_found(EntityKind.ITEM_GROUP.label, item_group_id))

        used = set(self.catalog.ids(EntityKind.ITEM))
        for item_id in range(group.range_start, group.range_end):
            if item_id > 0 and item_id not in used:
                return item_id
        raise ValidationError(f"Item group '{group.name}' has no free item IDs")

    def next_id(self, kind: EntityKind) -> int:
        """Return the lowest unused identifier for a reference kind.

        Items without a group get one past the highest item ID. Zero is never
        handed out because the interchange format reads it as "unset".

        Raises:
            ValidationError: If the kind's identifier range is exhausted
        """
        used = set(self.catalog.ids(kind))
        bounds = kind.id_range
        if bounds is None:
            return max(used, default=0) + 1

        low, high = bounds
        for entity_id in range(max(low, 1), high + 1):
            if entity_id not in used:
                return entity_id
        raise ValidationError(f"No free {kind.label} IDs between {low} and {high}")

    def _next_id(self, entity: Entity) -> int:
        if isinstance(entity, Item) and entity.item_group is not None:
            return self.next_item_id(entity.item_group)
        return self.next_id(entity.kind)

    def _validate(self, entity: Entity) -> None:
        error = validate_entity(entity, self.catalog, strict=True)
        if error is not None:
            raise InvalidEntityError(error)

    def _check_group_members(self, group: ItemGroup) -> None:
        for item in self.catalog.referencing_items(EntityRef(group.kind, group.id)):
            if item.item_group == group.id and not group.contains(item.id):
                raise InvalidEntityError(
                    EntityValidationError(
                        ValidationErrorKind.INVALID_RANGE,
                        f"Item {item.id} would fall outside the range of item group '{group.name}'",
                    )
                )
