"""POS interchange import domain service."""

from pathlib import Path
from typing import Any, Iterable

from menubuilder.domain.catalog import Catalog
from menubuilder.domain.entities import (
    ENTITY_TYPES,
    EntityKind,
    EntityRef,
    Item,
    ItemGroup,
    PriceLevel,
    PriceLevelType,
    item_references,
    placeholder_name,
)
from menubuilder.domain.pos_format import RecordError, decode_item, is_header_record, split_records
from menubuilder.domain.validation import group_range_error, validate_entity


def complete_references(catalog: Catalog, items: Iterable[Item]) -> dict[str, list]:
    """Create placeholder entities for identifiers the items reference.

    Placeholders are named ``"<Kind> <id>"``. A manufactured item group spans
    the IDs of the items that reference it. References that cannot be
    created (identifier outside the kind's range, or a group range that would
    overlap an existing group) are reported instead.

    Args:
        catalog: Catalog to complete
        items: Items whose references should resolve

    Returns:
        Dict with:
        - created: list of EntityRef for the entities added
        - referenced_but_missing: list of diagnostic messages
    """
    needed: dict[EntityRef, list[int]] = {}
    store_levels: set[int] = set()
    for item in items:
        store_levels.update(item.store_price_level)
        for ref in item_references(item):
            if not catalog.contains(ref.kind, ref.id):
                needed.setdefault(ref, []).append(item.id)

    created = []
    missing = []
    for ref, item_ids in needed.items():
        kind = ref.kind
        if not kind.accepts_id(ref.id):
            low, high = kind.id_range
            missing.append(f"{ref}: ID outside the allowed range {low}-{high}")
            continue

        name = placeholder_name(kind, ref.id)
        if kind is EntityKind.ITEM_GROUP:
            entity = ItemGroup(
                id=ref.id, name=name, range_start=min(item_ids), range_end=max(item_ids) + 1
            )
            overlapping = next(
                (g for g in catalog.iter(EntityKind.ITEM_GROUP) if g.overlaps(entity)), None
            )
            if overlapping is not None:
                missing.append(
                    f"{ref}: range {entity.range_start}-{entity.range_end - 1} overlaps "
                    f"item group '{overlapping.name}'"
                )
                continue
        elif kind is EntityKind.PRICE_LEVEL:
            level_type = PriceLevelType.STORE if ref.id in store_levels else PriceLevelType.ENTERPRISE
            entity = PriceLevel(id=ref.id, name=name, level_type=level_type)
        else:
            entity = ENTITY_TYPES[kind](id=ref.id, name=name)

        catalog.insert(entity)
        created.append(ref)

    return {"created": created, "referenced_but_missing": missing}


class PosImportService:
    """Service for loading POS interchange files into a catalog."""

    def __init__(self, catalog: Catalog):
        """Initialize POS import service.

        Args:
            catalog: Catalog to populate
        """
        self.catalog = catalog

    def import_text(self, text: str, replace: bool = False) -> dict[str, Any]:
        """Import items from POS interchange text.

        The whole stream is split before the catalog is touched, so a
        structural error leaves the catalog unchanged.

        Args:
            text: Interchange text, one record per line
            replace: Clear the catalog first instead of merging into it

        Returns:
            Dict with import statistics:
            - imported: number of items imported
            - skipped: number of records skipped
            - errors: list of error messages for skipped records
            - created: list of EntityRef for placeholder entities
            - referenced_but_missing: list of unresolvable references

        Raises:
            PosFormatError: If a record has the wrong field count or the
                input contains the reserved separator character
        """
        records = split_records(text)

        skipped = 0
        errors = []
        decoded = []
        for index, record in enumerate(records):
            if index == 0 and is_header_record(record.fields):
                continue
            try:
                item = decode_item(record.fields)
            except RecordError as e:
                errors.append(f"Line {record.line_number}: {e}")
                skipped += 1
                continue

            error = validate_entity(item, strict=False)
            if error is not None:
                errors.append(f"Line {record.line_number}: {error}")
                skipped += 1
                continue
            decoded.append((record.line_number, item))

        if replace:
            self.catalog.clear()

        # Groups already in the catalog keep their range; records outside it are skipped
        items = []
        for line_number, item in decoded:
            group = (
                self.catalog.get(EntityKind.ITEM_GROUP, item.item_group)
                if item.item_group is not None
                else None
            )
            if group is not None and not group.contains(item.id):
                errors.append(f"Line {line_number}: {group_range_error(item, group)}")
                skipped += 1
                continue
            items.append(item)

        completion = complete_references(self.catalog, items)
        for item in items:
            self.catalog.insert(item)

        return {
            "imported": len(items),
            "skipped": skipped,
            "errors": errors,
            "created": completion["created"],
            "referenced_but_missing": completion["referenced_but_missing"],
        }

    def import_file(self, file_path: str, replace: bool = False) -> dict[str, Any]:
        """Import items from a POS interchange file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            PosFormatError: On a structural error in the file
        """
        return self.import_text(_read_text(file_path), replace=replace)

    def verify_text(self, text: str) -> int:
        """Check that every record has the expected number of fields.

        Returns:
            Number of item records (a leading header row is not counted)

        Raises:
            PosFormatError: On the first structural error
        """
        records = split_records(text)
        if records and is_header_record(records[0].fields):
            return len(records) - 1
        return len(records)

    def verify_file(self, file_path: str) -> int:
        """Check the structure of a POS interchange file without importing it."""
        return self.verify_text(_read_text(file_path))


def _read_text(file_path: str) -> str:
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"POS file not found: {file_path}")
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        return f.read()
