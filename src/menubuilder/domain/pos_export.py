"""POS interchange export domain service."""

import dataclasses
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from menubuilder.domain.catalog import Catalog
from menubuilder.domain.entities import Item, ItemGroup
from menubuilder.domain.pos_format import encode_item

GROUP_START_PREFIX = "****Start****"


def group_start_item(first_item: Item, group: ItemGroup) -> Item:
    """Build the synthetic record emitted before the items of a group."""
    return dataclasses.replace(
        first_item, id=group.range_start, name=f"{GROUP_START_PREFIX} {group.name}"
    )


def order_for_export(
    items: Iterable[Item], item_groups: Optional[Mapping[int, ItemGroup]] = None
) -> list[Item]:
    """Return the records to emit, in export order.

    Without item groups every item is emitted in ascending ID order. With
    item groups, items are emitted group by group in ascending group ID, each
    known group preceded by its group-start record. Items without a group are
    left out.
    """
    items = sorted(items, key=lambda item: item.id)
    if not item_groups:
        return items

    by_group: dict[int, list[Item]] = {}
    for item in items:
        if item.item_group is not None:
            by_group.setdefault(item.item_group, []).append(item)

    records = []
    for group_id in sorted(by_group):
        members = by_group[group_id]
        group = item_groups.get(group_id)
        if group is not None:
            records.append(group_start_item(members[0], group))
        records.extend(members)
    return records


def export_items(
    items: Iterable[Item], item_groups: Optional[Mapping[int, ItemGroup]] = None
) -> str:
    """Encode items as POS interchange text, one record per line."""
    lines = [encode_item(item) for item in order_for_export(items, item_groups)]
    return "".join(line + "\n" for line in lines)


class PosExportService:
    """Service for writing the catalog's items as a POS interchange file."""

    def __init__(self, catalog: Catalog):
        """Initialize POS export service.

        Args:
            catalog: Catalog to export
        """
        self.catalog = catalog

    def _group_map(self, grouped: bool) -> Optional[dict[int, ItemGroup]]:
        return self.catalog.group_map() if grouped else None

    def export_text(self, grouped: bool = True) -> str:
        """Export all items as interchange text.

        Args:
            grouped: Order by item group with group-start records when the
                catalog has item groups

        Returns:
            Interchange text
        """
        return export_items(self.catalog.items, self._group_map(grouped))

    def export_file(self, file_path: str, grouped: bool = True) -> dict[str, Any]:
        """Write all items to an interchange file.

        Args:
            file_path: Destination path
            grouped: Order by item group with group-start records

        Returns:
            Dict with export statistics:
            - exported: number of item records written
            - group_starts: number of group-start records written
            - excluded: number of items left out for having no group
        """
        items = self.catalog.items
        item_groups = self._group_map(grouped)
        records = order_for_export(items, item_groups)
        if item_groups:
            exported = sum(1 for item in items if item.item_group is not None)
        else:
            exported = len(items)
        group_starts = len(records) - exported

        path = Path(file_path)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write("".join(encode_item(record) + "\n" for record in records))

        return {
            "exported": exported,
            "group_starts": group_starts,
            "excluded": len(items) - exported,
        }
