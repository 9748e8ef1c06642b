"""Domain layer for menubuilder application."""

from menubuilder.domain.catalog import Catalog
from menubuilder.domain.entity_service import EntityService
from menubuilder.domain.pos_export import PosExportService
from menubuilder.domain.pos_import import PosImportService
from menubuilder.domain.superedit import SuperEditSession

__all__ = [
    "Catalog",
    "EntityService",
    "PosExportService",
    "PosImportService",
    "SuperEditSession",
]
