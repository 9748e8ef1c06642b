"""Abstract database interface."""

from abc import ABC, abstractmethod

# Import the catalog module directly to avoid a circular import through domain/__init__.py
from menubuilder.domain.catalog import Catalog


class Database(ABC):
    """Abstract database interface for menubuilder catalog sessions."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def load_catalog(self) -> Catalog:
        """Load the stored catalog. Returns an empty catalog for a new database."""
        pass

    @abstractmethod
    def save_catalog(self, catalog: Catalog) -> None:
        """Replace the stored catalog with the given one in a single transaction."""
        pass
