"""Database layer for menubuilder application."""

from menubuilder.database.base import Database
from menubuilder.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
