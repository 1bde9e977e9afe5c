"""Ledger store for tripledger."""

from tripledger.database.base import Database
from tripledger.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
