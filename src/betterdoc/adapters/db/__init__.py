"""Application database adapters."""

from betterdoc.adapters.db.app_db import AppDatabase
from betterdoc.adapters.db.schema import SCHEMA_SQL

__all__ = ["AppDatabase", "SCHEMA_SQL"]
