"""Relational storage for generated zones."""
from .database import Base, ZoneRecord, create_db_engine
from .zone_store import ZoneStore

__all__ = ["Base", "ZoneRecord", "ZoneStore", "create_db_engine"]
