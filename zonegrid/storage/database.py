"""Database engine and zone table."""
from datetime import datetime

from sqlalchemy import DateTime, String, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..exceptions import PersistenceFailure


class Base(DeclarativeBase):
    pass


class ZoneRecord(Base):
    """Persisted zone; boundary_coords holds the ring as a JSON array."""

    __tablename__ = "zones"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    neighborhood_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    boundary_coords: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


def create_db_engine(database_url: str) -> Engine:
    try:
        return create_engine(database_url)
    except ArgumentError as e:
        raise PersistenceFailure(f"Invalid database URL {database_url!r}: {e}") from e
