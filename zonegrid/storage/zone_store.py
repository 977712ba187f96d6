"""Zone persistence with all-or-nothing replacement."""
import json
from typing import List, Sequence

from loguru import logger
from sqlalchemy import delete, func, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import PersistenceFailure
from ..models import Zone
from .database import Base, ZoneRecord


class ZoneStore:
    """Read and replace the zones table."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def create_schema(self) -> None:
        """Create the zones table if it does not exist yet."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise PersistenceFailure(f"Failed to create zones table: {e}") from e

    def replace_all(self, zones: Sequence[Zone]) -> int:
        """Swap the stored generation for `zones` in one transaction.

        The delete and the batched insert commit together; on any store
        error the transaction rolls back, so the previous generation stays
        in place, and PersistenceFailure is raised.
        """
        rows = [
            {
                "id": zone.id,
                "name": zone.name,
                "neighborhood_name": zone.neighborhood_name,
                "boundary_coords": json.dumps(zone.boundary_coords),
                "created_at": zone.created_at,
            }
            for zone in zones
        ]
        try:
            with Session(self.engine) as session, session.begin():
                removed = session.execute(delete(ZoneRecord.__table__)).rowcount
                if rows:
                    session.execute(insert(ZoneRecord.__table__), rows)
        except SQLAlchemyError as e:
            logger.error(f"Zone replace rolled back: {e}")
            raise PersistenceFailure(f"Failed to replace zones: {e}") from e

        logger.info(f"Replaced {removed} stored zones with {len(rows)} new zones")
        return len(rows)

    def list_zones(self) -> List[Zone]:
        try:
            with Session(self.engine) as session:
                records = session.scalars(
                    select(ZoneRecord).order_by(ZoneRecord.neighborhood_name, ZoneRecord.name)
                ).all()
                return [
                    Zone(
                        id=r.id,
                        name=r.name,
                        neighborhood_name=r.neighborhood_name,
                        boundary_coords=json.loads(r.boundary_coords),
                        created_at=r.created_at,
                    )
                    for r in records
                ]
        except SQLAlchemyError as e:
            raise PersistenceFailure(f"Failed to read zones: {e}") from e

    def count(self) -> int:
        try:
            with Session(self.engine) as session:
                return session.scalar(select(func.count()).select_from(ZoneRecord))
        except SQLAlchemyError as e:
            raise PersistenceFailure(f"Failed to count zones: {e}") from e
