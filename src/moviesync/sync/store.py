"""
RecordStore: the sync engine's handle on the local database.

Constructed with an SQLAlchemy engine and passed into every EntitySyncer, so
tests can hand in an in-memory SQLite engine. Each method opens its own short
Session; rows come back detached with their columns loaded.
"""
from typing import List, Optional, Type, TypeVar

from sqlmodel import Session, SQLModel, select

from moviesync.models.sync import SyncLog

ModelT = TypeVar("ModelT", bound=SQLModel)


class RecordStore:
    def __init__(self, engine):
        """
        Args:
            engine: SQLAlchemy engine (SQLModel create_engine result).
        """
        self.engine = engine

    def get(self, model: Type[ModelT], local_id: int) -> Optional[ModelT]:
        with Session(self.engine) as s:
            return s.get(model, local_id)

    def find_by_remote_id(self, model: Type[ModelT], remote_id: int) -> Optional[ModelT]:
        """Look up a row by WordPress id, the only cross-store join key."""
        with Session(self.engine) as s:
            return s.exec(
                select(model).where(model.wordpress_id == remote_id)
            ).first()

    def find_by_field(self, model: Type[ModelT], name: str, value) -> Optional[ModelT]:
        with Session(self.engine) as s:
            return s.exec(
                select(model).where(getattr(model, name) == value)
            ).first()

    def save(self, row: ModelT) -> ModelT:
        """Insert or update a row and return it refreshed."""
        with Session(self.engine) as s:
            s.add(row)
            s.commit()
            s.refresh(row)
        return row

    def append_log(self, entry: SyncLog) -> SyncLog:
        with Session(self.engine) as s:
            s.add(entry)
            s.commit()
            s.refresh(entry)
        return entry

    def list_logs(
        self,
        entity_type: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 50,
    ) -> List[SyncLog]:
        """Sync log entries, newest first."""
        query = select(SyncLog)
        if entity_type:
            query = query.where(SyncLog.entity_type == entity_type)
        if status:
            query = query.where(SyncLog.status == status)
        query = query.order_by(SyncLog.completed_at.desc(), SyncLog.id.desc()).limit(limit)
        with Session(self.engine) as s:
            return list(s.exec(query).all())
