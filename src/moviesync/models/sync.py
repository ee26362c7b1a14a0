"""Sync audit log model and the status vocabularies used by the sync engine."""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncStatus(str, Enum):
    """Per-entity sync state stored on every syncable row."""

    UNSYNCED = "unsynced"
    SYNCED = "synced"
    CONFLICT = "conflict"
    FAILED = "failed"


class SyncDirection(str, Enum):
    TO_REMOTE = "to_remote"
    FROM_REMOTE = "from_remote"
    BIDIRECTIONAL = "bidirectional"


class LogStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


class SyncLog(SQLModel, table=True):
    """One row per sync attempt. Written once the attempt concludes, never updated."""

    id: Optional[int] = Field(default=None, primary_key=True)
    operation: str = "sync"
    entity_type: str = Field(index=True)
    local_id: Optional[int] = None  # unknown for a failed first pull
    remote_id: Optional[int] = None
    direction: str  # "to_remote", "from_remote", "bidirectional"
    status: str = Field(index=True)  # "success", "failed"
    error_message: Optional[str] = None
    started_at: Optional[datetime] = Field(
        default=None, sa_type=DateTime(timezone=True)
    )
    completed_at: datetime = Field(
        default_factory=_utcnow, sa_type=DateTime(timezone=True), index=True
    )
