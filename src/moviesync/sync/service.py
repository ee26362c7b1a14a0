"""
EntitySyncer: moves one entity type between the local DB and WordPress Pods.

One instance per pod, composed from its PodSchema, its SQLModel table, a
WordPressClient and a RecordStore. build_syncers() wires all of them.

Push (sync_to_remote):
  1. Load the local row (LocalNotFoundError if absent)
  2. Transcode to a Pods payload
  3. PUT when wordpress_id is set, otherwise POST and persist the new id
     before anything else is written
  4. Mark synced, store the response in pods_data, log success

Pull (sync_from_remote):
  1. GET the WordPress record (RemoteNotFoundError on 404)
  2. Transcode to local columns
  3. Match on wordpress_id only; partial update, or create with the id set
  4. Mark synced, store the payload, log success

On any exception: a failed SyncLog is written, the row (if known) is marked
failed, and the original exception is re-raised. A store error while marking
the row is only logged. Exactly one SyncLog row per attempt, always written
after the attempt concludes.

Bidirectional relationships are not pushed to the related pods by this class.
Pods rewrites the inverse lists when the forward field is saved; the pull
after a push brings the result back. bidirectional_sync(verify_relationships=
True) re-reads the inverse side and flags disagreements as "conflict".
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type

from sqlmodel import SQLModel

from moviesync.errors import (
    LocalNotFoundError,
    RemoteIdConflictError,
    TranscodeError,
)
from moviesync.models.catalog import ENTITY_MODELS
from moviesync.models.sync import LogStatus, SyncDirection, SyncLog, SyncStatus
from moviesync.pods.schema import REGISTRY, FieldMapping, PodSchema, get_schema
from moviesync.pods.transcoder import from_remote_format, merge_into, to_remote_format
from moviesync.sync.store import RecordStore

logger = logging.getLogger(__name__)


class EntitySyncer:
    """Create/update/pull orchestration for a single pod."""

    def __init__(
        self,
        schema: PodSchema,
        model: Type[SQLModel],
        client,
        store: RecordStore,
    ):
        """
        Args:
            schema: Pod schema from moviesync.pods.schema.
            model: SQLModel table holding this entity type.
            client: WordPressClient instance (or AsyncMock in tests).
            store: RecordStore over the local database.
        """
        self.schema = schema
        self.model = model
        self.client = client
        self.store = store

    @property
    def entity_type(self) -> str:
        return self.schema.name

    # ─── Push ─────────────────────────────────────────────────────────────────

    async def sync_to_remote(self, local_id: int):
        """Push a local row to WordPress, creating the post on first push.

        Returns:
            The refreshed local row (sync_status "synced").

        Raises:
            Whatever failed (after the attempt is logged and the row marked).
        """
        started_at = datetime.now(timezone.utc)
        remote_id: Optional[int] = None
        try:
            entity = self.store.get(self.model, local_id)
            if entity is None:
                raise LocalNotFoundError(self.entity_type, local_id)

            remote_id = entity.wordpress_id
            payload = to_remote_format(self.schema, entity)

            if remote_id is not None:
                response = await self.client.update(
                    self.schema.rest_base, remote_id, payload
                )
            else:
                response = await self.client.create(self.schema.rest_base, payload)
                remote_id = _response_id(self.schema, response)
                entity = self._link_remote_id(entity, remote_id)

            entity.sync_status = SyncStatus.SYNCED.value
            entity.last_synced_at = datetime.now(timezone.utc)
            entity.pods_data = response
            entity = self.store.save(entity)

        except Exception as exc:
            self._log(
                SyncDirection.TO_REMOTE, LogStatus.FAILED,
                local_id=local_id, remote_id=remote_id,
                started_at=started_at, error=exc,
            )
            logger.warning(
                "Push of %s %s failed: %s", self.entity_type, local_id, exc
            )
            status = (
                SyncStatus.CONFLICT
                if isinstance(exc, RemoteIdConflictError)
                else SyncStatus.FAILED
            )
            self._mark_failed(local_id, status)
            raise

        self._log(
            SyncDirection.TO_REMOTE, LogStatus.SUCCESS,
            local_id=entity.id, remote_id=remote_id, started_at=started_at,
        )
        return entity

    def _link_remote_id(self, entity, remote_id: int):
        """Persist a freshly created WordPress id before the row is marked synced."""
        owner = self.store.find_by_remote_id(self.model, remote_id)
        if owner is not None and owner.id != entity.id:
            raise RemoteIdConflictError(self.entity_type, remote_id, owner.id)
        entity.wordpress_id = remote_id
        return self.store.save(entity)

    # ─── Pull ─────────────────────────────────────────────────────────────────

    async def sync_from_remote(self, remote_id: int):
        """Pull a WordPress record into the local DB, creating the row if needed.

        Returns:
            The refreshed local row (sync_status "synced").
        """
        started_at = datetime.now(timezone.utc)
        local_id: Optional[int] = None
        try:
            existing = self.store.find_by_remote_id(self.model, remote_id)
            if existing is not None:
                local_id = existing.id

            payload = await self.client.get(self.schema.rest_base, remote_id)
            fields = from_remote_format(self.schema, payload, full=existing is None)

            if existing is not None:
                entity = merge_into(existing, fields)
            else:
                entity = self.model(**fields)
                entity.wordpress_id = remote_id

            entity.sync_status = SyncStatus.SYNCED.value
            entity.last_synced_at = datetime.now(timezone.utc)
            entity.pods_data = payload
            entity = self.store.save(entity)
            local_id = entity.id

        except Exception as exc:
            self._log(
                SyncDirection.FROM_REMOTE, LogStatus.FAILED,
                local_id=local_id, remote_id=remote_id,
                started_at=started_at, error=exc,
            )
            logger.warning(
                "Pull of %s wp:%s failed: %s", self.entity_type, remote_id, exc
            )
            if local_id is not None:
                self._mark_failed(local_id, SyncStatus.FAILED)
            raise

        self._log(
            SyncDirection.FROM_REMOTE, LogStatus.SUCCESS,
            local_id=local_id, remote_id=remote_id, started_at=started_at,
        )
        return entity

    # ─── Both directions ──────────────────────────────────────────────────────

    async def bidirectional_sync(self, local_id: int, verify_relationships: bool = False):
        """Push local changes, then pull back what WordPress computed.

        Writes one "bidirectional" SyncLog row in addition to the rows of the
        inner push and pull. If the push fails the pull is not attempted.

        Args:
            local_id: Local primary key.
            verify_relationships: Re-read the inverse side of every
                bidirectional pick and mark the row "conflict" on mismatch.
        """
        started_at = datetime.now(timezone.utc)
        remote_id: Optional[int] = None
        mismatches: List[str] = []
        try:
            entity = await self.sync_to_remote(local_id)
            remote_id = entity.wordpress_id
            if remote_id is not None:
                entity = await self.sync_from_remote(remote_id)
            if verify_relationships:
                mismatches = await self.verify_relationships(entity)
        except Exception as exc:
            self._log(
                SyncDirection.BIDIRECTIONAL, LogStatus.FAILED,
                local_id=local_id, remote_id=remote_id,
                started_at=started_at, error=exc,
            )
            raise

        if mismatches:
            self._log(
                SyncDirection.BIDIRECTIONAL, LogStatus.FAILED,
                local_id=local_id, remote_id=remote_id,
                started_at=started_at, error="; ".join(mismatches),
            )
            logger.warning(
                "%s %s has relationship conflicts: %s",
                self.entity_type, local_id, mismatches,
            )
            return self._set_status(local_id, SyncStatus.CONFLICT)

        self._log(
            SyncDirection.BIDIRECTIONAL, LogStatus.SUCCESS,
            local_id=local_id, remote_id=remote_id, started_at=started_at,
        )
        return entity

    async def verify_relationships(self, entity) -> List[str]:
        """Check that Pods listed this entity on the inverse side of its picks.

        Only related rows that exist locally with a wordpress_id can be checked;
        the rest are skipped. Returns a description per mismatch.
        """
        own_title = getattr(entity, self.schema.title_field, None)
        own_keys = {str(entity.wordpress_id)}
        if own_title:
            own_keys.add(str(own_title))

        mismatches: List[str] = []
        for mapping in self.schema.fields:
            if not mapping.is_bidirectional or mapping.related_type not in ENTITY_MODELS:
                continue
            related_schema = get_schema(mapping.related_type)
            inverse = _inverse_mapping(related_schema, mapping)
            if inverse is None:
                continue

            for name in getattr(entity, mapping.local_name, None) or []:
                related = self._find_related(related_schema, name)
                if related is None or related.wordpress_id is None:
                    logger.debug(
                        "Cannot verify %s %r: not linked locally",
                        related_schema.name, name,
                    )
                    continue
                payload = await self.client.get(
                    related_schema.rest_base, related.wordpress_id
                )
                listed = from_remote_format(related_schema, payload).get(
                    inverse.local_name
                ) or []
                if not own_keys.intersection(str(v) for v in listed):
                    mismatches.append(
                        f"{related_schema.name} {name!r} ({inverse.remote_name}) "
                        f"does not list {self.entity_type} {own_title or entity.id!r}"
                    )
        return mismatches

    def _find_related(self, related_schema: PodSchema, name: str):
        model = ENTITY_MODELS[related_schema.name]
        if str(name).isdigit():
            row = self.store.find_by_remote_id(model, int(name))
            if row is not None:
                return row
        return self.store.find_by_field(model, related_schema.title_field, name)

    # ─── Internal helpers ─────────────────────────────────────────────────────

    def _set_status(self, local_id: int, status: SyncStatus):
        """Update only sync_status on the stored row; other columns untouched."""
        row = self.store.get(self.model, local_id)
        if row is None:
            return None
        row.sync_status = status.value
        return self.store.save(row)

    def _mark_failed(self, local_id: int, status: SyncStatus) -> None:
        """Status update after a failed attempt. Must not mask the original error."""
        try:
            self._set_status(local_id, status)
        except Exception as exc:
            logger.warning(
                "Could not mark %s %s as %s: %s",
                self.entity_type, local_id, status.value, exc,
            )

    def _log(
        self,
        direction: SyncDirection,
        status: LogStatus,
        *,
        local_id: Optional[int],
        remote_id: Optional[int],
        started_at: datetime,
        error: Any = None,
    ) -> SyncLog:
        return self.store.append_log(
            SyncLog(
                entity_type=self.entity_type,
                local_id=local_id,
                remote_id=remote_id,
                direction=direction.value,
                status=status.value,
                error_message=str(error) if error is not None else None,
                started_at=started_at,
                completed_at=datetime.now(timezone.utc),
            )
        )


def _response_id(schema: PodSchema, response: Dict[str, Any]) -> int:
    try:
        return int(response["id"])
    except (KeyError, TypeError, ValueError):
        raise TranscodeError(
            f"{schema.name}: WordPress create response has no usable 'id'"
        ) from None


def _inverse_mapping(related_schema: PodSchema, mapping: FieldMapping) -> Optional[FieldMapping]:
    for candidate in related_schema.fields:
        if candidate.remote_name == mapping.inverse:
            return candidate
    return None


def build_syncers(client, store: RecordStore) -> Dict[str, EntitySyncer]:
    """One EntitySyncer per registered pod, keyed by entity type."""
    return {
        name: EntitySyncer(schema, ENTITY_MODELS[name], client, store)
        for name, schema in REGISTRY.items()
    }
