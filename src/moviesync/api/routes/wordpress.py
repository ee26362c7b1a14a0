"""WordPress/Pods sync routes: push, pull, bidirectional, bulk, logs."""
import logging
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel

from moviesync.api.deps import build_wordpress_client, get_store, get_wordpress_client
from moviesync.config import get_settings
from moviesync.errors import (
    LocalNotFoundError,
    RemoteIdConflictError,
    RemoteNotFoundError,
    SyncError,
    TranscodeError,
    TransportError,
    UnknownEntityTypeError,
)
from moviesync.models.catalog import ENTITY_MODELS
from moviesync.models.sync import SyncLog
from moviesync.pods.client import WordPressClient
from moviesync.pods.schema import REGISTRY, get_schema
from moviesync.sync.bulk import bulk_sync_from_remote
from moviesync.sync.service import EntitySyncer
from moviesync.sync.store import RecordStore

logger = logging.getLogger(__name__)

router = APIRouter()

_STATUS_CODES = (
    (UnknownEntityTypeError, 404),
    (LocalNotFoundError, 404),
    (RemoteNotFoundError, 404),
    (RemoteIdConflictError, 409),
    (TranscodeError, 422),
    (TransportError, 502),
)


class SyncResponse(BaseModel):
    success: bool
    message: str
    entity_type: str
    local_id: Optional[int]
    remote_id: Optional[int]
    sync_status: str


def _http_error(exc: SyncError) -> HTTPException:
    status_code = next(
        (code for kind, code in _STATUS_CODES if isinstance(exc, kind)), 500
    )
    return HTTPException(
        status_code=status_code,
        detail={"success": False, "error": type(exc).__name__, "message": str(exc)},
    )


def _syncer(entity_type: str, client, store: RecordStore) -> EntitySyncer:
    try:
        schema = get_schema(entity_type)
    except UnknownEntityTypeError as exc:
        raise _http_error(exc)
    return EntitySyncer(schema, ENTITY_MODELS[entity_type], client, store)


def _response(entity_type: str, entity, message: str) -> SyncResponse:
    return SyncResponse(
        success=True,
        message=message,
        entity_type=entity_type,
        local_id=entity.id,
        remote_id=entity.wordpress_id,
        sync_status=entity.sync_status,
    )


async def _do_bulk_sync(entity_type: str) -> None:
    """Background task: pull every record of one pod."""
    store = get_store()
    async with build_wordpress_client() as client:
        syncer = EntitySyncer(
            get_schema(entity_type), ENTITY_MODELS[entity_type], client, store
        )
        await bulk_sync_from_remote(
            syncer, client, page_size=get_settings().bulk_page_size
        )


@router.get("/health")
async def health_check(client: WordPressClient = Depends(get_wordpress_client)):
    """Check the WordPress API and every pod endpoint."""
    return await client.health_check(schema.rest_base for schema in REGISTRY.values())


@router.get("/pods/config")
def pods_config():
    """Return the field mapping of every synchronised pod."""
    return {
        "pods": [
            {
                "name": schema.name,
                "rest_base": schema.rest_base,
                "fields": [f.remote_name for f in schema.fields],
                "bidirectional_fields": schema.bidirectional_fields,
            }
            for schema in REGISTRY.values()
        ]
    }


@router.get("/sync/logs", response_model=List[SyncLog])
def sync_logs(
    entity_type: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 50,
    store: RecordStore = Depends(get_store),
):
    """Sync log entries, newest first."""
    return store.list_logs(entity_type=entity_type, status=status, limit=limit)


@router.post("/sync/{entity_type}/bulk")
def bulk_sync(entity_type: str, background_tasks: BackgroundTasks):
    """Pull every record of a pod from WordPress. Runs in the background."""
    try:
        get_schema(entity_type)
    except UnknownEntityTypeError as exc:
        raise _http_error(exc)
    background_tasks.add_task(_do_bulk_sync, entity_type)
    logger.info("Bulk sync of %s queued", entity_type)
    return {"message": "Bulk sync started", "entity_type": entity_type}


@router.post("/sync/{entity_type}/from/{remote_id}", response_model=SyncResponse)
async def sync_from_wordpress(
    entity_type: str,
    remote_id: int,
    client: WordPressClient = Depends(get_wordpress_client),
    store: RecordStore = Depends(get_store),
):
    syncer = _syncer(entity_type, client, store)
    try:
        entity = await syncer.sync_from_remote(remote_id)
    except SyncError as exc:
        raise _http_error(exc)
    return _response(
        entity_type, entity, f"{entity_type} {remote_id} synced from WordPress"
    )


@router.post("/sync/{entity_type}/{local_id}/bidirectional", response_model=SyncResponse)
async def bidirectional_sync(
    entity_type: str,
    local_id: int,
    verify: bool = False,
    client: WordPressClient = Depends(get_wordpress_client),
    store: RecordStore = Depends(get_store),
):
    syncer = _syncer(entity_type, client, store)
    try:
        entity = await syncer.bidirectional_sync(local_id, verify_relationships=verify)
    except SyncError as exc:
        raise _http_error(exc)
    return _response(
        entity_type, entity, f"{entity_type} {local_id} bidirectionally synced"
    )


@router.post("/sync/{entity_type}/{local_id}", response_model=SyncResponse)
async def sync_to_wordpress(
    entity_type: str,
    local_id: int,
    client: WordPressClient = Depends(get_wordpress_client),
    store: RecordStore = Depends(get_store),
):
    syncer = _syncer(entity_type, client, store)
    try:
        entity = await syncer.sync_to_remote(local_id)
    except SyncError as exc:
        raise _http_error(exc)
    return _response(entity_type, entity, f"{entity_type} {local_id} synced to WordPress")
