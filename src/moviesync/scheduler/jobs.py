"""
APScheduler jobs for background sync.

The nightly bulk pull re-reads every pod from WordPress so edits made in the
WordPress admin land in the local database even when nobody triggered a pull.
"""
import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from moviesync.config import get_settings

logger = logging.getLogger(__name__)


def build_scheduler(engine) -> AsyncIOScheduler:
    """
    Create and configure the APScheduler.

    Args:
        engine: SQLAlchemy engine handed to the record store.

    Returns:
        Configured AsyncIOScheduler (not yet started).
    """
    settings = get_settings()
    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        _nightly_bulk_sync,
        trigger="cron",
        hour=settings.bulk_sync_hour,
        minute=0,
        id="nightly_bulk_sync",
        replace_existing=True,
        kwargs={"engine": engine},
    )

    return scheduler


async def _nightly_bulk_sync(engine) -> None:
    """Nightly job: pull every pod from WordPress. One failing pod does not stop the rest."""
    from moviesync.api.deps import build_wordpress_client
    from moviesync.sync.bulk import bulk_sync_from_remote
    from moviesync.sync.service import build_syncers
    from moviesync.sync.store import RecordStore

    settings = get_settings()
    if not settings.wordpress_api_url:
        logger.warning("WORDPRESS_API_URL not set, skipping nightly bulk sync")
        return

    logger.info("Nightly bulk sync starting at %s", datetime.now(timezone.utc).isoformat())
    async with build_wordpress_client() as client:
        for entity_type, syncer in build_syncers(client, RecordStore(engine)).items():
            try:
                await bulk_sync_from_remote(
                    syncer, client, page_size=settings.bulk_page_size
                )
            except Exception as exc:
                logger.error("Nightly bulk sync of %s failed: %s", entity_type, exc)
