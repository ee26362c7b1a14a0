"""
Bulk pull: walk a WordPress collection page by page and pull every record.

Items are processed one at a time, in the order WordPress lists them. A failed
item is counted and skipped; its failed SyncLog row is written by
EntitySyncer.sync_from_remote. Re-running is safe because pulls match rows on
wordpress_id.
"""
import logging
from dataclasses import dataclass, field
from typing import List

from moviesync.sync.service import EntitySyncer

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


@dataclass
class BulkSyncResult:
    entity_type: str
    pages: int = 0
    synced: int = 0
    failed: int = 0
    failed_ids: List[int] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.synced + self.failed


async def bulk_sync_from_remote(
    syncer: EntitySyncer,
    client,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> BulkSyncResult:
    """
    Pull every record of one pod from WordPress.

    Args:
        syncer: EntitySyncer for the pod.
        client: WordPressClient used for listing (usually syncer.client).
        page_size: per_page sent to WordPress.

    Returns:
        BulkSyncResult with per-run counts.

    Raises:
        TransportError: only if listing a page fails; per-item errors never
            propagate.
    """
    result = BulkSyncResult(entity_type=syncer.entity_type)
    rest_base = syncer.schema.rest_base
    page_number = 1

    while True:
        page = await client.list_page(rest_base, page_number, page_size)
        if not page.items:
            break
        result.pages += 1

        for item in page.items:
            try:
                remote_id = int(item["id"])
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping %s item without id on page %d", rest_base, page_number)
                continue
            try:
                await syncer.sync_from_remote(remote_id)
                result.synced += 1
                logger.info("Synced %s %s", syncer.entity_type, remote_id)
            except Exception as exc:
                result.failed += 1
                result.failed_ids.append(remote_id)
                logger.warning(
                    "Failed to sync %s %s: %s", syncer.entity_type, remote_id, exc
                )

        if page.is_last_page:
            break
        page_number += 1

    logger.info(
        "Bulk sync of %s complete. Synced: %d, Failed: %d, Pages: %d",
        syncer.entity_type,
        result.synced,
        result.failed,
        result.pages,
    )
    return result
