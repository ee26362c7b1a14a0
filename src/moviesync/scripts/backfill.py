"""
Backfill script: bulk pull from WordPress or fill movie gaps from OMDb.

Usage:
    python -m moviesync.scripts.backfill wordpress            # every pod
    python -m moviesync.scripts.backfill wordpress --type actor
    python -m moviesync.scripts.backfill omdb --batch-size 3 --delay 1.0

Both are safe to re-run: pulls match rows on wordpress_id and the OMDb
backfill only writes empty columns.
"""
import argparse
import asyncio
import logging

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)


async def _backfill_wordpress(entity_type: str) -> None:
    from moviesync.api.deps import build_wordpress_client
    from moviesync.config import get_settings
    from moviesync.db.engine import get_engine
    from moviesync.sync.bulk import bulk_sync_from_remote
    from moviesync.sync.service import build_syncers
    from moviesync.sync.store import RecordStore

    settings = get_settings()
    if not settings.wordpress_api_url:
        raise SystemExit("WORDPRESS_API_URL is not set")

    async with build_wordpress_client() as client:
        syncers = build_syncers(client, RecordStore(get_engine()))
        selected = list(syncers) if entity_type == "all" else [entity_type]
        for name in selected:
            result = await bulk_sync_from_remote(
                syncers[name], client, page_size=settings.bulk_page_size
            )
            if result.failed_ids:
                logger.info("Failed %s ids: %s", name, result.failed_ids)


async def _backfill_omdb(batch_size: int, delay: float) -> None:
    from moviesync.config import get_settings
    from moviesync.db.engine import get_engine
    from moviesync.enrichment.backfill import backfill_movies_from_omdb
    from moviesync.enrichment.omdb_client import OMDbClient

    settings = get_settings()
    if not settings.omdb_api_key:
        raise SystemExit("OMDB_API_KEY is not set")

    client = OMDbClient(api_key=settings.omdb_api_key, base_url=settings.omdb_base_url)
    try:
        report = await backfill_movies_from_omdb(
            get_engine(), client, batch_size=batch_size, delay_seconds=delay
        )
    finally:
        await client.aclose()

    for result in report.results:
        if result.status == "error":
            logger.info("%s (%s): %s", result.title, result.id, result.message)


def main() -> None:
    from moviesync.config import get_settings
    from moviesync.pods.schema import entity_types

    settings = get_settings()
    parser = argparse.ArgumentParser(description="Backfill the movie catalog")
    sub = parser.add_subparsers(dest="command", required=True)

    wp = sub.add_parser("wordpress", help="Pull every record from WordPress Pods")
    wp.add_argument(
        "--type",
        dest="entity_type",
        choices=["all", *entity_types()],
        default="all",
        help="Pod to pull (default: all)",
    )

    omdb = sub.add_parser("omdb", help="Fill missing movie fields from OMDb")
    omdb.add_argument("--batch-size", type=int, default=settings.omdb_batch_size)
    omdb.add_argument("--delay", type=float, default=settings.omdb_batch_delay_seconds)

    args = parser.parse_args()
    if args.command == "wordpress":
        asyncio.run(_backfill_wordpress(args.entity_type))
    else:
        asyncio.run(_backfill_omdb(args.batch_size, args.delay))


if __name__ == "__main__":
    main()
