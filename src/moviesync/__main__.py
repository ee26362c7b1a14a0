"""
Main entrypoint: runs the APScheduler nightly bulk pull.

FastAPI runs separately under uvicorn.

Usage:
    python -m moviesync             # starts the scheduler
    uvicorn moviesync.api.main:app --host 0.0.0.0 --port 8000  # starts API
"""
import asyncio
import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)


async def _run_scheduler() -> None:
    from moviesync.config import get_settings
    from moviesync.db.engine import get_engine
    from moviesync.scheduler.jobs import build_scheduler

    settings = get_settings()
    scheduler = build_scheduler(get_engine())
    scheduler.start()
    logger.info(
        "Scheduler started (nightly bulk sync at %02d:00 UTC)",
        settings.bulk_sync_hour,
    )

    try:
        await asyncio.Event().wait()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Shutting down...")
    finally:
        scheduler.shutdown()
        logger.info("Goodbye.")


if __name__ == "__main__":
    asyncio.run(_run_scheduler())
