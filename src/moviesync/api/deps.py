"""FastAPI dependencies for the remote clients and the record store."""
from typing import AsyncGenerator

from fastapi import HTTPException

from moviesync.config import get_settings
from moviesync.db.engine import get_engine
from moviesync.enrichment.omdb_client import OMDbClient
from moviesync.pods.client import WordPressClient
from moviesync.sync.store import RecordStore


def build_wordpress_client() -> WordPressClient:
    settings = get_settings()
    return WordPressClient(
        base_url=settings.wordpress_api_url,
        username=settings.wordpress_api_username,
        application_password=settings.wordpress_api_password,
        timeout=settings.wordpress_timeout_seconds,
    )


def get_store() -> RecordStore:
    return RecordStore(get_engine())


async def get_wordpress_client() -> AsyncGenerator[WordPressClient, None]:
    if not get_settings().wordpress_api_url:
        raise HTTPException(status_code=503, detail="WORDPRESS_API_URL is not configured")
    client = build_wordpress_client()
    try:
        yield client
    finally:
        await client.aclose()


async def get_omdb_client() -> AsyncGenerator[OMDbClient, None]:
    # A missing key is not an error here: enrichment degrades to primary-only
    settings = get_settings()
    client = OMDbClient(api_key=settings.omdb_api_key, base_url=settings.omdb_base_url)
    try:
        yield client
    finally:
        await client.aclose()
