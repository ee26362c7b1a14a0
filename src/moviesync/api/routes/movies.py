"""Movie query routes plus OMDb enrichment and backfill."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from moviesync.api.deps import get_omdb_client, get_store
from moviesync.config import get_settings
from moviesync.db.engine import get_session
from moviesync.enrichment.backfill import backfill_movies_from_omdb
from moviesync.enrichment.merge import MovieEnricher
from moviesync.enrichment.omdb_client import OMDbClient
from moviesync.models.catalog import Movie
from moviesync.sync.store import RecordStore

router = APIRouter()


@router.get("/", response_model=List[Movie])
def list_movies(
    limit: int = 20,
    offset: int = 0,
    session: Session = Depends(get_session),
):
    """List movies, most recently released first."""
    movies = session.exec(
        select(Movie)
        .order_by(Movie.release_date.desc(), Movie.id.desc())
        .offset(offset)
        .limit(limit)
    ).all()
    return movies


@router.get("/{movie_id}", response_model=Movie)
def get_movie(movie_id: int, session: Session = Depends(get_session)):
    movie = session.get(Movie, movie_id)
    if not movie:
        raise HTTPException(status_code=404, detail="Movie not found")
    return movie


@router.get("/{movie_id}/enriched")
async def get_enriched_movie(
    movie_id: int,
    store: RecordStore = Depends(get_store),
    client: OMDbClient = Depends(get_omdb_client),
):
    """Movie merged with OMDb data. Falls back to the stored record on OMDb errors."""
    movie = store.get(Movie, movie_id)
    if not movie:
        raise HTTPException(status_code=404, detail="Movie not found")
    primary = movie.model_dump(mode="json", exclude={"pods_data"})
    enriched = await MovieEnricher(client).enrich(primary)
    return enriched.to_dict()


@router.post("/omdb-backfill")
async def omdb_backfill(
    store: RecordStore = Depends(get_store),
    client: OMDbClient = Depends(get_omdb_client),
):
    """Fill empty movie columns from OMDb for every movie with an IMDb id."""
    settings = get_settings()
    report = await backfill_movies_from_omdb(
        store.engine,
        client,
        batch_size=settings.omdb_batch_size,
        delay_seconds=settings.omdb_batch_delay_seconds,
    )
    return {
        "updated": report.updated,
        "skipped": report.skipped,
        "failed": report.failed,
        "total": report.total,
        "results": [
            {"id": r.id, "title": r.title, "status": r.status, "message": r.message}
            for r in report.results
        ],
    }
