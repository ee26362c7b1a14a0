"""
OMDb backfill: fill empty Movie columns from OMDb, never overwriting data.

Movies are looked up by IMDb id in small concurrent batches with a pause
between batches to stay inside OMDb's rate limit.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List

from sqlmodel import Session, select

from moviesync.enrichment.normalizer import normalize_omdb
from moviesync.models.catalog import Movie

logger = logging.getLogger(__name__)

# normalized OMDb key → Movie column
FILLABLE_COLUMNS = {
    "title": "title",
    "year": "year",
    "release_date": "release_date",
    "runtime": "runtime",
    "plot": "overview",
    "content_rating": "content_rating",
    "poster": "poster",
    "box_office": "box_office",
    "actors": "actors",
    "directors": "directors",
    "writers": "writers",
    "genres": "genres",
    "countries": "countries",
    "languages": "languages",
    "rotten_tomatoes_rating": "rotten_tomatoes_rating",
    "rotten_tomatoes_url": "rotten_tomatoes_url",
    "imdb_rating": "imdb_rating",
    "imdb_votes": "imdb_votes",
    "metacritic_rating": "metacritic_rating",
    "awards": "awards",
    "dvd_release": "dvd_release",
    "website_url": "website_url",
}


@dataclass
class BackfillResult:
    id: int
    title: str
    status: str  # "success", "skipped", "error"
    message: str


@dataclass
class BackfillReport:
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    results: List[BackfillResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.updated + self.skipped + self.failed


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == []


def fill_missing_fields(movie: Movie, secondary: Dict[str, Any]) -> List[str]:
    """Copy OMDb values onto empty columns of movie. Returns the columns set."""
    filled: List[str] = []
    for key, column in FILLABLE_COLUMNS.items():
        value = secondary.get(key)
        if _is_empty(value) or not _is_empty(getattr(movie, column)):
            continue
        if column == "release_date":
            value = date.fromisoformat(value)
        setattr(movie, column, value)
        filled.append(column)

    box_office = secondary.get("box_office")
    if box_office and _is_empty(movie.box_office_enhanced):
        movie.box_office_enhanced = box_office
        filled.append("box_office_enhanced")

    plot = secondary.get("plot")
    if plot and _is_empty(movie.plot_enhanced) and plot != movie.overview:
        movie.plot_enhanced = plot
        filled.append("plot_enhanced")
    return filled


async def backfill_movies_from_omdb(
    engine,
    client,
    batch_size: int = 3,
    delay_seconds: float = 1.0,
) -> BackfillReport:
    """
    Fill missing columns on every movie that has an IMDb id.

    Args:
        engine: SQLAlchemy engine.
        client: OMDbClient (or AsyncMock in tests).
        batch_size: Movies looked up concurrently.
        delay_seconds: Pause between batches.
    """
    with Session(engine) as s:
        movies = s.exec(
            select(Movie).where(Movie.imdb_id.is_not(None), Movie.imdb_id != "")
        ).all()

    report = BackfillReport()
    if not movies:
        logger.info("No movies with IMDb ids to backfill")
        return report

    async def _one(movie: Movie) -> BackfillResult:
        movie_id = movie.id
        title = movie.title or "Unknown Title"
        try:
            secondary = normalize_omdb(await client.lookup(i=movie.imdb_id))
            filled = fill_missing_fields(movie, secondary)
            if not filled:
                return BackfillResult(movie_id, title, "skipped", "No missing fields to fill")
            with Session(engine) as s:
                s.add(movie)
                s.commit()
            return BackfillResult(
                movie_id,
                title,
                "success",
                f"Filled {len(filled)} missing fields: {', '.join(filled)}",
            )
        except Exception as exc:
            logger.warning("OMDb backfill failed for movie %s (%s): %s", movie_id, title, exc)
            return BackfillResult(movie_id, title, "error", str(exc))

    for start in range(0, len(movies), batch_size):
        batch = movies[start:start + batch_size]
        for result in await asyncio.gather(*(_one(m) for m in batch)):
            report.results.append(result)
            if result.status == "success":
                report.updated += 1
            elif result.status == "skipped":
                report.skipped += 1
            else:
                report.failed += 1
        if start + batch_size < len(movies):
            await asyncio.sleep(delay_seconds)

    logger.info(
        "OMDb backfill complete. Updated: %d, Skipped: %d, Failed: %d",
        report.updated,
        report.skipped,
        report.failed,
    )
    return report
