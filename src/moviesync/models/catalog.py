"""Catalog models: movies and the people/events linked to them.

Every table carries the same sync columns (see SyncColumns). List-valued
fields (cast names, genres, ...) are stored as JSON arrays.
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, DateTime
from sqlmodel import Field, SQLModel

from moviesync.models.sync import SyncStatus


class SyncColumns(SQLModel):
    """Columns shared by every entity that is mirrored to WordPress."""

    wordpress_id: Optional[int] = Field(default=None, unique=True, index=True)
    sync_status: str = Field(default=SyncStatus.UNSYNCED.value)
    last_synced_at: Optional[datetime] = Field(
        default=None, sa_type=DateTime(timezone=True)
    )
    # Last raw payload received from WordPress, kept verbatim for debugging
    pods_data: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)


class Movie(SyncColumns, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: Optional[str] = Field(default=None, index=True)
    original_title: Optional[str] = None
    slug: Optional[str] = None
    year: Optional[str] = None
    release_date: Optional[date] = None
    runtime: Optional[int] = None
    tagline: Optional[str] = None
    overview: Optional[str] = None
    content_rating: Optional[str] = None
    budget: Optional[str] = None
    box_office: Optional[str] = None
    poster: Optional[str] = None
    backdrop: Optional[str] = None
    trailer: Optional[str] = None

    tmdb_id: Optional[str] = None
    tmdb_url: Optional[str] = None
    tmdb_rating: Optional[str] = None
    tmdb_votes: Optional[str] = None
    imdb_id: Optional[str] = Field(default=None, index=True)
    imdb_url: Optional[str] = None
    amazon_link: Optional[str] = None

    characters: Optional[List[str]] = Field(default=None, sa_type=JSON)
    actors: Optional[List[str]] = Field(default=None, sa_type=JSON)
    directors: Optional[List[str]] = Field(default=None, sa_type=JSON)
    writers: Optional[List[str]] = Field(default=None, sa_type=JSON)
    genres: Optional[List[str]] = Field(default=None, sa_type=JSON)
    countries: Optional[List[str]] = Field(default=None, sa_type=JSON)
    languages: Optional[List[str]] = Field(default=None, sa_type=JSON)
    studios: Optional[List[str]] = Field(default=None, sa_type=JSON)
    experiments: Optional[List[str]] = Field(default=None, sa_type=JSON)

    # OMDb columns: local only, never pushed to WordPress
    rotten_tomatoes_rating: Optional[str] = None
    rotten_tomatoes_url: Optional[str] = None
    imdb_rating: Optional[str] = None
    imdb_votes: Optional[str] = None
    metacritic_rating: Optional[str] = None
    awards: Optional[str] = None
    dvd_release: Optional[str] = None
    website_url: Optional[str] = None
    box_office_enhanced: Optional[str] = None
    plot_enhanced: Optional[str] = None


class Actor(SyncColumns, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: Optional[str] = Field(default=None, index=True)
    profile_image: Optional[str] = None
    biography: Optional[str] = None
    birthday: Optional[date] = None
    deathday: Optional[date] = None
    place_of_birth: Optional[str] = None
    movie_count: Optional[str] = None
    popularity: Optional[str] = None
    known_for_department: Optional[str] = None
    imdb_id: Optional[str] = None
    imdb_url: Optional[str] = None
    tmdb_url: Optional[str] = None
    instagram_id: Optional[str] = None
    twitter_id: Optional[str] = None
    facebook_id: Optional[str] = None
    related_movies: Optional[List[str]] = Field(default=None, sa_type=JSON)


class Director(SyncColumns, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: Optional[str] = Field(default=None, index=True)
    profile_image: Optional[str] = None
    biography: Optional[str] = None
    birthday: Optional[date] = None
    deathday: Optional[date] = None
    place_of_birth: Optional[str] = None
    movie_count: Optional[str] = None
    popularity: Optional[str] = None
    imdb_id: Optional[str] = None
    imdb_url: Optional[str] = None
    tmdb_url: Optional[str] = None
    instagram_id: Optional[str] = None
    twitter_id: Optional[str] = None
    facebook_id: Optional[str] = None
    related_movies: Optional[List[str]] = Field(default=None, sa_type=JSON)


class Experiment(SyncColumns, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    number: Optional[str] = Field(default=None, index=True)
    event_date: Optional[date] = None
    event_location: Optional[List[str]] = Field(default=None, sa_type=JSON)
    event_host: Optional[List[str]] = Field(default=None, sa_type=JSON)
    image: Optional[str] = None
    notes: Optional[str] = None
    movies: Optional[List[str]] = Field(default=None, sa_type=JSON)


# entity type name (pod name) → table
ENTITY_MODELS = {
    "movie": Movie,
    "actor": Actor,
    "director": Director,
    "experiment": Experiment,
}
