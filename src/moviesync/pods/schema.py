"""
Pods field schema registry.

Static description of every pod (WordPress custom post type) that mirrors a
local catalog table: its REST base, which local column supplies the post
title, and one FieldMapping per synchronised field.

Remote names are listed verbatim from the Pods export. Some are irregular and
must not be "fixed":

  actor_twitter_id_       trailing underscore (director pod has none)
  profile_image           actor pod, no "actor_" prefix
  event_date / event_*    experiment pod, no "experiment_" prefix

Relationship ("pick") fields that Pods keeps bidirectional carry the name of
the inverse field on the related pod. Pods rewrites that inverse list itself
whenever the forward field is saved.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from moviesync.errors import UnknownEntityTypeError


class FieldKind(str, Enum):
    SCALAR = "scalar"
    DATE = "date"
    REPEATABLE_TEXT = "repeatable_text"
    RELATIONSHIP_PICK = "relationship_pick"


@dataclass(frozen=True)
class FieldMapping:
    local_name: str
    remote_name: str
    kind: FieldKind = FieldKind.SCALAR
    python_type: type = str
    related_type: Optional[str] = None
    inverse: Optional[str] = None

    @property
    def is_bidirectional(self) -> bool:
        return self.kind == FieldKind.RELATIONSHIP_PICK and self.inverse is not None


@dataclass(frozen=True)
class PodSchema:
    name: str
    rest_base: str
    title_field: str
    fields: Tuple[FieldMapping, ...] = field(default_factory=tuple)
    slug_field: Optional[str] = None

    @property
    def bidirectional_fields(self) -> Dict[str, str]:
        """{remote field: inverse field on the related pod}"""
        return {f.remote_name: f.inverse for f in self.fields if f.is_bidirectional}

    def by_local_name(self, local_name: str) -> FieldMapping:
        for f in self.fields:
            if f.local_name == local_name:
                return f
        raise KeyError(local_name)


def _text(local: str, remote: str) -> FieldMapping:
    return FieldMapping(local, remote)


def _int(local: str, remote: str) -> FieldMapping:
    return FieldMapping(local, remote, python_type=int)


def _date(local: str, remote: str) -> FieldMapping:
    return FieldMapping(local, remote, FieldKind.DATE)


def _repeatable(local: str, remote: str) -> FieldMapping:
    return FieldMapping(local, remote, FieldKind.REPEATABLE_TEXT)


def _pick(
    local: str,
    remote: str,
    related_type: Optional[str] = None,
    inverse: Optional[str] = None,
) -> FieldMapping:
    return FieldMapping(
        local,
        remote,
        FieldKind.RELATIONSHIP_PICK,
        related_type=related_type,
        inverse=inverse,
    )


MOVIE = PodSchema(
    name="movie",
    rest_base="movies",
    title_field="title",
    slug_field="slug",
    fields=(
        _text("title", "movie_title"),
        _text("original_title", "movie_original_title"),
        _text("year", "movie_year"),
        _date("release_date", "movie_release_date"),
        _int("runtime", "movie_runtime"),
        _text("tagline", "movie_tagline"),
        _text("overview", "movie_overview"),
        _text("content_rating", "movie_content_rating"),
        _text("budget", "movie_budget"),
        _text("box_office", "movie_box_office"),
        _text("poster", "movie_poster"),
        _text("backdrop", "movie_backdrop"),
        _text("trailer", "movie_trailer"),
        _text("tmdb_id", "movie_tmdb_id"),
        _text("tmdb_url", "movie_tmdb_url"),
        _text("tmdb_rating", "movie_tmdb_rating"),
        _text("tmdb_votes", "movie_tmdb_votes"),
        _text("imdb_id", "movie_imdb_id"),
        _text("imdb_url", "movie_imdb_url"),
        _repeatable("characters", "movie_characters"),
        _text("amazon_link", "movie_amazon_link"),
        _pick("actors", "movie_actors", "actor", "related_movies_actor"),
        _pick("directors", "movie_directors", "director", "related_movies_director"),
        _pick("writers", "movie_writers", "writer", "related_movies_writer"),
        _pick("genres", "movie_genres", "genre", "related_movies_genre"),
        _pick("countries", "movie_countries", "country", "related_movies_country"),
        _pick("languages", "movie_languages", "language", "related_movies_language"),
        _pick("studios", "movie_studios", "studio", "related_movies_studio"),
        _pick("experiments", "movie_experiments", "experiment", "experiment_movies"),
    ),
)

ACTOR = PodSchema(
    name="actor",
    rest_base="actors",
    title_field="name",
    fields=(
        _text("name", "actor_name"),
        _text("profile_image", "profile_image"),
        _text("biography", "actor_biography"),
        _date("birthday", "actor_birthday"),
        _date("deathday", "actor_deathday"),
        _text("place_of_birth", "actor_place_of_birth"),
        _text("movie_count", "actor_movie_count"),
        _text("popularity", "actor_popularity"),
        _text("known_for_department", "actor_known_for_department"),
        _text("imdb_id", "actor_imdb_id"),
        _text("imdb_url", "actor_imdb_url"),
        _text("tmdb_url", "actor_tmdb_url"),
        _text("instagram_id", "actor_instagram_id"),
        _text("twitter_id", "actor_twitter_id_"),
        _text("facebook_id", "actor_facebook_id"),
        _pick("related_movies", "related_movies_actor", "movie", "movie_actors"),
    ),
)

DIRECTOR = PodSchema(
    name="director",
    rest_base="directors",
    title_field="name",
    fields=(
        _text("name", "director_name"),
        _text("biography", "director_biography"),
        _text("movie_count", "director_movie_count"),
        _date("birthday", "director_birthday"),
        _date("deathday", "director_deathday"),
        _text("place_of_birth", "director_place_of_birth"),
        _text("popularity", "director_popularity"),
        _text("profile_image", "director_profile_image"),
        _text("imdb_id", "director_imdb_id"),
        _text("imdb_url", "director_imdb_url"),
        _text("tmdb_url", "director_tmdb_url"),
        _text("instagram_id", "director_instagram_id"),
        _text("twitter_id", "director_twitter_id"),
        _text("facebook_id", "director_facebook_id"),
        _pick("related_movies", "related_movies_director", "movie", "movie_directors"),
    ),
)

EXPERIMENT = PodSchema(
    name="experiment",
    rest_base="experiments",
    title_field="number",
    fields=(
        _text("number", "experiment_number"),
        _date("event_date", "event_date"),
        _pick("event_location", "event_location"),
        _pick("event_host", "event_host"),
        _text("image", "experiment_image"),
        _text("notes", "experiment_notes"),
        _pick("movies", "experiment_movies", "movie", "movie_experiments"),
    ),
)

REGISTRY: Dict[str, PodSchema] = {
    pod.name: pod for pod in (MOVIE, ACTOR, DIRECTOR, EXPERIMENT)
}


def get_schema(entity_type: str) -> PodSchema:
    """Return the pod schema for an entity type ("movie", "actor", ...)."""
    try:
        return REGISTRY[entity_type]
    except KeyError:
        raise UnknownEntityTypeError(entity_type) from None


def entity_types() -> List[str]:
    return list(REGISTRY)
