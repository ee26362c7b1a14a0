"""
OMDb response normalizer.

Converts a raw OMDb object into a flat dict using the same field names as the
primary (TMDb-shaped) movie record. No I/O here.

OMDb quirks handled:
  - "N/A" means missing, for every field
  - Released is "14 Oct 1994"  → "1994-10-14"
  - Runtime is "108 min"       → 108
  - people / genres / countries are comma-separated strings → lists
  - Rotten Tomatoes and Metacritic scores live in the Ratings array
Keys are only present when OMDb had a usable value.
"""
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

_MISSING = {"", "N/A", "Plot unknown."}

_LIST_FIELDS = {
    "Director": "directors",
    "Writer": "writers",
    "Actors": "actors",
    "Genre": "genres",
    "Country": "countries",
    "Language": "languages",
    "Production": "studios",
}


def _value(raw: Dict[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    if not isinstance(value, str) or value.strip() in _MISSING:
        return None
    return value.strip()


def _split(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _parse_released(value: str) -> Optional[str]:
    try:
        return datetime.strptime(value, "%d %b %Y").date().isoformat()
    except ValueError:
        return None


def _rating(raw: Dict[str, Any], source: str) -> Optional[str]:
    for entry in raw.get("Ratings") or []:
        if isinstance(entry, dict) and entry.get("Source") == source:
            value = entry.get("Value")
            if isinstance(value, str) and value not in _MISSING:
                return value
    return None


def rotten_tomatoes_url(title: str) -> str:
    """Best-effort RT link; the real slugs are not derivable from the title."""
    slug = re.sub(r"[^a-z0-9\s]", "", title.lower())
    slug = re.sub(r"\s+", "_", slug.strip())
    return f"https://www.rottentomatoes.com/m/{slug}"


def normalize_omdb(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalize an OMDb movie object.

    Args:
        raw: Dict from OMDbClient.lookup(); {} yields {}.

    Returns:
        Dict with any of: title, year, release_date, runtime, plot, poster,
        directors, writers, actors, genres, countries, languages, studios,
        rotten_tomatoes_rating, rotten_tomatoes_url, metacritic_rating,
        imdb_rating, imdb_votes, imdb_id, content_rating, awards, box_office,
        dvd_release, website_url.
    """
    out: Dict[str, Any] = {}
    if not raw:
        return out

    for key, name in (
        ("Title", "title"),
        ("Year", "year"),
        ("Plot", "plot"),
        ("Poster", "poster"),
        ("imdbRating", "imdb_rating"),
        ("imdbVotes", "imdb_votes"),
        ("imdbID", "imdb_id"),
        ("Rated", "content_rating"),
        ("Awards", "awards"),
        ("BoxOffice", "box_office"),
        ("DVD", "dvd_release"),
        ("Website", "website_url"),
    ):
        value = _value(raw, key)
        if value is not None:
            out[name] = value

    released = _value(raw, "Released")
    if released:
        parsed = _parse_released(released)
        if parsed:
            out["release_date"] = parsed

    runtime = _value(raw, "Runtime")
    if runtime:
        match = re.search(r"(\d+)", runtime)
        if match:
            out["runtime"] = int(match.group(1))

    for key, name in _LIST_FIELDS.items():
        value = _value(raw, key)
        if value:
            out[name] = _split(value)

    rt = _rating(raw, "Rotten Tomatoes")
    if rt:
        out["rotten_tomatoes_rating"] = rt
        if out.get("title"):
            out["rotten_tomatoes_url"] = rotten_tomatoes_url(out["title"])

    metacritic = _rating(raw, "Metacritic")
    if metacritic:
        out["metacritic_rating"] = metacritic

    return out
