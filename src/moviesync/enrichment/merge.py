"""
Movie enrichment: merge a primary (TMDb-shaped) record with OMDb data.

Lookup order, stopping at the first query that returns data:
  1. i=<imdb_id>
  2. t=<title>, y=<year>
  3. t=<title>
A tier is only tried when its keys are present. An OMDb "not found" is an
empty result, not an error.

Merge policy (secondary = OMDb):
  - OMDb-only fields are added: Rotten Tomatoes rating + URL, awards,
    DVD release, website, box_office_enhanced, and plot_enhanced when the
    OMDb plot differs from the primary overview
  - runtime / imdb_rating / imdb_votes / metacritic_rating: OMDb wins
  - every other field keeps the primary value; OMDb only fills gaps. This
    includes content_rating, which TMDb lacks and users may have entered
  - empty OMDb values never overwrite anything

secondary_fields names every OMDb value that ended up in the merged record,
including OMDb-wins values that happened to equal the primary one. Primary
values kept over a non-empty OMDb value are not listed.

Enrichment never fails the caller: transport, configuration and parse errors
degrade to the primary record with an error note.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from moviesync.enrichment.normalizer import normalize_omdb
from moviesync.errors import SyncError

logger = logging.getLogger(__name__)

PRIMARY_ONLY = "primary-only"
PRIMARY_AND_SECONDARY = "primary+secondary"

SECONDARY_EXCLUSIVE = (
    "rotten_tomatoes_rating",
    "rotten_tomatoes_url",
    "awards",
    "dvd_release",
    "website_url",
)
PREFER_SECONDARY = ("runtime", "imdb_rating", "imdb_votes", "metacritic_rating")


@dataclass
class EnrichedRecord:
    fields: Dict[str, Any]
    enrichment_source: str = PRIMARY_ONLY
    secondary_fields: List[str] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.fields,
            "enrichment_source": self.enrichment_source,
            "secondary_fields": list(self.secondary_fields),
            "enrichment_error": self.error,
        }


def _empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == "N/A"


def lookup_tiers(primary: Dict[str, Any]) -> List[Dict[str, str]]:
    """OMDb query params to try, most precise first."""
    imdb_id = primary.get("imdb_id")
    title = primary.get("title")
    year = primary.get("year")
    if _empty(year) and primary.get("release_date"):
        year = str(primary["release_date"])[:4]

    tiers: List[Dict[str, str]] = []
    if not _empty(imdb_id):
        tiers.append({"i": str(imdb_id)})
    if not _empty(title) and not _empty(year):
        tiers.append({"t": str(title), "y": str(year)})
    if not _empty(title):
        tiers.append({"t": str(title)})
    return tiers


def merge_records(
    primary: Dict[str, Any], secondary: Dict[str, Any]
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Merge a normalized OMDb dict into a primary record.

    Returns:
        (merged record, names of the OMDb fields the merged record carries)
    """
    merged = dict(primary)
    contributed: List[str] = []

    for name, value in secondary.items():
        if _empty(value):
            continue

        if name == "plot":
            if value != primary.get("overview"):
                merged["plot_enhanced"] = value
                contributed.append("plot_enhanced")
        elif name == "box_office":
            merged["box_office_enhanced"] = value
            contributed.append("box_office_enhanced")
        elif name in SECONDARY_EXCLUSIVE or name in PREFER_SECONDARY:
            merged[name] = value
            contributed.append(name)
        elif _empty(merged.get(name)):
            merged[name] = value
            contributed.append(name)

    return merged, contributed


class MovieEnricher:
    """Finds OMDb data for a movie and merges it into the primary record."""

    def __init__(self, client):
        """
        Args:
            client: OMDbClient instance (or AsyncMock in tests).
        """
        self.client = client

    async def find_secondary(self, primary: Dict[str, Any]) -> Dict[str, Any]:
        """Walk the lookup tiers; return the first non-empty normalized result."""
        for params in lookup_tiers(primary):
            raw = await self.client.lookup(**params)
            secondary = normalize_omdb(raw)
            if secondary:
                return secondary
            logger.debug("OMDb tier %s found nothing", params)
        return {}

    async def enrich(self, primary: Dict[str, Any]) -> EnrichedRecord:
        try:
            secondary = await self.find_secondary(primary)
        except (SyncError, ValueError, TypeError) as exc:
            logger.warning(
                "OMDb enrichment failed for %r: %s", primary.get("title"), exc
            )
            return EnrichedRecord(fields=dict(primary), error=str(exc))

        if not secondary:
            return EnrichedRecord(fields=dict(primary))

        merged, contributed = merge_records(primary, secondary)
        return EnrichedRecord(
            fields=merged,
            enrichment_source=PRIMARY_AND_SECONDARY,
            secondary_fields=contributed,
        )
