"""
Async OMDb API client.

OMDb answers every lookup with HTTP 200; a miss is signalled in the body:

    {"Response": "False", "Error": "Movie not found!"}

lookup() turns that into an empty dict so callers can move on to the next
query. Only network failures and non-2xx responses raise.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from moviesync.errors import ConfigurationError, TransportError

logger = logging.getLogger(__name__)

OMDB_URL = "http://www.omdbapi.com/"


class OMDbClient:
    """Thin async wrapper over omdbapi.com."""

    def __init__(
        self,
        api_key: str,
        base_url: str = OMDB_URL,
        timeout: Optional[float] = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self._http = httpx.AsyncClient(
            base_url=base_url, timeout=timeout, transport=transport
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def lookup(self, **params: str) -> Dict[str, Any]:
        """
        Query OMDb with i=<imdb id>, or t=<title> and optionally y=<year>.

        Returns:
            The raw OMDb object, or {} when OMDb reports no match.

        Raises:
            ConfigurationError: no API key configured.
            TransportError: network failure, non-2xx status or a non-JSON body.
        """
        if not self.api_key:
            raise ConfigurationError("OMDb API key not configured")

        query = {"apikey": self.api_key, "plot": "full", **params}
        try:
            response = await self._http.get("", params=query)
        except httpx.HTTPError as exc:
            raise TransportError(f"OMDb request failed: {exc}") from exc

        if not response.is_success:
            raise TransportError(
                f"OMDb API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise TransportError("OMDb response is not valid JSON") from exc

        if not isinstance(data, dict):
            raise TransportError("OMDb response is not a JSON object")
        if data.get("Response") == "False":
            logger.info("OMDb miss for %s: %s", params, data.get("Error"))
            return {}
        return data
