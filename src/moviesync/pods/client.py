"""
Async WordPress REST client for Pods-backed post types.

Wraps httpx.AsyncClient with the site's base URL and an application password
(HTTP basic auth). Every method maps to one HTTP call; there is no retry
logic here, callers own retry policy.

  get(rest_base, id)            GET  /wp-json/wp/v2/{rest_base}/{id}
  create(rest_base, body)       POST /wp-json/wp/v2/{rest_base}
  update(rest_base, id, body)   PUT  /wp-json/wp/v2/{rest_base}/{id}
  list_page(rest_base, n, size) GET  /wp-json/wp/v2/{rest_base}?page=n&per_page=size

Failures surface as moviesync.errors exceptions:
  404 on get                 → RemoteNotFoundError
  any other non-2xx / network → TransportError
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import httpx

from moviesync.errors import RemoteNotFoundError, TransportError

logger = logging.getLogger(__name__)

API_PREFIX = "/wp-json/wp/v2"


@dataclass
class RemotePage:
    items: List[Dict[str, Any]] = field(default_factory=list)
    is_last_page: bool = True


class WordPressClient:
    """Thin async wrapper over the WordPress REST API."""

    def __init__(
        self,
        base_url: str,
        username: str,
        application_password: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Site root, e.g. "https://example.com".
            username: WordPress user owning the application password.
            application_password: Opaque credential, never logged.
            timeout: Seconds per request; None disables timeouts.
            transport: Optional httpx transport (MockTransport in tests).
        """
        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=f"{self.base_url}{API_PREFIX}",
            auth=(username, application_password),
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "WordPressClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ─── Record operations ────────────────────────────────────────────────────

    async def get(self, rest_base: str, remote_id: int) -> Dict[str, Any]:
        """Fetch one record. Raises RemoteNotFoundError if WordPress has none."""
        response = await self._request(
            "GET", f"/{rest_base}/{remote_id}", allow_statuses=(404,)
        )
        if response.status_code == 404:
            raise RemoteNotFoundError(rest_base, remote_id)
        return self._json(response)

    async def create(self, rest_base: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create a record; the response includes the new "id"."""
        response = await self._request("POST", f"/{rest_base}", json=payload)
        return self._json(response)

    async def update(
        self, rest_base: str, remote_id: int, payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        response = await self._request("PUT", f"/{rest_base}/{remote_id}", json=payload)
        return self._json(response)

    async def list_page(
        self, rest_base: str, page: int = 1, per_page: int = 100
    ) -> RemotePage:
        """Fetch one page of a collection.

        is_last_page comes from the X-WP-TotalPages header when WordPress sends
        it, otherwise from a short page. Asking for a page past the end makes
        WordPress answer 400 rest_post_invalid_page_number; that is reported
        as an empty last page.
        """
        response = await self._request(
            "GET",
            f"/{rest_base}",
            params={"page": page, "per_page": per_page},
            allow_statuses=(400,),
        )
        if response.status_code == 400:
            if self._error_code(response) == "rest_post_invalid_page_number":
                return RemotePage(items=[], is_last_page=True)
            self._raise_for_status(response)

        items = self._json(response)
        if not isinstance(items, list):
            raise TransportError(f"GET {rest_base}: expected a JSON array")

        total_pages = response.headers.get("X-WP-TotalPages")
        if total_pages is not None and total_pages.isdigit():
            is_last = page >= int(total_pages)
        else:
            is_last = len(items) < per_page
        return RemotePage(items=items, is_last_page=is_last or not items)

    async def health_check(self, rest_bases: Iterable[str]) -> Dict[str, Any]:
        """Check the API root and one item of each collection.

        Never raises: returns {"status": "healthy"|"unhealthy", "details": {...}}.
        """
        try:
            root = await self._request("GET", "/")
        except TransportError as exc:
            return {"status": "unhealthy", "details": str(exc)}

        pods: Dict[str, bool] = {}
        for rest_base in rest_bases:
            try:
                await self.list_page(rest_base, page=1, per_page=1)
                pods[rest_base] = True
            except TransportError as exc:
                logger.warning("Health check for %s failed: %s", rest_base, exc)
                pods[rest_base] = False

        return {
            "status": "healthy",
            "details": {"wordpress": root.status_code == 200, "pods": pods},
        }

    # ─── Internal helpers ─────────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        url: str,
        allow_statuses: Iterable[int] = (),
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        if response.is_success or response.status_code in allow_statuses:
            return response
        self._raise_for_status(response)

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        request = response.request
        message = WordPressClient._error_message(response)
        raise TransportError(
            f"{request.method} {request.url.path} returned "
            f"{response.status_code}: {message}",
            status_code=response.status_code,
        )

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(
                f"{response.request.method} {response.request.url.path}: "
                "response is not valid JSON"
            ) from exc

    @staticmethod
    def _error_code(response: httpx.Response) -> Optional[str]:
        try:
            body = response.json()
        except ValueError:
            return None
        return body.get("code") if isinstance(body, dict) else None

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return response.reason_phrase
