"""Tests for WordPressClient against an httpx.MockTransport."""
import base64
import json

import httpx
import pytest

from moviesync.errors import RemoteNotFoundError, TransportError
from moviesync.pods.client import WordPressClient


def make_client(handler) -> WordPressClient:
    return WordPressClient(
        "https://example.com/",
        "editor",
        "abcd efgh",
        transport=httpx.MockTransport(handler),
    )


class TestRecordOperations:
    @pytest.mark.asyncio
    async def test_get_hits_pods_endpoint(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"id": 501, "meta": {}})

        async with make_client(handler) as client:
            record = await client.get("movies", 501)

        assert record["id"] == 501
        assert seen[0].method == "GET"
        assert seen[0].url.path == "/wp-json/wp/v2/movies/501"

    @pytest.mark.asyncio
    async def test_basic_auth_header(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        async with make_client(handler) as client:
            await client.get("actors", 1)

        expected = base64.b64encode(b"editor:abcd efgh").decode()
        assert seen[0].headers["Authorization"] == f"Basic {expected}"

    @pytest.mark.asyncio
    async def test_get_404_raises_remote_not_found(self):
        def handler(request):
            return httpx.Response(404, json={"code": "rest_post_invalid_id"})

        async with make_client(handler) as client:
            with pytest.raises(RemoteNotFoundError) as exc:
                await client.get("movies", 42)
        assert exc.value.remote_id == 42

    @pytest.mark.asyncio
    async def test_create_posts_json(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201, json={"id": 501})

        async with make_client(handler) as client:
            response = await client.create("movies", {"title": "Samurai Cop"})

        assert response == {"id": 501}
        assert seen[0].method == "POST"
        assert seen[0].url.path == "/wp-json/wp/v2/movies"
        assert json.loads(seen[0].content) == {"title": "Samurai Cop"}

    @pytest.mark.asyncio
    async def test_create_404_is_transport_error(self):
        def handler(request):
            return httpx.Response(404, json={"message": "No route"})

        async with make_client(handler) as client:
            with pytest.raises(TransportError) as exc:
                await client.create("movies", {})
        assert exc.value.status_code == 404

    @pytest.mark.asyncio
    async def test_update_uses_put(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"id": 501})

        async with make_client(handler) as client:
            await client.update("movies", 501, {"meta": {}})

        assert seen[0].method == "PUT"
        assert seen[0].url.path == "/wp-json/wp/v2/movies/501"

    @pytest.mark.asyncio
    async def test_server_error_carries_message(self):
        def handler(request):
            return httpx.Response(500, json={"message": "Database down"})

        async with make_client(handler) as client:
            with pytest.raises(TransportError) as exc:
                await client.update("movies", 1, {})
        assert exc.value.status_code == 500
        assert "Database down" in str(exc.value)

    @pytest.mark.asyncio
    async def test_network_failure_is_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(TransportError) as exc:
                await client.get("movies", 1)
        assert exc.value.status_code is None

    @pytest.mark.asyncio
    async def test_non_json_body_is_transport_error(self):
        def handler(request):
            return httpx.Response(200, text="<html>maintenance</html>")

        async with make_client(handler) as client:
            with pytest.raises(TransportError):
                await client.get("movies", 1)


class TestListPage:
    @pytest.mark.asyncio
    async def test_total_pages_header(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200, json=[{"id": 1}, {"id": 2}], headers={"X-WP-TotalPages": "3"}
            )

        async with make_client(handler) as client:
            page = await client.list_page("actors", page=2, per_page=2)

        assert [item["id"] for item in page.items] == [1, 2]
        assert page.is_last_page is False
        assert seen[0].url.params["page"] == "2"
        assert seen[0].url.params["per_page"] == "2"

    @pytest.mark.asyncio
    async def test_last_page_by_header(self):
        def handler(request):
            return httpx.Response(200, json=[{"id": 5}], headers={"X-WP-TotalPages": "3"})

        async with make_client(handler) as client:
            page = await client.list_page("actors", page=3, per_page=2)
        assert page.is_last_page is True

    @pytest.mark.asyncio
    async def test_short_page_without_header_is_last(self):
        def handler(request):
            return httpx.Response(200, json=[{"id": 1}])

        async with make_client(handler) as client:
            page = await client.list_page("actors", page=1, per_page=100)
        assert page.is_last_page is True

    @pytest.mark.asyncio
    async def test_past_the_end_is_empty_last_page(self):
        def handler(request):
            return httpx.Response(
                400,
                json={"code": "rest_post_invalid_page_number", "message": "too big"},
            )

        async with make_client(handler) as client:
            page = await client.list_page("movies", page=9)
        assert page.items == []
        assert page.is_last_page is True

    @pytest.mark.asyncio
    async def test_other_400_raises(self):
        def handler(request):
            return httpx.Response(400, json={"code": "rest_invalid_param"})

        async with make_client(handler) as client:
            with pytest.raises(TransportError) as exc:
                await client.list_page("movies")
        assert exc.value.status_code == 400

    @pytest.mark.asyncio
    async def test_non_list_body_raises(self):
        def handler(request):
            return httpx.Response(200, json={"id": 1})

        async with make_client(handler) as client:
            with pytest.raises(TransportError):
                await client.list_page("movies")


class TestHealthCheck:
    @pytest.mark.asyncio
    async def test_healthy(self):
        def handler(request):
            if request.url.path == "/wp-json/wp/v2/":
                return httpx.Response(200, json={"name": "site"})
            return httpx.Response(200, json=[])

        async with make_client(handler) as client:
            result = await client.health_check(["movies", "actors"])

        assert result["status"] == "healthy"
        assert result["details"]["wordpress"] is True
        assert result["details"]["pods"] == {"movies": True, "actors": True}

    @pytest.mark.asyncio
    async def test_one_pod_down(self):
        def handler(request):
            if request.url.path.endswith("/actors"):
                return httpx.Response(500, json={"message": "boom"})
            return httpx.Response(200, json=[])

        async with make_client(handler) as client:
            result = await client.health_check(["movies", "actors"])

        assert result["details"]["pods"] == {"movies": True, "actors": False}

    @pytest.mark.asyncio
    async def test_unreachable_is_unhealthy(self):
        def handler(request):
            raise httpx.ConnectError("no route to host", request=request)

        async with make_client(handler) as client:
            result = await client.health_check(["movies"])
        assert result["status"] == "unhealthy"
