"""Tests for APScheduler job configuration and the nightly bulk sync body."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from moviesync.errors import TransportError
from moviesync.scheduler.jobs import _nightly_bulk_sync, build_scheduler


class TestBuildScheduler:
    def test_returns_scheduler(self):
        scheduler = build_scheduler(MagicMock())
        assert isinstance(scheduler, AsyncIOScheduler)

    def test_nightly_job_registered(self):
        scheduler = build_scheduler(MagicMock())
        job_ids = [job.id for job in scheduler.get_jobs()]
        assert "nightly_bulk_sync" in job_ids

    def test_nightly_job_is_cron(self):
        scheduler = build_scheduler(MagicMock())
        job = next(j for j in scheduler.get_jobs() if j.id == "nightly_bulk_sync")
        assert job.trigger.__class__.__name__ == "CronTrigger"

    def test_sync_hour_from_settings(self):
        with patch("moviesync.scheduler.jobs.get_settings") as mock_settings:
            mock_settings.return_value.bulk_sync_hour = 5
            scheduler = build_scheduler(MagicMock())

        job = next(j for j in scheduler.get_jobs() if j.id == "nightly_bulk_sync")
        fields = {f.name: f for f in job.trigger.fields}
        assert str(fields["hour"]) == "5"

    def test_scheduler_not_running_on_creation(self):
        assert not build_scheduler(MagicMock()).running


# ─── _nightly_bulk_sync job body ──────────────────────────────────────────────

def _mock_wp_client():
    client = MagicMock()
    client.__aenter__.return_value = client
    client.__aexit__.return_value = None
    return client


class TestNightlyBulkSync:
    """build_wordpress_client and bulk_sync_from_remote are imported inside the
    job body, so they are patched at their source modules."""

    @pytest.mark.asyncio
    async def test_skips_without_wordpress_url(self):
        with patch("moviesync.scheduler.jobs.get_settings") as mock_settings, \
             patch("moviesync.api.deps.build_wordpress_client") as mock_build:
            mock_settings.return_value.wordpress_api_url = ""
            await _nightly_bulk_sync(MagicMock())
        mock_build.assert_not_called()

    @pytest.mark.asyncio
    async def test_pulls_every_pod(self):
        client = _mock_wp_client()
        with patch("moviesync.scheduler.jobs.get_settings") as mock_settings, \
             patch("moviesync.api.deps.build_wordpress_client", return_value=client), \
             patch("moviesync.sync.bulk.bulk_sync_from_remote", new=AsyncMock()) as mock_bulk:
            mock_settings.return_value.wordpress_api_url = "https://example.com"
            mock_settings.return_value.bulk_page_size = 50
            await _nightly_bulk_sync(MagicMock())

        pulled = [c.args[0].entity_type for c in mock_bulk.await_args_list]
        assert pulled == ["movie", "actor", "director", "experiment"]
        assert all(c.kwargs["page_size"] == 50 for c in mock_bulk.await_args_list)
        client.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_one_failing_pod_does_not_stop_the_rest(self):
        client = _mock_wp_client()
        with patch("moviesync.scheduler.jobs.get_settings") as mock_settings, \
             patch("moviesync.api.deps.build_wordpress_client", return_value=client), \
             patch(
                 "moviesync.sync.bulk.bulk_sync_from_remote",
                 new=AsyncMock(side_effect=[TransportError("down"), None, None, None]),
             ) as mock_bulk:
            mock_settings.return_value.wordpress_api_url = "https://example.com"
            await _nightly_bulk_sync(MagicMock())  # must not raise

        assert mock_bulk.await_count == 4
