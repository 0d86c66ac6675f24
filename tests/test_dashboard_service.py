"""Tests for the caller-facing dashboard service."""

import struct
from unittest.mock import AsyncMock, MagicMock

import pytest

from stack_monitor.models.schemas import ContainerRef
from stack_monitor.services.dashboard_service import DashboardService
from stack_monitor.utils.error_utils import BackendUnavailable, NotFound


def _make_service(settings, runtime=None, search=None, dns=None) -> DashboardService:
    return DashboardService(runtime or MagicMock(), search or MagicMock(), dns or MagicMock(), settings)


class TestDashboardService:

    @pytest.mark.asyncio
    async def test_containers_use_monitored_patterns(self, settings):
        runtime = MagicMock()
        runtime.list_monitored = AsyncMock(return_value=[ContainerRef(id="a1", name="suricata", state="running")])
        runtime.inspect = AsyncMock(side_effect=BackendUnavailable("docker", "timeout"))
        runtime.stats_once = AsyncMock(side_effect=BackendUnavailable("docker", "timeout"))

        [snapshot] = await _make_service(settings, runtime=runtime).get_containers()

        runtime.list_monitored.assert_awaited_once_with(settings.monitored_container_patterns)
        assert snapshot.name == "suricata"
        assert snapshot.resources is None
        assert "Inspect unavailable: timeout" in snapshot.error
        assert "Stats unavailable: timeout" in snapshot.error

    @pytest.mark.asyncio
    async def test_container_listing_failure_propagates(self, settings):
        runtime = MagicMock()
        runtime.list_monitored = AsyncMock(side_effect=BackendUnavailable("docker", "socket missing"))

        with pytest.raises(BackendUnavailable):
            await _make_service(settings, runtime=runtime).get_containers()

    @pytest.mark.asyncio
    async def test_logs_are_demultiplexed(self, settings):
        payload = b"alert 1\nalert 2\n"
        runtime = MagicMock()
        runtime.find_container = AsyncMock(return_value=ContainerRef(id="a1", name="suricata", state="running"))
        runtime.tail_logs = AsyncMock(return_value=struct.pack(">BxxxL", 1, len(payload)) + payload)

        text = await _make_service(settings, runtime=runtime).get_logs("suri", 20)

        assert text == "alert 1\nalert 2"
        runtime.find_container.assert_awaited_once_with("suri", running_only=True)
        runtime.tail_logs.assert_awaited_once_with("a1", 20)

    @pytest.mark.asyncio
    async def test_logs_for_unknown_service(self, settings):
        runtime = MagicMock()
        runtime.find_container = AsyncMock(return_value=None)
        runtime.tail_logs = AsyncMock()

        with pytest.raises(NotFound):
            await _make_service(settings, runtime=runtime).get_logs("nginx", 50)
        runtime.tail_logs.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stats_sum_catalog(self, settings):
        search = MagicMock()
        search.cluster_health = AsyncMock(return_value={"status": "green"})
        search.list_indices = AsyncMock(return_value=[
            {"index": "suricata-a", "docs.count": "7", "store.size": "1kb"},
            {"index": "suricata-b", "docs.count": "5", "store.size": "???"},
        ])
        search.search = AsyncMock(return_value={"aggregations": {}})

        stats = await _make_service(settings, search=search).get_stats()

        assert stats.total_documents == 12
        assert stats.total_size_bytes == 1024
        assert stats.ingestion_rate_per_second == "0"

    @pytest.mark.asyncio
    async def test_close_closes_every_client(self, settings):
        clients = [MagicMock(close=AsyncMock()) for _ in range(3)]

        await _make_service(settings, *clients).close()

        for client in clients:
            client.close.assert_awaited_once()
