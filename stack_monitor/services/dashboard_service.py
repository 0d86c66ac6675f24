from typing import Any, Dict, List
import logging

from stack_monitor.clients.container_runtime import ContainerRuntimeClient
from stack_monitor.clients.dns_filter import DnsFilterClient
from stack_monitor.clients.search_cluster import SearchClusterClient
from stack_monitor.config import Settings
from stack_monitor.core.aggregator import FanOutAggregator
from stack_monitor.core.log_parser import demultiplex_logs
from stack_monitor.core.validation_engine import ValidationEngine
from stack_monitor.models.schemas import ContainerSnapshot, StatsSummary, ValidationReport
from stack_monitor.utils.error_utils import NotFound
from stack_monitor.utils.otel_utils import start_trace


class DashboardService:
    """
    Read-only entry point for the dashboard.
    Every call polls the backends afresh; nothing is cached between calls.
    """
    def __init__(
        self,
        runtime: ContainerRuntimeClient,
        search: SearchClusterClient,
        dns: DnsFilterClient,
        settings: Settings,
    ):
        self.runtime = runtime
        self.search = search
        self.dns = dns
        self.settings = settings
        self.aggregator = FanOutAggregator(runtime, search, settings.data_index_pattern)
        self.validation = ValidationEngine(runtime, search, settings)
        self.logger = logging.getLogger("DashboardService")

    @classmethod
    def from_settings(cls, settings: Settings) -> "DashboardService":
        return cls(
            runtime=ContainerRuntimeClient.from_settings(settings),
            search=SearchClusterClient.from_settings(settings),
            dns=DnsFilterClient.from_settings(settings),
            settings=settings,
        )

    async def close(self):
        for client in (self.runtime, self.search, self.dns):
            await client.close()

    async def get_containers(self) -> List[ContainerSnapshot]:
        """
        Snapshots of the monitored containers. Fails only if the container
        listing itself fails; per-container errors are reported inline.
        """
        refs = await self.runtime.list_monitored(self.settings.monitored_container_patterns)
        return await self.aggregator.collect_container_snapshots(refs)

    async def get_stats(self) -> StatsSummary:
        snapshot = await self.aggregator.collect_cluster_snapshot()
        return self.aggregator.summarize_cluster(snapshot)

    async def get_validation_report(self) -> ValidationReport:
        return await self.validation.run()

    async def get_logs(self, service: str, max_lines: int) -> str:
        """Plain-text tail of the first running container whose name contains ``service``."""
        with start_trace("dashboard.logs", {"service": service}):
            container = await self.runtime.find_container(service, running_only=True)
            if container is None:
                raise NotFound(f"Container {service} not found")
            raw = await self.runtime.tail_logs(container.id, max_lines)
        self.logger.debug(f"Fetched {len(raw)} bytes of logs from {container.name}")
        return demultiplex_logs(raw)

    # Passthrough queries

    async def get_cluster_health(self) -> Dict[str, Any]:
        return await self.search.cluster_health()

    async def get_indices(self) -> List[Dict[str, Any]]:
        return await self.search.list_indices(self.settings.data_index_pattern)

    async def get_dns_status(self) -> Dict[str, Any]:
        return await self.dns.status()

    async def get_dns_summary(self) -> Dict[str, Any]:
        return await self.dns.summary()

    async def get_dns_query_types(self) -> Dict[str, Any]:
        return await self.dns.query_types_over_time()
