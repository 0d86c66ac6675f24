"""
Fan-out aggregation over the container runtime and the search cluster.

Per-container polling tolerates partial failure: each identity's inspect and
stats calls settle independently and degrade into missing fields. The
cluster composite is all-or-nothing: without the index catalog the totals are
meaningless, so any failed sub-query fails the whole call.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from stack_monitor.clients.container_runtime import ContainerRuntimeClient
from stack_monitor.clients.search_cluster import SearchClusterClient
from stack_monitor.core.metrics_calculator import (
    build_lifecycle,
    build_resource_sample,
    calculate_ingestion_rate,
    parse_byte_size,
)
from stack_monitor.models.schemas import (
    ClusterSnapshot,
    ContainerLifecycle,
    ContainerRef,
    ContainerSnapshot,
    IndexSummary,
    ResourceSample,
    StatsSummary,
)
from stack_monitor.utils.async_utils import Settled, settle_all
from stack_monitor.utils.error_utils import ParseFailure, describe_error, log_warning
from stack_monitor.utils.otel_utils import start_trace

BYTES_PER_GB = 1024 ** 3


def build_stats_query() -> Dict[str, Any]:
    """Aggregations over the last hour of sensor events."""
    return {
        "size": 0,
        "query": {"range": {"@timestamp": {"gte": "now-1h"}}},
        "aggs": {
            "event_types": {"terms": {"field": "event_type", "size": 10}},
            "alerts_by_severity": {"terms": {"field": "alert.severity", "size": 10}},
            "hourly_events": {"date_histogram": {"field": "@timestamp", "calendar_interval": "1h"}},
            "recent_events": {"date_histogram": {"field": "@timestamp", "calendar_interval": "1m"}},
        },
    }


class FanOutAggregator:
    """Builds container snapshots and cluster stats from concurrent backend queries."""

    def __init__(self, runtime: ContainerRuntimeClient, search: SearchClusterClient, index_pattern: str):
        self.runtime = runtime
        self.search = search
        self.index_pattern = index_pattern

    # ==========================================
    # CONTAINERS
    # ==========================================

    async def collect_container_snapshots(self, refs: Sequence[ContainerRef]) -> List[ContainerSnapshot]:
        """
        One snapshot per ref, in input order. Every inspect and stats call
        runs concurrently; a failing identity never affects the others.
        """
        with start_trace("aggregator.containers", {"container.count": len(refs)}):
            return list(await asyncio.gather(*[self._snapshot(ref) for ref in refs]))

    async def _snapshot(self, ref: ContainerRef) -> ContainerSnapshot:
        inspected, stats = await settle_all(
            self.runtime.inspect(ref.id),
            self.runtime.stats_once(ref.id),
        )
        errors = []

        lifecycle, inspect_error = self._lifecycle(inspected)
        if inspect_error:
            errors.append(f"Inspect unavailable: {inspect_error}")

        resources, stats_error = self._resource_sample(stats)
        if stats_error:
            errors.append(f"Stats unavailable: {stats_error}")

        if errors:
            log_warning("Degraded container snapshot", {"container": ref.name, "errors": errors})

        return ContainerSnapshot(
            name=ref.name,
            status=ref.state,
            created=ref.created,
            error="; ".join(errors) if errors else (lifecycle.error if lifecycle else None),
            resources=resources,
            **(lifecycle.model_dump(exclude={"error"}) if lifecycle else {}),
        )

    @staticmethod
    def _lifecycle(inspected: Settled) -> Tuple[Optional[ContainerLifecycle], Optional[str]]:
        if not inspected.ok:
            return None, describe_error(inspected.error)
        try:
            return build_lifecycle(inspected.value), None
        except ParseFailure as e:
            return None, describe_error(e)

    @staticmethod
    def _resource_sample(stats: Settled) -> Tuple[Optional[ResourceSample], Optional[str]]:
        """Either a complete sample or the reason there is none."""
        if not stats.ok:
            return None, describe_error(stats.error)
        try:
            return build_resource_sample(stats.value), None
        except ParseFailure as e:
            return None, describe_error(e)

    # ==========================================
    # CLUSTER
    # ==========================================

    async def collect_cluster_snapshot(self) -> ClusterSnapshot:
        """
        Cluster health, index catalog and aggregation search, concurrently.
        Raises BackendUnavailable if any of the three fails.
        """
        with start_trace("aggregator.cluster"):
            health, catalog, search = await asyncio.gather(
                self.search.cluster_health(),
                self.search.list_indices(self.index_pattern),
                self.search.search(self.index_pattern, build_stats_query()),
            )
        return ClusterSnapshot(
            health=health,
            indices=[IndexSummary.from_catalog(row) for row in catalog or []],
            aggregations=(search or {}).get("aggregations") or {},
        )

    @staticmethod
    def summarize_cluster(snapshot: ClusterSnapshot) -> StatsSummary:
        total_size = sum(parse_byte_size(index.store_size_raw) for index in snapshot.indices)
        buckets = (snapshot.aggregations.get("recent_events") or {}).get("buckets") or []
        return StatsSummary(
            cluster_health=snapshot.health,
            total_documents=sum(index.doc_count for index in snapshot.indices),
            total_size_bytes=total_size,
            total_size_gb=total_size / BYTES_PER_GB,
            indices_count=len(snapshot.indices),
            ingestion_rate_per_second=calculate_ingestion_rate(buckets),
            aggregations=snapshot.aggregations,
            last_update=datetime.now(timezone.utc),
        )
