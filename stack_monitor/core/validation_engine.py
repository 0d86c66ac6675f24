"""
Pipeline validation checks.

Runs a fixed, ordered set of independent checks against the live stack and
reports pass / warning / fail for each. A check that raises is converted into
its own result; it never aborts or skips the others.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Tuple

from stack_monitor.clients.container_runtime import ContainerRuntimeClient
from stack_monitor.clients.search_cluster import SearchClusterClient
from stack_monitor.config import Settings
from stack_monitor.core.metrics_calculator import calculate_disk_free_percent, classify_disk_free
from stack_monitor.models.schemas import CheckResult, CheckStatus, ContainerRef, HitsTotal, ValidationReport
from stack_monitor.utils.error_utils import (
    BackendUnavailable,
    DashboardError,
    ParseFailure,
    capture_exception,
    describe_error,
    log_warning,
)
from stack_monitor.utils.otel_utils import start_trace

Outcome = Tuple[CheckStatus, str]


@dataclass
class Check:
    name: str
    run: Callable[[], Awaitable[Outcome]]
    status_on_error: CheckStatus
    error_prefix: str


class ValidationEngine:
    """Runs the validation checks once per report; nothing is kept between reports."""

    def __init__(self, runtime: ContainerRuntimeClient, search: SearchClusterClient, settings: Settings):
        self.runtime = runtime
        self.search = search
        self.settings = settings
        self.logger = logging.getLogger("ValidationEngine")

    async def run(self) -> ValidationReport:
        """
        Checks run concurrently but are reported in fixed order:
        connectivity, sensor, pipeline, data flow, capacity.
        """
        with start_trace("validation.run"):
            # One container listing per report, shared by both liveness checks.
            listing = asyncio.ensure_future(self.runtime.list_containers(all=True))
            sensor = self.settings.sensor_container_name.capitalize()
            pipeline = self.settings.pipeline_container_name.capitalize()
            checks = [
                Check("OpenSearch Connection", self._check_connectivity,
                      CheckStatus.FAIL, "Cannot connect to OpenSearch"),
                Check(f"{sensor} Status", lambda: self._check_sensor(listing),
                      CheckStatus.FAIL, f"Cannot check {sensor} status"),
                Check(f"{pipeline} Status", lambda: self._check_pipeline(listing),
                      CheckStatus.FAIL, f"Cannot check {pipeline} status"),
                Check("Data Pipeline", self._check_data_flow,
                      CheckStatus.WARNING, "Cannot verify data pipeline"),
                Check("Disk Space", self._check_capacity,
                      CheckStatus.WARNING, "Cannot check disk space"),
            ]
            try:
                results: List[CheckResult] = list(await asyncio.gather(*[self._run_check(c) for c in checks]))
            finally:
                if not listing.done():
                    listing.cancel()

        report = ValidationReport(checks=results, generated_at=datetime.now(timezone.utc))
        self.logger.info(f"Validation finished: {report.overall_status.value}")
        return report

    async def _run_check(self, check: Check) -> CheckResult:
        try:
            status, message = await check.run()
        except DashboardError as e:
            log_warning(f"Check '{check.name}' could not complete", {"error": describe_error(e)})
            return CheckResult(name=check.name, status=check.status_on_error,
                               message=f"{check.error_prefix}: {describe_error(e)}")
        except Exception as e:
            capture_exception(e, {"check": check.name})
            return CheckResult(name=check.name, status=check.status_on_error,
                               message=f"{check.error_prefix}: {describe_error(e)}")
        return CheckResult(name=check.name, status=status, message=message)

    # ==========================================
    # CHECKS
    # ==========================================

    async def _check_connectivity(self) -> Outcome:
        timeout = self.settings.connectivity_timeout_seconds
        try:
            await asyncio.wait_for(self.search.cluster_health(timeout=timeout), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise BackendUnavailable("opensearch", f"no response within {timeout:g}s") from e
        return CheckStatus.PASS, "Successfully connected to OpenSearch"

    async def _find(self, listing: "asyncio.Future[List[Dict[str, Any]]]", substring: str):
        for entry in await listing:
            if ContainerRef.matches(entry, substring):
                return ContainerRef.from_listing(entry)
        return None

    async def _check_sensor(self, listing) -> Outcome:
        label = self.settings.sensor_container_name.capitalize()
        container = await self._find(listing, self.settings.sensor_container_name)
        if container is None:
            return CheckStatus.FAIL, f"{label} container not found"
        if container.state != "running":
            return CheckStatus.FAIL, f"{label} is {container.state}"
        return CheckStatus.PASS, f"{label} is running"

    async def _check_pipeline(self, listing) -> Outcome:
        # A stalled shipper is tolerated as a warning, unlike the sensor.
        label = self.settings.pipeline_container_name.capitalize()
        container = await self._find(listing, self.settings.pipeline_container_name)
        if container is None:
            return CheckStatus.WARNING, f"{label} container not found"
        if container.state != "running":
            return CheckStatus.WARNING, f"{label} is {container.state}"
        return CheckStatus.PASS, f"{label} is running"

    async def _check_data_flow(self) -> Outcome:
        pattern = self.settings.data_index_pattern
        response = await self.search.search(pattern, {"size": 1, "query": {"match_all": {}}})
        try:
            hits = HitsTotal.from_response(response).value
        except (ValueError, TypeError, AttributeError) as e:
            raise ParseFailure(f"Unexpected search response: {e}") from e
        if hits > 0:
            return CheckStatus.PASS, f"Found {hits} documents in {pattern} indices"
        return CheckStatus.WARNING, f"No data found in {pattern} indices - check if logs are being generated"

    async def _check_capacity(self) -> Outcome:
        stats = await self.search.node_fs_stats()
        nodes = (stats or {}).get("nodes") or {}
        if not nodes:
            raise ParseFailure("No node reported filesystem stats")
        node = next(iter(nodes.values()))
        try:
            fs_total = node["fs"]["total"]
            free_percent = calculate_disk_free_percent(fs_total["free_in_bytes"], fs_total["total_in_bytes"])
        except (KeyError, TypeError) as e:
            raise ParseFailure(f"Missing filesystem field {e}") from e

        status = classify_disk_free(
            free_percent,
            self.settings.disk_pass_threshold_percent,
            self.settings.disk_warning_threshold_percent,
        )
        if status == CheckStatus.PASS:
            return status, f"{free_percent:.1f}% free space available"
        if status == CheckStatus.WARNING:
            return status, f"Only {free_percent:.1f}% free space remaining"
        return status, f"Critical: Only {free_percent:.1f}% free space remaining"
