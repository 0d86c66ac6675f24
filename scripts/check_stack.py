#!/usr/bin/env python3
"""
Run the pipeline validation and container poll once against the live stack
and print the results. Uses the same settings (.env / environment) as the API.
"""

import asyncio
import logging

# Set up logging
logging.basicConfig(level=logging.WARNING, format='%(asctime)s - %(levelname)s - %(message)s')

from stack_monitor.config import get_settings
from stack_monitor.models.schemas import CheckStatus
from stack_monitor.services.dashboard_service import DashboardService
from stack_monitor.utils.error_utils import DashboardError

STATUS_ICONS = {
    CheckStatus.PASS: "✅",
    CheckStatus.WARNING: "⚠️ ",
    CheckStatus.FAIL: "❌",
}


async def print_validation(service: DashboardService):
    report = await service.get_validation_report()
    print("\n🔍 Pipeline Validation")
    for check in report.checks:
        print(f"   {STATUS_ICONS[check.status]} {check.name}: {check.message}")
    print(f"   Overall: {report.overall_status.value}")


async def print_containers(service: DashboardService):
    print("\n📦 Containers")
    try:
        snapshots = await service.get_containers()
    except DashboardError as e:
        print(f"   ❌ Cannot list containers: {e}")
        return
    for snapshot in snapshots:
        line = f"   - {snapshot.name} [{snapshot.status}]"
        if snapshot.resources:
            mem_mb = snapshot.resources.memory_used_bytes / (1024 * 1024)
            line += f" cpu={snapshot.resources.cpu_percent:.1f}% mem={mem_mb:.0f}MB"
        if snapshot.error:
            line += f" error={snapshot.error}"
        print(line)


async def print_stats(service: DashboardService):
    print("\n📊 Cluster Stats")
    try:
        stats = await service.get_stats()
    except DashboardError as e:
        print(f"   ❌ Stats unavailable: {e}")
        return
    print(f"   - documents: {stats.total_documents}")
    print(f"   - size: {stats.total_size_gb:.2f} GB across {stats.indices_count} indices")
    print(f"   - ingestion: {stats.ingestion_rate_per_second} docs/s")


async def main():
    service = DashboardService.from_settings(get_settings())
    try:
        await print_validation(service)
        await print_containers(service)
        await print_stats(service)
    finally:
        await service.close()


if __name__ == "__main__":
    asyncio.run(main())
