"""
API routes for the security stack dashboard.
Thin wrappers over DashboardService; failures are rendered by the
exception handlers registered in main.py.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from typing import Any, Dict, List
from datetime import datetime, timezone

from stack_monitor.api.dependencies import get_dashboard_service, get_log_lines
from stack_monitor.config import get_settings
from stack_monitor.models.schemas import ContainerSnapshot, ErrorResponse, StatsSummary
from stack_monitor.services.dashboard_service import DashboardService

router = APIRouter(responses={
    404: {"model": ErrorResponse, "description": "No matching container"},
    502: {"model": ErrorResponse, "description": "A backend is unreachable or returned an error"},
})

# ==========================================
# SEARCH CLUSTER
# ==========================================

@router.get("/health")
async def get_cluster_health(service: DashboardService = Depends(get_dashboard_service)):
    """OpenSearch cluster health, passed through."""
    return await service.get_cluster_health()


@router.get("/indices")
async def get_indices(service: DashboardService = Depends(get_dashboard_service)) -> List[Dict[str, Any]]:
    """Index catalog for the sensor data pattern."""
    return await service.get_indices()


@router.get("/stats", response_model=StatsSummary)
async def get_stats(service: DashboardService = Depends(get_dashboard_service)):
    """Cluster totals, ingestion rate and event aggregations."""
    return await service.get_stats()


# ==========================================
# CONTAINERS
# ==========================================

@router.get("/containers", response_model=List[ContainerSnapshot], response_model_exclude_none=True)
async def get_containers(service: DashboardService = Depends(get_dashboard_service)):
    """Lifecycle and resource usage of the monitored containers."""
    return await service.get_containers()


@router.get("/logs/{service_name}", response_class=PlainTextResponse)
async def get_logs(
    service_name: str,
    lines: int = Depends(get_log_lines),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Recent log lines of the first running container matching the name."""
    return PlainTextResponse(await service.get_logs(service_name, lines))


# ==========================================
# VALIDATION
# ==========================================

@router.get("/validate")
async def validate_pipeline(service: DashboardService = Depends(get_dashboard_service)):
    """Run the pipeline checks."""
    report = await service.get_validation_report()
    return {
        "checks": [check.model_dump(mode="json") for check in report.checks],
        "overall_status": report.overall_status.value,
        "timestamp": report.generated_at.isoformat() if report.generated_at else None,
    }


# ==========================================
# DNS FILTER
# ==========================================

@router.get("/pihole/status")
async def get_pihole_status(service: DashboardService = Depends(get_dashboard_service)):
    return await service.get_dns_status()


@router.get("/pihole/summary")
async def get_pihole_summary(service: DashboardService = Depends(get_dashboard_service)):
    return await service.get_dns_summary()


@router.get("/pihole/querytypes")
async def get_pihole_query_types(service: DashboardService = Depends(get_dashboard_service)):
    return await service.get_dns_query_types()


# ==========================================
# UTILITY ENDPOINTS
# ==========================================

@router.get("/healthz")
async def health_check():
    """Liveness of the dashboard itself."""
    settings = get_settings()
    return {
        "status": "healthy",
        "service": settings.app_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.app_version
    }
