"""
Dependency injection for FastAPI routes.
Provides access to the dashboard service and request validation.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request

from stack_monitor.config import Settings, get_settings
from stack_monitor.services.dashboard_service import DashboardService


def get_dashboard_service(request: Request) -> DashboardService:
    """Service built by the application lifespan."""
    service = getattr(request.app.state, "dashboard_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Dashboard service not initialized")
    return service


def get_current_settings() -> Settings:
    return get_settings()


def get_log_lines(lines: Optional[int] = None, settings: Settings = Depends(get_current_settings)) -> int:
    """Validate the requested number of log lines."""
    if lines is None:
        return settings.default_log_lines

    if lines <= 0 or lines > settings.max_log_lines:
        raise HTTPException(
            status_code=400,
            detail=f"lines must be between 1 and {settings.max_log_lines}"
        )

    return lines
