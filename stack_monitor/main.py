from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stack_monitor.api import routes
from stack_monitor.config import get_settings
from stack_monitor.models.schemas import ErrorResponse
from stack_monitor.services.dashboard_service import DashboardService
from stack_monitor.utils.error_utils import BackendUnavailable, DashboardError, NotFound, format_error_payload

settings = get_settings()
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

logger = logging.getLogger("stack_monitor")

ERROR_STATUS = {
    NotFound: 404,
    BackendUnavailable: 502,
}


def create_app(service: Optional[DashboardService] = None) -> FastAPI:
    """
    Build the FastAPI application. Backend clients are created at startup and
    closed at shutdown unless a ready-made service is supplied.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = service is None
        app.state.dashboard_service = DashboardService.from_settings(settings) if owned else service
        logger.info(f"{settings.app_name} {settings.app_version} started")
        try:
            yield
        finally:
            if owned:
                await app.state.dashboard_service.close()

    app = FastAPI(title=settings.app_name, version=settings.app_version, debug=settings.debug, lifespan=lifespan)
    app.include_router(routes.router, prefix="/api")

    @app.exception_handler(DashboardError)
    async def dashboard_error_handler(request: Request, exc: DashboardError):
        status_code = next((code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 500)
        logger.warning(f"{request.url.path} failed: {exc}")
        payload = ErrorResponse(**format_error_payload(exc))
        return JSONResponse(status_code=status_code, content=payload.model_dump())

    return app


app = create_app()


def run():
    import uvicorn
    uvicorn.run("stack_monitor.main:app", host=settings.host, port=settings.port)
