import logging
from typing import Any, Optional, Dict
import traceback

logger = logging.getLogger("error_utils")


class DashboardError(Exception):
    """Base class for errors surfaced by the dashboard core."""
    classification = "dashboard_error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class BackendUnavailable(DashboardError):
    """A backend could not be reached, timed out, or answered with a non-2xx status."""
    classification = "backend_unavailable"

    def __init__(self, backend: str, detail: str):
        super().__init__(detail)
        self.backend = backend

    def __str__(self) -> str:
        return f"{self.backend}: {self.detail}"


class NotFound(DashboardError):
    """No container matched a requested name."""
    classification = "not_found"


class ParseFailure(DashboardError):
    """Malformed size string or payload shape. Recovered locally, never surfaced."""
    classification = "parse_failure"


def log_warning(message: str, context: Optional[Dict[str, Any]] = None):
    """
    Log a warning with optional context.
    """
    if context:
        logger.warning(f"{message} | Context: {context}")
    else:
        logger.warning(message)


def capture_exception(exc: Exception, context: Optional[Dict[str, Any]] = None):
    """
    Capture and log exception details.
    """
    logger.error(f"Exception captured: {exc}")
    if context:
        logger.error(f"Context: {context}")
    logger.error("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))


def describe_error(exc: BaseException) -> str:
    """
    Human readable text for an exception, never empty.
    """
    text = getattr(exc, "detail", None) or str(exc)
    return text if text else type(exc).__name__


def format_error_payload(exc: Exception) -> Dict[str, Any]:
    """
    Format a top-level failure for API responses.
    """
    classification = getattr(exc, "classification", "internal_error")
    return {
        "error": classification,
        "detail": describe_error(exc),
    }
