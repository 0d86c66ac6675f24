"""
Shared plumbing for the read-only backend clients.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from stack_monitor.utils.error_utils import BackendUnavailable, describe_error, log_warning
from stack_monitor.utils.otel_utils import start_trace


class BackendClient:
    """
    Thin request/response wrapper around an ``httpx.AsyncClient``.

    Every call is a single attempt. Transport errors, timeouts, non-2xx
    statuses and undecodable bodies all surface as ``BackendUnavailable``.
    Safe to use concurrently; holds no state besides the connection pool.
    """

    backend_name = "backend"

    def __init__(self, client: httpx.AsyncClient):
        self.client = client
        self.logger = logging.getLogger(type(self).__name__)

    async def close(self):
        await self.client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        kwargs: Dict[str, Any] = {"params": params, "json": json}
        if timeout is not None:
            kwargs["timeout"] = timeout
        with start_trace(f"{self.backend_name}.{method.lower()}", {"http.target": path}):
            try:
                response = await self.client.request(method, path, **kwargs)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                detail = f"{e.response.status_code} {e.response.reason_phrase} from {method} {path}"
                log_warning(f"{self.backend_name} request failed", {"path": path, "status": e.response.status_code})
                raise BackendUnavailable(self.backend_name, detail) from e
            except httpx.HTTPError as e:
                log_warning(f"{self.backend_name} unreachable", {"path": path, "error": describe_error(e)})
                raise BackendUnavailable(self.backend_name, describe_error(e)) from e
        return response

    async def _get_json(self, path: str, **kwargs) -> Any:
        return self._decode(await self._request("GET", path, **kwargs), path)

    async def _post_json(self, path: str, body: Dict[str, Any], **kwargs) -> Any:
        return self._decode(await self._request("POST", path, json=body, **kwargs), path)

    def _decode(self, response: httpx.Response, path: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise BackendUnavailable(self.backend_name, f"Invalid JSON from {path}: {e}") from e
