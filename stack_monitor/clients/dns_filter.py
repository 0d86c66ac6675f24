"""
Pi-hole API client. Plain passthrough of the legacy ``api.php`` endpoints.
"""

from typing import Any, Dict

import httpx

from stack_monitor.clients.base import BackendClient
from stack_monitor.config import Settings

API_PATH = "/admin/api.php"


class DnsFilterClient(BackendClient):
    backend_name = "pihole"

    @classmethod
    def from_settings(cls, settings: Settings) -> "DnsFilterClient":
        client = httpx.AsyncClient(base_url=settings.pihole_url, timeout=settings.data_timeout_seconds)
        return cls(client)

    async def status(self) -> Dict[str, Any]:
        return await self._get_json(API_PATH)

    async def summary(self) -> Dict[str, Any]:
        return await self._get_json(API_PATH, params={"summary": ""})

    async def query_types_over_time(self) -> Dict[str, Any]:
        return await self._get_json(API_PATH, params={"queryTypesOverTime": ""})
