"""
OpenSearch REST client.
"""

from typing import Any, Dict, List, Optional, Sequence

import httpx

from stack_monitor.clients.base import BackendClient
from stack_monitor.config import Settings

CATALOG_FIELDS = ("index", "health", "status", "docs.count", "store.size", "creation.date")


class SearchClusterClient(BackendClient):
    backend_name = "opensearch"

    @classmethod
    def from_settings(cls, settings: Settings) -> "SearchClusterClient":
        client = httpx.AsyncClient(
            base_url=settings.opensearch_url,
            timeout=settings.data_timeout_seconds,
        )
        return cls(client)

    async def cluster_health(self, timeout: Optional[float] = None) -> Dict[str, Any]:
        return await self._get_json("/_cluster/health", timeout=timeout)

    async def list_indices(self, pattern: str, fields: Sequence[str] = CATALOG_FIELDS) -> List[Dict[str, Any]]:
        """``_cat/indices`` rows as JSON, restricted to the selected columns."""
        params = {"format": "json"}
        if fields:
            params["h"] = ",".join(fields)
        return await self._get_json(f"/_cat/indices/{pattern}", params=params)

    async def search(self, index_pattern: str, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self._post_json(f"/{index_pattern}/_search", body)

    async def node_fs_stats(self) -> Dict[str, Any]:
        return await self._get_json("/_nodes/stats/fs")
