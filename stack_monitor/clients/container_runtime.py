"""
Docker Engine API client.

Talks to the daemon over its unix socket (or plain TCP) with httpx, exposing
only the read-only calls the dashboard needs.
"""

from typing import Any, Dict, Iterable, List, Optional

import httpx

from stack_monitor.clients.base import BackendClient
from stack_monitor.config import Settings
from stack_monitor.models.schemas import ContainerRef


class ContainerRuntimeClient(BackendClient):
    backend_name = "docker"

    @classmethod
    def from_settings(cls, settings: Settings) -> "ContainerRuntimeClient":
        host = settings.docker_host
        transport = None
        if host.startswith("unix://"):
            transport = httpx.AsyncHTTPTransport(uds=host[len("unix://"):])
            base_url = "http://docker"
        else:
            base_url = host.replace("tcp://", "http://", 1)
        if settings.docker_api_version:
            base_url = f"{base_url.rstrip('/')}/{settings.docker_api_version}"
        client = httpx.AsyncClient(
            base_url=base_url,
            transport=transport,
            timeout=settings.data_timeout_seconds,
        )
        return cls(client)

    async def list_containers(self, all: bool = True) -> List[Dict[str, Any]]:
        """Raw container listing. ``all=False`` returns running containers only."""
        return await self._get_json("/containers/json", params={"all": "true" if all else "false"})

    async def list_monitored(self, patterns: Iterable[str]) -> List[ContainerRef]:
        """Containers whose name contains any of the patterns, in listing order."""
        patterns = list(patterns)
        entries = await self.list_containers(all=True)
        return [
            ContainerRef.from_listing(entry)
            for entry in entries
            if any(ContainerRef.matches(entry, pattern) for pattern in patterns)
        ]

    async def find_container(self, substring: str, running_only: bool = False) -> Optional[ContainerRef]:
        entries = await self.list_containers(all=not running_only)
        for entry in entries:
            if ContainerRef.matches(entry, substring):
                return ContainerRef.from_listing(entry)
        return None

    async def inspect(self, container_id: str) -> Dict[str, Any]:
        return await self._get_json(f"/containers/{container_id}/json")

    async def stats_once(self, container_id: str) -> Dict[str, Any]:
        """
        One stats payload, not a stream. Carries both the current
        (``cpu_stats``) and previous (``precpu_stats``) counter readings.
        """
        return await self._get_json(f"/containers/{container_id}/stats", params={"stream": "false"})

    async def tail_logs(self, container_id: str, max_lines: int) -> bytes:
        """Last ``max_lines`` of stdout and stderr, still carrying stream framing."""
        response = await self._request(
            "GET",
            f"/containers/{container_id}/logs",
            params={
                "stdout": "true",
                "stderr": "true",
                "tail": str(max_lines),
                "timestamps": "true",
            },
        )
        return response.content
