"""
Core Pydantic models for the security stack monitor.
Defines data structures for container snapshots, cluster stats and validation reports.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from enum import Enum
from pydantic import BaseModel, Field, field_validator


class ContainerRef(BaseModel):
    """A container as listed by the runtime."""
    id: str
    name: str
    state: str = "unknown"
    created: Optional[int] = None

    @classmethod
    def from_listing(cls, entry: Dict[str, Any]) -> "ContainerRef":
        names = entry.get("Names") or []
        name = names[0].lstrip("/") if names else entry.get("Id", "")[:12]
        return cls(
            id=entry.get("Id", ""),
            name=name,
            state=entry.get("State") or "unknown",
            created=entry.get("Created"),
        )

    @staticmethod
    def matches(entry: Dict[str, Any], substring: str) -> bool:
        """True if any of the listed names contains the substring."""
        return any(substring in name for name in entry.get("Names") or [])


class ResourceSample(BaseModel):
    """Resource usage derived from one stats payload (current and previous counters)."""
    cpu_percent: float
    memory_used_bytes: int
    memory_limit_bytes: int
    network_rx_bytes: int
    network_tx_bytes: int


class ContainerLifecycle(BaseModel):
    """Lifecycle fields read from an inspect payload."""
    restart_count: int = 0
    last_started: Optional[str] = None
    exit_code: Optional[int] = None
    error: Optional[str] = None


class ContainerSnapshot(BaseModel):
    """Lifecycle and resource state of one container at poll time."""
    name: str
    status: str
    created: Optional[int] = None
    restart_count: Optional[int] = None
    last_started: Optional[str] = None
    exit_code: Optional[int] = None
    error: Optional[str] = None
    resources: Optional[ResourceSample] = None


class IndexSummary(BaseModel):
    """One row of the index catalog."""
    name: str
    health: Optional[str] = None
    status: Optional[str] = None
    doc_count: int = 0
    store_size_raw: Optional[str] = None
    creation_date: Optional[str] = None

    @field_validator("doc_count", mode="before")
    @classmethod
    def parse_doc_count(cls, v):
        """The catalog reports counts as strings, or null for closed indices."""
        if v is None or v == "":
            return 0
        try:
            return int(v)
        except (TypeError, ValueError):
            return 0

    @classmethod
    def from_catalog(cls, row: Dict[str, Any]) -> "IndexSummary":
        return cls(
            name=row.get("index", ""),
            health=row.get("health"),
            status=row.get("status"),
            doc_count=row.get("docs.count"),
            store_size_raw=row.get("store.size"),
            creation_date=row.get("creation.date"),
        )


class ClusterSnapshot(BaseModel):
    """Raw cluster state gathered in one composite poll."""
    health: Dict[str, Any] = Field(default_factory=dict)
    indices: List[IndexSummary] = Field(default_factory=list)
    aggregations: Dict[str, Any] = Field(default_factory=dict)


class HitsTotal(BaseModel):
    """
    Normalized ``hits.total`` of a search response.

    Older clusters report a bare integer, newer ones an object with
    ``value`` and ``relation``.
    """
    value: int = 0
    relation: str = "eq"

    @classmethod
    def decode(cls, raw: Union[int, Dict[str, Any], None]) -> "HitsTotal":
        if raw is None:
            return cls()
        if isinstance(raw, bool):
            raise ValueError("hits.total must be an integer or an object")
        if isinstance(raw, int):
            return cls(value=raw)
        if isinstance(raw, dict):
            return cls(value=int(raw.get("value") or 0), relation=raw.get("relation", "eq"))
        raise ValueError(f"Unexpected hits.total shape: {type(raw).__name__}")

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "HitsTotal":
        return cls.decode((response.get("hits") or {}).get("total"))


class StatsSummary(BaseModel):
    """Cluster-wide totals shown on the dashboard header."""
    cluster_health: Dict[str, Any]
    total_documents: int
    total_size_bytes: float
    total_size_gb: float
    indices_count: int
    ingestion_rate_per_second: str
    aggregations: Dict[str, Any] = Field(default_factory=dict)
    last_update: datetime


class CheckStatus(str, Enum):
    """Tri-state result of a validation check."""
    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"


class CheckResult(BaseModel):
    name: str
    status: CheckStatus
    message: str


class ValidationReport(BaseModel):
    """Ordered check results. Order is fixed, not alphabetical or by severity."""
    checks: List[CheckResult] = Field(default_factory=list)
    generated_at: Optional[datetime] = None

    @property
    def overall_status(self) -> CheckStatus:
        statuses = {check.status for check in self.checks}
        if CheckStatus.FAIL in statuses:
            return CheckStatus.FAIL
        if CheckStatus.WARNING in statuses:
            return CheckStatus.WARNING
        return CheckStatus.PASS


class ErrorResponse(BaseModel):
    """Structured payload for a failed top-level call."""
    error: str
    detail: str
