"""
Derived metric calculations.

Pure functions that turn raw backend payloads into the normalized values shown
on the dashboard. Nothing here performs I/O.
"""

import re
from typing import Any, Dict, Optional, Sequence

from pydantic import ValidationError

from stack_monitor.models.schemas import CheckStatus, ContainerLifecycle, ResourceSample
from stack_monitor.utils.error_utils import ParseFailure

SIZE_MULTIPLIERS = {
    "b": 1,
    "k": 1024,
    "m": 1024 ** 2,
    "g": 1024 ** 3,
    "t": 1024 ** 4,
}

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?|\.\d+)\s*([kmgt]?b)?\s*$", re.IGNORECASE)


def calculate_cpu_percentage(
    cur_total: float,
    prev_total: float,
    cur_system: float,
    prev_system: float,
    online_cpus: int,
) -> float:
    """
    CPU utilization from two cumulative counter readings.

    Returns 0 unless both the container and system deltas are strictly
    positive (counter reset, or no previous baseline yet).
    """
    cpu_delta = cur_total - prev_total
    system_delta = cur_system - prev_system
    if cpu_delta > 0 and system_delta > 0:
        return (cpu_delta / system_delta) * online_cpus * 100
    return 0.0


def cpu_percent_from_stats(stats: Dict[str, Any]) -> float:
    """CPU percentage from a runtime stats payload."""
    try:
        cpu = stats["cpu_stats"]
        precpu = stats.get("precpu_stats") or {}
        cur_total = cpu["cpu_usage"]["total_usage"]
        cur_system = cpu.get("system_cpu_usage")
        prev_total = (precpu.get("cpu_usage") or {}).get("total_usage")
        prev_system = precpu.get("system_cpu_usage")
        online_cpus = cpu.get("online_cpus") or len(cpu["cpu_usage"].get("percpu_usage") or []) or 1
    except (KeyError, TypeError, AttributeError) as e:
        raise ParseFailure(f"Malformed cpu stats: {e!r}") from e

    if None in (cur_total, cur_system, prev_total, prev_system):
        return 0.0
    try:
        return calculate_cpu_percentage(cur_total, prev_total, cur_system, prev_system, online_cpus)
    except TypeError as e:
        raise ParseFailure(f"Non-numeric cpu counters: {e}") from e


def build_resource_sample(stats: Dict[str, Any], interface: str = "eth0") -> ResourceSample:
    """
    Resource sample from one stats payload. Raises ParseFailure instead of
    returning a partially filled sample.
    """
    if not isinstance(stats, dict):
        raise ParseFailure(f"Stats payload is {type(stats).__name__}, expected object")
    cpu_percent = cpu_percent_from_stats(stats)
    memory = stats.get("memory_stats") or {}
    network = (stats.get("networks") or {}).get(interface) or {}
    try:
        return ResourceSample(
            cpu_percent=cpu_percent,
            memory_used_bytes=int(memory.get("usage") or 0),
            memory_limit_bytes=int(memory.get("limit") or 0),
            network_rx_bytes=int(network.get("rx_bytes") or 0),
            network_tx_bytes=int(network.get("tx_bytes") or 0),
        )
    except (TypeError, ValueError) as e:
        raise ParseFailure(f"Malformed memory or network stats: {e}") from e


def build_lifecycle(details: Any) -> ContainerLifecycle:
    """Restart count, start time, exit code and runtime error from an inspect payload."""
    if details is None:
        return ContainerLifecycle()
    if not isinstance(details, dict):
        raise ParseFailure(f"Inspect payload is {type(details).__name__}, expected object")
    state = details.get("State") or {}
    if not isinstance(state, dict):
        raise ParseFailure(f"Inspect State is {type(state).__name__}, expected object")
    try:
        return ContainerLifecycle(
            restart_count=details.get("RestartCount") or 0,
            last_started=state.get("StartedAt"),
            exit_code=state.get("ExitCode"),
            error=state.get("Error") or None,
        )
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise ParseFailure(f"Malformed inspect fields: {fields or 'unknown'}") from e


def parse_byte_size(size: Optional[str]) -> float:
    """
    Convert a catalog size string such as ``"1.5gb"`` or ``"512kb"`` to bytes.

    Units are powers of 1024. Anything unparsable counts as 0.
    """
    if not size or not isinstance(size, str):
        return 0.0
    match = _SIZE_PATTERN.match(size)
    if not match:
        return 0.0
    magnitude, unit = match.groups()
    multiplier = SIZE_MULTIPLIERS[unit[0].lower()] if unit else 1
    return float(magnitude) * multiplier


def calculate_ingestion_rate(buckets: Sequence[Dict[str, Any]]) -> str:
    """
    Approximate documents per second from one-minute histogram buckets.

    Uses the last bucket, which may be a minute still in progress, so the
    value under-reports early in each minute. Formatted with two decimals,
    or ``"0"`` when there are no buckets.
    """
    if not buckets:
        return "0"
    last = buckets[-1]
    try:
        doc_count = float(last.get("doc_count") or 0)
    except (TypeError, ValueError, AttributeError):
        doc_count = 0.0
    return f"{doc_count / 60:.2f}"


def calculate_disk_free_percent(free_bytes: Any, total_bytes: Any) -> float:
    try:
        free = float(free_bytes)
        total = float(total_bytes)
    except (TypeError, ValueError) as e:
        raise ParseFailure(f"Non-numeric filesystem stats: {e}") from e
    if total <= 0:
        raise ParseFailure(f"Filesystem reports total of {total_bytes} bytes")
    return free * 100 / total


def classify_disk_free(
    free_percent: float,
    pass_threshold: float = 15.0,
    warning_threshold: float = 5.0,
) -> CheckStatus:
    """Pass above 15%, warning above 5%, fail at or below 5%."""
    if free_percent > pass_threshold:
        return CheckStatus.PASS
    if free_percent > warning_threshold:
        return CheckStatus.WARNING
    return CheckStatus.FAIL
