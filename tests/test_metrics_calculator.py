"""Tests for the derived metric calculations."""

import pytest

from stack_monitor.core.metrics_calculator import (
    build_lifecycle,
    build_resource_sample,
    calculate_cpu_percentage,
    calculate_disk_free_percent,
    calculate_ingestion_rate,
    classify_disk_free,
    cpu_percent_from_stats,
    parse_byte_size,
)
from stack_monitor.models.schemas import CheckStatus
from stack_monitor.utils.error_utils import ParseFailure


def _make_stats(cur_total=2_000, prev_total=1_000, cur_sys=20_000, prev_sys=10_000, online_cpus=2, **extra):
    stats = {
        "cpu_stats": {
            "cpu_usage": {"total_usage": cur_total},
            "system_cpu_usage": cur_sys,
            "online_cpus": online_cpus,
        },
        "precpu_stats": {
            "cpu_usage": {"total_usage": prev_total},
            "system_cpu_usage": prev_sys,
        },
        "memory_stats": {"usage": 512 * 1024 ** 2, "limit": 2 * 1024 ** 3},
        "networks": {"eth0": {"rx_bytes": 1234, "tx_bytes": 5678}},
    }
    stats.update(extra)
    return stats


class TestCpuPercentage:

    @pytest.mark.parametrize("cpu_delta,sys_delta", [(0, 100), (-5, 100), (100, 0), (100, -1), (0, 0)])
    def test_non_positive_delta_is_zero(self, cpu_delta, sys_delta):
        assert calculate_cpu_percentage(1_000 + cpu_delta, 1_000, 5_000 + sys_delta, 5_000, 4) == 0

    def test_equal_deltas_on_one_cpu_is_full_utilization(self):
        assert calculate_cpu_percentage(300, 100, 700, 500, 1) == 100

    def test_scales_with_online_cpus(self):
        assert calculate_cpu_percentage(150, 100, 600, 500, 4) == pytest.approx(200.0)

    def test_from_stats_payload(self):
        assert cpu_percent_from_stats(_make_stats()) == pytest.approx(20.0)

    def test_first_read_without_baseline_is_zero(self):
        stats = _make_stats()
        stats["precpu_stats"] = {"cpu_usage": {}}
        assert cpu_percent_from_stats(stats) == 0

    def test_online_cpus_falls_back_to_percpu_length(self):
        stats = _make_stats(online_cpus=None)
        stats["cpu_stats"]["cpu_usage"]["percpu_usage"] = [1, 1, 1, 1]
        assert cpu_percent_from_stats(stats) == pytest.approx(40.0)

    def test_missing_cpu_stats_is_parse_failure(self):
        with pytest.raises(ParseFailure):
            cpu_percent_from_stats({"memory_stats": {}})


class TestResourceSample:

    def test_complete_sample(self):
        sample = build_resource_sample(_make_stats())
        assert sample.cpu_percent == pytest.approx(20.0)
        assert sample.memory_used_bytes == 512 * 1024 ** 2
        assert sample.memory_limit_bytes == 2 * 1024 ** 3
        assert sample.network_rx_bytes == 1234
        assert sample.network_tx_bytes == 5678

    def test_missing_network_counts_as_zero(self):
        sample = build_resource_sample(_make_stats(networks={}))
        assert sample.network_rx_bytes == 0
        assert sample.network_tx_bytes == 0

    def test_non_object_payload_is_rejected(self):
        with pytest.raises(ParseFailure):
            build_resource_sample(["not", "stats"])

    def test_garbage_memory_is_rejected_not_partial(self):
        with pytest.raises(ParseFailure):
            build_resource_sample(_make_stats(memory_stats={"usage": "lots", "limit": 1}))


class TestLifecycle:

    def test_complete_payload(self):
        lifecycle = build_lifecycle({
            "RestartCount": 3,
            "State": {"StartedAt": "2024-05-01T10:00:00Z", "ExitCode": 137, "Error": ""},
        })

        assert lifecycle.restart_count == 3
        assert lifecycle.last_started == "2024-05-01T10:00:00Z"
        assert lifecycle.exit_code == 137
        assert lifecycle.error is None

    def test_missing_fields_default(self):
        lifecycle = build_lifecycle({})

        assert lifecycle.restart_count == 0
        assert lifecycle.exit_code is None

    @pytest.mark.parametrize("details", [
        ["not", "a", "dict"],
        {"State": "running"},
        {"RestartCount": "many"},
        {"State": {"ExitCode": "boom"}},
    ])
    def test_malformed_payload_is_parse_failure(self, details):
        with pytest.raises(ParseFailure):
            build_lifecycle(details)


class TestByteSize:

    def test_gigabytes(self):
        assert parse_byte_size("1.5gb") == 1.5 * 1024 ** 3

    def test_kilobytes(self):
        assert parse_byte_size("512kb") == 512 * 1024

    def test_units_are_case_insensitive(self):
        assert parse_byte_size("2MB") == 2 * 1024 ** 2
        assert parse_byte_size("1Tb") == 1024 ** 4

    def test_plain_bytes(self):
        assert parse_byte_size("230b") == 230
        assert parse_byte_size("230") == 230

    @pytest.mark.parametrize("raw", ["???", "", None, "gb", "-1kb", "1.2.3mb", "12pb"])
    def test_unparsable_is_zero(self, raw):
        assert parse_byte_size(raw) == 0


class TestIngestionRate:

    def test_no_buckets(self):
        assert calculate_ingestion_rate([]) == "0"

    def test_single_bucket(self):
        assert calculate_ingestion_rate([{"key": 1, "doc_count": 120}]) == "2.00"

    def test_uses_last_bucket_even_if_partial(self):
        buckets = [{"doc_count": 6000}, {"doc_count": 600}, {"doc_count": 30}]
        assert calculate_ingestion_rate(buckets) == "0.50"


class TestDiskFree:

    def test_ratio(self):
        assert calculate_disk_free_percent(25, 100) == 25.0

    def test_zero_total_is_parse_failure(self):
        with pytest.raises(ParseFailure):
            calculate_disk_free_percent(0, 0)

    def test_non_numeric_is_parse_failure(self):
        with pytest.raises(ParseFailure):
            calculate_disk_free_percent("a lot", 100)

    @pytest.mark.parametrize("percent,expected", [
        (50.0, CheckStatus.PASS),
        (15.01, CheckStatus.PASS),
        (15.0, CheckStatus.WARNING),
        (5.01, CheckStatus.WARNING),
        (5.0, CheckStatus.FAIL),
        (0.0, CheckStatus.FAIL),
    ])
    def test_classification_boundaries(self, percent, expected):
        assert classify_disk_free(percent) == expected
