"""Tests for container log demultiplexing."""

import struct

from stack_monitor.core.log_parser import demultiplex_logs, iter_frames


def _frame(stream: int, text: str) -> bytes:
    payload = text.encode("utf-8")
    return struct.pack(">BxxxL", stream, len(payload)) + payload


class TestDemultiplex:

    def test_strips_stdout_and_stderr_headers(self):
        raw = (
            _frame(1, "2024-05-01T10:00:00Z engine started\n")
            + _frame(2, "2024-05-01T10:00:01Z warning: rule reload\n")
            + _frame(1, "2024-05-01T10:00:02Z 42 packets\n")
        )
        assert demultiplex_logs(raw) == (
            "2024-05-01T10:00:00Z engine started\n"
            "2024-05-01T10:00:01Z warning: rule reload\n"
            "2024-05-01T10:00:02Z 42 packets"
        )

    def test_frame_with_multiple_lines_and_blanks(self):
        raw = _frame(1, "first\n\n   \nsecond\r\n")
        assert demultiplex_logs(raw) == "first\nsecond"

    def test_header_bytes_inside_payload_are_kept(self):
        # A payload may legitimately contain bytes that look like a header.
        inner = "\x01\x00\x00\x00data"
        raw = _frame(1, inner + "\n")
        frames = list(iter_frames(raw))
        assert frames == [(1, (inner + "\n").encode())]

    def test_unframed_tty_output_passes_through(self):
        raw = b"plain line one\nplain line two\n"
        assert demultiplex_logs(raw) == "plain line one\nplain line two"

    def test_invalid_utf8_is_replaced(self):
        raw = _frame(2, "ok\n") + struct.pack(">BxxxL", 1, 3) + b"\xffab"
        assert demultiplex_logs(raw) == "ok\n\ufffdab"

    def test_empty(self):
        assert demultiplex_logs(b"") == ""
