"""
Container log parsing.

Without a TTY the runtime multiplexes stdout and stderr into frames, each
prefixed with an 8 byte header: stream id (0 stdin, 1 stdout, 2 stderr),
three zero bytes, then the payload length as a big-endian uint32.
"""

from typing import Iterator, Tuple

HEADER_SIZE = 8
STREAM_IDS = (0, 1, 2)


def _is_frame_header(raw: bytes, offset: int) -> bool:
    return (
        offset + HEADER_SIZE <= len(raw)
        and raw[offset] in STREAM_IDS
        and raw[offset + 1:offset + 4] == b"\x00\x00\x00"
    )


def iter_frames(raw: bytes) -> Iterator[Tuple[int, bytes]]:
    """
    Yield ``(stream_id, payload)`` pairs. Output that is not framed (TTY
    containers) is yielded whole as stream 1.
    """
    offset = 0
    while offset < len(raw):
        if not _is_frame_header(raw, offset):
            yield 1, raw[offset:]
            return
        size = int.from_bytes(raw[offset + 4:offset + HEADER_SIZE], "big")
        start = offset + HEADER_SIZE
        yield raw[offset], raw[start:start + size]
        offset = start + size


def demultiplex_logs(raw: bytes) -> str:
    """Strip stream framing and return the non-blank lines as plain text."""
    text = b"".join(payload for _, payload in iter_frames(raw)).decode("utf-8", errors="replace")
    return "\n".join(line.rstrip("\r") for line in text.split("\n") if line.strip())
