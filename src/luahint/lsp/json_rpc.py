"""Content-Length framing for JSON-RPC over a byte stream."""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any

HEADER_END = b"\r\n\r\n"


def encode_frame(message: dict[str, Any]) -> bytes:
    body = json.dumps(message, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    return b"Content-Length: %d%s%s" % (len(body), HEADER_END, body)


def parse_headers(block: bytes) -> dict[str, str]:
    """Header block as a lower-cased name to value map; bad lines are dropped."""

    headers: dict[str, str] = {}
    for line in block.decode("ascii", errors="replace").splitlines():
        name, colon, value = line.partition(":")
        if colon:
            headers[name.strip().lower()] = value.strip()
    return headers


def frame_length(headers: dict[str, str]) -> int | None:
    value = headers.get("content-length", "")
    if not value.isdigit():
        return None
    return int(value)


class FrameReader:
    """Accumulates stdout chunks and returns the complete messages in them.

    A frame whose header has no usable length is skipped; so is a body that
    is not a JSON object.
    """

    def __init__(self) -> None:
        self._pending = bytearray()
        self._body_length: int | None = None

    def reset(self) -> None:
        del self._pending[:]
        self._body_length = None

    def feed(self, chunk: bytes | bytearray) -> list[dict[str, Any]]:
        self._pending += chunk
        return [message for message in map(_decode, self._bodies()) if message is not None]

    def _bodies(self) -> Iterator[bytes]:
        while True:
            if self._body_length is None:
                header_end = self._pending.find(HEADER_END)
                if header_end == -1:
                    return
                headers = parse_headers(bytes(self._pending[:header_end]))
                del self._pending[: header_end + len(HEADER_END)]
                self._body_length = frame_length(headers)
                if self._body_length is None:
                    continue
            if len(self._pending) < self._body_length:
                return
            body = bytes(self._pending[: self._body_length])
            del self._pending[: self._body_length]
            self._body_length = None
            yield body


def _decode(body: bytes) -> dict[str, Any] | None:
    try:
        message = json.loads(body)
    except ValueError:
        return None
    return message if isinstance(message, dict) else None
