"""NDJSON (Newline-Delimited JSON) framing.

* **NDJSONReader** -- reads one JSON object per line from an async stream.
* **NDJSONWriter** -- writes one JSON object per line to an async stream.
* **NDJSONNotificationSink** -- a
  :class:`~endorsement_registry.core.interfaces.NotificationStore` that
  streams every notification to observers as a canonical JSON line.

Framing rules:
- Each message is a single line of JSON followed by ``\\n``.
- Empty lines are silently ignored.
- Lines over the size limit are skipped and reported as ``ER-E402``.
- A peer that stays silent past the partial timeout raises
  :class:`TimeoutError`.
"""
from __future__ import annotations

import asyncio
import json
from typing import Any

from endorsement_registry.core.errors import MalformedMessage, MessageTooLarge
from endorsement_registry.core.types import Notification
from endorsement_registry.notifications.records import canonical_json

DEFAULT_MAX_MESSAGE_SIZE: int = 1_048_576  # 1 MiB
DEFAULT_PARTIAL_TIMEOUT: float = 30.0  # seconds
_CHUNK_SIZE = 65_536


# ---------------------------------------------------------------------------
# NDJSONReader
# ---------------------------------------------------------------------------


class NDJSONReader:
    """Splits an async byte stream into NDJSON request objects.

    Frames are assembled from fixed-size reads rather than
    :meth:`asyncio.StreamReader.readline`, so the stream's own buffer
    limit never caps the message size.  A frame that grows past
    *max_message_size* is dropped up to its terminating newline and
    reported once as :class:`MessageTooLarge`; the next frame is read
    normally.

    Parameters
    ----------
    reader:
        An :class:`asyncio.StreamReader` (typically ``stdin`` or a socket).
    max_message_size:
        Maximum allowed frame size in bytes, excluding the line ending.
    partial_timeout:
        Maximum time in seconds a single read may wait for more bytes.
    chunk_size:
        Number of bytes requested from *reader* per read.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        *,
        max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE,
        partial_timeout: float = DEFAULT_PARTIAL_TIMEOUT,
        chunk_size: int = _CHUNK_SIZE,
    ) -> None:
        self._reader = reader
        self._max_message_size = max_message_size
        self._partial_timeout = partial_timeout
        self._chunk_size = chunk_size
        self._buffer = bytearray()
        self._eof = False

    async def read_message(self) -> dict[str, Any]:
        """Return the next non-blank frame decoded as a JSON object.

        Raises
        ------
        MalformedMessage
            If the frame is not valid JSON or not a JSON object.
        MessageTooLarge
            If the frame exceeds *max_message_size* bytes.
        EOFError
            If the stream ends with no further frame.
        TimeoutError
            If the peer sends nothing for *partial_timeout* seconds.
        """
        while True:
            frame = await self._next_frame()
            if frame.strip():
                return self._decode(frame)

    async def _next_frame(self) -> bytes:
        dropped = 0
        while True:
            end = self._buffer.find(b"\n")
            if end >= 0:
                frame = bytes(self._buffer[:end]).rstrip(b"\r")
                del self._buffer[: end + 1]
                return self._check_size(frame, dropped)

            # The pending frame is already too long; keep memory bounded
            # while scanning for its end.  One byte of slack for "\r".
            if len(self._buffer) > self._max_message_size + 1:
                dropped += len(self._buffer)
                self._buffer.clear()

            if self._eof:
                frame = bytes(self._buffer).rstrip(b"\r")
                self._buffer.clear()
                if not frame and not dropped:
                    raise EOFError("Stream closed before a complete message was received")
                return self._check_size(frame, dropped)

            chunk = await asyncio.wait_for(
                self._reader.read(self._chunk_size),
                timeout=self._partial_timeout,
            )
            if chunk:
                self._buffer.extend(chunk)
            else:
                self._eof = True

    def _check_size(self, frame: bytes, dropped: int) -> bytes:
        size = dropped + len(frame)
        if size > self._max_message_size:
            raise MessageTooLarge(
                f"Message size {size} bytes exceeds maximum "
                f"{self._max_message_size} bytes",
                details={"size": size, "max_size": self._max_message_size},
            )
        return frame

    @staticmethod
    def _decode(frame: bytes) -> dict[str, Any]:
        try:
            data = json.loads(frame)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedMessage(
                f"Invalid JSON in NDJSON line: {exc}",
                details={"raw_length": len(frame)},
            ) from exc
        if not isinstance(data, dict):
            raise MalformedMessage(
                "NDJSON message must be a JSON object",
                details={"type": type(data).__name__},
            )
        return data


# ---------------------------------------------------------------------------
# NDJSONWriter
# ---------------------------------------------------------------------------


class NDJSONWriter:
    """Writes NDJSON messages to an async stream.

    Parameters
    ----------
    writer:
        An :class:`asyncio.StreamWriter` (typically ``stdout``).
    """

    def __init__(self, writer: asyncio.StreamWriter) -> None:
        self._writer = writer

    async def write_line(self, line: str) -> None:
        """Write one pre-serialised JSON line (must contain no newline)."""
        if "\n" in line:
            raise ValueError("NDJSON lines must not contain embedded newlines")
        self._writer.write(line.encode("utf-8") + b"\n")
        await self._writer.drain()

    async def write_message(self, msg: dict[str, Any]) -> None:
        """Write *msg* as compact JSON followed by ``\\n``."""
        await self.write_line(json.dumps(msg, separators=(",", ":"), default=str))


# ---------------------------------------------------------------------------
# Notification sink
# ---------------------------------------------------------------------------


class NDJSONNotificationSink:
    """Streams notifications to an NDJSON writer.

    Each notification becomes one canonical JSON line, so two observers
    receiving the same notification see byte-identical output.
    """

    def __init__(self, writer: NDJSONWriter) -> None:
        self._writer = writer

    async def append(self, notification: Notification) -> str:
        """Write *notification* and return its ``notification_id``."""
        await self._writer.write_line(canonical_json(notification))
        return notification.notification_id
