"""I/O boundary for native messaging frames.

All stream I/O (stdin, stdout, or any binary stream) goes
through here. Functions return IOResult and never raise for
stream or JSON faults. Tests mock the buffer seams or pass
BytesIO streams directly.
"""
from __future__ import annotations

import logging
import sys
from typing import IO, Any

from returns.io import IOFailure, IOResult, IOSuccess
from returns.result import Failure

from native_messaging.errors import (
    MessagingError,
    io_error,
    no_more_input,
)
from native_messaging.protocol import (
    HEADER_SIZE,
    MAX_MESSAGE_SIZE,
    ByteOrder,
    decode_body,
    encode_message,
    unpack_length,
)

logger = logging.getLogger(__name__)


def _get_stdin_buffer() -> IO[bytes]:
    """Return stdin binary buffer. Mockable seam."""
    return sys.stdin.buffer


def _get_stdout_buffer() -> IO[bytes]:
    """Return stdout binary buffer. Mockable seam."""
    return sys.stdout.buffer


def _read_exact(stream: IO[bytes], size: int) -> bytes:
    """Read up to size bytes, looping over short reads.

    Returns fewer than size bytes only if the stream ended.
    """
    chunks: list[bytes] = []
    remaining = size
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def read_message(
    stream: IO[bytes],
    *,
    byte_order: ByteOrder = "little",
) -> IOResult[Any, MessagingError]:
    """Read one length-prefixed JSON message from a stream.

    End-of-stream before any header byte is NoMoreInput.
    End-of-stream anywhere after that is an Io error, since
    the peer stopped mid-frame. No size cap is applied.
    """
    try:
        header = _read_exact(stream, HEADER_SIZE)
        if not header:
            return IOFailure(no_more_input())
        if len(header) < HEADER_SIZE:
            return IOFailure(
                io_error(
                    f"unexpected end of stream after {len(header)}"
                    f" of {HEADER_SIZE} header bytes",
                ),
            )
        length = unpack_length(header, byte_order)
        body = _read_exact(stream, length)
    except (OSError, ValueError) as exc:
        # ValueError: read on a closed file
        return IOFailure(io_error(exc))
    if len(body) < length:
        return IOFailure(
            io_error(
                f"unexpected end of stream after {len(body)}"
                f" of {length} body bytes",
            ),
        )
    logger.debug("Read frame (%d bytes)", length)
    return IOResult.from_result(decode_body(body))


def write_message(
    stream: IO[bytes],
    value: object,
    *,
    byte_order: ByteOrder = "little",
    max_size: int = MAX_MESSAGE_SIZE,
) -> IOResult[None, MessagingError]:
    """Write one length-prefixed JSON message to a stream.

    Serializes, checks the size ceiling, then writes header
    and body in a single write and flushes. Nothing is written
    when serialization fails or the body is too large.
    """
    encoded = encode_message(
        value, byte_order=byte_order, max_size=max_size,
    )
    if isinstance(encoded, Failure):
        return IOFailure(encoded.failure())
    frame = encoded.unwrap()
    try:
        stream.write(frame)
        stream.flush()
    except (OSError, ValueError) as exc:
        return IOFailure(io_error(exc))
    logger.debug("Wrote frame (%d bytes)", len(frame) - HEADER_SIZE)
    return IOSuccess(None)


def read_stdin_message(
    *,
    byte_order: ByteOrder = "little",
) -> IOResult[Any, MessagingError]:
    """Read one message from stdin."""
    return read_message(_get_stdin_buffer(), byte_order=byte_order)


def write_stdout_message(
    value: object,
    *,
    byte_order: ByteOrder = "little",
    max_size: int = MAX_MESSAGE_SIZE,
) -> IOResult[None, MessagingError]:
    """Write one message to stdout, e.g. an unsolicited event."""
    return write_message(
        _get_stdout_buffer(),
        value,
        byte_order=byte_order,
        max_size=max_size,
    )
