"""Chrome native messaging protocol framing.

Implements the 4-byte length-prefix protocol used by Chrome
native messaging hosts for stdin/stdout communication. Pure
functions only; stream I/O lives in io_ops.

The header byte order is an explicit choice. Chrome writes
the length in the host's native order, which is little-endian
on every platform it ships on, so "little" is the default.
"""
from __future__ import annotations

import dataclasses
import json
import struct
from typing import Any, Literal

from pydantic import BaseModel
from returns.result import Failure, Result, Success

from native_messaging.errors import (
    MessagingError,
    message_too_large,
    serde_error,
)

HEADER_SIZE = 4

# Chrome rejects messages from the host larger than 1 MiB
MAX_MESSAGE_SIZE = 1024 * 1024

ByteOrder = Literal["little", "big", "native"]

_STRUCT_FORMATS: dict[str, str] = {
    "little": "<I",
    "big": ">I",
    "native": "=I",
}


def _to_jsonable(obj: object) -> object:
    """json.dumps default hook for application response types."""
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    msg = f"Object of type {type(obj).__name__} is not JSON serializable"
    raise TypeError(msg)


def pack_length(length: int, byte_order: ByteOrder = "little") -> bytes:
    """Encode a body length as a 4-byte unsigned header."""
    return struct.pack(_STRUCT_FORMATS[byte_order], length)


def unpack_length(header: bytes, byte_order: ByteOrder = "little") -> int:
    """Decode a 4-byte unsigned header into a body length."""
    length: int = struct.unpack(_STRUCT_FORMATS[byte_order], header)[0]
    return length


def encode_body(value: object) -> Result[bytes, MessagingError]:
    """Serialize a value to compact UTF-8 JSON.

    Accepts plain JSON values, pydantic models, dataclass
    instances and objects with a to_dict() method. NaN and
    infinities are rejected since they are not valid JSON.
    """
    try:
        text = json.dumps(
            value,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
            default=_to_jsonable,
        )
        return Success(text.encode("utf-8"))
    except (TypeError, ValueError, RecursionError) as exc:
        return Failure(serde_error(exc))


def decode_body(body: bytes) -> Result[Any, MessagingError]:
    """Parse a UTF-8 JSON body into a message."""
    try:
        return Success(json.loads(body.decode("utf-8")))
    except (ValueError, RecursionError) as exc:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        return Failure(serde_error(exc))


def encode_message(
    value: object,
    *,
    byte_order: ByteOrder = "little",
    max_size: int = MAX_MESSAGE_SIZE,
) -> Result[bytes, MessagingError]:
    """Encode a value as a complete length-prefixed frame.

    Returns Failure(MessageTooLarge) when the body exceeds
    max_size. The size is checked before any bytes are
    produced, so a caller never sees a partial frame.
    """

    def _frame(body: bytes) -> Result[bytes, MessagingError]:
        if len(body) > max_size:
            return Failure(message_too_large(len(body), max_size))
        return Success(pack_length(len(body), byte_order) + body)

    return encode_body(value).bind(_frame)


def decode_message(
    raw: bytes,
    *,
    byte_order: ByteOrder = "little",
) -> Result[Any, MessagingError] | None:
    """Decode a complete length-prefixed frame held in memory.

    Returns None if the input is shorter than the header or
    the declared body length. Extra trailing bytes are ignored.
    """
    if len(raw) < HEADER_SIZE:
        return None
    length = unpack_length(raw[:HEADER_SIZE], byte_order)
    body = raw[HEADER_SIZE:]
    if len(body) < length:
        return None
    return decode_body(body[:length])
