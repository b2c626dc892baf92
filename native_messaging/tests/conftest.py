"""Shared test fixtures for the native messaging test suite."""
from __future__ import annotations

import json
import logging
import struct
import sys
from collections.abc import Callable, Iterator
from typing import Any

import pytest

from native_messaging import fault
from native_messaging.logging_setup import LOGGER_NAME


@pytest.fixture(autouse=True)
def restore_excepthook(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Undo any sys.excepthook wrapping done by a test."""
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    monkeypatch.setitem(fault._hook_settings, "byte_order", "little")  # noqa: SLF001


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Drop handlers added to the package logger by a test."""
    logger = logging.getLogger(LOGGER_NAME)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    for handler in logger.handlers:
        if handler not in saved[0]:
            handler.close()
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


@pytest.fixture
def make_frame() -> Callable[..., bytes]:
    """Return a builder for raw little-endian frames."""

    def _make(value: Any = None, *, body: bytes | None = None) -> bytes:  # noqa: ANN401
        if body is None:
            body = json.dumps(value).encode("utf-8")
        return struct.pack("<I", len(body)) + body

    return _make


@pytest.fixture
def parse_frames() -> Callable[[bytes], list[Any]]:
    """Return a parser splitting raw output into decoded messages."""

    def _parse(raw: bytes) -> list[Any]:
        messages: list[Any] = []
        offset = 0
        while offset < len(raw):
            length = struct.unpack("<I", raw[offset : offset + 4])[0]
            start = offset + 4
            messages.append(json.loads(raw[start : start + length]))
            offset = start + length
        return messages

    return _parse
