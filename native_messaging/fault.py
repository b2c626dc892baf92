"""Fault interception for native messaging hosts.

An exception that nobody handles would otherwise end the
host with a traceback on stderr, which the browser never
sees. This module turns such a fault into a panic diagnostic
frame on stdout:

    {"status": "panic", "payload": ..., "file": ..., "line": ...}

Two entry points share one reporter. The event loop calls
report_fault() from its guarded handler boundary, and
install_fault_hook() wraps sys.excepthook for faults raised
anywhere else. Each exception is reported at most once.
"""
from __future__ import annotations

import logging
import sys
import traceback
from collections.abc import Callable
from typing import IO, TYPE_CHECKING

from returns.io import IOFailure
from returns.unsafe import unsafe_perform_io

from native_messaging import io_ops

if TYPE_CHECKING:
    from types import TracebackType

    from native_messaging.protocol import ByteOrder

logger = logging.getLogger(__name__)

FaultReporter = Callable[[BaseException], object]

_REPORTED_ATTR = "_native_messaging_reported"
_HOOK_MARKER = "_native_messaging_fault_hook"
_MAX_PAYLOAD_CHARS = 10_000

_hook_settings: dict[str, ByteOrder] = {"byte_order": "little"}


def build_diagnostic(exc: BaseException) -> dict[str, object]:
    """Build the panic diagnostic for an exception.

    file and line point at the innermost traceback frame, or
    are None when the exception was never raised.
    """
    payload = "".join(
        traceback.format_exception_only(type(exc), exc),
    ).strip()
    if len(payload) > _MAX_PAYLOAD_CHARS:
        payload = payload[: _MAX_PAYLOAD_CHARS - 3] + "..."
    file: str | None = None
    line: int | None = None
    frames = traceback.extract_tb(exc.__traceback__)
    if frames:
        file = frames[-1].filename
        line = frames[-1].lineno
    return {
        "status": "panic",
        "payload": payload,
        "file": file,
        "line": line,
    }


def _already_reported(exc: BaseException) -> bool:
    return bool(getattr(exc, _REPORTED_ATTR, False))


def mark_reported(exc: BaseException) -> None:
    """Flag an exception so the fault hook skips it."""
    try:
        setattr(exc, _REPORTED_ATTR, True)
    except AttributeError:
        logger.debug("Cannot mark %s as reported", type(exc).__name__)


def report_fault(
    exc: BaseException,
    stream: IO[bytes] | None = None,
    *,
    byte_order: ByteOrder = "little",
) -> bool:
    """Write a panic diagnostic frame, best-effort.

    Defaults to stdout. A failure to write the diagnostic is
    logged and swallowed, never raised. Returns True only if
    a frame was written.
    """
    if _already_reported(exc):
        return False
    mark_reported(exc)
    try:
        target = stream if stream is not None else io_ops._get_stdout_buffer()  # noqa: SLF001
        result = io_ops.write_message(
            target, build_diagnostic(exc), byte_order=byte_order,
        )
    except Exception:  # noqa: BLE001
        logger.exception("Could not send panic diagnostic")
        return False
    if isinstance(result, IOFailure):
        err = unsafe_perform_io(result.failure())
        logger.error("Could not send panic diagnostic: %s", err)
        return False
    logger.error("Reported fault to peer: %s", type(exc).__name__)
    return True


def install_fault_hook(*, byte_order: ByteOrder = "little") -> bool:
    """Wrap sys.excepthook so uncaught faults reach the peer.

    The wrapper reports the fault, then chains to the hook it
    replaced (normally the traceback printer). Installing again
    keeps the existing wrapper but switches it to byte_order,
    so the latest caller's framing wins. Returns True if the
    hook was newly installed.
    """
    _hook_settings["byte_order"] = byte_order
    previous = sys.excepthook
    if getattr(previous, _HOOK_MARKER, False):
        return False

    def _fault_hook(
        exc_type: type[BaseException],
        exc: BaseException,
        tb: TracebackType | None,
    ) -> None:
        if not issubclass(exc_type, KeyboardInterrupt):
            if exc.__traceback__ is None and tb is not None:
                exc = exc.with_traceback(tb)
            report_fault(exc, byte_order=_hook_settings["byte_order"])
        previous(exc_type, exc, tb)

    setattr(_fault_hook, _HOOK_MARKER, True)  # noqa: B010
    sys.excepthook = _fault_hook
    logger.debug("Fault hook installed")
    return True
