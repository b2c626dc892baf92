"""Blocking request/response loop for native messaging hosts.

Reads one frame, hands the message to a handler, writes the
handler's answer, and repeats until the input stream ends at
a frame boundary. One message is fully processed before the
next read; nothing here is asynchronous.

A handler may return:
  - Success(value) or IOSuccess(value): value is sent back
  - Failure(err) or IOFailure(err): {"error": str(err)} is sent
  - any other value: sent back as-is
A None success value sends nothing, for handlers that answer
through write_stdout_message themselves. An exception escaping
the handler is a fault and produces a panic diagnostic.
"""
from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import IO, Any, Literal

from returns.io import IOFailure, IOResult
from returns.result import Failure, Result, Success
from returns.unsafe import unsafe_perform_io

from native_messaging import io_ops
from native_messaging.config import HostConfig
from native_messaging.fault import (
    FaultReporter,
    install_fault_hook,
    mark_reported,
    report_fault,
)

logger = logging.getLogger(__name__)

Handler = Callable[[Any], object]

ExitReason = Literal["end_of_input", "write_failure"]


@dataclass(frozen=True)
class LoopSummary:
    """What happened during one run of the event loop."""

    messages_read: int = 0
    responses_written: int = 0
    errors_reported: int = 0
    faults_reported: int = 0
    exit_reason: ExitReason = "end_of_input"


def _as_result(outcome: object) -> Result[object, object]:
    """Normalize a handler return value to a Result."""
    if isinstance(outcome, IOResult):
        if isinstance(outcome, IOFailure):
            return Failure(unsafe_perform_io(outcome.failure()))
        return Success(unsafe_perform_io(outcome.unwrap()))
    if isinstance(outcome, Result):
        return outcome
    return Success(outcome)


def _send_error(
    sink: IO[bytes],
    text: str,
    config: HostConfig,
) -> bool:
    """Write an {"error": text} frame, best-effort.

    Returns False if the frame could not be written; the
    failure is logged and not raised.
    """
    written = io_ops.write_message(
        sink,
        {"error": text},
        byte_order=config.byte_order,
        max_size=config.max_message_size,
    )
    if isinstance(written, IOFailure):
        err = unsafe_perform_io(written.failure())
        logger.error("Could not send error frame: %s", err)
        return False
    return True


def run(
    handler: Handler,
    *,
    config: HostConfig | None = None,
    stdin: IO[bytes] | None = None,
    stdout: IO[bytes] | None = None,
    fault_reporter: FaultReporter | None = None,
) -> LoopSummary:
    """Run the event loop until the input stream ends.

    stdin and stdout default to the process's binary buffers.
    fault_reporter defaults to report_fault() on stdout.
    Returns a LoopSummary once the input ends cleanly, or when
    a response write fails and on_write_failure is "stop".
    With on_fault="raise" a handler exception propagates after
    its panic diagnostic has been sent.
    """
    cfg = config or HostConfig()
    if cfg.install_fault_hook:
        install_fault_hook(byte_order=cfg.byte_order)
    source = stdin if stdin is not None else io_ops._get_stdin_buffer()  # noqa: SLF001
    sink = stdout if stdout is not None else io_ops._get_stdout_buffer()  # noqa: SLF001
    reporter = fault_reporter or functools.partial(
        report_fault, stream=sink, byte_order=cfg.byte_order,
    )

    messages_read = 0
    responses_written = 0
    errors_reported = 0
    faults_reported = 0
    exit_reason: ExitReason = "end_of_input"

    logger.debug("Event loop started")
    while True:
        read = io_ops.read_message(source, byte_order=cfg.byte_order)
        if isinstance(read, IOFailure):
            read_err = unsafe_perform_io(read.failure())
            if read_err.is_end_of_input:
                break
            logger.warning("Failed to read message: %s", read_err)
            if _send_error(sink, str(read_err), cfg):
                errors_reported += 1
            continue

        messages_read += 1
        message = unsafe_perform_io(read.unwrap())
        try:
            outcome = _as_result(handler(message))
        except Exception as exc:
            logger.error(
                "Handler raised %s: %s", type(exc).__name__, exc,
            )
            try:
                reporter(exc)
            except Exception:  # noqa: BLE001
                logger.exception("Fault reporter failed")
            mark_reported(exc)
            faults_reported += 1
            if cfg.on_fault == "raise":
                raise
            continue

        if isinstance(outcome, Failure):
            handler_err = outcome.failure()
            logger.info("Handler returned error: %s", handler_err)
            if _send_error(sink, str(handler_err), cfg):
                errors_reported += 1
            continue

        value = outcome.unwrap()
        if value is None:
            continue
        written = io_ops.write_message(
            sink,
            value,
            byte_order=cfg.byte_order,
            max_size=cfg.max_message_size,
        )
        if isinstance(written, IOFailure):
            write_err = unsafe_perform_io(written.failure())
            logger.error("Failed to write response: %s", write_err)
            if cfg.on_write_failure == "stop":
                exit_reason = "write_failure"
                break
            if _send_error(sink, str(write_err), cfg):
                errors_reported += 1
            continue
        responses_written += 1

    logger.debug(
        "Event loop finished (%s): %d read, %d written",
        exit_reason,
        messages_read,
        responses_written,
    )
    return LoopSummary(
        messages_read=messages_read,
        responses_written=responses_written,
        errors_reported=errors_reported,
        faults_reported=faults_reported,
        exit_reason=exit_reason,
    )
