"""Chrome native messaging host protocol.

Public API: frame reader/writer (read_message, write_message
and their stdin/stdout variants), the error model, the fault
interceptor, and the blocking event loop.
"""
from __future__ import annotations

from native_messaging.config import HostConfig
from native_messaging.errors import (
    IO,
    MESSAGE_TOO_LARGE,
    NO_MORE_INPUT,
    SERDE,
    MessagingError,
)
from native_messaging.event_loop import LoopSummary, run
from native_messaging.fault import (
    build_diagnostic,
    install_fault_hook,
    report_fault,
)
from native_messaging.io_ops import (
    read_message,
    read_stdin_message,
    write_message,
    write_stdout_message,
)
from native_messaging.protocol import MAX_MESSAGE_SIZE

__all__ = [
    "IO",
    "MAX_MESSAGE_SIZE",
    "MESSAGE_TOO_LARGE",
    "NO_MORE_INPUT",
    "SERDE",
    "HostConfig",
    "LoopSummary",
    "MessagingError",
    "build_diagnostic",
    "install_fault_hook",
    "read_message",
    "read_stdin_message",
    "report_fault",
    "run",
    "write_message",
    "write_stdout_message",
]
