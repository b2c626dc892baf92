"""Host configuration for the native messaging loop."""
from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from native_messaging.protocol import MAX_MESSAGE_SIZE, ByteOrder

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

WriteFailurePolicy = Literal["stop", "report"]

FaultPolicy = Literal["raise", "continue"]


class HostConfig(BaseModel):
    """Settings for a native messaging host process.

    on_write_failure decides what happens when a successful
    handler response cannot be written: "stop" ends the loop,
    "report" sends an error frame instead and keeps going.

    on_fault decides what happens after a handler raises and
    the panic diagnostic has been sent: "raise" lets the
    exception end the process, "continue" reads the next frame.
    """

    model_config = ConfigDict(frozen=True)

    byte_order: ByteOrder = "little"
    max_message_size: int = Field(
        default=MAX_MESSAGE_SIZE, gt=0, le=MAX_MESSAGE_SIZE,
    )
    on_write_failure: WriteFailurePolicy = "stop"
    on_fault: FaultPolicy = "raise"
    install_fault_hook: bool = True
    log_file: Path | None = None
    log_level: LogLevel = "INFO"
