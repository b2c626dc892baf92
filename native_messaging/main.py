"""Main entry point for the bundled native messaging host.

Chrome starts the host with the calling extension's origin
as its first argument and talks to it over stdin/stdout
until the port is closed.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from native_messaging.config import HostConfig
from native_messaging.event_loop import run
from native_messaging.handler import handle_message
from native_messaging.logging_setup import setup_logging

logger = logging.getLogger(__name__)


@click.command()
@click.argument("browser_args", nargs=-1)
@click.option(
    "--byte-order",
    type=click.Choice(["little", "big", "native"]),
    default="little",
    help="Byte order of the 4-byte length header (default: little)",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write logs to this file instead of stderr",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default="INFO",
    help="Minimum log level (default: INFO)",
)
@click.option(
    "--on-fault",
    type=click.Choice(["raise", "continue"]),
    default="raise",
    help="After a handler fault: exit, or keep serving (default: raise)",
)
@click.option(
    "--on-write-failure",
    type=click.Choice(["stop", "report"]),
    default="stop",
    help="After a failed response write: stop, or send an error frame",
)
def main(  # noqa: PLR0913
    browser_args: tuple[str, ...],
    byte_order: str,
    log_file: Path | None,
    log_level: str,
    on_fault: str,
    on_write_failure: str,
) -> None:
    """Serve native messaging requests on stdin/stdout."""
    config = HostConfig(
        byte_order=byte_order,  # type: ignore[arg-type]
        log_file=log_file,
        log_level=log_level,  # type: ignore[arg-type]
        on_fault=on_fault,  # type: ignore[arg-type]
        on_write_failure=on_write_failure,  # type: ignore[arg-type]
    )
    setup_logging(config.log_file, config.log_level)
    logger.info("Host started (args: %s)", " ".join(browser_args))
    summary = run(handle_message, config=config)
    logger.info(
        "Host finished: %d messages, %d responses, %d errors",
        summary.messages_read,
        summary.responses_written,
        summary.errors_reported,
    )
    if summary.exit_reason == "write_failure":
        sys.exit(1)


if __name__ == "__main__":
    main()
