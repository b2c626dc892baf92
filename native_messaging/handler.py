"""Reference request handler for the bundled host.

Dispatches incoming JSON requests by action type. Successful
actions return Success(response); bad requests return
Failure(text), which the event loop sends as an error frame.
"""
from __future__ import annotations

import logging
from typing import Any

from returns.result import Failure, Result, Success

logger = logging.getLogger(__name__)


def handle_message(
    request: Any,  # noqa: ANN401
) -> Result[dict[str, Any], str]:
    """Handle a native messaging request.

    Dispatches on the 'action' field: 'ping' answers with
    success, 'echo' returns the request back to the caller.
    """
    if not isinstance(request, dict):
        return Failure(
            f"Expected a JSON object, got {type(request).__name__}",
        )
    action = request.get("action")
    if not action:
        return Failure("Missing 'action' field in request")
    if action == "ping":
        logger.debug("Ping received")
        return Success({"success": True})
    if action == "echo":
        return Success({"success": True, "echo": request})
    logger.warning("Unknown action: %s", action)
    return Failure(f"Unknown action: {action}")
