"""Error model for native messaging framing.

Every framing primitive reports failure as a MessagingError
inside an IOFailure. The error_type field is one of a closed
set of kinds; NO_MORE_INPUT is the clean end-of-stream
sentinel, not a true failure.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Literal

ErrorType = Literal["Io", "Serde", "MessageTooLarge", "NoMoreInput"]

IO: ErrorType = "Io"
SERDE: ErrorType = "Serde"
MESSAGE_TOO_LARGE: ErrorType = "MessageTooLarge"
NO_MORE_INPUT: ErrorType = "NoMoreInput"


@dataclass(frozen=True)
class MessagingError:
    """Structured error for a failed frame read or write."""

    error_type: ErrorType
    message: str
    context: dict[str, object] = field(default_factory=dict)

    @property
    def is_end_of_input(self) -> bool:
        """True for the clean end-of-stream sentinel."""
        return self.error_type == NO_MORE_INPUT

    @property
    def size(self) -> int | None:
        """Measured body length for MessageTooLarge, else None."""
        size = self.context.get("size")
        return size if isinstance(size, int) else None

    def to_dict(self) -> dict[str, object]:
        """Return plain dict suitable for JSON serialization."""
        data = asdict(self)
        data["context"] = {
            str(k): v if isinstance(v, (str, int, float, bool, type(None)))
            else str(v)
            for k, v in self.context.items()
        }
        return data

    def __str__(self) -> str:
        """Human-readable rendering, used as the error frame text."""
        return self.message


def io_error(exc: BaseException | str) -> MessagingError:
    """Wrap an underlying stream fault."""
    detail = exc if isinstance(exc, str) else f"{type(exc).__name__}: {exc}"
    return MessagingError(
        error_type=IO,
        message=f"I/O error: {detail}",
    )


def serde_error(exc: BaseException) -> MessagingError:
    """Wrap a JSON encode or decode failure."""
    return MessagingError(
        error_type=SERDE,
        message=f"JSON error: {exc}",
        context={"exception": type(exc).__name__},
    )


def message_too_large(size: int, limit: int) -> MessagingError:
    """Outgoing body exceeds the size ceiling; nothing was written."""
    return MessagingError(
        error_type=MESSAGE_TOO_LARGE,
        message=f"message too large: {size} bytes",
        context={"size": size, "limit": limit},
    )


def no_more_input() -> MessagingError:
    """Input stream ended exactly at a frame boundary."""
    return MessagingError(
        error_type=NO_MORE_INPUT,
        message="the input stream reached the end",
    )
