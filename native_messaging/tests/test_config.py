"""Tests for HostConfig."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from native_messaging.config import HostConfig
from native_messaging.protocol import MAX_MESSAGE_SIZE


def test_defaults() -> None:
    """Defaults match Chrome's expectations."""
    config = HostConfig()
    assert config.byte_order == "little"
    assert config.max_message_size == MAX_MESSAGE_SIZE
    assert config.on_write_failure == "stop"
    assert config.on_fault == "raise"
    assert config.install_fault_hook is True
    assert config.log_file is None


def test_is_frozen() -> None:
    """HostConfig cannot be mutated after construction."""
    config = HostConfig()
    with pytest.raises(ValidationError):
        config.byte_order = "big"  # type: ignore[misc]


def test_rejects_unknown_byte_order() -> None:
    """Only little, big and native are accepted."""
    with pytest.raises(ValidationError):
        HostConfig(byte_order="middle")  # type: ignore[arg-type]


@pytest.mark.parametrize("size", [0, MAX_MESSAGE_SIZE + 1])
def test_rejects_out_of_range_size(size: int) -> None:
    """The ceiling may be lowered but never raised above 1 MiB."""
    with pytest.raises(ValidationError):
        HostConfig(max_message_size=size)


def test_log_file_coerced_to_path(tmp_path: object) -> None:
    """String log paths become Path objects."""
    config = HostConfig(log_file=f"{tmp_path}/host.log")  # type: ignore[arg-type]
    assert config.log_file is not None
    assert config.log_file.name == "host.log"
