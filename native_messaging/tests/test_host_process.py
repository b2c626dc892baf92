"""Tests that run the host as a real child process.

Chrome talks to the host through pipes, so these tests spawn
the interpreter and check the exact bytes on stdout, the exit
code, and that tracebacks stay on stderr.
"""
from __future__ import annotations

import json
import os
import struct
import subprocess
import sys
import textwrap
from pathlib import Path
from typing import Any

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[2]


def _frame(value: Any) -> bytes:  # noqa: ANN401
    body = json.dumps(value).encode("utf-8")
    return struct.pack("<I", len(body)) + body


def _frames(raw: bytes) -> list[Any]:
    messages: list[Any] = []
    offset = 0
    while offset < len(raw):
        length = struct.unpack("<I", raw[offset : offset + 4])[0]
        messages.append(json.loads(raw[offset + 4 : offset + 4 + length]))
        offset += 4 + length
    return messages


def _run(args: list[str], stdin: bytes) -> subprocess.CompletedProcess[bytes]:
    env = {**os.environ, "PYTHONPATH": str(_REPO_ROOT)}
    return subprocess.run(  # noqa: S603
        [sys.executable, *args],
        capture_output=True,
        timeout=30,
        check=False,
        cwd=str(_REPO_ROOT),
        env=env,
        input=stdin,
    )


@pytest.fixture
def script(tmp_path: Path) -> Any:  # noqa: ANN401
    """Return a writer for throwaway host scripts."""

    def _write(source: str) -> str:
        path = tmp_path / "host_script.py"
        path.write_text(textwrap.dedent(source))
        return str(path)

    return _write


class TestHostProcess:
    """Tests for the host over real pipes."""

    def test_module_entry_point(self) -> None:
        """python -m native_messaging.main answers and exits 0."""
        stdin = (
            _frame({"action": "ping"})
            + _frame({"action": "echo"})
        )
        result = _run(
            ["-m", "native_messaging.main", "chrome-extension://abc/"],
            stdin,
        )
        assert result.returncode == 0, result.stderr.decode(errors="replace")
        assert _frames(result.stdout) == [
            {"success": True},
            {"success": True, "echo": {"action": "echo"}},
        ]

    def test_malformed_input_recovers(self) -> None:
        """Bad JSON gets an error frame; later messages still work."""
        stdin = (
            _frame({"action": "ping"})
            + struct.pack("<I", 5) + b"{oops"
            + _frame({"action": "ping"})
        )
        result = _run(["-m", "native_messaging.main"], stdin)
        assert result.returncode == 0
        frames = _frames(result.stdout)
        assert frames[0] == {"success": True}
        assert "error" in frames[1]
        assert frames[2] == {"success": True}

    def test_handler_fault_sends_one_panic_frame(
        self, script: Any,  # noqa: ANN401
    ) -> None:
        """A crashing handler produces one panic frame, then exits."""
        path = script(
            """
            from native_messaging import run

            def handler(message):
                return message["missing"]

            run(handler)
            """,
        )
        result = _run([path], _frame({"action": "ping"}) + _frame({}))
        assert result.returncode == 1
        frames = _frames(result.stdout)
        assert len(frames) == 1
        assert frames[0]["status"] == "panic"
        assert frames[0]["payload"] == "KeyError: 'missing'"
        assert frames[0]["file"] == path
        assert frames[0]["line"] == 5
        assert b"Traceback" in result.stderr

    def test_uncaught_fault_outside_loop(
        self, script: Any,  # noqa: ANN401
    ) -> None:
        """The process hook reports faults raised anywhere."""
        path = script(
            """
            from native_messaging import install_fault_hook

            install_fault_hook()
            install_fault_hook()
            assert 1 + 1 == 3, "arithmetic is broken"
            """,
        )
        result = _run([path], b"")
        assert result.returncode == 1
        assert _frames(result.stdout) == [
            {
                "status": "panic",
                "payload": "AssertionError: arithmetic is broken",
                "file": path,
                "line": 6,
            },
        ]
