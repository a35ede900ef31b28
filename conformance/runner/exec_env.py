#!/usr/bin/env python3
from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Protocol

from semantic_common import ClientCmd, hexlify, parse_hex, run


class ExecutionEnvironment(Protocol):
    def deploy(self, source: str, value: int, constructor_args: bytes) -> tuple[bytes, bool]:
        ...

    def call(self, signature: str, value: int, arg_bytes: bytes) -> tuple[bytes, bool]:
        ...


def decode_output(client: ClientCmd, stdout: str) -> bytes:
    if not stdout:
        return b""
    try:
        return parse_hex(stdout)
    except ValueError:
        raise ValueError(f"{client.name}: output is not hex: {stdout[:80]!r}") from None


class SubprocessEnvironment:
    """Runs deploy/call as client invocations sharing one state directory.

    The client prints the hex-encoded output on stdout; exit code 0 means the
    transaction succeeded, anything else means it reverted.
    """

    def __init__(self, client: ClientCmd) -> None:
        self.client = client
        self._tmp = tempfile.TemporaryDirectory(prefix="semantic-state-")
        self.state_dir = Path(self._tmp.name)
        self.last_stderr = ""

    def close(self) -> None:
        self._tmp.cleanup()

    def __enter__(self) -> SubprocessEnvironment:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _invoke(self, command: str, argv: list[str]) -> tuple[bytes, bool]:
        out, err, rc = run(self.client, [command, "--state-dir", str(self.state_dir)] + argv)
        self.last_stderr = err
        return decode_output(self.client, out), rc == 0

    def deploy(self, source: str, value: int, constructor_args: bytes) -> tuple[bytes, bool]:
        source_path = self.state_dir / "source.sol"
        source_path.write_text(source, encoding="utf-8")
        return self._invoke(
            "deploy",
            [
                "--source-file",
                str(source_path),
                "--value",
                str(value),
                "--args-hex",
                hexlify(constructor_args),
            ],
        )

    def call(self, signature: str, value: int, arg_bytes: bytes) -> tuple[bytes, bool]:
        return self._invoke(
            "call",
            [
                "--signature",
                signature,
                "--value",
                str(value),
                "--args-hex",
                hexlify(arg_bytes),
            ],
        )
