from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

import semantic_common
from exec_env import SubprocessEnvironment, decode_output
from semantic_common import ClientCmd


CLIENT = ClientCmd(name="evm", cwd=Path("."), argv_prefix=["evm-client", "-q"])


class _Recorder:
    def __init__(self, stdout: str = "", returncode: int = 0):
        self.stdout = stdout
        self.returncode = returncode
        self.argvs: list[list[str]] = []
        self.kwargs: list[dict] = []

    def __call__(self, argv, **kwargs):
        self.argvs.append(argv)
        self.kwargs.append(kwargs)
        return subprocess.CompletedProcess(argv, self.returncode, stdout=self.stdout, stderr="boom\n")


def test_call_builds_argv_and_decodes_output(monkeypatch):
    monkeypatch.delenv("SEMANTIC_TIMEOUT_S", raising=False)
    rec = _Recorder(stdout="00ff\n")
    monkeypatch.setattr(semantic_common.subprocess, "run", rec)
    with SubprocessEnvironment(CLIENT) as env:
        output, success = env.call("f(uint256)", 3, b"\x01")
        state_dir = str(env.state_dir)

    assert output == b"\x00\xff"
    assert success is True
    assert rec.argvs[0] == [
        "evm-client",
        "-q",
        "call",
        "--state-dir",
        state_dir,
        "--signature",
        "f(uint256)",
        "--value",
        "3",
        "--args-hex",
        "01",
    ]
    assert rec.kwargs[0]["timeout"] == semantic_common.DEFAULT_TIMEOUT_S
    assert not Path(state_dir).exists()


def test_deploy_writes_source_into_state_dir(monkeypatch):
    rec = _Recorder(stdout="6080")
    monkeypatch.setattr(semantic_common.subprocess, "run", rec)
    with SubprocessEnvironment(CLIENT) as env:
        output, success = env.deploy("contract C {}\n", 0, b"")
        source_file = rec.argvs[0][rec.argvs[0].index("--source-file") + 1]
        assert Path(source_file).read_text(encoding="utf-8") == "contract C {}\n"
    assert output == b"\x60\x80"
    assert success is True
    assert rec.argvs[0][2] == "deploy"


def test_nonzero_exit_is_a_reverted_transaction(monkeypatch):
    monkeypatch.setattr(semantic_common.subprocess, "run", _Recorder(stdout="", returncode=1))
    with SubprocessEnvironment(CLIENT) as env:
        assert env.call("f()", 0, b"") == (b"", False)
        assert env.last_stderr == "boom"


def test_timeout_env_var(monkeypatch):
    rec = _Recorder()
    monkeypatch.setattr(semantic_common.subprocess, "run", rec)
    monkeypatch.setenv("SEMANTIC_TIMEOUT_S", "5")
    with SubprocessEnvironment(CLIENT) as env:
        env.call("f()", 0, b"")
    assert rec.kwargs[0]["timeout"] == 5


def test_non_hex_output_is_fatal():
    with pytest.raises(ValueError, match="output is not hex"):
        decode_output(CLIENT, "error: no such function")
    assert decode_output(CLIENT, "") == b""
    assert decode_output(CLIENT, "0x2a") == b"\x2a"
