#!/usr/bin/env python3
from __future__ import annotations

import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


DEFAULT_TIMEOUT_S = 60
DEFAULT_CLIENT = "evm"


@dataclass(frozen=True)
class ClientCmd:
    name: str
    cwd: Path
    argv_prefix: list[str]


def fail(msg: str) -> int:
    print(f"ERROR: {msg}", file=sys.stderr)
    return 1


def timeout_s() -> int:
    raw = os.environ.get("SEMANTIC_TIMEOUT_S", "").strip()
    if not raw:
        return DEFAULT_TIMEOUT_S
    return parse_int(raw)


def default_client_name() -> str:
    return os.environ.get("SEMANTIC_CLIENT", "").strip() or DEFAULT_CLIENT


def color_enabled() -> bool:
    return not os.environ.get("NO_COLOR", "").strip()


def parse_int(value: object) -> int:
    if isinstance(value, bool):
        raise TypeError(f"invalid int value: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value, 0)
    raise TypeError(f"invalid int value: {value!r}")


def parse_hex(value: object) -> bytes:
    if not isinstance(value, str):
        raise TypeError(f"invalid hex value: {value!r}")
    clean = "".join(value.split())
    if clean.startswith(("0x", "0X")):
        clean = clean[2:]
    return bytes.fromhex(clean)


def hexlify(b: bytes) -> str:
    return "".join(f"{x:02x}" for x in b)


def run(
    client: ClientCmd,
    argv: list[str],
    capture_stderr: bool = True,
) -> tuple[str, str, int]:
    p = subprocess.run(
        client.argv_prefix + argv,
        cwd=str(client.cwd),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE if capture_stderr else subprocess.DEVNULL,
        text=True,
        timeout=timeout_s(),
    )
    return p.stdout.strip(), (p.stderr or "").strip(), p.returncode


def load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        obj = yaml.safe_load(f)
    if not isinstance(obj, dict):
        raise ValueError(f"config root must be a mapping: {path}")
    return obj


def build_clients(config_path: Path) -> dict[str, ClientCmd]:
    doc = load_yaml(config_path)
    entries = doc.get("clients")
    if not isinstance(entries, list) or not entries:
        raise ValueError(f"no clients declared in {config_path}")

    base_dir = config_path.resolve().parent
    clients: dict[str, ClientCmd] = {}
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ValueError(f"clients[{i}] is not a mapping")
        name = entry.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError(f"clients[{i}]: missing name")
        argv_prefix = entry.get("argv_prefix")
        if (
            not isinstance(argv_prefix, list)
            or not argv_prefix
            or not all(isinstance(a, str) for a in argv_prefix)
        ):
            raise ValueError(f"{name}: argv_prefix must be a non-empty list of strings")
        cwd = Path(str(entry.get("cwd", ".")))
        if not cwd.is_absolute():
            cwd = (base_dir / cwd).resolve()
        clients[name] = ClientCmd(name=name, cwd=cwd, argv_prefix=list(argv_prefix))
    return clients
