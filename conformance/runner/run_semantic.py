#!/usr/bin/env python3
from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path

from abi_format import RangeError
from exec_env import SubprocessEnvironment
from expectation_parser import ExpectationSyntaxError
from semantic_common import build_clients, color_enabled, default_client_name, fail
from semantic_runner import DeployError, SemanticTest


def run_file(
    path: Path,
    env_factory,
    *,
    line_prefix: str,
    use_color: bool,
    accept: bool,
    show_source: bool,
    failures: list[str],
) -> int:
    with env_factory() as env:
        try:
            test = SemanticTest.from_file(path, env)
            if test.run(sys.stdout, line_prefix, use_color):
                return test.checks
        except (FileNotFoundError, ExpectationSyntaxError, DeployError, RangeError) as e:
            failures.append(f"{path}: {e}")
            return 0
        except (OSError, ValueError, subprocess.TimeoutExpired) as e:
            failures.append(f"{path}: client error: {e}")
            return 0

    failures.append(f"{path}: expectation mismatch")
    if show_source:
        print(f"{line_prefix}Source:")
        test.print_source(sys.stdout, line_prefix + "  ")
    if accept:
        path.write_text(test.updated_file_text(), encoding="utf-8")
        print(f"{line_prefix}updated expectations written to {path}")
    return test.checks


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Run semantic expectation tests against an execution client."
    )
    parser.add_argument("files", nargs="+", help="Test files (source, '// ----', expectations)")
    parser.add_argument(
        "--client",
        default=None,
        help="Client name from the client config (default: $SEMANTIC_CLIENT or 'evm')",
    )
    parser.add_argument(
        "--client-config",
        default=None,
        help="Path to clients.yml (default: repo/conformance/clients.yml)",
    )
    parser.add_argument("--line-prefix", default="  ", help="Prefix for report lines")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument(
        "--accept",
        action="store_true",
        help="Rewrite failing files with the obtained results",
    )
    parser.add_argument(
        "--show-source",
        action="store_true",
        help="Print the program source of failing files",
    )
    args = parser.parse_args(argv)

    repo_root = Path(__file__).resolve().parents[2]
    config_path = (
        Path(args.client_config).resolve()
        if args.client_config
        else repo_root / "conformance" / "clients.yml"
    )
    try:
        clients = build_clients(config_path)
    except (OSError, ValueError) as e:
        return fail(f"cannot load client config {config_path}: {e}")

    client_name = args.client or default_client_name()
    client = clients.get(client_name)
    if client is None:
        return fail(f"unknown client {client_name!r}; known: {sorted(clients)}")

    use_color = not args.no_color and color_enabled()
    failures: list[str] = []
    checks = 0

    for name in args.files:
        path = Path(name)
        checks += run_file(
            path,
            lambda: SubprocessEnvironment(client),
            line_prefix=args.line_prefix,
            use_color=use_color,
            accept=args.accept,
            show_source=args.show_source,
            failures=failures,
        )

    if failures:
        print("SEMANTIC: FAIL")
        for f in failures:
            print(f"- {f}")
        return 1

    print(f"SEMANTIC: PASS ({checks} checks)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
