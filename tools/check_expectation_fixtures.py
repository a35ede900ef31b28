#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from case_store import FunctionCallTest
from call_render import format_function_call_test
from expectation_parser import load_test_file, parse_function_calls


def check_round_trip(path: Path, errors: list[str]) -> int:
    try:
        _, lines = load_test_file(path)
        calls = parse_function_calls(lines)
    except (FileNotFoundError, ValueError) as e:
        errors.append(f"{path}: {e}")
        return 0

    if not calls:
        errors.append(f"{path}: no expectations declared")
        return 0

    for call in calls:
        rendered = format_function_call_test(FunctionCallTest(call), render_result=True)
        try:
            reparsed = parse_function_calls(rendered.splitlines())
        except ValueError as e:
            errors.append(f"{path}: {call.signature}: rendered expectation does not parse: {e}")
            continue
        if len(reparsed) != 1:
            errors.append(f"{path}: {call.signature}: rendered to {len(reparsed)} calls")
            continue
        if reparsed[0].expectations != call.expectations:
            errors.append(
                f"{path}: {call.signature}: expectation bytes changed on re-render: {rendered.strip()!r}"
            )
    return len(calls)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Check that every semantic test fixture parses and re-renders losslessly."
    )
    parser.add_argument(
        "--fixture-dir",
        default="conformance/fixtures",
        help="Fixture directory (default: conformance/fixtures)",
    )
    args = parser.parse_args()

    fixture_dir = Path(args.fixture_dir)
    if not fixture_dir.is_dir():
        print(f"ERROR: fixture directory not found: {fixture_dir}", file=sys.stderr)
        return 1

    errors: list[str] = []
    checked = 0
    for path in sorted(fixture_dir.glob("*.sol")):
        checked += check_round_trip(path, errors)

    if errors:
        for err in errors:
            print(f"ERROR: {err}", file=sys.stderr)
        return 1

    print(f"OK: {checked} expectations parse and re-render losslessly.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
