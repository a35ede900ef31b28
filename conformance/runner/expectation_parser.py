#!/usr/bin/env python3
"""Test file loader and parser for the integer subset of the expectation DSL.

A test file holds the program source, a ``// ----`` delimiter line, and one
expectation per declared call::

    // f(uint256): 1 -> 2
    // g(), 5 ether -> FAILURE
    // k() -> FAILURE, 7
    // h(int256): -1
    // ->
    // -1, 0
"""
from __future__ import annotations

import re
from dataclasses import replace
from pathlib import Path

from abi_format import WORD_SIZE, ABIKind, ParameterDescriptor, parameter
from call_render import DSL_TOKENS
from case_store import Arguments, DisplayMode, Expectations, FunctionCall


CALL_RE = re.compile(
    r"^(?P<sig>[A-Za-z_$][\w$]*\([^()]*\))"
    r"(?:\s*,\s*(?P<value>\d+)\s*ether)?"
    r"(?:\s*:\s*(?P<args>.*?))?"
    r"(?:\s*->\s*(?P<result>.*?))?\s*$"
)

UINT_MAX = (1 << (8 * WORD_SIZE)) - 1
INT_MIN = -(1 << (8 * WORD_SIZE - 1))


class ExpectationSyntaxError(ValueError):
    def __init__(self, lineno: int, line: str, reason: str) -> None:
        super().__init__(f"line {lineno}: {reason}: {line.strip()!r}")
        self.lineno = lineno
        self.line = line


def load_test_file(path: Path) -> tuple[str, list[str]]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError:
        raise FileNotFoundError(f'Cannot open test contract: "{path}".') from None
    return split_source(text)


def split_source(text: str) -> tuple[str, list[str]]:
    lines = text.splitlines()
    for i, line in enumerate(lines):
        if line.strip() == DSL_TOKENS.delimiter:
            source = "".join(f"{l}\n" for l in lines[:i])
            return source, lines[i + 1 :]
    return "".join(f"{l}\n" for l in lines), []


def encode_integer(value: int) -> tuple[bytes, ParameterDescriptor]:
    if value < INT_MIN or value > UINT_MAX:
        raise ValueError(f"integer literal out of 256-bit range: {value}")
    if value < 0:
        return value.to_bytes(WORD_SIZE, "big", signed=True), parameter(ABIKind.SIGNED_INTEGER)
    return value.to_bytes(WORD_SIZE, "big", signed=False), parameter(ABIKind.UNSIGNED_INTEGER)


def parse_literal(token: str) -> int:
    token = token.strip()
    if token == "true":
        return 1
    if token == "false":
        return 0
    if re.fullmatch(r"0[xX][0-9a-fA-F]+", token):
        return int(token, 16)
    if re.fullmatch(r"-?\d+", token):
        return int(token, 10)
    raise ValueError(f"unsupported literal {token!r}")


def parse_values(text: str) -> tuple[bytes, tuple[ParameterDescriptor, ...]]:
    text = text.strip()
    if not text:
        return b"", ()
    raw = bytearray()
    params: list[ParameterDescriptor] = []
    for token in text.split(","):
        encoded, param = encode_integer(parse_literal(token))
        raw.extend(encoded)
        params.append(param)
    return bytes(raw), tuple(params)


def _expectations(text: str) -> Expectations:
    head, _, rest = text.strip().partition(",")
    if head.strip() == DSL_TOKENS.failure:
        raw, params = parse_values(rest)
        return Expectations(raw_bytes=raw, parameters=params, failure=True)
    raw, params = parse_values(text)
    return Expectations(raw_bytes=raw, parameters=params)


def _build_call(head: re.Match[str], result: str, mode: DisplayMode, comments: list[str]) -> FunctionCall:
    raw, params = parse_values(head.group("args") or "")
    return FunctionCall(
        signature=head.group("sig"),
        value=int(head.group("value") or 0),
        arguments=Arguments(raw_bytes=raw, parameters=params),
        expectations=_expectations(result),
        display_mode=mode,
        comments=tuple(comments),
    )


def _multi_line_call(head: re.Match[str], result_lines: list[str], comments: list[str]) -> FunctionCall:
    result = ", ".join(line.rstrip(",").strip() for line in result_lines)
    return _build_call(head, result, DisplayMode.MULTI_LINE, comments)


def parse_function_calls(lines: list[str]) -> list[FunctionCall]:
    """Parse expectation lines into calls.

    ``// #`` comment lines are kept on the call that follows them; comments
    after the last call are kept as its trailing comments.
    """
    calls: list[FunctionCall] = []
    comments: list[str] = []
    pending: re.Match[str] | None = None
    pending_comments: list[str] = []
    pending_lineno = 0
    awaiting_arrow = False
    result_lines: list[str] = []

    for lineno, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped:
            continue
        if not stripped.startswith(DSL_TOKENS.newline):
            raise ExpectationSyntaxError(lineno, line, "expected a '//' expectation line")
        content = stripped[len(DSL_TOKENS.newline) :].strip()
        if not content:
            continue
        if content.startswith("#"):
            comments.append(content)
            continue

        try:
            if awaiting_arrow:
                if content != DSL_TOKENS.arrow:
                    raise ExpectationSyntaxError(lineno, line, "expected '->' after multi-line call")
                awaiting_arrow = False
                continue

            m = CALL_RE.match(content)
            if pending is not None:
                if m is None:
                    result_lines.append(content)
                    continue
                calls.append(_multi_line_call(pending, result_lines, pending_comments))
                pending = None
                result_lines = []
            if m is None:
                raise ExpectationSyntaxError(lineno, line, "not a function call")

            if m.group("result") is not None:
                calls.append(_build_call(m, m.group("result"), DisplayMode.SINGLE_LINE, comments))
            else:
                pending = m
                pending_comments = comments
                pending_lineno = lineno
                awaiting_arrow = True
            comments = []
        except ExpectationSyntaxError:
            raise
        except ValueError as e:
            raise ExpectationSyntaxError(lineno, line, str(e)) from e

    if awaiting_arrow:
        raise ExpectationSyntaxError(pending_lineno, lines[pending_lineno - 1], "missing '->' for call")
    if pending is not None:
        try:
            calls.append(_multi_line_call(pending, result_lines, pending_comments))
        except ValueError as e:
            raise ExpectationSyntaxError(pending_lineno, lines[pending_lineno - 1], str(e)) from e
    if comments and calls:
        calls[-1] = replace(calls[-1], trailing_comments=tuple(comments))
    return calls
