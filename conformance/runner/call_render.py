#!/usr/bin/env python3
"""Render declared calls back into expectation-file lines."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, TextIO

from abi_format import ABIKind, ParameterList, format_bytes, forced_parameters, total_size
from case_store import DisplayMode, FunctionCallTest


RESET = "\033[0m"
BOLD = "\033[1m"
RED = "\033[31m"
CYAN = "\033[36m"
RED_BACKGROUND = "\033[41m"


@dataclass(frozen=True)
class Tokens:
    newline: str = "//"
    arrow: str = "->"
    colon: str = ":"
    comma: str = ","
    ether: str = "ether"
    failure: str = "FAILURE"
    delimiter: str = "// ----"


@dataclass(frozen=True)
class Palette:
    highlight_begin: str = RED_BACKGROUND
    highlight_end: str = RESET
    reset: str = RESET


DSL_TOKENS = Tokens()
ANSI_PALETTE = Palette()
PLAIN_PALETTE = Palette(highlight_begin="", highlight_end="", reset="")


class FormattedScope:
    """Writes the given styles on enter and a reset on exit when enabled."""

    def __init__(self, stream: TextIO, enabled: bool, styles: Iterable[str], palette: Palette = ANSI_PALETTE) -> None:
        self.stream = stream
        self.enabled = enabled
        self.styles = tuple(styles)
        self.palette = palette

    def __enter__(self) -> TextIO:
        if self.enabled:
            self.stream.write("".join(self.styles))
        return self.stream

    def __exit__(self, *exc: object) -> None:
        if self.enabled:
            self.stream.write(self.palette.reset)


def _format_result(data: bytes, params: ParameterList, observed: bool = False) -> str:
    if data and all(p.abi_type.kind is ABIKind.INVALID for p in params):
        params = forced_parameters(data)
    width = total_size(params)
    if width < len(data):
        # Output longer than the declared result: show the surplus words too.
        params = params + forced_parameters(data[width:])
    elif observed and width > len(data):
        # Observed output shorter than the declared result is shown untyped
        # so the report and the updated expectations can still be written.
        params = forced_parameters(data)
    return format_bytes(data, params)


def _with_failure(failure: bool, values: str, tokens: Tokens) -> str:
    if not failure:
        return values
    if not values:
        return tokens.failure
    return f"{tokens.failure}{tokens.comma} {values}"


def _result_text(test: FunctionCallTest, render_result: bool, tokens: Tokens) -> str:
    expectations = test.call.expectations
    if render_result:
        values = _format_result(expectations.raw_bytes, expectations.parameters)
        return _with_failure(expectations.failure, values, tokens)

    values = _format_result(test.raw_bytes, expectations.parameters, observed=True)
    return _with_failure(bool(test.failure), values, tokens)


def _comment_lines(comments: tuple[str, ...], line_prefix: str, tokens: Tokens) -> list[str]:
    return [f"{line_prefix}{tokens.newline} {comment}\n" for comment in comments]


def format_function_call_test(
    test: FunctionCallTest,
    line_prefix: str = "",
    render_result: bool = False,
    highlight: bool = False,
    tokens: Tokens = DSL_TOKENS,
    palette: Palette = ANSI_PALETTE,
    with_comments: bool = False,
) -> str:
    call = test.call
    do_highlight = highlight and not test.matches_expectation()
    single_line = call.display_mode is DisplayMode.SINGLE_LINE
    ws = " "

    out: list[str] = []
    if with_comments:
        out += _comment_lines(call.comments, line_prefix, tokens)
    out += [line_prefix, tokens.newline, ws, call.signature]
    if call.value > 0:
        out += [tokens.comma, ws, str(call.value), ws, tokens.ether]
    if call.arguments.raw_bytes:
        out += [tokens.colon, ws, format_bytes(call.arguments.raw_bytes, call.arguments.parameters)]

    if single_line:
        out += [ws, tokens.arrow]
    else:
        out += ["\n", line_prefix, tokens.newline, ws, tokens.arrow, "\n", line_prefix, tokens.newline]

    result = _result_text(test, render_result, tokens)
    if result or (do_highlight and palette.highlight_begin):
        out.append(ws)
    if do_highlight:
        out.append(palette.highlight_begin)
    out.append(result)
    if do_highlight:
        out.append(palette.highlight_end)
    out.append("\n")
    if with_comments:
        out += _comment_lines(call.trailing_comments, line_prefix, tokens)
    return "".join(out)
