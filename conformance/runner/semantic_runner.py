#!/usr/bin/env python3
from __future__ import annotations

import io
from pathlib import Path
from typing import TextIO

from call_render import (
    ANSI_PALETTE,
    BOLD,
    CYAN,
    DSL_TOKENS,
    PLAIN_PALETTE,
    RED,
    FormattedScope,
    Palette,
    Tokens,
    format_function_call_test,
)
from case_store import FunctionCall, TestCaseStore
from exec_env import ExecutionEnvironment
from expectation_parser import load_test_file, parse_function_calls


ATTENTION = "Attention: Updates on the test will apply the detected format displayed."


class DeployError(RuntimeError):
    pass


class SemanticTest:
    """Deploys a program once and checks every declared call against its expectation."""

    __test__ = False

    def __init__(
        self,
        source: str,
        calls: list[FunctionCall],
        env: ExecutionEnvironment,
        tokens: Tokens = DSL_TOKENS,
        palette: Palette = ANSI_PALETTE,
    ) -> None:
        self.source = source
        self.tests = TestCaseStore(calls)
        self.env = env
        self.tokens = tokens
        self.palette = palette
        self.checks = 0

    @classmethod
    def from_file(cls, path: Path, env: ExecutionEnvironment, **kwargs) -> SemanticTest:
        source, lines = load_test_file(path)
        return cls(source, parse_function_calls(lines), env, **kwargs)

    def deploy(self, value: int = 0, constructor_args: bytes = b"") -> bool:
        output, success = self.env.deploy(self.source, value, constructor_args)
        return bool(output) and success

    def run(self, stream: TextIO, line_prefix: str = "", use_color: bool = False) -> bool:
        if not self.deploy():
            raise DeployError("Failed to deploy contract.")

        self.tests.reset()

        success = True
        self.checks = 0
        for test in self.tests:
            call = test.call
            output, tx_ok = self.env.call(call.signature, call.value, call.arguments.raw_bytes)
            if tx_ok == call.expectations.failure or output != call.expectations.raw_bytes:
                success = False
            test.record(output, not tx_ok)
            self.checks += 1

        if success:
            return True

        self._write_section(stream, line_prefix, use_color, "Expected result:", render_result=True)
        self._write_section(stream, line_prefix, use_color, "Obtained result:", render_result=False)
        with FormattedScope(stream, use_color, (BOLD, RED), self.palette):
            stream.write(f"{line_prefix}{ATTENTION}")
        stream.write("\n")
        return False

    def _write_section(self, stream: TextIO, line_prefix: str, use_color: bool, title: str, render_result: bool) -> None:
        with FormattedScope(stream, use_color, (BOLD, CYAN), self.palette):
            stream.write(f"{line_prefix}{title}")
        stream.write("\n")
        for test in self.tests:
            stream.write(
                format_function_call_test(
                    test,
                    line_prefix,
                    render_result=render_result,
                    highlight=True,
                    tokens=self.tokens,
                    palette=self.palette if use_color else PLAIN_PALETTE,
                )
            )

    def print_source(self, stream: TextIO, line_prefix: str = "") -> None:
        for line in self.source.splitlines():
            stream.write(f"{line_prefix}{line}\n")

    def print_updated_expectations(self, stream: TextIO) -> None:
        for test in self.tests:
            stream.write(
                format_function_call_test(
                    test,
                    "",
                    render_result=False,
                    highlight=False,
                    tokens=self.tokens,
                    with_comments=True,
                )
            )

    def updated_file_text(self) -> str:
        buf = io.StringIO()
        buf.write(self.source)
        buf.write(f"{self.tokens.delimiter}\n")
        self.print_updated_expectations(buf)
        return buf.getvalue()
