#!/usr/bin/env python3
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from abi_format import ParameterList


class DisplayMode(enum.Enum):
    SINGLE_LINE = "SingleLine"
    MULTI_LINE = "MultiLine"


@dataclass(frozen=True)
class Arguments:
    raw_bytes: bytes = b""
    parameters: ParameterList = ()


@dataclass(frozen=True)
class Expectations:
    raw_bytes: bytes = b""
    parameters: ParameterList = ()
    failure: bool = False


@dataclass(frozen=True)
class FunctionCall:
    signature: str
    value: int = 0
    arguments: Arguments = field(default_factory=Arguments)
    expectations: Expectations = field(default_factory=Expectations)
    display_mode: DisplayMode = DisplayMode.SINGLE_LINE
    comments: tuple[str, ...] = ()
    trailing_comments: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError(f"{self.signature}: call value must be >= 0, got {self.value}")


@dataclass(frozen=True)
class Outcome:
    raw_bytes: bytes
    failure: bool


class FunctionCallTest:
    """A declared call plus the outcome of its most recent execution."""

    def __init__(self, call: FunctionCall) -> None:
        self.call = call
        self._outcome: Optional[Outcome] = None

    @property
    def outcome(self) -> Optional[Outcome]:
        return self._outcome

    @property
    def raw_bytes(self) -> bytes:
        return self._outcome.raw_bytes if self._outcome is not None else b""

    @property
    def failure(self) -> Optional[bool]:
        return self._outcome.failure if self._outcome is not None else None

    def reset(self) -> None:
        self._outcome = None

    def record(self, raw_bytes: bytes, failure: bool) -> None:
        self._outcome = Outcome(raw_bytes=bytes(raw_bytes), failure=failure)

    def matches_expectation(self) -> bool:
        expected = self.call.expectations
        return self.failure == expected.failure and self.raw_bytes == expected.raw_bytes

    def __repr__(self) -> str:
        return f"FunctionCallTest({self.call.signature!r}, outcome={self._outcome!r})"


class TestCaseStore:
    """Declared call tests in declaration order. Append-only."""

    __test__ = False

    def __init__(self, calls: Iterable[FunctionCall] = ()) -> None:
        self._tests: list[FunctionCallTest] = []
        for call in calls:
            self.append(call)

    def append(self, call: FunctionCall) -> FunctionCallTest:
        test = FunctionCallTest(call)
        self._tests.append(test)
        return test

    def reset(self) -> None:
        for test in self._tests:
            test.reset()

    def __iter__(self) -> Iterator[FunctionCallTest]:
        return iter(self._tests)

    def __len__(self) -> int:
        return len(self._tests)

    def __getitem__(self, index: int) -> FunctionCallTest:
        return self._tests[index]
