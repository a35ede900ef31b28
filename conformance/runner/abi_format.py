#!/usr/bin/env python3
"""ABI parameter descriptors and the byte formatter used in test reports."""
from __future__ import annotations

import enum
from dataclasses import dataclass


WORD_SIZE = 32


class RangeError(ValueError):
    pass


class ABIKind(enum.Enum):
    SIGNED_INTEGER = "SignedInteger"
    UNSIGNED_INTEGER = "UnsignedInteger"
    INVALID = "Invalid"
    UNTYPED = "Untyped"


@dataclass(frozen=True)
class ABIType:
    kind: ABIKind
    size_bytes: int = WORD_SIZE


@dataclass(frozen=True)
class ParameterDescriptor:
    abi_type: ABIType


ParameterList = tuple[ParameterDescriptor, ...]


def parameter(kind: ABIKind, size_bytes: int = WORD_SIZE) -> ParameterDescriptor:
    return ParameterDescriptor(ABIType(kind=kind, size_bytes=size_bytes))


def _decode_value(byte_range: bytes, kind: ABIKind) -> int:
    # Declared signedness is not trusted: an unsigned expectation whose actual
    # output has the high bit set is rendered as a negative number.
    if kind in (ABIKind.SIGNED_INTEGER, ABIKind.UNSIGNED_INTEGER):
        if byte_range and byte_range[0] & 0x80:
            return int.from_bytes(byte_range, "big", signed=True)
    return int.from_bytes(byte_range, "big", signed=False)


def format_bytes(data: bytes, params: ParameterList) -> str:
    """Render ``data`` as comma separated integers, one per descriptor.

    Raises RangeError when a descriptor reaches past the end of ``data``.
    """
    if not data:
        return ""

    parts: list[str] = []
    offset = 0
    for i, param in enumerate(params):
        size = param.abi_type.size_bytes
        end = offset + size
        if end > len(data):
            raise RangeError(
                f"invalid byte range: parameter {i} needs bytes [{offset}, {end}) of {len(data)}"
            )
        parts.append(str(_decode_value(data[offset:end], param.abi_type.kind)))
        offset = end

        is_last = i == len(params) - 1
        if not is_last and param.abi_type.kind is not ABIKind.UNTYPED:
            parts.append(", ")
    return "".join(parts)


def forced_parameters(data: bytes) -> ParameterList:
    """Word-sized Invalid descriptors covering ``data``, for output with no declared type."""
    words, rest = divmod(len(data), WORD_SIZE)
    params = [parameter(ABIKind.INVALID) for _ in range(words)]
    if rest:
        params.append(parameter(ABIKind.UNTYPED, rest))
    return tuple(params)


def total_size(params: ParameterList) -> int:
    return sum(p.abi_type.size_bytes for p in params)
