from __future__ import annotations

import pytest


def word(value: int) -> bytes:
    return value.to_bytes(32, "big", signed=value < 0)


class FakeEnvironment:
    """Scripted execution environment: one (output, success) reply per call."""

    def __init__(self, replies=None, deploy_reply=(b"\x60\x80", True)):
        self.replies = list(replies or [])
        self.deploy_reply = deploy_reply
        self.deploys: list[tuple[str, int, bytes]] = []
        self.calls: list[tuple[str, int, bytes]] = []

    def deploy(self, source, value, constructor_args):
        self.deploys.append((source, value, constructor_args))
        return self.deploy_reply

    def call(self, signature, value, arg_bytes):
        self.calls.append((signature, value, arg_bytes))
        return self.replies.pop(0)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return None


@pytest.fixture
def w():
    return word


@pytest.fixture
def fake_env():
    return FakeEnvironment
