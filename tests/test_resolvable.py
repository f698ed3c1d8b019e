"""Tests for value-or-resolver resolution."""

import pytest

from pyrepeater import ResolutionError, Resolver, Value, prop, resolve
from pyrepeater.core import MAX_RESOLVE_DEPTH


class Settings:
    attempts = 4

    def __init__(self):
        self.calls = 0


def test_plain_value():
    assert resolve(3) == 3
    assert resolve(None) is None


def test_tagged_value_is_not_called():
    func = lambda ctx: 1  # noqa: E731
    assert resolve(Value(func)) is func


def test_callable_receives_context():
    settings = Settings()
    assert resolve(lambda ctx: ctx.attempts, settings) == 4


def test_nested_resolvers():
    assert resolve(lambda ctx: lambda ctx: Value(7)) == 7
    assert resolve(Resolver(lambda ctx: Resolver(lambda ctx: ctx * 2)), 5) == 10


def test_prop_reads_context_attribute():
    assert resolve(prop("attempts"), Settings()) == 4


def test_prop_missing_attribute():
    with pytest.raises(AttributeError):
        resolve(prop("missing"), Settings())


def test_depth_guard():
    def endless(ctx):
        ctx.calls += 1
        return endless

    settings = Settings()
    with pytest.raises(ResolutionError):
        resolve(endless, settings)

    assert settings.calls == MAX_RESOLVE_DEPTH


def test_resolves_at_depth_limit():
    chain = 5
    for _ in range(MAX_RESOLVE_DEPTH - 1):
        chain = Resolver(lambda ctx, inner=chain: inner)
    assert resolve(chain) == 5
