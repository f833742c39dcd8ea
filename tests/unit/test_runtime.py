"""Tests for the support library used by generated modules."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from faultline import runtime


@dataclass(repr=False)
class Missing(runtime.ErrorContext):
    key: str

    def kind(self) -> runtime.ErrorKind:
        return MissingKind(self.key)

    def __str__(self) -> str:
        return f"missing {self.key}"

    __repr__ = __str__


@dataclass(frozen=True)
class MissingKind(runtime.ErrorKind):
    key: str


@dataclass(repr=False)
class Io(runtime.ErrorContext):
    def __str__(self) -> str:
        return "io"

    __repr__ = __str__


class LookupFailed(runtime.ContextError):
    pass


LookupFailed.conversions = ((OSError, lambda err: Io().into_error(err)),)
Missing.error_type = LookupFailed
Io.error_type = LookupFailed


class TestBacktrace:
    def test_capture_records_caller(self) -> None:
        backtrace = runtime.Backtrace.capture()
        assert len(backtrace) > 0
        assert list(backtrace)[-1].name == "test_capture_records_caller"
        assert "test_capture_records_caller" in str(backtrace)

    def test_empty(self) -> None:
        assert len(runtime.Backtrace()) == 0
        assert str(runtime.Backtrace()) == ""


class TestContextError:
    def test_into_error(self) -> None:
        error = Missing("port").into_error()
        assert isinstance(error, LookupFailed)
        assert error.context == Missing("port")
        assert error.cause is None
        assert str(error) == "missing port"

    def test_cause_is_chained(self) -> None:
        cause = KeyError("port")
        error = Missing("port").into_error(cause)
        assert error.cause is cause
        assert error.__cause__ is cause
        assert str(error) == "missing port\n---- source ----\n'port'"

    def test_backtrace_starts_outside_runtime(self) -> None:
        error = Missing("port").into_error()
        assert len(error.backtrace) > 0
        frames = [frame.name for frame in error.backtrace]
        assert "__init__" not in frames
        assert frames[-1] == "into_error"

    def test_kind_delegates_to_context(self) -> None:
        error = Missing("port").into_error()
        assert error.kind() == MissingKind("port")
        assert str(error.kind()) == "MissingKind(key='port')"

    def test_from_context(self) -> None:
        error = LookupFailed.from_context(Missing("a"))
        assert error.context == Missing("a")

    def test_repr(self) -> None:
        assert repr(Io().into_error()) == "LookupFailed(io, cause=None)"


class TestConversions:
    def test_convert_matching(self) -> None:
        cause = FileNotFoundError("x")
        converted = LookupFailed.convert(cause)
        assert isinstance(converted, LookupFailed)
        assert converted.context == Io()
        assert converted.cause is cause

    def test_convert_non_matching(self) -> None:
        assert LookupFailed.convert(ValueError("x")) is None

    def test_converting_block(self) -> None:
        with pytest.raises(LookupFailed) as excinfo:
            with LookupFailed.converting():
                raise PermissionError("denied")
        assert isinstance(excinfo.value.__cause__, PermissionError)

    def test_converting_passes_other_errors(self) -> None:
        with pytest.raises(ValueError):
            with LookupFailed.converting():
                raise ValueError("x")


class TestHelpers:
    def test_fail(self) -> None:
        with pytest.raises(LookupFailed, match="missing a"):
            runtime.fail(Missing("a"))

    def test_ensure(self) -> None:
        runtime.ensure(True, Missing("a"))
        with pytest.raises(LookupFailed):
            runtime.ensure(False, Missing("a"))

    def test_context_returns_value(self) -> None:
        assert runtime.context(5, lambda: Missing("a")) == 5
        assert runtime.context(0, lambda: Missing("a")) == 0

    def test_context_none(self) -> None:
        with pytest.raises(LookupFailed) as excinfo:
            runtime.context(None, lambda: Missing("a"))
        assert excinfo.value.cause is None

    def test_context_exception(self) -> None:
        cause = OSError("boom")
        with pytest.raises(LookupFailed) as excinfo:
            runtime.context(cause, lambda: Missing("a"))
        assert excinfo.value.cause is cause

    def test_with_context(self) -> None:
        with pytest.raises(LookupFailed) as excinfo:
            with runtime.with_context(lambda err: Missing(str(err))):
                raise RuntimeError("gone")
        assert excinfo.value.context == Missing("gone")
        assert isinstance(excinfo.value.__cause__, RuntimeError)
