"""End-to-end tests: generate modules, execute them and use the error types."""

from __future__ import annotations

import copy
import json

import pytest

from faultline import runtime
from faultline.pipeline import GenerationPipeline
from tests.conftest import ERRORS_FL, SAMPLE_SOURCE, generate_module, load_module


class Tracked:
    """Counts how often it is duplicated by ``copy.copy``."""

    copies = 0

    def __init__(self, label: str) -> None:
        self.label = label

    def __copy__(self) -> Tracked:
        Tracked.copies += 1
        return Tracked(self.label)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Tracked) and other.label == self.label

    def __hash__(self) -> int:
        return hash(self.label)


@pytest.fixture(scope="module")
def sample():
    return generate_module(SAMPLE_SOURCE)


class TestStructContext:
    def test_display(self, sample) -> None:
        foo = sample.Foo(42)
        assert str(foo) == "Error 42"
        assert repr(foo) == "Error 42"
        assert sample.Foo.__doc__ == "Failed to read the configuration."

    def test_kind(self, sample) -> None:
        kind = sample.Foo(42).kind()
        assert kind == sample.ErrorKind.Foo(code=42)
        assert isinstance(kind, sample.faultline_foo.ErrorKind)
        assert repr(kind) == "faultline_foo.ErrorKind.Foo(code=42)"
        assert str(kind) == repr(kind)

    def test_kind_is_frozen_and_copies_as_itself(self, sample) -> None:
        kind = sample.Foo(1).kind()
        assert copy.copy(kind) is kind
        with pytest.raises(AttributeError):
            kind.code = 2
        assert {kind, sample.Foo(1).kind()} == {kind}

    def test_aliases(self, sample) -> None:
        assert sample.Error is sample.faultline_foo.Error
        assert sample.Result == sample.faultline_foo.Result
        assert sample.Foo.error_type is sample.Error
        assert set(sample.__all__) >= {"Foo", "faultline_foo", "Error", "Result", "ErrorKind"}

    def test_error_wraps_context(self, sample) -> None:
        error = sample.Foo(7).into_error()
        assert isinstance(error, sample.Error)
        assert isinstance(error, runtime.ContextError)
        assert error.context == sample.Foo(7)
        assert error.kind() == sample.ErrorKind.Foo(code=7)
        assert str(error) == "Error 7"
        assert len(error.backtrace) > 0


class TestEnumContext:
    def test_display(self, sample) -> None:
        context = sample.Context
        assert str(context.Io()) == "Io"
        assert str(context.Fmt(code=3)) == "Fmt 3"
        assert str(context.Utf8(1, "bad")) == "Utf8 1 bad"
        assert repr(context.Decode()) == "Decode"

    def test_variant_names(self, sample) -> None:
        assert sample.Context.Fmt.__qualname__ == "Context.Fmt"
        assert isinstance(sample.Context.Fmt(code=1), sample.Context)
        assert not hasattr(sample, "_Context_Fmt")

    def test_kinds(self, sample) -> None:
        kinds = sample.faultline_context.ErrorKind
        context = sample.Context
        assert context.Io().kind() == kinds.Io()
        assert context.Fmt(code=3).kind() == kinds.Fmt(code=3)
        assert context.Utf8(1, "bad").kind() == kinds.Utf8(1)
        assert context.Utf8(1, "bad").kind() != kinds.Utf8(2)
        assert repr(kinds.Utf8(1)) == "faultline_context.ErrorKind.Utf8(_0=1)"

    def test_aliases_disabled(self, sample) -> None:
        assert sample.Context.error_type is sample.faultline_context.Error
        assert sample.Error is not sample.faultline_context.Error

    def test_exports(self, sample) -> None:
        assert sample.__all__ == [
            "Foo", "faultline_foo", "Error", "Result", "ErrorKind",
            "Context", "faultline_context",
        ]
        assert sample.faultline_context.__all__ == [
            "ErrorKind", "Error", "Result", "from_os_error", "from_json_decode_error",
        ]


class TestEscapedAndPositionalDescriptions:
    SOURCE = (
        "enum Context {\n"
        '    #[faultline(description("Fmt {{ code: {0} }}", code))]\n'
        "    Fmt { code: int },\n"
        '    #[faultline(description("Utf8({0})", 0))]\n'
        "    Utf8(int),\n"
        "}"
    )

    def test_rendering(self) -> None:
        module = generate_module(self.SOURCE)
        assert str(module.Context.Fmt(code=42)) == "Fmt { code: 42 }"
        assert str(module.Context.Utf8(42)) == "Utf8(42)"
        assert str(module.Context.Utf8(42).into_error()) == "Utf8(42)"


class TestEmptyFieldLists:
    SOURCE = (
        '#[faultline(description = "named", from = KeyError, error_type = false,'
        " result_type = false, kind_type = false)]\n"
        "struct Named {}\n"
        '#[faultline(description = "tuple", from = IndexError, error_type = false,'
        " result_type = false, kind_type = false)]\n"
        "struct Tuple();\n"
        "enum Ctx {\n"
        '    #[faultline(description = "a", from = LookupError)] A {},\n'
        '    #[faultline(description = "b", from = OSError)] B(),\n'
        "}\n"
    )

    def test_struct_conversions(self) -> None:
        module = generate_module(self.SOURCE)
        cause = KeyError("k")
        error = module.faultline_named.from_key_error(cause)
        assert error.context == module.Named()
        assert error.cause is cause
        assert str(error.context) == "named"
        assert error.kind() == module.faultline_named.ErrorKind.Named()

        error = module.faultline_tuple.from_index_error(IndexError("i"))
        assert error.context == module.Tuple()
        assert error.kind() == module.faultline_tuple.ErrorKind.Tuple()

    def test_variant_conversions(self) -> None:
        module = generate_module(self.SOURCE)
        kinds = module.faultline_ctx.ErrorKind
        error = module.faultline_ctx.from_lookup_error(LookupError("x"))
        assert error.context == module.Ctx.A()
        assert str(error.context) == "a"
        assert error.kind() == kinds.A()

        error = module.faultline_ctx.from_os_error(OSError("x"))
        assert error.context == module.Ctx.B()
        assert str(error.context) == "b"
        assert error.kind() == kinds.B()


class TestConversions:
    def test_from_function(self, sample) -> None:
        cause = FileNotFoundError("config.toml")
        error = sample.faultline_context.from_os_error(cause)
        assert error.context == sample.Context.Io()
        assert error.cause is cause
        assert error.__cause__ is cause
        assert str(error) == "Io\n---- source ----\nconfig.toml"

    def test_registry_order(self, sample) -> None:
        sources = [source for source, _ in sample.faultline_context.Error.conversions]
        assert sources == [OSError, json.JSONDecodeError]

    def test_converting_block(self, sample) -> None:
        with pytest.raises(sample.faultline_context.Error) as excinfo:
            with sample.faultline_context.Error.converting():
                json.loads("{")
        assert excinfo.value.context == sample.Context.Decode()
        assert isinstance(excinfo.value.cause, json.JSONDecodeError)

    def test_converting_ignores_unregistered(self, sample) -> None:
        with pytest.raises(KeyError):
            with sample.faultline_context.Error.converting():
                raise KeyError("x")


class TestHelpers:
    def test_ensure_and_fail(self, sample) -> None:
        runtime.ensure(True, sample.Foo(1))
        with pytest.raises(sample.Error, match="Error 2"):
            runtime.ensure(False, sample.Foo(2))
        with pytest.raises(sample.faultline_context.Error):
            runtime.fail(sample.Context.Io())

    def test_context_helpers(self, sample) -> None:
        assert runtime.context("value", lambda: sample.Context.Io()) == "value"
        with pytest.raises(sample.faultline_context.Error) as excinfo:
            with runtime.with_context(lambda err: sample.Context.Fmt(code=len(str(err)))):
                raise ValueError("abc")
        assert excinfo.value.context == sample.Context.Fmt(code=3)


class TestCloneFields:
    SOURCE = (
        "enum Ctx {\n"
        '    #[faultline(description("Held {0}", value))]\n'
        "    Held { #[faultline(include_in_kind, method = clone)] value: Tracked },\n"
        '    #[faultline(description("Shared {0}", value))]\n'
        "    Shared { #[faultline(include_in_kind)] value: Tracked },\n"
        "}"
    )

    def test_clone_duplicates_and_copy_shares(self) -> None:
        module = generate_module(self.SOURCE)
        before = Tracked.copies
        original = Tracked("a")

        cloned = module.Ctx.Held(value=original).kind()
        assert Tracked.copies == before + 1
        assert cloned.value == original
        assert cloned.value is not original

        shared = module.Ctx.Shared(value=original).kind()
        assert Tracked.copies == before + 1
        assert shared.value is original

    def test_clone_disables_frozen(self) -> None:
        module = generate_module(self.SOURCE)
        kind = module.Ctx.Held(value=Tracked("a")).kind()
        kind.value = Tracked("b")
        assert copy.copy(kind) is not kind


class TestFixtureModule:
    def test_generated_fixture_runs(self) -> None:
        code = GenerationPipeline().generate_or_raise(ERRORS_FL.read_text(), "errors.fl")
        module = load_module(code)
        error = module.ConfigError(path="app.toml", line=3).into_error()
        assert str(error) == "Could not load configuration from app.toml"
        assert error.kind() == module.ErrorKind.ConfigError(line=3)

        missing = module.StoreError.NotFound(key=["a"], bucket="b")
        assert str(missing) == "Key ['a'] not found in b"
        assert missing.kind() == module.StoreErrorKind.NotFound(key=["a"])
        assert missing.kind().key is not missing.key

        with pytest.raises(module.StoreFailure) as excinfo:
            with module.StoreFailure.converting():
                raise TimeoutError()
        assert excinfo.value.context == module.StoreError.Disconnected()


class TestDiagnosticsEndToEnd:
    def test_unsupported_shape(self) -> None:
        result = GenerationPipeline().generate("union U { a: int }")
        (diagnostic,) = result.diagnostics
        assert diagnostic.message == "Unsupported shape `union`"

    def test_unresolved_reference(self) -> None:
        result = GenerationPipeline().generate(
            '#[faultline(description("{0}", cod))]\nstruct Foo { code: int }'
        )
        (diagnostic,) = result.diagnostics
        assert diagnostic.message == "Unknown field: `cod`"
        assert "code" in diagnostic.suggestions
