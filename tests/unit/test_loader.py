"""Tests for the declaration loader (lark grammar + tree walking)."""

from __future__ import annotations

import pytest

from faultline.models.declaration import (
    EnumData,
    NamedFields,
    StructData,
    UnionData,
    UnitFields,
    UnnamedFields,
    Visibility,
    VisibilityKind,
)
from faultline.models.errors import DiagnosticError, ErrorCode
from faultline.parser.loader import DeclarationLoader, SourceSafetyError
from faultline.settings import Settings
from tests.conftest import ERRORS_FL, declaration


class TestUses:
    def test_plain_and_aliased(self, loader: DeclarationLoader) -> None:
        source = loader.load_string("use json;\nuse decimal.Decimal as Dec;\n")
        plain, aliased = source.uses
        assert plain.path == ("json",)
        assert plain.bound_name == "json"
        assert aliased.path == ("decimal", "Decimal")
        assert aliased.bound_name == "Dec"

    def test_double_colon_path(self, loader: DeclarationLoader) -> None:
        (use,) = loader.load_string("use std::io;").uses
        assert use.path == ("std", "io")


class TestShapes:
    def test_unit_struct(self) -> None:
        decl = declaration("struct Foo;")
        assert decl.ident == "Foo"
        assert decl.data == StructData(UnitFields())

    def test_named_struct(self) -> None:
        decl = declaration("struct Foo { code: int, message: str }")
        fields = decl.data.fields
        assert isinstance(fields, NamedFields)
        assert [(key, f.ty) for key, f in fields] == [("code", "int"), ("message", "str")]

    def test_tuple_struct(self) -> None:
        decl = declaration("struct Foo(int, str);")
        fields = decl.data.fields
        assert isinstance(fields, UnnamedFields)
        assert [(key, f.ty) for key, f in fields] == [(0, "int"), (1, "str")]

    def test_enum_variants(self) -> None:
        decl = declaration("enum E { Io, Fmt { code: int }, Utf8(bytes), }")
        assert isinstance(decl.data, EnumData)
        io, fmt, utf8 = decl.data.variants
        assert isinstance(io.fields, UnitFields)
        assert isinstance(fmt.fields, NamedFields)
        assert isinstance(utf8.fields, UnnamedFields)

    def test_empty_enum(self) -> None:
        assert declaration("enum E {}").data == EnumData(())

    def test_union(self) -> None:
        assert isinstance(declaration("union U { a: int }").data, UnionData)


class TestTypes:
    @pytest.mark.parametrize(
        ("written", "rendered"),
        [
            ("int", "int"),
            ("dict[str,  list[int]]", "dict[str, list[int]]"),
            ("int | None", "int | None"),
            ("pathlib.Path", "pathlib.Path"),
            ("Callable[[int, str], None]", "Callable[[int, str], None]"),
            ("Callable[..., None]", "Callable[..., None]"),
            ('Literal["a"]', 'Literal["a"]'),
        ],
    )
    def test_rendered_canonically(self, written: str, rendered: str) -> None:
        decl = declaration(f"struct Foo {{ value: {written} }}")
        assert decl.data.fields.get("value").ty == rendered


class TestAttributesAndDocs:
    def test_attribute_tokens_kept_raw(self) -> None:
        decl = declaration('#[faultline(description("Error {0}", code))]\nstruct Foo;')
        (attr,) = decl.attrs
        assert attr.namespace == "faultline"
        assert [t.type for t in attr.tokens][:3] == ["NAME", "LPAR", "NAME"]
        assert attr.tokens[-1].type == "RPAR"

    def test_docs_and_comments(self) -> None:
        decl = declaration(
            "/// First line.\n/// Second line.\n// plain comment\n/* block */\nstruct Foo;"
        )
        assert decl.docs == ("First line.", "Second line.")

    def test_field_and_variant_attributes(self) -> None:
        decl = declaration(
            "enum E {\n"
            "    /// Reading failed.\n"
            '    #[faultline(description = "Io")]\n'
            "    Io { #[faultline(include_in_kind)] code: int },\n"
            "}"
        )
        (variant,) = decl.data.variants
        assert variant.docs == ("Reading failed.",)
        assert len(variant.attrs) == 1
        assert len(variant.fields.get("code").attrs) == 1

    def test_spans_point_at_names(self) -> None:
        decl = declaration("\n\npub struct Foo;")
        assert decl.span.file == "test.fl"
        assert decl.span.line == 3
        assert decl.span.column == 12


class TestVisibility:
    @pytest.mark.parametrize(
        ("written", "expected"),
        [
            ("", Visibility.inherited()),
            ("pub", Visibility.public()),
            ("pub(crate)", Visibility.crate()),
            ("pub(self)", Visibility.restricted("self")),
            ("pub(super)", Visibility.restricted("super")),
            ("pub(in crate.a)", Visibility.restricted("crate", "a", in_token=True)),
            ("pub(in self::x)", Visibility.restricted("self", "x", in_token=True)),
        ],
    )
    def test_declaration_visibility(self, written: str, expected: Visibility) -> None:
        assert declaration(f"{written} struct Foo;").vis == expected

    def test_field_visibility(self) -> None:
        decl = declaration("struct Foo { pub code: int }")
        assert decl.data.fields.get("code").vis.kind == VisibilityKind.PUBLIC


class TestErrors:
    def test_grammar_error_has_position(self, loader: DeclarationLoader) -> None:
        with pytest.raises(DiagnosticError) as excinfo:
            loader.load_string("struct Foo {\n  code int\n}", "bad.fl")
        error = excinfo.value
        assert error.code == ErrorCode.GRAMMAR_ERROR
        assert error.span.file == "bad.fl"
        assert error.span.line == 2
        assert "`:`" in error.message

    def test_unexpected_end(self, loader: DeclarationLoader) -> None:
        with pytest.raises(DiagnosticError, match="end of input"):
            loader.load_string("enum E {")

    def test_unexpected_character(self, loader: DeclarationLoader) -> None:
        with pytest.raises(DiagnosticError, match="Unexpected character"):
            loader.load_string("struct Foo; $")

    def test_unbalanced_attribute(self, loader: DeclarationLoader) -> None:
        with pytest.raises(DiagnosticError):
            loader.load_string("#[faultline(description]\nstruct Foo;")


class TestSafety:
    def test_oversized_source_rejected(self) -> None:
        loader = DeclarationLoader(Settings(max_source_size=10))
        with pytest.raises(SourceSafetyError, match="maximum size"):
            loader.load_string("struct Foo;" * 2)

    def test_too_many_declarations_rejected(self) -> None:
        loader = DeclarationLoader(Settings(max_declarations=2))
        with pytest.raises(SourceSafetyError, match="declaration count"):
            loader.load_string("struct A;\nstruct B;\nstruct C;\n")

    def test_load_file(self, loader: DeclarationLoader) -> None:
        source = loader.load(ERRORS_FL)
        assert source.filename == str(ERRORS_FL)
        assert [d.ident for d in source.declarations] == ["ConfigError", "StoreError"]
