"""Description templates and their binding to field access expressions."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from string import Formatter

from faultline.ast.builder import attr, name
from faultline.ast.nodes import Expr
from faultline.meta.from_meta import FromMeta
from faultline.models.declaration import (
    Fields,
    NamedFields,
    UnnamedFields,
    positional_name,
)
from faultline.models.error_type import ResolvedDescription
from faultline.models.errors import DiagnosticError, SourceSpan, suggest_similar
from faultline.models.meta import Ident, LitInt, LitStr, NestedMeta


@dataclass(frozen=True)
class FieldRefIdent:
    name: str
    span: SourceSpan | None = None

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class FieldRefIndex:
    index: int
    digits: str
    span: SourceSpan | None = None

    def __str__(self) -> str:
        return self.digits


FieldRef = FieldRefIdent | FieldRefIndex


class FieldRefMeta(FromMeta[FieldRef]):
    """``code``, ``"code"`` or ``0``."""

    @classmethod
    def from_ident(cls, ident: Ident) -> FieldRef:
        return FieldRefIdent(ident.name, ident.span)

    @classmethod
    def from_string(cls, value: str, lit: LitStr) -> FieldRef:
        return FieldRefIdent(value, lit.span)

    @classmethod
    def from_int(cls, value: int, lit: LitInt) -> FieldRef:
        return FieldRefIndex(value, lit.digits, lit.span)


@dataclass(frozen=True)
class DescriptionString:
    template: LitStr


@dataclass(frozen=True)
class FormatExpression:
    template: LitStr
    args: tuple[FieldRef, ...]


Description = DescriptionString | FormatExpression


class _TemplateMeta(FromMeta[LitStr]):
    @classmethod
    def from_string(cls, value: str, lit: LitStr) -> LitStr:
        return lit


class DescriptionMeta(FromMeta[Description]):
    """``description = "Io"``, ``description("Io")`` or ``description("Error {0}", code)``."""

    @classmethod
    def from_string(cls, value: str, lit: LitStr) -> Description:
        return DescriptionString(lit)

    @classmethod
    def from_list(cls, items: Sequence[NestedMeta]) -> Description:
        if len(items) < 2:
            return super().from_list(items)
        template = _TemplateMeta.from_nested_meta(items[0])
        args = tuple(FieldRefMeta.from_nested_meta(item) for item in items[1:])
        return FormatExpression(template, args)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def resolve_for_struct(description: Description, fields: Fields) -> ResolvedDescription:
    """Bind references to attributes of the instance: ``self.code``, ``self._0``."""
    return _resolve(description, fields, lambda key: attr(name("self"), key))


def resolve_for_variant(description: Description, fields: Fields) -> ResolvedDescription:
    """Bind references to the locals captured by the variant's match pattern."""
    return _resolve(description, fields, name)


def _resolve(
    description: Description, fields: Fields, access: Callable[[str], Expr]
) -> ResolvedDescription:
    if isinstance(description, DescriptionString):
        return ResolvedDescription(description.template.value)

    # Every reference is checked against the complete field shape first.
    args = tuple(access(_lookup(ref, fields)) for ref in description.args)
    validate_template(description.template.value, len(args), description.template.span)
    return ResolvedDescription(description.template.value, args)


def _lookup(ref: FieldRef, fields: Fields) -> str:
    """Attribute name for ``ref`` in ``fields``."""
    match fields, ref:
        case NamedFields(), FieldRefIdent(name=field_name):
            if fields.get(field_name) is not None:
                return field_name
            candidates = [key for key, _ in fields]
            raise DiagnosticError.unresolved_field_reference(
                field_name, suggest_similar(field_name, candidates)
            ).with_span(ref.span)
        case UnnamedFields(), FieldRefIndex(index=index):
            if fields.get(index) is not None:
                return positional_name(index)
    raise DiagnosticError.unresolved_field_reference(str(ref)).with_span(ref.span)


def validate_template(template: str, argc: int, span: SourceSpan | None = None) -> None:
    """Check a template with arguments against Python's format syntax.

    Placeholders must be positional (``{}`` or ``{0}``), numbering may not
    mix both styles, every placeholder needs an argument and every argument
    must be used.
    """
    used: set[int] = set()
    numbering: set[str] = set()
    next_auto = 0

    def walk(text: str) -> None:
        nonlocal next_auto
        try:
            parsed = list(Formatter().parse(text))
        except ValueError as exc:
            raise DiagnosticError.invalid_format(
                f"Invalid description template: {exc}"
            ).with_span(span) from exc
        for _, field_name, format_spec, _ in parsed:
            if field_name is None:
                continue
            if field_name == "":
                numbering.add("automatic")
                index = next_auto
                next_auto += 1
            elif field_name.isdigit():
                numbering.add("manual")
                index = int(field_name)
            else:
                raise DiagnosticError.invalid_format(
                    f"Placeholder `{{{field_name}}}` must be positional"
                ).with_span(span)
            if len(numbering) > 1:
                raise DiagnosticError.invalid_format(
                    "Cannot mix automatic and manual placeholder numbering"
                ).with_span(span)
            if index >= argc:
                raise DiagnosticError.invalid_format(
                    f"Placeholder {index} has no argument ({argc} given)"
                ).with_span(span)
            used.add(index)
            if format_spec:
                walk(format_spec)

    walk(template)
    for index in range(argc):
        if index not in used:
            raise DiagnosticError.invalid_format(
                f"Argument {index} is never used in the description"
            ).with_span(span)
