"""Builds the error type model from one declaration and its attributes."""

from __future__ import annotations

import logging
import re

from faultline.builder.description import (
    Description,
    DescriptionMeta,
    resolve_for_struct,
    resolve_for_variant,
)
from faultline.builder.visibility import inherited
from faultline.meta.attrs import Attrs
from faultline.meta.from_meta import FromMeta, PathMeta
from faultline.models.declaration import (
    Declaration,
    EnumData,
    Field,
    Fields,
    NamedFields,
    StructData,
    UnionData,
    Variant,
    map_fields,
)
from faultline.models.error_type import (
    AliasMode,
    Conversion,
    CopyMethod,
    ErrorEnum,
    ErrorField,
    ErrorStruct,
    ErrorType,
    ErrorTypeAttrs,
    ErrorVariant,
    TypeAliasName,
)
from faultline.models.errors import DiagnosticError, ErrorCode, SourceSpan
from faultline.models.meta import Ident, LitBool, LitStr, Path
from faultline.settings import Settings

logger = logging.getLogger("faultline.builder")

_CAMEL_WORD = re.compile(r"([^_])([A-Z][a-z]+)")
_CAMEL_TAIL = re.compile(r"([a-z0-9])([A-Z])")

# Members every generated context class defines.
RESERVED_FIELD_NAMES = frozenset({"kind", "into_error", "error_type", "from_context"})


def snake_case(ident: str) -> str:
    """``JSONDecodeError`` -> ``json_decode_error``."""
    return _CAMEL_TAIL.sub(r"\1_\2", _CAMEL_WORD.sub(r"\1_\2", ident)).lower()


class CopyMethodMeta(FromMeta[CopyMethod]):
    """``method = copy``, ``method = clone`` or the string forms."""

    @classmethod
    def from_string(cls, value: str, lit: LitStr) -> CopyMethod:
        try:
            return CopyMethod(value)
        except ValueError:
            raise DiagnosticError.unknown_value(value).with_span(lit.span) from None

    @classmethod
    def from_ident(cls, ident: Ident) -> CopyMethod:
        return cls.from_string(ident.name, LitStr(ident.name, ident.span))


class TypeAliasNameMeta(FromMeta[TypeAliasName]):
    """``error_type``, ``error_type = false`` or ``error_type = MyError``."""

    @classmethod
    def from_empty(cls) -> TypeAliasName:
        return TypeAliasName(AliasMode.ENABLED)

    @classmethod
    def from_bool(cls, value: bool, lit: LitBool) -> TypeAliasName:
        return TypeAliasName(AliasMode.ENABLED if value else AliasMode.DISABLED)

    @classmethod
    def from_string(cls, value: str, lit: LitStr) -> TypeAliasName:
        if not value.isidentifier():
            raise DiagnosticError.unknown_value(value).with_span(lit.span)
        return TypeAliasName(AliasMode.OVERRIDE, value)

    @classmethod
    def from_ident(cls, ident: Ident) -> TypeAliasName:
        return TypeAliasName(AliasMode.OVERRIDE, ident.name)


def _is_fieldless(fields: Fields) -> bool:
    return len(fields) == 0


class ErrorTypeBuilder:
    """Turns a :class:`Declaration` into an :class:`ErrorType`.

    Field attributes are read first, then the variant or struct attributes,
    then the type-level aliases. Every attribute set is closed with
    ``ensure_used`` so misspelled names are rejected.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()

    def build(self, declaration: Declaration) -> ErrorType:
        match declaration.data:
            case StructData(fields=fields):
                data, type_attrs, conversions = self._build_struct(declaration, fields)
            case EnumData(variants=variants):
                data, type_attrs, conversions = self._build_enum(declaration, variants)
            case UnionData():
                raise DiagnosticError.unsupported_shape("union").with_span(declaration.span)
            case _:
                raise TypeError(f"Unknown declaration data: {declaration.data!r}")

        return ErrorType(
            ident=declaration.ident,
            vis=declaration.vis,
            data=data,
            attrs=type_attrs,
            mod_name=self._settings.module_prefix + snake_case(declaration.ident),
            mod_vis=inherited(declaration.vis, 1),
            conversions=conversions,
            docs=declaration.docs,
            span=declaration.span,
        )

    # -- shapes --------------------------------------------------------------

    def _collect(self, owner: Declaration | Variant | Field) -> Attrs:
        return Attrs.from_attributes(owner.attrs, self._settings.attribute_namespace)

    def _build_struct(
        self, declaration: Declaration, fields: Fields[Field]
    ) -> tuple[ErrorStruct, ErrorTypeAttrs, tuple[Conversion, ...]]:
        error_fields = self._build_fields(fields, declaration.ident)
        attrs = self._collect(declaration)
        type_attrs = self._type_attrs(attrs)
        description: Description = attrs.get_required(
            "description", DescriptionMeta, declaration.span
        )
        resolved = resolve_for_struct(description, error_fields)
        sources: list[Path] = attrs.get_list("from", PathMeta)
        attrs.ensure_used()

        conversions = self._bind_conversions(sources, error_fields, None)
        return ErrorStruct(error_fields, resolved, tuple(sources)), type_attrs, conversions

    def _build_enum(
        self, declaration: Declaration, variants: tuple[Variant, ...]
    ) -> tuple[ErrorEnum, ErrorTypeAttrs, tuple[Conversion, ...]]:
        seen: dict[str, Variant] = {}
        error_variants: list[ErrorVariant] = []
        for variant in variants:
            if variant.ident in seen:
                raise DiagnosticError(
                    ErrorCode.DUPLICATE_NAME,
                    f"Variant `{variant.ident}` is declared more than once",
                    variant.span,
                )
            seen[variant.ident] = variant
            error_variants.append(self._build_variant(variant, declaration.ident))

        attrs = self._collect(declaration)
        type_attrs = self._type_attrs(attrs)
        attrs.ensure_used()

        conversions: list[Conversion] = []
        for variant in error_variants:
            conversions.extend(
                self._bind_conversions(list(variant.conversions), variant.fields, variant.ident)
            )
        _check_conversion_names(conversions)
        return ErrorEnum(tuple(error_variants)), type_attrs, tuple(conversions)

    def _build_variant(self, variant: Variant, owner: str) -> ErrorVariant:
        fields = self._build_fields(variant.fields, f"{owner}.{variant.ident}")
        attrs = self._collect(variant)
        description: Description = attrs.get_required("description", DescriptionMeta, variant.span)
        resolved = resolve_for_variant(description, fields)
        sources: list[Path] = attrs.get_list("from", PathMeta)
        attrs.ensure_used()
        return ErrorVariant(
            ident=variant.ident,
            fields=fields,
            description=resolved,
            conversions=tuple(sources),
            docs=variant.docs,
            span=variant.span,
        )

    def _build_fields(self, fields: Fields[Field], owner: str) -> Fields[ErrorField]:
        if isinstance(fields, NamedFields):
            names = [key for key, _ in fields]
            for key in names:
                if names.count(key) > 1:
                    raise DiagnosticError(
                        ErrorCode.DUPLICATE_NAME,
                        f"Field `{key}` is declared more than once in `{owner}`",
                        fields.get(key).span,
                    )
                if key in RESERVED_FIELD_NAMES:
                    raise DiagnosticError(
                        ErrorCode.DUPLICATE_NAME,
                        f"Field `{key}` of `{owner}` collides with a generated member",
                        fields.get(key).span,
                    )
        return map_fields(fields, self._build_field)

    def _build_field(self, field: Field) -> ErrorField:
        attrs = self._collect(field)
        include_in_kind = attrs.get_optional("include_in_kind", bool) or False
        method = CopyMethod.COPY
        if include_in_kind:
            explicit = attrs.get_optional("method", CopyMethodMeta)
            if explicit is not None:
                method = explicit
            elif attrs.get_optional("clone", bool):
                method = CopyMethod.CLONE
        attrs.ensure_used()
        return ErrorField(field.ty, include_in_kind, method, field.span)

    def _type_attrs(self, attrs: Attrs) -> ErrorTypeAttrs:
        return ErrorTypeAttrs(
            error_type_name=attrs.get_optional("error_type", TypeAliasNameMeta)
            or TypeAliasName(),
            result_type_name=attrs.get_optional("result_type", TypeAliasNameMeta)
            or TypeAliasName(),
            kind_type_name=attrs.get_optional("kind_type", TypeAliasNameMeta)
            or TypeAliasName(),
        )

    # -- conversions ---------------------------------------------------------

    def _bind_conversions(
        self, sources: list[Path], fields: Fields[ErrorField], variant: str | None
    ) -> tuple[Conversion, ...]:
        conversions = []
        for source in sources:
            if not _is_fieldless(fields):
                raise _fields_conversion_error(source.span)
            function_name = "from_" + snake_case(source.segments[-1].name)
            conversions.append(Conversion(source, function_name, variant))
            logger.debug("Bound conversion %s -> %s", source, function_name)
        _check_conversion_names(conversions)
        return tuple(conversions)


def _fields_conversion_error(span: SourceSpan | None) -> DiagnosticError:
    return DiagnosticError(
        ErrorCode.UNSUPPORTED_SHAPE,
        "Cannot generate a `from` conversion for a context that has fields",
        span,
    )


def _check_conversion_names(conversions: list[Conversion]) -> None:
    seen: dict[str, Conversion] = {}
    for conversion in conversions:
        previous = seen.get(conversion.function_name)
        if previous is not None:
            raise DiagnosticError.duplicate_name(
                conversion.function_name, str(previous.source)
            ).with_span(conversion.source.span)
        seen[conversion.function_name] = conversion
