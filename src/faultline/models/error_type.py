"""Error type model: the validated, resolved form of one annotated declaration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from faultline.ast.nodes import Expr
from faultline.models.declaration import Fields, NamedFields, UnitFields, UnnamedFields, Visibility
from faultline.models.errors import SourceSpan
from faultline.models.meta import Path


class CopyMethod(StrEnum):
    """How an included field is duplicated into the kind."""

    COPY = "copy"
    CLONE = "clone"


class AliasMode(StrEnum):
    DEFAULT = "default"
    ENABLED = "enabled"
    DISABLED = "disabled"
    OVERRIDE = "override"


@dataclass(frozen=True)
class TypeAliasName:
    """Setting for one module-level alias (``Error``, ``Result``, ``ErrorKind``)."""

    mode: AliasMode = AliasMode.DEFAULT
    name: str | None = None

    def resolve(self, default: str) -> str | None:
        """The alias name to emit, or ``None`` when disabled."""
        match self.mode:
            case AliasMode.DISABLED:
                return None
            case AliasMode.OVERRIDE:
                return self.name
        return default


@dataclass(frozen=True)
class ErrorField:
    ty: str
    include_in_kind: bool = False
    method: CopyMethod = CopyMethod.COPY
    span: SourceSpan | None = None

    @property
    def is_copy(self) -> bool:
        return self.method == CopyMethod.COPY


@dataclass(frozen=True)
class ResolvedDescription:
    """A template whose field references are bound to code expressions."""

    template: str
    args: tuple[Expr, ...] = ()


@dataclass(frozen=True)
class ErrorVariant:
    ident: str
    fields: Fields[ErrorField]
    description: ResolvedDescription
    conversions: tuple[Path, ...] = ()
    docs: tuple[str, ...] = ()
    span: SourceSpan | None = None


@dataclass(frozen=True)
class ErrorStruct:
    fields: Fields[ErrorField]
    description: ResolvedDescription
    conversions: tuple[Path, ...] = ()


@dataclass(frozen=True)
class ErrorEnum:
    variants: tuple[ErrorVariant, ...] = ()


ErrorData = ErrorStruct | ErrorEnum


@dataclass(frozen=True)
class ErrorTypeAttrs:
    error_type_name: TypeAliasName = field(default_factory=TypeAliasName)
    result_type_name: TypeAliasName = field(default_factory=TypeAliasName)
    kind_type_name: TypeAliasName = field(default_factory=TypeAliasName)


@dataclass(frozen=True)
class Conversion:
    """A bound ``from`` declaration: source type -> fieldless context value."""

    source: Path
    function_name: str
    variant: str | None = None


@dataclass(frozen=True)
class ErrorType:
    ident: str
    vis: Visibility
    data: ErrorData
    attrs: ErrorTypeAttrs
    mod_name: str
    mod_vis: Visibility
    conversions: tuple[Conversion, ...] = ()
    docs: tuple[str, ...] = ()
    span: SourceSpan | None = None


# -- kinds ---------------------------------------------------------------------


@dataclass(frozen=True)
class ErrorKindCase:
    """One discriminant case: all fields of the source plus the included subset."""

    ident: str
    all_fields: Fields[ErrorField]
    included_fields: Fields[ErrorField]

    @property
    def is_copy(self) -> bool:
        return all(f.is_copy for _, f in self.included_fields)


@dataclass(frozen=True)
class ErrorKinds:
    cases: tuple[ErrorKindCase, ...] = ()
    is_struct: bool = False

    @property
    def is_copy(self) -> bool:
        return all(case.is_copy for case in self.cases)


def included_fields(fields: Fields[ErrorField]) -> Fields[ErrorField]:
    """Only the fields marked ``include_in_kind``, keeping their keys."""
    match fields:
        case NamedFields(items=items):
            return NamedFields(tuple((n, f) for n, f in items if f.include_in_kind))
        case UnnamedFields(items=items):
            return UnnamedFields(tuple((i, f) for i, f in items if f.include_in_kind))
    return UnitFields()
