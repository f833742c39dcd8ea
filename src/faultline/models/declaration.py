"""Declaration shapes produced by the loader: structs, enums, variants and fields."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Generic, TypeVar

from faultline.models.errors import SourceSpan

T = TypeVar("T")
U = TypeVar("U")


class VisibilityKind(StrEnum):
    PUBLIC = "pub"
    CRATE = "crate"
    RESTRICTED = "restricted"
    INHERITED = "inherited"


@dataclass(frozen=True)
class Visibility:
    """Declared visibility. ``path`` is only set for RESTRICTED."""

    kind: VisibilityKind = VisibilityKind.INHERITED
    path: tuple[str, ...] = ()
    in_token: bool = False

    @classmethod
    def public(cls) -> Visibility:
        return cls(VisibilityKind.PUBLIC)

    @classmethod
    def crate(cls) -> Visibility:
        return cls(VisibilityKind.CRATE)

    @classmethod
    def inherited(cls) -> Visibility:
        return cls(VisibilityKind.INHERITED)

    @classmethod
    def restricted(cls, *path: str, in_token: bool = False) -> Visibility:
        return cls(VisibilityKind.RESTRICTED, tuple(path), in_token)

    @property
    def is_exported(self) -> bool:
        return self.kind == VisibilityKind.PUBLIC

    def __str__(self) -> str:
        match self.kind:
            case VisibilityKind.PUBLIC:
                return "pub"
            case VisibilityKind.CRATE:
                return "pub(crate)"
            case VisibilityKind.INHERITED:
                return ""
        target = ".".join(self.path)
        if self.in_token:
            return f"pub(in {target})"
        return f"pub({target})"


@dataclass(frozen=True)
class AttrToken:
    """One token of an attribute block, decoupled from the lexer."""

    type: str
    value: str
    span: SourceSpan | None = None


@dataclass(frozen=True)
class RawAttribute:
    """The token sequence between ``#[`` and ``]``."""

    tokens: tuple[AttrToken, ...]
    span: SourceSpan | None = None

    @property
    def namespace(self) -> str | None:
        if self.tokens and self.tokens[0].type == "NAME":
            return self.tokens[0].value
        return None


# -- field shapes --------------------------------------------------------------


@dataclass(frozen=True)
class UnitFields(Generic[T]):
    """``struct Foo;`` or the ``Io`` in ``enum E { Io }``."""

    def __len__(self) -> int:
        return 0

    def __iter__(self) -> Iterator[tuple[str | int, T]]:
        return iter(())


@dataclass(frozen=True)
class NamedFields(Generic[T]):
    """``{ code: int, message: str }`` in declaration order."""

    items: tuple[tuple[str, T], ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[tuple[str, T]]:
        return iter(self.items)

    def get(self, name: str) -> T | None:
        for key, value in self.items:
            if key == name:
                return value
        return None


@dataclass(frozen=True)
class UnnamedFields(Generic[T]):
    """``(int, str)``; keys are positional indices."""

    items: tuple[tuple[int, T], ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[tuple[int, T]]:
        return iter(self.items)

    def get(self, index: int) -> T | None:
        for key, value in self.items:
            if key == index:
                return value
        return None


Fields = UnitFields[T] | NamedFields[T] | UnnamedFields[T]


def map_fields(fields: Fields[T], fn: Callable[[T], U]) -> Fields[U]:
    """Apply ``fn`` to every field, keeping the shape and the keys.

    Exceptions from ``fn`` propagate, so the first failing field aborts.
    """
    match fields:
        case NamedFields(items=items):
            return NamedFields(tuple((name, fn(value)) for name, value in items))
        case UnnamedFields(items=items):
            return UnnamedFields(tuple((index, fn(value)) for index, value in items))
    return UnitFields()


def positional_name(index: int) -> str:
    """Python attribute name used for an unnamed field."""
    return f"_{index}"


# -- declarations --------------------------------------------------------------


@dataclass(frozen=True)
class Field:
    name: str | None
    ty: str
    attrs: tuple[RawAttribute, ...] = ()
    vis: Visibility = field(default_factory=Visibility)
    docs: tuple[str, ...] = ()
    span: SourceSpan | None = None


@dataclass(frozen=True)
class Variant:
    ident: str
    fields: Fields[Field]
    attrs: tuple[RawAttribute, ...] = ()
    docs: tuple[str, ...] = ()
    span: SourceSpan | None = None


@dataclass(frozen=True)
class StructData:
    fields: Fields[Field]


@dataclass(frozen=True)
class EnumData:
    variants: tuple[Variant, ...] = ()


@dataclass(frozen=True)
class UnionData:
    fields: Fields[Field]


DeclarationData = StructData | EnumData | UnionData


@dataclass(frozen=True)
class Declaration:
    ident: str
    vis: Visibility
    data: DeclarationData
    attrs: tuple[RawAttribute, ...] = ()
    docs: tuple[str, ...] = ()
    span: SourceSpan | None = None


@dataclass(frozen=True)
class UseDecl:
    """``use json;`` or ``use decimal.Decimal as Dec;``."""

    path: tuple[str, ...]
    alias: str | None = None
    span: SourceSpan | None = None

    @property
    def bound_name(self) -> str:
        return self.alias or self.path[-1]


@dataclass(frozen=True)
class SourceFile:
    filename: str
    uses: tuple[UseDecl, ...] = ()
    declarations: tuple[Declaration, ...] = ()
