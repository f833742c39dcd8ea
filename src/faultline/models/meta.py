"""Immutable attribute grammar nodes produced by the attribute parser."""

from __future__ import annotations

from dataclasses import dataclass

from faultline.models.errors import SourceSpan


@dataclass(frozen=True)
class Ident:
    """A single bare symbol."""

    name: str
    span: SourceSpan | None = None

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Path:
    """A dotted symbol path: ``OSError``, ``json.JSONDecodeError``."""

    segments: tuple[Ident, ...]
    span: SourceSpan | None = None

    def single_ident(self) -> Ident | None:
        if len(self.segments) == 1:
            return self.segments[0]
        return None

    def is_(self, name: str) -> bool:
        ident = self.single_ident()
        return ident is not None and ident.name == name

    @property
    def parts(self) -> tuple[str, ...]:
        return tuple(s.name for s in self.segments)

    def __str__(self) -> str:
        return ".".join(self.parts)


# -- literals ----------------------------------------------------------------


@dataclass(frozen=True)
class LitStr:
    value: str
    span: SourceSpan | None = None


@dataclass(frozen=True)
class LitBool:
    value: bool
    span: SourceSpan | None = None


@dataclass(frozen=True)
class LitChar:
    value: str
    span: SourceSpan | None = None


@dataclass(frozen=True)
class LitInt:
    value: int
    digits: str
    span: SourceSpan | None = None


@dataclass(frozen=True)
class LitFloat:
    value: float
    digits: str
    span: SourceSpan | None = None


Lit = LitStr | LitBool | LitChar | LitInt | LitFloat

LITERAL_TYPES = (LitStr, LitBool, LitChar, LitInt, LitFloat)


def lit_kind(lit: Lit) -> str:
    """Human readable literal kind, used in diagnostics."""
    match lit:
        case LitStr():
            return "string"
        case LitBool():
            return "bool"
        case LitChar():
            return "char"
        case LitInt():
            return "int"
        case LitFloat():
            return "float"
    raise TypeError(f"not a literal: {lit!r}")


# -- meta nodes --------------------------------------------------------------


@dataclass(frozen=True)
class MetaPath:
    """Word form: ``include_in_kind``."""

    path: Path
    span: SourceSpan | None = None


@dataclass(frozen=True)
class MetaNameValue:
    """Name/value form: ``method = clone``, ``description = "Io"``."""

    path: Path
    value: Path | Lit
    span: SourceSpan | None = None


@dataclass(frozen=True)
class MetaList:
    """List form: ``description("Error {0}", code)``."""

    path: Path
    nested: tuple[NestedMeta, ...] = ()
    span: SourceSpan | None = None


Meta = MetaPath | MetaNameValue | MetaList

# A list item is either a nested meta node or a raw literal.
NestedMeta = MetaPath | MetaNameValue | MetaList | LitStr | LitBool | LitChar | LitInt | LitFloat
