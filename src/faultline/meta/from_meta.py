"""Typed extraction of values from attribute nodes.

Every target type is a :class:`FromMeta` subclass. The dispatching
classmethods (``from_meta``, ``from_nested_meta``, ``from_value``,
``from_lit``) route a node to one hook per node shape or literal kind, and
every hook fails by default. A new value type only overrides the hooks it
accepts::

    class Method(FromMeta[str]):
        @classmethod
        def from_ident(cls, ident: Ident) -> str:
            return ident.name

Errors raised without a span are anchored to the node being extracted.
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import lru_cache
from typing import Any, Generic, TypeVar

from faultline.models.errors import DiagnosticError
from faultline.models.meta import (
    Ident,
    Lit,
    LitBool,
    LitChar,
    LitFloat,
    LitInt,
    LitStr,
    Meta,
    MetaList,
    MetaNameValue,
    MetaPath,
    NestedMeta,
    Path,
    lit_kind,
)

T = TypeVar("T")


class FromMeta(Generic[T]):
    """Base class of all attribute value types."""

    # -- dispatchers ---------------------------------------------------------

    @classmethod
    def from_meta(cls, item: Meta) -> T:
        """Dispatch on the node shape. Rarely overridden."""
        try:
            match item:
                case MetaPath():
                    return cls.from_empty()
                case MetaList(nested=nested):
                    return cls.from_list(nested)
                case MetaNameValue(value=value):
                    return cls.from_value(value)
        except DiagnosticError as exc:
            exc.with_span(item.span)
            raise
        raise TypeError(f"not a meta node: {item!r}")

    @classmethod
    def from_nested_meta(cls, item: NestedMeta) -> T:
        """Extract from one item of a list."""
        try:
            match item:
                case MetaPath(path=path):
                    return cls.from_path(path)
                case MetaNameValue():
                    raise DiagnosticError.unexpected_type("name value")
                case MetaList():
                    raise DiagnosticError.unexpected_type("list")
            return cls.from_lit(item)
        except DiagnosticError as exc:
            exc.with_span(item.span)
            raise

    @classmethod
    def from_value(cls, value: Path | Lit) -> T:
        """Extract from the right hand side of ``name = value``."""
        try:
            if isinstance(value, Path):
                return cls.from_path(value)
            return cls.from_lit(value)
        except DiagnosticError as exc:
            exc.with_span(value.span)
            raise

    @classmethod
    def from_lit(cls, lit: Lit) -> T:
        """Dispatch on the literal kind."""
        try:
            match lit:
                case LitStr(value=value):
                    return cls.from_string(value, lit)
                case LitBool(value=value):
                    return cls.from_bool(value, lit)
                case LitChar(value=value):
                    return cls.from_char(value, lit)
                case LitInt(value=value):
                    return cls.from_int(value, lit)
                case LitFloat(value=value):
                    return cls.from_float(value, lit)
        except DiagnosticError as exc:
            exc.with_span(lit.span)
            raise
        raise DiagnosticError.unexpected_lit_type(lit_kind(lit)).with_span(lit.span)

    # -- hooks ---------------------------------------------------------------

    @classmethod
    def from_empty(cls) -> T:
        """The bare word form, ``flag``."""
        raise DiagnosticError.unsupported_format("empty")

    @classmethod
    def from_list(cls, items: Sequence[NestedMeta]) -> T:
        """The list form; zero items is the word form, one item is unwrapped."""
        match len(items):
            case 0:
                return cls.from_empty()
            case 1:
                return cls.from_nested_meta(items[0])
        raise DiagnosticError.unsupported_format("list")

    @classmethod
    def from_string(cls, value: str, lit: LitStr) -> T:
        raise DiagnosticError.unexpected_type("string").with_span(lit.span)

    @classmethod
    def from_bool(cls, value: bool, lit: LitBool) -> T:
        raise DiagnosticError.unexpected_type("bool").with_span(lit.span)

    @classmethod
    def from_char(cls, value: str, lit: LitChar) -> T:
        raise DiagnosticError.unexpected_type("char").with_span(lit.span)

    @classmethod
    def from_int(cls, value: int, lit: LitInt) -> T:
        raise DiagnosticError.unexpected_type("int").with_span(lit.span)

    @classmethod
    def from_float(cls, value: float, lit: LitFloat) -> T:
        raise DiagnosticError.unexpected_type("float").with_span(lit.span)

    @classmethod
    def from_path(cls, path: Path) -> T:
        """A symbol path; a single bare symbol goes to :meth:`from_ident`."""
        ident = path.single_ident()
        if ident is None:
            raise DiagnosticError.unexpected_type("path").with_span(path.span)
        return cls.from_ident(ident)

    @classmethod
    def from_ident(cls, ident: Ident) -> T:
        raise DiagnosticError.unexpected_type("ident").with_span(ident.span)


# ---------------------------------------------------------------------------
# Built-in adapters
# ---------------------------------------------------------------------------


class UnitMeta(FromMeta[None]):
    """Accepts only the bare word."""

    @classmethod
    def from_empty(cls) -> None:
        return None


class BoolMeta(FromMeta[bool]):
    """``flag``, ``flag = false``, ``flag(true)`` or ``flag = "true"``."""

    @classmethod
    def from_empty(cls) -> bool:
        return True

    @classmethod
    def from_bool(cls, value: bool, lit: LitBool) -> bool:
        return value

    @classmethod
    def from_string(cls, value: str, lit: LitStr) -> bool:
        if value == "true":
            return True
        if value == "false":
            return False
        raise DiagnosticError.unknown_value(value).with_span(lit.span)


class StrMeta(FromMeta[str]):
    @classmethod
    def from_string(cls, value: str, lit: LitStr) -> str:
        return value

    @classmethod
    def from_path(cls, path: Path) -> str:
        return str(path)


class IntMeta(FromMeta[int]):
    """Integer literals or numeric strings, optionally bounded."""

    minimum: int | None = None
    maximum: int | None = None

    @classmethod
    def from_int(cls, value: int, lit: LitInt) -> int:
        return cls._check_bounds(value, lit)

    @classmethod
    def from_string(cls, value: str, lit: LitStr) -> int:
        try:
            parsed = int(value.strip())
        except ValueError:
            raise DiagnosticError.unknown_value(value).with_span(lit.span) from None
        return cls._check_bounds(parsed, lit)

    @classmethod
    def _check_bounds(cls, value: int, lit: Lit) -> int:
        if cls.minimum is not None and value < cls.minimum:
            raise DiagnosticError.unknown_value(str(value)).with_span(lit.span)
        if cls.maximum is not None and value > cls.maximum:
            raise DiagnosticError.unknown_value(str(value)).with_span(lit.span)
        return value


class IndexMeta(IntMeta):
    minimum = 0


class FloatMeta(FromMeta[float]):
    @classmethod
    def from_float(cls, value: float, lit: LitFloat) -> float:
        return value

    @classmethod
    def from_string(cls, value: str, lit: LitStr) -> float:
        try:
            return float(value)
        except ValueError:
            raise DiagnosticError.unknown_value(value).with_span(lit.span) from None


class IdentMeta(FromMeta[Ident]):
    """A bare symbol, or a string holding one."""

    @classmethod
    def from_ident(cls, ident: Ident) -> Ident:
        return ident

    @classmethod
    def from_string(cls, value: str, lit: LitStr) -> Ident:
        if not value.isidentifier():
            raise DiagnosticError.unknown_value(value).with_span(lit.span)
        return Ident(value, lit.span)


class PathMeta(FromMeta[Path]):
    """A symbol path, or a string holding one (``"json.JSONDecodeError"``)."""

    @classmethod
    def from_path(cls, path: Path) -> Path:
        return path

    @classmethod
    def from_string(cls, value: str, lit: LitStr) -> Path:
        parts = value.replace("::", ".").split(".")
        if not all(part.isidentifier() for part in parts):
            raise DiagnosticError.unknown_value(value).with_span(lit.span)
        return Path(tuple(Ident(part, lit.span) for part in parts), lit.span)


class LitMeta(FromMeta[Lit]):
    """Any literal, unchanged."""

    @classmethod
    def from_lit(cls, lit: Lit) -> Lit:
        return lit


class MetaMeta(FromMeta[Meta]):
    """The node itself."""

    @classmethod
    def from_meta(cls, item: Meta) -> Meta:
        return item


@lru_cache(maxsize=None)
def list_of(item_type: type[FromMeta[Any]]) -> type[FromMeta[list[Any]]]:
    """Adapter extracting a list of ``item_type`` values.

    ``name`` gives an empty list, ``name(a, b)`` one value per item and
    ``name = a`` a single-element list.
    """

    class ListMeta(FromMeta[list[Any]]):
        @classmethod
        def from_empty(cls) -> list[Any]:
            return []

        @classmethod
        def from_list(cls, items: Sequence[NestedMeta]) -> list[Any]:
            return [item_type.from_nested_meta(item) for item in items]

        @classmethod
        def from_value(cls, value: Path | Lit) -> list[Any]:
            return [item_type.from_value(value)]

    ListMeta.__name__ = ListMeta.__qualname__ = f"ListMeta[{item_type.__name__}]"
    return ListMeta


_BUILTIN_ADAPTERS: dict[type, type[FromMeta[Any]]] = {
    bool: BoolMeta,
    str: StrMeta,
    int: IntMeta,
    float: FloatMeta,
}


def meta_type(target: type) -> type[FromMeta[Any]]:
    """Resolve ``bool``/``str``/``int``/``float`` to their adapters."""
    if isinstance(target, type) and issubclass(target, FromMeta):
        return target
    try:
        return _BUILTIN_ADAPTERS[target]
    except KeyError:
        raise TypeError(f"No attribute adapter for {target!r}") from None
