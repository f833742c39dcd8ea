"""Immutable Python code AST nodes. All generated code is built from these, never by string concatenation."""

from __future__ import annotations

from dataclasses import dataclass, field

# -- expressions ---------------------------------------------------------------


@dataclass(frozen=True)
class Constant:
    """A literal value: string, number, boolean, or None."""

    value: str | int | float | bool | None


@dataclass(frozen=True)
class Name:
    """A bare name, e.g. ``runtime`` or ``code``."""

    id: str


@dataclass(frozen=True)
class Attribute:
    """Attribute access: ``value.attr``."""

    value: Expr
    attr: str


@dataclass(frozen=True)
class Call:
    """Function call with positional and keyword arguments."""

    func: Expr
    args: list[Expr] = field(default_factory=list)
    keywords: list[tuple[str, Expr]] = field(default_factory=list)


@dataclass(frozen=True)
class Subscript:
    """Subscription: ``Union[T, Error]``."""

    value: Expr
    index: list[Expr] = field(default_factory=list)


@dataclass(frozen=True)
class Tuple:
    elts: list[Expr] = field(default_factory=list)


@dataclass(frozen=True)
class ListExpr:
    elts: list[Expr] = field(default_factory=list)


@dataclass(frozen=True)
class RawCode:
    """Escape hatch for source text taken verbatim, e.g. a field annotation.

    Use sparingly; prefer AST nodes.
    """

    code: str


# The union of all expression types.
Expr = Constant | Name | Attribute | Call | Subscript | Tuple | ListExpr | RawCode


# -- match patterns ------------------------------------------------------------


@dataclass(frozen=True)
class MatchCapture:
    """Capture pattern; ``name=None`` is the ``_`` wildcard."""

    name: str | None = None


@dataclass(frozen=True)
class MatchClass:
    """Class pattern: ``Context.Fmt(code=code)`` or ``Context.Utf8(_0, _)``."""

    cls: Expr
    patterns: list[Pattern] = field(default_factory=list)
    keywords: list[tuple[str, Pattern]] = field(default_factory=list)


Pattern = MatchCapture | MatchClass


# -- statements ----------------------------------------------------------------


@dataclass(frozen=True)
class Pass:
    pass


@dataclass(frozen=True)
class Return:
    value: Expr | None = None


@dataclass(frozen=True)
class Raise:
    exc: Expr


@dataclass(frozen=True)
class Assign:
    target: Expr
    value: Expr


@dataclass(frozen=True)
class AnnAssign:
    """Annotated name, optionally with a value: ``code: int``."""

    target: str
    annotation: Expr
    value: Expr | None = None


@dataclass(frozen=True)
class Delete:
    targets: list[Expr] = field(default_factory=list)


@dataclass(frozen=True)
class Import:
    """``import module`` or ``import module as alias``."""

    module: str
    alias: str | None = None


@dataclass(frozen=True)
class ImportFrom:
    """``from module import name [as alias], ...``."""

    module: str
    names: list[tuple[str, str | None]] = field(default_factory=list)


@dataclass(frozen=True)
class MatchCase:
    pattern: Pattern
    body: list[Stmt] = field(default_factory=list)


@dataclass(frozen=True)
class Match:
    subject: Expr
    cases: list[MatchCase] = field(default_factory=list)


@dataclass(frozen=True)
class Param:
    name: str
    annotation: Expr | None = None


@dataclass(frozen=True)
class FunctionDef:
    name: str
    params: list[Param] = field(default_factory=list)
    body: list[Stmt] = field(default_factory=list)
    returns: Expr | None = None
    decorators: list[Expr] = field(default_factory=list)
    docstring: str | None = None


@dataclass(frozen=True)
class ClassDef:
    name: str
    bases: list[Expr] = field(default_factory=list)
    body: list[Stmt] = field(default_factory=list)
    decorators: list[Expr] = field(default_factory=list)
    docstring: str | None = None


Stmt = (
    Pass
    | Return
    | Raise
    | Assign
    | AnnAssign
    | Delete
    | Import
    | ImportFrom
    | Match
    | FunctionDef
    | ClassDef
)


@dataclass(frozen=True)
class Module:
    """A complete generated module."""

    body: list[Stmt] = field(default_factory=list)
    docstring: str | None = None
