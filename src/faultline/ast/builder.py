"""Fluent builder API for constructing code AST nodes."""

from __future__ import annotations

from typing import Self

from faultline.ast.nodes import (
    AnnAssign,
    Assign,
    Attribute,
    Call,
    ClassDef,
    Constant,
    Delete,
    Expr,
    FunctionDef,
    Name,
    Param,
    RawCode,
    Return,
    Stmt,
)


class ClassBuilder:
    """Fluent builder for ergonomic class construction."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._bases: list[Expr] = []
        self._decorators: list[Expr] = []
        self._body: list[Stmt] = []
        self._docstring: str | None = None

    def base(self, *bases: Expr) -> Self:
        self._bases.extend(bases)
        return self

    def decorate(self, decorator: Expr) -> Self:
        self._decorators.append(decorator)
        return self

    def doc(self, docstring: str | None) -> Self:
        if docstring:
            self._docstring = docstring
        return self

    def add(self, *statements: Stmt) -> Self:
        self._body.extend(statements)
        return self

    def field(self, name: str, annotation: str) -> Self:
        self._body.append(AnnAssign(target=name, annotation=RawCode(annotation)))
        return self

    def method(
        self,
        name: str,
        params: list[Param],
        body: list[Stmt],
        returns: Expr | None = None,
        decorators: list[Expr] | None = None,
    ) -> Self:
        self._body.append(
            FunctionDef(
                name=name,
                params=params,
                body=body,
                returns=returns,
                decorators=decorators or [],
            )
        )
        return self

    def build(self) -> ClassDef:
        return ClassDef(
            name=self._name,
            bases=self._bases,
            body=self._body,
            decorators=self._decorators,
            docstring=self._docstring,
        )


# Convenience constructors for common expressions.


def name(id_: str) -> Name:
    """Create a name reference."""
    return Name(id=id_)


def dotted(path: str) -> Expr:
    """Create a dotted reference: ``dotted("a.b.c")`` is ``a.b.c``."""
    first, *rest = path.split(".")
    expr: Expr = Name(id=first)
    for part in rest:
        expr = Attribute(value=expr, attr=part)
    return expr


def attr(value: Expr, attr_: str) -> Attribute:
    """Create an attribute access."""
    return Attribute(value=value, attr=attr_)


def call(func: Expr, *args: Expr, **keywords: Expr) -> Call:
    """Create a call."""
    return Call(func=func, args=list(args), keywords=list(keywords.items()))


def const(value: str | int | float | bool | None) -> Constant:
    """Create a literal value."""
    return Constant(value=value)


def ret(value: Expr | None = None) -> Return:
    return Return(value=value)


def assign(target: Expr, value: Expr) -> Assign:
    return Assign(target=target, value=value)


def delete(*targets: Expr) -> Delete:
    return Delete(targets=list(targets))


def param(name_: str, annotation: str | None = None) -> Param:
    """Create a parameter; the annotation is taken verbatim."""
    return Param(name=name_, annotation=RawCode(annotation) if annotation else None)
