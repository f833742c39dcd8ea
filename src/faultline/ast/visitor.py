"""Visitor pattern for code AST traversal and transformation."""

from __future__ import annotations

from typing import Any

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
    Import,
    ImportFrom,
    ListExpr,
    Match,
    MatchCapture,
    MatchCase,
    MatchClass,
    Module,
    Name,
    Param,
    Pass,
    Raise,
    RawCode,
    Return,
    Subscript,
    Tuple,
)


class ASTVisitor:
    """Base visitor for code AST traversal.

    Override specific visit_* methods to customize behavior.
    The default implementations recursively visit child nodes and rebuild them.
    """

    def visit(self, node: Any) -> Any:
        """Dispatch to the appropriate visit_* method."""
        method_name = f"visit_{type(node).__name__.lower()}"
        method = getattr(self, method_name, self.generic_visit)
        return method(node)

    def generic_visit(self, node: Any) -> Any:
        return node

    # -- expressions ---------------------------------------------------------

    def visit_constant(self, node: Constant) -> Any:
        return node

    def visit_name(self, node: Name) -> Any:
        return node

    def visit_rawcode(self, node: RawCode) -> Any:
        return node

    def visit_attribute(self, node: Attribute) -> Any:
        return Attribute(value=self.visit(node.value), attr=node.attr)

    def visit_call(self, node: Call) -> Any:
        return Call(
            func=self.visit(node.func),
            args=[self.visit(a) for a in node.args],
            keywords=[(k, self.visit(v)) for k, v in node.keywords],
        )

    def visit_subscript(self, node: Subscript) -> Any:
        return Subscript(value=self.visit(node.value), index=[self.visit(i) for i in node.index])

    def visit_tuple(self, node: Tuple) -> Any:
        return Tuple(elts=[self.visit(e) for e in node.elts])

    def visit_listexpr(self, node: ListExpr) -> Any:
        return ListExpr(elts=[self.visit(e) for e in node.elts])

    # -- patterns ------------------------------------------------------------

    def visit_matchcapture(self, node: MatchCapture) -> Any:
        return node

    def visit_matchclass(self, node: MatchClass) -> Any:
        return MatchClass(
            cls=self.visit(node.cls),
            patterns=[self.visit(p) for p in node.patterns],
            keywords=[(k, self.visit(p)) for k, p in node.keywords],
        )

    # -- statements ----------------------------------------------------------

    def visit_pass(self, node: Pass) -> Any:
        return node

    def visit_import(self, node: Import) -> Any:
        return node

    def visit_importfrom(self, node: ImportFrom) -> Any:
        return node

    def visit_return(self, node: Return) -> Any:
        return Return(value=self.visit(node.value) if node.value is not None else None)

    def visit_raise(self, node: Raise) -> Any:
        return Raise(exc=self.visit(node.exc))

    def visit_assign(self, node: Assign) -> Any:
        return Assign(target=self.visit(node.target), value=self.visit(node.value))

    def visit_annassign(self, node: AnnAssign) -> Any:
        value = self.visit(node.value) if node.value is not None else None
        return AnnAssign(target=node.target, annotation=self.visit(node.annotation), value=value)

    def visit_delete(self, node: Delete) -> Any:
        return Delete(targets=[self.visit(t) for t in node.targets])

    def visit_matchcase(self, node: MatchCase) -> Any:
        return MatchCase(pattern=self.visit(node.pattern), body=[self.visit(s) for s in node.body])

    def visit_match(self, node: Match) -> Any:
        return Match(subject=self.visit(node.subject), cases=[self.visit(c) for c in node.cases])

    def visit_param(self, node: Param) -> Any:
        annotation = self.visit(node.annotation) if node.annotation is not None else None
        return Param(name=node.name, annotation=annotation)

    def visit_functiondef(self, node: FunctionDef) -> Any:
        return FunctionDef(
            name=node.name,
            params=[self.visit(p) for p in node.params],
            body=[self.visit(s) for s in node.body],
            returns=self.visit(node.returns) if node.returns is not None else None,
            decorators=[self.visit(d) for d in node.decorators],
            docstring=node.docstring,
        )

    def visit_classdef(self, node: ClassDef) -> Any:
        return ClassDef(
            name=node.name,
            bases=[self.visit(b) for b in node.bases],
            body=[self.visit(s) for s in node.body],
            decorators=[self.visit(d) for d in node.decorators],
            docstring=node.docstring,
        )

    def visit_module(self, node: Module) -> Any:
        return Module(body=[self.visit(s) for s in node.body], docstring=node.docstring)

    def visit_expr(self, node: Expr) -> Any:
        """Visit any expression node by dispatching to the correct method."""
        return self.visit(node)


class NameCollector(ASTVisitor):
    """Collects the root name of every ``Name`` and attribute chain."""

    def __init__(self) -> None:
        self.names: set[str] = set()

    def visit_name(self, node: Name) -> Any:
        self.names.add(node.id)
        return node


def referenced_names(node: Any) -> set[str]:
    """Names a generated node refers to, e.g. ``{"copy", "runtime"}``."""
    collector = NameCollector()
    collector.visit(node)
    return collector.names
