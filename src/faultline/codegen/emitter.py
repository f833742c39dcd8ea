"""Renders code AST nodes to Python source text."""

from __future__ import annotations

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
    MatchClass,
    Module,
    Name,
    Param,
    Pass,
    Pattern,
    Raise,
    RawCode,
    Return,
    Stmt,
    Subscript,
    Tuple,
)

INDENT = "    "


class PythonEmitter:
    """Compiles a code AST to PEP 8 formatted source."""

    def compile(self, module: Module) -> str:
        """Render a complete module."""
        lines: list[str] = []
        if module.docstring:
            lines.extend(self._docstring(module.docstring, 0))
            lines.append("")
        lines.extend(self.compile_block(module.body, 0))
        return "\n".join(lines).rstrip() + "\n"

    # -- statements ----------------------------------------------------------

    def compile_block(self, body: list[Stmt], level: int) -> list[str]:
        """Render statements, separating definitions with blank lines."""
        if not body:
            return [INDENT * level + "pass"]
        gap = 2 if level == 0 else 1
        lines: list[str] = []
        previous: Stmt | None = None
        for stmt in body:
            if previous is not None and (_is_definition(stmt) or _is_definition(previous)):
                lines.extend([""] * gap)
            lines.extend(self.compile_stmt(stmt, level))
            previous = stmt
        return lines

    def compile_stmt(self, stmt: Stmt, level: int) -> list[str]:
        pad = INDENT * level
        match stmt:
            case Pass():
                return [pad + "pass"]
            case Return(value=None):
                return [pad + "return"]
            case Return(value=value):
                return [f"{pad}return {self.compile_expr(value)}"]
            case Raise(exc=exc):
                return [f"{pad}raise {self.compile_expr(exc)}"]
            case Assign(target=target, value=value):
                return [f"{pad}{self.compile_expr(target)} = {self.compile_expr(value)}"]
            case AnnAssign(target=target, annotation=annotation, value=None):
                return [f"{pad}{target}: {self.compile_expr(annotation)}"]
            case AnnAssign(target=target, annotation=annotation, value=value):
                return [
                    f"{pad}{target}: {self.compile_expr(annotation)} = "
                    f"{self.compile_expr(value)}"
                ]
            case Delete(targets=targets):
                return [f"{pad}del " + ", ".join(self.compile_expr(t) for t in targets)]
            case Import(module=module, alias=None):
                return [f"{pad}import {module}"]
            case Import(module=module, alias=alias):
                return [f"{pad}import {module} as {alias}"]
            case ImportFrom(module=module, names=names):
                rendered = ", ".join(n if a is None else f"{n} as {a}" for n, a in names)
                return [f"{pad}from {module} import {rendered}"]
            case Match(subject=subject, cases=cases):
                lines = [f"{pad}match {self.compile_expr(subject)}:"]
                for case in cases:
                    lines.append(f"{pad}{INDENT}case {self.compile_pattern(case.pattern)}:")
                    lines.extend(self.compile_block(case.body, level + 2))
                return lines
            case FunctionDef():
                return self.compile_function(stmt, level)
            case ClassDef():
                return self.compile_class(stmt, level)
            case _:
                raise ValueError(f"Unknown AST node type: {type(stmt).__name__}")

    def compile_function(self, node: FunctionDef, level: int) -> list[str]:
        pad = INDENT * level
        lines = [f"{pad}@{self.compile_expr(d)}" for d in node.decorators]
        params = ", ".join(self.compile_param(p) for p in node.params)
        returns = f" -> {self.compile_expr(node.returns)}" if node.returns is not None else ""
        lines.append(f"{pad}def {node.name}({params}){returns}:")
        if node.docstring:
            lines.extend(self._docstring(node.docstring, level + 1))
        if node.body or not node.docstring:
            lines.extend(self.compile_block(node.body, level + 1))
        return lines

    def compile_class(self, node: ClassDef, level: int) -> list[str]:
        pad = INDENT * level
        lines = [f"{pad}@{self.compile_expr(d)}" for d in node.decorators]
        bases = ", ".join(self.compile_expr(b) for b in node.bases)
        lines.append(f"{pad}class {node.name}({bases}):" if bases else f"{pad}class {node.name}:")
        if node.docstring:
            lines.extend(self._docstring(node.docstring, level + 1))
            if node.body:
                lines.append("")
        if node.body or not node.docstring:
            lines.extend(self.compile_block(node.body, level + 1))
        return lines

    def compile_param(self, node: Param) -> str:
        if node.annotation is None:
            return node.name
        return f"{node.name}: {self.compile_expr(node.annotation)}"

    # -- expressions ---------------------------------------------------------

    def compile_expr(self, expr: Expr) -> str:
        """Compile an expression node to source text."""
        match expr:
            case Constant(value=str() as value):
                return string_literal(value)
            case Constant(value=value):
                return repr(value)
            case Name(id=id_):
                return id_
            case RawCode(code=code):
                return code
            case Attribute(value=value, attr=attr):
                return f"{self.compile_expr(value)}.{attr}"
            case Call(func=func, args=args, keywords=keywords):
                rendered = [self.compile_expr(a) for a in args]
                rendered += [f"{k}={self.compile_expr(v)}" for k, v in keywords]
                return f"{self.compile_expr(func)}({', '.join(rendered)})"
            case Subscript(value=value, index=index):
                inner = ", ".join(self.compile_expr(i) for i in index)
                return f"{self.compile_expr(value)}[{inner}]"
            case Tuple(elts=[single]):
                return f"({self.compile_expr(single)},)"
            case Tuple(elts=elts):
                return "(" + ", ".join(self.compile_expr(e) for e in elts) + ")"
            case ListExpr(elts=elts):
                return "[" + ", ".join(self.compile_expr(e) for e in elts) + "]"
            case _:
                raise ValueError(f"Unknown AST node type: {type(expr).__name__}")

    def compile_pattern(self, pattern: Pattern) -> str:
        match pattern:
            case MatchCapture(name=None):
                return "_"
            case MatchCapture(name=name):
                return name
            case MatchClass(cls=cls, patterns=patterns, keywords=keywords):
                rendered = [self.compile_pattern(p) for p in patterns]
                rendered += [f"{k}={self.compile_pattern(p)}" for k, p in keywords]
                return f"{self.compile_expr(cls)}({', '.join(rendered)})"
            case _:
                raise ValueError(f"Unknown pattern type: {type(pattern).__name__}")

    def _docstring(self, text: str, level: int) -> list[str]:
        pad = INDENT * level
        escaped = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
        if escaped.endswith('"'):
            escaped = escaped[:-1] + '\\"'
        doc_lines = escaped.split("\n")
        if len(doc_lines) == 1:
            return [f'{pad}"""{escaped}"""']
        lines = [f'{pad}"""{doc_lines[0]}']
        lines.extend(f"{pad}{line}" if line else "" for line in doc_lines[1:])
        lines.append(f'{pad}"""')
        return lines


def string_literal(value: str) -> str:
    """Double-quoted Python literal for ``value``."""
    rendered = repr(value)
    if rendered.startswith("'") and '"' not in value:
        return '"' + rendered[1:-1] + '"'
    return rendered


def _is_definition(stmt: Stmt) -> bool:
    return isinstance(stmt, (FunctionDef, ClassDef))
