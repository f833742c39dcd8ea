"""``from`` conversions: wrap a foreign exception in a fieldless context."""

from __future__ import annotations

from faultline.ast.builder import attr, call, dotted, name, param, ret
from faultline.ast.nodes import Assign, Expr, FunctionDef, Stmt, Tuple
from faultline.models.error_type import Conversion, ErrorType


def conversion_source(conversion: Conversion) -> str:
    return str(conversion.source)


def _context_value(error_type: ErrorType, conversion: Conversion) -> Expr:
    if conversion.variant is None:
        return call(name(error_type.ident))
    return call(dotted(f"{error_type.ident}.{conversion.variant}"))


def generate_conversions(error_type: ErrorType) -> list[FunctionDef]:
    """One static ``from_<source>(err)`` per declared source, in declaration order."""
    return [
        FunctionDef(
            name=conversion.function_name,
            params=[param("err", conversion_source(conversion))],
            body=[
                ret(call(attr(_context_value(error_type, conversion), "into_error"), name("err")))
            ],
            returns=dotted(f"{error_type.mod_name}.Error"),
            decorators=[name("staticmethod")],
        )
        for conversion in error_type.conversions
    ]


def conversion_registry(error_type: ErrorType) -> list[Stmt]:
    """``Error.conversions = ((OSError, from_os_error), ...)``; empty without sources."""
    if not error_type.conversions:
        return []
    entries = [
        Tuple([dotted(conversion_source(c)), name(c.function_name)])
        for c in error_type.conversions
    ]
    return [Assign(dotted("Error.conversions"), Tuple(entries))]
