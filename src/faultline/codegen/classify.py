"""``ErrorKind.from_context``: maps every context value to its kind."""

from __future__ import annotations

from faultline.ast.builder import attr, call, dotted, name, param, ret
from faultline.ast.nodes import (
    Expr,
    FunctionDef,
    Match,
    MatchCapture,
    MatchCase,
    MatchClass,
    Pattern,
    Raise,
    Stmt,
)
from faultline.codegen.kinds import field_name
from faultline.models.declaration import NamedFields, UnnamedFields
from faultline.models.error_type import ErrorField, ErrorKindCase, ErrorKinds, ErrorType


def _duplicate(value: Expr, error_field: ErrorField) -> Expr:
    if error_field.is_copy:
        return value
    return call(dotted("copy.copy"), value)


def _construct(error_type: ErrorType, case: ErrorKindCase, access) -> Expr:
    kind = dotted(f"{error_type.mod_name}.ErrorKind.{case.ident}")
    if isinstance(case.included_fields, NamedFields):
        keywords = {
            key: _duplicate(access(key), error_field)
            for key, error_field in case.included_fields
        }
        return call(kind, **keywords)
    return call(
        kind,
        *(_duplicate(access(field_name(key)), f) for key, f in case.included_fields),
    )


def _pattern(context_name: str, case: ErrorKindCase) -> Pattern:
    """Binds the included fields of a variant; everything else is ignored."""
    cls = dotted(f"{context_name}.{case.ident}")
    match case.all_fields:
        case NamedFields():
            return MatchClass(
                cls,
                keywords=[
                    (key, MatchCapture(key)) for key, _ in case.included_fields
                ],
            )
        case UnnamedFields(items=items):
            if not len(case.included_fields):
                return MatchClass(cls)
            return MatchClass(
                cls,
                patterns=[
                    MatchCapture(field_name(key) if f.include_in_kind else None)
                    for key, f in items
                ],
            )
    return MatchClass(cls)


def generate_classification(error_type: ErrorType, kinds: ErrorKinds) -> FunctionDef:
    """Static ``from_context(context)`` of the kind class.

    Clone-duplicated fields go through ``copy.copy`` so the kind owns its
    value; copy-duplicated fields are shared as is.
    """
    body: list[Stmt]
    if kinds.is_struct:
        (case,) = kinds.cases
        body = [ret(_construct(error_type, case, lambda key: attr(name("context"), key)))]
    else:
        cases = [
            MatchCase(_pattern(error_type.ident, case), [ret(_construct(error_type, case, name))])
            for case in kinds.cases
        ]
        unknown = Raise(
            call(name("TypeError"), attr(call(name("type"), name("context")), "__qualname__"))
        )
        body = [Match(name("context"), cases), unknown] if cases else [unknown]

    return FunctionDef(
        name="from_context",
        params=[param("context", error_type.ident)],
        body=body,
        returns=dotted(f"{error_type.mod_name}.ErrorKind"),
        decorators=[name("staticmethod")],
    )
