"""Discriminant ("kind") types: one dataclass case per struct or variant."""

from __future__ import annotations

from faultline.ast.builder import ClassBuilder, assign, call, delete, dotted, name, param, ret
from faultline.ast.nodes import AnnAssign, Constant, FunctionDef, RawCode, Stmt
from faultline.models.declaration import positional_name
from faultline.models.error_type import (
    ErrorEnum,
    ErrorKindCase,
    ErrorKinds,
    ErrorStruct,
    ErrorType,
    included_fields,
)


def kinds_for_type(error_type: ErrorType) -> ErrorKinds:
    match error_type.data:
        case ErrorStruct(fields=fields):
            case = ErrorKindCase(error_type.ident, fields, included_fields(fields))
            return ErrorKinds((case,), is_struct=True)
        case ErrorEnum(variants=variants):
            return ErrorKinds(
                tuple(
                    ErrorKindCase(v.ident, v.fields, included_fields(v.fields))
                    for v in variants
                )
            )
    raise TypeError(f"Unknown error data: {error_type.data!r}")


def field_name(key: str | int) -> str:
    return key if isinstance(key, str) else positional_name(key)


def generate_kinds(error_type: ErrorType, kinds: ErrorKinds) -> list[Stmt]:
    """The ``ErrorKind`` base class followed by its attached cases.

    Cases are frozen and the base copies as itself only when every included
    field of every case is duplicated by plain copy.
    """
    base = (
        ClassBuilder("ErrorKind")
        .base(dotted("runtime.ErrorKind"))
        .doc(f"Classification of :class:`{error_type.ident}` values.")
    )
    if kinds.is_copy:
        base.method("__copy__", [param("self")], [ret(name("self"))])

    statements: list[Stmt] = [base.build()]
    for case in kinds.cases:
        statements.extend(_case(error_type, case, frozen=kinds.is_copy))
    return statements


def _case(error_type: ErrorType, case: ErrorKindCase, frozen: bool) -> list[Stmt]:
    private = f"_ErrorKind_{case.ident}"
    decorator = call(name("dataclass"), frozen=Constant(True)) if frozen else name("dataclass")
    builder = (
        ClassBuilder(private)
        .base(name("ErrorKind"))
        .decorate(decorator)
        .add(assign(name("__qualname__"), Constant(f"{error_type.mod_name}.ErrorKind.{case.ident}")))
    )
    for key, error_field in case.included_fields:
        builder.add(AnnAssign(target=field_name(key), annotation=RawCode(error_field.ty)))
    return [
        builder.build(),
        assign(dotted(f"ErrorKind.{case.ident}"), name(private)),
        delete(name(private)),
    ]


def kind_method(error_type: ErrorType) -> FunctionDef:
    """``kind()`` of the context class."""
    kind_type = f"{error_type.mod_name}.ErrorKind"
    return FunctionDef(
        name="kind",
        params=[param("self")],
        body=[ret(call(dotted(f"{kind_type}.from_context"), name("self")))],
        returns=RawCode(kind_type),
    )
