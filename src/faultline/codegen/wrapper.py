"""The exception type wrapping a context, and its result alias."""

from __future__ import annotations

from faultline.ast.builder import ClassBuilder, assign, attr, call, dotted, name, param, ret
from faultline.ast.nodes import RawCode, Stmt, Subscript
from faultline.codegen.conversions import conversion_registry
from faultline.models.error_type import ErrorType


def generate_wrapper(error_type: ErrorType) -> list[Stmt]:
    """``Error`` (context, cause, backtrace) followed by ``Result = Union[T, Error]``."""
    kind_type = f"{error_type.mod_name}.ErrorKind"
    error = (
        ClassBuilder("Error")
        .base(dotted("runtime.ContextError"))
        .doc(f"Exception carrying a :class:`{error_type.ident}` context.")
        .field("context", error_type.ident)
        .method(
            "kind",
            [param("self")],
            [ret(call(attr(attr(name("self"), "context"), "kind")))],
            returns=RawCode(kind_type),
        )
        .build()
    )
    return [
        error,
        *conversion_registry(error_type),
        assign(name("Result"), Subscript(name("Union"), [name("T"), name("Error")])),
    ]
