"""Context classes and their human-readable rendering (``__str__``)."""

from __future__ import annotations

from faultline.ast.builder import ClassBuilder, assign, attr, call, delete, dotted, name, param, ret
from faultline.ast.nodes import (
    AnnAssign,
    Constant,
    Expr,
    FunctionDef,
    Match,
    MatchCapture,
    MatchCase,
    MatchClass,
    Pattern,
    Raise,
    RawCode,
    Stmt,
)
from faultline.codegen.kinds import field_name, kind_method
from faultline.models.declaration import Fields, NamedFields, UnnamedFields
from faultline.models.error_type import (
    ErrorEnum,
    ErrorStruct,
    ErrorType,
    ErrorVariant,
    ResolvedDescription,
)


def render_description(description: ResolvedDescription) -> Expr:
    """``"Io"`` or ``"Error {0}".format(self.code)``.

    A template without arguments is emitted as the literal text, so braces
    in it are not interpreted.
    """
    template = Constant(description.template)
    if not description.args:
        return template
    return call(attr(template, "format"), *description.args)


def _docstring(docs: tuple[str, ...]) -> str | None:
    return "\n".join(docs) if docs else None


def _dataclass_decorator() -> Expr:
    return call(name("dataclass"), repr=Constant(False))


def _fields(builder: ClassBuilder, fields: Fields) -> None:
    for key, error_field in fields:
        builder.add(AnnAssign(target=field_name(key), annotation=RawCode(error_field.ty)))


def _str_method(body: list[Stmt]) -> FunctionDef:
    return FunctionDef(name="__str__", params=[param("self")], body=body, returns=RawCode("str"))


def generate_display(error_type: ErrorType) -> list[Stmt]:
    match error_type.data:
        case ErrorStruct():
            return [_struct_context(error_type, error_type.data)]
        case ErrorEnum():
            return _enum_context(error_type, error_type.data)
    raise TypeError(f"Unknown error data: {error_type.data!r}")


def _struct_context(error_type: ErrorType, data: ErrorStruct) -> Stmt:
    builder = (
        ClassBuilder(error_type.ident)
        .decorate(_dataclass_decorator())
        .base(dotted("runtime.ErrorContext"))
        .doc(_docstring(error_type.docs))
    )
    _fields(builder, data.fields)
    builder.add(
        kind_method(error_type),
        _str_method([ret(render_description(data.description))]),
        assign(name("__repr__"), name("__str__")),
    )
    return builder.build()


def _variant_pattern(context_name: str, variant: ErrorVariant) -> Pattern:
    cls = dotted(f"{context_name}.{variant.ident}")
    match variant.fields:
        case NamedFields():
            return MatchClass(cls, keywords=[(key, MatchCapture(key)) for key, _ in variant.fields])
        case UnnamedFields():
            return MatchClass(
                cls, patterns=[MatchCapture(field_name(key)) for key, _ in variant.fields]
            )
    return MatchClass(cls)


def _enum_context(error_type: ErrorType, data: ErrorEnum) -> list[Stmt]:
    """A base class plus one dataclass per variant, attached as ``Context.Variant``."""
    context = error_type.ident
    unknown = Raise(call(name("TypeError"), attr(call(name("type"), name("self")), "__qualname__")))
    cases = [
        MatchCase(_variant_pattern(context, v), [ret(render_description(v.description))])
        for v in data.variants
    ]
    body: list[Stmt] = [Match(name("self"), cases), unknown] if cases else [unknown]

    base = (
        ClassBuilder(context)
        .base(dotted("runtime.ErrorContext"))
        .doc(_docstring(error_type.docs))
        .add(kind_method(error_type), _str_method(body), assign(name("__repr__"), name("__str__")))
    )

    statements: list[Stmt] = [base.build()]
    for variant in data.variants:
        private = f"_{context}_{variant.ident}"
        builder = (
            ClassBuilder(private)
            .decorate(_dataclass_decorator())
            .base(name(context))
            .doc(_docstring(variant.docs))
            .add(assign(name("__qualname__"), Constant(f"{context}.{variant.ident}")))
        )
        _fields(builder, variant.fields)
        statements.extend(
            [
                builder.build(),
                assign(dotted(f"{context}.{variant.ident}"), name(private)),
                delete(name(private)),
            ]
        )
    return statements
