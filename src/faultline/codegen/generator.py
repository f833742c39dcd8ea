"""Generates the artifacts for one error type and assembles whole modules."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field

from faultline.ast.builder import assign, call, dotted, name
from faultline.ast.nodes import (
    Assign,
    ClassDef,
    Constant,
    FunctionDef,
    Import,
    ImportFrom,
    ListExpr,
    Module,
    Stmt,
)
from faultline.ast.visitor import referenced_names
from faultline.codegen.classify import generate_classification
from faultline.codegen.conversions import generate_conversions
from faultline.codegen.display import generate_display
from faultline.codegen.kinds import generate_kinds, kinds_for_type
from faultline.codegen.wrapper import generate_wrapper
from faultline.models.declaration import UseDecl, VisibilityKind
from faultline.models.error_type import ErrorKinds, ErrorType
from faultline.models.errors import DiagnosticError
from faultline.settings import Settings

logger = logging.getLogger("faultline.codegen")

# Names every generated module binds at module level.
PRELUDE_NAMES = frozenset({"copy", "dataclass", "TypeVar", "Union", "T", "runtime"})


@dataclass
class GeneratedType:
    """The five generated artifacts for one error type, in emission order."""

    error_type: ErrorType
    kinds: list[Stmt]
    classification: FunctionDef
    display: list[Stmt]
    conversions: list[FunctionDef]
    wrapper: list[Stmt]
    aliases: dict[str, str] = field(default_factory=dict)

    @property
    def module_names(self) -> list[str]:
        """Names this type binds at module level."""
        return [self.error_type.ident, self.error_type.mod_name, *self.aliases]

    @property
    def exports(self) -> list[str]:
        if self.error_type.vis.kind != VisibilityKind.PUBLIC:
            return []
        return self.module_names

    def namespace(self) -> ClassDef:
        """The ``<mod_name>`` class holding kinds, conversions and the wrapper."""
        error_type = self.error_type
        kind_base, *cases = self.kinds
        kind_base = dataclasses.replace(kind_base, body=[*kind_base.body, self.classification])

        body: list[Stmt] = []
        if error_type.mod_vis.kind in (VisibilityKind.PUBLIC, VisibilityKind.CRATE):
            members = ["ErrorKind", "Error", "Result", *(f.name for f in self.conversions)]
            body.append(assign(name("__all__"), ListExpr([Constant(m) for m in members])))
        body.extend([kind_base, *cases, *self.conversions, *self.wrapper])

        visibility = str(error_type.mod_vis) or "private"
        return ClassDef(
            name=error_type.mod_name,
            body=body,
            docstring=f"Generated items of :class:`{error_type.ident}` ({visibility}).",
        )

    def module_level(self) -> list[Stmt]:
        error_type = self.error_type
        statements: list[Stmt] = [
            assign(dotted(f"{error_type.ident}.error_type"), dotted(f"{error_type.mod_name}.Error"))
        ]
        for alias, member in self.aliases.items():
            statements.append(assign(name(alias), dotted(f"{error_type.mod_name}.{member}")))
        return statements

    def statements(self) -> list[Stmt]:
        return [*self.display, self.namespace(), *self.module_level()]


class CodeGenerator:
    """Emits the generated artifacts for a built :class:`ErrorType`."""

    def generate(self, error_type: ErrorType) -> GeneratedType:
        kinds: ErrorKinds = kinds_for_type(error_type)
        generated = GeneratedType(
            error_type=error_type,
            kinds=generate_kinds(error_type, kinds),
            classification=generate_classification(error_type, kinds),
            display=generate_display(error_type),
            conversions=generate_conversions(error_type),
            wrapper=generate_wrapper(error_type),
            aliases=_aliases(error_type),
        )
        logger.debug(
            "Generated %s: %d kind case(s), %d conversion(s)",
            error_type.ident,
            len(kinds.cases),
            len(generated.conversions),
        )
        return generated


def _aliases(error_type: ErrorType) -> dict[str, str]:
    attrs = error_type.attrs
    aliases: dict[str, str] = {}
    for setting, member in (
        (attrs.error_type_name, "Error"),
        (attrs.result_type_name, "Result"),
        (attrs.kind_type_name, "ErrorKind"),
    ):
        alias = setting.resolve(member)
        if alias is None:
            continue
        if alias in aliases:
            raise DiagnosticError.duplicate_name(alias, error_type.ident)
        aliases[alias] = member
    return aliases


# ---------------------------------------------------------------------------
# Module assembly
# ---------------------------------------------------------------------------


def _use_import(use: UseDecl) -> Stmt:
    if len(use.path) == 1:
        return Import(use.path[0], use.alias)
    return ImportFrom(".".join(use.path[:-1]), [(use.path[-1], use.alias)])


def _runtime_import(runtime_module: str) -> Stmt:
    package, _, module = runtime_module.rpartition(".")
    if not package:
        return Import(module, None if module == "runtime" else "runtime")
    return ImportFrom(package, [(module, None if module == "runtime" else "runtime")])


def _conversion_imports(types: list[GeneratedType], bound: set[str]) -> list[Stmt]:
    """``import json`` for every dotted source whose root is not already bound."""
    modules: list[str] = []
    for generated in types:
        for conversion in generated.error_type.conversions:
            parts = conversion.source.parts
            if len(parts) < 2 or parts[0] in bound:
                continue
            module = ".".join(parts[:-1])
            if module not in modules:
                modules.append(module)
    return [Import(module) for module in modules]


def assemble_module(
    filename: str,
    uses: tuple[UseDecl, ...],
    types: list[GeneratedType],
    settings: Settings | None = None,
) -> Module:
    """Complete module: imports, prelude, each type's statements and ``__all__``."""
    settings = settings or Settings()
    body: list[Stmt] = []
    for generated in types:
        body.extend(generated.statements())

    imports: list[Stmt] = [ImportFrom("__future__", [("annotations", None)])]
    if "copy" in referenced_names(Module(body)):
        imports.append(Import("copy"))
    imports.extend(
        [
            ImportFrom("dataclasses", [("dataclass", None)]),
            ImportFrom("typing", [("TypeVar", None), ("Union", None)]),
        ]
    )
    imports.extend(_use_import(use) for use in uses)
    imports.extend(_conversion_imports(types, {use.bound_name for use in uses}))
    imports.append(_runtime_import(settings.runtime_module))

    prelude: list[Stmt] = [Assign(name("T"), call(name("TypeVar"), Constant("T")))]
    exports = [export for generated in types for export in generated.exports]
    if exports:
        prelude.append(assign(name("__all__"), ListExpr([Constant(e) for e in exports])))

    return Module(
        body=[*imports, *prelude, *body],
        docstring=f"Generated by faultline from {filename}. Do not edit.",
    )
