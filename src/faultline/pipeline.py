"""Orchestrates generation: Source → Declarations → Error types → Python module."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from faultline.builder.model_builder import ErrorTypeBuilder
from faultline.codegen.emitter import PythonEmitter
from faultline.codegen.generator import PRELUDE_NAMES, CodeGenerator, GeneratedType, assemble_module
from faultline.codegen.validator import validate_python
from faultline.models.declaration import SourceFile
from faultline.models.errors import Diagnostic, DiagnosticError, GenerationFailed
from faultline.parser.loader import DeclarationLoader
from faultline.settings import Settings

logger = logging.getLogger("faultline.pipeline")


@dataclass
class GenerationResult:
    """The result of generating one source file."""

    code: str
    diagnostics: list[Diagnostic] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    types: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics


class GenerationPipeline:
    """Orchestrates: Load → Build → Generate → Assemble → Validate.

    A failing declaration is reported and skipped; the remaining
    declarations are still generated.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        self._loader = DeclarationLoader(self._settings)
        self._builder = ErrorTypeBuilder(self._settings)
        self._generator = CodeGenerator()
        self._emitter = PythonEmitter()

    def generate(self, source: str, filename: str = "<string>") -> GenerationResult:
        """Generate the module for declaration source text."""
        try:
            source_file = self._loader.load_string(source, filename)
        except DiagnosticError as exc:
            return GenerationResult(code="", diagnostics=[exc.diagnostic])
        return self.generate_source(source_file)

    def generate_file(self, path: Path) -> GenerationResult:
        return self.generate(path.read_text(encoding="utf-8"), str(path))

    def generate_or_raise(self, source: str, filename: str = "<string>") -> str:
        """Like :meth:`generate` but raises :class:`GenerationFailed` on any diagnostic."""
        result = self.generate(source, filename)
        if not result.ok:
            raise GenerationFailed(result.diagnostics)
        return result.code

    def generate_source(self, source_file: SourceFile) -> GenerationResult:
        diagnostics: list[Diagnostic] = []
        generated: list[GeneratedType] = []

        owners: dict[str, str] = {name: "the generated prelude" for name in PRELUDE_NAMES}
        for use in source_file.uses:
            if use.bound_name in PRELUDE_NAMES:
                exc = DiagnosticError.duplicate_name(use.bound_name, "the generated prelude")
                diagnostics.append(exc.with_span(use.span).diagnostic)
                continue
            owners.setdefault(use.bound_name, f"use {'.'.join(use.path)}")

        for declaration in source_file.declarations:
            try:
                error_type = self._builder.build(declaration)
                result = self._generator.generate(error_type)
                self._claim_names(result, owners)
            except DiagnosticError as exc:
                exc.with_span(declaration.span).with_path(declaration.ident)
                logger.debug("Declaration %s failed: %s", declaration.ident, exc)
                diagnostics.append(exc.diagnostic)
                continue
            generated.append(result)

        module = assemble_module(
            source_file.filename, source_file.uses, generated, self._settings
        )
        code = self._emitter.compile(module)
        warnings = [f"Python validation: {e}" for e in validate_python(code, source_file.filename)]
        for warning in warnings:
            logger.warning(warning)

        logger.info(
            "Generated %d error type(s) from %s (%d diagnostic(s))",
            len(generated),
            source_file.filename,
            len(diagnostics),
        )
        return GenerationResult(
            code=code,
            diagnostics=diagnostics,
            warnings=warnings,
            types=[g.error_type.ident for g in generated],
        )

    def _claim_names(self, generated: GeneratedType, owners: dict[str, str]) -> None:
        """Reserve the module-level names of one type, or fail without reserving any."""
        names = generated.module_names
        seen: set[str] = set()
        for name in names:
            owner = owners.get(name)
            if owner is None and name in seen:
                owner = generated.error_type.ident
            if owner is not None:
                raise DiagnosticError.duplicate_name(name, owner)
            seen.add(name)
        for name in names:
            owners[name] = generated.error_type.ident
