"""faultline: generates typed Python error types from annotated declarations."""

from __future__ import annotations

from faultline.models.errors import Diagnostic, DiagnosticError, ErrorCode, GenerationFailed
from faultline.pipeline import GenerationPipeline, GenerationResult
from faultline.settings import Settings

__version__ = "0.1.0"


def generate(
    source: str, filename: str = "<string>", settings: Settings | None = None
) -> GenerationResult:
    """Generate the Python module for declaration source text."""
    return GenerationPipeline(settings).generate(source, filename)


__all__ = [
    "Diagnostic",
    "DiagnosticError",
    "ErrorCode",
    "GenerationFailed",
    "GenerationPipeline",
    "GenerationResult",
    "Settings",
    "__version__",
    "generate",
]
