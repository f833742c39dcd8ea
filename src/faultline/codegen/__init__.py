"""Python code generation for faultline error types."""

from faultline.codegen.emitter import PythonEmitter
from faultline.codegen.generator import CodeGenerator, GeneratedType, assemble_module

__all__ = [
    "CodeGenerator",
    "GeneratedType",
    "PythonEmitter",
    "assemble_module",
]
