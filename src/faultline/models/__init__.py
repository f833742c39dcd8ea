"""Domain models for faultline: diagnostics, declarations and error types."""

from faultline.models.declaration import Declaration, SourceFile, UseDecl, Visibility
from faultline.models.error_type import (
    CopyMethod,
    ErrorEnum,
    ErrorField,
    ErrorKinds,
    ErrorStruct,
    ErrorType,
    ErrorVariant,
)
from faultline.models.errors import Diagnostic, DiagnosticError, ErrorCode, SourceSpan

__all__ = [
    "CopyMethod",
    "Declaration",
    "Diagnostic",
    "DiagnosticError",
    "ErrorCode",
    "ErrorEnum",
    "ErrorField",
    "ErrorKinds",
    "ErrorStruct",
    "ErrorType",
    "ErrorVariant",
    "SourceFile",
    "SourceSpan",
    "UseDecl",
    "Visibility",
]
