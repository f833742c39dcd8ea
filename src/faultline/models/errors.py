"""Structured diagnostics with source position tracking."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel


class SourceSpan(BaseModel):
    """Points to exact location in declaration source for error reporting."""

    file: str
    line: int
    column: int
    end_line: int | None = None
    end_column: int | None = None

    model_config = {"frozen": True}

    @classmethod
    def from_token(cls, token: Any, filename: str) -> SourceSpan:
        """Span covering a single lark token."""
        return cls(
            file=filename,
            line=token.line,
            column=token.column,
            end_line=token.end_line,
            end_column=token.end_column,
        )

    def join(self, other: SourceSpan | None) -> SourceSpan:
        """Span from the start of this one to the end of ``other``."""
        if other is None:
            return self
        return SourceSpan(
            file=self.file,
            line=self.line,
            column=self.column,
            end_line=other.end_line if other.end_line is not None else other.line,
            end_column=other.end_column if other.end_column is not None else other.column,
        )

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


class ErrorCode(StrEnum):
    GRAMMAR_ERROR = "GRAMMAR_ERROR"
    UNEXPECTED_TYPE = "UNEXPECTED_TYPE"
    UNEXPECTED_LITERAL_TYPE = "UNEXPECTED_LITERAL_TYPE"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    UNKNOWN_VALUE = "UNKNOWN_VALUE"
    MISSING_FIELD = "MISSING_FIELD"
    UNKNOWN_FIELD = "UNKNOWN_FIELD"
    UNSUPPORTED_SHAPE = "UNSUPPORTED_SHAPE"
    UNRESOLVED_FIELD_REFERENCE = "UNRESOLVED_FIELD_REFERENCE"
    INVALID_FORMAT = "INVALID_FORMAT"
    DUPLICATE_NAME = "DUPLICATE_NAME"


class Diagnostic(BaseModel):
    """A structured error with optional source position and suggestions."""

    code: ErrorCode
    message: str
    path: str | None = None
    span: SourceSpan | None = None
    suggestions: list[str] = []

    def format(self) -> str:
        """Render as ``file:line:col: CODE: message``."""
        location = str(self.span) if self.span is not None else "<unknown>"
        text = f"{location}: {self.code.value}: {self.message}"
        if self.path:
            text += f" (in {self.path})"
        if self.suggestions:
            text += f"; did you mean {', '.join(repr(s) for s in self.suggestions)}?"
        return text


class DiagnosticError(Exception):
    """Raised by every generation stage on the first fatal problem.

    The span is filled lazily: inner stages raise without one and the
    caller that knows which node was being processed anchors it with
    :meth:`with_span`. A span that is already set is never replaced.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        span: SourceSpan | None = None,
        suggestions: list[str] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.span = span
        self.path: str | None = None
        self.suggestions = suggestions or []
        super().__init__(message)

    def with_span(self, span: SourceSpan | None) -> Self:
        if self.span is None:
            self.span = span
        return self

    def with_path(self, path: str) -> Self:
        if self.path is None:
            self.path = path
        return self

    @property
    def diagnostic(self) -> Diagnostic:
        return Diagnostic(
            code=self.code,
            message=self.message,
            path=self.path,
            span=self.span,
            suggestions=self.suggestions,
        )

    def __str__(self) -> str:
        return self.diagnostic.format()

    # -- constructors --------------------------------------------------------

    @classmethod
    def grammar(cls, message: str, span: SourceSpan | None = None) -> DiagnosticError:
        return cls(ErrorCode.GRAMMAR_ERROR, message, span)

    @classmethod
    def unexpected_type(cls, ty: str) -> DiagnosticError:
        return cls(ErrorCode.UNEXPECTED_TYPE, f"Unexpected type `{ty}`")

    @classmethod
    def unexpected_lit_type(cls, lit_kind: str) -> DiagnosticError:
        return cls(ErrorCode.UNEXPECTED_LITERAL_TYPE, f"Unexpected literal type `{lit_kind}`")

    @classmethod
    def unsupported_format(cls, form: str) -> DiagnosticError:
        return cls(ErrorCode.UNSUPPORTED_FORMAT, f"Unsupported format `{form}`")

    @classmethod
    def unknown_value(cls, value: str) -> DiagnosticError:
        return cls(ErrorCode.UNKNOWN_VALUE, f"Unknown literal value `{value}`")

    @classmethod
    def missing_field(cls, name: str) -> DiagnosticError:
        return cls(ErrorCode.MISSING_FIELD, f"Missing field `{name}`")

    @classmethod
    def unknown_field(cls, name: str, suggestions: list[str] | None = None) -> DiagnosticError:
        return cls(ErrorCode.UNKNOWN_FIELD, f"Unknown field: `{name}`", suggestions=suggestions)

    @classmethod
    def unsupported_shape(cls, shape: str) -> DiagnosticError:
        return cls(ErrorCode.UNSUPPORTED_SHAPE, f"Unsupported shape `{shape}`")

    @classmethod
    def unresolved_field_reference(
        cls, reference: str, suggestions: list[str] | None = None
    ) -> DiagnosticError:
        return cls(
            ErrorCode.UNRESOLVED_FIELD_REFERENCE,
            f"Unknown field: `{reference}`",
            suggestions=suggestions,
        )

    @classmethod
    def invalid_format(cls, message: str) -> DiagnosticError:
        return cls(ErrorCode.INVALID_FORMAT, message)

    @classmethod
    def duplicate_name(cls, name: str, owner: str) -> DiagnosticError:
        return cls(
            ErrorCode.DUPLICATE_NAME,
            f"Generated name `{name}` is already defined by `{owner}`",
        )


class GenerationFailed(Exception):
    """Raised by the strict pipeline API when any declaration failed."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = diagnostics
        messages = "; ".join(d.message for d in diagnostics)
        super().__init__(f"Generation errors: {messages}")


def suggest_similar(name: str, candidates: list[str], max_suggestions: int = 3) -> list[str]:
    """Suggest similar names for 'did you mean?' messages."""
    name_lower = name.lower()
    scored = []
    for candidate in candidates:
        candidate_lower = candidate.lower()
        if name_lower in candidate_lower or candidate_lower in name_lower:
            scored.append((0, candidate))
        else:
            common = sum(1 for c in name_lower if c in candidate_lower)
            score = len(name) + len(candidate) - 2 * common
            # Unrelated names share too few characters to be worth suggesting.
            if common * 2 >= max(len(name), len(candidate)):
                scored.append((score, candidate))
    scored.sort(key=lambda x: x[0])
    return [s[1] for s in scored[:max_suggestions]]
