"""Post-generation validation of the emitted module."""

from __future__ import annotations

import ast


def validate_python(code: str, filename: str = "<generated>") -> list[str]:
    """Parse generated code with the interpreter's own parser.

    Returns a list of error messages (empty if valid).
    Validation is non-blocking; callers should treat errors as warnings.
    """
    errors: list[str] = []
    try:
        ast.parse(code, filename=filename)
    except SyntaxError as exc:
        errors.append(f"{filename}:{exc.lineno}:{exc.offset}: {exc.msg}")
    return errors
