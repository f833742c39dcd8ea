"""Builds the error type model from parsed declarations."""

from faultline.builder.model_builder import ErrorTypeBuilder, snake_case

__all__ = [
    "ErrorTypeBuilder",
    "snake_case",
]
