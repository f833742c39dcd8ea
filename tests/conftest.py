"""Shared test fixtures for faultline."""

from __future__ import annotations

import itertools
import sys
import types
from pathlib import Path

import pytest

from faultline.builder.model_builder import ErrorTypeBuilder
from faultline.models.declaration import Declaration, RawAttribute
from faultline.models.error_type import ErrorType
from faultline.parser.loader import DeclarationLoader
from faultline.pipeline import GenerationPipeline
from faultline.settings import Settings

FIXTURES_DIR = Path(__file__).parent / "fixtures"
ERRORS_FL = FIXTURES_DIR / "errors.fl"

_module_ids = itertools.count()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def loader(settings: Settings) -> DeclarationLoader:
    return DeclarationLoader(settings)


@pytest.fixture
def builder(settings: Settings) -> ErrorTypeBuilder:
    return ErrorTypeBuilder(settings)


@pytest.fixture
def pipeline(settings: Settings) -> GenerationPipeline:
    return GenerationPipeline(settings)


def declaration(source: str) -> Declaration:
    """The single declaration of ``source``."""
    (decl,) = DeclarationLoader().load_string(source, "test.fl").declarations
    return decl


def attribute(text: str) -> RawAttribute:
    """Raw tokens of one ``#[...]`` block, e.g. ``attribute('faultline(x = 1)')``."""
    return declaration(f"#[{text}]\nstruct Probe;").attrs[0]


def build(source: str) -> ErrorType:
    return ErrorTypeBuilder().build(declaration(source))


def load_module(code: str) -> types.ModuleType:
    """Execute generated code as a fresh importable module."""
    name = f"faultline_generated_{next(_module_ids)}"
    module = types.ModuleType(name)
    sys.modules[name] = module
    exec(compile(code, f"<{name}>", "exec"), module.__dict__)
    return module


def generate_module(source: str) -> types.ModuleType:
    """Generate ``source`` strictly and execute the result."""
    return load_module(GenerationPipeline().generate_or_raise(source, "test.fl"))


SAMPLE_SOURCE = """\
use json;

/// Failed to read the configuration.
#[faultline(description("Error {0}", code))]
pub struct Foo {
    #[faultline(include_in_kind)]
    code: int,
}

#[faultline(error_type = false, result_type = false, kind_type = false)]
pub enum Context {
    #[faultline(description = "Io", from = OSError)]
    Io,
    #[faultline(description("Fmt {0}", code))]
    Fmt { #[faultline(include_in_kind)] code: int },
    #[faultline(description("Utf8 {0} {1}", 0, 1))]
    Utf8(#[faultline(include_in_kind)] int, str),
    #[faultline(description = "Decode", from = json.JSONDecodeError)]
    Decode,
}
"""
