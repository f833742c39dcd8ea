"""Build manifest: which declaration sources generate which modules."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class Target(BaseModel):
    """One source file and the module generated from it."""

    source: str
    output: str

    model_config = {"extra": "forbid"}

    @field_validator("source")
    @classmethod
    def _source_suffix(cls, value: str) -> str:
        if not value.endswith(".fl"):
            raise ValueError(f"source must be a .fl file, got '{value}'")
        return value

    @field_validator("output")
    @classmethod
    def _output_suffix(cls, value: str) -> str:
        if not value.endswith(".py"):
            raise ValueError(f"output must be a .py file, got '{value}'")
        return value

    def source_path(self, root: Path) -> Path:
        return root / self.source

    def output_path(self, root: Path) -> Path:
        return root / self.output


class Manifest(BaseModel):
    """Parsed ``faultline.yaml``; paths are relative to ``root``."""

    targets: list[Target] = Field(default_factory=list)
    root: Path = Path(".")

    model_config = {"extra": "forbid"}
