"""YAML manifest loader with position tracking for rich error reporting."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq
from ruamel.yaml.error import YAMLError

from faultline.models.errors import SourceSpan
from faultline.models.manifest import Manifest

logger = logging.getLogger("faultline.manifest")

_MAX_DOCUMENT_SIZE = 1_000_000
_MAX_NODE_COUNT = 10_000
_MAX_DEPTH = 10

# Anchor definitions (&name) outside quoted strings, heuristically.
_ANCHOR_RE = re.compile(r"(?:^|[\s\-:])&(\w+)", re.MULTILINE)


class ManifestError(Exception):
    """Raised when a manifest cannot be read, is unsafe, or fails validation."""

    def __init__(self, message: str, span: SourceSpan | None = None) -> None:
        self.message = message
        self.span = span
        super().__init__(message)

    def __str__(self) -> str:
        if self.span is None:
            return self.message
        return f"{self.span}: {self.message}"


@dataclass
class SourceMap:
    """Maps YAML key paths (``targets[0].source``) to their source positions."""

    _positions: dict[str, SourceSpan] = field(default_factory=dict)

    def add(self, path: str, span: SourceSpan) -> None:
        self._positions[path] = span

    def get(self, path: str) -> SourceSpan | None:
        return self._positions.get(path)

    @property
    def paths(self) -> list[str]:
        return list(self._positions.keys())


class ManifestLoader:
    """Loads ``faultline.yaml`` into a validated :class:`Manifest`.

    Uses ruamel.yaml, which preserves line/column info on every parsed node,
    so validation errors point at the offending key.
    """

    def __init__(self) -> None:
        self._yaml = YAML()
        self._yaml.max_depth = _MAX_DEPTH

    @staticmethod
    def _check_safety(content: str) -> None:
        if len(content) > _MAX_DOCUMENT_SIZE:
            raise ManifestError(
                f"Manifest exceeds maximum size "
                f"({len(content):,} chars > {_MAX_DOCUMENT_SIZE:,} limit)"
            )
        if _ANCHOR_RE.search(content):
            raise ManifestError("YAML anchors/aliases are not supported in manifests")

    @staticmethod
    def _check_node_count(data: Any, limit: int = _MAX_NODE_COUNT) -> None:
        count = 0
        stack: list[Any] = [data]
        while stack:
            node = stack.pop()
            count += 1
            if count > limit:
                raise ManifestError(f"Manifest exceeds maximum node count ({limit:,})")
            if isinstance(node, dict):
                stack.extend(node.values())
            elif isinstance(node, list):
                stack.extend(node)

    def load(self, path: Path) -> Manifest:
        with path.open("r", encoding="utf-8") as handle:
            content = handle.read()
        return self.load_string(content, str(path), root=path.parent)

    def load_string(
        self, content: str, filename: str = "<string>", root: Path | None = None
    ) -> Manifest:
        self._check_safety(content)
        try:
            data = self._yaml.load(content)
        except YAMLError as exc:
            raise ManifestError(f"Invalid YAML: {exc}") from exc
        if data is None:
            data = CommentedMap()
        if not isinstance(data, CommentedMap):
            raise ManifestError("Manifest must be a mapping with a `targets` list")
        self._check_node_count(data)

        source_map = SourceMap()
        self._extract_positions(data, filename, "", source_map)
        try:
            manifest = Manifest.model_validate(
                {**self._to_plain(data), "root": root or Path(".")}
            )
        except ValidationError as exc:
            error = exc.errors()[0]
            location = _loc_path(error["loc"])
            raise ManifestError(
                f"{location or 'manifest'}: {error['msg']}", _nearest(source_map, location)
            ) from exc

        logger.debug("Loaded manifest %s with %d target(s)", filename, len(manifest.targets))
        return manifest

    def _extract_positions(
        self, data: Any, filename: str, prefix: str, source_map: SourceMap
    ) -> None:
        """Recursively record key and item positions from ruamel.yaml nodes."""
        if isinstance(data, CommentedMap):
            for key in data:
                key_path = f"{prefix}.{key}" if prefix else str(key)
                line, col = data.lc.key(key)
                source_map.add(key_path, SourceSpan(file=filename, line=line + 1, column=col + 1))
                self._extract_positions(data[key], filename, key_path, source_map)
        elif isinstance(data, CommentedSeq):
            for i, item in enumerate(data):
                item_path = f"{prefix}[{i}]"
                line, col = data.lc.item(i)
                source_map.add(item_path, SourceSpan(file=filename, line=line + 1, column=col + 1))
                self._extract_positions(item, filename, item_path, source_map)

    def _to_plain(self, data: Any) -> Any:
        """Convert ruamel.yaml CommentedMap/Seq to plain dicts and lists."""
        if isinstance(data, dict):
            return {str(k): self._to_plain(v) for k, v in data.items()}
        if isinstance(data, list):
            return [self._to_plain(item) for item in data]
        return data


def _loc_path(loc: tuple[int | str, ...]) -> str:
    """``("targets", 0, "source")`` -> ``targets[0].source``."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path


def _nearest(source_map: SourceMap, path: str) -> SourceSpan | None:
    """Position of ``path`` or of its closest recorded parent (missing keys have none)."""
    while path:
        span = source_map.get(path)
        if span is not None:
            return span
        path = re.sub(r"(\.[^.\[]+|\[\d+\])$", "", path)
    return None
