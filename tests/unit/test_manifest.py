"""Tests for loading the build manifest."""

from __future__ import annotations

from pathlib import Path

import pytest

from faultline.parser.manifest import ManifestError, ManifestLoader
from tests.conftest import FIXTURES_DIR


class TestManifestLoader:
    def test_load_fixture(self) -> None:
        manifest = ManifestLoader().load(FIXTURES_DIR / "faultline.yaml")
        assert manifest.root == FIXTURES_DIR
        (target,) = manifest.targets
        assert target.source_path(manifest.root) == FIXTURES_DIR / "errors.fl"
        assert target.output_path(manifest.root) == FIXTURES_DIR / "generated" / "errors.py"

    def test_empty_document(self) -> None:
        manifest = ManifestLoader().load_string("")
        assert manifest.targets == []
        assert manifest.root == Path(".")

    def test_bad_source_suffix_points_at_item(self) -> None:
        content = "targets:\n  - source: errors.txt\n    output: errors.py\n"
        with pytest.raises(ManifestError) as excinfo:
            ManifestLoader().load_string(content, "faultline.yaml")
        error = excinfo.value
        assert error.message.startswith("targets[0].source:")
        assert ".fl" in error.message
        assert error.span is not None
        assert (error.span.line, error.span.column) == (2, 5)
        assert str(error).startswith("faultline.yaml:2:5: ")

    def test_missing_output_points_at_parent(self) -> None:
        content = "targets:\n  - source: errors.fl\n"
        with pytest.raises(ManifestError) as excinfo:
            ManifestLoader().load_string(content, "faultline.yaml")
        assert excinfo.value.message.startswith("targets[0].output:")
        assert excinfo.value.span.line == 2

    def test_unknown_key(self) -> None:
        with pytest.raises(ManifestError, match="not permitted"):
            ManifestLoader().load_string("targets: []\nmode: fast\n")

    def test_not_a_mapping(self) -> None:
        with pytest.raises(ManifestError, match="must be a mapping"):
            ManifestLoader().load_string("- a\n- b\n")

    def test_invalid_yaml(self) -> None:
        with pytest.raises(ManifestError, match="Invalid YAML"):
            ManifestLoader().load_string("targets: [unclosed\n")


class TestManifestSafety:
    def test_anchors_rejected(self) -> None:
        content = "base: &base\n  source: a.fl\ntargets:\n  - *base\n"
        with pytest.raises(ManifestError, match="anchors/aliases"):
            ManifestLoader().load_string(content)

    def test_size_limit(self) -> None:
        with pytest.raises(ManifestError, match="maximum size"):
            ManifestLoader().load_string("# " + "x" * 1_000_001)

    def test_node_limit(self) -> None:
        items = "".join(f"  - {i}\n" for i in range(10_001))
        with pytest.raises(ManifestError, match="node count"):
            ManifestLoader().load_string(f"targets:\n{items}")
