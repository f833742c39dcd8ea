"""Tests for the command line entry point."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from faultline import __version__
from faultline.cli import build_parser, main
from tests.conftest import ERRORS_FL, FIXTURES_DIR

BROKEN = '#[faultline(description("{0}", nope))]\nstruct Broken { code: int }\n'


class TestGenerate:
    def test_to_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["generate", str(ERRORS_FL)]) == 0
        out = capsys.readouterr().out
        assert out.startswith('"""Generated by faultline from')
        assert "class faultline_config_error:" in out

    def test_to_file(self, tmp_path: Path) -> None:
        output = tmp_path / "errors.py"
        assert main(["generate", str(ERRORS_FL), "-o", str(output)]) == 0
        assert "class StoreError(runtime.ErrorContext):" in output.read_text(encoding="utf-8")

    def test_diagnostics_on_stderr(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        source = tmp_path / "broken.fl"
        source.write_text(BROKEN, encoding="utf-8")
        assert main(["generate", str(source)]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "UNRESOLVED_FIELD_REFERENCE" in captured.err
        assert "(in Broken)" in captured.err

    def test_missing_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["generate", str(tmp_path / "absent.fl")]) == 1
        assert "absent.fl" in capsys.readouterr().err


class TestCheck:
    def test_reports_every_source(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        broken = tmp_path / "broken.fl"
        broken.write_text(BROKEN, encoding="utf-8")
        assert main(["check", str(ERRORS_FL), str(broken)]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "broken.fl" in captured.err

    def test_clean_sources(self) -> None:
        assert main(["check", str(ERRORS_FL)]) == 0


class TestBuild:
    def test_writes_targets(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        shutil.copy(FIXTURES_DIR / "faultline.yaml", tmp_path)
        shutil.copy(ERRORS_FL, tmp_path)
        assert main(["build", str(tmp_path / "faultline.yaml")]) == 0
        assert (tmp_path / "generated" / "errors.py").is_file()
        assert "errors.fl -> generated/errors.py" in capsys.readouterr().out

    def test_invalid_manifest(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        manifest = tmp_path / "faultline.yaml"
        manifest.write_text("targets:\n  - source: a.txt\n    output: a.py\n", encoding="utf-8")
        assert main(["build", str(manifest)]) == 1
        assert "targets[0].source" in capsys.readouterr().err

    def test_failed_target(self, tmp_path: Path) -> None:
        (tmp_path / "broken.fl").write_text(BROKEN, encoding="utf-8")
        manifest = tmp_path / "faultline.yaml"
        manifest.write_text("targets:\n  - source: broken.fl\n    output: out.py\n", encoding="utf-8")
        assert main(["build", str(manifest)]) == 1
        assert not (tmp_path / "out.py").exists()


class TestParser:
    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--version"])
        assert __version__ in capsys.readouterr().out

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_build_default_manifest(self) -> None:
        args = build_parser().parse_args(["build"])
        assert args.manifest == "faultline.yaml"
