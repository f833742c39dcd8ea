"""Command line entry point: ``faultline generate|check|build``."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from faultline import __version__
from faultline.parser.loader import SourceSafetyError
from faultline.parser.manifest import ManifestError, ManifestLoader
from faultline.pipeline import GenerationPipeline, GenerationResult
from faultline.settings import Settings

logger = logging.getLogger("faultline.cli")


def _report(result: GenerationResult) -> bool:
    """Print diagnostics and warnings to stderr; True when the result is usable."""
    for diagnostic in result.diagnostics:
        print(diagnostic.format(), file=sys.stderr)
    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    return result.ok


def _generate_path(pipeline: GenerationPipeline, source: Path) -> GenerationResult | None:
    try:
        return pipeline.generate_file(source)
    except (OSError, SourceSafetyError) as exc:
        print(f"{source}: {exc}", file=sys.stderr)
        return None


def cmd_generate(args: argparse.Namespace, pipeline: GenerationPipeline) -> int:
    result = _generate_path(pipeline, Path(args.source))
    if result is None or not _report(result):
        return 1
    if args.output:
        Path(args.output).write_text(result.code, encoding="utf-8")
        logger.info("Wrote %s", args.output)
    else:
        sys.stdout.write(result.code)
    return 0


def cmd_check(args: argparse.Namespace, pipeline: GenerationPipeline) -> int:
    status = 0
    for source in args.sources:
        result = _generate_path(pipeline, Path(source))
        if result is None or not _report(result):
            status = 1
    return status


def cmd_build(args: argparse.Namespace, pipeline: GenerationPipeline) -> int:
    try:
        manifest = ManifestLoader().load(Path(args.manifest))
    except (OSError, ManifestError) as exc:
        print(f"{args.manifest}: {exc}", file=sys.stderr)
        return 1

    status = 0
    for target in manifest.targets:
        result = _generate_path(pipeline, target.source_path(manifest.root))
        if result is None or not _report(result):
            status = 1
            continue
        output = target.output_path(manifest.root)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(result.code, encoding="utf-8")
        print(f"{target.source} -> {target.output}")
    return status


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="faultline", description="Generate Python error types from declarations"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    generate = sub.add_parser("generate", help="Generate the module for one source file")
    generate.add_argument("source", help="Declaration source (.fl)")
    generate.add_argument("-o", "--output", help="Output module (default: stdout)")
    generate.set_defaults(handler=cmd_generate)

    check = sub.add_parser("check", help="Report diagnostics without writing anything")
    check.add_argument("sources", nargs="+", help="Declaration sources (.fl)")
    check.set_defaults(handler=cmd_check)

    build = sub.add_parser("build", help="Generate every target of a manifest")
    build.add_argument("manifest", nargs="?", default="faultline.yaml", help="Manifest file")
    build.set_defaults(handler=cmd_build)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the command line using settings from environment / .env file."""
    settings = Settings()
    logging.basicConfig(level=settings.log_level.upper())
    args = build_parser().parse_args(argv)
    return args.handler(args, GenerationPipeline(settings))


if __name__ == "__main__":
    sys.exit(main())
