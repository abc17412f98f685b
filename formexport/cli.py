"""CLI entrypoints for formexport commands."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Dict, List

from .config import load_settings, parse_form_config, parse_network_config, read_document
from .errors import ExportError
from .logging import configure_logging
from .models import ENVIRONMENTS, ExportOptions, FileMap
from .orchestrator import PACKAGE_JSON_PATH, ExportPipeline


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_logging_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Only log warnings and errors to the console.",
    )
    parser.add_argument(
        "--log-file",
        default=argparse.SUPPRESS,
        help="Also write debug-level logs to this file.",
    )


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=".",
        help="Directory containing .formexport.yml (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="formexport",
        description="Assemble standalone projects from contract form configurations.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser(
        "export",
        help="Export a form configuration as a runnable project.",
    )
    _add_verbose_option(export_parser, suppress_default=True)
    _add_logging_options(export_parser)
    _add_config_option(export_parser)
    export_parser.add_argument("--form", required=True, help="Form configuration (JSON or YAML).")
    export_parser.add_argument("--network", required=True, help="Network configuration (JSON or YAML).")
    export_parser.add_argument(
        "--base-package-json",
        help="package.json template to rewrite (defaults to a minimal Vite project).",
    )
    export_parser.add_argument(
        "--env",
        choices=ENVIRONMENTS,
        default=None,
        help="Versioning environment (defaults to the value in .formexport.yml).",
    )
    export_parser.add_argument("--project-name", help="Name written to package.json.")
    export_parser.add_argument("--description", help="Description written to package.json.")
    export_parser.add_argument("--author", help="Author written to package.json.")
    export_parser.add_argument("--license", help="License written to package.json.")
    export_parser.add_argument(
        "--packed",
        action="append",
        default=[],
        metavar="NAME=TARBALL",
        help="Tarball for a packed package; repeat for each package (env=packed).",
    )
    export_parser.add_argument(
        "--output",
        default="./exports/app",
        help="Directory the exported files are written to.",
    )
    export_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List exported paths without writing them.",
    )

    ecosystems_parser = subparsers.add_parser(
        "ecosystems",
        help="List ecosystems with adapter sources available for export.",
    )
    _add_verbose_option(ecosystems_parser, suppress_default=True)
    _add_logging_options(ecosystems_parser)
    _add_config_option(ecosystems_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for formexport commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = getattr(args, "log_file", None)
    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(getattr(args, "quiet", False)),
        log_file=Path(log_file) if log_file else None,
    )

    try:
        settings = load_settings(Path(args.config))
        pipeline = ExportPipeline.from_settings(settings)
    except (ExportError, OSError) as exc:
        parser.exit(1, f"formexport: {exc}\n")

    if args.command == "ecosystems":
        ecosystems = asyncio.run(pipeline.list_ecosystems())
        for name in ecosystems:
            print(name)
        return

    if args.command == "export":
        try:
            options = _build_options(args, default_env=settings.env)
            form = parse_form_config(read_document(Path(args.form)))
            network = parse_network_config(read_document(Path(args.network)))
            base_files: FileMap = {}
            if args.base_package_json:
                base_files[PACKAGE_JSON_PATH] = Path(args.base_package_json).read_text(encoding="utf-8")
            result = pipeline.run(form, network, options, base_files=base_files)
        except (ExportError, ValueError, OSError) as exc:
            parser.exit(1, f"formexport export failed: {exc}\nRun with --verbose for more details.\n")

        if args.dry_run:
            for path in sorted(result.files):
                print(path)
            return
        target = Path(args.output)
        written = write_files(target, result.files)
        print(f"Exported {len(written)} files to {_relativize(target)}")
        return

    parser.exit(1, "Unknown command\n")  # pragma: no cover - argparse enforces choices


def _build_options(args: argparse.Namespace, *, default_env: str) -> ExportOptions:
    return ExportOptions(
        env=args.env or default_env,
        project_name=args.project_name,
        description=args.description,
        author=args.author,
        license=args.license,
        packed_tarball_map=_parse_packed(args.packed),
    )


def _parse_packed(entries: List[str]) -> Dict[str, str]:
    packed: Dict[str, str] = {}
    for entry in entries:
        # Split on the last '=' so scoped names stay intact.
        name, sep, tarball = entry.rpartition("=")
        if not sep or not name or not tarball:
            raise ValueError(f"--packed expects NAME=TARBALL, got '{entry}'")
        packed[name] = tarball
    return packed


def write_files(target: Path, files: FileMap) -> List[Path]:
    """Write ``files`` beneath ``target``, creating directories as needed."""
    written: List[Path] = []
    for relative, content in sorted(files.items()):
        path = target / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        written.append(path)
    return written


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
