"""CLI entrypoints for cemgen commands."""

from __future__ import annotations

import argparse
import threading
from pathlib import Path

from .config import FRAMEWORK_FLAGS, CemConfig, DependencyConfig, load_config
from .diagnostics import AnalysisError, ManifestValidationError, NoAnalyzableModulesError
from .logging import configure_logging, get_logger, log_diagnostics
from .orchestrator import Orchestrator
from .packages import dependency_names
from .watcher import ManifestWatcher
from .writer import manifest_path

logger = get_logger("cli")


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


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cemgen",
        description="Generate a custom elements manifest for JavaScript and TypeScript sources.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze your components and write custom-elements.json.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    analyze_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    analyze_parser.add_argument(
        "--config",
        help="Path to a custom config file (defaults to <path>/.cemgen.yml).",
    )
    analyze_parser.add_argument(
        "--globs",
        nargs="+",
        default=[],
        help="Globs to analyze.",
    )
    analyze_parser.add_argument(
        "--exclude",
        nargs="+",
        default=[],
        help="Globs to exclude.",
    )
    analyze_parser.add_argument(
        "--outdir",
        help="Directory to output the manifest to.",
    )
    analyze_parser.add_argument(
        "--dependencies",
        nargs="*",
        metavar="NAME",
        help="Include third party manifests; without names, every package.json dependency is tried.",
    )
    analyze_parser.add_argument(
        "--watch",
        action="store_true",
        help="Re-run the analysis when source files change.",
    )
    analyze_parser.add_argument(
        "--dev",
        action="store_true",
        help="Enable debug logging.",
    )
    analyze_parser.add_argument(
        "--no-packagejson",
        dest="packagejson",
        action="store_false",
        default=None,
        help="Do not set customElements in package.json.",
    )
    for flag in FRAMEWORK_FLAGS:
        analyze_parser.add_argument(
            f"--{flag}",
            action="store_true",
            help=f"Enable the {flag} plugin.",
        )
    return parser


def _apply_overrides(config: CemConfig, args: argparse.Namespace) -> CemConfig:
    if args.outdir is not None:
        config.outdir = args.outdir
    if args.packagejson is not None:
        config.packagejson = args.packagejson
    if args.dev:
        config.dev = True
    if args.watch:
        config.watch = True
    for flag in FRAMEWORK_FLAGS:
        if getattr(args, flag, False):
            setattr(config, flag, True)
    if args.dependencies is not None:
        names = args.dependencies or dependency_names(config.root)
        known = {dependency.name for dependency in config.dependencies}
        config.dependencies.extend(DependencyConfig(name=name) for name in names if name not in known)
    return config


def _load_config(args: argparse.Namespace) -> CemConfig:
    root = Path(args.path).expanduser().resolve()
    config = load_config(Path(args.config) if args.config else root)
    config.root = root
    return _apply_overrides(config, args)


def _watch(orchestrator: Orchestrator) -> None:
    config = orchestrator.config
    watcher = ManifestWatcher(
        orchestrator.root,
        orchestrator.globs,
        lambda changed: orchestrator.run(changed),
        debounce_seconds=config.debounce_seconds,
    )
    stop = threading.Event()
    with watcher:
        try:
            stop.wait()
        except KeyboardInterrupt:
            logger.info("Stopping watch mode")


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for cemgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command != "analyze":  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")

    try:
        config = _load_config(args)
        configure_logging(verbose=bool(args.verbose), dev=config.dev)
        orchestrator = Orchestrator(config, globs=args.globs, exclude=args.exclude)
        result = orchestrator.run()
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except ManifestValidationError as exc:
        log_diagnostics(logger, exc.diagnostics())
        parser.exit(1, f"cemgen analyze failed: {exc}\n")
    except NoAnalyzableModulesError as exc:
        log_diagnostics(logger, exc.diagnostics)
        parser.exit(1, f"cemgen analyze failed: {exc}\n")
    except AnalysisError as exc:
        parser.exit(1, f"cemgen analyze failed: {exc}\nRun with --verbose for more details.\n")

    if result is not None:
        print(f"Manifest written to {_relativize(manifest_path(config.root, config.outdir))}")

    if config.watch:
        _watch(orchestrator)


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


__all__ = ["main"]
