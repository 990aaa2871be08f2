#!/usr/bin/env python3

import argparse
import logging
import sys
from pathlib import Path

from askama_minify.config import MinifyConfig, load_config
from askama_minify.files import (
    DEFAULT_EXTENSIONS,
    FileResult,
    RunSummary,
    process_directory,
    process_single_file,
)


_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
_LOG_LEVEL_MAP = {name: getattr(logging, name) for name in _LOG_LEVELS}
_LOGGER = logging.getLogger(__name__)


def _resolve_log_level(log_level: str | None, verbose: int, quiet: int) -> int:
    if log_level:
        return _LOG_LEVEL_MAP[log_level]

    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    if quiet == 1:
        level = logging.ERROR
    elif quiet >= 2:
        level = logging.CRITICAL
    return level


def _configure_logging(level: int) -> None:
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(message)s",
    )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="askama-minify",
        description=(
            "Minify HTML templates while keeping template directives intact."
        ),
    )
    parser.add_argument(
        "path",
        type=Path,
        metavar="PATH",
        help="Template file or directory to minify.",
    )
    parser.add_argument(
        "-r",
        "--recursive",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Descend into subdirectories (default: enabled).",
    )
    parser.add_argument(
        "-d",
        "--output",
        type=Path,
        help="Output file or directory. Must not exist yet.",
    )
    parser.add_argument(
        "-s",
        "--suffix",
        help=(
            "Suffix inserted before the extension, e.g. 'min' writes .min.html. "
            "With --output and no suffix, names are kept as-is."
        ),
    )
    parser.add_argument(
        "--config",
        type=Path,
        metavar="FILE",
        help="YAML file with defaults for suffix, recursive and extensions.",
    )
    parser.add_argument(
        "--log-level",
        choices=_LOG_LEVELS,
        help="Set log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (use -v for DEBUG).",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="count",
        default=0,
        help="Reduce output (use -q for ERROR, -qq for CRITICAL).",
    )
    return parser.parse_args(argv)


def run(
    path: Path,
    *,
    output: Path | None = None,
    suffix: str | None = None,
    recursive: bool = True,
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
) -> FileResult | RunSummary:
    if not path.exists():
        raise FileNotFoundError(f"Path does not exist: {path}")
    if output is not None and output.exists():
        raise FileExistsError(f"Output path already exists: {output}")

    if path.is_file():
        _LOGGER.info("Minifying file %s", path.as_posix())
        return process_single_file(path, output, suffix)
    _LOGGER.info(
        "Minifying directory %s (recursive=%s)", path.as_posix(), recursive
    )
    return process_directory(path, output, suffix, recursive, extensions)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    _configure_logging(_resolve_log_level(args.log_level, args.verbose, args.quiet))
    try:
        config = load_config(args.config) if args.config else MinifyConfig()
        config = config.merged(suffix=args.suffix, recursive=args.recursive)
        run(
            args.path,
            output=args.output,
            suffix=config.suffix,
            recursive=config.recursive,
            extensions=config.extensions,
        )
    except (FileNotFoundError, FileExistsError, NotADirectoryError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
