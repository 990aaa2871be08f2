from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable
import logging

from askama_minify.minify import minify_markup

DEFAULT_SUFFIX = "min"
DEFAULT_EXTENSIONS = ("html", "htm", "xml", "svg")
_LOGGER = logging.getLogger(__name__)


def calculate_reduction_percent(original_size: int, minified_size: int) -> int:
    if original_size <= 0:
        return 0
    return int((original_size - minified_size) / original_size * 100)


@dataclass(frozen=True)
class FileResult:
    input_path: Path
    output_path: Path
    original_size: int
    minified_size: int

    @property
    def reduction_percent(self) -> int:
        return calculate_reduction_percent(self.original_size, self.minified_size)

    def describe(self) -> str:
        return (
            f"Minified: {self.input_path} -> {self.output_path} "
            f"({self.original_size} -> {self.minified_size} bytes, "
            f"-{self.reduction_percent}%)"
        )


@dataclass
class RunSummary:
    succeeded: int = 0
    failed: int = 0
    original_size: int = 0
    minified_size: int = 0

    @property
    def reduction_percent(self) -> int:
        return calculate_reduction_percent(self.original_size, self.minified_size)

    def record(self, result: FileResult) -> None:
        self.succeeded += 1
        self.original_size += result.original_size
        self.minified_size += result.minified_size

    def describe(self) -> str:
        sizes = (
            f"{self.original_size} -> {self.minified_size} bytes, "
            f"total reduction: {self.reduction_percent}%"
        )
        if self.failed:
            total = self.succeeded + self.failed
            return (
                f"Processed {total} files: {self.succeeded} succeeded, "
                f"{self.failed} failed ({sizes})"
            )
        return f"Minified {self.succeeded} files ({sizes})"


def _normalize_extensions(extensions: Iterable[str]) -> set[str]:
    return {extension.lower().lstrip(".") for extension in extensions}


def is_template_file(
    path: Path,
    suffix: str = DEFAULT_SUFFIX,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> bool:
    name = path.name
    if not name or f".{suffix}." in name:
        return False
    return path.suffix[1:].lower() in _normalize_extensions(extensions)


def generate_output_path(path: Path, suffix: str) -> Path:
    stem = path.stem
    if not path.name or not stem:
        raise ValueError(f"Invalid file name: {path}")
    return path.with_name(f"{stem}.{suffix}{path.suffix}")


def discover_templates(
    root: Path,
    *,
    recursive: bool = True,
    suffix: str = DEFAULT_SUFFIX,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> list[Path]:
    if not root.is_dir():
        raise NotADirectoryError(f"{root} is not a directory")

    _LOGGER.info("Scanning for templates: %s", root.as_posix())
    candidates = root.rglob("*") if recursive else root.iterdir()
    extension_set = _normalize_extensions(extensions)
    files = [
        path
        for path in sorted(candidates, key=lambda item: item.as_posix())
        if path.is_file() and is_template_file(path, suffix, extension_set)
    ]
    _LOGGER.info("Discovered %d template files", len(files))
    return files


def minify_file(input_path: Path, output_path: Path) -> FileResult:
    raw = input_path.read_bytes()
    if not raw:
        minified = b""
    else:
        minified = minify_markup(raw.decode("utf-8")).encode("utf-8")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(minified)
    _LOGGER.debug("Wrote %s", output_path.as_posix())
    return FileResult(input_path, output_path, len(raw), len(minified))


def process_single_file(
    path: Path, output: Path | None = None, suffix: str | None = None
) -> FileResult:
    if output is not None:
        output_path = output
    else:
        output_path = generate_output_path(path, suffix or DEFAULT_SUFFIX)
    result = minify_file(path, output_path)
    print(result.describe())
    return result


def _directory_output_path(
    file_path: Path, root: Path, output: Path | None, suffix: str | None
) -> Path:
    if output is None:
        return generate_output_path(file_path, suffix or DEFAULT_SUFFIX)
    target = output / file_path.relative_to(root)
    # A mirrored tree only gets a suffix when one was asked for.
    if suffix:
        return generate_output_path(target, suffix)
    return target


def process_directory(
    path: Path,
    output: Path | None = None,
    suffix: str | None = None,
    recursive: bool = True,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> RunSummary:
    templates = discover_templates(
        path,
        recursive=recursive,
        suffix=suffix or DEFAULT_SUFFIX,
        extensions=extensions,
    )
    if output is not None:
        output.mkdir(parents=True, exist_ok=True)

    summary = RunSummary()
    for file_path in templates:
        try:
            output_path = _directory_output_path(file_path, path, output, suffix)
            result = minify_file(file_path, output_path)
        except (OSError, ValueError) as exc:
            _LOGGER.error("Failed to minify %s: %s", file_path.as_posix(), exc)
            summary.failed += 1
            continue
        print(result.describe())
        summary.record(result)

    print()
    print(summary.describe())
    return summary
