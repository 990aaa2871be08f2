from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import logging

import yaml

from askama_minify.files import DEFAULT_EXTENSIONS

_KNOWN_KEYS = {"suffix", "recursive", "extensions"}
_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class MinifyConfig:
    suffix: str | None = None
    recursive: bool = True
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS

    def merged(
        self, *, suffix: str | None = None, recursive: bool | None = None
    ) -> MinifyConfig:
        return MinifyConfig(
            suffix=suffix if suffix is not None else self.suffix,
            recursive=recursive if recursive is not None else self.recursive,
            extensions=self.extensions,
        )


def _parse_suffix(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip(".") or "/" in value:
        raise ValueError(f"Invalid suffix: {value!r}")
    return value.strip(".")


def _parse_extensions(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not value:
        raise ValueError(f"Invalid extensions: {value!r}")
    extensions = []
    for item in value:
        if not isinstance(item, str) or not item.lstrip("."):
            raise ValueError(f"Invalid extension entry: {item!r}")
        extensions.append(item.lower().lstrip("."))
    return tuple(extensions)


def parse_config(meta: object) -> MinifyConfig:
    if meta is None:
        return MinifyConfig()
    if not isinstance(meta, dict):
        raise ValueError("Invalid config: expected a mapping.")

    unknown = sorted(str(key) for key in set(meta) - _KNOWN_KEYS)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

    recursive = meta.get("recursive", True)
    if not isinstance(recursive, bool):
        raise ValueError(f"Invalid recursive: {recursive!r}")

    return MinifyConfig(
        suffix=_parse_suffix(meta.get("suffix")),
        recursive=recursive,
        extensions=_parse_extensions(meta.get("extensions", list(DEFAULT_EXTENSIONS))),
    )


def load_config(path: Path) -> MinifyConfig:
    try:
        meta = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid config file {path}: {exc}") from exc
    config = parse_config(meta)
    _LOGGER.debug("Loaded config from %s: %s", path.as_posix(), config)
    return config
