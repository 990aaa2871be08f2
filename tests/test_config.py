from pathlib import Path

import pytest

from askama_minify.config import MinifyConfig, load_config, parse_config
from askama_minify.files import DEFAULT_EXTENSIONS


def test_parse_config_defaults() -> None:
    assert parse_config(None) == MinifyConfig()
    assert parse_config({}) == MinifyConfig(
        suffix=None, recursive=True, extensions=DEFAULT_EXTENSIONS
    )


def test_parse_config_values() -> None:
    config = parse_config(
        {"suffix": ".small", "recursive": False, "extensions": [".HTML", "j2"]}
    )

    assert config == MinifyConfig(
        suffix="small", recursive=False, extensions=("html", "j2")
    )


def test_parse_config_single_extension() -> None:
    assert parse_config({"extensions": "jinja"}).extensions == ("jinja",)


@pytest.mark.parametrize(
    ("meta", "message"),
    [
        (["a", "b"], "expected a mapping"),
        ({"output": "dist"}, "Unknown config keys: output"),
        ({"recursive": "yes"}, "Invalid recursive"),
        ({"suffix": 3}, "Invalid suffix"),
        ({"suffix": "a/b"}, "Invalid suffix"),
        ({"extensions": []}, "Invalid extensions"),
        ({"extensions": ["html", 4]}, "Invalid extension entry"),
    ],
)
def test_parse_config_rejects_invalid(meta: object, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        parse_config(meta)


def test_merged_prefers_explicit_values() -> None:
    config = MinifyConfig(suffix="small", recursive=False)

    assert config.merged() == config
    assert config.merged(suffix="min", recursive=True) == MinifyConfig(
        suffix="min", recursive=True
    )


def test_load_config(tmp_path: Path) -> None:
    path = tmp_path / "minify.yaml"
    path.write_text("suffix: tiny\nextensions:\n  - html\n", encoding="utf-8")

    assert load_config(path) == MinifyConfig(suffix="tiny", extensions=("html",))


def test_load_config_empty_file(tmp_path: Path) -> None:
    path = tmp_path / "minify.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(path) == MinifyConfig()


def test_load_config_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "minify.yaml"
    path.write_text("suffix: [unclosed\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid config file"):
        load_config(path)
