from __future__ import annotations

from dataclasses import dataclass
import logging

import minify_html


_LOGGER = logging.getLogger(__name__)
_STYLE_PREFIX = "<style>"
_STYLE_SUFFIX = "</style>"


@dataclass(frozen=True)
class CssResult:
    text: str

    def __post_init__(self) -> None:
        if type(self) is CssResult:
            raise TypeError("CssResult cannot be instantiated directly.")

    @property
    def minified(self) -> bool:
        return isinstance(self, Minified)


@dataclass(frozen=True)
class Minified(CssResult):
    pass


@dataclass(frozen=True)
class Unchanged(CssResult):
    reason: str = ""


def minify_css_result(css: str) -> CssResult:
    """Minify a stylesheet fragment, reporting whether anything was done.

    The fragment is parsed and re-serialized by lightningcss through
    ``minify_html``. Whenever the backend raises, returns something other than
    the wrapped stylesheet, or cannot make the fragment smaller, the original
    text is returned untouched as ``Unchanged``.
    """
    if not css.strip():
        return Unchanged(css, "empty stylesheet")

    wrapped = f"{_STYLE_PREFIX}{css}{_STYLE_SUFFIX}"
    try:
        minified = minify_html.minify(
            wrapped,
            minify_css=True,
            keep_closing_tags=True,
            keep_html_and_head_opening_tags=True,
        )
    except Exception:
        _LOGGER.exception("Failed to minify CSS; leaving output as-is.")
        return Unchanged(css, "minifier error")

    if not (minified.startswith(_STYLE_PREFIX) and minified.endswith(_STYLE_SUFFIX)):
        _LOGGER.warning(
            "CSS minifier returned unexpected wrapper; leaving output as-is."
        )
        return Unchanged(css, "unexpected wrapper")

    body = minified[len(_STYLE_PREFIX) : -len(_STYLE_SUFFIX)]
    if body == css:
        return Unchanged(css, "not parsed or already minimal")
    if len(body) > len(css):
        return Unchanged(css, "minified output is larger")
    return Minified(body)


def minify_css(css: str) -> str:
    return minify_css_result(css).text
