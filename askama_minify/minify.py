from __future__ import annotations

from enum import Enum
import logging
import re
import string
from typing import Callable, Iterator

from askama_minify.css import Unchanged, minify_css_result
from askama_minify.js import minify_js


_LOGGER = logging.getLogger(__name__)

DIRECTIVE_DELIMITERS = {"{{": "}}", "{%": "%}", "{#": "#}"}
_DIRECTIVE_OPENERS = tuple(DIRECTIVE_DELIMITERS)
_COMMENT_OPEN = "<!--"
_COMMENT_CLOSE = "-->"
_EMBEDDED_TAGS = frozenset({"script", "style"})
_VERBATIM_TAGS = frozenset({"pre", "textarea"})
# Elements whose descendants honour the self-closing "/>" syntax.
_FOREIGN_TAGS = frozenset({"svg", "math"})

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)
_TAG_NAME = re.compile(r"/?(?:[^\s>/{]|\{(?![{%#]))*")
_WHITESPACE = re.compile(r"\s+")
_TEXT_RUN = re.compile(r"[^\s<{]+")
_VERBATIM_RUN = re.compile(r"[^<{]+")
_TAG_RUN = re.compile(r"[^\s<>{]+")
_VERBATIM_TAG_RUN = re.compile(r"[^<>{]+")


class State(Enum):
    TEXT = "text"
    TAG = "tag"
    COMMENT = "comment"
    DIRECTIVE = "directive"


def _directive_end(text: str, pos: int) -> int:
    """Return the index just past the directive opened at ``pos``, or -1."""
    closer = DIRECTIVE_DELIMITERS[text[pos : pos + 2]]
    end = text.find(closer, pos + 2)
    return -1 if end == -1 else end + len(closer)


def _iter_directives(text: str) -> Iterator[tuple[int, int]]:
    """Yield ``(start, end)`` of every closed directive span in ``text``.

    An opener that is never closed is ordinary text, so ``{#`` in a private
    class field or ``{{`` in nested blocks does not swallow the rest.
    """
    pos = 0
    while (pos := text.find("{", pos)) != -1:
        if text.startswith(_DIRECTIVE_OPENERS, pos):
            end = _directive_end(text, pos)
            if end != -1:
                yield pos, end
                pos = end
                continue
        pos += 1


def find_body_end(text: str, pos: int, name: str) -> int:
    """Return the index of the ``</name`` tag that closes a script/style body.

    The first ``</name`` followed by whitespace, ``/``, ``>`` or the end of
    input wins, even when it sits inside a template directive. Without a
    closing tag the body runs to the end of the input.
    """
    closer = f"</{name}"
    length = len(text)
    while (pos := text.find("</", pos)) != -1:
        after = pos + len(closer)
        if text[pos:after].translate(_ASCII_LOWER) == closer and (
            after >= length or text[after].isspace() or text[after] in "/>"
        ):
            return pos
        pos += 1
    return length


def _protect_directives(body: str) -> tuple[str, str, list[str]]:
    prefix = "__askama_"
    while prefix in body:
        prefix = f"_{prefix}"
    parts: list[str] = []
    spans: list[str] = []
    pos = 0
    for start, end in _iter_directives(body):
        parts.append(body[pos:start])
        parts.append(f"{prefix}{len(spans)}__")
        spans.append(body[start:end])
        pos = end
    parts.append(body[pos:])
    return "".join(parts), prefix, spans


def minify_script_body(body: str) -> str:
    protected, prefix, spans = _protect_directives(body)
    minified = minify_js(protected)
    if not spans:
        return minified

    placeholder = re.compile(re.escape(prefix) + r"(\d+)__")
    found = sorted(int(index) for index in placeholder.findall(minified))
    if found != list(range(len(spans))):
        _LOGGER.debug(
            "Template directive lost while minifying script; leaving it as-is."
        )
        return body
    return placeholder.sub(lambda match: spans[int(match.group(1))], minified)


def minify_style_body(body: str) -> str:
    if next(_iter_directives(body), None) is not None:
        _LOGGER.debug("Style body contains template directives; leaving it as-is.")
        return body
    result = minify_css_result(body)
    if isinstance(result, Unchanged):
        _LOGGER.debug("Style body left unchanged: %s", result.reason)
    return result.text


class MarkupScanner:
    """Single-pass minifier for one markup document.

    The scanner is a small automaton over ``State``. Each handler consumes
    input starting at ``_pos`` and returns the next state. Script and style
    bodies are not states of their own: when their opening tag closes, the
    whole body up to the matching closing tag is collected by
    ``find_body_end`` and replaced with its minified form. Open ``pre`` and
    ``textarea`` elements are tracked on a stack and switch text and tag
    handling to verbatim output. ``svg``/``math`` nesting is counted because
    only there does ``<script/>`` close itself.
    """

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0
        self._out: list[str] = []
        self._state = State.TEXT
        self._resume = State.TEXT
        self._last_was_space = False
        self._tag_name = ""
        self._verbatim: list[str] = []
        self._foreign_depth = 0
        self._handlers: dict[State, Callable[[], State]] = {
            State.TEXT: self._scan_text,
            State.TAG: self._scan_tag,
            State.COMMENT: self._scan_comment,
            State.DIRECTIVE: self._scan_directive,
        }

    @property
    def state(self) -> State:
        return self._state

    @property
    def in_verbatim(self) -> bool:
        return bool(self._verbatim)

    def run(self) -> str:
        while self._pos < len(self._text):
            self._state = self._handlers[self._state]()
        return "".join(self._out)

    def _emit(self, chunk: str) -> None:
        if chunk:
            self._out.append(chunk)
            self._last_was_space = False

    def _emit_space(self) -> None:
        if not self._last_was_space and self._out:
            self._out.append(" ")
            self._last_was_space = True

    def _enter_directive(self, resume: State) -> State:
        self._resume = resume
        return State.DIRECTIVE

    def _enter_comment(self, resume: State) -> State:
        if not self._verbatim:
            self._resume = resume
            return State.COMMENT
        # Comments inside pre/textarea are content.
        text, pos = self._text, self._pos
        end = text.find(_COMMENT_CLOSE, pos + 2)
        end = len(text) if end == -1 else end + len(_COMMENT_CLOSE)
        self._emit(text[pos:end])
        self._pos = end
        return resume

    def _scan_text(self) -> State:
        text, pos = self._text, self._pos
        if text.startswith(_DIRECTIVE_OPENERS, pos):
            return self._enter_directive(State.TEXT)
        if text.startswith(_COMMENT_OPEN, pos):
            return self._enter_comment(State.TEXT)
        if text[pos] == "<":
            return self._open_tag()

        if self._verbatim:
            match = _VERBATIM_RUN.match(text, pos)
        elif match := _WHITESPACE.match(text, pos):
            self._emit_space()
            self._pos = match.end()
            return State.TEXT
        else:
            match = _TEXT_RUN.match(text, pos)

        end = match.end() if match and match.end() > pos else pos + 1
        self._emit(text[pos:end])
        self._pos = end
        return State.TEXT

    def _open_tag(self) -> State:
        text = self._text
        start = self._pos + 1
        if text.startswith("!", start):
            # Declarations such as <!DOCTYPE> keep their original case.
            self._emit("<!")
            self._pos = start + 1
            self._tag_name = "!"
            return State.TAG

        match = _TAG_NAME.match(text, start)
        name = match.group().translate(_ASCII_LOWER)
        self._pos = match.end()
        if (
            name.startswith("/")
            and self._verbatim
            and self._verbatim[-1] == name[1:]
        ):
            self._verbatim.pop()
        self._emit(f"<{name}")
        self._tag_name = name
        return State.TAG

    def _scan_tag(self) -> State:
        text, pos = self._text, self._pos
        if text.startswith(_DIRECTIVE_OPENERS, pos):
            return self._enter_directive(State.TAG)
        if text.startswith(_COMMENT_OPEN, pos):
            return self._enter_comment(State.TAG)
        ch = text[pos]
        if ch == ">":
            self_closing = bool(self._out) and self._out[-1].endswith("/")
            self._emit(">")
            self._pos = pos + 1
            return self._close_tag(self_closing)
        if ch == "<":
            return self._open_tag()

        if self._verbatim:
            match = _VERBATIM_TAG_RUN.match(text, pos)
        elif match := _WHITESPACE.match(text, pos):
            self._emit_space()
        else:
            match = _TAG_RUN.match(text, pos)
        end = match.end() if match and match.end() > pos else pos + 1
        if self._verbatim or not ch.isspace():
            self._emit(text[pos:end])
        self._pos = end
        return State.TAG

    def _close_tag(self, self_closing: bool) -> State:
        name, self._tag_name = self._tag_name, ""
        if name in _FOREIGN_TAGS and not self_closing:
            self._foreign_depth += 1
        elif name[1:] in _FOREIGN_TAGS and name.startswith("/"):
            self._foreign_depth = max(self._foreign_depth - 1, 0)
        if self_closing and self._foreign_depth:
            return State.TEXT
        if name in _EMBEDDED_TAGS:
            self._consume_body(name)
        elif name in _VERBATIM_TAGS:
            self._verbatim.append(name)
        return State.TEXT

    def _consume_body(self, name: str) -> None:
        start = self._pos
        end = find_body_end(self._text, start, name)
        body = self._text[start:end]
        self._pos = end
        if end == len(self._text):
            # Unterminated body is kept as written.
            self._emit(body)
            return
        if not body.strip():
            return
        if name == "script":
            self._emit(minify_script_body(body))
        else:
            self._emit(minify_style_body(body))

    def _scan_comment(self) -> State:
        end = self._text.find(_COMMENT_CLOSE, self._pos + 2)
        self._pos = len(self._text) if end == -1 else end + len(_COMMENT_CLOSE)
        return self._resume

    def _scan_directive(self) -> State:
        end = _directive_end(self._text, self._pos)
        if end == -1:
            end = len(self._text)
        self._emit(self._text[self._pos : end])
        self._pos = end
        return self._resume


def minify_markup(text: str) -> str:
    return MarkupScanner(text).run()
