from __future__ import annotations

_LINE_TERMINATORS = frozenset("\n\r\u2028\u2029")
_QUOTES = frozenset("'\"")
_COMMENT_OPENERS = ("//", "/*")

# A "/" after one of these words starts a regular expression, not a division.
_REGEX_KEYWORDS = frozenset(
    {
        "await",
        "case",
        "delete",
        "do",
        "else",
        "in",
        "instanceof",
        "new",
        "of",
        "return",
        "throw",
        "typeof",
        "void",
        "yield",
    }
)

# Last character of a token after which a line break may terminate a statement.
_ASI_BEFORE = frozenset(")]}'\"`+-/")
# First character of a token that may begin the next statement.
_ASI_AFTER = frozenset("([{'\"`+-/!~")
# Adjacent characters that would lex as a different token once joined.
_MERGING_PAIRS = frozenset({"++", "--", "//", "/*"})


def _is_identifier_char(ch: str) -> bool:
    if ch.isascii():
        return ch.isalnum() or ch in "_$\\"
    return not ch.isspace()


def _skip_word(js: str, pos: int) -> int:
    end = pos
    while end < len(js) and _is_identifier_char(js[end]):
        end += 1
    return end


def _skip_string(js: str, pos: int) -> int:
    quote = js[pos]
    end = pos + 1
    length = len(js)
    while end < length:
        ch = js[end]
        if ch == "\\":
            end += 2
        elif ch == quote:
            return end + 1
        elif ch in "\n\r":
            # Unterminated literal; the line break is left to the caller.
            return end
        else:
            end += 1
    return length


def _skip_substitution(js: str, pos: int) -> int:
    depth = 1
    length = len(js)
    while pos < length:
        ch = js[pos]
        if ch in _QUOTES:
            pos = _skip_string(js, pos)
        elif ch == "`":
            pos = _skip_template(js, pos)
        else:
            pos += 1
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return pos
    return length


def _skip_template(js: str, pos: int) -> int:
    end = pos + 1
    length = len(js)
    while end < length:
        ch = js[end]
        if ch == "\\":
            end += 2
        elif ch == "`":
            return end + 1
        elif ch == "$" and js.startswith("{", end + 1):
            end = _skip_substitution(js, end + 2)
        else:
            end += 1
    return length


def _skip_regex(js: str, pos: int) -> int:
    end = pos + 1
    length = len(js)
    in_class = False
    while end < length:
        ch = js[end]
        if ch in _LINE_TERMINATORS:
            return end
        end += 1
        if ch == "\\":
            end += 1
        elif ch == "[":
            in_class = True
        elif ch == "]":
            in_class = False
        elif ch == "/" and not in_class:
            break
    return _skip_word(js, end) if end < length else length


def _skip_gap(js: str, pos: int) -> tuple[int, bool]:
    """Skip whitespace and comments, reporting whether a line break was crossed."""
    length = len(js)
    newline = False
    while pos < length:
        ch = js[pos]
        if ch.isspace():
            newline = newline or ch in _LINE_TERMINATORS
            pos += 1
        elif js.startswith("//", pos):
            pos += 2
            while pos < length and js[pos] not in _LINE_TERMINATORS:
                pos += 1
        elif js.startswith("/*", pos):
            end = js.find("*/", pos + 2)
            if end == -1:
                return length, newline
            newline = newline or any(c in _LINE_TERMINATORS for c in js[pos:end])
            pos = end + 2
        else:
            break
    return pos, newline


def _separator(last: str, nxt: str, newline: bool, after_regex: bool) -> str:
    if not last:
        return ""
    last_ident = _is_identifier_char(last)
    next_ident = _is_identifier_char(nxt)
    if (
        newline
        and (last_ident or last in _ASI_BEFORE)
        and (next_ident or nxt in _ASI_AFTER)
    ):
        return "\n"
    if next_ident and (last_ident or after_regex):
        return " "
    if last + nxt in _MERGING_PAIRS:
        return " "
    if last.isdigit() and nxt == ".":
        return " "
    return ""


def minify_js(js: str) -> str:
    """Strip comments and insignificant whitespace from a script body.

    String, template and regular expression literals are copied verbatim. A
    "/" is read as the start of a regular expression when it follows an
    operator, an opening bracket, a "}" or one of the keywords in
    ``_REGEX_KEYWORDS``; after an identifier, a literal, ")" or "]" it is a
    division. Line breaks are kept wherever automatic semicolon insertion
    could depend on them.
    """
    out: list[str] = []
    last = ""
    regex_allowed = True
    after_regex = False
    pos = 0
    length = len(js)

    while pos < length:
        ch = js[pos]
        if ch.isspace() or js.startswith(_COMMENT_OPENERS, pos):
            pos, newline = _skip_gap(js, pos)
            if pos < length:
                out.append(_separator(last, js[pos], newline, after_regex))
            continue

        after_regex = False
        if ch in _QUOTES:
            end = _skip_string(js, pos)
            regex_allowed = False
        elif ch == "`":
            end = _skip_template(js, pos)
            regex_allowed = False
        elif ch == "/" and regex_allowed:
            end = _skip_regex(js, pos)
            regex_allowed = False
            after_regex = True
        elif _is_identifier_char(ch):
            end = _skip_word(js, pos)
            regex_allowed = js[pos:end] in _REGEX_KEYWORDS
        else:
            end = pos + 1
            if ch in ")]":
                regex_allowed = False
            elif ch in "+-" and pos > 0 and js[pos - 1] == ch:
                regex_allowed = False
            else:
                regex_allowed = True

        out.append(js[pos:end])
        last = js[end - 1]
        pos = end

    return "".join(out)
