import pytest

from askama_minify.js import minify_js


def test_minify_js_basic() -> None:
    js = "function test() { return 42; }"

    result = minify_js(js)

    assert result == "function test(){return 42;}"
    assert len(result) <= len(js)


def test_empty_input() -> None:
    assert minify_js("") == ""
    assert minify_js("  \n\t ") == ""


def test_identifiers_keep_one_space() -> None:
    assert minify_js("var    café   =  typeof  x") == "var café=typeof x"


@pytest.mark.parametrize(
    ("js", "expected"),
    [
        ('var s = "a  //  b";  // note', 'var s="a  //  b";'),
        ("x = 'it\\'s  ok'; y = 1", "x='it\\'s  ok';y=1"),
        ('var s = "a\\\\"; var t = 1;', 'var s="a\\\\";var t=1;'),
        ('var u = "http://x.y/*z*/"; // c', 'var u="http://x.y/*z*/";'),
    ],
)
def test_strings_are_copied_verbatim(js: str, expected: str) -> None:
    assert minify_js(js) == expected


def test_template_literal_with_nested_substitution() -> None:
    js = "const t = `a  ${ b + `c  // d` }  e`;"

    assert minify_js(js) == "const t=`a  ${ b + `c  // d` }  e`;"


def test_template_literal_spans_lines() -> None:
    js = "html = `\n  <p>\n    x\n  </p>\n`;"

    assert minify_js(js) == "html=`\n  <p>\n    x\n  </p>\n`;"


def test_block_comments() -> None:
    assert minify_js("a/* c */b") == "a b"
    assert minify_js("a = 1; /* c */ b = 2;") == "a=1;b=2;"
    assert minify_js("a = 1; /* open") == "a=1;"


def test_line_comment_at_end_of_input() -> None:
    assert minify_js("run(); // done") == "run();"


@pytest.mark.parametrize(
    ("js", "expected"),
    [
        ("var a = 1\nvar b = 2", "var a=1\nvar b=2"),
        ("return\nvalue", "return\nvalue"),
        ("a = b\n(c)", "a=b\n(c)"),
        ("x++\n// note\ny++", "x++\ny++"),
        ("a = 1;\n  b = 2;", "a=1;b=2;"),
        ("if (x) {\n  y();\n}\n", "if(x){y();}"),
    ],
)
def test_line_breaks_kept_only_where_statements_may_end(
    js: str, expected: str
) -> None:
    assert minify_js(js) == expected


@pytest.mark.parametrize(
    ("js", "expected"),
    [
        ("var re = /a  b\\/ c/g;", "var re=/a  b\\/ c/g;"),
        ("x = /[/]+/.test(s) // c", "x=/[/]+/.test(s)"),
        ('s.replace(/ +/g, " ")', 's.replace(/ +/g," ")'),
        ("return /x y/.test(s)", "return/x y/.test(s)"),
        ("x = /ab/\ny()", "x=/ab/\ny()"),
        ("if (ok) { /a b/.exec(s) }", "if(ok){/a b/.exec(s)}"),
    ],
)
def test_regex_literals_are_copied_verbatim(js: str, expected: str) -> None:
    assert minify_js(js) == expected


def test_division_is_not_a_regex() -> None:
    assert minify_js("total = a / b / 2;") == "total=a/b/2;"
    assert minify_js("r = (a) / 2 / (b)") == "r=(a)/2/(b)"
    assert minify_js("x = a / /re/.source.length") == "x=a/ /re/.source.length"


@pytest.mark.parametrize(
    ("js", "expected"),
    [
        ("a + +b", "a+ +b"),
        ("a - -b", "a- -b"),
        ("i++ + j", "i++ +j"),
        ("a + -b", "a+-b"),
        ("1 .toString()", "1 .toString()"),
    ],
)
def test_spaces_kept_where_tokens_would_merge(js: str, expected: str) -> None:
    assert minify_js(js) == expected


@pytest.mark.parametrize(
    "js",
    [
        "function f(a, b) {\n  // sum\n  return a + b\n}\nf(1, 2)\n",
        "const s = `x ${ y } z`; /* c */ var r = /a b/g\nr.test(s)",
        "let a = b\n++c",
    ],
)
def test_minify_js_is_idempotent(js: str) -> None:
    once = minify_js(js)

    assert minify_js(once) == once
    assert len(once) <= len(js)
