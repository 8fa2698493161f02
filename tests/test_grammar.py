"""Tests for the PO grammar, rule by rule and for whole catalogs."""

import pytest

from pocheck.classes import NodeKind, ParseNode
from pocheck.errors import ParseFailed
from pocheck.grammar import Parser


def parse(text: str, rule: str) -> ParseNode:
    return Parser().parse(text, rule)


def qs(value: str) -> ParseNode:
    return ParseNode(NodeKind.QUOTED_STRING, value)


EMPTY = ParseNode(NodeKind.EMPTY_STRING, "")


def header(name: str, value: str) -> ParseNode:
    return ParseNode(
        NodeKind.HEADER,
        children=(
            ParseNode(NodeKind.HEADER_NAME, name),
            ParseNode(NodeKind.HEADER_VALUE, value),
        ),
    )


def flags(*names: str) -> ParseNode:
    return ParseNode(NodeKind.FLAGS, children=tuple(ParseNode(NodeKind.FLAG, n) for n in names))


def reference(text: str) -> ParseNode:
    return ParseNode(NodeKind.REFERENCE, text)


def msgid(*fragments: ParseNode) -> ParseNode:
    return ParseNode(NodeKind.MSGID, children=fragments)


def msgid_plural(*fragments: ParseNode) -> ParseNode:
    return ParseNode(NodeKind.MSGID_PLURAL, children=fragments)


def msgstr(*fragments: ParseNode, index: str | None = None) -> ParseNode:
    if index is not None:
        fragments = (ParseNode(NodeKind.INDEX, index),) + fragments
    return ParseNode(NodeKind.MSGSTR, children=fragments)


PLURAL_EXPRESSION = r" n==0 ? 0 : n==1 ? 1 : n==2 ? 2 : n%100>=3 && n%100<=10 ? 3 : n%100>=11 ? 4 : 5;\n"

ARABIC_HEADERS = "\n".join(
    [
        'msgid ""',
        'msgstr ""',
        r'"Language: ar\n"',
        r'"MIME-Version: 1.0\n"',
        r'"Content-Type: text/plain; charset=UTF-8\n"',
        r'"Content-Transfer-Encoding: 8bit\n"',
        f'"Plural-Forms: nplurals=6; plural={PLURAL_EXPRESSION}"',
        r'"X-Generator: PhraseApp (phraseapp.com)\n"',
    ]
)

PLURAL_ENTRY = [
    "#, fuzzy",
    "#: ../../some_file.rb:34",
    'msgid "Hello World"',
    'msgid_plural "Hello %{n} Worlds"',
    'msgstr[0] "Hello World"',
    'msgstr[1] "Hello %{n} Worlds"',
]


# -----------------------------------------------------------------------
# quoted strings
# -----------------------------------------------------------------------


def test_quoted_string_simple() -> None:
    assert parse('"Hello World"', "quoted_string") == qs("Hello World")


def test_quoted_string_with_embedded_quotes() -> None:
    assert parse(r'"Hello \"my\" World"', "quoted_string") == qs(r"Hello \"my\" World")


def test_quoted_string_with_trailing_escaped_backslash() -> None:
    assert parse(r'"C:\\"', "quoted_string") == qs(r"C:\\")


def test_empty_quoted_string_is_a_distinct_marker() -> None:
    assert parse('""', "quoted_string") == EMPTY


def test_unterminated_quoted_string_fails() -> None:
    with pytest.raises(ParseFailed):
        parse('"Hello', "quoted_string")


# -----------------------------------------------------------------------
# headers
# -----------------------------------------------------------------------


def test_headers_with_plural_forms() -> None:
    tree = parse(ARABIC_HEADERS, "headers")
    assert tree.kind is NodeKind.HEADERS
    assert tree.children == (
        EMPTY,
        header("Language", r"ar\n"),
        header("MIME-Version", r"1.0\n"),
        header("Content-Type", r"text/plain; charset=UTF-8\n"),
        header("Content-Transfer-Encoding", r"8bit\n"),
        ParseNode(
            NodeKind.PLURAL_FORMS,
            children=(
                ParseNode(NodeKind.HEADER_NAME, "Plural-Forms"),
                ParseNode(NodeKind.NPLURALS, "6"),
                ParseNode(NodeKind.PLURAL_EXPRESSION, PLURAL_EXPRESSION),
            ),
        ),
        header("X-Generator", r"PhraseApp (phraseapp.com)\n"),
    )


def test_headers_accept_camel_case_names() -> None:
    text = "\n".join(['msgid ""', 'msgstr ""', r'"X-Poedit-SourceCharset: UTF-8\n"'])
    tree = parse(text, "headers")
    assert tree.children[1] == header("X-Poedit-SourceCharset", r"UTF-8\n")


def test_malformed_plural_forms_falls_back_to_plain_header() -> None:
    text = "\n".join(['msgid ""', 'msgstr ""', r'"Plural-Forms: INTEGER\n"'])
    tree = parse(text, "headers")
    assert tree.children[1] == header("Plural-Forms", r"INTEGER\n")


def test_unquoted_header_fails() -> None:
    with pytest.raises(ParseFailed):
        parse(f"Plural-Forms: nplurals=6; plural={PLURAL_EXPRESSION}", "headers")


def test_headers_need_at_least_one_header_line() -> None:
    with pytest.raises(ParseFailed):
        parse('msgid ""\nmsgstr ""\n', "headers")


# -----------------------------------------------------------------------
# comments
# -----------------------------------------------------------------------


def test_flag_comment_fuzzy() -> None:
    assert parse("#, fuzzy", "flag_comment") == flags("fuzzy")


def test_flag_comment_multiple_flags() -> None:
    assert parse("#, java-format, fuzzy", "flag_comment") == flags("java-format", "fuzzy")


def test_flag_comment_rejects_reference() -> None:
    with pytest.raises(ParseFailed):
        parse("#: ../../some_file.rb:34", "flag_comment")


def test_reference_comment() -> None:
    assert parse("#: ../../some_file.rb:34", "reference_comment") == reference(
        "../../some_file.rb:34"
    )


def test_reference_comment_rejects_flags() -> None:
    with pytest.raises(ParseFailed):
        parse("#, fuzzy", "reference_comment")


@pytest.mark.parametrize(
    "line",
    ["# no semantics here", "#. no semantics here", "#| no semantics here"],
)
def test_unparsed_comment(line: str) -> None:
    assert parse(line, "unparsed_comment") == ParseNode(NodeKind.COMMENT, "no semantics here")


def test_bare_hash_is_an_empty_comment() -> None:
    assert parse("#", "unparsed_comment") == ParseNode(NodeKind.COMMENT, "")


def test_unparsed_comment_rejects_obsolete_line() -> None:
    with pytest.raises(ParseFailed):
        parse("#~ obsolete things go here", "unparsed_comment")


# -----------------------------------------------------------------------
# msgctxt / msgid / msgid_plural / msgstr
# -----------------------------------------------------------------------


def test_msgid_single_line() -> None:
    assert parse('msgid "Hello World"', "msgid") == msgid(qs("Hello World"))


def test_msgid_multi_line() -> None:
    tree = parse('msgid ""\n"Hello World"\n"Hello Again"', "msgid")
    assert tree == msgid(EMPTY, qs("Hello World"), qs("Hello Again"))


def test_msgid_unquoted_fails() -> None:
    with pytest.raises(ParseFailed):
        parse("msgid Unquoted String", "msgid")


def test_msgid_plural_multi_line() -> None:
    tree = parse('msgid_plural ""\n"Hello %{n} Worlds"\n"Hello Again"', "msgid_plural")
    assert tree == msgid_plural(EMPTY, qs("Hello %{n} Worlds"), qs("Hello Again"))


def test_msgctxt() -> None:
    tree = parse('msgctxt "menu"', "msgctxt")
    assert tree == ParseNode(NodeKind.MSGCTXT, children=(qs("menu"),))


def test_msgstr_with_index() -> None:
    assert parse('msgstr[3] "Hello World"', "msgstr") == msgstr(qs("Hello World"), index="3")


def test_msgstr_multi_line_with_index() -> None:
    tree = parse('msgstr[1] ""\n"Hello World"\n"Hello Again"', "msgstr")
    assert tree == msgstr(EMPTY, qs("Hello World"), qs("Hello Again"), index="1")


def test_msgstr_unquoted_fails() -> None:
    with pytest.raises(ParseFailed):
        parse("msgstr Unquoted String", "msgstr")


# -----------------------------------------------------------------------
# entries
# -----------------------------------------------------------------------


def test_singular_translation_with_comments() -> None:
    lines = [
        "#, fuzzy",
        "#: ../../some_file.rb:34",
        'msgid "Hello World"',
        'msgstr "Hello World"',
    ]
    tree = parse("\n".join(lines), "translation")
    assert tree == ParseNode(
        NodeKind.TRANSLATION,
        children=(
            flags("fuzzy"),
            reference("../../some_file.rb:34"),
            msgid(qs("Hello World")),
            msgstr(qs("Hello World")),
        ),
    )


def test_plural_translation_with_comments() -> None:
    tree = parse("\n".join(PLURAL_ENTRY), "translation")
    assert [child.kind for child in tree.children] == [
        NodeKind.FLAGS,
        NodeKind.REFERENCE,
        NodeKind.MSGID,
        NodeKind.MSGID_PLURAL,
        NodeKind.MSGSTR,
        NodeKind.MSGSTR,
    ]
    assert tree.children[-1] == msgstr(qs("Hello %{n} Worlds"), index="1")


def test_translation_without_msgstr_fails() -> None:
    with pytest.raises(ParseFailed):
        parse('msgid "Hello World"\n', "translation")


def test_multiple_translations() -> None:
    lines = [
        "#, fuzzy",
        "#: ../../some_file.rb:34",
        'msgid "Hello World"',
        'msgstr "Hello World"',
        "",
        *PLURAL_ENTRY,
    ]
    tree = parse("\n".join(lines), "translations")
    assert tree.kind is NodeKind.TRANSLATIONS
    assert len(tree.children) == 2
    assert tree.children[1] == parse("\n".join(PLURAL_ENTRY), "translation")


def test_obsolete_translation() -> None:
    lines = [
        "# comment on obsolete translation",
        '#~ msgid "Hello World"',
        '#~ msgstr "Hello World"',
    ]
    tree = parse("\n".join(lines), "obsolete_translation")
    assert tree == ParseNode(
        NodeKind.OBSOLETE,
        children=(
            ParseNode(NodeKind.COMMENT, "comment on obsolete translation"),
            ParseNode(NodeKind.OBSOLETE_TEXT, '#~ msgid "Hello World"\n#~ msgstr "Hello World"'),
        ),
    )


# -----------------------------------------------------------------------
# whole files and failures
# -----------------------------------------------------------------------

HEADER = "\n".join(
    ['msgid ""', 'msgstr ""', r'"Plural-Forms: nplurals=2; plural=(n != 1);\n"', "", ""]
)


def test_file_has_headers_translations_and_obsolete_blocks(data_dir) -> None:
    tree = Parser().parse((data_dir / "fr-valid.po").read_text("utf-8"))
    assert tree.kind is NodeKind.FILE
    headers, translations, obsolete = tree.children
    assert headers.kind is NodeKind.HEADERS
    assert len(translations.children) == 4
    assert len(obsolete.children) == 1


def test_file_with_header_only() -> None:
    tree = Parser().parse(HEADER)
    assert [len(child.children) for child in tree.children[1:]] == [0, 0]


def test_parse_failure_reports_deepest_position() -> None:
    text = HEADER + 'msgid "Hello"\nmsgstr Bonjour\n'
    with pytest.raises(ParseFailed) as excinfo:
        Parser().parse(text)

    failure = excinfo.value
    assert (failure.line, failure.column) == (6, 8)
    assert (
        "file > translations > translation > msgstr > quoted_string",
        "quoted string",
    ) in failure.expected
    assert "line 6 char 8" in failure.cause
    assert "expected quoted string" in str(failure)


def test_trailing_garbage_fails() -> None:
    with pytest.raises(ParseFailed) as excinfo:
        Parser().parse(HEADER + "garbage\n")
    assert excinfo.value.line == 5
    assert ("file", "end of input") in excinfo.value.expected


def test_unknown_rule() -> None:
    with pytest.raises(ValueError):
        Parser().parse('"x"', "no_such_rule")
