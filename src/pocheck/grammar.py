# Copyright (c) 2023 Peace-Maker
"""Recursive-descent parser for unwrapped gettext PO catalogs.

Every grammar rule is a method decorated with :func:`rule`. A rule returns a
:class:`ParseNode` on success or ``None`` on failure, in which case the input
position is rewound so the caller can try the next alternative. The deepest
failure seen during a parse is kept, together with the rule path that led to
it, and reported through :class:`ParseFailed`.
"""
import functools
import logging
import re

from pocheck.classes import NodeKind, ParseNode
from pocheck.errors import ParseFailed

logger = logging.getLogger(__name__)

WSP = re.compile(r"[ \t]*")
ENDL = re.compile(r"\n?")
EOL = re.compile(r"\n|\Z")
QUOTED = re.compile(r'"((?:\\.|[^"\\\n])*)"')
HEADER_NAME = re.compile(r"[A-Z][A-Za-z0-9]*(?:-[A-Z][A-Za-z0-9]*)*")
HEADER_SEP = re.compile(r":[ \t]*")
HEADER_VALUE = re.compile(r'(?:\\.|[^"\\\n])*')
DIGITS = re.compile(r"[0-9]+")
INDEX = re.compile(r"\[([0-9]+)\]")
FLAG = re.compile(r",[ \t]*([a-z-]+)[ \t]*")
REST_OF_LINE = re.compile(r"[^\n]*")
UNPARSED_MARKER = re.compile(r"#(?!~)[^\n]?[ \t]*")
OBSOLETE_LINE = re.compile(r"#~[^\n]*(?:\n|\Z)")

RULES = (
    "quoted_string",
    "headers",
    "header",
    "flag_comment",
    "reference_comment",
    "unparsed_comment",
    "comment",
    "msgctxt",
    "msgid",
    "msgid_plural",
    "msgstr",
    "translation",
    "translations",
    "obsolete_translation",
    "obsolete_translations",
    "file",
)


def rule(method):
    name = method.__name__

    @functools.wraps(method)
    def wrapper(self):
        start = self._pos
        self._stack.append(name)
        try:
            node = method(self)
        finally:
            self._stack.pop()
        if node is None:
            self._pos = start
        return node

    return wrapper


class Parser:
    def __init__(self) -> None:
        self._reset("")

    def parse(self, text: str, rule: str = "file") -> ParseNode:
        """Parse ``text`` with the named rule, which must consume all of it."""
        if rule not in RULES:
            raise ValueError(f"Unknown grammar rule {rule!r}")

        self._reset(text)
        node = getattr(self, rule)()
        if node is not None and self._pos < len(text):
            self._expect("end of input", path=rule)
            node = None
        if node is None:
            raise self._failure()
        logger.debug(f"Parsed {len(text)} characters with rule {rule}")
        return node

    def _reset(self, text: str) -> None:
        self._text = text
        self._pos = 0
        self._stack: list[str] = []
        self._failure_pos = -1
        self._expected: list[tuple[str, str]] = []

    def _failure(self) -> ParseFailed:
        pos = self._failure_pos
        line = self._text.count("\n", 0, pos) + 1
        column = pos - (self._text.rfind("\n", 0, pos) + 1) + 1
        return ParseFailed(pos, line, column, list(self._expected))

    def _expect(self, expectation: str, path: str | None = None) -> None:
        if self._pos < self._failure_pos:
            return
        if self._pos > self._failure_pos:
            self._failure_pos = self._pos
            self._expected = []
        entry = (path or " > ".join(self._stack), expectation)
        if entry not in self._expected:
            self._expected.append(entry)

    def _match(self, pattern: re.Pattern, expectation: str) -> re.Match | None:
        match = pattern.match(self._text, self._pos)
        if match is None:
            self._expect(expectation)
            return None
        self._pos = match.end()
        return match

    def _literal(self, literal: str) -> bool:
        if self._text.startswith(literal, self._pos):
            self._pos += len(literal)
            return True
        self._expect(repr(literal))
        return False

    def _skip(self, pattern: re.Pattern) -> None:
        # Only used with patterns that can match the empty string.
        self._pos = pattern.match(self._text, self._pos).end()

    @rule
    def quoted_string(self):
        match = self._match(QUOTED, "quoted string")
        if match is None:
            return None
        self._skip(WSP)
        content = match.group(1)
        if not content:
            return ParseNode(NodeKind.EMPTY_STRING, "")
        return ParseNode(NodeKind.QUOTED_STRING, content)

    def _quoted_strings(self) -> list[ParseNode] | None:
        fragments = []
        while True:
            fragment = self.quoted_string()
            if fragment is None:
                break
            fragments.append(fragment)
            self._skip(ENDL)
        return fragments or None

    def _empty_fragment(self) -> ParseNode | None:
        start = self._pos
        fragment = self.quoted_string()
        if fragment is not None and fragment.kind is NodeKind.EMPTY_STRING:
            self._skip(ENDL)
            return fragment
        self._pos = start
        return None

    @rule
    def headers(self):
        if not self._literal("msgid"):
            return None
        self._skip(WSP)
        if not self._literal('""'):
            return None
        self._skip(ENDL)
        if not self._literal("msgstr"):
            return None
        self._skip(WSP)

        children = []
        leading = self._empty_fragment()
        if leading is not None:
            children.append(leading)
        header_count = 0
        while True:
            header = self.header()
            if header is None:
                break
            children.append(header)
            header_count += 1
            self._skip(ENDL)
        if not header_count:
            return None

        self._skip(ENDL)
        return ParseNode(NodeKind.HEADERS, children=tuple(children))

    @rule
    def header(self):
        if not self._literal('"'):
            return None
        node = self.plural_forms_header()
        if node is None:
            node = self.raw_header()
        if node is None or not self._literal('"'):
            return None
        self._skip(WSP)
        return node

    @rule
    def plural_forms_header(self):
        if not self._literal("Plural-Forms"):
            return None
        if self._match(HEADER_SEP, "':'") is None:
            return None
        if not self._literal("nplurals="):
            return None
        nplurals = self._match(DIGITS, "digits")
        if nplurals is None or not self._literal(";"):
            return None
        self._skip(WSP)
        if not self._literal("plural="):
            return None
        expression = self._match(HEADER_VALUE, "plural expression")
        return ParseNode(
            NodeKind.PLURAL_FORMS,
            children=(
                ParseNode(NodeKind.HEADER_NAME, "Plural-Forms"),
                ParseNode(NodeKind.NPLURALS, nplurals.group(0)),
                ParseNode(NodeKind.PLURAL_EXPRESSION, expression.group(0)),
            ),
        )

    @rule
    def raw_header(self):
        name = self._match(HEADER_NAME, "header name")
        if name is None or self._match(HEADER_SEP, "':'") is None:
            return None
        value = self._match(HEADER_VALUE, "header value")
        return ParseNode(
            NodeKind.HEADER,
            children=(
                ParseNode(NodeKind.HEADER_NAME, name.group(0)),
                ParseNode(NodeKind.HEADER_VALUE, value.group(0)),
            ),
        )

    @rule
    def flag_comment(self):
        if not self._literal("#"):
            return None
        flags = []
        while True:
            match = self._match(FLAG, "flag")
            if match is None:
                break
            flags.append(ParseNode(NodeKind.FLAG, match.group(1)))
        if not flags or self._match(EOL, "end of line") is None:
            return None
        return ParseNode(NodeKind.FLAGS, children=tuple(flags))

    @rule
    def reference_comment(self):
        if not self._literal("#:"):
            return None
        self._skip(WSP)
        reference = self._match(REST_OF_LINE, "reference")
        if self._match(EOL, "end of line") is None:
            return None
        return ParseNode(NodeKind.REFERENCE, reference.group(0))

    @rule
    def unparsed_comment(self):
        if self._match(UNPARSED_MARKER, "comment") is None:
            return None
        comment = self._match(REST_OF_LINE, "comment text")
        if self._match(EOL, "end of line") is None:
            return None
        return ParseNode(NodeKind.COMMENT, comment.group(0))

    @rule
    def comment(self):
        node = self.flag_comment()
        if node is None:
            node = self.reference_comment()
        if node is None:
            node = self.unparsed_comment()
        return node

    def _comments(self) -> list[ParseNode]:
        comments = []
        while True:
            comment = self.comment()
            if comment is None:
                return comments
            comments.append(comment)

    def _keyword_strings(self, keyword: str, kind: NodeKind) -> ParseNode | None:
        if not self._literal(keyword):
            return None
        self._skip(WSP)
        fragments = self._quoted_strings()
        if fragments is None:
            return None
        return ParseNode(kind, children=tuple(fragments))

    @rule
    def msgctxt(self):
        return self._keyword_strings("msgctxt", NodeKind.MSGCTXT)

    @rule
    def msgid(self):
        return self._keyword_strings("msgid", NodeKind.MSGID)

    @rule
    def msgid_plural(self):
        return self._keyword_strings("msgid_plural", NodeKind.MSGID_PLURAL)

    @rule
    def msgstr(self):
        if not self._literal("msgstr"):
            return None
        children = []
        index = self._match(INDEX, "plural index")
        if index is not None:
            children.append(ParseNode(NodeKind.INDEX, index.group(1)))
        self._skip(WSP)
        fragments = self._quoted_strings()
        if fragments is None:
            return None
        children.extend(fragments)
        return ParseNode(NodeKind.MSGSTR, children=tuple(children))

    @rule
    def translation(self):
        children = self._comments()
        msgctxt = self.msgctxt()
        if msgctxt is not None:
            children.append(msgctxt)
        msgid = self.msgid()
        if msgid is None:
            return None
        children.append(msgid)
        msgid_plural = self.msgid_plural()
        if msgid_plural is not None:
            children.append(msgid_plural)

        msgstr_count = 0
        while True:
            msgstr = self.msgstr()
            if msgstr is None:
                break
            children.append(msgstr)
            msgstr_count += 1
        if not msgstr_count:
            return None

        self._skip(ENDL)
        return ParseNode(NodeKind.TRANSLATION, children=tuple(children))

    @rule
    def translations(self):
        entries = []
        while True:
            entry = self.translation()
            if entry is None:
                break
            entries.append(entry)
        return ParseNode(NodeKind.TRANSLATIONS, children=tuple(entries))

    @rule
    def obsolete_translation(self):
        children = self._comments()
        start = self._pos
        while self._match(OBSOLETE_LINE, "obsolete line") is not None:
            pass
        if self._pos == start:
            return None
        text = self._text[start : self._pos]
        if text.endswith("\n"):
            text = text[:-1]
        children.append(ParseNode(NodeKind.OBSOLETE_TEXT, text))
        self._skip(ENDL)
        return ParseNode(NodeKind.OBSOLETE, children=tuple(children))

    @rule
    def obsolete_translations(self):
        entries = []
        while True:
            entry = self.obsolete_translation()
            if entry is None:
                break
            entries.append(entry)
        return ParseNode(NodeKind.OBSOLETES, children=tuple(entries))

    @rule
    def file(self):
        headers = self.headers()
        if headers is None:
            return None
        return ParseNode(
            NodeKind.FILE,
            children=(headers, self.translations(), self.obsolete_translations()),
        )


def parse(text: str) -> ParseNode:
    return Parser().parse(text)
