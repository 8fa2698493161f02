from dataclasses import dataclass, field
from enum import Enum


class NodeKind(Enum):
    QUOTED_STRING = "quoted_string"
    EMPTY_STRING = "empty_string"
    HEADER_NAME = "header_name"
    HEADER_VALUE = "header_value"
    NPLURALS = "nplurals"
    PLURAL_EXPRESSION = "plural_expression"
    FLAG = "flag"
    REFERENCE = "reference"
    COMMENT = "comment"
    INDEX = "index"
    OBSOLETE_TEXT = "obsolete_text"
    HEADER = "header"
    PLURAL_FORMS = "plural_forms"
    FLAGS = "flags"
    MSGCTXT = "msgctxt"
    MSGID = "msgid"
    MSGID_PLURAL = "msgid_plural"
    MSGSTR = "msgstr"
    TRANSLATION = "translation"
    OBSOLETE = "obsolete_translation"
    HEADERS = "headers"
    TRANSLATIONS = "translations"
    OBSOLETES = "obsolete_translations"
    FILE = "file"


LEAF_KINDS = frozenset(
    {
        NodeKind.QUOTED_STRING,
        NodeKind.EMPTY_STRING,
        NodeKind.HEADER_NAME,
        NodeKind.HEADER_VALUE,
        NodeKind.NPLURALS,
        NodeKind.PLURAL_EXPRESSION,
        NodeKind.FLAG,
        NodeKind.REFERENCE,
        NodeKind.COMMENT,
        NodeKind.INDEX,
        NodeKind.OBSOLETE_TEXT,
    }
)


@dataclass(frozen=True)
class ParseNode:
    """A node of the concrete parse tree.

    Leaf kinds carry a string in ``value``, every other kind carries a tuple
    of child nodes in ``children``.
    """

    kind: NodeKind
    value: str | None = None
    children: tuple["ParseNode", ...] = ()

    def __post_init__(self) -> None:
        if self.kind in LEAF_KINDS:
            if self.value is None or self.children:
                raise ValueError(f"{self.kind.value} node must carry a scalar")
        elif self.value is not None:
            raise ValueError(f"{self.kind.value} node must carry children")


@dataclass
class PluralForms:
    nplurals: int
    plural_expression: str


@dataclass
class Variant:
    plural_index: int | None
    text: str


@dataclass
class Translation:
    source_text: str
    source_plural_text: str | None = None
    context: str | None = None
    variants: list[Variant] = field(default_factory=list)
    flags: set[str] = field(default_factory=set)
    references: list[str] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)

    @property
    def is_plural(self) -> bool:
        return self.source_plural_text is not None

    @property
    def is_fuzzy(self) -> bool:
        return "fuzzy" in self.flags


@dataclass
class ObsoleteEntry:
    comments: list[str]
    text: str


@dataclass
class Catalog:
    headers: dict[str, str | PluralForms]
    translations: list[Translation]
    obsolete: list[ObsoleteEntry] = field(default_factory=list)

    @property
    def plural_forms(self) -> PluralForms | None:
        value = self.headers.get("Plural-Forms")
        return value if isinstance(value, PluralForms) else None


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Diagnostic:
    severity: Severity
    location: int | None
    source_key: str
    message: str
    translated_text: str | None = None
    references: list[str] = field(default_factory=list)
