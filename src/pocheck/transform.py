import logging
from typing import Any

from pocheck.classes import (
    Catalog,
    NodeKind,
    ObsoleteEntry,
    ParseNode,
    PluralForms,
    Translation,
    Variant,
)

logger = logging.getLogger(__name__)


def _join(fragments: tuple[ParseNode, ...]) -> str:
    return "".join(apply(fragment) for fragment in fragments)


def _plural_expression(raw: str) -> str:
    expression = raw.strip()
    if expression.endswith("\\n"):
        expression = expression[:-2]
    return expression.strip()


def _headers(node: ParseNode) -> dict[str, str | PluralForms]:
    items = list(node.children)
    # msgstr "" before the header lines shows up as a leading empty fragment
    if items and items[0].kind is NodeKind.EMPTY_STRING:
        items.pop(0)
    return dict(apply(item) for item in items)


def _translation(node: ParseNode) -> Translation:
    translation = Translation(source_text="")
    for child in node.children:
        value = apply(child)
        match child.kind:
            case NodeKind.FLAGS:
                translation.flags |= value
            case NodeKind.REFERENCE:
                translation.references.append(value)
            case NodeKind.COMMENT:
                translation.comments.append(value)
            case NodeKind.MSGCTXT:
                translation.context = value
            case NodeKind.MSGID:
                translation.source_text = value
            case NodeKind.MSGID_PLURAL:
                translation.source_plural_text = value
            case NodeKind.MSGSTR:
                translation.variants.append(value)
    return translation


def _obsolete(node: ParseNode) -> ObsoleteEntry:
    comments = []
    text = ""
    for child in node.children:
        if child.kind is NodeKind.OBSOLETE_TEXT:
            text = child.value
        elif child.kind is NodeKind.COMMENT:
            comments.append(child.value)
    return ObsoleteEntry(comments, text)


def apply(node: ParseNode) -> Any:
    """Fold a parse tree into the semantic model, bottom-up."""
    match node.kind:
        case NodeKind.EMPTY_STRING:
            return ""
        case (
            NodeKind.QUOTED_STRING
            | NodeKind.HEADER_NAME
            | NodeKind.HEADER_VALUE
            | NodeKind.PLURAL_EXPRESSION
            | NodeKind.FLAG
            | NodeKind.REFERENCE
            | NodeKind.COMMENT
            | NodeKind.OBSOLETE_TEXT
        ):
            return node.value
        case NodeKind.NPLURALS | NodeKind.INDEX:
            return int(node.value)
        case NodeKind.HEADER:
            name, value = node.children
            return apply(name), apply(value)
        case NodeKind.PLURAL_FORMS:
            name, nplurals, expression = node.children
            return apply(name), PluralForms(
                apply(nplurals), _plural_expression(apply(expression))
            )
        case NodeKind.FLAGS:
            return {apply(flag) for flag in node.children}
        case NodeKind.MSGCTXT | NodeKind.MSGID | NodeKind.MSGID_PLURAL:
            return _join(node.children)
        case NodeKind.MSGSTR:
            fragments = node.children
            index = 0
            if fragments and fragments[0].kind is NodeKind.INDEX:
                index = apply(fragments[0])
                fragments = fragments[1:]
            return Variant(index, _join(fragments))
        case NodeKind.TRANSLATION:
            return _translation(node)
        case NodeKind.OBSOLETE:
            return _obsolete(node)
        case NodeKind.HEADERS:
            return _headers(node)
        case NodeKind.TRANSLATIONS | NodeKind.OBSOLETES:
            return [apply(child) for child in node.children]
        case NodeKind.FILE:
            headers, translations, obsolete = node.children
            catalog = Catalog(apply(headers), apply(translations), apply(obsolete))
            logger.debug(
                f"Normalized {len(catalog.headers)} headers, "
                f"{len(catalog.translations)} translations, "
                f"{len(catalog.obsolete)} obsolete entries"
            )
            return catalog
    raise ValueError(f"Unhandled node kind {node.kind}")
