import logging
import re

from pocheck import catalog_tool, grammar, transform
from pocheck.classes import Catalog, Diagnostic, Severity, Translation
from pocheck.errors import MissingPluralForms
from pocheck.report import Reporter

logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(
    r"""
    %\{ [^}]+ \}      |  # %{name}
    %\( [^)]+ \)[sd]  |  # %(name)s, %(name)d
    \{\{ [^}]+ \}\}      # {{name}}
    """,
    re.VERBOSE,
)
LOCATION = re.compile(r"(\d+):(.*)", re.DOTALL)


def placeholders(text: str) -> set[str]:
    return set(PLACEHOLDER.findall(text))


def split_location(key: str) -> tuple[int | None, str]:
    """Strip the ``<lineno>:`` annotation added while loading the catalog."""
    match = LOCATION.fullmatch(key)
    if match is None:
        return None, key
    return int(match.group(1)), match.group(2)


def plural_only_attribute(msgid: str, msgid_plural: str) -> str | None:
    """The one placeholder that only the plural source string uses, if any."""
    candidates = placeholders(msgid_plural) - placeholders(msgid)
    if len(candidates) != 1:
        return None
    return candidates.pop()


class Checker:
    def __init__(
        self,
        catalog: Catalog,
        *,
        filename: str = "",
        reporter: Reporter | None = None,
    ) -> None:
        self.catalog = catalog
        self.filename = filename
        self.reporter = reporter
        self.errors = 0
        self.warnings = 0
        self.diagnostics: list[Diagnostic] = []

    @property
    def total(self) -> int:
        return self.errors + self.warnings

    def run(self) -> int:
        self.errors = 0
        self.warnings = 0
        self.diagnostics = []

        plural_forms = self.catalog.plural_forms
        if plural_forms is None:
            if "Plural-Forms" in self.catalog.headers:
                raise MissingPluralForms(
                    f"Malformed Plural-Forms header: {self.catalog.headers['Plural-Forms']}"
                )
            raise MissingPluralForms("No Plural-Forms header found")
        if plural_forms.nplurals < 1:
            raise MissingPluralForms(
                f"Malformed Plural-Forms header: nplurals={plural_forms.nplurals}"
            )

        logger.debug(
            f"Checking {len(self.catalog.translations)} translations "
            f"in {self.filename} (nplurals={plural_forms.nplurals})"
        )
        for translation in self.catalog.translations:
            self.check_translation(translation, plural_forms.nplurals)

        if self.reporter is not None:
            self.reporter.summary(self.errors, self.warnings)
        return self.total

    def check_translation(self, translation: Translation, nplurals: int) -> None:
        lineno, msgid = split_location(translation.source_text)
        msgid_plural = translation.source_plural_text

        expected = nplurals if translation.is_plural else 1
        found = len(translation.variants)
        if found != expected:
            self._emit(
                Severity.ERROR,
                lineno,
                msgid,
                None,
                translation,
                f"{found} plurals found but {expected} expected",
            )
            self.errors += 1

        if not translation.is_plural:
            if translation.variants:
                self.check_pair(lineno, msgid, translation.variants[0].text, translation)
            return

        plural_attr = plural_only_attribute(msgid, msgid_plural)
        for variant in translation.variants:
            if plural_attr is not None and plural_attr in placeholders(variant.text):
                source = msgid_plural
            else:
                source = msgid
            self.check_pair(lineno, source, variant.text, translation)

    def check_pair(
        self,
        lineno: int | None,
        key: str | None,
        val: str | None,
        translation: Translation,
    ) -> None:
        """Check a source/translated string pair and report at most one kind of problem."""
        if key is None or val is None:
            return

        is_fuzzy = translation.is_fuzzy
        is_empty = bool(key.strip()) and not val.strip()

        attrs_key = placeholders(key)
        attrs_val = placeholders(val)
        not_in_key = sorted(attrs_val - attrs_key)
        not_in_val = sorted(attrs_key - attrs_val)

        if not (not_in_key or not_in_val or is_empty or is_fuzzy):
            return

        if not_in_key or not_in_val or is_empty:
            self.errors += 1
        if is_fuzzy:
            self.warnings += 1

        if is_empty:
            self._emit(Severity.ERROR, lineno, key, val, translation, "translated string empty")
        elif not_in_key:
            for name in not_in_key:
                self._emit(
                    Severity.ERROR,
                    lineno,
                    key,
                    val,
                    translation,
                    f"{name} absent from reference string",
                )
        elif not_in_val:
            for name in not_in_val:
                self._emit(
                    Severity.WARNING,
                    lineno,
                    key,
                    val,
                    translation,
                    f"{name} absent from translated string",
                )
        else:
            self._emit(Severity.WARNING, lineno, key, val, translation, "translation is fuzzy")

    def _emit(
        self,
        severity: Severity,
        lineno: int | None,
        key: str,
        val: str | None,
        translation: Translation,
        message: str,
    ) -> None:
        diagnostic = Diagnostic(
            severity,
            lineno,
            key,
            message,
            translated_text=val,
            references=list(translation.references),
        )
        self.diagnostics.append(diagnostic)
        if self.reporter is not None:
            self.reporter.emit(diagnostic)


def check_text(text: str, filename: str, *, verbose: bool = False, color: bool = True) -> int:
    """Parse, normalize and check catalog text prepared by the catalog tool."""
    catalog = transform.apply(grammar.parse(text))
    reporter = Reporter(filename, verbose=verbose, color=color)
    return Checker(catalog, filename=filename, reporter=reporter).run()


def run(
    *,
    po_file: str,
    verbose: bool = False,
    color: bool = True,
    executable: str = "msgcat",
) -> int:
    logger.info(f"Checking {po_file}...")
    catalog_tool.lint(po_file, executable)
    data = catalog_tool.load(po_file, executable)
    if not data.strip():
        logger.info(f"{po_file} is empty, nothing to check")
        return 0
    return check_text(data, po_file, verbose=verbose, color=color)
