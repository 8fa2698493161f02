import click

from pocheck.classes import Diagnostic, Severity

RULE = "–" * 80
COLORS = {Severity.ERROR: "red", Severity.WARNING: "yellow"}
LABELS = {Severity.ERROR: "Error", Severity.WARNING: "Warning"}


class Reporter:
    """Prints diagnostics for one catalog file."""

    def __init__(self, filename: str, *, verbose: bool = False, color: bool = True):
        self.filename = filename
        self.verbose = verbose
        self.color = color

    def _style(self, text: str, fg: str) -> str:
        if not self.color:
            return text
        return click.style(text, fg=fg)

    def location(self, diagnostic: Diagnostic) -> str:
        if diagnostic.location is None:
            return f"{self.filename}:"
        return f"{self.filename}:{diagnostic.location}:"

    def emit(self, diagnostic: Diagnostic) -> None:
        message = f"{LABELS[diagnostic.severity]}: {diagnostic.message}."
        click.echo(
            f"{self.location(diagnostic)} "
            f"{self._style(message, COLORS[diagnostic.severity])}"
        )
        if not self.verbose:
            return

        for reference in diagnostic.references:
            click.echo(f"{self._style('CONTEXT:', 'blue')} {reference}")
        click.echo(f"{self._style('KEY:', 'blue')} {diagnostic.source_key}")
        translated = "" if diagnostic.translated_text is None else diagnostic.translated_text
        click.echo(f"{self._style('TRN:', 'blue')} {translated}")
        click.echo(RULE)

    def summary(self, errors: int, warnings: int) -> None:
        if errors + warnings > 0:
            click.echo(f"{errors} errors, {warnings} warnings.", err=True)
