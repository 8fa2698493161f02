"""Wrappers around GNU msgcat, which validates and unwraps catalogs for us."""
import logging
import pathlib
import re
import subprocess
from typing import Iterable

from pocheck.errors import CatalogToolError

logger = logging.getLogger(__name__)

MSGID_LINE = re.compile(r'msgid\s+"(.*)"$')


def _msgcat(executable: str, args: list[str], **kwargs) -> subprocess.CompletedProcess:
    try:
        return subprocess.run([executable, *args], text=True, encoding="utf-8", **kwargs)
    except FileNotFoundError:
        raise CatalogToolError(f"Catalog tool '{executable}' not found, is gettext installed?")


def lint(path: str, executable: str = "msgcat") -> None:
    """Check the PO file for syntactical correctness."""
    logger.debug(f"Linting {path} with {executable}")
    result = _msgcat(executable, [path], stdout=subprocess.DEVNULL, stderr=subprocess.PIPE)
    if result.returncode != 0:
        logger.debug(result.stderr)
        raise CatalogToolError(f"The PO file '{path}' is broken, aborting.")


def annotate(lines: Iterable[str]) -> str:
    """Prefix every msgid after the header with its 1-based line number."""
    data = []
    header_seen = False
    for lineno, line in enumerate(lines, start=1):
        match = MSGID_LINE.match(line.rstrip("\r\n"))
        if match is None:
            data.append(line)
        elif header_seen:
            data.append(f'msgid "{lineno}:{match.group(1)}"\n')
        else:
            data.append(line)
            header_seen = True
    return "".join(data)


def unwrap(text: str, executable: str = "msgcat", source: str = "<stdin>") -> str:
    """Collapse every quoted string onto a single line."""
    result = _msgcat(
        executable,
        ["--no-wrap", "-"],
        input=text,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    if result.returncode != 0:
        logger.debug(result.stderr)
        raise CatalogToolError(f"Error while loading the PO file '{source}', aborting.")
    return result.stdout


def load(path: str, executable: str = "msgcat") -> str:
    """Load the PO file, annotate msgids with line numbers and unwrap lines."""
    try:
        with pathlib.Path(path).open("r", encoding="utf-8") as file:
            annotated = annotate(file)
    except UnicodeDecodeError:
        raise CatalogToolError(f"The PO file '{path}' is not UTF-8 encoded, aborting.")
    return unwrap(annotated, executable, source=path)
