class PocheckError(Exception):
    """Base class for failures that abort checking a catalog."""


class ParseFailed(PocheckError):
    """The grammar could not derive a parse tree for the input.

    ``expected`` holds ``(rule path, expectation)`` pairs for every terminal
    that was attempted at the deepest position reached.
    """

    def __init__(
        self,
        position: int,
        line: int,
        column: int,
        expected: list[tuple[str, str]],
    ) -> None:
        self.position = position
        self.line = line
        self.column = column
        self.expected = expected
        super().__init__(self.cause)

    @property
    def cause(self) -> str:
        lines = [f"Failed to parse catalog at line {self.line} char {self.column}:"]
        for path, expectation in self.expected:
            lines.append(f"  {path}: expected {expectation}")
        return "\n".join(lines)


class MissingPluralForms(PocheckError):
    pass


class CatalogToolError(PocheckError):
    pass
