"""
Exception hierarchy for docweave

Every failure surfaced to the user carries the path of the offending source
file and, where one exists, a line/column locator.
"""

from typing import Optional


class DocweaveError(Exception):
    """Base exception for docweave build failures"""


class ParseError(DocweaveError):
    """
    Malformed markup in one source file

    Fatal for the document it occurs in; other documents still build.

    Attributes:
        message: Human-readable description
        source: Path of the source file
        line: 1-based line number
        column: 1-based column number
        context: The offending source line, when known
    """

    def __init__(
        self, message: str, source: str, line: int, column: int = 1, context: Optional[str] = None
    ) -> None:
        self.message = message
        self.source = source
        self.line = line
        self.column = column
        self.context = context
        super().__init__(f"{source}:{line}:{column}: {message}")

    def details(self) -> str:
        """
        Error text with the source line and a caret under the column

        Example output:
            guide.md:3:1: unterminated code fence opened at line 3
                ```python
                ^
        """
        if self.context is None:
            return str(self)
        caret = " " * max(self.column - 1, 0) + "^"
        return f"{self}\n    {self.context}\n    {caret}"


class UnresolvedReferenceError(DocweaveError):
    """
    Cross-reference whose target does not exist in the build

    Fatal for the whole build: nothing is written.

    Attributes:
        token: The reference target as written
        source: Path of the referring source file
        line: 1-based line of the reference
        column: 1-based column of the reference
        reason: Why resolution failed
    """

    def __init__(self, token: str, source: str, line: int, column: int, reason: str) -> None:
        self.token = token
        self.source = source
        self.line = line
        self.column = column
        self.reason = reason
        super().__init__(f"{source}:{line}:{column}: unresolved reference [[{token}]]: {reason}")


class SourceIOError(DocweaveError, OSError):
    """Reading a source or writing an output failed (missing file, permissions)"""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")
