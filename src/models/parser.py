"""
Parser-specific data models

Type-safe structures for parser operations and return values.
"""

from dataclasses import dataclass
from typing import List


@dataclass
class ListMarker:
    """
    A list item marker found at the start of a line

    Returned by Parser.listMarker_match() for lines such as "  - item" or
    "3. item".

    Attributes:
        indent: Column (0-based) of the marker character
        ordered: True for "N." / "N)" markers
        symbol: Bullet character, or the ordered delimiter ("." or ")")
        number: Item number for ordered markers (1 for bullets)
        content_column: 0-based column where item text starts; nested lists
                        must be indented exactly this far
        text: Item text on the marker line (may be empty)

    Example:
        For line "  10. Install":
        ListMarker(indent=2, ordered=True, symbol=".", number=10,
                   content_column=6, text="Install")
    """
    indent: int
    ordered: bool
    symbol: str
    number: int
    content_column: int
    text: str

    def sameType_check(self, other: "ListMarker") -> bool:
        """True when both markers may appear as siblings in one list"""
        return self.ordered == other.ordered and self.symbol == other.symbol


@dataclass
class TextLines:
    """
    Lines of inline text gathered for one paragraph, list item or cell

    Attributes:
        lines: Text of each line with leading indentation removed
        first_line: 1-based source line of lines[0]
        columns: 1-based source column where each line's text starts

    Example:
        A paragraph "  Hello\\n  world" starting at line 4:
        TextLines(lines=["Hello", "world"], first_line=4, columns=[3, 3])
    """
    lines: List[str]
    first_line: int
    columns: List[int]

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@dataclass
class TableCell:
    """
    One cell of a pipe-table row

    Attributes:
        text: Cell text with surrounding whitespace stripped (escapes kept)
        column: 1-based source column of the first character of text
    """
    text: str
    column: int


@dataclass
class FenceRegion:
    """
    Extent of a fenced construct (code fence or admonition)

    Attributes:
        open_index: Line index of the opening fence
        close_index: Line index of the closing fence
    """
    open_index: int
    close_index: int
