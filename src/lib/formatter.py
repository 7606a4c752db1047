"""
Markup formatter: Document -> normalized docweave source

The second output format. Emits every document in one canonical spelling:

    - Front matter as sorted YAML
    - Headings always carry their anchor explicitly ({#anchor})
    - "-" bullets, "N." ordered markers ("*" / "N)" for a list right after
      a list of the same kind), ":::" admonitions
    - Backtick fences long enough to contain the code verbatim
    - Literal text escaped wherever it could be read back as markup

Parsing the formatted text yields the same block structure as the document
it came from (compare with models.document.document_outline).
"""

import re
from typing import Callable, Dict, List, Tuple

import yaml

from ..models.document import (
    Admonition,
    Block,
    CodeBlock,
    CodeSpan,
    CrossRef,
    Document,
    Emphasis,
    Heading,
    Inline,
    Link,
    ListBlock,
    Paragraph,
    Strong,
    Table,
    Text,
)
from .log import LOG

# Characters that are markup anywhere in inline text
_INLINE_SPECIAL = re.compile(r"([\\`*_\[\]|])")

# Line starts that would open a block: headings, bullets, fences, admonitions
_LINE_START_SPECIAL = re.compile(r"^([#\-+~:])")
_LINE_START_ORDERED = re.compile(r"^(\d{1,9})([.)])")

_ALIGNMENT_DELIMITERS = {"left": ":---", "right": "---:", "center": ":---:", "": "---"}


def text_escape(value: str, line_start: bool = False) -> str:
    """
    Escape literal text so it reads back as the same text

    Args:
        value: Literal text (may span lines)
        line_start: value begins at the start of a source line

    Example:
        >>> text_escape("1. not a *list*", line_start=True)
        '1\\\\. not a \\\\*list\\\\*'
    """
    lines = _INLINE_SPECIAL.sub(r"\\\1", value).split("\n")
    for index, line in enumerate(lines):
        if index == 0 and not line_start:
            continue
        line = _LINE_START_SPECIAL.sub(r"\\\1", line)
        lines[index] = _LINE_START_ORDERED.sub(r"\1\\\2", line)
    return "\n".join(lines)


def codeSpan_format(value: str) -> str:
    """
    Wrap literal code in the shortest backtick run that does not occur in it

    Pads with one space on each side when the content starts or ends with a
    backtick, or when it is itself space-padded (the parser trims one space).
    """
    runs = {len(run) for run in re.findall(r"`+", value)}
    width = 1
    while width in runs:
        width += 1
    fence = "`" * width

    pad = ""
    if value and (
        value[0] == "`"
        or value[-1] == "`"
        or (len(value) >= 2 and value[0] == " " and value[-1] == " " and value.strip(" "))
    ):
        pad = " "
    return f"{fence}{pad}{value}{pad}{fence}"


class MarkupFormatter:
    """
    Formats a Document back into docweave markup

    Example:
        >>> MarkupFormatter(Parser("# Hello", "index").parse()).format()
        '# Hello {#hello}\\n'
    """

    def __init__(self, document: Document) -> None:
        self.document = document
        self.formatters: Dict[str, Callable[[Block], List[str]]] = {
            "heading": self.heading_format,
            "paragraph": self.paragraph_format,
            "code": self.codeBlock_format,
            "table": self.table_format,
            "list": self.list_format,
            "admonition": self.admonition_format,
        }

    def format(self) -> str:
        """
        Format the whole document

        Returns:
            Markup text ending in a newline (empty for an empty document)
        """
        LOG(f"Formatting {self.document.doc_id}", level=3)
        parts = []
        front = self.frontMatter_format()
        if front:
            parts.append(front)
        body = self.blocks_format(self.document.blocks)
        if body:
            parts.append(body)
        if not parts:
            return ""
        return "\n\n".join(parts) + "\n"

    def frontMatter_format(self) -> str:
        if not self.document.meta:
            return ""
        dumped = yaml.safe_dump(
            self.document.meta, sort_keys=True, allow_unicode=True, default_flow_style=False
        )
        return f"---\n{dumped}---"

    def blocks_format(self, blocks: Tuple[Block, ...]) -> str:
        """
        Blocks separated by blank lines

        A list that directly follows a list of the same kind switches to the
        alternate marker ("*" bullets, "N)" numbers); with the default marker
        the blank line alone would merge the two back into one list.
        """
        parts: List[str] = []
        previous = None
        alternate = False
        for block in blocks:
            if isinstance(block, ListBlock):
                alternate = (
                    isinstance(previous, ListBlock)
                    and previous.ordered == block.ordered
                    and not alternate
                )
                lines = self.list_format(block, alternate=alternate)
            else:
                lines = self.formatters[block.kind](block)
            parts.append("\n".join(lines))
            previous = block
        return "\n\n".join(parts)

    # ------------------------------------------------------------------
    # Inline spans
    # ------------------------------------------------------------------

    def inlines_format(self, inlines: Tuple[Inline, ...], line_start: bool = False) -> str:
        """
        Format inline spans

        Args:
            inlines: Spans to format
            line_start: the first span begins a source line
        """
        parts = []
        for index, span in enumerate(inlines):
            parts.append(self.inline_format(span, line_start and index == 0))
        return "".join(parts)

    def inline_format(self, span: Inline, line_start: bool = False) -> str:
        if isinstance(span, Text):
            return text_escape(span.value, line_start)
        if isinstance(span, CodeSpan):
            return codeSpan_format(span.value)
        if isinstance(span, Strong):
            return f"**{self.inlines_format(span.children)}**"
        if isinstance(span, Emphasis):
            # "***x***" reads as strong-around-emphasis; spell the inner strong differently
            if len(span.children) == 1 and isinstance(span.children[0], Strong):
                return f"*__{self.inlines_format(span.children[0].children)}__*"
            return f"*{self.inlines_format(span.children)}*"
        if isinstance(span, Link):
            return f"[{self.inlines_format(span.children)}]({span.url})"
        if isinstance(span, CrossRef):
            if span.label is not None:
                return f"[[{span.token}|{span.label}]]"
            return f"[[{span.token}]]"
        raise ValueError(f"Cannot format inline span of kind '{span.kind}'")

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def heading_format(self, block: Heading) -> List[str]:
        text = self.inlines_format(block.inlines)
        return [f"{'#' * block.level} {text} {{#{block.anchor}}}"]

    def paragraph_format(self, block: Paragraph) -> List[str]:
        return self.inlines_format(block.inlines, line_start=True).split("\n")

    def codeBlock_format(self, block: CodeBlock) -> List[str]:
        longest = max((len(run) for run in re.findall(r"`+", block.text)), default=0)
        fence = "`" * max(3, longest + 1)
        return [f"{fence}{block.language}", *block.text.split("\n"), fence]

    def table_format(self, block: Table) -> List[str]:
        def row(cells: Tuple[Tuple[Inline, ...], ...]) -> str:
            return "| " + " | ".join(self.inlines_format(cell) for cell in cells) + " |"

        delimiter = "| " + " | ".join(_ALIGNMENT_DELIMITERS[a] for a in block.alignments) + " |"
        return [row(block.header), delimiter, *(row(cells) for cells in block.rows)]

    def list_format(self, block: ListBlock, indent: int = 0, alternate: bool = False) -> List[str]:
        """
        List items with continuation lines and sublists at the content column
        """
        lines: List[str] = []
        for offset, item in enumerate(block.items):
            if block.ordered:
                marker = f"{block.start + offset}{')' if alternate else '.'}"
            else:
                marker = "*" if alternate else "-"
            column = indent + len(marker) + 1
            text = self.inlines_format(item.inlines, line_start=True)
            first, *rest = text.split("\n")
            lines.append(f"{' ' * indent}{marker} {first}".rstrip())
            lines.extend(f"{' ' * column}{line}" for line in rest)
            if item.sublist is not None:
                lines.extend(self.list_format(item.sublist, column))
        return lines

    def admonition_format(self, block: Admonition) -> List[str]:
        title = block.title
        if len(title) >= 2 and title[0] == title[-1] and title[0] in "\"'":
            title = f'"{title}"'
        opener = f"::: {block.variant} {title}".rstrip()
        lines = [opener]
        body = self.blocks_format(block.blocks)
        if body:
            lines.extend(body.split("\n"))
        lines.append(":::")
        return lines


def document_format(document: Document) -> str:
    """Normalized markup text for a document"""
    return MarkupFormatter(document).format()
