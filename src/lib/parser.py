"""
Parser for docweave markup

Transforms one markup source file into an immutable Document tree.

The parser operates in three phases:
1. Front matter: an optional YAML mapping between two "---" lines
2. Blocks: a line scanner that recognizes headings, code fences,
   admonitions, pipe tables, lists and paragraphs, recursing into
   admonition bodies
3. Anchors: headings without an explicit {#anchor} receive a unique slug

Inline text is handed to the InlineParser with its source locators, so every
error anywhere in the document reports a line and column.

Key features:
- Code fences with language tags (``` or ~~~, any length >= 3)
- Anchored headings (# Title {#custom-anchor})
- Admonition callouts (::: warning Title ... :::), nestable
- Nested lists by indentation, with strict nesting checks
- Line/column tracking for error reporting

Example:
    >>> doc = Parser("# Hello\\n\\nWorld", doc_id="index").parse()
    >>> doc.blocks[0].anchor
    'hello'
    >>> doc.blocks[1].kind
    'paragraph'
"""

import re
import unicodedata
from dataclasses import replace
from typing import Any, Dict, List, Optional, Set, Tuple

import yaml

from ..config import appsettings
from ..models.document import (
    Admonition,
    Block,
    CodeBlock,
    Document,
    Heading,
    ListBlock,
    ListItem,
    Paragraph,
    Table,
    inlines_plainText,
)
from ..models.parser import FenceRegion, ListMarker, TableCell, TextLines
from .errors import ParseError
from .inline import InlineParser
from .log import LOG
from .theme import pygmentsStyle_check, tocDepth_check

FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(?P<fence>`{3,}|~{3,})[ \t]*(?P<info>[^\s`]*)[^`]*$")
FENCE_CLOSE_RE = re.compile(r"^[ \t]*(?P<fence>`{3,}|~{3,})[ \t]*$")
HEADING_RE = re.compile(r"^[ ]{0,3}(?P<hashes>#{1,6})(?:[ \t]+(?P<text>.*?))?[ \t]*$")
ANCHOR_SUFFIX_RE = re.compile(r"[ \t]*\{#(?P<anchor>[\w][\w.:-]*)\}$")
ADMONITION_OPEN_RE = re.compile(
    r"^[ \t]*(?P<colons>:{3,})[ \t]*(?P<variant>[A-Za-z][\w-]*)(?:[ \t]+(?P<title>.*?))?[ \t]*$"
)
ADMONITION_CLOSE_RE = re.compile(r"^[ \t]*(?P<colons>:{3,})[ \t]*$")
LIST_MARKER_RE = re.compile(
    r"^(?P<indent>[ ]*)(?:(?P<bullet>[-*+])|(?P<number>\d{1,9})(?P<delim>[.)]))"
    r"(?:(?P<gap>[ \t]+)(?P<text>.*?))?[ \t]*$"
)
TABLE_DELIMITER_RE = re.compile(r"^[ \t]*\|?(?:[ \t]*:?-+:?[ \t]*\|)*[ \t]*:?-+:?[ \t]*\|?[ \t]*$")


def slug_make(text: str, max_length: Optional[int] = None) -> str:
    """
    Turn heading text into an anchor slug

    Lowercases, drops punctuation, and joins words with hyphens. Letters
    outside ASCII are kept.

    Example:
        >>> slug_make("Why not Rust?  (FAQ)")
        'why-not-rust-faq'
    """
    if max_length is None:
        max_length = appsettings.slug_max_length
    text = unicodedata.normalize("NFKC", text).lower()
    text = re.sub(r"[^\w\s-]", "", text).strip()
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"-{2,}", "-", text)
    return text[:max_length].strip("-")


class Parser:
    """
    Parser for docweave markup

    Handles:
    - YAML front matter
    - Headings with explicit or generated anchors
    - Code fences, admonitions, pipe tables, nested lists, paragraphs
    - Inline spans via InlineParser
    - Error reporting with line and column numbers
    """

    def __init__(
        self,
        source: str,
        doc_id: str = "index",
        path: Optional[str] = None,
        registry=None,
    ):
        """
        Initialize parser with source text

        Args:
            source: Raw markup text (.md file contents)
            doc_id: Identity of the document (source path without suffix)
            path: Source path for error messages (defaults to doc_id + suffix)
            registry: Optional ElementRegistry for validating admonition kinds

        Attributes:
            lines: Source split into lines, newlines normalized
            explicit_anchors: Explicit heading anchors seen so far -> line
        """
        self.source = source
        self.doc_id = doc_id
        self.path = path or f"{doc_id}{appsettings.source_suffix}"
        self.lines: List[str] = source.replace("\r\n", "\n").replace("\r", "\n").split("\n")
        self.explicit_anchors: Dict[str, int] = {}

        # Import and create registry if not provided
        if registry is None:
            from .elements import ElementRegistry
            registry = ElementRegistry()
        self.registry = registry

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def parse(self) -> Document:
        """
        Parse source text into a Document

        Returns:
            Document with front matter, blocks and unique heading anchors

        Raises:
            ParseError: If the source is malformed (unterminated fence or
                        admonition, mismatched list nesting, bad table,
                        invalid front matter, duplicate anchor, ...)
        """
        meta, start = self.frontMatter_parse()
        blocks = self.blocks_parse(start, len(self.lines))
        blocks = self.anchors_assign(blocks)
        return Document(doc_id=self.doc_id, source=self.path, blocks=tuple(blocks), meta=meta)

    def error(self, message: str, index: int, column: int = 1) -> None:
        """
        Report parser error with source context

        Args:
            message: Human-readable error description
            index: 0-based line index of the error
            column: 1-based column of the error

        Raises:
            ParseError: Always (this is an error reporting function)
        """
        context = self.lines[index] if 0 <= index < len(self.lines) else None
        raise ParseError(message, self.path, index + 1, column, context=context)

    # ------------------------------------------------------------------
    # Front matter
    # ------------------------------------------------------------------

    def frontMatter_parse(self) -> Tuple[Dict[str, Any], int]:
        """
        Extract YAML front matter from the top of the source

        Returns:
            (meta mapping, index of the first line after the front matter)
        """
        if not self.lines or self.lines[0].rstrip() != "---":
            return {}, 0

        for index in range(1, len(self.lines)):
            if self.lines[index].rstrip() in ("---", "..."):
                break
        else:
            self.error("unterminated front matter (missing closing '---')", 0)

        text = "\n".join(self.lines[1:index])
        try:
            meta = yaml.safe_load(text)
        except yaml.YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            if mark is not None:
                self.error(f"invalid front matter: {getattr(e, 'problem', e)}", mark.line + 1, mark.column + 1)
            self.error(f"invalid front matter: {e}", 0)

        if meta is None:
            meta = {}
        if not isinstance(meta, dict):
            self.error("front matter must be a mapping", 1)
        self.frontMatter_validate(meta, index)
        return meta, index + 1

    def frontMatter_validate(self, meta: Dict[str, Any], end: int) -> None:
        """
        Check the page options a document may override in its front matter

        Args:
            meta: Parsed front matter
            end: Index of the closing "---" line

        Raises:
            ParseError: code/toc is not a mapping, code.pygments_style names
                        no Pygments style, toc.depth is not an integer 1..6,
                        or toc.show is not a boolean
        """
        for section in ("code", "toc"):
            if section in meta and not isinstance(meta[section], dict):
                index, column = self.frontMatterKey_find(end, section)
                self.error(f"front matter '{section}' must be a mapping", index, column)

        code = meta.get("code", {})
        if "pygments_style" in code and not pygmentsStyle_check(code["pygments_style"]):
            index, column = self.frontMatterKey_find(end, "pygments_style", "code")
            self.error(
                f"front matter code.pygments_style: unknown Pygments style '{code['pygments_style']}'",
                index,
                column,
            )

        toc = meta.get("toc", {})
        if "depth" in toc and not tocDepth_check(toc["depth"]):
            index, column = self.frontMatterKey_find(end, "depth", "toc")
            self.error("front matter toc.depth must be an integer from 1 to 6", index, column)
        if "show" in toc and not isinstance(toc["show"], bool):
            index, column = self.frontMatterKey_find(end, "show", "toc")
            self.error("front matter toc.show must be true or false", index, column)

    def frontMatterKey_find(self, end: int, *keys: str) -> Tuple[int, int]:
        """
        Locate the first of keys written as "key:" inside the front matter

        Returns:
            (0-based line index, 1-based column), or the opening "---" line
            when none of the keys appears on a line of its own
        """
        for key in keys:
            pattern = re.compile(rf"^(?P<indent>[ \t]*){re.escape(key)}[ \t]*:")
            for index in range(1, end):
                match = pattern.match(self.lines[index])
                if match:
                    return index, len(match.group("indent")) + 1
        return 0, 1

    # ------------------------------------------------------------------
    # Block scanner
    # ------------------------------------------------------------------

    def blocks_parse(self, start: int, end: int) -> List[Block]:
        """
        Parse lines[start:end] into blocks

        Called for the document body and, recursively, for admonition bodies.
        """
        blocks: List[Block] = []
        index = start

        while index < end:
            line = self.lines[index]

            if not line.strip():
                index += 1
                continue

            if FENCE_RE.match(line):
                block, index = self.codeBlock_parse(index, end)
            elif ADMONITION_OPEN_RE.match(line):
                block, index = self.admonition_parse(index, end)
            elif ADMONITION_CLOSE_RE.match(line):
                self.error("closing ':::' without a matching admonition", index, line.index(":") + 1)
            elif HEADING_RE.match(line):
                block, index = self.heading_parse(index)
            elif self.tableStart_check(index, end):
                block, index = self.table_parse(index, end)
            elif self.listMarker_match(line):
                block, index = self.list_parse(index, end)
            else:
                block, index = self.paragraph_parse(index, end)

            blocks.append(block)

        return blocks

    def blockStart_check(self, index: int, end: int) -> bool:
        """True if lines[index] starts any block other than a paragraph"""
        line = self.lines[index]
        return bool(
            FENCE_RE.match(line)
            or ADMONITION_OPEN_RE.match(line)
            or ADMONITION_CLOSE_RE.match(line)
            or HEADING_RE.match(line)
            or self.listMarker_match(line)
            or self.tableStart_check(index, end)
        )

    # ------------------------------------------------------------------
    # Code fences
    # ------------------------------------------------------------------

    def fenceClose_find(self, index: int, end: int) -> int:
        """
        Find the line closing the code fence opened at lines[index]

        Raises:
            ParseError: If no closing fence exists before end
        """
        match = FENCE_RE.match(self.lines[index])
        fence = match.group("fence")
        for cursor in range(index + 1, end):
            close = FENCE_CLOSE_RE.match(self.lines[cursor])
            if close and close.group("fence")[0] == fence[0] and len(close.group("fence")) >= len(fence):
                return cursor
        self.error(
            f"unterminated code fence opened at line {index + 1}",
            index,
            len(match.group("indent")) + 1,
        )
        return end

    def codeBlock_parse(self, index: int, end: int) -> Tuple[Block, int]:
        match = FENCE_RE.match(self.lines[index])
        close = self.fenceClose_find(index, end)
        indent = len(match.group("indent"))

        body = []
        for line in self.lines[index + 1:close]:
            leading = len(line) - len(line.lstrip(" "))
            body.append(line[min(leading, indent):])

        block = CodeBlock(language=match.group("info"), text="\n".join(body), line=index + 1)
        return block, close + 1

    # ------------------------------------------------------------------
    # Admonitions
    # ------------------------------------------------------------------

    def admonitionRegion_find(self, index: int, end: int) -> FenceRegion:
        """
        Find the closing ':::' for the admonition opened at lines[index]

        Nested admonitions with the same colon count are tracked by depth,
        and code fences are skipped so ':::' inside code never closes.

        Raises:
            ParseError: If the admonition (or a code fence inside it) is
                        unterminated
        """
        colons = ADMONITION_OPEN_RE.match(self.lines[index]).group("colons")
        depth = 0
        cursor = index + 1

        while cursor < end:
            line = self.lines[cursor]
            if FENCE_RE.match(line):
                cursor = self.fenceClose_find(cursor, end) + 1
                continue
            opener = ADMONITION_OPEN_RE.match(line)
            if opener and opener.group("colons") == colons:
                depth += 1
            closer = ADMONITION_CLOSE_RE.match(line)
            if closer and closer.group("colons") == colons:
                if depth == 0:
                    return FenceRegion(open_index=index, close_index=cursor)
                depth -= 1
            cursor += 1

        self.error(
            f"unterminated admonition opened at line {index + 1}",
            index,
            self.lines[index].index(":") + 1,
        )
        return FenceRegion(open_index=index, close_index=end)

    def admonition_parse(self, index: int, end: int) -> Tuple[Block, int]:
        line = self.lines[index]
        match = ADMONITION_OPEN_RE.match(line)
        region = self.admonitionRegion_find(index, end)

        variant = match.group("variant")
        spec = self.registry.admonition_get(variant)
        if spec is not None:
            variant = spec.name
        elif appsettings.strict_admonitions:
            self.error(f"unknown admonition kind '{variant}'", index, match.start("variant") + 1)
        else:
            LOG(f"{self.path}:{index + 1}: unknown admonition kind '{variant}'", level=2)
            variant = variant.lower()

        title = (match.group("title") or "").strip()
        if len(title) >= 2 and title[0] == title[-1] and title[0] in "\"'":
            title = title[1:-1]

        body = self.blocks_parse(index + 1, region.close_index)
        block = Admonition(variant=variant, title=title, blocks=tuple(body), line=index + 1)
        return block, region.close_index + 1

    # ------------------------------------------------------------------
    # Headings
    # ------------------------------------------------------------------

    def heading_parse(self, index: int) -> Tuple[Block, int]:
        line = self.lines[index]
        match = HEADING_RE.match(line)
        text = match.group("text") or ""
        if not text:
            self.error("empty heading", index, match.start("hashes") + 1)

        anchor = ""
        suffix = ANCHOR_SUFFIX_RE.search(text)
        if suffix and not self.escaped_check(text, suffix.start("anchor") - 2):
            anchor = suffix.group("anchor")
            column = match.start("text") + suffix.start("anchor") + 1
            if anchor in self.explicit_anchors:
                self.error(
                    f"duplicate anchor '{anchor}' (first defined at line {self.explicit_anchors[anchor]})",
                    index,
                    column,
                )
            self.explicit_anchors[anchor] = index + 1
            text = text[:suffix.start()]
            if not text.strip():
                self.error("empty heading", index, match.start("hashes") + 1)

        inlines = InlineParser(
            text, self.doc_id, self.path, index + 1, [match.start("text") + 1]
        ).parse()
        block = Heading(level=len(match.group("hashes")), inlines=inlines, anchor=anchor, line=index + 1)
        return block, index + 1

    def anchors_assign(self, blocks: List[Block]) -> List[Block]:
        """
        Give every heading without an explicit anchor a unique slug

        Explicit anchors are reserved first, so a generated slug never takes
        a name that some heading asked for. Clashes between generated slugs
        get -1, -2, ... suffixes in document order.
        """
        used: Set[str] = set(self.explicit_anchors)

        def heading_anchor(heading: Heading) -> Heading:
            if heading.anchor:
                return heading
            slug = slug_make(inlines_plainText(heading.inlines)) or "section"
            candidate = slug
            counter = 1
            while candidate in used:
                candidate = f"{slug}-{counter}"
                counter += 1
            used.add(candidate)
            return replace(heading, anchor=candidate)

        def walk(items: List[Block]) -> List[Block]:
            result: List[Block] = []
            for block in items:
                if isinstance(block, Heading):
                    block = heading_anchor(block)
                elif isinstance(block, Admonition):
                    block = replace(block, blocks=tuple(walk(list(block.blocks))))
                result.append(block)
            return result

        return walk(blocks)

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def tableStart_check(self, index: int, end: int) -> bool:
        """A table starts with a '|' row directly followed by a delimiter row"""
        if not self.lines[index].lstrip().startswith("|"):
            return False
        if index + 1 >= end:
            return False
        delimiter = self.lines[index + 1]
        return "|" in delimiter and "-" in delimiter and bool(TABLE_DELIMITER_RE.match(delimiter))

    def tableRow_split(self, line: str) -> List[TableCell]:
        """
        Split a table row on unescaped '|' into cells

        Leading and trailing pipes are optional. A '|' inside a [[...]]
        cross-reference separates its label and does not split the cell.
        Escapes are kept in the cell text for the inline parser to resolve.
        """
        start = len(line) - len(line.lstrip())
        stop = len(line.rstrip())
        if start < stop and line[start] == "|":
            start += 1
        if stop > start and line[stop - 1] == "|" and not self.escaped_check(line, stop - 1):
            stop -= 1

        cells: List[TableCell] = []
        cell_start = start
        pos = start
        while pos <= stop:
            if line.startswith("[[", pos) and not self.escaped_check(line, pos):
                close = line.find("]]", pos + 2, stop)
                if close != -1:
                    pos = close + 2
                    continue
            if pos == stop or (line[pos] == "|" and not self.escaped_check(line, pos)):
                raw = line[cell_start:pos]
                stripped = raw.lstrip()
                cells.append(TableCell(text=stripped.rstrip(), column=cell_start + (len(raw) - len(stripped)) + 1))
                cell_start = pos + 1
            pos += 1
        return cells

    @staticmethod
    def escaped_check(line: str, pos: int) -> bool:
        """True if line[pos] is preceded by an odd number of backslashes"""
        count = 0
        pos -= 1
        while pos >= 0 and line[pos] == "\\":
            count += 1
            pos -= 1
        return count % 2 == 1

    def tableCells_parse(self, cells: List[TableCell], index: int) -> tuple:
        return tuple(
            InlineParser(cell.text, self.doc_id, self.path, index + 1, [cell.column]).parse()
            for cell in cells
        )

    def table_parse(self, index: int, end: int) -> Tuple[Block, int]:
        header = self.tableRow_split(self.lines[index])
        delimiter = self.tableRow_split(self.lines[index + 1])
        if len(delimiter) != len(header):
            self.error(
                f"table delimiter row has {len(delimiter)} cells, header has {len(header)}",
                index + 1,
            )

        alignments = []
        for cell in delimiter:
            spec = cell.text.replace(" ", "")
            if spec.startswith(":") and spec.endswith(":"):
                alignments.append("center")
            elif spec.endswith(":"):
                alignments.append("right")
            elif spec.startswith(":"):
                alignments.append("left")
            else:
                alignments.append("")

        rows = []
        cursor = index + 2
        while cursor < end and self.lines[cursor].lstrip().startswith("|"):
            cells = self.tableRow_split(self.lines[cursor])
            if len(cells) != len(header):
                self.error(
                    f"table row has {len(cells)} cells, expected {len(header)}",
                    cursor,
                    len(self.lines[cursor]) - len(self.lines[cursor].lstrip()) + 1,
                )
            rows.append(self.tableCells_parse(cells, cursor))
            cursor += 1

        block = Table(
            header=self.tableCells_parse(header, index),
            rows=tuple(rows),
            alignments=tuple(alignments),
            line=index + 1,
        )
        return block, cursor

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    def listMarker_match(self, line: str) -> Optional[ListMarker]:
        """
        Recognize a list item marker at the start of line

        Returns:
            ListMarker, or None if the line is not a list item
        """
        match = LIST_MARKER_RE.match(line.expandtabs(4))
        if not match:
            return None
        indent = len(match.group("indent"))
        if match.group("bullet"):
            ordered, symbol, number = False, match.group("bullet"), 1
            width = 1
        else:
            ordered, symbol, number = True, match.group("delim"), int(match.group("number"))
            width = len(match.group("number")) + 1
        text = match.group("text") or ""
        gap = len(match.group("gap") or " ")
        if not text:
            gap = 1
        return ListMarker(
            indent=indent,
            ordered=ordered,
            symbol=symbol,
            number=number,
            content_column=indent + width + gap,
            text=text,
        )

    @staticmethod
    def indent_measure(line: str) -> int:
        expanded = line.expandtabs(4)
        return len(expanded) - len(expanded.lstrip())

    def blankSkip_peek(self, index: int, end: int) -> int:
        """Index of the next non-blank line at or after index (end if none)"""
        while index < end and not self.lines[index].strip():
            index += 1
        return index

    def list_parse(self, index: int, end: int) -> Tuple[Block, int]:
        marker = self.listMarker_match(self.lines[index])
        return self.listLevel_parse(index, end, marker.indent)

    def listLevel_parse(self, index: int, end: int, indent: int) -> Tuple[ListBlock, int]:
        """
        Parse one nesting level of a list whose markers sit at column indent

        Returns when a line belongs to an outer level or ends the list.

        Raises:
            ParseError: On a marker whose indentation matches no open level,
                        or a marker type change within this level
        """
        items: List[ListItem] = []
        first: Optional[ListMarker] = None
        start_index = index

        while index < end:
            line = self.lines[index]

            if not line.strip():
                cursor = self.blankSkip_peek(index, end)
                if cursor < end:
                    marker = self.listMarker_match(self.lines[cursor])
                    # after a blank line, a different marker type starts a new list
                    if marker and marker.indent == indent and (first is None or marker.sameType_check(first)):
                        index = cursor
                        continue
                break

            marker = self.listMarker_match(line)
            if marker is None or marker.indent < indent:
                break
            if marker.indent > indent:
                self.error("mismatched list nesting: item indentation matches no open list", index, marker.indent + 1)

            if first is None:
                first = marker
            elif not marker.sameType_check(first):
                self.error(
                    "mismatched list nesting: marker type changes within one list level",
                    index,
                    marker.indent + 1,
                )

            item, index = self.listItem_parse(index, end, marker)
            items.append(item)

        block = ListBlock(
            ordered=first.ordered,
            start=first.number,
            items=tuple(items),
            line=start_index + 1,
        )
        return block, index

    def listItemText_check(self, text: str, index: int, column: int) -> None:
        """
        List items hold inline text only

        Raises:
            ParseError: text opens a code fence or an admonition
        """
        if FENCE_RE.match(text):
            self.error("code fence inside a list item (list items hold inline text only)", index, column)
        if ADMONITION_OPEN_RE.match(text):
            self.error("admonition inside a list item (list items hold inline text only)", index, column)

    def listItem_parse(self, index: int, end: int, marker: ListMarker) -> Tuple[ListItem, int]:
        """Parse one item: its text lines and at most one nested list"""
        content_column = marker.content_column
        text = TextLines(
            lines=[marker.text] if marker.text else [],
            first_line=index + 1,
            columns=[content_column + 1] if marker.text else [],
        )
        sublist: Optional[ListBlock] = None
        item_index = index
        if marker.text:
            self.listItemText_check(marker.text, index, content_column + 1)
        index += 1

        while index < end:
            line = self.lines[index]

            if not line.strip():
                cursor = self.blankSkip_peek(index, end)
                if cursor < end and sublist is None:
                    nested = self.listMarker_match(self.lines[cursor])
                    if nested and nested.indent == content_column:
                        index = cursor
                        continue
                break

            indent = self.indent_measure(line)
            nested = self.listMarker_match(line)

            if nested is not None:
                if nested.indent <= marker.indent:
                    break
                if nested.indent != content_column or sublist is not None:
                    self.error(
                        "mismatched list nesting: item indentation matches no open list",
                        index,
                        nested.indent + 1,
                    )
                sublist, index = self.listLevel_parse(index, end, content_column)
                continue

            if indent < content_column:
                break
            if sublist is not None:
                self.error("text after a nested list must start a new item", index, indent + 1)

            self.listItemText_check(line.strip(), index, indent + 1)
            if not text.lines:
                text.first_line = index + 1
            text.lines.append(line.strip())
            text.columns.append(indent + 1)
            index += 1

        inlines = InlineParser.fromLines(text, self.doc_id, self.path).parse() if text.lines else ()
        return ListItem(inlines=inlines, sublist=sublist, line=item_index + 1), index

    # ------------------------------------------------------------------
    # Paragraphs
    # ------------------------------------------------------------------

    def paragraph_parse(self, index: int, end: int) -> Tuple[Block, int]:
        text = TextLines(lines=[], first_line=index + 1, columns=[])
        start = index

        while index < end and self.lines[index].strip():
            if index > start and self.blockStart_check(index, end):
                break
            line = self.lines[index]
            stripped = line.lstrip()
            text.lines.append(stripped.rstrip())
            text.columns.append(len(line) - len(stripped) + 1)
            index += 1

        inlines = InlineParser.fromLines(text, self.doc_id, self.path).parse()
        return Paragraph(inlines=inlines, line=start + 1), index
