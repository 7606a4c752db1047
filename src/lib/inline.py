"""
Inline span parser

Turns the text of a paragraph, heading, list item or table cell into a tuple
of inline spans (text, emphasis, strong, code, links, cross-references).

Recursive descent with backtracking: an opener (``*``, ``**``, ``[``) starts
a nested sequence that must find its closer; if it runs off the end of the
text the attempt is abandoned and the opener is kept as literal text. This is
what lets emphasis nest freely:

    >>> InlineParser("**bold *and italic***", "index", "index.md").parse()
    (Strong(children=(Text(value='bold '), Emphasis(children=(Text(value='and italic'),)))),)

Cross-references are stricter than the other spans: an unterminated or empty
``[[...]]`` is a ParseError, because a silently dropped link is exactly the
kind of breakage a build must not ship.
"""

import posixpath
import re
import string
from typing import List, Optional, Tuple

from ..config import appsettings
from ..models.document import CodeSpan, CrossRef, Emphasis, Inline, Link, Strong, Text
from ..models.parser import TextLines
from .errors import ParseError

ESCAPABLE = frozenset(string.punctuation)

_LINK_TARGET = re.compile(r"\(([^()\s]*)\)")


class SpanBuffer:
    """Accumulates spans, merging adjacent text into a single Text span"""

    def __init__(self) -> None:
        self.spans: List[Inline] = []
        self.pending: List[str] = []

    def text(self, value: str) -> None:
        self.pending.append(value)

    def span(self, span: Inline) -> None:
        if isinstance(span, Text):
            self.pending.append(span.value)
            return
        self.flush()
        self.spans.append(span)

    def flush(self) -> None:
        if self.pending:
            value = "".join(self.pending)
            if value:
                self.spans.append(Text(value))
            self.pending = []

    def result(self) -> Tuple[Inline, ...]:
        self.flush()
        return tuple(self.spans)


class InlineParser:
    """
    Parser for inline markup within one run of text

    Args:
        text: Text to parse; lines are joined with "\\n"
        doc_id: Id of the document being parsed (for relative references)
        source: Source path (for error locators)
        first_line: Source line of the first text line
        columns: Source column where each text line starts
    """

    def __init__(
        self,
        text: str,
        doc_id: str,
        source: str,
        first_line: int = 1,
        columns: Optional[List[int]] = None,
    ) -> None:
        self.text = text
        self.length = len(text)
        self.doc_id = doc_id
        self.source = source
        self.first_line = first_line
        self.columns = columns or [1] * (text.count("\n") + 1)

    @classmethod
    def fromLines(cls, lines: TextLines, doc_id: str, source: str) -> "InlineParser":
        return cls(lines.text, doc_id, source, lines.first_line, lines.columns)

    def parse(self) -> Tuple[Inline, ...]:
        spans, _ = self.sequence_parse(0, None)
        return spans

    # ------------------------------------------------------------------
    # Locators
    # ------------------------------------------------------------------

    def location_get(self, offset: int) -> Tuple[int, int]:
        """
        Map a character offset in text to a (line, column) source locator
        """
        row = self.text.count("\n", 0, offset)
        row_start = self.text.rfind("\n", 0, offset) + 1
        return self.first_line + row, self.columns[row] + (offset - row_start)

    def error(self, message: str, offset: int) -> None:
        line, column = self.location_get(offset)
        row_start = self.text.rfind("\n", 0, offset) + 1
        row_end = self.text.find("\n", offset)
        context = self.text[row_start:row_end if row_end != -1 else None]
        raise ParseError(
            message,
            self.source,
            line,
            column,
            context=" " * (self.columns[line - self.first_line] - 1) + context,
        )

    # ------------------------------------------------------------------
    # Delimiter rules
    # ------------------------------------------------------------------

    def opener_check(self, pos: int, delimiter: str) -> bool:
        """
        Check whether an emphasis delimiter at pos may open a span

        The character after the delimiter must not be whitespace. Underscore
        delimiters additionally must not follow a letter or digit, so
        snake_case words stay literal.
        """
        after = pos + len(delimiter)
        if after >= self.length or self.text[after].isspace():
            return False
        if delimiter[0] == "_" and pos > 0 and self.text[pos - 1].isalnum():
            return False
        return True

    def closer_check(self, pos: int, delimiter: str) -> bool:
        """
        Check whether an emphasis delimiter at pos may close a span

        The character before it must not be whitespace; an underscore closer
        must not be followed by a letter or digit.
        """
        if not self.text.startswith(delimiter, pos):
            return False
        if pos == 0 or self.text[pos - 1].isspace():
            return False
        after = pos + len(delimiter)
        if delimiter[0] == "_" and after < self.length and self.text[after].isalnum():
            return False
        return True

    # ------------------------------------------------------------------
    # Sequences
    # ------------------------------------------------------------------

    def sequence_parse(
        self, pos: int, closer: Optional[str]
    ) -> Tuple[Optional[Tuple[Inline, ...]], int]:
        """
        Parse spans from pos until closer (or end of text when closer is None)

        Returns:
            (spans, position after the closer), or (None, pos) when a closer
            was required but never found
        """
        buffer = SpanBuffer()

        while pos < self.length:
            char = self.text[pos]

            if closer is not None:
                if closer in ("*", "_") and self.text.startswith(closer * 2, pos):
                    # "**" inside emphasis: a nested strong span wins if it closes
                    nested = self.emphasis_parse(pos, closer * 2)
                    if nested is not None:
                        buffer.span(nested[0])
                        pos = nested[1]
                        continue
                if closer == "]" and char == "]":
                    return buffer.result(), pos + 1
                if closer != "]" and self.closer_check(pos, closer):
                    return buffer.result(), pos + len(closer)

            if char == "\\" and pos + 1 < self.length and self.text[pos + 1] in ESCAPABLE:
                buffer.text(self.text[pos + 1])
                pos += 2
                continue

            if char == "`":
                span, pos = self.codeSpan_parse(pos)
                buffer.span(span)
                continue

            if self.text.startswith("[[", pos):
                span, pos = self.crossref_parse(pos)
                buffer.span(span)
                continue

            if char == "[":
                parsed = self.link_parse(pos)
                if parsed is not None:
                    buffer.span(parsed[0])
                    pos = parsed[1]
                    continue

            if char in "*_":
                delimiter = char * 2 if self.text.startswith(char * 2, pos) else char
                parsed = self.emphasis_parse(pos, delimiter)
                if parsed is None and len(delimiter) == 2:
                    parsed = self.emphasis_parse(pos, char)
                if parsed is not None:
                    buffer.span(parsed[0])
                    pos = parsed[1]
                    continue

            buffer.text(char)
            pos += 1

        if closer is not None:
            return None, pos
        return buffer.result(), pos

    def emphasis_parse(self, pos: int, delimiter: str) -> Optional[Tuple[Inline, int]]:
        """
        Try to parse an emphasis ("*", "_") or strong ("**", "__") span at pos

        Returns:
            (span, end position) or None if the delimiter is literal text
        """
        if not self.opener_check(pos, delimiter):
            return None
        children, end = self.sequence_parse(pos + len(delimiter), delimiter)
        if children is None:
            return None
        if len(delimiter) == 2:
            return Strong(children), end
        return Emphasis(children), end

    def codeSpan_parse(self, pos: int) -> Tuple[Inline, int]:
        """
        Parse a code span opened by a run of backticks at pos

        The span closes at the next run of exactly the same length. Without
        one, the opening run is literal text. One space is trimmed from each
        side when both sides have one and the content is not all spaces.
        """
        run_end = pos
        while run_end < self.length and self.text[run_end] == "`":
            run_end += 1
        run = self.text[pos:run_end]

        search = run_end
        while search < self.length:
            found = self.text.find("`", search)
            if found == -1:
                break
            stop = found
            while stop < self.length and self.text[stop] == "`":
                stop += 1
            if stop - found != len(run):
                search = stop
                continue
            content = self.text[run_end:found]
            if (
                len(content) >= 2
                and content[0] == " "
                and content[-1] == " "
                and content.strip(" ")
            ):
                content = content[1:-1]
            return CodeSpan(content), stop

        return Text(run), run_end

    def link_parse(self, pos: int) -> Optional[Tuple[Inline, int]]:
        """Try to parse [label](url) at pos"""
        label, end = self.sequence_parse(pos + 1, "]")
        if label is None:
            return None
        match = _LINK_TARGET.match(self.text, end)
        if not match:
            return None
        return Link(url=match.group(1), children=label), match.end()

    def crossref_parse(self, pos: int) -> Tuple[Inline, int]:
        """
        Parse a cross-reference [[target]] or [[target|label]] at pos

        Raises:
            ParseError: unterminated, multi-line or empty reference
        """
        end = self.text.find("]]", pos + 2)
        newline = self.text.find("\n", pos + 2)
        if end == -1 or (newline != -1 and newline < end):
            self.error("unterminated cross-reference '[['", pos)

        inner = self.text[pos + 2:end]
        target, _, label = inner.partition("|")
        target = target.strip()
        label = label.strip()
        if not target:
            self.error("empty cross-reference target", pos)

        document, anchor = self.target_split(target)
        line, column = self.location_get(pos)
        ref = CrossRef(
            token=target,
            document=document,
            anchor=anchor,
            label=label or None,
            line=line,
            column=column,
        )
        return ref, end + 2

    def target_split(self, target: str) -> Tuple[str, Optional[str]]:
        """
        Split a reference target into (document id, anchor)

        Document parts are normalized: "#anchor" refers to this document,
        "./x" and "../x" are relative to this document's directory, anything
        else is relative to the source root. A trailing source suffix is
        dropped.

        Example:
            In document "guide/install":
                "#setup"         -> ("guide/install", "setup")
                "../faq#why"     -> ("faq", "why")
                "api/client.md"  -> ("api/client", None)
        """
        path, _, anchor = target.partition("#")
        path = path.strip()
        suffix = appsettings.source_suffix
        if suffix and path.endswith(suffix):
            path = path[: -len(suffix)]

        if not path:
            document = self.doc_id
        elif path.startswith("./") or path.startswith("../"):
            document = posixpath.normpath(posixpath.join(posixpath.dirname(self.doc_id), path))
        else:
            document = posixpath.normpath(path.lstrip("/"))

        return document, anchor.strip() or None
