"""
Document tree data model

Immutable structures produced by the parser and consumed by the resolver,
the HTML compiler and the markup formatter.

A Document is an ordered tuple of blocks. Blocks form a tagged variant over
heading, paragraph, code, table, list and admonition; each carries a ``kind``
class attribute naming its variant, which is what the element registry keys
handlers on. Inline spans follow the same convention.

All classes are frozen dataclasses: nothing downstream of the parser can
mutate a document, so documents can be shared freely between worker threads.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterator, Optional, Tuple, Union


# ---------------------------------------------------------------------------
# Inline spans
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Text:
    """Literal text (adjacent text spans are always coalesced)"""
    kind: ClassVar[str] = "text"
    value: str


@dataclass(frozen=True)
class CodeSpan:
    """Inline `code` with literal content"""
    kind: ClassVar[str] = "code_span"
    value: str


@dataclass(frozen=True)
class Emphasis:
    kind: ClassVar[str] = "emphasis"
    children: Tuple["Inline", ...]


@dataclass(frozen=True)
class Strong:
    kind: ClassVar[str] = "strong"
    children: Tuple["Inline", ...]


@dataclass(frozen=True)
class Link:
    """External link [label](url)"""
    kind: ClassVar[str] = "link"
    url: str
    children: Tuple["Inline", ...]


@dataclass(frozen=True)
class CrossRef:
    """
    Internal cross-reference token [[target]] or [[target|label]]

    Attributes:
        token: The target exactly as written (e.g. "guide/install#setup")
        document: Target document id, already normalized against the
                  referring document ("#anchor" targets the referrer)
        anchor: Target anchor, or None when the whole document is meant
        label: Explicit label text, or None to use the target's title
        line: 1-based source line of the opening "[["
        column: 1-based source column of the opening "[["
    """
    kind: ClassVar[str] = "xref"
    token: str
    document: Optional[str]
    anchor: Optional[str]
    label: Optional[str]
    line: int
    column: int


Inline = Union[Text, CodeSpan, Emphasis, Strong, Link, CrossRef]


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Heading:
    kind: ClassVar[str] = "heading"
    level: int
    inlines: Tuple[Inline, ...]
    anchor: str
    line: int


@dataclass(frozen=True)
class Paragraph:
    kind: ClassVar[str] = "paragraph"
    inlines: Tuple[Inline, ...]
    line: int


@dataclass(frozen=True)
class CodeBlock:
    """Fenced code block; ``language`` is the fence's info tag, possibly empty"""
    kind: ClassVar[str] = "code"
    language: str
    text: str
    line: int


@dataclass(frozen=True)
class Table:
    """
    Pipe table

    Attributes:
        header: Header cells, each a tuple of inline spans
        rows: Body rows, each with exactly len(header) cells
        alignments: Per-column "left", "center", "right" or "" (unspecified)
    """
    kind: ClassVar[str] = "table"
    header: Tuple[Tuple[Inline, ...], ...]
    rows: Tuple[Tuple[Tuple[Inline, ...], ...], ...]
    alignments: Tuple[str, ...]
    line: int


@dataclass(frozen=True)
class ListItem:
    inlines: Tuple[Inline, ...]
    sublist: Optional["ListBlock"]
    line: int


@dataclass(frozen=True)
class ListBlock:
    kind: ClassVar[str] = "list"
    ordered: bool
    start: int
    items: Tuple[ListItem, ...]
    line: int


@dataclass(frozen=True)
class Admonition:
    """Callout box ::: kind title ... ::: with nested blocks"""
    kind: ClassVar[str] = "admonition"
    variant: str
    title: str
    blocks: Tuple["Block", ...]
    line: int


Block = Union[Heading, Paragraph, CodeBlock, Table, ListBlock, Admonition]


@dataclass(frozen=True)
class Document:
    """
    A parsed source file

    Attributes:
        doc_id: Source path relative to the source root, POSIX separators,
                without suffix ("guide/install")
        source: Source path used in error locators
        meta: Front-matter mapping (empty when the file has none)
        blocks: Top-level blocks in source order
    """
    doc_id: str
    source: str
    blocks: Tuple[Block, ...]
    meta: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def title(self) -> str:
        """Front-matter title, else first level-1 heading, else the doc id"""
        title = self.meta.get("title")
        if title:
            return str(title)
        for heading in self.headings():
            if heading.level == 1:
                return inlines_plainText(heading.inlines)
        return self.doc_id

    def headings(self) -> Iterator[Heading]:
        """All headings in document order, including those inside admonitions"""
        yield from blocks_headings(self.blocks)

    def anchors(self) -> Dict[str, str]:
        """Map of anchor name to heading plain text"""
        return {h.anchor: inlines_plainText(h.inlines) for h in self.headings()}

    def crossrefs(self) -> Iterator[CrossRef]:
        """All cross-reference spans in source order"""
        for block in self.blocks:
            yield from block_crossrefs(block)


# ---------------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------------


def blocks_headings(blocks: Tuple[Block, ...]) -> Iterator[Heading]:
    for block in blocks:
        if isinstance(block, Heading):
            yield block
        elif isinstance(block, Admonition):
            yield from blocks_headings(block.blocks)


def inlines_crossrefs(inlines: Tuple[Inline, ...]) -> Iterator[CrossRef]:
    for span in inlines:
        if isinstance(span, CrossRef):
            yield span
        elif isinstance(span, (Emphasis, Strong, Link)):
            yield from inlines_crossrefs(span.children)


def listBlock_crossrefs(block: ListBlock) -> Iterator[CrossRef]:
    for item in block.items:
        yield from inlines_crossrefs(item.inlines)
        if item.sublist is not None:
            yield from listBlock_crossrefs(item.sublist)


def block_crossrefs(block: Block) -> Iterator[CrossRef]:
    if isinstance(block, (Heading, Paragraph)):
        yield from inlines_crossrefs(block.inlines)
    elif isinstance(block, Table):
        for cell in block.header:
            yield from inlines_crossrefs(cell)
        for row in block.rows:
            for cell in row:
                yield from inlines_crossrefs(cell)
    elif isinstance(block, ListBlock):
        yield from listBlock_crossrefs(block)
    elif isinstance(block, Admonition):
        for child in block.blocks:
            yield from block_crossrefs(child)


def inlines_plainText(inlines: Tuple[Inline, ...]) -> str:
    """
    Flatten inline spans to their visible text

    Cross-references contribute their label, or their token when unlabeled.
    """
    parts = []
    for span in inlines:
        if isinstance(span, (Text, CodeSpan)):
            parts.append(span.value)
        elif isinstance(span, CrossRef):
            parts.append(span.label if span.label is not None else span.token)
        else:
            parts.append(inlines_plainText(span.children))
    return "".join(parts)


def _inlines_outline(inlines: Tuple[Inline, ...]) -> tuple:
    result = []
    for span in inlines:
        if isinstance(span, (Text, CodeSpan)):
            result.append((span.kind, span.value))
        elif isinstance(span, CrossRef):
            result.append((span.kind, span.token, span.label))
        elif isinstance(span, Link):
            result.append((span.kind, span.url, _inlines_outline(span.children)))
        else:
            result.append((span.kind, _inlines_outline(span.children)))
    return tuple(result)


def _list_outline(block: ListBlock) -> tuple:
    return (
        block.kind,
        block.ordered,
        block.start,
        tuple(
            (
                _inlines_outline(item.inlines),
                _list_outline(item.sublist) if item.sublist is not None else None,
            )
            for item in block.items
        ),
    )


def block_outline(block: Block) -> tuple:
    """
    Location-free structural summary of a block

    Two blocks with the same outline have the same kind, attributes and
    inline content; only their line numbers may differ.
    """
    if isinstance(block, Heading):
        return (block.kind, block.level, block.anchor, _inlines_outline(block.inlines))
    if isinstance(block, Paragraph):
        return (block.kind, _inlines_outline(block.inlines))
    if isinstance(block, CodeBlock):
        return (block.kind, block.language, block.text)
    if isinstance(block, Table):
        return (
            block.kind,
            block.alignments,
            tuple(_inlines_outline(cell) for cell in block.header),
            tuple(tuple(_inlines_outline(cell) for cell in row) for row in block.rows),
        )
    if isinstance(block, ListBlock):
        return _list_outline(block)
    return (
        block.kind,
        block.variant,
        block.title,
        tuple(block_outline(child) for child in block.blocks),
    )


def document_outline(document: Document) -> tuple:
    """Location-free structural summary of a whole document"""
    return tuple(block_outline(block) for block in document.blocks)
