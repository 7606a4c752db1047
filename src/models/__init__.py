"""
Models package for docweave

Contains data structures and type definitions for the build pipeline.
"""

from .state import ProgramState, pipeline
from .document import (
    Admonition,
    CodeBlock,
    CodeSpan,
    CrossRef,
    Document,
    Emphasis,
    Heading,
    Link,
    ListBlock,
    ListItem,
    Paragraph,
    Strong,
    Table,
    Text,
    document_outline,
)
from .elements import ElementSpec, ElementCategory
from .references import ResolvedDocument, Target
from .site import SourceFile, ParseOutcome, RenderedPage, BuildResult

__all__ = [
    "ProgramState",
    "pipeline",
    "Admonition",
    "CodeBlock",
    "CodeSpan",
    "CrossRef",
    "Document",
    "Emphasis",
    "Heading",
    "Link",
    "ListBlock",
    "ListItem",
    "Paragraph",
    "Strong",
    "Table",
    "Text",
    "document_outline",
    "ElementSpec",
    "ElementCategory",
    "ResolvedDocument",
    "Target",
    "SourceFile",
    "ParseOutcome",
    "RenderedPage",
    "BuildResult",
]
