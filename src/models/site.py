"""
Site build models

Records passed between the discover, parse, render and write stages of a
build. All results are keyed by doc id.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .document import Document


@dataclass(frozen=True)
class SourceFile:
    """
    One markup source found under the input root

    Attributes:
        doc_id: Relative POSIX path without suffix ("guide/install")
        path: Absolute path on disk
        relative: Path relative to the input root, as shown in errors
    """
    doc_id: str
    path: Path
    relative: str


@dataclass(frozen=True)
class ParseOutcome:
    """Result of parsing one source: a document, or the error that stopped it"""
    doc_id: str
    document: Optional[Document] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.document is not None


@dataclass(frozen=True)
class RenderedPage:
    """
    One output file

    Attributes:
        doc_id: Document the page was rendered from
        output_relative: POSIX path relative to the output root
        content: Page text
    """
    doc_id: str
    output_relative: str
    content: str


@dataclass
class BuildResult:
    """
    Summary of a finished build

    Attributes:
        written: Output paths written, in write order
        manifest: Path of the manifest file
        hashes: SHA-256 per output path
        failed: Doc ids that did not build because of a ParseError
    """
    written: List[Path] = field(default_factory=list)
    manifest: Optional[Path] = None
    hashes: Dict[str, str] = field(default_factory=dict)
    failed: List[str] = field(default_factory=list)
