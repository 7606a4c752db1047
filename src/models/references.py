"""
Cross-reference resolution models

Produced by the Resolver and consumed by the renderers.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from .document import CrossRef, Document


@dataclass(frozen=True)
class Target:
    """
    Concrete destination of a cross-reference

    Attributes:
        document: Target document id
        anchor: Target anchor within that document, or None for the document
                itself
        title: Heading text of the anchor, or the document title; used as
               link label when the reference has none
    """
    document: str
    anchor: Optional[str]
    title: str


@dataclass(frozen=True)
class ResolvedDocument:
    """
    A document together with the targets of all of its cross-references

    Every CrossRef span reachable from ``document`` has an entry in
    ``targets``; the renderers never look a reference up anywhere else.
    """
    document: Document
    targets: Dict[CrossRef, Target] = field(default_factory=dict, compare=False, hash=False)

    def target_get(self, ref: CrossRef) -> Target:
        return self.targets[ref]
