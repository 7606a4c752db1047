"""
Cross-reference resolver

Given the full set of parsed documents, binds every [[target]] token to a
concrete (document, anchor) pair.

Resolution is deterministic: documents are visited in doc-id order and
references in source order, so a broken build always reports the same first
error. Every unresolved token is also kept on ``Resolver.unresolved`` for
reporting.

Example:
    >>> resolver = Resolver({"index": index_doc, "guide": guide_doc})
    >>> resolved = resolver.resolve()
    >>> resolved["index"].target_get(ref)
    Target(document='guide', anchor='setup', title='Setup')
"""

from typing import Dict, Iterable, List, Optional

from ..models.document import CrossRef, Document
from ..models.references import ResolvedDocument, Target
from .errors import UnresolvedReferenceError
from .log import LOG


class Resolver:
    """
    Resolves cross-references across a set of documents

    Args:
        documents: Parsed documents keyed by doc id
        known: Every doc id present in the source tree, including documents
               that failed to parse. References into those cannot be checked;
               they are bound to an unchecked target instead of being
               reported, since their ParseError already fails the build.
    """

    def __init__(self, documents: Dict[str, Document], known: Optional[Iterable[str]] = None) -> None:
        self.documents = documents
        self.known = set(known) if known is not None else set(documents)
        self.known.update(documents)
        self.unresolved: List[UnresolvedReferenceError] = []

        # Anchor index: doc id -> anchor -> heading text
        self.anchors: Dict[str, Dict[str, str]] = {
            doc_id: document.anchors() for doc_id, document in documents.items()
        }

    def target_resolve(self, ref: CrossRef, document: Document) -> Target:
        """
        Resolve one reference made from document

        Returns:
            The reference's Target

        Raises:
            UnresolvedReferenceError: Target document or anchor is missing
        """
        target_id = ref.document if ref.document is not None else document.doc_id

        if target_id not in self.documents:
            if target_id in self.known:
                LOG(f"{document.source}:{ref.line}: [[{ref.token}]] points into an unparsed document", level=2)
                return Target(document=target_id, anchor=ref.anchor, title=ref.token)
            raise UnresolvedReferenceError(
                ref.token, document.source, ref.line, ref.column, f"no document '{target_id}'"
            )

        target_doc = self.documents[target_id]
        if ref.anchor is None:
            return Target(document=target_id, anchor=None, title=target_doc.title)

        anchors = self.anchors[target_id]
        if ref.anchor not in anchors:
            raise UnresolvedReferenceError(
                ref.token,
                document.source,
                ref.line,
                ref.column,
                f"no anchor '{ref.anchor}' in document '{target_id}'",
            )
        return Target(document=target_id, anchor=ref.anchor, title=anchors[ref.anchor])

    def document_resolve(self, document: Document) -> ResolvedDocument:
        """
        Resolve every reference in one document

        Unresolved references are appended to self.unresolved and left out of
        the result's targets.
        """
        targets: Dict[CrossRef, Target] = {}
        for ref in document.crossrefs():
            try:
                targets[ref] = self.target_resolve(ref, document)
            except UnresolvedReferenceError as e:
                LOG(str(e), level=2)
                self.unresolved.append(e)
        return ResolvedDocument(document=document, targets=targets)

    def resolve(self) -> Dict[str, ResolvedDocument]:
        """
        Resolve all documents

        Returns:
            ResolvedDocument per doc id

        Raises:
            UnresolvedReferenceError: The first unresolved reference (in
                                      doc-id, then source order); the full
                                      list is on self.unresolved
        """
        self.unresolved = []
        resolved: Dict[str, ResolvedDocument] = {}
        count = 0

        for doc_id in sorted(self.documents):
            resolved[doc_id] = self.document_resolve(self.documents[doc_id])
            count += len(resolved[doc_id].targets)

        LOG(f"Resolved {count} cross-references across {len(resolved)} documents", level=2)

        if self.unresolved:
            raise self.unresolved[0]
        return resolved
