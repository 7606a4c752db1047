"""
Element specification and metadata models

Defines the structure and categories of docweave elements (block kinds,
inline span kinds and admonition variants) for validation, documentation
generation, and registry management.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, List


class ElementCategory(Enum):
    """
    Categories of docweave elements

    Used for organization, documentation generation, and validation.
    """
    BLOCK = "block"             # heading, paragraph, code, table, list
    INLINE = "inline"           # text, emphasis, strong, code_span, link, xref
    ADMONITION = "admonition"   # ::: note, ::: warning, ...


@dataclass
class ElementSpec:
    """
    Specification for a docweave element

    Defines metadata and HTML handler for an element. Used by ElementRegistry
    to manage available elements.

    Attributes:
        name: Element kind (block/inline ``kind`` or admonition variant)
        category: Category for organization
        description: Human-readable description
        handler: Compilation function (node, compiler) -> str
        examples: Example markup strings
        aliases: Alternative names (admonition variants only)
        css_class: CSS class emitted for the element, when it has one
        default_title: Title shown when an admonition gives none
    """
    name: str
    category: ElementCategory
    description: str
    handler: Callable
    examples: List[str] = field(default_factory=list)
    aliases: List[str] = field(default_factory=list)
    css_class: str = ""
    default_title: str = ""

    def matches(self, element_name: str) -> bool:
        """
        Check if this spec matches an element name

        Args:
            element_name: Name to check (case-insensitive for admonitions)

        Returns:
            True if this spec handles the element
        """
        if self.name == element_name:
            return True
        if self.category is ElementCategory.ADMONITION:
            lowered = element_name.lower()
            return lowered == self.name or lowered in self.aliases
        return False
