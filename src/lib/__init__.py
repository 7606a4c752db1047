"""
docweave - documentation site builder

Markup parser, cross-reference resolver and renderers.
"""

__version__ = "1.0.0"

from .parser import Parser
from .resolver import Resolver
from .compiler import Compiler
from .formatter import MarkupFormatter, document_format
from .elements import ElementRegistry
from .errors import DocweaveError, ParseError, UnresolvedReferenceError, SourceIOError
from .theme import Theme, ThemeError
from .log import LOG, state_connectToLogger

__all__ = [
    "Parser",
    "Resolver",
    "Compiler",
    "MarkupFormatter",
    "document_format",
    "ElementRegistry",
    "DocweaveError",
    "ParseError",
    "UnresolvedReferenceError",
    "SourceIOError",
    "Theme",
    "ThemeError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
