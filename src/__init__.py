"""
docweave - documentation site builder

Builds a tree of cross-referenced markup documents into a static HTML site
(or a normalized markup tree).
"""

__version__ = "1.0.0"

from .lib import Parser, Resolver, Compiler, ElementRegistry, LOG, state_connectToLogger

__all__ = ["Parser", "Resolver", "Compiler", "ElementRegistry", "LOG", "state_connectToLogger", "__version__"]
