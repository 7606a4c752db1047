"""
Compiler for resolved docweave documents to HTML

Transforms one ResolvedDocument into a standalone HTML page.

Output is byte-for-byte deterministic for identical input: no timestamps, no
dict-order dependence, no random ids. That is what makes repeated builds
comparable and output hashes usable as cache keys.
"""

import html
import posixpath
from typing import Any, List, Optional, Tuple

from ..config import appsettings
from ..models.document import Block, CrossRef, Inline, inlines_plainText
from ..models.references import ResolvedDocument, Target
from .elements import ElementRegistry
from .log import LOG
from .theme import Theme


def outputPath_make(doc_id: str, suffix: Optional[str] = None) -> str:
    """
    Output path (POSIX, relative to the output root) for a doc id

    Example:
        >>> outputPath_make("guide/install")
        'guide/install.html'
    """
    return f"{doc_id}{appsettings.html_suffix if suffix is None else suffix}"


class Compiler:
    """
    Compiles a resolved document to a standalone HTML page

    Responsibilities:
    - Transform blocks and inline spans to HTML via the element registry
    - Turn cross-reference targets into relative links
    - Build table of contents and footer from merged configuration
    - Assemble the final page around the content
    """

    def __init__(
        self,
        resolved: ResolvedDocument,
        theme: Theme,
        registry: Optional[ElementRegistry] = None,
    ) -> None:
        """
        Initialize compiler

        Args:
            resolved: Document with its cross-reference targets
            theme: Theme providing configuration and stylesheet
            registry: Element registry (a fresh one when omitted)
        """
        self.resolved = resolved
        self.document = resolved.document
        self.theme = theme
        self.registry = registry or ElementRegistry()
        self.output_path = outputPath_make(self.document.doc_id)
        # Open link labels; cross-references inside one render as text
        self.link_depth = 0

    def compile(self) -> str:
        """
        Compile the document to a complete HTML page

        Returns:
            HTML text
        """
        LOG(f"Compiling {self.document.doc_id}", level=3)
        content = self.blocks_compile(self.document.blocks)
        return self.htmlDocument_build(content)

    def blocks_compile(self, blocks: Tuple[Block, ...]) -> str:
        """Compile a sequence of blocks, one per line"""
        return '\n'.join(self.node_compile(block) for block in blocks)

    def inlines_compile(self, inlines: Tuple[Inline, ...]) -> str:
        """Compile a sequence of inline spans"""
        return ''.join(self.node_compile(span) for span in inlines)

    def node_compile(self, node: Any) -> str:
        """
        Compile a single block or inline span to HTML

        Looks up the handler for node.kind in the element registry; handlers
        call back into blocks_compile()/inlines_compile() for children.
        """
        handler = self.registry.get(node.kind)
        if handler is None:
            raise ValueError(f"No element handler registered for '{node.kind}'")
        return handler(node, self)

    # ------------------------------------------------------------------
    # Cross-references
    # ------------------------------------------------------------------

    def target_get(self, ref: CrossRef) -> Target:
        return self.resolved.target_get(ref)

    def href_make(self, target: Target) -> str:
        """
        Relative URL from this page to a target

        Same-document targets become bare fragments; other documents get a
        path relative to this page's directory.

        Example:
            From "guide/install.html":
                Target("guide/install", "setup") -> "#setup"
                Target("faq", "why")             -> "../faq.html#why"
                Target("guide/usage", None)      -> "usage.html"
        """
        fragment = f"#{target.anchor}" if target.anchor else ""
        if target.document == self.document.doc_id:
            return fragment or "#"
        return self.pathRelative_make(outputPath_make(target.document)) + fragment

    def pathRelative_make(self, path: str) -> str:
        """Path of an output-root-relative file as seen from this page"""
        start = posixpath.dirname(self.output_path) or "."
        return posixpath.relpath(path, start)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def config_getMerged(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value with front-matter overrides.

        Precedence: front matter > theme config > default

        Args:
            key: Configuration key (supports dot notation like 'toc.depth')
            default: Default value if key not found

        Returns:
            Configuration value from front matter or theme, or default
        """
        keys = key.split('.')
        value: Any = self.document.meta
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                # Not found in front matter, check theme
                return self.theme.config_get(key, default)
        return value

    def pygmentsStyle_get(self) -> str:
        return self.config_getMerged('code.pygments_style', self.theme.pygmentsStyle_get())

    # ------------------------------------------------------------------
    # Page furniture
    # ------------------------------------------------------------------

    def toc_generate(self) -> str:
        """
        Generate the table of contents from document headings.

        Lists headings from level 2 down to toc.depth. Disabled by
        toc.show: false, and omitted when fewer than two headings qualify.

        Returns:
            <nav class="toc"> HTML, or empty string
        """
        if not self.config_getMerged('toc.show', True):
            return ""

        depth = int(self.config_getMerged('toc.depth', 3))
        entries: List[str] = []
        for heading in self.document.headings():
            if 2 <= heading.level <= depth:
                anchor = html.escape(heading.anchor)
                label = html.escape(inlines_plainText(heading.inlines))
                entries.append(
                    f'        <li class="toc-level-{heading.level}"><a href="#{anchor}">{label}</a></li>'
                )

        if len(entries) < 2:
            return ""

        items = '\n'.join(entries)
        return f"""    <nav class="toc">
      <ul>
{items}
      </ul>
    </nav>
"""

    def footer_generate(self) -> str:
        """Footer from footer.text, or empty string"""
        text = self.config_getMerged('footer.text', '')
        if not text:
            return ""
        return f'  <footer class="page-footer">{html.escape(str(text))}</footer>\n'

    def stylesheet_generate(self) -> str:
        if not self.theme.css_has():
            return ""
        href = self.pathRelative_make(f"{appsettings.static_dir}/theme.css")
        return f'\n  <link rel="stylesheet" href="{html.escape(href)}">'

    def htmlDocument_build(self, content: str) -> str:
        """
        Build complete HTML document with head, toc and footer

        Args:
            content: Compiled document body

        Returns:
            Complete HTML document
        """
        site_title = self.config_getMerged('site.title', '')
        title = self.document.title
        if site_title and site_title != title:
            title = f"{title} | {site_title}"
        language = self.config_getMerged('site.language', 'en')

        page_html = f"""<!DOCTYPE html>
<html lang="{html.escape(str(language))}">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{html.escape(str(title))}</title>{self.stylesheet_generate()}
</head>
<body>
  <main class="document" data-doc-id="{html.escape(self.document.doc_id)}">
{self.toc_generate()}{content}
  </main>
{self.footer_generate()}</body>
</html>
"""
        return page_html
