"""
Element implementations for docweave

Each element handler transforms a document node (block, inline span or
admonition) into HTML. Uses ElementSpec for metadata and validation.

Handlers receive the node and the Compiler; they call back into
compiler.inlines_compile() / compiler.blocks_compile() for children, so the
registry decides *how* each kind looks while the compiler owns traversal.
"""

import html
from typing import Any, Callable, Dict, List, Optional

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_by_name
from pygments.util import ClassNotFound

from ..models.elements import ElementCategory, ElementSpec
from .lexer import DocweaveLexer


def lexer_get(language: str) -> Lexer:
    """
    Pygments lexer for a code fence language tag

    The docweave dialect itself ("docweave", "dw") uses the bundled lexer;
    unknown languages fall back to plain text.
    """
    if language.lower() in DocweaveLexer.aliases:
        return DocweaveLexer()
    try:
        return get_lexer_by_name(language)
    except ClassNotFound:
        return TextLexer()


class ElementRegistry:
    """
    Registry of element specifications and handlers

    Maps element names to ElementSpec objects containing metadata
    and compilation handlers.
    """

    def __init__(self) -> None:
        """Initialize the element registry and register all built-in elements"""
        self.specs: Dict[str, ElementSpec] = {}
        self.blockElements_register()
        self.inlineElements_register()
        self.admonitionElements_register()

    def register(self, spec: ElementSpec) -> None:
        """Register an element specification"""
        self.specs[spec.name] = spec
        # Also register aliases
        for alias in spec.aliases:
            self.specs[alias] = spec

    def get(self, name: str) -> Optional[Callable[[Any, Any], str]]:
        """
        Get element handler by name

        Args:
            name: Block/inline kind or admonition variant

        Returns:
            Handler function or None if not found
        """
        spec = self.spec_get(name)
        return spec.handler if spec else None

    def spec_get(self, name: str) -> Optional[ElementSpec]:
        """Get full element specification by name"""
        if name in self.specs:
            return self.specs[name]

        # Case-insensitive admonition variants and aliases
        for spec in self.specs.values():
            if spec.matches(name):
                return spec

        return None

    def admonition_get(self, variant: str) -> Optional[ElementSpec]:
        """Admonition spec for a variant name or alias (case-insensitive)"""
        spec = self.spec_get(variant)
        if spec is not None and spec.category is ElementCategory.ADMONITION:
            return spec
        return None

    def elements_listByCategory(self, category: ElementCategory) -> List[ElementSpec]:
        """Get all elements in a category (aliases reported once)"""
        seen = []
        for spec in self.specs.values():
            if spec.category == category and spec not in seen:
                seen.append(spec)
        return seen

    def blockElements_register(self) -> None:
        """Register block element handlers"""

        def heading_handler(node: Any, compiler: Any) -> str:
            """Handle heading - <hN id=anchor> with a permalink"""
            anchor = html.escape(node.anchor)
            content = compiler.inlines_compile(node.inlines)
            return (
                f'<h{node.level} id="{anchor}">{content}'
                f'<a class="headerlink" href="#{anchor}" title="Permalink">&para;</a>'
                f'</h{node.level}>'
            )

        def paragraph_handler(node: Any, compiler: Any) -> str:
            return f'<p>{compiler.inlines_compile(node.inlines)}</p>'

        def code_handler(node: Any, compiler: Any) -> str:
            """Handle fenced code - Pygments highlighting when a language is given"""
            if not node.language:
                return f'<pre class="code-block"><code>{html.escape(node.text)}</code></pre>'

            # noclasses=True means styles are inline, no external CSS needed
            formatter = HtmlFormatter(style=compiler.pygmentsStyle_get(), noclasses=True)
            highlighted = highlight(node.text, lexer_get(node.language), formatter)
            language = html.escape(node.language)
            return f'<div class="code-block" data-language="{language}">{highlighted}</div>'

        def table_handler(node: Any, compiler: Any) -> str:
            """Handle pipe table - <table> with per-column alignment"""

            def cell(tag: str, inlines: Any, index: int) -> str:
                align = node.alignments[index]
                style_attr = f' style="text-align: {align}"' if align else ''
                return f'<{tag}{style_attr}>{compiler.inlines_compile(inlines)}</{tag}>'

            header = ''.join(cell('th', inlines, i) for i, inlines in enumerate(node.header))
            parts = ['<table>', f'<thead><tr>{header}</tr></thead>']
            if node.rows:
                parts.append('<tbody>')
                for row in node.rows:
                    parts.append('<tr>' + ''.join(cell('td', inlines, i) for i, inlines in enumerate(row)) + '</tr>')
                parts.append('</tbody>')
            parts.append('</table>')
            return '\n'.join(parts)

        def list_handler(node: Any, compiler: Any) -> str:
            """Handle list - <ul>/<ol> with nested sublists inside their item"""
            if node.ordered:
                start_attr = f' start="{node.start}"' if node.start != 1 else ''
                open_tag, close_tag = f'<ol{start_attr}>', '</ol>'
            else:
                open_tag, close_tag = '<ul>', '</ul>'

            parts = [open_tag]
            for item in node.items:
                content = compiler.inlines_compile(item.inlines)
                if item.sublist is not None:
                    content += '\n' + list_handler(item.sublist, compiler)
                parts.append(f'<li>{content}</li>')
            parts.append(close_tag)
            return '\n'.join(parts)

        def admonition_handler(node: Any, compiler: Any) -> str:
            """Handle admonition - dispatch to the variant's spec"""
            spec = self.admonition_get(node.variant)
            if spec is None:
                spec = self.specs['note']
                css_class = f'admonition {html.escape(node.variant)}'
            else:
                css_class = spec.css_class
            title = html.escape(node.title or spec.default_title or node.variant.title())
            body = compiler.blocks_compile(node.blocks)
            return (
                f'<div class="{css_class}">\n'
                f'<p class="admonition-title">{title}</p>\n'
                f'{body}\n'
                f'</div>'
            )

        block_specs = [
            ('heading', 'Heading with anchor', heading_handler, ['## Install {#install}']),
            ('paragraph', 'Paragraph of inline text', paragraph_handler, ['Plain *prose* text.']),
            ('code', 'Fenced code block', code_handler, ['```python\nprint("hi")\n```']),
            ('table', 'Pipe table', table_handler, ['| a | b |\n|---|--:|\n| 1 | 2 |']),
            ('list', 'Ordered or unordered list', list_handler, ['- one\n  - nested\n- two']),
            ('admonition', 'Callout box', admonition_handler, ['::: warning Careful\nText\n:::']),
        ]

        for name, desc, handler, examples in block_specs:
            self.register(ElementSpec(
                name=name,
                category=ElementCategory.BLOCK,
                description=desc,
                handler=handler,
                examples=examples
            ))

    def inlineElements_register(self) -> None:
        """Register inline span handlers"""

        def make_html_wrapper(tag: str) -> Callable[[Any, Any], str]:
            """Factory for simple HTML tag wrappers"""
            def handler(node: Any, compiler: Any) -> str:
                """Wrap compiled children in HTML tag"""
                return f'<{tag}>{compiler.inlines_compile(node.children)}</{tag}>'
            return handler

        def text_handler(node: Any, compiler: Any) -> str:
            return html.escape(node.value)

        def codeSpan_handler(node: Any, compiler: Any) -> str:
            return f'<code>{html.escape(node.value)}</code>'

        def link_handler(node: Any, compiler: Any) -> str:
            url = html.escape(node.url)
            compiler.link_depth += 1
            try:
                label = compiler.inlines_compile(node.children)
            finally:
                compiler.link_depth -= 1
            if compiler.link_depth:
                return label
            return f'<a href="{url}">{label}</a>'

        def xref_handler(node: Any, compiler: Any) -> str:
            """Handle cross-reference - relative link to the resolved target"""
            target = compiler.target_get(node)
            label = node.label if node.label is not None else target.title
            if compiler.link_depth:
                # Inside a link label: <a> may not nest
                return html.escape(label)
            href = html.escape(compiler.href_make(target))
            return f'<a class="xref" href="{href}">{html.escape(label)}</a>'

        inline_specs = [
            ('text', 'Literal text', text_handler, ['plain text']),
            ('code_span', 'Inline code', codeSpan_handler, ['`value`']),
            ('emphasis', 'Emphasized text', make_html_wrapper('em'), ['*em*', '_em_']),
            ('strong', 'Strong text', make_html_wrapper('strong'), ['**strong**']),
            ('link', 'External link', link_handler, ['[site](https://example.org)']),
            ('xref', 'Internal cross-reference', xref_handler, ['[[guide/install#setup|Setup]]']),
        ]

        for name, desc, handler, examples in inline_specs:
            self.register(ElementSpec(
                name=name,
                category=ElementCategory.INLINE,
                description=desc,
                handler=handler,
                examples=examples
            ))

    def admonitionElements_register(self) -> None:
        """
        Register admonition variants

        The generic 'admonition' block handler looks the variant up here for
        its CSS class and default title. The parser uses the same table to
        reject unknown variants.
        """

        def variant_handler(node: Any, compiler: Any) -> str:
            return self.specs['admonition'].handler(node, compiler)

        admonition_specs = [
            ('note', 'Note', 'Neutral supplementary information', []),
            ('info', 'Info', 'Background information', ['abstract', 'summary']),
            ('tip', 'Tip', 'Helpful advice', ['hint']),
            ('important', 'Important', 'Information the reader must not miss', []),
            ('warning', 'Warning', 'Potential problem', ['caution', 'attention', 'warn']),
            ('danger', 'Danger', 'Likely breakage or data loss', ['error']),
        ]

        for name, title, desc, aliases in admonition_specs:
            self.register(ElementSpec(
                name=name,
                category=ElementCategory.ADMONITION,
                description=desc,
                handler=variant_handler,
                aliases=aliases,
                css_class=f'admonition {name}',
                default_title=title,
                examples=[f'::: {name}\nBody text\n:::']
            ))
