"""
Custom Pygments lexer for docweave syntax highlighting

Provides syntax highlighting for docweave markup when documentation shows
its own source (code fences tagged ``docweave`` or ``dw``).

Token types:
- Comment.Preproc: YAML front matter
- Generic.Heading: Headings; Name.Label for their {#anchor} suffix
- Keyword: List markers and admonition kinds
- Punctuation: Admonition colons, table pipes, link brackets
- Name.Tag: Cross-references [[target]]
- String.Backtick / String: Code spans and fenced code
- Generic.Strong / Generic.Emph: Strong and emphasized text
"""

import re

from pygments.lexer import RegexLexer, bygroups, include
from pygments.token import (
    Text,
    Punctuation,
    Name,
    String,
    Keyword,
    Comment,
    Generic,
)


class DocweaveLexer(RegexLexer):
    """
    Lexer for docweave markup

    Example:
        ## Install {#install}
        See [[guide/setup#pre|the prerequisites]] first.

    Tokens:
        ## Install → Generic.Heading
        {#install} → Name.Label
        [[guide/setup#pre|the prerequisites]] → Name.Tag
    """

    name = 'Docweave'
    aliases = ['docweave', 'dw']
    filenames = ['*.dw']
    flags = re.MULTILINE

    tokens = {
        'root': [
            # YAML front matter (only at the very start)
            (r'\A---\n(?:.*\n)*?(?:---|\.\.\.)\n', Comment.Preproc),

            # Code fences - everything until the closing fence is literal
            (r'^([ \t]*)(`{3,}|~{3,})([^\n]*)(\n)',
             bygroups(Text, Punctuation, Name.Attribute, Text), 'fence'),

            # Headings with optional explicit anchor
            (r'^(#{1,6}[ \t]+[^\n]*?)([ \t]*\{#[\w.:-]+\})?$',
             bygroups(Generic.Heading, Name.Label)),

            # Admonition open / close
            (r'^([ \t]*)(:{3,})([ \t]*)([A-Za-z][\w-]*)([^\n]*)$',
             bygroups(Text, Punctuation, Text, Keyword, Generic.Subheading)),
            (r'^[ \t]*:{3,}[ \t]*$', Punctuation),

            # List markers
            (r'^([ \t]*)([-*+]|\d{1,9}[.)])(?=[ \t])', bygroups(Text, Keyword)),

            # Table delimiter rows
            (r'^[ \t]*\|?(?:[ \t]*:?-+:?[ \t]*\|)+[ \t]*(?::?-+:?)?[ \t]*$', Punctuation),

            include('inline'),
        ],

        'fence': [
            (r'^[ \t]*(`{3,}|~{3,})[ \t]*\n', Punctuation, '#pop'),
            (r'[^\n]*\n', String),
        ],

        'inline': [
            # Backslash escapes
            (r'\\[!-/:-@\[-`{-~]', String.Escape),

            # Cross-references
            (r'\[\[[^\]\n]*\]\]', Name.Tag),

            # Links [label](url)
            (r'(\[)([^\]\n]*)(\]\()([^)\s]*)(\))',
             bygroups(Punctuation, Name.Attribute, Punctuation, String.Other, Punctuation)),

            # Code spans
            (r'(`+)[^`\n]+?\1', String.Backtick),

            # Strong, then emphasis
            (r'\*\*[^*\n]+\*\*|__[^_\n]+__', Generic.Strong),
            (r'\*[^*\s][^*\n]*\*|\b_[^_\s][^_\n]*_\b', Generic.Emph),

            # Table pipes
            (r'\|', Punctuation),

            # Everything else is text
            (r'[^\\\[`*_|\n]+', Text),
            (r'\n', Text),
            (r'.', Text),
        ],
    }


def get_lexer() -> DocweaveLexer:
    """
    Get the DocweaveLexer instance

    Returns:
        DocweaveLexer instance ready for use with Pygments
    """
    return DocweaveLexer()
