"""
Inline parser tests

Tests emphasis nesting, code spans, links, escapes and cross-reference
tokens, including their source locators.
"""

import pytest

from docweave.lib.inline import InlineParser
from docweave.lib.parser import Parser
from docweave.models.document import CodeSpan, CrossRef, Emphasis, Link, Strong, Text


def spans(text: str, doc_id: str = "index"):
    return InlineParser(text, doc_id, f"{doc_id}.md").parse()


class TestEmphasis:
    """Test strong and emphasis spans"""

    def test_plain_text(self):
        assert spans("just text") == (Text("just text"),)

    def test_strong_and_emphasis(self):
        assert spans("Some **bold** and *em* text") == (
            Text("Some "),
            Strong((Text("bold"),)),
            Text(" and "),
            Emphasis((Text("em"),)),
            Text(" text"),
        )

    def test_underscore_emphasis(self):
        assert spans("an _emphasized_ word") == (
            Text("an "),
            Emphasis((Text("emphasized"),)),
            Text(" word"),
        )

    def test_emphasis_inside_strong(self):
        assert spans("**bold *and italic***") == (
            Strong((Text("bold "), Emphasis((Text("and italic"),)))),
        )

    def test_strong_inside_emphasis(self):
        assert spans("*an **important** point*") == (
            Emphasis((Text("an "), Strong((Text("important"),)), Text(" point"))),
        )

    def test_snake_case_stays_literal(self):
        assert spans("use snake_case_name here") == (Text("use snake_case_name here"),)

    def test_unclosed_emphasis_is_literal(self):
        assert spans("*not closed") == (Text("*not closed"),)

    def test_spaced_asterisk_is_literal(self):
        assert spans("2 * 3 * 4") == (Text("2 * 3 * 4"),)


class TestCodeSpans:
    """Test `code` spans"""

    def test_code_span(self):
        assert spans("run `make all` now") == (Text("run "), CodeSpan("make all"), Text(" now"))

    def test_markup_inside_code_is_literal(self):
        assert spans("`*not em* [[nor ref]]`") == (CodeSpan("*not em* [[nor ref]]"),)

    def test_double_backticks_contain_single(self):
        assert spans("``a ` b``") == (CodeSpan("a ` b"),)

    def test_padding_trimmed(self):
        assert spans("`` `tick` ``") == (CodeSpan("`tick`"),)

    def test_unclosed_backtick_is_literal(self):
        assert spans("a `b") == (Text("a `b"),)


class TestLinksAndEscapes:
    """Test links and backslash escapes"""

    def test_link(self):
        assert spans("[site](https://example.org)") == (
            Link(url="https://example.org", children=(Text("site"),)),
        )

    def test_link_label_markup(self):
        assert spans("[**docs**](/docs)") == (Link(url="/docs", children=(Strong((Text("docs"),)),)),)

    def test_brackets_without_url_are_literal(self):
        assert spans("[not a link] here") == (Text("[not a link] here"),)

    def test_escapes(self):
        assert spans("\\*literal\\* \\[x\\] \\\\") == (Text("*literal* [x] \\"),)

    def test_backslash_before_letter_kept(self):
        assert spans("C:\\path") == (Text("C:\\path"),)


class TestCrossReferences:
    """Test [[target]] tokens"""

    def test_crossref_with_label(self):
        result = spans("See [[guide/install#setup|the setup]].")
        assert result[0] == Text("See ")
        assert result[1] == CrossRef(
            token="guide/install#setup",
            document="guide/install",
            anchor="setup",
            label="the setup",
            line=1,
            column=5,
        )
        assert result[2] == Text(".")

    def test_same_document_anchor(self):
        ref = spans("[[#top]]", doc_id="guide/install")[0]
        assert ref.document == "guide/install"
        assert ref.anchor == "top"
        assert ref.label is None

    def test_relative_parent(self):
        ref = spans("[[../faq#why]]", doc_id="guide/install")[0]
        assert ref.document == "faq"
        assert ref.anchor == "why"

    def test_relative_sibling(self):
        ref = spans("[[./usage]]", doc_id="guide/install")[0]
        assert ref.document == "guide/usage"
        assert ref.anchor is None

    def test_root_relative_with_suffix(self):
        ref = spans("[[api/client.md]]", doc_id="guide/install")[0]
        assert ref.document == "api/client"
        assert ref.token == "api/client.md"

    def test_crossref_inside_emphasis(self):
        result = spans("*see [[faq]]*")
        assert isinstance(result[0], Emphasis)
        assert result[0].children[1].document == "faq"

    def test_locator_on_later_line(self):
        """Line and column point at the opening brackets in the source"""
        doc = Parser("Intro\n  text and [[faq#why]]").parse()
        ref = next(doc.crossrefs())
        assert (ref.line, ref.column) == (2, 12)

    def test_locator_in_list_item(self):
        doc = Parser("- item\n  - nested [[faq]]").parse()
        ref = next(doc.crossrefs())
        assert (ref.line, ref.column) == (2, 12)

    def test_crossrefs_in_source_order(self):
        source = "[[a]]\n\n| x |\n|---|\n| [[b]] |\n\n- [[c]]\n  - [[d]]\n\n::: note\n[[e]]\n:::"
        doc = Parser(source).parse()
        assert [ref.token for ref in doc.crossrefs()] == ["a", "b", "c", "d", "e"]
