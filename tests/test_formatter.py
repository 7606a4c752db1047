"""
Markup formatter tests

Formatting a parsed document and parsing the result again must give the
same block structure. Also checks the canonical spelling of each construct.
"""

import pytest

from docweave.lib.formatter import MarkupFormatter, codeSpan_format, document_format, text_escape
from docweave.lib.parser import Parser
from docweave.models.document import document_outline


RICH_SOURCE = """---
title: Guide
tags: [a, b]
---
# Getting *started* {#start}

Intro with **bold**, `code`, a [link](https://example.org) and
a reference to [[faq#why|the FAQ]].

## Install

```python
print("hi")
```

| Name | Value |
|:-----|------:|
| a    | 1     |
| [[faq]] | *x* |

- one
- two
  - nested
    continued
- three

3. third
4. fourth

::: warning Careful
Text inside.

::: tip
Nested tip.
:::
:::

Mixed *__both__* and ***all three*** and *an **inner** strong*.
"""


def roundtrip(source: str, doc_id: str = "index"):
    first = Parser(source, doc_id=doc_id).parse()
    text = document_format(first)
    second = Parser(text, doc_id=doc_id).parse()
    return first, text, second


class TestRoundTrip:
    """Test parse(format(parse(doc))) preserves block structure"""

    def test_rich_document(self):
        first, _, second = roundtrip(RICH_SOURCE)
        assert document_outline(second) == document_outline(first)
        assert second.meta == first.meta

    def test_formatting_is_idempotent(self):
        _, text, second = roundtrip(RICH_SOURCE)
        assert document_format(second) == text

    def test_literal_markup_characters(self):
        source = "\\- not a list\n\\# not a heading\n2\\. not ordered\n\\::: not a callout\nstars \\*x\\* and snake_case and a \\| pipe"
        first, text, second = roundtrip(source)
        assert [b.kind for b in first.blocks] == ["paragraph"]
        assert document_outline(second) == document_outline(first)

    def test_code_containing_fences(self):
        source = "````markdown\n```python\nx\n```\n````"
        first, text, second = roundtrip(source)
        assert first.blocks[0].text == "```python\nx\n```"
        assert document_outline(second) == document_outline(first)

    def test_code_spans_with_backticks(self):
        first, text, second = roundtrip("Use ``a ` b`` and `` `tick` `` here")
        assert document_outline(second) == document_outline(first)

    def test_duplicate_headings(self):
        first, text, second = roundtrip("# Intro\n\n# Intro\n\n## Setup {#intro-1-x}")
        assert [h.anchor for h in second.headings()] == ["intro", "intro-1", "intro-1-x"]
        assert document_outline(second) == document_outline(first)

    def test_nested_lists_with_wide_markers(self):
        source = "9. nine\n10. ten\n    - under ten\n      - deeper"
        first, text, second = roundtrip(source)
        assert document_outline(second) == document_outline(first)

    @pytest.mark.parametrize(
        "source",
        [
            "- a\n\n* b\n",
            "1. a\n\n1) b\n",
            "  - a\n\n- b\n",
            "- a\n\n* b\n\n+ c\n",
            "::: note\n- a\n\n* b\n:::\n",
        ],
    )
    def test_adjacent_lists_stay_separate(self, source):
        first, text, second = roundtrip(source)
        assert len(first.blocks) == len(second.blocks)
        assert document_outline(second) == document_outline(first)
        assert document_format(second) == text

    def test_empty_document(self):
        assert document_format(Parser("").parse()) == ""


class TestCanonicalSpelling:
    """Test the normalized form of individual constructs"""

    def test_heading_gets_explicit_anchor(self):
        assert document_format(Parser("## Hello World").parse()) == "## Hello World {#hello-world}\n"

    def test_bullets_normalized(self):
        assert document_format(Parser("* a\n* b").parse()) == "- a\n- b\n"

    def test_ordered_numbers_sequential(self):
        assert document_format(Parser("1) a\n1) b").parse()) == "1. a\n2. b\n"

    def test_adjacent_list_markers_alternate(self):
        assert document_format(Parser("- a\n\n* b\n\n+ c").parse()) == "- a\n\n* b\n\n- c\n"
        assert document_format(Parser("1. a\n\n1) b").parse()) == "1. a\n\n1) b\n"
        assert document_format(Parser("- a\n\n1. b").parse()) == "- a\n\n1. b\n"

    def test_table_alignment_row(self):
        text = document_format(Parser("|a|b|c|\n|:-|-:|:-:|\n|1|2|3|").parse())
        assert text == "| a | b | c |\n| :--- | ---: | :---: |\n| 1 | 2 | 3 |\n"

    def test_admonition(self):
        text = document_format(Parser("::: Caution 'Mind the gap'\nBody\n:::").parse())
        assert text == "::: warning Mind the gap\nBody\n:::\n"

    def test_front_matter_sorted(self):
        text = document_format(Parser("---\nz: 1\na: 2\n---\nBody").parse())
        assert text == "---\na: 2\nz: 1\n---\n\nBody\n"

    def test_crossref_kept_as_written(self):
        text = document_format(Parser("[[../faq#why|Why]] and [[#top]]", doc_id="guide/x").parse())
        assert text == "[[../faq#why|Why]] and [[#top]]\n"


class TestEscaping:
    """Test text and code span escaping helpers"""

    def test_inline_specials(self):
        assert text_escape("a*b_c [d] `e` f|g \\") == "a\\*b\\_c \\[d\\] \\`e\\` f\\|g \\\\"

    def test_line_start_only_when_requested(self):
        assert text_escape("# x") == "# x"
        assert text_escape("# x", line_start=True) == "\\# x"

    def test_later_lines_always_checked(self):
        assert text_escape("a\n- b\n12. c\n::: d") == "a\n\\- b\n12\\. c\n\\::: d"

    def test_code_span_shortest_fence(self):
        assert codeSpan_format("plain") == "`plain`"
        assert codeSpan_format("a`b") == "``a`b``"
        assert codeSpan_format("`x") == "`` `x ``"
        assert codeSpan_format(" padded ") == "`  padded  `"

    def test_formatter_class(self):
        formatter = MarkupFormatter(Parser("# Hello").parse())
        assert formatter.format() == "# Hello {#hello}\n"
