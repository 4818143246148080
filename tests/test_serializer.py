"""
Incremental serializer tests

Exact output for common constructs, and CommonMark equivalence of input and
output for harder documents (both rendered to HTML with markdown-it-py).
"""

import io

import pytest
from markdown_it import MarkdownIt

from extract_readme.lib.serializer import (
    SerializerState,
    cmark_finalize,
    cmark_resume,
    codeSpan_make,
    destination_format,
    text_escape,
)
from extract_readme.lib.source import markdown_events
from extract_readme.models.events import (
    CodeBlock,
    End,
    HardBreak,
    Heading,
    Item,
    ListBlock,
    Paragraph,
    SoftBreak,
    Start,
    Text,
)


def serialize(events):
    sink = io.StringIO()
    state = SerializerState()
    for event in events:
        state = cmark_resume(event, sink, state)
    cmark_finalize(state, sink)
    return sink.getvalue()


def roundtrip(source):
    return serialize(markdown_events(source, on_broken_link=None))


def html(source):
    return MarkdownIt("commonmark").render(source)


DOCUMENT = """\
# Title

Some *emphasis*, **strong** and `code`.

- one
  - nested
- two

> A quote.

1. first
2. second

```python
print("hi")
```

A [link](https://example.org "Example") and <https://example.org>.
"""


class TestExactOutput:
    """Documents already in canonical form come back unchanged"""

    def test_canonical_document(self):
        assert roundtrip(DOCUMENT) == DOCUMENT

    def test_reference_links_and_definitions(self):
        source = (
            "See [the docs][docs] and [Rust].\n"
            "\n"
            '[docs]: https://docs.rs "Docs"\n'
            "[Rust]: https://www.rust-lang.org\n"
        )
        assert roundtrip(source) == source

    def test_loose_list(self):
        assert roundtrip("- a\n\n- b\n") == "- a\n\n- b\n"

    def test_quote_paragraphs(self):
        assert roundtrip("> a\n>\n> b\n") == "> a\n>\n> b\n"

    def test_broken_link_literal(self):
        assert roundtrip("see [x][nope]") == "see [x][nope]\n"

    def test_empty_document(self):
        assert roundtrip("") == ""

    def test_multiline_setext_heading(self):
        source = "A title that\nwraps lines\n===========\n\nbody"
        assert roundtrip(source) == "A title that\nwraps lines\n===\n\nbody\n"

    def test_loose_list_with_empty_item(self):
        assert roundtrip("-\n\n- x\n") == "- \n\n- x\n"


class TestCodeBlocks:
    """Code blocks are always written fenced"""

    def test_indented_becomes_fenced(self):
        assert roundtrip("    let x = 1;\n") == "```\nlet x = 1;\n```\n"

    def test_fence_longer_than_content_backticks(self):
        events = [Start(CodeBlock("rust")), Text('let s = "```";\n'), End(CodeBlock("rust"))]
        assert serialize(events) == '````rust\nlet s = "```";\n````\n'

    def test_unterminated_code_text(self):
        """Transformed code text has no final newline"""
        events = [Start(CodeBlock("rust")), Text("fn main() {}"), End(CodeBlock("rust"))]
        assert serialize(events) == "```rust\nfn main() {}\n```\n"

    def test_empty_code_block(self):
        events = [Start(CodeBlock("rust")), Text(""), End(CodeBlock("rust"))]
        assert serialize(events) == "```rust\n```\n"

    def test_info_string_escapes_kept(self):
        assert roundtrip("```\\&amp;\nx\n```\n") == "```\\&amp;\nx\n```\n"

    def test_code_in_loose_item(self):
        source = "- item\n\n  ```\n  code\n  ```\n"
        assert roundtrip(source) == source


class TestLayout:
    """Separators between blocks and containers"""

    def test_adjacent_lists_do_not_merge(self):
        tag = ListBlock(None, True)
        events = [
            Start(tag), Start(Item()), Text("a"), End(Item()), End(tag),
            Start(tag), Start(Item()), Text("b"), End(Item()), End(tag),
        ]
        output = serialize(events)
        assert output == "- a\n\n* b\n"
        assert html(output).count("<ul>") == 2

    def test_soft_break_in_atx_heading(self):
        """ATX headings cannot span lines"""
        events = [Start(Heading(2)), Text("a"), SoftBreak(), Text("b"), End(Heading(2))]
        assert serialize(events) == "## a b\n"

    def test_hard_break(self):
        events = [Start(Paragraph()), Text("a"), HardBreak(), Text("b"), End(Paragraph())]
        assert serialize(events) == "a\\\nb\n"

    def test_state_threaded_not_mutated(self):
        sink = io.StringIO()
        first = SerializerState()
        second = cmark_resume(Start(Paragraph()), sink, first)
        third = cmark_resume(Text("hello"), sink, second)
        assert first.written == 0
        assert second.written == 0
        assert third.written == len("hello")

    def test_unknown_event_rejected(self):
        with pytest.raises(TypeError):
            cmark_resume("not an event", io.StringIO())


class TestEquivalence:
    """Output renders to the same HTML as the input"""

    @pytest.mark.parametrize(
        "source",
        [
            DOCUMENT,
            "snake_case and *stars* and a \\* literal star\n",
            "\\# not a heading\n\n\\- not a list\n\n1\\. not ordered\n",
            "Heading\n=======\n\nSetext *style*\n---\n",
            "## Heading with a # inside\n",
            "Entities &amp; &copy; and a <span>tag</span>\n",
            "Line one\nline two  \nline three\n",
            "> - quoted list\n> - second\n>\n> > nested quote\n",
            "1. one\n\n   para\n2. two\n\n   ```\n   code\n\n   more\n   ```\n",
            "![alt *text*](/img.png \"T\") and [a](<url with spaces> 'single')\n",
            "[collapsed][] and [Full text][ref]\n\n[collapsed]: /c\n[ref]: /r\n",
            "<div>\n*raw*\n</div>\n\nafter\n",
            "Code: `` a ` b `` and ` `` `\n",
            "***\n\n- a\n\n---\n\n- b\n",
            "3) three\n4) four\n",
            "A title that\nwraps lines\n===========\n\nbody\n",
            "Sub\ntitle\n---\n\n> Quoted\n> title\n> =====\n",
            "-\n\n-    [:>x\n+\n\n!",
            "```\\&amp; a\\*\nx\n```\n",
            "Trailing backslash\\\nnext\n",
        ],
    )
    def test_renders_the_same(self, source):
        assert html(roundtrip(source)) == html(source)


class TestHelpers:
    """Formatting helpers"""

    def test_text_escape_inline(self):
        assert text_escape("snake_case *x*") == "snake\\_case \\*x\\*"

    def test_text_escape_line_start(self):
        assert text_escape("# title", line_start=True) == "\\# title"
        assert text_escape("# title") == "# title"

    def test_text_escape_ordered_marker(self):
        assert text_escape("1. one", line_start=True) == "1\\. one"

    def test_code_span_backticks(self):
        assert codeSpan_make("a") == "`a`"
        assert codeSpan_make("a ` b") == "``a ` b``"
        assert codeSpan_make("`") == "`` ` ``"

    def test_destination_brackets(self):
        assert destination_format("/plain") == "/plain"
        assert destination_format("with space") == "<with space>"
        assert destination_format("") == "<>"
