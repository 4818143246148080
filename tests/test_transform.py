"""
Event transformer tests

Fence tagging, hidden doctest line stripping and pass-through of everything
else.
"""

import pytest

from extract_readme.lib.source import markdown_events
from extract_readme.lib.transform import EventTransformer, lines_split
from extract_readme.models.events import (
    CodeBlock,
    Emphasis,
    End,
    Heading,
    Paragraph,
    Start,
    Text,
)


@pytest.fixture
def transformer():
    return EventTransformer(default_hint="rust", hidden_prefix="# ")


class TestFenceTagging:
    """Untyped fenced code blocks get the default language"""

    def test_empty_hint_becomes_default(self, transformer):
        assert transformer(Start(CodeBlock(""))) == Start(CodeBlock("rust"))

    def test_existing_hint_untouched(self, transformer):
        assert transformer(Start(CodeBlock("python"))) == Start(CodeBlock("python"))

    def test_indented_block_untouched(self, transformer):
        """Indented blocks have no info string to fill in"""
        assert transformer(Start(CodeBlock(None))) == Start(CodeBlock(None))

    def test_end_event_untouched(self, transformer):
        transformer(Start(CodeBlock("")))
        assert transformer(End(CodeBlock(""))) == End(CodeBlock(""))

    def test_fenced_property(self):
        assert CodeBlock("").fenced
        assert not CodeBlock(None).fenced

    def test_custom_default_hint(self):
        transformer = EventTransformer(default_hint="c")
        assert transformer(Start(CodeBlock(""))) == Start(CodeBlock("c"))


class TestDoctestStripping:
    """Lines starting with "# " are dropped inside code blocks"""

    def test_setup_and_teardown_dropped(self, transformer):
        transformer(Start(CodeBlock("")))
        result = transformer(Text("# setup();\nfn main() {}\n# teardown();"))
        assert result == Text("fn main() {}")

    def test_bare_hash_line_kept(self, transformer):
        transformer(Start(CodeBlock("")))
        assert transformer(Text("#\nfn main() {}")) == Text("#\nfn main() {}")

    def test_attribute_line_kept(self, transformer):
        """Only the two character prefix matches"""
        transformer(Start(CodeBlock("rust")))
        assert transformer(Text("#[derive(Debug)]\nstruct S;\n")) == Text("#[derive(Debug)]\nstruct S;")

    def test_trailing_newline_dropped(self, transformer):
        transformer(Start(CodeBlock("")))
        assert transformer(Text("fn main() {}\n")) == Text("fn main() {}")

    def test_all_lines_hidden(self, transformer):
        transformer(Start(CodeBlock("")))
        assert transformer(Text("# use a;\n# use b;\n")) == Text("")

    def test_text_outside_code_block_untouched(self, transformer):
        assert transformer(Text("# not code")) == Text("# not code")

    def test_text_after_code_block_untouched(self, transformer):
        transformer(Start(CodeBlock("")))
        transformer(End(CodeBlock("")))
        assert not transformer.in_code_block
        assert transformer(Text("# after")) == Text("# after")

    def test_indented_block_stripped(self, transformer):
        transformer(Start(CodeBlock(None)))
        assert transformer(Text("# hidden\nshown\n")) == Text("shown")

    def test_crlf_lines(self):
        assert lines_split("a\r\n# b\r\nc") == ["a", "# b", "c"]


class TestPassThrough:
    """Documents without code blocks are not changed"""

    def test_identity(self, transformer):
        source = "# Title\n\nSome *text* with [a link](https://example.org).\n\n- one\n- two\n"
        events = list(markdown_events(source))
        assert list(transformer.stream_transform(events)) == events

    def test_other_events_forwarded(self, transformer):
        events = [
            Start(Heading(1)),
            Text("Title"),
            End(Heading(1)),
            Start(Paragraph()),
            Start(Emphasis()),
            Text("# hi"),
            End(Emphasis()),
            End(Paragraph()),
        ]
        assert [transformer(event) for event in events] == events


class TestNesting:
    """Code blocks inside containers are handled like top-level ones"""

    def test_code_in_list_item(self, transformer):
        source = "- item\n\n  ```\n  # hidden\n  shown\n  ```\n"
        events = list(transformer.stream_transform(markdown_events(source)))
        assert Start(CodeBlock("rust")) in events
        assert Text("shown") in events

    def test_code_in_block_quote(self, transformer):
        source = "> ```\n> # hidden\n> shown\n> ```\n"
        events = list(transformer.stream_transform(markdown_events(source)))
        assert Start(CodeBlock("rust")) in events
        assert Text("shown") in events
        assert End(CodeBlock("")) in events
