"""
Event transformer

Applies the two publishing rewrites to a markdown event stream, one event at
a time:

1. Untyped fences get a language: ```` ``` ```` becomes ```` ```rust ````
   (configurable), so renderers highlight the snippet.
2. Hidden doctest lines are dropped: inside code blocks, lines starting with
   "# " compile when the example runs as a test but are not meant for
   readers. A line that is exactly "#" is kept.

Every other event passes through untouched, and the transformer never
inserts, drops or reorders events.

Example:
    >>> transformer = EventTransformer()
    >>> transformer(Start(CodeBlock("")))
    Start(tag=CodeBlock(hint='rust'))
    >>> transformer(Text("# setup();\\nfn main() {}\\n# teardown();"))
    Text(text='fn main() {}')
"""

from typing import Iterator, List, Optional

from ..config import appsettings
from ..models.events import CodeBlock, End, Event, Start, Text


def lines_split(text: str) -> List[str]:
    """
    Split text into lines on "\\n", without line terminators.

    A trailing "\\r" is removed from each line and a final empty line (text
    ending with a newline) is not produced.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class EventTransformer:
    """
    Stateful per-event rewriter

    The only state carried between events is whether the stream is
    currently inside a code block.

    Attributes:
        default_hint: Language given to fenced code blocks without one
        hidden_prefix: Prefix marking hidden doctest lines
        in_code_block: Between a code block Start and its End
    """

    def __init__(
        self,
        default_hint: Optional[str] = None,
        hidden_prefix: Optional[str] = None,
    ) -> None:
        self.default_hint = appsettings.default_code_hint if default_hint is None else default_hint
        self.hidden_prefix = (
            appsettings.hidden_line_prefix if hidden_prefix is None else hidden_prefix
        )
        self.in_code_block = False

    def hint_tag(self, event: Start) -> Start:
        """Give an untyped fenced code block the default language."""
        if event.tag.fenced and not event.tag.hint:
            return Start(CodeBlock(self.default_hint))
        return event

    def doctest_strip(self, event: Text) -> Text:
        """Drop hidden doctest lines from code block text."""
        kept = [line for line in lines_split(event.text) if not line.startswith(self.hidden_prefix)]
        return Text("\n".join(kept))

    def event_transform(self, event: Event) -> Event:
        """
        Rewrite one event.

        Args:
            event: Next event of the stream

        Returns:
            The event to serialize in its place (the same kind of event)
        """
        if isinstance(event, Start) and isinstance(event.tag, CodeBlock):
            self.in_code_block = True
            return self.hint_tag(event)

        if isinstance(event, End) and isinstance(event.tag, CodeBlock):
            self.in_code_block = False
            return event

        if isinstance(event, Text) and self.in_code_block:
            return self.doctest_strip(event)

        return event

    __call__ = event_transform

    def stream_transform(self, events) -> Iterator[Event]:
        """Lazily transform a whole event stream."""
        for event in events:
            yield self.event_transform(event)
