"""
Incremental markdown serializer

Turns markdown events back into CommonMark text one event at a time. Each
call takes the state returned by the previous call and returns a new one;
the caller threads it through and calls ``cmark_finalize`` once at the end.

    state = SerializerState()
    for event in events:
        state = cmark_resume(event, sink, state)
    cmark_finalize(state, sink)

Output is CommonMark-equivalent to the input of the event stream, not
byte-identical. The layout rules:

- Blocks are separated by a blank line, except blocks sitting directly in
  an item of a tight list, which are separated by a single newline.
- Newlines are written lazily, just before the next content, so the
  prefixes of the enclosing containers ("> ", item indentation) are known
  when a line starts. Blank lines get the prefixes with trailing spaces
  removed.
- All code blocks are written fenced. The opening fence is held back until
  the code is known so it can be made longer than any backtick run inside.
- Reference-style links stay in reference style; their definitions are
  collected and written by ``cmark_finalize``.
- Headings keep their form: setext headings stay underlined, since only
  they can span several lines.
- Adjacent lists alternate their markers ("-"/"*", "."/")") so that they do
  not merge when parsed again.
"""

import re
from dataclasses import dataclass
from typing import Optional, TextIO, Tuple

from ..models.events import (
    BlockQuote,
    Code,
    CodeBlock,
    Emphasis,
    End,
    Event,
    HardBreak,
    Heading,
    Html,
    Image,
    InlineHtml,
    Item,
    Link,
    LinkType,
    ListBlock,
    Paragraph,
    Rule,
    SoftBreak,
    Start,
    Strong,
    Tag,
    Text,
)


_INLINE_ESCAPE = re.compile(r"[\\`*_]|&(?=#?[0-9A-Za-z]+;)|<(?=[A-Za-z/!?])")
_HINT_ESCAPE = re.compile(r"\\(?=[!-/:-@\[-`{-~])|&(?=#?[0-9A-Za-z]+;)")
_LINE_START_ESCAPE = re.compile(
    r"^(?:(?P<mark>#{1,6}(?=[ \t]|$)|>|[+-](?=[ \t]|$)|[=-]+[ \t]*$|~~~)"
    r"|(?P<number>\d{1,9})(?P<delim>[.)])(?=[ \t]|$)"
    r"|(?P<bracket>\[)(?=[^\]]*\]:))"
)


@dataclass
class SerializerState:
    """
    Everything the serializer needs to know about what it already wrote

    Treat it as opaque outside this module; ``in_code_block`` is the only
    field meant to be read by others.

    Attributes:
        newlines_before_start: Newlines owed before the next content
        line_start: Nothing but container prefixes on the current line
        padding: Prefix of each open container, outermost first
        containers: "quote", "tight" or "loose" (item of such a list) per
                    open container
        lists: (next number or None, marker, tight) per open list
        last_list: (depth, ordered, marker) of a list that has just ended
        in_code_block: Between a code block Start and its End
        code_hint: Info string of the open code block
        code_fence: Opening fence, "" until it is written
        code_partial: The last code line has no line terminator yet
        in_heading: Inside a heading
        heading_setext: The open heading is underlined rather than "#" marked
        in_autolink: Inside an autolink, where text is written raw
        captures: Text written so far inside each open link or image
        shortcuts: (label, dest, title) of every reference-style link
        written: Characters written so far
    """

    newlines_before_start: int = 0
    line_start: bool = True
    padding: Tuple[str, ...] = ()
    containers: Tuple[str, ...] = ()
    lists: Tuple[Tuple[Optional[int], str, bool], ...] = ()
    last_list: Optional[Tuple[int, bool, str]] = None
    in_code_block: bool = False
    code_hint: str = ""
    code_fence: str = ""
    code_partial: bool = False
    in_heading: bool = False
    heading_setext: bool = False
    in_autolink: bool = False
    captures: Tuple[str, ...] = ()
    shortcuts: Tuple[Tuple[str, str, str], ...] = ()
    written: int = 0

    def copy(self) -> "SerializerState":
        """
        Creates a shallow copy of the SerializerState instance.

        All container fields are tuples, so the copy shares nothing mutable.
        """
        return type(self)(**self.__dict__)


# --- Formatting helpers -----------------------------------------------------


def _lineStart_escape(match: "re.Match") -> str:
    if match.group("number") is not None:
        return match.group("number") + "\\" + match.group("delim")
    return "\\" + match.group(0)


def text_escape(text: str, line_start: bool = False, in_heading: bool = False) -> str:
    """
    Escape text so that it is not parsed as markup.

    Args:
        text: Literal text
        line_start: The text begins a line
        in_heading: The text is part of an ATX heading

    Example:
        >>> text_escape("snake_case *not emphasis*")
        'snake\\\\_case \\\\*not emphasis\\\\*'
        >>> text_escape("# not a heading", line_start=True)
        '\\\\# not a heading'
    """
    escaped = _INLINE_ESCAPE.sub(lambda m: "\\" + m.group(0), text)
    if in_heading:
        escaped = escaped.replace("#", "\\#")
    lines = escaped.split("\n")
    for index, line in enumerate(lines):
        if index or line_start:
            lines[index] = _LINE_START_ESCAPE.sub(_lineStart_escape, line)
    return "\n".join(lines)


def hint_escape(hint: str) -> str:
    """Escape a fence info string so it reads back unchanged."""
    return _HINT_ESCAPE.sub(lambda m: "\\" + m.group(0), hint)


def codeSpan_make(text: str) -> str:
    """Wrap text in a code span whose backtick fence does not occur inside."""
    runs = {len(run) for run in re.findall(r"`+", text)}
    width = 1
    while width in runs:
        width += 1
    fence = "`" * width
    padded = (
        text.startswith("`")
        or text.endswith("`")
        or (text.startswith(" ") and text.endswith(" ") and text.strip(" ") != "")
    )
    pad = " " if padded else ""
    return f"{fence}{pad}{text}{pad}{fence}"


def destination_format(dest: str) -> str:
    """Format a link destination, using <...> when a bare one would not parse."""
    if not dest or re.search(r"[\s<>]", dest) or dest.count("(") != dest.count(")"):
        return "<" + dest.replace("<", "\\<").replace(">", "\\>") + ">"
    return dest


def title_format(title: str) -> str:
    if not title:
        return ""
    return ' "' + title.replace("\\", "\\\\").replace('"', '\\"') + '"'


def label_key(label: str) -> str:
    """Normalize a reference label for matching."""
    return " ".join(label.split()).casefold()


# --- Writing primitives -----------------------------------------------------


def _emit(state: SerializerState, sink: TextIO, text: str) -> None:
    if not text:
        return
    sink.write(text)
    state.written += len(text)
    if state.captures:
        state.captures = tuple(capture + text for capture in state.captures)


def _padding(state: SerializerState, blank: bool = False) -> str:
    padding = "".join(state.padding)
    return padding.rstrip() if blank else padding


def _newlines(state: SerializerState, sink: TextIO, count: int) -> None:
    for index in range(count):
        _emit(state, sink, "\n" + _padding(state, blank=index < count - 1))
    if count:
        state.line_start = True
    state.newlines_before_start = 0


def _block_begin(state: SerializerState, sink: TextIO) -> None:
    count = state.newlines_before_start
    if not state.line_start:
        count = max(count, 1)
    _newlines(state, sink, count)
    state.last_list = None


def _block_end(state: SerializerState) -> None:
    tight = state.containers and state.containers[-1] == "tight"
    state.newlines_before_start = 1 if tight else 2
    state.line_start = False


def _inline_begin(state: SerializerState, sink: TextIO) -> None:
    if state.newlines_before_start:
        _newlines(state, sink, state.newlines_before_start)


def _inline_write(state: SerializerState, sink: TextIO, text: str) -> None:
    if not text:
        return
    lines = text.split("\n")
    _emit(state, sink, lines[0])
    for line in lines[1:]:
        _emit(state, sink, "\n" + _padding(state) + line)
    state.line_start = lines[-1] == ""


def _fence_open(state: SerializerState, sink: TextIO, code: str) -> None:
    char = "~" if "`" in state.code_hint else "`"
    longest = max((len(run) for run in re.findall(re.escape(char) + "+", code)), default=0)
    state.code_fence = char * max(3, longest + 1)
    _emit(state, sink, state.code_fence + hint_escape(state.code_hint))
    state.line_start = False


def _code_write(state: SerializerState, sink: TextIO, code: str) -> None:
    if not state.code_fence:
        _fence_open(state, sink, code)
    if not code:
        return
    lines = code.split("\n")
    terminated = lines[-1] == ""
    if terminated:
        lines.pop()
    for index, line in enumerate(lines):
        if index == 0 and state.code_partial:
            _emit(state, sink, line)
        else:
            _emit(state, sink, "\n" + _padding(state, blank=not line) + line)
    state.code_partial = not terminated


# --- Event handlers ---------------------------------------------------------


def _tag_start(state: SerializerState, sink: TextIO, tag: Tag) -> None:
    if isinstance(tag, Paragraph):
        _block_begin(state, sink)

    elif isinstance(tag, Heading):
        _block_begin(state, sink)
        state.in_heading = True
        state.heading_setext = tag.setext and tag.level <= 2
        if not state.heading_setext:
            _emit(state, sink, "#" * tag.level + " ")
            state.line_start = False

    elif isinstance(tag, BlockQuote):
        _block_begin(state, sink)
        _emit(state, sink, "> ")
        state.padding += ("> ",)
        state.containers += ("quote",)
        state.line_start = True

    elif isinstance(tag, CodeBlock):
        _block_begin(state, sink)
        state.in_code_block = True
        state.code_hint = tag.hint or ""
        state.code_fence = ""
        state.code_partial = False

    elif isinstance(tag, ListBlock):
        ordered = tag.start is not None
        marker = "." if ordered else "-"
        if state.last_list == (len(state.containers), ordered, marker):
            marker = ")" if ordered else "*"
        _block_begin(state, sink)
        state.lists += ((tag.start, marker, tag.tight),)

    elif isinstance(tag, Item):
        _block_begin(state, sink)
        number, marker, tight = state.lists[-1]
        if number is None:
            bullet = marker
        else:
            bullet = f"{number}{marker}"
            state.lists = state.lists[:-1] + ((number + 1, marker, tight),)
        _emit(state, sink, bullet + " ")
        state.padding += (" " * (len(bullet) + 1),)
        state.containers += ("tight" if tight else "loose",)
        state.line_start = True

    elif isinstance(tag, (Emphasis, Strong)):
        _inline_begin(state, sink)
        _emit(state, sink, "*" if isinstance(tag, Emphasis) else "**")
        state.line_start = False

    elif isinstance(tag, (Link, Image)):
        _inline_begin(state, sink)
        if tag.link_type in (LinkType.AUTOLINK, LinkType.EMAIL):
            _emit(state, sink, "<")
            state.in_autolink = True
        else:
            _emit(state, sink, "![" if isinstance(tag, Image) else "[")
            state.captures += ("",)
        state.line_start = False


def _link_close(state: SerializerState, sink: TextIO, tag) -> None:
    if tag.link_type in (LinkType.AUTOLINK, LinkType.EMAIL):
        _emit(state, sink, ">")
        state.in_autolink = False
        return

    text = state.captures[-1]
    state.captures = state.captures[:-1]

    if not (tag.link_type.is_reference and tag.label):
        _emit(state, sink, f"]({destination_format(tag.dest)}{title_format(tag.title)})")
        return

    if tag.link_type is LinkType.REFERENCE or label_key(text) != label_key(tag.label):
        _emit(state, sink, f"][{tag.label}]")
    elif tag.link_type is LinkType.COLLAPSED:
        _emit(state, sink, "][]")
    else:
        _emit(state, sink, "]")
    state.shortcuts += ((tag.label, tag.dest, tag.title),)


def _tag_end(state: SerializerState, sink: TextIO, tag: Tag) -> None:
    if isinstance(tag, Paragraph):
        _block_end(state)

    elif isinstance(tag, Heading):
        if state.heading_setext:
            _emit(state, sink, "\n" + _padding(state) + ("===" if tag.level == 1 else "---"))
        state.in_heading = False
        state.heading_setext = False
        _block_end(state)

    elif isinstance(tag, BlockQuote):
        state.padding = state.padding[:-1]
        state.containers = state.containers[:-1]
        _block_end(state)

    elif isinstance(tag, CodeBlock):
        if not state.code_fence:
            _fence_open(state, sink, "")
        _emit(state, sink, "\n" + _padding(state) + state.code_fence)
        state.in_code_block = False
        state.code_hint = ""
        state.code_fence = ""
        state.code_partial = False
        _block_end(state)

    elif isinstance(tag, ListBlock):
        number, marker, _ = state.lists[-1]
        state.lists = state.lists[:-1]
        _block_end(state)
        state.last_list = (len(state.containers), number is not None, marker)

    elif isinstance(tag, Item):
        # items of a loose list are separated by a blank line, even empty ones
        gap = 1 if state.containers[-1] == "tight" else 2
        state.padding = state.padding[:-1]
        state.containers = state.containers[:-1]
        state.newlines_before_start = max(state.newlines_before_start, gap)
        state.line_start = False

    elif isinstance(tag, (Emphasis, Strong)):
        _emit(state, sink, "*" if isinstance(tag, Emphasis) else "**")

    elif isinstance(tag, (Link, Image)):
        _link_close(state, sink, tag)


def cmark_resume(
    event: Event, sink: TextIO, state: Optional[SerializerState] = None
) -> SerializerState:
    """
    Serialize one event.

    Args:
        event: Event to write
        sink: Text stream to append to
        state: State returned by the previous call, None for the first event

    Returns:
        The state to pass to the next call. The given state is not modified.
    """
    state = SerializerState() if state is None else state.copy()

    if isinstance(event, Start):
        _tag_start(state, sink, event.tag)
    elif isinstance(event, End):
        _tag_end(state, sink, event.tag)
    elif isinstance(event, Text):
        if state.in_code_block:
            _code_write(state, sink, event.text)
        else:
            _inline_begin(state, sink)
            text = event.text
            if not state.in_autolink:
                text = text_escape(text, state.line_start, state.in_heading)
            _inline_write(state, sink, text)
    elif isinstance(event, Code):
        _inline_begin(state, sink)
        _emit(state, sink, codeSpan_make(event.text))
        state.line_start = False
    elif isinstance(event, InlineHtml):
        _inline_begin(state, sink)
        _inline_write(state, sink, event.text)
    elif isinstance(event, Html):
        _block_begin(state, sink)
        lines = event.text.rstrip("\n").split("\n")
        _emit(state, sink, lines[0])
        for line in lines[1:]:
            _emit(state, sink, "\n" + _padding(state, blank=not line) + line)
        _block_end(state)
    elif isinstance(event, SoftBreak):
        if state.in_heading and not state.heading_setext:
            # an ATX heading is a single line
            _emit(state, sink, " ")
        else:
            _newlines(state, sink, 1)
    elif isinstance(event, HardBreak):
        _emit(state, sink, "\\")
        _newlines(state, sink, 1)
    elif isinstance(event, Rule):
        _block_begin(state, sink)
        _emit(state, sink, "***")
        _block_end(state)
    else:
        raise TypeError(f"not a markdown event: {event!r}")

    return state


def cmark_finalize(state: SerializerState, sink: TextIO) -> int:
    """
    Finish the document.

    Terminates the last line and appends the definitions of reference-style
    links, one per label.

    Returns:
        Number of characters written by this call
    """
    state = state.copy()
    before = state.written

    if state.written:
        _emit(state, sink, "\n")

    seen = set()
    definitions = []
    for label, dest, title in state.shortcuts:
        key = label_key(label)
        if key in seen:
            continue
        seen.add(key)
        definitions.append(f"[{label}]: {destination_format(dest)}{title_format(title)}\n")

    if definitions:
        _emit(state, sink, "\n")
        for definition in definitions:
            _emit(state, sink, definition)

    return state.written - before
