"""
Markdown event model

A closed set of tags and events describing one structural unit of markdown
at a time. Block and inline constructs are bracketed by Start/End events that
carry the same tag; leaf content arrives as Text, Code, Html, etc.

The model mirrors a pull-parser event stream: events arrive in document
order and start/end pairs always nest correctly.

Example:
    "Does a thing." produces
        Start(Paragraph()), Text("Does a thing."), End(Paragraph())
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional, Tuple, Union


class LinkType(Enum):
    """
    How a link or image was written in the source

    Reference-style kinds are re-emitted in reference style with their
    definitions appended to the document.
    """
    INLINE = "inline"          # [text](dest)
    REFERENCE = "reference"    # [text][label]
    COLLAPSED = "collapsed"    # [text][]
    SHORTCUT = "shortcut"      # [text]
    AUTOLINK = "autolink"      # <https://example.org>
    EMAIL = "email"            # <someone@example.org>

    @property
    def is_reference(self) -> bool:
        return self in (LinkType.REFERENCE, LinkType.COLLAPSED, LinkType.SHORTCUT)


# --- Tags -------------------------------------------------------------------


@dataclass(frozen=True)
class Paragraph:
    pass


@dataclass(frozen=True)
class Heading:
    """
    A heading

    Attributes:
        level: 1 to 6
        setext: Written with an underline ("===" or "---") instead of "#"
                marks. Only setext headings can span several lines.
    """
    level: int
    setext: bool = False


@dataclass(frozen=True)
class BlockQuote:
    pass


@dataclass(frozen=True)
class CodeBlock:
    """
    A code block

    Attributes:
        hint: Info string of a fenced block ("" when no language is given),
              or None for an indented block.
    """
    hint: Optional[str] = ""

    @property
    def fenced(self) -> bool:
        return self.hint is not None


@dataclass(frozen=True)
class ListBlock:
    """
    A list

    Attributes:
        start: First number of an ordered list, None for a bullet list
        tight: Items are not separated by blank lines
    """
    start: Optional[int] = None
    tight: bool = True


@dataclass(frozen=True)
class Item:
    pass


@dataclass(frozen=True)
class Emphasis:
    pass


@dataclass(frozen=True)
class Strong:
    pass


@dataclass(frozen=True)
class Link:
    """
    A link

    Attributes:
        link_type: Source form of the link
        dest: Resolved destination
        title: Link title ("" when absent)
        label: Reference label as written, for reference-style links
    """
    link_type: LinkType
    dest: str
    title: str = ""
    label: str = ""


@dataclass(frozen=True)
class Image:
    """An image; the alt text arrives as the events between Start and End"""
    link_type: LinkType
    dest: str
    title: str = ""
    label: str = ""


Tag = Union[Paragraph, Heading, BlockQuote, CodeBlock, ListBlock, Item, Emphasis, Strong, Link, Image]


# --- Events -----------------------------------------------------------------


@dataclass(frozen=True)
class Start:
    tag: Tag


@dataclass(frozen=True)
class End:
    tag: Tag


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Code:
    """Inline code span"""
    text: str


@dataclass(frozen=True)
class Html:
    """Raw HTML block"""
    text: str


@dataclass(frozen=True)
class InlineHtml:
    text: str


@dataclass(frozen=True)
class SoftBreak:
    pass


@dataclass(frozen=True)
class HardBreak:
    pass


@dataclass(frozen=True)
class Rule:
    """Thematic break"""
    pass


Event = Union[Start, End, Text, Code, Html, InlineHtml, SoftBreak, HardBreak, Rule]


@dataclass(frozen=True)
class BrokenLink:
    """
    A reference-style link whose label has no definition

    Passed to the broken-link hook of the markdown source.

    Attributes:
        span: (start, end) character offsets of the link within the inline
              source of its enclosing block
        link_type: REFERENCE, COLLAPSED or SHORTCUT
        reference: The unresolved label as written
    """
    span: Tuple[int, int]
    link_type: LinkType
    reference: str
