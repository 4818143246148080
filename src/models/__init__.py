"""
Models package for extract-readme

Contains data structures and type definitions for the extraction pipeline.
"""

from .state import ProgramState, pipeline
from .artifact import Crate, Item, ItemId
from .events import (
    BlockQuote,
    BrokenLink,
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
    Item as ListItem,
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

__all__ = [
    "ProgramState",
    "pipeline",
    "Crate",
    "Item",
    "ItemId",
    "BlockQuote",
    "BrokenLink",
    "Code",
    "CodeBlock",
    "Emphasis",
    "End",
    "Event",
    "HardBreak",
    "Heading",
    "Html",
    "Image",
    "InlineHtml",
    "ListItem",
    "Link",
    "LinkType",
    "ListBlock",
    "Paragraph",
    "Rule",
    "SoftBreak",
    "Start",
    "Strong",
    "Tag",
    "Text",
]
