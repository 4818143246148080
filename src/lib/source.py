"""
Markdown source: raw documentation text -> event stream

Wraps markdown-it-py (CommonMark preset, no extensions) and flattens its
token stream into the events of ``models.events``.

Two additions on top of the stock parser:
- Reference-style links keep their kind and label as written, so they can be
  re-emitted in reference style instead of being inlined.
- A broken-link hook is called once for each reference-style link whose
  label has no definition. The link itself stays literal text.

Example:
    markdown_events("*hi*") yields
        Start(Paragraph()), Start(Emphasis()), Text("hi"),
        End(Emphasis()), End(Paragraph())
"""

from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

from loguru import logger
from markdown_it import MarkdownIt
from markdown_it.common.utils import normalizeReference, unescapeAll
from markdown_it.rules_inline import StateInline, image, link
from markdown_it.token import Token

from ..models.events import (
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


BrokenLinkHook = Callable[[BrokenLink], None]


@dataclass
class LinkReference:
    """
    How a bracketed link was written

    Attributes:
        link_type: REFERENCE, COLLAPSED or SHORTCUT
        label: Label as written (the link text for collapsed/shortcut links)
        span: (start, end) offsets in the inline source
    """
    link_type: LinkType
    label: str
    span: Tuple[int, int]


def brokenLink_warn(broken: BrokenLink) -> None:
    """Default broken-link hook: report and leave the link as text."""
    logger.warning(
        "broken link {reference!r} ({link_type}) at {span}",
        reference=broken.reference,
        link_type=broken.link_type.value,
        span=broken.span,
    )


def reference_inspect(state: StateInline, start: int, nested: bool) -> Optional[LinkReference]:
    """
    Classify the bracketed text starting at ``start``.

    Returns None for inline links and for brackets that are not closed.
    """
    label_end = state.md.helpers.parseLinkLabel(state, start, not nested)
    if label_end < 0:
        return None

    pos = label_end + 1
    if pos < state.posMax and state.src[pos] == "(":
        return None

    text = state.src[start + 1:label_end]
    if pos < state.posMax and state.src[pos] == "[":
        ref_end = state.md.helpers.parseLinkLabel(state, pos)
        if ref_end >= 0:
            label = state.src[pos + 1:ref_end]
            if label:
                return LinkReference(LinkType.REFERENCE, label, (start, ref_end + 1))
            return LinkReference(LinkType.COLLAPSED, text, (start, ref_end + 1))

    return LinkReference(LinkType.SHORTCUT, text, (start, pos))


def _follows_label(state: StateInline, start: int) -> bool:
    # "[b]" in "[a][b]" was already inspected as part of the full reference
    return (
        start > 0
        and state.src[start - 1] == "]"
        and (start < 2 or state.src[start - 2] != "\\")
    )


def linkRule_wrap(rule, marker: str, on_broken_link: Optional[BrokenLinkHook]):
    """
    Wrap markdown-it's ``link`` or ``image`` rule.

    On success the opening token is annotated with the LinkReference; on
    failure an undefined reference is handed to ``on_broken_link``. Images
    are not reported: when the image rule fails the link rule sees the same
    brackets right after the "!".
    """

    def rule_wrapped(state: StateInline, silent: bool) -> bool:
        start = state.pos + len(marker) - 1
        if silent or not state.src.startswith(marker, state.pos):
            return rule(state, silent)

        reference = reference_inspect(state, start, nested=marker != "[")
        first = len(state.tokens)
        if rule(state, silent):
            if reference is not None:
                for token in state.tokens[first:]:
                    if token.type in ("link_open", "image"):
                        token.meta["reference"] = reference
                        break
            return True

        if (
            on_broken_link is not None
            and marker == "["
            and reference is not None
            and reference.label.strip()
            and not (reference.link_type is LinkType.SHORTCUT and _follows_label(state, start))
            and normalizeReference(reference.label) not in state.env.get("references", {})
        ):
            on_broken_link(BrokenLink(reference.span, reference.link_type, reference.label))
        return False

    return rule_wrapped


def parser_make(on_broken_link: Optional[BrokenLinkHook] = brokenLink_warn) -> MarkdownIt:
    """Build a CommonMark parser with the link rules wrapped."""
    md = MarkdownIt("commonmark")
    md.inline.ruler.at("link", linkRule_wrap(link, "[", on_broken_link))
    md.inline.ruler.at("image", linkRule_wrap(image, "![", on_broken_link))
    return md


def _listTight_is(tokens: List[Token], index: int) -> bool:
    """A list is tight when the paragraphs of its items are hidden."""
    opening = tokens[index]
    for token in tokens[index + 1:]:
        if token.level == opening.level and token.nesting == -1:
            break
        if token.type == "paragraph_open" and token.level == opening.level + 2:
            return token.hidden
    return True


def _linkTag_make(cls, token: Token, href_attr: str):
    href = str(token.attrGet(href_attr) or "")
    title = str(token.attrGet("title") or "")
    reference = token.meta.get("reference") if token.meta else None

    if token.markup == "autolink":
        return cls(LinkType.EMAIL if href.startswith("mailto:") else LinkType.AUTOLINK, href)
    if reference is not None:
        return cls(reference.link_type, href, title, reference.label)
    return cls(LinkType.INLINE, href, title)


def tag_fromToken(tokens: List[Token], index: int) -> Tag:
    """Build the tag for an opening token."""
    token = tokens[index]
    kind = token.type

    if kind == "paragraph_open":
        return Paragraph()
    if kind == "heading_open":
        return Heading(int(token.tag[1:]), token.markup in ("=", "-"))
    if kind == "blockquote_open":
        return BlockQuote()
    if kind == "bullet_list_open":
        return ListBlock(None, _listTight_is(tokens, index))
    if kind == "ordered_list_open":
        start = token.attrGet("start")
        return ListBlock(1 if start is None else int(start), _listTight_is(tokens, index))
    if kind == "list_item_open":
        return Item()
    if kind == "em_open":
        return Emphasis()
    if kind == "strong_open":
        return Strong()
    if kind == "link_open":
        return _linkTag_make(Link, token, "href")

    raise ValueError(f"unsupported markdown token: {kind}")


def events_fromTokens(tokens: List[Token]) -> Iterator[Event]:
    """
    Flatten markdown-it tokens into events.

    Inline tokens are expanded in place; paragraphs hidden by tight lists
    produce no events.
    """
    stack: List[Tag] = []

    for index, token in enumerate(tokens):
        kind = token.type

        if kind == "inline":
            yield from events_fromTokens(token.children or [])
        elif token.hidden:
            continue
        elif token.nesting == 1:
            tag = tag_fromToken(tokens, index)
            stack.append(tag)
            yield Start(tag)
        elif token.nesting == -1:
            yield End(stack.pop())
        elif kind in ("fence", "code_block"):
            tag = CodeBlock(unescapeAll(token.info).strip() if kind == "fence" else None)
            yield Start(tag)
            if token.content:
                yield Text(token.content)
            yield End(tag)
        elif kind == "image":
            tag = _linkTag_make(Image, token, "src")
            yield Start(tag)
            yield from events_fromTokens(token.children or [])
            yield End(tag)
        elif kind in ("text", "text_special"):
            if token.content:
                yield Text(token.content)
        elif kind == "code_inline":
            yield Code(token.content)
        elif kind == "softbreak":
            yield SoftBreak()
        elif kind == "hardbreak":
            yield HardBreak()
        elif kind == "hr":
            yield Rule()
        elif kind == "html_block":
            yield Html(token.content)
        elif kind == "html_inline":
            yield InlineHtml(token.content)
        else:
            raise ValueError(f"unsupported markdown token: {kind}")


def markdown_events(
    text: str, on_broken_link: Optional[BrokenLinkHook] = brokenLink_warn
) -> Iterator[Event]:
    """
    Parse markdown into a stream of events.

    Args:
        text: Raw markdown
        on_broken_link: Called once per undefined reference-style link, in
                        document order, before the first event is produced.
                        None disables reporting.

    Returns:
        A single-use iterator of events
    """
    tokens = parser_make(on_broken_link).parse(text, {})
    return events_fromTokens(tokens)
