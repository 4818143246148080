"""
README emission: the event-to-text driving loop

Parses the root documentation, rewrites every event and serializes it
straight into the output sink. Serializer state is threaded by hand from one
step to the next; nothing is buffered apart from the input docs.
"""

import io
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, TextIO, Union

from ..exceptions import OutputError
from .log import LOG
from .serializer import SerializerState, cmark_finalize, cmark_resume
from .source import BrokenLinkHook, brokenLink_warn, markdown_events
from .transform import EventTransformer


def markdown_rewrite(
    docs: str,
    sink: TextIO,
    transformer: Optional[EventTransformer] = None,
    on_broken_link: Optional[BrokenLinkHook] = brokenLink_warn,
) -> int:
    """
    Rewrite documentation markdown into the sink.

    Args:
        docs: Raw markdown of the crate root
        sink: Text stream the README is written to
        transformer: Event rewriter, a default EventTransformer if omitted
        on_broken_link: Hook for undefined reference links

    Returns:
        Number of characters written

    Raises:
        OutputError: If writing to the sink fails. Output already written
                     stays in the sink.
    """
    if transformer is None:
        transformer = EventTransformer()

    state = SerializerState()
    try:
        for event in markdown_events(docs, on_broken_link):
            LOG(f"{event!r}", level=3)
            state = cmark_resume(transformer(event), sink, state)
        written = state.written + cmark_finalize(state, sink)
        sink.flush()
    except OSError as e:
        raise OutputError("couldn't write output") from e

    return written


def readme_render(
    docs: str,
    transformer: Optional[EventTransformer] = None,
    on_broken_link: Optional[BrokenLinkHook] = brokenLink_warn,
) -> str:
    """Rewrite documentation markdown and return it as a string."""
    sink = io.StringIO()
    markdown_rewrite(docs, sink, transformer, on_broken_link)
    return sink.getvalue()


@contextmanager
def output_open(target: Union[str, Path, None]) -> Iterator[TextIO]:
    """
    Open the output sink.

    Args:
        target: File path; None or "-" selects standard output

    Yields:
        A writable text stream. Files are created or truncated and closed
        on exit; standard output is left open.

    Raises:
        OutputError: If the file cannot be opened
    """
    if target is None or str(target) == "-":
        yield sys.stdout
        return

    try:
        handle = open(target, "w", encoding="utf-8", newline="")
    except OSError as e:
        raise OutputError(f"couldn't open output file {target}") from e

    with handle:
        yield handle
