"""
extract-readme - Generate a README from a Rust crate's root documentation

Builds the crate's rustdoc JSON, takes the crate-level docs and rewrites them
as publishing-ready CommonMark.
"""

__version__ = "0.1.0"

from .emitter import markdown_rewrite, output_open, readme_render
from .log import LOG, logger_configure, state_connectToLogger
from .navigator import artifact_load, rootDocs_extract
from .rustdoc import RustdocBuilder
from .serializer import SerializerState, cmark_finalize, cmark_resume
from .source import brokenLink_warn, markdown_events
from .transform import EventTransformer

__all__ = [
    "markdown_rewrite",
    "output_open",
    "readme_render",
    "LOG",
    "logger_configure",
    "state_connectToLogger",
    "artifact_load",
    "rootDocs_extract",
    "RustdocBuilder",
    "SerializerState",
    "cmark_finalize",
    "cmark_resume",
    "brokenLink_warn",
    "markdown_events",
    "EventTransformer",
    "__version__",
]
