"""
extract-readme - Generate a README from a Rust crate's root documentation

Fenced code blocks without a language become rust blocks and hidden doctest
lines are dropped; everything else is kept as written.
"""

__version__ = "0.1.0"

from .lib import EventTransformer, RustdocBuilder, markdown_rewrite, readme_render, LOG, state_connectToLogger

__all__ = [
    "EventTransformer",
    "RustdocBuilder",
    "markdown_rewrite",
    "readme_render",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
