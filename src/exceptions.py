"""
Exceptions for extract-readme

Every fatal condition of the pipeline is one of these. They carry a short,
user-facing message; the underlying cause is chained with ``raise ... from``.
Broken markdown links are not errors and never raise.
"""

from typing import Optional


class ExtractReadmeError(Exception):
    """Base exception for extract-readme errors."""

    def __str__(self) -> str:
        """Return the message followed by the chained cause, if any."""
        msg = super().__str__()
        if self.__cause__ is not None:
            msg = f"{msg}: {self.__cause__}"
        return msg


class BuildError(ExtractReadmeError):
    """The rustdoc JSON artifact could not be built."""

    def __init__(self, message: str, command: Optional[list] = None) -> None:
        super().__init__(message)
        self.command = command

    def __str__(self) -> str:
        msg = super().__str__()
        if self.command:
            msg = f"{msg}\nCommand: {' '.join(self.command)}"
        return msg


class ArtifactError(ExtractReadmeError):
    """The rustdoc JSON artifact is unreadable or malformed."""


class MissingDocsError(ExtractReadmeError):
    """The crate root has no documentation."""


class OutputError(ExtractReadmeError):
    """The output could not be opened or written."""
