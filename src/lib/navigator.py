"""
Artifact navigation

Loads a rustdoc JSON artifact and finds the documentation of the crate root.
"""

from pathlib import Path

from pydantic import ValidationError

from ..exceptions import ArtifactError, MissingDocsError
from ..models.artifact import Crate
from .log import LOG


def artifact_load(path: Path) -> Crate:
    """
    Read and validate a rustdoc JSON file.

    Args:
        path: Location of the JSON artifact

    Returns:
        The validated Crate

    Raises:
        ArtifactError: If the file cannot be read or does not match the
                       expected shape
    """
    try:
        raw = Path(path).read_bytes()
    except OSError as e:
        raise ArtifactError("couldn't open file containing rustdoc json") from e

    try:
        crate = Crate.model_validate_json(raw)
    except ValidationError as e:
        raise ArtifactError("couldn't deserialize rustdoc json") from e

    LOG(
        f"Loaded {len(crate.index)} items of crate version {crate.crate_version or 'unknown'} "
        f"(format version {crate.format_version})",
        level=2,
    )
    return crate


def rootDocs_extract(crate: Crate) -> str:
    """
    Return the documentation comment of the crate root.

    Args:
        crate: Parsed rustdoc artifact

    Returns:
        Raw markdown of the root item's docs

    Raises:
        ArtifactError: If the root id is not in the index
        MissingDocsError: If the root has no (or empty) documentation
    """
    root = crate.item_get(crate.root)
    if root is None:
        raise ArtifactError(f"root item {crate.root!r} is missing from the index")

    if not root.docs:
        raise MissingDocsError("root does not have any documentation")

    return root.docs
