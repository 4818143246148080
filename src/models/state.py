"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Optional, Type, TypeVar, List, Dict, Callable, TYPE_CHECKING
from dataclasses import dataclass, field
from functools import reduce

if TYPE_CHECKING:
    from .artifact import Crate


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    State bus carried through the extraction pipeline.

    Pipeline stages and their state additions:
        - Initial: CLI options (output, toolchain, manifestPath, ...)
        - env_check: artifactPath (when given with --artifact), envOK
        - artifact_build: artifactPath
        - artifact_read: crate
        - docs_extract: rootDocs
        - readme_emit: emitResult

    Attributes:
        verbosity: Logging verbosity level (0 quiet, 1-3)
        output: Output file, None or "-" for stdout
        toolchain: rustup toolchain for the rustdoc build
        manifestPath: Cargo.toml of the package
        package: Packages named with -p (the last one is documented)
        workspace: --workspace was given
        exclude: Packages excluded from the workspace
        allFeatures: Activate all features
        noDefaultFeatures: Do not activate the default feature
        features: Features to activate
        artifact: Prebuilt rustdoc JSON file, skips the build
        defaultHint: Language for fenced code blocks without one
        envOK: Environment validation passed
        artifactPath: rustdoc JSON file to read
        crate: Parsed artifact
        rootDocs: Markdown documentation of the crate root
        emitResult: Emission results (output, characters)
    """

    # CLI arguments
    verbosity: int = field(default=1)
    output: Optional[str] = field(default=None)
    toolchain: str = field(default="nightly")
    manifestPath: Optional[Path] = field(default=None)
    package: List[str] = field(default_factory=list)
    workspace: bool = field(default=False)
    exclude: List[str] = field(default_factory=list)
    allFeatures: bool = field(default=False)
    noDefaultFeatures: bool = field(default=False)
    features: List[str] = field(default_factory=list)
    artifact: Optional[Path] = field(default=None)
    defaultHint: Optional[str] = field(default=None)

    # Pipeline state
    envOK: bool = field(default=False)
    artifactPath: Optional[Path] = field(default=None)
    crate: Optional["Crate"] = field(default=None)
    rootDocs: Optional[str] = field(default=None)
    emitResult: Optional[Dict] = field(default=None)

    @classmethod
    def state_createFromNamespace(cls: Type["ProgramState"], options: Namespace) -> "ProgramState":
        """
        Create ProgramState from an argparse Namespace.

        Options without a matching field are ignored; repeatable list options
        that were never given (None) fall back to the field default.

        Args:
            options: Parsed CLI arguments

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        filtered_options = {
            k: v for k, v in vars(options).items() if k in valid_fields and v is not None
        }
        return cls(**filtered_options)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            artifact_build,
            artifact_read,
            docs_extract,
            readme_emit,
        )

    This is equivalent to:
        readme_emit(docs_extract(artifact_read(artifact_build(env_check(initial_state)))))
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
