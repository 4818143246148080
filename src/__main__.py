#!/usr/bin/env python3
"""
extract-readme - Generate a README from a Rust crate's root documentation

Builds the rustdoc JSON of a library crate, takes the documentation of the
crate root (the `//!` comments of lib.rs) and writes it back out as
CommonMark, ready to be published as README.md.

Two rewrites are applied on the way:
    - Fenced code blocks without a language are tagged `rust`
    - Hidden doctest lines (`# ` prefixed lines in code blocks) are dropped

Everything else is kept as written, including reference-style links.

Usage:
    extract-readme [-o README.md] [--manifest-path Cargo.toml] [-p package]

    Also installed as the cargo subcommand `cargo extract-readme`.

Examples:
    # README of the package in the current directory, to stdout
    extract-readme

    # Write README.md for one package of a workspace
    cargo extract-readme -p mycrate -o mycrate/README.md

    # Skip the build and read an existing rustdoc JSON file
    extract-readme --artifact target/doc/mycrate.json -o README.md

    # Verbose output
    extract-readme -o README.md -vv
"""

import re
import sys
from pathlib import Path
from argparse import ArgumentParser, ArgumentDefaultsHelpFormatter
from typing import List, Optional

from .config import appsettings
from .exceptions import ExtractReadmeError
from .lib import (
    EventTransformer,
    RustdocBuilder,
    __version__,
    LOG,
    artifact_load,
    logger_configure,
    markdown_rewrite,
    output_open,
    rootDocs_extract,
    state_connectToLogger,
)
from .models import ProgramState, pipeline


DISPLAY_TITLE = r"""
  extract-readme
  ==============
  crate docs -> README.md
"""

# Define CLI arguments
parser = ArgumentParser(
    prog="extract-readme",
    description="extract-readme - Generate a README from a crate's root documentation",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "-o",
    "--output",
    default=None,
    type=str,
    help="Output file, '-' or none for stdout",
)

parser.add_argument(
    "-t",
    "--toolchain",
    default=appsettings.toolchain,
    type=str,
    help="Toolchain used to build rustdoc JSON",
)

parser.add_argument(
    "--manifest-path",
    dest="manifestPath",
    default=None,
    type=Path,
    help="Path to Cargo.toml",
)

parser.add_argument(
    "-p",
    "--package",
    action="append",
    default=None,
    help="Package to document (the last one given wins)",
)

parser.add_argument(
    "--workspace",
    "--all",
    action="store_true",
    help="Accepted for cargo compatibility; a single package is documented",
)

parser.add_argument(
    "--exclude",
    action="append",
    default=None,
    help="Exclude a package from the workspace selection",
)

parser.add_argument(
    "-F",
    "--features",
    action="append",
    default=None,
    help="Space or comma separated list of features to activate",
)

parser.add_argument(
    "--all-features",
    dest="allFeatures",
    action="store_true",
    help="Activate all available features",
)

parser.add_argument(
    "--no-default-features",
    dest="noDefaultFeatures",
    action="store_true",
    help="Do not activate the `default` feature",
)

parser.add_argument(
    "--artifact",
    default=None,
    type=Path,
    help="Read an existing rustdoc JSON file instead of building one",
)

parser.add_argument(
    "--default-hint",
    dest="defaultHint",
    default=appsettings.default_code_hint,
    type=str,
    help="Language given to fenced code blocks written without one",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv)",
)

parser.add_argument(
    "-q",
    "--quiet",
    dest="verbosity",
    action="store_const",
    const=0,
    help="Only report errors (also silences broken link warnings)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def features_split(specs: List[str]) -> List[str]:
    """Flatten repeated -F values, each a comma or space separated list."""
    return [feature for spec in specs for feature in re.split(r"[,\s]+", spec) if feature]


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Normalize options and report what is going to be documented.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - features: flattened feature list
            - artifactPath: the --artifact file, if given
            - envOK: True if the options are usable

    Exits:
        1 if the manifest path does not exist
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    state.features = features_split(state.features)

    if state.manifestPath is not None and not state.manifestPath.is_file():
        print(f"Error: Manifest not found: {state.manifestPath}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    if state.workspace or state.exclude:
        LOG("Workspace selection is ignored, one package is documented", level=1)
    if len(state.package) > 1:
        LOG(f"Several packages given, documenting {state.package[-1]}", level=1)

    if state.artifact is not None:
        state.artifactPath = state.artifact
        LOG(f"Artifact: {state.artifactPath}", level=2)

    LOG(f"Output: {state.output or 'stdout'}", level=2)

    state.envOK = True
    return state


def artifact_build(inputstate: ProgramState) -> ProgramState:
    """
    Build the rustdoc JSON artifact with cargo.

    Skipped when an artifact was given on the command line.

    Args:
        inputstate: Program state with build options

    Returns:
        ProgramState with added field:
            - artifactPath: Path of the generated JSON file

    Exits:
        1 if the build fails
    """

    state = inputstate.copy()

    if state.artifactPath is not None:
        LOG("Using existing artifact, skipping build", level=2)
        return state

    LOG(f"Building rustdoc JSON with toolchain {state.toolchain or 'default'}...", level=1)

    builder = RustdocBuilder(
        manifest_path=state.manifestPath,
        package=state.package[-1] if state.package else None,
        all_features=state.allFeatures,
        no_default_features=state.noDefaultFeatures,
        features=state.features,
        toolchain=state.toolchain,
    )
    try:
        state.artifactPath = builder.build()
    except ExtractReadmeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    LOG(f"Built {state.artifactPath}", level=2)
    return state


def artifact_read(inputstate: ProgramState) -> ProgramState:
    """
    Read and validate the rustdoc JSON artifact.

    Args:
        inputstate: Program state with artifactPath set

    Returns:
        ProgramState with added field:
            - crate: The parsed artifact

    Exits:
        1 if the artifact cannot be read or deserialized
    """

    state = inputstate.copy()

    LOG("Reading rustdoc JSON...", level=1)

    try:
        state.crate = artifact_load(state.artifactPath)
    except ExtractReadmeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    return state


def docs_extract(inputstate: ProgramState) -> ProgramState:
    """
    Take the documentation of the crate root.

    Runs before any output is opened, so a crate without docs leaves no
    output file behind.

    Args:
        inputstate: Program state with crate set

    Returns:
        ProgramState with added field:
            - rootDocs: Raw markdown of the crate root

    Exits:
        1 if the root item is missing or undocumented
    """

    state = inputstate.copy()

    try:
        state.rootDocs = rootDocs_extract(state.crate)
    except ExtractReadmeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    LOG(f"Root documentation is {len(state.rootDocs)} characters", level=2)
    return state


def readme_emit(inputstate: ProgramState) -> ProgramState:
    """
    Rewrite the root documentation into the output.

    Args:
        inputstate: Program state with rootDocs set

    Returns:
        ProgramState with added field:
            - emitResult: Dict containing:
                - output: str (file path or "stdout")
                - characters: int (characters written)

    Exits:
        1 if the output cannot be opened or written
    """

    state = inputstate.copy()

    LOG("Writing README...", level=1)

    transformer = EventTransformer(default_hint=state.defaultHint)
    try:
        with output_open(state.output) as sink:
            characters = markdown_rewrite(state.rootDocs, sink, transformer)
    except ExtractReadmeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    state.emitResult = {
        "output": state.output if state.output and state.output != "-" else "stdout",
        "characters": characters,
    }
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """Summarize the run (terminal pipeline stage)."""
    state: ProgramState = inputstate.copy()
    if not state.emitResult:
        print("Error: Nothing was written", file=sys.stderr)
        sys.exit(1)

    LOG(
        f"Wrote {state.emitResult['characters']} characters to {state.emitResult['output']}",
        level=1,
    )
    return state


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point - write the README of a crate.

    Orchestrates the full pipeline:
        1. env_check: Normalize options
        2. artifact_build: Build rustdoc JSON (unless --artifact)
        3. artifact_read: Read the JSON
        4. docs_extract: Take the crate root docs
        5. readme_emit: Rewrite them into the output
        6. results_report: Summarize

    Args:
        argv: Command line without the program name, sys.argv[1:] if None.
              A leading "extract-readme" (as passed by cargo to a
              subcommand) is dropped.

    Returns:
        0 on success; fatal errors exit with status 1
    """
    args = sys.argv[1:] if argv is None else list(argv)
    if args and args[0] == "extract-readme":
        args = args[1:]

    options = parser.parse_args(args)
    logger_configure(options.verbosity)

    state: ProgramState = ProgramState.state_createFromNamespace(options)

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(
        state,
        env_check,
        artifact_build,
        artifact_read,
        docs_extract,
        readme_emit,
        results_report,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
