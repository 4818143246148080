"""
rustdoc JSON builder

Runs cargo to produce the rustdoc JSON artifact of a package:

    cargo metadata --format-version 1 --no-deps        # where, and what
    cargo +nightly rustdoc --lib -- -Z unstable-options --output-format json

The artifact lands in ``<target dir>/doc/<lib name>.json``.
"""

import json
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import appsettings
from ..exceptions import BuildError
from .log import LOG


LIB_KINDS = {"lib", "rlib", "dylib", "proc-macro"}


@dataclass
class RustdocBuilder:
    """
    Build configuration for one rustdoc JSON artifact

    Attributes:
        manifest_path: Cargo.toml to use, cargo's default lookup if None
        package: Package to document, inferred from the manifest if None
        all_features: Activate all features
        no_default_features: Do not activate the default feature
        features: Features to activate
        toolchain: rustup toolchain, "" to use the default one
        cargo: cargo executable
    """
    manifest_path: Optional[Path] = None
    package: Optional[str] = None
    all_features: bool = False
    no_default_features: bool = False
    features: List[str] = field(default_factory=list)
    toolchain: str = field(default_factory=lambda: appsettings.toolchain)
    cargo: str = field(default_factory=lambda: appsettings.cargo_command)

    def flags_common(self) -> List[str]:
        """Manifest and feature flags shared by every cargo invocation."""
        flags: List[str] = []
        if self.manifest_path:
            flags += ["--manifest-path", str(self.manifest_path)]
        if self.all_features:
            flags.append("--all-features")
        if self.no_default_features:
            flags.append("--no-default-features")
        if self.features:
            flags += ["--features", ",".join(self.features)]
        return flags

    def metadataCommand_make(self) -> List[str]:
        return [self.cargo, "metadata", "--format-version", "1", "--no-deps"] + self.flags_common()

    def rustdocCommand_make(self, package: Optional[str] = None) -> List[str]:
        command = [self.cargo]
        if self.toolchain:
            command.append(f"+{self.toolchain}")
        command += ["rustdoc", "--lib"] + self.flags_common()
        package = package or self.package
        if package:
            command += ["--package", package]
        command += ["--", "-Z", "unstable-options", "--output-format", "json", "--cap-lints", "warn"]
        return command

    def command_run(self, command: List[str], capture: bool = False) -> str:
        """
        Run a cargo command.

        Args:
            command: Full argument vector
            capture: Return stdout instead of discarding it

        Raises:
            BuildError: If cargo cannot be started or exits non-zero
        """
        LOG(f"Running {' '.join(command)}", level=2)
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE if capture else subprocess.DEVNULL,
                text=True,
            )
        except OSError as e:
            raise BuildError(f"couldn't run {self.cargo}", command) from e

        if result.returncode != 0:
            raise BuildError(f"{self.cargo} exited with status {result.returncode}", command)
        return result.stdout or ""

    def metadata_get(self) -> Dict[str, Any]:
        """Return the parsed output of ``cargo metadata``."""
        command = self.metadataCommand_make()
        output = self.command_run(command, capture=True)
        try:
            return json.loads(output)
        except json.JSONDecodeError as e:
            raise BuildError("couldn't parse cargo metadata output", command) from e

    def package_select(self, metadata: Dict[str, Any]) -> Dict[str, Any]:
        """
        Pick the package to document.

        An explicit package name wins, then the package owning the manifest
        (the given one or ./Cargo.toml), then the only package of the
        workspace.
        """
        packages = metadata.get("packages", [])

        if self.package:
            for package in packages:
                if package.get("name") == self.package:
                    return package
            raise BuildError(f"package {self.package!r} not found in the workspace")

        manifest = Path(self.manifest_path or Path.cwd() / "Cargo.toml").resolve()
        for package in packages:
            if Path(package.get("manifest_path", "")).resolve() == manifest:
                return package

        if len(packages) == 1:
            return packages[0]

        raise BuildError("couldn't determine the package to document, select one with --package")

    @staticmethod
    def libTarget_name(package: Dict[str, Any]) -> str:
        """Crate name of the package's library target, as rustdoc names it."""
        for target in package.get("targets", []):
            if LIB_KINDS.intersection(target.get("kind", [])):
                return target["name"].replace("-", "_")
        raise BuildError(f"package {package.get('name')!r} has no library target")

    def build(self) -> Path:
        """
        Build the artifact and return its path.

        Raises:
            BuildError: If any step fails or the artifact is not where
                        rustdoc should have put it
        """
        metadata = self.metadata_get()
        package = self.package_select(metadata)
        crate_name = self.libTarget_name(package)
        LOG(f"Documenting package {package.get('name')} (crate {crate_name})", level=1)

        self.command_run(self.rustdocCommand_make(package.get("name")))

        artifact = Path(metadata["target_directory"]) / "doc" / f"{crate_name}.json"
        if not artifact.is_file():
            raise BuildError(f"rustdoc json not found at {artifact}")
        return artifact
