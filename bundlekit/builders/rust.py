"""Rust builder module.

Compiles a cargo library crate to wasm32-wasi and copies the artifact
next to the module sources.
"""

from __future__ import annotations

from dataclasses import dataclass

from bundlekit.builders.base import CommandTemplate
from bundlekit.context import ModuleDescriptor


@dataclass
class RustBuild:
    target: str = "wasm32-wasi"
    profile: str = "release"

    def templates(self) -> list[CommandTemplate]:
        return [
            CommandTemplate("cargo build", self._cargo_build),
            CommandTemplate("copy artifact", self._copy_artifact),
        ]

    def _cargo_build(self, module: ModuleDescriptor) -> list[str]:
        return ["cargo", "build", "--target", self.target, "--lib", f"--{self.profile}"]

    def _copy_artifact(self, module: ModuleDescriptor) -> list[str]:
        # cargo names library outputs with underscores
        built = f"target/{self.target}/{self.profile}/{module.underscore_name}.wasm"
        return ["cp", built, f"./{module.name}.wasm"]
