"""Grain builder module."""

from __future__ import annotations

from dataclasses import dataclass

from bundlekit.builders.base import CommandTemplate
from bundlekit.context import ModuleDescriptor


@dataclass
class GrainBuild:
    entrypoint: str = "index.gr"
    include_dir: str = "_lib"

    def templates(self) -> list[CommandTemplate]:
        return [CommandTemplate("grain compile", self._grain_compile)]

    def _grain_compile(self, module: ModuleDescriptor) -> list[str]:
        return ["grain", "compile", self.entrypoint, "-I", self.include_dir, "-o", f"{module.name}.wasm"]
