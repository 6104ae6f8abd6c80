"""TinyGo builder module."""

from __future__ import annotations

from dataclasses import dataclass

from bundlekit.builders.base import CommandTemplate
from bundlekit.context import ModuleDescriptor


@dataclass
class TinyGoBuild:
    target: str = "wasi"

    def templates(self) -> list[CommandTemplate]:
        return [CommandTemplate("tinygo build", self._tinygo_build)]

    def _tinygo_build(self, module: ModuleDescriptor) -> list[str]:
        return ["tinygo", "build", "-o", f"{module.name}.wasm", "-target", self.target, "."]
