"""Swift builder module."""

from __future__ import annotations

from dataclasses import dataclass

from bundlekit.builders.base import CommandTemplate
from bundlekit.context import ModuleDescriptor


@dataclass
class SwiftBuild:
    target: str = "wasm32-unknown-wasi"
    entrypoint: str = "lib.swift"

    def templates(self) -> list[CommandTemplate]:
        return [CommandTemplate("swiftc", self._swiftc)]

    def _swiftc(self, module: ModuleDescriptor) -> list[str]:
        return ["swiftc", "-o", f"{module.name}.wasm", "-target", self.target, self.entrypoint]
