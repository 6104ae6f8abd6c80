"""TypeScript builder module.

Runs the project's own npm build script, which is expected to emit
build/index.wasm, then copies that next to the module sources.
"""

from __future__ import annotations

from dataclasses import dataclass

from bundlekit.builders.base import CommandTemplate
from bundlekit.context import ModuleDescriptor


@dataclass
class TypeScriptBuild:
    script: str = "build"
    output: str = "build/index.wasm"

    def templates(self) -> list[CommandTemplate]:
        return [
            CommandTemplate("npm run", self._npm_run),
            CommandTemplate("copy artifact", self._copy_artifact),
        ]

    def _npm_run(self, module: ModuleDescriptor) -> list[str]:
        return ["npm", "run", self.script]

    def _copy_artifact(self, module: ModuleDescriptor) -> list[str]:
        return ["cp", self.output, f"./{module.name}.wasm"]
