"""AssemblyScript builder module.

The asc invocation carries any extra compiler flags inferred for the
module (e.g. the json-as transform).
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass

from bundlekit.builders.base import CommandTemplate
from bundlekit.context import ModuleDescriptor


@dataclass
class AssemblyScriptBuild:
    entrypoint: str = "src/index.ts"
    abort: str = "src/index/abort"

    def templates(self) -> list[CommandTemplate]:
        return [CommandTemplate("asc", self._asc)]

    def _asc(self, module: ModuleDescriptor) -> list[str]:
        argv = [
            "npx", "asc", self.entrypoint,
            "--target", "release",
            "--use", f"abort={self.abort}",
            "--outFile", f"{module.name}.wasm",
        ]
        argv.extend(shlex.split(module.compiler_flags))
        return argv
