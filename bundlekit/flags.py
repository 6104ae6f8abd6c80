"""Static inspection of a module's project files for extra compiler flags."""

from __future__ import annotations

from collections.abc import Callable

from bundlekit.context import ModuleDescriptor
from bundlekit.errors import CompileError

JSON_AS_PACKAGE = "json-as"


def _assemblyscript_flags(module: ModuleDescriptor) -> str:
    # json-as needs its transform registered with asc
    package_json = module.path / "package.json"
    try:
        data = package_json.read_bytes()
    except OSError as e:
        raise CompileError(f"failed to read {package_json}") from e

    if JSON_AS_PACKAGE.encode() in data:
        return f"--transform ./node_modules/{JSON_AS_PACKAGE}/transform"
    return ""


class CompilerFlagAdvisor:
    """Derives extra compiler flags from a module's sources, per language."""

    def __init__(self) -> None:
        self.rules: dict[str, Callable[[ModuleDescriptor], str]] = {
            "assemblyscript": _assemblyscript_flags,
        }

    def inspect(self, module: ModuleDescriptor) -> str:
        rule = self.rules.get(module.lang)
        if rule is None:
            return ""
        return rule(module)
