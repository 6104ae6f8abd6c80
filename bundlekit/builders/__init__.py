"""Native builders for each supported source language.

Each builder module provides the ordered commands that compile one module
to ``<name>.wasm`` inside its own directory. The set of languages is closed:
anything not listed in BUILDERS cannot be built natively.
"""

from __future__ import annotations

from collections.abc import Callable

from bundlekit.builders.assemblyscript import AssemblyScriptBuild
from bundlekit.builders.base import CommandTemplate, LanguageBuild
from bundlekit.builders.grain import GrainBuild
from bundlekit.builders.rust import RustBuild
from bundlekit.builders.swift import SwiftBuild
from bundlekit.builders.tinygo import TinyGoBuild
from bundlekit.builders.typescript import TypeScriptBuild
from bundlekit.errors import ConfigurationError

BUILDERS: dict[str, Callable[[], LanguageBuild]] = {
    "rust": RustBuild,
    "swift": SwiftBuild,
    "assemblyscript": AssemblyScriptBuild,
    "tinygo": TinyGoBuild,
    "grain": GrainBuild,
    "typescript": TypeScriptBuild,
}


def native_build_templates(lang: str) -> list[CommandTemplate]:
    """Return the ordered command templates for lang."""
    factory = BUILDERS.get(lang)
    if factory is None:
        raise ConfigurationError(f"{lang!r} is not a supported language")
    return factory().templates()


__all__ = [
    "BUILDERS",
    "AssemblyScriptBuild",
    "CommandTemplate",
    "GrainBuild",
    "LanguageBuild",
    "RustBuild",
    "SwiftBuild",
    "TinyGoBuild",
    "TypeScriptBuild",
    "native_build_templates",
]
