"""Build context: the modules of a project and where its outputs go."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from bundlekit.errors import BundlingError, ConfigurationError
from bundlekit.manifest import Manifest, load_manifest

# Per-module descriptor file, placed in each module's source directory.
MODULE_FILENAME = ".runnable.yaml"

BUNDLE_FILENAME = "runnables.wasm.zip"

BINARY_EXTENSION = "wasm"


@dataclass
class ModuleDescriptor:
    """A single source unit compiled into one .wasm binary.

    ``compiler_flags`` is filled in during a native build pass.
    """

    name: str
    lang: str
    path: Path
    namespace: str = "default"
    compiler_flags: str = ""

    @property
    def underscore_name(self) -> str:
        return self.name.replace("-", "_")

    @property
    def wasm_path(self) -> Path:
        return self.path / f"{self.name}.{BINARY_EXTENSION}"


def read_module(directory: Path) -> ModuleDescriptor:
    """Read a module descriptor from ``directory/.runnable.yaml``."""
    path = directory / MODULE_FILENAME
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"failed to read {path}") from e

    if not isinstance(payload, dict):
        raise ConfigurationError(f"{path} must be a mapping")

    missing = [k for k in ("name", "lang") if not payload.get(k)]
    if missing:
        raise ConfigurationError(f"{path} is missing required keys: {', '.join(missing)}")

    return ModuleDescriptor(
        name=str(payload["name"]),
        lang=str(payload["lang"]),
        path=directory.resolve(),
        namespace=str(payload.get("namespace", "default")),
    )


def discover_modules(directory: Path) -> list[ModuleDescriptor]:
    """Find every immediate subdirectory holding a module descriptor.

    Modules are returned sorted by directory name so build order is stable.
    """
    modules: list[ModuleDescriptor] = []
    for entry in sorted(os.scandir(directory), key=lambda e: e.name):
        if not entry.is_dir() or entry.name.startswith("."):
            continue
        if (Path(entry.path) / MODULE_FILENAME).exists():
            modules.append(read_module(Path(entry.path)))
    return modules


@dataclass
class BuildContext:
    """Everything known about a project directory before building it."""

    cwd: Path
    modules: list[ModuleDescriptor] = field(default_factory=list)
    manifest: Manifest | None = None
    bundle_path: Path | None = None
    mount_path: Path | None = None
    rel_docker_path: str = "."

    def __post_init__(self) -> None:
        if self.bundle_path is None:
            self.bundle_path = self.cwd / BUNDLE_FILENAME
        if self.mount_path is None:
            self.mount_path = self.cwd

    @classmethod
    def for_directory(cls, directory: str | Path) -> BuildContext:
        cwd = Path(directory).resolve()
        if not cwd.is_dir():
            raise ConfigurationError(f"{cwd} is not a directory")

        return cls(
            cwd=cwd,
            modules=discover_modules(cwd),
            manifest=load_manifest(cwd),
        )

    def compiled_modules(self) -> list[Path]:
        """Return the compiled .wasm file of every module.

        Raises BundlingError if any module has not been compiled.
        """
        paths: list[Path] = []
        for module in self.modules:
            if not module.wasm_path.is_file():
                raise BundlingError(f"module {module.name} has no compiled output at {module.wasm_path}")
            paths.append(module.wasm_path)
        return paths
