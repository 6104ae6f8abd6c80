"""Manifest: identity, versions and exposed functions of a bundle.

The manifest lives in ``Directive.yaml`` at the project root. When a
project has no manifest, bundling synthesizes a default one. A headless
manifest has no external version-of-record, so every bundling pass bumps
its major version and writes it back.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from bundlekit.config import HOST_VERSION
from bundlekit.errors import ManifestError

if TYPE_CHECKING:
    from bundlekit.context import ModuleDescriptor

MANIFEST_FILENAMES = ("Directive.yaml", "Directive.yml")

DEFAULT_IDENTIFIER = "com.bundlekit.app"
DEFAULT_APP_VERSION = "v0.0.1"

_SEMVER_RE = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?$"
)
# vMAJOR and vMAJOR.MINOR shorthands are accepted when reading the major component
_MAJOR_RE = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)(?:\.(?:0|[1-9]\d*)(?:\.(?:0|[1-9]\d*))?)?"
    r"(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?$"
)
_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)+$")

_MANIFEST_KEYS = ("identifier", "appVersion", "hostVersion", "headless", "functions")
_FUNCTION_KEYS = ("name", "namespace", "lang")


def major_version(version: str) -> int:
    """Return the major component of a semantic version, 0 if unparsable."""
    m = _MAJOR_RE.match(version.strip())
    if m is None:
        return 0
    return int(m.group("major"))


def is_valid_version(version: str) -> bool:
    return _SEMVER_RE.match(version) is not None


@dataclass
class FunctionEntry:
    name: str
    namespace: str = "default"
    lang: str = ""

    # Keys this model does not interpret, written back unchanged.
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def fqfn(self) -> str:
        return f"{self.namespace}#{self.name}"


@dataclass
class Manifest:
    identifier: str
    app_version: str
    host_version: str
    headless: bool = False
    functions: list[FunctionEntry] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    # Where the manifest was loaded from, None when synthesized.
    source: Path | None = field(default=None, compare=False, repr=False)

    @classmethod
    def default(cls) -> Manifest:
        return cls(
            identifier=DEFAULT_IDENTIFIER,
            app_version=DEFAULT_APP_VERSION,
            host_version=f"v{HOST_VERSION}",
        )

    @classmethod
    def from_dict(cls, payload: dict[str, Any], source: Path | None = None) -> Manifest:
        functions = []
        for i, fn in enumerate(payload.get("functions") or []):
            if not isinstance(fn, dict) or "name" not in fn:
                raise ManifestError(f"functions[{i}] must be a mapping with a 'name' key")
            functions.append(FunctionEntry(
                name=str(fn["name"]),
                namespace=str(fn.get("namespace", "default")),
                lang=str(fn.get("lang", "")),
                extra={k: v for k, v in fn.items() if k not in _FUNCTION_KEYS},
            ))

        return cls(
            identifier=str(payload.get("identifier", "")),
            app_version=str(payload.get("appVersion", "")),
            host_version=str(payload.get("hostVersion", "")),
            headless=bool(payload.get("headless", False)),
            functions=functions,
            extra={k: v for k, v in payload.items() if k not in _MANIFEST_KEYS},
            source=source,
        )

    @classmethod
    def from_path(cls, path: Path) -> Manifest:
        """Load a manifest from a YAML file."""
        try:
            payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise ManifestError(f"failed to load manifest {path}") from e

        if payload is None:
            raise ManifestError(f"manifest {path} is empty")
        if not isinstance(payload, dict):
            raise ManifestError(f"manifest {path} must be a mapping, got {type(payload).__name__}")

        return cls.from_dict(payload, source=path)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "identifier": self.identifier,
            "appVersion": self.app_version,
            "hostVersion": self.host_version,
        }
        if self.headless:
            data["headless"] = True
        data["functions"] = [
            {"name": fn.name, "namespace": fn.namespace, "lang": fn.lang, **fn.extra}
            for fn in self.functions
        ]
        data.update(self.extra)
        return data

    def to_bytes(self) -> bytes:
        """Serialize to the YAML wire form stored in the bundle."""
        return yaml.safe_dump(self.to_dict(), sort_keys=False).encode("utf-8")

    def save(self, path: Path | None = None) -> Path:
        dest = path or self.source
        if dest is None:
            raise ManifestError("manifest has no source path to write to")
        dest.write_bytes(self.to_bytes())
        self.source = dest
        return dest

    def bump_major(self) -> str:
        """Increment the major app version and reset minor/patch: v2.3.1 -> v3.0.0."""
        self.app_version = f"v{major_version(self.app_version) + 1}.0.0"
        return self.app_version

    def augment_functions(self, modules: list[ModuleDescriptor]) -> None:
        """Merge built module metadata into the function entries.

        Every module gets an entry. Entries that name a module fill in their
        language from it; entries with no matching module are an error.
        """
        by_fqfn = {f"{m.namespace}#{m.name}": m for m in modules}

        existing = {fn.fqfn: fn for fn in self.functions}
        for fqfn, fn in existing.items():
            module = by_fqfn.get(fqfn)
            if module is None:
                raise ManifestError(f"function {fqfn} is declared in the manifest but no module provides it")
            if not fn.lang:
                fn.lang = module.lang

        for fqfn, module in by_fqfn.items():
            if fqfn not in existing:
                self.functions.append(FunctionEntry(name=module.name, namespace=module.namespace, lang=module.lang))

    def validate(self) -> None:
        problems: list[str] = []

        if not self.identifier:
            problems.append("identifier is missing")
        elif not _IDENTIFIER_RE.match(self.identifier):
            problems.append(f"identifier {self.identifier!r} must be in reverse-DNS form, e.g. com.example.app")

        if not is_valid_version(self.app_version):
            problems.append(f"appVersion {self.app_version!r} is not a valid semantic version")
        if not is_valid_version(self.host_version):
            problems.append(f"hostVersion {self.host_version!r} is not a valid semantic version")

        seen: set[str] = set()
        for fn in self.functions:
            if not fn.name:
                problems.append("function with empty name")
                continue
            if fn.fqfn in seen:
                problems.append(f"function {fn.fqfn} is declared more than once")
            seen.add(fn.fqfn)
            if not fn.lang:
                problems.append(f"function {fn.fqfn} has no language")

        if problems:
            raise ManifestError("invalid manifest: " + "; ".join(problems))


def find_manifest(directory: Path) -> Path | None:
    for name in MANIFEST_FILENAMES:
        path = directory / name
        if path.exists():
            return path
    return None


def load_manifest(directory: Path) -> Manifest | None:
    """Load the project manifest from directory, or None if there isn't one."""
    path = find_manifest(directory)
    if path is None:
        return None
    return Manifest.from_path(path)
