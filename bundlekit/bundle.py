"""Bundle assembly: manifest finalization, static files and the bundle archive.

A bundle is a zip archive holding the serialized manifest, every compiled
module and, optionally, the project's static/ tree:

    Directive.yaml
    <module>.wasm ...
    static/<path> ...
"""

from __future__ import annotations

import os
import tempfile
import zipfile
from pathlib import Path
from typing import Protocol

from bundlekit.context import BuildContext
from bundlekit.errors import BuildkitError, BundlingError, ManifestError, StateError
from bundlekit.manifest import MANIFEST_FILENAMES, Manifest
from bundlekit.reporter import ProgressReporter
from bundlekit.results import ResultAggregator

STATIC_DIR = "static"


def collect_static_files(cwd: Path) -> dict[str, Path] | None:
    """Map bundle-relative names to files under cwd/static/.

    Returns None when the project has no static directory.
    """
    static_dir = cwd / STATIC_DIR
    if not static_dir.is_dir():
        return None

    files: dict[str, Path] = {}
    for root, _dirs, filenames in os.walk(static_dir):
        for fname in filenames:
            full = Path(root) / fname
            rel = full.relative_to(static_dir).as_posix()
            files[rel] = full
    return dict(sorted(files.items()))


class BundleWriter(Protocol):
    def write(
        self,
        manifest: bytes,
        modules: list[Path],
        static: dict[str, Path] | None,
        output_path: Path,
    ) -> None:
        ...


class ZipBundleWriter:
    """Writes bundles as zip archives, atomically replacing output_path."""

    def write(
        self,
        manifest: bytes,
        modules: list[Path],
        static: dict[str, Path] | None,
        output_path: Path,
    ) -> None:
        output_path.parent.mkdir(parents=True, exist_ok=True)

        # Write to a temp file in the same directory, then rename over the target
        fd, tmp_name = tempfile.mkstemp(dir=output_path.parent, suffix=".partial")
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f, zipfile.ZipFile(f, "w", zipfile.ZIP_DEFLATED) as zf:
                zf.writestr(MANIFEST_FILENAMES[0], manifest)
                for module in modules:
                    zf.write(module, arcname=module.name)
                for rel, path in (static or {}).items():
                    zf.write(path, arcname=f"{STATIC_DIR}/{rel}")
            tmp_path.replace(output_path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise


class Bundler:
    """Turns the results of a build pass into a bundle file."""

    def __init__(
        self,
        ctx: BuildContext,
        results: ResultAggregator,
        writer: BundleWriter | None = None,
        reporter: ProgressReporter | None = None,
    ):
        self.ctx = ctx
        self.results = results
        self.writer = writer or ZipBundleWriter()
        self.reporter = reporter or ProgressReporter()

    def resolve_manifest(self) -> Manifest:
        """Return the manifest to bundle, synthesizing or version-bumping it.

        A headless manifest gets its major version bumped and is written back
        to where it was loaded from.
        """
        if self.ctx.manifest is None:
            self.ctx.manifest = Manifest.default()
        elif self.ctx.manifest.headless:
            self.reporter.log_info("updating manifest")
            self.ctx.manifest.bump_major()

            target = self.ctx.manifest.source or self.ctx.cwd / MANIFEST_FILENAMES[0]
            try:
                self.ctx.manifest.save(target)
            except OSError as e:
                raise BundlingError(f"failed to write manifest {target}") from e

        return self.ctx.manifest

    def finalize(self) -> Path:
        if not self.results.snapshot():
            raise StateError("must build before bundling")

        manifest = self.resolve_manifest()

        try:
            manifest.augment_functions(self.ctx.modules)
            manifest.validate()
        except ManifestError as e:
            raise BundlingError("failed to validate manifest") from e

        static = collect_static_files(self.ctx.cwd)
        if static is not None:
            self.reporter.log_info("adding static files to bundle")

        manifest_bytes = manifest.to_bytes()
        modules = self.ctx.compiled_modules()

        output_path = self.ctx.bundle_path
        try:
            self.writer.write(manifest_bytes, modules, static, output_path)
        except (OSError, zipfile.BadZipFile, BuildkitError) as e:
            raise BundlingError(f"failed to write bundle {output_path}") from e

        self.reporter.log_done(f"bundle was created -> {output_path}")
        return output_path
