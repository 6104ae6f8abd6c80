from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from bundlekit.config import BuildConfig
from bundlekit.context import BuildContext, ModuleDescriptor
from bundlekit.errors import CommandError


class FakeRunner:
    """Records commands instead of running them.

    ``fail`` decides which commands exit non-zero; ``effects`` lets a test
    simulate what a command leaves on disk.
    """

    def __init__(
        self,
        fail: Callable[[list[str], Path | None], bool] | None = None,
        effects: Callable[[list[str], Path | None], None] | None = None,
    ):
        self.calls: list[tuple[list[str], Path | None]] = []
        self.fail = fail
        self.effects = effects

    def run(self, argv, cwd=None):
        cwd = Path(cwd) if cwd is not None else None
        self.calls.append((list(argv), cwd))
        if self.effects is not None:
            self.effects(list(argv), cwd)
        output = f"ran {' '.join(argv)}"
        if self.fail is not None and self.fail(list(argv), cwd):
            raise CommandError(list(argv), 1, output + " (failed)")
        return output

    def argvs(self) -> list[list[str]]:
        return [argv for argv, _cwd in self.calls]


def make_module(root: Path, name: str, lang: str) -> ModuleDescriptor:
    path = root / name
    path.mkdir(parents=True, exist_ok=True)
    (path / ".runnable.yaml").write_text(f"name: {name}\nlang: {lang}\n")
    return ModuleDescriptor(name=name, lang=lang, path=path)


@pytest.fixture
def config() -> BuildConfig:
    return BuildConfig(os_name="linux", builder_tag="v0.4.0", image_prefix="bundlekit")


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def project(tmp_path: Path) -> Callable[..., BuildContext]:
    def _project(*modules: tuple[str, str]) -> BuildContext:
        descriptors = [make_module(tmp_path, name, lang) for name, lang in modules]
        return BuildContext(cwd=tmp_path, modules=descriptors)

    return _project
