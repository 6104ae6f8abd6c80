from __future__ import annotations

import os

import pytest

from bundlekit.config import BuildConfig
from bundlekit.errors import ConfigurationError, PrerequisiteError
from bundlekit.prereqs import PrerequisiteResolver
from bundlekit.results import BuildResult

from conftest import FakeRunner, make_module


def _create_node_modules(argv, cwd):
    if argv == ["npm", "install"]:
        (cwd / "node_modules").mkdir()


def test_missing_file_runs_fix_in_module_dir(tmp_path, config):
    module = make_module(tmp_path, "hello", "assemblyscript")
    runner = FakeRunner(effects=_create_node_modules)
    result = BuildResult()

    PrerequisiteResolver(config, runner).ensure(module, result)

    assert runner.calls == [(["npm", "install"], module.path)]
    assert "ran npm install" in result.output_log


def test_ensure_is_idempotent(tmp_path, config):
    module = make_module(tmp_path, "hello", "assemblyscript")
    runner = FakeRunner(effects=_create_node_modules)
    resolver = PrerequisiteResolver(config, runner)

    resolver.ensure(module, BuildResult())
    resolver.ensure(module, BuildResult())

    assert len(runner.calls) == 1


def test_present_file_is_not_fixed(tmp_path, config, runner):
    module = make_module(tmp_path, "gomod", "tinygo")
    (module.path / "go.sum").write_text("")

    PrerequisiteResolver(config, runner).ensure(module, BuildResult())

    assert runner.calls == []


def test_stat_errors_other_than_not_found_are_skipped(tmp_path, config, runner, monkeypatch):
    module = make_module(tmp_path, "hello", "assemblyscript")

    def denied(path, *args, **kwargs):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(os, "stat", denied)
    PrerequisiteResolver(config, runner).ensure(module, BuildResult())

    assert runner.calls == []


def test_languages_without_rules_need_nothing(tmp_path, config, runner):
    module = make_module(tmp_path, "crate", "rust")
    PrerequisiteResolver(config, runner).ensure(module, BuildResult())
    assert runner.calls == []


def test_unsupported_os(tmp_path, runner):
    module = make_module(tmp_path, "crate", "rust")
    resolver = PrerequisiteResolver(BuildConfig(os_name="windows"), runner)

    with pytest.raises(ConfigurationError, match="unsupported OS: windows"):
        resolver.ensure(module, BuildResult())


def test_unsupported_language(tmp_path, config, runner):
    module = make_module(tmp_path, "thing", "cobol")

    with pytest.raises(ConfigurationError, match="unsupported language: cobol"):
        PrerequisiteResolver(config, runner).ensure(module, BuildResult())


def test_failed_fix_keeps_output(tmp_path, config):
    module = make_module(tmp_path, "hello", "typescript")
    runner = FakeRunner(fail=lambda argv, cwd: True)
    result = BuildResult()

    with pytest.raises(PrerequisiteError, match="npm install"):
        PrerequisiteResolver(config, runner).ensure(module, result)

    assert "(failed)" in result.output_log
