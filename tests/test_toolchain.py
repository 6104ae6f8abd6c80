from __future__ import annotations

import pytest

from bundlekit.config import BuildConfig
from bundlekit.errors import CommandError, CompileError, ConfigurationError, PrerequisiteError
from bundlekit.toolchain import Toolchain, ToolchainDispatcher

from conftest import FakeRunner


def _docker_langs(runner: FakeRunner) -> list[str]:
    return [argv[-1] for argv in runner.argvs() if argv[0] == "docker"]


def test_native_builds_every_module_in_order(project, config, runner):
    ctx = project(("a", "rust"), ("b", "tinygo"))
    (ctx.modules[1].path / "go.sum").write_text("")

    dispatcher = ToolchainDispatcher(ctx, config, runner=runner)
    dispatcher.run(Toolchain.NATIVE)

    results = dispatcher.results.results()
    assert len(results) == 2
    assert all(r.succeeded for r in results)
    assert [cwd.name for _argv, cwd in runner.calls] == ["a", "a", "b"]


def test_modules_outside_allow_list_are_skipped(project, runner):
    ctx = project(("a", "rust"), ("b", "assemblyscript"))
    config = BuildConfig(os_name="linux", langs=["rust"])

    dispatcher = ToolchainDispatcher(ctx, config, runner=runner)
    dispatcher.run(Toolchain.NATIVE)

    assert len(dispatcher.results) == 1
    # no npm install, no asc, no package.json read for b
    assert all(cwd.name == "a" for _argv, cwd in runner.calls)


def test_failure_aborts_pass_and_keeps_results(project, config):
    ctx = project(("A", "rust"), ("B", "rust"), ("C", "rust"))
    runner = FakeRunner(fail=lambda argv, cwd: cwd.name == "B")

    dispatcher = ToolchainDispatcher(ctx, config, runner=runner)
    with pytest.raises(CompileError, match="failed to build B"):
        dispatcher.run(Toolchain.NATIVE)

    results = dispatcher.results.results()
    assert len(results) == 2
    assert results[0].succeeded
    assert not results[1].succeeded
    assert "(failed)" in results[1].output_log
    assert all(cwd.name != "C" for _argv, cwd in runner.calls)


def test_prerequisite_output_lands_in_module_result(project, config, runner):
    ctx = project(("b", "tinygo"))

    dispatcher = ToolchainDispatcher(ctx, config, runner=runner)
    dispatcher.run(Toolchain.NATIVE)

    log = dispatcher.results.results()[0].output_log
    assert log.index("ran go mod tidy") < log.index("ran tinygo build")


def test_inferred_flags_are_set_on_module(project, config, runner):
    ctx = project(("as-json", "assemblyscript"))
    module = ctx.modules[0]
    (module.path / "node_modules").mkdir()
    (module.path / "package.json").write_text('{"dependencies": {"json-as": "*"}}')

    ToolchainDispatcher(ctx, config, runner=runner).run(Toolchain.NATIVE)

    assert module.compiler_flags == "--transform ./node_modules/json-as/transform"


def test_docker_builds_once_per_language(project, config, runner):
    ctx = project(("a", "rust"), ("b", "rust"), ("c", "tinygo"))

    dispatcher = ToolchainDispatcher(ctx, config, runner=runner)
    dispatcher.run(Toolchain.DOCKER)

    assert _docker_langs(runner) == ["rust", "tinygo"]
    assert len(dispatcher.results) == 2


def test_docker_language_order_is_independent_of_input(project, config, runner):
    ctx = project(("c", "tinygo"), ("a", "rust"), ("b", "rust"))

    ToolchainDispatcher(ctx, config, runner=runner).run(Toolchain.DOCKER)

    assert _docker_langs(runner) == ["rust", "tinygo"]


def test_docker_command_mounts_project(project, config, runner):
    ctx = project(("a", "rust"))

    ToolchainDispatcher(ctx, config, runner=runner).run(Toolchain.DOCKER)

    assert runner.argvs() == [[
        "docker", "run", "--rm",
        "--mount", f"type=bind,source={ctx.cwd},target=/root/runnable",
        "bundlekit/builder-rs:v0.4.0",
        "bundlekit", "build", ".", "--native", "--langs", "rust",
    ]]


def test_docker_skips_flag_inference(project, config, runner):
    # no package.json: a native build would fail while inferring flags
    ctx = project(("as", "assemblyscript"))

    dispatcher = ToolchainDispatcher(ctx, config, runner=runner)
    dispatcher.run(Toolchain.DOCKER)

    assert dispatcher.results.results()[0].succeeded
    assert ctx.modules[0].compiler_flags == ""


def test_docker_failure_is_recorded(project, config):
    ctx = project(("a", "rust"), ("c", "tinygo"))
    runner = FakeRunner(fail=lambda argv, cwd: argv[-1] == "rust")

    dispatcher = ToolchainDispatcher(ctx, config, runner=runner)
    with pytest.raises(CompileError, match="rust"):
        dispatcher.run(Toolchain.DOCKER)

    results = dispatcher.results.results()
    assert len(results) == 1
    assert not results[0].succeeded
    assert "(failed)" in results[0].output_log


def test_docker_unknown_language_records_nothing(project, config, runner):
    ctx = project(("x", "cobol"))

    dispatcher = ToolchainDispatcher(ctx, config, runner=runner)
    with pytest.raises(ConfigurationError, match="failed to build cobol modules in container") as exc:
        dispatcher.run(Toolchain.DOCKER)

    assert len(dispatcher.results) == 0
    assert exc.value.__cause__ is not None
    assert runner.calls == []


def test_each_run_starts_fresh(project, config, runner):
    ctx = project(("a", "rust"))
    dispatcher = ToolchainDispatcher(ctx, config, runner=runner)

    dispatcher.run(Toolchain.NATIVE)
    dispatcher.run(Toolchain.NATIVE)

    assert len(dispatcher.results) == 1


def test_failed_prerequisite_is_recorded_with_its_output(project, config):
    ctx = project(("as", "assemblyscript"))
    runner = FakeRunner(fail=lambda argv, cwd: argv == ["npm", "install"])

    dispatcher = ToolchainDispatcher(ctx, config, runner=runner)
    with pytest.raises(PrerequisiteError, match="failed to resolve prerequisites for as"):
        dispatcher.run(Toolchain.NATIVE)

    results = dispatcher.results.results()
    assert len(results) == 1
    assert not results[0].succeeded
    assert "ran npm install (failed)" in results[0].output_log


def test_command_error_from_prerequisites_is_wrapped(project, config, runner):
    ctx = project(("a", "rust"))
    dispatcher = ToolchainDispatcher(ctx, config, runner=runner)

    def ensure(module, result):
        raise CommandError(["npm", "install"], 1, "npm ERR!")

    dispatcher.prereqs.ensure = ensure
    with pytest.raises(PrerequisiteError, match="failed to resolve prerequisites for a") as exc:
        dispatcher.run(Toolchain.NATIVE)

    assert isinstance(exc.value.__cause__, CommandError)
    assert len(dispatcher.results) == 1


def test_command_error_from_native_build_is_wrapped(project, config, runner):
    ctx = project(("a", "rust"))
    dispatcher = ToolchainDispatcher(ctx, config, runner=runner)

    def build(module, result=None):
        raise CommandError(["cargo", "build"], 101, "error[E0425]")

    dispatcher.native.build = build
    with pytest.raises(CompileError, match="failed to build a") as exc:
        dispatcher.run(Toolchain.NATIVE)

    assert exc.value.__cause__.returncode == 101


def test_command_error_from_container_is_wrapped(project, config, runner):
    ctx = project(("a", "rust"))
    dispatcher = ToolchainDispatcher(ctx, config, runner=runner)

    def build_language(lang, result=None):
        raise CommandError(["docker", "run"], 125, "no such image")

    dispatcher.container.build_language = build_language
    with pytest.raises(CompileError, match="failed to build rust modules in container"):
        dispatcher.run(Toolchain.DOCKER)

    assert len(dispatcher.results) == 1
