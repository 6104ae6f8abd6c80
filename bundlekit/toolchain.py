"""Top-level build driver: routes modules to native or containerized builds."""

from __future__ import annotations

import enum

from bundlekit.config import BuildConfig
from bundlekit.container import ContainerBuildDispatcher
from bundlekit.context import BuildContext, ModuleDescriptor
from bundlekit.errors import BuildkitError, CompileError, ConfigurationError, PrerequisiteError
from bundlekit.flags import CompilerFlagAdvisor
from bundlekit.native import NativeBuildExecutor
from bundlekit.prereqs import PrerequisiteResolver
from bundlekit.process import ProcessRunner, Runner
from bundlekit.reporter import ProgressReporter
from bundlekit.results import BuildResult, ResultAggregator


class Toolchain(str, enum.Enum):
    NATIVE = "native"
    DOCKER = "docker"


class ToolchainDispatcher:
    """Builds every allowed module of a context, stopping at the first failure.

    Results recorded before a failure stay available through ``results``.
    """

    def __init__(
        self,
        ctx: BuildContext,
        config: BuildConfig,
        runner: Runner | None = None,
        reporter: ProgressReporter | None = None,
        results: ResultAggregator | None = None,
    ):
        self.ctx = ctx
        self.config = config
        self.runner = runner or ProcessRunner(timeout=config.command_timeout)
        self.reporter = reporter or ProgressReporter()
        self.results = results if results is not None else ResultAggregator()

        self.prereqs = PrerequisiteResolver(config, self.runner, self.reporter)
        self.flags = CompilerFlagAdvisor()
        self.native = NativeBuildExecutor(self.runner)
        self.container = ContainerBuildDispatcher(ctx, config, self.runner)

    def run(self, toolchain: Toolchain) -> None:
        self.results.reset()

        modules = [m for m in self.ctx.modules if self.config.should_build_lang(m.lang)]

        if toolchain == Toolchain.NATIVE:
            for module in modules:
                self._build_native(module)
        else:
            # builder images build every module of their language at once
            for lang in sorted({m.lang for m in modules}):
                self._build_docker(lang)

    def _build_native(self, module: ModuleDescriptor) -> None:
        self.reporter.log_start(f"building module: {module.name} ({module.lang})")

        # failed units are recorded too, their logs are useful
        result = BuildResult()
        try:
            self._run_native_unit(module, result)
        finally:
            self.results.append(result)

        self.reporter.log_done(f"{module.name} was built -> {module.wasm_path}")

    def _run_native_unit(self, module: ModuleDescriptor, result: BuildResult) -> None:
        try:
            self.prereqs.ensure(module, result)
        except ConfigurationError as e:
            raise ConfigurationError(f"failed to resolve prerequisites for {module.name}") from e
        except BuildkitError as e:
            raise PrerequisiteError(f"failed to resolve prerequisites for {module.name}") from e

        try:
            flags = self.flags.inspect(module)
        except BuildkitError as e:
            raise CompileError(f"failed to analyze compiler flags for {module.name}") from e
        if flags:
            module.compiler_flags = flags

        try:
            self.native.build(module, result)
        except ConfigurationError as e:
            raise ConfigurationError(f"failed to build {module.name}") from e
        except BuildkitError as e:
            raise CompileError(f"failed to build {module.name}") from e

    def _build_docker(self, lang: str) -> None:
        # unknown languages fail before a result exists
        try:
            image = self.container.image_for(lang)
        except ConfigurationError as e:
            raise ConfigurationError(f"failed to build {lang} modules in container") from e

        self.reporter.log_start(f"building {lang} modules in {image}")

        result = BuildResult()
        try:
            self.container.build_language(lang, result)
        except BuildkitError as e:
            raise CompileError(f"failed to build {lang} modules in container") from e
        finally:
            self.results.append(result)

        self.reporter.log_done(f"{lang} modules were built")
