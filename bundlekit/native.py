"""Native builds: run a module's build commands directly on the host."""

from __future__ import annotations

import shlex

from bundlekit.builders import native_build_templates
from bundlekit.context import ModuleDescriptor
from bundlekit.errors import CommandError, CompileError
from bundlekit.process import Runner
from bundlekit.results import BuildResult


class NativeBuildExecutor:
    def __init__(self, runner: Runner):
        self.runner = runner

    def build(self, module: ModuleDescriptor, result: BuildResult | None = None) -> BuildResult:
        """Run every build command for module in order, inside its directory.

        Output of each command is appended to the result log whether it
        succeeds or not. The first failing command stops the build and
        raises CompileError. ``succeeded`` tracks the last executed command.
        """
        if result is None:
            result = BuildResult()

        for template in native_build_templates(module.lang):
            argv = template.render(module)

            try:
                output = self.runner.run(argv, cwd=module.path)
            except CommandError as e:
                result.append_log(e.output)
                result.succeeded = False
                raise CompileError(f"failed to run {shlex.join(argv)!r} in {module.path}") from e

            result.append_log(output)
            result.succeeded = True

        return result
