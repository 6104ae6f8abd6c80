"""Per-language prerequisites that must exist before a native build.

A prerequisite is a file relative to the module directory (``node_modules``,
``go.sum``, ...) together with the command that creates it. Missing files
are fixed in place by running that command in the module directory.
"""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass

from bundlekit.config import BuildConfig
from bundlekit.context import ModuleDescriptor
from bundlekit.errors import CommandError, ConfigurationError, PrerequisiteError
from bundlekit.process import Runner
from bundlekit.reporter import ProgressReporter
from bundlekit.results import BuildResult


@dataclass(frozen=True)
class PrerequisiteRule:
    file: str
    command: tuple[str, ...]


_NPM_INSTALL = PrerequisiteRule(file="node_modules", command=("npm", "install"))

_UNIX_RULES: dict[str, list[PrerequisiteRule]] = {
    "rust": [],
    "swift": [],
    "grain": [],
    "assemblyscript": [_NPM_INSTALL],
    "typescript": [_NPM_INSTALL],
    "tinygo": [PrerequisiteRule(file="go.sum", command=("go", "mod", "tidy"))],
}

# (os, lang) -> ordered prerequisite rules
PREREQUISITES: dict[str, dict[str, list[PrerequisiteRule]]] = {
    "linux": _UNIX_RULES,
    "darwin": _UNIX_RULES,
}


class PrerequisiteResolver:
    def __init__(self, config: BuildConfig, runner: Runner, reporter: ProgressReporter | None = None):
        self.config = config
        self.runner = runner
        self.reporter = reporter or ProgressReporter()

    def rules_for(self, lang: str) -> list[PrerequisiteRule]:
        by_lang = PREREQUISITES.get(self.config.os_name)
        if by_lang is None:
            raise ConfigurationError(f"unsupported OS: {self.config.os_name}")

        rules = by_lang.get(lang)
        if rules is None:
            raise ConfigurationError(f"unsupported language: {lang}")
        return rules

    def ensure(self, module: ModuleDescriptor, result: BuildResult) -> None:
        """Run the fix command for every prerequisite file that does not exist.

        Only a missing file triggers a fix; any other stat failure is treated
        as the file being present.
        """
        for rule in self.rules_for(module.lang):
            try:
                os.stat(module.path / rule.file)
                continue
            except FileNotFoundError:
                pass
            except OSError:
                continue

            self.reporter.log_start(f"missing {rule.file}, fixing...")
            command = list(rule.command)
            try:
                output = self.runner.run(command, cwd=module.path)
            except CommandError as e:
                result.append_log(e.output)
                raise PrerequisiteError(f"failed to run prerequisite: {shlex.join(command)}") from e

            result.append_log(output)
            self.reporter.log_done("fixed!")
