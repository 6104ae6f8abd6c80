"""Typed command templates for native language builders."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from bundlekit.context import ModuleDescriptor
from bundlekit.errors import CompileError

Step = Callable[[ModuleDescriptor], Sequence[str]]


@dataclass(frozen=True)
class CommandTemplate:
    """One build command, rendered against a module into an argument vector."""

    description: str
    step: Step

    def render(self, module: ModuleDescriptor) -> list[str]:
        """Bind the module's fields and return the literal argv.

        Arguments are stripped of surrounding whitespace and empty ones are
        dropped, so an unset optional field leaves no trace in the command.
        """
        try:
            argv = self.step(module)
        except (AttributeError, KeyError, ValueError) as e:
            raise CompileError(f"failed to render {self.description!r} for {module.name}") from e

        rendered = [arg.strip() for arg in argv]
        rendered = [arg for arg in rendered if arg]
        if not rendered:
            raise CompileError(f"{self.description!r} rendered to an empty command for {module.name}")
        return rendered


class LanguageBuild(Protocol):
    def templates(self) -> list[CommandTemplate]:
        """Ordered commands that turn a module's source into <name>.wasm."""
