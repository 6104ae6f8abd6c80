"""Exception types raised while building and bundling modules."""

from __future__ import annotations


class BuildkitError(Exception):
    """Base class for every error raised by bundlekit."""


class ConfigurationError(BuildkitError):
    """Unsupported OS, language or toolchain combination."""


class PrerequisiteError(BuildkitError):
    """A prerequisite fix command failed."""


class CompileError(BuildkitError):
    """A build command could not be rendered or exited non-zero."""


class BundlingError(BuildkitError):
    """The manifest is invalid or the bundle could not be written."""


class ManifestError(BundlingError):
    """The manifest could not be loaded or failed validation."""


class StateError(BuildkitError):
    """An operation was attempted before any module was built."""


class CommandError(BuildkitError):
    """An external command exited non-zero.

    The combined stdout/stderr of the command is kept on ``output`` so
    callers can still record it in a build log.
    """

    def __init__(self, argv: list[str], returncode: int, output: str):
        self.argv = list(argv)
        self.returncode = returncode
        self.output = output
        super().__init__(f"{' '.join(argv)!r} exited with status {returncode}")


def error_chain(err: BaseException) -> list[str]:
    """Flatten an exception and its causes into a list of messages."""
    chain: list[str] = []
    current: BaseException | None = err
    while current is not None:
        chain.append(str(current))
        current = current.__cause__
    return chain
