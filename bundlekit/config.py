"""Build configuration threaded through every build and bundle call."""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass, field

from bundlekit.errors import ConfigurationError

# Version of the host runtime that bundles are built against.
HOST_VERSION = "0.4.0"

DEFAULT_IMAGE_PREFIX = "bundlekit"


def env(name: str, default: str | None = None) -> str:
    """Read a value from the environment.

    Raises ConfigurationError when the variable is unset and no default
    was provided.
    """
    val = os.environ.get(name)
    if val is None and default is None:
        raise ConfigurationError(
            f"Environment variable {name!r} is not set and no default was provided. "
            f"Set it before running 'bundlekit build' or provide a default: env({name!r}, default='...')"
        )
    return val if val is not None else default  # type: ignore[return-value]


def host_os() -> str:
    """Return the lowercase name of the host operating system ("linux", "darwin", ...)."""
    return platform.system().lower()


@dataclass
class BuildConfig:
    """Everything a build pass needs besides the modules themselves.

    An empty ``langs`` allow-list means every language is built.
    """

    langs: list[str] = field(default_factory=list)
    builder_tag: str = f"v{HOST_VERSION}"
    image_prefix: str = DEFAULT_IMAGE_PREFIX
    os_name: str = field(default_factory=host_os)
    command_timeout: float | None = None

    def should_build_lang(self, lang: str) -> bool:
        if not self.langs:
            return True
        return lang in self.langs

    @classmethod
    def from_env(cls, langs: list[str] | None = None) -> BuildConfig:
        """Build a config from BUNDLEKIT_* environment variables."""
        timeout_str = env("BUNDLEKIT_COMMAND_TIMEOUT", default="")
        try:
            timeout = float(timeout_str) if timeout_str else None
        except ValueError as e:
            raise ConfigurationError(
                f"BUNDLEKIT_COMMAND_TIMEOUT must be a number of seconds, got {timeout_str!r}"
            ) from e

        return cls(
            langs=list(langs or []),
            builder_tag=env("BUNDLEKIT_BUILDER_TAG", default=f"v{HOST_VERSION}"),
            image_prefix=env("BUNDLEKIT_IMAGE_PREFIX", default=DEFAULT_IMAGE_PREFIX),
            command_timeout=timeout,
        )
