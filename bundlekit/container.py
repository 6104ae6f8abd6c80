"""Containerized builds: one builder image run per language.

Each run mounts the project into a language-specific builder image and
re-invokes bundlekit inside it, restricted to native mode and that one
language.
"""

from __future__ import annotations

from bundlekit.config import BuildConfig
from bundlekit.context import BuildContext
from bundlekit.errors import CommandError, CompileError, ConfigurationError
from bundlekit.process import Runner
from bundlekit.results import BuildResult

# Target of the project bind mount inside every builder image.
MOUNT_TARGET = "/root/runnable"

BUILDER_IMAGES: dict[str, str] = {
    "rust": "builder-rs",
    "swift": "builder-swift",
    "assemblyscript": "builder-as",
    "tinygo": "builder-tinygo",
    "grain": "builder-gr",
    "typescript": "builder-js",
}


def image_for_lang(lang: str, config: BuildConfig) -> str:
    """Return the builder image reference for lang, or "" if there is none."""
    name = BUILDER_IMAGES.get(lang)
    if name is None:
        return ""
    return f"{config.image_prefix}/{name}:{config.builder_tag}"


class ContainerBuildDispatcher:
    def __init__(self, ctx: BuildContext, config: BuildConfig, runner: Runner):
        self.ctx = ctx
        self.config = config
        self.runner = runner

    def image_for(self, lang: str) -> str:
        img = image_for_lang(lang, self.config)
        if not img:
            raise ConfigurationError(f"{lang!r} is not a supported language")
        return img

    def command(self, lang: str) -> list[str]:
        return [
            "docker", "run", "--rm",
            "--mount", f"type=bind,source={self.ctx.mount_path},target={MOUNT_TARGET}",
            self.image_for(lang),
            "bundlekit", "build", self.ctx.rel_docker_path,
            "--native",
            "--langs", lang,
        ]

    def build_language(self, lang: str, result: BuildResult | None = None) -> BuildResult:
        """Build every module of lang inside its builder image.

        Success is decided by the exit status of the container alone; its
        combined output becomes the result log.
        """
        argv = self.command(lang)
        if result is None:
            result = BuildResult()

        try:
            output = self.runner.run(argv, cwd=self.ctx.cwd)
        except CommandError as e:
            result.output_log = e.output
            result.succeeded = False
            raise CompileError(f"failed to run builder image for {lang}") from e

        result.output_log = output
        result.succeeded = True
        return result
