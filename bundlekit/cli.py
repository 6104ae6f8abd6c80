"""CLI entry point for bundlekit."""

from __future__ import annotations

import argparse
import logging
import sys

from bundlekit.bundle import Bundler
from bundlekit.config import BuildConfig
from bundlekit.context import BuildContext
from bundlekit.errors import BuildkitError, error_chain
from bundlekit.toolchain import Toolchain, ToolchainDispatcher

logger = logging.getLogger("bundlekit")


def parse_langs(value: str | None) -> list[str]:
    if not value:
        return []
    return [lang.strip() for lang in value.split(",") if lang.strip()]


def cmd_build(args: argparse.Namespace) -> int:
    """Build every module in a project directory and bundle the results."""
    config = BuildConfig.from_env(langs=parse_langs(args.langs))
    ctx = BuildContext.for_directory(args.dir)

    if not ctx.modules:
        logger.warning(f"no modules found in {ctx.cwd}")

    toolchain = Toolchain.NATIVE if args.native else Toolchain.DOCKER
    dispatcher = ToolchainDispatcher(ctx, config)

    try:
        dispatcher.run(toolchain)
    except BuildkitError:
        # Show what the failing unit printed before reporting the error
        for result in dispatcher.results.snapshot():
            if not result.succeeded and result.output_log:
                print(result.output_log, file=sys.stderr)
        raise

    if args.no_bundle:
        return 0

    if args.langs:
        # a filtered build never has every module, so leave the bundle alone
        logger.info("skipping bundle for a language-filtered build")
        return 0

    output = Bundler(ctx, dispatcher.results).finalize()
    print(f"Bundle written to {output}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="bundlekit",
        description="Build WebAssembly modules and package them into a bundle",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    # bundlekit build
    build_p = sub.add_parser("build", help="Build modules and write a bundle")
    build_p.add_argument("dir", nargs="?", default=".", help="Project directory (default: .)")
    build_p.add_argument("--native", action="store_true", help="Build with toolchains on the host instead of builder images")
    build_p.add_argument("--langs", help="Comma-separated list of languages to build")
    build_p.add_argument("--no-bundle", action="store_true", help="Build modules without writing a bundle")
    build_p.set_defaults(func=cmd_build)

    args = parser.parse_args(argv)

    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=logging.DEBUG if args.verbose else logging.INFO,
    )

    try:
        return args.func(args)
    except BuildkitError as e:
        print("Error: " + ": ".join(error_chain(e)), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
