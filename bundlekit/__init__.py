from bundlekit.bundle import Bundler, ZipBundleWriter, collect_static_files
from bundlekit.config import BuildConfig, env
from bundlekit.context import BuildContext, ModuleDescriptor
from bundlekit.manifest import FunctionEntry, Manifest
from bundlekit.results import BuildResult, ResultAggregator
from bundlekit.toolchain import Toolchain, ToolchainDispatcher

__all__ = [
    "BuildConfig",
    "BuildContext",
    "BuildResult",
    "Bundler",
    "FunctionEntry",
    "Manifest",
    "ModuleDescriptor",
    "ResultAggregator",
    "Toolchain",
    "ToolchainDispatcher",
    "ZipBundleWriter",
    "collect_static_files",
    "env",
]
