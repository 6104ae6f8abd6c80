"""Build results, one per build unit."""

from __future__ import annotations

from dataclasses import dataclass

from bundlekit.errors import StateError


@dataclass
class BuildResult:
    """Outcome of one build unit: a module (native) or a language (containerized)."""

    succeeded: bool = False
    output_log: str = ""

    def append_log(self, output: str) -> None:
        self.output_log += output + "\n"


class ResultAggregator:
    """Collects results in build order, keeping failed ones for their logs."""

    def __init__(self) -> None:
        self._results: list[BuildResult] = []

    def __len__(self) -> int:
        return len(self._results)

    def reset(self) -> None:
        self._results = []

    def append(self, result: BuildResult) -> None:
        self._results.append(result)

    def snapshot(self) -> list[BuildResult]:
        """Return a copy of the results recorded so far (possibly empty)."""
        return list(self._results)

    def results(self) -> list[BuildResult]:
        """Return recorded results, raising StateError if nothing was built yet."""
        if not self._results:
            raise StateError("no modules have been built yet")
        return self.snapshot()
