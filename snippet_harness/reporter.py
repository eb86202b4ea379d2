"""Progress reporting and summaries for snippet runs."""

import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from snippet_harness.models.result import SnippetStatus, TestResult
from snippet_harness.models.snippet import Snippet

STATUS_SYMBOLS: dict[SnippetStatus, str] = {
    "passed": "✅",
    "failed": "❌",
    "skipped": "🚫",
}

STATUSES: Sequence[SnippetStatus] = ("passed", "failed", "skipped")


def plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


@dataclass(kw_only=True)
class Reporter:
    """Accumulates results and logs progress as they arrive."""

    log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))
    results: list[TestResult] = field(default_factory=list)
    previous_path: str | None = None

    def report_found(self, snippets: Sequence[Snippet]) -> None:
        """Log how many snippets were found in how many files."""
        paths = {snippet.path for snippet in snippets}
        self.log.info(
            "Found %s in %s.",
            plural(len(snippets), "code snippet"),
            plural(len(paths), "file"),
        )

    def on_result(self, result: TestResult) -> None:
        """Record a result and log its progress line."""
        self.results.append(result)
        snippet = result.snippet

        if snippet.path != self.previous_path:
            self.log.info("%s", snippet.path)
            self.previous_path = snippet.path

        symbol = STATUS_SYMBOLS[result.status]
        if result.status == "skipped":
            self.log.info("%s %s skipped", symbol, snippet.location)
            self.log.info("%s", snippet.render())
            return

        self.log.info("%s %-30s %.1fs", symbol, snippet.location, result.duration)
        if result.error is not None:
            self.log.info("%s", snippet.render())
            self.log.error("%s", result.error)

    def count(self, status: SnippetStatus) -> int:
        return sum(1 for result in self.results if result.status == status)

    def report_summary(self) -> None:
        """Log failures per file (when spread over several) and the tally."""
        failures = Counter(
            result.snippet.path for result in self.results if result.failed
        )
        if len(failures) > 1:
            self.log.info("---")
            for path, count in failures.items():
                self.log.info("%s %s %d", path, STATUS_SYMBOLS["failed"], count)

        self.log.info(
            "%s",
            ", ".join(f"{self.count(status)} {status}" for status in STATUSES),
        )

    def exit_code(self, *, skippable: bool) -> int:
        """Return 1 on any failure, or when nothing was found but should have been.

        Args:
            skippable: True when every selected source was internal-only, so
                finding no snippets is expected

        """
        if not skippable and not self.results:
            return 1
        return 1 if any(result.failed for result in self.results) else 0


def format_output(results: Sequence[TestResult]) -> dict[str, Any]:
    """Format results for JSON output."""
    return {
        "total": len(results),
        "passed": sum(1 for r in results if r.status == "passed"),
        "failed": sum(1 for r in results if r.status == "failed"),
        "skipped": sum(1 for r in results if r.status == "skipped"),
        "results": [
            {
                "path": result.snippet.path,
                "line": result.snippet.line,
                "status": result.status,
                "duration": result.duration,
                "error": result.error,
            }
            for result in results
        ],
    }
