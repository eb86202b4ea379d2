"""Models for snippet execution results."""

from dataclasses import dataclass
from typing import Literal

from snippet_harness.models.snippet import Snippet

type SnippetStatus = Literal["passed", "failed", "skipped"]


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Outcome of executing (or bypassing) a single snippet."""

    __test__ = False

    snippet: Snippet
    status: SnippetStatus
    duration: float
    error: str | None = None

    @property
    def passed(self) -> bool:
        return self.status == "passed"

    @property
    def failed(self) -> bool:
        return self.status == "failed"
