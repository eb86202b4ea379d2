"""Models for documentation sources and the snippets found in them."""

from collections.abc import Sequence
from dataclasses import dataclass, field


@dataclass(frozen=True, kw_only=True)
class SourceFile:
    """A documentation source already read into memory."""

    path: str
    content: str


@dataclass(frozen=True, kw_only=True)
class Snippet:
    """One fenced code block found inside a doc comment.

    ``body`` is the raw text between the fences; ``source_code`` is the
    trimmed body used when assembling programs. ``includes`` is filled in
    once, during extraction, and is left out of comparisons because a
    snippet may include itself.
    """

    path: str
    line: int
    language: str | None
    tags: Sequence[str]
    body: str
    source_code: str
    name: str | None = None
    includes: list["Snippet"] = field(
        default_factory=list, compare=False, repr=False
    )

    @property
    def location(self) -> str:
        """Return ``path:line`` for diagnostics."""
        return f"{self.path}:{self.line}"

    def render(self) -> str:
        """Render the snippet back as a fenced block."""
        header = self.language or ""
        if self.tags:
            header += " " + " ".join(self.tags)
        return f"```{header}\n{self.source_code}\n```"
