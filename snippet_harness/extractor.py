"""Extract fenced code snippets from documentation comments."""

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from snippet_harness.errors import DuplicateSnippetError, UnresolvedIncludeError
from snippet_harness.models.snippet import Snippet, SourceFile

log = logging.getLogger(__name__)

DOC_COMMENT_PATTERN = re.compile(r"^[ \t]*/// ?(.*)$")
CODE_BLOCK_PATTERN = re.compile(
    r"```(\S*)(?:[ \t]+([^\n]+)?)?\n(.*?)\n[ \t]*```", re.DOTALL
)

NAME_PREFIX = "name="
INCLUDE_PREFIX = "include="


@dataclass(kw_only=True)
class SnippetTable:
    """Name table for a single extraction run."""

    names: dict[str, Snippet] = field(default_factory=dict)

    def register(self, snippet: Snippet) -> None:
        """Register a named snippet, rejecting duplicates."""
        if snippet.name is None:
            return
        if (existing := self.names.get(snippet.name)) is not None:
            raise DuplicateSnippetError(
                f"{snippet.location} Duplicate snippet name: {snippet.name} "
                f"(first declared at {existing.location})"
            )
        self.names[snippet.name] = snippet

    def resolve(self, snippet: Snippet) -> None:
        """Attach every ``include=`` reference of the snippet, in tag order."""
        for tag in snippet.tags:
            if not tag.startswith(INCLUDE_PREFIX):
                continue
            name = tag.removeprefix(INCLUDE_PREFIX)
            include = self.names.get(name)
            if include is None:
                raise UnresolvedIncludeError(
                    f"{snippet.location} Unresolved snippet attribute: {tag}"
                )
            snippet.includes.append(include)


def strip_doc_comments(content: str) -> str:
    """Keep the text of ``///`` comments and blank every other line.

    The number of lines is unchanged, so offsets into the result map to the
    same line numbers as in the original file.
    """
    lines = []
    for line in content.split("\n"):
        match = DOC_COMMENT_PATTERN.match(line)
        lines.append(match.group(1) if match else "")
    return "\n".join(lines)


def find_snippets(source: SourceFile) -> Sequence[Snippet]:
    """Find all fenced code blocks in the doc comments of one source."""
    text = strip_doc_comments(source.content)
    snippets: list[Snippet] = []

    for match in CODE_BLOCK_PATTERN.finditer(text):
        language, raw_tags, body = match.groups()
        tags = tuple(raw_tags.split()) if raw_tags and raw_tags.strip() else ()
        name = next(
            (tag.removeprefix(NAME_PREFIX) for tag in tags if tag.startswith(NAME_PREFIX)),
            None,
        )
        snippets.append(
            Snippet(
                path=source.path,
                line=text.count("\n", 0, match.start()) + 1,
                language=language or None,
                tags=tags,
                body=body,
                source_code=body.strip(),
                name=name,
            )
        )

    return snippets


def matches_filters(path: str, filters: Sequence[str]) -> bool:
    """Check whether a path contains at least one filter (or none are given)."""
    return not filters or any(test_filter in path for test_filter in filters)


def extract_snippets(
    sources: Iterable[SourceFile],
    filters: Sequence[str] = (),
) -> Sequence[Snippet]:
    """Extract snippets from sources and resolve their includes.

    Args:
        sources: Documentation sources in discovery order
        filters: Substrings of which a path must contain at least one

    Returns:
        Snippets in source order, then appearance order within each source

    Raises:
        DuplicateSnippetError: If a ``name=`` tag is declared twice
        UnresolvedIncludeError: If an ``include=`` tag names no snippet

    """
    table = SnippetTable()
    snippets: list[Snippet] = []

    for source in sources:
        if not matches_filters(source.path, filters):
            continue

        found = find_snippets(source)
        for snippet in found:
            table.register(snippet)
        # Includes resolve once the whole file is registered
        for snippet in found:
            table.resolve(snippet)

        log.debug("Found %d snippet(s) in %s", len(found), source.path)
        snippets.extend(found)

    return snippets


