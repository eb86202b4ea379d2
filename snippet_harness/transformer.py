"""Turn a snippet into a self-contained program unit."""

import logging
import posixpath
import re
from dataclasses import dataclass, field

from snippet_harness.errors import AssertionCommentError, SnippetShapeError
from snippet_harness.models.program import ProgramUnit
from snippet_harness.models.snippet import Snippet
from snippet_harness.syntax import PatternSyntaxProbe, SyntaxProbe

log = logging.getLogger(__name__)

ASSERTION_PATTERN = re.compile(
    r"^(\s*(?:(?:let|var)\s+\S+\s*=\s*|ignore\s+)?)(.*)\s*// => (.+?)(?:\s*//.*)?$"
)
MALFORMED_ASSERTION_PATTERN = re.compile(r"// ?[=-]>")

IDENTIFIER_ROOT = "snippet"
SOURCE_SUFFIX = ".mo"


def validate_shape(snippet: Snippet) -> None:
    """Reject bodies that start or end with a blank line."""
    lines = snippet.body.split("\n")
    if not lines[0].strip() or not lines[-1].strip():
        raise SnippetShapeError(
            f"{snippet.location} Unexpected leading / trailing newline"
        )


def concatenate(snippet: Snippet) -> str:
    """Prepend the source of every included snippet, in declaration order."""
    return "\n\n".join(
        [*(include.source_code for include in snippet.includes), snippet.source_code]
    )


def split_imports(source: str) -> tuple[str, str]:
    """Split source into its leading import lines and everything else.

    Blank lines and comments do not end the import section; any other line
    does, and an import after that point is rejected.
    """
    import_lines: list[str] = []
    other_lines: list[str] = []
    done_with_imports = False

    for line in source.split("\n"):
        if line.startswith("import "):
            if done_with_imports:
                raise SnippetShapeError(f"Unexpected import line: {line}")
            import_lines.append(line)
            continue
        other_lines.append(line)
        stripped = line.strip()
        if stripped and not stripped.startswith("//"):
            done_with_imports = True

    return "\n".join(import_lines), "\n".join(other_lines)


def wrap(source: str) -> str:
    """Wrap bare statements in an actor whose initializer runs them."""
    imports, body = split_imports(source)
    return f"{imports}\n\npersistent actor {{ ignore do {{\n{body}\n}} }}"


def rewrite_assertion(line: str) -> str:
    """Rewrite a ``// => expected`` line into an equality assertion."""
    match = ASSERTION_PATTERN.match(line)
    if match is None:
        return line
    prefix, statement, expected = match.groups()
    return (
        f"{prefix} do {{ let _value_ = do {{ {statement} }}; "
        f"assert _value_ == ({expected}); _value_ }};"
    )


def rewrite_assertions(source: str) -> str:
    """Rewrite every assertion comment, rejecting malformed leftovers."""
    rewritten = "\n".join(rewrite_assertion(line) for line in source.split("\n"))
    if (match := MALFORMED_ASSERTION_PATTERN.search(rewritten)) is not None:
        raise AssertionCommentError(
            f"Unable to parse assertion comment: {match.group(0)}"
        )
    return rewritten


def program_identifier(snippet: Snippet) -> str:
    """Return a stable identifier unique to the snippet's path and line."""
    stem = snippet.path.removesuffix(SOURCE_SUFFIX)
    return posixpath.join(IDENTIFIER_ROOT, f"{stem}_{snippet.line}{SOURCE_SUFFIX}")


@dataclass(frozen=True, kw_only=True)
class SnippetTransformer:
    """Builds program units from snippets."""

    probe: SyntaxProbe = field(default_factory=PatternSyntaxProbe)

    def transform(self, snippet: Snippet) -> ProgramUnit:
        """Validate, assemble, wrap and instrument a snippet.

        Raises:
            SnippetShapeError: If the body has leading or trailing blank
                lines, or imports appear after code
            AssertionCommentError: If an assertion comment is malformed

        """
        validate_shape(snippet)
        source = concatenate(snippet)

        try:
            if not self.probe.has_top_level_declaration(source):
                source = wrap(source)
            source = rewrite_assertions(source)
        except (SnippetShapeError, AssertionCommentError) as exc:
            raise type(exc)(f"{snippet.location} {exc}") from exc

        unit = ProgramUnit(
            snippet=snippet,
            identifier=program_identifier(snippet),
            source=source,
            has_entry_point=self.probe.has_entry_point(source),
        )
        log.debug("Transformed %s into %s", snippet.location, unit.identifier)
        return unit
