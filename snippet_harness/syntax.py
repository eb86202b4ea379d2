"""Structural checks on program source.

These are pattern-based approximations of a parser. Keeping them behind
``SyntaxProbe`` lets a real parser replace them without touching the
transformer or the harness.
"""

import re
from typing import Protocol

ACTOR_DECLARATION_PATTERN = re.compile(r"^(persistent +)?actor.*\{$", re.MULTILINE)
ENTRY_POINT_PATTERN = re.compile(r"\bfunc\s+main\b")


class SyntaxProbe(Protocol):
    """Answers structural questions about program source."""

    def has_top_level_declaration(self, text: str) -> bool:
        """Return True if the text already declares a top-level actor."""

    def has_entry_point(self, text: str) -> bool:
        """Return True if the text defines the ``main`` entry point."""


class PatternSyntaxProbe:
    """Regular-expression based ``SyntaxProbe``.

    Only the simple ``[persistent] actor ... {`` header form is recognised;
    decorated or annotated headers are not.
    """

    def has_top_level_declaration(self, text: str) -> bool:
        return ACTOR_DECLARATION_PATTERN.search(text) is not None

    def has_entry_point(self, text: str) -> bool:
        return ENTRY_POINT_PATTERN.search(text) is not None
