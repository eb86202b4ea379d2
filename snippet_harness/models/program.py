"""Models for transformed programs and compiled artifacts."""

from dataclasses import dataclass, field

from snippet_harness.models.snippet import Snippet


@dataclass(frozen=True, kw_only=True)
class ProgramUnit:
    """A complete, compilable program derived from one snippet."""

    snippet: Snippet
    identifier: str
    source: str
    has_entry_point: bool


@dataclass(frozen=True, kw_only=True)
class CompiledArtifact:
    """Output of the compiler: the binary module and its interface."""

    wasm: bytes = field(repr=False)
    candid: str
