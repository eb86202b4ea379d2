"""Discover and read documentation sources."""

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from snippet_harness.errors import SourceEncodingError
from snippet_harness.extractor import matches_filters
from snippet_harness.models.snippet import SourceFile

log = logging.getLogger(__name__)

DEFAULT_PATTERN = "src/**/*.mo"
INTERNAL_PREFIX = "src/internal/"


async def discover_sources(root: Path, pattern: str = DEFAULT_PATTERN) -> Sequence[SourceFile]:
    """Read every file matching the pattern, in sorted path order.

    Args:
        root: Repository root the pattern and returned paths are relative to
        pattern: Glob pattern (e.g., "src/**/*.mo")

    Returns:
        Sources with posix-style relative paths

    """
    paths = sorted(path for path in root.glob(pattern) if path.is_file())
    log.debug("Discovered %d source file(s) under %s", len(paths), root)
    return await asyncio.gather(*(read_source(root, path) for path in paths))


async def read_source(root: Path, path: Path) -> SourceFile:
    """Read one source without blocking the event loop."""
    relative = path.relative_to(root).as_posix()
    try:
        content = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise SourceEncodingError(f"{relative} is not valid UTF-8: {exc}") from exc
    return SourceFile(path=relative, content=content)


def is_internal_only(
    sources: Sequence[SourceFile],
    filters: Sequence[str] = (),
    internal_prefix: str = INTERNAL_PREFIX,
) -> bool:
    """Check whether every selected source is internal-only content.

    Finding no snippets is expected for such a selection, e.g. a filter
    that only matches internal modules.
    """
    return all(
        source.path.startswith(internal_prefix)
        for source in sources
        if matches_filters(source.path, filters)
    )
