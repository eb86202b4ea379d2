"""Runtime plugin discovery through package entry points."""

import logging
from collections.abc import Sequence
from importlib.metadata import entry_points
from typing import Any

from snippet_harness.errors import ConfigurationError
from snippet_harness.runtimes.manifest import RuntimeManifest

log = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "snippet_harness.runtimes"


class RuntimeNotFoundError(ConfigurationError):
    """Raised when no runtime plugin is registered under a key."""


def available_runtimes() -> Sequence[str]:
    """Return the keys of every installed runtime plugin, sorted."""
    return sorted(entry.name for entry in entry_points(group=ENTRY_POINT_GROUP))


def load_runtime_manifest(key: str) -> RuntimeManifest[Any, Any]:
    """Import the manifest registered under ``key``.

    Plugins register a ``RuntimeManifest`` in the ``snippet_harness.runtimes``
    group; only the selected plugin is imported.

    Raises:
        RuntimeNotFoundError: If no plugin uses the key

    """
    matches = entry_points(group=ENTRY_POINT_GROUP, name=key)
    if not matches:
        raise RuntimeNotFoundError(
            f"Unknown runtime '{key}', expected one of: "
            f"{', '.join(available_runtimes()) or 'none installed'}"
        )

    entry = next(iter(matches))
    log.debug("Loading runtime %s from %s", key, entry.value)
    manifest: RuntimeManifest[Any, Any] = entry.load()
    return manifest
