"""Abstract base class for runtime-instance services."""

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from snippet_harness.models.program import CompiledArtifact

log = logging.getLogger(__name__)

ENTRY_POINT = "main"

# Candid encoding of an empty argument tuple
EMPTY_ARGUMENTS = b"DIDL\x00\x00"


@dataclass(frozen=True, kw_only=True)
class InstanceHandle:
    """Handle to one live runtime instance."""

    instance_id: str


@dataclass(frozen=True, kw_only=True)
class ExecutionRuntime[T: InstanceHandle](ABC):
    """Abstract base for services hosting a runtime instance.

    Generic type T is the instance handle the service hands out from
    ``create_instance``; the harness passes it back for every later call.
    All failures specific to a deployment or call are raised as
    ``RuntimeInstanceError``.
    """

    @abstractmethod
    async def create_instance(self) -> T:
        """Create a fresh instance ready to receive code."""

    @abstractmethod
    async def redeploy(self, instance: T, artifact: CompiledArtifact) -> None:
        """Replace the instance's code, discarding all of its state.

        Args:
            instance: Handle returned from create_instance
            artifact: Compiled module to install

        """

    @abstractmethod
    async def invoke(
        self, instance: T, method: str = ENTRY_POINT, arg: bytes = EMPTY_ARGUMENTS
    ) -> bytes:
        """Call a method on the deployed code and return the raw reply."""

    @abstractmethod
    async def teardown(self, instance: T) -> None:
        """Destroy the instance."""

    @asynccontextmanager
    async def instance(self) -> AsyncGenerator[T, None]:
        """Create an instance for the duration of the block.

        Teardown runs exactly once, whether the block completes or raises.
        """
        handle = await self.create_instance()
        log.info("Created runtime instance %s", handle.instance_id)
        try:
            yield handle
        finally:
            log.info("Tearing down runtime instance %s", handle.instance_id)
            await self.teardown(handle)
