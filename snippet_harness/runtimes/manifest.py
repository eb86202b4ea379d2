"""Runtime plugin manifests."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass

from pydantic import BaseModel

from snippet_harness.config import parse_config
from snippet_harness.runtimes.base import ExecutionRuntime, InstanceHandle

type RuntimeFactory[ConfigT, InstanceT: InstanceHandle] = Callable[
    [ConfigT], AbstractAsyncContextManager[ExecutionRuntime[InstanceT]]
]


@dataclass(frozen=True, kw_only=True)
class RuntimeManifest[ConfigT: BaseModel, InstanceT: InstanceHandle]:
    """What a runtime plugin registers under its entry-point key.

    ``runtime_factory`` opens the runtime for the duration of a run; it is
    only called once the configuration has been validated.
    """

    config_cls: type[ConfigT]
    runtime_factory: RuntimeFactory[ConfigT, InstanceT]

    def configure(self, raw: str) -> ConfigT:
        """Validate the JSON runtime configuration for this plugin."""
        return parse_config(self.config_cls, raw)
