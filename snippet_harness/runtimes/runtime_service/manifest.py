"""HTTP runtime-service runtime manifest."""

from snippet_harness.runtimes.manifest import RuntimeManifest
from snippet_harness.runtimes.runtime_service.config import RuntimeServiceConfig
from snippet_harness.runtimes.runtime_service.runtime import RuntimeServiceRuntime

runtime_service_manifest = RuntimeManifest(
    config_cls=RuntimeServiceConfig,
    runtime_factory=RuntimeServiceRuntime.from_config,
)
