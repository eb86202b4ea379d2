"""HTTP runtime-service runtime module."""

from snippet_harness.runtimes.runtime_service.config import RuntimeServiceConfig
from snippet_harness.runtimes.runtime_service.manifest import runtime_service_manifest
from snippet_harness.runtimes.runtime_service.runtime import RuntimeServiceRuntime

__all__ = ["RuntimeServiceConfig", "RuntimeServiceRuntime", "runtime_service_manifest"]
