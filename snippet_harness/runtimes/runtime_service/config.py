"""Configuration for the HTTP runtime-service runtime."""

from collections.abc import Sequence

from pydantic import BaseModel, Field


class RuntimeServiceConfig(BaseModel):
    """Configuration for the HTTP runtime-service runtime.

    When ``server_command`` is set the runtime starts the service itself and
    stops it on exit; otherwise it connects to an already running service.
    """

    base_url: str = "http://127.0.0.1:8000"
    server_command: Sequence[str] = Field(default_factory=list)
    startup_timeout: float = 30
    poll_interval: float = 0.5
