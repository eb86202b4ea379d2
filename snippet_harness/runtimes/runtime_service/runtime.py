"""HTTP runtime-service runtime implementation."""

import asyncio
import base64
import binascii
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from pydantic import ValidationError

from snippet_harness.errors import RuntimeInstanceError
from snippet_harness.models.program import CompiledArtifact
from snippet_harness.runtimes.base import (
    EMPTY_ARGUMENTS,
    ENTRY_POINT,
    ExecutionRuntime,
    InstanceHandle,
)
from snippet_harness.runtimes.runtime_service.config import RuntimeServiceConfig
from snippet_harness.runtimes.runtime_service.models import (
    CallOutcome,
    InstanceCreated,
)

log = logging.getLogger(__name__)


@asynccontextmanager
async def launch_server(
    config: RuntimeServiceConfig,
) -> AsyncGenerator[asyncio.subprocess.Process | None, None]:
    """Run the configured service process for the duration of the block."""
    if not config.server_command:
        yield None
        return

    log.info("Starting runtime service: %s", " ".join(config.server_command))
    process = await asyncio.create_subprocess_exec(
        *config.server_command,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.DEVNULL,
    )
    try:
        yield process
    finally:
        if process.returncode is None:
            log.info("Stopping runtime service (pid=%s)", process.pid)
            process.terminate()
            await process.wait()


@dataclass(frozen=True, kw_only=True)
class RuntimeServiceRuntime(ExecutionRuntime[InstanceHandle]):
    """Runtime backed by an HTTP runtime service."""

    config: RuntimeServiceConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: RuntimeServiceConfig
    ) -> AsyncGenerator["RuntimeServiceRuntime", None]:
        """Create runtime with managed server and session lifecycle."""
        async with (
            launch_server(config) as process,
            aiohttp.ClientSession(
                base_url=config.base_url,
                timeout=aiohttp.ClientTimeout(total=None),
            ) as session,
        ):
            runtime = cls(config=config, session=session)
            if process is not None:
                await runtime.wait_until_ready()
            yield runtime

    async def wait_until_ready(self) -> None:
        """Poll the status endpoint until the service answers.

        Raises:
            TimeoutError: If the service is not ready within startup_timeout

        """
        deadline = asyncio.get_event_loop().time() + self.config.startup_timeout

        while True:
            try:
                async with self.session.get("/status") as response:
                    if response.status == 200:
                        log.info("Runtime service ready at %s", self.config.base_url)
                        return
                    log.debug("Runtime service not ready: status=%s", response.status)
            except aiohttp.ClientError as exc:
                log.debug("Runtime service not reachable: %s", exc)

            if asyncio.get_event_loop().time() >= deadline:
                raise TimeoutError(
                    "Runtime service did not start within "
                    f"{self.config.startup_timeout} seconds"
                )

            await asyncio.sleep(self.config.poll_interval)

    async def create_instance(self) -> InstanceHandle:
        """Create an instance and return its handle."""
        data = await self._request("POST", "/instances", expected=(200, 201))
        try:
            created = InstanceCreated.model_validate(data)
        except ValidationError as exc:
            raise RuntimeInstanceError(f"Malformed instance reply: {exc}") from exc
        return InstanceHandle(instance_id=created.instance_id)

    async def redeploy(self, instance: InstanceHandle, artifact: CompiledArtifact) -> None:
        """Reinstall the instance's code, resetting its state."""
        log.debug(
            "Reinstalling %d byte(s) on instance %s",
            len(artifact.wasm),
            instance.instance_id,
        )
        await self._request(
            "PUT",
            f"/instances/{instance.instance_id}/code",
            json={
                "wasm": base64.b64encode(artifact.wasm).decode(),
                "mode": "reinstall",
            },
            expected=(200, 204),
        )

    async def invoke(
        self,
        instance: InstanceHandle,
        method: str = ENTRY_POINT,
        arg: bytes = EMPTY_ARGUMENTS,
    ) -> bytes:
        """Call a method and return its reply, raising on rejection."""
        data = await self._request(
            "POST",
            f"/instances/{instance.instance_id}/calls",
            json={"method": method, "arg": base64.b64encode(arg).decode()},
        )
        try:
            outcome = CallOutcome.model_validate(data)
            reply = base64.b64decode(outcome.reply or "", validate=True)
        except (ValidationError, binascii.Error) as exc:
            raise RuntimeInstanceError(f"Malformed reply from {method}: {exc}") from exc

        if outcome.status == "rejected":
            raise RuntimeInstanceError(
                f"Call to {method} rejected: {outcome.message or 'no message'}"
            )
        return reply

    async def teardown(self, instance: InstanceHandle) -> None:
        """Delete the instance."""
        await self._request(
            "DELETE", f"/instances/{instance.instance_id}", expected=(200, 204)
        )

    async def _request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        expected: tuple[int, ...] = (200,),
    ) -> Any:
        """Send a request and return the decoded JSON body, if any."""
        try:
            async with self.session.request(method, url, json=json) as response:
                if response.status not in expected:
                    text = await response.text()
                    raise RuntimeInstanceError(
                        f"{method} {url} failed: {response.status} {text}"
                    )
                if response.status == 204:
                    return None
                return await response.json()
        except aiohttp.ClientError as exc:
            raise RuntimeInstanceError(f"{method} {url} failed: {exc}") from exc
        except ValueError as exc:
            raise RuntimeInstanceError(
                f"{method} {url} returned invalid JSON: {exc}"
            ) from exc
