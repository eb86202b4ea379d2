"""Motoko compiler driven through the ``moc`` executable."""

import asyncio
import logging
import tempfile
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from snippet_harness.compilers.base import Compiler
from snippet_harness.compilers.config import MotokoCompilerConfig
from snippet_harness.errors import CompilationError
from snippet_harness.models.program import CompiledArtifact, ProgramUnit

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class MotokoCompiler(Compiler):
    """Compiles program units with ``moc`` inside a scratch directory.

    Sources are written under ``work_dir`` at the unit's identifier. The
    interface of the last compiled unit is kept in ``work_dir/idl`` so that
    programs importing ``canister:<alias>`` can be type checked.
    """

    config: MotokoCompilerConfig
    work_dir: Path

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: MotokoCompilerConfig
    ) -> AsyncGenerator["MotokoCompiler", None]:
        """Create compiler with a scratch directory removed on exit."""
        with tempfile.TemporaryDirectory(prefix="snippet-harness-") as work_dir:
            yield cls(config=config, work_dir=Path(work_dir))

    @property
    def idl_dir(self) -> Path:
        return self.work_dir / "idl"

    def base_arguments(self, instance_id: str) -> Sequence[str]:
        """Arguments shared by the wasm and interface invocations."""
        arguments: list[str] = []
        for name, path in sorted(self.config.packages.items()):
            arguments.extend(["--package", name, str(Path(path).resolve())])
        arguments.extend(["--actor-idl", str(self.idl_dir)])
        arguments.extend(["--actor-alias", self.config.alias, instance_id])
        if self.config.target == "wasi":
            arguments.append("-wasi-system-api")
        return arguments

    async def compile(self, unit: ProgramUnit, instance_id: str) -> CompiledArtifact:
        """Compile a unit to wasm and emit its Candid interface."""
        source_path = self.work_dir / unit.identifier
        source_path.parent.mkdir(parents=True, exist_ok=True)
        source_path.write_text(unit.source, encoding="utf-8")
        self.idl_dir.mkdir(exist_ok=True)

        wasm_path = source_path.with_suffix(".wasm")
        did_path = source_path.with_suffix(".did")
        arguments = self.base_arguments(instance_id)

        await self._run([*arguments, "-c", str(source_path), "-o", str(wasm_path)])
        await self._run([*arguments, "--idl", str(source_path), "-o", str(did_path)])

        candid = did_path.read_text(encoding="utf-8")
        (self.idl_dir / f"{instance_id}.did").write_text(candid, encoding="utf-8")

        return CompiledArtifact(wasm=wasm_path.read_bytes(), candid=candid)

    async def _run(self, arguments: Sequence[str]) -> None:
        """Run the compiler, raising its diagnostic on failure.

        A missing executable is not a snippet failure; the resulting
        ``FileNotFoundError`` propagates and aborts the run.
        """
        log.debug("Running %s %s", self.config.executable, " ".join(arguments))
        process = await asyncio.create_subprocess_exec(
            self.config.executable,
            *arguments,
            cwd=self.work_dir,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()

        if process.returncode != 0:
            diagnostic = (
                stderr.decode(errors="replace").strip()
                or stdout.decode(errors="replace").strip()
            )
            raise CompilationError(diagnostic)
