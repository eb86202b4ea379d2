"""Tests for CLI module."""

import json
import logging
from collections.abc import AsyncGenerator, Callable, Generator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any
from unittest.mock import Mock, patch

import pytest

from snippet_harness.cli import main, run
from snippet_harness.compilers.config import MotokoCompilerConfig
from snippet_harness.runtimes.loading import RuntimeNotFoundError
from snippet_harness.runtimes.manifest import RuntimeManifest
from snippet_harness.runtimes.runtime_service import RuntimeServiceConfig
from snippet_harness.testing.fakes import FakeCompiler, FakeRuntime

type WriteSourceFn = Callable[[str, str], Path]


def doc(*lines: str) -> str:
    """Build a module whose lines are doc comments."""
    return "\n".join(f"/// {line}" for line in lines) + "\nmodule {};\n"


@pytest.fixture
def write_source(tmp_path: Path) -> WriteSourceFn:
    """Return a function writing a documented source under tmp_path."""

    def _write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def compiler() -> FakeCompiler:
    """Create fake compiler."""
    return FakeCompiler()


@pytest.fixture
def runtime() -> FakeRuntime:
    """Create fake runtime that traps on wrong assertions."""
    return FakeRuntime(deploy_errors={"== (3)": "assertion failed"})


@pytest.fixture
def compiler_cls(compiler: FakeCompiler) -> Mock:
    """Create stand-in for MotokoCompiler yielding the fake compiler."""

    @asynccontextmanager
    async def from_config(
        config: MotokoCompilerConfig,
    ) -> AsyncGenerator[FakeCompiler, None]:
        yield compiler

    cls = Mock()
    cls.from_config = Mock(side_effect=from_config)
    return cls


@pytest.fixture
def manifest(runtime: FakeRuntime) -> RuntimeManifest[Any, Any]:
    """Create manifest whose factory yields the fake runtime."""

    @asynccontextmanager
    async def factory(config: RuntimeServiceConfig) -> AsyncGenerator[FakeRuntime, None]:
        yield runtime

    return RuntimeManifest(config_cls=RuntimeServiceConfig, runtime_factory=factory)


@pytest.fixture
def patched(
    compiler_cls: Mock, manifest: RuntimeManifest[Any, Any]
) -> Generator[None]:
    """Patch compiler and runtime lookup in the CLI."""
    with (
        patch("snippet_harness.cli.MotokoCompiler", compiler_cls),
        patch("snippet_harness.cli.load_runtime_manifest", return_value=manifest),
    ):
        yield


@pytest.mark.usefixtures("patched")
class TestRun:
    """Tests for run function."""

    async def test_returns_zero_when_all_pass(
        self,
        tmp_path: Path,
        write_source: WriteSourceFn,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Returns 0 and prints JSON when every snippet passes."""
        write_source("src/A.mo", doc("```motoko", "let x = 1 + 1; // => 2", "```"))

        exit_code = await run(root=tmp_path)

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["passed"] == 1
        assert output["results"][0]["path"] == "src/A.mo"

    async def test_returns_one_when_snippet_fails(
        self, tmp_path: Path, write_source: WriteSourceFn
    ) -> None:
        """Returns 1 when any snippet fails."""
        write_source(
            "src/A.mo",
            doc("```motoko", "let x = 1 + 1; // => 2", "```", "```motoko", "let y = 1 + 1; // => 3", "```"),
        )

        assert await run(root=tmp_path) == 1

    async def test_skipped_snippets_do_not_fail(
        self, tmp_path: Path, write_source: WriteSourceFn, compiler: FakeCompiler
    ) -> None:
        """Opted-out snippets are skipped and the run passes."""
        write_source("src/A.mo", doc("```motoko no-validate", "let x = 1 + 1; // => 3", "```"))

        assert await run(root=tmp_path) == 0
        assert compiler.units == []

    async def test_duplicate_name_aborts_before_compiling(
        self,
        tmp_path: Path,
        write_source: WriteSourceFn,
        compiler_cls: Mock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Duplicate names abort the run before anything compiles."""
        write_source(
            "src/A.mo",
            doc("```motoko name=a", "let a = 1;", "```", "```motoko name=a", "let a = 2;", "```"),
        )

        with caplog.at_level(logging.ERROR):
            exit_code = await run(root=tmp_path)

        assert exit_code == 1
        assert "Duplicate snippet name: a" in caplog.text
        compiler_cls.from_config.assert_not_called()

    async def test_unresolved_include_aborts(
        self, tmp_path: Path, write_source: WriteSourceFn, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Unresolved includes abort the run with a diagnostic."""
        write_source("src/A.mo", doc("```motoko include=nope", "let a = 1;", "```"))

        with caplog.at_level(logging.ERROR):
            assert await run(root=tmp_path) == 1

        assert "src/A.mo:1 Unresolved snippet attribute: include=nope" in caplog.text

    async def test_no_snippets_fails_for_public_modules(
        self, tmp_path: Path, write_source: WriteSourceFn, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Finding nothing in public modules is an error."""
        write_source("src/A.mo", "module {};\n")

        assert await run(root=tmp_path) == 1
        assert '"total": 0' in capsys.readouterr().out

    async def test_no_snippets_passes_for_internal_modules(
        self, tmp_path: Path, write_source: WriteSourceFn
    ) -> None:
        """Finding nothing is fine when only internal modules are selected."""
        write_source("src/internal/Prim.mo", "module {};\n")
        write_source("src/A.mo", doc("```motoko", "let a = 1;", "```"))

        assert await run(root=tmp_path, filters=["internal"]) == 0

    async def test_unknown_runtime_fails(
        self,
        tmp_path: Path,
        write_source: WriteSourceFn,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Unknown runtime keys abort the run."""
        write_source("src/A.mo", doc("```motoko", "let a = 1;", "```"))

        with (
            patch(
                "snippet_harness.cli.load_runtime_manifest",
                side_effect=RuntimeNotFoundError("Runtime 'nope' not found"),
            ),
            caplog.at_level(logging.ERROR),
        ):
            assert await run(root=tmp_path, runtime_key="nope") == 1

        assert "Runtime 'nope' not found" in caplog.text

    async def test_runtime_start_failure_aborts(
        self,
        tmp_path: Path,
        write_source: WriteSourceFn,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Failing to start the instance is fatal."""
        write_source("src/A.mo", doc("```motoko", "let a = 1;", "```"))
        failing = FakeRuntime(start_error=TimeoutError("did not start"))

        @asynccontextmanager
        async def factory(config: RuntimeServiceConfig) -> AsyncGenerator[FakeRuntime, None]:
            yield failing

        manifest = RuntimeManifest(config_cls=RuntimeServiceConfig, runtime_factory=factory)

        with (
            patch("snippet_harness.cli.load_runtime_manifest", return_value=manifest),
            caplog.at_level(logging.ERROR),
        ):
            assert await run(root=tmp_path) == 1

        assert "Snippet run aborted: did not start" in caplog.text

    async def test_passes_configs_to_collaborators(
        self, tmp_path: Path, write_source: WriteSourceFn, compiler_cls: Mock
    ) -> None:
        """JSON options are parsed into the collaborator configs."""
        write_source("src/A.mo", doc("```motoko", "let a = 1;", "```"))

        await run(
            root=tmp_path,
            compiler_config_json='{"executable": "/opt/moc", "packages": {"core": "src"}}',
        )

        config = compiler_cls.from_config.call_args.args[0]
        assert config.executable == "/opt/moc"
        assert config.packages == {"core": "src"}

    async def test_undecodable_source_aborts(
        self, tmp_path: Path, write_source: WriteSourceFn, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Sources that are not UTF-8 abort the run naming the file."""
        path = write_source("src/A.mo", "")
        path.write_bytes(b"/// \xff\xfe\n")

        with caplog.at_level(logging.ERROR):
            assert await run(root=tmp_path) == 1

        assert "src/A.mo is not valid UTF-8" in caplog.text

    async def test_invalid_config_json_aborts(
        self,
        tmp_path: Path,
        write_source: WriteSourceFn,
        compiler_cls: Mock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Malformed configuration is reported before anything starts."""
        write_source("src/A.mo", doc("```motoko", "let a = 1;", "```"))

        with caplog.at_level(logging.ERROR):
            exit_code = await run(root=tmp_path, compiler_config_json="{not json")

        assert exit_code == 1
        assert "Invalid MotokoCompilerConfig" in caplog.text
        compiler_cls.from_config.assert_not_called()

    async def test_invalid_runtime_config_aborts(
        self, tmp_path: Path, write_source: WriteSourceFn, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Runtime options of the wrong type are a configuration error."""
        write_source("src/A.mo", doc("```motoko", "let a = 1;", "```"))

        with caplog.at_level(logging.ERROR):
            exit_code = await run(
                root=tmp_path, runtime_config_json='{"startup_timeout": "soon"}'
            )

        assert exit_code == 1
        assert "Invalid RuntimeServiceConfig" in caplog.text


class TestMain:
    """Tests for main CLI entry point."""

    def test_exits_with_run_result(self) -> None:
        """Main function exits with the result from run()."""
        with (
            patch("sys.argv", ["cli", "Array", "--root", "/repo"]),
            patch("snippet_harness.cli.asyncio.run", return_value=0) as mock_run,
            patch("snippet_harness.cli.run", Mock()) as mock_cli_run,
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 0
        mock_run.assert_called_once()
        kwargs = mock_cli_run.call_args.kwargs
        assert kwargs["root"] == Path("/repo")
        assert kwargs["filters"] == ["Array"]

    def test_exits_with_failure_code(self) -> None:
        """Main function exits with code 1 on snippet failures."""
        with (
            patch("sys.argv", ["cli"]),
            patch("snippet_harness.cli.asyncio.run", return_value=1),
            patch("snippet_harness.cli.run", Mock()),
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 1
