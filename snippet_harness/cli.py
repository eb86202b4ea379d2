"""CLI entry point for the documentation snippet harness."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from snippet_harness.compilers.config import MotokoCompilerConfig
from snippet_harness.compilers.motoko import MotokoCompiler
from snippet_harness.config import parse_config
from snippet_harness.discovery import (
    DEFAULT_PATTERN,
    INTERNAL_PREFIX,
    discover_sources,
    is_internal_only,
)
from snippet_harness.errors import ConfigurationError, HarnessError
from snippet_harness.extractor import extract_snippets
from snippet_harness.harness import DEFAULT_LANGUAGE, SnippetHarness
from snippet_harness.reporter import Reporter, format_output
from snippet_harness.runtimes.loading import available_runtimes, load_runtime_manifest

DEFAULT_RUNTIME = "runtime-service"


async def run(
    root: Path,
    filters: Sequence[str] = (),
    runtime_key: str = DEFAULT_RUNTIME,
    runtime_config_json: str = "{}",
    compiler_config_json: str = "{}",
    pattern: str = DEFAULT_PATTERN,
    language: str = DEFAULT_LANGUAGE,
    internal_prefix: str = INTERNAL_PREFIX,
) -> int:
    """Validate documentation snippets and return exit code."""
    log = logging.getLogger("snippet_harness")

    try:
        sources = await discover_sources(root, pattern)
    except (OSError, ConfigurationError) as exc:
        log.error("Unable to read documentation sources: %s", exc)
        return 1

    skippable = is_internal_only(sources, filters, internal_prefix)

    try:
        snippets = extract_snippets(sources, filters)
    except ConfigurationError as exc:
        log.error("%s", exc)
        return 1

    reporter = Reporter()
    reporter.report_found(snippets)

    if not snippets:
        print(json.dumps(format_output([])))
        return reporter.exit_code(skippable=skippable)

    try:
        manifest = load_runtime_manifest(runtime_key)
        runtime_config = manifest.configure(runtime_config_json)
        compiler_config = parse_config(MotokoCompilerConfig, compiler_config_json)
    except ConfigurationError as exc:
        log.error("%s", exc)
        return 1

    try:
        async with (
            MotokoCompiler.from_config(compiler_config) as compiler,
            manifest.runtime_factory(runtime_config) as runtime,
        ):
            harness = SnippetHarness(
                compiler=compiler, runtime=runtime, language=language
            )
            await harness.run_snippets(snippets, on_result=reporter.on_result)
    except (HarnessError, OSError, TimeoutError) as exc:
        log.error("Snippet run aborted: %s", exc)
        return 1

    reporter.report_summary()
    print(json.dumps(format_output(reporter.results), indent=2))

    return reporter.exit_code(skippable=skippable)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Compile and run code snippets from documentation comments"
    )
    parser.add_argument(
        "filters",
        nargs="*",
        help="Only run snippets from paths containing one of these substrings",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=Path("."),
        help="Repository root containing the documented sources",
    )
    parser.add_argument(
        "--pattern",
        default=DEFAULT_PATTERN,
        help="Glob pattern (relative to root) of documented sources",
    )
    parser.add_argument(
        "--language",
        default=DEFAULT_LANGUAGE,
        help="Code block language tag of snippets to execute",
    )
    parser.add_argument(
        "--internal-prefix",
        default=INTERNAL_PREFIX,
        help="Path prefix of internal modules not expected to have snippets",
    )
    parser.add_argument(
        "--runtime",
        default=DEFAULT_RUNTIME,
        help=f"Runtime key (installed: {', '.join(available_runtimes())})",
    )
    parser.add_argument(
        "--runtime-config",
        default="{}",
        help="JSON configuration for the runtime",
    )
    parser.add_argument(
        "--compiler-config",
        default="{}",
        help="JSON configuration for the compiler",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            root=args.root,
            filters=args.filters,
            runtime_key=args.runtime,
            runtime_config_json=args.runtime_config,
            compiler_config_json=args.compiler_config,
            pattern=args.pattern,
            language=args.language,
            internal_prefix=args.internal_prefix,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
