"""Execution harness running snippets against a single runtime instance."""

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from snippet_harness.compilers.base import Compiler
from snippet_harness.errors import SnippetError
from snippet_harness.models.result import TestResult
from snippet_harness.models.snippet import Snippet
from snippet_harness.runtimes.base import ENTRY_POINT, ExecutionRuntime, InstanceHandle
from snippet_harness.transformer import SnippetTransformer

log = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "motoko"
SKIP_TAG = "no-validate"

type ResultCallback = Callable[[TestResult], None]


@dataclass(frozen=True, kw_only=True)
class SnippetHarness[T: InstanceHandle]:
    """Compiles, deploys and invokes snippets one at a time.

    One instance is created for the whole run and every snippet is
    redeployed into it, so snippets never run concurrently and each starts
    from a freshly reinstalled state.
    """

    compiler: Compiler
    runtime: ExecutionRuntime[T]
    transformer: SnippetTransformer = field(default_factory=SnippetTransformer)
    language: str = DEFAULT_LANGUAGE
    skip_tag: str = SKIP_TAG

    def is_eligible(self, snippet: Snippet) -> bool:
        """Check whether a snippet should be executed rather than skipped."""
        return snippet.language == self.language and self.skip_tag not in snippet.tags

    async def run_snippets(
        self,
        snippets: Sequence[Snippet],
        on_result: ResultCallback | None = None,
    ) -> Sequence[TestResult]:
        """Run all snippets in order, publishing each result as it is produced.

        Args:
            snippets: Snippets in source order
            on_result: Called with every result before the next snippet starts

        Returns:
            One result per snippet, in the same order

        """
        results: list[TestResult] = []

        def record(result: TestResult) -> None:
            results.append(result)
            if on_result:
                on_result(result)

        if not any(self.is_eligible(snippet) for snippet in snippets):
            log.info("No executable snippets, skipping runtime instance")
            for snippet in snippets:
                record(self.skip(snippet))
            return results

        async with self.runtime.instance() as instance:
            log.info("Running snippets...")
            for snippet in snippets:
                if self.is_eligible(snippet):
                    record(await self.run_snippet(snippet, instance))
                else:
                    record(self.skip(snippet))

        return results

    def skip(self, snippet: Snippet) -> TestResult:
        return TestResult(snippet=snippet, status="skipped", duration=0.0)

    async def run_snippet(self, snippet: Snippet, instance: T) -> TestResult:
        """Transform, compile, redeploy and (if present) invoke one snippet.

        Errors specific to the snippet become a failed result; anything else
        propagates to the caller.
        """
        start = time.perf_counter()
        try:
            unit = self.transformer.transform(snippet)
            artifact = await self.compiler.compile(unit, instance.instance_id)
            await self.runtime.redeploy(instance, artifact)
            if unit.has_entry_point:
                log.debug("Invoking %s on %s", ENTRY_POINT, unit.identifier)
                await self.runtime.invoke(instance, ENTRY_POINT)
        except SnippetError as exc:
            return TestResult(
                snippet=snippet,
                status="failed",
                duration=time.perf_counter() - start,
                error=str(exc),
            )

        return TestResult(
            snippet=snippet,
            status="passed",
            duration=time.perf_counter() - start,
        )
