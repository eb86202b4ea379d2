"""Abstract base class for compilers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from snippet_harness.models.program import CompiledArtifact, ProgramUnit


@dataclass(frozen=True, kw_only=True)
class Compiler(ABC):
    """Abstract base for target-language compilers."""

    @abstractmethod
    async def compile(self, unit: ProgramUnit, instance_id: str) -> CompiledArtifact:
        """Compile a program unit for deployment to the given instance.

        Args:
            unit: Transformed program to compile
            instance_id: Instance the artifact will be deployed to, used to
                resolve references the program makes to itself

        Returns:
            The compiled artifact

        Raises:
            CompilationError: With the compiler diagnostic on failure

        """
