"""Exception hierarchy for the snippet harness.

``ConfigurationError`` subclasses abort the whole run. ``SnippetError``
subclasses are confined to the snippet being executed and are reported as
failed results.
"""


class HarnessError(Exception):
    """Base class for all harness errors."""


class ConfigurationError(HarnessError):
    """Documentation is set up in a way that prevents running any snippet."""


class DuplicateSnippetError(ConfigurationError):
    """Raised when two snippets declare the same ``name=`` tag."""


class UnresolvedIncludeError(ConfigurationError):
    """Raised when an ``include=`` tag names no known snippet."""


class SourceEncodingError(ConfigurationError):
    """Raised when a documentation source is not valid UTF-8."""


class SnippetError(HarnessError):
    """Failure confined to a single snippet."""


class SnippetShapeError(SnippetError):
    """Raised for snippets whose body violates formatting rules."""


class AssertionCommentError(SnippetError):
    """Raised for ``// =>`` comments that cannot be parsed."""


class CompilationError(SnippetError):
    """Raised when the compiler rejects a program.

    The message is the compiler diagnostic, verbatim.
    """


class RuntimeInstanceError(SnippetError):
    """Raised when deploying to or calling the runtime instance fails."""
