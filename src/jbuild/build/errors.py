"""Error taxonomy for the jbuild compile step.

ConfigurationError and ToolchainError always abort the step.
CompilationFailureError is only raised when fail_on_error is enabled.
An empty source set is not an error at all.
"""

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .compiler import Diagnostic


class JBuildError(Exception):
    """Base class for all jbuild errors."""
    pass


class ConfigurationError(JBuildError):
    """Raised for malformed configuration (patterns, options, jbuild.ini)."""
    pass


class ClasspathError(ConfigurationError):
    """Raised when a required classpath artifact has no resolved file."""
    pass


class CompilationFailureError(JBuildError):
    """Raised when the compiler reports errors and fail_on_error is set."""

    def __init__(self, message: str, diagnostics: Optional[List["Diagnostic"]] = None):
        super().__init__(message)
        self.diagnostics = list(diagnostics or [])


class ToolchainError(JBuildError):
    """Raised when the compiler could not be started or crashed."""

    def __init__(
        self,
        message: str,
        diagnostics: Optional[List["Diagnostic"]] = None,
        cause: Optional[BaseException] = None
    ):
        super().__init__(message)
        self.diagnostics = list(diagnostics or [])
        self.cause = cause


class NoSuchCompilerError(ToolchainError):
    """Raised when no engine is registered for a compiler id."""
    pass
