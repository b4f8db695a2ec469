"""
Outcome handling for compiler results.

Applies the failure policy to a CompilerResult:
- SUCCESS: informational messages only, the build continues
- COMPILATION_FAILURE: raise when fail_on_error is set, otherwise log the
  diagnostics as warnings and let the build continue
- INTERNAL_ERROR: always raise, whatever fail_on_error says

Nothing is retried; compiling identical inputs again gives the same result.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from .compiler import CompilerOutcome, CompilerResult, Diagnostic, Severity
from .errors import CompilationFailureError, ToolchainError


class OutcomeDecision(Enum):
    SUCCESS = "success"
    FAILURE_TOLERATED = "failure-tolerated"


EventSink = Callable[[int, str], None]


def _log_event(level: int, message: str) -> None:
    logging.log(level, message)


@dataclass
class FailurePolicy:
    """How compiler problems affect the build."""

    fail_on_error: bool = True
    fail_on_warning: bool = False
    show_warnings: bool = True


class OutcomeHandler:
    """
    Interprets CompilerResults according to a FailurePolicy.

    Example usage:
        handler = OutcomeHandler(FailurePolicy(fail_on_error=False))
        decision = handler.handle(result)
    """

    def __init__(self, policy: Optional[FailurePolicy] = None, emit: Optional[EventSink] = None):
        """
        Initialize outcome handler.

        Args:
            policy: Failure policy (defaults to failing on errors)
            emit: Receives (logging level, message) for every reported line
        """
        self.policy = policy or FailurePolicy()
        self.emit = emit or _log_event

    def handle(self, result: CompilerResult) -> OutcomeDecision:
        """
        Apply the failure policy.

        Returns:
            OutcomeDecision for results that let the build continue

        Raises:
            ToolchainError: For INTERNAL_ERROR results
            CompilationFailureError: For failures while fail_on_error is set
        """
        if result.outcome is CompilerOutcome.INTERNAL_ERROR:
            self._report(result.diagnostics, logging.ERROR)
            raise ToolchainError(
                self._summary("Compiler failed to run", result.diagnostics),
                diagnostics=result.diagnostics,
                cause=result.exception,
            )

        failed = result.outcome is CompilerOutcome.COMPILATION_FAILURE
        if not failed and self.policy.fail_on_warning and result.warnings:
            self.emit(logging.WARNING, "Warnings found and fail_on_warning is enabled")
            failed = True

        if not failed:
            self._report_success(result.diagnostics)
            return OutcomeDecision.SUCCESS

        if self.policy.fail_on_error:
            self._report(result.diagnostics, logging.ERROR)
            raise CompilationFailureError(
                self._summary("Compilation failure", result.diagnostics),
                diagnostics=result.diagnostics,
            )

        self._report(result.diagnostics, logging.WARNING)
        self.emit(logging.WARNING, "Compilation failed, continuing because fail_on_error is disabled")
        return OutcomeDecision.FAILURE_TOLERATED

    def _report_success(self, diagnostics: List[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            if diagnostic.severity is Severity.WARNING:
                if self.policy.show_warnings:
                    self.emit(logging.WARNING, str(diagnostic))
            else:
                self.emit(logging.INFO, str(diagnostic))

    def _report(self, diagnostics: List[Diagnostic], error_level: int) -> None:
        for diagnostic in diagnostics:
            level = error_level if diagnostic.severity is Severity.ERROR else logging.WARNING
            if diagnostic.severity in (Severity.NOTE, Severity.OTHER):
                level = logging.INFO
            self.emit(level, str(diagnostic))

    @staticmethod
    def _summary(title: str, diagnostics: List[Diagnostic]) -> str:
        errors = [d for d in diagnostics if d.is_error] or diagnostics
        lines = [title]
        lines.extend(str(d) for d in errors)
        return "\n".join(lines)
