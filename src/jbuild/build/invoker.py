"""
Compiler invocation strategies.

Two interchangeable invokers share one result shape:
- InProcessInvoker calls a registered ICompilerEngine on the calling thread
  and collects diagnostics through a listener
- ForkedInvoker runs an external javac and parses its console output

The outcome handler never needs to know which one ran.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import List, Optional

from .compilation_executor import CompilationExecutor, resolve_executable
from .compiler import (
    CompilerManager,
    CompilerOutcome,
    CompilerRequest,
    CompilerResult,
    Diagnostic,
    Severity,
)
from .diagnostics import parse_javac_output
from .errors import ToolchainError
from .flag_builder import FlagBuilder


class InvocationMode(Enum):
    IN_PROCESS = "in-process"
    FORKED = "forked"


def classify(exit_code: Optional[int], diagnostics: List[Diagnostic]) -> CompilerOutcome:
    """
    Map an exit status to an outcome, following javac's exit codes.

    0 is success unless error diagnostics were reported and 1 (errors in the
    sources) is a compilation failure. Anything else, including 2 (bad command
    line, such as an invalid flag), means the invocation itself is broken.
    """
    if exit_code == 0:
        if any(d.is_error for d in diagnostics):
            return CompilerOutcome.COMPILATION_FAILURE
        return CompilerOutcome.SUCCESS
    if exit_code == 1:
        return CompilerOutcome.COMPILATION_FAILURE
    return CompilerOutcome.INTERNAL_ERROR


def internal_error(message: str, exception: Optional[BaseException] = None,
                   exit_code: Optional[int] = None,
                   diagnostics: Optional[List[Diagnostic]] = None) -> CompilerResult:
    collected = list(diagnostics or [])
    collected.append(Diagnostic(Severity.ERROR, message))
    return CompilerResult(
        outcome=CompilerOutcome.INTERNAL_ERROR,
        diagnostics=collected,
        exit_code=exit_code,
        exception=exception,
    )


class CompilerInvoker(ABC):
    """Runs one CompilerRequest and reports a CompilerResult."""

    mode: InvocationMode

    @abstractmethod
    def invoke(self, request: CompilerRequest) -> CompilerResult:
        pass

    @staticmethod
    def _prepare_output_dir(output_dir: Path) -> None:
        # Only reached with a non-empty source set, right before classes are written
        output_dir.mkdir(parents=True, exist_ok=True)


class InProcessInvoker(CompilerInvoker):
    """Invokes a compiler engine as a direct library call."""

    mode = InvocationMode.IN_PROCESS

    def __init__(self, compiler_manager: Optional[CompilerManager] = None, compiler_id: str = "javac"):
        """
        Initialize in-process invoker.

        Args:
            compiler_manager: Engine registry (defaults to the built-in one)
            compiler_id: Engine to use
        """
        self.compiler_manager = compiler_manager or CompilerManager.default()
        self.compiler_id = compiler_id

    def invoke(self, request: CompilerRequest) -> CompilerResult:
        try:
            engine = self.compiler_manager.get_compiler(self.compiler_id)
        except ToolchainError as e:
            return internal_error(str(e), exception=e)

        diagnostics: List[Diagnostic] = []
        options = FlagBuilder(request).build_options()

        logging.info(f"Compiling {len(request.sources)} source file(s) in process to {request.output_dir}")
        self._prepare_output_dir(request.output_dir)

        try:
            exit_code = engine.compile(
                list(request.sources),
                request.classpath_paths,
                options,
                diagnostics.append,
            )
        except ToolchainError as e:
            return internal_error(str(e), exception=e, diagnostics=diagnostics + e.diagnostics)
        except Exception as e:
            return internal_error(
                f"Compiler '{self.compiler_id}' crashed: {type(e).__name__}: {e}",
                exception=e,
                diagnostics=diagnostics,
            )

        return CompilerResult(
            outcome=classify(exit_code, diagnostics),
            diagnostics=diagnostics,
            exit_code=exit_code,
        )


class ForkedInvoker(CompilerInvoker):
    """Invokes an external compiler executable as a child process."""

    mode = InvocationMode.FORKED

    def __init__(
        self,
        executable: Optional[str] = None,
        timeout: Optional[float] = None,
        executor: Optional[CompilationExecutor] = None
    ):
        """
        Initialize forked invoker.

        Args:
            executable: Explicit javac path (defaults to JAVA_HOME, then PATH)
            timeout: Seconds before the child process tree is killed
            executor: Process runner (created from timeout if omitted)
        """
        self.executable = executable
        self.executor = executor or CompilationExecutor(timeout=timeout)

    def build_command(self, request: CompilerRequest, executable: Path) -> List[str]:
        return [str(executable)] + FlagBuilder(request).build_arguments()

    def invoke(self, request: CompilerRequest) -> CompilerResult:
        try:
            executable = resolve_executable(self.executable)
        except ToolchainError as e:
            return internal_error(str(e), exception=e)

        cmd = self.build_command(request, executable)

        logging.info(f"Compiling {len(request.sources)} source file(s) with {executable} to {request.output_dir}")
        self._prepare_output_dir(request.output_dir)

        try:
            execution = self.executor.execute(cmd)
        except ToolchainError as e:
            return internal_error(str(e), exception=e)

        diagnostics = parse_javac_output(execution.output)

        if execution.timed_out:
            return internal_error(
                f"Compiler process timed out after {self.executor.timeout}s",
                diagnostics=diagnostics,
            )

        return CompilerResult(
            outcome=classify(execution.returncode, diagnostics),
            diagnostics=diagnostics,
            exit_code=execution.returncode,
        )


def create_invoker(
    mode: InvocationMode,
    compiler_manager: Optional[CompilerManager] = None,
    compiler_id: str = "javac",
    executable: Optional[str] = None,
    timeout: Optional[float] = None
) -> CompilerInvoker:
    """Select an invoker for the configured mode."""
    if mode is InvocationMode.FORKED:
        return ForkedInvoker(executable=executable, timeout=timeout)
    return InProcessInvoker(compiler_manager=compiler_manager, compiler_id=compiler_id)
