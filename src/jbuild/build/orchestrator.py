"""
Build orchestration for jbuild projects.

This module sequences one compile phase at a time:
1. Honour the phase's skip flag
2. Scan source roots (an empty result ends the phase with no side effects;
   in stale-only mode, sources that are all current end it as up to date)
3. Build the phase classpath
4. Assemble a CompilerRequest and invoke the compiler
5. Apply the failure policy and report the produced artifact

The main phase always runs before the test phase, because the test
classpath includes the main output directory.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from .classpath import MAIN_SCOPE, TEST_SCOPE, ClasspathBuilder, ClasspathEntry, ResolvedArtifact
from .compiler import CompilerManager, CompilerRequest, CompilerResult
from .flag_builder import DEFAULT_VERSIONS, NO_EXPLICIT_VERSION_WARNING, VersionDefaults, resolve_versions
from .invoker import CompilerInvoker, InvocationMode, create_invoker
from .outcome import FailurePolicy, OutcomeDecision, OutcomeHandler
from .source_scanner import SourceRoot, SourceScanner


class Phase(Enum):
    MAIN = "main"
    TEST = "test"


class PhaseStatus(Enum):
    SKIPPED = "skipped"
    NO_SOURCES = "no-sources"
    UP_TO_DATE = "up-to-date"
    SUCCESS = "success"
    FAILURE_TOLERATED = "failure-tolerated"


@dataclass
class CompilerSettings:
    """Compiler options shared by a phase."""

    source: Optional[str] = None
    target: Optional[str] = None
    release: Optional[str] = None
    compiler_args: List[str] = field(default_factory=list)
    fork: bool = False
    executable: Optional[str] = None
    compiler_id: str = "javac"
    fail_on_error: bool = True
    fail_on_warning: bool = False
    show_warnings: bool = True
    debug: bool = False
    encoding: Optional[str] = None
    implicit: Optional[str] = None
    timeout: Optional[float] = None

    @property
    def mode(self) -> InvocationMode:
        return InvocationMode.FORKED if self.fork else InvocationMode.IN_PROCESS

    @property
    def policy(self) -> FailurePolicy:
        return FailurePolicy(
            fail_on_error=self.fail_on_error,
            fail_on_warning=self.fail_on_warning,
            show_warnings=self.show_warnings,
        )


@dataclass
class PhaseConfig:
    """Inputs for one compile phase, as read from project metadata."""

    source_roots: List[SourceRoot]
    output_dir: Path
    settings: CompilerSettings = field(default_factory=CompilerSettings)
    artifacts: List[ResolvedArtifact] = field(default_factory=list)
    includes: Optional[List[str]] = None
    excludes: Optional[List[str]] = None
    skip: bool = False
    stale_only: bool = False


@dataclass
class BuildEvent:
    """A message produced while running a phase."""

    level: int
    message: str


@dataclass
class PhaseResult:
    """Result of running one phase."""

    phase: Phase
    status: PhaseStatus
    sources: List[Path] = field(default_factory=list)
    classpath: List[ClasspathEntry] = field(default_factory=list)
    result: Optional[CompilerResult] = None
    artifact: Optional[Path] = None
    events: List[BuildEvent] = field(default_factory=list)

    @property
    def warnings(self) -> List[BuildEvent]:
        return [e for e in self.events if e.level == logging.WARNING]


@dataclass
class BuildResult:
    """Result of running both phases."""

    success: bool
    main: PhaseResult
    test: Optional[PhaseResult]
    build_time: float
    message: str

    @property
    def artifact(self) -> Optional[Path]:
        return self.main.artifact


InvokerFactory = Callable[[CompilerSettings], CompilerInvoker]


def has_output_files(directory: Path) -> bool:
    """True if at least one file exists below directory."""
    if not directory.is_dir():
        return False
    return any(p.is_file() for p in directory.rglob("*"))


class CompilerOrchestrator:
    """
    Orchestrates the main and test compile phases.

    Example usage:
        orchestrator = CompilerOrchestrator()
        result = orchestrator.build(main_config, test_config)
        if result.artifact:
            print(f"Classes: {result.artifact}")
    """

    def __init__(
        self,
        compiler_manager: Optional[CompilerManager] = None,
        version_defaults: VersionDefaults = DEFAULT_VERSIONS,
        invoker_factory: Optional[InvokerFactory] = None,
        scanner: Optional[SourceScanner] = None,
        classpath_builder: Optional[ClasspathBuilder] = None,
        verbose: bool = False
    ):
        """
        Initialize build orchestrator.

        Args:
            compiler_manager: Engine registry for in-process compilation
            version_defaults: Source/target used when none is configured
            invoker_factory: Creates the invoker for a phase's settings
            scanner: Source scanner (optional)
            classpath_builder: Classpath builder (optional)
            verbose: Print phase progress
        """
        self.compiler_manager = compiler_manager
        self.version_defaults = version_defaults
        self.invoker_factory = invoker_factory or self._default_invoker
        self.scanner = scanner or SourceScanner()
        self.classpath_builder = classpath_builder or ClasspathBuilder()
        self.verbose = verbose

    def _default_invoker(self, settings: CompilerSettings) -> CompilerInvoker:
        return create_invoker(
            settings.mode,
            compiler_manager=self.compiler_manager,
            compiler_id=settings.compiler_id,
            executable=settings.executable,
            timeout=settings.timeout,
        )

    def compile_main(self, config: PhaseConfig) -> PhaseResult:
        """
        Run the main phase.

        Returns:
            PhaseResult whose artifact is set only if class files were produced

        Raises:
            ConfigurationError: For bad patterns or unresolved artifacts
            CompilationFailureError: If compilation fails and fail_on_error is set
            ToolchainError: If the compiler could not run
        """
        return self._run_phase(Phase.MAIN, config, None)

    def compile_test(self, config: PhaseConfig, main_output_dir: Optional[Path]) -> PhaseResult:
        """
        Run the test phase against the main phase output directory.

        Raises the same errors as compile_main.
        """
        return self._run_phase(Phase.TEST, config, main_output_dir)

    def build(self, main: PhaseConfig, test: Optional[PhaseConfig] = None) -> BuildResult:
        """
        Run the main phase, then the test phase.

        A fatal error in the main phase propagates before the test phase starts.
        """
        start_time = time.time()

        main_result = self.compile_main(main)
        test_result = None
        if test is not None:
            test_result = self.compile_test(test, main.output_dir)

        tolerated = [
            r for r in (main_result, test_result)
            if r is not None and r.status is PhaseStatus.FAILURE_TOLERATED
        ]
        message = "Build successful"
        if tolerated:
            phases = ", ".join(r.phase.value for r in tolerated)
            message = f"Build finished with tolerated compilation failures ({phases})"

        return BuildResult(
            success=True,
            main=main_result,
            test=test_result,
            build_time=time.time() - start_time,
            message=message,
        )

    def _run_phase(self, phase: Phase, config: PhaseConfig, main_output_dir: Optional[Path]) -> PhaseResult:
        result = PhaseResult(phase=phase, status=PhaseStatus.SKIPPED)

        def emit(level: int, message: str) -> None:
            result.events.append(BuildEvent(level, message))
            logging.log(level, message)

        if config.skip:
            emit(logging.INFO, f"Not compiling {phase.value} sources")
            return result

        if self.verbose:
            print(f"[{phase.value}] Scanning source roots...")

        sources = self.scanner.scan(
            config.source_roots,
            includes=config.includes,
            excludes=config.excludes,
            stale_output_dir=config.output_dir if config.stale_only else None,
        )
        result.sources = list(sources)

        if sources.is_empty and sources.up_to_date:
            result.status = PhaseStatus.UP_TO_DATE
            emit(logging.INFO, f"All {phase.value} classes are up to date")
            if phase is Phase.MAIN and has_output_files(Path(config.output_dir)):
                result.artifact = Path(config.output_dir)
            return result

        if sources.is_empty:
            result.status = PhaseStatus.NO_SOURCES
            emit(logging.INFO, f"No {phase.value} sources to compile")
            return result

        if phase is Phase.MAIN:
            classpath = self.classpath_builder.build(config.artifacts, MAIN_SCOPE)
        else:
            classpath = self.classpath_builder.build_test_classpath(config.artifacts, main_output_dir)
        if config.stale_only and all(e.path != Path(config.output_dir) for e in classpath):
            scope = MAIN_SCOPE if phase is Phase.MAIN else TEST_SCOPE
            classpath.append(ClasspathEntry(Path(config.output_dir), scope))
        result.classpath = classpath

        settings = config.settings
        versions = resolve_versions(
            settings.source, settings.target, settings.release, self.version_defaults
        )
        if versions.defaulted:
            emit(logging.WARNING, NO_EXPLICIT_VERSION_WARNING)

        request = CompilerRequest(
            sources=result.sources,
            classpath=classpath,
            output_dir=config.output_dir,
            source=versions.source,
            target=versions.target,
            release=versions.release,
            extra_flags=settings.compiler_args,
            encoding=settings.encoding,
            debug=settings.debug,
            show_warnings=settings.show_warnings,
            implicit=settings.implicit,
        )

        if self.verbose:
            print(f"[{phase.value}] Compiling {len(request.sources)} source file(s)...")

        invoker = self.invoker_factory(settings)
        result.result = invoker.invoke(request)

        decision = OutcomeHandler(settings.policy, emit).handle(result.result)
        result.status = (
            PhaseStatus.SUCCESS if decision is OutcomeDecision.SUCCESS
            else PhaseStatus.FAILURE_TOLERATED
        )

        if phase is Phase.MAIN and has_output_files(Path(config.output_dir)):
            result.artifact = Path(config.output_dir)

        return result
