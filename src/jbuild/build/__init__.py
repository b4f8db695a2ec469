"""
Build system components for jbuild.

This module provides the compile step implementation including:
- Source discovery with include/exclude patterns and staleness checks
- Classpath construction from resolved artifacts
- Compiler invocation (in-process engine or forked javac)
- Failure policy handling
- Main/test phase orchestration
"""

from .classpath import ArtifactHandler, ClasspathBuilder, ClasspathEntry, ResolvedArtifact
from .compiler import (
    CompilerManager,
    CompilerOutcome,
    CompilerRequest,
    CompilerResult,
    Diagnostic,
    ICompilerEngine,
    Severity,
)
from .errors import (
    ClasspathError,
    CompilationFailureError,
    ConfigurationError,
    JBuildError,
    NoSuchCompilerError,
    ToolchainError,
)
from .flag_builder import FlagBuilder, VersionDefaults
from .invoker import ForkedInvoker, InProcessInvoker, InvocationMode, create_invoker
from .orchestrator import (
    BuildResult,
    CompilerOrchestrator,
    CompilerSettings,
    Phase,
    PhaseConfig,
    PhaseResult,
    PhaseStatus,
)
from .outcome import FailurePolicy, OutcomeDecision, OutcomeHandler
from .source_scanner import SourceRoot, SourceScanner, SourceSet

__all__ = [
    'ArtifactHandler',
    'BuildResult',
    'ClasspathBuilder',
    'ClasspathEntry',
    'ClasspathError',
    'CompilationFailureError',
    'CompilerManager',
    'CompilerOrchestrator',
    'CompilerOutcome',
    'CompilerRequest',
    'CompilerResult',
    'CompilerSettings',
    'ConfigurationError',
    'Diagnostic',
    'FailurePolicy',
    'FlagBuilder',
    'ForkedInvoker',
    'ICompilerEngine',
    'InProcessInvoker',
    'InvocationMode',
    'JBuildError',
    'NoSuchCompilerError',
    'OutcomeDecision',
    'OutcomeHandler',
    'Phase',
    'PhaseConfig',
    'PhaseResult',
    'PhaseStatus',
    'ResolvedArtifact',
    'Severity',
    'SourceRoot',
    'SourceScanner',
    'SourceSet',
    'ToolchainError',
    'VersionDefaults',
    'create_invoker',
]
