"""Compiler data model and the in-process engine contract.

This module defines the values that flow through one compilation:
- CompilerRequest: everything the invoker needs, frozen after construction
- Diagnostic / Severity: one compiler message
- CompilerResult / CompilerOutcome: what the invoker hands to the outcome handler
- ICompilerEngine: the library-call contract used by in-process invocation
- CompilerManager: registry mapping compiler ids to engines
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from .classpath import ClasspathEntry
from .errors import NoSuchCompilerError


class Severity(Enum):
    """Diagnostic severity, ordered from most to least severe."""
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"
    OTHER = "other"


@dataclass(frozen=True)
class Diagnostic:
    """A single compiler message."""

    severity: Severity
    message: str
    file: Optional[Path] = None
    line: Optional[int] = None
    column: Optional[int] = None
    details: Tuple[str, ...] = ()

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @property
    def is_warning(self) -> bool:
        return self.severity is Severity.WARNING

    def __str__(self) -> str:
        location = ""
        if self.file is not None:
            location = str(self.file)
            if self.line is not None:
                location += f":[{self.line}"
                if self.column is not None:
                    location += f",{self.column}"
                location += "]"
            location += " "
        return f"{location}{self.message}"


DiagnosticListener = Callable[[Diagnostic], None]


class CompilerOutcome(Enum):
    """Classification of a finished compiler invocation."""
    SUCCESS = "success"
    COMPILATION_FAILURE = "compilation-failure"
    INTERNAL_ERROR = "internal-error"


@dataclass
class CompilerResult:
    """Result of one compiler invocation, consumed once by the outcome handler."""

    outcome: CompilerOutcome
    diagnostics: List[Diagnostic] = field(default_factory=list)
    exit_code: Optional[int] = None
    exception: Optional[BaseException] = None

    @property
    def success(self) -> bool:
        return self.outcome is CompilerOutcome.SUCCESS

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_warning]


@dataclass(frozen=True)
class CompilerRequest:
    """Immutable bundle of inputs for a single compilation.

    Version fields hold the resolved values: either ``release`` is set, or
    both ``source`` and ``target`` are.
    """

    sources: Tuple[Path, ...]
    classpath: Tuple[ClasspathEntry, ...]
    output_dir: Path
    source: Optional[str] = None
    target: Optional[str] = None
    release: Optional[str] = None
    extra_flags: Tuple[str, ...] = ()
    encoding: Optional[str] = None
    debug: bool = False
    show_warnings: bool = True
    implicit: Optional[str] = None

    def __post_init__(self):
        # Accept lists from callers but store tuples so the value stays frozen
        object.__setattr__(self, "sources", tuple(Path(s) for s in self.sources))
        object.__setattr__(self, "classpath", tuple(self.classpath))
        object.__setattr__(self, "extra_flags", tuple(self.extra_flags))
        object.__setattr__(self, "output_dir", Path(self.output_dir))

    @property
    def classpath_paths(self) -> List[Path]:
        return [entry.path for entry in self.classpath]


class ICompilerEngine(ABC):
    """Library-call contract for in-process compilation.

    Implementations compile ``sources`` against ``classpath`` using the
    canonical ``options`` (everything between the classpath flag and the
    source list), report each message through ``listener`` and return the
    exit status, 0 meaning success.
    """

    @abstractmethod
    def compile(
        self,
        sources: List[Path],
        classpath: List[Path],
        options: List[str],
        listener: DiagnosticListener
    ) -> int:
        pass


class CompilerManager:
    """Registry of in-process compiler engines keyed by compiler id.

    Example usage:
        manager = CompilerManager.default()
        engine = manager.get_compiler("javac")
    """

    def __init__(self, engines: Optional[Dict[str, ICompilerEngine]] = None):
        self._engines: Dict[str, ICompilerEngine] = dict(engines or {})

    @classmethod
    def default(cls) -> "CompilerManager":
        """Create a manager with the built-in ``javac`` engine registered."""
        from .javac_engine import JavacEngine

        return cls({"javac": JavacEngine()})

    def register(self, compiler_id: str, engine: ICompilerEngine) -> None:
        self._engines[compiler_id] = engine

    def get_compiler(self, compiler_id: str) -> ICompilerEngine:
        """Look up an engine.

        Raises:
            NoSuchCompilerError: If nothing is registered under compiler_id
        """
        try:
            return self._engines[compiler_id]
        except KeyError:
            available = ", ".join(sorted(self._engines)) or "none"
            raise NoSuchCompilerError(
                f"No such compiler '{compiler_id}'. Available compilers: {available}"
            ) from None
