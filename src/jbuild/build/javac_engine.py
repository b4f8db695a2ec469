"""Built-in ``javac`` compiler engine.

Python has no JVM to host the compiler API, so this engine drives the JDK's
javac launcher and replays its messages through the diagnostic listener,
which keeps it usable behind the in-process engine contract.
"""

import os
from pathlib import Path
from typing import List, Optional

from .compilation_executor import CompilationExecutor, resolve_executable
from .compiler import DiagnosticListener, ICompilerEngine
from .diagnostics import parse_javac_output


class JavacEngine(ICompilerEngine):
    """Compiles through the JDK javac tool."""

    def __init__(self, executable: Optional[str] = None):
        self.executable = executable

    def compile(
        self,
        sources: List[Path],
        classpath: List[Path],
        options: List[str],
        listener: DiagnosticListener
    ) -> int:
        executable = resolve_executable(self.executable)

        cmd = [str(executable), "-classpath", os.pathsep.join(str(p) for p in classpath)]
        cmd.extend(options)
        cmd.extend(str(s) for s in sources)

        execution = CompilationExecutor().execute(cmd)
        for diagnostic in parse_javac_output(execution.output):
            listener(diagnostic)

        return execution.returncode
