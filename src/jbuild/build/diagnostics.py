"""Parser for javac console output.

Turns the line-oriented text javac prints into Diagnostic values so forked
and in-process invocations report messages in the same shape.
"""

import re
from pathlib import Path
from typing import List, Optional

from .compiler import Diagnostic, Severity

LOCATED_RE = re.compile(
    r"^(?P<file>.+?\.java):(?P<line>\d+):\s*(?P<kind>error|warning):\s*(?P<msg>.*)$"
)
UNLOCATED_RE = re.compile(r"^(?P<kind>error|warning):\s*(?P<msg>.*)$")
NOTE_RE = re.compile(r"^Note:\s*(?P<msg>.*)$")
SUMMARY_RE = re.compile(r"^\d+\s+(errors?|warnings?)$")

_SEVERITIES = {
    "error": Severity.ERROR,
    "warning": Severity.WARNING,
}


class _PendingDiagnostic:
    """Mutable builder for the diagnostic currently being read."""

    def __init__(self, severity: Severity, message: str, file: Optional[Path] = None, line: Optional[int] = None):
        self.severity = severity
        self.message = message
        self.file = file
        self.line = line
        self.column: Optional[int] = None
        self.details: List[str] = []

    def add_detail(self, text: str) -> None:
        if text.strip() == "^" and self.column is None and self.details:
            # The caret sits under the offending column of the previous snippet line
            self.column = text.index("^") + 1
        self.details.append(text)

    def freeze(self) -> Diagnostic:
        return Diagnostic(
            severity=self.severity,
            message=self.message,
            file=self.file,
            line=self.line,
            column=self.column,
            details=tuple(self.details),
        )


def parse_javac_output(text: str) -> List[Diagnostic]:
    """Parse javac output into diagnostics.

    Args:
        text: Raw compiler output

    Returns:
        Diagnostics in the order they were printed
    """
    diagnostics: List[Diagnostic] = []
    current: Optional[_PendingDiagnostic] = None

    def flush() -> None:
        nonlocal current
        if current is not None:
            diagnostics.append(current.freeze())
            current = None

    for raw in text.splitlines():
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue

        match = LOCATED_RE.match(line)
        if match:
            flush()
            current = _PendingDiagnostic(
                _SEVERITIES[match.group("kind")],
                match.group("msg").strip(),
                Path(match.group("file")),
                int(match.group("line")),
            )
            continue

        match = UNLOCATED_RE.match(line)
        if match:
            flush()
            current = _PendingDiagnostic(_SEVERITIES[match.group("kind")], match.group("msg").strip())
            continue

        match = NOTE_RE.match(line)
        if match:
            flush()
            diagnostics.append(Diagnostic(Severity.NOTE, match.group("msg").strip()))
            continue

        if SUMMARY_RE.match(line.strip()):
            flush()
            continue

        if current is not None and current.file is not None:
            current.add_detail(line)
            continue

        flush()
        diagnostics.append(Diagnostic(Severity.OTHER, line.strip()))

    flush()
    return diagnostics
