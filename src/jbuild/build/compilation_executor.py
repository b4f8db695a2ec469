"""Compilation Executor.

This module runs an external compiler as a child process.

Design:
    - Resolves the javac executable (explicit override, JAVA_HOME, PATH)
    - Drains stdout and stderr on two reader threads while the child runs,
      so a full pipe can never block the compiler
    - Optional deadline; on expiry the whole process tree is killed
    - Launch failures surface as ToolchainError
"""

import logging
import os
import shutil
import subprocess
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import IO, List, Optional

import psutil

from .errors import ToolchainError


@dataclass
class ExecutionResult:
    """Captured output of one child process run."""

    returncode: Optional[int]
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def output(self) -> str:
        """stdout followed by stderr."""
        if self.stdout and self.stderr:
            return self.stdout.rstrip("\n") + "\n" + self.stderr
        return self.stdout or self.stderr


def javac_name() -> str:
    return "javac.exe" if sys.platform == "win32" else "javac"


def resolve_executable(executable: Optional[str] = None) -> Path:
    """Find the compiler executable.

    Args:
        executable: Explicit path or command name; overrides the defaults

    Returns:
        Path to the executable

    Raises:
        ToolchainError: If no executable can be found
    """
    if executable:
        candidate = Path(executable)
        if candidate.exists():
            return candidate
        found = shutil.which(executable)
        if found:
            return Path(found)
        raise ToolchainError(f"Compiler executable not found: {executable}")

    java_home = os.environ.get("JAVA_HOME")
    if java_home:
        candidate = Path(java_home) / "bin" / javac_name()
        if candidate.exists():
            return candidate

    found = shutil.which("javac")
    if found:
        return Path(found)

    raise ToolchainError(
        "Could not find javac. Set JAVA_HOME, put javac on the PATH, "
        "or configure an explicit executable."
    )


def kill_process_tree(pid: int) -> None:
    """Kill a process and all of its children."""
    try:
        parent = psutil.Process(pid)
    except psutil.NoSuchProcess:
        return

    children = parent.children(recursive=True)
    for child in children:
        try:
            child.kill()
        except psutil.NoSuchProcess:
            pass
    try:
        parent.kill()
    except psutil.NoSuchProcess:
        pass
    psutil.wait_procs(children + [parent], timeout=5)


class CompilationExecutor:
    """Executes compiler command lines with concurrent output capture.

    Example usage:
        executor = CompilationExecutor(timeout=120)
        result = executor.execute(["javac", "-d", "out", "App.java"])
        if result.returncode != 0:
            print(result.output)
    """

    def __init__(self, timeout: Optional[float] = None, cwd: Optional[Path] = None):
        """Initialize compilation executor.

        Args:
            timeout: Seconds before the child is killed (None waits forever)
            cwd: Working directory for the child (defaults to ours)
        """
        self.timeout = timeout
        self.cwd = cwd

    def execute(self, cmd: List[str]) -> ExecutionResult:
        """Run a command to completion.

        Args:
            cmd: Executable followed by its arguments

        Returns:
            ExecutionResult with captured output

        Raises:
            ToolchainError: If the process cannot be started
        """
        logging.debug(f"Executing: {' '.join(cmd)}")

        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                stdin=subprocess.DEVNULL,
                cwd=str(self.cwd) if self.cwd else None,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise ToolchainError(f"Failed to launch {cmd[0]}: {e}", cause=e) from e

        stdout_chunks: List[str] = []
        stderr_chunks: List[str] = []
        readers = [
            threading.Thread(target=self._drain, args=(process.stdout, stdout_chunks), daemon=True),
            threading.Thread(target=self._drain, args=(process.stderr, stderr_chunks), daemon=True),
        ]
        for reader in readers:
            reader.start()

        timed_out = False
        try:
            process.wait(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            timed_out = True
            logging.warning(f"Compiler did not finish within {self.timeout}s, killing process tree")
            kill_process_tree(process.pid)
            process.wait()

        for reader in readers:
            reader.join()

        return ExecutionResult(
            returncode=None if timed_out else process.returncode,
            stdout="".join(stdout_chunks),
            stderr="".join(stderr_chunks),
            timed_out=timed_out,
        )

    @staticmethod
    def _drain(stream: IO[str], sink: List[str]) -> None:
        with stream:
            for chunk in iter(stream.readline, ""):
                sink.append(chunk)
