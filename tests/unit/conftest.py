"""Shared fixtures for unit tests."""

import stat
import sys
from pathlib import Path
from typing import List

import pytest

from jbuild.build.compiler import CompilerManager, Diagnostic, ICompilerEngine, Severity


class StubEngine(ICompilerEngine):
    """In-process engine that writes one empty .class file per source.

    Sources containing the word BROKEN produce an error diagnostic instead.
    """

    def __init__(self, fail: bool = False, warn: bool = False, one_output: bool = False):
        self.fail = fail
        self.warn = warn
        self.one_output = one_output
        self.calls: List[dict] = []

    def compile(self, sources, classpath, options, listener):
        self.calls.append({
            "sources": list(sources),
            "classpath": list(classpath),
            "options": list(options),
        })
        output_dir = Path(options[options.index("-d") + 1])

        if self.fail:
            listener(Diagnostic(Severity.ERROR, "cannot find symbol", sources[0], 3, 9))
            return 1

        status = 0
        for source in sources:
            if "BROKEN" in Path(source).read_text():
                listener(Diagnostic(Severity.ERROR, "';' expected", Path(source), 1))
                status = 1
                continue
            if self.warn:
                listener(Diagnostic(Severity.WARNING, "[deprecation] old API", Path(source), 2))
            if self.one_output:
                continue
            target = output_dir / (Path(source).stem + ".class")
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(b"\xca\xfe\xba\xbe")

        if self.one_output and status == 0:
            output_dir.mkdir(parents=True, exist_ok=True)
            (output_dir / "compiled.class").write_bytes(b"\xca\xfe\xba\xbe")
        return status


FAKE_JAVAC = """#!/bin/sh
printf '%s\\n' "$@" > "{log}"
out=""
prev=""
for arg in "$@"; do
    if [ "$prev" = "-d" ]; then
        out="$arg"
    fi
    prev="$arg"
done
status=0
for arg in "$@"; do
    case "$arg" in
        *.java)
            if grep -q BROKEN "$arg"; then
                echo "$arg:1: error: ';' expected" >&2
                echo "BROKEN" >&2
                echo "      ^" >&2
                status=1
            else
                name=$(basename "$arg" .java)
                mkdir -p "$out"
                : > "$out/$name.class"
            fi
            ;;
    esac
done
if [ $status -ne 0 ]; then
    echo "1 error" >&2
fi
exit $status
"""


@pytest.fixture
def stub_engine():
    return StubEngine()


@pytest.fixture
def stub_manager(stub_engine):
    """CompilerManager with the stub registered as 'javac'."""
    return CompilerManager({"javac": stub_engine})


@pytest.fixture
def fake_javac(tmp_path):
    """Shell script standing in for javac; records its arguments."""
    if sys.platform == "win32":
        pytest.skip("fake javac is a POSIX shell script")

    script = tmp_path / "jdk" / "bin" / "javac"
    script.parent.mkdir(parents=True)
    log = tmp_path / "javac-args.txt"
    script.write_text(FAKE_JAVAC.format(log=log))
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return {"path": script, "log": log}


def write_java(root: Path, relative: str, body: str = "") -> Path:
    """Create a Java source file under root."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    name = Path(relative).stem
    path.write_text(body or f"public class {name} {{}}\n")
    return path


@pytest.fixture
def java_project(tmp_path):
    """Project with one main and one test source, in Maven layout."""
    project = tmp_path / "project"
    main_src = project / "src" / "main" / "java"
    test_src = project / "src" / "test" / "java"
    write_java(main_src, "org/example/TestCompile0.java")
    write_java(test_src, "org/example/TestCompile0Test.java")
    return {
        "project": project,
        "main_src": main_src,
        "test_src": test_src,
        "classes": project / "target" / "classes",
        "test_classes": project / "target" / "test-classes",
    }


@pytest.fixture
def make_java():
    return write_java



@pytest.fixture
def make_engine():
    """Factory for stub engines with custom behaviour."""
    return StubEngine
