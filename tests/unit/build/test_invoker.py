"""Tests for in-process and forked compiler invocation."""

from pathlib import Path
from unittest.mock import MagicMock

from jbuild.build.classpath import MAIN_SCOPE, ClasspathEntry
from jbuild.build.compilation_executor import ExecutionResult
from jbuild.build.compiler import CompilerManager, CompilerOutcome, CompilerRequest, Diagnostic, Severity
from jbuild.build.errors import ToolchainError
from jbuild.build.invoker import (
    ForkedInvoker,
    InProcessInvoker,
    InvocationMode,
    classify,
    create_invoker,
)


def make_request(sources, output_dir, classpath=(), **kwargs):
    return CompilerRequest(
        sources=sources,
        classpath=[ClasspathEntry(Path(p), MAIN_SCOPE) for p in classpath],
        output_dir=output_dir,
        source=kwargs.pop("source", "1.8"),
        target=kwargs.pop("target", "1.8"),
        **kwargs,
    )


class TestClassify:
    """Test exit status classification."""

    def test_zero_is_success(self):
        assert classify(0, []) is CompilerOutcome.SUCCESS

    def test_zero_with_error_diagnostic_fails(self):
        diagnostics = [Diagnostic(Severity.ERROR, "boom")]
        assert classify(0, diagnostics) is CompilerOutcome.COMPILATION_FAILURE

    def test_source_errors_are_compilation_failures(self):
        assert classify(1, []) is CompilerOutcome.COMPILATION_FAILURE

    def test_command_line_error_is_internal(self):
        diagnostics = [Diagnostic(Severity.ERROR, "invalid flag: -Xbogus")]
        assert classify(2, diagnostics) is CompilerOutcome.INTERNAL_ERROR

    def test_abnormal_codes(self):
        assert classify(3, []) is CompilerOutcome.INTERNAL_ERROR
        assert classify(-9, []) is CompilerOutcome.INTERNAL_ERROR
        assert classify(None, []) is CompilerOutcome.INTERNAL_ERROR


class TestInProcessInvoker:
    """Test InProcessInvoker with a stub engine."""

    def test_success_writes_classes(self, tmp_path, make_java, stub_engine, stub_manager):
        source = make_java(tmp_path / "src", "App.java")
        out = tmp_path / "out"

        result = InProcessInvoker(stub_manager).invoke(make_request([source], out, classpath=["/libs/a.jar"]))

        assert result.outcome is CompilerOutcome.SUCCESS
        assert result.exit_code == 0
        assert (out / "App.class").exists()
        call = stub_engine.calls[0]
        assert call["sources"] == [source]
        assert call["classpath"] == [Path("/libs/a.jar")]
        assert call["options"][:2] == ["-d", str(out)]

    def test_errors_are_collected(self, tmp_path, make_java, stub_manager):
        source = make_java(tmp_path / "src", "Bad.java", "BROKEN\n")

        result = InProcessInvoker(stub_manager).invoke(make_request([source], tmp_path / "out"))

        assert result.outcome is CompilerOutcome.COMPILATION_FAILURE
        assert result.errors[0].message == "';' expected"
        assert result.errors[0].file == source

    def test_unknown_compiler_id(self, tmp_path, make_java, stub_manager):
        source = make_java(tmp_path / "src", "App.java")

        result = InProcessInvoker(stub_manager, compiler_id="ecj").invoke(make_request([source], tmp_path / "out"))

        assert result.outcome is CompilerOutcome.INTERNAL_ERROR
        assert "No such compiler 'ecj'" in result.errors[-1].message

    def test_engine_crash_is_internal_error(self, tmp_path, make_java):
        engine = MagicMock()
        engine.compile.side_effect = RuntimeError("engine exploded")
        invoker = InProcessInvoker(CompilerManager({"javac": engine}))
        source = make_java(tmp_path / "src", "App.java")

        result = invoker.invoke(make_request([source], tmp_path / "out"))

        assert result.outcome is CompilerOutcome.INTERNAL_ERROR
        assert isinstance(result.exception, RuntimeError)
        assert "engine exploded" in result.errors[-1].message

    def test_engine_toolchain_error(self, tmp_path, make_java):
        engine = MagicMock()
        engine.compile.side_effect = ToolchainError("Could not find javac")
        source = make_java(tmp_path / "src", "App.java")

        result = InProcessInvoker(CompilerManager({"javac": engine})).invoke(make_request([source], tmp_path / "out"))

        assert result.outcome is CompilerOutcome.INTERNAL_ERROR
        assert result.errors[-1].message == "Could not find javac"

    def test_creates_output_dir(self, tmp_path, make_java, make_engine):
        engine = make_engine(one_output=True)
        source = make_java(tmp_path / "src", "App.java")
        out = tmp_path / "deep" / "out"

        InProcessInvoker(CompilerManager({"javac": engine})).invoke(make_request([source], out))

        assert out.is_dir()
        assert [p.name for p in out.iterdir()] == ["compiled.class"]


class TestForkedInvoker:
    """Test ForkedInvoker against a fake javac script."""

    def test_success(self, tmp_path, make_java, fake_javac):
        source = make_java(tmp_path / "src", "App.java")
        out = tmp_path / "out"

        result = ForkedInvoker(executable=str(fake_javac["path"])).invoke(make_request([source], out))

        assert result.outcome is CompilerOutcome.SUCCESS
        assert (out / "App.class").exists()

    def test_argument_order(self, tmp_path, make_java, fake_javac):
        source = make_java(tmp_path / "src", "App.java")
        out = tmp_path / "out"
        request = make_request(
            [source], out, classpath=["/libs/a.jar"], encoding="UTF-8", extra_flags=["-Xlint:all"]
        )

        ForkedInvoker(executable=str(fake_javac["path"])).invoke(request)

        args = fake_javac["log"].read_text().splitlines()
        assert args == [
            "-classpath", "/libs/a.jar",
            "-d", str(out),
            "-source", "1.8",
            "-target", "1.8",
            "-encoding", "UTF-8",
            "-Xlint:all",
            str(source),
        ]

    def test_compile_error_parsed(self, tmp_path, make_java, fake_javac):
        source = make_java(tmp_path / "src", "Bad.java", "BROKEN\n")

        result = ForkedInvoker(executable=str(fake_javac["path"])).invoke(make_request([source], tmp_path / "out"))

        assert result.outcome is CompilerOutcome.COMPILATION_FAILURE
        assert result.exit_code == 1
        error = result.errors[0]
        assert error.file == source
        assert error.line == 1
        assert error.column == 7

    def test_missing_executable(self, tmp_path, make_java):
        source = make_java(tmp_path / "src", "App.java")

        result = ForkedInvoker(executable=str(tmp_path / "no-javac")).invoke(make_request([source], tmp_path / "out"))

        assert result.outcome is CompilerOutcome.INTERNAL_ERROR
        assert isinstance(result.exception, ToolchainError)

    def test_timeout(self, tmp_path, make_java, fake_javac):
        executor = MagicMock()
        executor.timeout = 5
        executor.execute.return_value = ExecutionResult(None, "", "", timed_out=True)
        source = make_java(tmp_path / "src", "App.java")

        invoker = ForkedInvoker(executable=str(fake_javac["path"]), executor=executor)
        result = invoker.invoke(make_request([source], tmp_path / "out"))

        assert result.outcome is CompilerOutcome.INTERNAL_ERROR
        assert "timed out after 5s" in result.errors[-1].message

    def test_launch_failure(self, tmp_path, make_java, fake_javac):
        executor = MagicMock()
        executor.execute.side_effect = ToolchainError("Failed to launch javac")
        source = make_java(tmp_path / "src", "App.java")

        invoker = ForkedInvoker(executable=str(fake_javac["path"]), executor=executor)
        result = invoker.invoke(make_request([source], tmp_path / "out"))

        assert result.outcome is CompilerOutcome.INTERNAL_ERROR

    def test_invalid_flag_is_internal_error(self, tmp_path, make_java, fake_javac):
        executor = MagicMock()
        executor.execute.return_value = ExecutionResult(2, "", "error: invalid flag: -Xbogus\n")
        source = make_java(tmp_path / "src", "App.java")

        invoker = ForkedInvoker(executable=str(fake_javac["path"]), executor=executor)
        result = invoker.invoke(make_request([source], tmp_path / "out", extra_flags=["-Xbogus"]))

        assert result.outcome is CompilerOutcome.INTERNAL_ERROR
        assert result.errors[0].message == "invalid flag: -Xbogus"

    def test_crash_exit_code(self, tmp_path, make_java, fake_javac):
        executor = MagicMock()
        executor.execute.return_value = ExecutionResult(4, "", "An exception has occurred in the compiler\n")
        source = make_java(tmp_path / "src", "App.java")

        invoker = ForkedInvoker(executable=str(fake_javac["path"]), executor=executor)
        result = invoker.invoke(make_request([source], tmp_path / "out"))

        assert result.outcome is CompilerOutcome.INTERNAL_ERROR
        assert result.exit_code == 4


class TestCreateInvoker:
    """Test invoker selection."""

    def test_forked(self):
        invoker = create_invoker(InvocationMode.FORKED, executable="/opt/jdk/bin/javac", timeout=30)
        assert isinstance(invoker, ForkedInvoker)
        assert invoker.executable == "/opt/jdk/bin/javac"
        assert invoker.executor.timeout == 30

    def test_in_process(self, stub_manager):
        invoker = create_invoker(InvocationMode.IN_PROCESS, compiler_manager=stub_manager, compiler_id="javac")
        assert isinstance(invoker, InProcessInvoker)
        assert invoker.compiler_manager is stub_manager
