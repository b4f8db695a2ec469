"""
Command-line interface for jbuild.

This module provides the `jbuild` CLI tool for compiling Java source trees.
"""

import argparse
import sys
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Optional

from jbuild import __version__
from jbuild.build import (
    CompilationFailureError,
    CompilerOrchestrator,
    ConfigurationError,
    PhaseConfig,
    PhaseResult,
    PhaseStatus,
    ToolchainError,
)
from jbuild.cli_utils import ErrorFormatter, PathValidator, setup_logging
from jbuild.config import JBuildConfig

EXIT_COMPILATION_FAILURE = 1
EXIT_CONFIGURATION_ERROR = 2
EXIT_TOOLCHAIN_ERROR = 3


@dataclass
class BuildArgs:
    """Arguments shared by the compile commands."""

    project_dir: Path
    fork: bool = False
    no_fail_on_error: bool = False
    skip_main: bool = False
    skip_tests: bool = False
    verbose: bool = False


def apply_overrides(phase: PhaseConfig, args: BuildArgs, skip: bool) -> PhaseConfig:
    """Apply command-line switches on top of jbuild.ini values."""
    settings = phase.settings
    if args.fork:
        settings = replace(settings, fork=True)
    if args.no_fail_on_error:
        settings = replace(settings, fail_on_error=False)
    return replace(phase, settings=settings, skip=phase.skip or skip)


def print_phase(result: PhaseResult) -> None:
    """Print a one-line summary of a phase."""
    name = result.phase.value
    if result.status is PhaseStatus.SKIPPED:
        print(f"  {name}: skipped")
    elif result.status is PhaseStatus.NO_SOURCES:
        print(f"  {name}: nothing to compile")
    elif result.status is PhaseStatus.UP_TO_DATE:
        print(f"  {name}: up to date")
    elif result.status is PhaseStatus.FAILURE_TOLERATED:
        print(f"  {name}: {len(result.sources)} file(s), compilation failed (tolerated)")
    else:
        print(f"  {name}: compiled {len(result.sources)} file(s)")


def run_phases(args: BuildArgs, phases: List[str]) -> None:
    """Load jbuild.ini and run the requested phases, then exit.

    Args:
        args: Parsed command arguments
        phases: Any of "main" and "test", in execution order
    """
    print(f"jbuild v{__version__}")
    print()

    PathValidator.validate_project_dir(args.project_dir)
    setup_logging(args.verbose)

    try:
        start_time = time.time()
        config = JBuildConfig.from_project_dir(args.project_dir)
        main = apply_overrides(config.get_main_phase(), args, args.skip_main)
        test = apply_overrides(config.get_test_phase(), args, args.skip_tests)

        orchestrator = CompilerOrchestrator(verbose=args.verbose)
        results: List[PhaseResult] = []
        artifact: Optional[Path] = None

        if "main" in phases:
            main_result = orchestrator.compile_main(main)
            artifact = main_result.artifact
            results.append(main_result)
        if "test" in phases:
            results.append(orchestrator.compile_test(test, main.output_dir))

        build_time = time.time() - start_time

        tolerated = any(r.status is PhaseStatus.FAILURE_TOLERATED for r in results)
        if tolerated:
            ErrorFormatter.print_warning("Compilation failed (fail_on_error is disabled)")
        else:
            ErrorFormatter.print_success("Compilation successful!")
        print()
        for result in results:
            print_phase(result)
        if artifact is not None:
            print()
            print(f"Classes: {artifact}")
        print()
        print(f"Build time: {build_time:.2f}s")
        sys.exit(0)

    except CompilationFailureError as e:
        ErrorFormatter.print_error(
            "Compilation failure", ErrorFormatter.format_diagnostics(e.diagnostics) or str(e)
        )
        sys.exit(EXIT_COMPILATION_FAILURE)
    except ConfigurationError as e:
        ErrorFormatter.print_error("Configuration error", str(e))
        sys.exit(EXIT_CONFIGURATION_ERROR)
    except ToolchainError as e:
        details = ErrorFormatter.format_diagnostics(e.diagnostics) or str(e)
        if e.cause is not None:
            details += f"\nCaused by: {type(e.cause).__name__}: {e.cause}"
        ErrorFormatter.print_error("Compiler could not run", details)
        sys.exit(EXIT_TOOLCHAIN_ERROR)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory containing jbuild.ini (default: current directory)",
    )
    parser.add_argument(
        "--fork",
        action="store_true",
        help="Run javac as an external process",
    )
    parser.add_argument(
        "--no-fail-on-error",
        action="store_true",
        help="Report compilation errors as warnings and continue",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose build output",
    )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jbuild",
        description="jbuild - Java compile step orchestrator",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"jbuild {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    compile_parser = subparsers.add_parser("compile", help="Compile main sources")
    _add_common_arguments(compile_parser)

    test_parser = subparsers.add_parser("test-compile", help="Compile test sources")
    _add_common_arguments(test_parser)

    build_parser = subparsers.add_parser("build", help="Compile main, then test sources")
    _add_common_arguments(build_parser)
    build_parser.add_argument(
        "--skip-main",
        action="store_true",
        help="Do not compile main sources",
    )
    build_parser.add_argument(
        "--skip-tests",
        action="store_true",
        help="Do not compile test sources",
    )
    return parser


COMMAND_PHASES = {
    "compile": ["main"],
    "test-compile": ["test"],
    "build": ["main", "test"],
}


def main() -> None:
    """jbuild - compile Java source trees."""
    parser = create_parser()
    parsed = parser.parse_args()

    if parsed.command is None:
        parser.print_help()
        sys.exit(2)

    args = BuildArgs(
        project_dir=parsed.project_dir.resolve(),
        fork=parsed.fork,
        no_fail_on_error=parsed.no_fail_on_error,
        skip_main=getattr(parsed, "skip_main", False),
        skip_tests=getattr(parsed, "skip_tests", False),
        verbose=parsed.verbose,
    )
    run_phases(args, COMMAND_PHASES[parsed.command])


if __name__ == "__main__":
    main()
