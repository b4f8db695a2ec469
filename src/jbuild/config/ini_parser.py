"""
jbuild.ini configuration parser.

This module reads a project's jbuild.ini and turns it into the phase
configurations the orchestrator consumes.

Example jbuild.ini:
    [project]
    build_dir = target
    source_roots = src/main/java

    [compile]
    release = 11
    compiler_args =
        -Xlint
        -parameters

    [test-compile]
    skip = false

    [dependencies]
    com.google.guava:guava:33.0.0-jre = libs/guava-33.0.0-jre.jar
"""

import configparser
from pathlib import Path
from typing import List, Optional

from ..build.classpath import ResolvedArtifact
from ..build.errors import ConfigurationError
from ..build.flag_builder import IMPLICIT_VALUES
from ..build.orchestrator import CompilerSettings, PhaseConfig
from ..build.source_scanner import SourceRoot

CONFIG_FILE_NAME = "jbuild.ini"

PROJECT_SECTION = "project"
COMPILE_SECTION = "compile"
TEST_COMPILE_SECTION = "test-compile"
DEPENDENCIES_SECTION = "dependencies"
TEST_DEPENDENCIES_SECTION = "test-dependencies"


class JBuildConfigError(ConfigurationError):
    """Exception raised for jbuild.ini configuration errors."""

    pass


class JBuildConfig:
    """
    Parser for jbuild.ini files.

    Values in [test-compile] override [compile] for the test phase; paths
    are resolved against the directory holding the file.

    Usage:
        config = JBuildConfig(Path("jbuild.ini"))
        main = config.get_main_phase()
        test = config.get_test_phase()
    """

    def __init__(self, ini_path: Path):
        """
        Initialize the parser with a jbuild.ini file.

        Args:
            ini_path: Path to the jbuild.ini file

        Raises:
            JBuildConfigError: If the file doesn't exist or cannot be parsed
        """
        self.ini_path = Path(ini_path)
        self.base_dir = self.ini_path.resolve().parent

        if not self.ini_path.exists():
            raise JBuildConfigError(f"Configuration file not found: {self.ini_path}")

        # ':' appears in artifact coordinates and compiler flags, so only '=' separates keys
        self.config = configparser.ConfigParser(
            allow_no_value=True,
            delimiters=("=",),
            interpolation=configparser.ExtendedInterpolation(),
        )
        self.config.optionxform = str

        try:
            self.config.read(self.ini_path, encoding="utf-8")
        except configparser.Error as e:
            raise JBuildConfigError(f"Failed to parse {self.ini_path}: {e}") from e

    @classmethod
    def from_project_dir(cls, project_dir: Path) -> "JBuildConfig":
        return cls(Path(project_dir) / CONFIG_FILE_NAME)

    def _get(self, section: str, key: str, fallback: Optional[str] = None, raw: bool = False) -> Optional[str]:
        if not self.config.has_section(section):
            return fallback
        try:
            value = self.config.get(section, key, raw=raw, fallback=None)
        except configparser.Error as e:
            raise JBuildConfigError(f"Invalid value for [{section}] {key}: {e}") from e
        if value is None:
            return fallback
        value = value.strip()
        return value if value else fallback

    def _get_phase_value(self, phase_section: str, key: str, raw: bool = False) -> Optional[str]:
        """Look a key up in the phase section, then in [compile]."""
        if phase_section != COMPILE_SECTION:
            value = self._get(phase_section, key, raw=raw)
            if value is not None:
                return value
        return self._get(COMPILE_SECTION, key, raw=raw)

    def _get_bool(self, section: str, key: str, default: bool) -> bool:
        value = self._get_phase_value(section, key)
        if value is None:
            return default
        normalized = value.lower()
        if normalized not in configparser.ConfigParser.BOOLEAN_STATES:
            raise JBuildConfigError(f"Invalid boolean for [{section}] {key}: {value}")
        return configparser.ConfigParser.BOOLEAN_STATES[normalized]

    @staticmethod
    def _split_lines(value: Optional[str]) -> List[str]:
        """
        Split a multi-line value, one entry per line.

        Example:
            For compiler_args =
                -Xlint
                -my&special:param
            Returns: ['-Xlint', '-my&special:param']
        """
        if not value:
            return []
        return [line.strip() for line in value.split("\n") if line.strip()]

    @classmethod
    def _split_list(cls, value: Optional[str]) -> List[str]:
        """Split on newlines and commas, used for paths and patterns."""
        items = []
        for line in cls._split_lines(value):
            for item in line.split(","):
                item = item.strip()
                if item:
                    items.append(item)
        return items

    def _resolve_path(self, value: str) -> Path:
        path = Path(value)
        if not path.is_absolute():
            path = self.base_dir / path
        return path

    def get_build_dir(self) -> Path:
        return self._resolve_path(self._get(PROJECT_SECTION, "build_dir", "target"))

    def get_output_dir(self) -> Path:
        value = self._get(PROJECT_SECTION, "output_dir")
        return self._resolve_path(value) if value else self.get_build_dir() / "classes"

    def get_test_output_dir(self) -> Path:
        value = self._get(PROJECT_SECTION, "test_output_dir")
        return self._resolve_path(value) if value else self.get_build_dir() / "test-classes"

    def get_source_roots(self, key: str = "source_roots", default: str = "src/main/java") -> List[Path]:
        values = self._split_list(self._get(PROJECT_SECTION, key)) or [default]
        return [self._resolve_path(v) for v in values]

    def get_compiler_settings(self, section: str = COMPILE_SECTION) -> CompilerSettings:
        """
        Build CompilerSettings for a phase section.

        Raises:
            JBuildConfigError: For invalid booleans, timeout or implicit values
        """
        implicit = self._get_phase_value(section, "implicit")
        if implicit is not None and implicit not in IMPLICIT_VALUES:
            raise JBuildConfigError(
                f"Invalid value for [{section}] implicit: {implicit} "
                f"(expected one of: {', '.join(IMPLICIT_VALUES)})"
            )

        timeout = self._get_phase_value(section, "timeout")
        try:
            timeout_value = float(timeout) if timeout is not None else None
        except ValueError:
            raise JBuildConfigError(f"Invalid timeout for [{section}]: {timeout}") from None

        return CompilerSettings(
            source=self._get_phase_value(section, "source"),
            target=self._get_phase_value(section, "target"),
            release=self._get_phase_value(section, "release"),
            # Flags are kept verbatim, including '$' and other special characters
            compiler_args=self._split_lines(self._get_phase_value(section, "compiler_args", raw=True)),
            fork=self._get_bool(section, "fork", False),
            executable=self._get_phase_value(section, "executable"),
            compiler_id=self._get_phase_value(section, "compiler_id") or "javac",
            fail_on_error=self._get_bool(section, "fail_on_error", True),
            fail_on_warning=self._get_bool(section, "fail_on_warning", False),
            show_warnings=self._get_bool(section, "show_warnings", True),
            debug=self._get_bool(section, "debug", False),
            encoding=self._get_phase_value(section, "encoding"),
            implicit=implicit,
            timeout=timeout_value,
        )

    def get_dependencies(self, section: str = DEPENDENCIES_SECTION) -> List[ResolvedArtifact]:
        """
        Read resolved artifacts from a dependencies section, in file order.

        Example:
            junit:junit:4.13.2 = libs/junit-4.13.2.jar
            org.example:bom:1.0:pom =
        """
        if not self.config.has_section(section):
            return []

        artifacts = []
        for coordinates in self.config[section]:
            value = self._get(section, coordinates)
            path = self._resolve_path(value) if value else None
            artifacts.append(ResolvedArtifact.from_coordinates(coordinates, path))
        return artifacts

    def _get_patterns(self, section: str, key: str) -> Optional[List[str]]:
        value = self._get_phase_value(section, key)
        if value is None:
            return None
        return self._split_list(value)

    def get_main_phase(self) -> PhaseConfig:
        return PhaseConfig(
            source_roots=[SourceRoot(p) for p in self.get_source_roots()],
            output_dir=self.get_output_dir(),
            settings=self.get_compiler_settings(COMPILE_SECTION),
            artifacts=self.get_dependencies(DEPENDENCIES_SECTION),
            includes=self._get_patterns(COMPILE_SECTION, "includes"),
            excludes=self._get_patterns(COMPILE_SECTION, "excludes"),
            skip=self._get_bool(COMPILE_SECTION, "skip_main", False),
            stale_only=self._get_bool(COMPILE_SECTION, "stale_only", False),
        )

    def get_test_phase(self) -> PhaseConfig:
        roots = self.get_source_roots("test_source_roots", "src/test/java")
        artifacts = self.get_dependencies(TEST_DEPENDENCIES_SECTION)
        artifacts += self.get_dependencies(DEPENDENCIES_SECTION)
        return PhaseConfig(
            source_roots=[SourceRoot(p) for p in roots],
            output_dir=self.get_test_output_dir(),
            settings=self.get_compiler_settings(TEST_COMPILE_SECTION),
            artifacts=artifacts,
            includes=self._get_patterns(TEST_COMPILE_SECTION, "includes"),
            excludes=self._get_patterns(TEST_COMPILE_SECTION, "excludes"),
            skip=self._get_test_skip(),
            stale_only=self._get_bool(TEST_COMPILE_SECTION, "stale_only", False),
        )

    def _get_test_skip(self) -> bool:
        # 'skip' only applies to the test phase and is not inherited from [compile]
        value = self._get(TEST_COMPILE_SECTION, "skip")
        if value is None:
            return False
        normalized = value.lower()
        if normalized not in configparser.ConfigParser.BOOLEAN_STATES:
            raise JBuildConfigError(f"Invalid boolean for [{TEST_COMPILE_SECTION}] skip: {value}")
        return configparser.ConfigParser.BOOLEAN_STATES[normalized]

