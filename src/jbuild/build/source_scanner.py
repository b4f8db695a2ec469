"""
Source file discovery for Java compilation.

This module handles:
- Globbing one or more source roots with include patterns
- Removing files matched by exclude patterns (exclude always wins)
- Optionally keeping only sources whose class file is missing or older
- Returning a deterministic, deduplicated SourceSet

Patterns are relative to the source root, use '/' as separator and are
expanded with pathlib's glob: '*' stays within one directory, '**' matches
zero or more directories and a trailing '/' matches everything below that
directory.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from .errors import ConfigurationError

DEFAULT_INCLUDES: Tuple[str, ...] = ("**/*.java",)
SOURCE_SUFFIX = ".java"
CLASS_SUFFIX = ".class"


@dataclass(frozen=True)
class SourceRoot:
    """A source directory with optional include/exclude patterns."""

    directory: Path
    includes: Tuple[str, ...] = ()
    excludes: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "directory", Path(self.directory))
        object.__setattr__(self, "includes", tuple(self.includes))
        object.__setattr__(self, "excludes", tuple(self.excludes))


@dataclass
class SourceSet:
    """Ordered, deduplicated absolute source paths for one phase.

    ``up_to_date`` lists matching sources left out because their class file
    is current; it is only filled when scanning in stale-only mode.
    """

    files: List[Path] = field(default_factory=list)
    up_to_date: List[Path] = field(default_factory=list)

    def __iter__(self) -> Iterator[Path]:
        return iter(self.files)

    def __len__(self) -> int:
        return len(self.files)

    @property
    def is_empty(self) -> bool:
        return not self.files


def normalize_pattern(pattern: str) -> str:
    """
    Validate and normalize one include/exclude pattern.

    Raises:
        ConfigurationError: If the pattern is empty, absolute, climbs out of
            the root or uses '**' inside a path component
    """
    if pattern is None or not pattern.strip():
        raise ConfigurationError("Empty include/exclude pattern")

    normalized = pattern.strip().replace("\\", "/")
    if normalized.startswith("/") or (len(normalized) > 1 and normalized[1] == ":"):
        raise ConfigurationError(
            f"Include/exclude pattern must be relative to the source root: {pattern}"
        )
    if normalized.endswith("/"):
        normalized += "**"

    parts = [part for part in normalized.split("/") if part]
    for part in parts:
        if part == "..":
            raise ConfigurationError(f"Include/exclude pattern must stay inside the source root: {pattern}")
        if "**" in part and part != "**":
            raise ConfigurationError(f"'**' must be a whole path component: {pattern}")
    # A final '**' would only yield directories, so it stands for every file below
    if parts[-1] == "**":
        parts.append("*")
    return "/".join(parts)


def glob_files(directory: Path, pattern: str) -> Set[str]:
    """
    Expand one normalized pattern below directory.

    Returns:
        Relative '/'-separated paths of the matching files
    """
    try:
        matches = directory.glob(pattern)
        return {p.relative_to(directory).as_posix() for p in matches if p.is_file()}
    except ValueError as e:
        raise ConfigurationError(f"Invalid include/exclude pattern '{pattern}': {e}") from e


class SourceScanner:
    """
    Resolves source roots into a SourceSet.

    Example usage:
        scanner = SourceScanner()
        sources = scanner.scan(
            [SourceRoot(Path("src/main/java"))],
            excludes=["**/Generated*.java"],
            stale_output_dir=Path("target/classes")
        )
    """

    def scan(
        self,
        roots: Iterable[SourceRoot],
        includes: Optional[Iterable[str]] = None,
        excludes: Optional[Iterable[str]] = None,
        stale_output_dir: Optional[Path] = None
    ) -> SourceSet:
        """
        Scan source roots.

        Args:
            roots: Source roots to scan (missing directories contribute nothing)
            includes: Include patterns overriding each root's own patterns
            excludes: Exclude patterns overriding each root's own patterns
            stale_output_dir: If given, keep only sources whose class file in
                this directory is missing or older than the source

        Returns:
            SourceSet sorted by resolved path

        Raises:
            ConfigurationError: If a pattern is malformed
        """
        include_override = self._normalize_all(includes) if includes is not None else None
        exclude_override = self._normalize_all(excludes) if excludes is not None else None

        found = {}
        current = {}
        for root in roots:
            root_includes = include_override
            if root_includes is None:
                root_includes = self._normalize_all(root.includes)
            if not root_includes:
                root_includes = list(DEFAULT_INCLUDES)

            root_excludes = exclude_override
            if root_excludes is None:
                root_excludes = self._normalize_all(root.excludes)

            for path, relative in self._scan_root(root.directory, root_includes, root_excludes):
                if stale_output_dir is not None and not self.is_stale(
                    path, self.class_file_for(relative, stale_output_dir)
                ):
                    current.setdefault(str(path), path)
                    continue
                found.setdefault(str(path), path)

        up_to_date = [current[key] for key in sorted(current) if key not in found]
        return SourceSet([found[key] for key in sorted(found)], up_to_date)

    def _scan_root(
        self,
        directory: Path,
        includes: List[str],
        excludes: List[str]
    ) -> List[Tuple[Path, str]]:
        """
        Collect matching files under one root.

        Returns:
            (absolute path, relative posix path) pairs
        """
        if not directory.is_dir():
            return []

        directory = directory.resolve()
        selected: Set[str] = set()
        for pattern in includes:
            selected |= glob_files(directory, pattern)
        for pattern in excludes:
            selected -= glob_files(directory, pattern)
        return [(directory / relative, relative) for relative in sorted(selected)]

    @staticmethod
    def _normalize_all(patterns: Optional[Iterable[str]]) -> List[str]:
        if not patterns:
            return []
        return [normalize_pattern(p) for p in patterns]

    @staticmethod
    def class_file_for(relative_source: str, output_dir: Path) -> Path:
        """Map ``pkg/Foo.java`` to ``<output_dir>/pkg/Foo.class``."""
        relative = Path(relative_source)
        if relative.suffix == SOURCE_SUFFIX:
            relative = relative.with_suffix(CLASS_SUFFIX)
        return Path(output_dir) / relative

    @staticmethod
    def is_stale(source: Path, class_file: Path) -> bool:
        """
        Check whether a source needs recompiling.

        Args:
            source: Source file path
            class_file: Expected compiled output

        Returns:
            True if the class file is missing or older than the source
        """
        if not class_file.exists():
            return True
        return class_file.stat().st_mtime < source.stat().st_mtime
